"""Howard core platform.

Shared infrastructure used by every feature blueprint:
- repository base class over the psycopg2 pool
- auth (profiles, roles, permissions, session loading)
- navigation, organizations, users and notifications
- the Supabase Auth/Storage REST client
"""
