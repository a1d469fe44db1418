"""Shared services (outbound email)."""
