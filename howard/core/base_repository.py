"""Base repository: connection handling shared by every repository.

query_one(), query_all(), execute() and execute_many() wrap
get_db()/get_cursor()/release_db() with commit/rollback.

Usage:
    class ChannelRepository(BaseRepository):
        def get(self, channel_id):
            return self.query_one('SELECT * FROM file_channels WHERE id = %s', (channel_id,))

        def create(self, name, org_id):
            return self.execute(
                'INSERT INTO file_channels (name, org_id) VALUES (%s, %s) RETURNING *',
                (name, org_id), returning=True
            )
"""

from database import get_db, get_cursor, release_db, dict_from_row


class BaseRepository:

    def query_one(self, sql, params=None):
        """Execute a SELECT and return a single row as dict, or None."""
        conn = get_db()
        try:
            cursor = get_cursor(conn)
            cursor.execute(sql, params or ())
            row = cursor.fetchone()
            return dict_from_row(row) if row else None
        finally:
            release_db(conn)

    def query_all(self, sql, params=None):
        """Execute a SELECT and return all rows as list of dicts."""
        conn = get_db()
        try:
            cursor = get_cursor(conn)
            cursor.execute(sql, params or ())
            return [dict_from_row(r) for r in cursor.fetchall()]
        finally:
            release_db(conn)

    def execute(self, sql, params=None, returning=False):
        """Execute an INSERT/UPDATE/DELETE and commit.

        Returns the first returned row as a dict when ``returning`` is set,
        otherwise the affected row count.
        """
        conn = get_db()
        try:
            cursor = get_cursor(conn)
            cursor.execute(sql, params or ())
            if returning:
                result = cursor.fetchone()
                conn.commit()
                return dict_from_row(result) if result else None
            conn.commit()
            return cursor.rowcount
        except Exception:
            conn.rollback()
            raise
        finally:
            release_db(conn)

    def execute_many(self, callback):
        """Run ``callback(cursor)`` inside one transaction and return its result."""
        conn = get_db()
        try:
            cursor = get_cursor(conn)
            result = callback(cursor)
            conn.commit()
            return result
        except Exception:
            conn.rollback()
            raise
        finally:
            release_db(conn)

    @staticmethod
    def build_update(fields, allowed, casts=None):
        """Build a ``SET`` clause from the allowed keys present in ``fields``.

        ``casts`` maps a column to a SQL type for values psycopg2 cannot infer
        (e.g. ``{'allowed_org_ids': 'uuid[]'}``). Returns (clause, params);
        clause is empty when nothing applies.
        """
        casts = casts or {}
        sets, params = [], []
        for key in allowed:
            if key in fields:
                cast = f'::{casts[key]}' if key in casts else ''
                sets.append(f'{key} = %s{cast}')
                params.append(fields[key])
        return ', '.join(sets), params
