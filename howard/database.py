import os
import time
import logging
import threading
from contextlib import contextmanager

import psycopg2
from psycopg2 import pool
from psycopg2.extras import RealDictCursor, Json


logger = logging.getLogger('howard.database')

# Hosted Postgres connection string (Supabase "direct connection" URI)
DATABASE_URL = os.environ.get('DATABASE_URL')

if not DATABASE_URL:
    raise ValueError("DATABASE_URL environment variable is required. Set it to your Postgres connection string.")

# Supabase pooler caps free projects at ~60 clients; keep per-worker pools small.
_connection_pool = None
_pool_lock = threading.Lock()

POOL_MIN_CONN = int(os.environ.get('DB_POOL_MIN_CONN', '1'))
POOL_MAX_CONN = int(os.environ.get('DB_POOL_MAX_CONN', '6'))
POOL_GETCONN_TIMEOUT = int(os.environ.get('DB_POOL_TIMEOUT', '10'))


def _get_pool():
    """Get or create the connection pool (lazy, thread-safe)."""
    global _connection_pool
    if _connection_pool is None:
        with _pool_lock:
            if _connection_pool is None:
                _connection_pool = pool.ThreadedConnectionPool(
                    minconn=POOL_MIN_CONN,
                    maxconn=POOL_MAX_CONN,
                    dsn=DATABASE_URL,
                    keepalives=1,
                    keepalives_idle=30,
                    keepalives_interval=10,
                    keepalives_count=5,
                    connect_timeout=5,
                )
                logger.info(f'Connection pool created: min={POOL_MIN_CONN}, max={POOL_MAX_CONN}')
    return _connection_pool


def _getconn_with_timeout(timeout=None):
    """Borrow a connection, giving up after ``timeout`` seconds.

    ThreadedConnectionPool.getconn() blocks forever once the pool is exhausted,
    so the call runs on a helper thread.
    """
    if timeout is None:
        timeout = POOL_GETCONN_TIMEOUT

    result = [None]
    error = [None]

    def _get():
        try:
            result[0] = _get_pool().getconn()
        except Exception as e:
            error[0] = e

    t = threading.Thread(target=_get, daemon=True)
    t.start()
    t.join(timeout=timeout)

    if t.is_alive():
        raise psycopg2.OperationalError(
            f"Connection pool exhausted, timed out after {timeout}s waiting for a connection"
        )
    if error[0]:
        raise error[0]
    return result[0]


def get_db():
    """Get a healthy connection from the pool.

    Stale connections (closed by the server or the pooler) are discarded and
    replaced; up to 3 attempts.
    """
    max_retries = 3
    last_error = None

    for attempt in range(max_retries):
        conn = _getconn_with_timeout()
        try:
            with conn.cursor() as cur:
                cur.execute('SELECT 1')
            conn.rollback()
            return conn
        except (psycopg2.OperationalError, psycopg2.InterfaceError, psycopg2.DatabaseError) as e:
            last_error = e
            logger.warning(f'Stale connection discarded (attempt {attempt + 1}/{max_retries}): {e}')
            try:
                _get_pool().putconn(conn, close=True)
            except Exception:
                logger.debug('Could not close stale connection', exc_info=True)

    raise psycopg2.OperationalError(f"Failed to get valid connection after {max_retries} attempts: {last_error}")


def release_db(conn):
    """Return a connection to the pool, closing it if it is broken."""
    if not conn or not _connection_pool:
        return
    try:
        if conn.closed:
            _connection_pool.putconn(conn, close=True)
            return
        _connection_pool.putconn(conn)
    except Exception:
        logger.warning('Releasing connection failed, closing it', exc_info=True)
        try:
            _connection_pool.putconn(conn, close=True)
        except Exception:
            logger.debug('Close after failed release also failed', exc_info=True)


@contextmanager
def transaction():
    """Atomic unit of work.

    Usage:
        with transaction() as conn:
            cursor = get_cursor(conn)
            cursor.execute('INSERT INTO ...')
            cursor.execute('UPDATE ...')
    """
    conn = get_db()
    try:
        yield conn
        conn.commit()
    except Exception as e:
        conn.rollback()
        logger.warning(f'Transaction rolled back: {e}')
        raise
    finally:
        release_db(conn)


_ping_cache = {'ok': False, 'ts': 0}


def ping_db():
    """Return True when the database answers. Cached for 5 seconds."""
    now = time.time()
    if _ping_cache['ok'] and (now - _ping_cache['ts']) < 5:
        return True

    try:
        conn = get_db()
        try:
            with conn.cursor() as cur:
                cur.execute('SELECT 1')
            _ping_cache['ok'] = True
            _ping_cache['ts'] = now
            return True
        finally:
            release_db(conn)
    except Exception:
        logger.warning('Database ping failed', exc_info=True)
        _ping_cache['ok'] = False
        return False


def get_cursor(conn):
    """Get cursor with dict row factory."""
    return conn.cursor(cursor_factory=RealDictCursor)


def as_json(value):
    """Adapt a dict/list for a jsonb column."""
    return Json(value) if value is not None else None


def init_db():
    """Create the local development schema when it does not exist yet.

    Production uses the schema managed by the hosted platform; this only runs
    when INIT_DB_SCHEMA is enabled (see app.py).
    """
    conn = get_db()
    cursor = get_cursor(conn)
    try:
        cursor.execute("""
            SELECT EXISTS (
                SELECT FROM information_schema.tables
                WHERE table_schema = 'public' AND table_name = 'tasks'
            )
        """)
        if cursor.fetchone()['exists']:
            logger.info('Database schema already initialized, skipping init_db()')
            return

        from migrations.init_schema import create_schema
        create_schema(conn, cursor)
        conn.commit()
        logger.info('Database schema initialized successfully')
    except Exception:
        conn.rollback()
        raise
    finally:
        release_db(conn)


def dict_from_row(row):
    """Convert a row to a dict with ISO-formatted dates and string UUIDs."""
    if row is None:
        return None
    result = dict(row)
    for key, value in result.items():
        if hasattr(value, 'isoformat'):
            result[key] = value.isoformat()
        elif type(value).__name__ == 'UUID':
            result[key] = str(value)
    return result
