import sqlite3
from contextlib import contextmanager

from honeyhive.config import DB_PATH, DB_TIMEOUT


def db_conn(path: str = DB_PATH):
    conn = sqlite3.connect(path, timeout=DB_TIMEOUT)
    conn.row_factory = sqlite3.Row
    return conn


@contextmanager
def write_txn(path: str = DB_PATH):
    """One BEGIN IMMEDIATE transaction; the write lock is held until commit."""
    conn = db_conn(path)
    conn.isolation_level = None
    try:
        conn.execute("BEGIN IMMEDIATE")
        try:
            yield conn
        except BaseException:
            conn.execute("ROLLBACK")
            raise
        conn.execute("COMMIT")
    finally:
        conn.close()
