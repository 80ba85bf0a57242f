import logging
import os
import queue
import sqlite3
import threading
from contextlib import contextmanager
from typing import Dict

logger = logging.getLogger("database.pool")


class SQLiteConnectionPool:
    def __init__(self, db_path: str, max_connections: int = 10, timeout: float = 5.0):
        self.db_path = db_path
        self.max_connections = max_connections
        self.timeout = timeout
        self._pool = queue.Queue(maxsize=max_connections)
        self._created_connections = 0
        self._lock = threading.Lock()

        db_dir = os.path.dirname(os.path.abspath(db_path))
        os.makedirs(db_dir, exist_ok=True)

    @classmethod
    def from_settings(cls, settings) -> "SQLiteConnectionPool":
        return cls(settings.database_path, max_connections=settings.pool_size)

    def _create_connection(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path, check_same_thread=False, timeout=30.0)
        conn.execute("PRAGMA journal_mode=WAL;")
        conn.execute("PRAGMA synchronous=NORMAL;")
        conn.execute("PRAGMA busy_timeout=5000;")
        conn.row_factory = sqlite3.Row
        logger.debug("Opened connection %s to %s", self._created_connections, self.db_path)
        return conn

    def get_connection(self) -> sqlite3.Connection:
        try:
            return self._pool.get(block=False)
        except queue.Empty:
            with self._lock:
                if self._created_connections < self.max_connections:
                    self._created_connections += 1
                    try:
                        return self._create_connection()
                    except sqlite3.Error:
                        self._created_connections -= 1
                        raise

            # pool exhausted, wait for a connection to come back
            try:
                return self._pool.get(block=True, timeout=self.timeout)
            except queue.Empty:
                raise TimeoutError("Timeout waiting for database connection")

    def return_connection(self, conn: sqlite3.Connection) -> None:
        if conn.in_transaction:
            conn.rollback()
        try:
            self._pool.put(conn, block=False)
        except queue.Full:
            conn.close()
            with self._lock:
                self._created_connections -= 1
            logger.warning("Connection pool overflow, closed extra connection")

    def close_all(self) -> None:
        while not self._pool.empty():
            try:
                conn = self._pool.get(block=False)
                conn.close()
            except queue.Empty:
                break
        with self._lock:
            self._created_connections = 0

    def stats(self) -> Dict[str, int]:
        return {
            "idle_connections": self._pool.qsize(),
            "created_connections": self._created_connections,
            "max_connections": self.max_connections,
        }

    @contextmanager
    def acquire(self):
        """Borrow a connection for the duration of one request."""
        conn = self.get_connection()
        try:
            yield conn
        finally:
            self.return_connection(conn)
