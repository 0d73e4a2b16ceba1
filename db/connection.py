"""
PostgreSQL Connection Helper

Provides the connection pool backing the KYC store.
Handles connection lifecycle, commit and rollback.
"""

import psycopg2
from psycopg2 import pool, OperationalError
from contextlib import contextmanager
from typing import Optional
import logging

logger = logging.getLogger(__name__)


class DatabaseConnection:
    """
    Process-wide PostgreSQL connection pool.

    Initialized once at startup and shared by every import run.
    """

    _pool: Optional[pool.ThreadedConnectionPool] = None

    @classmethod
    def initialize(
        cls,
        host: str,
        port: int,
        database: str,
        user: str,
        password: str,
        min_connections: int = 1,
        max_connections: int = 5,
    ) -> None:
        """
        Initialize the connection pool.

        A threaded pool is used since scheduled runs execute on worker
        threads.

        Raises:
            OperationalError: If connection fails
        """
        if cls._pool is not None:
            logger.debug("Database pool already initialized")
            return

        try:
            cls._pool = pool.ThreadedConnectionPool(
                min_connections,
                max_connections,
                host=host,
                port=port,
                database=database,
                user=user,
                password=password,
                connect_timeout=10,
            )
            logger.info(f"Database pool initialized with {min_connections}-{max_connections} connections")
        except OperationalError as e:
            logger.error(f"Failed to initialize database pool: {e}")
            raise

    @classmethod
    def initialize_from_settings(cls, settings) -> None:
        """Initialize the pool from a Settings object."""
        cls.initialize(
            host=settings.DB_HOST,
            port=settings.DB_PORT,
            database=settings.DB_NAME,
            user=settings.DB_USER,
            password=settings.DB_PASSWORD,
        )

    @classmethod
    def close_all(cls) -> None:
        """Close all connections in the pool."""
        if cls._pool:
            cls._pool.closeall()
            cls._pool = None
            logger.info("Database pool closed")

    @classmethod
    @contextmanager
    def get_cursor(cls, commit: bool = True):
        """
        Context manager yielding a cursor on a pooled connection.

        Commits on success when ``commit`` is set, rolls back on error.

        Raises:
            OperationalError: If pool is not initialized
        """
        if cls._pool is None:
            raise OperationalError("Database pool not initialized. Call initialize() first.")

        conn = cls._pool.getconn()
        cursor = conn.cursor()
        try:
            yield cursor
            if commit:
                conn.commit()
        except Exception as e:
            conn.rollback()
            logger.error(f"Database error: {e}")
            raise
        finally:
            cursor.close()
            cls._pool.putconn(conn)

    @classmethod
    def execute_query(cls, query: str, params: Optional[tuple] = None) -> list:
        """Execute a SELECT query and return all rows."""
        with cls.get_cursor(commit=False) as cursor:
            cursor.execute(query, params or ())
            return cursor.fetchall()

    @classmethod
    def execute_many(cls, query: str, data: list) -> int:
        """
        Execute a statement once per parameter tuple in one transaction.

        Returns:
            Number of parameter tuples executed
        """
        with cls.get_cursor(commit=True) as cursor:
            cursor.executemany(query, data)
            return len(data)
