#!/usr/bin/env python3
"""
Database Connection Manager

Owns the PostgreSQL connection used by the psycopg backed services and
reconnects when the connection drops.
"""

import logging
from contextlib import contextmanager
from typing import Optional

import psycopg
from psycopg.rows import dict_row

from ..exceptions import DatabaseConnectionError

logger = logging.getLogger(__name__)


class ConnectionManager:
    """Manages a database connection with error handling and recovery."""

    def __init__(self, config):
        """
        Initialize connection manager with configuration.

        Args:
            config: DatabaseConfig with database_url and connection_timeout
        """
        self.config = config
        self.connection: Optional[psycopg.Connection] = None
        self._connect()

    def _connect(self) -> None:
        if not self.config.database_url:
            raise DatabaseConnectionError('postgres', ValueError('DATABASE_URL is not set'))
        try:
            self.connection = psycopg.connect(
                self.config.database_url,
                row_factory=dict_row,
                autocommit=True,
                connect_timeout=self.config.connection_timeout
            )
            logger.debug("Database connection established")
        except psycopg.Error as e:
            raise DatabaseConnectionError('postgres', e) from e

    def ensure_connection(self) -> None:
        """Ensure database connection is active, reconnect if needed."""
        try:
            if not self.connection or self.connection.closed:
                self._connect()
            else:
                with self.connection.cursor() as cursor:
                    cursor.execute("SELECT 1")
        except psycopg.Error:
            logger.warning("Connection test failed, reconnecting...")
            self._connect()

    @contextmanager
    def get_cursor(self):
        self.ensure_connection()
        with self.connection.cursor() as cursor:
            yield cursor

    @contextmanager
    def transaction(self):
        """
        Execute operations in a database transaction.

        Yields:
            Database cursor within transaction
        """
        self.ensure_connection()
        with self.connection.transaction():
            with self.connection.cursor() as cursor:
                yield cursor

    def close(self) -> None:
        if self.connection and not self.connection.closed:
            self.connection.close()
            logger.debug("Database connection closed")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
