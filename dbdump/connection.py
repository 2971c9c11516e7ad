"""
Database connection and table inspection for dbdump.
"""

import logging
from typing import Optional

import mysql.connector
from mysql.connector import Error as MySQLError

from .models import ConnectionSettings, TableInfo
from .utils import format_bytes


TABLE_INFO_QUERY = """
    SELECT
        table_name,
        IFNULL(table_rows, 0) AS row_count,
        IFNULL(data_length, 0) AS data_size,
        IFNULL(index_length, 0) AS index_size,
        IFNULL(data_length + index_length, 0) AS total_size
    FROM information_schema.tables
    WHERE table_schema = DATABASE()
"""


class DatabaseConnection:
    """Manages MySQL database connections with context manager support."""

    DEFAULT_CHARSET = 'utf8mb4'
    CONNECT_TIMEOUT = 5

    def __init__(
        self,
        host: str,
        port: int,
        user: str,
        password: str,
        database: Optional[str] = None
    ):
        self.host = host
        self.port = port
        self.user = user
        self.password = password
        self.database = database
        self.connection = None

    @classmethod
    def from_settings(cls, settings: ConnectionSettings) -> "DatabaseConnection":
        return cls(
            host=settings.host,
            port=settings.port,
            user=settings.user,
            password=settings.password,
            database=settings.database or None
        )

    def __enter__(self) -> "DatabaseConnection":
        """Context manager entry - establish connection."""
        self.connect()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Context manager exit - close connection."""
        self.disconnect()

    def connect(self) -> None:
        """Establish database connection."""
        try:
            self.connection = mysql.connector.connect(
                host=self.host,
                port=self.port,
                user=self.user,
                password=self.password,
                database=self.database,
                charset=self.DEFAULT_CHARSET,
                use_unicode=True,
                connection_timeout=self.CONNECT_TIMEOUT
            )
            logging.info(f"Connected to {self.host}:{self.port}/{self.database or 'N/A'}")
        except MySQLError as e:
            logging.error(f"Failed to connect to database: {e}")
            raise

    def disconnect(self) -> None:
        """Close database connection."""
        if self.connection and self.connection.is_connected():
            self.connection.close()
            logging.debug("Database connection closed")

    def execute_query(self, query: str, params: Optional[tuple] = None) -> list[tuple]:
        """Execute a query and return results."""
        cursor = self.connection.cursor()
        try:
            cursor.execute(query, params)
            return cursor.fetchall()
        finally:
            cursor.close()

    def get_tables_info(self) -> list[TableInfo]:
        """Get size statistics for every table, largest first."""
        results = self.execute_query(TABLE_INFO_QUERY + " ORDER BY total_size DESC")
        return [self._row_to_table_info(row) for row in results]

    def get_table_info(self, table: str) -> TableInfo:
        """Get size statistics for a single table."""
        results = self.execute_query(TABLE_INFO_QUERY + " AND table_name = %s", (table,))
        if not results:
            raise ValueError(f"Table '{table}' not found in database '{self.database}'")
        return self._row_to_table_info(results[0])

    @staticmethod
    def _row_to_table_info(row: tuple) -> TableInfo:
        name = row[0]
        # Some server/connector combinations return information_schema text as bytes
        if isinstance(name, (bytes, bytearray)):
            name = name.decode('utf-8')

        total_size = int(row[4])
        return TableInfo(
            name=name,
            row_count=int(row[1]),
            data_size=int(row[2]),
            index_size=int(row[3]),
            total_size=total_size,
            size_display=format_bytes(total_size)
        )
