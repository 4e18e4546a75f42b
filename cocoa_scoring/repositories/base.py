"""
Base Repository - Cocoa Contest Scoring Engine
cocoa_scoring/repositories/base.py

Base repository class with Snowflake connection management and common utilities.
"""

from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Any, Dict, Generator, List, Optional, Sequence

import snowflake.connector
import structlog
from snowflake.connector import DictCursor
from snowflake.connector.errors import DatabaseError, InterfaceError, ProgrammingError

from cocoa_scoring.core.exceptions import (
    DatabaseConnectionException,
    DuplicateEntityException,
    ForeignKeyViolationException,
    RepositoryException,
)
from cocoa_scoring.services.snowflake import get_snowflake_connection

logger = structlog.get_logger(__name__)


def translate_error(e: Exception) -> RepositoryException:
    """Map a Snowflake driver error to a repository exception."""
    if isinstance(e, ProgrammingError):
        error_msg = str(e).upper()
        if "UNIQUE" in error_msg or "DUPLICATE" in error_msg:
            return DuplicateEntityException(str(e))
        if "FOREIGN KEY" in error_msg:
            return ForeignKeyViolationException(str(e))
        return RepositoryException(f"Query error: {e}")
    return RepositoryException(f"Database error: {e}")


class BaseRepository:
    """Base repository with Snowflake connection management."""

    @contextmanager
    def get_connection(self) -> Generator[snowflake.connector.SnowflakeConnection, None, None]:
        """Context manager for Snowflake connections."""
        conn = None
        try:
            conn = get_snowflake_connection()
            yield conn
        except InterfaceError as e:
            raise DatabaseConnectionException(f"Failed to connect to Snowflake: {e}")
        finally:
            if conn:
                conn.close()

    @contextmanager
    def get_cursor(self, dict_cursor: bool = True) -> Generator[Any, None, None]:
        """Context manager for Snowflake cursors with automatic connection cleanup."""
        with self.get_connection() as conn:
            cursor = conn.cursor(DictCursor) if dict_cursor else conn.cursor()
            try:
                yield cursor
            finally:
                cursor.close()

    @contextmanager
    def transaction(self) -> Generator[Any, None, None]:
        """
        Run several statements atomically on one cursor.

        Commits when the block exits cleanly; rolls back and raises a
        RepositoryException otherwise.
        """
        with self.get_cursor() as cursor:
            conn = cursor.connection
            cursor.execute("BEGIN")
            try:
                yield cursor
                conn.commit()
            except (ProgrammingError, DatabaseError) as e:
                conn.rollback()
                logger.warning("transaction_rolled_back", error=str(e))
                raise translate_error(e)
            except Exception:
                conn.rollback()
                logger.warning("transaction_rolled_back")
                raise

    def execute_query(
        self,
        sql: str,
        params: Optional[Sequence[Any]] = None,
        fetch_one: bool = False,
        fetch_all: bool = False,
        commit: bool = False,
    ) -> Optional[Any]:
        """
        Execute a SQL query with error handling.

        Args:
            sql: SQL query string
            params: Query parameters
            fetch_one: Return single row
            fetch_all: Return all rows
            commit: Commit transaction after execution

        Returns:
            Query results or the affected row count
        """
        with self.get_cursor() as cursor:
            try:
                cursor.execute(sql, params or ())

                if commit:
                    cursor.connection.commit()

                if fetch_one:
                    return cursor.fetchone()
                elif fetch_all:
                    return cursor.fetchall()

                return cursor.rowcount

            except (ProgrammingError, DatabaseError) as e:
                raise translate_error(e)

    def normalize_timestamp(self, dt: Optional[datetime]) -> Optional[datetime]:
        """Ensure timestamp is UTC-aware."""
        if dt is None:
            return None
        if dt.tzinfo is None:
            return dt.replace(tzinfo=timezone.utc)
        return dt.astimezone(timezone.utc)

    def row_to_dict(self, row: Optional[Dict[str, Any]]) -> Dict[str, Any]:
        """Convert Snowflake row (uppercase keys) to lowercase dict."""
        if row is None:
            return {}
        return {k.lower(): v for k, v in row.items()}

    def rows_to_dicts(self, rows: Optional[List[Dict[str, Any]]]) -> List[Dict[str, Any]]:
        return [self.row_to_dict(r) for r in rows or []]
