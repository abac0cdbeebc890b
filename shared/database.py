"""
Query executor for the Product table.

Every call opens its own PostgreSQL connection, runs a single statement in
autocommit mode and closes the connection before returning. Driver
exceptions never leave this module: they are logged and re-raised as
ExecutionError.
"""

import logging
from typing import Any, Awaitable, Callable, Dict, List, Optional

import psycopg
from psycopg.rows import dict_row

from products.models import Product
from .errors import ConfigurationError, ExecutionError, NotFoundError
from .settings import CONNECTION_STRING_SETTING, get_connect_timeout, resolve_connection_string

logger = logging.getLogger(__name__)

Connect = Callable[..., Awaitable[psycopg.AsyncConnection]]


class QueryExecutor:
    """Runs parameterized statements and maps result rows to Products."""

    def __init__(
        self,
        conninfo: Optional[str],
        connect: Connect = psycopg.AsyncConnection.connect,
        connect_timeout: int = 15
    ):
        self.conninfo = conninfo
        self.connect_timeout = connect_timeout
        self._connect = connect

    @classmethod
    def from_settings(cls, base_path: Optional[str] = None) -> "QueryExecutor":
        """Create an executor from local.settings.json / environment."""
        return cls(
            resolve_connection_string(base_path=base_path),
            connect_timeout=get_connect_timeout(base_path),
        )

    async def _open(self) -> psycopg.AsyncConnection:
        if not self.conninfo:
            error = ConfigurationError(f"{CONNECTION_STRING_SETTING} is not configured")
            logger.error(f"Cannot open database connection: {str(error)}")
            raise ExecutionError("Database connection is not configured", error) from error

        return await self._connect(
            self.conninfo,
            autocommit=True,
            connect_timeout=self.connect_timeout,
        )

    async def execute_query(
        self,
        statement: str,
        parameters: Optional[Dict[str, Any]] = None
    ) -> List[Product]:
        """
        Execute a row-returning statement.

        Args:
            statement: SQL text with %(name)s placeholders
            parameters: Values bound to the placeholders

        Returns:
            The result rows as Products (never empty)

        Raises:
            NotFoundError: If the statement returned no rows
            ExecutionError: If the statement could not be executed
        """
        try:
            async with await self._open() as conn:
                async with conn.cursor(row_factory=dict_row) as cur:
                    await cur.execute(statement, parameters or {})
                    rows = await cur.fetchall()
        except psycopg.Error as e:
            logger.error(f"Error executing SQL query: {str(e)}")
            raise ExecutionError("Error executing SQL query", e) from e

        if not rows:
            raise NotFoundError("No rows returned")

        return [Product.from_row(row) for row in rows]

    async def execute_non_query(
        self,
        statement: str,
        parameters: Optional[Dict[str, Any]] = None
    ) -> int:
        """
        Execute a statement that returns no rows.

        Returns:
            Number of rows affected

        Raises:
            ExecutionError: If the statement could not be executed
        """
        try:
            async with await self._open() as conn:
                async with conn.cursor() as cur:
                    await cur.execute(statement, parameters or {})
                    return cur.rowcount
        except psycopg.Error as e:
            logger.error(f"Error executing SQL statement: {str(e)}")
            raise ExecutionError("Error executing SQL statement", e) from e
