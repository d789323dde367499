from __future__ import annotations

import logging
import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from functools import lru_cache
from typing import Any

import asyncpg  # type: ignore[import-untyped]
from asyncpg import exceptions as pg_exc

from placement_api.core.config import get_settings
from placement_api.services.errors import (
    RepositoryConflictError,
    RepositoryError,
    RepositoryReferenceError,
    RepositoryUnavailableError,
)

logger = logging.getLogger(__name__)


class Database:
    """Process-wide asyncpg pool handle, injected into every repository."""

    def __init__(
        self,
        database_url: str | None,
        min_pool_size: int,
        max_pool_size: int,
        command_timeout: float,
    ) -> None:
        self.database_url = database_url
        self.min_pool_size = max(0, min_pool_size)
        self.max_pool_size = max(1, max_pool_size, self.min_pool_size)
        self.command_timeout = command_timeout
        self._pool: asyncpg.Pool | None = None

    async def close(self) -> None:
        if self._pool is not None:
            await self._pool.close()
            self._pool = None

    async def fetch(self, query: str, *args: Any) -> list[asyncpg.Record]:
        pool = await self._get_pool()
        return await pool.fetch(query, *args)

    async def fetchrow(self, query: str, *args: Any) -> asyncpg.Record | None:
        pool = await self._get_pool()
        return await pool.fetchrow(query, *args)

    async def fetchval(self, query: str, *args: Any) -> Any:
        pool = await self._get_pool()
        return await pool.fetchval(query, *args)

    @asynccontextmanager
    async def transaction(
        self,
        *,
        conflict_message: str = "Record already exists",
        reference_message: str = "Referenced record does not exist",
    ) -> AsyncIterator[asyncpg.Connection]:
        """Acquire a connection and run the block in one transaction.

        The transaction is rolled back before any exception leaves this scope and
        the connection always goes back to the pool. Constraint violations raised
        by the store are translated into repository errors.
        """
        pool = await self._get_pool()
        try:
            async with pool.acquire() as conn:
                async with conn.transaction():
                    yield conn
        except pg_exc.UniqueViolationError as exc:
            logger.warning("transaction rolled back on unique violation constraint=%s", exc.constraint_name)
            raise RepositoryConflictError(conflict_message) from exc
        except pg_exc.ForeignKeyViolationError as exc:
            logger.warning("transaction rolled back on foreign key violation constraint=%s", exc.constraint_name)
            raise RepositoryReferenceError(reference_message) from exc
        except RepositoryError as exc:
            logger.info("transaction rolled back: %s", exc.message)
            raise

    async def ping(self) -> dict[str, Any]:
        started_at = time.perf_counter()
        pool = await self._get_pool()
        try:
            async with pool.acquire() as conn:
                row = await conn.fetchrow("select now() as current_time, version() as version")
        except (pg_exc.PostgresError, pg_exc.InterfaceError, OSError) as exc:
            logger.warning("database ping failed: %s", exc)
            raise RepositoryUnavailableError("database unavailable") from exc
        elapsed_ms = (time.perf_counter() - started_at) * 1000.0
        version = str(row["version"]) if row else ""
        return {
            "status": "CONNECTED",
            "response_time_ms": round(elapsed_ms, 2),
            "timestamp": row["current_time"] if row else None,
            "version": " ".join(version.split(" ")[:2]),
            "pool": self.pool_stats(),
        }

    def pool_stats(self) -> dict[str, int]:
        if self._pool is None:
            return {
                "total_connections": 0,
                "idle_connections": 0,
                "min_size": self.min_pool_size,
                "max_size": self.max_pool_size,
            }
        return {
            "total_connections": self._pool.get_size(),
            "idle_connections": self._pool.get_idle_size(),
            "min_size": self._pool.get_min_size(),
            "max_size": self._pool.get_max_size(),
        }

    async def _get_pool(self) -> asyncpg.Pool:
        if not self.database_url:
            raise RepositoryUnavailableError("PLACEMENT_DATABASE_URL is required")

        if self._pool is not None:
            return self._pool

        try:
            self._pool = await asyncpg.create_pool(
                dsn=self.database_url,
                min_size=self.min_pool_size,
                max_size=self.max_pool_size,
                command_timeout=self.command_timeout,
            )
            logger.info("database pool created min_size=%s max_size=%s", self.min_pool_size, self.max_pool_size)
            return self._pool
        except Exception as exc:  # pragma: no cover - depends on environment
            logger.error("database pool creation failed: %s", exc)
            raise RepositoryUnavailableError("database unavailable") from exc


@lru_cache
def get_database() -> Database:
    settings = get_settings()
    return Database(
        database_url=settings.database_url,
        min_pool_size=settings.database_pool_min_size,
        max_pool_size=settings.database_pool_max_size,
        command_timeout=settings.database_command_timeout,
    )
