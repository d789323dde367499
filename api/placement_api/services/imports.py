from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import Any

import asyncpg  # type: ignore[import-untyped]
from asyncpg import exceptions as pg_exc

InsertOne = Callable[[asyncpg.Connection, dict[str, Any]], Awaitable[dict[str, Any]]]


async def insert_each(
    conn: asyncpg.Connection,
    records: list[tuple[int, dict[str, Any]]],
    insert_one: InsertOne,
    *,
    duplicate_message: str = "Record already exists",
    reference_message: str = "Student not found",
) -> tuple[list[dict[str, Any]], list[dict[str, Any]]]:
    """Insert pre-validated rows inside the caller's transaction with a savepoint per row.

    Each entry is (spreadsheet row number, fields). A row that violates a
    constraint is rolled back to its savepoint and reported; the others commit.
    """
    inserted: list[dict[str, Any]] = []
    failures: list[dict[str, Any]] = []
    for row_number, fields in records:
        student_id = fields.get("student_id")
        try:
            async with conn.transaction():
                row = await insert_one(conn, fields)
        except pg_exc.UniqueViolationError:
            failures.append({"row": row_number, "student_id": student_id, "errors": [duplicate_message]})
            continue
        except pg_exc.ForeignKeyViolationError:
            failures.append({"row": row_number, "student_id": student_id, "errors": [reference_message]})
            continue
        inserted.append(row)
    return inserted, failures
