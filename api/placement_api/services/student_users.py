from __future__ import annotations

import logging
from functools import lru_cache
from typing import Any

from placement_api.services.database import Database, get_database
from placement_api.services.errors import (
    RepositoryBusinessRuleError,
    RepositoryConflictError,
    RepositoryNotFoundError,
)
from placement_api.services.listing import ListQuery, WhereBuilder, fetch_page, order_clause

logger = logging.getLogger(__name__)

LINK_SELECT = (
    "su.student_id, su.user_id, su.created_at, u.username, u.email, u.full_name, "
    "u.role_id, r.role_name, u.is_active, u.created_at as user_created_at, u.last_login"
)
LINK_SOURCE = "student_users su left join users u on u.user_id = su.user_id left join roles r on r.role_id = u.role_id"
ACCOUNT_SOURCE = "student_users su join users u on u.user_id = su.user_id left join roles r on r.role_id = u.role_id"
LINK_SORT_COLUMNS = {"student_id": "su.student_id", "user_id": "su.user_id", "created_at": "su.created_at"}
LINK_SEARCH_COLUMNS = ("su.student_id", "u.username", "u.email", "u.full_name")
NOT_FOUND = "Student user not found"
USER_NOT_FOUND = "User not found"
STUDENT_ID_TAKEN = "Student ID is already associated with a user"
USER_TAKEN = "User is already associated with a student record"


class StudentUserRepository:
    def __init__(self, database: Database) -> None:
        self.database = database

    async def _fetch_link(self, conn, student_id: str) -> dict[str, Any]:
        row = await conn.fetchrow(f"select {LINK_SELECT} from {LINK_SOURCE} where su.student_id = $1", student_id)
        if row is None:
            raise RepositoryNotFoundError(NOT_FOUND)
        return dict(row)

    async def create_link(self, fields: dict[str, Any]) -> dict[str, Any]:
        user_id = fields["user_id"]
        async with self.database.transaction(conflict_message=STUDENT_ID_TAKEN, reference_message=USER_NOT_FOUND) as conn:
            if await conn.fetchval("select 1 from users where user_id = $1", user_id) is None:
                raise RepositoryNotFoundError(USER_NOT_FOUND)
            student_id = fields.get("student_id") or str(user_id)
            if await conn.fetchval("select 1 from student_users where student_id = $1", student_id) is not None:
                raise RepositoryConflictError(STUDENT_ID_TAKEN)
            if await conn.fetchval("select 1 from student_users where user_id = $1", user_id) is not None:
                raise RepositoryConflictError(USER_TAKEN)
            await conn.execute("insert into student_users (student_id, user_id) values ($1, $2)", student_id, user_id)
            row = await self._fetch_link(conn, student_id)
        logger.info("student user linked student_id=%s user_id=%s", student_id, user_id)
        return row

    async def create_links(self, user_ids: list[int]) -> dict[str, Any]:
        """Link many users at once; each new link uses the user id as its student id."""
        requested = list(dict.fromkeys(user_ids))
        async with self.database.transaction(conflict_message=STUDENT_ID_TAKEN) as conn:
            known = {
                row["user_id"]
                for row in await conn.fetch("select user_id from users where user_id = any($1::int[])", requested)
            }
            linked = {
                row["user_id"]
                for row in await conn.fetch("select user_id from student_users where user_id = any($1::int[])", requested)
            }
            taken_ids = {
                row["student_id"]
                for row in await conn.fetch(
                    "select student_id from student_users where student_id = any($1::text[])",
                    [str(user_id) for user_id in requested],
                )
            }
            invalid = [user_id for user_id in requested if user_id not in known]
            duplicates = [
                user_id for user_id in requested if user_id in known and (user_id in linked or str(user_id) in taken_ids)
            ]
            to_insert = [user_id for user_id in requested if user_id in known and user_id not in duplicates]
            rows: list[dict[str, Any]] = []
            if to_insert:
                await conn.execute(
                    """
                    insert into student_users (student_id, user_id)
                    select user_id::text, user_id from unnest($1::int[]) as user_id
                    """,
                    to_insert,
                )
                rows = [
                    dict(row)
                    for row in await conn.fetch(
                        f"select {LINK_SELECT} from {LINK_SOURCE} where su.user_id = any($1::int[]) order by su.user_id",
                        to_insert,
                    )
                ]
        logger.info(
            "student users linked created=%s duplicates=%s invalid=%s",
            len(rows),
            len(duplicates),
            len(invalid),
        )
        return {
            "created": rows,
            "duplicates": duplicates,
            "invalid_users": invalid,
            "summary": {
                "total_requested": len(requested),
                "successfully_created": len(rows),
                "duplicates": len(duplicates),
                "invalid": len(invalid),
            },
        }

    async def list_links(
        self,
        query: ListQuery,
        *,
        user_id: int | None = None,
        accounts_only: bool = False,
    ) -> tuple[list[dict[str, Any]], int]:
        where = WhereBuilder()
        where.equals("su.user_id", user_id)
        where.search(LINK_SEARCH_COLUMNS, query.search)
        return await fetch_page(
            self.database,
            select=LINK_SELECT,
            source=ACCOUNT_SOURCE if accounts_only else LINK_SOURCE,
            where=where,
            order=order_clause(query, LINK_SORT_COLUMNS, "student_id", "ASC"),
            query=query,
        )

    async def get_link(self, student_id: str) -> dict[str, Any]:
        row = await self.database.fetchrow(f"select {LINK_SELECT} from {LINK_SOURCE} where su.student_id = $1", student_id)
        if row is None:
            raise RepositoryNotFoundError(NOT_FOUND)
        return dict(row)

    async def get_link_for_user(self, user_id: int) -> dict[str, Any]:
        row = await self.database.fetchrow(f"select {LINK_SELECT} from {LINK_SOURCE} where su.user_id = $1", user_id)
        if row is None:
            raise RepositoryNotFoundError(NOT_FOUND)
        return dict(row)

    async def update_link(self, student_id: str, fields: dict[str, Any]) -> dict[str, Any]:
        user_id = fields.get("user_id")
        if user_id is None:
            raise RepositoryBusinessRuleError("No fields provided for update")
        async with self.database.transaction(conflict_message=USER_TAKEN, reference_message=USER_NOT_FOUND) as conn:
            if await conn.fetchval("select 1 from student_users where student_id = $1", student_id) is None:
                raise RepositoryNotFoundError(NOT_FOUND)
            if await conn.fetchval("select 1 from users where user_id = $1", user_id) is None:
                raise RepositoryNotFoundError(USER_NOT_FOUND)
            taken = await conn.fetchval(
                "select 1 from student_users where user_id = $1 and student_id <> $2",
                user_id,
                student_id,
            )
            if taken is not None:
                raise RepositoryConflictError(USER_TAKEN)
            await conn.execute("update student_users set user_id = $2 where student_id = $1", student_id, user_id)
            row = await self._fetch_link(conn, student_id)
        logger.info("student user relinked student_id=%s user_id=%s", student_id, user_id)
        return row

    async def delete_link(self, student_id: str) -> dict[str, Any]:
        async with self.database.transaction() as conn:
            row = await conn.fetchrow("delete from student_users where student_id = $1 returning *", student_id)
            if row is None:
                raise RepositoryNotFoundError(NOT_FOUND)
        logger.info("student user unlinked student_id=%s", student_id)
        return dict(row)


@lru_cache
def get_student_user_repository() -> StudentUserRepository:
    return StudentUserRepository(get_database())
