from __future__ import annotations

import logging
from functools import lru_cache
from typing import Any

from placement_api.core.security import hash_password, verify_password
from placement_api.services.database import Database, get_database
from placement_api.services.errors import (
    RepositoryAuthenticationError,
    RepositoryBusinessRuleError,
    RepositoryConflictError,
    RepositoryForbiddenError,
    RepositoryNotFoundError,
)
from placement_api.services.listing import ListQuery, WhereBuilder, coalesce_assignments, fetch_page, order_clause

logger = logging.getLogger(__name__)

USER_COLUMNS = ("username", "email", "full_name", "role_id", "is_active")
USER_SELECT = (
    "u.user_id, u.username, u.email, u.full_name, u.role_id, r.role_name, "
    "u.is_active, u.created_at, u.updated_at, u.last_login"
)
USER_SOURCE = "users u left join roles r on r.role_id = u.role_id"
USER_SORT_COLUMNS = {
    name: f"u.{name}" for name in ("user_id", "username", "email", "full_name", "created_at", "last_login")
}
USER_SEARCH_COLUMNS = ("u.username", "u.full_name", "u.email")
STUDENT_ROLE = "student"
NOT_FOUND = "User not found"
INACTIVE_OR_MISSING = "User not found or inactive"
ROLE_NOT_FOUND = "Role not found"
USERNAME_TAKEN = "Username already exists"
EMAIL_TAKEN = "Email already exists"
STUDENT_ID_TAKEN = "Student ID is already associated with a user"
INVALID_CREDENTIALS = "Invalid username or password"


class UserRepository:
    def __init__(self, database: Database) -> None:
        self.database = database

    async def _fetch_user(self, conn, user_id: int) -> dict[str, Any]:
        row = await conn.fetchrow(f"select {USER_SELECT} from {USER_SOURCE} where u.user_id = $1", user_id)
        if row is None:
            raise RepositoryNotFoundError(NOT_FOUND)
        return dict(row)

    async def _check_unique(self, conn, fields: dict[str, Any], user_id: int | None = None) -> None:
        if fields.get("role_id") is not None:
            if await conn.fetchval("select 1 from roles where role_id = $1", fields["role_id"]) is None:
                raise RepositoryNotFoundError(ROLE_NOT_FOUND)
        if fields.get("username"):
            taken = await conn.fetchval(
                "select 1 from users where username = $1 and user_id is distinct from $2",
                fields["username"],
                user_id,
            )
            if taken is not None:
                raise RepositoryConflictError(USERNAME_TAKEN)
        if fields.get("email"):
            taken = await conn.fetchval(
                "select 1 from users where lower(email) = lower($1) and user_id is distinct from $2",
                fields["email"],
                user_id,
            )
            if taken is not None:
                raise RepositoryConflictError(EMAIL_TAKEN)

    async def create_user(self, fields: dict[str, Any]) -> dict[str, Any]:
        """Register an account; a user with the student role is also linked to a student id.

        The link uses the supplied `student_id`, or the new user id when none is given.
        """
        async with self.database.transaction(conflict_message=USERNAME_TAKEN, reference_message=ROLE_NOT_FOUND) as conn:
            await self._check_unique(conn, fields)
            user_id = await conn.fetchval(
                """
                insert into users (username, password_hash, email, full_name, role_id, is_active)
                values ($1, $2, $3, $4, $5, $6)
                returning user_id
                """,
                fields["username"],
                hash_password(fields["password"]),
                fields.get("email") or None,
                fields.get("full_name") or None,
                fields.get("role_id"),
                fields.get("is_active", True),
            )
            user = await self._fetch_user(conn, user_id)
            if (user.get("role_name") or "").lower() == STUDENT_ROLE:
                student_id = fields.get("student_id") or str(user_id)
                if await conn.fetchval("select 1 from student_users where student_id = $1", student_id) is not None:
                    raise RepositoryConflictError(STUDENT_ID_TAKEN)
                await conn.execute("insert into student_users (student_id, user_id) values ($1, $2)", student_id, user_id)
                user["student_id"] = student_id
        logger.info("user registered user_id=%s role=%s", user_id, user.get("role_name"))
        return user

    async def authenticate_user(self, username: str, password: str) -> dict[str, Any]:
        row = await self.database.fetchrow(
            f"select {USER_SELECT}, u.password_hash from {USER_SOURCE} where u.username = $1",
            username,
        )
        if row is None or not verify_password(password, row["password_hash"]):
            logger.warning("login rejected username=%s", username)
            raise RepositoryAuthenticationError(INVALID_CREDENTIALS)
        user = dict(row)
        user.pop("password_hash")
        if not user["is_active"]:
            logger.warning("login rejected for inactive user_id=%s", user["user_id"])
            raise RepositoryForbiddenError("Account is inactive or disabled")
        logger.info("user authenticated user_id=%s", user["user_id"])
        return user

    async def list_users(
        self,
        query: ListQuery,
        *,
        is_active: bool | None = None,
        role_id: int | None = None,
    ) -> tuple[list[dict[str, Any]], int]:
        where = WhereBuilder()
        where.equals("u.is_active", is_active)
        where.equals("u.role_id", role_id)
        where.search(USER_SEARCH_COLUMNS, query.search)
        return await fetch_page(
            self.database,
            select=USER_SELECT,
            source=USER_SOURCE,
            where=where,
            order=order_clause(query, USER_SORT_COLUMNS, "user_id", "ASC"),
            query=query,
        )

    async def get_user(self, user_id: int) -> dict[str, Any]:
        row = await self.database.fetchrow(f"select {USER_SELECT} from {USER_SOURCE} where u.user_id = $1", user_id)
        if row is None:
            raise RepositoryNotFoundError(NOT_FOUND)
        return dict(row)

    async def update_user(self, user_id: int, fields: dict[str, Any]) -> dict[str, Any]:
        where = WhereBuilder()
        assignments = coalesce_assignments(USER_COLUMNS, fields, where)
        async with self.database.transaction(conflict_message=USERNAME_TAKEN, reference_message=ROLE_NOT_FOUND) as conn:
            if await conn.fetchval("select 1 from users where user_id = $1", user_id) is None:
                raise RepositoryNotFoundError(NOT_FOUND)
            await self._check_unique(conn, fields, user_id)
            await conn.execute(
                f"update users set {assignments}, updated_at = now() where user_id = {where.bind(user_id)}",
                *where.args,
            )
            user = await self._fetch_user(conn, user_id)
        logger.info("user updated user_id=%s", user_id)
        return user

    async def deactivate_user(self, user_id: int) -> dict[str, Any]:
        async with self.database.transaction() as conn:
            row = await conn.fetchrow(
                """
                update users set is_active = false, updated_at = now()
                where user_id = $1
                returning user_id, username, is_active
                """,
                user_id,
            )
            if row is None:
                raise RepositoryNotFoundError(NOT_FOUND)
        logger.info("user deactivated user_id=%s", user_id)
        return dict(row)

    async def change_password(self, user_id: int, current_password: str, new_password: str) -> dict[str, Any]:
        async with self.database.transaction() as conn:
            password_hash = await conn.fetchval(
                "select password_hash from users where user_id = $1 and is_active = true for update",
                user_id,
            )
            if password_hash is None:
                raise RepositoryNotFoundError(INACTIVE_OR_MISSING)
            if not verify_password(current_password, password_hash):
                raise RepositoryBusinessRuleError("Current password is incorrect")
            row = await conn.fetchrow(
                """
                update users set password_hash = $2, updated_at = now()
                where user_id = $1
                returning user_id, username
                """,
                user_id,
                hash_password(new_password),
            )
        logger.info("password changed user_id=%s", user_id)
        return dict(row)

    async def touch_last_login(self, user_id: int) -> dict[str, Any]:
        row = await self.database.fetchrow(
            """
            update users set last_login = now()
            where user_id = $1 and is_active = true
            returning user_id, username, last_login
            """,
            user_id,
        )
        if row is None:
            raise RepositoryNotFoundError(INACTIVE_OR_MISSING)
        return dict(row)

    async def get_user_permissions(self, user_id: int) -> list[dict[str, Any]]:
        rows = await self.database.fetch(
            """
            select distinct p.permission_id, p.permission_name, p.module, p.description
            from users u
            join role_permissions rp on rp.role_id = u.role_id
            join permissions p on p.permission_id = rp.permission_id
            where u.user_id = $1 and u.is_active = true
            order by p.permission_name
            """,
            user_id,
        )
        return [dict(row) for row in rows]

    async def get_profile(self, claims: dict[str, Any]) -> dict[str, Any]:
        """Caller identity from token claims, with the linked student record for student accounts."""
        profile = {
            name: claims.get(name) for name in ("user_id", "username", "role_id", "role_name", "exp", "iat")
        }
        if (claims.get("role_name") or "").lower() != STUDENT_ROLE:
            return profile
        student_id = await self.database.fetchval(
            "select student_id from student_users where user_id = $1",
            claims["user_id"],
        )
        if student_id is None:
            logger.warning("no student link for user_id=%s", claims["user_id"])
            return profile
        profile["student_id"] = student_id
        student = await self.database.fetchrow("select * from students where student_id = $1", student_id)
        if student is not None:
            profile["student"] = dict(student)
        return profile


@lru_cache
def get_user_repository() -> UserRepository:
    return UserRepository(get_database())
