from __future__ import annotations

import logging
from functools import lru_cache
from typing import Any

from placement_api.services.database import Database, get_database
from placement_api.services.errors import RepositoryConflictError, RepositoryNotFoundError
from placement_api.services.listing import ListQuery, WhereBuilder, coalesce_assignments, fetch_page, order_clause

logger = logging.getLogger(__name__)

LANGUAGE_COLUMNS = ("language", "level")
LANGUAGE_SORT_COLUMNS = {
    name: f"sl.{name}" for name in ("language_id", "student_id", "language", "level", "created_at")
}
LANGUAGE_SEARCH_COLUMNS = ("sl.language", "sl.student_id", "s.full_name")
LANGUAGE_SOURCE = "student_languages sl join students s on s.student_id = sl.student_id"
LANGUAGE_SELECT = "sl.*, s.full_name"
DUPLICATE = "This language already exists for this student"
NOT_FOUND = "Language record not found"
STUDENT_NOT_FOUND = "Student not found"


class StudentLanguageRepository:
    def __init__(self, database: Database) -> None:
        self.database = database

    async def create_language(self, fields: dict[str, Any]) -> dict[str, Any]:
        student_id = fields["student_id"]
        async with self.database.transaction(conflict_message=DUPLICATE, reference_message=STUDENT_NOT_FOUND) as conn:
            if await conn.fetchval("select 1 from students where student_id = $1", student_id) is None:
                raise RepositoryNotFoundError(STUDENT_NOT_FOUND)
            existing = await conn.fetchval(
                "select language_id from student_languages where student_id = $1 and language = $2",
                student_id,
                fields["language"],
            )
            if existing is not None:
                raise RepositoryConflictError(DUPLICATE)
            language_id = await conn.fetchval(
                "insert into student_languages (student_id, language, level) values ($1, $2, $3) returning language_id",
                student_id,
                fields["language"],
                fields["level"],
            )
            row = await conn.fetchrow(
                f"select {LANGUAGE_SELECT} from {LANGUAGE_SOURCE} where sl.language_id = $1",
                language_id,
            )
        logger.info("language created language_id=%s student_id=%s", language_id, student_id)
        return dict(row)

    async def upsert_languages(self, student_id: str, languages: list[dict[str, Any]]) -> list[dict[str, Any]]:
        """Insert or update several languages for one student in a single transaction."""
        async with self.database.transaction(reference_message=STUDENT_NOT_FOUND) as conn:
            if await conn.fetchval("select 1 from students where student_id = $1", student_id) is None:
                raise RepositoryNotFoundError(STUDENT_NOT_FOUND)
            await conn.executemany(
                """
                insert into student_languages (student_id, language, level)
                values ($1, $2, $3)
                on conflict (student_id, language)
                do update set level = excluded.level, updated_at = now()
                """,
                [(student_id, item["language"], item["level"]) for item in languages],
            )
            rows = await conn.fetch(
                f"""
                select {LANGUAGE_SELECT} from {LANGUAGE_SOURCE}
                where sl.student_id = $1 and sl.language = any($2::text[])
                order by sl.language
                """,
                student_id,
                [item["language"] for item in languages],
            )
        logger.info("languages upserted student_id=%s count=%s", student_id, len(rows))
        return [dict(row) for row in rows]

    async def list_languages(
        self,
        query: ListQuery,
        *,
        student_id: str | None = None,
        language: str | None = None,
    ) -> tuple[list[dict[str, Any]], int]:
        where = WhereBuilder()
        where.equals("sl.student_id", student_id)
        where.equals("sl.language", language)
        where.search(LANGUAGE_SEARCH_COLUMNS, query.search)
        return await fetch_page(
            self.database,
            select=LANGUAGE_SELECT,
            source=LANGUAGE_SOURCE,
            where=where,
            order=order_clause(query, LANGUAGE_SORT_COLUMNS, "language_id", "ASC"),
            query=query,
        )

    async def get_language(self, language_id: int) -> dict[str, Any]:
        row = await self.database.fetchrow(
            f"select {LANGUAGE_SELECT} from {LANGUAGE_SOURCE} where sl.language_id = $1",
            language_id,
        )
        if row is None:
            raise RepositoryNotFoundError(NOT_FOUND)
        return dict(row)

    async def get_student_languages(self, student_id: str) -> list[dict[str, Any]]:
        if await self.database.fetchval("select 1 from students where student_id = $1", student_id) is None:
            raise RepositoryNotFoundError(STUDENT_NOT_FOUND)
        rows = await self.database.fetch(
            f"select {LANGUAGE_SELECT} from {LANGUAGE_SOURCE} where sl.student_id = $1 order by sl.level desc, sl.language",
            student_id,
        )
        return [dict(row) for row in rows]

    async def update_language(self, language_id: int, fields: dict[str, Any]) -> dict[str, Any]:
        where = WhereBuilder()
        assignments = coalesce_assignments(LANGUAGE_COLUMNS, fields, where)
        async with self.database.transaction(conflict_message=DUPLICATE) as conn:
            current = await conn.fetchrow(
                "select student_id from student_languages where language_id = $1",
                language_id,
            )
            if current is None:
                raise RepositoryNotFoundError(NOT_FOUND)
            if fields.get("language"):
                clash = await conn.fetchval(
                    """
                    select language_id from student_languages
                    where student_id = $1 and language = $2 and language_id <> $3
                    """,
                    current["student_id"],
                    fields["language"],
                    language_id,
                )
                if clash is not None:
                    raise RepositoryConflictError(DUPLICATE)
            await conn.execute(
                f"""
                update student_languages
                set {assignments}, updated_at = now()
                where language_id = {where.bind(language_id)}
                """,
                *where.args,
            )
            row = await conn.fetchrow(
                f"select {LANGUAGE_SELECT} from {LANGUAGE_SOURCE} where sl.language_id = $1",
                language_id,
            )
        logger.info("language updated language_id=%s", language_id)
        return dict(row)

    async def delete_language(self, language_id: int) -> dict[str, Any]:
        async with self.database.transaction() as conn:
            row = await conn.fetchrow("delete from student_languages where language_id = $1 returning *", language_id)
            if row is None:
                raise RepositoryNotFoundError(NOT_FOUND)
        logger.info("language deleted language_id=%s", language_id)
        return dict(row)

    async def delete_student_language(self, student_id: str, language: str) -> dict[str, Any]:
        async with self.database.transaction() as conn:
            row = await conn.fetchrow(
                "delete from student_languages where student_id = $1 and lower(language) = lower($2) returning *",
                student_id,
                language,
            )
            if row is None:
                raise RepositoryNotFoundError(NOT_FOUND)
        logger.info("language deleted student_id=%s language=%s", student_id, row["language"])
        return dict(row)

    async def delete_student_languages(self, student_id: str) -> list[dict[str, Any]]:
        async with self.database.transaction() as conn:
            rows = await conn.fetch("delete from student_languages where student_id = $1 returning *", student_id)
            if not rows:
                raise RepositoryNotFoundError("No languages found for this student")
        logger.info("languages deleted student_id=%s count=%s", student_id, len(rows))
        return [dict(row) for row in rows]


@lru_cache
def get_student_language_repository() -> StudentLanguageRepository:
    return StudentLanguageRepository(get_database())
