from __future__ import annotations

import logging
from functools import lru_cache
from typing import Any

from placement_api.services.database import Database, get_database
from placement_api.services.errors import RepositoryNotFoundError
from placement_api.services.imports import insert_each
from placement_api.services.listing import ListQuery, WhereBuilder, coalesce_assignments, fetch_page, order_clause

logger = logging.getLogger(__name__)

DOCUMENT_COLUMNS = ("document_type", "file_path")
DOCUMENT_SELECT = "sd.*, s.full_name as student_name"
DOCUMENT_SOURCE = "student_documents sd join students s on s.student_id = sd.student_id"
DOCUMENT_SORT_COLUMNS = {
    "doc_id": "sd.doc_id",
    "student_id": "sd.student_id",
    "document_type": "sd.document_type",
    "uploaded_at": "sd.uploaded_at",
}
DOCUMENT_SEARCH_COLUMNS = ("sd.document_type", "sd.student_id", "s.full_name")
NOT_FOUND = "Document not found"
STUDENT_NOT_FOUND = "Student not found"


class StudentDocumentRepository:
    def __init__(self, database: Database) -> None:
        self.database = database

    async def _insert(self, conn, fields: dict[str, Any]) -> dict[str, Any]:
        doc_id = await conn.fetchval(
            """
            insert into student_documents (student_id, document_type, file_path, uploaded_at)
            values ($1, $2, $3, coalesce($4, now()))
            returning doc_id
            """,
            fields["student_id"],
            fields["document_type"],
            fields.get("file_path"),
            fields.get("uploaded_at"),
        )
        row = await conn.fetchrow(f"select {DOCUMENT_SELECT} from {DOCUMENT_SOURCE} where sd.doc_id = $1", doc_id)
        return dict(row)

    async def create_document(self, fields: dict[str, Any]) -> dict[str, Any]:
        async with self.database.transaction(reference_message=STUDENT_NOT_FOUND) as conn:
            if await conn.fetchval("select 1 from students where student_id = $1", fields["student_id"]) is None:
                raise RepositoryNotFoundError(STUDENT_NOT_FOUND)
            row = await self._insert(conn, fields)
        logger.info("document created doc_id=%s student_id=%s", row["doc_id"], row["student_id"])
        return row

    async def import_documents(
        self,
        records: list[tuple[int, dict[str, Any]]],
    ) -> tuple[list[dict[str, Any]], list[dict[str, Any]]]:
        async with self.database.transaction() as conn:
            inserted, failures = await insert_each(conn, records, self._insert, reference_message=STUDENT_NOT_FOUND)
        logger.info("document import finished inserted=%s failed=%s", len(inserted), len(failures))
        return inserted, failures

    async def list_documents(
        self,
        query: ListQuery,
        *,
        student_id: str | None = None,
        document_type: str | None = None,
    ) -> tuple[list[dict[str, Any]], int]:
        where = WhereBuilder()
        where.equals("sd.student_id", student_id)
        where.equals("sd.document_type", document_type)
        where.search(DOCUMENT_SEARCH_COLUMNS, query.search)
        return await fetch_page(
            self.database,
            select=DOCUMENT_SELECT,
            source=DOCUMENT_SOURCE,
            where=where,
            order=order_clause(query, DOCUMENT_SORT_COLUMNS, "uploaded_at", "DESC"),
            query=query,
        )

    async def get_document(self, doc_id: int) -> dict[str, Any]:
        row = await self.database.fetchrow(f"select {DOCUMENT_SELECT} from {DOCUMENT_SOURCE} where sd.doc_id = $1", doc_id)
        if row is None:
            raise RepositoryNotFoundError(NOT_FOUND)
        return dict(row)

    async def update_document(self, doc_id: int, fields: dict[str, Any]) -> dict[str, Any]:
        where = WhereBuilder()
        assignments = coalesce_assignments(DOCUMENT_COLUMNS, fields, where)
        async with self.database.transaction() as conn:
            updated = await conn.fetchval(
                f"""
                update student_documents
                set {assignments}, updated_at = now()
                where doc_id = {where.bind(doc_id)}
                returning doc_id
                """,
                *where.args,
            )
            if updated is None:
                raise RepositoryNotFoundError(NOT_FOUND)
            row = await conn.fetchrow(f"select {DOCUMENT_SELECT} from {DOCUMENT_SOURCE} where sd.doc_id = $1", doc_id)
        logger.info("document updated doc_id=%s", doc_id)
        return dict(row)

    async def delete_document(self, doc_id: int) -> dict[str, Any]:
        async with self.database.transaction() as conn:
            row = await conn.fetchrow("delete from student_documents where doc_id = $1 returning *", doc_id)
            if row is None:
                raise RepositoryNotFoundError(NOT_FOUND)
        logger.info("document deleted doc_id=%s", doc_id)
        return dict(row)


@lru_cache
def get_student_document_repository() -> StudentDocumentRepository:
    return StudentDocumentRepository(get_database())
