from __future__ import annotations

import asyncio
from typing import Any

import pytest

from placement_api.services.errors import ErrorKind, RepositoryBusinessRuleError
from placement_api.services.listing import (
    ListQuery,
    WhereBuilder,
    coalesce_assignments,
    contains_pattern,
    fetch_page,
    normalize_sort_order,
    order_clause,
    paginate,
    provided_fields,
    resolve_sort_column,
)

SORT_COLUMNS = {"company_id": "c.company_id", "company_name": "c.company_name"}


class RecordingDatabase:
    def __init__(self, total: int, rows: list[dict[str, Any]]) -> None:
        self.total = total
        self.rows = rows
        self.calls: list[tuple[str, tuple[Any, ...]]] = []

    async def fetchval(self, query: str, *args: Any) -> Any:
        self.calls.append((query, args))
        return self.total

    async def fetch(self, query: str, *args: Any) -> list[dict[str, Any]]:
        self.calls.append((query, args))
        return self.rows


def test_where_builder_numbers_placeholders_in_bind_order() -> None:
    where = WhereBuilder()
    where.equals("j.company_id", 3)
    where.equals("j.status", None)
    where.search(("j.job_title", "c.company_name"), "  engineer ")

    assert where.clause == (
        "where j.company_id = $1 and (j.job_title ilike $2 escape '\\' or c.company_name ilike $2 escape '\\')"
    )
    assert where.args == [3, "%engineer%"]


@pytest.mark.parametrize(
    ("term", "pattern"),
    [
        ("100%", "%100\\%%"),
        ("first_name", "%first\\_name%"),
        ("C:\\temp", "%C:\\\\temp%"),
    ],
)
def test_search_terms_match_wildcards_literally(term: str, pattern: str) -> None:
    where = WhereBuilder()
    where.search(("c.company_name",), term)

    assert contains_pattern(term) == pattern
    assert where.args == [pattern]


def test_where_builder_ignores_blank_search() -> None:
    where = WhereBuilder()
    where.search(("c.company_name",), "   ")

    assert where.clause == ""
    assert where.args == []


def test_unknown_sort_key_falls_back_to_default_column() -> None:
    assert resolve_sort_column("company_name", SORT_COLUMNS, "company_id") == "c.company_name"
    assert resolve_sort_column("password; drop table", SORT_COLUMNS, "company_id") == "c.company_id"
    assert resolve_sort_column(None, SORT_COLUMNS, "company_id") == "c.company_id"


def test_sort_order_is_normalized() -> None:
    assert normalize_sort_order("desc") == "DESC"
    assert normalize_sort_order(None, "DESC") == "DESC"
    assert normalize_sort_order("sideways") == "ASC"


def test_order_clause_combines_column_and_direction() -> None:
    query = ListQuery(sort_by="company_name", sort_order="DESC")
    assert order_clause(query, SORT_COLUMNS, "company_id", "ASC") == "order by c.company_name DESC"


@pytest.mark.parametrize(
    ("total", "page", "limit", "expected_pages", "has_next", "has_prev"),
    [
        (0, 1, 10, 0, False, False),
        (25, 1, 10, 3, True, False),
        (25, 3, 10, 3, False, True),
        (20, 2, 10, 2, False, True),
    ],
)
def test_paginate(total: int, page: int, limit: int, expected_pages: int, has_next: bool, has_prev: bool) -> None:
    pagination = paginate(total, page, limit)

    assert pagination["total_count"] == total
    assert pagination["total_pages"] == expected_pages
    assert pagination["has_next"] is has_next
    assert pagination["has_prev"] is has_prev


def test_provided_fields_treats_blank_strings_as_unset() -> None:
    assert provided_fields({"company_name": "", "website": None, "company_type": "IT"}) == {"company_type": "IT"}


def test_coalesce_assignments_binds_every_column() -> None:
    where = WhereBuilder()
    assignments = coalesce_assignments(("company_name", "company_type"), {"company_type": "IT"}, where)

    assert assignments == "company_name = coalesce($1, company_name), company_type = coalesce($2, company_type)"
    assert where.args == [None, "IT"]


def test_coalesce_assignments_rejects_empty_update() -> None:
    with pytest.raises(RepositoryBusinessRuleError) as exc_info:
        coalesce_assignments(("company_name",), {"company_name": ""}, WhereBuilder())

    assert exc_info.value.kind is ErrorKind.BUSINESS_RULE_VIOLATION
    assert exc_info.value.message == "No fields provided for update"


def test_fetch_page_counts_with_filters_only_and_pages_with_limit_offset() -> None:
    database = RecordingDatabase(total=42, rows=[{"company_id": 11}])
    where = WhereBuilder()
    where.equals("c.company_type", "IT")

    rows, total = asyncio.run(
        fetch_page(
            database,  # type: ignore[arg-type]
            select="c.*",
            source="companies c",
            where=where,
            order="order by c.company_id ASC",
            query=ListQuery(page=2, limit=10),
        )
    )

    assert total == 42
    assert rows == [{"company_id": 11}]
    count_query, count_args = database.calls[0]
    page_query, page_args = database.calls[1]
    assert count_query == "select count(*) from companies c where c.company_type = $1"
    assert count_args == ("IT",)
    assert page_query.endswith("order by c.company_id ASC limit $2 offset $3")
    assert page_args == ("IT", 10, 10)


def test_contains_any_ors_escaped_terms_and_skips_blanks() -> None:
    where = WhereBuilder()
    where.equals("sp.student_id", "S001")
    where.contains_any("sp.tools_used", ["React", " ", "50%"])

    assert where.clause == (
        "where sp.student_id = $1 and (sp.tools_used ilike $2 escape '\\' or sp.tools_used ilike $3 escape '\\')"
    )
    assert where.args == ["S001", "%React%", "%50\\%%"]


def test_contains_any_without_terms_adds_nothing() -> None:
    where = WhereBuilder()
    where.contains_any("sp.tools_used", [])

    assert where.clause == ""
