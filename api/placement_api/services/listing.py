from __future__ import annotations

import math
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from placement_api.services.errors import RepositoryBusinessRuleError

if TYPE_CHECKING:
    from placement_api.services.database import Database

SORT_ORDERS = {"ASC", "DESC"}
_LIKE_SPECIALS = str.maketrans({"\\": "\\\\", "%": "\\%", "_": "\\_"})


def contains_pattern(term: str) -> str:
    """Substring pattern for `ilike ... escape '\\'` with wildcards in `term` matched literally."""
    return f"%{term.strip().translate(_LIKE_SPECIALS)}%"


@dataclass(slots=True)
class ListQuery:
    page: int = 1
    limit: int = 10
    sort_by: str | None = None
    sort_order: str | None = None
    search: str | None = None

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


class WhereBuilder:
    """Collects AND-ed predicates and their positional arguments.

    The same instance feeds the COUNT query and the page query, so both see
    identical filters.
    """

    def __init__(self) -> None:
        self.conditions: list[str] = []
        self.args: list[Any] = []

    def bind(self, value: Any) -> str:
        self.args.append(value)
        return f"${len(self.args)}"

    def equals(self, column: str, value: Any) -> None:
        if value is None:
            return
        self.conditions.append(f"{column} = {self.bind(value)}")

    def search(self, columns: Sequence[str], term: str | None) -> None:
        if term is None or not term.strip():
            return
        placeholder = self.bind(contains_pattern(term))
        matches = [f"{column} ilike {placeholder} escape '\\'" for column in columns]
        self.conditions.append("(" + " or ".join(matches) + ")")

    def contains_any(self, column: str, terms: Sequence[str]) -> None:
        matches = [f"{column} ilike {self.bind(contains_pattern(term))} escape '\\'" for term in terms if term.strip()]
        if matches:
            self.conditions.append("(" + " or ".join(matches) + ")")

    @property
    def clause(self) -> str:
        if not self.conditions:
            return ""
        return "where " + " and ".join(self.conditions)


def resolve_sort_column(sort_by: str | None, allowed: Mapping[str, str], default: str) -> str:
    """Map a client sort key onto an allow-listed SQL expression.

    Unknown keys fall back to the default column; client text never reaches
    the ORDER BY clause.
    """
    if sort_by is not None and sort_by in allowed:
        return allowed[sort_by]
    return allowed[default]


def normalize_sort_order(sort_order: str | None, default: str = "ASC") -> str:
    if sort_order is None:
        return default
    normalized = sort_order.strip().upper()
    if normalized not in SORT_ORDERS:
        return default
    return normalized


def order_clause(query: ListQuery, allowed: Mapping[str, str], default_column: str, default_order: str) -> str:
    column = resolve_sort_column(query.sort_by, allowed, default_column)
    direction = normalize_sort_order(query.sort_order, default_order)
    return f"order by {column} {direction}"


def paginate(total_count: int, page: int, limit: int) -> dict[str, Any]:
    total_pages = math.ceil(total_count / limit) if limit > 0 else 0
    return {
        "current_page": page,
        "total_pages": total_pages,
        "total_count": total_count,
        "limit": limit,
        "has_next": page < total_pages,
        "has_prev": page > 1,
    }


def provided_fields(fields: Mapping[str, Any]) -> dict[str, Any]:
    """Drop keys whose value means "leave the stored value alone"."""
    return {key: value for key, value in fields.items() if value is not None and value != ""}


def coalesce_assignments(columns: Iterable[str], fields: Mapping[str, Any], where: WhereBuilder) -> str:
    values = provided_fields(fields)
    if not values:
        raise RepositoryBusinessRuleError("No fields provided for update")
    return ", ".join(f"{column} = coalesce({where.bind(values.get(column))}, {column})" for column in columns)


async def fetch_page(
    database: Database,
    *,
    select: str,
    source: str,
    where: WhereBuilder,
    order: str,
    query: ListQuery,
) -> tuple[list[dict[str, Any]], int]:
    """Run the COUNT and page queries for one filtered listing."""
    total = await database.fetchval(f"select count(*) from {source} {where.clause}", *where.args)
    limit = where.bind(query.limit)
    offset = where.bind(query.offset)
    rows = await database.fetch(
        f"select {select} from {source} {where.clause} {order} limit {limit} offset {offset}",
        *where.args,
    )
    return [dict(row) for row in rows], int(total or 0)
