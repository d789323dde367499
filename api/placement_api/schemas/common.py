from decimal import ROUND_HALF_UP, Decimal
from typing import Annotated, Any, Generic, TypeVar

from fastapi import Query
from pydantic import AfterValidator, BaseModel, ConfigDict, Field

from placement_api.services.listing import ListQuery, paginate

T = TypeVar("T")

EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"
PHONE_PATTERN = r"^[0-9]{10}$"
URL_PATTERN = r"^https?://\S+$"
STUDENT_ID_PATTERN = r"^[A-Za-z0-9]+$"

# Update payloads accept a blank string as "leave unchanged".
BLANK_OR_EMAIL_PATTERN = r"^([^@\s]+@[^@\s]+\.[^@\s]+)?$"
BLANK_OR_PHONE_PATTERN = r"^([0-9]{10})?$"
BLANK_OR_URL_PATTERN = r"^(https?://\S+)?$"
SORT_ORDER_PATTERN = r"^(?i:asc|desc)$"

_CENTS = Decimal("0.01")


def _two_places(value: Decimal | None) -> Decimal | None:
    if value is None:
        return None
    return value.quantize(_CENTS, rounding=ROUND_HALF_UP)


def decimal_range(minimum: str, maximum: str) -> Any:
    return Annotated[Decimal, Field(ge=Decimal(minimum), le=Decimal(maximum)), AfterValidator(_two_places)]


Percent = decimal_range("0", "100")
Cgpa = decimal_range("0", "10")
Email = Annotated[str, Field(max_length=150, pattern=EMAIL_PATTERN)]
Phone = Annotated[str, Field(pattern=PHONE_PATTERN)]
WebUrl = Annotated[str, Field(max_length=500, pattern=URL_PATTERN)]
StudentId = Annotated[str, Field(min_length=1, max_length=50, pattern=STUDENT_ID_PATTERN)]


class RequestModel(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)


class OutModel(BaseModel):
    model_config = ConfigDict(extra="ignore")


class Pagination(BaseModel):
    current_page: int
    total_pages: int
    total_count: int
    limit: int
    has_next: bool
    has_prev: bool


class Envelope(BaseModel, Generic[T]):
    success: bool = True
    data: T | None = None
    message: str


def list_query(
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=10, ge=1, le=100),
    sort_by: str | None = Query(default=None, max_length=64),
    sort_order: str | None = Query(default=None, pattern=SORT_ORDER_PATTERN),
    search: str | None = Query(default=None, max_length=100),
) -> ListQuery:
    if search is not None:
        search = search.strip() or None
    return ListQuery(
        page=page,
        limit=limit,
        sort_by=sort_by,
        sort_order=sort_order.upper() if sort_order else None,
        search=search,
    )


def pagination_for(total_count: int, query: ListQuery) -> Pagination:
    return Pagination(**paginate(total_count, query.page, query.limit))


class ImportRequest(BaseModel):
    records: list[dict[str, Any]] = Field(min_length=1, max_length=5000)


class ImportRowError(BaseModel):
    row: int
    student_id: str | None = None
    errors: list[str]


class ImportResult(BaseModel, Generic[T]):
    total_rows: int
    inserted: int
    failed: int
    records: list[T]
    errors: list[ImportRowError]
