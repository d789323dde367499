import logging
from collections.abc import Awaitable, Callable
from typing import Any

from fastapi import Response, status as http_status
from pydantic import BaseModel, ValidationError

from placement_api.api.errors import http_error
from placement_api.schemas.common import Envelope, ImportRequest, ImportResult, ImportRowError
from placement_api.services.errors import RepositoryError

logger = logging.getLogger(__name__)

# Row 1 of the uploaded sheet is the header.
FIRST_DATA_ROW = 2

ImportRows = Callable[
    [list[tuple[int, dict[str, Any]]]],
    Awaitable[tuple[list[dict[str, Any]], list[dict[str, Any]]]],
]


def row_errors(exc: ValidationError) -> list[str]:
    messages = []
    for error in exc.errors():
        field = ".".join(str(part) for part in error.get("loc", ())) or "record"
        message = str(error.get("msg", "invalid value")).removeprefix("Value error, ")
        messages.append(f"{field}: {message}")
    return messages


def validate_records(
    create_model: type[BaseModel],
    records: list[dict[str, Any]],
) -> tuple[list[tuple[int, dict[str, Any]]], list[ImportRowError]]:
    """Validate every record with the single-create schema, keeping spreadsheet row numbers."""
    valid: list[tuple[int, dict[str, Any]]] = []
    errors: list[ImportRowError] = []
    for index, record in enumerate(records):
        row_number = index + FIRST_DATA_ROW
        try:
            payload = create_model.model_validate(record)
        except ValidationError as exc:
            student_id = record.get("student_id")
            errors.append(
                ImportRowError(
                    row=row_number,
                    student_id=str(student_id) if student_id is not None else None,
                    errors=row_errors(exc),
                )
            )
            continue
        valid.append((row_number, payload.model_dump()))
    return valid, errors


async def run_import(
    payload: ImportRequest,
    response: Response,
    *,
    create_model: type[BaseModel],
    out_model: type[BaseModel],
    import_rows: ImportRows,
    noun: str,
) -> Envelope[Any]:
    valid, errors = validate_records(create_model, payload.records)
    inserted: list[dict[str, Any]] = []
    if valid:
        try:
            inserted, failures = await import_rows(valid)
        except RepositoryError as exc:
            raise http_error(exc) from exc
        errors.extend(ImportRowError(**failure) for failure in failures)
    errors.sort(key=lambda error: error.row)
    result = ImportResult[out_model](
        total_rows=len(payload.records),
        inserted=len(inserted),
        failed=len(errors),
        records=[out_model(**row) for row in inserted],
        errors=errors,
    )
    logger.info("%s import rows=%s inserted=%s failed=%s", noun, result.total_rows, result.inserted, result.failed)
    if not inserted:
        response.status_code = http_status.HTTP_400_BAD_REQUEST
        return Envelope(success=False, data=result, message=f"No {noun} records were imported")
    return Envelope(data=result, message=f"Imported {result.inserted} of {result.total_rows} {noun} records")
