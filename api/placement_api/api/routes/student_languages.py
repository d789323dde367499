from fastapi import APIRouter, Depends, Path, Query, status as http_status

from placement_api.api.errors import http_error
from placement_api.schemas.common import STUDENT_ID_PATTERN, Envelope, list_query, pagination_for
from placement_api.schemas.student_languages import (
    ALLOWED_LANGUAGES,
    StudentLanguageBulkRequest,
    StudentLanguageCreateRequest,
    StudentLanguageListData,
    StudentLanguageOut,
    StudentLanguageUpdateRequest,
)
from placement_api.services.errors import RepositoryError
from placement_api.services.listing import ListQuery
from placement_api.services.student_languages import get_student_language_repository

router = APIRouter()


@router.get("/allowed-languages", response_model=Envelope[list[str]])
async def allowed_languages() -> Envelope[list[str]]:
    return Envelope(data=list(ALLOWED_LANGUAGES), message="Allowed languages fetched successfully")


@router.post("", response_model=Envelope[StudentLanguageOut], status_code=http_status.HTTP_201_CREATED)
async def create_student_language(
    payload: StudentLanguageCreateRequest,
    repository=Depends(get_student_language_repository),
) -> Envelope[StudentLanguageOut]:
    try:
        row = await repository.create_language(payload.model_dump())
    except RepositoryError as exc:
        raise http_error(exc) from exc
    return Envelope(data=StudentLanguageOut(**row), message="Language added successfully")


@router.post("/bulk", response_model=Envelope[list[StudentLanguageOut]], status_code=http_status.HTTP_201_CREATED)
async def upsert_student_languages(
    payload: StudentLanguageBulkRequest,
    repository=Depends(get_student_language_repository),
) -> Envelope[list[StudentLanguageOut]]:
    # last entry wins when the same language is sent twice
    levels = {item.language: item.level for item in payload.languages}
    languages = [{"language": language, "level": level} for language, level in levels.items()]
    try:
        rows = await repository.upsert_languages(payload.student_id, languages)
    except RepositoryError as exc:
        raise http_error(exc) from exc
    return Envelope(
        data=[StudentLanguageOut(**row) for row in rows],
        message=f"{len(rows)} languages saved successfully",
    )


@router.get("", response_model=Envelope[StudentLanguageListData])
async def list_student_languages(
    query: ListQuery = Depends(list_query),
    student_id: str | None = Query(default=None, max_length=50, pattern=STUDENT_ID_PATTERN),
    language: str | None = Query(default=None, max_length=50),
    repository=Depends(get_student_language_repository),
) -> Envelope[StudentLanguageListData]:
    try:
        rows, total = await repository.list_languages(query, student_id=student_id, language=language)
    except RepositoryError as exc:
        raise http_error(exc) from exc
    data = StudentLanguageListData(
        student_languages=[StudentLanguageOut(**row) for row in rows],
        pagination=pagination_for(total, query),
    )
    return Envelope(data=data, message="Languages fetched successfully")


@router.get("/student/{student_id}", response_model=Envelope[list[StudentLanguageOut]])
async def get_student_languages(
    student_id: str = Path(max_length=50, pattern=STUDENT_ID_PATTERN),
    repository=Depends(get_student_language_repository),
) -> Envelope[list[StudentLanguageOut]]:
    try:
        rows = await repository.get_student_languages(student_id)
    except RepositoryError as exc:
        raise http_error(exc) from exc
    return Envelope(data=[StudentLanguageOut(**row) for row in rows], message="Student languages fetched successfully")


@router.delete("/student/{student_id}/{language}", response_model=Envelope[StudentLanguageOut])
async def delete_student_language(
    student_id: str = Path(max_length=50, pattern=STUDENT_ID_PATTERN),
    language: str = Path(min_length=1, max_length=50),
    repository=Depends(get_student_language_repository),
) -> Envelope[StudentLanguageOut]:
    try:
        row = await repository.delete_student_language(student_id, language)
    except RepositoryError as exc:
        raise http_error(exc) from exc
    return Envelope(data=StudentLanguageOut(**row), message="Language removed successfully")


@router.delete("/student/{student_id}", response_model=Envelope[list[StudentLanguageOut]])
async def delete_student_languages(
    student_id: str = Path(max_length=50, pattern=STUDENT_ID_PATTERN),
    repository=Depends(get_student_language_repository),
) -> Envelope[list[StudentLanguageOut]]:
    try:
        rows = await repository.delete_student_languages(student_id)
    except RepositoryError as exc:
        raise http_error(exc) from exc
    return Envelope(
        data=[StudentLanguageOut(**row) for row in rows],
        message=f"Removed {len(rows)} languages for student",
    )


@router.get("/{language_id}", response_model=Envelope[StudentLanguageOut])
async def get_student_language(
    language_id: int = Path(gt=0),
    repository=Depends(get_student_language_repository),
) -> Envelope[StudentLanguageOut]:
    try:
        row = await repository.get_language(language_id)
    except RepositoryError as exc:
        raise http_error(exc) from exc
    return Envelope(data=StudentLanguageOut(**row), message="Language fetched successfully")


@router.put("/{language_id}", response_model=Envelope[StudentLanguageOut])
@router.patch("/{language_id}", response_model=Envelope[StudentLanguageOut])
async def update_student_language(
    payload: StudentLanguageUpdateRequest,
    language_id: int = Path(gt=0),
    repository=Depends(get_student_language_repository),
) -> Envelope[StudentLanguageOut]:
    try:
        row = await repository.update_language(language_id, payload.model_dump(exclude_unset=True))
    except RepositoryError as exc:
        raise http_error(exc) from exc
    return Envelope(data=StudentLanguageOut(**row), message="Language updated successfully")


@router.delete("/{language_id}", response_model=Envelope[StudentLanguageOut])
async def delete_student_language_record(
    language_id: int = Path(gt=0),
    repository=Depends(get_student_language_repository),
) -> Envelope[StudentLanguageOut]:
    try:
        row = await repository.delete_language(language_id)
    except RepositoryError as exc:
        raise http_error(exc) from exc
    return Envelope(data=StudentLanguageOut(**row), message="Language deleted successfully")
