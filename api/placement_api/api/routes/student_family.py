from fastapi import APIRouter, Depends, Path, Response, status as http_status

from placement_api.api.errors import http_error
from placement_api.api.imports import run_import
from placement_api.schemas.common import (
    STUDENT_ID_PATTERN,
    Envelope,
    ImportRequest,
    ImportResult,
    list_query,
    pagination_for,
)
from placement_api.schemas.student_family import (
    StudentFamilyCreateRequest,
    StudentFamilyListData,
    StudentFamilyOut,
    StudentFamilyUpdateRequest,
)
from placement_api.services.errors import RepositoryError
from placement_api.services.listing import ListQuery
from placement_api.services.student_family import get_student_family_repository

router = APIRouter()


@router.post("", response_model=Envelope[StudentFamilyOut], status_code=http_status.HTTP_201_CREATED)
async def create_student_family(
    payload: StudentFamilyCreateRequest,
    repository=Depends(get_student_family_repository),
) -> Envelope[StudentFamilyOut]:
    try:
        row = await repository.create_family(payload.model_dump())
    except RepositoryError as exc:
        raise http_error(exc) from exc
    return Envelope(data=StudentFamilyOut(**row), message="Family record created successfully")


@router.post(
    "/import",
    response_model=Envelope[ImportResult[StudentFamilyOut]],
    status_code=http_status.HTTP_201_CREATED,
)
async def import_student_family(
    payload: ImportRequest,
    response: Response,
    repository=Depends(get_student_family_repository),
) -> Envelope[ImportResult[StudentFamilyOut]]:
    return await run_import(
        payload,
        response,
        create_model=StudentFamilyCreateRequest,
        out_model=StudentFamilyOut,
        import_rows=repository.import_families,
        noun="family",
    )


@router.get("", response_model=Envelope[StudentFamilyListData])
async def list_student_family(
    query: ListQuery = Depends(list_query),
    repository=Depends(get_student_family_repository),
) -> Envelope[StudentFamilyListData]:
    try:
        rows, total = await repository.list_families(query)
    except RepositoryError as exc:
        raise http_error(exc) from exc
    data = StudentFamilyListData(
        student_family=[StudentFamilyOut(**row) for row in rows],
        pagination=pagination_for(total, query),
    )
    return Envelope(data=data, message="Family records fetched successfully")


@router.get("/{student_id}", response_model=Envelope[StudentFamilyOut])
async def get_student_family(
    student_id: str = Path(max_length=50, pattern=STUDENT_ID_PATTERN),
    repository=Depends(get_student_family_repository),
) -> Envelope[StudentFamilyOut]:
    try:
        row = await repository.get_family(student_id)
    except RepositoryError as exc:
        raise http_error(exc) from exc
    return Envelope(data=StudentFamilyOut(**row), message="Family record fetched successfully")


@router.put("/{student_id}", response_model=Envelope[StudentFamilyOut])
@router.patch("/{student_id}", response_model=Envelope[StudentFamilyOut])
async def update_student_family(
    payload: StudentFamilyUpdateRequest,
    student_id: str = Path(max_length=50, pattern=STUDENT_ID_PATTERN),
    repository=Depends(get_student_family_repository),
) -> Envelope[StudentFamilyOut]:
    try:
        row = await repository.update_family(student_id, payload.model_dump(exclude_unset=True))
    except RepositoryError as exc:
        raise http_error(exc) from exc
    return Envelope(data=StudentFamilyOut(**row), message="Family record updated successfully")


@router.delete("/{student_id}", response_model=Envelope[StudentFamilyOut])
async def delete_student_family(
    student_id: str = Path(max_length=50, pattern=STUDENT_ID_PATTERN),
    repository=Depends(get_student_family_repository),
) -> Envelope[StudentFamilyOut]:
    try:
        row = await repository.delete_family(student_id)
    except RepositoryError as exc:
        raise http_error(exc) from exc
    return Envelope(data=StudentFamilyOut(**row), message="Family record deleted successfully")
