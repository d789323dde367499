from fastapi import APIRouter, Depends, Path, status as http_status

from placement_api.api.errors import http_error
from placement_api.schemas.common import STUDENT_ID_PATTERN, Envelope, list_query, pagination_for
from placement_api.schemas.student_academics import (
    StudentAcademicsCreateRequest,
    StudentAcademicsListData,
    StudentAcademicsOut,
    StudentAcademicsUpdateRequest,
)
from placement_api.services.errors import RepositoryError
from placement_api.services.listing import ListQuery
from placement_api.services.student_academics import get_student_academics_repository

router = APIRouter()


@router.post("", response_model=Envelope[StudentAcademicsOut], status_code=http_status.HTTP_201_CREATED)
async def create_student_academics(
    payload: StudentAcademicsCreateRequest,
    repository=Depends(get_student_academics_repository),
) -> Envelope[StudentAcademicsOut]:
    try:
        row = await repository.create_academics(payload.model_dump())
    except RepositoryError as exc:
        raise http_error(exc) from exc
    return Envelope(data=StudentAcademicsOut(**row), message="Academic record created successfully")


@router.get("", response_model=Envelope[StudentAcademicsListData])
async def list_student_academics(
    query: ListQuery = Depends(list_query),
    repository=Depends(get_student_academics_repository),
) -> Envelope[StudentAcademicsListData]:
    try:
        rows, total = await repository.list_academics(query)
    except RepositoryError as exc:
        raise http_error(exc) from exc
    data = StudentAcademicsListData(
        student_academics=[StudentAcademicsOut(**row) for row in rows],
        pagination=pagination_for(total, query),
    )
    return Envelope(data=data, message="Academic records fetched successfully")


@router.get("/{student_id}", response_model=Envelope[StudentAcademicsOut])
async def get_student_academics(
    student_id: str = Path(max_length=50, pattern=STUDENT_ID_PATTERN),
    repository=Depends(get_student_academics_repository),
) -> Envelope[StudentAcademicsOut]:
    try:
        row = await repository.get_academics(student_id)
    except RepositoryError as exc:
        raise http_error(exc) from exc
    return Envelope(data=StudentAcademicsOut(**row), message="Academic record fetched successfully")


@router.put("/{student_id}", response_model=Envelope[StudentAcademicsOut])
@router.patch("/{student_id}", response_model=Envelope[StudentAcademicsOut])
async def update_student_academics(
    payload: StudentAcademicsUpdateRequest,
    student_id: str = Path(max_length=50, pattern=STUDENT_ID_PATTERN),
    repository=Depends(get_student_academics_repository),
) -> Envelope[StudentAcademicsOut]:
    try:
        row = await repository.update_academics(student_id, payload.model_dump(exclude_unset=True))
    except RepositoryError as exc:
        raise http_error(exc) from exc
    return Envelope(data=StudentAcademicsOut(**row), message="Academic record updated successfully")


@router.delete("/{student_id}", response_model=Envelope[StudentAcademicsOut])
async def delete_student_academics(
    student_id: str = Path(max_length=50, pattern=STUDENT_ID_PATTERN),
    repository=Depends(get_student_academics_repository),
) -> Envelope[StudentAcademicsOut]:
    try:
        row = await repository.delete_academics(student_id)
    except RepositoryError as exc:
        raise http_error(exc) from exc
    return Envelope(data=StudentAcademicsOut(**row), message="Academic record deleted successfully")
