from fastapi import APIRouter, Depends, Path, Query, status as http_status

from placement_api.api.errors import http_error
from placement_api.schemas.common import STUDENT_ID_PATTERN, Envelope, list_query, pagination_for
from placement_api.schemas.students import StudentCreateRequest, StudentListData, StudentOut, StudentUpdateRequest
from placement_api.services.errors import RepositoryError
from placement_api.services.listing import ListQuery
from placement_api.services.students import get_student_repository

router = APIRouter()


@router.post("", response_model=Envelope[StudentOut], status_code=http_status.HTTP_201_CREATED)
async def create_student(
    payload: StudentCreateRequest,
    repository=Depends(get_student_repository),
) -> Envelope[StudentOut]:
    try:
        row = await repository.create_student(payload.model_dump())
    except RepositoryError as exc:
        raise http_error(exc) from exc
    return Envelope(data=StudentOut(**row), message="Student created successfully")


@router.get("", response_model=Envelope[StudentListData])
async def list_students(
    query: ListQuery = Depends(list_query),
    branch: str | None = Query(default=None, max_length=100),
    graduation_year: int | None = Query(default=None, ge=1900, le=2100),
    repository=Depends(get_student_repository),
) -> Envelope[StudentListData]:
    try:
        rows, total = await repository.list_students(query, branch=branch, graduation_year=graduation_year)
    except RepositoryError as exc:
        raise http_error(exc) from exc
    data = StudentListData(students=[StudentOut(**row) for row in rows], pagination=pagination_for(total, query))
    return Envelope(data=data, message="Students fetched successfully")


@router.get("/{student_id}", response_model=Envelope[StudentOut])
async def get_student(
    student_id: str = Path(max_length=50, pattern=STUDENT_ID_PATTERN),
    repository=Depends(get_student_repository),
) -> Envelope[StudentOut]:
    try:
        row = await repository.get_student(student_id)
    except RepositoryError as exc:
        raise http_error(exc) from exc
    return Envelope(data=StudentOut(**row), message="Student fetched successfully")


@router.put("/{student_id}", response_model=Envelope[StudentOut])
@router.patch("/{student_id}", response_model=Envelope[StudentOut])
async def update_student(
    payload: StudentUpdateRequest,
    student_id: str = Path(max_length=50, pattern=STUDENT_ID_PATTERN),
    repository=Depends(get_student_repository),
) -> Envelope[StudentOut]:
    try:
        row = await repository.update_student(student_id, payload.model_dump(exclude_unset=True))
    except RepositoryError as exc:
        raise http_error(exc) from exc
    return Envelope(data=StudentOut(**row), message="Student updated successfully")


@router.delete("/{student_id}", response_model=Envelope[StudentOut])
async def delete_student(
    student_id: str = Path(max_length=50, pattern=STUDENT_ID_PATTERN),
    repository=Depends(get_student_repository),
) -> Envelope[StudentOut]:
    try:
        row = await repository.delete_student(student_id)
    except RepositoryError as exc:
        raise http_error(exc) from exc
    return Envelope(data=StudentOut(**row), message="Student deleted successfully")
