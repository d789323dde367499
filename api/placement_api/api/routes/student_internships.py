from fastapi import APIRouter, Depends, Path, status as http_status

from placement_api.api.errors import http_error
from placement_api.schemas.common import STUDENT_ID_PATTERN, Envelope, list_query, pagination_for
from placement_api.schemas.student_internships import (
    StudentInternshipCreateRequest,
    StudentInternshipListData,
    StudentInternshipOut,
    StudentInternshipUpdateRequest,
)
from placement_api.services.errors import RepositoryError
from placement_api.services.listing import ListQuery
from placement_api.services.student_internships import get_student_internship_repository

router = APIRouter()


@router.post("", response_model=Envelope[StudentInternshipOut], status_code=http_status.HTTP_201_CREATED)
async def create_student_internship(
    payload: StudentInternshipCreateRequest,
    repository=Depends(get_student_internship_repository),
) -> Envelope[StudentInternshipOut]:
    try:
        row = await repository.create_internship(payload.model_dump())
    except RepositoryError as exc:
        raise http_error(exc) from exc
    return Envelope(data=StudentInternshipOut(**row), message="Internship created successfully")


@router.get("", response_model=Envelope[StudentInternshipListData])
async def list_student_internships(
    query: ListQuery = Depends(list_query),
    repository=Depends(get_student_internship_repository),
) -> Envelope[StudentInternshipListData]:
    try:
        rows, total = await repository.list_internships(query)
    except RepositoryError as exc:
        raise http_error(exc) from exc
    data = StudentInternshipListData(
        student_internships=[StudentInternshipOut(**row) for row in rows],
        pagination=pagination_for(total, query),
    )
    return Envelope(data=data, message="Internships fetched successfully")


@router.get("/student/{student_id}", response_model=Envelope[StudentInternshipListData])
async def list_internships_for_student(
    student_id: str = Path(max_length=50, pattern=STUDENT_ID_PATTERN),
    query: ListQuery = Depends(list_query),
    repository=Depends(get_student_internship_repository),
) -> Envelope[StudentInternshipListData]:
    try:
        rows, total = await repository.list_internships(query, student_id=student_id)
    except RepositoryError as exc:
        raise http_error(exc) from exc
    data = StudentInternshipListData(
        student_internships=[StudentInternshipOut(**row) for row in rows],
        pagination=pagination_for(total, query),
    )
    return Envelope(data=data, message="Student internships fetched successfully")


@router.get("/{internship_id}", response_model=Envelope[StudentInternshipOut])
async def get_student_internship(
    internship_id: int = Path(gt=0),
    repository=Depends(get_student_internship_repository),
) -> Envelope[StudentInternshipOut]:
    try:
        row = await repository.get_internship(internship_id)
    except RepositoryError as exc:
        raise http_error(exc) from exc
    return Envelope(data=StudentInternshipOut(**row), message="Internship fetched successfully")


@router.put("/{internship_id}", response_model=Envelope[StudentInternshipOut])
@router.patch("/{internship_id}", response_model=Envelope[StudentInternshipOut])
async def update_student_internship(
    payload: StudentInternshipUpdateRequest,
    internship_id: int = Path(gt=0),
    repository=Depends(get_student_internship_repository),
) -> Envelope[StudentInternshipOut]:
    try:
        row = await repository.update_internship(internship_id, payload.model_dump(exclude_unset=True))
    except RepositoryError as exc:
        raise http_error(exc) from exc
    return Envelope(data=StudentInternshipOut(**row), message="Internship updated successfully")


@router.delete("/{internship_id}", response_model=Envelope[StudentInternshipOut])
async def delete_student_internship(
    internship_id: int = Path(gt=0),
    repository=Depends(get_student_internship_repository),
) -> Envelope[StudentInternshipOut]:
    try:
        row = await repository.delete_internship(internship_id)
    except RepositoryError as exc:
        raise http_error(exc) from exc
    return Envelope(data=StudentInternshipOut(**row), message="Internship deleted successfully")
