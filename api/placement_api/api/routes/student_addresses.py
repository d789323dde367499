from fastapi import APIRouter, Depends, Path, Query, status as http_status

from placement_api.api.errors import http_error
from placement_api.schemas.common import STUDENT_ID_PATTERN, Envelope, list_query, pagination_for
from placement_api.schemas.student_addresses import (
    StudentAddressCreateRequest,
    StudentAddressListData,
    StudentAddressOut,
    StudentAddressUpdateRequest,
)
from placement_api.services.errors import RepositoryError
from placement_api.services.listing import ListQuery
from placement_api.services.student_addresses import get_student_address_repository

router = APIRouter()


@router.post("", response_model=Envelope[StudentAddressOut], status_code=http_status.HTTP_201_CREATED)
async def create_student_address(
    payload: StudentAddressCreateRequest,
    repository=Depends(get_student_address_repository),
) -> Envelope[StudentAddressOut]:
    try:
        row = await repository.create_address(payload.model_dump())
    except RepositoryError as exc:
        raise http_error(exc) from exc
    return Envelope(data=StudentAddressOut(**row), message="Student address created successfully")


@router.get("", response_model=Envelope[StudentAddressListData])
async def list_student_addresses(
    query: ListQuery = Depends(list_query),
    student_id: str | None = Query(default=None, max_length=50, pattern=STUDENT_ID_PATTERN),
    repository=Depends(get_student_address_repository),
) -> Envelope[StudentAddressListData]:
    try:
        rows, total = await repository.list_addresses(query, student_id=student_id)
    except RepositoryError as exc:
        raise http_error(exc) from exc
    data = StudentAddressListData(
        student_addresses=[StudentAddressOut(**row) for row in rows],
        pagination=pagination_for(total, query),
    )
    return Envelope(data=data, message="Student addresses fetched successfully")


@router.get("/student/{student_id}", response_model=Envelope[list[StudentAddressOut]])
async def get_student_addresses(
    student_id: str = Path(max_length=50, pattern=STUDENT_ID_PATTERN),
    repository=Depends(get_student_address_repository),
) -> Envelope[list[StudentAddressOut]]:
    try:
        rows = await repository.get_student_addresses(student_id)
    except RepositoryError as exc:
        raise http_error(exc) from exc
    return Envelope(data=[StudentAddressOut(**row) for row in rows], message="Student addresses fetched successfully")


@router.get("/{address_id}", response_model=Envelope[StudentAddressOut])
async def get_student_address(
    address_id: int = Path(gt=0),
    repository=Depends(get_student_address_repository),
) -> Envelope[StudentAddressOut]:
    try:
        row = await repository.get_address(address_id)
    except RepositoryError as exc:
        raise http_error(exc) from exc
    return Envelope(data=StudentAddressOut(**row), message="Student address fetched successfully")


@router.put("/{address_id}", response_model=Envelope[StudentAddressOut])
@router.patch("/{address_id}", response_model=Envelope[StudentAddressOut])
async def update_student_address(
    payload: StudentAddressUpdateRequest,
    address_id: int = Path(gt=0),
    repository=Depends(get_student_address_repository),
) -> Envelope[StudentAddressOut]:
    try:
        row = await repository.update_address(address_id, payload.model_dump(exclude_unset=True))
    except RepositoryError as exc:
        raise http_error(exc) from exc
    return Envelope(data=StudentAddressOut(**row), message="Student address updated successfully")


@router.delete("/{address_id}", response_model=Envelope[StudentAddressOut])
async def delete_student_address(
    address_id: int = Path(gt=0),
    repository=Depends(get_student_address_repository),
) -> Envelope[StudentAddressOut]:
    try:
        row = await repository.delete_address(address_id)
    except RepositoryError as exc:
        raise http_error(exc) from exc
    return Envelope(data=StudentAddressOut(**row), message="Student address deleted successfully")
