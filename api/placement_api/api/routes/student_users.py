from fastapi import APIRouter, Depends, Path, Query, status as http_status

from placement_api.api.errors import http_error
from placement_api.schemas.common import STUDENT_ID_PATTERN, Envelope, list_query, pagination_for
from placement_api.schemas.student_users import (
    StudentAccountListData,
    StudentUserBulkRequest,
    StudentUserBulkResult,
    StudentUserCreateRequest,
    StudentUserListData,
    StudentUserOut,
    StudentUserUpdateRequest,
)
from placement_api.services.errors import RepositoryError
from placement_api.services.listing import ListQuery
from placement_api.services.student_users import get_student_user_repository

router = APIRouter()


@router.post("", response_model=Envelope[StudentUserOut], status_code=http_status.HTTP_201_CREATED)
async def create_student_user(
    payload: StudentUserCreateRequest,
    repository=Depends(get_student_user_repository),
) -> Envelope[StudentUserOut]:
    try:
        row = await repository.create_link(payload.model_dump())
    except RepositoryError as exc:
        raise http_error(exc) from exc
    return Envelope(data=StudentUserOut(**row), message="Student user created successfully")


@router.post("/bulk", response_model=Envelope[StudentUserBulkResult], status_code=http_status.HTTP_201_CREATED)
async def bulk_create_student_users(
    payload: StudentUserBulkRequest,
    repository=Depends(get_student_user_repository),
) -> Envelope[StudentUserBulkResult]:
    try:
        result = await repository.create_links(payload.user_ids)
    except RepositoryError as exc:
        raise http_error(exc) from exc
    summary = result["summary"]
    return Envelope(
        data=StudentUserBulkResult(**result),
        message=(
            f"Created {summary['successfully_created']} of {summary['total_requested']} student user associations "
            f"({summary['duplicates']} already linked, {summary['invalid']} invalid)"
        ),
    )


@router.get("", response_model=Envelope[StudentUserListData])
async def list_student_users(
    query: ListQuery = Depends(list_query),
    user_id: int | None = Query(default=None, ge=1),
    repository=Depends(get_student_user_repository),
) -> Envelope[StudentUserListData]:
    try:
        rows, total = await repository.list_links(query, user_id=user_id)
    except RepositoryError as exc:
        raise http_error(exc) from exc
    data = StudentUserListData(
        student_users=[StudentUserOut(**row) for row in rows],
        pagination=pagination_for(total, query),
    )
    return Envelope(data=data, message="Student users fetched successfully")


@router.get("/students", response_model=Envelope[StudentAccountListData])
async def list_student_accounts(
    query: ListQuery = Depends(list_query),
    repository=Depends(get_student_user_repository),
) -> Envelope[StudentAccountListData]:
    try:
        rows, total = await repository.list_links(query, accounts_only=True)
    except RepositoryError as exc:
        raise http_error(exc) from exc
    data = StudentAccountListData(
        students=[StudentUserOut(**row) for row in rows],
        pagination=pagination_for(total, query),
    )
    return Envelope(data=data, message="Students fetched successfully")


@router.get("/user/{user_id}", response_model=Envelope[StudentUserOut])
async def get_student_user_by_user(
    user_id: int = Path(gt=0),
    repository=Depends(get_student_user_repository),
) -> Envelope[StudentUserOut]:
    try:
        row = await repository.get_link_for_user(user_id)
    except RepositoryError as exc:
        raise http_error(exc) from exc
    return Envelope(data=StudentUserOut(**row), message="Student user fetched successfully")


@router.get("/{student_id}", response_model=Envelope[StudentUserOut])
async def get_student_user(
    student_id: str = Path(max_length=50, pattern=STUDENT_ID_PATTERN),
    repository=Depends(get_student_user_repository),
) -> Envelope[StudentUserOut]:
    try:
        row = await repository.get_link(student_id)
    except RepositoryError as exc:
        raise http_error(exc) from exc
    return Envelope(data=StudentUserOut(**row), message="Student user fetched successfully")


@router.put("/{student_id}", response_model=Envelope[StudentUserOut])
@router.patch("/{student_id}", response_model=Envelope[StudentUserOut])
async def update_student_user(
    payload: StudentUserUpdateRequest,
    student_id: str = Path(max_length=50, pattern=STUDENT_ID_PATTERN),
    repository=Depends(get_student_user_repository),
) -> Envelope[StudentUserOut]:
    try:
        row = await repository.update_link(student_id, payload.model_dump(exclude_unset=True))
    except RepositoryError as exc:
        raise http_error(exc) from exc
    return Envelope(data=StudentUserOut(**row), message="Student user updated successfully")


@router.delete("/{student_id}", response_model=Envelope[StudentUserOut])
async def delete_student_user(
    student_id: str = Path(max_length=50, pattern=STUDENT_ID_PATTERN),
    repository=Depends(get_student_user_repository),
) -> Envelope[StudentUserOut]:
    try:
        row = await repository.delete_link(student_id)
    except RepositoryError as exc:
        raise http_error(exc) from exc
    return Envelope(data=StudentUserOut(**row), message="Student user deleted successfully")
