from fastapi import APIRouter, Depends, Path, Query, status as http_status

from placement_api.api.errors import http_error
from placement_api.schemas.common import Envelope, list_query, pagination_for
from placement_api.schemas.permissions import (
    PermissionCreateRequest,
    PermissionListData,
    PermissionNameCheck,
    PermissionOut,
    PermissionUpdateRequest,
)
from placement_api.services.errors import RepositoryError
from placement_api.services.listing import ListQuery
from placement_api.services.permissions import get_permission_repository

router = APIRouter()


@router.post("", response_model=Envelope[PermissionOut], status_code=http_status.HTTP_201_CREATED)
async def create_permission(
    payload: PermissionCreateRequest,
    repository=Depends(get_permission_repository),
) -> Envelope[PermissionOut]:
    try:
        row = await repository.create_permission(payload.model_dump())
    except RepositoryError as exc:
        raise http_error(exc) from exc
    return Envelope(data=PermissionOut(**row), message="Permission created successfully")


@router.get("", response_model=Envelope[PermissionListData])
async def list_permissions(
    query: ListQuery = Depends(list_query),
    module: str | None = Query(default=None, max_length=50),
    repository=Depends(get_permission_repository),
) -> Envelope[PermissionListData]:
    try:
        rows, total = await repository.list_permissions(query, module=module)
    except RepositoryError as exc:
        raise http_error(exc) from exc
    data = PermissionListData(
        permissions=[PermissionOut(**row) for row in rows],
        pagination=pagination_for(total, query),
    )
    return Envelope(data=data, message="Permissions fetched successfully")


@router.get("/check/{permission_name}", response_model=Envelope[PermissionNameCheck])
async def check_permission_name(
    permission_name: str = Path(min_length=1, max_length=100),
    repository=Depends(get_permission_repository),
) -> Envelope[PermissionNameCheck]:
    try:
        exists = await repository.permission_name_exists(permission_name)
    except RepositoryError as exc:
        raise http_error(exc) from exc
    message = "Permission name already exists" if exists else "Permission name is available"
    return Envelope(data=PermissionNameCheck(permission_name=permission_name, exists=exists), message=message)


@router.get("/{permission_id}", response_model=Envelope[PermissionOut])
async def get_permission(
    permission_id: int = Path(gt=0),
    repository=Depends(get_permission_repository),
) -> Envelope[PermissionOut]:
    try:
        row = await repository.get_permission(permission_id)
    except RepositoryError as exc:
        raise http_error(exc) from exc
    return Envelope(data=PermissionOut(**row), message="Permission fetched successfully")


@router.put("/{permission_id}", response_model=Envelope[PermissionOut])
@router.patch("/{permission_id}", response_model=Envelope[PermissionOut])
async def update_permission(
    payload: PermissionUpdateRequest,
    permission_id: int = Path(gt=0),
    repository=Depends(get_permission_repository),
) -> Envelope[PermissionOut]:
    try:
        row = await repository.update_permission(permission_id, payload.model_dump(exclude_unset=True))
    except RepositoryError as exc:
        raise http_error(exc) from exc
    return Envelope(data=PermissionOut(**row), message="Permission updated successfully")


@router.delete("/{permission_id}", response_model=Envelope[PermissionOut])
async def delete_permission(
    permission_id: int = Path(gt=0),
    repository=Depends(get_permission_repository),
) -> Envelope[PermissionOut]:
    try:
        row = await repository.delete_permission(permission_id)
    except RepositoryError as exc:
        raise http_error(exc) from exc
    return Envelope(data=PermissionOut(**row), message="Permission deleted successfully")
