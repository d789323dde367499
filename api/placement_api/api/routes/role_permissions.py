from fastapi import APIRouter, Depends, Path, Query, status as http_status

from placement_api.api.errors import http_error
from placement_api.schemas.common import Envelope, list_query, pagination_for
from placement_api.schemas.role_permissions import (
    AssignManyResult,
    RemovedAssignments,
    RolePermissionAssignManyRequest,
    RolePermissionAssignRequest,
    RolePermissionListData,
    RolePermissionOut,
    RolePermissionsData,
)
from placement_api.services.errors import RepositoryError
from placement_api.services.listing import ListQuery
from placement_api.services.role_permissions import get_role_permission_repository

router = APIRouter()


@router.post("/assign", response_model=Envelope[RolePermissionOut], status_code=http_status.HTTP_201_CREATED)
async def assign_permission(
    payload: RolePermissionAssignRequest,
    repository=Depends(get_role_permission_repository),
) -> Envelope[RolePermissionOut]:
    try:
        row = await repository.assign_permission(payload.role_id, payload.permission_id)
    except RepositoryError as exc:
        raise http_error(exc) from exc
    return Envelope(data=RolePermissionOut(**row), message="Permission assigned to role successfully")


@router.post("/assign-multiple", response_model=Envelope[AssignManyResult], status_code=http_status.HTTP_201_CREATED)
async def assign_permissions(
    payload: RolePermissionAssignManyRequest,
    repository=Depends(get_role_permission_repository),
) -> Envelope[AssignManyResult]:
    try:
        result = await repository.assign_permissions(payload.role_id, payload.permission_ids)
    except RepositoryError as exc:
        raise http_error(exc) from exc
    summary = result["summary"]
    return Envelope(
        data=AssignManyResult(**result),
        message=(
            f"Assigned {summary['successfully_assigned']} of {summary['total_requested']} permissions "
            f"({summary['duplicates']} already assigned, {summary['invalid']} invalid)"
        ),
    )


@router.get("", response_model=Envelope[RolePermissionListData])
async def list_role_permissions(
    query: ListQuery = Depends(list_query),
    role_id: int | None = Query(default=None, gt=0),
    permission_id: int | None = Query(default=None, gt=0),
    repository=Depends(get_role_permission_repository),
) -> Envelope[RolePermissionListData]:
    try:
        rows, total = await repository.list_assignments(query, role_id=role_id, permission_id=permission_id)
    except RepositoryError as exc:
        raise http_error(exc) from exc
    data = RolePermissionListData(
        role_permissions=[RolePermissionOut(**row) for row in rows],
        pagination=pagination_for(total, query),
    )
    return Envelope(data=data, message="Role permissions fetched successfully")


@router.get("/role/{role_id}", response_model=Envelope[RolePermissionsData])
async def get_role_permissions(
    role_id: int = Path(gt=0),
    repository=Depends(get_role_permission_repository),
) -> Envelope[RolePermissionsData]:
    try:
        result = await repository.get_role_permissions(role_id)
    except RepositoryError as exc:
        raise http_error(exc) from exc
    return Envelope(data=RolePermissionsData(**result), message="Role permissions fetched successfully")


@router.delete("/remove", response_model=Envelope[RolePermissionOut])
async def remove_permission(
    payload: RolePermissionAssignRequest,
    repository=Depends(get_role_permission_repository),
) -> Envelope[RolePermissionOut]:
    try:
        row = await repository.remove_permission(payload.role_id, payload.permission_id)
    except RepositoryError as exc:
        raise http_error(exc) from exc
    return Envelope(data=RolePermissionOut(**row), message="Permission removed from role successfully")


@router.delete("/role/{role_id}", response_model=Envelope[RemovedAssignments])
async def remove_all_permissions(
    role_id: int = Path(gt=0),
    repository=Depends(get_role_permission_repository),
) -> Envelope[RemovedAssignments]:
    try:
        result = await repository.remove_all_permissions(role_id)
    except RepositoryError as exc:
        raise http_error(exc) from exc
    return Envelope(
        data=RemovedAssignments(**result),
        message=f"Removed {result['removed_count']} permissions from role",
    )
