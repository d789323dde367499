from datetime import datetime

from pydantic import BaseModel, Field

from placement_api.schemas.common import OutModel, Pagination, RequestModel


class RolePermissionAssignRequest(RequestModel):
    role_id: int = Field(gt=0)
    permission_id: int = Field(gt=0)


class RolePermissionAssignManyRequest(RequestModel):
    role_id: int = Field(gt=0)
    permission_ids: list[int] = Field(min_length=1, max_length=500)


class RolePermissionOut(OutModel):
    role_permission_id: int
    role_id: int
    permission_id: int
    role_name: str | None = None
    permission_name: str | None = None
    module: str | None = None
    description: str | None = None
    created_at: datetime | None = None


class RolePermissionListData(BaseModel):
    role_permissions: list[RolePermissionOut]
    pagination: Pagination


class AssignmentSummary(BaseModel):
    total_requested: int
    successfully_assigned: int
    duplicates: int
    invalid: int


class AssignManyResult(BaseModel):
    assignments: list[RolePermissionOut]
    duplicates: list[int]
    invalid_permissions: list[int]
    summary: AssignmentSummary


class RolePermissionsData(BaseModel):
    role_id: int
    role_name: str
    permissions: list[RolePermissionOut]


class RemovedAssignments(BaseModel):
    role_id: int
    removed_count: int
