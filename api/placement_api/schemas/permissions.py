from datetime import datetime

from pydantic import BaseModel, Field

from placement_api.schemas.common import OutModel, Pagination, RequestModel


class PermissionCreateRequest(RequestModel):
    permission_name: str = Field(min_length=3, max_length=100)
    module: str | None = Field(default=None, max_length=50)
    description: str | None = Field(default=None, max_length=255)


class PermissionUpdateRequest(RequestModel):
    permission_name: str | None = Field(default=None, max_length=100, pattern=r"^(.{3,})?$")
    module: str | None = Field(default=None, max_length=50)
    description: str | None = Field(default=None, max_length=255)


class PermissionOut(OutModel):
    permission_id: int
    permission_name: str
    module: str | None = None
    description: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class PermissionListData(BaseModel):
    permissions: list[PermissionOut]
    pagination: Pagination


class PermissionNameCheck(BaseModel):
    permission_name: str
    exists: bool
