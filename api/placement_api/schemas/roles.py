from datetime import datetime

from pydantic import BaseModel, Field

from placement_api.schemas.common import OutModel, Pagination, RequestModel


class RoleCreateRequest(RequestModel):
    role_name: str = Field(min_length=3, max_length=30)
    role_description: str | None = Field(default=None, max_length=255)


class RoleUpdateRequest(RequestModel):
    role_name: str | None = Field(default=None, max_length=30, pattern=r"^(.{3,})?$")
    role_description: str | None = Field(default=None, max_length=255)


class RoleOut(OutModel):
    role_id: int
    role_name: str
    role_description: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class RoleListData(BaseModel):
    roles: list[RoleOut]
    pagination: Pagination


class RoleNameCheck(BaseModel):
    role_name: str
    exists: bool
