from datetime import datetime

from pydantic import BaseModel, Field

from placement_api.schemas.common import OutModel, Pagination, RequestModel, StudentId


class StudentUserCreateRequest(RequestModel):
    user_id: int = Field(ge=1)
    student_id: StudentId | None = None


class StudentUserBulkRequest(RequestModel):
    user_ids: list[int] = Field(min_length=1, max_length=1000)


class StudentUserUpdateRequest(RequestModel):
    user_id: int | None = Field(default=None, ge=1)


class StudentUserOut(OutModel):
    student_id: str
    user_id: int
    username: str | None = None
    email: str | None = None
    full_name: str | None = None
    role_id: int | None = None
    role_name: str | None = None
    is_active: bool | None = None
    created_at: datetime | None = None
    user_created_at: datetime | None = None
    last_login: datetime | None = None


class StudentUserListData(BaseModel):
    student_users: list[StudentUserOut]
    pagination: Pagination


class StudentAccountListData(BaseModel):
    students: list[StudentUserOut]
    pagination: Pagination


class StudentUserBulkSummary(BaseModel):
    total_requested: int
    successfully_created: int
    duplicates: int
    invalid: int


class StudentUserBulkResult(BaseModel):
    created: list[StudentUserOut]
    duplicates: list[int]
    invalid_users: list[int]
    summary: StudentUserBulkSummary
