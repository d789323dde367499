from datetime import datetime
from typing import Annotated

from pydantic import BaseModel, Field, StringConstraints

from placement_api.schemas.common import (
    BLANK_OR_EMAIL_PATTERN,
    Email,
    OutModel,
    Pagination,
    RequestModel,
    StudentId,
)
from placement_api.schemas.students import StudentOut

# Passwords are compared byte for byte, so they are never stripped.
Password = Annotated[str, StringConstraints(strip_whitespace=False, min_length=8, max_length=100)]


class UserCreateRequest(RequestModel):
    username: str = Field(min_length=3, max_length=100)
    password: Password
    email: Email | None = None
    full_name: str | None = Field(default=None, max_length=200)
    role_id: int | None = Field(default=None, ge=1)
    is_active: bool = True
    student_id: StudentId | None = None


class UserUpdateRequest(RequestModel):
    username: str | None = Field(default=None, min_length=3, max_length=100)
    email: str | None = Field(default=None, max_length=150, pattern=BLANK_OR_EMAIL_PATTERN)
    full_name: str | None = Field(default=None, max_length=200)
    role_id: int | None = Field(default=None, ge=1)
    is_active: bool | None = None


class LoginRequest(BaseModel):
    username: str = Field(min_length=1, max_length=100)
    password: str = Field(min_length=1, max_length=100)


class RefreshRequest(BaseModel):
    refresh_token: str = Field(min_length=1)


class ChangePasswordRequest(BaseModel):
    current_password: str = Field(min_length=1, max_length=100)
    new_password: Password


class UserOut(OutModel):
    user_id: int
    username: str
    email: str | None = None
    full_name: str | None = None
    role_id: int | None = None
    role_name: str | None = None
    is_active: bool | None = None
    student_id: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    last_login: datetime | None = None


class UserListData(BaseModel):
    users: list[UserOut]
    pagination: Pagination


class UserStatusOut(OutModel):
    user_id: int
    username: str
    is_active: bool | None = None
    last_login: datetime | None = None


class TokenPair(BaseModel):
    access_token: str
    refresh_token: str | None = None
    token_type: str = "bearer"
    expires_in: int


class LoginData(BaseModel):
    user: UserOut
    tokens: TokenPair


class UserPermissionOut(OutModel):
    permission_id: int
    permission_name: str
    module: str | None = None
    description: str | None = None


class CurrentUserOut(OutModel):
    user_id: int
    username: str | None = None
    role_id: int | None = None
    role_name: str | None = None
    exp: int | None = None
    iat: int | None = None
    student_id: str | None = None
    student: StudentOut | None = None
