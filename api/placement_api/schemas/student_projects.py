from datetime import datetime

from pydantic import BaseModel, Field

from placement_api.schemas.common import (
    BLANK_OR_URL_PATTERN,
    URL_PATTERN,
    OutModel,
    Pagination,
    RequestModel,
    StudentId,
)


class StudentProjectCreateRequest(RequestModel):
    student_id: StudentId
    title: str = Field(min_length=1, max_length=200)
    description: str | None = None
    tools_used: str | None = None
    repo_link: str | None = Field(default=None, max_length=300, pattern=URL_PATTERN)


class StudentProjectUpdateRequest(RequestModel):
    title: str | None = Field(default=None, max_length=200)
    description: str | None = None
    tools_used: str | None = None
    repo_link: str | None = Field(default=None, max_length=300, pattern=BLANK_OR_URL_PATTERN)


class StudentProjectOut(OutModel):
    project_id: int
    student_id: str
    student_name: str | None = None
    title: str
    description: str | None = None
    tools_used: str | None = None
    repo_link: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class StudentProjectListData(BaseModel):
    student_projects: list[StudentProjectOut]
    pagination: Pagination
