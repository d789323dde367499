from datetime import datetime

from pydantic import BaseModel, Field

from placement_api.schemas.common import (
    BLANK_OR_URL_PATTERN,
    OutModel,
    Pagination,
    RequestModel,
    StudentId,
    WebUrl,
)


class StudentCertificationCreateRequest(RequestModel):
    student_id: StudentId
    skill_name: str = Field(min_length=1, max_length=200)
    duration: str | None = Field(default=None, max_length=50)
    vendor: str | None = Field(default=None, max_length=200)
    certificate_file: WebUrl | None = None


class StudentCertificationUpdateRequest(RequestModel):
    skill_name: str | None = Field(default=None, max_length=200)
    duration: str | None = Field(default=None, max_length=50)
    vendor: str | None = Field(default=None, max_length=200)
    certificate_file: str | None = Field(default=None, max_length=500, pattern=BLANK_OR_URL_PATTERN)


class StudentCertificationOut(OutModel):
    cert_id: int
    student_id: str
    student_name: str | None = None
    skill_name: str
    duration: str | None = None
    vendor: str | None = None
    certificate_file: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class StudentCertificationListData(BaseModel):
    student_certifications: list[StudentCertificationOut]
    pagination: Pagination
