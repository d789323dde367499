from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field

from placement_api.schemas.common import (
    BLANK_OR_PHONE_PATTERN,
    OutModel,
    Pagination,
    Phone,
    RequestModel,
    StudentId,
)

BLOOD_GROUPS = ("A+", "A-", "B+", "B-", "AB+", "AB-", "O+", "O-")
BloodGroup = Literal["A+", "A-", "B+", "B-", "AB+", "AB-", "O+", "O-"]


class StudentFamilyCreateRequest(RequestModel):
    student_id: StudentId
    father_name: str | None = Field(default=None, max_length=150)
    father_occupation: str | None = Field(default=None, max_length=100)
    father_phone: Phone | None = None
    mother_name: str | None = Field(default=None, max_length=150)
    mother_occupation: str | None = Field(default=None, max_length=100)
    mother_phone: Phone | None = None
    blood_group: BloodGroup | None = None


class StudentFamilyUpdateRequest(RequestModel):
    father_name: str | None = Field(default=None, max_length=150)
    father_occupation: str | None = Field(default=None, max_length=100)
    father_phone: str | None = Field(default=None, pattern=BLANK_OR_PHONE_PATTERN)
    mother_name: str | None = Field(default=None, max_length=150)
    mother_occupation: str | None = Field(default=None, max_length=100)
    mother_phone: str | None = Field(default=None, pattern=BLANK_OR_PHONE_PATTERN)
    blood_group: BloodGroup | None = None


class StudentFamilyOut(OutModel):
    student_id: str
    student_name: str | None = None
    father_name: str | None = None
    father_occupation: str | None = None
    father_phone: str | None = None
    mother_name: str | None = None
    mother_occupation: str | None = None
    mother_phone: str | None = None
    blood_group: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class StudentFamilyListData(BaseModel):
    student_family: list[StudentFamilyOut]
    pagination: Pagination
