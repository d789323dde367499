from datetime import date, datetime, timezone
from typing import Annotated, Literal

from pydantic import AfterValidator, BaseModel, Field, model_validator

from placement_api.schemas.common import (
    BLANK_OR_EMAIL_PATTERN,
    BLANK_OR_PHONE_PATTERN,
    BLANK_OR_URL_PATTERN,
    Email,
    OutModel,
    Pagination,
    Phone,
    RequestModel,
    StudentId,
    WebUrl,
)

Gender = Literal["Male", "Female", "Other"]
PlacementFeeStatus = Literal["Paid", "Unpaid"]


def _past_date(value: date | None) -> date | None:
    if value is not None and value >= datetime.now(timezone.utc).date():
        raise ValueError("must be a date in the past")
    return value


PastDate = Annotated[date, AfterValidator(_past_date)]


class StudentCreateRequest(RequestModel):
    student_id: StudentId
    first_name: str = Field(min_length=1, max_length=100)
    middle_name: str | None = Field(default=None, max_length=100)
    last_name: str | None = Field(default=None, max_length=100)
    full_name: str | None = Field(default=None, max_length=300)
    gender: Gender | None = None
    dob: PastDate | None = None
    email: Email | None = None
    alt_email: Email | None = None
    college_email: Email | None = None
    mobile: Phone | None = None
    emergency_contact: Phone | None = None
    nationality: str | None = Field(default=None, max_length=50)
    placement_fee_status: PlacementFeeStatus | None = None
    student_photo_path: WebUrl | None = None
    branch: str | None = Field(default=None, max_length=100)
    graduation_year: int | None = Field(default=None, ge=1900, le=2100)
    semester: int | None = Field(default=None, ge=1, le=12)

    @model_validator(mode="after")
    def fill_full_name(self) -> "StudentCreateRequest":
        if not self.full_name:
            parts = [self.first_name, self.middle_name, self.last_name]
            self.full_name = " ".join(part for part in parts if part)
        return self


class StudentUpdateRequest(RequestModel):
    first_name: str | None = Field(default=None, max_length=100)
    middle_name: str | None = Field(default=None, max_length=100)
    last_name: str | None = Field(default=None, max_length=100)
    full_name: str | None = Field(default=None, max_length=300)
    gender: Gender | None = None
    dob: PastDate | None = None
    email: str | None = Field(default=None, max_length=150, pattern=BLANK_OR_EMAIL_PATTERN)
    alt_email: str | None = Field(default=None, max_length=150, pattern=BLANK_OR_EMAIL_PATTERN)
    college_email: str | None = Field(default=None, max_length=150, pattern=BLANK_OR_EMAIL_PATTERN)
    mobile: str | None = Field(default=None, pattern=BLANK_OR_PHONE_PATTERN)
    emergency_contact: str | None = Field(default=None, pattern=BLANK_OR_PHONE_PATTERN)
    nationality: str | None = Field(default=None, max_length=50)
    placement_fee_status: PlacementFeeStatus | None = None
    student_photo_path: str | None = Field(default=None, max_length=500, pattern=BLANK_OR_URL_PATTERN)
    branch: str | None = Field(default=None, max_length=100)
    graduation_year: int | None = Field(default=None, ge=1900, le=2100)
    semester: int | None = Field(default=None, ge=1, le=12)


class StudentOut(OutModel):
    student_id: str
    first_name: str | None = None
    middle_name: str | None = None
    last_name: str | None = None
    full_name: str | None = None
    gender: str | None = None
    dob: date | None = None
    email: str | None = None
    alt_email: str | None = None
    college_email: str | None = None
    mobile: str | None = None
    emergency_contact: str | None = None
    nationality: str | None = None
    placement_fee_status: str | None = None
    student_photo_path: str | None = None
    branch: str | None = None
    graduation_year: int | None = None
    semester: int | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class StudentListData(BaseModel):
    students: list[StudentOut]
    pagination: Pagination
