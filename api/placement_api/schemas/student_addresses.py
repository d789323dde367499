from datetime import datetime

from pydantic import BaseModel, Field

from placement_api.schemas.common import (
    BLANK_OR_PHONE_PATTERN,
    OutModel,
    Pagination,
    Phone,
    RequestModel,
    StudentId,
)

PIN_PATTERN = r"^[0-9]{6}$"
BLANK_OR_PIN_PATTERN = r"^([0-9]{6})?$"


class StudentAddressCreateRequest(RequestModel):
    student_id: StudentId
    permanent_address: str | None = Field(default=None, max_length=500)
    permanent_city: str | None = Field(default=None, max_length=100)
    permanent_state: str | None = Field(default=None, max_length=100)
    permanent_pin: str | None = Field(default=None, pattern=PIN_PATTERN)
    permanent_contact: Phone | None = None
    current_address: str | None = Field(default=None, max_length=500)
    current_city: str | None = Field(default=None, max_length=100)
    current_state: str | None = Field(default=None, max_length=100)
    current_pin: str | None = Field(default=None, pattern=PIN_PATTERN)


class StudentAddressUpdateRequest(RequestModel):
    permanent_address: str | None = Field(default=None, max_length=500)
    permanent_city: str | None = Field(default=None, max_length=100)
    permanent_state: str | None = Field(default=None, max_length=100)
    permanent_pin: str | None = Field(default=None, pattern=BLANK_OR_PIN_PATTERN)
    permanent_contact: str | None = Field(default=None, pattern=BLANK_OR_PHONE_PATTERN)
    current_address: str | None = Field(default=None, max_length=500)
    current_city: str | None = Field(default=None, max_length=100)
    current_state: str | None = Field(default=None, max_length=100)
    current_pin: str | None = Field(default=None, pattern=BLANK_OR_PIN_PATTERN)


class StudentAddressOut(OutModel):
    address_id: int
    student_id: str
    full_name: str | None = None
    permanent_address: str | None = None
    permanent_city: str | None = None
    permanent_state: str | None = None
    permanent_pin: str | None = None
    permanent_contact: str | None = None
    current_address: str | None = None
    current_city: str | None = None
    current_state: str | None = None
    current_pin: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class StudentAddressListData(BaseModel):
    student_addresses: list[StudentAddressOut]
    pagination: Pagination
