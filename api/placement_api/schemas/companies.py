from datetime import datetime

from pydantic import BaseModel, Field

from placement_api.schemas.common import (
    BLANK_OR_EMAIL_PATTERN,
    BLANK_OR_URL_PATTERN,
    URL_PATTERN,
    Email,
    OutModel,
    Pagination,
    RequestModel,
)


class CompanyCreateRequest(RequestModel):
    company_name: str = Field(min_length=1, max_length=200)
    company_type: str | None = Field(default=None, max_length=50)
    website: str | None = Field(default=None, max_length=255, pattern=URL_PATTERN)
    contact_person: str | None = Field(default=None, max_length=150)
    contact_email: Email | None = None
    contact_phone: str | None = Field(default=None, max_length=30)
    company_logo: str | None = Field(default=None, max_length=500)


class CompanyUpdateRequest(RequestModel):
    company_name: str | None = Field(default=None, max_length=200)
    company_type: str | None = Field(default=None, max_length=50)
    website: str | None = Field(default=None, max_length=255, pattern=BLANK_OR_URL_PATTERN)
    contact_person: str | None = Field(default=None, max_length=150)
    contact_email: str | None = Field(default=None, max_length=150, pattern=BLANK_OR_EMAIL_PATTERN)
    contact_phone: str | None = Field(default=None, max_length=30)
    company_logo: str | None = Field(default=None, max_length=500)


class CompanyOut(OutModel):
    company_id: int
    company_name: str
    company_type: str | None = None
    website: str | None = None
    contact_person: str | None = None
    contact_email: str | None = None
    contact_phone: str | None = None
    company_logo: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class CompanyListData(BaseModel):
    companies: list[CompanyOut]
    pagination: Pagination
