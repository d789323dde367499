from datetime import date, datetime

from pydantic import BaseModel, Field

from placement_api.schemas.common import OutModel, Pagination, RequestModel, decimal_range

Ctc = decimal_range("0", "9999999.99")
Stipend = decimal_range("0", "9999999999.99")


class JobCreateRequest(RequestModel):
    company_id: int = Field(gt=0)
    job_title: str = Field(min_length=1, max_length=200)
    job_description: str | None = None
    job_type: str | None = Field(default=None, max_length=50)
    ctc_lpa: Ctc | None = None
    stipend_per_month: Stipend | None = None
    location: str | None = Field(default=None, max_length=200)
    interview_mode: str | None = Field(default=None, max_length=50)
    application_deadline: date | None = None
    drive_date: date | None = None
    year_of_graduation: int = Field(ge=1900, le=2100)
    status: str = Field(default="DRAFT", min_length=1, max_length=20)


class JobUpdateRequest(RequestModel):
    company_id: int | None = Field(default=None, gt=0)
    job_title: str | None = Field(default=None, max_length=200)
    job_description: str | None = None
    job_type: str | None = Field(default=None, max_length=50)
    ctc_lpa: Ctc | None = None
    stipend_per_month: Stipend | None = None
    location: str | None = Field(default=None, max_length=200)
    interview_mode: str | None = Field(default=None, max_length=50)
    application_deadline: date | None = None
    drive_date: date | None = None
    year_of_graduation: int | None = Field(default=None, ge=1900, le=2100)
    status: str | None = Field(default=None, max_length=20)


class JobOut(OutModel):
    job_id: int
    company_id: int
    company_name: str | None = None
    job_title: str
    job_description: str | None = None
    job_type: str | None = None
    ctc_lpa: float | None = None
    stipend_per_month: float | None = None
    location: str | None = None
    interview_mode: str | None = None
    application_deadline: date | None = None
    drive_date: date | None = None
    year_of_graduation: int | None = None
    status: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class JobListData(BaseModel):
    jobs: list[JobOut]
    pagination: Pagination
