from datetime import date, datetime
from typing import Literal

from pydantic import BaseModel, Field

from placement_api.schemas.common import OutModel, Pagination, RequestModel, StudentId, decimal_range

EligibilityStatus = Literal["pending", "eligible", "not_eligible", "conditionally_eligible"]

Score = decimal_range("0", "1")
OfferAmount = decimal_range("0", "9999999999.99")


class ApplicationCreateRequest(RequestModel):
    student_id: StudentId
    job_id: int = Field(gt=0)
    status: str = Field(default="submitted", min_length=1, max_length=50)
    eligibility_status: EligibilityStatus | None = None
    eligibility_comments: str | None = None
    skills_match_score: Score | None = None
    remarks: str | None = None


class ApplicationUpdateRequest(RequestModel):
    status: str | None = Field(default=None, max_length=50)
    eligibility_status: EligibilityStatus | None = None
    eligibility_comments: str | None = None
    skills_match_score: Score | None = None
    offer_type: str | None = Field(default=None, max_length=50)
    offer_ctc: OfferAmount | None = None
    offer_stipend: OfferAmount | None = None
    placement_date: date | None = None
    remarks: str | None = None


class ApplicationStatusRequest(RequestModel):
    status: str | None = Field(default=None, max_length=50)
    eligibility_status: EligibilityStatus | None = None
    eligibility_comments: str | None = None
    remarks: str | None = None


class ApplicationOut(OutModel):
    application_id: int
    student_id: str
    job_id: int
    status: str | None = None
    eligibility_status: EligibilityStatus | None = None
    eligibility_checked_at: datetime | None = None
    eligibility_comments: str | None = None
    tenth_percent_meets: bool | None = None
    twelfth_percent_meets: bool | None = None
    ug_cgpa_meets: bool | None = None
    pg_cgpa_meets: bool | None = None
    experience_meets: bool | None = None
    branch_meets: bool | None = None
    skills_match_score: float | None = None
    offer_type: str | None = None
    offer_ctc: float | None = None
    offer_stipend: float | None = None
    placement_date: date | None = None
    remarks: str | None = None
    applied_at: datetime | None = None
    updated_at: datetime | None = None
    full_name: str | None = None
    email: str | None = None
    branch: str | None = None
    job_title: str | None = None
    company_id: int | None = None
    company_name: str | None = None


class ApplicationListData(BaseModel):
    applications: list[ApplicationOut]
    pagination: Pagination


class EligibilityRecheckItem(BaseModel):
    application_id: int
    status: Literal["updated", "error"]
    eligible: bool | None = None
    eligibility_status: EligibilityStatus | None = None
    error: str | None = None
