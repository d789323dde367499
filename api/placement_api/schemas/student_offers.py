from datetime import datetime

from pydantic import BaseModel, Field

from placement_api.schemas.common import OutModel, Pagination, RequestModel, StudentId, decimal_range

OfferCtc = decimal_range("0", "9999999.99")
OfferStipend = decimal_range("0", "9999999999.99")


class StudentOfferCreateRequest(RequestModel):
    student_id: StudentId
    job_id: int = Field(ge=1)
    offered_at: datetime | None = None
    is_primary_offer: bool = False
    is_pbc: bool = False
    is_internship: bool = False
    offer_ctc: OfferCtc | None = None
    offer_stipend: OfferStipend | None = None
    remarks: str | None = None


class StudentOfferUpdateRequest(RequestModel):
    is_primary_offer: bool | None = None
    is_pbc: bool | None = None
    is_internship: bool | None = None
    offer_ctc: OfferCtc | None = None
    offer_stipend: OfferStipend | None = None
    remarks: str | None = None


class StudentOfferOut(OutModel):
    offer_id: int
    student_id: str
    job_id: int
    student_name: str | None = None
    student_email: str | None = None
    job_title: str | None = None
    company_id: int | None = None
    company_name: str | None = None
    offered_at: datetime | None = None
    is_primary_offer: bool | None = None
    is_pbc: bool | None = None
    is_internship: bool | None = None
    offer_ctc: float | None = None
    offer_stipend: float | None = None
    remarks: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class StudentOfferListData(BaseModel):
    offers: list[StudentOfferOut]
    pagination: Pagination
