from datetime import date, datetime

from pydantic import BaseModel, Field, model_validator

from placement_api.schemas.common import OutModel, Pagination, RequestModel, StudentId, decimal_range

InternshipStipend = decimal_range("0", "9999999999.99")


class _InternshipFields(RequestModel):
    organization: str | None = Field(default=None, max_length=200)
    skills_acquired: str | None = None
    duration: str | None = Field(default=None, max_length=50)
    start_date: date | None = None
    end_date: date | None = None
    description: str | None = None
    stipend: InternshipStipend | None = None

    @model_validator(mode="after")
    def check_date_order(self):
        if self.start_date and self.end_date and self.end_date < self.start_date:
            raise ValueError("end_date must not be before start_date")
        return self


class StudentInternshipCreateRequest(_InternshipFields):
    student_id: StudentId
    organization: str = Field(min_length=1, max_length=200)


class StudentInternshipUpdateRequest(_InternshipFields):
    pass


class StudentInternshipOut(OutModel):
    internship_id: int
    student_id: str
    full_name: str | None = None
    organization: str | None = None
    skills_acquired: str | None = None
    duration: str | None = None
    start_date: date | None = None
    end_date: date | None = None
    description: str | None = None
    stipend: float | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class StudentInternshipListData(BaseModel):
    student_internships: list[StudentInternshipOut]
    pagination: Pagination
