from pydantic import BaseModel, Field

from placement_api.schemas.common import Cgpa, OutModel, Pagination, Percent, RequestModel, StudentId


class _AcademicFields(RequestModel):
    tenth_percent: Percent | None = None
    tenth_year: int | None = Field(default=None, ge=1900, le=2100)
    tenth_board: str | None = Field(default=None, max_length=100)
    tenth_school: str | None = Field(default=None, max_length=200)
    twelfth_percent: Percent | None = None
    twelfth_year: int | None = Field(default=None, ge=1900, le=2100)
    twelfth_board: str | None = Field(default=None, max_length=100)
    twelfth_college: str | None = Field(default=None, max_length=200)
    diploma_percent: Percent | None = None
    diploma_year: int | None = Field(default=None, ge=1900, le=2100)
    diploma_college: str | None = Field(default=None, max_length=200)
    ug_cgpa: Cgpa | None = None
    ug_year_of_passing: int | None = Field(default=None, ge=1900, le=2100)
    pg_cgpa: Cgpa | None = None
    history_of_backs: int | None = Field(default=None, ge=0)
    updated_arrears: int | None = Field(default=None, ge=0)
    gap_years: int | None = Field(default=None, ge=0, le=20)
    cet_rank: int | None = Field(default=None, ge=1)
    comedk_rank: int | None = Field(default=None, ge=1)
    category: str | None = Field(default=None, max_length=50)


class StudentAcademicsCreateRequest(_AcademicFields):
    student_id: StudentId


class StudentAcademicsUpdateRequest(_AcademicFields):
    pass


class StudentAcademicsOut(OutModel):
    student_id: str
    full_name: str | None = None
    tenth_percent: float | None = None
    tenth_year: int | None = None
    tenth_board: str | None = None
    tenth_school: str | None = None
    twelfth_percent: float | None = None
    twelfth_year: int | None = None
    twelfth_board: str | None = None
    twelfth_college: str | None = None
    diploma_percent: float | None = None
    diploma_year: int | None = None
    diploma_college: str | None = None
    ug_cgpa: float | None = None
    ug_year_of_passing: int | None = None
    pg_cgpa: float | None = None
    history_of_backs: int | None = None
    updated_arrears: int | None = None
    gap_years: int | None = None
    cet_rank: int | None = None
    comedk_rank: int | None = None
    category: str | None = None


class StudentAcademicsListData(BaseModel):
    student_academics: list[StudentAcademicsOut]
    pagination: Pagination
