from pydantic import BaseModel

from placement_api.schemas.common import OutModel, Pagination
from placement_api.schemas.student_academics import StudentAcademicsOut
from placement_api.schemas.student_addresses import StudentAddressOut
from placement_api.schemas.student_certifications import StudentCertificationOut
from placement_api.schemas.student_documents import StudentDocumentOut
from placement_api.schemas.student_family import StudentFamilyOut
from placement_api.schemas.student_internships import StudentInternshipOut
from placement_api.schemas.student_languages import StudentLanguageOut
from placement_api.schemas.student_projects import StudentProjectOut
from placement_api.schemas.students import StudentOut


class StudentReport(BaseModel):
    student: StudentOut
    address: StudentAddressOut | None = None
    academics: StudentAcademicsOut | None = None
    family: StudentFamilyOut | None = None
    languages: list[StudentLanguageOut] = []
    internships: list[StudentInternshipOut] = []
    projects: list[StudentProjectOut] = []
    certifications: list[StudentCertificationOut] = []
    documents: list[StudentDocumentOut] = []


class StudentSummaryOut(OutModel):
    student_id: str
    full_name: str | None = None
    email: str | None = None
    mobile: str | None = None
    gender: str | None = None
    branch: str | None = None
    graduation_year: int | None = None
    semester: int | None = None
    placement_fee_status: str | None = None
    ug_cgpa: float | None = None
    tenth_percent: float | None = None
    twelfth_percent: float | None = None
    diploma_percent: float | None = None
    history_of_backs: int | None = None
    internship_count: int = 0
    project_count: int = 0
    certification_count: int = 0
    offer_count: int = 0


class StudentSummaryListData(BaseModel):
    students: list[StudentSummaryOut]
    pagination: Pagination
