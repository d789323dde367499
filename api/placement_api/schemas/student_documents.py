from datetime import datetime

from pydantic import BaseModel, Field

from placement_api.schemas.common import OutModel, Pagination, RequestModel, StudentId


class StudentDocumentCreateRequest(RequestModel):
    student_id: StudentId
    document_type: str = Field(min_length=1, max_length=80)
    file_path: str | None = Field(default=None, max_length=500)
    uploaded_at: datetime | None = None


class StudentDocumentUpdateRequest(RequestModel):
    document_type: str | None = Field(default=None, max_length=80)
    file_path: str | None = Field(default=None, max_length=500)


class StudentDocumentOut(OutModel):
    doc_id: int
    student_id: str
    student_name: str | None = None
    document_type: str
    file_path: str | None = None
    uploaded_at: datetime | None = None
    updated_at: datetime | None = None


class StudentDocumentListData(BaseModel):
    student_documents: list[StudentDocumentOut]
    pagination: Pagination
