from fastapi import APIRouter, Depends, Path, Query, Response, status as http_status

from placement_api.api.errors import http_error
from placement_api.api.imports import run_import
from placement_api.schemas.common import (
    STUDENT_ID_PATTERN,
    Envelope,
    ImportRequest,
    ImportResult,
    list_query,
    pagination_for,
)
from placement_api.schemas.student_documents import (
    StudentDocumentCreateRequest,
    StudentDocumentListData,
    StudentDocumentOut,
    StudentDocumentUpdateRequest,
)
from placement_api.services.errors import RepositoryError
from placement_api.services.listing import ListQuery
from placement_api.services.student_documents import get_student_document_repository

router = APIRouter()


@router.post("", response_model=Envelope[StudentDocumentOut], status_code=http_status.HTTP_201_CREATED)
async def create_student_document(
    payload: StudentDocumentCreateRequest,
    repository=Depends(get_student_document_repository),
) -> Envelope[StudentDocumentOut]:
    try:
        row = await repository.create_document(payload.model_dump())
    except RepositoryError as exc:
        raise http_error(exc) from exc
    return Envelope(data=StudentDocumentOut(**row), message="Document created successfully")


@router.post(
    "/import",
    response_model=Envelope[ImportResult[StudentDocumentOut]],
    status_code=http_status.HTTP_201_CREATED,
)
async def import_student_documents(
    payload: ImportRequest,
    response: Response,
    repository=Depends(get_student_document_repository),
) -> Envelope[ImportResult[StudentDocumentOut]]:
    return await run_import(
        payload,
        response,
        create_model=StudentDocumentCreateRequest,
        out_model=StudentDocumentOut,
        import_rows=repository.import_documents,
        noun="document",
    )


@router.get("", response_model=Envelope[StudentDocumentListData])
async def list_student_documents(
    query: ListQuery = Depends(list_query),
    document_type: str | None = Query(default=None, max_length=80),
    repository=Depends(get_student_document_repository),
) -> Envelope[StudentDocumentListData]:
    try:
        rows, total = await repository.list_documents(query, document_type=document_type)
    except RepositoryError as exc:
        raise http_error(exc) from exc
    data = StudentDocumentListData(
        student_documents=[StudentDocumentOut(**row) for row in rows],
        pagination=pagination_for(total, query),
    )
    return Envelope(data=data, message="Documents fetched successfully")


@router.get("/student/{student_id}", response_model=Envelope[StudentDocumentListData])
async def list_documents_for_student(
    student_id: str = Path(max_length=50, pattern=STUDENT_ID_PATTERN),
    query: ListQuery = Depends(list_query),
    repository=Depends(get_student_document_repository),
) -> Envelope[StudentDocumentListData]:
    try:
        rows, total = await repository.list_documents(query, student_id=student_id)
    except RepositoryError as exc:
        raise http_error(exc) from exc
    data = StudentDocumentListData(
        student_documents=[StudentDocumentOut(**row) for row in rows],
        pagination=pagination_for(total, query),
    )
    return Envelope(data=data, message="Student documents fetched successfully")


@router.get("/{doc_id}", response_model=Envelope[StudentDocumentOut])
async def get_student_document(
    doc_id: int = Path(gt=0),
    repository=Depends(get_student_document_repository),
) -> Envelope[StudentDocumentOut]:
    try:
        row = await repository.get_document(doc_id)
    except RepositoryError as exc:
        raise http_error(exc) from exc
    return Envelope(data=StudentDocumentOut(**row), message="Document fetched successfully")


@router.put("/{doc_id}", response_model=Envelope[StudentDocumentOut])
@router.patch("/{doc_id}", response_model=Envelope[StudentDocumentOut])
async def update_student_document(
    payload: StudentDocumentUpdateRequest,
    doc_id: int = Path(gt=0),
    repository=Depends(get_student_document_repository),
) -> Envelope[StudentDocumentOut]:
    try:
        row = await repository.update_document(doc_id, payload.model_dump(exclude_unset=True))
    except RepositoryError as exc:
        raise http_error(exc) from exc
    return Envelope(data=StudentDocumentOut(**row), message="Document updated successfully")


@router.delete("/{doc_id}", response_model=Envelope[StudentDocumentOut])
async def delete_student_document(
    doc_id: int = Path(gt=0),
    repository=Depends(get_student_document_repository),
) -> Envelope[StudentDocumentOut]:
    try:
        row = await repository.delete_document(doc_id)
    except RepositoryError as exc:
        raise http_error(exc) from exc
    return Envelope(data=StudentDocumentOut(**row), message="Document deleted successfully")
