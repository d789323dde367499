from fastapi import APIRouter, Depends, HTTPException, Path, Query, Response, status as http_status

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
from placement_api.schemas.student_certifications import (
    StudentCertificationCreateRequest,
    StudentCertificationListData,
    StudentCertificationOut,
    StudentCertificationUpdateRequest,
)
from placement_api.services.errors import RepositoryError
from placement_api.services.listing import ListQuery
from placement_api.services.student_certifications import get_student_certification_repository

router = APIRouter()


@router.post("", response_model=Envelope[StudentCertificationOut], status_code=http_status.HTTP_201_CREATED)
async def create_student_certification(
    payload: StudentCertificationCreateRequest,
    repository=Depends(get_student_certification_repository),
) -> Envelope[StudentCertificationOut]:
    try:
        row = await repository.create_certification(payload.model_dump())
    except RepositoryError as exc:
        raise http_error(exc) from exc
    return Envelope(data=StudentCertificationOut(**row), message="Certification created successfully")


@router.post(
    "/import",
    response_model=Envelope[ImportResult[StudentCertificationOut]],
    status_code=http_status.HTTP_201_CREATED,
)
async def import_student_certifications(
    payload: ImportRequest,
    response: Response,
    repository=Depends(get_student_certification_repository),
) -> Envelope[ImportResult[StudentCertificationOut]]:
    return await run_import(
        payload,
        response,
        create_model=StudentCertificationCreateRequest,
        out_model=StudentCertificationOut,
        import_rows=repository.import_certifications,
        noun="certification",
    )


@router.get("", response_model=Envelope[StudentCertificationListData])
async def list_student_certifications(
    query: ListQuery = Depends(list_query),
    repository=Depends(get_student_certification_repository),
) -> Envelope[StudentCertificationListData]:
    try:
        rows, total = await repository.list_certifications(query)
    except RepositoryError as exc:
        raise http_error(exc) from exc
    data = StudentCertificationListData(
        student_certifications=[StudentCertificationOut(**row) for row in rows],
        pagination=pagination_for(total, query),
    )
    return Envelope(data=data, message="Certifications fetched successfully")


@router.get("/search", response_model=Envelope[StudentCertificationListData])
async def search_certifications_by_skill(
    skill: str | None = Query(default=None, max_length=200),
    query: ListQuery = Depends(list_query),
    repository=Depends(get_student_certification_repository),
) -> Envelope[StudentCertificationListData]:
    if skill is None or not skill.strip():
        raise HTTPException(status_code=http_status.HTTP_400_BAD_REQUEST, detail="Please provide 'skill' query parameter")
    try:
        rows, total = await repository.list_certifications(query, skill=skill)
    except RepositoryError as exc:
        raise http_error(exc) from exc
    data = StudentCertificationListData(
        student_certifications=[StudentCertificationOut(**row) for row in rows],
        pagination=pagination_for(total, query),
    )
    return Envelope(data=data, message=f"Certifications matching '{skill.strip()}' fetched successfully")


@router.get("/student/{student_id}", response_model=Envelope[StudentCertificationListData])
async def list_certifications_for_student(
    student_id: str = Path(max_length=50, pattern=STUDENT_ID_PATTERN),
    query: ListQuery = Depends(list_query),
    repository=Depends(get_student_certification_repository),
) -> Envelope[StudentCertificationListData]:
    try:
        rows, total = await repository.list_certifications(query, student_id=student_id)
    except RepositoryError as exc:
        raise http_error(exc) from exc
    data = StudentCertificationListData(
        student_certifications=[StudentCertificationOut(**row) for row in rows],
        pagination=pagination_for(total, query),
    )
    return Envelope(data=data, message="Student certifications fetched successfully")


@router.get("/{cert_id}", response_model=Envelope[StudentCertificationOut])
async def get_student_certification(
    cert_id: int = Path(gt=0),
    repository=Depends(get_student_certification_repository),
) -> Envelope[StudentCertificationOut]:
    try:
        row = await repository.get_certification(cert_id)
    except RepositoryError as exc:
        raise http_error(exc) from exc
    return Envelope(data=StudentCertificationOut(**row), message="Certification fetched successfully")


@router.put("/{cert_id}", response_model=Envelope[StudentCertificationOut])
@router.patch("/{cert_id}", response_model=Envelope[StudentCertificationOut])
async def update_student_certification(
    payload: StudentCertificationUpdateRequest,
    cert_id: int = Path(gt=0),
    repository=Depends(get_student_certification_repository),
) -> Envelope[StudentCertificationOut]:
    try:
        row = await repository.update_certification(cert_id, payload.model_dump(exclude_unset=True))
    except RepositoryError as exc:
        raise http_error(exc) from exc
    return Envelope(data=StudentCertificationOut(**row), message="Certification updated successfully")


@router.delete("/{cert_id}", response_model=Envelope[StudentCertificationOut])
async def delete_student_certification(
    cert_id: int = Path(gt=0),
    repository=Depends(get_student_certification_repository),
) -> Envelope[StudentCertificationOut]:
    try:
        row = await repository.delete_certification(cert_id)
    except RepositoryError as exc:
        raise http_error(exc) from exc
    return Envelope(data=StudentCertificationOut(**row), message="Certification deleted successfully")
