from fastapi import APIRouter, Depends, Path, Query, Response, status as http_status

from placement_api.api.errors import http_error
from placement_api.schemas.applications import (
    ApplicationCreateRequest,
    ApplicationListData,
    ApplicationOut,
    ApplicationStatusRequest,
    ApplicationUpdateRequest,
    EligibilityRecheckItem,
    EligibilityStatus,
)
from placement_api.schemas.common import STUDENT_ID_PATTERN, Envelope, list_query, pagination_for
from placement_api.services.applications import get_application_repository
from placement_api.services.errors import RepositoryError
from placement_api.services.listing import ListQuery

router = APIRouter()


@router.post("", response_model=Envelope[ApplicationOut], status_code=http_status.HTTP_201_CREATED)
async def create_application(
    payload: ApplicationCreateRequest,
    response: Response,
    repository=Depends(get_application_repository),
) -> Envelope[ApplicationOut]:
    try:
        row = await repository.create_application(payload.model_dump())
    except RepositoryError as exc:
        raise http_error(exc) from exc
    application = ApplicationOut(**row)
    if application.eligibility_status == "eligible":
        return Envelope(data=application, message="Application created successfully")
    response.status_code = http_status.HTTP_202_ACCEPTED
    if application.eligibility_status == "not_eligible":
        return Envelope(data=application, message="Application created but marked as not eligible")
    return Envelope(data=application, message="Application accepted pending eligibility review")


@router.get("", response_model=Envelope[ApplicationListData])
async def list_applications(
    query: ListQuery = Depends(list_query),
    student_id: str | None = Query(default=None, max_length=50, pattern=STUDENT_ID_PATTERN),
    job_id: int | None = Query(default=None, gt=0),
    application_status: str | None = Query(default=None, alias="status", max_length=50),
    eligibility_status: EligibilityStatus | None = Query(default=None),
    repository=Depends(get_application_repository),
) -> Envelope[ApplicationListData]:
    try:
        rows, total = await repository.list_applications(
            query,
            student_id=student_id,
            job_id=job_id,
            status=application_status,
            eligibility_status=eligibility_status,
        )
    except RepositoryError as exc:
        raise http_error(exc) from exc
    data = ApplicationListData(
        applications=[ApplicationOut(**row) for row in rows],
        pagination=pagination_for(total, query),
    )
    return Envelope(data=data, message="Applications fetched successfully")


@router.post("/eligibility/recheck", response_model=Envelope[list[EligibilityRecheckItem]])
async def recheck_eligibility(repository=Depends(get_application_repository)) -> Envelope[list[EligibilityRecheckItem]]:
    try:
        results = await repository.recheck_eligibility()
    except RepositoryError as exc:
        raise http_error(exc) from exc
    return Envelope(
        data=[EligibilityRecheckItem(**item) for item in results],
        message=f"Processed {len(results)} applications",
    )


@router.get("/student/{student_id}", response_model=Envelope[ApplicationListData])
async def list_student_applications(
    student_id: str = Path(max_length=50, pattern=STUDENT_ID_PATTERN),
    query: ListQuery = Depends(list_query),
    repository=Depends(get_application_repository),
) -> Envelope[ApplicationListData]:
    try:
        rows, total = await repository.list_applications(query, student_id=student_id)
    except RepositoryError as exc:
        raise http_error(exc) from exc
    data = ApplicationListData(
        applications=[ApplicationOut(**row) for row in rows],
        pagination=pagination_for(total, query),
    )
    return Envelope(data=data, message="Student applications fetched successfully")


@router.get("/job/{job_id}", response_model=Envelope[ApplicationListData])
async def list_job_applications(
    job_id: int = Path(gt=0),
    query: ListQuery = Depends(list_query),
    repository=Depends(get_application_repository),
) -> Envelope[ApplicationListData]:
    try:
        rows, total = await repository.list_applications(query, job_id=job_id)
    except RepositoryError as exc:
        raise http_error(exc) from exc
    data = ApplicationListData(
        applications=[ApplicationOut(**row) for row in rows],
        pagination=pagination_for(total, query),
    )
    return Envelope(data=data, message="Job applications fetched successfully")


@router.get("/{application_id}", response_model=Envelope[ApplicationOut])
async def get_application(
    application_id: int = Path(gt=0),
    repository=Depends(get_application_repository),
) -> Envelope[ApplicationOut]:
    try:
        row = await repository.get_application(application_id)
    except RepositoryError as exc:
        raise http_error(exc) from exc
    return Envelope(data=ApplicationOut(**row), message="Application fetched successfully")


@router.put("/{application_id}", response_model=Envelope[ApplicationOut])
@router.patch("/{application_id}", response_model=Envelope[ApplicationOut])
async def update_application(
    payload: ApplicationUpdateRequest,
    application_id: int = Path(gt=0),
    repository=Depends(get_application_repository),
) -> Envelope[ApplicationOut]:
    try:
        row = await repository.update_application(application_id, payload.model_dump(exclude_unset=True))
    except RepositoryError as exc:
        raise http_error(exc) from exc
    return Envelope(data=ApplicationOut(**row), message="Application updated successfully")


@router.patch("/{application_id}/status", response_model=Envelope[ApplicationOut])
async def update_application_status(
    payload: ApplicationStatusRequest,
    application_id: int = Path(gt=0),
    repository=Depends(get_application_repository),
) -> Envelope[ApplicationOut]:
    try:
        row = await repository.update_application(application_id, payload.model_dump(exclude_unset=True))
    except RepositoryError as exc:
        raise http_error(exc) from exc
    return Envelope(data=ApplicationOut(**row), message="Application status updated successfully")


@router.delete("/{application_id}", response_model=Envelope[ApplicationOut])
async def delete_application(
    application_id: int = Path(gt=0),
    repository=Depends(get_application_repository),
) -> Envelope[ApplicationOut]:
    try:
        row = await repository.delete_application(application_id)
    except RepositoryError as exc:
        raise http_error(exc) from exc
    return Envelope(data=ApplicationOut(**row), message="Application deleted successfully")
