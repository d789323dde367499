from fastapi import APIRouter, Depends, Path, Query, status as http_status

from placement_api.api.errors import http_error
from placement_api.schemas.common import Envelope, list_query, pagination_for
from placement_api.schemas.jobs import JobCreateRequest, JobListData, JobOut, JobUpdateRequest
from placement_api.services.errors import RepositoryError
from placement_api.services.jobs import get_job_repository
from placement_api.services.listing import ListQuery

router = APIRouter()


@router.post("", response_model=Envelope[JobOut], status_code=http_status.HTTP_201_CREATED)
async def create_job(payload: JobCreateRequest, repository=Depends(get_job_repository)) -> Envelope[JobOut]:
    try:
        row = await repository.create_job(payload.model_dump())
    except RepositoryError as exc:
        raise http_error(exc) from exc
    return Envelope(data=JobOut(**row), message="Job created successfully")


@router.get("", response_model=Envelope[JobListData])
async def list_jobs(
    query: ListQuery = Depends(list_query),
    company_id: int | None = Query(default=None, gt=0),
    job_status: str | None = Query(default=None, alias="status", max_length=20),
    repository=Depends(get_job_repository),
) -> Envelope[JobListData]:
    try:
        rows, total = await repository.list_jobs(query, company_id=company_id, status=job_status)
    except RepositoryError as exc:
        raise http_error(exc) from exc
    data = JobListData(jobs=[JobOut(**row) for row in rows], pagination=pagination_for(total, query))
    return Envelope(data=data, message="Jobs fetched successfully")


@router.get("/company/{company_id}", response_model=Envelope[JobListData])
async def list_company_jobs(
    company_id: int = Path(gt=0),
    query: ListQuery = Depends(list_query),
    repository=Depends(get_job_repository),
) -> Envelope[JobListData]:
    try:
        rows, total = await repository.list_jobs(query, company_id=company_id)
    except RepositoryError as exc:
        raise http_error(exc) from exc
    data = JobListData(jobs=[JobOut(**row) for row in rows], pagination=pagination_for(total, query))
    return Envelope(data=data, message="Company jobs fetched successfully")


@router.get("/{job_id}", response_model=Envelope[JobOut])
async def get_job(job_id: int = Path(gt=0), repository=Depends(get_job_repository)) -> Envelope[JobOut]:
    try:
        row = await repository.get_job(job_id)
    except RepositoryError as exc:
        raise http_error(exc) from exc
    return Envelope(data=JobOut(**row), message="Job fetched successfully")


@router.put("/{job_id}", response_model=Envelope[JobOut])
@router.patch("/{job_id}", response_model=Envelope[JobOut])
async def update_job(
    payload: JobUpdateRequest,
    job_id: int = Path(gt=0),
    repository=Depends(get_job_repository),
) -> Envelope[JobOut]:
    try:
        row = await repository.update_job(job_id, payload.model_dump(exclude_unset=True))
    except RepositoryError as exc:
        raise http_error(exc) from exc
    return Envelope(data=JobOut(**row), message="Job updated successfully")


@router.delete("/{job_id}", response_model=Envelope[JobOut])
async def delete_job(job_id: int = Path(gt=0), repository=Depends(get_job_repository)) -> Envelope[JobOut]:
    try:
        row = await repository.delete_job(job_id)
    except RepositoryError as exc:
        raise http_error(exc) from exc
    return Envelope(data=JobOut(**row), message="Job deleted successfully")
