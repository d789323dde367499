from fastapi import APIRouter, Depends, Path, Query, status as http_status

from placement_api.api.errors import http_error
from placement_api.schemas.common import Envelope, list_query, pagination_for
from placement_api.schemas.job_requirements import (
    JobRequirementCreateRequest,
    JobRequirementListData,
    JobRequirementOut,
    JobRequirementUpdateRequest,
)
from placement_api.services.errors import RepositoryError
from placement_api.services.job_requirements import get_job_requirement_repository
from placement_api.services.listing import ListQuery

router = APIRouter()


@router.post("", response_model=Envelope[JobRequirementOut], status_code=http_status.HTTP_201_CREATED)
async def create_job_requirement(
    payload: JobRequirementCreateRequest,
    repository=Depends(get_job_requirement_repository),
) -> Envelope[JobRequirementOut]:
    try:
        row = await repository.create_requirement(payload.model_dump())
    except RepositoryError as exc:
        raise http_error(exc) from exc
    return Envelope(data=JobRequirementOut(**row), message="Job requirement created successfully")


@router.get("", response_model=Envelope[JobRequirementListData])
async def list_job_requirements(
    query: ListQuery = Depends(list_query),
    job_id: int | None = Query(default=None, gt=0),
    repository=Depends(get_job_requirement_repository),
) -> Envelope[JobRequirementListData]:
    try:
        rows, total = await repository.list_requirements(query, job_id=job_id)
    except RepositoryError as exc:
        raise http_error(exc) from exc
    data = JobRequirementListData(
        job_requirements=[JobRequirementOut(**row) for row in rows],
        pagination=pagination_for(total, query),
    )
    return Envelope(data=data, message="Job requirements fetched successfully")


@router.get("/job/{job_id}", response_model=Envelope[JobRequirementOut])
async def get_job_requirement_for_job(
    job_id: int = Path(gt=0),
    repository=Depends(get_job_requirement_repository),
) -> Envelope[JobRequirementOut]:
    try:
        row = await repository.get_requirement_for_job(job_id)
    except RepositoryError as exc:
        raise http_error(exc) from exc
    return Envelope(data=JobRequirementOut(**row), message="Job requirement fetched successfully")


@router.put("/job/{job_id}", response_model=Envelope[JobRequirementOut])
async def update_job_requirement_for_job(
    payload: JobRequirementUpdateRequest,
    job_id: int = Path(gt=0),
    repository=Depends(get_job_requirement_repository),
) -> Envelope[JobRequirementOut]:
    try:
        row = await repository.update_requirement_for_job(job_id, payload.model_dump(exclude_unset=True))
    except RepositoryError as exc:
        raise http_error(exc) from exc
    return Envelope(data=JobRequirementOut(**row), message="Job requirement updated successfully")


@router.delete("/job/{job_id}", response_model=Envelope[JobRequirementOut])
async def delete_job_requirement_for_job(
    job_id: int = Path(gt=0),
    repository=Depends(get_job_requirement_repository),
) -> Envelope[JobRequirementOut]:
    try:
        row = await repository.delete_requirement_for_job(job_id)
    except RepositoryError as exc:
        raise http_error(exc) from exc
    return Envelope(data=JobRequirementOut(**row), message="Job requirement deleted successfully")


@router.get("/{requirement_id}", response_model=Envelope[JobRequirementOut])
async def get_job_requirement(
    requirement_id: int = Path(gt=0),
    repository=Depends(get_job_requirement_repository),
) -> Envelope[JobRequirementOut]:
    try:
        row = await repository.get_requirement(requirement_id)
    except RepositoryError as exc:
        raise http_error(exc) from exc
    return Envelope(data=JobRequirementOut(**row), message="Job requirement fetched successfully")


@router.put("/{requirement_id}", response_model=Envelope[JobRequirementOut])
@router.patch("/{requirement_id}", response_model=Envelope[JobRequirementOut])
async def update_job_requirement(
    payload: JobRequirementUpdateRequest,
    requirement_id: int = Path(gt=0),
    repository=Depends(get_job_requirement_repository),
) -> Envelope[JobRequirementOut]:
    try:
        row = await repository.update_requirement(requirement_id, payload.model_dump(exclude_unset=True))
    except RepositoryError as exc:
        raise http_error(exc) from exc
    return Envelope(data=JobRequirementOut(**row), message="Job requirement updated successfully")


@router.delete("/{requirement_id}", response_model=Envelope[JobRequirementOut])
async def delete_job_requirement(
    requirement_id: int = Path(gt=0),
    repository=Depends(get_job_requirement_repository),
) -> Envelope[JobRequirementOut]:
    try:
        row = await repository.delete_requirement(requirement_id)
    except RepositoryError as exc:
        raise http_error(exc) from exc
    return Envelope(data=JobRequirementOut(**row), message="Job requirement deleted successfully")
