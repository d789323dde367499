from fastapi import APIRouter, Depends, Path, Query, status as http_status

from placement_api.api.errors import http_error
from placement_api.schemas.common import STUDENT_ID_PATTERN, Envelope, list_query, pagination_for
from placement_api.schemas.student_offers import (
    StudentOfferCreateRequest,
    StudentOfferListData,
    StudentOfferOut,
    StudentOfferUpdateRequest,
)
from placement_api.services.errors import RepositoryError
from placement_api.services.listing import ListQuery
from placement_api.services.student_offers import get_student_offer_repository

router = APIRouter()


@router.post("", response_model=Envelope[StudentOfferOut], status_code=http_status.HTTP_201_CREATED)
async def create_student_offer(
    payload: StudentOfferCreateRequest,
    repository=Depends(get_student_offer_repository),
) -> Envelope[StudentOfferOut]:
    try:
        row = await repository.create_offer(payload.model_dump())
    except RepositoryError as exc:
        raise http_error(exc) from exc
    return Envelope(data=StudentOfferOut(**row), message="Offer created successfully")


@router.get("", response_model=Envelope[StudentOfferListData])
async def list_student_offers(
    query: ListQuery = Depends(list_query),
    student_id: str | None = Query(default=None, max_length=50, pattern=STUDENT_ID_PATTERN),
    job_id: int | None = Query(default=None, gt=0),
    is_primary_offer: bool | None = Query(default=None),
    is_pbc: bool | None = Query(default=None),
    is_internship: bool | None = Query(default=None),
    repository=Depends(get_student_offer_repository),
) -> Envelope[StudentOfferListData]:
    try:
        rows, total = await repository.list_offers(
            query,
            student_id=student_id,
            job_id=job_id,
            is_primary_offer=is_primary_offer,
            is_pbc=is_pbc,
            is_internship=is_internship,
        )
    except RepositoryError as exc:
        raise http_error(exc) from exc
    data = StudentOfferListData(offers=[StudentOfferOut(**row) for row in rows], pagination=pagination_for(total, query))
    return Envelope(data=data, message="Offers fetched successfully")


@router.get("/student/{student_id}", response_model=Envelope[StudentOfferListData])
async def list_offers_for_student(
    student_id: str = Path(max_length=50, pattern=STUDENT_ID_PATTERN),
    query: ListQuery = Depends(list_query),
    repository=Depends(get_student_offer_repository),
) -> Envelope[StudentOfferListData]:
    try:
        rows, total = await repository.list_offers(query, student_id=student_id)
    except RepositoryError as exc:
        raise http_error(exc) from exc
    data = StudentOfferListData(offers=[StudentOfferOut(**row) for row in rows], pagination=pagination_for(total, query))
    return Envelope(data=data, message="Student offers fetched successfully")


@router.get("/job/{job_id}", response_model=Envelope[StudentOfferListData])
async def list_offers_for_job(
    job_id: int = Path(gt=0),
    query: ListQuery = Depends(list_query),
    repository=Depends(get_student_offer_repository),
) -> Envelope[StudentOfferListData]:
    try:
        rows, total = await repository.list_offers(query, job_id=job_id)
    except RepositoryError as exc:
        raise http_error(exc) from exc
    data = StudentOfferListData(offers=[StudentOfferOut(**row) for row in rows], pagination=pagination_for(total, query))
    return Envelope(data=data, message="Job offers fetched successfully")


@router.get("/{offer_id}", response_model=Envelope[StudentOfferOut])
async def get_student_offer(
    offer_id: int = Path(gt=0),
    repository=Depends(get_student_offer_repository),
) -> Envelope[StudentOfferOut]:
    try:
        row = await repository.get_offer(offer_id)
    except RepositoryError as exc:
        raise http_error(exc) from exc
    return Envelope(data=StudentOfferOut(**row), message="Offer fetched successfully")


@router.put("/{offer_id}", response_model=Envelope[StudentOfferOut])
@router.patch("/{offer_id}", response_model=Envelope[StudentOfferOut])
async def update_student_offer(
    payload: StudentOfferUpdateRequest,
    offer_id: int = Path(gt=0),
    repository=Depends(get_student_offer_repository),
) -> Envelope[StudentOfferOut]:
    try:
        row = await repository.update_offer(offer_id, payload.model_dump(exclude_unset=True))
    except RepositoryError as exc:
        raise http_error(exc) from exc
    return Envelope(data=StudentOfferOut(**row), message="Offer updated successfully")


@router.delete("/{offer_id}", response_model=Envelope[StudentOfferOut])
async def delete_student_offer(
    offer_id: int = Path(gt=0),
    repository=Depends(get_student_offer_repository),
) -> Envelope[StudentOfferOut]:
    try:
        row = await repository.delete_offer(offer_id)
    except RepositoryError as exc:
        raise http_error(exc) from exc
    return Envelope(data=StudentOfferOut(**row), message="Offer deleted successfully")
