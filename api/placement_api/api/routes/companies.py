from fastapi import APIRouter, Depends, Path, status as http_status

from placement_api.api.errors import http_error
from placement_api.schemas.common import Envelope, list_query, pagination_for
from placement_api.schemas.companies import CompanyCreateRequest, CompanyListData, CompanyOut, CompanyUpdateRequest
from placement_api.services.companies import get_company_repository
from placement_api.services.errors import RepositoryError
from placement_api.services.listing import ListQuery

router = APIRouter()


@router.post("", response_model=Envelope[CompanyOut], status_code=http_status.HTTP_201_CREATED)
async def create_company(
    payload: CompanyCreateRequest,
    repository=Depends(get_company_repository),
) -> Envelope[CompanyOut]:
    try:
        row = await repository.create_company(payload.model_dump())
    except RepositoryError as exc:
        raise http_error(exc) from exc
    return Envelope(data=CompanyOut(**row), message="Company created successfully")


@router.get("", response_model=Envelope[CompanyListData])
async def list_companies(
    query: ListQuery = Depends(list_query),
    repository=Depends(get_company_repository),
) -> Envelope[CompanyListData]:
    try:
        rows, total = await repository.list_companies(query)
    except RepositoryError as exc:
        raise http_error(exc) from exc
    data = CompanyListData(companies=[CompanyOut(**row) for row in rows], pagination=pagination_for(total, query))
    return Envelope(data=data, message="Companies fetched successfully")


@router.get("/{company_id}", response_model=Envelope[CompanyOut])
async def get_company(
    company_id: int = Path(gt=0),
    repository=Depends(get_company_repository),
) -> Envelope[CompanyOut]:
    try:
        row = await repository.get_company(company_id)
    except RepositoryError as exc:
        raise http_error(exc) from exc
    return Envelope(data=CompanyOut(**row), message="Company fetched successfully")


@router.put("/{company_id}", response_model=Envelope[CompanyOut])
@router.patch("/{company_id}", response_model=Envelope[CompanyOut])
async def update_company(
    payload: CompanyUpdateRequest,
    company_id: int = Path(gt=0),
    repository=Depends(get_company_repository),
) -> Envelope[CompanyOut]:
    try:
        row = await repository.update_company(company_id, payload.model_dump(exclude_unset=True))
    except RepositoryError as exc:
        raise http_error(exc) from exc
    return Envelope(data=CompanyOut(**row), message="Company updated successfully")


@router.delete("/{company_id}", response_model=Envelope[CompanyOut])
async def delete_company(
    company_id: int = Path(gt=0),
    repository=Depends(get_company_repository),
) -> Envelope[CompanyOut]:
    try:
        row = await repository.delete_company(company_id)
    except RepositoryError as exc:
        raise http_error(exc) from exc
    return Envelope(data=CompanyOut(**row), message="Company deleted successfully")
