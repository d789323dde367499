from fastapi import APIRouter, Depends, Path, status as http_status

from placement_api.api.errors import http_error
from placement_api.schemas.common import Envelope, list_query, pagination_for
from placement_api.schemas.roles import RoleCreateRequest, RoleListData, RoleNameCheck, RoleOut, RoleUpdateRequest
from placement_api.services.errors import RepositoryError
from placement_api.services.listing import ListQuery
from placement_api.services.roles import get_role_repository

router = APIRouter()


@router.post("", response_model=Envelope[RoleOut], status_code=http_status.HTTP_201_CREATED)
async def create_role(payload: RoleCreateRequest, repository=Depends(get_role_repository)) -> Envelope[RoleOut]:
    try:
        row = await repository.create_role(payload.model_dump())
    except RepositoryError as exc:
        raise http_error(exc) from exc
    return Envelope(data=RoleOut(**row), message="Role created successfully")


@router.get("", response_model=Envelope[RoleListData])
async def list_roles(
    query: ListQuery = Depends(list_query),
    repository=Depends(get_role_repository),
) -> Envelope[RoleListData]:
    try:
        rows, total = await repository.list_roles(query)
    except RepositoryError as exc:
        raise http_error(exc) from exc
    data = RoleListData(roles=[RoleOut(**row) for row in rows], pagination=pagination_for(total, query))
    return Envelope(data=data, message="Roles fetched successfully")


@router.get("/check/{role_name}", response_model=Envelope[RoleNameCheck])
async def check_role_name(
    role_name: str = Path(min_length=1, max_length=30),
    repository=Depends(get_role_repository),
) -> Envelope[RoleNameCheck]:
    try:
        exists = await repository.role_name_exists(role_name)
    except RepositoryError as exc:
        raise http_error(exc) from exc
    message = "Role name already exists" if exists else "Role name is available"
    return Envelope(data=RoleNameCheck(role_name=role_name, exists=exists), message=message)


@router.get("/{role_id}", response_model=Envelope[RoleOut])
async def get_role(role_id: int = Path(gt=0), repository=Depends(get_role_repository)) -> Envelope[RoleOut]:
    try:
        row = await repository.get_role(role_id)
    except RepositoryError as exc:
        raise http_error(exc) from exc
    return Envelope(data=RoleOut(**row), message="Role fetched successfully")


@router.put("/{role_id}", response_model=Envelope[RoleOut])
@router.patch("/{role_id}", response_model=Envelope[RoleOut])
async def update_role(
    payload: RoleUpdateRequest,
    role_id: int = Path(gt=0),
    repository=Depends(get_role_repository),
) -> Envelope[RoleOut]:
    try:
        row = await repository.update_role(role_id, payload.model_dump(exclude_unset=True))
    except RepositoryError as exc:
        raise http_error(exc) from exc
    return Envelope(data=RoleOut(**row), message="Role updated successfully")


@router.delete("/{role_id}", response_model=Envelope[RoleOut])
async def delete_role(role_id: int = Path(gt=0), repository=Depends(get_role_repository)) -> Envelope[RoleOut]:
    try:
        row = await repository.delete_role(role_id)
    except RepositoryError as exc:
        raise http_error(exc) from exc
    return Envelope(data=RoleOut(**row), message="Role deleted successfully")
