import logging
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Path, Query, status as http_status

from placement_api.api.errors import http_error
from placement_api.core.config import Settings, get_settings
from placement_api.core.security import (
    ACCESS_TOKEN,
    REFRESH_TOKEN,
    create_token,
    decode_token,
    get_current_user,
    issue_tokens,
    token_claims,
)
from placement_api.schemas.common import Envelope, list_query, pagination_for
from placement_api.schemas.users import (
    ChangePasswordRequest,
    CurrentUserOut,
    LoginData,
    LoginRequest,
    RefreshRequest,
    TokenPair,
    UserCreateRequest,
    UserListData,
    UserOut,
    UserPermissionOut,
    UserStatusOut,
    UserUpdateRequest,
)
from placement_api.services.errors import RepositoryError
from placement_api.services.listing import ListQuery
from placement_api.services.users import get_user_repository

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/register", response_model=Envelope[UserOut], status_code=http_status.HTTP_201_CREATED)
async def register_user(payload: UserCreateRequest, repository=Depends(get_user_repository)) -> Envelope[UserOut]:
    try:
        row = await repository.create_user(payload.model_dump())
    except RepositoryError as exc:
        raise http_error(exc) from exc
    return Envelope(data=UserOut(**row), message="User created successfully")


@router.post("/login", response_model=Envelope[LoginData])
async def login(
    payload: LoginRequest,
    settings: Settings = Depends(get_settings),
    repository=Depends(get_user_repository),
) -> Envelope[LoginData]:
    try:
        user = await repository.authenticate_user(payload.username, payload.password)
    except RepositoryError as exc:
        raise http_error(exc) from exc
    data = LoginData(user=UserOut(**user), tokens=TokenPair(**issue_tokens(user, settings)))
    return Envelope(data=data, message="Login successful")


@router.post("/refresh", response_model=Envelope[TokenPair])
async def refresh_access_token(
    payload: RefreshRequest,
    settings: Settings = Depends(get_settings),
    repository=Depends(get_user_repository),
) -> Envelope[TokenPair]:
    claims = decode_token(payload.refresh_token, REFRESH_TOKEN, settings)
    if claims is None:
        raise HTTPException(status_code=http_status.HTTP_401_UNAUTHORIZED, detail="Invalid or expired refresh token")
    try:
        user = await repository.get_user(claims["user_id"])
    except RepositoryError as exc:
        raise http_error(exc) from exc
    if not user["is_active"]:
        raise HTTPException(status_code=http_status.HTTP_403_FORBIDDEN, detail="Account is inactive or disabled")
    tokens = TokenPair(
        access_token=create_token(token_claims(user), ACCESS_TOKEN, settings),
        expires_in=settings.access_token_expire_minutes * 60,
    )
    logger.info("access token refreshed user_id=%s", user["user_id"])
    return Envelope(data=tokens, message="Token refreshed successfully")


@router.post("/logout", response_model=Envelope[None])
async def logout() -> Envelope[None]:
    # Tokens are stateless; the client discards them.
    return Envelope(message="Logged out successfully")


@router.get("/me", response_model=Envelope[CurrentUserOut])
async def whoami(
    claims: dict[str, Any] = Depends(get_current_user),
    repository=Depends(get_user_repository),
) -> Envelope[CurrentUserOut]:
    try:
        profile = await repository.get_profile(claims)
    except RepositoryError as exc:
        raise http_error(exc) from exc
    return Envelope(data=CurrentUserOut(**profile), message="User information retrieved successfully")


@router.get("/me/permissions", response_model=Envelope[list[UserPermissionOut]])
async def my_permissions(
    claims: dict[str, Any] = Depends(get_current_user),
    repository=Depends(get_user_repository),
) -> Envelope[list[UserPermissionOut]]:
    try:
        rows = await repository.get_user_permissions(claims["user_id"])
    except RepositoryError as exc:
        raise http_error(exc) from exc
    return Envelope(data=[UserPermissionOut(**row) for row in rows], message="User permissions retrieved successfully")


@router.get("", response_model=Envelope[UserListData])
async def list_users(
    query: ListQuery = Depends(list_query),
    is_active: bool | None = Query(default=None),
    role_id: int | None = Query(default=None, ge=1),
    repository=Depends(get_user_repository),
) -> Envelope[UserListData]:
    try:
        rows, total = await repository.list_users(query, is_active=is_active, role_id=role_id)
    except RepositoryError as exc:
        raise http_error(exc) from exc
    data = UserListData(users=[UserOut(**row) for row in rows], pagination=pagination_for(total, query))
    return Envelope(data=data, message="Users fetched successfully")


@router.get("/{user_id}", response_model=Envelope[UserOut])
async def get_user(user_id: int = Path(gt=0), repository=Depends(get_user_repository)) -> Envelope[UserOut]:
    try:
        row = await repository.get_user(user_id)
    except RepositoryError as exc:
        raise http_error(exc) from exc
    return Envelope(data=UserOut(**row), message="User fetched successfully")


@router.get("/{user_id}/permissions", response_model=Envelope[list[UserPermissionOut]])
async def get_user_permissions(
    user_id: int = Path(gt=0),
    repository=Depends(get_user_repository),
) -> Envelope[list[UserPermissionOut]]:
    try:
        rows = await repository.get_user_permissions(user_id)
    except RepositoryError as exc:
        raise http_error(exc) from exc
    return Envelope(data=[UserPermissionOut(**row) for row in rows], message="User permissions retrieved successfully")


@router.put("/{user_id}/change-password", response_model=Envelope[UserStatusOut])
async def change_password(
    payload: ChangePasswordRequest,
    user_id: int = Path(gt=0),
    repository=Depends(get_user_repository),
) -> Envelope[UserStatusOut]:
    try:
        row = await repository.change_password(user_id, payload.current_password, payload.new_password)
    except RepositoryError as exc:
        raise http_error(exc) from exc
    return Envelope(data=UserStatusOut(**row), message="Password changed successfully")


@router.put("/{user_id}/last-login", response_model=Envelope[UserStatusOut])
async def update_last_login(user_id: int = Path(gt=0), repository=Depends(get_user_repository)) -> Envelope[UserStatusOut]:
    try:
        row = await repository.touch_last_login(user_id)
    except RepositoryError as exc:
        raise http_error(exc) from exc
    return Envelope(data=UserStatusOut(**row), message="Last login updated successfully")


@router.put("/{user_id}", response_model=Envelope[UserOut])
@router.patch("/{user_id}", response_model=Envelope[UserOut])
async def update_user(
    payload: UserUpdateRequest,
    user_id: int = Path(gt=0),
    repository=Depends(get_user_repository),
) -> Envelope[UserOut]:
    try:
        row = await repository.update_user(user_id, payload.model_dump(exclude_unset=True))
    except RepositoryError as exc:
        raise http_error(exc) from exc
    return Envelope(data=UserOut(**row), message="User updated successfully")


@router.delete("/{user_id}", response_model=Envelope[UserStatusOut])
async def delete_user(user_id: int = Path(gt=0), repository=Depends(get_user_repository)) -> Envelope[UserStatusOut]:
    try:
        row = await repository.deactivate_user(user_id)
    except RepositoryError as exc:
        raise http_error(exc) from exc
    return Envelope(data=UserStatusOut(**row), message="User deleted successfully")
