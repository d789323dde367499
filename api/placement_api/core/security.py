from datetime import datetime, timedelta, timezone
from typing import Any

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from passlib.context import CryptContext

from placement_api.core.config import Settings, get_settings

ACCESS_TOKEN = "access"
REFRESH_TOKEN = "refresh"
CLAIM_NAMES = ("user_id", "username", "role_id", "role_name")

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")
bearer_scheme = HTTPBearer(auto_error=False)


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, password_hash: str) -> bool:
    return pwd_context.verify(plain_password, password_hash)


def token_claims(user: dict[str, Any]) -> dict[str, Any]:
    return {name: user.get(name) for name in CLAIM_NAMES}


def _secret_for(token_type: str, settings: Settings) -> str:
    if token_type == REFRESH_TOKEN:
        return settings.jwt_refresh_secret_key
    return settings.jwt_secret_key


def create_token(claims: dict[str, Any], token_type: str, settings: Settings) -> str:
    """Sign `claims` as an access or refresh token.

    The two kinds use different secrets and lifetimes, and carry their kind in
    the `type` claim so one cannot be replayed as the other.
    """
    issued_at = datetime.now(timezone.utc)
    if token_type == REFRESH_TOKEN:
        lifetime = timedelta(days=settings.refresh_token_expire_days)
    else:
        lifetime = timedelta(minutes=settings.access_token_expire_minutes)
    payload = {**claims, "type": token_type, "iat": issued_at, "exp": issued_at + lifetime}
    return jwt.encode(payload, _secret_for(token_type, settings), algorithm=settings.jwt_algorithm)


def decode_token(token: str, token_type: str, settings: Settings) -> dict[str, Any] | None:
    try:
        payload = jwt.decode(token, _secret_for(token_type, settings), algorithms=[settings.jwt_algorithm])
    except JWTError:
        return None
    if payload.get("type") != token_type or payload.get("user_id") is None:
        return None
    return payload


def issue_tokens(user: dict[str, Any], settings: Settings) -> dict[str, Any]:
    claims = token_claims(user)
    return {
        "access_token": create_token(claims, ACCESS_TOKEN, settings),
        "refresh_token": create_token(claims, REFRESH_TOKEN, settings),
        "token_type": "bearer",
        "expires_in": settings.access_token_expire_minutes * 60,
    }


async def get_current_user(
    settings: Settings = Depends(get_settings),
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> dict[str, Any]:
    if credentials is None or not credentials.credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication required",
            headers={"WWW-Authenticate": "Bearer"},
        )
    payload = decode_token(credentials.credentials, ACCESS_TOKEN, settings)
    if payload is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return payload
