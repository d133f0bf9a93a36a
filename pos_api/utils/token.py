from jose import jwt, JWTError
from datetime import datetime, timedelta, timezone
from typing import Optional
from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from sqlmodel import Session
from pos_api.config import Settings, settings as default_settings
from pos_api.database import get_app_settings, get_session
from pos_api.models.admin import Admin, AdminRole

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/admin/login")


def create_access_token(
    data: dict,
    expires_delta: Optional[timedelta] = None,
    app_settings: Optional[Settings] = None,
):
    settings = app_settings or default_settings
    to_encode = data.copy()

    expire = datetime.now(timezone.utc) + (
        expires_delta
        if expires_delta
        else timedelta(minutes=settings.access_token_expire_minutes)
    )

    to_encode.update({"exp": expire})

    encoded_jwt = jwt.encode(
        to_encode,
        settings.secret_key,
        algorithm=settings.algorithm
    )
    return encoded_jwt


def decode_access_token(token: str, app_settings: Optional[Settings] = None):
    settings = app_settings or default_settings
    try:
        payload = jwt.decode(
            token,
            settings.secret_key,
            algorithms=[settings.algorithm],
        )
        return payload
    except JWTError:
        return None


def get_current_admin(
    token: str = Depends(oauth2_scheme),
    session: Session = Depends(get_session),
    app_settings: Settings = Depends(get_app_settings),
) -> Admin:
    payload = decode_access_token(token, app_settings)

    if payload is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        )

    admin_id = payload.get("admin_id") or payload.get("sub")

    if admin_id is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token payload"
        )

    admin = session.get(Admin, int(admin_id))

    if admin is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Admin not found"
        )

    return admin


def require_master_admin(current_admin: Admin = Depends(get_current_admin)) -> Admin:
    if current_admin.role != AdminRole.MASTER_ADMIN:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Access denied. Only master admin can perform this action."
        )
    return current_admin
