from typing import List

from fastapi import APIRouter, Depends, HTTPException, status
from sqlmodel import Session

from pos_api.config import Settings
from pos_api.database import get_app_settings, get_session
from pos_api.models.admin import Admin, AdminRole
from pos_api.schemas.admin_schemas import (
    AdminLogin,
    AdminRegister,
    AdminResponse,
    LoginResponse,
    ProfileUpdate,
)
from pos_api.services import admin_service
from pos_api.utils.token import get_current_admin, require_master_admin

router = APIRouter()


# -------- AUTH ROUTES --------

@router.post("/register", response_model=AdminResponse, status_code=201)
def register_admin(payload: AdminRegister, session: Session = Depends(get_session)):
    # Open registration only bootstraps the first (master) account
    if admin_service.admin_count(session) > 0:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Registration is closed. Ask the master admin for an account.",
        )

    admin = admin_service.register_admin(
        session, payload.username, payload.password, role=AdminRole.MASTER_ADMIN
    )
    return AdminResponse.model_validate(admin)


@router.post("/login", response_model=LoginResponse)
def login(
    payload: AdminLogin,
    session: Session = Depends(get_session),
    app_settings: Settings = Depends(get_app_settings),
):
    result = admin_service.login_admin(
        session, payload.username, payload.password, app_settings=app_settings
    )
    if result is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials",
        )

    return LoginResponse(
        admin=AdminResponse.model_validate(result["admin"]),
        access_token=result["token"],
    )


# -------- PROFILE --------

@router.get("/profile", response_model=AdminResponse)
def get_profile(current_admin: Admin = Depends(get_current_admin)):
    return AdminResponse.model_validate(current_admin)


@router.put("/profile", response_model=AdminResponse)
def update_profile(
    payload: ProfileUpdate,
    session: Session = Depends(get_session),
    current_admin: Admin = Depends(get_current_admin),
):
    admin = admin_service.update_profile(
        session,
        current_admin,
        username=payload.username,
        current_password=payload.current_password,
        new_password=payload.new_password,
    )
    return AdminResponse.model_validate(admin)


# -------- MASTER ADMIN --------

@router.get("/all", response_model=List[AdminResponse])
def list_admins(
    session: Session = Depends(get_session),
    _: Admin = Depends(require_master_admin),
):
    return [AdminResponse.model_validate(a) for a in admin_service.list_admins(session)]


@router.post("/create", response_model=AdminResponse, status_code=201)
def create_admin(
    payload: AdminRegister,
    session: Session = Depends(get_session),
    _: Admin = Depends(require_master_admin),
):
    admin = admin_service.register_admin(session, payload.username, payload.password)
    return AdminResponse.model_validate(admin)


@router.delete("/{admin_id}")
def delete_admin(
    admin_id: int,
    session: Session = Depends(get_session),
    _: Admin = Depends(require_master_admin),
):
    admin_service.delete_admin(session, admin_id)
    return {"message": "Admin deleted successfully"}
