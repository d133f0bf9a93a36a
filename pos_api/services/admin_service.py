# pos_api/services/admin_service.py
from datetime import datetime
from typing import Optional

from sqlmodel import Session, func, select

from pos_api.config import Settings
from pos_api.errors import ConflictError, NotFoundError, ValidationError
from pos_api.models.admin import Admin, AdminRole
from pos_api.utils.hash import hash_password, verify_password
from pos_api.utils.token import create_access_token

MIN_PASSWORD_LENGTH = 6


def _validate_credentials(username: str, password: str):
    if not username or not password:
        raise ValidationError("Username and password are required")
    if len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")


def get_by_username(session: Session, username: str) -> Optional[Admin]:
    return session.exec(select(Admin).where(Admin.username == username)).first()


def admin_count(session: Session) -> int:
    return session.exec(select(func.count(Admin.id))).one()


def register_admin(
    session: Session,
    username: str,
    password: str,
    role: AdminRole = AdminRole.ADMIN,
) -> Admin:
    _validate_credentials(username, password)

    if get_by_username(session, username):
        raise ConflictError("Admin with this username already exists")

    admin = Admin(username=username, password=hash_password(password), role=role)
    session.add(admin)
    session.commit()
    session.refresh(admin)
    return admin


def login_admin(
    session: Session,
    username: str,
    password: str,
    app_settings: Optional[Settings] = None,
) -> Optional[dict]:
    """Returns the admin and a bearer token, or None for bad credentials."""
    admin = get_by_username(session, username)

    if not admin or not verify_password(password, admin.password):
        return None

    token = create_access_token(
        {"admin_id": admin.id, "username": admin.username, "role": admin.role.value},
        app_settings=app_settings,
    )
    return {"admin": admin, "token": token}


def update_profile(
    session: Session,
    admin: Admin,
    username: Optional[str] = None,
    current_password: Optional[str] = None,
    new_password: Optional[str] = None,
) -> Admin:
    if username and username != admin.username:
        if get_by_username(session, username):
            raise ConflictError("Username is already taken")
        admin.username = username

    if current_password and new_password:
        if not verify_password(current_password, admin.password):
            raise ValidationError("Current password is incorrect")
        _validate_credentials(admin.username, new_password)
        admin.password = hash_password(new_password)

    admin.updated_at = datetime.now()
    session.add(admin)
    session.commit()
    session.refresh(admin)
    return admin


def list_admins(session: Session):
    return session.exec(
        select(Admin)
        .where(Admin.role == AdminRole.ADMIN)
        .order_by(Admin.created_at.desc())
    ).all()


def delete_admin(session: Session, admin_id: int) -> Admin:
    admin = session.get(Admin, admin_id)
    if not admin:
        raise NotFoundError("Admin not found")

    if admin.role == AdminRole.MASTER_ADMIN:
        raise ConflictError("Cannot delete master admin")

    session.delete(admin)
    session.commit()
    return admin
