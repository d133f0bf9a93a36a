import logging
from typing import Optional

from sqlmodel import Session, select

from pos_api.config import Settings, settings as default_settings
from pos_api.models.admin import AdminRole
from pos_api.models.payment_method_setting import PaymentMethodSetting
from pos_api.services import admin_service

logger = logging.getLogger(__name__)

DEFAULT_PAYMENT_METHODS = [
    {
        "method": "BANK_TRANSFER",
        "name": "Bank Transfer",
        "description": "Transfer to our bank account and upload the receipt",
        "requires_proof": True,
        "sort_order": 1,
    },
    {
        "method": "CASH",
        "name": "Cash",
        "description": "Pay at the counter",
        "requires_proof": False,
        "sort_order": 2,
    },
    {
        "method": "QRIS",
        "name": "QRIS",
        "description": "Scan the QR code and upload the receipt",
        "requires_proof": True,
        "sort_order": 3,
    },
    {
        "method": "E_WALLET",
        "name": "E-Wallet",
        "description": "Pay with an e-wallet and upload the receipt",
        "requires_proof": True,
        "sort_order": 4,
    },
]


def seed_payment_methods(session: Session) -> int:
    existing = {s.method for s in session.exec(select(PaymentMethodSetting)).all()}
    created = 0

    for data in DEFAULT_PAYMENT_METHODS:
        if data["method"] in existing:
            continue
        session.add(PaymentMethodSetting(**data))
        created += 1

    session.commit()
    return created


def seed_master_admin(session: Session, app_settings: Optional[Settings] = None) -> bool:
    settings = app_settings or default_settings
    username = settings.master_admin_username
    password = settings.master_admin_password

    if not username or not password:
        return False
    if admin_service.get_by_username(session, username):
        return False

    admin_service.register_admin(session, username, password, role=AdminRole.MASTER_ADMIN)
    return True


def seed_defaults(session: Session, app_settings: Optional[Settings] = None):
    created = seed_payment_methods(session)
    logger.info(f"Seeded {created} payment method settings")

    if seed_master_admin(session, app_settings):
        logger.info("Master admin created")
