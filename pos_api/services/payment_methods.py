import logging
from datetime import datetime
from functools import lru_cache
from typing import Optional

from sqlalchemy.engine import Engine
from sqlmodel import Session, select

from pos_api.errors import NotFoundError
from pos_api.models.payment_method_setting import PaymentMethodSetting
from pos_api.utils.cache_helpers import _ttl_bucket

logger = logging.getLogger(__name__)

UPDATABLE_FIELDS = (
    "description",
    "is_enabled",
    "requires_proof",
    "sort_order",
    "bank_name",
    "account_number",
    "account_holder",
    "qris_image_url",
)


@lru_cache(maxsize=32)
def _cached_available_methods(engine: Engine, bucket: int):
    with Session(engine) as session:
        settings = session.exec(
            select(PaymentMethodSetting)
            .where(PaymentMethodSetting.is_enabled == True)  # noqa: E712
            .order_by(PaymentMethodSetting.sort_order)
        ).all()

        return [
            {
                "id": s.method,
                "name": s.name,
                "description": s.description,
                "requires_proof": s.requires_proof,
                "bank_name": s.bank_name,
                "account_number": s.account_number,
                "account_holder": s.account_holder,
                "qris_image_url": s.qris_image_url,
            }
            for s in settings
        ]


def clear_payment_methods_cache():
    _cached_available_methods.cache_clear()


class PaymentMethodRegistry:
    def __init__(self, session: Session):
        self.session = session

    def get_method(self, identifier: str) -> Optional[PaymentMethodSetting]:
        return self.session.exec(
            select(PaymentMethodSetting).where(PaymentMethodSetting.method == identifier)
        ).first()

    def get_method_detail(self, identifier: str) -> PaymentMethodSetting:
        setting = self.get_method(identifier)
        if not setting or not setting.is_enabled:
            raise NotFoundError("Payment method not found or not enabled")
        return setting

    def available_methods(self):
        return {"methods": _cached_available_methods(self.session.get_bind(), _ttl_bucket())}

    def list_settings(self):
        return self.session.exec(
            select(PaymentMethodSetting).order_by(PaymentMethodSetting.sort_order)
        ).all()

    def update_setting(self, setting_id: int, data: dict) -> PaymentMethodSetting:
        setting = self.session.get(PaymentMethodSetting, setting_id)
        if not setting:
            raise NotFoundError("Payment method setting not found")

        # method and name are fixed
        for field in UPDATABLE_FIELDS:
            if field in data and data[field] is not None:
                setattr(setting, field, data[field])
        setting.updated_at = datetime.now()

        self.session.add(setting)
        self.session.commit()
        self.session.refresh(setting)
        clear_payment_methods_cache()

        logger.info(
            f"Payment method {setting.method} updated "
            f"(enabled={setting.is_enabled}, requires_proof={setting.requires_proof})"
        )
        return setting
