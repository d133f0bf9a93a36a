from typing import List

from fastapi import APIRouter, Depends
from sqlmodel import Session

from pos_api.database import get_session
from pos_api.models.admin import Admin
from pos_api.schemas.payment_settings_schemas import (
    PaymentMethodSettingResponse,
    PaymentMethodSettingUpdate,
)
from pos_api.services.payment_methods import PaymentMethodRegistry
from pos_api.utils.token import require_master_admin

router = APIRouter()


@router.get("", response_model=List[PaymentMethodSettingResponse])
def list_payment_settings(
    session: Session = Depends(get_session),
    _: Admin = Depends(require_master_admin),
):
    settings = PaymentMethodRegistry(session).list_settings()
    return [PaymentMethodSettingResponse.model_validate(s) for s in settings]


@router.put("/{setting_id}", response_model=PaymentMethodSettingResponse)
def update_payment_setting(
    setting_id: int,
    payload: PaymentMethodSettingUpdate,
    session: Session = Depends(get_session),
    _: Admin = Depends(require_master_admin),
):
    setting = PaymentMethodRegistry(session).update_setting(
        setting_id, payload.model_dump(exclude_unset=True)
    )
    return PaymentMethodSettingResponse.model_validate(setting)
