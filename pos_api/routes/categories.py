from typing import List

from fastapi import APIRouter, Depends
from sqlmodel import Session

from pos_api.database import get_session
from pos_api.models.admin import Admin
from pos_api.schemas.category_schemas import (
    CategoryCreate,
    CategoryResponse,
    CategoryUpdate,
)
from pos_api.services import category_service
from pos_api.utils.token import get_current_admin

router = APIRouter()


@router.get("", response_model=List[CategoryResponse])
def list_categories(session: Session = Depends(get_session)):
    return [
        CategoryResponse.model_validate(c)
        for c in category_service.list_categories(session)
    ]


@router.get("/{category_id}", response_model=CategoryResponse)
def get_category(category_id: int, session: Session = Depends(get_session)):
    return CategoryResponse.model_validate(
        category_service.get_category(session, category_id)
    )


@router.post("", response_model=CategoryResponse, status_code=201)
def create_category(
    payload: CategoryCreate,
    session: Session = Depends(get_session),
    _: Admin = Depends(get_current_admin),
):
    category = category_service.create_category(session, payload.name)
    return CategoryResponse.model_validate(category)


@router.put("/{category_id}", response_model=CategoryResponse)
def update_category(
    category_id: int,
    payload: CategoryUpdate,
    session: Session = Depends(get_session),
    _: Admin = Depends(get_current_admin),
):
    category = category_service.update_category(session, category_id, payload.name)
    return CategoryResponse.model_validate(category)


@router.delete("/{category_id}")
def delete_category(
    category_id: int,
    session: Session = Depends(get_session),
    _: Admin = Depends(get_current_admin),
):
    category_service.delete_category(session, category_id)
    return {"message": "Category deleted successfully"}
