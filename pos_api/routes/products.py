from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile
from sqlmodel import Session

from pos_api.database import get_session
from pos_api.models.admin import Admin
from pos_api.schemas.product_schemas import ProductListResponse, ProductResponse
from pos_api.services.file_storage import get_file_storage
from pos_api.services.product_service import ProductService
from pos_api.utils.pagination import DEFAULT_PAGE_LIMIT, MAX_PAGE_LIMIT
from pos_api.utils.token import get_current_admin

router = APIRouter()


def get_product_service(
    session: Session = Depends(get_session),
    file_storage=Depends(get_file_storage),
) -> ProductService:
    return ProductService(session, file_storage=file_storage)


def _image_or_none(upload: Optional[UploadFile]) -> Optional[UploadFile]:
    # browsers send an empty part when no file is picked
    if upload is None or not upload.filename:
        return None
    return upload


# -------- PUBLIC --------

@router.get("", response_model=ProductListResponse)
def list_products(
    category_id: Optional[int] = None,
    search: Optional[str] = None,
    min_price: Optional[float] = None,
    max_price: Optional[float] = None,
    in_stock: Optional[bool] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(DEFAULT_PAGE_LIMIT, ge=1, le=MAX_PAGE_LIMIT),
    sort_by: str = "created_at",
    sort_order: str = Query("desc", pattern="^(asc|desc)$"),
    service: ProductService = Depends(get_product_service),
):
    data = service.list_products(
        category_id=category_id,
        search=search,
        min_price=min_price,
        max_price=max_price,
        in_stock=in_stock,
        page=page,
        limit=limit,
        sort_by=sort_by,
        sort_order=sort_order,
    )
    data["results"] = [ProductResponse.model_validate(p) for p in data["results"]]
    return data


@router.get("/{product_id}", response_model=ProductResponse)
def get_product(product_id: int, service: ProductService = Depends(get_product_service)):
    return ProductResponse.model_validate(service.get_product(product_id))


# -------- ADMIN --------

@router.post("", response_model=ProductResponse, status_code=201)
def create_product(
    name: str = Form(...),
    price: float = Form(...),
    stock: int = Form(...),
    category_id: int = Form(...),
    description: Optional[str] = Form(None),
    product_image: Optional[UploadFile] = File(None),
    service: ProductService = Depends(get_product_service),
    _: Admin = Depends(get_current_admin),
):
    product = service.create_product(
        name=name,
        price=price,
        stock=stock,
        category_id=category_id,
        description=description,
        image=_image_or_none(product_image),
    )
    return ProductResponse.model_validate(product)


@router.put("/{product_id}", response_model=ProductResponse)
def update_product(
    product_id: int,
    name: Optional[str] = Form(None),
    price: Optional[float] = Form(None),
    stock: Optional[int] = Form(None),
    category_id: Optional[int] = Form(None),
    description: Optional[str] = Form(None),
    product_image: Optional[UploadFile] = File(None),
    service: ProductService = Depends(get_product_service),
    _: Admin = Depends(get_current_admin),
):
    product = service.update_product(
        product_id,
        name=name,
        description=description,
        price=price,
        stock=stock,
        category_id=category_id,
        image=_image_or_none(product_image),
    )
    return ProductResponse.model_validate(product)


@router.patch("/{product_id}/stock", response_model=ProductResponse)
def update_product_stock(
    product_id: int,
    stock: int = Query(..., ge=0),
    service: ProductService = Depends(get_product_service),
    _: Admin = Depends(get_current_admin),
):
    return ProductResponse.model_validate(service.update_stock(product_id, stock))


@router.delete("/{product_id}")
def delete_product(
    product_id: int,
    service: ProductService = Depends(get_product_service),
    _: Admin = Depends(get_current_admin),
):
    service.delete_product(product_id)
    return {"message": "Product deleted successfully"}
