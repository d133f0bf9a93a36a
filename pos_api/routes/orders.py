from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, File, Query, UploadFile
from fastapi.responses import StreamingResponse
from sqlmodel import Session

from pos_api.constants.order_status import OrderStatus, PaymentMethod
from pos_api.database import get_session
from pos_api.models.admin import Admin
from pos_api.schemas.order_schemas import (
    OrderCreate,
    OrderListResponse,
    OrderResponse,
    PendingCountResponse,
)
from pos_api.services.file_storage import get_file_storage
from pos_api.services.order_service import OrderService
from pos_api.services.payment_methods import PaymentMethodRegistry
from pos_api.services.report_export import build_date_range_workbook
from pos_api.services.sales_report_service import SalesReportService
from pos_api.utils.pagination import DEFAULT_PAGE_LIMIT, MAX_PAGE_LIMIT
from pos_api.utils.token import get_current_admin

router = APIRouter()


def get_order_service(
    session: Session = Depends(get_session),
    file_storage=Depends(get_file_storage),
) -> OrderService:
    return OrderService(session, file_storage=file_storage)


def get_sales_report_service(session: Session = Depends(get_session)) -> SalesReportService:
    return SalesReportService(session)


# -------- PUBLIC --------

@router.post("", response_model=OrderResponse, status_code=201)
def create_order(
    payload: OrderCreate,
    service: OrderService = Depends(get_order_service),
):
    order = service.create_order(
        customer_name=payload.customer_name,
        items=payload.items,
        payment_method=payload.payment_method,
    )
    return OrderResponse.model_validate(order)


@router.get("/payment-methods/available")
def available_payment_methods(session: Session = Depends(get_session)):
    return PaymentMethodRegistry(session).available_methods()


@router.get("/payment-methods/{method}")
def payment_method_detail(method: str, session: Session = Depends(get_session)):
    setting = PaymentMethodRegistry(session).get_method_detail(method)
    return {
        "id": setting.method,
        "name": setting.name,
        "description": setting.description,
        "requires_proof": setting.requires_proof,
        "bank_name": setting.bank_name,
        "account_number": setting.account_number,
        "account_holder": setting.account_holder,
        "qris_image_url": setting.qris_image_url,
    }


@router.post("/{order_id}/payment-proof", response_model=OrderResponse)
def upload_payment_proof(
    order_id: int,
    payment_proof: UploadFile = File(...),
    service: OrderService = Depends(get_order_service),
):
    return OrderResponse.model_validate(service.upload_payment_proof(order_id, payment_proof))


# -------- ADMIN --------

@router.get("", response_model=OrderListResponse)
def list_orders(
    status: Optional[OrderStatus] = None,
    customer_name: Optional[str] = None,
    payment_method: Optional[PaymentMethod] = None,
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    page: int = Query(1, ge=1),
    limit: int = Query(DEFAULT_PAGE_LIMIT, ge=1, le=MAX_PAGE_LIMIT),
    sort_by: str = "created_at",
    sort_order: str = Query("desc", pattern="^(asc|desc)$"),
    service: OrderService = Depends(get_order_service),
    _: Admin = Depends(get_current_admin),
):
    data = service.list_orders(
        status=status,
        customer_name=customer_name,
        payment_method=payment_method,
        start_date=start_date,
        end_date=end_date,
        page=page,
        limit=limit,
        sort_by=sort_by,
        sort_order=sort_order,
    )
    data["results"] = [OrderResponse.model_validate(o) for o in data["results"]]
    return data


@router.get("/notifications/pending-count", response_model=PendingCountResponse)
def pending_orders_count(
    service: OrderService = Depends(get_order_service),
    _: Admin = Depends(get_current_admin),
):
    return service.pending_counts()


@router.get("/analytics/sales-summary")
def sales_summary(
    reports: SalesReportService = Depends(get_sales_report_service),
    _: Admin = Depends(get_current_admin),
):
    return reports.get_summary()


@router.get("/analytics/daily-sales")
def daily_sales_report(
    report_date: Optional[date] = Query(None, alias="date"),
    reports: SalesReportService = Depends(get_sales_report_service),
    _: Admin = Depends(get_current_admin),
):
    return reports.get_daily_report(report_date)


@router.get("/analytics/date-range-sales")
def date_range_sales_report(
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    reports: SalesReportService = Depends(get_sales_report_service),
    _: Admin = Depends(get_current_admin),
):
    return reports.get_date_range_report(start_date, end_date)


@router.get("/analytics/date-range-sales/export")
def export_date_range_sales_report(
    start_date: Optional[date] = Query(None),
    end_date: Optional[date] = Query(None),
    reports: SalesReportService = Depends(get_sales_report_service),
    _: Admin = Depends(get_current_admin),
):
    report = reports.get_date_range_report(start_date, end_date)
    buffer = build_date_range_workbook(report)

    filename = f"sales_{report['start_date']}_{report['end_date']}.xlsx"
    return StreamingResponse(
        buffer,
        media_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.get("/{order_id}", response_model=OrderResponse)
def get_order(order_id: int, service: OrderService = Depends(get_order_service)):
    return OrderResponse.model_validate(service.get_order(order_id))


@router.post("/{order_id}/verify", response_model=OrderResponse)
def verify_payment(
    order_id: int,
    service: OrderService = Depends(get_order_service),
    _: Admin = Depends(get_current_admin),
):
    return OrderResponse.model_validate(service.verify_payment(order_id))


@router.post("/{order_id}/complete", response_model=OrderResponse)
def complete_order(
    order_id: int,
    service: OrderService = Depends(get_order_service),
    _: Admin = Depends(get_current_admin),
):
    return OrderResponse.model_validate(service.complete_order(order_id))


@router.post("/{order_id}/cancel", response_model=OrderResponse)
def cancel_order(
    order_id: int,
    service: OrderService = Depends(get_order_service),
    _: Admin = Depends(get_current_admin),
):
    return OrderResponse.model_validate(service.cancel_order(order_id))
