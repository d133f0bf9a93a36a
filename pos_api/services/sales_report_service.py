import logging
from collections import OrderedDict
from datetime import date, datetime, time, timedelta
from typing import Callable, Dict, List, Optional, Union

from sqlmodel import Session, select

from pos_api.constants.order_status import OrderStatus
from pos_api.errors import ValidationError
from pos_api.models.category import Category
from pos_api.models.order import Order
from pos_api.models.order_item import OrderItem
from pos_api.models.payment_method_setting import PaymentMethodSetting
from pos_api.models.product import Product

logger = logging.getLogger(__name__)

TOP_PRODUCTS_LIMIT = 5
RECENT_ORDERS_LIMIT = 5
UNKNOWN_CATEGORY = "Unknown"


def _start_of_day(value: Union[date, datetime]) -> datetime:
    if isinstance(value, datetime):
        value = value.date()
    return datetime.combine(value, time.min)


def _end_of_day(value: Union[date, datetime]) -> datetime:
    # 23:59:59.999, the whole day is included
    return _start_of_day(value) + timedelta(days=1) - timedelta(milliseconds=1)


def _first_of_next_month(first_of_month: datetime) -> datetime:
    return (first_of_month + timedelta(days=32)).replace(day=1)


class SalesReportService:
    """
    Read-only sales aggregation over COMPLETED orders.

    Bucket boundaries come from ``clock`` at call time and are never stored.
    """

    def __init__(self, session: Session, clock: Callable[[], datetime] = datetime.now):
        self.session = session
        self.clock = clock

    # ------------------------------------------------------------------ #
    # queries
    # ------------------------------------------------------------------ #

    def _completed_orders(self, start: datetime, end: datetime, end_inclusive: bool = False):
        upper = Order.created_at <= end if end_inclusive else Order.created_at < end
        return self.session.exec(
            select(Order)
            .where(
                Order.status == OrderStatus.COMPLETED,
                Order.created_at >= start,
                upper,
            )
            .order_by(Order.created_at.asc(), Order.id.asc())
        ).all()

    def _item_rows(self, order_ids: List[int]):
        """(item, product, category name) for every item of the given orders."""
        if not order_ids:
            return []
        return self.session.exec(
            select(OrderItem, Product, Category.name)
            .join(Product, Product.id == OrderItem.product_id)
            .join(Category, Category.id == Product.category_id, isouter=True)
            .where(OrderItem.order_id.in_(order_ids))
            .order_by(OrderItem.id)
        ).all()

    def _method_names(self) -> Dict[str, str]:
        settings = self.session.exec(select(PaymentMethodSetting)).all()
        return {s.method: s.name for s in settings}

    # ------------------------------------------------------------------ #
    # breakdowns
    # ------------------------------------------------------------------ #

    def _payment_method_breakdown(self, orders) -> List[dict]:
        names = self._method_names()
        breakdown: Dict[str, dict] = OrderedDict()

        for order in orders:
            method = order.payment_method.value
            if method not in breakdown:
                breakdown[method] = {
                    "method": method,
                    "name": names.get(method, method),
                    "count": 0,
                    "amount": 0.0,
                }
            breakdown[method]["count"] += 1
            breakdown[method]["amount"] += order.total_amount

        return sorted(breakdown.values(), key=lambda m: m["amount"], reverse=True)

    @staticmethod
    def _category_breakdown(rows) -> List[dict]:
        categories: Dict[str, dict] = OrderedDict()

        for item, _product, category_name in rows:
            name = category_name or UNKNOWN_CATEGORY
            if name not in categories:
                categories[name] = {"name": name, "items_sold": 0, "revenue": 0.0}
            categories[name]["items_sold"] += item.quantity
            categories[name]["revenue"] += item.subtotal

        return sorted(categories.values(), key=lambda c: c["revenue"], reverse=True)

    @staticmethod
    def _product_breakdown(rows) -> List[dict]:
        products: Dict[int, dict] = OrderedDict()

        for item, product, category_name in rows:
            if product.id not in products:
                products[product.id] = {
                    "product_id": product.id,
                    "name": product.name,
                    "category": category_name or UNKNOWN_CATEGORY,
                    "price": product.price,
                    "image_url": product.image_url,
                    "quantity_sold": 0,
                    "revenue": 0.0,
                }
            products[product.id]["quantity_sold"] += item.quantity
            products[product.id]["revenue"] += item.subtotal

        return sorted(products.values(), key=lambda p: p["revenue"], reverse=True)

    # ------------------------------------------------------------------ #
    # reports
    # ------------------------------------------------------------------ #

    def get_summary(self) -> dict:
        today = _start_of_day(self.clock())
        tomorrow = today + timedelta(days=1)
        first_of_month = today.replace(day=1)
        first_of_next_month = _first_of_next_month(first_of_month)

        daily_orders = self._completed_orders(today, tomorrow)
        daily_total = sum(o.total_amount for o in daily_orders)

        monthly_rows = self.session.exec(
            select(OrderItem, Product)
            .join(Order, Order.id == OrderItem.order_id)
            .join(Product, Product.id == OrderItem.product_id)
            .where(
                Order.status == OrderStatus.COMPLETED,
                Order.created_at >= first_of_month,
                Order.created_at < first_of_next_month,
            )
            .order_by(OrderItem.id)
        ).all()

        sales_by_product: Dict[int, dict] = OrderedDict()
        for item, product in monthly_rows:
            if product.id not in sales_by_product:
                sales_by_product[product.id] = {
                    "product_id": product.id,
                    "name": product.name,
                    "quantity": 0,
                    "total_amount": 0.0,
                }
            sales_by_product[product.id]["quantity"] += item.quantity
            sales_by_product[product.id]["total_amount"] += item.subtotal

        top_selling_products = sorted(
            sales_by_product.values(), key=lambda p: p["quantity"], reverse=True
        )[:TOP_PRODUCTS_LIMIT]

        recent_orders = self.session.exec(
            select(Order)
            .where(Order.status == OrderStatus.COMPLETED)
            .order_by(Order.created_at.desc(), Order.id.desc())
            .limit(RECENT_ORDERS_LIMIT)
        ).all()

        return {
            "daily_total_sales": daily_total,
            "daily_total_orders": len(daily_orders),
            "payment_methods": self._payment_method_breakdown(daily_orders),
            "top_selling_products": top_selling_products,
            "recent_orders": [self._order_row(o, with_items=True) for o in recent_orders],
            "time_info": {
                "day": today.date().isoformat(),
                "month": today.strftime("%Y-%m"),
            },
        }

    def get_daily_report(self, report_date: Optional[Union[date, datetime]]) -> dict:
        if report_date is None:
            raise ValidationError("Date parameter is required")

        start = _start_of_day(report_date)
        orders = self._completed_orders(start, start + timedelta(days=1))
        rows = self._item_rows([o.id for o in orders])

        product_sales = self._product_breakdown(rows)

        logger.info(f"Daily report for {start.date()}: {len(orders)} completed orders")

        return {
            "date": start.date().isoformat(),
            "total_sales": sum(o.total_amount for o in orders),
            "total_orders": len(orders),
            "total_items": sum(p["quantity_sold"] for p in product_sales),
            "payment_methods": self._payment_method_breakdown(orders),
            "product_sales": product_sales,
            "category_sales": self._category_breakdown(rows),
            "orders": [self._order_row(o) for o in orders],
        }

    def get_date_range_report(
        self,
        start_date: Optional[Union[date, datetime]],
        end_date: Optional[Union[date, datetime]],
    ) -> dict:
        if start_date is None or end_date is None:
            raise ValidationError("Start date and end date are required")

        start = _start_of_day(start_date)
        end = _end_of_day(end_date)
        if start > end:
            raise ValidationError("Start date must not be after end date")

        orders = self._completed_orders(start, end, end_inclusive=True)
        rows = self._item_rows([o.id for o in orders])

        daily: Dict[str, dict] = OrderedDict()
        for order in orders:
            day = order.created_at.date().isoformat()
            if day not in daily:
                daily[day] = {"date": day, "sales": 0.0, "orders": 0}
            daily[day]["sales"] += order.total_amount
            daily[day]["orders"] += 1

        logger.info(
            f"Date range report {start.date()}..{end.date()}: {len(orders)} completed orders"
        )

        return {
            "start_date": start.date().isoformat(),
            "end_date": end.date().isoformat(),
            "total_sales": sum(o.total_amount for o in orders),
            "total_order_count": len(orders),
            "daily_sales": sorted(daily.values(), key=lambda d: d["date"]),
            "payment_methods": self._payment_method_breakdown(orders),
            "category_sales": self._category_breakdown(rows),
        }

    @staticmethod
    def _order_row(order: Order, with_items: bool = False) -> dict:
        row = {
            "id": order.id,
            "customer_name": order.customer_name,
            "total_amount": order.total_amount,
            "payment_method": order.payment_method.value,
            "created_at": order.created_at,
        }
        if with_items:
            row["items"] = [
                {
                    "product_id": item.product_id,
                    "name": item.product.name if item.product else None,
                    "quantity": item.quantity,
                    "subtotal": item.subtotal,
                }
                for item in order.items
            ]
        return row
