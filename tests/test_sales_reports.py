"""
Tests for sales aggregation.

Only COMPLETED orders count. Time buckets come from an injected clock so the
summary can be checked against fixed dates.
"""

from datetime import date, datetime

import pytest

from pos_api.errors import ValidationError
from pos_api.models.category import Category
from pos_api.services.sales_report_service import SalesReportService

NOW = datetime(2026, 3, 15, 14, 30)


@pytest.fixture
def reports(session):
    return SalesReportService(session, clock=lambda: NOW)


@pytest.fixture
def second_category(session):
    category = Category(name="Accessories")
    session.add(category)
    session.commit()
    session.refresh(category)
    return category


class TestSalesSummary:
    """Dashboard summary for today and the current month."""

    def test_empty_summary(self, reports):
        summary = reports.get_summary()

        assert summary["daily_total_sales"] == 0
        assert summary["daily_total_orders"] == 0
        assert summary["payment_methods"] == []
        assert summary["top_selling_products"] == []
        assert summary["recent_orders"] == []
        assert summary["time_info"] == {"day": "2026-03-15", "month": "2026-03"}

    def test_summary_buckets(self, reports, order_service, make_product, make_completed_order):
        booster = make_product(name="Booster", price=100.0, stock=100)
        sleeves = make_product(name="Sleeves", price=10.0, stock=100)

        make_completed_order([(booster.id, 2)], datetime(2026, 3, 15, 9, 0), "CASH")
        make_completed_order([(sleeves.id, 5)], datetime(2026, 3, 15, 11, 0), "QRIS")
        make_completed_order([(sleeves.id, 4)], datetime(2026, 3, 2, 10, 0), "CASH")
        make_completed_order([(booster.id, 9)], datetime(2026, 2, 27, 10, 0), "CASH")

        # not completed, never counted
        order_service.create_order("Pending", [(booster.id, 1)], "BANK_TRANSFER")

        summary = reports.get_summary()

        assert summary["daily_total_sales"] == 250.0
        assert summary["daily_total_orders"] == 2
        assert [m["method"] for m in summary["payment_methods"]] == ["CASH", "QRIS"]
        assert summary["payment_methods"][0] == {
            "method": "CASH",
            "name": "Cash",
            "count": 1,
            "amount": 200.0,
        }

        top = summary["top_selling_products"]
        assert [p["name"] for p in top] == ["Sleeves", "Booster"]
        assert top[0]["quantity"] == 9
        assert top[0]["total_amount"] == 90.0
        assert top[1]["quantity"] == 2

        assert len(summary["recent_orders"]) == 4
        assert summary["recent_orders"][0]["items"][0]["name"] == "Sleeves"

    def test_top_selling_products_are_capped_at_five(
        self, reports, make_product, make_completed_order
    ):
        for quantity in range(1, 8):
            product = make_product(name=f"P{quantity}", price=10.0, stock=100)
            make_completed_order([(product.id, quantity)], datetime(2026, 3, 3, 8 + quantity, 0))

        top = reports.get_summary()["top_selling_products"]

        assert len(top) == 5
        assert [p["name"] for p in top] == ["P7", "P6", "P5", "P4", "P3"]
        assert [p["quantity"] for p in top] == [7, 6, 5, 4, 3]

    def test_recent_orders_are_capped(self, reports, make_product, make_completed_order):
        product = make_product(stock=100)
        for hour in range(8, 15):
            make_completed_order([(product.id, 1)], datetime(2026, 3, 15, hour, 0))

        recent = reports.get_summary()["recent_orders"]

        assert len(recent) == 5
        assert recent[0]["created_at"] == datetime(2026, 3, 15, 14, 0)


class TestDailyReport:
    """Single-day breakdown."""

    def test_date_is_required(self, reports):
        with pytest.raises(ValidationError):
            reports.get_daily_report(None)

    def test_day_without_sales_returns_zeros(self, reports, make_product, make_completed_order):
        product = make_product(stock=100)
        make_completed_order([(product.id, 2)], datetime(2026, 1, 2, 10, 0))

        report = reports.get_daily_report(date(2026, 1, 1))

        assert report == {
            "date": "2026-01-01",
            "total_sales": 0,
            "total_orders": 0,
            "total_items": 0,
            "payment_methods": [],
            "product_sales": [],
            "category_sales": [],
            "orders": [],
        }

    def test_daily_breakdowns_are_sorted_by_amount(
        self, reports, make_product, make_completed_order, second_category
    ):
        booster = make_product(name="Booster", price=100.0, stock=100)
        playmat = make_product(
            name="Playmat", price=350.0, stock=100, category_id=second_category.id
        )

        make_completed_order([(booster.id, 1)], datetime(2026, 3, 10, 9, 0), "CASH")
        make_completed_order(
            [(playmat.id, 1), (booster.id, 2)], datetime(2026, 3, 10, 18, 0), "BANK_TRANSFER"
        )
        make_completed_order([(booster.id, 5)], datetime(2026, 3, 11, 0, 0), "CASH")

        report = reports.get_daily_report(date(2026, 3, 10))

        assert report["date"] == "2026-03-10"
        assert report["total_sales"] == 650.0
        assert report["total_orders"] == 2
        assert report["total_items"] == 4
        assert [m["method"] for m in report["payment_methods"]] == ["BANK_TRANSFER", "CASH"]
        assert [p["name"] for p in report["product_sales"]] == ["Playmat", "Booster"]
        assert report["product_sales"][1]["quantity_sold"] == 3
        assert report["category_sales"] == [
            {"name": "Accessories", "items_sold": 1, "revenue": 350.0},
            {"name": "Booster Packs", "items_sold": 3, "revenue": 300.0},
        ]
        assert len(report["orders"]) == 2


class TestDateRangeReport:
    """Inclusive date ranges."""

    def test_empty_range_returns_zeros(self, reports):
        report = reports.get_date_range_report(date(2026, 1, 1), date(2026, 1, 31))

        assert report == {
            "start_date": "2026-01-01",
            "end_date": "2026-01-31",
            "total_sales": 0,
            "total_order_count": 0,
            "daily_sales": [],
            "payment_methods": [],
            "category_sales": [],
        }

    def test_both_dates_are_required(self, reports):
        with pytest.raises(ValidationError):
            reports.get_date_range_report(date(2026, 1, 1), None)

    def test_start_after_end_is_rejected(self, reports):
        with pytest.raises(ValidationError):
            reports.get_date_range_report(date(2026, 2, 1), date(2026, 1, 1))

    def test_range_groups_by_day_and_includes_end_date(
        self, reports, make_product, make_completed_order
    ):
        product = make_product(price=50.0, stock=100)

        make_completed_order([(product.id, 1)], datetime(2026, 3, 1, 0, 0))
        make_completed_order([(product.id, 2)], datetime(2026, 3, 3, 12, 0))
        make_completed_order([(product.id, 1)], datetime(2026, 3, 3, 23, 59, 59))
        make_completed_order([(product.id, 4)], datetime(2026, 3, 4, 0, 0))

        report = reports.get_date_range_report(date(2026, 3, 1), date(2026, 3, 3))

        assert report["total_sales"] == 200.0
        assert report["total_order_count"] == 3
        assert report["daily_sales"] == [
            {"date": "2026-03-01", "sales": 50.0, "orders": 1},
            {"date": "2026-03-03", "sales": 150.0, "orders": 2},
        ]
        assert report["category_sales"] == [
            {"name": "Booster Packs", "items_sold": 4, "revenue": 200.0},
        ]
