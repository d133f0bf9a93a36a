"""
Tests for table definitions.
"""

from datetime import datetime

from sqlmodel import Session, SQLModel

from pos_api.models.order import Order


class TestTimestampColumns:
    """Timestamps are stored as naive local time."""

    def test_timestamp_columns_are_not_timezone_aware(self):
        columns = [
            column
            for table in SQLModel.metadata.sorted_tables
            for column in table.columns
            if column.name in ("created_at", "updated_at")
        ]

        assert columns
        assert all(column.type.timezone is False for column in columns)

    def test_naive_timestamps_survive_a_round_trip(self, engine, session, order_service, make_product):
        product = make_product(stock=3)
        when = datetime(2026, 4, 2, 9, 15)
        order = order_service.create_order("Sinta", [(product.id, 1)], "CASH")
        order.created_at = when
        session.add(order)
        session.commit()

        with Session(engine) as fresh:
            stored = fresh.get(Order, order.id)

        assert stored.created_at == when
        assert stored.created_at.tzinfo is None
