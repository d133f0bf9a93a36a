"""
Shared fixtures for the POS API test suite.

Each test gets its own file-backed SQLite database and upload directory
under ``tmp_path``, so tests never share state.
"""

import io
from datetime import datetime

import pytest
from fastapi import UploadFile
from fastapi.testclient import TestClient
from sqlmodel import Session
from starlette.datastructures import Headers

from pos_api.config import Settings
from pos_api.constants.order_status import OrderStatus
from pos_api.database import build_engine, create_db_and_tables
from pos_api.main import create_app
from pos_api.models.admin import AdminRole
from pos_api.models.category import Category
from pos_api.models.product import Product
from pos_api.seed import seed_payment_methods
from pos_api.services import admin_service
from pos_api.services.file_storage import LocalFileStorage
from pos_api.services.order_service import OrderService
from pos_api.services.payment_methods import clear_payment_methods_cache
from pos_api.utils.token import create_access_token

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 64


@pytest.fixture(autouse=True)
def _clear_caches():
    clear_payment_methods_cache()
    yield
    clear_payment_methods_cache()


@pytest.fixture
def test_settings(tmp_path):
    return Settings(
        ENV="test",
        database_url_override=f"sqlite:///{tmp_path / 'pos.db'}",
        upload_dir=str(tmp_path / "uploads"),
        storage_backend="local",
        log_level="WARNING",
        secret_key="test-only-secret",
    )


@pytest.fixture
def engine(test_settings):
    engine = build_engine(test_settings.database_url)
    create_db_and_tables(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session(engine):
    with Session(engine) as session:
        seed_payment_methods(session)
        yield session


@pytest.fixture
def storage(test_settings):
    return LocalFileStorage(test_settings.upload_dir)


@pytest.fixture
def order_service(session, storage, test_settings):
    return OrderService(session, file_storage=storage, settings=test_settings)


@pytest.fixture
def category(session):
    category = Category(name="Booster Packs")
    session.add(category)
    session.commit()
    session.refresh(category)
    return category


@pytest.fixture
def make_product(session, category):
    def _make(name="Pokemon Booster", price=50000.0, stock=10, category_id=None):
        product = Product(
            name=name,
            price=price,
            stock=stock,
            category_id=category_id or category.id,
        )
        session.add(product)
        session.commit()
        session.refresh(product)
        return product

    return _make


@pytest.fixture
def image_upload():
    def _make(filename="proof.png", content=PNG_BYTES, content_type="image/png"):
        return UploadFile(
            file=io.BytesIO(content),
            filename=filename,
            headers=Headers({"content-type": content_type}),
        )

    return _make


@pytest.fixture
def make_completed_order(session, order_service, image_upload):
    """Create an order, push it to COMPLETED and backdate it to ``when``."""

    def _make(lines, when: datetime, payment_method="CASH", customer_name="Walk-in"):
        order = order_service.create_order(customer_name, lines, payment_method)
        if order.status == OrderStatus.PENDING:
            order_service.upload_payment_proof(order.id, image_upload())
            order_service.verify_payment(order.id)
        order = order_service.complete_order(order.id)
        order.created_at = when
        session.add(order)
        session.commit()
        session.refresh(order)
        return order

    return _make


@pytest.fixture
def client(engine, session, storage, test_settings):
    app = create_app(engine=engine, file_storage=storage, app_settings=test_settings)
    return TestClient(app)


@pytest.fixture
def master_admin(session):
    return admin_service.register_admin(
        session, "owner", "owner-pass", role=AdminRole.MASTER_ADMIN
    )


@pytest.fixture
def staff_admin(session):
    return admin_service.register_admin(session, "cashier", "cashier-pass")


def _auth_header(admin, app_settings):
    token = create_access_token({"admin_id": admin.id}, app_settings=app_settings)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def master_headers(master_admin, test_settings):
    return _auth_header(master_admin, test_settings)


@pytest.fixture
def admin_headers(staff_admin, test_settings):
    return _auth_header(staff_admin, test_settings)
