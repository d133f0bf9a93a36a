"""
HTTP tests for the FastAPI application.

Checks routing, auth rules and how domain errors map onto status codes.
"""

import io
from datetime import date, datetime

from fastapi.testclient import TestClient
from openpyxl import load_workbook

from conftest import PNG_BYTES
from pos_api.main import create_app
from pos_api.utils.token import create_access_token


def _create_order(client, product_id, quantity=1, payment_method="BANK_TRANSFER"):
    return client.post(
        "/orders",
        json={
            "customer_name": "Rizky",
            "items": [{"product_id": product_id, "quantity": quantity}],
            "payment_method": payment_method,
        },
    )


class TestPublicOrderEndpoints:
    """Endpoints customers use without logging in."""

    def test_create_and_fetch_order(self, client, make_product):
        product = make_product(price=25000.0, stock=5)

        response = _create_order(client, product.id, quantity=2)

        assert response.status_code == 201
        body = response.json()
        assert body["status"] == "PENDING"
        assert body["total_amount"] == 50000.0
        assert body["items"][0]["product"]["name"] == product.name

        fetched = client.get(f"/orders/{body['id']}")
        assert fetched.status_code == 200
        assert fetched.json()["id"] == body["id"]

    def test_insufficient_stock_is_400(self, client, make_product):
        product = make_product(stock=2)

        response = _create_order(client, product.id, quantity=3)

        assert response.status_code == 400
        assert response.json()["error"] == "INSUFFICIENT_STOCK"

    def test_unknown_product_is_404(self, client, make_product):
        response = _create_order(client, 31337)

        assert response.status_code == 404
        assert response.json()["error"] == "NOT_FOUND"

    def test_request_validation_is_422(self, client):
        response = client.post("/orders", json={"customer_name": "X", "items": []})

        assert response.status_code == 422

    def test_available_payment_methods(self, client):
        response = client.get("/orders/payment-methods/available")

        assert response.status_code == 200
        assert [m["id"] for m in response.json()["methods"]][0] == "BANK_TRANSFER"

    def test_payment_method_detail(self, client):
        assert client.get("/orders/payment-methods/CASH").json()["requires_proof"] is False
        assert client.get("/orders/payment-methods/BITCOIN").status_code == 404

    def test_upload_payment_proof(self, client, make_product):
        product = make_product()
        order_id = _create_order(client, product.id).json()["id"]

        response = client.post(
            f"/orders/{order_id}/payment-proof",
            files={"payment_proof": ("proof.png", PNG_BYTES, "image/png")},
        )

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "PAYMENT_UPLOADED"

        served = client.get(body["payment_proof"]["file_url"])
        assert served.status_code == 200
        assert served.content == PNG_BYTES

    def test_upload_non_image_is_400(self, client, make_product):
        product = make_product()
        order_id = _create_order(client, product.id).json()["id"]

        response = client.post(
            f"/orders/{order_id}/payment-proof",
            files={"payment_proof": ("notes.txt", b"hello", "text/plain")},
        )

        assert response.status_code == 400
        assert response.json() == {"detail": "Only image files are allowed!", "error": "VALIDATION"}


class TestAdminOrderEndpoints:
    """Transitions and listings behind the admin token."""

    def test_transitions_require_token(self, client, make_product):
        product = make_product()
        order_id = _create_order(client, product.id, payment_method="CASH").json()["id"]

        assert client.post(f"/orders/{order_id}/complete").status_code == 401
        assert client.get("/orders").status_code == 401

    def test_complete_and_double_complete(self, client, session, admin_headers, make_product):
        product = make_product(stock=10)
        order_id = _create_order(client, product.id, 4, "CASH").json()["id"]

        first = client.post(f"/orders/{order_id}/complete", headers=admin_headers)
        second = client.post(f"/orders/{order_id}/complete", headers=admin_headers)

        assert first.status_code == 200
        assert first.json()["status"] == "COMPLETED"
        assert second.status_code == 400
        assert second.json()["error"] == "INVALID_STATE"

        session.refresh(product)
        assert product.stock == 6

    def test_verify_then_cancel(self, client, admin_headers, make_product):
        product = make_product()
        order_id = _create_order(client, product.id).json()["id"]
        client.post(
            f"/orders/{order_id}/payment-proof",
            files={"payment_proof": ("proof.jpg", PNG_BYTES, "image/jpeg")},
        )

        verified = client.post(f"/orders/{order_id}/verify", headers=admin_headers)
        cancelled = client.post(f"/orders/{order_id}/cancel", headers=admin_headers)

        assert verified.json()["status"] == "PAYMENT_VERIFIED"
        assert cancelled.json()["status"] == "CANCELLED"

    def test_list_orders_with_filters(self, client, admin_headers, make_product):
        product = make_product(stock=50)
        _create_order(client, product.id, payment_method="CASH")
        _create_order(client, product.id)
        _create_order(client, product.id)

        response = client.get(
            "/orders", params={"status": "PENDING", "limit": 1}, headers=admin_headers
        )

        body = response.json()
        assert response.status_code == 200
        assert body["total_items"] == 2
        assert body["total_pages"] == 2
        assert body["has_next"] is True
        assert body["has_previous"] is False
        assert len(body["results"]) == 1

    def test_pending_count(self, client, admin_headers, make_product):
        product = make_product(stock=50)
        _create_order(client, product.id, payment_method="CASH")
        _create_order(client, product.id)
        uploaded_id = _create_order(client, product.id).json()["id"]
        client.post(
            f"/orders/{uploaded_id}/payment-proof",
            files={"payment_proof": ("proof.png", PNG_BYTES, "image/png")},
        )

        body = client.get("/orders/notifications/pending-count", headers=admin_headers).json()

        assert body == {
            "total": 3,
            "payment_uploaded_count": 1,
            "verified_awaiting_completion_count": 1,
            "pending_count": 1,
        }


class TestAnalyticsEndpoints:
    def test_sales_summary(self, client, admin_headers):
        response = client.get("/orders/analytics/sales-summary", headers=admin_headers)

        assert response.status_code == 200
        assert response.json()["time_info"]["day"] == date.today().isoformat()

    def test_daily_sales_requires_date(self, client, admin_headers):
        response = client.get("/orders/analytics/daily-sales", headers=admin_headers)

        assert response.status_code == 400
        assert response.json()["detail"] == "Date parameter is required"

    def test_date_range_rejects_reversed_dates(self, client, admin_headers):
        response = client.get(
            "/orders/analytics/date-range-sales",
            params={"start_date": "2026-02-01", "end_date": "2026-01-01"},
            headers=admin_headers,
        )

        assert response.status_code == 400

    def test_export_workbook(self, client, admin_headers, make_product, make_completed_order):
        product = make_product(price=40.0, stock=100)
        make_completed_order([(product.id, 2)], datetime(2026, 5, 1, 10, 0))
        make_completed_order([(product.id, 1)], datetime(2026, 5, 2, 10, 0), "QRIS")

        response = client.get(
            "/orders/analytics/date-range-sales/export",
            params={"start_date": "2026-05-01", "end_date": "2026-05-31"},
            headers=admin_headers,
        )

        assert response.status_code == 200
        assert "sales_2026-05-01_2026-05-31.xlsx" in response.headers["content-disposition"]

        workbook = load_workbook(io.BytesIO(response.content))
        assert workbook.sheetnames == ["Overview", "Daily Sales", "Payment Methods", "Categories"]
        daily = list(workbook["Daily Sales"].iter_rows(min_row=2, values_only=True))
        assert [row[0] for row in daily] == ["2026-05-01", "2026-05-02"]


class TestCatalogEndpoints:
    def test_categories_read_public_write_admin(self, client, admin_headers):
        assert client.post("/categories", json={"name": "Singles"}).status_code == 401

        created = client.post("/categories", json={"name": "Singles"}, headers=admin_headers)
        duplicate = client.post("/categories", json={"name": "singles"}, headers=admin_headers)

        assert created.status_code == 201
        assert duplicate.status_code == 409
        assert duplicate.json()["error"] == "CONFLICT"
        assert [c["name"] for c in client.get("/categories").json()] == ["Singles"]

    def test_create_product_with_form_and_image(self, client, admin_headers, category):
        response = client.post(
            "/products",
            data={
                "name": "Mew ex",
                "price": "175000",
                "stock": "2",
                "category_id": str(category.id),
            },
            files={"product_image": ("mew.png", PNG_BYTES, "image/png")},
            headers=admin_headers,
        )

        assert response.status_code == 201
        body = response.json()
        assert body["image_url"].startswith("/uploads/products/")
        assert body["category"]["name"] == category.name

        listing = client.get("/products", params={"search": "mew"}).json()
        assert listing["total_items"] == 1

    def test_delete_product_in_order_is_conflict(self, client, admin_headers, make_product):
        product = make_product()
        _create_order(client, product.id)

        response = client.delete(f"/products/{product.id}", headers=admin_headers)

        assert response.status_code == 409


class TestAdminEndpoints:
    def test_first_registration_creates_master_admin(self, client):
        first = client.post("/admin/register", json={"username": "owner", "password": "pass123"})
        second = client.post("/admin/register", json={"username": "other", "password": "pass123"})

        assert first.status_code == 201
        assert first.json()["role"] == "MASTER_ADMIN"
        assert second.status_code == 403

    def test_login_and_profile(self, client, staff_admin):
        bad = client.post("/admin/login", json={"username": "cashier", "password": "nope"})
        good = client.post(
            "/admin/login", json={"username": "cashier", "password": "cashier-pass"}
        )

        assert bad.status_code == 401
        token = good.json()["access_token"]
        profile = client.get("/admin/profile", headers={"Authorization": f"Bearer {token}"})
        assert profile.json()["username"] == "cashier"

    def test_master_only_endpoints(self, client, admin_headers, master_headers):
        assert client.get("/admin/all", headers=admin_headers).status_code == 403
        assert client.get("/payment-settings", headers=admin_headers).status_code == 403

        created = client.post(
            "/admin/create",
            json={"username": "kasir2", "password": "kasir-pass"},
            headers=master_headers,
        )
        assert created.status_code == 201
        assert created.json()["role"] == "ADMIN"

        names = [a["username"] for a in client.get("/admin/all", headers=master_headers).json()]
        assert sorted(names) == ["cashier", "kasir2"]

    def test_master_updates_payment_setting(self, client, master_headers):
        settings = client.get("/payment-settings", headers=master_headers).json()
        qris = next(s for s in settings if s["method"] == "QRIS")

        response = client.put(
            f"/payment-settings/{qris['id']}",
            json={"is_enabled": False},
            headers=master_headers,
        )

        assert response.status_code == 200
        assert response.json()["is_enabled"] is False
        available = client.get("/orders/payment-methods/available").json()["methods"]
        assert "QRIS" not in [m["id"] for m in available]

    def test_token_from_another_secret_is_rejected(self, client, staff_admin):
        foreign = create_access_token({"admin_id": staff_admin.id})

        response = client.get("/admin/profile", headers={"Authorization": f"Bearer {foreign}"})

        assert response.status_code == 401

    def test_local_startup_seeds_master_admin_from_app_settings(
        self, engine, storage, test_settings
    ):
        app_settings = test_settings.model_copy(
            update={
                "ENV": "local",
                "master_admin_username": "founder",
                "master_admin_password": "founder-pass",
            }
        )
        app = create_app(engine=engine, file_storage=storage, app_settings=app_settings)

        with TestClient(app) as local_client:
            response = local_client.post(
                "/admin/login", json={"username": "founder", "password": "founder-pass"}
            )

        assert response.status_code == 200
        assert response.json()["admin"]["role"] == "MASTER_ADMIN"
