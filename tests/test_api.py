"""Tests for the HTTP API."""

import uuid


class TestHealthAndErrors:
    def test_health(self, client):
        response = client.get("/api/health")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "OK"
        assert "timestamp" in data

    def test_unknown_route(self, client):
        response = client.get("/api/nope")
        assert response.status_code == 404
        assert response.json() == {"message": "Endpoint not found"}

    def test_missing_entity(self, client):
        response = client.get(f"/api/orders/{uuid.uuid4()}")
        assert response.status_code == 404
        assert response.json()["message"] == "Order not found"

    def test_schema_error(self, client):
        response = client.post("/api/contact", json={"name": "Aziz"})
        assert response.status_code == 422
        body = response.json()
        assert body["message"] == "Invalid request"
        assert {e["field"] for e in body["error"]} >= {"phone", "message"}


class TestAdminAuth:
    def test_missing_token(self, client):
        response = client.get("/api/orders")
        assert response.status_code == 401
        assert response.json()["message"] == "Authentication required"

    def test_invalid_token(self, client):
        response = client.get("/api/orders", headers={"Authorization": "Bearer junk"})
        assert response.status_code == 401

    def test_non_admin(self, client, customer_headers):
        response = client.get("/api/orders", headers=customer_headers)
        assert response.status_code == 403

    def test_admin(self, client, admin_headers):
        response = client.get("/api/orders", headers=admin_headers)
        assert response.status_code == 200
        assert response.json() == {"orders": [], "total": 0}


class TestOrdersApi:
    def test_create_order(self, client, order_payload, dispatcher):
        response = client.post("/api/orders", json=order_payload())
        assert response.status_code == 201
        body = response.json()
        assert body["message"] == "Order received successfully"
        assert body["order"]["total_price"] == 51800
        assert body["order"]["status"] == "pending"
        assert dispatcher.kinds() == ["order", "log_order"]

        order = client.get(f"/api/orders/{body['order']['id']}").json()
        assert order["notifications"]["telegram_sent"] is True
        assert order["total_items"] == 3

    def test_validation_error_body(self, client, order_payload):
        response = client.post("/api/orders", json=order_payload(items=[]))
        assert response.status_code == 400
        body = response.json()
        assert body["message"] == "empty cart"
        assert body["error"][0]["field"] == "items"

    def test_status_flow(self, client, order_payload, admin_headers, dispatcher):
        order_id = client.post("/api/orders", json=order_payload()).json()["order"]["id"]

        response = client.patch(
            f"/api/orders/{order_id}/status",
            json={"status": "confirmed"},
            headers=admin_headers,
        )
        assert response.status_code == 200
        assert response.json()["status"] == "confirmed"
        assert dispatcher.kinds()[-1] == "status"

        response = client.patch(
            f"/api/orders/{order_id}/status",
            json={"status": "pending"},
            headers=admin_headers,
        )
        assert response.status_code == 400

    def test_tracking(self, client, order_payload, admin_headers):
        order_id = client.post("/api/orders", json=order_payload()).json()["order"]["id"]
        response = client.put(
            f"/api/orders/{order_id}/tracking",
            json={"tracking_number": "TRK1", "courier_name": "Ali"},
            headers=admin_headers,
        )
        assert response.status_code == 200
        assert response.json()["tracking"]["tracking_number"] == "TRK1"


class TestPaymentApi:
    def test_unsupported_method(self, client, order_payload):
        order_id = client.post("/api/orders", json=order_payload()).json()["order"]["id"]
        response = client.post(
            "/api/payment", json={"order_id": order_id, "payment_method": "fax"}
        )
        assert response.status_code == 400
        assert response.json()["message"] == "Unsupported payment method: fax"

    def test_payme(self, client, order_payload):
        order_id = client.post("/api/orders", json=order_payload()).json()["order"]["id"]
        response = client.post(
            "/api/payment", json={"order_id": order_id, "payment_method": "payme"}
        )
        assert response.status_code == 200
        body = response.json()
        assert body["payment_status"] == "processing"
        assert body["payment_url"].startswith("https://checkout.paycom.uz/")


class TestContactApi:
    def test_submit_and_reply(self, client, admin_headers, dispatcher):
        response = client.post(
            "/api/contact",
            json={"name": "Aziz", "phone": "+998901234567", "message": "Salom"},
        )
        assert response.status_code == 201
        contact_id = response.json()["id"]
        assert dispatcher.kinds() == ["contact", "log_contact"]

        unread = client.get("/api/contact/unread-count", headers=admin_headers)
        assert unread.json() == {"unread": 1}

        viewed = client.get(f"/api/contact/{contact_id}", headers=admin_headers)
        assert viewed.json()["status"] == "read"

        replied = client.post(
            f"/api/contact/{contact_id}/reply",
            json={"admin_notes": "Called back"},
            headers=admin_headers,
        )
        assert replied.status_code == 200
        assert replied.json()["replied_by"] == "agent7"

    def test_reply_to_closed(self, client, admin_headers):
        contact_id = client.post(
            "/api/contact",
            json={"name": "Aziz", "phone": "+998901234567", "message": "Salom"},
        ).json()["id"]
        client.post(f"/api/contact/{contact_id}/close", headers=admin_headers)

        response = client.post(f"/api/contact/{contact_id}/reply", headers=admin_headers)
        assert response.status_code == 400


class TestProductsApi:
    def test_create_and_list(self, client, admin_headers):
        response = client.post(
            "/api/products",
            json={
                "name": "Selofan Paket Kichik",
                "description": "Kichik selofan paket",
                "category": "Selofan",
                "size": "20x30 sm",
                "price": 500,
                "original_price": 600,
                "quantity": 5,
                "images": ["a.jpg"],
            },
            headers=admin_headers,
        )
        assert response.status_code == 201
        product = response.json()
        assert product["slug"] == "selofan-paket-kichik"
        assert product["discount_percentage"] == 17
        assert product["stock_status"] == "low_stock"
        assert product["main_image"] == "a.jpg"

        listing = client.get("/api/products", params={"category": "all"}).json()
        assert listing["total"] == 1
        assert listing["current_page"] == 1

        assert client.get("/api/categories").json() == ["Selofan"]
        assert client.get("/api/products/new").json()[0]["id"] == product["id"]

    def test_stock_and_rating(self, client, admin_headers, make_product):
        product = make_product(quantity=3)

        response = client.post(
            f"/api/products/{product.id}/stock",
            json={"quantity": 10, "operation": "subtract"},
            headers=admin_headers,
        )
        assert response.json()["quantity"] == 0
        assert response.json()["in_stock"] is False

        rated = client.post(f"/api/products/{product.id}/rating", json={"rating": 4})
        assert rated.json()["rating_count"] == 1

    def test_create_requires_admin(self, client):
        response = client.post("/api/products", json={})
        assert response.status_code == 401

    def test_listing_limits_are_bounded(self, client, make_product):
        make_product(featured=True)
        for path in ("featured", "new", "bestsellers"):
            url = f"/api/products/{path}"
            for limit in (-1, 0, 101):
                response = client.get(url, params={"limit": limit})
                assert response.status_code == 422
            assert client.get(url, params={"limit": 100}).status_code == 200


class TestAdminStats:
    def test_dashboard(self, client, admin_headers, order_payload):
        client.post("/api/orders", json=order_payload())
        client.post(
            "/api/contact",
            json={"name": "Aziz", "phone": "+998901234567", "message": "Salom"},
        )

        stats = client.get("/api/admin/stats", headers=admin_headers).json()
        assert stats["total_orders"] == 1
        assert stats["total_revenue"] == 51800
        assert stats["unread_contacts"] == 1
        assert stats["orders_by_status"][0]["status"] == "pending"
        assert len(stats["latest_orders"]) == 1

    def test_daily_summary(self, client, admin_headers, order_payload, dispatcher):
        client.post("/api/orders", json=order_payload())
        client.post(
            "/api/contact",
            json={"name": "Aziz", "phone": "+998901234567", "message": "Salom"},
        )

        response = client.post("/api/admin/stats/daily-summary", headers=admin_headers)
        assert response.status_code == 200
        body = response.json()
        assert body["sent"] is True
        assert body["summary"]["orders"]["new"] == 1
        assert body["summary"]["revenue"]["today"] == 51800
        assert body["summary"]["revenue"]["week"] == 51800
        assert body["summary"]["contacts"]["new"] == 1
        assert "daily_summary" in dispatcher.kinds()

    def test_daily_summary_requires_admin(self, client, customer_headers):
        response = client.post(
            "/api/admin/stats/daily-summary", headers=customer_headers
        )
        assert response.status_code == 403
