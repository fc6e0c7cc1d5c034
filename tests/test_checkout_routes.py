"""
End-to-end checkout over HTTP: review -> payment -> confirmed.
"""
import io

from storefront.extensions import db
from storefront.model import Order


def _open(client, headers):
    resp = client.post("/api/checkout", headers=headers)
    assert resp.status_code == 201
    return {**headers, "X-Checkout-Id": resp.headers["X-Checkout-Id"]}


class TestAuth:
    def test_requires_token(self, client):
        assert client.get("/api/checkout").status_code == 401
        assert client.post("/api/checkout/pay").status_code == 401


class TestReviewStep:
    def test_add_items_and_totals(self, client, auth_headers, products):
        h = _open(client, auth_headers)
        keyboard, mouse = products

        client.post("/api/checkout/items", json={"product_id": keyboard.id, "quantity": 2}, headers=h)
        resp = client.post("/api/checkout/items", json={"product_id": mouse.id, "qty": 1}, headers=h)

        assert resp.status_code == 201
        totals = resp.get_json()["data"]["totals"]
        # 2000 + 450 net, shipping 100 + 20
        assert totals["subtotal"] == 2450.0
        assert totals["shipping_total"] == 120.0
        assert totals["tax_amount"] == 171.5
        assert totals["total_amount"] == 2741.5

    def test_unknown_product(self, client, auth_headers, products):
        h = _open(client, auth_headers)
        resp = client.post("/api/checkout/items", json={"product_id": 999}, headers=h)
        assert resp.status_code == 404

    def test_out_of_stock(self, client, auth_headers, products):
        products[1].stock = 0
        db.session.commit()
        h = _open(client, auth_headers)
        resp = client.post("/api/checkout/items", json={"product_id": products[1].id}, headers=h)
        assert resp.status_code == 409

    def test_update_and_remove_item(self, client, auth_headers, products):
        h = _open(client, auth_headers)
        pid = products[0].id
        client.post("/api/checkout/items", json={"product_id": pid}, headers=h)

        resp = client.patch(f"/api/checkout/items/{pid}", json={"quantity": 3}, headers=h)
        assert resp.get_json()["data"]["items"][0]["quantity"] == 3

        resp = client.delete(f"/api/checkout/items/{pid}", headers=h)
        assert resp.get_json()["data"]["items"] == []
        assert client.delete(f"/api/checkout/items/{pid}", headers=h).status_code == 404

    def test_coupon_errors(self, client, auth_headers, products, coupons):
        h = _open(client, auth_headers)
        client.post("/api/checkout/items", json={"product_id": products[0].id}, headers=h)

        resp = client.post("/api/checkout/coupons", json={"code": "OLD50"}, headers=h)
        assert resp.status_code == 404
        assert resp.get_json()["message"] == "Invalid or expired coupon code."

        assert client.post("/api/checkout/coupons", json={"code": "sale10"}, headers=h).status_code == 200
        resp = client.post("/api/checkout/coupons", json={"code": "SALE10"}, headers=h)
        assert resp.status_code == 409
        assert resp.get_json()["data"]["reason"] == "duplicate_coupon"
        assert len(resp.get_json()["data"]["checkout"]["coupons"]) == 1

        resp = client.delete("/api/checkout/coupons/sale10", headers=h)
        assert resp.get_json()["data"]["coupons"] == []

    def test_session_is_found_without_header(self, client, auth_headers, products):
        h = _open(client, auth_headers)
        client.post("/api/checkout/items", json={"product_id": products[0].id}, headers=h)
        resp = client.get("/api/checkout", headers=auth_headers)
        assert resp.headers["X-Checkout-Id"] == h["X-Checkout-Id"]
        assert len(resp.get_json()["data"]["items"]) == 1

    def test_abandon_returns_fresh_session(self, client, auth_headers, products):
        h = _open(client, auth_headers)
        client.post("/api/checkout/items", json={"product_id": products[0].id}, headers=h)
        resp = client.delete("/api/checkout", headers=h)
        assert resp.headers["X-Checkout-Id"] != h["X-Checkout-Id"]
        assert resp.get_json()["data"]["items"] == []

    def test_empty_cart_cannot_confirm(self, client, auth_headers):
        h = _open(client, auth_headers)
        resp = client.post("/api/checkout/confirm", headers=h)
        assert resp.status_code == 422
        assert resp.get_json()["message"] == "Your cart is empty."


class TestPaymentStep:
    def test_full_flow_places_order(self, client, auth_headers, products, coupons, user):
        h = _open(client, auth_headers)
        client.post("/api/checkout/items", json={"product_id": products[0].id, "quantity": 2}, headers=h)
        client.post("/api/checkout/coupons", json={"code": "FREESHIP"}, headers=h)
        client.post("/api/checkout/coupons", json={"code": "WELCOME100"}, headers=h)

        resp = client.post("/api/checkout/confirm", headers=h)
        assert resp.get_json()["data"]["step"] == "payment"
        assert resp.get_json()["data"]["totals"]["total_amount"] == 2033.0

        # cart is locked once payment starts
        resp = client.post("/api/checkout/items", json={"product_id": products[1].id}, headers=h)
        assert resp.status_code == 409

        resp = client.post("/api/checkout/pay", headers=h)
        assert resp.status_code == 422
        assert resp.get_json()["message"] == "Please upload your payment slip first."

        data = {"file": (io.BytesIO(b"fake-png"), "slip.png")}
        resp = client.post("/api/checkout/slip", data=data, headers=h, content_type="multipart/form-data")
        assert resp.status_code == 200
        assert resp.get_json()["data"]["payment"]["slip_uploaded"] is True

        resp = client.post("/api/checkout/pay", headers=h)
        assert resp.status_code == 201
        body = resp.get_json()["data"]
        assert body["order"]["status"] == "verified"
        assert body["order"]["money"]["total_amount"] == 2033.0
        assert body["order"]["applied_coupons"] == ["FREESHIP", "WELCOME100"]
        assert body["checkout"]["step"] == "review"
        assert body["checkout"]["items"] == []
        assert resp.headers["X-Checkout-Id"] != h["X-Checkout-Id"]

        orders = Order.query.all()
        assert len(orders) == 1
        assert orders[0].user_id == user.id
        assert orders[0].slip_image.endswith(".png")
        assert resp.headers["X-Order-Id"] == str(orders[0].id)

        # a new checkout starts once the previous one is confirmed
        resp = client.get("/api/checkout", headers=auth_headers)
        assert resp.headers["X-Checkout-Id"] != h["X-Checkout-Id"]
        assert resp.get_json()["data"]["step"] == "review"

    def test_slip_reference_as_json(self, client, auth_headers, products):
        h = _open(client, auth_headers)
        client.post("/api/checkout/items", json={"product_id": products[0].id}, headers=h)
        client.post("/api/checkout/confirm", headers=h)
        resp = client.post("/api/checkout/slip", json={"slip_image": "slips/abc.jpg"}, headers=h)
        assert resp.status_code == 200

    def test_bad_slip_extension(self, client, auth_headers, products):
        h = _open(client, auth_headers)
        client.post("/api/checkout/items", json={"product_id": products[0].id}, headers=h)
        client.post("/api/checkout/confirm", headers=h)
        data = {"file": (io.BytesIO(b"MZ"), "slip.exe")}
        resp = client.post("/api/checkout/slip", data=data, headers=h, content_type="multipart/form-data")
        assert resp.status_code == 422

    def test_tax_rate_change_does_not_reach_payment_step(self, client, auth_headers, admin_headers, products):
        h = _open(client, auth_headers)
        client.post("/api/checkout/items", json={"product_id": products[0].id, "quantity": 2}, headers=h)
        client.post("/api/checkout/confirm", headers=h)

        client.put("/api/admin/tax-rate", json={"tax_rate_percent": 10}, headers=admin_headers)

        resp = client.get("/api/checkout", headers=h)
        assert resp.get_json()["data"]["totals"]["tax_amount"] == 140.0


class TestAfterConfirmation:
    def _pay(self, client, headers, product_id):
        client.post("/api/checkout/items", json={"product_id": product_id}, headers=headers)
        client.post("/api/checkout/confirm", headers=headers)
        client.post("/api/checkout/slip", json={"slip_image": "slips/ok.png"}, headers=headers)
        return client.post("/api/checkout/pay", headers=headers)

    def test_stale_header_gets_a_fresh_session(self, client, auth_headers, products):
        h = _open(client, auth_headers)
        assert self._pay(client, h, products[0].id).status_code == 201

        # client still echoes the id it used for paying
        resp = client.post("/api/checkout/items", json={"product_id": products[1].id}, headers=h)
        assert resp.status_code == 201
        data = resp.get_json()["data"]
        assert data["step"] == "review"
        assert data["id"] != h["X-Checkout-Id"]
        assert [i["product_id"] for i in data["items"]] == [products[1].id]

    def test_echoed_header_from_pay_keeps_working(self, client, auth_headers, products):
        h = _open(client, auth_headers)
        resp = self._pay(client, h, products[0].id)
        nxt = {**auth_headers, "X-Checkout-Id": resp.headers["X-Checkout-Id"]}

        resp = client.post("/api/checkout/items", json={"product_id": products[0].id}, headers=nxt)
        assert resp.status_code == 201
        assert resp.headers["X-Checkout-Id"] == nxt["X-Checkout-Id"]

    def test_paying_twice_places_one_order(self, client, auth_headers, products):
        h = _open(client, auth_headers)
        assert self._pay(client, h, products[0].id).status_code == 201

        resp = client.post("/api/checkout/pay", headers=h)
        assert resp.status_code == 409
        assert resp.get_json()["data"]["reason"] == "wrong_step"
        assert Order.query.count() == 1

    def test_confirmed_sessions_are_evicted(self, app, client, auth_headers, products):
        registry = app.extensions["checkout_registry"]
        for _ in range(3):
            h = _open(client, auth_headers)
            self._pay(client, h, products[0].id)
        assert len(registry) == 1


class TestQuantityInput:
    def test_rejects_non_integers(self, client, auth_headers, products):
        h = _open(client, auth_headers)
        pid = products[0].id
        for qty in (2.7, True, "two", None, [1]):
            resp = client.post("/api/checkout/items", json={"product_id": pid, "quantity": qty}, headers=h)
            assert resp.status_code == 422, qty
        assert client.get("/api/checkout", headers=h).get_json()["data"]["items"] == []

    def test_accepts_numeric_strings(self, client, auth_headers, products):
        h = _open(client, auth_headers)
        pid = products[0].id
        client.post("/api/checkout/items", json={"product_id": pid, "quantity": "3"}, headers=h)
        resp = client.patch(f"/api/checkout/items/{pid}", json={"quantity": 2.0}, headers=h)
        assert resp.status_code == 422
        items = client.get("/api/checkout", headers=h).get_json()["data"]["items"]
        assert items[0]["quantity"] == 3
