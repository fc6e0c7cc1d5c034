"""
Admin surface: tax rate, analytics dashboard and the Excel export.
"""
from datetime import datetime, timezone
from decimal import Decimal
from types import SimpleNamespace

import pandas as pd
import pytest

from storefront.services import analytics_service, settings_service


def _order(total, status="verified", when=None, items=()):
    return SimpleNamespace(
        code=f"ORD-{total}", user_id=1, status=status, created_at=when or datetime(2024, 2, 10),
        subtotal=Decimal(total), discount_total=Decimal(0), tax_amount=Decimal(0),
        shipping_total=Decimal(0), total_amount=Decimal(total), applied_coupons=[],
        items=list(items),
    )


def _item(category, line_total):
    return SimpleNamespace(category=category, line_total=Decimal(line_total))


class TestTaxRate:
    def test_default_comes_from_config(self, app):
        assert settings_service.get_tax_rate() == Decimal("7")

    def test_set_and_read_back(self, client, admin_headers):
        resp = client.put("/api/admin/tax-rate", json={"tax_rate_percent": 10}, headers=admin_headers)
        assert resp.status_code == 200
        assert client.get("/api/admin/tax-rate", headers=admin_headers).get_json()["data"] == {
            "tax_rate_percent": 10.0,
        }

    @pytest.mark.parametrize("rate", [-1, 101, "abc", "NaN"])
    def test_rejects_bad_rates(self, client, admin_headers, rate):
        resp = client.put("/api/admin/tax-rate", json={"tax_rate_percent": rate}, headers=admin_headers)
        assert resp.status_code == 422

    def test_missing_field(self, client, admin_headers):
        assert client.put("/api/admin/tax-rate", json={}, headers=admin_headers).status_code == 422

    def test_new_rate_reaches_open_review(self, client, auth_headers, admin_headers, products):
        resp = client.post("/api/checkout", headers=auth_headers)
        h = {**auth_headers, "X-Checkout-Id": resp.headers["X-Checkout-Id"]}
        client.post("/api/checkout/items", json={"product_id": products[0].id, "quantity": 2}, headers=h)

        client.put("/api/admin/tax-rate", json={"tax_rate_percent": 10}, headers=admin_headers)

        totals = client.get("/api/checkout", headers=h).get_json()["data"]["totals"]
        assert totals["tax_amount"] == 200.0
        assert totals["tax_rate_percent"] == 10.0


class TestAnalytics:
    def test_pending_orders_are_not_revenue(self):
        orders = [_order(100), _order(50, status="pending")]
        months = analytics_service.revenue_by_month(orders, 2024)
        assert months[1] == {"name": "Feb", "revenue": 100.0}
        assert sum(m["revenue"] for m in months) == 100.0

    def test_quarters(self):
        orders = [_order(100, when=datetime(2024, 2, 1)), _order(40, when=datetime(2024, 11, 3))]
        quarters = analytics_service.revenue_by_quarter(orders, 2024)
        assert [q["revenue"] for q in quarters] == [100.0, 0.0, 0.0, 40.0]

    def test_years_always_include_current_and_previous(self):
        now = datetime.now(timezone.utc).year
        years = analytics_service.revenue_by_year([_order(10, when=datetime(2020, 1, 1))])
        names = [y["name"] for y in years]
        assert names[0] == "2020"
        assert str(now) in names and str(now - 1) in names

    def test_sales_and_stock_by_category(self):
        orders = [
            _order(300, items=[_item("CPU", 200), _item("RAM", 100)]),
            _order(999, status="pending", items=[_item("CPU", 999)]),
        ]
        assert analytics_service.sales_by_category(orders) == [
            {"name": "CPU", "value": 200.0},
            {"name": "RAM", "value": 100.0},
        ]
        products = [SimpleNamespace(category="CPU", stock=3), SimpleNamespace(category="CPU", stock=2)]
        assert analytics_service.stock_by_category(products) == [{"name": "CPU", "value": 5}]

    def test_empty_history(self):
        data = analytics_service.build_dashboard([], [], 2024)
        assert data["summary"] == {"orders": 0, "revenue": 0.0, "issues": 0}
        assert len(data["monthly_revenue"]) == 12
        assert data["sales_by_category"] == []

    def test_dashboard_route(self, client, admin_headers, products):
        resp = client.get("/api/admin/analytics?year=2024", headers=admin_headers)
        assert resp.status_code == 200
        data = resp.get_json()["data"]
        assert data["currency"] == "฿"
        assert data["stock_by_category"] == [{"name": "Accessory", "value": 15}]

    def test_shopper_is_forbidden(self, client, auth_headers):
        assert client.get("/api/admin/analytics", headers=auth_headers).status_code == 403


class TestExport:
    def test_excel_columns(self):
        output = analytics_service.orders_to_excel([_order(100)])
        df = pd.read_excel(output)
        assert list(df.columns)[:3] == ["Order", "User ID", "Status"]
        assert df.loc[0, "Total"] == 100

    def test_export_route(self, client, admin_headers):
        resp = client.get("/api/admin/orders/export", headers=admin_headers)
        assert resp.status_code == 200
        assert resp.mimetype == "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
        assert "orders_export.xlsx" in resp.headers["Content-Disposition"]
