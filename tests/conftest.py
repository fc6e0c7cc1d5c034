"""
Pytest fixtures for the storefront API tests.

Every test gets a fresh app bound to an in-memory SQLite database, so no
state leaks between tests.
"""
import pytest

from storefront import create_app
from storefront.config import TestConfig
from storefront.extensions import db
from storefront.model import Coupon, Product, User


@pytest.fixture
def app():
    """
    Flask app configured with TestConfig

    Scope: function (fresh database per test)
    """
    app = create_app(TestConfig)
    with app.app_context():
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


def _make_user(email, password, role="user", name="Tester"):
    u = User(email=email, name=name, role=role)
    u.set_password(password)
    db.session.add(u)
    db.session.commit()
    return u


def _login(client, email, password):
    resp = client.post("/api/auth/login", json={"email": email, "password": password})
    assert resp.status_code == 200, resp.get_json()
    return resp.get_json()["data"]["token"]


@pytest.fixture
def user(app):
    return _make_user("shopper@example.com", "secret123")


@pytest.fixture
def admin(app):
    return _make_user("admin@example.com", "admin-pass", role="admin", name="Admin")


@pytest.fixture
def auth_headers(client, user):
    """Bearer header for a regular shopper"""
    return {"Authorization": f"Bearer {_login(client, 'shopper@example.com', 'secret123')}"}


@pytest.fixture
def admin_headers(client, admin):
    """Bearer header for an admin account"""
    return {"Authorization": f"Bearer {_login(client, 'admin@example.com', 'admin-pass')}"}


@pytest.fixture
def products(app):
    """
    Two catalog rows:
      - Keyboard: 1000, no discount, shipping 50
      - Mouse:    500, 10% off, shipping 20
    """
    rows = [
        Product(name="Keyboard", category="Accessory", price=1000, discount_percent=0,
                shipping_cost=50, stock=10),
        Product(name="Mouse", category="Accessory", price=500, discount_percent=10,
                shipping_cost=20, stock=5),
    ]
    db.session.add_all(rows)
    db.session.commit()
    return rows


@pytest.fixture
def coupons(app):
    rows = [
        Coupon(code="WELCOME100", ctype="fixed", value=100, active=True),
        Coupon(code="SALE10", ctype="percent", value=10, active=True),
        Coupon(code="FREESHIP", ctype="free_shipping", value=0, active=True),
        Coupon(code="OLD50", ctype="fixed", value=50, active=False),
    ]
    db.session.add_all(rows)
    db.session.commit()
    return rows
