# storefront/services/catalog_service.py
from __future__ import annotations

from ..extensions import db
from ..model import Product
from ..utils.money import D, ZERO, HUNDRED


def list_products(category: str | None = None, q: str | None = None) -> list[Product]:
    query = Product.query
    if category and category.lower() != "all":
        query = query.filter(Product.category == category)
    if q:
        query = query.filter(Product.name.ilike(f"%{q}%"))
    return query.order_by(Product.id.asc()).all()


def get_product(pid: int) -> Product | None:
    return db.session.get(Product, pid)


def list_categories() -> list[str]:
    rows = db.session.query(Product.category).distinct().order_by(Product.category.asc()).all()
    return [r[0] for r in rows]


def _parse_decimal(data: dict, key: str, default=None):
    raw = data.get(key, default)
    if raw is None or raw == "":
        return None
    try:
        value = D(raw)
    except Exception:
        raise ValueError(f"{key} must be numeric")
    if not value.is_finite():
        raise ValueError(f"{key} must be numeric")
    return value


def _parse_int(data: dict, key: str, default=None):
    raw = data.get(key, default)
    if raw is None or raw == "":
        return None
    try:
        return int(raw)
    except (TypeError, ValueError):
        raise ValueError(f"{key} must be an integer")


def sanitize_product_payload(data: dict, *, partial: bool = False) -> dict:
    """Validate an admin product payload; raises ValueError on bad input."""
    out = {}

    if "name" in data or not partial:
        name = (data.get("name") or "").strip()
        if not name:
            raise ValueError("name is required")
        out["name"] = name

    if "category" in data or not partial:
        category = (data.get("category") or "").strip()
        if not category:
            raise ValueError("category is required")
        out["category"] = category

    if "price" in data or not partial:
        price = _parse_decimal(data, "price")
        if price is None or price <= 0:
            raise ValueError("price must be > 0")
        out["price"] = price

    if "discount_percent" in data or not partial:
        dp = _parse_decimal(data, "discount_percent", 0)
        if dp < 0 or dp > HUNDRED:
            raise ValueError("discount_percent must be between 0 and 100")
        out["discount_percent"] = dp

    if "shipping_cost" in data or not partial:
        sc = _parse_decimal(data, "shipping_cost", 0)
        if sc < ZERO:
            raise ValueError("shipping_cost must be >= 0")
        out["shipping_cost"] = sc

    if "stock" in data or not partial:
        stock = _parse_int(data, "stock", 0)
        if stock < 0:
            raise ValueError("stock must be >= 0")
        out["stock"] = stock

    for key in ("description", "image"):
        if key in data:
            out[key] = data.get(key)
    if "images" in data:
        images = data.get("images") or []
        if not isinstance(images, list):
            raise ValueError("images must be a list of urls")
        out["images"] = images
    return out


def create_product(data: dict) -> Product:
    p = Product(**sanitize_product_payload(data))
    db.session.add(p)
    db.session.commit()
    return p


def update_product(product: Product, data: dict) -> Product:
    for k, v in sanitize_product_payload(data, partial=True).items():
        setattr(product, k, v)
    db.session.commit()
    return product


def delete_product(product: Product):
    db.session.delete(product)
    db.session.commit()
