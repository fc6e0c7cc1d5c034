# storefront/model/product.py
from sqlalchemy.sql import func

from ..extensions import db
from ..utils.money import to_float, format_money


class Product(db.Model):
    __tablename__ = "product"
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(255), nullable=False, index=True)
    description = db.Column(db.Text)

    price = db.Column(db.Numeric(12, 2), nullable=False)
    discount_percent = db.Column(db.Numeric(5, 2), nullable=False, default=0)
    shipping_cost = db.Column(db.Numeric(12, 2), nullable=False, default=0)

    category = db.Column(db.String(120), nullable=False, index=True)
    stock = db.Column(db.Integer, nullable=False, default=0)

    image = db.Column(db.String(1024))                 # thumbnail
    images = db.Column(db.JSON, default=list)          # gallery urls

    created_at = db.Column(db.DateTime, server_default=func.now())
    updated_at = db.Column(db.DateTime, onupdate=func.now(), server_default=func.now())

    def as_api(self):
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "price": to_float(self.price),
            "price_format": format_money(self.price),
            "discount_percent": float(self.discount_percent or 0),
            "shipping_cost": to_float(self.shipping_cost),
            "category": self.category,
            "stock": self.stock,
            "image": self.image,
            "images": self.images or ([self.image] if self.image else []),
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }
