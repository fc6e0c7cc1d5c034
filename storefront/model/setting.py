# storefront/model/setting.py
from sqlalchemy.sql import func

from ..extensions import db


class Setting(db.Model):
    __tablename__ = "setting"
    key = db.Column(db.String(64), primary_key=True)
    value = db.Column(db.String(255), nullable=False)
    updated_at = db.Column(db.DateTime, onupdate=func.now(), server_default=func.now())
