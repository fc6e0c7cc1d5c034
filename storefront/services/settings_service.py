# storefront/services/settings_service.py
from __future__ import annotations

from decimal import Decimal

from flask import current_app

from ..extensions import db
from ..model import Setting
from ..utils.money import D, HUNDRED

TAX_RATE_KEY = "tax_rate_percent"


def get_tax_rate() -> Decimal:
    row = db.session.get(Setting, TAX_RATE_KEY)
    if row is None:
        return D(current_app.config.get("TAX_RATE_PERCENT", 7))
    return D(row.value)


def set_tax_rate(rate) -> Decimal:
    try:
        rate = D(rate)
    except Exception:
        raise ValueError("tax rate must be numeric")
    if not rate.is_finite() or rate < 0 or rate > HUNDRED:
        raise ValueError("tax rate must be between 0 and 100")
    row = db.session.get(Setting, TAX_RATE_KEY)
    if row is None:
        row = Setting(key=TAX_RATE_KEY, value=str(rate))
        db.session.add(row)
    else:
        row.value = str(rate)
    db.session.commit()
    current_app.logger.info("tax rate set to %s%%", rate)
    return rate
