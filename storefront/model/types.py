# storefront/model/types.py
from decimal import Decimal

from sqlalchemy.types import TypeDecorator, String


class ExactDecimal(TypeDecorator):
    """Decimal stored as its exact text form; never quantized by the database."""
    impl = String(64)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        return str(value if isinstance(value, Decimal) else Decimal(str(value)))

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        return Decimal(value)
