# storefront/utils/money.py

from decimal import Decimal, ROUND_HALF_UP

Money = Decimal

ZERO = Decimal("0")
HUNDRED = Decimal("100")
CENTS = Decimal("0.01")


def D(x) -> Money:
    return x if isinstance(x, Decimal) else Decimal(str(x or "0"))


def round_money(x: Money) -> Money:
    return D(x).quantize(CENTS, rounding=ROUND_HALF_UP)


def to_float(x) -> float:
    # JSON boundary only; engine values stay exact Decimals
    return float(round_money(x))


def format_money(x, symbol: str = "฿", decimals: int = 2) -> str:
    n = round_money(x)
    return f"{symbol}{n:,.{decimals}f}"
