# storefront/services/analytics_service.py
"""
Revenue analytics for the admin dashboard. Read-only over order history;
pending orders are never counted as revenue.
"""
from __future__ import annotations

from datetime import datetime, timezone
from io import BytesIO

import pandas as pd

MONTHS = ["Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]
QUARTERS = ["Q1", "Q2", "Q3", "Q4"]


def _orders_frame(orders) -> pd.DataFrame:
    rows = [{
        "code": o.code,
        "user_id": o.user_id,
        "status": o.status,
        "created_at": o.created_at,
        "subtotal": float(o.subtotal or 0),
        "discount_total": float(o.discount_total or 0),
        "tax_amount": float(o.tax_amount or 0),
        "shipping_total": float(o.shipping_total or 0),
        "total_amount": float(o.total_amount or 0),
        "applied_coupons": ", ".join(o.applied_coupons or []),
    } for o in orders]
    df = pd.DataFrame(rows, columns=[
        "code", "user_id", "status", "created_at", "subtotal", "discount_total",
        "tax_amount", "shipping_total", "total_amount", "applied_coupons",
    ])
    df["created_at"] = pd.to_datetime(df["created_at"])
    return df


def _revenue_frame(orders) -> pd.DataFrame:
    df = _orders_frame(orders)
    return df[df["status"] != "pending"]


def _series_to_points(s: pd.Series, labels) -> list[dict]:
    return [{"name": name, "revenue": round(float(v), 2)} for name, v in zip(labels, s.tolist())]


def revenue_by_month(orders, year: int | None = None) -> list[dict]:
    year = year or datetime.now(timezone.utc).year
    df = _revenue_frame(orders)
    df = df[df["created_at"].dt.year == year]
    s = df.groupby(df["created_at"].dt.month)["total_amount"].sum().reindex(range(1, 13), fill_value=0.0)
    return _series_to_points(s, MONTHS)


def revenue_by_quarter(orders, year: int | None = None) -> list[dict]:
    year = year or datetime.now(timezone.utc).year
    df = _revenue_frame(orders)
    df = df[df["created_at"].dt.year == year]
    s = df.groupby(df["created_at"].dt.quarter)["total_amount"].sum().reindex(range(1, 5), fill_value=0.0)
    return _series_to_points(s, QUARTERS)


def revenue_by_year(orders) -> list[dict]:
    df = _revenue_frame(orders)
    current = datetime.now(timezone.utc).year
    s = df.groupby(df["created_at"].dt.year)["total_amount"].sum()
    # always show this year and last year, even with no sales
    s = s.reindex(sorted(set(s.index.tolist()) | {current - 1, current}), fill_value=0.0)
    return _series_to_points(s, [str(y) for y in s.index])


def sales_by_category(orders) -> list[dict]:
    rows = [
        {"category": i.category or "Uncategorized", "line_total": float(i.line_total or 0)}
        for o in orders if o.status != "pending"
        for i in o.items
    ]
    if not rows:
        return []
    s = pd.DataFrame(rows).groupby("category")["line_total"].sum().sort_values(ascending=False)
    return [{"name": k, "value": round(float(v), 2)} for k, v in s.items()]


def stock_by_category(products) -> list[dict]:
    rows = [{"category": p.category, "stock": int(p.stock or 0)} for p in products]
    if not rows:
        return []
    s = pd.DataFrame(rows).groupby("category")["stock"].sum()
    return [{"name": k, "value": int(v)} for k, v in s.items()]


def build_dashboard(orders, products, year: int | None = None) -> dict:
    df = _revenue_frame(orders)
    return {
        "summary": {
            "orders": int(len(df)),
            "revenue": round(float(df["total_amount"].sum()), 2),
            "issues": int((df["status"] == "issue_reported").sum()),
        },
        "monthly_revenue": revenue_by_month(orders, year),
        "quarterly_revenue": revenue_by_quarter(orders, year),
        "yearly_revenue": revenue_by_year(orders),
        "sales_by_category": sales_by_category(orders),
        "stock_by_category": stock_by_category(products),
    }


def orders_to_excel(orders) -> BytesIO:
    df = _orders_frame(orders).rename(columns={
        "code": "Order", "user_id": "User ID", "status": "Status", "created_at": "Created At",
        "subtotal": "Subtotal", "discount_total": "Discount", "tax_amount": "Tax",
        "shipping_total": "Shipping", "total_amount": "Total", "applied_coupons": "Coupons",
    })
    output = BytesIO()
    df.to_excel(output, index=False)
    output.seek(0)
    return output
