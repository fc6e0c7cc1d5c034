# storefront/admin/routes.py
from flask import current_app, request, send_file

from . import bp
from ..services import analytics_service, catalog_service, order_service, settings_service
from ..utils.api import ok, err
from ..utils.decorators import admin_required


@bp.get("/tax-rate")
@admin_required
def get_tax_rate():
    return ok("tax rate", {"tax_rate_percent": float(settings_service.get_tax_rate())})


@bp.put("/tax-rate")
@admin_required
def update_tax_rate():
    """Body: { "tax_rate_percent": 7 }. Applies to checkouts still in review."""
    data = request.get_json(silent=True) or {}
    if "tax_rate_percent" not in data:
        return err("tax_rate_percent is required", 422)
    rate = settings_service.set_tax_rate(data["tax_rate_percent"])
    return ok("System tax rate updated successfully!", {"tax_rate_percent": float(rate)})


@bp.get("/analytics")
@admin_required
def analytics():
    """Query params: year=YYYY (monthly/quarterly charts; default current year)"""
    year = request.args.get("year", type=int)
    data = analytics_service.build_dashboard(
        order_service.list_orders(),
        catalog_service.list_products(),
        year=year,
    )
    data["currency"] = current_app.config["CURRENCY_SYMBOL"]
    return ok("analytics", data)


@bp.get("/orders/export")
@admin_required
def export_orders():
    """Export all orders as an Excel file."""
    output = analytics_service.orders_to_excel(order_service.list_orders())
    return send_file(
        output,
        as_attachment=True,
        download_name="orders_export.xlsx",
        mimetype="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    )
