from flask import request

from . import bp
from ..services import catalog_service
from ..utils.api import ok, err
from ..utils.decorators import admin_required


# GET /api/products
@bp.get("")
def list_products():
    """
    Query params:
      category -> exact category name ("All" = no filter)
      q        -> substring match on name
    """
    items = catalog_service.list_products(
        category=(request.args.get("category") or "").strip() or None,
        q=(request.args.get("q") or "").strip() or None,
    )
    return ok("Products fetched", {
        "items": [p.as_api() for p in items],
        "categories": catalog_service.list_categories(),
    })


# GET /api/products/<id>
@bp.get("/<int:pid>")
def get_product(pid):
    p = catalog_service.get_product(pid)
    if not p:
        return err("product not found", 404)
    return ok("Product fetched", p.as_api())


# POST /api/products
@bp.post("")
@admin_required
def create_product():
    p = catalog_service.create_product(request.get_json(silent=True) or {})
    return ok("Product created", p.as_api(), status=201)


# PUT /api/products/<id>
@bp.put("/<int:pid>")
@bp.patch("/<int:pid>")
@admin_required
def update_product(pid):
    p = catalog_service.get_product(pid)
    if not p:
        return err("product not found", 404)
    p = catalog_service.update_product(p, request.get_json(silent=True) or {})
    return ok("Product updated", p.as_api())


# DELETE /api/products/<id>
@bp.delete("/<int:pid>")
@admin_required
def delete_product(pid):
    p = catalog_service.get_product(pid)
    if not p:
        return err("product not found", 404)
    catalog_service.delete_product(p)
    return ok("Product deleted")
