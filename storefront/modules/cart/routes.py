from __future__ import annotations

from flask import Blueprint, flash, redirect, render_template, request, url_for

from storefront.app.common.auth import current_token
from storefront.app.common.errors import BackendError, abort_json
from storefront.app.common.json import ok
from storefront.app.common.validation import get_json, require_fields
from storefront.app.extensions import backend
from storefront.modules.cart.service import (
    ALREADY_IN_CART,
    fetch_cart,
    get_total_cart_value,
    load_cart_items,
    update_quantity,
)

bp = Blueprint("cart", __name__)


def _back(default_endpoint: str = "catalog.products"):
    # only follow local paths
    target = request.form.get("next") or ""
    if target.startswith("/") and not target.startswith("//"):
        return redirect(target)
    return redirect(url_for(default_endpoint))


def _parse_qty(raw) -> int:
    try:
        return int(raw)
    except (TypeError, ValueError):
        return -1


@bp.get("/cart")
def cart_page():
    try:
        products = backend.list_products()
    except BackendError as e:
        flash(e.message or "Could not load the catalog.", "error")
        products = []
    items = load_cart_items(current_token(), products, flash) if products else []
    return render_template(
        "pages/cart.html",
        items=items,
        total=get_total_cart_value(items),
        read_only=False,
    )


@bp.post("/cart/items")
def add_to_cart():
    """Add one of a product from the grid; existing lines are left alone."""
    product_id = (request.form.get("product_id") or "").strip()
    if not product_id:
        flash("Product ID required", "error")
        return _back()

    token = current_token()
    try:
        in_cart = any(ref.product_id == product_id for ref in fetch_cart(token))
    except BackendError as e:
        flash(e.message or "Could not fetch cart details.", "error")
        return _back()

    if in_cart:
        flash(ALREADY_IN_CART, "warning")
        return _back()

    update_quantity(token, product_id, 1)
    return _back()


@bp.post("/cart/quantity")
def change_quantity():
    """+/- buttons. Failures are logged, never shown."""
    product_id = (request.form.get("product_id") or "").strip()
    qty = _parse_qty(request.form.get("qty"))
    if product_id and qty >= 0:
        update_quantity(current_token(), product_id, qty)
    return _back("cart.cart_page")


@bp.post("/api/cart")
def api_change_quantity():
    """POST /api/cart - {productId, qty}; accepted without waiting on the result."""
    data = get_json()
    require_fields(data, ["productId", "qty"])

    qty = _parse_qty(data["qty"])
    if qty < 0:
        abort_json(400, "validation_error", "qty must be a non-negative integer")

    update_quantity(current_token(), str(data["productId"]), qty)
    return ok({"accepted": True}, 202)
