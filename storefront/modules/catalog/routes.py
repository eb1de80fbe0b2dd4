from __future__ import annotations

import uuid

from flask import Blueprint, current_app, flash, render_template, request

from storefront.app.common.auth import current_token
from storefront.app.common.errors import abort_json
from storefront.app.common.json import ok
from storefront.app.extensions import backend, search_gate
from storefront.modules.catalog.gate import SEARCH_SESSION_HEADER
from storefront.modules.catalog.state import ProductsPage
from storefront.modules.cart.service import get_total_cart_value, load_cart_items

bp = Blueprint("catalog", __name__)


@bp.get("/")
def products():
    """Products page: catalog grid, search box and (when logged in) the cart."""
    search = (request.args.get("search") or "").strip()

    page = ProductsPage(backend, debounce_ms=current_app.config["SEARCH_DEBOUNCE_MS"])
    page.perform_api_call()
    if search:
        page.perform_search(search)
    for message, variant in page.drain_notifications():
        flash(message, variant)

    token = current_token()
    items = load_cart_items(token, page.products, flash) if page.products else []

    return render_template(
        "pages/products.html",
        products=page.filtered_products,
        search=search,
        search_session=uuid.uuid4().hex,
        items=items,
        total=get_total_cart_value(items),
        show_cart=bool(token) and bool(page.products),
    )


@bp.get("/api/products/search")
def search_products():
    """GET /api/products/search?value=<text> - JSON for the search box.

    Requests are debounced per `X-Search-Session`. A request overtaken by a
    newer one answers `superseded: true`. `items` is null when the list on
    screen should stay as it is.
    """
    value = (request.args.get("value") or "").strip()
    key = request.headers.get(SEARCH_SESSION_HEADER) or request.remote_addr or "-"

    ticket = search_gate.submit(key, value)
    if not ticket.wait(search_gate.wait_timeout):
        abort_json(504, "search_timeout", "Search did not finish in time")

    if ticket.superseded:
        return ok({"items": None, "notifications": [], "superseded": True})

    items = None if ticket.result is None else [p.to_dict() for p in ticket.result]
    return ok({
        "items": items,
        "notifications": [{"message": m, "variant": v} for m, v in ticket.notifications],
        "superseded": False,
    })
