from __future__ import annotations

import logging
from typing import List, Optional

from flask import Blueprint, flash, redirect, render_template, request, session, url_for

from storefront.app.common.auth import current_token, login_required
from storefront.app.common.errors import BackendError, BackendUnavailable, NotFound
from storefront.app.extensions import backend
from storefront.app.models import Address, CartItem
from storefront.modules.cart.service import get_total_cart_value, get_total_items, load_cart_items

logger = logging.getLogger(__name__)

bp = Blueprint("checkout", __name__)

NOT_ENOUGH_BALANCE = "You do not have enough balance in your wallet for this purchase"
ADD_ADDRESS_FIRST = "Please add a new address before proceeding."
SELECT_ADDRESS = "Please select one shipping address to proceed."
EMPTY_CART = "Your cart is empty. Add items to the cart to checkout."


def _message(err: BackendError, fallback: str) -> str:
    if isinstance(err, BackendUnavailable) or not err.message:
        return fallback
    return err.message


def _load_addresses(token: str) -> List[Address]:
    try:
        return backend.list_addresses(token)
    except BackendError as e:
        flash(_message(e, "Could not fetch addresses."), "error")
        return []


def _load_items(token: str) -> List[CartItem]:
    try:
        products = backend.list_products()
    except BackendError as e:
        flash(_message(e, "Could not fetch products."), "error")
        return []
    return load_cart_items(token, products, flash)


def validate_request(items: List[CartItem], addresses: List[Address],
                     address_id: Optional[str], balance: float) -> Optional[str]:
    """First reason the order cannot be placed, or None."""
    if not items:
        return EMPTY_CART
    if get_total_cart_value(items) > balance:
        return NOT_ENOUGH_BALANCE
    if not addresses:
        return ADD_ADDRESS_FIRST
    if not address_id or address_id not in {a.id for a in addresses}:
        return SELECT_ADDRESS
    return None


@bp.get("/checkout")
@login_required
def checkout_page():
    token = current_token()
    items = _load_items(token)
    return render_template(
        "pages/checkout.html",
        items=items,
        total=get_total_cart_value(items),
        total_items=get_total_items(items),
        addresses=_load_addresses(token),
        balance=session.get("balance", 0),
        read_only=True,
    )


@bp.post("/checkout/addresses")
@login_required
def add_address():
    address = (request.form.get("address") or "").strip()
    if not address:
        flash("Address cannot be empty.", "warning")
        return redirect(url_for("checkout.checkout_page"))

    try:
        backend.add_address(current_token(), address)
    except BackendError as e:
        flash(_message(e, "Could not add this address."), "error")
    return redirect(url_for("checkout.checkout_page"))


@bp.post("/checkout/addresses/<address_id>/delete")
@login_required
def delete_address(address_id: str):
    try:
        backend.delete_address(current_token(), address_id)
    except NotFound:
        logger.info("Address %s already gone", address_id)
    except BackendError as e:
        flash(_message(e, "Could not delete this address."), "error")
    return redirect(url_for("checkout.checkout_page"))


@bp.post("/checkout")
@login_required
def place_order():
    token = current_token()
    address_id = (request.form.get("address_id") or "").strip() or None
    items = _load_items(token)
    addresses = _load_addresses(token)
    balance = session.get("balance", 0)

    problem = validate_request(items, addresses, address_id, balance)
    if problem:
        flash(problem, "warning")
        return redirect(url_for("checkout.checkout_page"))

    try:
        backend.checkout(token, address_id)
    except BackendError as e:
        flash(_message(e, "Could not place the order."), "error")
        return redirect(url_for("checkout.checkout_page"))

    session["balance"] = balance - get_total_cart_value(items)
    flash("Order placed successfully", "success")
    return redirect(url_for("checkout.thanks"))


@bp.get("/thanks")
@login_required
def thanks():
    return render_template("pages/thanks.html", balance=session.get("balance", 0))
