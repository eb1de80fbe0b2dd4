from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Optional

from flask import session

from storefront.app.common.errors import BackendError, ServerFault
from storefront.app.extensions import backend
from storefront.app.models import CartItem, CartReference, Product

logger = logging.getLogger(__name__)

ALREADY_IN_CART = "Item already in cart. Use the cart sidebar to update quantity or remove item."
CART_UNAVAILABLE = (
    "Could not fetch cart details. Check that the backend is running, "
    "reachable and returns valid JSON."
)


def generate_cart_items(
    cart_data: Optional[Iterable[CartReference]],
    products_data: Iterable[Product],
) -> List[CartItem]:
    """Join cart references against the catalog.

    One item per reference whose product is known, in reference order.
    References to products missing from the catalog are dropped.
    """
    if not cart_data:
        return []
    product_dict: Dict[str, Product] = {p.id: p for p in products_data}
    items = []
    for ref in cart_data:
        product = product_dict.get(ref.product_id)
        if product is not None:
            items.append(CartItem.from_product(product, ref))
    return items


def get_total_cart_value(items: Optional[Iterable[CartItem]] = None) -> float:
    return sum((item.cost * item.qty for item in items or []), 0)


def get_total_items(items: Optional[Iterable[CartItem]] = None) -> int:
    return sum((item.qty for item in items or []), 0)


# --- guest cart (kept in the Flask session until login) ---

def get_session_cart() -> Dict[str, int]:
    return session.get("cart", {})


def set_session_cart(cart_data: Dict[str, int]) -> None:
    session["cart"] = cart_data


def session_cart_references() -> List[CartReference]:
    return [CartReference(product_id=pid, qty=qty) for pid, qty in get_session_cart().items()]


def set_session_quantity(product_id: str, qty: int) -> None:
    cart = get_session_cart()
    if qty <= 0:
        cart.pop(product_id, None)
    else:
        cart[product_id] = qty
    set_session_cart(cart)


def fetch_cart(token: Optional[str]) -> List[CartReference]:
    """Cart references for the current visitor; backend for logged in users."""
    if not token:
        return session_cart_references()
    return backend.get_cart(token)


def update_quantity(token: Optional[str], product_id: str, qty: int) -> None:
    """Fire-and-forget quantity update.

    Failures are logged only; nothing is retried or rolled back and the
    user sees the cart as the backend reports it on the next render.
    """
    qty = max(qty, 0)
    if not token:
        set_session_quantity(product_id, qty)
        return
    push_quantity(token, product_id, qty)


def push_quantity(token: str, product_id: str, qty: int) -> bool:
    """Send one quantity to the backend. False (and a log line) on failure."""
    try:
        backend.update_cart(token, product_id, qty)
    except BackendError as e:
        logger.warning("Cart update for %s (qty=%s) failed: %s", product_id, qty, e.message or type(e).__name__)
        return False
    return True


def merge_session_cart(token: str) -> None:
    """Push the guest cart to the backend after login, adding quantities.

    Lines the backend refused stay in the session cart.
    """
    guest = get_session_cart()
    if not guest:
        return

    existing = {ref.product_id: ref.qty for ref in backend.get_cart(token)}
    unmerged: Dict[str, int] = {}
    for product_id, qty in guest.items():
        if not push_quantity(token, product_id, existing.get(product_id, 0) + qty):
            unmerged[product_id] = qty

    if unmerged:
        set_session_cart(unmerged)
    else:
        session.pop("cart", None)


def load_cart_items(token: Optional[str], products: List[Product], notify) -> List[CartItem]:
    """Materialized cart for rendering; a failed fetch shows an empty cart."""
    try:
        refs = fetch_cart(token)
    except ServerFault as e:
        notify(e.message, "error")
        return []
    except BackendError as e:
        logger.info("Cart fetch failed: %r", e)
        notify(CART_UNAVAILABLE, "error")
        return []
    return generate_cart_items(refs, products)
