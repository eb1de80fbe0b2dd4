"""HTTP client for the storefront backend.

Every call either returns decoded JSON or raises one of the
`BackendError` subclasses from `storefront.app.common.errors`, so views
only ever deal with the error taxonomy and never with `requests` itself.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import requests
from flask import Flask, g, has_request_context

from storefront.app.common.errors import (
    BackendUnavailable,
    NotFound,
    RequestRejected,
    ServerFault,
)
from storefront.app.common.request_context import REQUEST_ID_HEADER
from storefront.app.models import Address, CartReference, Product

logger = logging.getLogger(__name__)


def create_session() -> requests.Session:
    """Create a requests Session with connection pooling and JSON headers."""
    session = requests.Session()
    session.headers.update({"Accept": "application/json"})
    return session


class BackendClient:
    def __init__(self, endpoint: str | None = None, timeout: float = 10.0,
                 session: Optional[requests.Session] = None):
        self.endpoint = (endpoint or "").rstrip("/")
        self.timeout = timeout
        self.session = session or create_session()

    def init_app(self, app: Flask) -> None:
        self.endpoint = app.config["BACKEND_ENDPOINT"].rstrip("/")
        self.timeout = app.config.get("BACKEND_TIMEOUT", self.timeout)
        app.extensions["backend"] = self

    # --- transport ---

    def _request(self, method: str, path: str, token: str | None = None, **kwargs) -> Any:
        url = f"{self.endpoint}{path}"
        headers = kwargs.pop("headers", {})
        if token:
            headers["Authorization"] = f"Bearer {token}"
        if has_request_context() and getattr(g, "request_id", None):
            headers[REQUEST_ID_HEADER] = g.request_id

        try:
            resp = self.session.request(method, url, headers=headers, timeout=self.timeout, **kwargs)
        except requests.exceptions.RequestException as e:
            logger.warning("Backend unreachable: %s %s (%s)", method, path, e)
            raise BackendUnavailable() from e

        if resp.status_code >= 400:
            self._raise_for_status(method, path, resp)

        if not resp.content:
            return None
        try:
            return resp.json()
        except ValueError as e:
            logger.warning("Backend returned invalid JSON: %s %s", method, path)
            raise BackendUnavailable(status_code=resp.status_code) from e

    @staticmethod
    def _raise_for_status(method: str, path: str, resp: requests.Response) -> None:
        status = resp.status_code
        try:
            payload = resp.json()
        except ValueError:
            payload = None
        message = payload.get("message", "") if isinstance(payload, dict) else ""

        logger.info("Backend error %s on %s %s: %s", status, method, path, message or "-")
        if status == 404:
            raise NotFound(message, status)
        if status == 500:
            raise ServerFault(message, status)
        if status > 500 and not message:
            # proxy/gateway pages carry no usable payload
            raise BackendUnavailable(status_code=status)
        raise RequestRejected(message, status)

    # --- catalog ---

    def list_products(self) -> List[Product]:
        """GET /products"""
        data = self._request("GET", "/products") or []
        return [Product.from_api(p) for p in data]

    def search_products(self, text: str) -> List[Product]:
        """GET /product/search?value=<text>; 404 means no matches."""
        data = self._request("GET", "/product/search", params={"value": text}) or []
        return [Product.from_api(p) for p in data]

    # --- auth ---

    def login(self, username: str, password: str) -> Dict[str, Any]:
        return self._request("POST", "/auth/login", json={"username": username, "password": password}) or {}

    def register(self, username: str, password: str) -> Dict[str, Any]:
        return self._request("POST", "/auth/register", json={"username": username, "password": password}) or {}

    # --- cart ---

    def get_cart(self, token: str) -> List[CartReference]:
        data = self._request("GET", "/cart", token=token) or []
        return [CartReference.from_api(r) for r in data]

    def update_cart(self, token: str, product_id: str, qty: int) -> List[CartReference]:
        """POST /cart; qty == 0 removes the line. Returns the updated cart."""
        ref = CartReference(product_id=product_id, qty=qty)
        data = self._request("POST", "/cart", token=token, json=ref.to_api()) or []
        return [CartReference.from_api(r) for r in data]

    def checkout(self, token: str, address_id: str) -> Dict[str, Any]:
        return self._request("POST", "/cart/checkout", token=token, json={"addressId": address_id}) or {}

    # --- addresses ---

    def list_addresses(self, token: str) -> List[Address]:
        data = self._request("GET", "/user/addresses", token=token) or []
        return [Address.from_api(a) for a in data]

    def add_address(self, token: str, address: str) -> List[Address]:
        data = self._request("POST", "/user/addresses", token=token, json={"address": address}) or []
        return [Address.from_api(a) for a in data]

    def delete_address(self, token: str, address_id: str) -> List[Address]:
        data = self._request("DELETE", f"/user/addresses/{address_id}", token=token) or []
        return [Address.from_api(a) for a in data]
