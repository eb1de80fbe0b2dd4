"""Debounced search for the search box.

Every visitor gets a long-lived `ProductsPage`. Each keystroke request is
submitted as a `SearchTicket`; a newer request from the same visitor
supersedes the older one, so only the last query inside the debounce window
reaches the backend. Superseded requests return at once without results.
"""

from __future__ import annotations

import threading
from collections import OrderedDict
from typing import Callable, List, Optional, Tuple

from flask import Flask

from storefront.app.backend import BackendClient
from storefront.app.models import Product
from storefront.modules.catalog.state import ProductsPage

SEARCH_SESSION_HEADER = "X-Search-Session"


class SearchTicket:
    def __init__(self):
        self.result: Optional[List[Product]] = None
        self.notifications: List[Tuple[str, str]] = []
        self.superseded = False
        self._done = threading.Event()

    def resolve(self, result: Optional[List[Product]], notifications: List[Tuple[str, str]]) -> None:
        self.result = result
        self.notifications = notifications
        self._done.set()

    def supersede(self) -> None:
        self.superseded = True
        self._done.set()

    def wait(self, timeout: Optional[float] = None) -> bool:
        return self._done.wait(timeout)


class SearchGate:
    def __init__(self, client: BackendClient | None = None, debounce_ms: int = 500,
                 timer_factory: Optional[Callable] = None, max_pages: int = 1024):
        self.client = client
        self.debounce_ms = debounce_ms
        self.timer_factory = timer_factory
        self.max_pages = max_pages
        self.wait_timeout = 30.0
        self._pages: "OrderedDict[str, ProductsPage]" = OrderedDict()
        self._tickets: dict[str, SearchTicket] = {}
        self._lock = threading.Lock()

    def init_app(self, app: Flask, client: BackendClient) -> None:
        self.client = client
        self.debounce_ms = app.config["SEARCH_DEBOUNCE_MS"]
        # debounce window plus a search and a catalog fallback
        self.wait_timeout = self.debounce_ms / 1000.0 + 2 * app.config.get("BACKEND_TIMEOUT", 10.0) + 1
        with self._lock:
            self._pages.clear()
            self._tickets.clear()
        app.extensions["search_gate"] = self

    def page_for(self, key: str) -> ProductsPage:
        with self._lock:
            page = self._pages.get(key)
            if page is None:
                page = ProductsPage(self.client, self.debounce_ms, timer_factory=self.timer_factory)
                self._pages[key] = page
                if len(self._pages) > self.max_pages:
                    # least recently used visitor
                    evicted, old = self._pages.popitem(last=False)
                    old.debouncer.cancel()
                    stale = self._tickets.pop(evicted, None)
                    if stale is not None:
                        stale.supersede()
            else:
                self._pages.move_to_end(key)
            return page

    def submit(self, key: str, text: str) -> SearchTicket:
        page = self.page_for(key)
        ticket = SearchTicket()
        with self._lock:
            prior = self._tickets.get(key)
            self._tickets[key] = ticket
        if prior is not None:
            prior.supersede()

        def done(result: Optional[List[Product]]) -> None:
            ticket.resolve(result, page.drain_notifications())
            with self._lock:
                if self._tickets.get(key) is ticket:
                    del self._tickets[key]

        page.debounce_search(text, on_done=done)
        return ticket
