"""State behind the products page.

`ProductsPage` owns the catalog cache, the currently displayed (filtered)
list and the loading flag. Notifications are collected as
`(message, variant)` pairs in `notifications`; the page route flashes them
and the search API returns them. Nothing here touches the request context,
so searches may run on a debounce timer thread.
"""

from __future__ import annotations

import logging
import threading
from typing import Callable, List, Optional, Tuple

from storefront.app.backend import BackendClient
from storefront.app.common.debounce import Debouncer
from storefront.app.common.errors import (
    CONNECTIVITY_MESSAGE,
    BackendError,
    NotFound,
    ServerFault,
)
from storefront.app.models import Product

logger = logging.getLogger(__name__)


class ProductsPage:
    def __init__(
        self,
        client: BackendClient,
        debounce_ms: int = 500,
        timer_factory: Optional[Callable] = None,
    ):
        self.client = client
        self.products: List[Product] = []
        self.filtered_products: List[Product] = []
        self.is_loading = False
        self.catalog_loaded = False
        self.notifications: List[Tuple[str, str]] = []
        self.debouncer = Debouncer(debounce_ms, timer_factory=timer_factory)
        self._lock = threading.Lock()

    def notify(self, message: str, variant: str = "error") -> None:
        with self._lock:
            self.notifications.append((message, variant))

    def drain_notifications(self) -> List[Tuple[str, str]]:
        with self._lock:
            pending, self.notifications = self.notifications, []
        return pending

    def perform_api_call(self) -> Optional[List[Product]]:
        """Fetch the full catalog and show all of it.

        On failure the catalog stays empty and a notification is raised:
        the payload message for a server fault, a generic one otherwise.
        """
        self.is_loading = True
        try:
            products = self.client.list_products()
        except ServerFault as e:
            self.notify(e.message or CONNECTIVITY_MESSAGE, "error")
            return None
        except BackendError as e:
            logger.info("Catalog fetch failed: %r", e)
            self.notify(CONNECTIVITY_MESSAGE, "error")
            return None
        finally:
            self.is_loading = False
            self.catalog_loaded = True

        self.products = products
        self.filtered_products = list(products)
        return products

    def show_catalog(self) -> List[Product]:
        if not self.catalog_loaded:
            self.perform_api_call()
        self.filtered_products = list(self.products)
        return self.filtered_products

    def perform_search(self, text: str) -> Optional[List[Product]]:
        """Search and update the displayed list.

        Returns the list now displayed, or None when the display was left
        as it was. A server fault falls back to the full catalog, fetching
        it first if this page has not loaded it yet. Empty text shows the
        whole catalog without a search call.
        """
        if not text:
            return self.show_catalog()
        try:
            results = self.client.search_products(text)
        except NotFound:
            self.filtered_products = []
            return []
        except ServerFault as e:
            self.notify(e.message or CONNECTIVITY_MESSAGE, "error")
            return self.show_catalog()
        except BackendError as e:
            # keep whatever is on screen
            logger.info("Search for %r failed: %r", text, e)
            self.notify(CONNECTIVITY_MESSAGE, "error")
            return None

        self.filtered_products = results
        return results

    def debounce_search(self, text: str, on_done: Optional[Callable] = None) -> None:
        """Called on every keystroke; only the last one in the window searches.

        `on_done` receives the result of `perform_search` once it has run.
        """
        def search() -> None:
            result = self.perform_search(text)
            if on_done is not None:
                on_done(result)

        self.debouncer.call(search)
