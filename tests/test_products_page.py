import threading
from unittest.mock import MagicMock

import pytest

from storefront.app.common.errors import (
    CONNECTIVITY_MESSAGE,
    BackendUnavailable,
    NotFound,
    RequestRejected,
    ServerFault,
)
from storefront.modules.catalog.state import ProductsPage

from test_debounce import FakeClock


@pytest.fixture()
def client(products):
    client = MagicMock()
    client.list_products.return_value = products
    return client


@pytest.fixture()
def page(client):
    return ProductsPage(client)


def test_initial_state_is_empty(page):
    assert page.products == []
    assert page.filtered_products == []
    assert page.is_loading is False
    assert page.notifications == []


def test_fetch_populates_catalog_and_display(page, products):
    assert page.perform_api_call() == products
    assert page.products == products
    assert page.filtered_products == products
    assert page.is_loading is False
    assert page.notifications == []


def test_loading_flag_is_set_while_fetching(page, client, products):
    seen = []

    def fetch():
        seen.append(page.is_loading)
        return products

    client.list_products.side_effect = fetch
    page.perform_api_call()
    assert seen == [True]
    assert page.is_loading is False


def test_fetch_server_fault_shows_payload_message(page, client):
    client.list_products.side_effect = ServerFault("Something went wrong. Check the backend console for more details")
    assert page.perform_api_call() is None
    assert page.products == []
    assert page.notifications == [("Something went wrong. Check the backend console for more details", "error")]
    assert page.is_loading is False


@pytest.mark.parametrize("error", [BackendUnavailable(), BackendUnavailable(status_code=503)])
def test_fetch_connectivity_failure_shows_generic_message(page, client, error):
    client.list_products.side_effect = error
    assert page.perform_api_call() is None
    assert page.products == []
    assert page.notifications == [(CONNECTIVITY_MESSAGE, "error")]


def test_drain_empties_notifications(page, client):
    client.list_products.side_effect = BackendUnavailable()
    page.perform_api_call()

    assert page.drain_notifications() == [(CONNECTIVITY_MESSAGE, "error")]
    assert page.notifications == []


def test_search_success_replaces_display(page, client, products):
    page.perform_api_call()
    client.search_products.return_value = products[:1]

    assert page.perform_search("iph") == products[:1]
    assert page.filtered_products == products[:1]
    assert page.products == products


def test_search_not_found_shows_empty_list_without_error(page, client):
    page.perform_api_call()
    client.search_products.side_effect = NotFound()

    assert page.perform_search("zzz") == []
    assert page.filtered_products == []
    assert page.notifications == []


def test_search_server_fault_reverts_to_catalog(page, client, products):
    page.perform_api_call()
    client.search_products.return_value = products[:1]
    page.perform_search("iph")
    client.search_products.side_effect = ServerFault("X")

    assert page.perform_search("iphone") == products
    assert page.notifications == [("X", "error")]
    assert page.filtered_products == products
    client.list_products.assert_called_once()


def test_search_server_fault_fetches_catalog_when_not_loaded(page, client, products):
    client.search_products.side_effect = ServerFault("X")

    assert page.perform_search("iph") == products
    assert page.filtered_products == products
    client.list_products.assert_called_once()


def test_search_success_does_not_fetch_catalog(page, client, products):
    client.search_products.return_value = products[:1]

    page.perform_search("iph")
    client.list_products.assert_not_called()


@pytest.mark.parametrize(
    "error",
    [BackendUnavailable(), BackendUnavailable(status_code=503), RequestRejected("bad", 400)],
)
def test_search_other_failure_keeps_display(page, client, products, error):
    page.perform_api_call()
    client.search_products.return_value = products[1:]
    page.perform_search("ball")
    client.search_products.side_effect = error

    assert page.perform_search("balls") is None
    assert page.filtered_products == products[1:]
    assert page.notifications == [(CONNECTIVITY_MESSAGE, "error")]


def test_empty_search_shows_catalog_without_search_call(page, client, products):
    assert page.perform_search("") == products
    client.search_products.assert_not_called()


def test_rapid_keystrokes_only_send_last_query(client):
    clock = FakeClock()
    page = ProductsPage(client, debounce_ms=500, timer_factory=clock)

    for text in ["b", "ba", "bas", "bask"]:
        page.debounce_search(text)

    client.search_products.assert_not_called()
    for timer in clock.timers:
        timer.fire()

    client.search_products.assert_called_once_with("bask")


def test_debounced_search_on_timer_thread_records_notification(client):
    # runs with no Flask context at all, like a real threading.Timer
    client.search_products.side_effect = ServerFault("X")
    page = ProductsPage(client, debounce_ms=10)
    done = threading.Event()
    results = []

    def finished(result):
        results.append(result)
        done.set()

    page.debounce_search("iph", on_done=finished)

    assert done.wait(timeout=2)
    assert page.notifications == [("X", "error")]
    assert results == [page.products]
