from unittest.mock import MagicMock

import pytest

from storefront.app.common.errors import CONNECTIVITY_MESSAGE, BackendUnavailable
from storefront.modules.catalog.gate import SearchGate

from test_debounce import FakeClock


@pytest.fixture()
def clock():
    return FakeClock()


@pytest.fixture()
def client(products):
    client = MagicMock()
    client.list_products.return_value = products
    return client


@pytest.fixture()
def gate(client, clock):
    return SearchGate(client, debounce_ms=500, timer_factory=clock)


def fire_all(clock):
    for timer in clock.timers:
        timer.fire()


def test_newer_request_supersedes_older(gate, client, clock, products):
    client.search_products.return_value = products[1:]

    tickets = [gate.submit("visitor", text) for text in ["b", "ba", "bas", "bask"]]
    assert [t.superseded for t in tickets] == [True, True, True, False]
    assert all(t.wait(0) for t in tickets[:3])
    assert not tickets[3].wait(0)

    fire_all(clock)

    assert tickets[3].wait(0)
    assert tickets[3].result == products[1:]
    client.search_products.assert_called_once_with("bask")


def test_visitors_do_not_supersede_each_other(gate, client, clock):
    first = gate.submit("one", "ball")
    second = gate.submit("two", "phone")
    fire_all(clock)

    assert not first.superseded and not second.superseded
    assert sorted(c.args[0] for c in client.search_products.call_args_list) == ["ball", "phone"]


def test_page_is_kept_per_visitor(gate):
    assert gate.page_for("one") is gate.page_for("one")
    assert gate.page_for("one") is not gate.page_for("two")


def test_ticket_carries_only_its_own_notifications(gate, client, clock):
    client.search_products.side_effect = BackendUnavailable()
    ticket = gate.submit("visitor", "ball")
    fire_all(clock)

    assert ticket.result is None
    assert ticket.notifications == [(CONNECTIVITY_MESSAGE, "error")]
    assert gate.page_for("visitor").notifications == []


def test_oldest_visitor_is_evicted(client, clock):
    gate = SearchGate(client, debounce_ms=500, timer_factory=clock, max_pages=2)
    first = gate.page_for("one")
    gate.page_for("two")
    gate.page_for("three")

    assert gate.page_for("one") is not first
