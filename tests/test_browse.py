# tests/test_browse.py
from types import SimpleNamespace

from autowheel.browse import CatalogBrowser
from autowheel.client import CatalogUnavailable


def _catalog():
    return [
        SimpleNamespace(id=1, make="Toyota", model="Camry", location="Colombo", price=8_000_000,
                        fuel_type="Petrol", is_hot_deal=False),
        SimpleNamespace(id=2, make="BMW", model="X5", location="Kandy", price=25_000_000,
                        fuel_type="Diesel", is_hot_deal=True),
    ]


def _browser(scheduler, fetch=_catalog):
    return CatalogBrowser(fetch, delay_ms=500, scheduler=scheduler, clock=scheduler.clock)


def test_typing_is_debounced(scheduler):
    browser = _browser(scheduler)
    browser.load()
    results = []
    browser.on_results_changed(lambda visible: results.append([c.id for c in visible]))

    browser.type_query("b")
    scheduler.advance(200)
    browser.type_query("bm")
    scheduler.advance(499)
    assert [c.id for c in browser.visible] == [1, 2]
    scheduler.advance(1)
    assert [c.id for c in browser.visible] == [2]
    assert results == [[2]]
    assert browser.query == browser.active_query == "bm"


def test_filters_apply_immediately(scheduler):
    browser = _browser(scheduler)
    browser.load()
    assert [c.id for c in browser.set_filters(hot_deals_only=True)] == [2]
    assert [c.id for c in browser.set_filters(hot_deals_only=False, fuel_type="Petrol")] == [1]
    assert [c.id for c in browser.clear_filters()] == [1, 2]


def test_clear_filters_drops_pending_search(scheduler):
    browser = _browser(scheduler)
    browser.load()
    browser.type_query("bmw")
    browser.clear_filters()
    scheduler.advance(1000)
    assert [c.id for c in browser.visible] == [1, 2]


def test_fetch_failure_keeps_stale_catalog(scheduler):
    calls = {"n": 0}

    def flaky():
        calls["n"] += 1
        if calls["n"] > 1:
            raise CatalogUnavailable("offline")
        return _catalog()

    browser = _browser(scheduler, flaky)
    browser.load()
    browser.load()
    assert browser.error == "offline"
    assert len(browser.visible) == 2


def test_close_cancels_pending_search(scheduler):
    browser = _browser(scheduler)
    browser.load()
    browser.type_query("bmw")
    browser.close()
    scheduler.advance(1000)
    assert len(browser.visible) == 2
