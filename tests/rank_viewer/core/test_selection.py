from __future__ import annotations

import pytest

from rank_viewer.core.chart import NoOp, SelectionEvent
from rank_viewer.core.preview import ImagePreviewGateway
from rank_viewer.core.selection import SelectionController
from rank_viewer.core.store import RankedItemStore

RECORDS = [
    {"id": "r1", "rank": 1, "score": 80.0, "imageRef": "r1.png"},
    {"id": "r2", "rank": 2, "score": 40.0, "imageRef": "r2.png"},
    {"id": "r3", "rank": 3, "score": 60.0, "imageRef": "r3.png"},
]


class RecordingGateway(ImagePreviewGateway):
    def __init__(self):
        self.calls = []

    def open(self, item_id):
        self.calls.append(("open", item_id))

    def close(self):
        self.calls.append(("close",))


@pytest.fixture
def store():
    s = RankedItemStore()
    s.load(RECORDS, name="demo")
    return s


@pytest.fixture
def gateway():
    return RecordingGateway()


@pytest.fixture
def controller(store, gateway):
    return SelectionController(store, gateway)


def _assert_balanced(calls):
    """At most one preview open at any point in the call sequence."""
    depth = 0
    for call in calls:
        depth += 1 if call[0] == "open" else -1
        assert 0 <= depth <= 1


def test_click_opens_preview(controller, gateway):
    state = controller.handle(SelectionEvent("r2"))

    assert state.item_id == "r2"
    assert gateway.calls == [("open", "r2")]


def test_noop_changes_nothing(controller, gateway):
    controller.handle(NoOp("plotly_hover"))

    assert controller.state.is_idle
    assert gateway.calls == []


def test_switch_closes_before_opening(controller, gateway):
    controller.handle(SelectionEvent("r1"))
    controller.handle(SelectionEvent("r3"))

    assert gateway.calls == [("open", "r1"), ("close",), ("open", "r3")]
    _assert_balanced(gateway.calls)


def test_same_item_twice_is_a_single_open(controller, gateway):
    controller.handle(SelectionEvent("r1"))
    controller.handle(SelectionEvent("r1"))

    assert gateway.calls == [("open", "r1")]


def test_deselect_closes(controller, gateway):
    controller.select("r1")
    controller.deselect()
    controller.deselect()

    assert controller.state.is_idle
    assert gateway.calls == [("open", "r1"), ("close",)]


def test_reload_closes_preview_before_new_dataset(store, controller, gateway):
    seen = []
    gateway.close = lambda: seen.append(store.get_snapshot().dataset.name)

    controller.handle(SelectionEvent("r2"))
    store.load(RECORDS, name="fresh")

    assert seen == ["demo"]
    assert controller.state.is_idle


def test_filter_removing_selected_item_closes_preview(store, controller, gateway):
    controller.handle(SelectionEvent("r2"))
    store.set_filter("score", {"min": 50})

    assert controller.state.is_idle
    assert gateway.calls == [("open", "r2"), ("close",)]


def test_selection_of_filtered_out_item_is_ignored(store, controller, gateway):
    store.set_filter("score", {"min": 50})
    controller.handle(SelectionEvent("r2"))

    assert controller.state.is_idle
    assert gateway.calls == []


def test_open_close_law_over_a_session(store, controller, gateway):
    for item_id in ["r1", "r2", "r2", "r3", "r1"]:
        controller.handle(SelectionEvent(item_id))
    store.set_filter("score", {"max": 70})
    controller.handle(SelectionEvent("r3"))
    store.load(RECORDS, name="again")
    controller.detach()

    _assert_balanced(gateway.calls)
    opens = sum(1 for c in gateway.calls if c[0] == "open")
    closes = sum(1 for c in gateway.calls if c[0] == "close")
    assert opens == closes


def test_detach_releases_open_preview(controller, gateway):
    controller.select("r1")
    controller.detach()

    assert gateway.calls == [("open", "r1"), ("close",)]


def test_top_item_filtered_out_after_click(store, controller, gateway):
    controller.handle(SelectionEvent("r1"))
    assert controller.state.item_id == "r1"
    assert gateway.calls == [("open", "r1")]

    store.set_filter("score", {"max": 70})

    assert controller.state.is_idle
    assert gateway.calls == [("open", "r1"), ("close",)]
