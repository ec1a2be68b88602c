from __future__ import annotations

import logging

from rank_viewer.core.dataset import Dataset
from rank_viewer.core.preview import ImageResolver, ModalImageGateway


def _gateway(base_url=None):
    ds = Dataset.from_records(
        [
            {"id": "r1", "rank": 1, "score": 2.0, "imageRef": "r1.png"},
            {"id": "r2", "rank": 2, "score": 1.0},
        ],
        name="demo",
    )
    return ModalImageGateway(ds.get, ImageResolver(base_url))


def test_resolver_joins_relative_refs():
    resolver = ImageResolver("https://img.example.org/runs")

    assert resolver.resolve("r1.png") == "https://img.example.org/runs/r1.png"
    assert resolver.resolve("https://cdn.example.org/a.png") == "https://cdn.example.org/a.png"
    assert resolver.resolve("/assets/a.png") == "/assets/a.png"
    assert resolver.resolve("data:image/png;base64,AAAA") == "data:image/png;base64,AAAA"


def test_resolver_without_base_url_passes_through():
    assert ImageResolver().resolve("r1.png") == "r1.png"


def test_open_sets_modal_state():
    gateway = _gateway("https://img.example.org/")
    gateway.open("r1")
    state = gateway.state

    assert state.is_open
    assert state.item_id == "r1"
    assert state.src == "https://img.example.org/r1.png"
    assert state.title == "#1 · r1"


def test_close_is_idempotent():
    gateway = _gateway()
    gateway.close()
    gateway.open("r1")
    gateway.close()
    gateway.close()

    assert not gateway.state.is_open


def test_item_without_image_is_logged_not_raised(caplog):
    gateway = _gateway()

    with caplog.at_level(logging.WARNING):
        gateway.open("r2")

    assert not gateway.state.is_open
    assert any("No image" in r.getMessage() for r in caplog.records)


def test_unknown_item_keeps_modal_closed():
    gateway = _gateway()
    gateway.open("missing")

    assert not gateway.state.is_open
