from __future__ import annotations

import json

import pytest

from rank_viewer.config.loader import load_dataset_registry
from rank_viewer.services.dataset_service import DatasetManager
from rank_viewer.session import RankingSession
from rank_viewer.ui.callbacks.callbacks_sync import apply_ui_trigger, collect_outputs
from rank_viewer.ui.config import AppConfig
from rank_viewer.ui.ids import IDs, filter_control_id

RECORDS = [
    {"id": "r1", "rank": 1, "score": 80.0, "imageRef": "r1.png", "metrics": {"acc": 0.9}},
    {"id": "r2", "rank": 2, "score": 40.0, "imageRef": "r2.png", "metrics": {"acc": 0.1}},
    {"id": "r3", "rank": 3, "score": 60.0, "metrics": {"acc": 0.5}},
]


@pytest.fixture
def ctx(tmp_path):
    root = tmp_path / "config"
    (root / "datasets").mkdir(parents=True)
    (root / "global.json").write_text(
        json.dumps({"default_dataset": "Demo", "image_base_url": "https://img.example.org/"})
    )
    (root / "datasets" / "demo.json").write_text(json.dumps({"name": "Demo", "file": "../demo_data.json"}))
    (root / "datasets" / "broken.json").write_text(json.dumps({"name": "Broken", "file": "nope.json"}))
    (root / "demo_data.json").write_text(json.dumps(RECORDS))
    (root / "datasets" / "malformed.json").write_text(json.dumps({"name": "Malformed", "file": "../malformed_data.json"}))
    (root / "malformed_data.json").write_text(json.dumps([{"id": "a", "rank": 1, "score": 1.0, "metrics": "oops"}]))

    global_config, cfg_by_name = load_dataset_registry(root)
    return AppConfig(
        config_root=root,
        global_config=global_config,
        datasets=DatasetManager(cfg_by_name),
        session=RankingSession(image_base_url=global_config.image_base_url),
        default_dataset="Demo",
    )


def _click(item_id):
    return {"points": [{"customdata": item_id, "pointIndex": 0}]}


def test_initial_call_loads_default_dataset(ctx):
    assert apply_ui_trigger(ctx, None, None) is None

    out = collect_outputs(ctx, None)
    assert [row["id"] for row in out["table_data"]] == ["r1", "r2", "r3"]
    assert list(out["figure"].data[0].customdata) == ["r1", "r2", "r3"]
    assert out["modal_open"] is False
    assert out["notice_open"] is False


def test_filter_control_updates_table(ctx):
    apply_ui_trigger(ctx, None, None)
    apply_ui_trigger(ctx, filter_control_id("score"), [50, 80])

    out = collect_outputs(ctx, None)
    assert [row["id"] for row in out["table_data"]] == ["r1", "r3"]
    assert out["filter_state"]["score"] == {"min": 50.0, "max": None}


def test_reset_restores_full_series(ctx):
    apply_ui_trigger(ctx, None, None)
    apply_ui_trigger(ctx, filter_control_id("score"), [50, 80])
    apply_ui_trigger(ctx, IDs.Control.RESET_FILTERS_BTN, 1)

    assert len(collect_outputs(ctx, None)["table_data"]) == 3


def test_click_opens_modal_and_close_button_closes_it(ctx):
    apply_ui_trigger(ctx, None, None)
    apply_ui_trigger(ctx, IDs.Control.MAIN_GRAPH, _click("r2"))

    out = collect_outputs(ctx, None)
    assert out["modal_open"] is True
    assert out["modal_src"] == "https://img.example.org/r2.png"
    assert out["selection"] == "r2"

    apply_ui_trigger(ctx, IDs.Control.IMAGE_MODAL_CLOSE, 1)
    out = collect_outputs(ctx, None)
    assert out["modal_open"] is False
    assert out["selection"] is None


def test_click_on_item_without_image_keeps_modal_closed(ctx):
    apply_ui_trigger(ctx, None, None)
    apply_ui_trigger(ctx, IDs.Control.MAIN_GRAPH, _click("r3"))

    out = collect_outputs(ctx, None)
    assert out["selection"] == "r3"
    assert out["modal_open"] is False


def test_invalid_filter_value_gives_notice(ctx):
    apply_ui_trigger(ctx, None, None)
    before = ctx.session.store.get_snapshot()

    notice = apply_ui_trigger(ctx, filter_control_id("score"), [70, 50])

    assert "greater than" in notice
    assert ctx.session.store.get_snapshot() == before
    assert collect_outputs(ctx, notice)["notice_open"] is True


def test_stale_control_is_ignored(ctx):
    apply_ui_trigger(ctx, None, None)

    assert apply_ui_trigger(ctx, filter_control_id("gone"), 1) is None


def test_broken_dataset_keeps_current_one(ctx):
    apply_ui_trigger(ctx, None, None)
    notice = apply_ui_trigger(ctx, IDs.Control.DATASET_SELECT, "Broken")

    assert notice.startswith("Could not load dataset")
    assert ctx.session.store.get_snapshot().dataset.name == "Demo"


def test_layout_change_switches_chart_type(ctx):
    apply_ui_trigger(ctx, None, None)
    apply_ui_trigger(ctx, IDs.Control.CHART_TYPE, "scatter")
    apply_ui_trigger(ctx, IDs.Control.X_METRIC_SELECT, "acc")

    fig = collect_outputs(ctx, None)["figure"]
    assert fig.data[0].type == "scatter"
    assert list(fig.data[0].x) == [0.9, 0.1, 0.5]


def test_nothing_loaded_shows_placeholder(ctx):
    ctx.default_dataset = None
    apply_ui_trigger(ctx, None, None)

    out = collect_outputs(ctx, None)
    assert len(out["figure"].data) == 0
    assert out["table_data"] == []


def test_malformed_dataset_gives_notice_and_keeps_current_one(ctx):
    apply_ui_trigger(ctx, None, None)
    notice = apply_ui_trigger(ctx, IDs.Control.DATASET_SELECT, "Malformed")

    assert "ITEM_METRICS" in notice
    assert ctx.session.store.get_snapshot().dataset.name == "Demo"
    assert collect_outputs(ctx, notice)["notice_open"] is True
