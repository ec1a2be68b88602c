from __future__ import annotations

import math

import pytest

from rank_viewer.core.dataset import Dataset, RankedItem


def _records():
    return [
        {"id": "b", "rank": 2, "score": 60.0, "metrics": {"acc": 0.5}, "flags": {"ok": True}},
        {"id": "a", "rank": 1, "score": 80.0, "metrics": {"acc": 0.9, "f1": 0.7}, "imageRef": "a.png",
         "categories": {"family": "cnn"}},
        {"id": "c", "rank": 3, "score": 40.0, "metrics": {}},
    ]


def test_from_records_orders_by_rank():
    ds = Dataset.from_records(_records(), name="demo")

    assert ds.ids == ["a", "b", "c"]
    assert [it.rank for it in ds] == [1, 2, 3]
    assert ds.get("a").image_ref == "a.png"
    assert "b" in ds
    assert "zzz" not in ds


def test_records_roundtrip():
    ds = Dataset.from_records(_records(), name="demo")
    rebuilt = Dataset.from_records(ds.to_records(), name="demo")

    assert rebuilt == ds


def test_item_mappings_are_read_only():
    item = RankedItem(item_id="x", rank=1, score=1.0, metrics={"m": 1.0})

    with pytest.raises(TypeError):
        item.metrics["m"] = 2.0


def test_discovery_helpers():
    ds = Dataset.from_records(_records(), name="demo")

    assert ds.metric_names == ["acc", "f1"]
    assert ds.flag_names == ["ok"]
    assert ds.category_fields == ["family"]
    assert ds.category_values("family") == ["cnn"]
    assert ds.value_bounds("score") == (40.0, 80.0)
    assert ds.value_bounds("acc") == (0.5, 0.9)
    assert ds.value_bounds("missing") == (None, None)


def test_to_frame_columns_and_missing_values():
    ds = Dataset.from_records(_records(), name="demo")
    df = ds.to_frame()

    assert list(df["id"]) == ["a", "b", "c"]
    assert "metric.acc" in df.columns
    assert "flag.ok" in df.columns
    assert "category.family" in df.columns
    assert math.isnan(df["metric.f1"].iloc[1])
    assert list(df["flag.ok"]) == [False, True, False]
    # cached
    assert ds.to_frame() is df
