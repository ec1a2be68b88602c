from __future__ import annotations

from rank_viewer.core.controls import ControlSet
from rank_viewer.core.dataset import Dataset
from rank_viewer.core.projection import DerivedSeries, project


def _make_dataset():
    """
    Ranks {1: 80, 2: 40, 3: 60} on 'score', plus a metric, a flag and a category.
    """
    return Dataset.from_records(
        [
            {"id": "r1", "rank": 1, "score": 80.0, "metrics": {"acc": 0.9},
             "flags": {"verified": True}, "categories": {"family": "cnn"}},
            {"id": "r2", "rank": 2, "score": 40.0, "metrics": {"acc": 0.2},
             "flags": {"verified": True}, "categories": {"family": "tree"}},
            {"id": "r3", "rank": 3, "score": 60.0, "metrics": {},
             "flags": {"verified": False}, "categories": {"family": "cnn"}},
        ],
        name="demo",
    )


def _project(ds, **changes):
    controls = ControlSet.for_dataset(ds)
    state = controls.defaults()
    for name, value in changes.items():
        state = state.replace(name, controls.coerce(name, value))
    return project(ds, state, controls)


def test_no_filters_keeps_every_item_in_rank_order():
    derived = _project(_make_dataset())

    assert derived.ranks == [1, 2, 3]
    assert derived.ids == ["r1", "r2", "r3"]


def test_score_threshold_preserves_rank_order():
    derived = _project(_make_dataset(), score={"metric": "score", "min": 50})

    assert derived.ids == ["r1", "r3"]
    assert derived.ranks == [1, 3]


def test_filters_combine_as_conjunction():
    ds = _make_dataset()
    derived = _project(ds, family=["cnn"], verified=True)

    assert derived.ids == ["r1"]
    for item in derived:
        assert item.categories["family"] == "cnn"
        assert item.flags["verified"] is True


def test_metric_range_drops_items_without_the_metric():
    derived = _project(_make_dataset(), acc=[0.1, 0.5])

    assert derived.ids == ["r2"]


def test_rank_range_acts_as_top_n():
    derived = _project(_make_dataset(), rank={"max": 2})

    assert derived.ids == ["r1", "r2"]


def test_projection_is_idempotent_by_value():
    ds = _make_dataset()
    controls = ControlSet.for_dataset(ds)
    state = controls.defaults().replace("score", controls.coerce("score", [45, 90]))

    first = project(ds, state, controls)
    ds.clear_caches()
    second = project(ds, state, controls)

    assert first == second
    assert first is not second


def test_empty_result_is_a_valid_series():
    derived = _project(_make_dataset(), score={"min": 79, "max": 79.5})

    assert isinstance(derived, DerivedSeries)
    assert derived.is_empty
    assert len(derived) == 0
    assert derived.dataset_name == "demo"


def test_to_frame_for_table():
    derived = _project(_make_dataset())
    df = derived.to_frame()

    assert list(df.columns) == ["rank", "id", "score", "acc"]
    assert list(df["id"]) == ["r1", "r2", "r3"]
