from __future__ import annotations

import pytest

from rank_viewer.core.controls import (
    ControlKind,
    ControlSet,
    FilterState,
    RangeControl,
    RangeValue,
    SelectControl,
    ToggleControl,
)
from rank_viewer.core.dataset import Dataset
from rank_viewer.core.exceptions import InvalidControlValueError, UnknownControlError


def _make_dataset():
    return Dataset.from_records(
        [
            {"id": "a", "rank": 1, "score": 80.0, "metrics": {"acc": 0.9, "score": 1.0},
             "flags": {"verified": True, "acc": True}, "categories": {"family": "cnn"}},
            {"id": "b", "rank": 2, "score": 40.0, "metrics": {"acc": 0.4},
             "flags": {"verified": False}, "categories": {"family": "tree"}},
        ],
        name="demo",
    )


def test_controls_derived_from_dataset():
    controls = ControlSet.for_dataset(_make_dataset())

    assert list(controls) == ["score", "rank", "acc", "flag.acc", "verified", "family"]
    assert controls["score"].kind == ControlKind.RANGE
    # a metric called "score" would shadow the built-in field
    assert controls["score"].lower == 40.0
    assert controls["flag.acc"].flag == "acc"
    assert controls["verified"].kind == ControlKind.TOGGLE
    assert controls["family"].options == ("cnn", "tree")


def test_unknown_control_name():
    controls = ControlSet.for_dataset(_make_dataset())

    with pytest.raises(UnknownControlError):
        controls.coerce("nonexistent", 5)


def test_defaults_are_inactive():
    controls = ControlSet.for_dataset(_make_dataset())
    defaults = controls.defaults()

    assert controls.active(defaults) == []
    assert defaults["score"] == RangeValue()
    assert defaults["verified"] is False
    assert defaults["family"] == ()


def test_range_coercion_forms():
    control = RangeControl(name="score", label="Score", field="score", lower=0.0, upper=100.0)

    assert control.coerce({"metric": "score", "min": 50}) == RangeValue(50.0, None)
    assert control.coerce([10, 20]) == RangeValue(10.0, 20.0)
    assert control.coerce(30) == RangeValue(30.0, None)
    assert control.coerce(None) == RangeValue()
    # slider pushed to both ends means no bound
    assert control.coerce([0, 100]) == RangeValue()


def test_range_coercion_rejects_bad_values():
    control = RangeControl(name="score", label="Score", field="score", lower=0.0, upper=100.0)

    with pytest.raises(InvalidControlValueError):
        control.coerce([20, 10])
    with pytest.raises(InvalidControlValueError):
        control.coerce({"metric": "acc", "min": 1})
    with pytest.raises(InvalidControlValueError):
        control.coerce("high")
    with pytest.raises(InvalidControlValueError):
        control.coerce([1, 2, 3])


def test_toggle_coercion():
    control = ToggleControl(name="verified", label="verified", flag="verified")

    assert control.coerce(True) is True
    assert control.coerce(None) is False
    assert control.coerce(["on"]) is True
    assert control.coerce([]) is False
    assert control.coerce("false") is False
    with pytest.raises(InvalidControlValueError):
        control.coerce("maybe")


def test_select_coercion():
    control = SelectControl(name="family", label="family", field="family", options=("cnn", "tree"))

    assert control.coerce("cnn") == ("cnn",)
    assert control.coerce(["tree", "cnn", "tree"]) == ("cnn", "tree")
    assert control.coerce([]) == ()
    with pytest.raises(InvalidControlValueError):
        control.coerce(["rnn"])


def test_filter_state_is_immutable_and_serialisable():
    state = FilterState({"score": RangeValue()})
    updated = state.replace("score", RangeValue(50.0, None))

    assert state["score"] == RangeValue()
    assert updated["score"] == RangeValue(50.0, None)
    assert updated != state
    assert updated.to_dict() == {"score": {"min": 50.0, "max": None}}
    assert FilterState({"family": ("cnn",)}).to_dict() == {"family": ["cnn"]}
