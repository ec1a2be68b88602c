from __future__ import annotations

import logging
import math
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from numbers import Real
from types import MappingProxyType
from typing import Any, ClassVar, Dict, Iterator, List, Mapping, Optional, Tuple

import numpy as np
import pandas as pd

from .dataset import CATEGORY_PREFIX, FLAG_PREFIX, METRIC_PREFIX, Dataset
from .exceptions import InvalidControlValueError, UnknownControlError

logger = logging.getLogger(__name__)

BUILTIN_FIELDS = ("score", "rank")


class ControlKind(str, Enum):
    RANGE = "range"
    TOGGLE = "toggle"
    SELECT = "select"


@dataclass(frozen=True)
class RangeValue:
    """Inclusive numeric range; a missing bound is unbounded on that side."""
    min: Optional[float] = None
    max: Optional[float] = None

    @property
    def is_open(self) -> bool:
        return self.min is None and self.max is None

    def to_dict(self) -> Dict[str, Optional[float]]:
        return {"min": self.min, "max": self.max}


def _as_bound(value: Any, control: str) -> Optional[float]:
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, Real):
        raise InvalidControlValueError(f"Control '{control}': bound {value!r} is not a number")
    value = float(value)
    if math.isnan(value):
        raise InvalidControlValueError(f"Control '{control}': bound is NaN")
    return value


# -----------------------------------------------------------------------------
# Controls
# -----------------------------------------------------------------------------
@dataclass(frozen=True)
class Control(ABC):
    """
    A user-adjustable filter control.

    Every control must:
    - expose a unique 'name' (the key in FilterState)
    - define its 'default' value, which is always inactive
    - normalise raw UI values with 'coerce' (raises InvalidControlValueError)
    - turn an active value into a boolean row mask over Dataset.to_frame()
    """

    name: str
    label: str

    kind: ClassVar[ControlKind]

    @property
    @abstractmethod
    def default(self) -> Any:
        raise NotImplementedError()

    @abstractmethod
    def coerce(self, value: Any) -> Any:
        raise NotImplementedError()

    @abstractmethod
    def is_active(self, value: Any) -> bool:
        raise NotImplementedError()

    @abstractmethod
    def mask(self, frame: pd.DataFrame, value: Any) -> np.ndarray:
        raise NotImplementedError()


@dataclass(frozen=True)
class RangeControl(Control):
    """
    Range inclusion on 'score', 'rank' or a named metric (slider).

    'lower'/'upper' are the dataset bounds; a bound equal to (or past) the
    dataset bound is stored as open, so a slider pushed to its ends is inactive.
    """
    field: str = "score"
    lower: Optional[float] = None
    upper: Optional[float] = None
    step: Optional[float] = None

    kind: ClassVar[ControlKind] = ControlKind.RANGE

    @property
    def default(self) -> RangeValue:
        return RangeValue()

    @property
    def column(self) -> str:
        return self.field if self.field in BUILTIN_FIELDS else METRIC_PREFIX + self.field

    def coerce(self, value: Any) -> RangeValue:
        if value is None:
            return RangeValue()

        if isinstance(value, RangeValue):
            lo, hi = value.min, value.max
        elif isinstance(value, Mapping):
            target = value.get("metric", value.get("field"))
            if target is not None and target != self.field:
                raise InvalidControlValueError(
                    f"Control '{self.name}' filters '{self.field}', not '{target}'"
                )
            lo, hi = value.get("min"), value.get("max")
        elif isinstance(value, (list, tuple)):
            if len(value) != 2:
                raise InvalidControlValueError(
                    f"Control '{self.name}': expected [min, max], got {len(value)} values"
                )
            lo, hi = value
        else:
            # a single number is a threshold slider: lower bound only
            lo, hi = value, None

        lo = _as_bound(lo, self.name)
        hi = _as_bound(hi, self.name)

        if lo is not None and hi is not None and lo > hi:
            raise InvalidControlValueError(f"Control '{self.name}': min {lo} is greater than max {hi}")

        if lo is not None and self.lower is not None and lo <= self.lower:
            lo = None
        if hi is not None and self.upper is not None and hi >= self.upper:
            hi = None

        return RangeValue(lo, hi)

    def is_active(self, value: RangeValue) -> bool:
        return not value.is_open

    def mask(self, frame: pd.DataFrame, value: RangeValue) -> np.ndarray:
        if self.column not in frame.columns:
            return np.zeros(len(frame), dtype=bool)

        vals = frame[self.column].to_numpy(dtype=float)
        mask = ~np.isnan(vals)
        if value.min is not None:
            mask &= vals >= value.min
        if value.max is not None:
            mask &= vals <= value.max
        return mask


@dataclass(frozen=True)
class ToggleControl(Control):
    """Boolean gating on a named flag: when on, only flagged items survive."""
    flag: str = ""

    kind: ClassVar[ControlKind] = ControlKind.TOGGLE

    @property
    def default(self) -> bool:
        return False

    def coerce(self, value: Any) -> bool:
        if value is None:
            return False
        if isinstance(value, bool):
            return value
        # dbc.Checklist reports a list of checked option values
        if isinstance(value, (list, tuple)):
            return len(value) > 0
        if isinstance(value, Real) and value in (0, 1):
            return bool(value)
        if isinstance(value, str) and value.lower() in ("true", "false"):
            return value.lower() == "true"
        raise InvalidControlValueError(f"Control '{self.name}': {value!r} is not a boolean")

    def is_active(self, value: bool) -> bool:
        return bool(value)

    def mask(self, frame: pd.DataFrame, value: bool) -> np.ndarray:
        column = FLAG_PREFIX + self.flag
        if column not in frame.columns:
            return np.zeros(len(frame), dtype=bool)
        return frame[column].to_numpy(dtype=bool)


@dataclass(frozen=True)
class SelectControl(Control):
    """Category membership on a named field; no selection means all categories."""
    field: str = ""
    options: Tuple[str, ...] = ()

    kind: ClassVar[ControlKind] = ControlKind.SELECT

    @property
    def default(self) -> Tuple[str, ...]:
        return ()

    def coerce(self, value: Any) -> Tuple[str, ...]:
        if value is None or value == "":
            return ()
        if isinstance(value, str):
            values = [value]
        elif isinstance(value, (list, tuple, set, frozenset)):
            values = [str(v) for v in value]
        else:
            raise InvalidControlValueError(f"Control '{self.name}': {value!r} is not a category")

        unknown = [v for v in values if v not in self.options]
        if unknown:
            raise InvalidControlValueError(
                f"Control '{self.name}': unknown categories {sorted(set(unknown))}"
            )
        return tuple(sorted(set(values)))

    def is_active(self, value: Tuple[str, ...]) -> bool:
        return len(value) > 0

    def mask(self, frame: pd.DataFrame, value: Tuple[str, ...]) -> np.ndarray:
        column = CATEGORY_PREFIX + self.field
        if column not in frame.columns:
            return np.zeros(len(frame), dtype=bool)
        return frame[column].isin(list(value)).to_numpy()


# -----------------------------------------------------------------------------
# FilterState
# -----------------------------------------------------------------------------
class FilterState(Mapping[str, Any]):
    """
    Immutable mapping of control name -> current (coerced) value.

    Updates go through 'replace', which returns a new FilterState.
    """

    def __init__(self, values: Optional[Mapping[str, Any]] = None):
        self._values: Mapping[str, Any] = MappingProxyType(dict(values or {}))

    def __getitem__(self, name: str) -> Any:
        return self._values[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, FilterState):
            return dict(self._values) == dict(other._values)
        return NotImplemented

    def __hash__(self) -> int:
        return hash(tuple(sorted(self._values.items())))

    def __repr__(self) -> str:
        return f"FilterState({dict(self._values)!r})"

    def replace(self, name: str, value: Any) -> FilterState:
        values = dict(self._values)
        values[name] = value
        return FilterState(values)

    def to_dict(self) -> Dict[str, Any]:
        """JSON-friendly form (for dcc.Store and log context)."""
        out: Dict[str, Any] = {}
        for name, value in self._values.items():
            if isinstance(value, RangeValue):
                out[name] = value.to_dict()
            elif isinstance(value, tuple):
                out[name] = list(value)
            else:
                out[name] = value
        return out


# -----------------------------------------------------------------------------
# ControlSet
# -----------------------------------------------------------------------------
class ControlSet(Mapping[str, Control]):
    """
    The recognised controls for one dataset, in display order.

    Enforces:
    - control names are unique
    - FilterState updates only touch recognised names (UnknownControlError otherwise)
    """

    def __init__(self, controls: List[Control]):
        self._controls: Dict[str, Control] = {}
        for control in controls:
            if control.name in self._controls:
                raise ValueError(f"Control '{control.name}' already registered")
            self._controls[control.name] = control

    def __getitem__(self, name: str) -> Control:
        try:
            return self._controls[name]
        except KeyError:
            raise UnknownControlError(name) from None

    def __iter__(self) -> Iterator[str]:
        return iter(self._controls)

    def __len__(self) -> int:
        return len(self._controls)

    def defaults(self) -> FilterState:
        return FilterState({name: c.default for name, c in self._controls.items()})

    def coerce(self, name: str, value: Any) -> Any:
        return self[name].coerce(value)

    def active(self, state: FilterState) -> List[Tuple[Control, Any]]:
        """Controls whose current value in 'state' is active, in display order."""
        out: List[Tuple[Control, Any]] = []
        for name, value in state.items():
            control = self[name]
            if control.is_active(value):
                out.append((control, value))
        return out

    @classmethod
    def for_dataset(cls, dataset: Dataset) -> ControlSet:
        """
        Derive controls from what the dataset carries:

        - 'score' and 'rank' range sliders (rank doubles as a top-N limit)
        - one range slider per metric
        - one toggle per flag
        - one select per category field

        A metric, flag or category whose name collides with an earlier control is
        registered under its prefixed column name (e.g. 'flag.score').
        """
        controls: List[Control] = []
        taken: set[str] = set()

        def unique(name: str, prefix: str) -> str:
            chosen = name if name not in taken else prefix + name
            taken.add(chosen)
            return chosen

        for field_name in BUILTIN_FIELDS:
            lower, upper = dataset.value_bounds(field_name)
            controls.append(
                RangeControl(
                    name=unique(field_name, ""),
                    label=field_name.capitalize(),
                    field=field_name,
                    lower=lower,
                    upper=upper,
                    step=1.0 if field_name == "rank" else None,
                )
            )

        for metric in dataset.metric_names:
            if metric in BUILTIN_FIELDS:
                logger.warning(
                    "Metric shadowed by built-in field; no filter control created",
                    extra={"dataset": dataset.name, "metric": metric},
                )
                continue
            lower, upper = dataset.value_bounds(metric)
            controls.append(
                RangeControl(
                    name=unique(metric, METRIC_PREFIX),
                    label=metric,
                    field=metric,
                    lower=lower,
                    upper=upper,
                )
            )

        for flag in dataset.flag_names:
            controls.append(ToggleControl(name=unique(flag, FLAG_PREFIX), label=flag, flag=flag))

        for field_name in dataset.category_fields:
            controls.append(
                SelectControl(
                    name=unique(field_name, CATEGORY_PREFIX),
                    label=field_name,
                    field=field_name,
                    options=tuple(dataset.category_values(field_name)),
                )
            )

        return cls(controls)
