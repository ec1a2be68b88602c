from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, Iterable, List, Optional, Union

from rank_viewer.validation.dataset_validation import validate_items

from .controls import ControlSet, FilterState
from .dataset import Dataset
from .projection import DerivedSeries, project

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SelectionState:
    """At most one selected item id; None means Idle."""
    item_id: Optional[str] = None

    @property
    def is_idle(self) -> bool:
        return self.item_id is None

    @classmethod
    def idle(cls) -> SelectionState:
        return cls(None)

    @classmethod
    def selected(cls, item_id: str) -> SelectionState:
        return cls(item_id)

    def __repr__(self) -> str:
        return "Idle" if self.item_id is None else f"Selected({self.item_id!r})"


@dataclass(frozen=True)
class Snapshot:
    """
    Immutable view of the store for rendering.

    'dataset' and 'derived' are None until the first successful load,
    which is distinct from a loaded dataset whose derived series is empty.
    """
    dataset: Optional[Dataset]
    filter_state: FilterState
    selection: SelectionState
    derived: Optional[DerivedSeries]
    generation: int

    @property
    def is_loaded(self) -> bool:
        return self.dataset is not None


class ChangeKind(str, Enum):
    LOADED = "loaded"
    FILTER = "filter"
    SELECTION = "selection"


@dataclass(frozen=True)
class StoreChange:
    kind: ChangeKind
    snapshot: Snapshot


Listener = Callable[[StoreChange], None]


class RankedItemStore:
    """
    Owns the Dataset, the FilterState and the SelectionState for one session.

    Every mutation is followed by a synchronous notification to subscribers,
    in subscription order. The derived series is recomputed eagerly so that a
    snapshot is always consistent with the filters that produced it, and the
    selection is dropped whenever its item leaves the derived series.
    """

    def __init__(self) -> None:
        self._dataset: Optional[Dataset] = None
        self._controls: ControlSet = ControlSet([])
        self._filter_state: FilterState = FilterState()
        self._selection: SelectionState = SelectionState.idle()
        self._derived: Optional[DerivedSeries] = None
        self._generation = 0
        self._listeners: List[Listener] = []

    # ------------------------------------------------------------------
    # Subscriptions
    # ------------------------------------------------------------------
    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register a listener; returns a callable that unsubscribes it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self, kind: ChangeKind) -> None:
        change = StoreChange(kind=kind, snapshot=self.get_snapshot())
        for listener in list(self._listeners):
            try:
                listener(change)
            except Exception:
                logger.exception("Store listener failed", extra={"change": kind.value})

    # ------------------------------------------------------------------
    # Read access
    # ------------------------------------------------------------------
    @property
    def controls(self) -> ControlSet:
        return self._controls

    @property
    def selection(self) -> SelectionState:
        return self._selection

    @property
    def generation(self) -> int:
        return self._generation

    def get_snapshot(self) -> Snapshot:
        return Snapshot(
            dataset=self._dataset,
            filter_state=self._filter_state,
            selection=self._selection,
            derived=self._derived,
            generation=self._generation,
        )

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------
    def load(self, dataset: Union[Dataset, Iterable[Dict[str, Any]]], *, name: str = "dataset") -> Snapshot:
        """
        Replace the current dataset.

        The selection is released (and announced) while the previous dataset is
        still current, so observers close anything tied to it before the new
        dataset becomes visible. Filters reset to the new dataset's defaults.

        Raises:
            ValidationError: if rank/identifier invariants are violated; nothing changes
        """
        if not isinstance(dataset, Dataset):
            dataset = Dataset.from_records(dataset, name=name)

        validate_items(dataset.items, dataset_name=dataset.name)

        self._release_selection()

        self._dataset = dataset
        self._controls = ControlSet.for_dataset(dataset)
        self._filter_state = self._controls.defaults()
        self._derived = project(dataset, self._filter_state, self._controls)
        self._generation += 1

        logger.info(
            "Dataset loaded",
            extra={
                "dataset": dataset.name,
                "n_items": len(dataset),
                "n_controls": len(self._controls),
                "generation": self._generation,
            },
        )
        self._notify(ChangeKind.LOADED)
        return self.get_snapshot()

    def set_filter(self, name: str, value: Any) -> Snapshot:
        """
        Update one control and recompute the derived series.

        Raises:
            UnknownControlError: 'name' is not a control of the current dataset
            InvalidControlValueError: the control cannot accept 'value'
        """
        coerced = self._controls.coerce(name, value)
        return self._apply_filter_state(self._filter_state.replace(name, coerced), changed=[name])

    def reset_filters(self) -> Snapshot:
        """Restore every control to its (inactive) default."""
        return self._apply_filter_state(self._controls.defaults(), changed=list(self._controls))

    def _apply_filter_state(self, new_state: FilterState, *, changed: List[str]) -> Snapshot:
        if new_state == self._filter_state:
            return self.get_snapshot()

        self._filter_state = new_state
        if self._dataset is not None:
            self._derived = project(self._dataset, self._filter_state, self._controls)

        logger.info(
            "Filter changed",
            extra={
                "controls": changed,
                "n_derived": len(self._derived) if self._derived is not None else None,
            },
        )

        if self._selection.item_id is not None and (
            self._derived is None or self._selection.item_id not in self._derived
        ):
            logger.info("Selected item filtered out", extra={"item_id": self._selection.item_id})
            self._release_selection()

        self._notify(ChangeKind.FILTER)
        return self.get_snapshot()

    def select(self, item_id: str) -> bool:
        """
        Select an item of the current derived series.
        Returns False (and changes nothing) when the id is not plotted.
        """
        if self._derived is None or item_id not in self._derived:
            logger.info("Ignoring selection of item not in derived series", extra={"item_id": item_id})
            return False
        if self._selection.item_id == item_id:
            return True

        self._selection = SelectionState.selected(item_id)
        self._notify(ChangeKind.SELECTION)
        return True

    def clear_selection(self) -> None:
        self._release_selection()

    def _release_selection(self) -> None:
        if self._selection.is_idle:
            return
        self._selection = SelectionState.idle()
        self._notify(ChangeKind.SELECTION)
