from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterator, List, Optional, Tuple

import numpy as np
import pandas as pd

from .controls import ControlSet, FilterState
from .dataset import Dataset, RankedItem

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DerivedSeries:
    """
    The filtered view of a Dataset that is currently plotted.

    Always rebuilt wholesale by project(); equality is by value, so two
    projections of the same inputs compare equal even if they are different objects.
    """

    dataset_name: str
    items: Tuple[RankedItem, ...] = ()

    def __len__(self) -> int:
        return len(self.items)

    def __iter__(self) -> Iterator[RankedItem]:
        return iter(self.items)

    def __contains__(self, item_id: object) -> bool:
        return any(it.item_id == item_id for it in self.items)

    @property
    def is_empty(self) -> bool:
        return not self.items

    # -------------------------------------------------------------------------
    # Column accessors (array-aligned, one entry per point)
    # -------------------------------------------------------------------------
    @property
    def ids(self) -> List[str]:
        return [it.item_id for it in self.items]

    @property
    def ranks(self) -> List[int]:
        return [it.rank for it in self.items]

    @property
    def scores(self) -> List[float]:
        return [it.score for it in self.items]

    def values(self, field_name: str) -> List[Optional[float]]:
        """'score', 'rank' or a metric name; None where an item lacks the metric."""
        return [it.value_of(field_name) for it in self.items]

    def get(self, item_id: str) -> Optional[RankedItem]:
        return next((it for it in self.items if it.item_id == item_id), None)

    def to_frame(self) -> pd.DataFrame:
        """Flat table used by the table tab and CSV download."""
        metric_names = sorted({name for it in self.items for name in it.metrics})
        rows = []
        for it in self.items:
            row = {"rank": it.rank, "id": it.item_id, "score": it.score}
            for name in metric_names:
                row[name] = it.metrics.get(name)
            rows.append(row)
        return pd.DataFrame(rows, columns=["rank", "id", "score", *metric_names])


def project(dataset: Dataset, filter_state: FilterState, controls: ControlSet) -> DerivedSeries:
    """
    Apply every active control in 'filter_state' to 'dataset' as a conjunction.

    - rank order of the dataset is preserved (no re-sorting)
    - inactive controls are ignored
    - an empty result is a valid, empty DerivedSeries

    Results are cached on the dataset under the normalised set of active
    (control, value) pairs, so equal inputs hit the same entry.

    Raises:
        UnknownControlError: if 'filter_state' names a control not in 'controls'
    """
    active = controls.active(filter_state)
    key = tuple(sorted((control.name, value) for control, value in active))

    cached = dataset.cached_projection(key)
    if cached is not None:
        return cached

    if not active:
        derived = DerivedSeries(dataset_name=dataset.name, items=dataset.items)
    else:
        frame = dataset.to_frame()
        mask = np.ones(len(frame), dtype=bool)
        for control, value in active:
            mask &= control.mask(frame, value)

        derived = DerivedSeries(
            dataset_name=dataset.name,
            items=tuple(it for it, keep in zip(dataset.items, mask) if keep),
        )

    logger.debug(
        "Projected dataset",
        extra={
            "dataset": dataset.name,
            "n_items": len(dataset),
            "n_derived": len(derived),
            "active_controls": [c.name for c, _ in active],
        },
    )

    dataset.remember_projection(key, derived)
    return derived
