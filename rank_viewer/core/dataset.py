from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Dict, Iterable, Iterator, List, Mapping, Optional, Sequence, Tuple

import numpy as np
import pandas as pd

# Prefixes used when items are flattened into a DataFrame (and read back from CSV)
METRIC_PREFIX = "metric."
CATEGORY_PREFIX = "category."
FLAG_PREFIX = "flag."


def _readonly(mapping: Optional[Mapping[str, Any]]) -> Mapping[str, Any]:
    return MappingProxyType(dict(mapping or {}))


@dataclass(frozen=True)
class RankedItem:
    """
    A single scored, ranked entity.

    Fields:

    - item_id: identifier, unique within a dataset
    - rank: 1-based position, unique within a dataset
    - score: numeric score the rank order is consistent with
    - metrics: named numeric values (metric name -> float), used by range filters and scatter axes
    - image_ref: optional URI or identifier of the preview image
    - categories: named categorical values (field -> category), used by select filters
    - flags: named booleans, used by toggle filters
    """

    item_id: str
    rank: int
    score: float
    metrics: Mapping[str, float] = field(default_factory=dict)
    image_ref: Optional[str] = None
    categories: Mapping[str, str] = field(default_factory=dict)
    flags: Mapping[str, bool] = field(default_factory=dict)

    def __post_init__(self) -> None:
        # frozen: wrap the mappings so nobody can mutate a loaded item
        object.__setattr__(self, "metrics", _readonly(self.metrics))
        object.__setattr__(self, "categories", _readonly(self.categories))
        object.__setattr__(self, "flags", _readonly(self.flags))

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> RankedItem:
        """
        Build an item from an external record.

        Accepts the wire names (id, imageRef) as well as the python names (item_id, image_ref).
        Only ids, categories and flags are coerced; invariants are checked by validate_items().
        """
        item_id = data.get("id", data.get("item_id"))
        image_ref = data.get("imageRef", data.get("image_ref"))
        return cls(
            item_id=None if item_id is None else str(item_id),
            rank=data.get("rank"),
            score=data.get("score"),
            metrics=dict(data.get("metrics") or {}),
            image_ref=None if image_ref in (None, "") else str(image_ref),
            categories={k: str(v) for k, v in (data.get("categories") or {}).items()},
            flags={k: bool(v) for k, v in (data.get("flags") or {}).items()},
        )

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = {
            "id": self.item_id,
            "rank": self.rank,
            "score": self.score,
            "metrics": dict(self.metrics),
        }
        if self.image_ref is not None:
            out["imageRef"] = self.image_ref
        if self.categories:
            out["categories"] = dict(self.categories)
        if self.flags:
            out["flags"] = dict(self.flags)
        return out

    def value_of(self, field_name: str) -> Optional[float]:
        """
        Numeric value used by range predicates: 'score', 'rank' or a metric name.
        Returns None when the item has no such metric.
        """
        if field_name == "score":
            return self.score
        if field_name == "rank":
            return float(self.rank)
        return self.metrics.get(field_name)


class Dataset:
    """
    Immutable, rank-ordered collection of RankedItem.

    Includes:
    - id lookup
    - metric / category / flag discovery used to build filter controls
    - a cached pandas view (one row per item, in rank order) used by projection
    - a bounded cache of projections keyed by the normalised filter key
    """

    MAX_PROJECTION_CACHE = 128

    def __init__(self, name: str, items: Iterable[RankedItem]) -> None:
        self.name = name
        self._items: Tuple[RankedItem, ...] = tuple(items)
        self._by_id: Dict[str, RankedItem] = {it.item_id: it for it in self._items}

        self._frame: Optional[pd.DataFrame] = None
        self._projection_cache: Dict[Any, Any] = {}

    @classmethod
    def from_records(cls, records: Iterable[Dict[str, Any]], name: str = "dataset") -> Dataset:
        """
        Build a Dataset from external records, ordered by rank ascending.
        Records with a non-integer rank keep their input position (validation reports them).

        Raises:
            ValidationError: a record is not an object, or its metrics, categories
                             or flags are not objects
        """
        # imported here: rank_viewer.validation imports rank_viewer.core
        from rank_viewer.validation.dataset_validation import validate_records

        records = list(records)
        validate_records(records, dataset_name=name)
        items = [RankedItem.from_dict(r) for r in records]
        items.sort(key=lambda it: it.rank if isinstance(it.rank, int) else float("inf"))
        return cls(name=name, items=items)

    def to_records(self) -> List[Dict[str, Any]]:
        return [it.to_dict() for it in self._items]

    # -------------------------------------------------------------------------
    # Sequence protocol & equality
    # -------------------------------------------------------------------------
    @property
    def items(self) -> Tuple[RankedItem, ...]:
        return self._items

    def __iter__(self) -> Iterator[RankedItem]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __getitem__(self, index: int) -> RankedItem:
        return self._items[index]

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Dataset):
            return NotImplemented
        return self.name == other.name and self._items == other._items

    def __hash__(self) -> int:
        return hash((self.name, tuple(it.item_id for it in self._items)))

    def __repr__(self) -> str:
        return f"Dataset(name={self.name!r}, n_items={len(self._items)})"

    # -------------------------------------------------------------------------
    # Lookups
    # -------------------------------------------------------------------------
    def get(self, item_id: str) -> Optional[RankedItem]:
        return self._by_id.get(item_id)

    def __contains__(self, item_id: object) -> bool:
        return item_id in self._by_id

    @property
    def ids(self) -> List[str]:
        return [it.item_id for it in self._items]

    @property
    def metric_names(self) -> List[str]:
        """Sorted union of metric names across all items."""
        return sorted({name for it in self._items for name in it.metrics})

    @property
    def category_fields(self) -> List[str]:
        return sorted({name for it in self._items for name in it.categories})

    @property
    def flag_names(self) -> List[str]:
        return sorted({name for it in self._items for name in it.flags})

    def category_values(self, field_name: str) -> List[str]:
        return sorted({it.categories[field_name] for it in self._items if field_name in it.categories})

    def value_bounds(self, field_name: str) -> Tuple[Optional[float], Optional[float]]:
        """(min, max) of a numeric field across items that define it, or (None, None)."""
        values = [v for v in (it.value_of(field_name) for it in self._items) if v is not None]
        if not values:
            return None, None
        return float(min(values)), float(max(values))

    # -------------------------------------------------------------------------
    # Tabular view
    # -------------------------------------------------------------------------
    def to_frame(self) -> pd.DataFrame:
        """
        One row per item in rank order.

        Columns: id, rank, score, imageRef, then metric.<name>, category.<field>, flag.<name>.
        Missing metrics are NaN, missing categories None, missing flags False.
        """
        if self._frame is not None:
            return self._frame

        metric_names = self.metric_names
        category_fields = self.category_fields
        flag_names = self.flag_names

        data: Dict[str, Sequence[Any]] = {
            "id": [it.item_id for it in self._items],
            "rank": np.array([it.rank for it in self._items], dtype=int),
            "score": np.array([it.score for it in self._items], dtype=float),
            "imageRef": [it.image_ref for it in self._items],
        }
        for name in metric_names:
            data[METRIC_PREFIX + name] = np.array(
                [it.metrics.get(name, np.nan) for it in self._items], dtype=float
            )
        for name in category_fields:
            data[CATEGORY_PREFIX + name] = [it.categories.get(name) for it in self._items]
        for name in flag_names:
            data[FLAG_PREFIX + name] = np.array(
                [bool(it.flags.get(name, False)) for it in self._items], dtype=bool
            )

        self._frame = pd.DataFrame(data)
        return self._frame

    # -------------------------------------------------------------------------
    # Projection cache (used by rank_viewer.core.projection)
    # -------------------------------------------------------------------------
    def cached_projection(self, key: Any) -> Any:
        return self._projection_cache.get(key)

    def remember_projection(self, key: Any, value: Any) -> None:
        self._projection_cache[key] = value

        # Prevent unbounded growth
        if len(self._projection_cache) > self.MAX_PROJECTION_CACHE:
            self._projection_cache.clear()

    def clear_caches(self) -> None:
        """Reset the cached frame and projections."""
        self._frame = None
        self._projection_cache.clear()
