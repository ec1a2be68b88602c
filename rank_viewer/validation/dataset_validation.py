from __future__ import annotations

import logging
import math
from numbers import Real
from typing import TYPE_CHECKING, Any, Iterable, Mapping, Sequence, Set

from rank_viewer.validation.errors import ValidationIssue, ValidationError

if TYPE_CHECKING:
    from rank_viewer.core.dataset import RankedItem

logger = logging.getLogger(__name__)

RECORD_MAPPINGS = {"metrics": "ITEM_METRICS", "categories": "ITEM_CATEGORIES", "flags": "ITEM_FLAGS"}


def _is_number(value: object) -> bool:
    return isinstance(value, Real) and not isinstance(value, bool) and math.isfinite(value)


def validate_items(items: Iterable["RankedItem"], *, dataset_name: str = "dataset") -> None:
    """
    Check the rank/identifier invariants of a dataset, in the order given.

    - every item has a non-empty string id, unique across the dataset
    - ranks are integers, unique, contiguous from 1 and strictly increasing in sequence order
    - scores and metric values are finite numbers

    Collects every problem and raises a single ValidationError.
    A rank order that disagrees with the score order is only logged.
    """
    issues: list[ValidationIssue] = []
    seen_ids: Set[str] = set()
    seen_ranks: Set[int] = set()
    previous_score = None
    score_inversions = 0

    for position, item in enumerate(items):
        label = f"item #{position + 1}"

        if not isinstance(item.item_id, str) or not item.item_id:
            issues.append(ValidationIssue("ITEM_ID", f"{label} has a missing or non-string id."))
        elif item.item_id in seen_ids:
            issues.append(ValidationIssue("ITEM_DUPLICATE_ID", f"id '{item.item_id}' appears more than once."))
        else:
            seen_ids.add(item.item_id)
            label = f"item '{item.item_id}'"

        rank = item.rank
        if not isinstance(rank, int) or isinstance(rank, bool):
            issues.append(ValidationIssue("ITEM_RANK", f"{label} has a non-integer rank {rank!r}."))
        elif rank in seen_ranks:
            issues.append(ValidationIssue("ITEM_DUPLICATE_RANK", f"rank {rank} appears more than once."))
        else:
            seen_ranks.add(rank)
            if rank != position + 1:
                issues.append(
                    ValidationIssue(
                        "RANK_SEQUENCE",
                        f"{label} has rank {rank} at position {position + 1}; "
                        "ranks must be contiguous from 1 and strictly increasing.",
                    )
                )

        if not _is_number(item.score):
            issues.append(ValidationIssue("ITEM_SCORE", f"{label} has a non-numeric score {item.score!r}."))
        else:
            if previous_score is not None and item.score > previous_score:
                score_inversions += 1
            previous_score = item.score

        for metric_name, value in item.metrics.items():
            if not _is_number(value):
                issues.append(
                    ValidationIssue("ITEM_METRIC", f"{label} metric '{metric_name}' is not a finite number: {value!r}.")
                )

    if score_inversions:
        logger.warning(
            "Rank order disagrees with score order",
            extra={"dataset": dataset_name, "n_inversions": score_inversions},
        )

    if issues:
        raise ValidationError(issues)


def validate_records(records: Sequence[Any], *, dataset_name: str = "dataset") -> None:
    """
    Check the shape of external records before they become RankedItems:
    each record is a mapping, and 'metrics', 'categories' and 'flags' are
    mappings when present.

    Raises:
        ValidationError: listing every malformed record
    """
    issues: list[ValidationIssue] = []
    for position, record in enumerate(records):
        label = f"record #{position + 1}"
        if not isinstance(record, Mapping):
            issues.append(
                ValidationIssue("ITEM_RECORD", f"{label} is a {type(record).__name__}, not an object.")
            )
            continue

        for key, code in RECORD_MAPPINGS.items():
            value = record.get(key)
            if value is not None and not isinstance(value, Mapping):
                issues.append(
                    ValidationIssue(code, f"{label} has '{key}' of type {type(value).__name__}; expected an object.")
                )

    if issues:
        logger.warning(
            "Malformed dataset records",
            extra={"dataset": dataset_name, "issue_codes": sorted({i.code for i in issues})},
        )
        raise ValidationError(issues)
