# civicwire/services/balanced_selector.py
"""
Bias-balanced batch selection.

Builds an ingestion batch that approximates an even Lean Left / Lean Right /
Center spread. Both sides always receive the same quota, bounded by the
scarcer side, so a missing side collapses the batch to center coverage.

Selection is deterministic and preserves input order within each bucket.
"""

from typing import List, Protocol, Sequence, TypeVar

from civicwire.models import BiasLabel


class _Labeled(Protocol):
    bias_label: BiasLabel


T = TypeVar("T", bound=_Labeled)


def select_balanced_items(items: Sequence[T], max_items: int) -> List[T]:
    """
    Select up to max_items with a 1:1:1 lean spread.

    Args:
        items: Candidate pool, in priority order (usually newest first)
        max_items: Target batch size

    Returns:
        Selected items: left quota, right quota, center remainder, then
        backfill from left, right and center overflow in that order
    """
    if max_items <= 0:
        return []

    left = [item for item in items if item.bias_label == BiasLabel.LEAN_LEFT]
    right = [item for item in items if item.bias_label == BiasLabel.LEAN_RIGHT]
    center = [item for item in items if item.bias_label == BiasLabel.CENTER]

    side_quota = min(max_items // 3, min(len(left), len(right)))
    center_quota = max_items - side_quota * 2

    selected = left[:side_quota] + right[:side_quota] + center[:center_quota]

    if len(selected) < max_items:
        overflow = left[side_quota:] + right[side_quota:] + center[center_quota:]
        selected.extend(overflow[: max_items - len(selected)])

    return selected
