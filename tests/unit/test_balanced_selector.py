"""
Unit tests for bias-balanced batch selection.
"""

from civicwire.models import BiasLabel
from civicwire.services.balanced_selector import select_balanced_items

L, R, C = BiasLabel.LEAN_LEFT, BiasLabel.LEAN_RIGHT, BiasLabel.CENTER


def _pool(make_item, left: int, right: int, center: int):
    items = []
    items += [make_item(L, title=f"L{i}") for i in range(left)]
    items += [make_item(R, title=f"R{i}") for i in range(right)]
    items += [make_item(C, title=f"C{i}") for i in range(center)]
    return items


def _titles(items):
    return [item.title for item in items]


class TestSelectBalancedItems:
    """Tests for select_balanced_items."""

    def test_even_split_when_all_sides_plentiful(self, make_item):
        """Plenty of every lean gives a 6/6/6 batch of 18."""
        items = _pool(make_item, 10, 10, 10)

        result = select_balanced_items(items, 18)

        assert len(result) == 18
        assert sum(1 for i in result if i.bias_label == L) == 6
        assert sum(1 for i in result if i.bias_label == R) == 6
        assert sum(1 for i in result if i.bias_label == C) == 6

    def test_scarce_side_bounds_both_sides(self, make_item):
        """Two left items cap the right side at two, center fills to 14, backfill follows."""
        items = _pool(make_item, 2, 10, 20)

        result = select_balanced_items(items, 18)

        assert _titles(result[:2]) == ["L0", "L1"]
        assert _titles(result[2:4]) == ["R0", "R1"]
        assert _titles(result[4:18]) == [f"C{i}" for i in range(14)]
        assert len(result) == 18

    def test_missing_side_collapses_to_center_then_backfills(self, make_item):
        """No left items: quota is zero, center first, then right overflow."""
        items = _pool(make_item, 0, 5, 3)

        result = select_balanced_items(items, 6)

        assert _titles(result) == ["C0", "C1", "C2", "R0", "R1", "R2"]

    def test_backfill_order_is_left_right_center(self, make_item):
        """Overflow order is left remainder, right remainder, center remainder."""
        items = _pool(make_item, 4, 2, 1)

        result = select_balanced_items(items, 6)

        # quota 2 each side, center quota 2 but only one center item
        assert _titles(result) == ["L0", "L1", "R0", "R1", "C0", "L2"]

    def test_small_pool_returns_everything(self, make_item):
        """Pool smaller than max_items returns every item once."""
        items = _pool(make_item, 1, 1, 1)

        result = select_balanced_items(items, 18)

        assert sorted(_titles(result)) == ["C0", "L0", "R0"]

    def test_empty_pool(self):
        """Empty pool returns empty batch."""
        assert select_balanced_items([], 18) == []

    def test_non_positive_max_items(self, make_item):
        """Zero or negative max_items returns empty batch."""
        items = _pool(make_item, 3, 3, 3)

        assert select_balanced_items(items, 0) == []
        assert select_balanced_items(items, -5) == []

    def test_max_items_below_three_goes_to_center(self, make_item):
        """With max_items=2 the side quota is zero."""
        items = _pool(make_item, 3, 3, 3)

        result = select_balanced_items(items, 2)

        assert _titles(result) == ["C0", "C1"]

    def test_no_duplicates_and_input_order_within_bucket(self, make_item):
        """Each item appears at most once and bucket order follows input order."""
        items = _pool(make_item, 7, 9, 4)

        result = select_balanced_items(items, 18)

        assert len(result) == len({id(i) for i in result})
        lefts = [i.title for i in result if i.bias_label == L]
        assert lefts == sorted(lefts, key=lambda t: int(t[1:]))

    def test_scarce_sides_with_deep_center(self, make_item):
        """5 left, 5 right, 20 center at 18 gives 5/5/8."""
        items = _pool(make_item, 5, 5, 20)

        result = select_balanced_items(items, 18)

        assert len(result) == 18
        assert sum(1 for i in result if i.bias_label == L) == 5
        assert sum(1 for i in result if i.bias_label == R) == 5
        assert sum(1 for i in result if i.bias_label == C) == 8

    def test_equal_small_pool_target_six(self, make_item):
        """3 of each lean at 6 gives 2/2/2."""
        items = _pool(make_item, 3, 3, 3)

        result = select_balanced_items(items, 6)

        assert _titles(result) == ["L0", "L1", "R0", "R1", "C0", "C1"]
