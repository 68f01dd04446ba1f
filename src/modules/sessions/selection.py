"""Which students are picked for a combined invoice in the current month view."""

from collections.abc import Iterable


class SelectionManager:
    """
    Ordered set of selected student ids plus the select-all flag.

    Selection order is kept (click order, or group order after select_all)
    because the combined invoice lists sessions in that order. The flag only
    mirrors the last select-all/clear-all action; membership is the source of
    truth.
    """

    def __init__(self) -> None:
        # dict used as an insertion-ordered set
        self._selected: dict[int, None] = {}
        self.select_all_flag = False

    @property
    def selected_ids(self) -> list[int]:
        return list(self._selected)

    def __contains__(self, student_id: int) -> bool:
        return student_id in self._selected

    def __len__(self) -> int:
        return len(self._selected)

    def is_empty(self) -> bool:
        return not self._selected

    def toggle(self, student_id: int) -> bool:
        """Flip membership of one student. Returns True if now selected."""
        if student_id in self._selected:
            del self._selected[student_id]
            return False
        self._selected[student_id] = None
        return True

    def select_all(self, group_keys: Iterable[int]) -> None:
        self._selected = dict.fromkeys(group_keys)
        self.select_all_flag = True

    def clear_all(self) -> None:
        self._selected = {}
        self.select_all_flag = False

    def toggle_all(self, group_keys: Iterable[int]) -> None:
        """Single select-all button: clears when the flag is set, else selects everything."""
        if self.select_all_flag:
            self.clear_all()
        else:
            self.select_all(group_keys)

    def prune_to_current_groups(self, group_keys: Iterable[int]) -> list[int]:
        """
        Drop selected ids that no longer have a group.

        Must run after every regroup so that selection stays a subset of the
        group keys. Returns the removed ids.
        """
        keys = set(group_keys)
        removed = [sid for sid in self._selected if sid not in keys]
        for sid in removed:
            del self._selected[sid]
        return removed

    def reset(self) -> None:
        """Month changed: forget everything."""
        self._selected = {}
        self.select_all_flag = False
