"""Grouping of a month's session records into per-student billing summaries."""

from collections.abc import Iterable, Mapping, Sequence
from decimal import Decimal

from src.modules.sessions.schemas import (
    MonthSummary,
    SelectionTotals,
    SessionRecord,
    StudentGroup,
)
from src.shared.utils.money import sum_money


class SessionAggregator:
    """
    Derives StudentGroups from raw records.

    Groups are a pure function of the records passed in. Nothing is cached
    here; callers regroup after every change to the record set.
    """

    @staticmethod
    def group(records: Sequence[SessionRecord]) -> dict[int, StudentGroup]:
        """
        Group records by student_id in a single pass.

        The returned dict keeps first-seen order, which is the display order
        of the groups. Each group's sessions are sorted by session_date.
        Field values are not validated; zero or negative numbers are summed
        as given.
        """
        groups: dict[int, StudentGroup] = {}
        for record in records:
            group = groups.get(record.student_id)
            if group is None:
                group = StudentGroup(
                    student_id=record.student_id,
                    student_name=record.student_name,
                    price_per_hour=record.price_per_hour,
                )
                groups[record.student_id] = group
            group.sessions.append(record)
            group.total_sessions += record.session_count
            group.total_hours += record.hours
            group.total_amount += record.total_amount
            if not record.paid:
                group.all_paid = False

        for group in groups.values():
            # list.sort is stable, same-day records keep upstream order
            group.sessions.sort(key=lambda s: s.session_date)
        return groups

    @staticmethod
    def summarize(records: Iterable[SessionRecord]) -> MonthSummary:
        """Month-level totals straight from the records (not from groups)."""
        records = list(records)
        return MonthSummary(
            total_sessions=sum(r.session_count for r in records),
            total_paid=sum_money(r.total_amount for r in records if r.paid),
            total_unpaid=sum_money(r.total_amount for r in records if not r.paid),
            student_count=len({r.student_id for r in records}),
        )

    @staticmethod
    def selection_totals(
        selected_ids: Iterable[int],
        groups: Mapping[int, StudentGroup],
    ) -> SelectionTotals:
        """Sum the totals of the selected groups. Ids without a group are skipped."""
        totals = SelectionTotals()
        amount = Decimal("0")
        for student_id in selected_ids:
            group = groups.get(student_id)
            if group is None:
                continue
            totals.student_count += 1
            totals.total_sessions += group.total_sessions
            totals.total_hours += group.total_hours
            amount += group.total_amount
        totals.total_amount = amount
        return totals
