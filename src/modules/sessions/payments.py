"""Payment flag toggling for single sessions and whole student groups."""

import logging
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass, field

from src.core.exceptions import NetworkError, NotFoundError, PartialToggleError
from src.integrations.tutor_api.base import RecordSource
from src.modules.sessions.schemas import SessionRecord, StudentGroup

logger = logging.getLogger(__name__)

RefreshCallback = Callable[[], Awaitable[object]]


@dataclass
class GroupToggleResult:
    """Outcome of toggling every session of one student."""

    student_id: int
    succeeded: list[int] = field(default_factory=list)
    failed: dict[int, str] = field(default_factory=dict)
    refresh_error: str | None = None

    @property
    def ok(self) -> bool:
        return not self.failed

    @property
    def partial(self) -> bool:
        return bool(self.succeeded) and bool(self.failed)

    def raise_for_failures(self) -> None:
        if self.failed:
            raise PartialToggleError(self.student_id, self.succeeded, self.failed)


class PaymentToggleCoordinator:
    """
    Flips paid flags through the RecordSource and then asks for a full refresh.

    Groups are never patched locally: all_paid is an AND over sibling
    records, so the caller refetches and regroups instead.

    Group toggles are best-effort. Each session is toggled on its own; when
    one fails the ones already toggled stay toggled and the rest are still
    attempted. The result says which ids succeeded and which failed, and a
    retry of just the failed ids puts the group back in step because a
    toggle applied twice is a no-op.
    """

    def __init__(self, source: RecordSource, refresh: RefreshCallback | None = None):
        self.source = source
        self.refresh = refresh

    async def _refresh(self) -> None:
        if self.refresh is not None:
            await self.refresh()

    async def toggle_payment(self, session_id: int) -> SessionRecord:
        """
        Toggle one record, then refresh.

        NetworkError from the toggle propagates with nothing refreshed. Once
        the toggle went through, a failing refresh is only logged and the
        updated record is still returned.
        """
        updated = await self.source.toggle_payment(session_id)
        try:
            await self._refresh()
        except NetworkError as exc:
            logger.warning(
                "Refresh after toggling session %s failed: %s", session_id, exc.message
            )
        return updated

    async def toggle_group_payment(
        self,
        student_id: int,
        groups: Mapping[int, StudentGroup],
    ) -> GroupToggleResult:
        group = groups.get(student_id)
        if group is None:
            raise NotFoundError("Student group", student_id)
        return await self._toggle_many(student_id, group.session_ids)

    async def retry_failed(self, result: GroupToggleResult) -> GroupToggleResult:
        """Toggle again only the sessions that failed last time."""
        return await self._toggle_many(result.student_id, list(result.failed))

    async def _toggle_many(self, student_id: int, session_ids: list[int]) -> GroupToggleResult:
        result = GroupToggleResult(student_id=student_id)
        for session_id in session_ids:
            try:
                await self.source.toggle_payment(session_id)
            except NetworkError as exc:
                result.failed[session_id] = exc.message
            else:
                result.succeeded.append(session_id)

        if result.failed:
            logger.warning(
                "Group payment toggle for student %s: %d ok, %d failed (%s)",
                student_id,
                len(result.succeeded),
                len(result.failed),
                sorted(result.failed),
            )

        # Refresh even after failures so the view shows what actually persisted.
        # A failed refresh must not hide which toggles went through.
        try:
            await self._refresh()
        except NetworkError as exc:
            logger.warning(
                "Refresh after group toggle for student %s failed: %s", student_id, exc.message
            )
            result.refresh_error = exc.message
        return result
