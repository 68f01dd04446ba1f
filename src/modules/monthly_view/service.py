"""Service behind the monthly view: one month's records, groups, selection and invoices."""

import logging
from collections.abc import Mapping
from types import MappingProxyType

from src.core.exceptions import AppException, NetworkError, NotFoundError
from src.integrations.tutor_api.base import InvoiceService, RecordSource
from src.modules.invoices.builder import InvoiceRequestBuilder, invoice_filename
from src.modules.invoices.schemas import InvoiceArtifact, InvoiceRequest
from src.modules.monthly_view.schemas import MonthlyViewState, ViewOperation
from src.modules.monthly_view.tokens import RequestToken, RequestTokens
from src.modules.sessions.aggregator import SessionAggregator
from src.modules.sessions.payments import GroupToggleResult, PaymentToggleCoordinator
from src.modules.sessions.schemas import (
    MonthSummary,
    SelectionTotals,
    SessionRecord,
    StudentGroup,
)
from src.modules.sessions.selection import SelectionManager
from src.shared.schemas.base import ErrorDetail
from src.shared.utils.money import round_money
from src.shared.utils.months import current_month, month_label, shift_month, validate_month

logger = logging.getLogger(__name__)

# Only the newest call of these kinds may apply its result. Toggles and
# deletes are independent of each other and only need the month to match.
_LATEST_ONLY = {ViewOperation.LOAD, ViewOperation.GENERATE_INVOICE}


class MonthlyViewService:
    """
    Owns the records of the selected month and everything derived from them.

    Groups are recomputed from the records every time the records change.
    Every collaborator call carries a RequestToken; when it completes after
    the month changed (or after a newer call of the same kind was issued,
    for loads and invoice generation) its result is dropped instead of
    applied. Failures are recorded in the per-operation error flags while
    still current and are always re-raised to the caller.
    """

    def __init__(
        self,
        source: RecordSource,
        invoices: InvoiceService,
        month: str | None = None,
    ):
        self.source = source
        self.invoices = invoices
        self.month = validate_month(month or current_month())
        self.selection = SelectionManager()
        self.payments = PaymentToggleCoordinator(source, refresh=self.load)
        self._tokens = RequestTokens()
        self._records: list[SessionRecord] = []
        self._groups: dict[int, StudentGroup] = {}
        self._errors: dict[ViewOperation, ErrorDetail] = {}

    # --- Derived state ---

    @property
    def records(self) -> tuple[SessionRecord, ...]:
        return tuple(self._records)

    @property
    def groups(self) -> Mapping[int, StudentGroup]:
        return MappingProxyType(self._groups)

    @property
    def group_list(self) -> list[StudentGroup]:
        return list(self._groups.values())

    def summary(self) -> MonthSummary:
        return SessionAggregator.summarize(self._records)

    def selection_totals(self) -> SelectionTotals:
        return SessionAggregator.selection_totals(self.selection.selected_ids, self._groups)

    def is_busy(self, operation: ViewOperation) -> bool:
        return self._tokens.busy(operation)

    def error(self, operation: ViewOperation) -> ErrorDetail | None:
        return self._errors.get(operation)

    def snapshot(self) -> MonthlyViewState:
        """State for display. Money totals are rounded to the currency's minor unit here only."""
        summary = self.summary()
        totals = self.selection_totals()
        return MonthlyViewState(
            month=self.month,
            month_label=month_label(self.month),
            groups=self.group_list,
            selected_student_ids=self.selection.selected_ids,
            select_all=self.selection.select_all_flag,
            selection_totals=totals.model_copy(
                update={"total_amount": round_money(totals.total_amount)}
            ),
            summary=summary.model_copy(
                update={
                    "total_paid": round_money(summary.total_paid),
                    "total_unpaid": round_money(summary.total_unpaid),
                }
            ),
            busy={op: self._tokens.busy(op) for op in ViewOperation},
            errors=dict(self._errors),
        )

    def _set_records(self, records: list[SessionRecord]) -> None:
        self._records = list(records)
        self._groups = SessionAggregator.group(self._records)
        removed = self.selection.prune_to_current_groups(self._groups)
        if removed:
            logger.debug(
                "Dropped students %s from selection; no sessions left in %s", removed, self.month
            )

    # --- Token bookkeeping ---

    def _is_current(self, token: RequestToken) -> bool:
        return self._tokens.is_current(
            token, self.month, latest_only=token.kind in _LATEST_ONLY
        )

    def _record_error(self, token: RequestToken, exc: AppException) -> None:
        if self._is_current(token):
            self._errors[ViewOperation(token.kind)] = ErrorDetail(
                field=exc.details.get("field"), message=exc.message
            )
        else:
            logger.info(
                "Ignoring failure of stale %s #%s for %s: %s",
                token.kind, token.seq, token.month, exc.message,
            )

    # --- Month navigation ---

    async def load(self) -> bool:
        """
        Fetch and regroup the current month.

        Returns False when the result was discarded because the month changed
        or a newer load was started meanwhile.
        """
        token = self._tokens.issue(ViewOperation.LOAD, self.month)
        try:
            records = await self.source.get_by_month(token.month)
        except NetworkError as exc:
            self._record_error(token, exc)
            raise
        finally:
            self._tokens.finish(token)

        if not self._is_current(token):
            logger.info("Discarding stale records for %s (load #%s)", token.month, token.seq)
            return False
        self._errors.pop(ViewOperation.LOAD, None)
        self._set_records(records)
        return True

    async def set_month(self, month: str) -> bool:
        """Switch to another month: selection is reset, then the month is loaded."""
        month = validate_month(month)
        if month != self.month:
            self.month = month
            self.selection.reset()
            self._records = []
            self._groups = {}
            self._errors.clear()
        return await self.load()

    async def change_month(self, delta: int) -> bool:
        return await self.set_month(shift_month(self.month, delta))

    # --- Selection ---

    def toggle_student(self, student_id: int) -> bool:
        if student_id not in self._groups:
            raise NotFoundError("Student group", student_id)
        return self.selection.toggle(student_id)

    def select_all(self) -> None:
        self.selection.select_all(self._groups)

    def clear_selection(self) -> None:
        self.selection.clear_all()

    def toggle_select_all(self) -> None:
        self.selection.toggle_all(self._groups)

    # --- Payments and deletion ---

    async def toggle_payment(self, session_id: int) -> SessionRecord:
        token = self._tokens.issue(ViewOperation.TOGGLE_PAYMENT, self.month)
        try:
            updated = await self.payments.toggle_payment(session_id)
        except NetworkError as exc:
            self._record_error(token, exc)
            raise
        finally:
            self._tokens.finish(token)
        if self._is_current(token):
            self._errors.pop(ViewOperation.TOGGLE_PAYMENT, None)
        return updated

    async def toggle_group_payment(self, student_id: int) -> GroupToggleResult:
        """
        Toggle every session of one student, best-effort.

        The returned result lists failed sessions; the error flag is set when
        any failed. Call result.raise_for_failures() to turn it into an
        exception, or retry_group_payment() to toggle just the failed ones.
        """
        token = self._tokens.issue(ViewOperation.TOGGLE_GROUP_PAYMENT, self.month)
        try:
            result = await self.payments.toggle_group_payment(student_id, self._groups)
        finally:
            self._tokens.finish(token)
        self._apply_group_result(token, result)
        return result

    async def retry_group_payment(self, result: GroupToggleResult) -> GroupToggleResult:
        token = self._tokens.issue(ViewOperation.TOGGLE_GROUP_PAYMENT, self.month)
        try:
            retried = await self.payments.retry_failed(result)
        finally:
            self._tokens.finish(token)
        self._apply_group_result(token, retried)
        return retried

    def _apply_group_result(self, token: RequestToken, result: GroupToggleResult) -> None:
        if not self._is_current(token):
            return
        if result.failed:
            self._errors[ViewOperation.TOGGLE_GROUP_PAYMENT] = ErrorDetail(
                field=str(result.student_id),
                message=(
                    f"Could not update {len(result.failed)} of "
                    f"{len(result.failed) + len(result.succeeded)} sessions"
                ),
            )
        else:
            self._errors.pop(ViewOperation.TOGGLE_GROUP_PAYMENT, None)

    async def delete_record(self, session_id: int) -> bool:
        """
        Delete one record and reload; students left with no sessions drop out of the selection.

        Returns whether the reloaded records were applied. When the reload
        fails after the delete went through, the failure stays under the LOAD
        error flag and the deleted record is dropped from the local records.
        """
        token = self._tokens.issue(ViewOperation.DELETE, self.month)
        try:
            await self.source.delete(session_id)
        except NetworkError as exc:
            self._record_error(token, exc)
            raise
        finally:
            self._tokens.finish(token)
        if not self._is_current(token):
            return False
        self._errors.pop(ViewOperation.DELETE, None)
        try:
            return await self.load()
        except NetworkError as exc:
            logger.warning("Reload after deleting session %s failed: %s", session_id, exc.message)
            self._set_records([r for r in self._records if r.id != session_id])
            return False

    # --- Invoices ---

    async def generate_single_invoice(self, student_id: int) -> InvoiceArtifact | None:
        request = InvoiceRequestBuilder(self.month).build_single(student_id, self._groups)
        return await self._generate(request, participant_count=1)

    async def generate_combined_invoice(self) -> InvoiceArtifact | None:
        """
        One invoice for every selected student.

        ValidationError (nothing selected, or no sessions) is raised before
        any network call. Returns None when the result went stale.
        """
        request = InvoiceRequestBuilder(self.month).build_combined(
            self.selection.selected_ids, self._groups
        )
        return await self._generate(request, participant_count=len(request.selected_student_ids))

    async def _generate(self, request: InvoiceRequest, participant_count: int) -> InvoiceArtifact | None:
        token = self._tokens.issue(ViewOperation.GENERATE_INVOICE, self.month)
        try:
            content = await self.invoices.generate(request)
        except NetworkError as exc:
            self._record_error(token, exc)
            raise
        finally:
            self._tokens.finish(token)

        if not self._is_current(token):
            logger.info(
                "Discarding stale invoice for %s (request #%s)", token.month, token.seq
            )
            return None
        self._errors.pop(ViewOperation.GENERATE_INVOICE, None)
        return InvoiceArtifact(
            filename=invoice_filename(request.month, participant_count),
            content=content,
            request=request,
        )
