from __future__ import annotations

from datetime import datetime
from typing import ContextManager, Optional, Protocol, Sequence

from .model import AbsenceRequest, ApprovalHistoryEntry, EscalationLogEntry


class WorkflowTransaction(Protocol):
    """Operations available inside one atomic unit of work.

    Everything done through a transaction commits together or not at all.
    History and escalation logs are append-only: there is no update or
    delete for single entries.
    """

    def get_request(self, request_id: int, *, for_update: bool = False) -> Optional[AbsenceRequest]:
        """Load a request; `for_update` takes a row lock until commit."""

        raise NotImplementedError

    def insert_request(self, request: AbsenceRequest) -> int:
        raise NotImplementedError

    def save_request(self, request: AbsenceRequest) -> None:
        raise NotImplementedError

    def delete_request(self, request_id: int) -> None:
        raise NotImplementedError

    def append_history(self, entry: ApprovalHistoryEntry) -> int:
        raise NotImplementedError

    def append_escalation(self, entry: EscalationLogEntry) -> int:
        raise NotImplementedError

    def savepoint(self, name: str) -> ContextManager[None]:
        """Nested scope: on error only its own writes are undone."""

        raise NotImplementedError


class WorkflowStore(Protocol):
    def transaction(self) -> ContextManager[WorkflowTransaction]:
        """Begin -> yield -> commit; rollback on any exception."""

        raise NotImplementedError

    def get_request(self, request_id: int) -> Optional[AbsenceRequest]:
        raise NotImplementedError

    def find_idle_pending(
        self, *, idle_since: datetime, after_id: int = 0, limit: int = 500
    ) -> Sequence[AbsenceRequest]:
        """Pending requests that can still escalate and whose last action is older than `idle_since`.

        Requests at PAYROLL are left out: escalation never completes a request.
        Rows come back in `request_id` order, starting after `after_id`, so a
        caller can page through every match.
        """

        raise NotImplementedError

    def list_history(self, request_id: int) -> Sequence[ApprovalHistoryEntry]:
        raise NotImplementedError

    def list_escalations(self, request_id: int) -> Sequence[EscalationLogEntry]:
        raise NotImplementedError
