from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta
from typing import Callable, List, Optional, Sequence

from ..common.datetime_utils import as_utc, utc_now
from ..core.constants import DEFAULT_ESCALATION_IDLE_HOURS, ESCALATION_REASON
from ..core.exceptions import NotFoundError
from ..employees.directory import EmployeeDirectory
from ..notifications.notices import queue_stage_entry
from ..notifications.outbox import NotificationOutbox
from ..notifications.sink import NotificationSink
from ..requests.model import AbsenceRequest, EscalationLogEntry
from ..requests.repository import WorkflowStore
from ..workflow.routing import next_stage

logger = logging.getLogger(__name__)


@dataclass
class EscalationReport:
    """Outcome of one sweep."""

    started_at: datetime
    escalated: List[int] = field(default_factory=list)
    skipped: List[int] = field(default_factory=list)
    failed: List[int] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.escalated) + len(self.skipped) + len(self.failed)


class EscalationService:
    """Force-advances requests nobody has acted on within the idle window.

    The transition is system initiated: same stage routing as an approval,
    no role check, no approval history entry (an escalation log entry
    instead).
    """

    def __init__(
        self,
        store: WorkflowStore,
        directory: EmployeeDirectory,
        notifications: NotificationSink,
        *,
        idle_hours: float = DEFAULT_ESCALATION_IDLE_HOURS,
        batch_size: int = 500,
        clock: Callable[[], datetime] = utc_now,
    ):
        self._store = store
        self._directory = directory
        self._notifications = notifications
        self._idle = timedelta(hours=float(idle_hours))
        self._batch_size = int(batch_size)
        self._clock = clock

    @property
    def idle_threshold(self) -> timedelta:
        return self._idle

    def process_pending(self, now: Optional[datetime] = None) -> EscalationReport:
        now = as_utc(now or self._clock())
        report = EscalationReport(started_at=now)

        idle_since = now - self._idle
        after_id = 0
        while True:
            # Keyset paging: requests that keep failing cannot crowd out the rest.
            page = self._store.find_idle_pending(idle_since=idle_since, after_id=after_id, limit=self._batch_size)
            logger.info("Escalation sweep: %s idle request(s) after id %s", len(page), after_id)

            for candidate in page:
                self._escalate_candidate(candidate.request_id, now, report)

            if len(page) < self._batch_size:
                break
            after_id = page[-1].request_id

        logger.info(
            "Escalation sweep done: %s escalated, %s skipped, %s failed",
            len(report.escalated),
            len(report.skipped),
            len(report.failed),
        )
        return report

    def _escalate_candidate(self, request_id: int, now: datetime, report: EscalationReport) -> None:
        try:
            escalated = self.escalate(request_id, now=now)
        except Exception:
            # lastActionAt is untouched, so the next sweep retries it.
            logger.exception("Failed to escalate request %s", request_id)
            report.failed.append(request_id)
            return

        if escalated is None:
            report.skipped.append(request_id)
        else:
            report.escalated.append(request_id)

    def escalate(self, request_id: int, *, now: Optional[datetime] = None) -> Optional[AbsenceRequest]:
        """Advance one idle request; returns None when there is nothing to do.

        The row is locked and re-checked, so a request approved after the
        sweep read it is left alone.
        """

        now = as_utc(now or self._clock())
        outbox = NotificationOutbox(self._notifications, self._directory)

        with self._store.transaction() as tx:
            request = tx.get_request(int(request_id), for_update=True)
            if not request:
                raise NotFoundError("Request not found")
            if not request.is_open:
                logger.info("Request %s is no longer pending; not escalated", request.request_id)
                return None
            if as_utc(request.last_action_at) >= now - self._idle:
                logger.info("Request %s had recent activity; not escalated", request.request_id)
                return None

            employee = self._directory.get_employee(request.employee_id)
            if not employee:
                raise NotFoundError(f"Employee {request.employee_id} not found")

            from_stage = request.current_stage
            to_stage = next_stage(from_stage, employee.classification)
            if to_stage is None or to_stage == from_stage:
                # Completing a request needs a payroll decision; escalation never does it.
                logger.info("Request %s at %s has no stage to escalate to", request.request_id, from_stage.value)
                return None

            request = replace(
                request,
                current_stage=to_stage,
                escalation_count=request.escalation_count + 1,
                is_escalated=True,
                last_action_at=now,
            )
            tx.save_request(request)
            tx.append_escalation(
                EscalationLogEntry(
                    request_id=request.request_id,
                    from_stage=from_stage,
                    to_stage=to_stage,
                    escalated_at=now,
                    reason=ESCALATION_REASON,
                )
            )
            queue_stage_entry(
                outbox,
                request,
                employee_name=employee.full_name,
                stage=to_stage,
                note="escalated after inactivity",
            )

        logger.info(
            "Escalated request %s %s -> %s (count=%s)",
            request.request_id,
            from_stage.value,
            to_stage.value,
            request.escalation_count,
        )
        outbox.flush()
        return request

    def history(self, request_id: int) -> Sequence[EscalationLogEntry]:
        return self._store.list_escalations(int(request_id))
