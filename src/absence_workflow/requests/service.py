from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime
from typing import Callable, Optional, Sequence

from ..common.datetime_utils import iter_days, utc_now
from ..common.validators import require_date_range, require_non_empty, require_positive
from ..core.enums import ApprovalAction, ApprovalStage, RequestStatus, RequestType, Role
from ..core.exceptions import (
    AuthorizationError,
    ConfigurationError,
    NotFoundError,
    StageMismatchError,
    TerminalStateError,
    WorkflowStateError,
)
from ..employees.directory import EmployeeDirectory
from ..employees.model import EmployeeProfile
from ..notifications.notices import queue_approver, queue_stage_entry, request_label
from ..notifications.outbox import NotificationOutbox
from ..notifications.sink import NotificationSink
from ..payroll.cutoff import PayrollCutoffCalculator
from ..payroll.incidence_sink import IncidenceSink
from ..payroll.incidence_types import IncidenceCalculatorFactory
from ..shifts.exception_sink import ShiftExceptionSink
from ..workflow.authorization import can_act, can_read_any, notification_roles
from ..workflow.routing import initial_stage, next_stage
from .model import AbsenceRequest, ApprovalHistoryEntry, NewAbsenceRequest
from .repository import WorkflowStore, WorkflowTransaction

logger = logging.getLogger(__name__)

# A decline at one of these stages keeps the request out of the payroll export.
_PAYROLL_EXCLUDING_STAGES = frozenset({ApprovalStage.HR, ApprovalStage.HR_BLUE_GRAY, ApprovalStage.GENERAL_MANAGER})

_AUTO_APPROVAL_COMMENTS = {
    ApprovalStage.SUPERVISOR: "Auto-approved (supervisor is also general manager)",
    ApprovalStage.MANAGER: "Auto-approved (user is both supervisor and general manager)",
}


class AbsenceRequestService:
    """Workflow engine: create, approve/decline, archive and delete requests.

    Every state change runs in one store transaction. Incidence and shift
    side effects that happen after the decision run under a savepoint and
    only log on failure; notifications go out after commit.
    """

    def __init__(
        self,
        store: WorkflowStore,
        directory: EmployeeDirectory,
        notifications: NotificationSink,
        incidences: IncidenceSink,
        shift_exceptions: ShiftExceptionSink,
        *,
        cutoff_calculator: Optional[PayrollCutoffCalculator] = None,
        calculator_factory: Optional[IncidenceCalculatorFactory] = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        self._store = store
        self._directory = directory
        self._notifications = notifications
        self._incidences = incidences
        self._shift_exceptions = shift_exceptions
        self._cutoff = cutoff_calculator or PayrollCutoffCalculator()
        self._calculators = calculator_factory or IncidenceCalculatorFactory()
        self._clock = clock

    # -------- queries --------
    def get(self, request_id: int) -> AbsenceRequest:
        request = self._store.get_request(int(request_id))
        if not request:
            raise NotFoundError("Request not found")
        return request

    def get_for_reader(self, request_id: int, reader_id: int) -> AbsenceRequest:
        """Load a request the reader owns, or one any approver or admin may see."""

        request = self.get(request_id)
        if request.employee_id != int(reader_id) and not can_read_any(self._directory.get_user_role(reader_id)):
            raise AuthorizationError("You are not allowed to view this request")
        return request

    def approval_history(self, request_id: int) -> Sequence[ApprovalHistoryEntry]:
        return self._store.list_history(int(request_id))

    # -------- create --------
    def create(self, new: NewAbsenceRequest) -> AbsenceRequest:
        reason = self._validate_new(new)
        employee = self._load_employee(new.employee_id)
        supervisor_role = self._require_reporting_line(employee)
        if employee.payroll_employee_id is None:
            raise ConfigurationError("Employee has no payroll record; incidences cannot be booked for this user")

        now = self._clock()
        cutoff = self._cutoff.compute(now, employee.classification)
        shortcut = supervisor_role == Role.SUP_AND_GM
        outbox = self._outbox()

        with self._store.transaction() as tx:
            draft = AbsenceRequest(
                request_id=0,
                employee_id=employee.user_id,
                request_type=RequestType(new.request_type),
                start_date=new.start_date,
                end_date=new.end_date,
                total_days=float(new.total_days),
                reason=reason,
                status=RequestStatus.PENDING,
                current_stage=initial_stage(employee.classification),
                last_action_at=now,
                hours_per_day=new.hours_per_day,
                paid_days=new.paid_days,
                unpaid_days=new.unpaid_days,
                unpaid_comments=new.unpaid_comments,
                shift_details=new.shift_details,
                new_shift_id=new.new_shift_id,
                payroll_cutoff_date=cutoff,
                created_at=now,
            )
            request = replace(draft, request_id=tx.insert_request(draft))

            incidence_id = self._incidences.create_placeholder(
                tx,
                request=request,
                payroll_employee_id=employee.payroll_employee_id,
            )
            request = replace(request, incidence_id=incidence_id)

            if shortcut:
                for stage in (ApprovalStage.SUPERVISOR, ApprovalStage.MANAGER):
                    tx.append_history(
                        ApprovalHistoryEntry(
                            request_id=request.request_id,
                            approver_id=employee.supervisor_id,
                            stage=stage,
                            action=ApprovalAction.APPROVED,
                            created_at=now,
                            comments=_AUTO_APPROVAL_COMMENTS[stage],
                            auto_approved=True,
                        )
                    )
                request = replace(request, current_stage=ApprovalStage.HR)
                queue_stage_entry(
                    outbox,
                    request,
                    employee_name=employee.full_name,
                    stage=ApprovalStage.HR,
                    note="auto-approved by supervisor/general manager",
                )
            else:
                queue_approver(outbox, request, approver_id=employee.supervisor_id, employee_name=employee.full_name)
                if employee.general_manager_id != employee.supervisor_id:
                    queue_approver(
                        outbox, request, approver_id=employee.general_manager_id, employee_name=employee.full_name
                    )

            tx.save_request(request)

        logger.info(
            "Created absence request %s for user %s at stage %s",
            request.request_id,
            request.employee_id,
            request.current_stage.value,
        )
        outbox.flush()
        return request

    # -------- approve / decline --------
    def approve(
        self,
        *,
        request_id: int,
        approver_id: int,
        stage: ApprovalStage,
        action: ApprovalAction = ApprovalAction.APPROVED,
        comments: str = "",
    ) -> AbsenceRequest:
        stage = ApprovalStage(stage)
        action = ApprovalAction(action)
        now = self._clock()
        outbox = self._outbox()

        with self._store.transaction() as tx:
            request = tx.get_request(int(request_id), for_update=True)
            if not request:
                raise NotFoundError("Request not found")
            if not request.is_open:
                raise TerminalStateError(f"Request is already {request.status.value.lower()}")
            if request.current_stage != stage:
                raise StageMismatchError(
                    f"Request is at stage {request.current_stage.value}, not {stage.value}"
                )

            role = self._directory.get_user_role(int(approver_id))
            if role is None:
                raise ConfigurationError("Approver not found")
            if not can_act(role, stage):
                raise AuthorizationError(f"Role {role.value} cannot act on stage {stage.value}")

            employee = self._load_employee(request.employee_id)

            tx.append_history(
                ApprovalHistoryEntry(
                    request_id=request.request_id,
                    approver_id=int(approver_id),
                    stage=stage,
                    action=action,
                    created_at=now,
                    comments=(comments or "").strip() or None,
                )
            )

            cutoff = request.payroll_cutoff_date or self._cutoff.compute(now, employee.classification)
            request = replace(request, payroll_cutoff_date=cutoff, last_action_at=now)

            if action == ApprovalAction.DECLINED:
                request = self._decline(tx, request, stage=stage, outbox=outbox)
            else:
                request = self._advance(
                    tx, request, stage=stage, employee=employee, approver_id=int(approver_id), now=now, outbox=outbox
                )

        outbox.flush()
        return request

    def decline(self, *, request_id: int, approver_id: int, stage: ApprovalStage, comments: str = "") -> AbsenceRequest:
        return self.approve(
            request_id=request_id,
            approver_id=approver_id,
            stage=stage,
            action=ApprovalAction.DECLINED,
            comments=comments,
        )

    def _decline(
        self,
        tx: WorkflowTransaction,
        request: AbsenceRequest,
        *,
        stage: ApprovalStage,
        outbox: NotificationOutbox,
    ) -> AbsenceRequest:
        excluding = stage in _PAYROLL_EXCLUDING_STAGES
        request = replace(
            request,
            status=RequestStatus.DECLINED,
            current_stage=ApprovalStage.COMPLETED,
            excluded_from_payroll=request.excluded_from_payroll or excluding,
        )
        tx.save_request(request)

        if excluding:
            self._sync_incidence_flags(tx, request)

        logger.info("Request %s declined at stage %s", request.request_id, stage.value)
        outbox.bell(
            request.employee_id,
            request.request_id,
            f"Your {request_label(request)} request was declined at the {stage.value} stage",
        )
        return request

    def _advance(
        self,
        tx: WorkflowTransaction,
        request: AbsenceRequest,
        *,
        stage: ApprovalStage,
        employee: EmployeeProfile,
        approver_id: int,
        now: datetime,
        outbox: NotificationOutbox,
    ) -> AbsenceRequest:
        late = self._cutoff.is_late(now, request.payroll_cutoff_date)
        if late:
            logger.warning(
                "Late approval for request %s (approved at %s, cutoff was %s)",
                request.request_id,
                now.isoformat(),
                request.payroll_cutoff_date.isoformat(),
            )
        request = replace(request, late_approval_flag=request.late_approval_flag or late)

        following = next_stage(stage, employee.classification)
        if following is None:
            request = replace(request, status=RequestStatus.APPROVED, current_stage=ApprovalStage.COMPLETED)
            tx.save_request(request)
            self._sync_incidence_flags(tx, request)
            request = self._finalize_incidence(tx, request, employee=employee, approver_id=approver_id)
            if request.request_type == RequestType.SHIFT_CHANGE:
                self._best_effort(
                    tx,
                    "shift_exceptions",
                    request,
                    lambda: self._apply_shift_change(tx, request, employee=employee, approver_id=approver_id),
                )

            logger.info("Request %s fully approved", request.request_id)
            outbox.bell(
                request.employee_id,
                request.request_id,
                f"Your {request_label(request)} request has been fully approved",
            )
            outbox.role_group(
                notification_roles(ApprovalStage.PAYROLL),
                request.request_id,
                "Absence request approved and ready for payroll processing",
            )
            return request

        request = replace(request, current_stage=following)
        tx.save_request(request)
        self._sync_incidence_flags(tx, request)

        logger.info("Request %s advanced %s -> %s", request.request_id, stage.value, following.value)
        queue_stage_entry(outbox, request, employee_name=employee.full_name, stage=following)
        return request

    # -------- downstream side effects --------
    def _sync_incidence_flags(self, tx: WorkflowTransaction, request: AbsenceRequest) -> None:
        if request.incidence_id is None:
            return
        self._best_effort(
            tx,
            "incidence_flags",
            request,
            lambda: self._incidences.update_flags(
                tx,
                incidence_id=request.incidence_id,
                late=request.late_approval_flag,
                excluded=request.excluded_from_payroll,
            ),
        )

    def _finalize_incidence(
        self,
        tx: WorkflowTransaction,
        request: AbsenceRequest,
        *,
        employee: EmployeeProfile,
        approver_id: int,
    ) -> AbsenceRequest:
        """Book the final amount; creates the incidence if none is linked yet.

        Returns the request, relinked when a new incidence was created.
        """

        linked = [request]

        def finalize() -> None:
            incidence_id = request.incidence_id
            if incidence_id is None:
                if employee.payroll_employee_id is None:
                    raise ConfigurationError("Employee has no payroll record")
                incidence_id = self._incidences.create_placeholder(
                    tx, request=request, payroll_employee_id=employee.payroll_employee_id
                )
                relinked = replace(request, incidence_id=incidence_id)
                tx.save_request(relinked)
                linked[0] = relinked
            calculator = self._calculators.for_request_type(request.request_type)
            self._incidences.finalize(
                tx,
                incidence_id=incidence_id,
                amount=calculator.amount(request, daily_salary=employee.daily_salary),
                late=request.late_approval_flag,
                excluded=request.excluded_from_payroll,
                approved_by=approver_id,
            )

        if self._best_effort(tx, "incidence_finalize", request, finalize):
            return linked[0]
        return request

    def _apply_shift_change(
        self,
        tx: WorkflowTransaction,
        request: AbsenceRequest,
        *,
        employee: EmployeeProfile,
        approver_id: int,
    ) -> None:
        if request.new_shift_id is None:
            logger.warning("No target shift on shift-change request %s; schedule left unchanged", request.request_id)
            return
        if employee.payroll_employee_id is None:
            raise ConfigurationError("Employee has no payroll record")

        for work_date in iter_days(request.start_date, request.end_date):
            self._shift_exceptions.upsert(
                tx,
                employee_id=employee.payroll_employee_id,
                work_date=work_date,
                shift_id=request.new_shift_id,
                created_by=approver_id,
            )

    @staticmethod
    def _best_effort(tx: WorkflowTransaction, label: str, request: AbsenceRequest, action: Callable[[], None]) -> bool:
        try:
            with tx.savepoint(label):
                action()
        except Exception as exc:
            logger.warning("%s failed for request %s: %s", label, request.request_id, exc)
            return False
        return True

    # -------- archive / delete --------
    def archive(self, *, request_id: int, employee_id: int) -> AbsenceRequest:
        with self._store.transaction() as tx:
            request = self._owned_request(tx, request_id, employee_id)
            if request.status == RequestStatus.ARCHIVED:
                raise WorkflowStateError("Request is already archived")
            if request.status not in (RequestStatus.APPROVED, RequestStatus.DECLINED):
                raise WorkflowStateError("Only decided requests can be archived")
            request = replace(request, status=RequestStatus.ARCHIVED)
            tx.save_request(request)
        return request

    def delete(self, *, request_id: int, employee_id: int) -> None:
        with self._store.transaction() as tx:
            request = self._owned_request(tx, request_id, employee_id)
            if request.status not in (RequestStatus.PENDING, RequestStatus.DECLINED):
                raise WorkflowStateError("Only pending or declined requests can be deleted")
            if request.incidence_id is not None:
                self._incidences.discard(tx, incidence_id=request.incidence_id)
            tx.delete_request(request.request_id)
        logger.info("Deleted absence request %s", request.request_id)

    @staticmethod
    def _owned_request(tx: WorkflowTransaction, request_id: int, employee_id: int) -> AbsenceRequest:
        request = tx.get_request(int(request_id), for_update=True)
        if not request:
            raise NotFoundError("Request not found")
        if request.employee_id != int(employee_id):
            raise AuthorizationError("You can only manage your own requests")
        return request

    # -------- helpers --------
    def _outbox(self) -> NotificationOutbox:
        return NotificationOutbox(self._notifications, self._directory)

    @staticmethod
    def _validate_new(new: NewAbsenceRequest) -> str:
        require_date_range(new.start_date, new.end_date)
        require_positive(new.total_days, "Total days")
        return require_non_empty(new.reason, "Reason")

    def _load_employee(self, user_id: int) -> EmployeeProfile:
        employee = self._directory.get_employee(int(user_id))
        if not employee:
            raise NotFoundError("Employee not found")
        return employee

    def _require_reporting_line(self, employee: EmployeeProfile) -> Role:
        """Check supervisor and general manager are assigned and resolvable.

        Returns the supervisor's role.
        """

        if employee.supervisor_id is None:
            raise ConfigurationError("Employee has no assigned supervisor; contact HR to configure it")
        if employee.general_manager_id is None:
            raise ConfigurationError("Employee has no assigned general manager; contact HR to configure it")

        supervisor_role = self._directory.get_user_role(employee.supervisor_id)
        if supervisor_role is None:
            raise ConfigurationError("Assigned supervisor not found in the system")
        if self._directory.get_user_role(employee.general_manager_id) is None:
            raise ConfigurationError("Assigned general manager not found in the system")
        return supervisor_role
