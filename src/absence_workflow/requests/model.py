from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..core.constants import ESCALATION_REASON
from ..core.enums import ApprovalAction, ApprovalStage, RequestStatus, RequestType


@dataclass(frozen=True)
class NewAbsenceRequest:
    """Input for filing a request (validated by the service)."""

    employee_id: int
    request_type: RequestType
    start_date: date
    end_date: date
    total_days: float
    reason: str
    hours_per_day: Optional[float] = None
    paid_days: Optional[float] = None
    unpaid_days: Optional[float] = None
    unpaid_comments: Optional[str] = None
    shift_details: Optional[str] = None
    new_shift_id: Optional[int] = None


@dataclass(frozen=True)
class AbsenceRequest:
    request_id: int
    employee_id: int
    request_type: RequestType
    start_date: date
    end_date: date
    total_days: float
    reason: str
    status: RequestStatus
    current_stage: ApprovalStage
    last_action_at: datetime
    hours_per_day: Optional[float] = None
    paid_days: Optional[float] = None
    unpaid_days: Optional[float] = None
    unpaid_comments: Optional[str] = None
    shift_details: Optional[str] = None
    new_shift_id: Optional[int] = None
    payroll_cutoff_date: Optional[datetime] = None
    late_approval_flag: bool = False
    excluded_from_payroll: bool = False
    escalation_count: int = 0
    is_escalated: bool = False
    incidence_id: Optional[int] = None
    created_at: Optional[datetime] = None

    @property
    def is_open(self) -> bool:
        return self.status == RequestStatus.PENDING and not self.current_stage.is_terminal


@dataclass(frozen=True)
class ApprovalHistoryEntry:
    request_id: int
    approver_id: int
    stage: ApprovalStage
    action: ApprovalAction
    created_at: datetime
    comments: Optional[str] = None
    auto_approved: bool = False
    entry_id: Optional[int] = None


@dataclass(frozen=True)
class EscalationLogEntry:
    request_id: int
    from_stage: ApprovalStage
    to_stage: ApprovalStage
    escalated_at: datetime
    reason: str = ESCALATION_REASON
    entry_id: Optional[int] = None
