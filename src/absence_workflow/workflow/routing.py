"""Stage routing for absence requests.

Forward order:

    SUPERVISOR -> MANAGER -> HR | HR_BLUE_GRAY -> GENERAL_MANAGER -> PAYROLL -> (done)

Blue/gray/union employees are placed at HR_BLUE_GRAY on creation, skipping the
line-manager stages; after MANAGER the same classification picks the HR lane.
Both rules are kept as they are; whether blue/gray employees should ever
reach SUPERVISOR/MANAGER is pending product confirmation.
"""

from __future__ import annotations

from typing import Optional

from ..core.enums import ApprovalStage
from ..core.exceptions import TerminalStateError
from ..employees.model import WorkerClassification

_STAGE_RANK = {
    ApprovalStage.SUPERVISOR: 0,
    ApprovalStage.MANAGER: 1,
    ApprovalStage.HR: 2,
    ApprovalStage.HR_BLUE_GRAY: 2,
    ApprovalStage.GENERAL_MANAGER: 3,
    ApprovalStage.PAYROLL: 4,
    ApprovalStage.COMPLETED: 5,
    ApprovalStage.DECLINED: 5,
}


def stage_rank(stage: ApprovalStage) -> int:
    return _STAGE_RANK[stage]


def initial_stage(classification: WorkerClassification) -> ApprovalStage:
    if classification.is_blue_gray:
        return ApprovalStage.HR_BLUE_GRAY
    return ApprovalStage.SUPERVISOR


def next_stage(current: ApprovalStage, classification: WorkerClassification) -> Optional[ApprovalStage]:
    """Stage that follows `current` after an approval.

    Returns None when `current` is the last approval stage (PAYROLL).
    """

    if current is ApprovalStage.SUPERVISOR:
        return ApprovalStage.MANAGER
    if current is ApprovalStage.MANAGER:
        return ApprovalStage.HR_BLUE_GRAY if classification.is_blue_gray else ApprovalStage.HR
    if current in (ApprovalStage.HR, ApprovalStage.HR_BLUE_GRAY):
        return ApprovalStage.GENERAL_MANAGER
    if current is ApprovalStage.GENERAL_MANAGER:
        return ApprovalStage.PAYROLL
    if current is ApprovalStage.PAYROLL:
        return None
    if current.is_terminal:
        raise TerminalStateError(f"Stage {current.value} is terminal")
    raise ValueError(f"Unhandled approval stage: {current!r}")
