from __future__ import annotations

from typing import FrozenSet

from ..core.enums import ApprovalStage, Role

_MANAGER_ROLES = frozenset({Role.MANAGER, Role.SUP_AND_GM})
_HR_ROLES = frozenset({Role.HR, Role.HR_AND_PR, Role.HR_BLUE_GRAY})

_ALLOWED_ROLES = {
    ApprovalStage.SUPERVISOR: frozenset({Role.SUPERVISOR, Role.SUP_AND_GM}),
    ApprovalStage.MANAGER: _MANAGER_ROLES,
    ApprovalStage.GENERAL_MANAGER: _MANAGER_ROLES,
    ApprovalStage.HR: _HR_ROLES,
    ApprovalStage.HR_BLUE_GRAY: _HR_ROLES,
    ApprovalStage.PAYROLL: frozenset({Role.PAYROLL_STAFF, Role.HR_AND_PR}),
    ApprovalStage.COMPLETED: frozenset(),
    ApprovalStage.DECLINED: frozenset(),
}

# Stages whose approver group gets an inbox message on top of the bell.
_INBOX_STAGES = frozenset({ApprovalStage.SUPERVISOR, ApprovalStage.MANAGER, ApprovalStage.GENERAL_MANAGER})


def allowed_roles(stage: ApprovalStage) -> FrozenSet[Role]:
    return _ALLOWED_ROLES[stage]


def can_act(role: Role, stage: ApprovalStage) -> bool:
    return role in _ALLOWED_ROLES[stage]


def notification_roles(stage: ApprovalStage) -> FrozenSet[Role]:
    """Approver group notified when a request enters `stage`."""
    return _ALLOWED_ROLES[stage]


def wants_inbox_message(stage: ApprovalStage) -> bool:
    return stage in _INBOX_STAGES


# Roles that may read requests they do not own.
_READER_ROLES = frozenset({Role.ADMIN}).union(*_ALLOWED_ROLES.values())


def can_read_any(role: Role) -> bool:
    return role in _READER_ROLES
