from __future__ import annotations

import pytest

from absence_workflow.core.enums import ApprovalStage, Role
from absence_workflow.workflow.authorization import (
    allowed_roles,
    can_act,
    can_read_any,
    notification_roles,
    wants_inbox_message,
)


@pytest.mark.parametrize(
    "role,stage",
    [
        (Role.SUPERVISOR, ApprovalStage.SUPERVISOR),
        (Role.SUP_AND_GM, ApprovalStage.SUPERVISOR),
        (Role.MANAGER, ApprovalStage.MANAGER),
        (Role.SUP_AND_GM, ApprovalStage.GENERAL_MANAGER),
        (Role.HR, ApprovalStage.HR),
        (Role.HR_AND_PR, ApprovalStage.HR_BLUE_GRAY),
        (Role.HR_BLUE_GRAY, ApprovalStage.HR_BLUE_GRAY),
        (Role.HR_BLUE_GRAY, ApprovalStage.HR),
        (Role.PAYROLL_STAFF, ApprovalStage.PAYROLL),
        (Role.HR_AND_PR, ApprovalStage.PAYROLL),
    ],
)
def test_allowed(role, stage):
    assert can_act(role, stage)


@pytest.mark.parametrize(
    "role,stage",
    [
        (Role.EMPLOYEE, ApprovalStage.SUPERVISOR),
        (Role.MANAGER, ApprovalStage.SUPERVISOR),
        (Role.SUPERVISOR, ApprovalStage.MANAGER),
        (Role.HR, ApprovalStage.PAYROLL),
        (Role.PAYROLL_STAFF, ApprovalStage.HR),
        (Role.ADMIN, ApprovalStage.GENERAL_MANAGER),
        (Role.HR_WHITE, ApprovalStage.HR),
    ],
)
def test_denied(role, stage):
    assert not can_act(role, stage)


@pytest.mark.parametrize("stage", [ApprovalStage.COMPLETED, ApprovalStage.DECLINED])
def test_terminal_stages_allow_nobody(stage):
    assert allowed_roles(stage) == frozenset()
    assert not any(can_act(role, stage) for role in Role)


def test_every_stage_has_an_entry():
    for stage in ApprovalStage:
        allowed_roles(stage)


def test_hr_entry_is_bell_only_and_manager_gets_inbox():
    assert Role.HR in notification_roles(ApprovalStage.HR)
    assert not wants_inbox_message(ApprovalStage.HR)
    assert not wants_inbox_message(ApprovalStage.PAYROLL)
    assert wants_inbox_message(ApprovalStage.MANAGER)
    assert wants_inbox_message(ApprovalStage.GENERAL_MANAGER)


@pytest.mark.parametrize("role", [Role.ADMIN, Role.SUPERVISOR, Role.HR_BLUE_GRAY, Role.PAYROLL_STAFF, Role.SUP_AND_GM])
def test_approvers_and_admin_read_any_request(role):
    assert can_read_any(role)


@pytest.mark.parametrize("role", [Role.EMPLOYEE, None])
def test_employees_read_only_their_own(role):
    assert not can_read_any(role)
