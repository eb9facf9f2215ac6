from __future__ import annotations

import pytest

from absence_workflow.core.enums import ApprovalStage, CollarType
from absence_workflow.core.exceptions import TerminalStateError
from absence_workflow.employees.model import WorkerClassification
from absence_workflow.workflow.routing import initial_stage, next_stage, stage_rank

WHITE = WorkerClassification(collar_type=CollarType.WHITE_COLLAR)
BLUE = WorkerClassification(collar_type=CollarType.BLUE_COLLAR)
GRAY = WorkerClassification(collar_type=CollarType.GRAY_COLLAR)
UNION_WHITE = WorkerClassification(collar_type=CollarType.WHITE_COLLAR, is_unionized=True)


def test_white_collar_starts_at_supervisor():
    assert initial_stage(WHITE) == ApprovalStage.SUPERVISOR


@pytest.mark.parametrize("classification", [BLUE, GRAY, UNION_WHITE])
def test_blue_gray_and_union_start_at_hr_blue_gray(classification):
    assert initial_stage(classification) == ApprovalStage.HR_BLUE_GRAY


def test_white_collar_full_path():
    visited = [initial_stage(WHITE)]
    while True:
        following = next_stage(visited[-1], WHITE)
        if following is None:
            break
        visited.append(following)

    assert visited == [
        ApprovalStage.SUPERVISOR,
        ApprovalStage.MANAGER,
        ApprovalStage.HR,
        ApprovalStage.GENERAL_MANAGER,
        ApprovalStage.PAYROLL,
    ]


def test_manager_routes_blue_gray_through_hr_blue_gray():
    assert next_stage(ApprovalStage.MANAGER, BLUE) == ApprovalStage.HR_BLUE_GRAY
    assert next_stage(ApprovalStage.MANAGER, UNION_WHITE) == ApprovalStage.HR_BLUE_GRAY
    assert next_stage(ApprovalStage.MANAGER, WHITE) == ApprovalStage.HR


def test_both_hr_lanes_lead_to_general_manager():
    assert next_stage(ApprovalStage.HR, WHITE) == ApprovalStage.GENERAL_MANAGER
    assert next_stage(ApprovalStage.HR_BLUE_GRAY, BLUE) == ApprovalStage.GENERAL_MANAGER


def test_payroll_is_last_approval_stage():
    assert next_stage(ApprovalStage.PAYROLL, WHITE) is None


@pytest.mark.parametrize("stage", [ApprovalStage.COMPLETED, ApprovalStage.DECLINED])
def test_terminal_stages_have_no_successor(stage):
    with pytest.raises(TerminalStateError):
        next_stage(stage, WHITE)


def test_transitions_never_move_backwards():
    for classification in (WHITE, BLUE):
        for stage in ApprovalStage:
            if stage.is_terminal:
                continue
            following = next_stage(stage, classification)
            if following is not None:
                assert stage_rank(following) > stage_rank(stage)
