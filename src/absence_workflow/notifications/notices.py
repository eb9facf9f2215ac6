from __future__ import annotations

from typing import Optional

from ..core.enums import ApprovalStage
from ..requests.model import AbsenceRequest
from ..workflow.authorization import notification_roles, wants_inbox_message
from .outbox import NotificationOutbox


def request_label(request: AbsenceRequest) -> str:
    return request.request_type.value.replace("_", " ").lower()


def queue_stage_entry(
    outbox: NotificationOutbox,
    request: AbsenceRequest,
    *,
    employee_name: str,
    stage: ApprovalStage,
    note: Optional[str] = None,
) -> None:
    """Tell the approver group of `stage` that a request is waiting for them."""

    label = request_label(request)
    subject = f"New {label} request from {employee_name} pending approval"
    if note:
        subject = f"{subject} ({note})"

    body = None
    if wants_inbox_message(stage):
        body = (
            f"{employee_name} filed a {label} request that requires your approval.\n\n"
            "Please review it in the approvals portal."
        )
    outbox.role_group(notification_roles(stage), request.request_id, subject, body=body)


def queue_approver(outbox: NotificationOutbox, request: AbsenceRequest, *, approver_id: int, employee_name: str) -> None:
    label = request_label(request)
    subject = f"New {label} request pending approval"
    body = (
        f"{employee_name} filed a {label} request that requires your approval.\n\n"
        "Please review it in the approvals portal."
    )
    outbox.bell_and_inbox(approver_id, request.request_id, subject, body)
