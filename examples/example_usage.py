"""Example: drive the workflow through the service layer (no Flask).

Assumes `python scripts/init_db.py --seed` has been run.
"""

import importlib
from datetime import date, timedelta

from absence_workflow.config import get_settings_module
from absence_workflow.container import build_container
from absence_workflow.core.enums import ApprovalStage, RequestType
from absence_workflow.requests.model import NewAbsenceRequest


def main():
    settings = importlib.import_module(get_settings_module())
    container = build_container(db_config=settings.DB_CONFIG)
    service = container.request_service

    start = date.today() + timedelta(days=7)
    created = service.create(
        NewAbsenceRequest(
            employee_id=10,
            request_type=RequestType.VACATION,
            start_date=start,
            end_date=start + timedelta(days=2),
            total_days=3,
            reason="Family trip",
        )
    )
    print("created", created.request_id, created.current_stage.value)

    updated = service.approve(request_id=created.request_id, approver_id=2, stage=ApprovalStage.SUPERVISOR)
    print("now at", updated.current_stage.value)

    for entry in service.approval_history(created.request_id):
        print(entry.stage.value, entry.action.value, entry.approver_id)


if __name__ == "__main__":
    main()
