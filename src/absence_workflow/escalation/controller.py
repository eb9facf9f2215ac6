from __future__ import annotations

from flask import Flask, jsonify

from ..common.http import current_user_id, iso, json_errors, login_required
from ..core.enums import Role
from ..core.exceptions import AuthorizationError
from ..container import Container

# Who may trigger a sweep by hand.
_OPERATOR_ROLES = frozenset({Role.ADMIN, Role.HR, Role.HR_AND_PR})


def register(app: Flask, container: Container) -> None:
    service = container.escalation_service

    @app.route("/api/escalations/run", methods=["POST"], endpoint="run_escalations")
    @login_required
    @json_errors
    def run_escalations():
        role = container.directory.get_user_role(current_user_id())
        if role not in _OPERATOR_ROLES:
            raise AuthorizationError("Only administrators or HR can run the escalation sweep")

        report = service.process_pending()
        return jsonify(
            {
                "started_at": iso(report.started_at),
                "escalated": report.escalated,
                "skipped": report.skipped,
                "failed": report.failed,
            }
        )

    @app.route(
        "/api/absence-requests/<int:request_id>/escalations", methods=["GET"], endpoint="absence_request_escalations"
    )
    @login_required
    @json_errors
    def absence_request_escalations(request_id: int):
        container.request_service.get_for_reader(request_id, current_user_id())
        return jsonify(
            [
                {
                    "entry_id": e.entry_id,
                    "from_stage": e.from_stage.value,
                    "to_stage": e.to_stage.value,
                    "escalated_at": iso(e.escalated_at),
                    "reason": e.reason,
                }
                for e in service.history(request_id)
            ]
        )
