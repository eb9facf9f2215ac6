from __future__ import annotations

from typing import Any, Dict, Optional

from flask import Flask, jsonify, request

from ..common.http import current_user_id, iso, json_errors, login_required, parse_date
from ..core.enums import ApprovalStage, RequestType
from ..core.exceptions import ValidationError
from ..container import Container
from .model import AbsenceRequest, ApprovalHistoryEntry, NewAbsenceRequest


def request_to_dict(r: AbsenceRequest) -> Dict[str, Any]:
    return {
        "request_id": r.request_id,
        "employee_id": r.employee_id,
        "request_type": r.request_type.value,
        "start_date": iso(r.start_date),
        "end_date": iso(r.end_date),
        "total_days": r.total_days,
        "reason": r.reason,
        "hours_per_day": r.hours_per_day,
        "paid_days": r.paid_days,
        "unpaid_days": r.unpaid_days,
        "new_shift_id": r.new_shift_id,
        "status": r.status.value,
        "current_stage": r.current_stage.value,
        "last_action_at": iso(r.last_action_at),
        "payroll_cutoff_date": iso(r.payroll_cutoff_date),
        "late_approval_flag": r.late_approval_flag,
        "excluded_from_payroll": r.excluded_from_payroll,
        "escalation_count": r.escalation_count,
        "is_escalated": r.is_escalated,
        "incidence_id": r.incidence_id,
    }


def history_to_dict(h: ApprovalHistoryEntry) -> Dict[str, Any]:
    return {
        "entry_id": h.entry_id,
        "approver_id": h.approver_id,
        "stage": h.stage.value,
        "action": h.action.value,
        "comments": h.comments,
        "auto_approved": h.auto_approved,
        "created_at": iso(h.created_at),
    }


def _optional_float(data: Dict[str, Any], key: str) -> Optional[float]:
    value = data.get(key)
    if value in (None, ""):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{key} must be a number")


def _optional_int(data: Dict[str, Any], key: str) -> Optional[int]:
    value = data.get(key)
    if value in (None, ""):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{key} must be an integer")


def _enum(enum_cls, value, field_name: str):
    try:
        return enum_cls(str(value or "").upper())
    except ValueError:
        raise ValidationError(f"Unknown {field_name}: {value!r}")


def register(app: Flask, container: Container) -> None:
    service = container.request_service

    @app.route("/api/absence-requests", methods=["POST"], endpoint="create_absence_request")
    @login_required
    @json_errors
    def create_absence_request():
        data = request.get_json(silent=True) or {}
        total_days = _optional_float(data, "total_days")
        created = service.create(
            NewAbsenceRequest(
                employee_id=current_user_id(),
                request_type=_enum(RequestType, data.get("request_type"), "request type"),
                start_date=parse_date(data.get("start_date")),
                end_date=parse_date(data.get("end_date")),
                total_days=total_days if total_days is not None else 0,
                reason=data.get("reason") or "",
                hours_per_day=_optional_float(data, "hours_per_day"),
                paid_days=_optional_float(data, "paid_days"),
                unpaid_days=_optional_float(data, "unpaid_days"),
                unpaid_comments=data.get("unpaid_comments"),
                shift_details=data.get("shift_details"),
                new_shift_id=_optional_int(data, "new_shift_id"),
            )
        )
        return jsonify(request_to_dict(created)), 201

    @app.route("/api/absence-requests/<int:request_id>", methods=["GET"], endpoint="get_absence_request")
    @login_required
    @json_errors
    def get_absence_request(request_id: int):
        return jsonify(request_to_dict(service.get_for_reader(request_id, current_user_id())))

    @app.route(
        "/api/absence-requests/<int:request_id>/approve", methods=["POST"], endpoint="approve_absence_request"
    )
    @login_required
    @json_errors
    def approve_absence_request(request_id: int):
        data = request.get_json(silent=True) or {}
        updated = service.approve(
            request_id=request_id,
            approver_id=current_user_id(),
            stage=_enum(ApprovalStage, data.get("stage"), "stage"),
            comments=data.get("comments") or "",
        )
        return jsonify(request_to_dict(updated))

    @app.route(
        "/api/absence-requests/<int:request_id>/decline", methods=["POST"], endpoint="decline_absence_request"
    )
    @login_required
    @json_errors
    def decline_absence_request(request_id: int):
        data = request.get_json(silent=True) or {}
        updated = service.decline(
            request_id=request_id,
            approver_id=current_user_id(),
            stage=_enum(ApprovalStage, data.get("stage"), "stage"),
            comments=data.get("comments") or "",
        )
        return jsonify(request_to_dict(updated))

    @app.route(
        "/api/absence-requests/<int:request_id>/archive", methods=["POST"], endpoint="archive_absence_request"
    )
    @login_required
    @json_errors
    def archive_absence_request(request_id: int):
        archived = service.archive(request_id=request_id, employee_id=current_user_id())
        return jsonify(request_to_dict(archived))

    @app.route("/api/absence-requests/<int:request_id>", methods=["DELETE"], endpoint="delete_absence_request")
    @login_required
    @json_errors
    def delete_absence_request(request_id: int):
        service.delete(request_id=request_id, employee_id=current_user_id())
        return "", 204

    @app.route(
        "/api/absence-requests/<int:request_id>/history", methods=["GET"], endpoint="absence_request_history"
    )
    @login_required
    @json_errors
    def absence_request_history(request_id: int):
        service.get_for_reader(request_id, current_user_id())
        return jsonify([history_to_dict(h) for h in service.approval_history(request_id)])
