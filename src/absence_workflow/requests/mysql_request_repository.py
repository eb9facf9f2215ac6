from __future__ import annotations

from contextlib import contextmanager
from datetime import datetime
from typing import Any, Dict, Iterator, Optional, Sequence

from ..common.datetime_utils import from_db, to_db
from ..core.enums import ApprovalAction, ApprovalStage, RequestStatus, RequestType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, savepoint
from .model import AbsenceRequest, ApprovalHistoryEntry, EscalationLogEntry
from .repository import WorkflowStore, WorkflowTransaction

_REQUEST_COLUMNS = """
    request_id, employee_id, request_type, start_date, end_date, total_days, reason,
    hours_per_day, paid_days, unpaid_days, unpaid_comments, shift_details, new_shift_id,
    status, current_stage, last_action_at, payroll_cutoff_date,
    late_approval_flag, excluded_from_payroll, escalation_count, is_escalated,
    incidence_id, created_at
"""


def _opt_float(value: Any) -> Optional[float]:
    return None if value is None else float(value)


def _opt_int(value: Any) -> Optional[int]:
    return None if value is None else int(value)


def _row_to_request(r: Dict[str, Any]) -> AbsenceRequest:
    return AbsenceRequest(
        request_id=int(r["request_id"]),
        employee_id=int(r["employee_id"]),
        request_type=RequestType(r["request_type"]),
        start_date=r["start_date"],
        end_date=r["end_date"],
        total_days=float(r["total_days"]),
        reason=r["reason"],
        hours_per_day=_opt_float(r.get("hours_per_day")),
        paid_days=_opt_float(r.get("paid_days")),
        unpaid_days=_opt_float(r.get("unpaid_days")),
        unpaid_comments=r.get("unpaid_comments"),
        shift_details=r.get("shift_details"),
        new_shift_id=_opt_int(r.get("new_shift_id")),
        status=RequestStatus(r["status"]),
        current_stage=ApprovalStage(r["current_stage"]),
        last_action_at=from_db(r["last_action_at"]),
        payroll_cutoff_date=from_db(r.get("payroll_cutoff_date")),
        late_approval_flag=bool(r.get("late_approval_flag")),
        excluded_from_payroll=bool(r.get("excluded_from_payroll")),
        escalation_count=int(r.get("escalation_count") or 0),
        is_escalated=bool(r.get("is_escalated")),
        incidence_id=_opt_int(r.get("incidence_id")),
        created_at=from_db(r.get("created_at")),
    )


def _row_to_history(r: Dict[str, Any]) -> ApprovalHistoryEntry:
    return ApprovalHistoryEntry(
        entry_id=int(r["entry_id"]),
        request_id=int(r["request_id"]),
        approver_id=int(r["approver_id"]),
        stage=ApprovalStage(r["stage"]),
        action=ApprovalAction(r["action"]),
        comments=r.get("comments"),
        auto_approved=bool(r.get("auto_approved")),
        created_at=from_db(r["created_at"]),
    )


def _row_to_escalation(r: Dict[str, Any]) -> EscalationLogEntry:
    return EscalationLogEntry(
        entry_id=int(r["entry_id"]),
        request_id=int(r["request_id"]),
        from_stage=ApprovalStage(r["from_stage"]),
        to_stage=ApprovalStage(r["to_stage"]),
        escalated_at=from_db(r["escalated_at"]),
        reason=r["reason"],
    )


def _select_request(cur, request_id: int, *, for_update: bool = False) -> Optional[AbsenceRequest]:
    lock = " FOR UPDATE" if for_update else ""
    cur.execute(
        f"SELECT {_REQUEST_COLUMNS} FROM absence_requests WHERE request_id=%s{lock}",
        (int(request_id),),
    )
    r = fetchone(cur)
    return _row_to_request(r) if r else None


class MySQLWorkflowTransaction(WorkflowTransaction):
    """Unit of work bound to one open cursor.

    Note: `cursor` is public so collaborating MySQL sinks write through the
    same connection and commit together with the request.
    """

    def __init__(self, cursor):
        self.cursor = cursor

    def get_request(self, request_id: int, *, for_update: bool = False) -> Optional[AbsenceRequest]:
        return _select_request(self.cursor, request_id, for_update=for_update)

    def insert_request(self, request: AbsenceRequest) -> int:
        self.cursor.execute(
            """
            INSERT INTO absence_requests(
                employee_id, request_type, start_date, end_date, total_days, reason,
                hours_per_day, paid_days, unpaid_days, unpaid_comments, shift_details, new_shift_id,
                status, current_stage, last_action_at, payroll_cutoff_date,
                late_approval_flag, excluded_from_payroll, escalation_count, is_escalated,
                incidence_id, created_at
            )
            VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
            """,
            (
                int(request.employee_id),
                request.request_type.value,
                request.start_date,
                request.end_date,
                request.total_days,
                request.reason,
                request.hours_per_day,
                request.paid_days,
                request.unpaid_days,
                request.unpaid_comments,
                request.shift_details,
                request.new_shift_id,
                request.status.value,
                request.current_stage.value,
                to_db(request.last_action_at),
                to_db(request.payroll_cutoff_date),
                int(request.late_approval_flag),
                int(request.excluded_from_payroll),
                int(request.escalation_count),
                int(request.is_escalated),
                request.incidence_id,
                to_db(request.created_at or request.last_action_at),
            ),
        )
        return int(self.cursor.lastrowid)

    def save_request(self, request: AbsenceRequest) -> None:
        # Only workflow-owned columns; the filed data never changes.
        self.cursor.execute(
            """
            UPDATE absence_requests
            SET status=%s, current_stage=%s, last_action_at=%s, payroll_cutoff_date=%s,
                late_approval_flag=%s, excluded_from_payroll=%s,
                escalation_count=%s, is_escalated=%s, incidence_id=%s
            WHERE request_id=%s
            """,
            (
                request.status.value,
                request.current_stage.value,
                to_db(request.last_action_at),
                to_db(request.payroll_cutoff_date),
                int(request.late_approval_flag),
                int(request.excluded_from_payroll),
                int(request.escalation_count),
                int(request.is_escalated),
                request.incidence_id,
                int(request.request_id),
            ),
        )

    def delete_request(self, request_id: int) -> None:
        self.cursor.execute("DELETE FROM absence_requests WHERE request_id=%s", (int(request_id),))

    def append_history(self, entry: ApprovalHistoryEntry) -> int:
        self.cursor.execute(
            """
            INSERT INTO approval_history(request_id, approver_id, stage, action, comments, auto_approved, created_at)
            VALUES(%s,%s,%s,%s,%s,%s,%s)
            """,
            (
                int(entry.request_id),
                int(entry.approver_id),
                entry.stage.value,
                entry.action.value,
                entry.comments,
                int(entry.auto_approved),
                to_db(entry.created_at),
            ),
        )
        return int(self.cursor.lastrowid)

    def append_escalation(self, entry: EscalationLogEntry) -> int:
        self.cursor.execute(
            """
            INSERT INTO escalation_logs(request_id, from_stage, to_stage, escalated_at, reason)
            VALUES(%s,%s,%s,%s,%s)
            """,
            (
                int(entry.request_id),
                entry.from_stage.value,
                entry.to_stage.value,
                to_db(entry.escalated_at),
                entry.reason,
            ),
        )
        return int(self.cursor.lastrowid)

    def savepoint(self, name: str):
        return savepoint(self.cursor, name)


class MySQLWorkflowStore(WorkflowStore):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    @contextmanager
    def transaction(self) -> Iterator[MySQLWorkflowTransaction]:
        with db_cursor(self._conn_factory) as (_, cur):
            yield MySQLWorkflowTransaction(cur)

    def get_request(self, request_id: int) -> Optional[AbsenceRequest]:
        with db_cursor(self._conn_factory) as (_, cur):
            return _select_request(cur, request_id)

    def find_idle_pending(
        self, *, idle_since: datetime, after_id: int = 0, limit: int = 500
    ) -> Sequence[AbsenceRequest]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_REQUEST_COLUMNS}
                FROM absence_requests
                WHERE status=%s AND current_stage NOT IN (%s,%s,%s)
                  AND last_action_at < %s AND request_id > %s
                ORDER BY request_id ASC
                LIMIT %s
                """,
                (
                    RequestStatus.PENDING.value,
                    ApprovalStage.PAYROLL.value,
                    ApprovalStage.COMPLETED.value,
                    ApprovalStage.DECLINED.value,
                    to_db(idle_since),
                    int(after_id),
                    int(limit),
                ),
            )
            return [_row_to_request(r) for r in fetchall(cur)]

    def list_history(self, request_id: int) -> Sequence[ApprovalHistoryEntry]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT entry_id, request_id, approver_id, stage, action, comments, auto_approved, created_at
                FROM approval_history
                WHERE request_id=%s
                ORDER BY created_at ASC, entry_id ASC
                """,
                (int(request_id),),
            )
            return [_row_to_history(r) for r in fetchall(cur)]

    def list_escalations(self, request_id: int) -> Sequence[EscalationLogEntry]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT entry_id, request_id, from_stage, to_stage, escalated_at, reason
                FROM escalation_logs
                WHERE request_id=%s
                ORDER BY escalated_at ASC, entry_id ASC
                """,
                (int(request_id),),
            )
            return [_row_to_escalation(r) for r in fetchall(cur)]
