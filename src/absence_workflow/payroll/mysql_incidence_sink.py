from __future__ import annotations

from decimal import Decimal

from ..common.datetime_utils import to_db, utc_now
from ..requests.model import AbsenceRequest
from ..requests.mysql_request_repository import MySQLWorkflowTransaction
from .incidence_sink import IncidenceSink
from .incidence_types import incidence_kind


class MySQLIncidenceSink(IncidenceSink):
    """Writes incidences through the caller's open transaction."""

    def create_placeholder(
        self,
        tx: MySQLWorkflowTransaction,
        *,
        request: AbsenceRequest,
        payroll_employee_id: int,
    ) -> int:
        kind = incidence_kind(request.request_type)
        tx.cursor.execute(
            """
            INSERT INTO incidences(
                employee_id, absence_request_id, type_name, category, effect_type,
                start_date, end_date, quantity, calculated_amount, comments, status,
                late_approval_flag, excluded_from_payroll
            )
            VALUES(%s,%s,%s,%s,%s,%s,%s,%s,0,%s,'pending',%s,%s)
            """,
            (
                int(payroll_employee_id),
                int(request.request_id),
                kind.name,
                kind.category,
                kind.effect_type,
                request.start_date,
                request.end_date,
                request.total_days,
                request.reason,
                int(request.late_approval_flag),
                int(request.excluded_from_payroll),
            ),
        )
        return int(tx.cursor.lastrowid)

    def finalize(
        self,
        tx: MySQLWorkflowTransaction,
        *,
        incidence_id: int,
        amount: Decimal,
        late: bool,
        excluded: bool,
        approved_by: int,
    ) -> None:
        tx.cursor.execute(
            """
            UPDATE incidences
            SET status='approved', calculated_amount=%s, late_approval_flag=%s,
                excluded_from_payroll=%s, approved_by=%s, approved_at=%s
            WHERE incidence_id=%s
            """,
            (amount, int(late), int(excluded), int(approved_by), to_db(utc_now()), int(incidence_id)),
        )

    def update_flags(self, tx: MySQLWorkflowTransaction, *, incidence_id: int, late: bool, excluded: bool) -> None:
        tx.cursor.execute(
            "UPDATE incidences SET late_approval_flag=%s, excluded_from_payroll=%s WHERE incidence_id=%s",
            (int(late), int(excluded), int(incidence_id)),
        )

    def discard(self, tx: MySQLWorkflowTransaction, *, incidence_id: int) -> None:
        tx.cursor.execute(
            "DELETE FROM incidences WHERE incidence_id=%s AND status='pending'",
            (int(incidence_id),),
        )
