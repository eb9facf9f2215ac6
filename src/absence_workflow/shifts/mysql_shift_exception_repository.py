from __future__ import annotations

from datetime import date

from ..database.mysql_base import fetchone
from ..requests.mysql_request_repository import MySQLWorkflowTransaction
from .exception_sink import ShiftExceptionSink


class MySQLShiftExceptionRepository(ShiftExceptionSink):
    def upsert(
        self,
        tx: MySQLWorkflowTransaction,
        *,
        employee_id: int,
        work_date: date,
        shift_id: int,
        created_by: int,
    ) -> int:
        cur = tx.cursor
        cur.execute(
            "SELECT exception_id FROM shift_exceptions WHERE employee_id=%s AND work_date=%s FOR UPDATE",
            (int(employee_id), work_date),
        )
        row = fetchone(cur)
        if row:
            cur.execute(
                "UPDATE shift_exceptions SET shift_id=%s, created_by=%s WHERE exception_id=%s",
                (int(shift_id), int(created_by), int(row["exception_id"])),
            )
            return int(row["exception_id"])

        cur.execute(
            "INSERT INTO shift_exceptions(employee_id, work_date, shift_id, created_by) VALUES(%s,%s,%s,%s)",
            (int(employee_id), work_date, int(shift_id), int(created_by)),
        )
        return int(cur.lastrowid)
