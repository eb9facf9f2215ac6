from __future__ import annotations

from typing import Iterable, Optional, Sequence

from ..core.enums import CollarType, Role
from ..database.connection import DatabaseConnection
from ..database.mysql_base import as_decimal, db_cursor, fetchall, fetchone
from .directory import EmployeeDirectory
from .model import EmployeeProfile, WorkerClassification


class MySQLEmployeeDirectory(EmployeeDirectory):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_employee(self, user_id: int) -> Optional[EmployeeProfile]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT u.user_id, u.full_name, u.supervisor_id, u.general_manager_id, u.employee_id,
                       e.collar_type, e.is_unionized, e.daily_salary
                FROM users u
                LEFT JOIN employees e ON e.employee_id = u.employee_id
                WHERE u.user_id=%s AND u.is_active=1
                """,
                (int(user_id),),
            )
            row = fetchone(cur)
            if not row:
                return None
            return EmployeeProfile(
                user_id=int(row["user_id"]),
                full_name=row["full_name"],
                classification=WorkerClassification(
                    collar_type=CollarType(row.get("collar_type") or CollarType.WHITE_COLLAR.value),
                    is_unionized=bool(row.get("is_unionized")),
                ),
                supervisor_id=row.get("supervisor_id"),
                general_manager_id=row.get("general_manager_id"),
                payroll_employee_id=row.get("employee_id"),
                daily_salary=as_decimal(row.get("daily_salary")) or as_decimal(0),
            )

    def get_user_role(self, user_id: int) -> Optional[Role]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT role FROM users WHERE user_id=%s AND is_active=1",
                (int(user_id),),
            )
            row = fetchone(cur)
            if not row:
                return None
            try:
                return Role(row["role"])
            except ValueError:
                return None

    def users_with_roles(self, roles: Iterable[Role]) -> Sequence[int]:
        values = sorted({Role(r).value for r in roles})
        if not values:
            return []
        placeholders = ",".join(["%s"] * len(values))
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT user_id
                FROM users
                WHERE is_active=1 AND role IN ({placeholders})
                ORDER BY user_id
                """,
                tuple(values),
            )
            return [int(r["user_id"]) for r in fetchall(cur)]
