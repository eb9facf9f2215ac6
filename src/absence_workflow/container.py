from __future__ import annotations

from dataclasses import dataclass

from .core.constants import (
    DEFAULT_ESCALATION_IDLE_HOURS,
    DEFAULT_ESCALATION_INTERVAL_SECONDS,
    DEFAULT_PAYROLL_TIMEZONE,
)
from .database.connection import DatabaseConnection
from .employees.mysql_directory import MySQLEmployeeDirectory
from .escalation.scheduler import EscalationScheduler, SchedulerConfig
from .escalation.service import EscalationService
from .notifications.mysql_notification_sink import MySQLNotificationSink
from .payroll.cutoff import PayrollCutoffCalculator
from .payroll.incidence_types import IncidenceCalculatorFactory
from .payroll.mysql_incidence_sink import MySQLIncidenceSink
from .requests.mysql_request_repository import MySQLWorkflowStore
from .requests.service import AbsenceRequestService
from .shifts.mysql_shift_exception_repository import MySQLShiftExceptionRepository


@dataclass(frozen=True)
class Container:
    conn: DatabaseConnection

    store: MySQLWorkflowStore
    directory: MySQLEmployeeDirectory
    notifications: MySQLNotificationSink
    incidences: MySQLIncidenceSink
    shift_exceptions: MySQLShiftExceptionRepository

    request_service: AbsenceRequestService
    escalation_service: EscalationService
    escalation_scheduler: EscalationScheduler


def build_container(
    *,
    db_config: dict,
    payroll_timezone: str = DEFAULT_PAYROLL_TIMEZONE,
    escalation_idle_hours: float = DEFAULT_ESCALATION_IDLE_HOURS,
    escalation_interval_seconds: float = DEFAULT_ESCALATION_INTERVAL_SECONDS,
) -> Container:
    conn = DatabaseConnection.from_dict(db_config)

    store = MySQLWorkflowStore(conn)
    directory = MySQLEmployeeDirectory(conn)
    notifications = MySQLNotificationSink(conn)
    incidences = MySQLIncidenceSink()
    shift_exceptions = MySQLShiftExceptionRepository()

    request_service = AbsenceRequestService(
        store,
        directory,
        notifications,
        incidences,
        shift_exceptions,
        cutoff_calculator=PayrollCutoffCalculator(payroll_timezone),
        calculator_factory=IncidenceCalculatorFactory(),
    )
    escalation_service = EscalationService(
        store,
        directory,
        notifications,
        idle_hours=escalation_idle_hours,
    )
    escalation_scheduler = EscalationScheduler(
        escalation_service,
        SchedulerConfig(interval_seconds=escalation_interval_seconds),
    )

    return Container(
        conn=conn,
        store=store,
        directory=directory,
        notifications=notifications,
        incidences=incidences,
        shift_exceptions=shift_exceptions,
        request_service=request_service,
        escalation_service=escalation_service,
        escalation_scheduler=escalation_scheduler,
    )
