from __future__ import annotations

from datetime import datetime, time, timedelta

import pytz

from ..common.datetime_utils import as_utc
from ..core.constants import DEFAULT_PAYROLL_TIMEZONE, PAYROLL_CUTOFF_ROLLOVER_HOUR, PAYROLL_CUTOFF_WEEKDAY
from ..employees.model import WorkerClassification

_CUTOFF_TIME = time(23, 59, 59)


class PayrollCutoffCalculator:
    """Next payroll cutoff (Friday 23:59:59, local payroll timezone).

    Blue/gray/union workers are paid weekly, so every Friday is a cutoff.
    White-collar workers are paid biweekly: a Friday falling in an even ISO
    week is skipped in favour of the one after it. From 23:00 on a Friday
    the cutoff rolls to the next Friday.
    """

    def __init__(self, timezone_name: str = DEFAULT_PAYROLL_TIMEZONE):
        self._tz = pytz.timezone(timezone_name)

    @property
    def timezone(self):
        return self._tz

    def compute(self, reference: datetime, classification: WorkerClassification) -> datetime:
        local = as_utc(reference).astimezone(self._tz)

        days_until_friday = (PAYROLL_CUTOFF_WEEKDAY - local.weekday()) % 7
        if days_until_friday == 0 and local.hour >= PAYROLL_CUTOFF_ROLLOVER_HOUR:
            days_until_friday = 7
        friday = local.date() + timedelta(days=days_until_friday)

        if not classification.is_blue_gray and friday.isocalendar()[1] % 2 == 0:
            friday += timedelta(days=7)

        return self._tz.localize(datetime.combine(friday, _CUTOFF_TIME))

    @staticmethod
    def is_late(decided_at: datetime, cutoff: datetime) -> bool:
        return as_utc(decided_at) > as_utc(cutoff)
