from __future__ import annotations

from decimal import Decimal

from ...core.constants import DEFAULT_WORK_HOURS_PER_DAY
from ...requests.model import AbsenceRequest
from .base import IncidenceAmountCalculator


class HourlyRateCalculator(IncidenceAmountCalculator):
    """(daily_salary / 8) * hours_per_day * total_days; hours default to a full day."""

    def amount(self, request: AbsenceRequest, *, daily_salary: Decimal) -> Decimal:
        hours = request.hours_per_day if request.hours_per_day is not None else DEFAULT_WORK_HOURS_PER_DAY
        hourly = Decimal(daily_salary) / Decimal(DEFAULT_WORK_HOURS_PER_DAY)
        return self._round(hourly * Decimal(str(hours)) * Decimal(str(request.total_days)))
