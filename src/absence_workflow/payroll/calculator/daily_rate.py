from __future__ import annotations

from decimal import Decimal

from ...requests.model import AbsenceRequest
from .base import IncidenceAmountCalculator


class DailyRateCalculator(IncidenceAmountCalculator):
    """daily_salary * total_days."""

    def amount(self, request: AbsenceRequest, *, daily_salary: Decimal) -> Decimal:
        return self._round(Decimal(daily_salary) * Decimal(str(request.total_days)))
