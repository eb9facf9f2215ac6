from __future__ import annotations

from abc import ABC, abstractmethod
from decimal import ROUND_HALF_UP, Decimal

from ...requests.model import AbsenceRequest

CENTS = Decimal("0.01")


class IncidenceAmountCalculator(ABC):
    """Calculator interface (Strategy Pattern for incidence amounts)."""

    @abstractmethod
    def amount(self, request: AbsenceRequest, *, daily_salary: Decimal) -> Decimal:
        raise NotImplementedError

    @staticmethod
    def _round(value: Decimal) -> Decimal:
        return value.quantize(CENTS, rounding=ROUND_HALF_UP)
