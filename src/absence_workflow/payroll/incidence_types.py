from __future__ import annotations

from dataclasses import dataclass

from ..core.enums import RequestType
from .calculator.base import IncidenceAmountCalculator
from .calculator.daily_rate import DailyRateCalculator
from .calculator.hourly_rate import HourlyRateCalculator


@dataclass(frozen=True)
class IncidenceKind:
    name: str
    category: str
    effect_type: str
    hourly: bool = False


# Request type -> incidence row. Late entry, early exit and time-for-time passes
# are priced at the hourly rate; every other type uses the daily rate.
_KINDS = {
    RequestType.VACATION: IncidenceKind("Vacation", "vacation", "neutral"),
    RequestType.SICK_LEAVE: IncidenceKind("Sick leave", "sick", "neutral"),
    RequestType.PAID_LEAVE: IncidenceKind("Paid leave", "absence", "neutral"),
    RequestType.UNPAID_LEAVE: IncidenceKind("Unpaid leave", "absence", "negative"),
    RequestType.LATE_ENTRY: IncidenceKind("Late entry pass", "delay", "neutral", hourly=True),
    RequestType.EARLY_EXIT: IncidenceKind("Early exit pass", "delay", "neutral", hourly=True),
    RequestType.SHIFT_CHANGE: IncidenceKind("Shift change", "other", "neutral"),
    RequestType.TIME_FOR_TIME: IncidenceKind("Time for time", "other", "neutral", hourly=True),
    RequestType.PERSONAL: IncidenceKind("Personal leave", "absence", "neutral"),
    RequestType.OTHER: IncidenceKind("Other leave", "absence", "neutral"),
}


def incidence_kind(request_type: RequestType) -> IncidenceKind:
    return _KINDS[request_type]


class IncidenceCalculatorFactory:
    """Factory Pattern: pick the amount strategy for a request type."""

    def __init__(self):
        self._daily = DailyRateCalculator()
        self._hourly = HourlyRateCalculator()

    def for_request_type(self, request_type: RequestType) -> IncidenceAmountCalculator:
        return self._hourly if incidence_kind(request_type).hourly else self._daily
