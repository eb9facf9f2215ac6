from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from ..core.enums import CollarType


@dataclass(frozen=True)
class WorkerClassification:
    """Collar type plus union membership, used to route HR approval."""

    collar_type: CollarType = CollarType.WHITE_COLLAR
    is_unionized: bool = False

    @property
    def is_blue_gray(self) -> bool:
        return self.is_unionized or self.collar_type in (CollarType.BLUE_COLLAR, CollarType.GRAY_COLLAR)


@dataclass(frozen=True)
class EmployeeProfile:
    """Read-only employee context from the directory.

    Note: `payroll_employee_id` is the identity incidences are booked against;
    users without one cannot file requests.
    """

    user_id: int
    full_name: str
    classification: WorkerClassification
    supervisor_id: Optional[int]
    general_manager_id: Optional[int]
    payroll_employee_id: Optional[int]
    daily_salary: Decimal = Decimal("0")
