from __future__ import annotations

from datetime import date
from typing import Protocol

from ..requests.repository import WorkflowTransaction


class ShiftExceptionSink(Protocol):
    def upsert(self, tx: WorkflowTransaction, *, employee_id: int, work_date: date, shift_id: int, created_by: int) -> int:
        """Create or update the one-day shift override for employee+date.

        Returns exception_id.
        """

        raise NotImplementedError
