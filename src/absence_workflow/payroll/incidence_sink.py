from __future__ import annotations

from decimal import Decimal
from typing import Protocol

from ..requests.model import AbsenceRequest
from ..requests.repository import WorkflowTransaction


class IncidenceSink(Protocol):
    """Port onto the payroll incidence store.

    Calls take the open workflow transaction so the placeholder is created
    atomically with its request.
    """

    def create_placeholder(
        self,
        tx: WorkflowTransaction,
        *,
        request: AbsenceRequest,
        payroll_employee_id: int,
    ) -> int:
        """Create a 'pending' incidence linked to the request; returns its id."""

        raise NotImplementedError

    def finalize(
        self,
        tx: WorkflowTransaction,
        *,
        incidence_id: int,
        amount: Decimal,
        late: bool,
        excluded: bool,
        approved_by: int,
    ) -> None:
        raise NotImplementedError

    def update_flags(self, tx: WorkflowTransaction, *, incidence_id: int, late: bool, excluded: bool) -> None:
        raise NotImplementedError

    def discard(self, tx: WorkflowTransaction, *, incidence_id: int) -> None:
        raise NotImplementedError
