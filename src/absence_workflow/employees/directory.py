from __future__ import annotations

from typing import Iterable, Optional, Protocol, Sequence

from ..core.enums import Role
from .model import EmployeeProfile


class EmployeeDirectory(Protocol):
    """Read-only port onto employee/organization master data.

    Note (DIP): the workflow depends on this interface, not on a concrete DB.
    """

    def get_employee(self, user_id: int) -> Optional[EmployeeProfile]:
        raise NotImplementedError

    def get_user_role(self, user_id: int) -> Optional[Role]:
        """Role of an active user, or None when the user cannot be resolved."""

        raise NotImplementedError

    def users_with_roles(self, roles: Iterable[Role]) -> Sequence[int]:
        raise NotImplementedError
