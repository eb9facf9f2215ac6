from __future__ import annotations

import logging
from typing import Callable, Iterable, List, Optional

from ..core.enums import Role
from ..employees.directory import EmployeeDirectory
from .sink import NotificationSink

logger = logging.getLogger(__name__)


class NotificationOutbox:
    """Notifications collected during a unit of work, delivered after commit.

    Nothing is sent for a transition that rolled back, and a failed delivery
    is logged and skipped; it never reaches the caller.
    """

    def __init__(self, sink: NotificationSink, directory: EmployeeDirectory):
        self._sink = sink
        self._directory = directory
        self._pending: List[Callable[[], None]] = []

    def __len__(self) -> int:
        return len(self._pending)

    def bell(self, user_id: int, request_id: int, message: str) -> None:
        self._pending.append(lambda: self._sink.notify(user_id, request_id, message))

    def bell_and_inbox(self, user_id: int, request_id: int, subject: str, body: str) -> None:
        self.bell(user_id, request_id, subject)
        self._pending.append(lambda: self._sink.send_message(user_id, subject, body))

    def role_group(
        self,
        roles: Iterable[Role],
        request_id: int,
        subject: str,
        *,
        body: Optional[str] = None,
    ) -> None:
        """Bell every active user holding one of `roles`; inbox too when `body` is given."""

        roles = frozenset(roles)

        def deliver() -> None:
            for user_id in self._directory.users_with_roles(roles):
                self._deliver(lambda uid=user_id: self._sink.notify(uid, request_id, subject))
                if body is not None:
                    self._deliver(lambda uid=user_id: self._sink.send_message(uid, subject, body))

        self._pending.append(deliver)

    def flush(self) -> None:
        pending, self._pending = self._pending, []
        for send in pending:
            self._deliver(send)

    @staticmethod
    def _deliver(send: Callable[[], None]) -> None:
        try:
            send()
        except Exception as exc:
            logger.warning("Notification dispatch failed: %s", exc)
