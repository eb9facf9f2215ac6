from __future__ import annotations

from typing import Protocol


class NotificationSink(Protocol):
    """Fire-and-forget delivery; return values are never consumed."""

    def notify(self, user_id: int, request_id: int, message: str) -> None:
        """Bell notification."""

        raise NotImplementedError

    def send_message(self, user_id: int, subject: str, body: str) -> None:
        """Inbox message."""

        raise NotImplementedError
