from __future__ import annotations

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor
from .sink import NotificationSink

_TITLE = "Absence request"


class MySQLNotificationSink(NotificationSink):
    """Bell rows and inbox messages.

    Note: Each delivery commits on its own connection; it runs after the
    workflow transaction, never inside it.
    """

    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def notify(self, user_id: int, request_id: int, message: str) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO notifications(target_user_id, resource_type, resource_id, title, message)
                VALUES(%s,%s,%s,%s,%s)
                """,
                (int(user_id), "absence_request", int(request_id), _TITLE, message),
            )

    def send_message(self, user_id: int, subject: str, body: str) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "INSERT INTO messages(recipient_id, subject, body, status) VALUES(%s,%s,%s,%s)",
                (int(user_id), subject[:255], body, "unread"),
            )
