from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import Optional

from ..core.constants import DEFAULT_ESCALATION_INTERVAL_SECONDS
from .service import EscalationReport, EscalationService

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SchedulerConfig:
    interval_seconds: float = DEFAULT_ESCALATION_INTERVAL_SECONDS
    run_on_start: bool = True
    thread_name: str = "escalation-scheduler"


class EscalationScheduler:
    """Runs the escalation sweep on a daemon thread at a fixed interval.

    A sweep that raises is logged and the loop keeps going.
    """

    def __init__(self, service: EscalationService, config: Optional[SchedulerConfig] = None):
        self._service = service
        self._config = config or SchedulerConfig()
        self._stop = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self._lock = threading.Lock()
        self.last_report: Optional[EscalationReport] = None

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        with self._lock:
            if self.is_running:
                return
            self._stop.clear()
            self._thread = threading.Thread(target=self._loop, name=self._config.thread_name, daemon=True)
            self._thread.start()
        logger.info("Escalation scheduler started (every %ss)", self._config.interval_seconds)

    def stop(self, timeout: Optional[float] = 5.0) -> None:
        self._stop.set()
        with self._lock:
            thread, self._thread = self._thread, None
        if thread is not None:
            thread.join(timeout)
            logger.info("Escalation scheduler stopped")

    def run_once(self) -> Optional[EscalationReport]:
        try:
            self.last_report = self._service.process_pending()
        except Exception:
            logger.exception("Escalation sweep failed")
            return None
        return self.last_report

    def _loop(self) -> None:
        if self._config.run_on_start:
            self.run_once()
        while not self._stop.wait(self._config.interval_seconds):
            self.run_once()
