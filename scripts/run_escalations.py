"""Run the escalation sweep outside the web process (cron, systemd timer).

One sweep by default; `--loop` keeps running at ESCALATION_INTERVAL_SECONDS.
"""

from __future__ import annotations

import argparse
import importlib
import logging
import signal
import threading

from dotenv import load_dotenv

from absence_workflow.config import get_settings_module
from absence_workflow.container import build_container
from absence_workflow.main import configure_logging

logger = logging.getLogger("run_escalations")


def main() -> None:
    parser = argparse.ArgumentParser(description="Escalate absence requests idle past the threshold.")
    parser.add_argument("--loop", action="store_true", help="keep running on the configured interval")
    args = parser.parse_args()

    load_dotenv(override=False)
    settings = importlib.import_module(get_settings_module())
    configure_logging(getattr(settings, "LOG_LEVEL", "INFO"))

    container = build_container(
        db_config=settings.DB_CONFIG,
        payroll_timezone=getattr(settings, "PAYROLL_TIMEZONE", "America/Mexico_City"),
        escalation_idle_hours=float(getattr(settings, "ESCALATION_IDLE_HOURS", 24)),
        escalation_interval_seconds=float(getattr(settings, "ESCALATION_INTERVAL_SECONDS", 3600)),
    )

    if not args.loop:
        report = container.escalation_service.process_pending()
        if report.failed:
            raise SystemExit(1)
        return

    stopped = threading.Event()
    signal.signal(signal.SIGTERM, lambda *_: stopped.set())
    scheduler = container.escalation_scheduler
    scheduler.start()
    try:
        while not stopped.wait(1.0):
            pass
    except KeyboardInterrupt:
        logger.info("Interrupted")
    finally:
        scheduler.stop()


if __name__ == "__main__":
    main()
