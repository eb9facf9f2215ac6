import os

SECRET_KEY = os.getenv("SECRET_KEY", "please-set-SECRET_KEY")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "absence_workflow"),
}

DEBUG = False
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))

PAYROLL_TIMEZONE = os.getenv("PAYROLL_TIMEZONE", "America/Mexico_City")

ESCALATION_IDLE_HOURS = float(os.getenv("ESCALATION_IDLE_HOURS", "24"))
ESCALATION_INTERVAL_SECONDS = float(os.getenv("ESCALATION_INTERVAL_SECONDS", "3600"))
# The sweep runs in-process unless it is scheduled externally (scripts/run_escalations.py).
ESCALATION_ENABLED = bool(int(os.getenv("ESCALATION_ENABLED", "1")))
