import os

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "absence_workflow"),
}

DEBUG = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")

# If enabled, app will apply schema.sql on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "1")))

PAYROLL_TIMEZONE = os.getenv("PAYROLL_TIMEZONE", "America/Mexico_City")

ESCALATION_IDLE_HOURS = float(os.getenv("ESCALATION_IDLE_HOURS", "24"))
ESCALATION_INTERVAL_SECONDS = float(os.getenv("ESCALATION_INTERVAL_SECONDS", "3600"))
ESCALATION_ENABLED = bool(int(os.getenv("ESCALATION_ENABLED", "0")))
