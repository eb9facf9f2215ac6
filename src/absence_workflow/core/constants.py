"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

DEFAULT_PAYROLL_TIMEZONE = "America/Mexico_City"
PAYROLL_CUTOFF_WEEKDAY = 4  # Friday
PAYROLL_CUTOFF_ROLLOVER_HOUR = 23

DEFAULT_ESCALATION_IDLE_HOURS = 24
DEFAULT_ESCALATION_INTERVAL_SECONDS = 3600
ESCALATION_REASON = "idle past threshold"

DEFAULT_WORK_HOURS_PER_DAY = 8
