from __future__ import annotations

import os


def get_settings_module() -> str:
    """Settings module for APP_ENV (default: development)."""

    env = os.getenv("APP_ENV", "development").lower()

    if env in {"prod", "production"}:
        return "absence_workflow.config.production"

    if env in {"test", "testing"}:
        return "absence_workflow.config.testing"

    return "absence_workflow.config.development"
