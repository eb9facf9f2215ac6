"""Absence Workflow package.

Multi-stage approval of employee absence requests, organized by feature
modules (requests, workflow, escalation, payroll, ...) with a thin Flask
controller layer and service/repository layers behind narrow ports.
"""
