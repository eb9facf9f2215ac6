from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """User roles used for stage authorization."""

    ADMIN = "admin"
    HR = "hr"
    ACCOUNTANT = "accountant"
    PAYROLL_STAFF = "payroll_staff"
    VIEWER = "viewer"
    SUPERVISOR = "supervisor"
    MANAGER = "manager"
    EMPLOYEE = "employee"
    HR_AND_PR = "hr_and_pr"
    SUP_AND_GM = "sup_and_gm"
    HR_BLUE_GRAY = "hr_blue_gray"
    HR_WHITE = "hr_white"


class CollarType(str, Enum):
    WHITE_COLLAR = "white_collar"
    BLUE_COLLAR = "blue_collar"
    GRAY_COLLAR = "gray_collar"


class RequestType(str, Enum):
    VACATION = "VACATION"
    SICK_LEAVE = "SICK_LEAVE"
    PAID_LEAVE = "PAID_LEAVE"
    UNPAID_LEAVE = "UNPAID_LEAVE"
    LATE_ENTRY = "LATE_ENTRY"
    EARLY_EXIT = "EARLY_EXIT"
    SHIFT_CHANGE = "SHIFT_CHANGE"
    TIME_FOR_TIME = "TIME_FOR_TIME"
    PERSONAL = "PERSONAL"
    OTHER = "OTHER"


class RequestStatus(str, Enum):
    """Lifecycle status of an absence request."""

    PENDING = "PENDING"
    APPROVED = "APPROVED"
    DECLINED = "DECLINED"
    ARCHIVED = "ARCHIVED"


class ApprovalStage(str, Enum):
    """Approval stages, in workflow order."""

    SUPERVISOR = "SUPERVISOR"
    MANAGER = "MANAGER"
    HR = "HR"
    HR_BLUE_GRAY = "HR_BLUE_GRAY"
    GENERAL_MANAGER = "GENERAL_MANAGER"
    PAYROLL = "PAYROLL"
    COMPLETED = "COMPLETED"
    DECLINED = "DECLINED"

    @property
    def is_terminal(self) -> bool:
        return self in (ApprovalStage.COMPLETED, ApprovalStage.DECLINED)


class ApprovalAction(str, Enum):
    APPROVED = "APPROVED"
    DECLINED = "DECLINED"
