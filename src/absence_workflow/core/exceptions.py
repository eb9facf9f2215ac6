class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class ConfigurationError(ValidationError):
    """Raised when reporting-line or payroll master data is missing."""


class NotFoundError(ValidationError):
    """Raised when a referenced request or employee does not exist."""


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""


class WorkflowStateError(DomainError):
    """Raised when a request is not in a state that admits the action."""


class StageMismatchError(WorkflowStateError):
    """Raised when the caller acts on a stage the request is no longer at."""


class TerminalStateError(WorkflowStateError):
    """Raised when acting on a request that already reached a terminal state."""
