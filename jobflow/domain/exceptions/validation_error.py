"""
Validation-related domain exceptions.
"""

from .workflow_error import JobWorkflowError


class ValidationError(JobWorkflowError):
    """Raised when input has a bad shape or is out of range."""

    code = "validation_error"


class RequiredFieldError(ValidationError):
    """Raised when required field is missing."""

    def __init__(self, field_name: str):
        self.field_name = field_name
        super().__init__(f"Required field '{field_name}' is missing")


class InvalidAmountError(ValidationError):
    """Raised when a monetary amount is not strictly positive."""

    def __init__(self, field_name: str, value):
        self.field_name = field_name
        self.value = value
        super().__init__(f"Field '{field_name}' must be greater than 0, got {value}")
