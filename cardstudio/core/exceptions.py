"""
Errors raised by the card design engine.

Pure functions (colors, stamp layout, placeholder pattern) never raise.
Only validation, activation and the persistence boundary produce errors,
and all of them reject the operation without applying a partial effect.
"""
from dataclasses import dataclass


@dataclass(frozen=True)
class FieldError:
    """A validation problem attached to one design field."""
    field: str
    message: str

    def to_dict(self) -> dict:
        return {"field": self.field, "message": self.message}


class DesignError(Exception):
    """Base class for user-facing design errors."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class DesignValidationError(DesignError):
    """Missing required field, list cap violation or out-of-range value."""

    def __init__(self, errors: list[FieldError]):
        self.errors = list(errors)
        summary = "; ".join(f"{e.field}: {e.message}" for e in self.errors)
        super().__init__(f"Design is invalid ({summary})")

    def to_detail(self) -> dict:
        return {
            "code": "VALIDATION_FAILED",
            "message": self.message,
            "errors": [e.to_dict() for e in self.errors],
        }


class ActivationConflict(DesignError):
    """A lifecycle transition is not allowed from the design's current state."""

    def __init__(self, design_id: str, message: str):
        super().__init__(message)
        self.design_id = design_id


class DesignNotFound(DesignError):
    """Design does not exist or belongs to another business."""

    def __init__(self, design_id: str):
        super().__init__("Design not found")
        self.design_id = design_id


class TransportFailure(DesignError):
    """The external API could not complete a request."""

    def __init__(self, operation: str, message: str):
        super().__init__(f"Failed to {operation} design: {message}")
        self.operation = operation


class LimitExceededError(DesignError):
    """The business plan does not allow another design."""

    def __init__(self, limit: int, current: int):
        super().__init__(
            f"Your plan allows {limit} card designs. You currently have {current}."
        )
        self.limit = limit
        self.current = current

    def to_detail(self) -> dict:
        return {
            "code": "LIMIT_EXCEEDED",
            "resource": "card designs",
            "limit": self.limit,
            "current": self.current,
            "message": self.message,
            "upgrade_required": True,
        }
