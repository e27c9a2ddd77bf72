# sales-enablement/errors.py
from typing import Optional


class EngineError(Exception):
    """Base class for every error the engine raises across its public functions."""
    code = "engineError"

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.field = field

    def to_dict(self) -> dict:
        return {"error": self.message, "code": self.code, "field": self.field}


class ConfigurationError(EngineError):
    """A static rubric, rule or strategy is misconfigured."""
    code = "configurationError"


class ValidationError(EngineError):
    """User-supplied input cannot be used for a computation."""

    def __init__(self, message: str, field: Optional[str] = None, code: str = "insufficientData"):
        super().__init__(message, field)
        self.code = code


class DuplicateEventError(EngineError):
    code = "duplicateEvent"

    def __init__(self, event_id: str):
        super().__init__(f"Award event '{event_id}' has already been applied.")
        self.event_id = event_id


class ScoringUnavailableError(EngineError):
    """The external scoring service could not produce a score."""
    code = "scoringUnavailable"
