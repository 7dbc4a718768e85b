# errors.py

from typing import Any, Optional


class PipelineError(Exception):
    """Base error for a failed request; carries the HTTP status it maps to."""

    status_code = 500
    message = "Internal server error"

    def __init__(self, details: Any = None, message: Optional[str] = None):
        super().__init__(message or self.message)
        if message is not None:
            self.message = message
        self.details = details

    def to_dict(self) -> dict:
        return {"error": self.message, "details": self.details}


class InvalidInput(PipelineError):
    status_code = 400
    message = "Invalid request"


class GenerationFailed(PipelineError):
    message = "Failed to generate SQL query"


class ExecutionFailed(PipelineError):
    message = "Database query failed"


class ServerFault(PipelineError):
    message = "Internal server error"
