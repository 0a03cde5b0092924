"""
Error taxonomy for the AI analysis pipeline.
"""
from typing import Optional


class AIServiceError(Exception):
    """Base exception for AI pipeline failures. `message` is user-displayable."""

    message = "AI service error"

    def __init__(self, message: Optional[str] = None):
        if message is not None:
            self.message = message
        super().__init__(self.message)


class InvalidEndpointError(AIServiceError):
    """Raised when the configured base URL is malformed."""

    message = "Invalid API endpoint"


class TransportError(AIServiceError):
    """
    Raised on a non-200 response, or when the request never got one
    (timeout, connection refused). `status_code` is None in the latter case.
    """

    def __init__(self, status_code: Optional[int], body: str):
        self.status_code = status_code
        self.body = body
        if status_code is None:
            super().__init__(f"API request failed: {body}")
        else:
            super().__init__(f"API error ({status_code}): {body}")


class ResponseShapeError(AIServiceError):
    """Raised when a 200 response lacks choices[0].message.content."""

    message = "Invalid response from server"


class ParseError(AIServiceError):
    """Raised when model output does not contain a parseable JSON object."""

    message = "Failed to parse result"
