"""
Error taxonomy for gateway calls and response extraction
"""

from __future__ import annotations


class CodePilotError(Exception):
    """Base class for every failure the orchestrators convert into sentinel state"""


class UserInputError(CodePilotError):
    """Blank or empty input - the request is never dispatched"""


class TransportError(CodePilotError):
    """The generative service call itself failed (network, HTTP status, rate limit)"""


class GatewayTimeoutError(TransportError):
    """The generative service call exceeded its deadline"""

    def __init__(self, timeout_seconds: float):
        super().__init__(f"Generative service call timed out after {timeout_seconds}s")
        self.timeout_seconds = timeout_seconds


class ParseError(CodePilotError):
    """Response text does not have the syntactic shape the caller asked for"""


class ValidationError(CodePilotError):
    """Response parsed but is missing required structure"""

    def __init__(self, message: str, missing: list[str] | None = None):
        super().__init__(message)
        self.missing = missing or []
