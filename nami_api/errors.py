"""
Exception types for the NaMi API client.
Transport errors from requests are not wrapped and surface unchanged.
"""


class NamiError(Exception):
    """Base exception for all NaMi client errors."""


class ConfigValidationError(NamiError, ValueError):
    """The client configuration failed validation.

    Attributes:
        fields: Names of the offending configuration fields.
    """

    def __init__(self, message: str, fields: list[str] | None = None):
        super().__init__(message)
        self.fields = fields or []


class NamiResponseError(NamiError):
    """The server rejected authentication with a status code and message."""

    def __init__(self, code, message: str | None = None):
        super().__init__(message or f"NaMi responded with status code {code}")
        self.code = code
        self.message = message

    def __repr__(self):
        return f"NamiResponseError(code={self.code!r}, message={self.message!r})"


class UnknownAuthenticationError(NamiError):
    """Authentication response carried no interpretable status."""

    def __init__(self, message: str = "unknown authentication error"):
        super().__init__(message)
