"""
Session-authenticated client for the NaMi REST API.
"""

__version__ = "0.1.0"

from nami_api.config import NamiConfig, resolve
from nami_api.errors import (
    ConfigValidationError,
    NamiError,
    NamiResponseError,
    UnknownAuthenticationError,
)
from nami_api.client import NamiClient

__all__ = [
    "NamiClient",
    "NamiConfig",
    "resolve",
    "NamiError",
    "ConfigValidationError",
    "NamiResponseError",
    "UnknownAuthenticationError",
]
