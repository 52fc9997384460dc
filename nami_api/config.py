"""
Client configuration: defaults, validation, and the versioned API base path.
"""

import logging
from collections.abc import Mapping
from urllib.parse import urlsplit

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    NonNegativeInt,
    PositiveFloat,
    SecretStr,
    ValidationError,
    field_validator,
)

from nami_api.errors import ConfigValidationError

logger = logging.getLogger(__name__)

PRODUCTION_BASE_URL = "https://nami.dpsg.de"
DEVELOPMENT_BASE_URL = "https://namitest.dpsg.de"
DEFAULT_VERSION = "1.1"
DEFAULT_TIMEOUT = 30.0

API_PATH_TEMPLATE = "/ica/rest/api/{major}/{minor}/service"


def _check_url(value: str, schemes: tuple[str, ...]) -> str:
    parts = urlsplit(value)
    if parts.scheme not in schemes:
        raise ValueError(f"URL scheme must be one of: {', '.join(schemes)}")
    if not parts.netloc:
        raise ValueError("URL must include a host")
    return value.rstrip("/")


class NamiConfig(BaseModel):
    """Validated, immutable client configuration.

    Accepts both the camelCase keys used by the API's own tooling
    (``userId``, ``productionBaseUrl``) and the snake_case field names.
    """

    model_config = ConfigDict(frozen=True, extra="forbid", populate_by_name=True)

    user_id: str = Field(..., alias="userId", min_length=1)
    password: SecretStr = Field(..., alias="password")
    production: bool = Field(default=False, alias="production")
    production_base_url: str = Field(default=PRODUCTION_BASE_URL, alias="productionBaseUrl")
    development_base_url: str = Field(default=DEVELOPMENT_BASE_URL, alias="developmentBaseUrl")
    version: str = Field(default=DEFAULT_VERSION, alias="version", pattern=r"^[0-9]+(\.[0-9]+)+$")

    # Passed through to the HTTP transport
    timeout: PositiveFloat | None = Field(default=DEFAULT_TIMEOUT, alias="timeout")
    retries: NonNegativeInt = Field(default=0, alias="retries")

    @field_validator("password")
    @classmethod
    def _password_not_empty(cls, value: SecretStr) -> SecretStr:
        if not value.get_secret_value():
            raise ValueError("password must not be empty")
        return value

    @field_validator("production", mode="before")
    @classmethod
    def _production_bool_or_str(cls, value):
        # "true"/"false" strings are fine, numbers and other spellings are not
        if isinstance(value, bool):
            return value
        if isinstance(value, str) and value.strip().lower() in ("true", "false"):
            return value.strip().lower() == "true"
        raise ValueError("production must be a boolean or 'true'/'false'")

    @field_validator("production_base_url")
    @classmethod
    def _production_https(cls, value: str) -> str:
        return _check_url(value, ("https",))

    @field_validator("development_base_url")
    @classmethod
    def _development_http_or_https(cls, value: str) -> str:
        return _check_url(value, ("https", "http"))

    @property
    def parsed_version(self) -> tuple[str, ...]:
        """Version string split into its dot-separated components."""
        return tuple(self.version.split("."))

    @property
    def base_url(self) -> str:
        """Base URL selected by the ``production`` flag."""
        return self.production_base_url if self.production else self.development_base_url

    @property
    def api_path(self) -> str:
        major, minor = self.parsed_version[:2]
        return API_PATH_TEMPLATE.format(major=major, minor=minor)


def resolve(raw) -> NamiConfig:
    """Apply defaults to a raw configuration mapping and validate it.

    Defaults fill in missing keys only; a key explicitly set to None is
    validated as None and rejected.

    Args:
        raw: Mapping of configuration values, or an already-resolved NamiConfig.

    Returns:
        The validated NamiConfig.

    Raises:
        ConfigValidationError: Listing every offending field.
    """
    if isinstance(raw, NamiConfig):
        return raw
    if not isinstance(raw, Mapping):
        raise ConfigValidationError(
            f"configuration must be a mapping, got {type(raw).__name__}", fields=[]
        )

    try:
        config = NamiConfig.model_validate(dict(raw))
    except ValidationError as e:
        fields = []
        problems = []
        for error in e.errors():
            field = ".".join(str(part) for part in error["loc"]) or "<root>"
            if field not in fields:
                fields.append(field)
            problems.append(f"{field}: {error['msg']}")
        # pydantic's own message echoes input values, which may include the password
        raise ConfigValidationError(
            "invalid NaMi configuration: " + "; ".join(problems), fields=fields
        ) from None

    logger.debug(
        f"Configuration resolved for user {config.user_id} "
        f"({'production' if config.production else 'development'}, v{config.version})"
    )
    return config
