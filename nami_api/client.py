"""
NaMi API client: session startup, service calls, and re-authentication
when the server reports an expired session.
"""

import logging
import threading

import requests

from nami_api.config import NamiConfig, resolve
from nami_api.errors import NamiResponseError, UnknownAuthenticationError
from nami_api.session import create_session

logger = logging.getLogger(__name__)

AUTH_PATH = "/nami/auth/manual/sessionStartup"
SESSION_EXPIRED_MESSAGE = "Session expired"

# A call is retried at most this many times after the session expired
MAX_EXPIRY_RETRIES = 1


def is_session_expired(body) -> bool:
    """Check whether a decoded response body signals an expired session."""
    if not isinstance(body, dict):
        return False
    return body.get("success") is False and body.get("message") == SESSION_EXPIRED_MESSAGE


def decode_body(response: requests.Response):
    """Decode a JSON response body.

    Returns None for an empty body. Error statuses are only raised when the
    body can't be decoded, since NaMi reports most failures in JSON.
    """
    if not response.content:
        if not response.ok:
            response.raise_for_status()
        return None
    try:
        return response.json()
    except ValueError:
        if not response.ok:
            response.raise_for_status()
        raise


class NamiClient:
    """Single-session client for the NaMi REST API.

    The session cookie lives in the cookie jar of ``self.session``. Calls are
    optimistic: no session check happens before a request, and the session
    is (re)started only when a response says it expired.
    """

    def __init__(self, config: dict | NamiConfig, session: requests.Session | None = None):
        """
        Args:
            config: Raw configuration mapping (see NamiConfig) or a resolved config.
            session: requests.Session to use (created from config if None).

        Raises:
            ConfigValidationError: If the configuration is invalid.
        """
        self.config = resolve(config)
        self.session = session if session is not None else create_session(self.config.retries)
        self._auth_lock = threading.Lock()
        # Bumped on every successful session startup
        self._generation = 0

    @property
    def cookies(self):
        """Cookie jar holding the NaMi session cookie."""
        return self.session.cookies

    def build_uri(self, path: str) -> str:
        """Build the full service URI for a service path such as ``/nami/mitglied``."""
        return self.config.base_url + self.config.api_path + path

    def authenticate(self, seen_generation: int | None = None) -> dict | None:
        """Start a new NaMi session with the configured credentials.

        Args:
            seen_generation: Session generation observed by a caller that hit
                an expired session. If another call restarted the session
                since then, no new login is made and None is returned.

        Returns:
            The decoded startup response body.

        Raises:
            NamiResponseError: If NaMi rejected the login.
            UnknownAuthenticationError: If the response had no status code.
        """
        with self._auth_lock:
            if seen_generation is not None and self._generation != seen_generation:
                logger.debug("Session already restarted by a concurrent call")
                return None
            return self._start_session()

    def _start_session(self) -> dict:
        logger.debug(f"Authenticating user {self.config.user_id}")
        response = self.session.post(
            self.build_uri(AUTH_PATH),
            data={
                "Login": "API",
                "username": self.config.user_id,
                "password": self.config.password.get_secret_value(),
            },
            allow_redirects=True,
            timeout=self.config.timeout,
        )
        body = decode_body(response)

        if not isinstance(body, dict) or "statusCode" not in body:
            raise UnknownAuthenticationError()

        code = body["statusCode"]
        # Only an integer 0 means success; False and 0.0 compare equal to 0
        if type(code) is int and code == 0:
            self._generation += 1
            logger.debug("Session started")
            return body
        raise NamiResponseError(code, body.get("statusMessage"))

    def call_service(self, method: str = "GET", path: str | None = None, options: dict | None = None):
        """Call a NaMi service path and return the decoded payload.

        If the response says the session expired, the client authenticates
        and repeats the call once. A second expiry is returned as-is.

        Args:
            method: HTTP method (GET, POST, PUT, DELETE).
            path: Service path, appended to the versioned API base.
            options: Dict with an optional "query" dict of query parameters.

        Returns:
            The decoded response body, uninterpreted.

        Raises:
            TypeError: If no path is given.
        """
        if path is None:
            raise TypeError("call_service() missing required argument: 'path'")
        options = options or {}
        logger.debug(f"call_service {method} {path} {options}")

        uri = self.build_uri(path)
        query = dict(options.get("query") or {})

        retries = 0
        while True:
            generation = self._generation
            response = self.session.request(method, uri, params=query, timeout=self.config.timeout)
            body = decode_body(response)

            if not is_session_expired(body):
                return body
            if retries >= MAX_EXPIRY_RETRIES:
                logger.warning(f"Session still expired after re-authentication: {method} {path}")
                return body

            logger.debug("Session expired, re-authenticating")
            retries += 1
            self.authenticate(generation)

    def close(self) -> None:
        self.session.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()
