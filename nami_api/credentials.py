"""
Password lookup for the NaMi CLI.
Reads the password from the environment, with optional OS keyring support.
"""

import os
import logging

logger = logging.getLogger(__name__)

PASSWORD_ENV_VAR = "NAMI_PASSWORD"


# ─── Password Storage Backends ──────────────────────────────────────────────


class EnvStorage:
    """Read the password from an environment variable (read-only)."""

    def __init__(self, var: str = PASSWORD_ENV_VAR):
        self.var = var

    def save(self, user_id: str, password: str) -> None:
        raise NotImplementedError(f"Cannot store passwords in ${self.var}; use the keyring backend")

    def load(self, user_id: str) -> str | None:
        return os.environ.get(self.var) or None

    def __str__(self):
        return f"Environment (${self.var})"


class KeyringStorage:
    """Store passwords in the OS keychain via the keyring library."""

    SERVICE_NAME = "nami-api"

    def save(self, user_id: str, password: str) -> None:
        import keyring

        keyring.set_password(self.SERVICE_NAME, user_id, password)
        logger.debug(f"Password for {user_id} saved to OS keychain")

    def load(self, user_id: str) -> str | None:
        import keyring

        return keyring.get_password(self.SERVICE_NAME, user_id)

    def __str__(self):
        return "OS Keychain"


def get_storage_backend(force: str | None = None):
    """Pick the password storage backend.

    Args:
        force: Force a specific backend ('env' or 'keyring').

    Returns:
        A storage backend instance (EnvStorage or KeyringStorage).
    """
    if force == "env":
        return EnvStorage()

    if force == "keyring":
        try:
            import keyring

            keyring.get_keyring()
            return KeyringStorage()
        except Exception as e:
            logger.warning(f"Keyring requested but unavailable: {e}. Falling back to environment.")
            return EnvStorage()

    # Auto-detect: prefer the environment when the password is set there
    if os.environ.get(PASSWORD_ENV_VAR):
        return EnvStorage()
    try:
        import keyring

        backend = keyring.get_keyring()
        backend_name = type(backend).__name__.lower()
        if "fail" in backend_name or "null" in backend_name:
            raise RuntimeError("No usable keyring backend")
        return KeyringStorage()
    except Exception:
        return EnvStorage()
