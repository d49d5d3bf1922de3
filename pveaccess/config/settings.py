"""Settings loader with environment variable and Docker secrets integration."""
from __future__ import annotations
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)

DEFAULT_USERNAME = "root@pam"
DEFAULT_TIMEOUT = 30.0


def _load_secret_from_file(secret_name: str, env_var: str | None = None) -> str | None:
    """
    Load secret from /run/secrets (Docker secrets pattern).

    Priority:
    1. /run/secrets/{secret_name} (Docker secrets mount)
    2. Environment variable (fallback)

    Args:
        secret_name: Name of the secret file in /run/secrets
        env_var: Optional environment variable name to check as fallback

    Returns:
        Secret value or None if not found
    """
    secret_file = Path("/run/secrets") / secret_name

    if secret_file.exists() and secret_file.is_file():
        try:
            secret_value = secret_file.read_text().strip()
            if secret_value:
                logger.debug("Loaded %s from /run/secrets", secret_name)
                return secret_value
        except OSError as e:
            logger.warning("Failed to read /run/secrets/%s: %s", secret_name, e)

    if env_var:
        secret_value = os.getenv(env_var)
        if secret_value:
            logger.debug("Loaded %s from environment", env_var)
            return secret_value

    return None


def _parse_bool(value: Optional[str], default: bool) -> bool:
    if value is None or not value.strip():
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def _parse_timeout(value: Optional[str]) -> Optional[float]:
    if value is None or not value.strip():
        return DEFAULT_TIMEOUT
    if value.strip().lower() in ("none", "0"):
        return None
    try:
        timeout = float(value)
    except ValueError:
        raise ValueError(f"PVE_TIMEOUT must be a number of seconds, got '{value}'")
    if timeout < 0:
        raise ValueError(f"PVE_TIMEOUT must not be negative, got '{value}'")
    return timeout


@dataclass
class PveSettings:
    """Connection settings for a Proxmox VE host."""
    host: str = ""
    username: str = DEFAULT_USERNAME
    password: str = ""
    verify_ssl: bool = False
    timeout: Optional[float] = DEFAULT_TIMEOUT

    def __repr__(self) -> str:
        return (
            f"PveSettings(host={self.host!r}, username={self.username!r}, "
            f"verify_ssl={self.verify_ssl}, timeout={self.timeout})"
        )

    @property
    def is_complete(self) -> bool:
        """True when host and password are both known."""
        return bool(self.host and self.password)


def load_settings() -> PveSettings:
    """Load connection settings from environment and /run/secrets.

    Environment:
        PVE_HOST, PVE_USER, PVE_PASSWORD (or /run/secrets/pve_password),
        PVE_VERIFY_SSL, PVE_TIMEOUT

    Raises:
        ValueError: If PVE_TIMEOUT is not a valid number
    """
    settings = PveSettings(
        host=os.environ.get("PVE_HOST", "").strip(),
        username=os.environ.get("PVE_USER", "").strip() or DEFAULT_USERNAME,
        password=_load_secret_from_file("pve_password", "PVE_PASSWORD") or "",
        verify_ssl=_parse_bool(os.environ.get("PVE_VERIFY_SSL"), False),
        timeout=_parse_timeout(os.environ.get("PVE_TIMEOUT")),
    )
    logger.debug("Settings loaded: %r", settings)
    return settings
