"""Input normalization helpers for connection parameters."""
from __future__ import annotations
from urllib.parse import urlsplit

DEFAULT_PORT = 8006
DEFAULT_REALM = "pam"
API_PREFIX = "/api2/json"


def normalize_hostname(raw: str) -> str:
    """Prefix the hostname with https:// unless it already carries a scheme.

    Args:
        raw: Hostname, optionally with scheme and port

    Returns:
        Hostname with an http or https scheme

    Raises:
        ValueError: If hostname is empty
    """
    hostname = (raw or "").strip().rstrip("/")
    if not hostname:
        raise ValueError("Hostname is required")
    if not hostname.startswith(("http://", "https://")):
        hostname = f"https://{hostname}"
    return hostname


def normalize_username(raw: str) -> str:
    """Qualify a bare username with the pam realm.

    Args:
        raw: Username, with or without @realm suffix

    Returns:
        Fully-qualified principal name@realm

    Raises:
        ValueError: If username is empty
    """
    username = (raw or "").strip()
    if not username:
        raise ValueError("Username is required")
    if "@" not in username:
        username = f"{username}@{DEFAULT_REALM}"
    return username


def build_base_url(hostname: str) -> str:
    """Derive the API base URL from a normalized hostname.

    A hostname without an explicit port gets the default API port 8006.

    Args:
        hostname: Hostname as returned by normalize_hostname

    Returns:
        Base URL ending in /api2/json

    Raises:
        ValueError: If the hostname cannot be parsed as a URL
    """
    try:
        parts = urlsplit(hostname)
        port = parts.port
    except ValueError as e:
        raise ValueError(f"Invalid hostname '{hostname}': {e}") from e
    if not parts.hostname:
        raise ValueError(f"Invalid hostname '{hostname}': missing host")

    if port is None:
        return f"{hostname}:{DEFAULT_PORT}{API_PREFIX}"
    return f"{hostname}{API_PREFIX}"


def host_of(hostname: str) -> str:
    """Return the bare host (no scheme, no port) of a normalized hostname."""
    return urlsplit(hostname).hostname or ""
