"""Low-level HTTP client for the Proxmox VE API.

Handles ticket authentication, the CSRF token, and the {"data": ...} envelope.
"""
from __future__ import annotations
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Sequence, Union
from urllib.parse import urlencode

import requests
from requests.adapters import HTTPAdapter

from ..validators import build_base_url, host_of, normalize_hostname, normalize_username
from .exceptions import (
    ProxmoxArgumentError,
    ProxmoxAuthenticationError,
    ProxmoxHTTPError,
    ProxmoxProtocolError,
    ProxmoxTransportError,
)

logger = logging.getLogger(__name__)

REQUEST_TIMEOUT = 30
AUTH_COOKIE = "PVEAuthCookie"
CSRF_HEADER = "CSRFPreventionToken"
FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"
VALID_METHODS = ("GET", "POST", "PUT", "DELETE")
MUTATING_METHODS = ("POST", "PUT", "DELETE")

FormInput = Mapping[str, Union[str, Sequence[str]]]


class SessionState(Enum):
    UNINITIALIZED = "uninitialized"
    AUTHENTICATING = "authenticating"
    ACTIVE = "active"
    TERMINATED = "terminated"


@dataclass(frozen=True)
class ApiPayload:
    """Unwrapped "data" field of a response: either a mapping or a sequence."""
    kind: str
    value: Any

    MAPPING = "mapping"
    SEQUENCE = "sequence"

    @property
    def is_mapping(self) -> bool:
        return self.kind == self.MAPPING

    @property
    def is_sequence(self) -> bool:
        return self.kind == self.SEQUENCE

    def as_mapping(self) -> Dict[str, Any]:
        if not self.is_mapping:
            raise ProxmoxProtocolError(f"Expected a mapping payload, got {self.kind}")
        return self.value

    def as_sequence(self) -> List[Any]:
        if not self.is_sequence:
            raise ProxmoxProtocolError(f"Expected a sequence payload, got {self.kind}")
        return self.value


class ProxmoxClient:
    """HTTP client for the Proxmox VE API with ticket/CSRF authentication.

    Features:
    - Hostname and username normalization (https://, port 8006, @pam)
    - PVEAuthCookie installed in a requests cookie jar after login
    - CSRFPreventionToken attached to every mutating request
    - Envelope validation, returning an ApiPayload

    Usage:
        client = ProxmoxClient.connect("pve.example.com", "root", "secret")
        payload = client.get("/access/users")
        for entry in payload.as_sequence():
            ...

    The ticket is not refreshed: once the server expires it, requests fail
    with ProxmoxHTTPError (401) and a new client must be created.
    """

    def __init__(
        self,
        hostname: str,
        username: str,
        password: str = "",
        verify_ssl: bool = False,
        timeout: Optional[float] = REQUEST_TIMEOUT,
    ):
        """Initialize the client without contacting the server.

        Args:
            hostname: Host, with or without scheme and port
            username: User, with or without @realm suffix
            password: Password used by login()
            verify_ssl: Validate the server certificate chain (off by default)
            timeout: Per-request timeout in seconds, None for no timeout

        Raises:
            ProxmoxArgumentError: If hostname or username is empty or malformed
        """
        try:
            self.hostname = normalize_hostname(hostname)
            self.username = normalize_username(username)
            self.base_url = build_base_url(self.hostname)
        except ValueError as e:
            raise ProxmoxArgumentError(str(e)) from e

        self._password = password
        self.verify_ssl = verify_ssl
        self.timeout = timeout
        self.ticket = ""
        self.csrf_token = ""
        self.state = SessionState.UNINITIALIZED
        self.session = self._build_session()

    @classmethod
    def connect(
        cls,
        hostname: str,
        username: str,
        password: str,
        verify_ssl: bool = False,
        timeout: Optional[float] = REQUEST_TIMEOUT,
    ) -> "ProxmoxClient":
        """Create a client and acquire a ticket in one step."""
        client = cls(hostname, username, password, verify_ssl=verify_ssl, timeout=timeout)
        client.login()
        return client

    def __repr__(self) -> str:
        return f"ProxmoxClient(base_url={self.base_url!r}, username={self.username!r}, state={self.state.value})"

    def __enter__(self) -> "ProxmoxClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def _build_session(self) -> requests.Session:
        session = requests.Session()
        adapter = HTTPAdapter(pool_connections=200, pool_maxsize=100)
        session.mount("https://", adapter)
        session.mount("http://", adapter)
        session.verify = self.verify_ssl
        return session

    # ─────────────────────────────────────────────────────────────────────
    # Session bootstrap
    # ─────────────────────────────────────────────────────────────────────

    def login(self) -> "ProxmoxClient":
        """Acquire a ticket and CSRF token from /access/ticket.

        Returns:
            The client itself, now active

        Raises:
            ProxmoxAuthenticationError: If the client was already used or the
                ticket response is malformed
            ProxmoxHTTPError: If the server rejects the credentials
        """
        if self.state is not SessionState.UNINITIALIZED:
            raise ProxmoxAuthenticationError(f"Cannot log in from state '{self.state.value}'")

        self.state = SessionState.AUTHENTICATING
        try:
            payload = self.post("/access/ticket", {"username": [self.username], "password": [self._password]})
            if not payload.is_mapping:
                raise ProxmoxAuthenticationError("Ticket response is not a mapping")
            data = payload.value
            ticket = data.get("ticket")
            csrf_token = data.get(CSRF_HEADER)
            if not isinstance(ticket, str) or not ticket:
                raise ProxmoxAuthenticationError("Ticket response is missing 'ticket'")
            if not isinstance(csrf_token, str) or not csrf_token:
                raise ProxmoxAuthenticationError(f"Ticket response is missing '{CSRF_HEADER}'")
        except Exception:
            self.state = SessionState.TERMINATED
            raise

        self._install_credentials(ticket, csrf_token)
        logger.info("Authenticated to %s as %s", self.base_url, self.username)
        return self

    def _install_credentials(self, ticket: str, csrf_token: str) -> None:
        self.ticket = ticket
        self.csrf_token = csrf_token
        self.session.cookies.set(AUTH_COOKIE, ticket, domain=_cookie_domain(host_of(self.hostname)), path="/")
        self.state = SessionState.ACTIVE

    def close(self) -> None:
        """Release pooled connections; the client cannot be used afterwards."""
        self.session.close()
        self.state = SessionState.TERMINATED

    def _ensure_usable(self) -> None:
        if self.state is SessionState.TERMINATED:
            raise ProxmoxAuthenticationError("Session is terminated; create a new client")
        if self.state is SessionState.UNINITIALIZED:
            raise ProxmoxAuthenticationError("Not authenticated - call login() first")

    # ─────────────────────────────────────────────────────────────────────
    # Verbs
    # ─────────────────────────────────────────────────────────────────────

    def get(self, path: str) -> ApiPayload:
        """Execute GET request.

        Args:
            path: API path relative to /api2/json (e.g., "/access/users")

        Returns:
            Unwrapped payload

        Raises:
            ProxmoxHTTPError: On non-200 status
            ProxmoxProtocolError: On malformed envelope
        """
        return self._request("GET", path)

    def post(self, path: str, form: Optional[FormInput]) -> ApiPayload:
        """Execute POST request with a form-encoded body.

        Args:
            path: API path relative to /api2/json
            form: Mapping of key to value or list of values (repeated keys)

        Returns:
            Unwrapped payload

        Raises:
            ProxmoxArgumentError: If form is empty
            ProxmoxHTTPError: On non-200 status
            ProxmoxProtocolError: On malformed envelope
        """
        return self._request("POST", path, form)

    def put(self, path: str, form: Optional[FormInput]) -> ApiPayload:
        """Execute PUT request with a form-encoded body."""
        return self._request("PUT", path, form)

    def delete(self, path: str) -> ApiPayload:
        """Execute DELETE request."""
        return self._request("DELETE", path)

    def _request(self, method: str, path: str, form: Optional[FormInput] = None) -> ApiPayload:
        method = (method or "").upper()
        if method not in VALID_METHODS:
            raise ProxmoxArgumentError(f'Invalid method: "{method}"')
        if not path:
            raise ProxmoxArgumentError(f"Empty path passed to {method}")
        self._ensure_usable()

        url = f"{self.base_url}{path if path.startswith('/') else '/' + path}"
        headers: Dict[str, str] = {}
        body = None

        if method in ("POST", "PUT"):
            if not form:
                raise ProxmoxArgumentError(f"Form data must not be empty for {method} {path}")
            body = urlencode(form, doseq=True)
            headers["Content-Type"] = FORM_CONTENT_TYPE
            headers["Content-Length"] = str(len(body))
        if method in MUTATING_METHODS and self.csrf_token:
            headers[CSRF_HEADER] = self.csrf_token

        try:
            resp = self.session.request(
                method, url, data=body, headers=headers, timeout=self.timeout, verify=self.verify_ssl,
            )
        except requests.exceptions.RequestException as e:
            raise ProxmoxTransportError(f"{method} {url} failed: {e}") from e

        logger.debug("%s %s -> %s", method, path, resp.status_code)
        self._handle_error(resp, method, path)
        return self._unwrap(resp, method, path)

    def _handle_error(self, resp: requests.Response, method: str, path: str) -> None:
        """Raise ProxmoxHTTPError for anything but 200; the body is not parsed."""
        if resp.status_code != 200:
            logger.warning("%s %s failed: %s %s", method, path, resp.status_code, resp.reason)
            raise ProxmoxHTTPError(resp.status_code, resp.reason or "", path)

    def _unwrap(self, resp: requests.Response, method: str, path: str) -> ApiPayload:
        try:
            body = resp.json()
        except ValueError as e:
            raise ProxmoxProtocolError(f"Invalid JSON in response to {method} {path}") from e

        if not isinstance(body, dict):
            raise ProxmoxProtocolError(f"Invalid response to {method} {path}: envelope is not an object")
        data = body.get("data")
        if isinstance(data, dict):
            return ApiPayload(ApiPayload.MAPPING, data)
        if isinstance(data, list):
            return ApiPayload(ApiPayload.SEQUENCE, data)
        raise ProxmoxProtocolError(f"Invalid response to {method} {path}: 'data' is {type(data).__name__}")


def _cookie_domain(host: str) -> str:
    # http.cookiejar matches dotless hosts as "<host>.local"
    if "." in host or ":" in host:
        return host
    return f"{host}.local"


def create_client_with_ticket(
    hostname: str,
    username: str,
    ticket: str,
    csrf_token: str,
    verify_ssl: bool = False,
    timeout: Optional[float] = REQUEST_TIMEOUT,
) -> ProxmoxClient:
    """Create an active ProxmoxClient from a previously issued ticket.

    Useful for tools that obtain the ticket once and hand it to workers.

    Args:
        hostname: Host, with or without scheme and port
        username: User the ticket was issued to
        ticket: PVEAuthCookie value
        csrf_token: CSRFPreventionToken value

    Returns:
        ProxmoxClient in the active state
    """
    if not ticket or not csrf_token:
        raise ProxmoxAuthenticationError("Both ticket and CSRF token are required")
    client = ProxmoxClient(hostname, username, verify_ssl=verify_ssl, timeout=timeout)
    client._install_credentials(ticket, csrf_token)
    return client
