"""Proxmox-specific exceptions for error handling."""


class ProxmoxError(Exception):
    """Base exception for all Proxmox API operations."""
    pass


class ProxmoxArgumentError(ProxmoxError, ValueError):
    """Request rejected locally: empty path, missing form, unknown verb."""
    pass


class ProxmoxTransportError(ProxmoxError):
    """DNS, connect, TLS or I/O failure before a response was received."""
    pass


class ProxmoxHTTPError(ProxmoxError):
    """Non-200 response from the Proxmox API.

    Attributes:
        status_code: HTTP status code
        reason: Reason phrase from the status line
        endpoint: API endpoint that failed
    """

    def __init__(self, status_code: int, reason: str, endpoint: str):
        self.status_code = status_code
        self.reason = reason
        self.endpoint = endpoint
        super().__init__(f"HTTP Error: {status_code} {reason} ({endpoint})")

    @property
    def status_line(self) -> str:
        return f"{self.status_code} {self.reason}".strip()


class ProxmoxProtocolError(ProxmoxError):
    """Response body is not the expected {"data": ...} envelope."""
    pass


class ProxmoxDecodeError(ProxmoxError):
    """Payload field has a shape incompatible with the target record."""
    pass


class ProxmoxAuthenticationError(ProxmoxError):
    """Ticket acquisition failed or the session is not usable."""
    pass
