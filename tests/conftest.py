"""Pytest shared fixtures: an in-process fake Proxmox VE API."""
import json
import pathlib
import sys
from typing import Any, Dict, List, Optional, Tuple
from urllib.parse import parse_qs, unquote, urlsplit

# Add project root to Python path
ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

import pytest
import requests

from pveaccess.core.proxmox import ProxmoxClient

API_PREFIX = "/api2/json"
TICKET = "PVE:root@pam:TICKET"
CSRF_TOKEN = "CSRF-TOKEN-123"


class FakeProxmox:
    """Routes prepared requests to canned responses and records them."""

    def __init__(self):
        self.routes: Dict[Tuple[str, str], Any] = {}
        self.requests: List[requests.PreparedRequest] = []
        self.send_kwargs: List[Dict[str, Any]] = []

    def route(self, method: str, path: str, body: Any = None, status: int = 200,
              reason: str = "OK", raw: Optional[str] = None, exc: Optional[Exception] = None) -> None:
        """Register a response for METHOD path (path relative to /api2/json)."""
        self.routes[(method.upper(), path)] = (status, reason, body, raw, exc)

    def data(self, method: str, path: str, data: Any) -> None:
        """Register a 200 response wrapping data in the envelope."""
        self.route(method, path, {"data": data})

    def send(self, request: requests.PreparedRequest, **kwargs) -> requests.Response:
        self.requests.append(request)
        self.send_kwargs.append(kwargs)
        path = unquote(urlsplit(request.url).path)
        if path.startswith(API_PREFIX):
            path = path[len(API_PREFIX):]
        key = (request.method, path)
        if key not in self.routes:
            raise AssertionError(f"Unexpected {request.method} {path} in unit test")

        status, reason, body, raw, exc = self.routes[key]
        if exc is not None:
            raise exc
        resp = requests.Response()
        resp.status_code = status
        resp.reason = reason
        resp.url = request.url
        resp.request = request
        resp.headers["Content-Type"] = "application/json;charset=UTF-8"
        resp._content = (raw if raw is not None else json.dumps(body)).encode()
        return resp

    @property
    def last(self) -> requests.PreparedRequest:
        return self.requests[-1]

    def find(self, method: str, path: str) -> List[requests.PreparedRequest]:
        return [
            req for req in self.requests
            if req.method == method and unquote(urlsplit(req.url).path) == API_PREFIX + path
        ]


def form_of(request: requests.PreparedRequest) -> Dict[str, List[str]]:
    """Decode the form body of a prepared request."""
    body = request.body or ""
    if isinstance(body, bytes):
        body = body.decode()
    return parse_qs(body, keep_blank_values=True)


# ─────────────────────────────────────────────────────────────────────────────
# Network Guard Rails
# ─────────────────────────────────────────────────────────────────────────────
@pytest.fixture()
def pve(monkeypatch):
    """Fake Proxmox API; every request made through requests.Session lands here.

    The ticket endpoint is pre-registered with a valid login response.
    """
    fake = FakeProxmox()
    fake.data("POST", "/access/ticket", {
        "ticket": TICKET,
        "CSRFPreventionToken": CSRF_TOKEN,
        "username": "root@pam",
    })

    def _send(session, request, **kwargs):
        return fake.send(request, **kwargs)

    monkeypatch.setattr(requests.Session, "send", _send)
    return fake


@pytest.fixture()
def decode_form():
    """Helper returning the decoded form body of a recorded request."""
    return form_of


@pytest.fixture()
def client(pve):
    """Authenticated client against the fake API."""
    return ProxmoxClient.connect("pve.example.com", "root", "secret")


# ─────────────────────────────────────────────────────────────────────────────
# Pytest Configuration
# ─────────────────────────────────────────────────────────────────────────────
def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests (requires a Proxmox VE host)"
    )
