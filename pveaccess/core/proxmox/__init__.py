"""Proxmox VE /access API client library.

Architecture:
- client.py: HTTP client with ticket/CSRF authentication and envelope handling
- records.py: Typed records (Realm, Group, Role, User) and the payload decoder
- access.py: /access index and the shared CRUD base for resource families
- domains.py: Authentication realms
- groups.py: Permission groups
- roles.py: Roles and privileges
- users.py: User accounts
- exceptions.py: Typed exceptions for error handling

Usage:
    from pveaccess.core.proxmox import ProxmoxClient, UserService

    client = ProxmoxClient.connect("pve.example.com", "root", "password")
    users = UserService(client).list_users()
"""
from .client import (
    ProxmoxClient,
    ApiPayload,
    SessionState,
    create_client_with_ticket,
    REQUEST_TIMEOUT,
)
from .exceptions import (
    ProxmoxError,
    ProxmoxArgumentError,
    ProxmoxTransportError,
    ProxmoxHTTPError,
    ProxmoxProtocolError,
    ProxmoxDecodeError,
    ProxmoxAuthenticationError,
)
from .records import Realm, Group, Role, User, decode_record, decode_role
from .access import AccessService, ResourceService
from .domains import DomainService
from .groups import GroupService
from .roles import RoleService
from .users import UserService

__all__ = [
    # Client
    "ProxmoxClient",
    "ApiPayload",
    "SessionState",
    "create_client_with_ticket",
    "REQUEST_TIMEOUT",

    # Exceptions
    "ProxmoxError",
    "ProxmoxArgumentError",
    "ProxmoxTransportError",
    "ProxmoxHTTPError",
    "ProxmoxProtocolError",
    "ProxmoxDecodeError",
    "ProxmoxAuthenticationError",

    # Records
    "Realm",
    "Group",
    "Role",
    "User",
    "decode_record",
    "decode_role",

    # Services
    "AccessService",
    "ResourceService",
    "DomainService",
    "GroupService",
    "RoleService",
    "UserService",
]
