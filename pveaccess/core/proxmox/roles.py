"""Proxmox role management operations."""
from __future__ import annotations
from typing import Any, Dict, List, Mapping, Union

from .access import ResourceService
from .client import ApiPayload, FormInput
from .records import Role, decode_role


class RoleService(ResourceService[Role]):
    """Service for managing Proxmox roles."""

    prefix = "/access/roles"
    id_field = "roleid"
    record_cls = Role

    def index_roles(self) -> List[Dict[str, Any]]:
        """Return the role index ({"roleid": ..., "privs": ..., "special": ...})."""
        return self._index()

    def list_roles(self) -> List[Role]:
        """Return every role with its privilege set."""
        return self._list()

    def get_role(self, role_id: str) -> Role:
        """Retrieve the privileges of a role.

        Args:
            role_id: Role id (e.g., "Administrator", "PVEAuditor")

        Returns:
            Role whose privileges are the keys of the server mapping
        """
        return self._get(role_id)

    def _decode(self, identifier: str, data: Mapping[str, Any]) -> Role:
        return decode_role(identifier, data)

    def add_role(self, role: Union[Role, FormInput]) -> ApiPayload:
        """Create a role. Privileges are sent as a comma-separated "privs" field."""
        return self._add(role)

    def edit_role(self, role_id: str, role: Union[Role, FormInput]) -> ApiPayload:
        """Replace the privileges of a role (pass {"append": ["1"]} in a form to add instead)."""
        return self._edit(role_id, role)

    def delete_role(self, role_id: str) -> None:
        self._delete(role_id)
