"""Proxmox group management operations."""
from __future__ import annotations
from typing import Any, Dict, List, Union

from .access import ResourceService
from .client import ApiPayload, FormInput
from .records import Group


class GroupService(ResourceService[Group]):
    """Service for managing Proxmox permission groups."""

    prefix = "/access/groups"
    id_field = "groupid"
    record_cls = Group

    def index_groups(self) -> List[Dict[str, Any]]:
        """Return the sparse group index ({"groupid": ..., "users": ...} entries)."""
        return self._index()

    def list_groups(self) -> List[Group]:
        """Return every group with comment and members populated.

        Issues one detail request per index entry, in index order.
        """
        return self._list()

    def get_group(self, name: str) -> Group:
        """Retrieve a group by id.

        The detail payload does not echo the group id; the returned record's
        name is always the requested one.

        Args:
            name: Group id

        Returns:
            Group record
        """
        return self._get(name)

    def add_group(self, group: Union[Group, FormInput]) -> ApiPayload:
        """Create a group from a Group record or a raw form ({"groupid": [...], ...})."""
        return self._add(group)

    def edit_group(self, name: str, group: Union[Group, FormInput]) -> ApiPayload:
        """Update the comment of an existing group."""
        return self._edit(name, group)

    def delete_group(self, name: str) -> None:
        """Delete a group."""
        self._delete(name)
