"""Proxmox user management operations."""
from __future__ import annotations
from typing import Any, Dict, List, Union

from .access import ResourceService
from .client import ApiPayload, FormInput
from .records import User


class UserService(ResourceService[User]):
    """Service for managing Proxmox users."""

    prefix = "/access/users"
    id_field = "userid"
    record_cls = User

    def index_users(self) -> List[Dict[str, Any]]:
        """Return the sparse user index."""
        return self._index()

    def list_users(self) -> List[User]:
        """Return every user with the full detail record.

        Returns:
            User records in index order
        """
        return self._list()

    def get_user(self, user_id: str) -> User:
        """Retrieve a user by id.

        Args:
            user_id: User id in name@realm form

        Returns:
            User record
        """
        return self._get(user_id)

    def add_user(self, user: Union[User, FormInput]) -> ApiPayload:
        """Create a user.

        Args:
            user: User record (user_id required) or raw form

        Returns:
            Server echo
        """
        return self._add(user)

    def edit_user(self, user_id: str, user: Union[User, FormInput]) -> ApiPayload:
        """Update a user. Only non-empty record fields (and enable) are sent."""
        return self._edit(user_id, user)

    def delete_user(self, user_id: str) -> None:
        self._delete(user_id)
