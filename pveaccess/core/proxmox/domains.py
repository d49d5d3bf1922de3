"""Proxmox authentication realm (domain) operations."""
from __future__ import annotations
from typing import Any, Dict, List, Union

from .access import ResourceService
from .client import ApiPayload, FormInput
from .records import Realm


class DomainService(ResourceService[Realm]):
    """Service for managing Proxmox authentication realms."""

    prefix = "/access/domains"
    id_field = "realm"
    record_cls = Realm

    def index_domains(self) -> List[Dict[str, Any]]:
        """Return the sparse realm index.

        Unlike list_domains, this needs no special privilege.
        """
        return self._index()

    def list_domains(self) -> List[Realm]:
        """Return every realm with its full configuration.

        Each detail request requires Realm.Allocate or Sys.Audit; the first
        permission error aborts the listing and is raised unchanged.

        Returns:
            Realm records in index order
        """
        return self._list()

    def get_domain(self, name: str) -> Realm:
        """Retrieve the configuration of a realm.

        Args:
            name: Realm name (e.g., "pve", "pam")

        Returns:
            Realm record
        """
        return self._get(name)

    def add_domain(self, realm: Union[Realm, FormInput]) -> ApiPayload:
        """Create a realm. The server requires at least realm and type."""
        return self._add(realm)

    def edit_domain(self, name: str, realm: Union[Realm, FormInput]) -> ApiPayload:
        return self._edit(name, realm)

    def delete_domain(self, name: str) -> None:
        self._delete(name)
