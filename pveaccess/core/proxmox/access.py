"""Shared plumbing for /access resource families."""
from __future__ import annotations
import logging
from dataclasses import fields
from typing import Any, Dict, Generic, List, Mapping, Type, TypeVar, Union
from urllib.parse import quote

from .client import ApiPayload, FormInput, ProxmoxClient
from .exceptions import ProxmoxArgumentError, ProxmoxProtocolError
from .records import decode_record

logger = logging.getLogger(__name__)

R = TypeVar("R")


class AccessService:
    """Service for the /access directory itself."""

    def __init__(self, client: ProxmoxClient):
        self.client = client

    def subdirs(self) -> List[str]:
        """Return the valid subdirectories of /access (e.g. "users", "roles")."""
        entries = self.client.get("/access").as_sequence()
        return [entry["subdir"] for entry in entries if isinstance(entry, Mapping) and "subdir" in entry]


class ResourceService(Generic[R]):
    """CRUD over one /access family: index, expanded list, get, add, edit, delete.

    Subclasses set ``prefix`` (e.g. "/access/groups"), ``id_field`` (the key
    carrying the identifier in index entries) and ``record_cls``.
    """

    prefix = ""
    id_field = ""
    record_cls: Type[Any] = object

    def __init__(self, client: ProxmoxClient):
        """Initialize the service.

        Args:
            client: Authenticated Proxmox client
        """
        self.client = client

    def _path(self, identifier: str) -> str:
        if not identifier:
            raise ProxmoxArgumentError(f"Identifier required for {self.prefix}")
        return f"{self.prefix}/{quote(identifier, safe='@!')}"

    def _index(self) -> List[Dict[str, Any]]:
        entries = self.client.get(self.prefix).as_sequence()
        for entry in entries:
            if not isinstance(entry, Mapping) or not isinstance(entry.get(self.id_field), str):
                raise ProxmoxProtocolError(f"Index entry of {self.prefix} lacks '{self.id_field}': {entry!r}")
        return entries

    def _list(self) -> List[R]:
        records = [self._get(entry[self.id_field]) for entry in self._index()]
        logger.debug("Expanded %d entries from %s", len(records), self.prefix)
        return records

    def _get(self, identifier: str) -> R:
        data = self.client.get(self._path(identifier)).as_mapping()
        return self._decode(identifier, data)

    def _decode(self, identifier: str, data: Mapping[str, Any]) -> R:
        record = decode_record(self.record_cls, data)
        setattr(record, _id_attr(self.record_cls), identifier)
        return record

    def _add(self, item: Union[R, FormInput]) -> ApiPayload:
        payload = self.client.post(self.prefix, self._form(item, include_id=True))
        logger.info("Created %s entry", self.prefix)
        return payload

    def _edit(self, identifier: str, item: Union[R, FormInput]) -> ApiPayload:
        payload = self.client.post(self._path(identifier), self._form(item, include_id=False))
        logger.info("Updated %s/%s", self.prefix, identifier)
        return payload

    def _delete(self, identifier: str) -> None:
        self.client.delete(self._path(identifier))
        logger.info("Deleted %s/%s", self.prefix, identifier)

    def _form(self, item: Union[R, FormInput], include_id: bool) -> FormInput:
        if isinstance(item, self.record_cls):
            return item.to_form(include_id=include_id)
        if isinstance(item, Mapping):
            return item
        raise ProxmoxArgumentError(
            f"Expected {self.record_cls.__name__} or form mapping, got {type(item).__name__}"
        )


def _id_attr(record_cls: Type[Any]) -> str:
    for f in fields(record_cls):
        if f.metadata.get("api") == record_cls.id_field:
            return f.name
    raise AttributeError(f"{record_cls.__name__} declares no identifier field")
