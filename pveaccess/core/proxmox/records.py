"""Typed records for /access resources and the payload decoder.

Each dataclass field declares the server key it maps to (``api``) and the
kind of value expected (``kind``). Decoding matches keys case-insensitively,
ignores unknown keys and leaves missing fields at their zero value.
"""
from __future__ import annotations
from dataclasses import dataclass, field, fields
from typing import Any, Dict, List, Mapping, Optional, Type, TypeVar

from .exceptions import ProxmoxDecodeError

T = TypeVar("T")

FormData = Dict[str, List[str]]


def _api(key: str, kind: str = "str", readonly: bool = False, create_only: bool = False) -> dict:
    return {"api": key, "kind": kind, "readonly": readonly, "create_only": create_only}


class _Record:
    """Form serialization shared by all records."""

    id_field = ""

    def to_form(self, include_id: bool = False) -> FormData:
        return _to_form(self, include_id)


@dataclass
class Realm(_Record):
    """Authentication domain (pam, pve, ldap, ad, openid)."""
    name: str = field(default="", metadata=_api("realm"))
    comment: str = field(default="", metadata=_api("comment"))
    digest: str = field(default="", metadata=_api("digest"))
    plugin: str = field(default="", metadata=_api("plugin", readonly=True))
    type: str = field(default="", metadata=_api("type", create_only=True))

    id_field = "realm"


@dataclass
class Group(_Record):
    """Permission group; members are fully-qualified user ids."""
    name: str = field(default="", metadata=_api("groupid"))
    comment: str = field(default="", metadata=_api("comment"))
    members: List[str] = field(default_factory=list, metadata=_api("members", "list", readonly=True))

    id_field = "groupid"


@dataclass
class Role(_Record):
    """Named set of privileges."""
    role_id: str = field(default="", metadata=_api("roleid"))
    privileges: frozenset = field(default_factory=frozenset, metadata=_api("privs", "keyset"))

    id_field = "roleid"


@dataclass
class User(_Record):
    """User account identified by name@realm."""
    user_id: str = field(default="", metadata=_api("userid"))
    comment: str = field(default="", metadata=_api("comment"))
    email: str = field(default="", metadata=_api("email"))
    enable: Optional[int] = field(default=None, metadata=_api("enable", "flag"))
    expire: Optional[int] = field(default=None, metadata=_api("expire", "int"))
    first_name: str = field(default="", metadata=_api("firstname"))
    last_name: str = field(default="", metadata=_api("lastname"))
    key_ids: str = field(default="", metadata=_api("keys"))
    groups: List[str] = field(default_factory=list, metadata=_api("groups", "list"))

    id_field = "userid"


# ─────────────────────────────────────────────────────────────────────────────
# Decoding
# ─────────────────────────────────────────────────────────────────────────────

def decode_record(cls: Type[T], payload: Any) -> T:
    """Materialize a record from a loosely-typed server mapping.

    Args:
        cls: Record dataclass (Realm, Group, Role or User)
        payload: Mapping from the "data" envelope

    Returns:
        Instance of cls

    Raises:
        ProxmoxDecodeError: If payload is not a mapping or a field has the wrong shape
    """
    if not isinstance(payload, Mapping):
        raise ProxmoxDecodeError(f"{cls.__name__}: expected a mapping, got {type(payload).__name__}")

    lowered = {str(key).lower(): value for key, value in payload.items()}
    values: Dict[str, Any] = {}
    for f in fields(cls):
        kind = f.metadata.get("kind", "str")
        raw = _lookup(lowered, f.metadata.get("api", f.name), f.name)
        if raw is None:
            # None is reserved for numbers the caller left unset
            if kind in ("int", "flag"):
                values[f.name] = 0
            continue
        values[f.name] = _coerce(raw, kind, f"{cls.__name__}.{f.name}")
    return cls(**values)


def decode_role(role_id: str, payload: Any) -> Role:
    """Build a Role from the privilege mapping returned by /access/roles/{id}.

    The server answers with {"Priv.Name": 1, ...}; only the keys matter.
    """
    if not isinstance(payload, Mapping):
        raise ProxmoxDecodeError(f"Role.privileges: expected a mapping, got {type(payload).__name__}")
    return Role(role_id=role_id, privileges=frozenset(str(key) for key in payload))


def _lookup(lowered: Mapping[str, Any], api_key: str, attr: str) -> Any:
    for candidate in (api_key, attr, attr.replace("_", "")):
        value = lowered.get(candidate.lower())
        if value is not None:
            return value
    return None


def _coerce(raw: Any, kind: str, where: str) -> Any:
    if kind == "str":
        if isinstance(raw, str):
            return raw
        raise ProxmoxDecodeError(f"{where}: expected string, got {type(raw).__name__}")

    if kind in ("int", "flag"):
        if isinstance(raw, bool):
            if kind == "flag":
                return int(raw)
            raise ProxmoxDecodeError(f"{where}: expected number, got bool")
        if isinstance(raw, int):
            return raw
        if isinstance(raw, float) and raw.is_integer():
            return int(raw)
        if isinstance(raw, str) and raw.strip().lstrip("-").isdigit():
            return int(raw.strip())
        raise ProxmoxDecodeError(f"{where}: expected integer, got {raw!r}")

    if kind == "list":
        if isinstance(raw, str):
            return [item.strip() for item in raw.split(",") if item.strip()]
        if isinstance(raw, (list, tuple)):
            if not all(isinstance(item, str) for item in raw):
                raise ProxmoxDecodeError(f"{where}: expected a list of strings")
            return list(raw)
        raise ProxmoxDecodeError(f"{where}: expected list, got {type(raw).__name__}")

    if kind == "keyset":
        if isinstance(raw, Mapping):
            return frozenset(str(key) for key in raw)
        if isinstance(raw, str):
            return frozenset(item.strip() for item in raw.split(",") if item.strip())
        if isinstance(raw, (list, tuple, set, frozenset)):
            return frozenset(str(item) for item in raw)
        raise ProxmoxDecodeError(f"{where}: expected privilege mapping, got {type(raw).__name__}")

    raise ProxmoxDecodeError(f"{where}: unknown field kind '{kind}'")


# ─────────────────────────────────────────────────────────────────────────────
# Encoding
# ─────────────────────────────────────────────────────────────────────────────

def _to_form(record: Any, include_id: bool) -> FormData:
    """Serialize a record into the form body the server expects.

    Empty strings, empty lists and unset (None) numbers are omitted so that an
    edit only touches the fields the caller filled in. Create-only fields are
    sent together with the identifier.
    """
    form: FormData = {}
    id_field = type(record).id_field
    for f in fields(record):
        api_key = f.metadata.get("api", f.name)
        if f.metadata.get("readonly"):
            continue
        if (api_key == id_field or f.metadata.get("create_only")) and not include_id:
            continue

        value = getattr(record, f.name)
        kind = f.metadata.get("kind", "str")
        if kind in ("int", "flag"):
            if value is not None:
                form[api_key] = [str(int(value))]
        elif kind in ("list", "keyset"):
            items = sorted(value) if kind == "keyset" else list(value)
            if items:
                form[api_key] = [",".join(items)]
        elif value:
            form[api_key] = [str(value)]
    return form
