"""Command-line front-end for the Proxmox /access API.

This module serves as a CLI wrapper around pveaccess.core.proxmox services.
"""
from __future__ import annotations
import argparse
import json
import logging
import sys
from dataclasses import asdict, is_dataclass
from pathlib import Path
from typing import Any, Dict, List

import urllib3
from urllib3.exceptions import InsecureRequestWarning

SCRIPT_DIR = Path(__file__).parent
PROJECT_ROOT = SCRIPT_DIR.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from pveaccess.config import load_settings
from pveaccess.core.proxmox import (
    AccessService,
    ApiPayload,
    DomainService,
    GroupService,
    ProxmoxClient,
    ProxmoxError,
    RoleService,
    UserService,
)

SERVICES = {
    "domains": (DomainService, "domain"),
    "groups": (GroupService, "group"),
    "roles": (RoleService, "role"),
    "users": (UserService, "user"),
}
ACTIONS = ("index", "list", "get", "add", "edit", "delete")


def parse_options(pairs: List[str]) -> Dict[str, List[str]]:
    """Turn repeated key=value arguments into a form mapping (keys may repeat)."""
    form: Dict[str, List[str]] = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            raise ValueError(f"Expected key=value, got '{pair}'")
        form.setdefault(key, []).append(value)
    return form


def to_jsonable(value: Any) -> Any:
    if isinstance(value, ApiPayload):
        return value.value
    if is_dataclass(value):
        return to_jsonable(asdict(value))
    if isinstance(value, dict):
        return {key: to_jsonable(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_jsonable(item) for item in value]
    if isinstance(value, (set, frozenset)):
        return sorted(value)
    return value


def run(client: ProxmoxClient, family: str, action: str, identifier: str | None, form: Dict[str, List[str]]) -> Any:
    """Dispatch one family/action pair and return the result."""
    if family == "access":
        return AccessService(client).subdirs()

    service_cls, noun = SERVICES[family]
    service = service_cls(client)
    needs_id = action in ("get", "edit", "delete")
    if needs_id and not identifier:
        raise ValueError(f"'{family} {action}' requires an identifier")

    if action == "index":
        return getattr(service, f"index_{family}")()
    if action == "list":
        return getattr(service, f"list_{family}")()
    if action == "get":
        return getattr(service, f"get_{noun}")(identifier)
    if action == "add":
        if identifier:
            form.setdefault(service.id_field, [identifier])
        return getattr(service, f"add_{noun}")(form)
    if action == "edit":
        return getattr(service, f"edit_{noun}")(identifier, form)
    getattr(service, f"delete_{noun}")(identifier)
    return {"deleted": identifier}


def main() -> None:
    """Command-line entry point."""
    settings = load_settings()

    parser = argparse.ArgumentParser(description="Proxmox VE access-control helper")
    parser.add_argument("--host", default=settings.host)
    parser.add_argument("--user", default=settings.username)
    parser.add_argument("--password", default=settings.password)
    parser.add_argument("--verify-ssl", action=argparse.BooleanOptionalAction, default=settings.verify_ssl)
    parser.add_argument("--timeout", type=float, default=settings.timeout)
    parser.add_argument("-v", "--verbose", action="store_true")

    sub = parser.add_subparsers(dest="family")
    sub.add_parser("access", help="List /access subdirectories")
    for family in SERVICES:
        sp = sub.add_parser(family)
        sp.add_argument("action", choices=ACTIONS)
        sp.add_argument("identifier", nargs="?")
        sp.add_argument("--set", dest="options", action="append", default=[], metavar="KEY=VALUE")

    args = parser.parse_args()

    if not args.family:
        parser.print_help()
        return

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s - %(levelname)s - %(name)s - %(message)s",
    )

    if not args.host:
        parser.error("Missing --host (or PVE_HOST)")
    if not args.password:
        parser.error("Missing --password (or PVE_PASSWORD / /run/secrets/pve_password)")

    try:
        form = parse_options(getattr(args, "options", []))
    except ValueError as e:
        parser.error(str(e))

    if not args.verify_ssl:
        urllib3.disable_warnings(InsecureRequestWarning)

    try:
        with ProxmoxClient.connect(args.host, args.user, args.password,
                                   verify_ssl=args.verify_ssl, timeout=args.timeout) as client:
            result = run(client, args.family, getattr(args, "action", None),
                         getattr(args, "identifier", None), form)
    except (ProxmoxError, ValueError) as e:
        print(f"[{args.family}] Error: {e}", file=sys.stderr)
        sys.exit(1)

    print(json.dumps(to_jsonable(result), indent=2, sort_keys=True))


if __name__ == "__main__":
    main()
