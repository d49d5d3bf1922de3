"""Read-only checks against a real Proxmox VE host.

Runs only when PVE_HOST and PVE_PASSWORD are set; nothing is modified.
"""
import pytest

from pveaccess.config import load_settings
from pveaccess.core.proxmox import AccessService, ProxmoxClient, RoleService, UserService

pytestmark = pytest.mark.integration

settings = load_settings()
if not settings.is_complete:
    pytest.skip("PVE_HOST / PVE_PASSWORD not configured", allow_module_level=True)


@pytest.fixture(scope="module")
def live_client():
    with ProxmoxClient.connect(settings.host, settings.username, settings.password,
                               verify_ssl=settings.verify_ssl, timeout=settings.timeout) as client:
        yield client


def test_access_lists_known_subdirs(live_client):
    assert {"users", "groups", "roles", "domains"} <= set(AccessService(live_client).subdirs())


def test_builtin_administrator_role(live_client):
    role = RoleService(live_client).get_role("Administrator")
    assert "Sys.Audit" in role.privileges


def test_own_user_is_listed(live_client):
    ids = [entry["userid"] for entry in UserService(live_client).index_users()]
    assert live_client.username in ids
