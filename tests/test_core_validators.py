import pytest

from pveaccess.core import validators


class TestNormalizeHostname:
    @pytest.mark.parametrize(
        "raw, expected",
        [
            ("pve.example.com", "https://pve.example.com"),
            ("  pve.example.com/ ", "https://pve.example.com"),
            ("http://pve.example.com", "http://pve.example.com"),
            ("https://10.0.0.5:8006", "https://10.0.0.5:8006"),
        ],
    )
    def test_scheme_added_when_missing(self, raw, expected):
        assert validators.normalize_hostname(raw) == expected

    @pytest.mark.parametrize("raw", ["", "   ", None])
    def test_empty_hostname(self, raw):
        with pytest.raises(ValueError, match="Hostname is required"):
            validators.normalize_hostname(raw)


class TestNormalizeUsername:
    def test_bare_name_gets_pam_realm(self):
        assert validators.normalize_username("root") == "root@pam"

    def test_qualified_name_kept(self):
        assert validators.normalize_username(" alice@pve ") == "alice@pve"

    def test_empty_username(self):
        with pytest.raises(ValueError, match="Username is required"):
            validators.normalize_username("")


class TestBuildBaseUrl:
    def test_default_port_appended(self):
        assert validators.build_base_url("https://pve.example.com") == "https://pve.example.com:8006/api2/json"

    def test_explicit_port_kept(self):
        assert validators.build_base_url("https://pve.example.com:8443") == "https://pve.example.com:8443/api2/json"

    @pytest.mark.parametrize("hostname", ["https://pve.example.com:abc", "https://"])
    def test_unparseable_hostname(self, hostname):
        with pytest.raises(ValueError, match="Invalid hostname"):
            validators.build_base_url(hostname)


def test_host_of_strips_scheme_and_port():
    assert validators.host_of("https://pve.example.com:8006") == "pve.example.com"
