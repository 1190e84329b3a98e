# Tests for DNS utilities module
#
# These tests cover DC and Global Catalog discovery via SRV records.

from unittest.mock import MagicMock, patch

import dns.resolver

from adlookup.utils.dns import (
    DEFAULT_DNS_TIMEOUT,
    discover_domain_controllers,
    discover_global_catalog_servers,
    find_default_server,
)


def _srv(target, priority=0, weight=100):
    record = MagicMock()
    record.target = f"{target}."
    record.priority = priority
    record.weight = weight
    return record


class TestDiscoverDomainControllers:
    """Tests for discover_domain_controllers."""

    @patch("adlookup.utils.dns.dns.resolver.Resolver")
    def test_srv_query(self, mock_resolver_class):
        """Should query the _ldap._tcp.dc._msdcs SRV record."""
        resolver = mock_resolver_class.return_value
        resolver.resolve.return_value = [_srv("dc01.corp.local")]

        result = discover_domain_controllers("corp.local")

        assert result == ["dc01.corp.local"]
        resolver.resolve.assert_called_once_with("_ldap._tcp.dc._msdcs.corp.local", "SRV")
        assert resolver.timeout == DEFAULT_DNS_TIMEOUT

    @patch("adlookup.utils.dns.dns.resolver.Resolver")
    def test_sorted_by_priority_then_weight(self, mock_resolver_class):
        """Should order by lowest priority, then highest weight."""
        resolver = mock_resolver_class.return_value
        resolver.resolve.return_value = [
            _srv("dc03.corp.local", priority=10),
            _srv("dc02.corp.local", priority=0, weight=10),
            _srv("dc01.corp.local", priority=0, weight=50),
        ]

        assert discover_domain_controllers("corp.local") == [
            "dc01.corp.local",
            "dc02.corp.local",
            "dc03.corp.local",
        ]

    @patch("adlookup.utils.dns.dns.resolver.Resolver")
    def test_custom_nameserver(self, mock_resolver_class):
        """Should use the given nameserver."""
        resolver = mock_resolver_class.return_value
        resolver.resolve.return_value = []

        discover_domain_controllers("corp.local", nameserver="10.0.0.53")

        assert resolver.nameservers == ["10.0.0.53"]

    @patch("adlookup.utils.dns.dns.resolver.Resolver")
    def test_nxdomain(self, mock_resolver_class):
        """Should return an empty list when the record does not exist."""
        mock_resolver_class.return_value.resolve.side_effect = dns.resolver.NXDOMAIN()

        assert discover_domain_controllers("corp.local") == []


class TestDiscoverGlobalCatalog:
    """Tests for discover_global_catalog_servers."""

    @patch("adlookup.utils.dns.dns.resolver.Resolver")
    def test_srv_query(self, mock_resolver_class):
        resolver = mock_resolver_class.return_value
        resolver.resolve.return_value = [_srv("gc01.corp.local")]

        assert discover_global_catalog_servers("corp.local") == ["gc01.corp.local"]
        resolver.resolve.assert_called_once_with("_gc._tcp.corp.local", "SRV")


class TestFindDefaultServer:
    """Tests for find_default_server."""

    @patch("adlookup.utils.dns.discover_domain_controllers")
    def test_uses_first_dc(self, mock_discover):
        mock_discover.return_value = ["dc01.corp.local", "dc02.corp.local"]
        assert find_default_server("corp.local") == "dc01.corp.local"

    @patch("adlookup.utils.dns.discover_global_catalog_servers")
    def test_global_catalog(self, mock_discover):
        mock_discover.return_value = ["gc01.corp.local"]
        assert find_default_server("corp.local", global_catalog=True) == "gc01.corp.local"

    @patch("adlookup.utils.dns.discover_domain_controllers")
    def test_falls_back_to_domain(self, mock_discover):
        mock_discover.return_value = []
        assert find_default_server("corp.local") == "corp.local"
