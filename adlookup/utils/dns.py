# DNS utilities for adlookup
#
# Locates a domain controller or Global Catalog server for a domain via
# DNS SRV records when no server was given on the command line.

from typing import List, Optional

import dns.exception
import dns.resolver

from .logging import debug

# Default timeout for DNS operations (seconds)
DEFAULT_DNS_TIMEOUT = 5


def _srv_targets(
    srv_name: str,
    nameserver: Optional[str] = None,
    timeout: int = DEFAULT_DNS_TIMEOUT,
) -> List[str]:
    """Resolve an SRV name and return its targets ordered by priority, then weight."""
    resolver = dns.resolver.Resolver(configure=True)
    if nameserver:
        resolver.nameservers = [nameserver]
    resolver.timeout = timeout
    resolver.lifetime = timeout

    debug(f"DNS: Querying SRV record {srv_name}")
    try:
        answers = resolver.resolve(srv_name, "SRV")
    except (dns.exception.DNSException, OSError) as e:
        debug(f"DNS: SRV lookup for {srv_name} failed: {e}")
        return []

    records = sorted(answers, key=lambda r: (r.priority, -r.weight))
    targets = []
    for rdata in records:
        host = str(rdata.target).rstrip(".")
        if host:
            targets.append(host)
            debug(f"DNS: Found {host} via SRV (priority={rdata.priority}, weight={rdata.weight})")
    return targets


def discover_domain_controllers(
    domain: str,
    nameserver: Optional[str] = None,
    timeout: int = DEFAULT_DNS_TIMEOUT,
) -> List[str]:
    """
    Discover domain controllers via the _ldap._tcp.dc._msdcs.<domain> SRV record.

    Args:
        domain: Domain name (e.g., "corp.local")
        nameserver: Optional DNS server to use (defaults to system DNS)
        timeout: DNS query timeout in seconds

    Returns:
        List of DC hostnames (may be empty if discovery fails)
    """
    return _srv_targets(f"_ldap._tcp.dc._msdcs.{domain}", nameserver=nameserver, timeout=timeout)


def discover_global_catalog_servers(
    domain: str,
    nameserver: Optional[str] = None,
    timeout: int = DEFAULT_DNS_TIMEOUT,
) -> List[str]:
    """
    Discover Global Catalog servers via the _gc._tcp.<domain> SRV record.

    Returns:
        List of GC server hostnames (may be empty if discovery fails)
    """
    return _srv_targets(f"_gc._tcp.{domain}", nameserver=nameserver, timeout=timeout)


def find_default_server(
    domain: str,
    global_catalog: bool = False,
    nameserver: Optional[str] = None,
) -> str:
    """
    Pick a directory server for a domain.

    Uses the highest-priority SRV target when discovery succeeds; otherwise the
    domain name itself, which resolves to the domain controllers in AD DNS.
    """
    if global_catalog:
        servers = discover_global_catalog_servers(domain, nameserver=nameserver)
    else:
        servers = discover_domain_controllers(domain, nameserver=nameserver)

    if servers:
        debug(f"DNS: Using discovered server {servers[0]} for {domain}")
        return servers[0]

    debug(f"DNS: No SRV records for {domain}, using the domain name as server")
    return domain
