# Impacket-backed directory transport.
#
# Implements the DirectoryService capability on top of impacket's LDAP
# client: one bound connection per session, subtree searches with the
# simple-paged-results control, raw octet values handed back to the client.

import contextlib
from typing import Iterator, List, Optional, Sequence

from impacket.ldap import ldap as ldap_impacket
from impacket.ldap import ldapasn1 as ldapasn1_impacket

from ..models.request import GLOBAL_CATALOG_PORT, Credentials
from ..utils.helpers import domain_to_base_dn, parse_ntlm_hashes
from ..utils.logging import debug, warn
from .client import PAGE_SIZE, RawEntry
from .exceptions import ERRORS, DirectoryConnectionError, DirectorySearchError

# URL scheme per explicit port; anything else is plain LDAP
_PORT_SCHEMES = {
    GLOBAL_CATALOG_PORT: "gc",
    636: "ldaps",
}

# Ports impacket connects to for each scheme
_SCHEME_PORTS = {
    "ldap": 389,
    "ldaps": 636,
    "gc": GLOBAL_CATALOG_PORT,
}


def build_ldap_url(server: str, port: Optional[int] = None) -> str:
    """
    Build the impacket connection URL for a server and optional port.

    impacket derives the TCP port from the scheme, so explicit ports other
    than 389, 636 and 3268 cannot be honored and are reported.
    """
    scheme = _PORT_SCHEMES.get(port, "ldap")
    if port is not None and port != _SCHEME_PORTS[scheme]:
        warn(f"Port {port} is not supported by the LDAP transport, connecting to {scheme} port {_SCHEME_PORTS[scheme]}")
    return f"{scheme}://{server}"


class ImpacketSession:
    """A bound impacket connection with a fixed search root."""

    def __init__(self, conn: ldap_impacket.LDAPConnection, server: str, base: str):
        self._conn = conn
        self.server = server
        self.base = base

    def search(
        self,
        search_filter: str,
        attributes: Optional[Sequence[str]] = None,
        page_size: int = PAGE_SIZE,
    ) -> List[RawEntry]:
        paged = ldapasn1_impacket.SimplePagedResultsControl(criticality=True, size=page_size)
        try:
            results = self._conn.search(
                searchBase=self.base,
                scope=ldapasn1_impacket.Scope("wholeSubtree"),
                searchFilter=search_filter,
                attributes=list(attributes) if attributes else [],
                searchControls=[paged],
            )
        except OSError as e:
            raise DirectoryConnectionError(
                ERRORS["connect"].format(server=self.server, error=e), server=self.server
            ) from e
        except Exception as e:
            raise DirectorySearchError(
                ERRORS["search"].format(server=self.server, error=e), server=self.server
            ) from e

        entries = []
        for result in results:
            # Skip search references
            if not isinstance(result, ldapasn1_impacket.SearchResultEntry):
                continue
            attributes_out = []
            for attribute in result["attributes"]:
                values = [bytes(val) for val in attribute["vals"]]
                attributes_out.append((str(attribute["type"]), values))
            entries.append(RawEntry(dn=str(result["objectName"]), attributes=attributes_out))
        return entries


class ImpacketDirectoryService:
    """
    DirectoryService backed by impacket.

    Args:
        credentials: Bind credentials; None skips the bind (anonymous)
        kdc_host: KDC address for Kerberos binds (defaults to the server)
    """

    def __init__(self, credentials: Optional[Credentials] = None, kdc_host: Optional[str] = None):
        self.credentials = credentials
        self.kdc_host = kdc_host

    @contextlib.contextmanager
    def session(
        self,
        server: str,
        port: Optional[int] = None,
        base: Optional[str] = None,
    ) -> Iterator[ImpacketSession]:
        conn = self._connect(server, port)
        try:
            if base is None:
                base = self._default_base(conn, port)
            debug(f"LDAP: Session on {server} rooted at {base!r}")
            yield ImpacketSession(conn, server, base)
        finally:
            with contextlib.suppress(Exception):
                conn.close()
            debug(f"LDAP: Session on {server} closed")

    def _connect(self, server: str, port: Optional[int]) -> ldap_impacket.LDAPConnection:
        url = build_ldap_url(server, port)
        debug(f"LDAP: Connecting to {url}")
        try:
            conn = ldap_impacket.LDAPConnection(url, baseDN="")
        except Exception as e:
            raise DirectoryConnectionError(
                ERRORS["connect"].format(server=server, error=e), server=server
            ) from e

        try:
            self._bind(conn, server)
        except Exception as e:
            with contextlib.suppress(Exception):
                conn.close()
            raise DirectoryConnectionError(
                ERRORS["connect"].format(server=server, error=e), server=server
            ) from e
        return conn

    def _bind(self, conn: ldap_impacket.LDAPConnection, server: str) -> None:
        creds = self.credentials
        if creds is None:
            debug("LDAP: No credentials, searching without a bind")
            return

        lmhash, nthash = parse_ntlm_hashes(creds.hashes)
        if creds.kerberos:
            debug(f"LDAP: Kerberos bind as {creds.domain}\\{creds.username}")
            conn.kerberosLogin(
                user=creds.username,
                password=creds.password or "",
                domain=creds.domain or "",
                lmhash=lmhash,
                nthash=nthash,
                kdcHost=self.kdc_host or server,
                useCache=True,
            )
        else:
            debug(f"LDAP: NTLM bind as {creds.domain}\\{creds.username}")
            conn.login(
                user=creds.username,
                password=creds.password or "",
                domain=creds.domain or "",
                lmhash=lmhash,
                nthash=nthash,
            )

    def _default_base(self, conn: ldap_impacket.LDAPConnection, port: Optional[int]) -> str:
        """Global Catalog searches span the forest; others use the defaultNamingContext."""
        if port == GLOBAL_CATALOG_PORT:
            return ""

        try:
            results = conn.search(
                searchBase="",
                scope=ldapasn1_impacket.Scope("baseObject"),
                searchFilter="(objectClass=*)",
                attributes=["defaultNamingContext"],
            )
            for result in results:
                if not isinstance(result, ldapasn1_impacket.SearchResultEntry):
                    continue
                for attribute in result["attributes"]:
                    if str(attribute["type"]).lower() == "defaultnamingcontext" and attribute["vals"]:
                        return bytes(attribute["vals"][0]).decode("utf-8")
        except Exception as e:
            debug(f"LDAP: RootDSE lookup failed: {e}")

        domain = self.credentials.domain if self.credentials else None
        if domain and "." in domain:
            debug(f"LDAP: Deriving search root from domain {domain}")
            return domain_to_base_dn(domain)

        warn("Could not determine the default naming context, searching from the root")
        return ""
