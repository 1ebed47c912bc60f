"""
Nameserver discovery for ZoneSweep.

Asks a resolving DNS server for the NS records of a domain, and locates the
platform's default resolving server when none is configured.
"""

import logging
from typing import Any, List, Optional

import dns.exception
import dns.message
import dns.name
import dns.query
import dns.rcode
import dns.rdatatype
import dns.resolver

logger = logging.getLogger(__name__)


class NameserverLookupError(Exception):
    """Nameserver resolution for a domain failed."""
    pass


class QueryError(NameserverLookupError):
    """The NS query could not be exchanged with the resolving server."""
    pass


class ResponseError(NameserverLookupError):
    """The resolving server answered with a non-success response code."""

    def __init__(self, domain: str, rcode: int):
        self.domain = domain
        self.rcode = rcode
        super().__init__(f"{dns.rcode.to_text(rcode)} response for {domain}")


class NameserverResolver:
    """
    Resolves the authoritative nameservers of a domain.

    Example:
        resolver = NameserverResolver(timeout=5.0)
        resolver.resolve("example.com", "8.8.8.8")
        # ['a.iana-servers.net', 'b.iana-servers.net']
    """

    def __init__(self, port: int = 53, timeout: Optional[float] = 5.0):
        """
        Initialize the resolver.

        Args:
            port: Port of the resolving server
            timeout: Query timeout in seconds (None to wait indefinitely)
        """
        self.port = port
        self.timeout = timeout

    def resolve(self, domain: str, resolving_server: str) -> List[str]:
        """
        Query NS records for a domain.

        Args:
            domain: Domain to look up
            resolving_server: Address of the DNS server to ask

        Returns:
            Nameserver hostnames in response order, trailing dot stripped

        Raises:
            QueryError: The exchange with the server failed
            ResponseError: The server did not answer NOERROR
        """
        logger.debug("Querying %s for NS records of %s", resolving_server, domain)
        try:
            query = dns.message.make_query(dns.name.from_text(domain), dns.rdatatype.NS)
            response, _ = dns.query.udp_with_fallback(
                query,
                resolving_server,
                timeout=self.timeout,
                port=self.port,
            )
        except dns.exception.Timeout as e:
            raise QueryError(f"NS query for {domain} to {resolving_server} timed out") from e
        except (dns.exception.DNSException, OSError, EOFError, ValueError) as e:
            raise QueryError(f"NS query for {domain} to {resolving_server} failed: {e}") from e

        rcode = response.rcode()
        if rcode != dns.rcode.NOERROR:
            raise ResponseError(domain, rcode)

        nameservers = []
        for rrset in response.answer:
            if rrset.rdtype != dns.rdatatype.NS:
                continue
            for rdata in rrset:
                nameservers.append(rdata.target.to_text().rstrip("."))

        return nameservers


def _nameserver_address(nameserver: Any) -> str:
    # Newer dnspython releases hold Nameserver objects instead of strings
    return str(getattr(nameserver, "address", nameserver))


def get_system_nameserver(resolv_conf: str = "/etc/resolv.conf") -> Optional[str]:
    """
    Get the first nameserver of the platform resolver configuration.

    Args:
        resolv_conf: resolv.conf path (ignored on Windows, where the registry is read)

    Returns:
        Nameserver address, or None if none is configured
    """
    try:
        system_resolver = dns.resolver.Resolver(filename=resolv_conf, configure=True)
    except (dns.exception.DNSException, OSError) as e:
        logger.debug("Could not read resolver configuration %s: %s", resolv_conf, e)
        return None

    if system_resolver.nameservers:
        return _nameserver_address(system_resolver.nameservers[0])

    return None
