"""
Zone transfer (AXFR) execution for ZoneSweep.

A transfer response may span several DNS messages ("envelopes"). They are
consumed one at a time from a blocking generator; each envelope's records
are normalized before being handed to the caller.
"""

import logging
from typing import Iterator, List, Optional

import dns.exception
import dns.name
import dns.query
import dns.rdatatype

from zonesweep.core.records import NormalizedRecord, ZoneTransferResult, normalize_rrset
from zonesweep.core.utils import is_valid_ip, resolve_hostname

logger = logging.getLogger(__name__)


class ZoneTransferError(Exception):
    """A zone transfer attempt failed."""
    pass


class TransferSetupError(ZoneTransferError):
    """The connection to the nameserver could not be established."""
    pass


class TransferStreamError(ZoneTransferError):
    """The nameserver rejected the transfer or the stream failed mid-way."""
    pass


class ZoneTransferExecutor:
    """
    Performs AXFR zone transfers against a single nameserver at a time.

    By default records from every envelope are accumulated. With
    ``keep_last_envelope`` each envelope replaces the records collected so
    far, so only the final envelope's records are kept.

    Example:
        executor = ZoneTransferExecutor(timeout=10.0)
        result = executor.transfer("zonetransfer.me", "nsztm1.digi.ninja")
        if result.success:
            print(f"{len(result.records)} records")
    """

    def __init__(
        self,
        port: int = 53,
        timeout: Optional[float] = 30.0,
        lifetime: Optional[float] = None,
        keep_last_envelope: bool = False,
    ):
        """
        Initialize the executor.

        Args:
            port: Nameserver port
            timeout: Per-message read timeout in seconds (None blocks indefinitely)
            lifetime: Total transfer time limit in seconds (None for no limit)
            keep_last_envelope: Keep only the last envelope's records
        """
        self.port = port
        self.timeout = timeout
        self.lifetime = lifetime
        self.keep_last_envelope = keep_last_envelope

    def _resolve_address(self, nameserver: str) -> str:
        """Resolve a nameserver hostname to the address to connect to."""
        if is_valid_ip(nameserver):
            return nameserver.strip("[]")

        try:
            return resolve_hostname(nameserver.rstrip("."))
        except (OSError, UnicodeError) as e:
            raise TransferSetupError(f"Could not resolve nameserver {nameserver}: {e}") from e

    def iter_envelopes(self, domain: str, nameserver: str) -> Iterator[List[NormalizedRecord]]:
        """
        Stream the envelopes of an AXFR response.

        Args:
            domain: Zone to transfer
            nameserver: Nameserver hostname or address

        Yields:
            Normalized records of each envelope, in arrival order

        Raises:
            TransferSetupError: The nameserver could not be reached
            TransferStreamError: The transfer was rejected or broke off
        """
        try:
            zone = dns.name.from_text(domain)
        except dns.exception.DNSException as e:
            raise TransferSetupError(f"Invalid domain name {domain}: {e}") from e
        address = self._resolve_address(nameserver)

        logger.debug("Starting AXFR of %s from %s (%s)", zone, nameserver, address)
        messages = dns.query.xfr(
            address,
            zone,
            rdtype=dns.rdatatype.AXFR,
            timeout=self.timeout,
            port=self.port,
            relativize=False,
            lifetime=self.lifetime,
        )

        received = 0
        try:
            for message in messages:
                received += 1
                records: List[NormalizedRecord] = []
                for rrset in message.answer:
                    records.extend(normalize_rrset(rrset))
                logger.debug(
                    "Envelope %d from %s: %d records", received, nameserver, len(records)
                )
                yield records
        except dns.query.TransferError as e:
            raise TransferStreamError(f"Transfer refused: {e}") from e
        except (dns.exception.Timeout, OSError) as e:
            if received == 0:
                reason = "timed out" if isinstance(e, dns.exception.Timeout) else str(e)
                raise TransferSetupError(
                    f"Could not connect to {nameserver}:{self.port}: {reason}"
                ) from e
            raise TransferStreamError(f"Transfer interrupted after {received} messages: {e}") from e
        except EOFError as e:
            raise TransferStreamError("Connection closed by nameserver") from e
        except dns.exception.DNSException as e:
            raise TransferStreamError(f"Transfer failed: {e}") from e
        finally:
            messages.close()

    def transfer(self, domain: str, nameserver: str) -> ZoneTransferResult:
        """
        Attempt a zone transfer of a domain from one nameserver.

        The result is always returned. When the attempt fails its ``error``
        is set and ``records`` holds whatever was received before the failure.

        Args:
            domain: Zone to transfer
            nameserver: Nameserver hostname or address

        Returns:
            ZoneTransferResult
        """
        result = ZoneTransferResult(domain=domain, nameserver=nameserver)

        try:
            for envelope in self.iter_envelopes(domain, nameserver):
                if self.keep_last_envelope:
                    result.records = envelope
                else:
                    result.records.extend(envelope)
        except ZoneTransferError as e:
            logger.debug("AXFR of %s from %s failed: %s", domain, nameserver, e)
            result.error = e

        return result
