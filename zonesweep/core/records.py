"""
Zone transfer data model and record normalization for ZoneSweep.

Every resource record received during a zone transfer is flattened into a
NormalizedRecord of four presentation-format strings/ints, regardless of
its concrete record type.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, TYPE_CHECKING

import dns.name
import dns.rdata
import dns.rdatatype
import dns.rrset

if TYPE_CHECKING:
    from zonesweep.core.transfer import ZoneTransferError


@dataclass(frozen=True)
class DomainTarget:
    """A domain to transfer, with an optional explicit nameserver."""
    domain: str
    nameserver: Optional[str] = None

    @classmethod
    def parse(cls, token: str) -> Optional["DomainTarget"]:
        """
        Parse a raw ``domain`` or ``domain@nameserver`` token.

        Args:
            token: Raw input token (CLI argument or file line)

        Returns:
            DomainTarget, or None for an empty token
        """
        token = token.strip()
        if not token:
            return None

        domain, _, nameserver = token.partition("@")
        domain = domain.strip()
        nameserver = nameserver.strip()
        if not domain:
            return None

        return cls(domain=domain, nameserver=nameserver or None)


@dataclass
class NormalizedRecord:
    """A single resource record in uniform form."""
    name: str
    type: str
    ttl: int
    value: str

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "name": self.name,
            "type": self.type,
            "ttl": self.ttl,
            "value": self.value,
        }


@dataclass
class ZoneTransferResult:
    """Result of one zone transfer attempt against one nameserver."""
    domain: str
    nameserver: str
    records: List[NormalizedRecord] = field(default_factory=list)
    error: Optional["ZoneTransferError"] = None

    @property
    def success(self) -> bool:
        return self.error is None

    @property
    def error_message(self) -> Optional[str]:
        return str(self.error) if self.error is not None else None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "domain": self.domain,
            "nameserver": self.nameserver,
            "records": [r.to_dict() for r in self.records],
        }


def record_type_name(rdtype: int) -> str:
    """Mnemonic for an RR type code, ``TYPE<code>`` when unknown."""
    return dns.rdatatype.to_text(rdtype)


def render_rdata(rdata: dns.rdata.Rdata) -> str:
    """
    Render the RDATA portion of a record in presentation format.

    Each rdata class renders itself; types dnspython has no class for come
    out in the RFC 3597 generic ``\\# <length> <hex>`` form.
    """
    text = rdata.to_text()
    return text.replace("\n", " ").replace("\t", " ")


def normalize_record(name: dns.name.Name, ttl: int, rdata: dns.rdata.Rdata) -> NormalizedRecord:
    """
    Convert a single resource record into a NormalizedRecord.

    Args:
        name: Owner name (absolute names keep their trailing dot)
        ttl: Record TTL in seconds
        rdata: Record payload

    Returns:
        NormalizedRecord
    """
    return NormalizedRecord(
        name=name.to_text(),
        type=record_type_name(rdata.rdtype),
        ttl=int(ttl),
        value=render_rdata(rdata),
    )


def normalize_rrset(rrset: dns.rrset.RRset) -> List[NormalizedRecord]:
    """Normalize every record of an RRset, in order."""
    return [normalize_record(rrset.name, rrset.ttl, rdata) for rdata in rrset]
