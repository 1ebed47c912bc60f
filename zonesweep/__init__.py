"""
ZoneSweep - DNS Zone Transfer Auditing

Finds domains whose nameservers allow full zone transfers (AXFR) and
records what they disclose.
"""

__version__ = "1.0.0"
__license__ = "MIT"

from zonesweep.core.orchestrator import Orchestrator
from zonesweep.core.records import DomainTarget, NormalizedRecord, ZoneTransferResult

__all__ = ["Orchestrator", "DomainTarget", "NormalizedRecord", "ZoneTransferResult"]
