"""Core zone transfer modules."""

from zonesweep.core.records import (
    DomainTarget,
    NormalizedRecord,
    ZoneTransferResult,
    normalize_record,
    normalize_rrset,
    record_type_name,
    render_rdata,
)
from zonesweep.core.resolver import (
    NameserverLookupError,
    NameserverResolver,
    QueryError,
    ResponseError,
    get_system_nameserver,
)
from zonesweep.core.transfer import (
    TransferSetupError,
    TransferStreamError,
    ZoneTransferError,
    ZoneTransferExecutor,
)
from zonesweep.core.config import (
    ConfigError,
    ConfigManager,
    ZoneSweepConfig,
)
from zonesweep.core.orchestrator import Orchestrator

__all__ = [
    "DomainTarget",
    "NormalizedRecord",
    "ZoneTransferResult",
    "normalize_record",
    "normalize_rrset",
    "record_type_name",
    "render_rdata",
    "NameserverLookupError",
    "NameserverResolver",
    "QueryError",
    "ResponseError",
    "get_system_nameserver",
    "TransferSetupError",
    "TransferStreamError",
    "ZoneTransferError",
    "ZoneTransferExecutor",
    "ConfigError",
    "ConfigManager",
    "ZoneSweepConfig",
    "Orchestrator",
]
