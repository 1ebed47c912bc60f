"""
Zone transfer orchestration for ZoneSweep.

Walks the domain list, works out each domain's nameservers and attempts a
zone transfer against every one of them, collecting one ZoneTransferResult
per attempt.
"""

import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Callable, Iterable, List, Optional, Union

from zonesweep.core.config import ConfigError, ZoneSweepConfig
from zonesweep.core.records import DomainTarget, ZoneTransferResult
from zonesweep.core.resolver import NameserverLookupError, NameserverResolver, get_system_nameserver
from zonesweep.core.transfer import ZoneTransferExecutor

logger = logging.getLogger(__name__)

Callback = Callable[[str, Any], None]


class Orchestrator:
    """
    Runs zone transfers for a list of domains.

    Domains are processed in input order and, per domain, nameservers in
    resolver (or override) order, so the returned report lists attempts in
    the order they were made.

    Example:
        orchestrator = Orchestrator(config)
        results = orchestrator.run(["example.com", "example.org@ns1.example.org"])
        for result in results:
            print(result.domain, result.nameserver, len(result.records))
    """

    def __init__(
        self,
        config: Optional[ZoneSweepConfig] = None,
        resolver: Optional[NameserverResolver] = None,
        executor: Optional[ZoneTransferExecutor] = None,
        callback: Optional[Callback] = None,
    ):
        """
        Initialize the orchestrator.

        Args:
            config: Configuration (defaults if None)
            resolver: Nameserver resolver (built from config if None)
            executor: Zone transfer executor (built from config if None)
            callback: Optional callback for progress events
        """
        self.config = config or ZoneSweepConfig()
        self.resolver = resolver or NameserverResolver(
            port=self.config.resolver.port,
            timeout=self.config.resolver.timeout,
        )
        self.executor = executor or ZoneTransferExecutor(
            port=self.config.transfer.port,
            timeout=self.config.transfer.timeout,
            lifetime=self.config.transfer.lifetime,
            keep_last_envelope=self.config.transfer.keep_last_envelope,
        )
        self.callback = callback
        self._lock = threading.Lock()

    def _emit(self, event_type: str, data: Any) -> None:
        if self.callback:
            self.callback(event_type, data)

    def resolve_server(self, resolving_server: Optional[str] = None) -> Optional[str]:
        """
        Pick the server used for NS lookups.

        Order: explicit argument, configured nameserver, system resolver.
        """
        return (
            resolving_server
            or self.config.resolver.nameserver
            or get_system_nameserver(self.config.resolver.resolv_conf)
        )

    def run(
        self,
        targets: Iterable[Union[str, DomainTarget]],
        resolving_server: Optional[str] = None,
    ) -> List[ZoneTransferResult]:
        """
        Attempt zone transfers for every target.

        Args:
            targets: Domain tokens (``domain`` or ``domain@nameserver``) or DomainTargets
            resolving_server: Server for NS lookups (config or system resolver if None)

        Returns:
            One ZoneTransferResult per attempted (domain, nameserver) pair

        Raises:
            ConfigError: No domains given, or no resolving server available
        """
        parsed = []
        for target in targets:
            if isinstance(target, str):
                target = DomainTarget.parse(target)
            if target is not None:
                parsed.append(target)

        if not parsed:
            raise ConfigError("No domains specified")

        server = None
        if any(t.nameserver is None for t in parsed):
            server = self.resolve_server(resolving_server)
            if not server:
                raise ConfigError("Failed to get system nameserver, specify one with -n")
            logger.info("Using nameserver %s", server)
            self._emit("status", f"Using nameserver: {server}")

        self._emit("status", f"Attempting zone transfer for {len(parsed)} domains")

        results: List[ZoneTransferResult] = []
        for target in parsed:
            nameservers = self._nameservers_for(target, server)
            if nameservers is None:
                continue
            self._transfer_all(target.domain, nameservers, results)

        return results

    def _nameservers_for(self, target: DomainTarget, server: Optional[str]) -> Optional[List[str]]:
        """Nameservers of a target, or None if the lookup failed."""
        if target.nameserver is not None:
            nameservers = [target.nameserver]
        else:
            try:
                nameservers = self.resolver.resolve(target.domain, server)
            except NameserverLookupError as e:
                logger.info("Failed to get nameservers for %s: %s", target.domain, e)
                self._emit("lookup_failed", {"domain": target.domain, "error": str(e)})
                return None

        logger.info("Nameservers for %s: %s", target.domain, ", ".join(nameservers))
        self._emit("nameservers", {"domain": target.domain, "nameservers": nameservers})
        return nameservers

    def _transfer_all(self, domain: str, nameservers: List[str], results: List[ZoneTransferResult]) -> None:
        """Attempt a transfer from each nameserver, appending results in nameserver order."""
        workers = max(1, self.config.transfer.workers)

        if workers == 1 or len(nameservers) < 2:
            for ns in nameservers:
                self._emit("attempt", {"domain": domain, "nameserver": ns})
                self._record(self.executor.transfer(domain, ns), results)
            return

        with ThreadPoolExecutor(max_workers=min(workers, len(nameservers))) as pool:
            futures = []
            for ns in nameservers:
                self._emit("attempt", {"domain": domain, "nameserver": ns})
                futures.append(pool.submit(self.executor.transfer, domain, ns))
            for future in futures:
                self._record(future.result(), results)

    def _record(self, result: ZoneTransferResult, results: List[ZoneTransferResult]) -> None:
        with self._lock:
            results.append(result)

        if result.success:
            logger.info(
                "Zone transfer successful for %s against %s, identified %d records",
                result.domain, result.nameserver, len(result.records),
            )
        else:
            logger.info(
                "Zone transfer failed for %s against %s: %s",
                result.domain, result.nameserver, result.error,
            )
        self._emit("zone_transfer", result)
