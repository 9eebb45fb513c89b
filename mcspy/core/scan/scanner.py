"""
mcspy/core/scan/scanner.py - Slab scanner

Enumerates keys with ``stats cachedump <slab> 0``, one connection per
(server, slab). The server exposes no global key listing, so every slab id
in the configured range is queried in turn.

Failure handling:
- connect failure on the first slab: the server is unreachable, its task
  fails and its remaining slabs are skipped
- any other failure (later connect failure, read timeout, reset): only that
  slab is skipped
- lines other than ``ITEM ...`` are ignored

Servers may be scanned concurrently (``max_workers``); slabs of one server
never are. Records are sorted by (server, slab, key) before being returned.

Example:
    scanner = SlabScanner(config)
    records = scanner.scan()
    if scanner.errors.has_errors:
        print(scanner.errors.get_summary())
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from typing import TYPE_CHECKING

from mcspy.core.config import McSpyConfig, ServerAddress
from mcspy.core.exceptions import ConnectionFailure
from mcspy.core.parallel import ErrorCollector, ParallelConfig, ServerExecutor
from mcspy.core.protocol import LineKind, ProtocolClient, classify_line
from mcspy.core.taxonomy import matches_key_filter
from mcspy.core.types import RawKeyRecord

if TYPE_CHECKING:
    from mcspy.cli.ui.progress import ScanTracker

logger = logging.getLogger(__name__)


def cachedump_command(slab: int) -> str:
    """``stats cachedump <slab> 0`` (0 = no item limit)"""
    return f"stats cachedump {slab} 0"


def parse_cachedump(
    response: str,
    server: ServerAddress,
    slab: int,
    key_grep: str | None = None,
) -> list[RawKeyRecord]:
    """Extract ITEM lines from a cachedump response

    Args:
        response: Decoded response text (terminator excluded)
        server: Originating server
        slab: Queried slab id
        key_grep: Optional key substring filter

    Returns:
        RawKeyRecord list in response order
    """
    records: list[RawKeyRecord] = []
    for line in response.splitlines():
        parsed = classify_line(line)
        if parsed.kind is not LineKind.ITEM:
            continue
        key, size, age = parsed.fields
        if not matches_key_filter(key, key_grep):
            continue
        records.append(
            RawKeyRecord(
                server=server,
                slab=slab,
                key=key,
                size_bytes=int(size),
                age_seconds=int(age),
            )
        )
    return records


class SlabScanner:
    """Enumerates keys of every configured server and slab

    Attributes:
        config: Runtime configuration
        client: Protocol client used for cachedump requests
        errors: Recovered failures of the scans run so far
    """

    def __init__(
        self,
        config: McSpyConfig,
        client: ProtocolClient | None = None,
        errors: ErrorCollector | None = None,
    ):
        self.config = config
        self.client = client or ProtocolClient(timeout=config.scan_timeout)
        self.errors = errors or ErrorCollector("cachedump")

    def scan_slab(
        self,
        server: ServerAddress,
        slab: int,
        key_grep: str | None = None,
    ) -> list[RawKeyRecord]:
        """Scan one slab of one server

        Raises:
            ConnectionFailure: Only when the connection could not be established
        """
        try:
            raw = self.client.exchange(server, cachedump_command(slab), timeout=self.config.scan_timeout)
        except ConnectionFailure as e:
            if not e.connected:
                raise
            self.errors.collect(e, str(server), slab=slab)
            return []

        records = parse_cachedump(raw.decode("utf-8", errors="replace"), server, slab, key_grep)
        logger.debug(f"{server} slab {slab}: {len(records)} item(s)")
        return records

    def scan_server(
        self,
        server: ServerAddress,
        slabs: Iterable[int] | None = None,
        key_grep: str | None = None,
    ) -> list[RawKeyRecord]:
        """Scan every slab of one server sequentially

        A connect failure on the first slab marks the server unreachable and
        is raised. Later connect failures only skip their slab.

        Raises:
            ConnectionFailure: The first slab's connection could not be established
        """
        records: list[RawKeyRecord] = []
        for index, slab in enumerate(slabs if slabs is not None else self.config.slabs):
            try:
                records.extend(self.scan_slab(server, slab, key_grep))
            except ConnectionFailure as e:
                if index == 0:
                    raise
                self.errors.collect(e, str(server), slab=slab)
        return records

    def scan(
        self,
        servers: Sequence[ServerAddress] | None = None,
        slabs: Iterable[int] | None = None,
        key_grep: str | None = None,
        progress_tracker: ScanTracker | None = None,
    ) -> list[RawKeyRecord]:
        """Scan all servers

        Args:
            servers: Servers to scan (default: config.servers)
            slabs: Slab ids (default: config.slabs)
            key_grep: Key substring filter applied at collection time
            progress_tracker: Optional progress tracker (one step per server)

        Returns:
            Records sorted by (server, slab, key)
        """
        servers = list(servers if servers is not None else self.config.servers)
        slab_ids = tuple(slabs if slabs is not None else self.config.slabs)

        if progress_tracker:
            progress_tracker.set_total(len(servers))

        executor = ServerExecutor(ParallelConfig(max_workers=self.config.max_workers))
        result = executor.execute(
            lambda server: self.scan_server(server, slab_ids, key_grep),
            servers,
            progress_tracker=progress_tracker,
        )

        for error in result.get_errors():
            self.errors.collect(error.original_exception or RuntimeError(error.message), error.identifier)

        records = [record for chunk in result.get_data() for record in chunk]
        records.sort(key=RawKeyRecord.sort_key)
        logger.info(f"Scanned {len(servers)} server(s) x {len(slab_ids)} slab(s): {len(records)} item(s)")
        return records
