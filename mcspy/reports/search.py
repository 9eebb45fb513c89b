"""
mcspy/reports/search.py - Deep search through item values

Scans every slab of every server (key grep applied while collecting),
fetches each value and reports the items whose value contains the search
text, case-insensitively.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from re import Pattern

from mcspy.cli.ui import ScanTracker, print_note, print_text
from mcspy.core.config import McSpyConfig
from mcspy.core.exceptions import ValidationError
from mcspy.core.protocol import ProtocolClient
from mcspy.core.scan import SlabScanner
from mcspy.core.types import RawKeyRecord

logger = logging.getLogger(__name__)

MIN_SEARCH_LENGTH = 4


@dataclass(frozen=True)
class SearchMatch:
    """An item whose value contains the search text"""

    record: RawKeyRecord

    def to_line(self) -> str:
        r = self.record
        return f"MATCH: SERVER={r.server} SLAB={r.slab} ITEM {r.key} [{r.size_bytes} b; {r.age_seconds} s]"


def compile_search(text: str) -> Pattern[bytes]:
    """Literal, case-insensitive pattern for the search text

    Raises:
        ValidationError: Text shorter than MIN_SEARCH_LENGTH
    """
    if len(text) < MIN_SEARCH_LENGTH:
        raise ValidationError("search", text, f"at least {MIN_SEARCH_LENGTH} characters")
    return re.compile(re.escape(text.encode("utf-8")), re.IGNORECASE | re.DOTALL)


def deep_search(
    config: McSpyConfig,
    text: str,
    scanner: SlabScanner | None = None,
    client: ProtocolClient | None = None,
    progress_tracker: ScanTracker | None = None,
) -> list[SearchMatch]:
    """Find items whose value contains ``text``

    Returns:
        Matches in (server, slab, key) order

    Raises:
        ValidationError: Search text too short
    """
    pattern = compile_search(text)
    scanner = scanner or SlabScanner(config)
    client = client or ProtocolClient(timeout=config.connect_timeout)

    records = scanner.scan(key_grep=config.key_grep, progress_tracker=progress_tracker)
    logger.info(f"Deep search over {len(records)} item(s)")

    matches: list[SearchMatch] = []
    for record in records:
        if record.server is None:
            continue
        value = client.get(record.server, record.key)
        if value is not None and pattern.search(value):
            matches.append(SearchMatch(record))

    if scanner.errors.has_errors:
        print_note(scanner.errors.get_summary())
    return matches


def print_matches(matches: list[SearchMatch]) -> None:
    for match in matches:
        print_text(match.to_line() + "\n")
