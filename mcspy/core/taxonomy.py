"""
mcspy/core/taxonomy.py - Cache key taxonomy parser

Splits a raw cache key into (prefix, bin, item). Key generators use
different delimiter conventions, so the parser tries an ordered list of
strategies; the first strategy whose convention applies to the key decides
the split. A split is only accepted when both prefix and bin are non-empty.

Conventions, in priority order:
    1. Percent-encoded colon, only when the key has no literal ":" at all
       ``site%3Acache_page%3Ahttp%3A//example.com`` -> (site, cache_page, http%3A//example.com)
    2. Dash
       ``site-cache_menu-links:main`` -> (site, cache_menu, links:main)

Example:
    parsed = parse_key(raw.key, slab=raw.slab)
    if parsed is None:
        ...  # unparseable, only visible in raw listings
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Iterator

from .types import ParsedKeyRecord, RawKeyRecord

ENCODED_COLON = "%3A"
DASH = "-"

# (prefix, bin, item) or None when the convention does not apply
Split = tuple[str, str, str]
KeyStrategy = Callable[[str], "Split | None"]


def _split_twice(key: str, delimiter: str) -> Split:
    """Split on the first two delimiters; a missing second delimiter leaves bin empty"""
    prefix, _, remainder = key.partition(delimiter)
    bin_name, sep, item = remainder.partition(delimiter)
    if not sep:
        return prefix, "", ""
    return prefix, bin_name, item


def split_encoded_colon(key: str) -> Split | None:
    """``prefix%3Abin%3Aitem``, only for keys without a literal colon"""
    if ":" in key or ENCODED_COLON not in key:
        return None
    return _split_twice(key, ENCODED_COLON)


def split_dash(key: str) -> Split | None:
    """``prefix-bin-item``"""
    if DASH not in key:
        return None
    return _split_twice(key, DASH)


# Append new conventions at the end; order is priority
KEY_STRATEGIES: tuple[KeyStrategy, ...] = (
    split_encoded_colon,
    split_dash,
)


def split_key(key: str, strategies: Iterable[KeyStrategy] = KEY_STRATEGIES) -> Split | None:
    """Split a key with the first applicable strategy

    Returns:
        (prefix, bin, item), or None when no strategy applies or the
        applicable one yields an empty prefix or bin
    """
    for strategy in strategies:
        split = strategy(key)
        if split is None:
            continue
        prefix, bin_name, _ = split
        if prefix and bin_name:
            return split
        return None
    return None


def parse_key(key: str, slab: int = 0) -> ParsedKeyRecord | None:
    """Parse a raw key into a ParsedKeyRecord (None if unparseable)"""
    split = split_key(key)
    if split is None:
        return None
    prefix, bin_name, item = split
    return ParsedKeyRecord(slab=slab, prefix=prefix, bin=bin_name, item=item)


def parse(raw: RawKeyRecord) -> ParsedKeyRecord | None:
    """Parse a RawKeyRecord"""
    return parse_key(raw.key, slab=raw.slab)


def matches_key_filter(key: str, key_grep: str | None) -> bool:
    """Substring key filter (None matches everything)"""
    return not key_grep or key_grep in key


def parse_records(
    records: Iterable[RawKeyRecord],
    key_grep: str | None = None,
) -> Iterator[ParsedKeyRecord]:
    """Filter raw records by key substring, then parse, dropping unparseable keys"""
    for raw in records:
        if not matches_key_filter(raw.key, key_grep):
            continue
        parsed = parse(raw)
        if parsed is not None:
            yield parsed
