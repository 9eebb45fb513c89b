"""
mcspy/core/protocol/client.py - Minimal memcache text protocol client

One TCP connection per command: connect, write ``<command>\\r\\n``, read lines
until a terminator (END, DELETED, NOT_FOUND, OK) or until the peer closes,
close. No pooling, no pipelining, no retry.

Two flavours of every call:
- ``exchange()`` raises ConnectionFailure
- ``send()`` / ``request()`` / ``get()`` return None instead (failure marker)

Example:
    client = ProtocolClient(timeout=2.0)

    raw = client.send(ServerAddress("localhost"), "stats settings")
    if raw is None:
        print("unreachable")

    for line in client.request(server, "stats cachedump 5 0") or []:
        if line.kind is LineKind.ITEM:
            print(line.fields[0])
"""

from __future__ import annotations

import logging
import socket
from collections.abc import Iterator
from contextlib import contextmanager
from typing import BinaryIO

from mcspy.core.config import DEFAULT_CONNECT_TIMEOUT, ServerAddress
from mcspy.core.exceptions import ConnectionFailure, ValidationError

from .lines import LineKind, ResponseLine, classify_line, is_terminator

logger = logging.getLogger(__name__)

ENCODING = "utf-8"
CRLF = b"\r\n"
MAX_KEY_LENGTH = 250


def _decode(raw: bytes) -> str:
    return raw.decode(ENCODING, errors="replace")


class ProtocolClient:
    """Memcache text protocol client (diagnostic commands and ``get`` only)

    Attributes:
        timeout: Default connect/read timeout in seconds
    """

    def __init__(self, timeout: float = DEFAULT_CONNECT_TIMEOUT):
        self.timeout = timeout

    @contextmanager
    def _connect(
        self,
        server: ServerAddress,
        command: str,
        timeout: float | None,
    ) -> Iterator[BinaryIO]:
        """Open a connection, write the command and yield the response stream

        The socket is closed on every exit path.
        """
        try:
            sock = socket.create_connection((server.host, server.port), timeout=timeout or self.timeout)
        except OSError as e:
            raise ConnectionFailure(str(server), command, cause=e) from e

        try:
            with sock, sock.makefile("rb") as stream:
                sock.sendall(command.encode(ENCODING) + CRLF)
                yield stream
        except OSError as e:
            raise ConnectionFailure(str(server), command, cause=e, connected=True) from e

    def exchange(
        self,
        server: ServerAddress,
        command: str,
        timeout: float | None = None,
    ) -> bytes:
        """Send one command and return every line before the terminator

        Args:
            server: Target server
            command: Command without CRLF (e.g. "stats slabs")
            timeout: Override of the default timeout

        Returns:
            Concatenated response lines (CRLF included), terminator excluded

        Raises:
            ConnectionFailure: Connect refused, timed out or socket error
        """
        chunks: list[bytes] = []
        with self._connect(server, command, timeout) as stream:
            for raw in stream:
                if is_terminator(_decode(raw)):
                    break
                chunks.append(raw)
        return b"".join(chunks)

    def send(
        self,
        server: ServerAddress,
        command: str,
        timeout: float | None = None,
    ) -> bytes | None:
        """Like exchange(), but returns None when the server is unreachable"""
        try:
            return self.exchange(server, command, timeout)
        except ConnectionFailure as e:
            logger.info(str(e))
            return None

    def request(
        self,
        server: ServerAddress,
        command: str,
        timeout: float | None = None,
    ) -> list[ResponseLine] | None:
        """Send one command and return the classified response lines

        Returns:
            ResponseLine list (UNKNOWN lines included), or None on connection failure
        """
        raw = self.send(server, command, timeout)
        if raw is None:
            return None
        return [classify_line(line) for line in _decode(raw).splitlines()]

    def fetch(
        self,
        server: ServerAddress,
        key: str,
        timeout: float | None = None,
    ) -> bytes | None:
        """Fetch one item value with ``get <key>``

        Returns:
            Value bytes, or None when the key is not stored

        Raises:
            ValidationError: Key is empty, too long or contains whitespace
            ConnectionFailure: Server unreachable or response truncated
        """
        if not key or len(key) > MAX_KEY_LENGTH or any(c.isspace() for c in key):
            raise ValidationError("key", key, "1-250 chars without whitespace")

        command = f"get {key}"
        with self._connect(server, command, timeout) as stream:
            header = classify_line(_decode(stream.readline()))
            if header.kind is not LineKind.VALUE:
                # END (miss) or anything unexpected
                return None

            size = int(header.fields[2])
            data = stream.read(size + len(CRLF))
            if len(data) < size:
                raise ConnectionFailure(str(server), command, connected=True)

            # drain up to END so the server sees a clean close
            for raw in stream:
                if is_terminator(_decode(raw)):
                    break

        return data[:size]

    def get(
        self,
        server: ServerAddress,
        key: str,
        timeout: float | None = None,
    ) -> bytes | None:
        """Like fetch(), but also returns None when the server is unreachable"""
        try:
            return self.fetch(server, key, timeout)
        except ConnectionFailure as e:
            logger.info(str(e))
            return None
