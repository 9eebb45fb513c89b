"""
tests/conftest.py - Shared pytest fixtures

Provides an in-process fake memcache server speaking the subset of the text
protocol mcspy uses (stats cachedump, stats slabs, stats settings, stats, get).

Usage:
    def test_something(memcache_server):
        server = memcache_server(slabs={1: [("site-cache-a", 10, 0)]})
        # server is a ServerAddress on 127.0.0.1
"""

import socket
import socketserver
import sys
import threading
import time
from dataclasses import dataclass, field
from pathlib import Path

import pytest

# Add the project root to sys.path
project_root = Path(__file__).parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

from mcspy.core.config import McSpyConfig, ServerAddress  # noqa: E402
from mcspy.core.parallel import set_quiet  # noqa: E402

# =============================================================================
# Fake memcache server
# =============================================================================


@dataclass
class FakeMemcacheState:
    """Data served by a fake memcache server

    Attributes:
        slabs: {slab: [(key, bytes, age), ...]}
        values: {key: value}
        slab_stats: {slab: {metric: value}}
        hang_slabs: Slabs whose cachedump never answers
        commands: Received commands, in order
    """

    slabs: dict = field(default_factory=dict)
    values: dict = field(default_factory=dict)
    slab_stats: dict = field(default_factory=dict)
    hang_slabs: set = field(default_factory=set)
    commands: list = field(default_factory=list)

    stats_text: str = "STAT pid 4242\r\nSTAT uptime 3600\r\nSTAT curr_items 3\r\n"
    settings_text: str = "STAT maxbytes 67108864\r\nSTAT maxconns 1024\r\nSTAT tcpport 11211\r\n"


class FakeMemcacheHandler(socketserver.StreamRequestHandler):
    """Answers one command per connection"""

    def handle(self):
        state: FakeMemcacheState = self.server.state
        line = self.rfile.readline().decode("utf-8").strip()
        state.commands.append(line)
        parts = line.split()

        if parts[:2] == ["stats", "cachedump"]:
            slab = int(parts[2])
            if slab in state.hang_slabs:
                time.sleep(1.0)
                return
            for key, size, age in state.slabs.get(slab, []):
                self.wfile.write(f"ITEM {key} [{size} b; {age} s]\r\n".encode())
            self.wfile.write(b"END\r\n")
        elif line == "stats slabs":
            for slab, metrics in state.slab_stats.items():
                for metric, value in metrics.items():
                    self.wfile.write(f"STAT {slab}:{metric} {value}\r\n".encode())
            self.wfile.write(f"STAT active_slabs {len(state.slab_stats)}\r\n".encode())
            self.wfile.write(b"END\r\n")
        elif line == "stats settings":
            self.wfile.write(state.settings_text.encode() + b"END\r\n")
        elif line == "stats":
            self.wfile.write(state.stats_text.encode() + b"END\r\n")
        elif parts and parts[0] == "get":
            key = parts[1]
            value = state.values.get(key)
            if value is not None:
                data = value if isinstance(value, bytes) else value.encode()
                self.wfile.write(f"VALUE {key} 0 {len(data)}\r\n".encode() + data + b"\r\nEND\r\n")
            else:
                self.wfile.write(b"END\r\n")
        else:
            self.wfile.write(b"ERROR\r\n")


class FakeMemcacheServer(socketserver.ThreadingTCPServer):
    daemon_threads = True
    allow_reuse_address = True

    def __init__(self, state: FakeMemcacheState):
        super().__init__(("127.0.0.1", 0), FakeMemcacheHandler)
        self.state = state


@pytest.fixture
def memcache_server():
    """Factory starting fake memcache servers, stopped after the test

    Returns:
        make(**state_fields) -> ServerAddress; the state is available as
        make.states[address]
    """
    servers = []
    states = {}

    def make(**kwargs) -> ServerAddress:
        state = FakeMemcacheState(**kwargs)
        server = FakeMemcacheServer(state)
        thread = threading.Thread(target=server.serve_forever, daemon=True)
        thread.start()
        servers.append(server)
        address = ServerAddress("127.0.0.1", server.server_address[1])
        states[address] = state
        return address

    make.states = states
    yield make

    for server in servers:
        server.shutdown()
        server.server_close()


@pytest.fixture
def closed_server():
    """Address of a local port nothing listens on"""
    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    sock.bind(("127.0.0.1", 0))
    port = sock.getsockname()[1]
    sock.close()
    return ServerAddress("127.0.0.1", port)


# =============================================================================
# Config helpers
# =============================================================================


@pytest.fixture
def make_config(tmp_path):
    """Factory for McSpyConfig writing dumps under tmp_path"""

    def make(servers, **kwargs) -> McSpyConfig:
        kwargs.setdefault("dump_folder", tmp_path / "dump")
        kwargs.setdefault("scan_timeout", 0.3)
        kwargs.setdefault("connect_timeout", 0.5)
        return McSpyConfig(servers=tuple(servers), **kwargs)

    return make


@pytest.fixture(autouse=True)
def reset_quiet_state():
    """Leave the thread-local quiet state clean between tests"""
    set_quiet(False)
    yield
    set_quiet(False)
