# tests/conftest.py
from __future__ import annotations

import ipaddress
import os
import socket

import pytest

_real_connect = socket.socket.connect


def _loopback(host) -> bool:
    if str(host).strip().lower() == "localhost":
        return True
    try:
        return ipaddress.ip_address(str(host).strip()).is_loopback
    except ValueError:
        return False


@pytest.fixture(autouse=True)
def _no_outbound_network(monkeypatch: pytest.MonkeyPatch):
    """The engine is pure; with REMIX_NETWORK_BAN=1 any non-loopback connect fails the test."""
    if os.environ.get("REMIX_NETWORK_BAN") == "1":

        def guarded(self: socket.socket, address):
            # AF_UNIX addresses are plain strings
            if isinstance(address, str) or _loopback(address[0]):
                return _real_connect(self, address)
            raise AssertionError(f"network access attempted in tests: {address!r}")

        monkeypatch.setattr(socket.socket, "connect", guarded)
    yield


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch: pytest.MonkeyPatch, tmp_path):
    """Keep config discovery and JSONL logs away from the developer's machine."""
    monkeypatch.delenv("REMIX_CONFIG", raising=False)
    monkeypatch.delenv("REMIX_DIFF_MODIFY_FIELDS", raising=False)
    monkeypatch.setenv("REMIX_LOG_DIR", str(tmp_path / "logs"))
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg"))
    yield
