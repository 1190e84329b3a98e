"""
Pytest configuration and shared fixtures for adlookup tests.
"""

import contextlib
from dataclasses import dataclass
from typing import Optional, Sequence

import pytest

from adlookup.directory.client import PAGE_SIZE, RawEntry
from adlookup.utils import console as console_mod
from adlookup.utils import logging as logging_mod


@dataclass
class SearchCall:
    """One search issued through the fake directory service."""

    server: str
    port: Optional[int]
    base: Optional[str]
    search_filter: str
    attributes: Optional[Sequence[str]]
    page_size: int


class FakeSession:
    def __init__(self, service, server, port, base):
        self.service = service
        self.server = server
        self.port = port
        self.base = base

    def search(self, search_filter, attributes=None, page_size=PAGE_SIZE):
        call = SearchCall(self.server, self.port, self.base, search_filter, attributes, page_size)
        self.service.calls.append(call)
        outcome = self.service.responder(call)
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


class FakeDirectoryService:
    """
    In-memory DirectoryService.

    `responder(call)` returns the RawEntry list for a search, or an exception
    instance to raise from it. Every session opened is also closed, counted in
    `opened` / `closed`.
    """

    def __init__(self, responder=None):
        self.responder = responder or (lambda call: [])
        self.calls = []
        self.opened = 0
        self.closed = 0

    @contextlib.contextmanager
    def session(self, server, port=None, base=None):
        self.opened += 1
        try:
            yield FakeSession(self, server, port, base)
        finally:
            self.closed += 1


def _to_octets(value):
    if isinstance(value, (bytes, bytearray)):
        return bytes(value)
    return str(value).encode("utf-8")


def raw_entry(dn, **attributes):
    """Build a RawEntry; attribute values may be str, bytes or lists of them."""
    attrs = []
    for name, value in attributes.items():
        values = value if isinstance(value, list) else [value]
        attrs.append((name, [_to_octets(v) for v in values]))
    return RawEntry(dn=dn, attributes=attrs)


@pytest.fixture
def fake_service():
    """Factory for FakeDirectoryService instances."""
    return FakeDirectoryService


@pytest.fixture
def make_entry():
    """Factory for RawEntry instances."""
    return raw_entry


@pytest.fixture(autouse=True)
def reset_verbosity(monkeypatch):
    """Keep verbosity flags and debug env vars from leaking between tests."""
    monkeypatch.delenv("DEBUG", raising=False)
    monkeypatch.delenv("ADLOOKUP_DEBUG", raising=False)
    yield
    logging_mod._VERBOSE = False
    logging_mod._DEBUG = False
    console_mod.set_verbosity(False, False)
