"""Shared test fixtures."""

import sys

import pytest

# Ensure src is in path
sys.path.insert(0, "src")

from dataclasses import dataclass, field

from structcopy import Copier


@pytest.fixture
def copier():
    """Copier with default settings."""
    return Copier()


@dataclass
class FixtureHeader:
    name: str = ""
    values: list[str] = field(default_factory=list)


@dataclass
class FixtureRequest:
    method: str
    url: str
    headers: list[FixtureHeader] = field(default_factory=list)
    params: dict[str, int] = field(default_factory=dict)
    body: bytes = b""
    timeout: float | None = None


@pytest.fixture
def sample_request():
    return FixtureRequest(
        method="POST",
        url="https://example.org/items",
        headers=[FixtureHeader("Accept", ["application/json"]), FixtureHeader("X-Trace", ["1"])],
        params={"page": 2, "size": 50},
        body=b"{}",
        timeout=3.5,
    )
