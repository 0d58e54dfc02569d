"""Shared pytest fixtures for the Mini-Lisp scaffold test suite.

Provides reusable fixtures for:
- The bundled template directory and a config pointing at tmp output
- In-memory fetchers (optionally failing on chosen references)
- A recording delivery collaborator
- The legal selection combinations of the catalog
"""

from __future__ import annotations

import asyncio
from pathlib import Path

import pytest

from minilisp_scaffold.config import DEFAULT_TEMPLATE_DIR, Config
from minilisp_scaffold.scaffolder.fetcher import RetrievalError
from minilisp_scaffold.wizard import legal_combinations


# ---------------------------------------------------------------------------
# Test doubles
# ---------------------------------------------------------------------------


class FakeFetcher:
    """Fetcher that answers every reference with a marker string.

    References listed in *fail_on* raise ``RetrievalError``. Every requested
    reference is recorded in ``calls``.
    """

    def __init__(self, fail_on: set[str] | None = None, delay: float = 0.0) -> None:
        self.fail_on = fail_on or set()
        self.delay = delay
        self.calls: list[str] = []
        self.cancelled: list[str] = []

    async def fetch(self, reference: str) -> str:
        self.calls.append(reference)
        if reference in self.fail_on:
            raise RetrievalError(reference, "simulated failure")
        try:
            await asyncio.sleep(self.delay)
        except asyncio.CancelledError:
            self.cancelled.append(reference)
            raise
        return f"<{reference}>\n"


class RecordingDelivery:
    """Delivery that keeps blobs in memory instead of writing them."""

    def __init__(self) -> None:
        self.delivered: list[tuple[bytes, str]] = []

    async def deliver(self, blob: bytes, filename: str) -> Path:
        self.delivered.append((blob, filename))
        return Path("/virtual") / filename


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def template_dir() -> Path:
    """The template tree bundled with the package."""
    assert DEFAULT_TEMPLATE_DIR.is_dir(), f"Bundled templates missing at {DEFAULT_TEMPLATE_DIR}"
    return DEFAULT_TEMPLATE_DIR


@pytest.fixture
def tmp_config(tmp_path: Path) -> Config:
    """Config writing archives into a temporary directory."""
    return Config(output_dir=tmp_path / "out")


@pytest.fixture
def fake_fetcher() -> FakeFetcher:
    return FakeFetcher()


@pytest.fixture
def fetcher_factory() -> type[FakeFetcher]:
    """The ``FakeFetcher`` class, for tests that need custom failures."""
    return FakeFetcher


@pytest.fixture
def recording_delivery() -> RecordingDelivery:
    return RecordingDelivery()


@pytest.fixture
def all_combinations() -> list[tuple[str, ...]]:
    """Every legal (os, ide, compiler, tool) selection."""
    return legal_combinations()
