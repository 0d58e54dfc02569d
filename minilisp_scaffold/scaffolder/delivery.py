"""Delivery of the finished archive."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Protocol, runtime_checkable

from minilisp_scaffold.utils import ensure_dir


@runtime_checkable
class Delivery(Protocol):
    """Hands a finished archive to the user."""

    async def deliver(self, blob: bytes, filename: str) -> Path: ...


class FileDelivery:
    """Saves archives into a local directory."""

    def __init__(self, output_dir: str | Path) -> None:
        self.output_dir = Path(output_dir)

    async def deliver(self, blob: bytes, filename: str) -> Path:
        target = self.output_dir / filename
        await asyncio.to_thread(_write_bytes, target, blob)
        return target


def _write_bytes(path: Path, blob: bytes) -> None:
    """Synchronous helper: create parent dirs and write *blob*."""
    ensure_dir(path.parent)
    path.write_bytes(blob)
