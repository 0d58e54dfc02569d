"""Template content retrieval.

Resolves a template reference such as ``src/main.cpp`` or
``readme/run-vscode.md`` to its text. Two sources are supported: a local
directory (the tree bundled with the package by default) and an HTTP base URL
serving the same layout.

Typical usage::

    fetcher = make_fetcher(Config())
    text = await fetcher.fetch("configs/.clang-format")
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Protocol, runtime_checkable

import httpx

from minilisp_scaffold.config import Config


class RetrievalError(Exception):
    """Raised when a template reference cannot be retrieved."""

    def __init__(self, reference: str, message: str) -> None:
        self.reference = reference
        super().__init__(f"Could not retrieve '{reference}': {message}")


@runtime_checkable
class ContentFetcher(Protocol):
    """Anything that can turn a template reference into text."""

    async def fetch(self, reference: str) -> str: ...


class LocalContentFetcher:
    """Reads templates from a directory on disk."""

    def __init__(self, root: str | Path) -> None:
        self.root = Path(root).resolve()

    def _resolve(self, reference: str) -> Path:
        path = (self.root / reference).resolve()
        if not path.is_relative_to(self.root):
            raise RetrievalError(reference, f"reference escapes template root {self.root}")
        return path

    async def fetch(self, reference: str) -> str:
        path = self._resolve(reference)
        try:
            # Decode the raw bytes so CRLF line endings survive untouched.
            raw = await asyncio.to_thread(path.read_bytes)
            return raw.decode("utf-8")
        except FileNotFoundError:
            raise RetrievalError(reference, f"not found under {self.root}") from None
        except (OSError, UnicodeDecodeError) as exc:
            raise RetrievalError(reference, str(exc)) from exc


class HttpContentFetcher:
    """Downloads templates relative to a base URL with ``httpx``.

    Used as an async context manager, every fetch inside the block shares a
    single ``AsyncClient`` and its connection pool. Outside such a block each
    fetch opens its own short-lived client. Nested blocks reuse the client
    opened by the outermost one.
    """

    def __init__(self, base_url: str, timeout: int = 30) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._shared: httpx.AsyncClient | None = None
        self._users = 0

    def _client(self) -> httpx.AsyncClient:
        """Return a fresh ``AsyncClient`` configured with our base URL and timeout."""
        return httpx.AsyncClient(
            base_url=self.base_url,
            timeout=httpx.Timeout(self.timeout, connect=10.0),
            follow_redirects=True,
        )

    async def __aenter__(self) -> "HttpContentFetcher":
        if self._users == 0:
            self._shared = self._client()
        self._users += 1
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        self._users -= 1
        if self._users == 0 and self._shared is not None:
            shared, self._shared = self._shared, None
            await shared.aclose()

    async def _get(self, client: httpx.AsyncClient, reference: str) -> str:
        response = await client.get(f"/{reference.lstrip('/')}")
        response.raise_for_status()
        return response.text

    async def fetch(self, reference: str) -> str:
        try:
            if self._shared is not None:
                return await self._get(self._shared, reference)
            async with self._client() as client:
                return await self._get(client, reference)
        except httpx.ConnectError:
            raise RetrievalError(reference, f"cannot connect to {self.base_url}") from None
        except httpx.TimeoutException:
            raise RetrievalError(reference, f"timed out after {self.timeout}s") from None
        except httpx.HTTPStatusError as exc:
            raise RetrievalError(
                reference, f"server returned HTTP {exc.response.status_code}"
            ) from exc
        except httpx.HTTPError as exc:
            raise RetrievalError(reference, str(exc)) from exc


def make_fetcher(config: Config) -> ContentFetcher:
    """Pick the fetcher matching ``config.template_source``."""
    if config.is_remote_source:
        return HttpContentFetcher(config.template_source, timeout=config.fetch.timeout)
    return LocalContentFetcher(config.template_source)
