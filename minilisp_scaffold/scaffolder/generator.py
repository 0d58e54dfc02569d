"""Scaffold generation orchestrator.

Takes a complete wizard selection, resolves the manifest and README
fragments, fetches every referenced template concurrently, then packages the
result and hands it to the delivery collaborator.

Quick usage::

    from minilisp_scaffold.scaffolder import ScaffoldGenerator

    generator = ScaffoldGenerator(Config(output_dir=Path("/tmp/out")))
    archive_path = await generator.generate(["windows", "vscode", "mingw", "cmake"])
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Sequence
from contextlib import AbstractAsyncContextManager, AsyncExitStack
from pathlib import Path

from minilisp_scaffold.config import Config
from minilisp_scaffold.utils import console, format_duration
from minilisp_scaffold.wizard.state import SelectionError, validate_selections

from .archive import ArchiveBuilder, PackagingError
from .delivery import Delivery, FileDelivery
from .fetcher import ContentFetcher, RetrievalError, make_fetcher
from .manifest import ManifestEntry, ManifestError, resolve_manifest
from .readme import (
    MissingFragmentError,
    UnsupportedCombinationError,
    compose_readme,
    fragment_reference,
    render_readme,
)


class GenerationError(Exception):
    """Raised when a generation run fails; nothing is delivered.

    The underlying exception is chained as ``__cause__``.
    """

    def __init__(self, stage: str, message: str, selections: Sequence[str] = ()) -> None:
        self.stage = stage
        self.selections = tuple(selections)
        super().__init__(f"Generation failed ({stage}): {message}")


class ScaffoldGenerator:
    """Builds and delivers the Mini-Lisp scaffold archive.

    Each call works on its own manifest, fetch results and archive buffer, so
    overlapping calls on one generator do not interfere.
    """

    def __init__(
        self,
        config: Config | None = None,
        fetcher: ContentFetcher | None = None,
        delivery: Delivery | None = None,
        archive_builder: ArchiveBuilder | None = None,
    ) -> None:
        self.config = config or Config()
        self.fetcher = fetcher or make_fetcher(self.config)
        self.delivery = delivery or FileDelivery(self.config.output_dir)
        self.archive_builder = archive_builder or ArchiveBuilder()

    # -- Public API --------------------------------------------------------

    async def generate(self, selections: Sequence[str]) -> Path:
        """Generate the scaffold for *selections* and deliver it.

        Args:
            selections: ``[os, ide, compiler, build tool]`` identifiers in
                catalog order.

        Returns:
            Where the delivery collaborator stored the archive.

        Raises:
            GenerationError: If the selections are invalid or any
                composition, retrieval, packaging or delivery step fails.
        """
        blob = await self.build_archive(selections)
        try:
            return await self.delivery.deliver(blob, self.config.archive_name)
        except OSError as exc:
            raise GenerationError("deliver", str(exc), selections) from exc

    async def build_archive(self, selections: Sequence[str]) -> bytes:
        """Generate the scaffold archive without delivering it."""
        start = time.monotonic()

        try:
            os_id, ide, platform, tool = validate_selections(selections)
        except SelectionError as exc:
            raise GenerationError("validate", str(exc), _as_tuple(selections)) from exc
        chosen = (os_id, ide, platform, tool)
        console.print(f"  Generating scaffold for [bold]{' / '.join(chosen)}[/bold]")

        try:
            fragment_keys = compose_readme(ide, tool)
            manifest = resolve_manifest(os_id, ide, platform, tool)
        except (UnsupportedCombinationError, ManifestError) as exc:
            raise GenerationError("compose", str(exc), chosen) from exc

        references = [entry.source for entry in manifest]
        references += [fragment_reference(key) for key in fragment_keys]

        try:
            contents = await self.fetch_all(references)
        except RetrievalError as exc:
            raise GenerationError("retrieve", str(exc), chosen) from exc
        except Exception as exc:
            raise GenerationError(
                "retrieve", f"{type(exc).__name__}: {exc}", chosen
            ) from exc

        try:
            readme = render_readme(
                fragment_keys,
                {key: contents[fragment_reference(key)] for key in fragment_keys},
            )
        except MissingFragmentError as exc:
            raise GenerationError("compose", str(exc), chosen) from exc

        try:
            blob = self.archive_builder.build(_resolve_files(manifest, contents), readme)
        except PackagingError as exc:
            raise GenerationError("package", str(exc), chosen) from exc

        console.print(
            f"  Packed [bold]{len(manifest) + 1}[/bold] file(s) from "
            f"{len(contents)} template(s) in {format_duration(time.monotonic() - start)}"
        )
        return blob

    async def fetch_all(self, references: Sequence[str]) -> dict[str, str]:
        """Fetch every distinct reference concurrently.

        Returns only once all fetches succeeded. The first failure cancels
        the fetches still in flight and is re-raised.
        """
        semaphore = asyncio.Semaphore(self.config.fetch.max_concurrent)

        async def _fetch_one(reference: str) -> tuple[str, str]:
            async with semaphore:
                return reference, await self.fetcher.fetch(reference)

        unique = list(dict.fromkeys(references))
        async with AsyncExitStack() as stack:
            if isinstance(self.fetcher, AbstractAsyncContextManager):
                await stack.enter_async_context(self.fetcher)
            tasks = [asyncio.ensure_future(_fetch_one(ref)) for ref in unique]
            try:
                results = await asyncio.gather(*tasks)
            except BaseException:
                for task in tasks:
                    task.cancel()
                await asyncio.gather(*tasks, return_exceptions=True)
                raise
        return dict(results)


def _resolve_files(
    manifest: list[ManifestEntry], contents: dict[str, str]
) -> list[tuple[str, str]]:
    """Pair every manifest destination with its fetched text."""
    return [(entry.destination, contents[entry.source]) for entry in manifest]


def _as_tuple(selections: object) -> tuple[str, ...]:
    if isinstance(selections, str):
        return (selections,)
    if isinstance(selections, Sequence):
        return tuple(selections)
    return ()


async def generate(
    selections: Sequence[str],
    config: Config | None = None,
    fetcher: ContentFetcher | None = None,
    delivery: Delivery | None = None,
) -> Path:
    """Convenience wrapper around ``ScaffoldGenerator(...).generate``."""
    generator = ScaffoldGenerator(config, fetcher=fetcher, delivery=delivery)
    return await generator.generate(selections)
