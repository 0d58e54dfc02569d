"""Mini-Lisp scaffolder: turns a completed wizard selection into a zip archive.

Quick usage::

    from minilisp_scaffold.scaffolder import ScaffoldGenerator

    generator = ScaffoldGenerator()
    path = await generator.generate(["mac", "vscode", "apple-clang", "xmake"])
"""

from minilisp_scaffold.scaffolder.archive import ArchiveBuilder, PackagingError
from minilisp_scaffold.scaffolder.delivery import Delivery, FileDelivery
from minilisp_scaffold.scaffolder.fetcher import (
    ContentFetcher,
    HttpContentFetcher,
    LocalContentFetcher,
    RetrievalError,
    make_fetcher,
)
from minilisp_scaffold.scaffolder.generator import GenerationError, ScaffoldGenerator, generate
from minilisp_scaffold.scaffolder.manifest import (
    ManifestConflictError,
    ManifestEntry,
    ManifestError,
    resolve_manifest,
)
from minilisp_scaffold.scaffolder.readme import (
    MissingFragmentError,
    UnsupportedCombinationError,
    compose_readme,
    fragment_reference,
    render_readme,
)

__all__ = [
    # Orchestration
    "ScaffoldGenerator",
    "GenerationError",
    "generate",
    # Manifest
    "ManifestEntry",
    "ManifestError",
    "ManifestConflictError",
    "resolve_manifest",
    # README
    "compose_readme",
    "render_readme",
    "fragment_reference",
    "UnsupportedCombinationError",
    "MissingFragmentError",
    # Packaging and collaborators
    "ArchiveBuilder",
    "PackagingError",
    "ContentFetcher",
    "LocalContentFetcher",
    "HttpContentFetcher",
    "RetrievalError",
    "make_fetcher",
    "Delivery",
    "FileDelivery",
]
