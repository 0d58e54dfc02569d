"""Manifest resolution for a completed wizard selection.

Maps ``(os, ide, platform, tool)`` to the list of template references that
make up the scaffold and the archive path each one lands at. The function is
pure: fetching the referenced content is the fetcher's job.
"""

from __future__ import annotations

import posixpath

from pydantic import BaseModel, ConfigDict, Field


class ManifestError(Exception):
    """Raised when a choice has no entry in a manifest lookup table."""


class ManifestConflictError(ManifestError):
    """Raised when two manifest entries share a destination path."""

    def __init__(self, destination: str, sources: list[str]) -> None:
        self.destination = destination
        self.sources = sources
        super().__init__(
            f"Destination '{destination}' is produced by more than one source: "
            f"{', '.join(sources)}"
        )


class ManifestEntry(BaseModel):
    """One file of the scaffold: where it comes from and where it goes."""

    model_config = ConfigDict(frozen=True)

    source: str = Field(..., description="Template reference, e.g. 'src/main.cpp'")
    destination: str = Field(..., description="Archive path, e.g. 'src/main.cpp'")


# ---------------------------------------------------------------------------
# Lookup tables
# ---------------------------------------------------------------------------

SRC_FILES: tuple[str, ...] = (
    "error.h",
    "token.h",
    "tokenizer.h",
    "main.cpp",
    "token.cpp",
    "tokenizer.cpp",
)

# Build tool -> directory the sources are placed in
SRC_FILES_DEST: dict[str, str] = {
    "sln": "",
    "cmake": "src",
    "xmake": "src",
}

VS_FILES: tuple[str, ...] = (
    "mini-lisp.sln",
    "mini-lisp.vcxproj",
    "mini-lisp.vcxproj.filters",
)

CLION_FILES: tuple[str, ...] = (
    ".gitignore",
    ".name",
    "mini-lisp.iml",
    "misc.xml",
    "modules.xml",
)

VSCODE_FILES: tuple[str, ...] = ("tasks.json", "launch.json", "c_cpp_properties.json")

# IDE -> directory the IDE files are placed in
IDE_FILES_DEST: dict[str, str] = {
    "vs": "",
    "clion": ".idea",
    "vscode": ".vscode",
}

TOOL_CONFIG_FILES: dict[str, tuple[str, ...]] = {
    "sln": (),
    "cmake": ("CMakeLists.txt",),
    "xmake": ("xmake.lua",),
}

COMMON_CONFIG_FILES: tuple[str, ...] = (".clang-format", ".gitignore", ".editorconfig")


def _lookup(table: dict, key: str, what: str):
    try:
        return table[key]
    except KeyError:
        raise ManifestError(
            f"Unsupported {what} '{key}' (expected one of: {', '.join(table)})"
        ) from None


def vscode_template_dir(platform: str, tool: str) -> str:
    """Name of the VS Code template folder for a compiler/build tool pair."""
    return f"{tool}.{platform}.vscode"


def ide_sources(ide: str, platform: str, tool: str) -> list[str]:
    """Template references of the IDE-specific files."""
    if ide == "vs":
        return [f"vs/{name}" for name in VS_FILES]
    if ide == "clion":
        return [f"clion/{name}" for name in CLION_FILES]
    if ide == "vscode":
        folder = vscode_template_dir(platform, tool)
        return [f"{folder}/{name}" for name in VSCODE_FILES]
    raise ManifestError(
        f"Unsupported IDE '{ide}' (expected one of: {', '.join(IDE_FILES_DEST)})"
    )


# ---------------------------------------------------------------------------
# Resolution
# ---------------------------------------------------------------------------


def _place(sources: list[str], dest_dir: str) -> list[ManifestEntry]:
    return [
        ManifestEntry(
            source=source,
            destination=posixpath.join(dest_dir, posixpath.basename(source)),
        )
        for source in sources
    ]


def resolve_manifest(os: str, ide: str, platform: str, tool: str) -> list[ManifestEntry]:
    """Compute every file of the scaffold for a complete selection.

    Args:
        os: Operating system identifier (step 0). No file group depends on it
            directly; it only narrows the IDE and compiler choices.
        ide: IDE identifier (step 1).
        platform: Compiler identifier (step 2).
        tool: Build tool identifier (step 3).

    Returns:
        Source files, IDE files, build tool config and common config entries,
        in that order.

    Raises:
        ManifestError: If *ide* or *tool* has no lookup entry.
        ManifestConflictError: If two entries resolve to the same destination.
    """
    src_dest = _lookup(SRC_FILES_DEST, tool, "build tool")
    ide_dest = _lookup(IDE_FILES_DEST, ide, "IDE")
    tool_configs = _lookup(TOOL_CONFIG_FILES, tool, "build tool")

    entries: list[ManifestEntry] = []
    entries += _place([f"src/{name}" for name in SRC_FILES], src_dest)
    entries += _place(ide_sources(ide, platform, tool), ide_dest)
    entries += _place([f"configs/{name}" for name in tool_configs], "")
    entries += _place([f"configs/{name}" for name in COMMON_CONFIG_FILES], "")

    check_unique_destinations(entries)
    return entries


def check_unique_destinations(entries: list[ManifestEntry]) -> None:
    """Raise ``ManifestConflictError`` on the first duplicated destination."""
    seen: dict[str, str] = {}
    for entry in entries:
        if entry.destination in seen:
            raise ManifestConflictError(entry.destination, [seen[entry.destination], entry.source])
        seen[entry.destination] = entry.source
