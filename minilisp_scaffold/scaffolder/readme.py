"""README composition.

The README is static prose interleaved with fragments stored under
``readme/<key>.md`` in the template source. Which fragments apply is decided
up front by a table keyed on ``(ide, tool)``; rendering is plain
concatenation.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence


class UnsupportedCombinationError(Exception):
    """Raised when no README is defined for an IDE / build tool pair."""

    def __init__(self, ide: str, tool: str) -> None:
        self.ide = ide
        self.tool = tool
        super().__init__(f"Unsupported combination: IDE '{ide}' with build tool '{tool}'")


class MissingFragmentError(LookupError):
    """Raised when a fragment key has no text at render time."""

    def __init__(self, key: str) -> None:
        self.key = key
        super().__init__(f"README fragment '{key}' was not provided")


# (ide, tool) -> (install, prepare, run)
README_FRAGMENTS: dict[tuple[str, str], tuple[str, str, str]] = {
    ("vs", "sln"): ("install-vs", "prepare-vs", "run-vs"),
    ("vscode", "cmake"): ("install-cmake", "prepare-vscode-cmake", "run-vscode"),
    ("vscode", "xmake"): ("install-xmake", "prepare-vscode-xmake", "run-vscode"),
    ("clion", "cmake"): ("install-cmake", "prepare-clion", "run-clion"),
}

# Static text around the fragments; one more segment than fragments.
README_SEGMENTS: tuple[str, ...] = (
    "# `Mini-Lisp` Scaffold\n\n## Preparation\n\n",
    "",
    "",
    "\n## Build, Run and Debug\n\n",
    "",
)

README_FRAGMENT_DIR = "readme"


def compose_readme(ide: str, tool: str) -> tuple[str, ...]:
    """Return the fragment keys for *ide* and *tool* in render order.

    Raises:
        UnsupportedCombinationError: If the pair is not in the table.
    """
    try:
        install, prepare, run = README_FRAGMENTS[(ide, tool)]
    except KeyError:
        raise UnsupportedCombinationError(ide, tool) from None
    return ("compiler", install, prepare, run)


def fragment_reference(key: str) -> str:
    """Template reference of a fragment, e.g. ``readme/run-vscode.md``."""
    return f"{README_FRAGMENT_DIR}/{key}.md"


def render_readme(keys: Sequence[str], lookup: Mapping[str, str]) -> str:
    """Splice fragment texts between the static segments.

    Args:
        keys: Fragment keys from :func:`compose_readme`.
        lookup: Fragment key -> fragment text.

    Raises:
        MissingFragmentError: If any key is absent from *lookup*.
        ValueError: If the number of keys does not fit the segments.
    """
    if len(keys) != len(README_SEGMENTS) - 1:
        raise ValueError(
            f"README takes {len(README_SEGMENTS) - 1} fragments, got {len(keys)}"
        )

    parts: list[str] = []
    for segment, key in zip(README_SEGMENTS, keys):
        if key not in lookup:
            raise MissingFragmentError(key)
        parts.append(segment)
        parts.append(lookup[key])
    parts.append(README_SEGMENTS[-1])
    return "".join(parts)
