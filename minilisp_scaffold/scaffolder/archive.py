"""Zip packaging of the generated scaffold."""

from __future__ import annotations

import io
import zipfile
from collections.abc import Iterable

README_PATH = "README.md"

# Fixed timestamp so the same inputs always produce the same bytes.
_ZIP_TIMESTAMP = (1980, 1, 1, 0, 0, 0)


class PackagingError(Exception):
    """Raised when the archive cannot be assembled."""


class ArchiveBuilder:
    """Builds the scaffold archive in memory.

    Each ``build`` call starts from an empty buffer, so a builder can be
    shared between generation runs.
    """

    def __init__(self, compression: int = zipfile.ZIP_DEFLATED) -> None:
        self.compression = compression

    def build(self, files: Iterable[tuple[str, str]], readme: str) -> bytes:
        """Pack *files* plus the README into zip bytes.

        Args:
            files: ``(archive path, text content)`` pairs.
            readme: Rendered README, stored at ``README.md``.

        Raises:
            PackagingError: On a duplicated path or any zip failure.
        """
        entries: dict[str, str] = {README_PATH: readme}
        for path, content in files:
            if path in entries:
                raise PackagingError(f"Duplicate archive path: {path}")
            if not path or path.startswith("/"):
                raise PackagingError(f"Archive paths must be relative: {path!r}")
            entries[path] = content

        buffer = io.BytesIO()
        try:
            with zipfile.ZipFile(buffer, "w", compression=self.compression) as zf:
                for path, content in entries.items():
                    info = zipfile.ZipInfo(path, date_time=_ZIP_TIMESTAMP)
                    info.compress_type = self.compression
                    info.external_attr = 0o644 << 16
                    zf.writestr(info, content.encode("utf-8"))
        except (zipfile.BadZipFile, zipfile.LargeZipFile, ValueError, OSError) as exc:
            raise PackagingError(f"Failed to build archive: {exc}") from exc

        return buffer.getvalue()
