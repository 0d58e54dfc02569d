"""Mini-Lisp scaffold configuration.

Typed configuration for the generator and the CLI. Settings use Pydantic v2
models so they are validated at construction time and can be serialised
to/from JSON or read from environment variables.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, field_validator

# Template tree shipped inside the package.
DEFAULT_TEMPLATE_DIR = Path(__file__).parent / "scaffolder" / "templates"


class FetchConfig(BaseModel):
    """Tuning knobs for template content retrieval."""

    timeout: int = Field(default=30, ge=1, description="Per-request timeout in seconds")
    max_concurrent: int = Field(
        default=8, ge=1, description="Maximum number of fetches in flight at once"
    )


class Config(BaseModel):
    """Global scaffold configuration.

    Created once by the CLI entry point (or by a caller embedding the
    generator) and handed to ``ScaffoldGenerator``.
    """

    template_source: str = Field(
        default=str(DEFAULT_TEMPLATE_DIR),
        description="Template directory or http(s) base URL",
    )
    output_dir: Path = Field(default=Path("./output"))
    archive_name: str = Field(default="mini_lisp.zip")
    fetch: FetchConfig = Field(default_factory=FetchConfig)

    @field_validator("archive_name")
    @classmethod
    def _check_archive_name(cls, value: str) -> str:
        if not value.endswith(".zip") or "/" in value or "\\" in value:
            raise ValueError(f"archive_name must be a bare '*.zip' file name, got {value!r}")
        return value

    # ------------------------------------------------------------------
    # Derived values
    # ------------------------------------------------------------------

    @property
    def archive_path(self) -> Path:
        """Where ``FileDelivery`` writes the archive."""
        return self.output_dir / self.archive_name

    @property
    def is_remote_source(self) -> bool:
        """``True`` when templates are fetched over HTTP."""
        return self.template_source.startswith(("http://", "https://"))

    # ------------------------------------------------------------------
    # Serialisation helpers
    # ------------------------------------------------------------------

    def save(self, path: Path) -> Path:
        """Persist the configuration to a JSON file.

        Args:
            path: Destination file.

        Returns:
            The path where the file was written.
        """
        target = Path(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(self.model_dump_json(indent=2), encoding="utf-8")
        return target

    @classmethod
    def load(cls, path: Path) -> "Config":
        """Load a previously-saved configuration from JSON."""
        raw = Path(path).read_text(encoding="utf-8")
        return cls.model_validate_json(raw)

    @classmethod
    def from_env(cls) -> "Config":
        """Build a ``Config`` from environment variables.

        Recognised variables (all optional):
            MLS_TEMPLATE_SOURCE, MLS_OUTPUT_DIR, MLS_ARCHIVE_NAME,
            MLS_FETCH_TIMEOUT, MLS_MAX_CONCURRENT_FETCHES.
        """
        fetch_kwargs: dict[str, Any] = {}
        if os.environ.get("MLS_FETCH_TIMEOUT"):
            fetch_kwargs["timeout"] = int(os.environ["MLS_FETCH_TIMEOUT"])
        if os.environ.get("MLS_MAX_CONCURRENT_FETCHES"):
            fetch_kwargs["max_concurrent"] = int(os.environ["MLS_MAX_CONCURRENT_FETCHES"])

        kwargs: dict[str, Any] = {"fetch": FetchConfig(**fetch_kwargs)}
        if os.environ.get("MLS_TEMPLATE_SOURCE"):
            kwargs["template_source"] = os.environ["MLS_TEMPLATE_SOURCE"]
        if os.environ.get("MLS_OUTPUT_DIR"):
            kwargs["output_dir"] = Path(os.environ["MLS_OUTPUT_DIR"])
        if os.environ.get("MLS_ARCHIVE_NAME"):
            kwargs["archive_name"] = os.environ["MLS_ARCHIVE_NAME"]

        return cls(**kwargs)
