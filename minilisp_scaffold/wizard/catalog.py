"""Static option catalog for the scaffold wizard.

Defines the four wizard steps (operating system, IDE, compiler, build tool),
the options each step offers and the declarative rule that decides when an
option is unavailable. The catalog is built once at import time and never
mutated.
"""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, model_validator


# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------

class RuleKind(str, Enum):
    """Variant tag of a ``DisableRule``."""
    NONE = "none"
    ALWAYS = "always"
    INTERSECTS = "intersects"


# ---------------------------------------------------------------------------
# Models
# ---------------------------------------------------------------------------

class DisableRule(BaseModel):
    """When an option is disabled, evaluated against earlier selections.

    ``intersects`` rules carry the identifiers that disable the option when
    any of them was chosen at an earlier step.
    """

    model_config = ConfigDict(frozen=True)

    kind: RuleKind = Field(default=RuleKind.NONE)
    ids: frozenset[str] = Field(default_factory=frozenset)

    @model_validator(mode="after")
    def _check_ids(self) -> "DisableRule":
        if self.kind is RuleKind.INTERSECTS and not self.ids:
            raise ValueError("an 'intersects' rule needs at least one identifier")
        if self.kind is not RuleKind.INTERSECTS and self.ids:
            raise ValueError(f"a '{self.kind.value}' rule takes no identifiers")
        return self

    @classmethod
    def never(cls) -> "DisableRule":
        return cls(kind=RuleKind.NONE)

    @classmethod
    def always(cls) -> "DisableRule":
        return cls(kind=RuleKind.ALWAYS)

    @classmethod
    def when_any(cls, *ids: str) -> "DisableRule":
        """Disabled once any of *ids* has been selected earlier."""
        return cls(kind=RuleKind.INTERSECTS, ids=frozenset(ids))


class Option(BaseModel):
    """A single choice offered by a wizard step."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Identifier, unique within its step")
    title: str = Field(..., description="Display label")
    description: str = Field(default="", description="Help text shown under the label")
    rule: DisableRule = Field(default_factory=DisableRule.never)


class Step(BaseModel):
    """One stage of the wizard with mutually exclusive options."""

    model_config = ConfigDict(frozen=True)

    index: int = Field(..., ge=0)
    title: str
    options: tuple[Option, ...]

    @model_validator(mode="after")
    def _check_unique_ids(self) -> "Step":
        ids = [o.id for o in self.options]
        if len(ids) != len(set(ids)):
            raise ValueError(f"step {self.index} has duplicate option identifiers: {ids}")
        return self

    @property
    def option_ids(self) -> tuple[str, ...]:
        return tuple(o.id for o in self.options)

    def get(self, identifier: str) -> Option | None:
        """Return the option with *identifier*, or ``None``."""
        for option in self.options:
            if option.id == identifier:
                return option
        return None


# ---------------------------------------------------------------------------
# The catalog
# ---------------------------------------------------------------------------

STEPS: tuple[Step, ...] = (
    Step(
        index=0,
        title="Which operating system are you using?",
        options=(
            Option(id="windows", title="Windows"),
            Option(id="mac", title="macOS"),
            Option(
                id="linux",
                title="Linux",
                description="Linux users can set up the toolchain on their own.",
                rule=DisableRule.always(),
            ),
        ),
    ),
    Step(
        index=1,
        title="Which IDE do you want to use?",
        options=(
            Option(
                id="vs",
                title="Visual Studio",
                description="The most capable C++ IDE, Windows only.",
                rule=DisableRule.when_any("mac"),
            ),
            Option(
                id="vscode",
                title="Visual Studio Code",
                description="Lightweight editor, needs some manual configuration.",
            ),
            Option(
                id="clion",
                title="CLion",
                description="JetBrains' cross-platform C++ IDE, free for students.",
            ),
        ),
    ),
    Step(
        index=2,
        title="Which compiler do you want to use?",
        options=(
            Option(
                id="msvc",
                title="Microsoft Visual C++",
                description="The compiler shipped with Visual Studio.",
                rule=DisableRule.when_any("mac"),
            ),
            Option(
                id="mingw",
                title="MinGW",
                description="GCC port for Windows.",
                rule=DisableRule.when_any("mac", "vs"),
            ),
            Option(
                id="apple-clang",
                title="Apple Clang",
                description="Clang shipped with the Xcode command line tools.",
                rule=DisableRule.when_any("windows"),
            ),
        ),
    ),
    Step(
        index=3,
        title="Which build tool do you want to use?",
        options=(
            Option(
                id="sln",
                title="VS solution",
                description="Visual Studio's own project format.",
                rule=DisableRule.when_any("vscode", "clion"),
            ),
            Option(
                id="xmake",
                title="Xmake",
                description="Modern Lua-based build tool, easy to pick up.",
                rule=DisableRule.when_any("vs", "clion"),
            ),
            Option(
                id="cmake",
                title="CMake",
                description="The de facto standard C++ build system generator.",
                rule=DisableRule.when_any("vs"),
            ),
        ),
    ),
)
