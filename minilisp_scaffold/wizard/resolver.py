"""Constraint resolution for the scaffold wizard.

Evaluates ``DisableRule`` values against the identifiers chosen at earlier
steps. Everything here is pure: no state, no I/O.
"""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from pydantic import BaseModel, ConfigDict

from .catalog import STEPS, DisableRule, Option, RuleKind, Step


class OptionState(BaseModel):
    """An option together with its availability at the current point."""

    model_config = ConfigDict(frozen=True)

    option: Option
    disabled: bool
    selected: bool = False


def is_disabled(rule: DisableRule | Option, prior_selections: Iterable[str]) -> bool:
    """Return ``True`` if the rule forbids choosing the option.

    Args:
        rule: A ``DisableRule`` or an ``Option`` carrying one.
        prior_selections: Identifiers chosen at earlier steps. Order and
            duplicates are irrelevant.
    """
    if isinstance(rule, Option):
        rule = rule.rule

    if rule.kind is RuleKind.NONE:
        return False
    if rule.kind is RuleKind.ALWAYS:
        return True
    if rule.kind is RuleKind.INTERSECTS:
        return not rule.ids.isdisjoint(prior_selections)
    raise ValueError(f"Unknown rule kind: {rule.kind!r}")


def resolve_step(
    step: Step,
    prior_selections: Sequence[str],
    current: str | None = None,
) -> list[OptionState]:
    """Compute the availability of every option of *step*.

    An option is reported as selected only when it equals *current* and is
    still enabled; a disabled identifier counts as unset.
    """
    prior = frozenset(prior_selections)
    states: list[OptionState] = []
    for option in step.options:
        disabled = is_disabled(option, prior)
        states.append(
            OptionState(
                option=option,
                disabled=disabled,
                selected=not disabled and option.id == current,
            )
        )
    return states


def enabled_ids(step: Step, prior_selections: Sequence[str]) -> list[str]:
    """Identifiers of *step* that may be chosen after *prior_selections*."""
    return [s.option.id for s in resolve_step(step, prior_selections) if not s.disabled]


def legal_combinations(steps: Sequence[Step] = STEPS) -> list[tuple[str, ...]]:
    """Enumerate every complete selection sequence the rules allow.

    Combinations are returned in catalog order (depth-first over each step's
    option order).
    """
    combos: list[tuple[str, ...]] = []

    def _walk(prefix: tuple[str, ...]) -> None:
        if len(prefix) == len(steps):
            combos.append(prefix)
            return
        for identifier in enabled_ids(steps[len(prefix)], prefix):
            _walk(prefix + (identifier,))

    _walk(())
    return combos
