"""Selection state machine for the scaffold wizard.

Holds the ordered tuple of confirmed choices. Choosing at step *N* replaces
the tuple with ``selections[:N] + (choice,)``, so every later answer is
discarded whenever an earlier one changes.
"""

from __future__ import annotations

from collections.abc import Sequence

from pydantic import BaseModel, ConfigDict

from .catalog import STEPS, Step
from .resolver import OptionState, is_disabled, resolve_step


class SelectionError(ValueError):
    """Raised when a selection breaks the wizard's contract."""

    def __init__(self, message: str, step_index: int | None = None, identifier: str = ""):
        self.step_index = step_index
        self.identifier = identifier
        super().__init__(message)


class StepState(BaseModel):
    """A visible step with its resolved option states."""

    model_config = ConfigDict(frozen=True)

    step: Step
    options: tuple[OptionState, ...]

    @property
    def selected(self) -> str | None:
        for state in self.options:
            if state.selected:
                return state.option.id
        return None


class SelectionStateMachine:
    """Ordered wizard selections with downstream invalidation.

    The sequence length is the state: ``0`` means nothing chosen yet,
    ``len(steps)`` means the wizard is complete and generation may start.
    """

    def __init__(self, steps: Sequence[Step] = STEPS) -> None:
        self.steps: tuple[Step, ...] = tuple(steps)
        self._selections: tuple[str, ...] = ()

    # ------------------------------------------------------------------
    # Read-only views
    # ------------------------------------------------------------------

    @property
    def selections(self) -> tuple[str, ...]:
        return self._selections

    @property
    def is_complete(self) -> bool:
        return len(self._selections) == len(self.steps)

    @property
    def visible_step_count(self) -> int:
        """Number of steps shown: one past the last confirmed choice."""
        return min(len(self._selections) + 1, len(self.steps))

    def selection_at(self, step_index: int) -> str | None:
        """Confirmed identifier at *step_index*, or ``None`` if unset.

        An identifier that the earlier choices now disable counts as unset.
        """
        if step_index >= len(self._selections):
            return None
        identifier = self._selections[step_index]
        option = self.steps[step_index].get(identifier)
        if option is None or is_disabled(option, self._selections[:step_index]):
            return None
        return identifier

    def visible_steps(self) -> list[StepState]:
        """Resolve every visible step against the choices before it."""
        result: list[StepState] = []
        for index in range(self.visible_step_count):
            step = self.steps[index]
            states = resolve_step(
                step,
                self._selections[:index],
                current=self.selection_at(index),
            )
            result.append(StepState(step=step, options=tuple(states)))
        return result

    # ------------------------------------------------------------------
    # Transitions
    # ------------------------------------------------------------------

    def select(self, step_index: int, identifier: str) -> tuple[str, ...]:
        """Confirm *identifier* at *step_index* and drop every later choice.

        Raises:
            SelectionError: If the step does not exist or is not visible yet,
                if *identifier* is not one of its options, or if the option is
                disabled by the earlier choices. The state is left unchanged.

        Returns:
            The new selection tuple.
        """
        if not 0 <= step_index < len(self.steps):
            raise SelectionError(
                f"Step {step_index} does not exist (the wizard has {len(self.steps)} steps)",
                step_index=step_index,
                identifier=identifier,
            )
        if step_index > len(self._selections):
            raise SelectionError(
                f"Step {step_index} is not visible yet; answer step "
                f"{len(self._selections)} first",
                step_index=step_index,
                identifier=identifier,
            )

        step = self.steps[step_index]
        option = step.get(identifier)
        if option is None:
            raise SelectionError(
                f"'{identifier}' is not an option of step {step_index} "
                f"(expected one of: {', '.join(step.option_ids)})",
                step_index=step_index,
                identifier=identifier,
            )

        prior = self._selections[:step_index]
        if is_disabled(option, prior):
            raise SelectionError(
                f"'{identifier}' is disabled at step {step_index} after choosing "
                f"{', '.join(prior) or 'nothing'}",
                step_index=step_index,
                identifier=identifier,
            )

        self._selections = prior + (identifier,)
        return self._selections

    def reset(self) -> None:
        """Forget every choice."""
        self._selections = ()


def validate_selections(
    selections: Sequence[str],
    steps: Sequence[Step] = STEPS,
) -> tuple[str, ...]:
    """Check that *selections* is a complete, mutually-legal sequence.

    Replays the identifiers through a fresh ``SelectionStateMachine``.

    Raises:
        SelectionError: If the length is wrong or any identifier is unknown
            or disabled by the identifiers before it.
    """
    if isinstance(selections, str):
        raise SelectionError("Selections must be a sequence of identifiers, not a string")
    if not isinstance(selections, Sequence):
        raise SelectionError(
            f"Selections must be a sequence of identifiers, got {type(selections).__name__}"
        )
    if len(selections) != len(steps):
        raise SelectionError(
            f"Expected {len(steps)} selections, got {len(selections)}: {list(selections)}"
        )

    machine = SelectionStateMachine(steps)
    for index, identifier in enumerate(selections):
        machine.select(index, identifier)
    return machine.selections
