"""Mini-Lisp scaffold wizard.

The option catalog, the rule resolver and the selection state machine that
together decide which operating system / IDE / compiler / build tool
combinations may be chosen.

Usage::

    from minilisp_scaffold.wizard import SelectionStateMachine

    wizard = SelectionStateMachine()
    wizard.select(0, "mac")
    for step in wizard.visible_steps():
        print(step.step.title, [s.option.id for s in step.options if not s.disabled])
"""

from minilisp_scaffold.wizard.catalog import STEPS, DisableRule, Option, RuleKind, Step
from minilisp_scaffold.wizard.resolver import (
    OptionState,
    enabled_ids,
    is_disabled,
    legal_combinations,
    resolve_step,
)
from minilisp_scaffold.wizard.state import (
    SelectionError,
    SelectionStateMachine,
    StepState,
    validate_selections,
)

__all__ = [
    "STEPS",
    "DisableRule",
    "Option",
    "RuleKind",
    "Step",
    "OptionState",
    "enabled_ids",
    "is_disabled",
    "legal_combinations",
    "resolve_step",
    "SelectionError",
    "SelectionStateMachine",
    "StepState",
    "validate_selections",
]
