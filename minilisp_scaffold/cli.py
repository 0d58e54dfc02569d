"""Command line front end for the Mini-Lisp scaffold wizard.

Walks the user through the four wizard steps, showing which options the
earlier answers rule out, then generates ``mini_lisp.zip``.

Usage::

    python -m minilisp_scaffold.cli
    python -m minilisp_scaffold.cli --select windows,vscode,mingw,cmake -o ./out
    python -m minilisp_scaffold.cli --list
"""

from __future__ import annotations

import asyncio
import sys
from collections.abc import Callable, Sequence
from pathlib import Path

from pydantic import ValidationError
from rich.markup import escape
from rich.panel import Panel
from rich.prompt import Confirm, Prompt
from rich.table import Table

from minilisp_scaffold.config import Config
from minilisp_scaffold.scaffolder import GenerationError, ScaffoldGenerator
from minilisp_scaffold.utils import (
    console,
    print_error,
    print_success,
    print_summary_table,
    print_warning,
)
from minilisp_scaffold.wizard import (
    STEPS,
    SelectionStateMachine,
    StepState,
    legal_combinations,
)

AskFn = Callable[[str, list[str]], str]
ConfirmFn = Callable[[str], bool]


def _rich_ask(question: str, choices: list[str]) -> str:
    return Prompt.ask(question, choices=choices, console=console)


def _rich_confirm(question: str) -> bool:
    return Confirm.ask(question, default=True, console=console)


# ---------------------------------------------------------------------------
# Interactive wizard
# ---------------------------------------------------------------------------


class WizardCLI:
    """Interactive presentation layer over ``SelectionStateMachine``.

    Only enabled identifiers are ever offered to the user, so ``select`` is
    never called with a disabled option. Answering ``back`` re-opens the
    previous step; choosing there discards every later answer.
    """

    BACK = "back"

    def __init__(
        self,
        generator: ScaffoldGenerator,
        machine: SelectionStateMachine | None = None,
        ask: AskFn = _rich_ask,
        confirm: ConfirmFn = _rich_confirm,
    ) -> None:
        self.generator = generator
        self.machine = machine or SelectionStateMachine()
        self.ask = ask
        self.confirm = confirm

    def render_step(self, state: StepState) -> None:
        """Print one step as a table of its options."""
        table = Table(title=f"Step {state.step.index + 1}: {state.step.title}", header_style="bold cyan")
        table.add_column("Id", no_wrap=True)
        table.add_column("Option")
        table.add_column("Description", style="dim")
        table.add_column("Status")
        for option_state in state.options:
            option = option_state.option
            if option_state.disabled:
                status = "[dim]disabled[/dim]"
            elif option_state.selected:
                status = "[bold green]selected[/bold green]"
            else:
                status = "[green]available[/green]"
            table.add_row(option.id, option.title, option.description, status)
        console.print(table)

    def choose(self) -> tuple[str, ...]:
        """Prompt until every step has a confirmed answer."""
        cursor = len(self.machine.selections)
        while cursor < len(self.machine.steps):
            state = self.machine.visible_steps()[cursor]
            self.render_step(state)

            choices = [s.option.id for s in state.options if not s.disabled]
            if cursor > 0:
                choices.append(self.BACK)
            answer = self.ask(f"Step {cursor + 1}", choices)

            if answer == self.BACK:
                cursor -= 1
                continue
            self.machine.select(cursor, answer)
            cursor = len(self.machine.selections)
        return self.machine.selections

    def run(self) -> Path | None:
        """Run the wizard and generate the archive.

        Returns:
            The delivered archive path, or ``None`` if the user gave up.
        """
        selections = self.choose()
        print_summary_table(
            {step.title: identifier for step, identifier in zip(self.machine.steps, selections)},
            title="Your choices",
        )
        if not self.confirm(f"Generate {self.generator.config.archive_name}?"):
            print_warning("Nothing generated.")
            return None

        while True:
            try:
                path = asyncio.run(self.generator.generate(selections))
            except GenerationError as exc:
                print_error(str(exc))
                if not self.confirm("Try again?"):
                    return None
                continue
            print_success(f"Scaffold written to {path}")
            return path


# ---------------------------------------------------------------------------
# Non-interactive helpers
# ---------------------------------------------------------------------------


def print_combinations() -> None:
    """Print every legal selection as a table."""
    table = Table(title="Supported combinations", header_style="bold cyan")
    for step in STEPS:
        table.add_column(step.title)
    for combo in legal_combinations():
        table.add_row(*combo)
    console.print(table)


def parse_selection(value: str) -> list[str]:
    """Split ``"windows, vscode,mingw,cmake"`` into identifiers."""
    return [part.strip() for part in value.split(",") if part.strip()]


# ---------------------------------------------------------------------------
# CLI entry point
# ---------------------------------------------------------------------------


def main(argv: Sequence[str] | None = None) -> None:
    """CLI entry point for ``minilisp-scaffold``."""
    import argparse

    parser = argparse.ArgumentParser(
        description="Mini-Lisp scaffold wizard -- generate a ready-to-build starter project",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  minilisp-scaffold\n"
            "  minilisp-scaffold --select windows,vscode,mingw,cmake -o ./out\n"
            "  minilisp-scaffold --list\n"
        ),
    )
    parser.add_argument(
        "--select", "-s",
        default=None,
        help="Comma-separated os,ide,compiler,build-tool (skips the interactive wizard)",
    )
    parser.add_argument(
        "--list",
        action="store_true",
        help="List every supported combination and exit",
    )
    parser.add_argument(
        "--output", "-o",
        default=None,
        help="Output directory (default: ./output or $MLS_OUTPUT_DIR)",
    )
    parser.add_argument(
        "--templates", "-t",
        default=None,
        help="Template directory or base URL (default: bundled templates)",
    )
    parser.add_argument(
        "--archive-name",
        default=None,
        help="Archive file name (default: mini_lisp.zip)",
    )

    args = parser.parse_args(argv)

    if args.list:
        print_combinations()
        return

    overrides: dict[str, object] = {}
    if args.output:
        overrides["output_dir"] = Path(args.output)
    if args.templates:
        overrides["template_source"] = args.templates
    if args.archive_name:
        overrides["archive_name"] = args.archive_name

    try:
        config = Config.from_env()
        if overrides:
            config = Config.model_validate({**config.model_dump(), **overrides})
    except (ValidationError, ValueError) as exc:
        print_error(f"Invalid configuration: {escape(str(exc))}")
        sys.exit(1)

    console.print(
        Panel(
            f"[bold bright_cyan]Mini-Lisp Scaffold[/bold bright_cyan]\n"
            f"Templates : {config.template_source}\n"
            f"Output    : {config.archive_path.resolve()}",
            border_style="bright_cyan",
        )
    )

    generator = ScaffoldGenerator(config)

    if args.select is None:
        if WizardCLI(generator).run() is None:
            sys.exit(1)
        return

    try:
        path = asyncio.run(generator.generate(parse_selection(args.select)))
    except GenerationError as exc:
        print_error(str(exc))
        sys.exit(1)
    print_success(f"Scaffold written to {path}")


if __name__ == "__main__":
    main()
