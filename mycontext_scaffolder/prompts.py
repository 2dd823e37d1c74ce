"""Interactive "ask the user" capability.

The resolver, the verification flow and the orchestrator only depend on the
small :class:`Prompter` protocol. :class:`RichPrompter` is the terminal
implementation built on ``rich.prompt``; tests substitute a scripted fake.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from typing import Protocol

from rich.prompt import Confirm, IntPrompt, Prompt

from mycontext_scaffolder.errors import PromptAborted
from mycontext_scaffolder.utils import console, print_error

Validator = Callable[[str], "str | None"]


class Prompter(Protocol):
    """Blocking user-input primitives."""

    def ask_text(
        self, message: str, validate: Validator | None = None, default: str | None = None
    ) -> str: ...

    def select(
        self, message: str, choices: Sequence[tuple[str, str]], default_index: int = 0
    ) -> str: ...

    def confirm(self, message: str, default: bool = False) -> bool: ...


class RichPrompter:
    """Terminal prompts.

    Invalid answers re-ask the same question. EOF or Ctrl-C abort the whole
    run via :class:`~mycontext_scaffolder.errors.PromptAborted`.
    """

    def ask_text(
        self, message: str, validate: Validator | None = None, default: str | None = None
    ) -> str:
        while True:
            try:
                if default is None:
                    value = Prompt.ask(message, console=console)
                else:
                    value = Prompt.ask(message, console=console, default=default)
            except (EOFError, KeyboardInterrupt) as exc:
                raise PromptAborted("Aborted.") from exc
            value = (value or "").strip()
            problem = validate(value) if validate else None
            if problem is None:
                return value
            print_error(problem)

    def select(
        self, message: str, choices: Sequence[tuple[str, str]], default_index: int = 0
    ) -> str:
        console.print(f"[bold]{message}[/bold]")
        for number, (title, _) in enumerate(choices, start=1):
            console.print(f"  [cyan]{number}[/cyan]) {title}")
        try:
            picked = IntPrompt.ask(
                "Choose",
                console=console,
                choices=[str(n) for n in range(1, len(choices) + 1)],
                default=default_index + 1,
            )
        except (EOFError, KeyboardInterrupt) as exc:
            raise PromptAborted("Aborted.") from exc
        return choices[picked - 1][1]

    def confirm(self, message: str, default: bool = False) -> bool:
        try:
            return Confirm.ask(message, console=console, default=default)
        except (EOFError, KeyboardInterrupt) as exc:
            raise PromptAborted("Aborted.") from exc
