"""Rich spinners and prompts for the CLI."""

from __future__ import annotations

import asyncio
import logging
import sys

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TaskID, TextColumn, TimeElapsedColumn
from rich.prompt import Prompt

console = Console()


class StepProgress:
    """Spinner for a single named step (assistant call, checkout).

    Leaving the block marks the step done, or failed when it raised or
    ``fail()`` was called.
    """

    def __init__(self, label: str) -> None:
        self.label = label
        self.failure: str | None = None
        self._progress = Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            TimeElapsedColumn(),
            console=console,
        )
        self._task_id: TaskID | None = None

    def __enter__(self) -> "StepProgress":
        self._progress.__enter__()
        self._task_id = self._progress.add_task(f"[cyan]{escape(self.label)}[/]", total=None)
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if self.failure is None and exc is not None:
            self.failure = str(exc) or exc_type.__name__
        if self.failure is None:
            description = f"[green]✓ {escape(self.label)}[/]"
        else:
            description = f"[red]✗ {escape(self.label)}: {escape(self.failure)}[/]"
        self._progress.update(self._task_id, description=description, completed=True)
        self._progress.__exit__(exc_type, exc, tb)

    def status(self, text: str) -> None:
        self._progress.update(self._task_id, description=f"[cyan]{escape(self.label)}[/] ({escape(text)})")

    def fail(self, reason: str) -> None:
        self.failure = reason


def print_panel(text: str, *, title: str | None = None, style: str = "blue") -> None:
    console.print(Panel(text, title=title, style=style))


async def ask_user(question: str) -> str | None:
    """Prompt for one line of input without blocking the event loop.

    Returns ``None`` when stdin is not interactive or is closed.
    """
    if not sys.stdin.isatty():
        return None

    # Keep httpx / assistant log lines from interleaving with the prompt.
    root_logger = logging.getLogger()
    prev_level = root_logger.level
    root_logger.setLevel(logging.CRITICAL)

    loop = asyncio.get_running_loop()
    try:
        return await loop.run_in_executor(None, lambda: Prompt.ask(f"[yellow]{question}[/]"))
    except EOFError:
        return None
    finally:
        root_logger.setLevel(prev_level)
