"""Shared helpers for the MyContext scaffolder.

Provides async subprocess execution (argument vectors only, never a shell
string) and the Rich-based console helpers every other module prints
through.
"""

from __future__ import annotations

import asyncio
import os
from pathlib import Path

from rich.console import Console
from rich.panel import Panel
from rich.status import Status

console = Console()

# ---------------------------------------------------------------------------
# Async command execution
# ---------------------------------------------------------------------------


async def run_command(
    cmd: list[str],
    cwd: str | Path | None = None,
    timeout: float | None = 120,
    capture: bool = True,
    env: dict[str, str] | None = None,
) -> tuple[int, str, str]:
    """Run a command asynchronously and wait for it to finish.

    Args:
        cmd: Program and arguments. Passed straight to the OS; no shell is
            involved, so nothing needs quoting.
        cwd: Working directory for the child process.
        timeout: Maximum wall-clock seconds before the process is killed.
            ``None`` waits forever.
        capture: Whether to capture stdout/stderr (if ``False`` they inherit
            the parent's streams, which is what interactive installers need).
        env: Optional extra environment variables merged on top of ``os.environ``.

    Returns:
        A ``(returncode, stdout, stderr)`` tuple. If *capture* is ``False``
        the stdout/stderr strings will be empty. A timeout yields a return
        code of ``-1``.

    Raises:
        FileNotFoundError: If the program does not exist.
    """
    merged_env: dict[str, str] | None = None
    if env:
        merged_env = {**os.environ, **env}

    pipe = asyncio.subprocess.PIPE if capture else None
    process = await asyncio.create_subprocess_exec(
        *cmd,
        stdout=pipe,
        stderr=pipe,
        cwd=str(cwd) if cwd else None,
        env=merged_env,
    )

    try:
        stdout_bytes, stderr_bytes = await asyncio.wait_for(
            process.communicate(), timeout=timeout
        )
    except asyncio.TimeoutError:
        process.kill()
        await process.wait()
        return (-1, "", f"Command timed out after {timeout}s: {' '.join(cmd)}")

    stdout_str = (stdout_bytes or b"").decode("utf-8", errors="replace").strip()
    stderr_str = (stderr_bytes or b"").decode("utf-8", errors="replace").strip()
    return (process.returncode or 0, stdout_str, stderr_str)


# ---------------------------------------------------------------------------
# Rich output helpers
# ---------------------------------------------------------------------------


def print_step(message: str) -> None:
    """Print a dim progress line (``- Copying template files...``)."""
    console.print(f"[dim]- {message}[/dim]")


def print_success(message: str) -> None:
    """Print a green success message."""
    console.print(f"[bold green]{message}[/bold green]")


def print_error(message: str) -> None:
    """Print a red error message."""
    console.print(f"[bold red]{message}[/bold red]")


def print_warning(message: str) -> None:
    """Print a yellow warning message."""
    console.print(f"[bold yellow]{message}[/bold yellow]")


def print_panel(body: str, title: str, style: str = "bright_cyan") -> None:
    """Print a bordered banner."""
    console.print(Panel(body, title=f"[bold]{title}[/bold]", border_style=style))


def spinner(message: str) -> Status:
    """Return a spinner for long network waits, used as a context manager."""
    return console.status(f"[cyan]{message}[/cyan]", spinner="dots")
