"""Package-manager setup for a freshly scaffolded project.

Runs the UI-library initializer and framework upgrade, removes build
leftovers, then performs a clean install. Each command is a blocking child
process with inherited stdio; any non-zero exit aborts the scaffold.
"""

from __future__ import annotations

import shutil
from collections.abc import Awaitable, Callable
from pathlib import Path

from ..config import Settings
from ..errors import ExternalCommandFailure
from ..utils import print_step, run_command

CommandRunner = Callable[..., Awaitable[tuple[int, str, str]]]

# Removed before the final install so it starts from a clean slate.
STALE_PATHS = (".next", "node_modules", "pnpm-lock.yaml")
# Duplicate of app/page.tsx that some initializers leave behind.
DUPLICATE_PAGE = Path("app") / "page.js"


class DependencySetup:
    """Sequential dependency installation inside a project directory."""

    def __init__(self, settings: Settings, runner: CommandRunner = run_command) -> None:
        self.settings = settings
        self.runner = runner

    async def run(self, project_path: Path) -> list[list[str]]:
        """Execute every setup command; returns the commands that ran."""
        executed: list[list[str]] = []

        print_step("Initializing shadcn/ui... (This may take a moment)")
        for cmd in self.settings.setup_commands():
            await self._run(cmd, project_path)
            executed.append(cmd)

        duplicate = project_path / DUPLICATE_PAGE
        if duplicate.exists():
            print_step("Removing duplicate page.js file...")
            duplicate.unlink()

        self._remove_stale(project_path)

        install = self.settings.install_command()
        print_step("Installing dependencies...")
        await self._run(install, project_path)
        executed.append(install)
        return executed

    async def _run(self, cmd: list[str], cwd: Path) -> None:
        try:
            returncode, _, stderr = await self.runner(
                cmd, cwd=cwd, timeout=self.settings.command_timeout, capture=False
            )
        except FileNotFoundError as exc:
            raise ExternalCommandFailure(cmd, 127, f"'{cmd[0]}' is not installed") from exc
        if returncode != 0:
            raise ExternalCommandFailure(cmd, returncode, stderr)

    @staticmethod
    def _remove_stale(project_path: Path) -> None:
        for name in STALE_PATHS:
            target = project_path / name
            if target.is_dir() and not target.is_symlink():
                shutil.rmtree(target)
            elif target.exists() or target.is_symlink():
                target.unlink()
