"""Scaffold orchestrator.

Drives one scaffolding run through a fixed sequence of states:

VALIDATE -> CREATE_DIRECTORY -> COPY_TEMPLATE -> AWAIT_MANIFEST ->
PREPARE_CONTEXT_DIRECTORY -> INJECT_CONTEXT -> REPORT_CONTEXT_HANDLE ->
RUN_DEPENDENCY_SETUP -> SUCCESS

Any failure stops the run at a single error boundary. If this run created
the project directory it is removed again; a directory the user already
owned (``.`` as the project name) is never deleted.
"""

from __future__ import annotations

import asyncio
import os
import shutil
import traceback
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from rich.markup import escape

from ..api_client import MyContextClient
from ..config import Settings
from ..context_provider import ContextProvider
from ..errors import (
    DirectoryConflictError,
    InvalidInputError,
    ScaffoldAborted,
    ScaffoldError,
    TemplateNotFound,
)
from ..models import ContextMode, ScaffoldConfig, project_name_error
from ..prompts import Prompter, RichPrompter
from ..utils import console, print_error, print_step, print_success, print_warning
from .dependencies import DependencySetup
from .layout import (
    ProjectLayout,
    await_manifest,
    copy_template,
    prepare_context_dir,
    visible_entries,
    write_context_files,
)


class ScaffoldState(str, Enum):
    """Orchestrator states, in execution order."""
    VALIDATE = "validate"
    CREATE_DIRECTORY = "create_directory"
    COPY_TEMPLATE = "copy_template"
    AWAIT_MANIFEST = "await_manifest"
    PREPARE_CONTEXT_DIRECTORY = "prepare_context_directory"
    INJECT_CONTEXT = "inject_context"
    REPORT_CONTEXT_HANDLE = "report_context_handle"
    RUN_DEPENDENCY_SETUP = "run_dependency_setup"
    SUCCESS = "success"


class CleanupStatus(str, Enum):
    NOT_NEEDED = "not_needed"
    SKIPPED = "skipped"
    CLEANED = "cleaned"
    FAILED = "failed"


@dataclass
class ScaffoldResult:
    """Everything learned while scaffolding; the input config stays untouched."""

    project_name: str
    project_path: Path
    state: ScaffoldState = ScaffoldState.VALIDATE
    completed_states: list[ScaffoldState] = field(default_factory=list)
    success: bool = False
    created_directory: bool = False
    source_id: str | None = None
    project_id: str | None = None
    files_written: list[str] = field(default_factory=list)
    error: Exception | None = None
    cleanup: CleanupStatus = CleanupStatus.NOT_NEEDED


class Scaffolder:
    """Runs the scaffolding state machine for one ``ScaffoldConfig``.

    Attributes:
        config: Immutable run configuration from the input resolver.
        settings: Global settings (templates, API, polling, package manager).
        layout: Resolved project paths.
        result: Accumulator returned by :meth:`run`.
    """

    def __init__(
        self,
        config: ScaffoldConfig,
        settings: Settings,
        client: MyContextClient | None = None,
        prompter: Prompter | None = None,
        base_dir: Path | None = None,
        dependency_setup: DependencySetup | None = None,
    ) -> None:
        self.config = config
        self.settings = settings
        self.prompter = prompter or RichPrompter()
        self.client = client or MyContextClient(settings.api_url, timeout=settings.timeout)
        self.provider = ContextProvider(self.client, self.prompter)
        self.dependency_setup = dependency_setup or DependencySetup(settings)
        self.layout = ProjectLayout.resolve(config, settings, base_dir or Path.cwd())
        self.result = ScaffoldResult(
            project_name=self.layout.display_name,
            project_path=self.layout.project_path,
        )

    # ------------------------------------------------------------------
    # State dispatch
    # ------------------------------------------------------------------

    _STATE_METHODS: dict[ScaffoldState, str] = {
        ScaffoldState.VALIDATE: "_validate",
        ScaffoldState.CREATE_DIRECTORY: "_create_directory",
        ScaffoldState.COPY_TEMPLATE: "_copy_template",
        ScaffoldState.AWAIT_MANIFEST: "_await_manifest",
        ScaffoldState.PREPARE_CONTEXT_DIRECTORY: "_prepare_context_directory",
        ScaffoldState.INJECT_CONTEXT: "_inject_context",
        ScaffoldState.REPORT_CONTEXT_HANDLE: "_report_context_handle",
        ScaffoldState.RUN_DEPENDENCY_SETUP: "_run_dependency_setup",
        ScaffoldState.SUCCESS: "_success",
    }

    async def run(self) -> ScaffoldResult:
        """Execute every state in order.

        Returns:
            The ``ScaffoldResult``; ``success`` is ``False`` when any state
            failed, with ``error`` and ``cleanup`` describing what happened.
        """
        for state, method_name in self._STATE_METHODS.items():
            self.result.state = state
            try:
                await getattr(self, method_name)()
            except ScaffoldError as exc:
                self._fail(exc)
                return self.result
            except Exception as exc:  # noqa: BLE001
                self._fail(exc)
                if self.settings.debug:
                    console.print(f"[dim]{traceback.format_exc()}[/dim]")
                return self.result
            except (KeyboardInterrupt, asyncio.CancelledError):
                self.result.error = ScaffoldAborted("Interrupted.")
                self._rollback()
                raise
            self.result.completed_states.append(state)

        self.result.success = True
        return self.result

    # ------------------------------------------------------------------
    # States
    # ------------------------------------------------------------------

    async def _validate(self) -> None:
        layout = self.layout
        problem = project_name_error(self.config.project_name)
        if problem:
            raise InvalidInputError(f"Invalid project name. {problem}")
        if not layout.template_source.is_dir():
            raise TemplateNotFound(
                f"No template found for project type '{self.config.project_type.value}' "
                f"at {layout.template_source}."
            )

        if not layout.use_current_directory and layout.project_path.exists():
            raise DirectoryConflictError(self.config.project_name)

        if layout.use_current_directory and visible_entries(layout.project_path):
            if not self.config.auto_confirm and not self.prompter.confirm(
                "Current directory is not empty. Continue and scaffold into it?",
                default=False,
            ):
                raise ScaffoldAborted("Aborted.")

        console.print(
            f"\n[bold cyan]Creating your project: {self.result.project_name} "
            f"({self.config.project_type.value} type)...[/bold cyan]"
        )

    async def _create_directory(self) -> None:
        if self.layout.use_current_directory:
            return
        print_step(f"Creating project directory: {self.result.project_name}")
        self.layout.project_path.mkdir(parents=False, exist_ok=False)
        self.result.created_directory = True

    async def _copy_template(self) -> None:
        print_step(f"Copying {self.config.project_type.value} template files...")
        copy_template(self.layout)

    async def _await_manifest(self) -> None:
        await await_manifest(
            self.layout.manifest_path,
            interval=self.settings.manifest_poll_interval,
            attempts=self.settings.manifest_poll_attempts,
        )

    async def _prepare_context_directory(self) -> None:
        prepare_context_dir(
            self.layout.context_dir,
            clear=self.config.context_mode is not ContextMode.TEMPLATE,
        )

    async def _inject_context(self) -> None:
        context = await self.provider.fetch(self.config)
        written = write_context_files(self.layout.context_dir, context.files)
        self.result.files_written = [p.name for p in written]
        self.result.source_id = context.source_id
        self.result.project_id = context.project_id

    async def _report_context_handle(self) -> None:
        if self.result.project_id:
            print_success("\nAuthenticated context files generated successfully!")
            console.print("[bright_blue]\nReview your context files online:[/bright_blue]")
            console.print(f"[underline]{self.settings.dashboard_link(self.result.project_id)}[/underline]")
        elif self.result.source_id:
            print_success("\nAnonymous context files generated successfully!")
            print_warning(
                "\nIMPORTANT: Save this Source ID to retrieve your context later. "
                "It cannot be recovered if lost."
            )
            console.print(f"   Source ID: [bold]{self.result.source_id}[/bold]")
        console.print(
            f"\nOr, browse the {self.settings.context_dir_name}/ folder in your project "
            "to see all generated files.\n"
        )

    async def _run_dependency_setup(self) -> None:
        if self.settings.skip_dependency_setup:
            print_warning("Skipping dependency setup (MYCONTEXT_SKIP_INSTALL is set).")
            return
        await self.dependency_setup.run(self.layout.project_path)

    async def _success(self) -> None:
        print_success(f"\nProject {self.result.project_name} created successfully!")
        console.print("\nNext steps:")
        if not self.layout.use_current_directory:
            console.print(f"[cyan]  cd {self.result.project_name}[/cyan]")
        console.print(f"[cyan]  {self.settings.package_manager} dev[/cyan]")
        console.print("\nHappy coding!")

    # ------------------------------------------------------------------
    # Failure handling
    # ------------------------------------------------------------------

    def _fail(self, exc: Exception) -> None:
        self.result.error = exc
        if self.result.state is ScaffoldState.VALIDATE:
            print_error(f"Error: {escape(str(exc))}")
        else:
            print_error(f"\nAn error occurred during scaffolding: {escape(str(exc))}")
        self._rollback()

    def _rollback(self) -> None:
        """Remove the project directory, but only if this run created it."""
        if self.layout.use_current_directory:
            self.result.cleanup = CleanupStatus.SKIPPED
            return
        if not self.result.created_directory:
            self.result.cleanup = CleanupStatus.NOT_NEEDED
            return

        project_path = self.layout.project_path
        try:
            cwd = Path.cwd().resolve()
        except FileNotFoundError:
            cwd = None
        if cwd is None or cwd == project_path or project_path in cwd.parents:
            os.chdir(project_path.parent)

        print_warning(
            f"Attempting to clean up partially created directory: {self.result.project_name}"
        )
        try:
            shutil.rmtree(project_path)
        except OSError as exc:
            self.result.cleanup = CleanupStatus.FAILED
            print_error(f"Error during cleanup: {escape(str(exc))}")
            return
        self.result.cleanup = CleanupStatus.CLEANED
        print_warning(f"Cleaned up {self.result.project_name}.")
