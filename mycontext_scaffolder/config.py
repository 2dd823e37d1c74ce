"""MyContext scaffolder configuration.

Centralised, typed settings for the CLI. Everything tunable (API location,
network timeout, manifest polling, package manager) lives on one Pydantic v2
model so it is validated at construction time and can be overridden from
environment variables without boiler-plate.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field

from mycontext_scaffolder.models import ProjectType

_DEFAULT_TEMPLATES_DIR = Path(__file__).parent / "templates"

_TRUTHY = {"1", "true", "yes", "on"}


class Settings(BaseModel):
    """Global scaffolder settings.

    Instances are created once by the CLI entry point (usually through
    :meth:`from_env`) and passed to the API client and the orchestrator.
    """

    api_url: str = Field(default="https://mycontext.fbien.com/api")
    dashboard_url: str = Field(default="https://mycontext.fbien.com/projects")
    timeout: float = Field(default=30.0, ge=1, description="Per-request network timeout in seconds")

    templates_dir: Path = Field(default=_DEFAULT_TEMPLATES_DIR)
    context_dir_name: str = Field(default="_my_context")
    manifest_name: str = Field(default="package.json")

    # Bounded poll for the manifest after the template copy.
    manifest_poll_interval: float = Field(default=0.05, gt=0)
    manifest_poll_attempts: int = Field(default=20, ge=1)

    package_manager: str = Field(default="pnpm")
    command_timeout: int = Field(
        default=900, ge=1, description="Per-command timeout for dependency setup in seconds"
    )
    skip_dependency_setup: bool = Field(default=False)
    debug: bool = Field(default=False, description="Print tracebacks for unexpected failures")

    # ------------------------------------------------------------------
    # Derived values
    # ------------------------------------------------------------------

    def template_path(self, project_type: ProjectType) -> Path:
        """Directory holding the template for *project_type*."""
        return self.templates_dir / ProjectType(project_type).value

    def dashboard_link(self, project_id: str) -> str:
        """Persistent dashboard URL for an authenticated project."""
        return f"{self.dashboard_url.rstrip('/')}/{project_id}"

    def setup_commands(self) -> list[list[str]]:
        """Package-manager commands run before the final clean install."""
        pm = self.package_manager
        return [
            [pm, "dlx", "shadcn@latest", "init"],
            [pm, "add", "next@latest", "react@latest", "react-dom@latest"],
        ]

    def install_command(self) -> list[str]:
        return [self.package_manager, "install"]

    # ------------------------------------------------------------------
    # Construction helpers
    # ------------------------------------------------------------------

    @classmethod
    def from_env(cls) -> "Settings":
        """Build ``Settings`` from environment variables.

        Recognised variables (all optional):
            MYCONTEXT_API_URL, MYCONTEXT_DASHBOARD_URL, MYCONTEXT_TIMEOUT,
            MYCONTEXT_TEMPLATES_DIR, MYCONTEXT_PACKAGE_MANAGER,
            MYCONTEXT_COMMAND_TIMEOUT, MYCONTEXT_SKIP_INSTALL, MYCONTEXT_DEBUG.
        """
        kwargs: dict[str, Any] = {}
        if os.environ.get("MYCONTEXT_API_URL"):
            kwargs["api_url"] = os.environ["MYCONTEXT_API_URL"]
        if os.environ.get("MYCONTEXT_DASHBOARD_URL"):
            kwargs["dashboard_url"] = os.environ["MYCONTEXT_DASHBOARD_URL"]
        if os.environ.get("MYCONTEXT_TIMEOUT"):
            kwargs["timeout"] = float(os.environ["MYCONTEXT_TIMEOUT"])
        if os.environ.get("MYCONTEXT_TEMPLATES_DIR"):
            kwargs["templates_dir"] = Path(os.environ["MYCONTEXT_TEMPLATES_DIR"])
        if os.environ.get("MYCONTEXT_PACKAGE_MANAGER"):
            kwargs["package_manager"] = os.environ["MYCONTEXT_PACKAGE_MANAGER"]
        if os.environ.get("MYCONTEXT_COMMAND_TIMEOUT"):
            kwargs["command_timeout"] = int(os.environ["MYCONTEXT_COMMAND_TIMEOUT"])

        kwargs["skip_dependency_setup"] = (
            os.environ.get("MYCONTEXT_SKIP_INSTALL", "").strip().lower() in _TRUTHY
        )
        kwargs["debug"] = os.environ.get("MYCONTEXT_DEBUG", "").strip().lower() in _TRUTHY
        return cls(**kwargs)
