"""Exception hierarchy for the MyContext scaffolder.

Every failure the CLI knows how to report derives from ``ScaffoldError``.
Errors raised before the project directory is created leave no side effects
behind; anything raised afterwards is funnelled through the orchestrator's
single rollback boundary.
"""

from __future__ import annotations


class ScaffoldError(Exception):
    """Base class for all fatal scaffolding errors."""

    exit_code: int = 1


# ---------------------------------------------------------------------------
# Input and destination problems (no side effects)
# ---------------------------------------------------------------------------


class InvalidInputError(ScaffoldError):
    """Bad project name/type or missing required configuration."""


class DirectoryConflictError(ScaffoldError):
    """The destination directory already exists."""

    def __init__(self, project_name: str) -> None:
        self.project_name = project_name
        super().__init__(
            f"Directory '{project_name}' already exists. "
            "Please choose a different project name."
        )


class TemplateNotFound(ScaffoldError):
    """No bundled template exists for the requested project type."""


class ScaffoldAborted(ScaffoldError):
    """The user declined to continue."""


class PromptAborted(ScaffoldAborted):
    """An interactive prompt was cancelled (EOF or Ctrl-C)."""

    exit_code = 130


# ---------------------------------------------------------------------------
# Remote API failures
# ---------------------------------------------------------------------------


class RemoteError(ScaffoldError):
    """A call to the MyContext API failed.

    Attributes:
        status_code: HTTP status of the response, or ``None`` for transport
            failures (connection refused, timeout).
    """

    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.status_code = status_code
        super().__init__(message)


class InvalidResponseBody(RemoteError):
    """The API answered with a body that is not valid JSON."""


class MalformedResponse(RemoteError):
    """The API answered with JSON that lacks required fields."""


class ProcessNotFound(RemoteError):
    """The requested process export does not exist (HTTP 404)."""

    def __init__(self, process_id: str) -> None:
        self.process_id = process_id
        super().__init__(f"Process with ID '{process_id}' not found.", status_code=404)


# ---------------------------------------------------------------------------
# Orchestration failures (trigger rollback)
# ---------------------------------------------------------------------------


class VerificationFailure(ScaffoldError):
    """The email verification code was rejected."""


class NoGenerationsFound(ScaffoldError):
    """The account has no context generations for the email/project."""


class ManifestTimeout(ScaffoldError):
    """The template copy did not produce a package manifest in time."""


class ExternalCommandFailure(ScaffoldError):
    """A package-manager command exited non-zero, timed out, or was missing."""

    def __init__(self, command: list[str], returncode: int, detail: str = "") -> None:
        self.command = list(command)
        self.returncode = returncode
        message = f"Command failed with exit code {returncode}: {' '.join(command)}"
        if detail:
            message = f"{message} ({detail})"
        super().__init__(message)
