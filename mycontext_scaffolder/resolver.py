"""Turn parsed CLI flags into a ``ScaffoldConfig``.

Decides between interactive and non-interactive mode, asks the user only for
what the flags did not supply, and validates the result before any file is
touched.
"""

from __future__ import annotations

from typing import Any

from pydantic import ValidationError

from mycontext_scaffolder.args import FlagValue, flag_text
from mycontext_scaffolder.errors import InvalidInputError
from mycontext_scaffolder.models import (
    CONTEXT_MODE_CHOICES,
    EMAIL_PATTERN,
    PROJECT_ID_PATTERN,
    PROJECT_TYPE_CHOICES,
    ContextMode,
    GenerateAnonContext,
    ImportAuthContext,
    ProjectType,
    RetrieveSourceContext,
    ScaffoldConfig,
    TemplateContext,
    project_name_error,
)
from mycontext_scaffolder.prompts import Prompter
from mycontext_scaffolder.utils import print_panel

DEFAULT_PROJECT_NAME = "my-context-app"

Flags = dict[str, FlagValue]


def is_non_interactive(flags: Flags) -> bool:
    """Return ``True`` when the flags alone fully describe the run."""
    return (
        bool(flags.get("yes"))
        or (bool(flags.get("email")) and bool(flags.get("project")))
        or bool(flags.get("source-id"))
        or (bool(flags.get("generate")) and bool(flags.get("description")) and not flags.get("email"))
    )


def _require_text(flags: Flags, name: str) -> str:
    value = flags.get(name)
    if not isinstance(value, str) or not value:
        raise InvalidInputError(f"The --{name} flag requires a value.")
    return value


def _project_type(raw: str | None) -> ProjectType:
    if raw is None:
        raise InvalidInputError("Project type is required.")
    try:
        return ProjectType(raw)
    except ValueError:
        allowed = ", ".join(t.value for t in ProjectType)
        raise InvalidInputError(
            f"Invalid project type '{raw}'. Expected one of: {allowed}."
        ) from None


def _build_config(**kwargs: Any) -> ScaffoldConfig:
    """Construct the config, converting Pydantic errors into ``InvalidInputError``."""
    name = kwargs.get("project_name")
    if not name:
        raise InvalidInputError("Project name and type are required.")
    problem = project_name_error(name)
    if problem:
        raise InvalidInputError(f"Invalid project name '{name}'. {problem}")
    try:
        return ScaffoldConfig(**kwargs)
    except ValidationError as exc:
        details = "; ".join(err["msg"] for err in exc.errors())
        raise InvalidInputError(f"Invalid configuration: {details}") from exc


# ---------------------------------------------------------------------------
# Non-interactive
# ---------------------------------------------------------------------------


def resolve_non_interactive(flags: Flags) -> ScaffoldConfig:
    """Build the config purely from flags.

    Precedence: ``--source-id``, then ``--email``, then ``--generate`` with
    ``--description``, else template only.
    """
    name = flag_text(flags, "name") or DEFAULT_PROJECT_NAME
    project_type = _project_type(flag_text(flags, "type") or ProjectType.FULL.value)

    context: Any
    if "source-id" in flags:
        context = RetrieveSourceContext(source_id=_require_text(flags, "source-id"))
    elif "email" in flags:
        context = ImportAuthContext(
            email=_require_text(flags, "email"),
            project_id=flag_text(flags, "project"),
            code=flag_text(flags, "code"),
        )
    elif flags.get("generate") and flag_text(flags, "description"):
        context = GenerateAnonContext(description=flag_text(flags, "description"))
    else:
        context = TemplateContext()

    return _build_config(
        project_name=name,
        project_type=project_type,
        context=context,
        auto_confirm=bool(flags.get("yes")),
    )


# ---------------------------------------------------------------------------
# Interactive
# ---------------------------------------------------------------------------


def _validate_description(value: str) -> str | None:
    if len(value) > 10:
        return None
    return "Please provide a more detailed description (at least 10 characters)."


def _validate_email(value: str) -> str | None:
    return None if EMAIL_PATTERN.match(value) else "Please enter a valid email address."


def _validate_project_id(value: str) -> str | None:
    if not value or PROJECT_ID_PATTERN.match(value):
        return None
    return "Invalid Project ID format."


def _validate_source_id(value: str) -> str | None:
    return None if value else "Please enter a Source ID."


def _validate_interactive_name(value: str) -> str | None:
    return project_name_error(value, allow_current_dir=False)


def resolve_interactive(flags: Flags, prompter: Prompter) -> ScaffoldConfig:
    """Ask the user for everything the flags did not provide."""
    print_panel(
        "Scaffold a Next.js app pre-loaded with your MyContext documents.",
        "Welcome to the MyContext App Scaffolder!",
    )

    name = flag_text(flags, "name")
    if name is None:
        name = prompter.ask_text("What is your project name?", validate=_validate_interactive_name)

    raw_type = flag_text(flags, "type")
    if raw_type is None:
        raw_type = prompter.select(
            "What type of project do you want to create?", PROJECT_TYPE_CHOICES
        )
    project_type = _project_type(raw_type)

    mode = ContextMode(
        prompter.select("How would you like to set up your project context?", CONTEXT_MODE_CHOICES)
    )

    context: Any
    if mode is ContextMode.GENERATE_ANON:
        description = flag_text(flags, "description")
        if description is None:
            description = prompter.ask_text(
                "Describe your project idea (the more detail, the better)",
                validate=_validate_description,
            )
        context = GenerateAnonContext(description=description)
    elif mode is ContextMode.RETRIEVE_SOURCE:
        source_id = prompter.ask_text(
            "Please enter your Source ID to retrieve context", validate=_validate_source_id
        )
        context = RetrieveSourceContext(source_id=source_id)
    elif mode is ContextMode.IMPORT_AUTH:
        email = flag_text(flags, "email")
        if email is None:
            email = prompter.ask_text(
                "Please enter your email to fetch existing context", validate=_validate_email
            )
        project_id = flag_text(flags, "project")
        if project_id is None:
            project_id = prompter.ask_text(
                "Paste your Project ID (or leave blank to select interactively)",
                validate=_validate_project_id,
                default="",
            )
        context = ImportAuthContext(
            email=email, project_id=project_id or None, code=flag_text(flags, "code")
        )
    else:
        context = TemplateContext()

    return _build_config(
        project_name=name,
        project_type=project_type,
        context=context,
        auto_confirm=bool(flags.get("yes")),
    )


def resolve_config(flags: Flags, prompter: Prompter) -> ScaffoldConfig:
    """Pick interactive or non-interactive resolution and return the config."""
    if is_non_interactive(flags):
        return resolve_non_interactive(flags)
    return resolve_interactive(flags, prompter)
