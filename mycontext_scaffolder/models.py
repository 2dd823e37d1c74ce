"""Pydantic v2 models for the MyContext scaffolder.

Defines the project/context enumerations, the four-way context source
variant, the immutable ``ScaffoldConfig`` produced by the input resolver, and
the ``Generation`` record returned by the remote API.
"""

from __future__ import annotations

import re
from enum import Enum
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------

class ProjectType(str, Enum):
    """Which bundled template to start from."""
    FULL = "full"
    LANDING = "landing"


class ContextMode(str, Enum):
    """How the ``_my_context`` directory gets populated."""
    GENERATE_ANON = "generate_anon"
    RETRIEVE_SOURCE = "retrieve_source"
    IMPORT_AUTH = "import_auth"
    TEMPLATE = "template"


PROJECT_TYPE_CHOICES: list[tuple[str, str]] = [
    ("Full App (with full Next.js structure)", ProjectType.FULL.value),
    ("Landing Page (optimized for simple landing pages)", ProjectType.LANDING.value),
]

CONTEXT_MODE_CHOICES: list[tuple[str, str]] = [
    ("Generate new context (Anonymous)", ContextMode.GENERATE_ANON.value),
    ("Retrieve context with a Source ID", ContextMode.RETRIEVE_SOURCE.value),
    ("Import existing context from your account", ContextMode.IMPORT_AUTH.value),
    ("Start with basic template only", ContextMode.TEMPLATE.value),
]


# ---------------------------------------------------------------------------
# Validation helpers
# ---------------------------------------------------------------------------

_FORBIDDEN_NAME_CHARS = re.compile(r'[<>:"|?*]')
EMAIL_PATTERN = re.compile(r"^\S+@\S+\.\S+$")
PROJECT_ID_PATTERN = re.compile(r"^[a-zA-Z0-9_-]+$")


def project_name_error(name: str, allow_current_dir: bool = True) -> str | None:
    """Return a human-readable problem with *name*, or ``None`` if it is valid.

    ``"."`` means "scaffold into the current directory" and is only accepted
    when *allow_current_dir* is set (interactive prompts reject it).
    """
    if not name:
        return "Please enter a project name."
    if name == "." and allow_current_dir:
        return None
    if name in (".", "..") or "/" in name or "\\" in name:
        return (
            "Please enter a valid project name (cannot be '.' or '..' and "
            "cannot contain path separators)."
        )
    if _FORBIDDEN_NAME_CHARS.search(name):
        return 'Please enter a valid project name (cannot contain < > : " | ? * characters).'
    return None


# ---------------------------------------------------------------------------
# Context source variant
# ---------------------------------------------------------------------------

class GenerateAnonContext(BaseModel):
    """Generate fresh context anonymously from a project description."""
    model_config = ConfigDict(frozen=True)

    mode: Literal["generate_anon"] = "generate_anon"
    description: str = Field(..., min_length=1, description="Free-text project idea")


class RetrieveSourceContext(BaseModel):
    """Fetch previously generated anonymous context by its Source ID."""
    model_config = ConfigDict(frozen=True)

    mode: Literal["retrieve_source"] = "retrieve_source"
    source_id: str = Field(..., min_length=1, description="Opaque anonymous handle")


class ImportAuthContext(BaseModel):
    """Import context stored under a verified account email."""
    model_config = ConfigDict(frozen=True)

    mode: Literal["import_auth"] = "import_auth"
    email: str = Field(..., min_length=1)
    project_id: Optional[str] = Field(default=None, description="Restrict to one project")
    code: Optional[str] = Field(default=None, description="Verification code from --code")
    verified: bool = Field(default=False, description="Skip the verification round trip")


class TemplateContext(BaseModel):
    """Keep whatever context the template ships with."""
    model_config = ConfigDict(frozen=True)

    mode: Literal["template"] = "template"


ContextSource = Annotated[
    Union[GenerateAnonContext, RetrieveSourceContext, ImportAuthContext, TemplateContext],
    Field(discriminator="mode"),
]


# ---------------------------------------------------------------------------
# Scaffold configuration
# ---------------------------------------------------------------------------

class ScaffoldConfig(BaseModel):
    """Immutable description of one scaffolding run.

    Built once by the input resolver and handed to the orchestrator. Values
    discovered while scaffolding (the resolved project id, the anonymous
    source id) are recorded on ``ScaffoldResult`` instead.
    """
    model_config = ConfigDict(frozen=True)

    project_name: str
    project_type: ProjectType = ProjectType.FULL
    context: ContextSource = Field(default_factory=TemplateContext)
    auto_confirm: bool = False

    @field_validator("project_name")
    @classmethod
    def _check_project_name(cls, value: str) -> str:
        problem = project_name_error(value)
        if problem:
            raise ValueError(problem)
        return value

    @property
    def context_mode(self) -> ContextMode:
        return ContextMode(self.context.mode)

    @property
    def use_current_directory(self) -> bool:
        return self.project_name == "."

    @property
    def email(self) -> str | None:
        return getattr(self.context, "email", None)

    @property
    def project_id(self) -> str | None:
        return getattr(self.context, "project_id", None)

    @property
    def source_id(self) -> str | None:
        return getattr(self.context, "source_id", None)

    @property
    def context_description(self) -> str | None:
        return getattr(self.context, "description", None)

    @property
    def verification_code(self) -> str | None:
        return getattr(self.context, "code", None)

    @property
    def verified(self) -> bool:
        return bool(getattr(self.context, "verified", False))


# ---------------------------------------------------------------------------
# Remote records
# ---------------------------------------------------------------------------

class Generation(BaseModel):
    """A server-stored document produced for a project.

    ``id`` has the shape ``<projectId>_<documentType>_<timestamp>``.
    """
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str
    content: str = ""
    document_type: str = Field(default="", alias="documentType")
    files: Optional[str] = Field(default=None, description="JSON-encoded {name: content}")
    created_at: Optional[str] = Field(default=None, alias="createdAt")
    source_id: Optional[str] = Field(default=None, alias="sourceId")

    @property
    def project_id(self) -> str | None:
        """Substring of ``id`` before the first underscore."""
        head, sep, _ = self.id.partition("_")
        if not sep or not head:
            return None
        return head


class AnonymousGeneration(BaseModel):
    """Result of an anonymous generation: the files plus their durable handle."""

    source_id: str
    files: dict[str, Any] = Field(default_factory=dict)
