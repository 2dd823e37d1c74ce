"""Context acquisition strategies.

Each :class:`~mycontext_scaffolder.models.ContextMode` maps to one strategy
that returns a ``{filename: content}`` mapping for the project's
``_my_context`` directory:

* ``generate_anon``   -- generate anonymously, surfacing the new Source ID.
* ``retrieve_source`` -- fetch earlier anonymous context by Source ID.
* ``import_auth``     -- verify the email, then import account generations.
* ``template``        -- no network call; keep the template's own context.
"""

from __future__ import annotations

import json
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import Any

from mycontext_scaffolder.api_client import MyContextClient
from mycontext_scaffolder.errors import NoGenerationsFound, VerificationFailure
from mycontext_scaffolder.models import ContextMode, Generation, ScaffoldConfig
from mycontext_scaffolder.prompts import Prompter
from mycontext_scaffolder.utils import console, print_step, print_warning, spinner


@dataclass
class ContextResult:
    """Files to write plus the handles that identify where they came from."""

    files: dict[str, Any] = field(default_factory=dict)
    source_id: str | None = None
    project_id: str | None = None


# ---------------------------------------------------------------------------
# Generation helpers
# ---------------------------------------------------------------------------


def extract_project_ids(generations: list[Generation]) -> list[str]:
    """Unique project ids in order of first appearance."""
    seen: dict[str, None] = {}
    for gen in generations:
        project_id = gen.project_id
        if project_id:
            seen.setdefault(project_id, None)
    return list(seen)


def filter_by_project(generations: list[Generation], project_id: str) -> list[Generation]:
    prefix = f"{project_id}_"
    return [gen for gen in generations if gen.id.startswith(prefix)]


def generation_files(generations: list[Generation]) -> dict[str, Any]:
    """Flatten generations into one file mapping.

    A generation's ``files`` JSON mapping wins; when it is missing or not a
    JSON object the generation is written as a single file named after its
    document type.
    """
    files: dict[str, Any] = {}
    for gen in generations:
        parsed: Any = None
        if gen.files:
            try:
                parsed = json.loads(gen.files)
            except ValueError:
                parsed = None
        if isinstance(parsed, dict):
            files.update(parsed)
        elif gen.document_type:
            files[gen.document_type] = gen.content
    return files


# ---------------------------------------------------------------------------
# Provider
# ---------------------------------------------------------------------------


class ContextProvider:
    """Dispatches to the strategy selected by ``config.context_mode``."""

    def __init__(self, client: MyContextClient, prompter: Prompter) -> None:
        self.client = client
        self.prompter = prompter
        self._strategies: dict[ContextMode, Callable[[ScaffoldConfig], Awaitable[ContextResult]]] = {
            ContextMode.GENERATE_ANON: self.generate_anonymous,
            ContextMode.RETRIEVE_SOURCE: self.retrieve_source,
            ContextMode.IMPORT_AUTH: self.import_authenticated,
            ContextMode.TEMPLATE: self.template_only,
        }

    async def fetch(self, config: ScaffoldConfig) -> ContextResult:
        return await self._strategies[config.context_mode](config)

    # -- Strategies --------------------------------------------------------

    async def generate_anonymous(self, config: ScaffoldConfig) -> ContextResult:
        with spinner("Generating new context files anonymously..."):
            generation = await self.client.generate_anonymous_context(
                config.context_description or "",
                config.project_type,
                config.project_name,
            )
        return ContextResult(files=generation.files, source_id=generation.source_id)

    async def retrieve_source(self, config: ScaffoldConfig) -> ContextResult:
        source_id = config.source_id or ""
        print_step(f"Fetching context for Source ID: {source_id}...")
        files = await self.client.get_context_by_source_id(source_id)
        return ContextResult(files=files, source_id=source_id)

    async def import_authenticated(self, config: ScaffoldConfig) -> ContextResult:
        email = config.email or ""
        if not config.verified:
            await self.verify_email(email, config.verification_code)

        print_step(f"Fetching context files from {self.client.base_url}...")
        generations = await self.client.get_generations(email, config.project_id)
        if not generations:
            raise NoGenerationsFound(
                "No context generations found for this email/project."
            )

        project_id = config.project_id
        if not project_id:
            project_ids = extract_project_ids(generations)
            if len(project_ids) > 1:
                project_id = self.prompter.select(
                    "Multiple projects found. Select a Project ID:",
                    [(pid, pid) for pid in project_ids],
                )
                generations = filter_by_project(generations, project_id)
            elif len(project_ids) == 1:
                project_id = project_ids[0]

        return ContextResult(files=generation_files(generations), project_id=project_id)

    async def template_only(self, config: ScaffoldConfig) -> ContextResult:
        return ContextResult()

    # -- Verification ------------------------------------------------------

    async def verify_email(self, email: str, code: str | None = None) -> None:
        """Run the send-code / verify-code round trip.

        The code comes from ``--code`` when given, otherwise it is read from
        the terminal even in an otherwise non-interactive run.

        Raises:
            VerificationFailure: If the server rejects the code.
        """
        if not code:
            await self.client.send_verification_code(email)
            console.print(f"[yellow]A verification code has been sent to {email}[/yellow]")
            code = self.prompter.ask_text("Please enter the code")

        if not await self.client.verify_code(email, code):
            print_warning("The code was not accepted.")
            raise VerificationFailure("Email verification failed.")
