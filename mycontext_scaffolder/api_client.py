"""Async client for the MyContext remote API.

Wraps the generation, verification and process-export endpoints with a
bounded timeout and uniform failure handling:

* a non-2xx status raises :class:`RemoteError` carrying the server's
  ``error`` message when the body has one;
* a 2xx body that is not valid JSON raises :class:`InvalidResponseBody`;
* connection failures and timeouts raise :class:`RemoteError`.

Typical usage::

    client = MyContextClient("https://mycontext.fbien.com/api")
    files = await client.get_context_by_source_id("src-123")
"""

from __future__ import annotations

import json
from typing import Any
from urllib.parse import quote

import httpx
from pydantic import ValidationError

from mycontext_scaffolder.errors import (
    InvalidResponseBody,
    MalformedResponse,
    ProcessNotFound,
    RemoteError,
)
from mycontext_scaffolder.models import AnonymousGeneration, Generation, ProjectType


class MyContextClient:
    """Client for the MyContext REST API.

    Every call opens a short-lived ``httpx.AsyncClient``. A custom
    *transport* can be supplied (``httpx.MockTransport`` in tests).
    """

    def __init__(
        self,
        base_url: str = "https://mycontext.fbien.com/api",
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.transport = transport

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _client(self) -> httpx.AsyncClient:
        """Return a fresh ``AsyncClient`` configured with our base URL and timeout."""
        return httpx.AsyncClient(
            base_url=self.base_url,
            timeout=httpx.Timeout(self.timeout, connect=10.0),
            headers={"Content-Type": "application/json"},
            transport=self.transport,
        )

    async def _send(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        try:
            async with self._client() as client:
                return await client.request(method, path, **kwargs)
        except httpx.TimeoutException as exc:
            raise RemoteError(
                f"Request to {self.base_url}{path} timed out after {self.timeout}s."
            ) from exc
        except httpx.HTTPError as exc:
            raise RemoteError(f"Cannot reach {self.base_url}: {exc}") from exc

    @staticmethod
    def _error_message(response: httpx.Response) -> str:
        """Pick the server-supplied error text, or a generic status message."""
        try:
            data = response.json()
        except ValueError:
            data = None
        if isinstance(data, dict) and data.get("error"):
            return str(data["error"])
        return f"HTTP error! status: {response.status_code}"

    async def _request_json(self, method: str, path: str, **kwargs: Any) -> dict[str, Any]:
        """Perform a request and return its decoded JSON object."""
        response = await self._send(method, path, **kwargs)
        if not response.is_success:
            raise RemoteError(self._error_message(response), status_code=response.status_code)
        try:
            data = json.loads(response.text)
        except ValueError as exc:
            raise InvalidResponseBody(
                f"API did not return valid JSON from {path}: {response.text[:200]!r}",
                status_code=response.status_code,
            ) from exc
        if not isinstance(data, dict):
            raise InvalidResponseBody(
                f"API returned a JSON {type(data).__name__} from {path}, expected an object.",
                status_code=response.status_code,
            )
        return data

    @staticmethod
    def _files(data: dict[str, Any], path: str) -> dict[str, Any]:
        files = data.get("files") or {}
        if not isinstance(files, dict):
            raise MalformedResponse(f"API response from {path} has a non-object 'files' field.")
        return files

    # ------------------------------------------------------------------
    # Generations
    # ------------------------------------------------------------------

    async def get_generations(self, email: str, project: str | None = None) -> list[Generation]:
        """List the generations stored for *email*, optionally for one project."""
        params = {"email": email}
        if project:
            params["project"] = project
        data = await self._request_json("GET", "/generations", params=params)
        raw = data.get("generations") or []
        if not isinstance(raw, list):
            raise MalformedResponse("API response 'generations' is not a list.")
        try:
            return [Generation.model_validate(item) for item in raw]
        except ValidationError as exc:
            raise MalformedResponse(f"API returned an invalid generation record: {exc}") from exc

    async def get_context_by_source_id(self, source_id: str) -> dict[str, Any]:
        """Fetch the files of an anonymous generation by its Source ID."""
        path = f"/generations/cli/{quote(source_id, safe='')}"
        data = await self._request_json("GET", path)
        return self._files(data, path)

    async def generate_anonymous_context(
        self, description: str, project_type: ProjectType | str, project_name: str
    ) -> AnonymousGeneration:
        """Generate new context without an account.

        The returned ``source_id`` is the only way to retrieve these files
        later, so the response must carry it together with the files.
        """
        body = {
            "name": project_name,
            "description": description,
            "projectType": ProjectType(project_type).value,
        }
        data = await self._request_json("POST", "/generations/cli", json=body)
        if not data.get("sourceId") or not isinstance(data.get("files"), dict):
            raise MalformedResponse(
                "API response did not include sourceId and files for anonymous generation."
            )
        return AnonymousGeneration(
            source_id=str(data["sourceId"]),
            files=self._files(data, "/generations/cli"),
        )

    async def generate_context(
        self, description: str, project_type: ProjectType | str, email: str | None = None
    ) -> dict[str, Any]:
        """Generate context through the account-aware endpoint."""
        body: dict[str, Any] = {
            "description": description,
            "projectType": ProjectType(project_type).value,
        }
        if email:
            body["email"] = email
        data = await self._request_json("POST", "/generate-context", json=body)
        return self._files(data, "/generate-context")

    # ------------------------------------------------------------------
    # Email verification
    # ------------------------------------------------------------------

    async def send_verification_code(self, email: str) -> bool:
        """Ask the server to email a one-time code. ``True`` means "sent"."""
        await self._request_json("POST", "/send-verification-code", json={"email": email})
        return True

    async def verify_code(self, email: str, code: str) -> bool:
        """Return ``True`` only if the server confirms *code* for *email*."""
        response = await self._send("POST", "/verify-code", json={"email": email, "code": code})
        if not response.is_success:
            return False
        try:
            data = response.json()
        except ValueError as exc:
            raise InvalidResponseBody(
                "API did not return valid JSON from /verify-code.",
                status_code=response.status_code,
            ) from exc
        return isinstance(data, dict) and data.get("verified") is True

    # ------------------------------------------------------------------
    # Process export
    # ------------------------------------------------------------------

    async def export_process(self, process_id: str) -> str:
        """Return the markdown export of a process."""
        response = await self._send("GET", f"/processes/{quote(process_id, safe='')}/export")
        if response.status_code == 404:
            raise ProcessNotFound(process_id)
        if not response.is_success:
            raise RemoteError(
                f"API returned status {response.status_code}", status_code=response.status_code
            )
        return response.text
