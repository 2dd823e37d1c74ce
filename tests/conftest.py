"""Shared pytest fixtures for the scaffolder test suite.

Provides reusable fixtures for:
- Fake template trees and a workspace to scaffold into
- ``Settings`` pointing at those templates
- A scripted prompter standing in for the terminal
- An in-memory MyContext API built on ``httpx.MockTransport``
- A recording command runner for dependency setup
"""

from __future__ import annotations

import json
from collections.abc import Callable, Sequence
from pathlib import Path
from typing import Any

import httpx
import pytest

from mycontext_scaffolder.api_client import MyContextClient
from mycontext_scaffolder.config import Settings

API_BASE = "https://api.mycontext.test"


# ---------------------------------------------------------------------------
# Paths & Directories
# ---------------------------------------------------------------------------

def _write_template(root: Path, name: str) -> None:
    (root / "app").mkdir(parents=True)
    (root / "_my_context").mkdir()
    (root / "package.json").write_text(json.dumps({"name": name}), encoding="utf-8")
    (root / "app" / "page.tsx").write_text(f"// {name} page\n", encoding="utf-8")
    (root / "_my_context" / "README.md").write_text("template context\n", encoding="utf-8")


@pytest.fixture
def templates_dir(tmp_path: Path) -> Path:
    """Two minimal templates (``full`` and ``landing``)."""
    root = tmp_path / "templates"
    _write_template(root / "full", "full-template")
    _write_template(root / "landing", "landing-template")
    return root


@pytest.fixture
def workspace(tmp_path: Path) -> Path:
    """Empty directory that plays the role of the user's cwd."""
    path = tmp_path / "workspace"
    path.mkdir()
    return path


@pytest.fixture
def settings(templates_dir: Path) -> Settings:
    """Settings wired to the fake templates with a fast manifest poll."""
    return Settings(
        api_url=API_BASE,
        dashboard_url="https://dash.mycontext.test/projects",
        templates_dir=templates_dir,
        manifest_poll_interval=0.001,
        manifest_poll_attempts=3,
    )


# ---------------------------------------------------------------------------
# Prompts
# ---------------------------------------------------------------------------

class FakePrompter:
    """Scripted stand-in for ``RichPrompter``.

    Answers are consumed in order per prompt kind. Text answers that fail the
    prompt's validator are recorded in ``rejected`` and the next answer is
    tried, like the real re-ask loop.
    """

    def __init__(
        self,
        texts: Sequence[str] = (),
        selects: Sequence[str] = (),
        confirms: Sequence[bool] = (),
    ) -> None:
        self.texts = list(texts)
        self.selects = list(selects)
        self.confirms = list(confirms)
        self.asked: list[str] = []
        self.rejected: list[str] = []
        self.select_choices: list[list[str]] = []

    def ask_text(self, message: str, validate=None, default=None) -> str:
        self.asked.append(message)
        while True:
            if not self.texts:
                raise AssertionError(f"Unexpected text prompt: {message}")
            value = self.texts.pop(0)
            if validate is None or validate(value) is None:
                return value
            self.rejected.append(value)

    def select(self, message: str, choices, default_index: int = 0) -> str:
        self.asked.append(message)
        self.select_choices.append([value for _, value in choices])
        if not self.selects:
            raise AssertionError(f"Unexpected select prompt: {message}")
        return self.selects.pop(0)

    def confirm(self, message: str, default: bool = False) -> bool:
        self.asked.append(message)
        if not self.confirms:
            raise AssertionError(f"Unexpected confirm prompt: {message}")
        return self.confirms.pop(0)


@pytest.fixture
def prompter() -> FakePrompter:
    """A prompter with no scripted answers (any prompt fails the test)."""
    return FakePrompter()


# ---------------------------------------------------------------------------
# Mock MyContext API
# ---------------------------------------------------------------------------

Handler = Callable[[httpx.Request], httpx.Response]


class FakeAPI:
    """Routes ``(method, path)`` to canned responses and records every request."""

    def __init__(self) -> None:
        self.routes: dict[tuple[str, str], Handler] = {}
        self.requests: list[httpx.Request] = []

    def add(self, method: str, path: str, status: int = 200, json_body: Any = None,
            text: str | None = None) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            if text is not None:
                return httpx.Response(status, text=text)
            return httpx.Response(status, json=json_body if json_body is not None else {})
        self.routes[(method, path)] = handler

    def add_handler(self, method: str, path: str, handler: Handler) -> None:
        self.routes[(method, path)] = handler

    def _dispatch(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        handler = self.routes.get((request.method, request.url.path))
        if handler is None:
            return httpx.Response(404, json={"error": f"no route {request.url.path}"})
        return handler(request)

    def paths(self) -> list[str]:
        return [f"{r.method} {r.url.path}" for r in self.requests]

    def client(self) -> MyContextClient:
        return MyContextClient(API_BASE, timeout=5, transport=httpx.MockTransport(self._dispatch))


@pytest.fixture
def fake_api() -> FakeAPI:
    return FakeAPI()


# ---------------------------------------------------------------------------
# Mock subprocess
# ---------------------------------------------------------------------------

class RecordingRunner:
    """Async replacement for ``run_command`` that records invocations."""

    def __init__(self, returncodes: dict[str, int] | None = None) -> None:
        self.calls: list[tuple[list[str], Path]] = []
        self.returncodes = returncodes or {}

    async def __call__(self, cmd, cwd=None, timeout=None, capture=True, env=None):
        self.calls.append((list(cmd), Path(cwd)))
        return (self.returncodes.get(" ".join(cmd), 0), "", "")

    @property
    def commands(self) -> list[list[str]]:
        return [cmd for cmd, _ in self.calls]


@pytest.fixture
def runner() -> RecordingRunner:
    return RecordingRunner()
