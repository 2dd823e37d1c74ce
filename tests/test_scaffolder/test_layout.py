"""Unit tests for the filesystem helpers (mycontext_scaffolder.scaffolder.layout).

Tests cover:
- ProjectLayout path resolution
- non-empty detection with ignored entries
- template copy into new and current directories
- bounded manifest polling
- context directory preparation and file writing
"""

from __future__ import annotations

import asyncio
import json
from pathlib import Path

import pytest

from mycontext_scaffolder.errors import ManifestTimeout
from mycontext_scaffolder.models import ScaffoldConfig
from mycontext_scaffolder.scaffolder.layout import (
    ProjectLayout,
    as_text,
    await_manifest,
    copy_template,
    prepare_context_dir,
    visible_entries,
    write_context_files,
)

pytestmark = pytest.mark.unit


class TestProjectLayout:
    def test_named_project(self, settings, workspace: Path):
        config = ScaffoldConfig(project_name="app", project_type="landing")
        layout = ProjectLayout.resolve(config, settings, workspace)
        assert layout.project_path == workspace.resolve() / "app"
        assert layout.context_dir == layout.project_path / "_my_context"
        assert layout.manifest_path == layout.project_path / "package.json"
        assert layout.template_source == settings.templates_dir / "landing"
        assert layout.display_name == "app"
        assert layout.use_current_directory is False

    def test_current_directory(self, settings, workspace: Path):
        layout = ProjectLayout.resolve(ScaffoldConfig(project_name="."), settings, workspace)
        assert layout.project_path == workspace.resolve()
        assert layout.display_name == "workspace"
        assert layout.use_current_directory is True


class TestVisibleEntries:
    def test_ignored_entries(self, workspace: Path):
        (workspace / ".git").mkdir()
        (workspace / ".DS_Store").write_text("")
        (workspace / "node_modules").mkdir()
        assert visible_entries(workspace) == []

    def test_other_entries(self, workspace: Path):
        (workspace / "README.md").write_text("hi")
        (workspace / ".env").write_text("")
        assert visible_entries(workspace) == [".env", "README.md"]


class TestCopyTemplate:
    def test_into_new_directory(self, settings, workspace: Path):
        layout = ProjectLayout.resolve(ScaffoldConfig(project_name="app"), settings, workspace)
        layout.project_path.mkdir()
        copy_template(layout)
        assert json.loads(layout.manifest_path.read_text()) == {"name": "full-template"}
        assert (layout.project_path / "app" / "page.tsx").is_file()

    def test_into_current_directory_overwrites(self, settings, workspace: Path):
        (workspace / "package.json").write_text("{}")
        (workspace / "keep.txt").write_text("mine")
        layout = ProjectLayout.resolve(ScaffoldConfig(project_name="."), settings, workspace)
        copy_template(layout)
        assert json.loads((workspace / "package.json").read_text()) == {"name": "full-template"}
        assert (workspace / "keep.txt").read_text() == "mine"
        assert (workspace / "_my_context" / "README.md").is_file()


class TestAwaitManifest:
    @pytest.mark.asyncio
    async def test_present(self, tmp_path: Path):
        path = tmp_path / "package.json"
        path.write_text("{}")
        await await_manifest(path, interval=0.001, attempts=1)

    @pytest.mark.asyncio
    async def test_appears_late(self, tmp_path: Path):
        path = tmp_path / "package.json"

        async def create_later():
            await asyncio.sleep(0.01)
            path.write_text("{}")

        task = asyncio.create_task(create_later())
        await await_manifest(path, interval=0.005, attempts=50)
        await task

    @pytest.mark.asyncio
    async def test_timeout(self, tmp_path: Path):
        with pytest.raises(ManifestTimeout, match="package.json was not found"):
            await await_manifest(tmp_path / "package.json", interval=0.001, attempts=3)


class TestContextDirectory:
    def test_creates_missing(self, tmp_path: Path):
        context_dir = tmp_path / "_my_context"
        prepare_context_dir(context_dir, clear=False)
        assert context_dir.is_dir()

    def test_keep_contents(self, tmp_path: Path):
        context_dir = tmp_path / "_my_context"
        context_dir.mkdir()
        (context_dir / "README.md").write_text("t")
        prepare_context_dir(context_dir, clear=False)
        assert (context_dir / "README.md").exists()

    def test_clear_contents(self, tmp_path: Path):
        context_dir = tmp_path / "_my_context"
        (context_dir / "nested").mkdir(parents=True)
        (context_dir / "README.md").write_text("t")
        prepare_context_dir(context_dir, clear=True)
        assert context_dir.is_dir()
        assert list(context_dir.iterdir()) == []

    def test_write_files(self, tmp_path: Path):
        written = write_context_files(tmp_path, {"a.md": "hi", "data.json": {"k": [1]}, "n.txt": 3})
        assert [p.name for p in written] == ["a.md", "data.json", "n.txt"]
        assert (tmp_path / "a.md").read_text() == "hi"
        assert json.loads((tmp_path / "data.json").read_text()) == {"k": [1]}
        assert (tmp_path / "n.txt").read_text() == "3"

    def test_as_text(self):
        assert as_text("x") == "x"
        assert as_text([1, 2]) == "[\n  1,\n  2\n]"
