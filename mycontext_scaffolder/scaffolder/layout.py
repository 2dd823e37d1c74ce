"""Filesystem side of scaffolding.

Resolves where a project lives, copies the opaque template tree into it,
waits for the package manifest to appear, and manages the ``_my_context``
directory.
"""

from __future__ import annotations

import asyncio
import json
import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from ..config import Settings
from ..errors import ManifestTimeout
from ..models import ScaffoldConfig

# Entries that do not make the current directory "non-empty".
IGNORED_ENTRIES = frozenset({".DS_Store", ".git", "node_modules"})


@dataclass(frozen=True)
class ProjectLayout:
    """Resolved paths for one scaffolding run."""

    project_path: Path
    context_dir: Path
    template_source: Path
    manifest_path: Path
    use_current_directory: bool

    @property
    def display_name(self) -> str:
        return self.project_path.name

    @classmethod
    def resolve(cls, config: ScaffoldConfig, settings: Settings, base_dir: Path) -> "ProjectLayout":
        base = Path(base_dir).resolve()
        if config.use_current_directory:
            project_path = base
        else:
            project_path = base / config.project_name
        return cls(
            project_path=project_path,
            context_dir=project_path / settings.context_dir_name,
            template_source=settings.template_path(config.project_type),
            manifest_path=project_path / settings.manifest_name,
            use_current_directory=config.use_current_directory,
        )


def visible_entries(directory: Path) -> list[str]:
    """Names in *directory* that count towards it being non-empty."""
    return sorted(p.name for p in directory.iterdir() if p.name not in IGNORED_ENTRIES)


def copy_template(layout: ProjectLayout) -> None:
    """Copy the template into the project, overwriting existing files.

    In current-directory mode the template is copied child by child so the
    directory entry itself is never replaced.
    """
    source = layout.template_source
    if not layout.use_current_directory:
        shutil.copytree(source, layout.project_path, dirs_exist_ok=True)
        return

    for child in source.iterdir():
        target = layout.project_path / child.name
        if child.is_dir():
            shutil.copytree(child, target, dirs_exist_ok=True)
        else:
            shutil.copy2(child, target)


async def await_manifest(path: Path, interval: float, attempts: int) -> None:
    """Poll for *path* with a fixed *interval*, at most *attempts* times.

    Raises:
        ManifestTimeout: If the file still does not exist afterwards.
    """
    for _ in range(attempts):
        if path.exists():
            return
        await asyncio.sleep(interval)
    if not path.exists():
        raise ManifestTimeout(f"{path.name} was not found after copying template files.")


def prepare_context_dir(context_dir: Path, clear: bool) -> None:
    """Make sure *context_dir* exists, emptying it when *clear* is set."""
    context_dir.mkdir(parents=True, exist_ok=True)
    if not clear:
        return
    for entry in context_dir.iterdir():
        if entry.is_dir() and not entry.is_symlink():
            shutil.rmtree(entry)
        else:
            entry.unlink()


def as_text(content: Any) -> str:
    """Coerce a provider value to file text."""
    if isinstance(content, str):
        return content
    if isinstance(content, (dict, list)):
        return json.dumps(content, indent=2, ensure_ascii=False)
    return str(content)


def write_context_files(context_dir: Path, files: dict[str, Any]) -> list[Path]:
    """Write each ``{filename: content}`` pair verbatim into *context_dir*."""
    written: list[Path] = []
    for name, content in files.items():
        target = context_dir / name
        target.write_text(as_text(content), encoding="utf-8")
        written.append(target)
    return written
