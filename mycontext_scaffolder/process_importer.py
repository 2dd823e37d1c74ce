"""Import a single exported process from the MyContext platform.

Side entry point (``--import-process <id> --output <path>``) that bypasses
the scaffolding state machine: it downloads the markdown export, writes the
concatenated fenced code blocks to *output*, and keeps the full markdown
next to it.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path

from mycontext_scaffolder.api_client import MyContextClient
from mycontext_scaffolder.utils import console, print_success, print_warning, spinner

_CODE_BLOCK = re.compile(r"```(?:\w+)?\s*([\s\S]+?)```")
_HEADING = re.compile(r"^(#{1,6})\s+(.*?)\s*#*\s*$")

INTEGRATION_HEADING = "Integration Instructions"


@dataclass
class ImportResult:
    """Where the export ended up."""

    markdown_path: Path
    code_path: Path | None = None
    code_blocks: int = 0
    integration_instructions: str | None = None


def extract_code_blocks(markdown: str) -> list[str]:
    """Return the trimmed body of every fenced code block, in order."""
    return [match.group(1).strip() for match in _CODE_BLOCK.finditer(markdown)]


def extract_section(markdown: str, title: str) -> str | None:
    """Return the body under the heading named *title*, if present.

    The section ends at the next heading of the same or a higher level.
    """
    lines = markdown.splitlines()
    start: int | None = None
    level = 0
    in_fence = False
    for index, line in enumerate(lines):
        if line.lstrip().startswith("```"):
            in_fence = not in_fence
            continue
        match = None if in_fence else _HEADING.match(line)
        if not match:
            continue
        if start is None:
            if match.group(2).strip().lower() == title.lower():
                start, level = index + 1, len(match.group(1))
        elif len(match.group(1)) <= level:
            body = "\n".join(lines[start:index]).strip()
            return body or None
    if start is None:
        return None
    return "\n".join(lines[start:]).strip() or None


def markdown_path_for(output_path: Path, has_code: bool) -> Path:
    """Where the raw markdown goes for a given *output_path*.

    With code blocks the markdown is a ``.md`` sibling of the code file. An
    output that already ends in ``.md`` keeps the code, so the markdown goes
    to ``<stem>.export.md``. Without code blocks the markdown is the only
    file and lands on *output_path* itself (suffixed with ``.md`` if needed).
    """
    if not has_code:
        if output_path.suffix == ".md":
            return output_path
        return output_path.with_name(output_path.name + ".md")
    sibling = output_path.with_suffix(".md")
    if sibling == output_path:
        return output_path.with_name(f"{output_path.stem}.export.md")
    return sibling


async def import_process(
    client: MyContextClient, process_id: str, output_path: str | Path
) -> ImportResult:
    """Fetch process *process_id* and write it below *output_path*.

    Raises:
        ProcessNotFound: If the API answers 404.
        RemoteError: For any other failed request.
    """
    output = Path(output_path)
    with spinner(f"Importing process '{process_id}'..."):
        markdown = await client.export_process(process_id)

    blocks = extract_code_blocks(markdown)
    instructions = extract_section(markdown, INTEGRATION_HEADING)

    if not blocks:
        print_warning(
            "No code blocks found in the process export. Writing full content to markdown file."
        )
        md_path = markdown_path_for(output, has_code=False)
        md_path.parent.mkdir(parents=True, exist_ok=True)
        md_path.write_text(markdown, encoding="utf-8")
        print_success(f"Successfully wrote process documentation to {md_path}")
        return ImportResult(markdown_path=md_path, integration_instructions=instructions)

    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text("\n\n".join(blocks), encoding="utf-8")
    md_path = markdown_path_for(output, has_code=True)
    md_path.write_text(markdown, encoding="utf-8")

    print_success(f"\nSuccessfully imported process '{process_id}'!")
    console.print(f"- Code written to: [cyan]{output}[/cyan]")
    console.print(f"- Full instructions written to: [cyan]{md_path}[/cyan]")
    console.print("\nNext steps:")
    console.print(f"[dim]  - Review the code in {output.name}.[/dim]")
    console.print(f"[dim]  - Follow any setup instructions in {md_path.name}.[/dim]")
    if instructions:
        console.print(f"\n[bold]{INTEGRATION_HEADING}[/bold]\n{instructions}")

    return ImportResult(
        markdown_path=md_path,
        code_path=output,
        code_blocks=len(blocks),
        integration_instructions=instructions,
    )
