"""Command-line entry point for the MyContext app scaffolder.

Usage::

    create-mycontext-app
    create-mycontext-app --name my-app --type landing --yes
    create-mycontext-app --name my-app --source-id src_abc123
    create-mycontext-app --name my-app --generate --description "A habit tracker"
    create-mycontext-app --email me@example.com --project p1
    create-mycontext-app --import-process proc_42 --output lib/checkout.ts
"""

from __future__ import annotations

import asyncio
import sys
from collections.abc import Sequence

from rich.markup import escape

from mycontext_scaffolder.api_client import MyContextClient
from mycontext_scaffolder.args import flag_text, parse_args
from mycontext_scaffolder.config import Settings
from mycontext_scaffolder.errors import ScaffoldError
from mycontext_scaffolder.process_importer import import_process
from mycontext_scaffolder.prompts import Prompter, RichPrompter
from mycontext_scaffolder.resolver import resolve_config
from mycontext_scaffolder.scaffolder import Scaffolder
from mycontext_scaffolder.utils import console, print_error

USAGE = """\
Usage: create-mycontext-app [options]

Project options:
  --name <name>            Project directory name ('.' scaffolds into the current directory)
  --type <full|landing>    Template to start from (default: full)
  --yes                    Non-interactive; accept defaults and confirmations

Context options:
  --source-id <id>         Retrieve anonymous context by Source ID
  --generate               Generate new anonymous context (requires --description)
  --description <text>     Project idea used for generation
  --email <email>          Import context from your account
  --project <id>           Restrict the import to one project
  --code <code>            Email verification code (otherwise prompted)

Process import:
  --import-process <id>    Import an exported process (requires --output)
  --output <path>          Where to write the imported code

Environment: MYCONTEXT_API_URL, MYCONTEXT_TIMEOUT, MYCONTEXT_TEMPLATES_DIR,
MYCONTEXT_PACKAGE_MANAGER, MYCONTEXT_SKIP_INSTALL, MYCONTEXT_DEBUG
"""


def _run_import(flags: dict, client: MyContextClient) -> int:
    process_id = flag_text(flags, "import-process")
    if not process_id:
        print_error("Error: The --import-process flag requires a process ID.")
        return 1
    output = flag_text(flags, "output")
    if not output:
        print_error("Error: The --output flag is required when using --import-process.")
        return 1
    try:
        asyncio.run(import_process(client, process_id, output))
    except ScaffoldError as exc:
        print_error(f"\nAn error occurred during process import: {escape(str(exc))}")
        return exc.exit_code
    except OSError as exc:
        print_error(f"\nAn error occurred during process import: {escape(str(exc))}")
        return 1
    return 0


def run(
    argv: Sequence[str] | None = None,
    settings: Settings | None = None,
    prompter: Prompter | None = None,
    client: MyContextClient | None = None,
) -> int:
    """Run the CLI and return the process exit code."""
    flags = parse_args(sys.argv[1:] if argv is None else argv)
    if flags.get("help"):
        console.print(USAGE, markup=False, highlight=False)
        return 0

    if settings is None:
        try:
            settings = Settings.from_env()
        except ValueError as exc:
            print_error(f"Error: invalid MYCONTEXT_* environment setting: {escape(str(exc))}")
            return 1
    client = client or MyContextClient(settings.api_url, timeout=settings.timeout)

    if "import-process" in flags:
        return _run_import(flags, client)

    prompter = prompter or RichPrompter()
    try:
        config = resolve_config(flags, prompter)
    except ScaffoldError as exc:
        print_error(f"Exiting: {escape(str(exc))}")
        return exc.exit_code

    scaffolder = Scaffolder(config, settings, client=client, prompter=prompter)
    result = asyncio.run(scaffolder.run())
    if result.success:
        return 0
    if isinstance(result.error, ScaffoldError):
        return result.error.exit_code
    return 1


def main() -> None:
    """Console-script entry point."""
    try:
        code = run()
    except KeyboardInterrupt:
        print_error("\nAborted.")
        code = 130
    sys.exit(code)


if __name__ == "__main__":
    main()
