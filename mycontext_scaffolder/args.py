"""Minimal ``--flag value`` parser for the scaffolder CLI.

The CLI surface is a flat set of optional flags, so tokens are turned into a
``{flag: value}`` mapping instead of going through a full argument parser:

* ``--name my-app`` gives ``{"name": "my-app"}``.
* A flag followed by another flag (or by nothing) is boolean ``True``.
* ``--k=v`` is *not* split; the whole token after ``--`` is the key.
* A bare ``--`` is ignored, and later duplicates overwrite earlier ones.
"""

from __future__ import annotations

from collections.abc import Sequence

FlagValue = str | bool


def parse_args(tokens: Sequence[str]) -> dict[str, FlagValue]:
    """Parse CLI *tokens* into a flag mapping."""
    result: dict[str, FlagValue] = {}
    i = 0
    while i < len(tokens):
        token = tokens[i]
        if not token.startswith("--"):
            i += 1
            continue

        key = token[2:]
        nxt = tokens[i + 1] if i + 1 < len(tokens) else None
        has_value = nxt is not None and not nxt.startswith("--")

        if key:
            result[key] = nxt if has_value else True
        i += 2 if has_value else 1
    return result


def flag_text(flags: dict[str, FlagValue], name: str) -> str | None:
    """Return the string value of *name*, or ``None`` if absent or boolean."""
    value = flags.get(name)
    return value if isinstance(value, str) else None
