"""CLI output and error rendering helpers.

This module centralizes user-facing CLI presentation for command diagnostics
and for paste and user listings returned by the Pastebin API.
"""

from __future__ import annotations

from typing import NoReturn
from xml.etree import ElementTree

import typer

from .errors import CommandError, PastebinError


def exit_with_command_error(command_name: str, exc: Exception) -> NoReturn:
    """Print concise diagnostics for command failures and exit with code 1."""

    if isinstance(exc, CommandError):
        typer.secho(
            f"{command_name} failed at stage `{exc.stage}`: {exc.detail}",
            fg=typer.colors.RED,
            err=True,
        )
        hint = exc.hint
    elif isinstance(exc, PastebinError):
        typer.secho(
            f"{command_name} failed ({exc.failure_kind}): {exc}",
            fg=typer.colors.RED,
            err=True,
        )
        hint = exc.hint
    else:
        typer.secho(f"{command_name} failed: {exc}", fg=typer.colors.RED, err=True)
        hint = None
    if hint:
        typer.secho(f"Hint: {hint}", fg=typer.colors.YELLOW, err=True)
    raise typer.Exit(code=1) from exc


def _child_text(element: ElementTree.Element, tag: str) -> str:
    """Return stripped child text or an empty string."""

    value = element.findtext(tag)
    return value.strip() if value else ""


def echo_paste_list(result: ElementTree.Element) -> None:
    """Print one `key<TAB>title<TAB>url` row per paste, in response order."""

    pastes = result.findall("paste")
    if not pastes:
        typer.echo("No pastes found.")
        return
    for paste in pastes:
        title = _child_text(paste, "paste_title") or "(untitled)"
        typer.echo(
            f"{_child_text(paste, 'paste_key')}\t{title}\t{_child_text(paste, 'paste_url')}"
        )


def echo_user_details(result: ElementTree.Element) -> None:
    """Print non-empty user detail fields as `field: value` lines."""

    user = result.find("user")
    if user is None:
        typer.echo("No user details returned.")
        return
    for child in user:
        value = (child.text or "").strip()
        if value:
            typer.echo(f"{child.tag}: {value}")
