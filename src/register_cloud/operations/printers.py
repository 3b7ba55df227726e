"""
Output formatting for CLI commands.
"""
from __future__ import annotations

from typing import List

import typer

from ..models import FileItem


def format_size(size: int) -> str:
    """Human-readable byte count."""
    if size < 1024:
        return f"{size} B"
    value = size / 1024
    for unit in ("KB", "MB"):
        if value < 1024:
            return f"{value:.1f} {unit}"
        value /= 1024
    return f"{value:.1f} GB"


def print_listing(repository: str, items: List[FileItem], verbose: bool = False) -> None:
    if not items:
        typer.echo(f"{repository}: no files")
        return

    typer.echo(f"{repository}: {len(items)} file(s)")
    for item in items:
        line = f"  {item.name}  {format_size(item.size)}"
        if verbose:
            line += f"  {item.digest}"
        typer.echo(line)


def print_push_summary(repository: str, item: FileItem) -> None:
    typer.echo(f"Pushed {item.name} to {repository}")
    typer.echo(f"  Size: {format_size(item.size)}")
    typer.echo(f"  Digest: {item.digest}")


def print_pull_summary(name: str, dest: str, size: int) -> None:
    typer.echo(f"Pulled {name} to {dest} ({format_size(size)})")


def print_remove_summary(repository: str, name: str) -> None:
    typer.echo(f"Removed {name} from {repository}")
