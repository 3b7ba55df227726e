"""
register-cloud CLI

Thin Typer front end over the Repository engine:
- ls: List files committed to a repository
- push: Upload a file and commit it
- pull: Download a file by name
- rm: Remove a file and commit
- link: Print the external download URL of a file
"""
from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Optional

import typer

from .cli_context import CLIContext
from .operations import run_and_exit
from .operations.printers import (
    print_listing, print_pull_summary, print_push_summary, print_remove_summary
)
from .progress import LoggingProgress

app = typer.Typer(name="register-cloud", help="Store files in a Docker registry")

REPOSITORY_OPTION = typer.Option(
    None, "--repository", "-r", help="Repository identifier (defaults to DRC_REPOSITORY)"
)


@app.callback()
def main(verbose: bool = typer.Option(False, "--verbose", help="Enable debug logging")) -> None:
    """Store files in a Docker registry."""
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")


@app.command()
def ls(
    repository: Optional[str] = typer.Argument(None, help="Repository identifier"),
    digests: bool = typer.Option(False, "--digests", help="Show blob digests"),
) -> None:
    """List files in a repository."""

    def _ls() -> None:
        context = CLIContext.from_env()
        target = context.repository_for(repository)

        async def _run():
            async with context.open_repository() as repo:
                session = await repo.begin(target)
                return session.listing

        print_listing(target, asyncio.run(_run()), verbose=digests)

    run_and_exit(_ls)


@app.command()
def push(
    file: Path = typer.Argument(..., exists=True, dir_okay=False, help="Local file to upload"),
    name: Optional[str] = typer.Option(None, "--name", help="Stored name (defaults to the file name)"),
    repository: Optional[str] = REPOSITORY_OPTION,
) -> None:
    """Upload a file and commit it to the repository."""

    def _push() -> None:
        context = CLIContext.from_env()
        target = context.repository_for(repository)
        stored_name = name or file.name

        async def _run():
            async with context.open_repository() as repo:
                session = await repo.begin(target)
                item = await repo.upload(session, stored_name, file, LoggingProgress(stored_name))
                await repo.commit(session)
                return item

        print_push_summary(target, asyncio.run(_run()))

    run_and_exit(_push)


@app.command()
def pull(
    name: str = typer.Argument(..., help="Stored file name"),
    dest: Path = typer.Argument(..., help="Destination file"),
    repository: Optional[str] = REPOSITORY_OPTION,
) -> None:
    """Download a file from the repository."""

    def _pull() -> None:
        context = CLIContext.from_env()
        target = context.repository_for(repository)

        async def _run():
            async with context.open_repository() as repo:
                session = await repo.begin(target)
                return await repo.pull_with_name(session, name, dest, LoggingProgress(name))

        print_pull_summary(name, str(dest), asyncio.run(_run()))

    run_and_exit(_pull)


@app.command()
def rm(
    name: str = typer.Argument(..., help="Stored file name"),
    repository: Optional[str] = REPOSITORY_OPTION,
) -> None:
    """Remove a file from the repository."""

    def _rm() -> None:
        context = CLIContext.from_env()
        target = context.repository_for(repository)

        async def _run():
            async with context.open_repository() as repo:
                session = await repo.begin(target)
                await repo.remove(session, name)
                await repo.commit(session)

        asyncio.run(_run())
        print_remove_summary(target, name)

    run_and_exit(_rm)


@app.command()
def link(
    name: str = typer.Argument(..., help="Stored file name"),
    repository: Optional[str] = REPOSITORY_OPTION,
) -> None:
    """Print the external download URL of a file."""

    def _link() -> None:
        context = CLIContext.from_env()
        target = context.repository_for(repository)

        async def _run():
            async with context.open_repository() as repo:
                session = await repo.begin(target)
                return await repo.link_with_name(session, name)

        typer.echo(asyncio.run(_run()))

    run_and_exit(_link)


if __name__ == "__main__":
    app()
