"""
Error mapping and CLI utilities.

Provides centralized exception-to-exit-code mapping and a CLI command wrapper
to ensure consistent error handling across all Typer commands.
"""
from __future__ import annotations

import logging
from typing import Callable, TypeVar

import typer

T = TypeVar('T')

logger = logging.getLogger(__name__)

EXIT_CODES = {
    "NotFoundError": 1,
    "InvalidRepositoryFormat": 2,
    "ValueError": 2,
    "RegistryError": 3,
    "TransportError": 3,
    "MalformedManifestError": 4,
    "DigestMismatchError": 5,
}

FALLBACK_EXIT_CODE = 3


def exit_code_for(exc: BaseException) -> int:
    """
    Map exception to exit code.
    
    - 1: Named file not in the repository (NotFoundError)
    - 2: Bad input (InvalidRepositoryFormat, ValueError)
    - 3: Registry or network failure, or unknown error
    - 4: Manifest or config failed validation
    - 5: Downloaded content did not match its digest
    """
    return EXIT_CODES.get(type(exc).__name__, FALLBACK_EXIT_CODE)


def run_and_exit(func: Callable[[], T]) -> T:
    """
    Unified error wrapper for CLI commands.
    
    Executes the given function and maps any exception to a typer.Exit with
    the matching exit code, after printing the message to stderr.
    """
    try:
        return func()
    except Exception as e:
        logger.debug("Command failed", exc_info=True)
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=exit_code_for(e)) from e
