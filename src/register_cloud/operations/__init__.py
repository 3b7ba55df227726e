"""
Operations package - CLI support between Typer commands and the engine.

Centralizes error mapping and output formatting so CLI commands stay thin.
"""
from .mappers import exit_code_for, run_and_exit

__all__ = ["exit_code_for", "run_and_exit"]
