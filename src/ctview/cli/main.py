"""
CLI plumbing: logging setup and construction of the application context.
"""

import asyncio
from typing import Any, Coroutine, TypeVar

import typer

from ctview.auth.errors import AuthError
from ctview.config import Config
from ctview.context import AppContext

T = TypeVar("T")


def configure_logging(verbose: bool = False):
    """Configure logging for the CLI."""
    from ctview.logger import setup_logging

    setup_logging(level="DEBUG" if verbose else "WARNING")


def build_context() -> AppContext:
    """Create the app context from the environment (patched in tests)."""
    return AppContext(Config.from_env())


def run(coro: Coroutine[Any, Any, T]) -> T:
    """Run ``coro`` and turn auth failures into a clean exit."""
    try:
        return asyncio.run(coro)
    except AuthError as e:
        typer.echo(f"❌ {e.user_message}")
        raise typer.Exit(code=1)
