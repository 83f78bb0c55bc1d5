"""
ctview CLI — sign in to ContainerView from the terminal.

This package splits CLI commands into focused modules:
- session: login, logout, whoami, status
- users:   register, setup-2fa
"""

import typer

from ctview.cli.main import configure_logging
from ctview.cli.session import register_commands
from ctview.cli.users import users_app

app = typer.Typer(help="ctview CLI - ContainerView session manager")


@app.callback()
def main(
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Enable verbose logging (DEBUG level)"
    ),
):
    """
    ctview CLI - ContainerView session manager.
    """
    configure_logging(verbose)


register_commands(app)

app.add_typer(users_app, name="users")

if __name__ == "__main__":
    app()
