"""
Session commands: sign in (with the two-factor prompt), sign out, inspect.

Usage:
    ctview login --cpf 123.456.789-00
    ctview logout
    ctview whoami
    ctview status
"""

from typing import Optional

import typer

from ctview.auth.errors import ValidationError
from ctview.auth.state import SessionSnapshot
from ctview.cli.main import build_context, run
from ctview.logger import mask_token

MAX_CODE_ATTEMPTS = 3


async def _login(cpf: str, password: str, code: Optional[str]) -> SessionSnapshot:
    async with build_context() as ctx:
        snapshot = await ctx.session.submit_credentials(cpf, password)

        attempts = 0
        while snapshot.ticket is not None and attempts < MAX_CODE_ATTEMPTS:
            entered = code if code and attempts == 0 else typer.prompt("Verification code")
            attempts += 1
            try:
                snapshot = await ctx.session.submit_two_factor_code(entered)
            except ValidationError as e:
                typer.echo(f"❌ {e.user_message} ({e})")
                continue
            if snapshot.ticket is not None and snapshot.error_message:
                typer.echo(f"❌ {snapshot.error_message}")

        return snapshot


def login(
    cpf: str = typer.Option(..., "--cpf", prompt="CPF", help="CPF, with or without punctuation"),
    password: str = typer.Option(..., "--password", prompt=True, hide_input=True),
    code: Optional[str] = typer.Option(
        None, "--code", help="Two-factor code, if you already have one"
    ),
):
    """Sign in and store the session token."""
    snapshot = run(_login(cpf, password, code))

    if not snapshot.is_authenticated:
        typer.echo(f"❌ {snapshot.error_message or 'Sign in did not complete.'}")
        raise typer.Exit(code=1)

    user = snapshot.user
    typer.echo(f"✅ Signed in as {user.display_name} ({user.role_label})")


async def _logout() -> None:
    ctx = build_context()
    try:
        ctx.session.logout()
    finally:
        await ctx.aclose()


def logout():
    """Forget the stored session token."""
    run(_logout())
    typer.echo("👋 Signed out.")


async def _current() -> SessionSnapshot:
    async with build_context() as ctx:
        return ctx.session.snapshot()


def whoami():
    """Show the signed-in user."""
    snapshot = run(_current())
    user = snapshot.user
    if user is None:
        typer.echo("Not signed in.")
        raise typer.Exit(code=1)

    typer.echo(f"👤 {user.display_name}")
    typer.echo(f"   Role: {user.role_label}")
    if user.email:
        typer.echo(f"   Email: {user.email}")
    if user.cpf:
        typer.echo(f"   CPF: {user.cpf}")
    typer.echo(f"   2FA: {'enabled' if user.two_factor_enabled else 'disabled'}")


def status():
    """Show the session state."""
    snapshot = run(_current())
    icon = "🟢" if snapshot.is_authenticated else "🔴"
    typer.echo(f"{icon} {snapshot.label}")
    typer.echo(f"   Token: {mask_token(snapshot.token)}")
    if snapshot.user:
        typer.echo(f"   User: {snapshot.user.display_name}")


def register_commands(app: typer.Typer):
    """Attach the session commands to the root app."""
    app.command("login")(login)
    app.command("logout")(logout)
    app.command("whoami")(whoami)
    app.command("status")(status)
