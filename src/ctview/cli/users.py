"""
CLI subcommands for user enrolment.

Usage:
    ctview users register --first-name Ana --last-name Silva --cpf ... --email ...
    ctview users setup-2fa <cpf>
"""

import typer

from ctview.auth.models import RegisterResponse, RegisterUserPayload, TotpSetup
from ctview.auth.store import normalize_cpf
from ctview.cli.main import build_context, run

users_app = typer.Typer(help="Register users and enrol them in two-factor authentication")


async def _register(payload: RegisterUserPayload) -> RegisterResponse:
    async with build_context() as ctx:
        return await ctx.api.register(payload)


async def _setup_two_factor(cpf: str) -> TotpSetup:
    async with build_context() as ctx:
        return await ctx.api.setup_two_factor(cpf)


def _print_totp(secret: str, qr_code_data_uri: str | None):
    typer.echo("🔐 Add this secret to an authenticator app:")
    typer.echo(f"   {secret}")
    if qr_code_data_uri:
        typer.echo(f"   QR code: {qr_code_data_uri[:48]}…")


@users_app.command("register")
def users_register(
    first_name: str = typer.Option(..., "--first-name"),
    last_name: str = typer.Option(..., "--last-name"),
    cpf: str = typer.Option(..., "--cpf"),
    email: str = typer.Option(..., "--email"),
    password: str = typer.Option(
        ..., "--password", prompt=True, hide_input=True, confirmation_prompt=True
    ),
    role: str = typer.Option("colaborador", "--role"),
    two_factor: bool = typer.Option(False, "--two-factor/--no-two-factor"),
):
    """Register a new user."""
    payload = RegisterUserPayload(
        first_name=first_name,
        last_name=last_name,
        cpf=normalize_cpf(cpf),
        email=email,
        password=password,
        role=role,
        two_factor_enabled=two_factor,
    )
    result = run(_register(payload))
    typer.echo(f"✅ {result.message}")

    if result.totp_secret:
        _print_totp(result.totp_secret, result.qr_code_data_uri)
    elif two_factor:
        setup = run(_setup_two_factor(payload.cpf))
        _print_totp(setup.secret, setup.qr_code_data_uri)


@users_app.command("setup-2fa")
def users_setup_two_factor(
    cpf: str = typer.Argument(help="CPF of the user to enrol"),
):
    """Generate a two-factor secret for a user."""
    setup = run(_setup_two_factor(normalize_cpf(cpf)))
    if setup.message:
        typer.echo(setup.message)
    _print_totp(setup.secret, setup.qr_code_data_uri)
