"""CLI commands for the session: login, logout, whoami, change-password."""

from __future__ import annotations

import asyncio

import click

from storefront.application.change_password import ChangePasswordHandler
from storefront.application.login import LoginHandler
from storefront.application.session_queries import CurrentSessionHandler, LogoutHandler
from storefront.domain.exceptions import DomainException, SessionExpired
from storefront.infrastructure.bootstrap import (
    credential_store,
    gateway,
    probes,
    role_probe,
    storefront_api,
)
from storefront.infrastructure.config import Settings


def session_expired_notice(entry_point: str) -> None:
    """Entry-point transition for the CLI: tell the user to log in again.

    Commands exit quietly on SessionExpired afterwards; this notice is the
    only message for the event.
    """
    click.echo(
        f"Session expired. Run 'storefront login' to sign in again ({entry_point}).",
        err=True,
    )


@click.command("login")
@click.option("--username", required=True, help="Account username.")
@click.password_option("--password", confirmation_prompt=False, help="Account password.")
@click.pass_obj
def login(settings: Settings, username: str, password: str) -> None:
    """Sign in; the account's role is discovered automatically."""

    async def run():
        probe = role_probe(settings)
        try:
            handler = LoginHandler(probe, credential_store(settings), probes(settings))
            return await handler.handle(username, password)
        finally:
            await probe.aclose()

    try:
        dto = asyncio.run(run())
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo(f"Logged in as {dto.username} (role={dto.role})")
    click.echo(f"Home: {dto.redirect_target}")


@click.command("logout")
@click.pass_obj
def logout(settings: Settings) -> None:
    """Forget the stored session."""
    LogoutHandler(credential_store(settings)).handle()
    click.echo("Logged out.")


@click.command("whoami")
@click.pass_obj
def whoami(settings: Settings) -> None:
    """Show the stored session."""
    try:
        dto = CurrentSessionHandler(credential_store(settings)).handle()
    except DomainException as exc:
        raise click.ClickException(str(exc))
    click.echo(f"{dto.username}  (role={dto.role}, home={dto.redirect_target})")


@click.command("change-password")
@click.option("--current", "current_password", prompt=True, hide_input=True, help="Current password.")
@click.option("--new", "new_password", prompt=True, hide_input=True, help="New password (min 6 characters).")
@click.option("--confirm", "confirm_password", prompt=True, hide_input=True, help="Repeat the new password.")
@click.pass_obj
def change_password(settings: Settings, current_password: str, new_password: str, confirm_password: str) -> None:
    """Change the account password and keep the local session valid."""
    store = credential_store(settings)

    async def run() -> None:
        async with gateway(settings, store, session_expired_notice) as gw:
            handler = ChangePasswordHandler(storefront_api(gw), store)
            await handler.handle(current_password, new_password, confirm_password)

    try:
        asyncio.run(run())
    except SessionExpired:
        raise click.exceptions.Exit(1)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    click.echo("Password changed successfully!")
