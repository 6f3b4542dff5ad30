import click

from storefront.infrastructure.bootstrap import load_settings
from storefront.infrastructure.cli.auth_commands import (
    change_password,
    login,
    logout,
    whoami,
)
from storefront.infrastructure.cli.checkout_commands import cart, checkout
from storefront.infrastructure.logging_config import configure_logging


@click.group()
@click.pass_context
def cli(ctx: click.Context) -> None:
    """Storefront client: sign in and check out your cart."""
    settings = load_settings()
    configure_logging(settings)
    ctx.obj = settings


# Register subcommands
cli.add_command(login)
cli.add_command(logout)
cli.add_command(whoami)
cli.add_command(change_password)
cli.add_command(cart)
cli.add_command(checkout)
