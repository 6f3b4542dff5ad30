"""CLI commands for the cart and checkout."""

from __future__ import annotations

import asyncio

import click

from storefront.application.checkout import CheckoutOrchestrator
from storefront.application.dto import OrderSummaryDTO
from storefront.application.session_queries import CurrentSessionHandler
from storefront.domain.exceptions import CheckoutValidationFailure, DomainException, SessionExpired
from storefront.domain.model.checkout import (
    CASH_ON_DELIVERY,
    PAYMENT_METHODS,
    CheckoutReport,
    CheckoutState,
)
from storefront.domain.model.session import Role
from storefront.infrastructure.bootstrap import (
    checkout_policy,
    credential_store,
    gateway,
    storefront_api,
)
from storefront.infrastructure.cli.auth_commands import session_expired_notice
from storefront.infrastructure.config import Settings


def _display_summary(dto: OrderSummaryDTO) -> None:
    click.echo(f"  {'Product':<24} {'Qty':>5} {'Price':>14} {'Total':>14}")
    click.echo(f"  {'-'*60}")
    for line in dto.lines:
        click.echo(
            f"  {line.product_name:<24} {line.quantity:>5} {line.unit_price:>14} {line.line_total:>14}"
        )
    click.echo(f"  {'-'*60}")
    click.echo(f"  {'Subtotal (' + str(dto.total_items) + ' items)':<30} {dto.subtotal:>30}")
    click.echo(f"  {'Tax (10%)':<30} {dto.tax:>30}")
    click.echo(f"  {'Shipping':<30} {dto.shipping:>30}")
    click.echo(f"  {'Total':<30} {dto.total:>30}")


def _report_failure(report: CheckoutReport) -> str:
    failed = report.failed
    lines = [
        f"Checkout stopped ({report.state.value}): "
        f"{report.succeeded_count} order(s) placed before "
        f"{failed.product_label if failed else 'an item'} failed.",
    ]
    if failed is not None and failed.error_detail:
        lines.append(f"  Reason: {failed.error_detail}")
    if report.placed:
        lines.append(f"  Placed: {', '.join(report.order_numbers)}")
    if report.not_attempted:
        lines.append(f"  Not attempted: {report.not_attempted} item(s)")
    if report.compensated:
        lines.append(f"  Cancelled again: {', '.join(report.compensated)}")
    lines.extend(f"  Warning: {w}" for w in report.warnings)
    return "\n".join(lines)


async def _load(settings: Settings, gw) -> CheckoutOrchestrator:
    session = CurrentSessionHandler(credential_store(settings)).session([Role.CUSTOMER])
    orchestrator = CheckoutOrchestrator(storefront_api(gw), session, checkout_policy(settings))
    state = await orchestrator.load()
    if state is CheckoutState.LOADING:
        raise click.ClickException(
            f"Failed to load checkout information: {orchestrator.load_error}. Please try again."
        )
    return orchestrator


@click.command("cart")
@click.pass_obj
def cart(settings: Settings) -> None:
    """Show the cart with tax and shipping."""

    async def run():
        async with gateway(settings, credential_store(settings), session_expired_notice) as gw:
            orchestrator = await _load(settings, gw)
            if orchestrator.state is CheckoutState.EMPTY:
                return None
            return orchestrator.summary_dto()

    try:
        dto = asyncio.run(run())
    except SessionExpired:
        raise click.exceptions.Exit(1)
    except DomainException as exc:
        raise click.ClickException(str(exc))

    if dto is None:
        click.echo("Your cart is empty.")
        return
    _display_summary(dto)


@click.command("checkout")
@click.option("--address", default=None, help="Shipping address (defaults to the profile address).")
@click.option(
    "--payment",
    type=click.Choice(PAYMENT_METHODS),
    default=CASH_ON_DELIVERY,
    show_default=True,
    help="Payment method.",
)
@click.pass_obj
def checkout(settings: Settings, address: str | None, payment: str) -> None:
    """Place one order per cart item."""

    async def run():
        async with gateway(settings, credential_store(settings), session_expired_notice) as gw:
            orchestrator = await _load(settings, gw)
            if orchestrator.state is CheckoutState.EMPTY:
                return orchestrator, None
            shipping = address if address is not None else orchestrator.default_shipping_address
            return orchestrator, await orchestrator.place_order(shipping, payment)

    try:
        orchestrator, report = asyncio.run(run())
    except SessionExpired:
        raise click.exceptions.Exit(1)
    except CheckoutValidationFailure as exc:
        problems = "\n".join(f"  - {v}" for v in exc.violations)
        raise click.ClickException(f"Cannot place order:\n{problems}")
    except DomainException as exc:
        raise click.ClickException(str(exc))

    if report is None:
        click.echo(f"Your cart is empty. Browse products at {orchestrator.redirect_target}.")
        return

    if report.state is not CheckoutState.SUCCESS:
        raise click.ClickException(_report_failure(report))

    _display_summary(orchestrator.summary_dto())
    click.echo()
    click.echo(
        f"Order placed successfully! {report.succeeded_count} item(s) ordered. "
        f"Order numbers: {', '.join(report.order_numbers)}"
    )
    for warning in report.warnings:
        click.echo(f"Warning: {warning}", err=True)
