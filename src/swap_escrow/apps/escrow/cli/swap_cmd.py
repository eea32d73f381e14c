"""Interactive CLI command for creating, accepting, and cancelling offers.

Load the wallet from a keypair file, show the action menu, then walk the
user through the chosen flow with free-text prompts.  Every answer is
validated before it is used; invalid input aborts the flow with an error.
Ledger failures while submitting a transaction are not caught.
"""

import asyncio
from collections.abc import Awaitable, Callable
from functools import partial
from pathlib import Path
from typing import Annotated

import typer
from solders.keypair import Keypair

from swap_escrow.apps.escrow.cli._helpers import (
    PromptSelectionPolicy,
    build_settings,
    configure_verbose_logging,
    echo_incoming_offer,
    echo_outgoing_offer,
    echo_token_account,
    load_keypair,
)
from swap_escrow.apps.escrow.lifecycle import OfferLifecycleController
from swap_escrow.apps.escrow.models import CreateOfferRequest, MenuAction, OfferView
from swap_escrow.apps.escrow.selection import Candidates
from swap_escrow.clients.escrow_program.exceptions import OfferDecodeError
from swap_escrow.clients.solana.client import SolanaClient
from swap_escrow.clients.solana.models import TokenAccountHandle
from swap_escrow.core.config import EscrowSettings
from swap_escrow.core.exceptions import AccountProvisioningError, EscrowError
from swap_escrow.core.validation import parse_address, parse_amount


def swap(
    keypair_path: Annotated[
        Path, typer.Argument(help="Path to the wallet keypair file (JSON array of bytes)")
    ],
    rpc_url: Annotated[
        str | None, typer.Option(help="Solana RPC endpoint (overrides configuration)")
    ] = None,
    verbose: Annotated[  # noqa: FBT002
        bool, typer.Option("--verbose", "-v", help="Log RPC and transaction progress")
    ] = False,
) -> None:
    """Create, accept, or cancel a token swap offer.

    Args:
        keypair_path: Path to the wallet keypair file.
        rpc_url: Solana RPC endpoint overriding the configured one.
        verbose: Enable INFO-level logging.

    """
    if verbose:
        configure_verbose_logging()

    wallet = load_keypair(keypair_path)
    settings = build_settings(rpc_url)

    typer.echo("What would you like to do?")
    for option in MenuAction:
        typer.echo(f"{option.value}. {option.label}")
    try:
        action = MenuAction.parse(typer.prompt("Choice"))
    except EscrowError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from exc

    asyncio.run(_swap(action=action, settings=settings, wallet=wallet))


async def _swap(*, action: MenuAction, settings: EscrowSettings, wallet: Keypair) -> None:
    """Run the chosen flow and print the explorer link of its transaction.

    Args:
        action: Menu action chosen by the user.
        settings: Shared connection and program settings.
        wallet: Signing wallet.

    """
    flows: dict[MenuAction, Callable[[OfferLifecycleController], Awaitable[str | None]]] = {
        MenuAction.CREATE: _create_flow,
        MenuAction.ACCEPT: _accept_flow,
        MenuAction.CLOSE: _close_flow,
    }
    async with SolanaClient.from_settings(settings) as rpc:
        controller = OfferLifecycleController(settings, rpc, wallet)
        try:
            signature = await flows[action](controller)
        except AccountProvisioningError as exc:
            typer.echo(f"Error: {exc}", err=True)
            typer.echo(exc.hint, err=True)
            raise typer.Exit(code=1) from exc
        except (EscrowError, OfferDecodeError) as exc:
            typer.echo(f"Error: {exc}", err=True)
            raise typer.Exit(code=1) from exc

    if signature is not None:
        typer.echo(controller.explorer_link(signature))


async def _create_flow(controller: OfferLifecycleController) -> str | None:
    """Prompt for offer details and create the offer."""
    counterparty = parse_address(
        typer.prompt("Enter the address of the party you want to trade with").strip()
    )
    controller.check_counterparty(counterparty)

    send_mint = await controller.lookup_mint(
        typer.prompt("Enter the mint address of the token you want to send").strip()
    )
    typer.echo(f"The maximum amount of decimals for the given token is {send_mint.decimals}")

    accounts = await controller.sending_accounts(send_mint.address)
    account_policy: PromptSelectionPolicy[TokenAccountHandle] = PromptSelectionPolicy(
        partial(echo_token_account, decimals=send_mint.decimals),
        item_label="Account",
        heading="Your token accounts",
        single_heading="Found one token account for the specified mint",
        prompt="Enter the account you would like to use",
    )
    send_account = account_policy.choose(Candidates(accounts))
    if send_account is None:
        return None

    send_amount = parse_amount(
        typer.prompt("Enter the amount you want to offer").strip(), send_mint.decimals
    )

    raw_ask_mint = typer.prompt("Enter the mint address of token you want in return").strip()
    controller.check_distinct_mints(send_mint.address, parse_address(raw_ask_mint))
    ask_mint = await controller.lookup_mint(raw_ask_mint)
    typer.echo(f"The maximum amount of decimals for the given token is {ask_mint.decimals}")

    ask_amount = parse_amount(
        typer.prompt("Enter the amount of tokens you want in return").strip(), ask_mint.decimals
    )

    request = CreateOfferRequest(
        counterparty=counterparty,
        send_mint=send_mint,
        send_account=send_account,
        send_amount=send_amount,
        ask_mint=ask_mint,
        ask_amount=ask_amount,
    )
    return await controller.create_offer(request)


async def _accept_flow(controller: OfferLifecycleController) -> str | None:
    """List offers made to the wallet and accept the chosen one."""
    views = await controller.offers_to_accept()
    if not views:
        typer.echo("You do not have any offers at the moment.")
        return None

    policy: PromptSelectionPolicy[OfferView] = PromptSelectionPolicy(
        echo_incoming_offer,
        item_label="Offer",
        heading="Your offers at the moment",
        single_heading="You have only one offer at the moment",
        prompt="Enter the offer number you want to accept",
        confirm="Will you accept this offer? (y/n)",
    )
    chosen = policy.choose(Candidates(views))
    if chosen is None:
        return None
    return await controller.accept_offer(chosen.offer)


async def _close_flow(controller: OfferLifecycleController) -> str | None:
    """List offers the wallet created and close the chosen one."""
    views = await controller.offers_to_close()
    if not views:
        typer.echo("You do not have any pending offers.")
        return None

    policy: PromptSelectionPolicy[OfferView] = PromptSelectionPolicy(
        echo_outgoing_offer,
        item_label="Offer",
        heading="Pending offers",
        single_heading="You have only one pending offer",
        prompt="Enter the offer number you would like to close",
        confirm="Will you close this offer? (y/n)",
    )
    chosen = policy.choose(Candidates(views))
    if chosen is None:
        return None
    return await controller.close_offer(chosen.offer)
