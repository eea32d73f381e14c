"""Instruction builders for the escrow program's three methods.

Instruction data follows the Anchor convention: the first 8 bytes of
``sha256("global:<method>")`` followed by the Borsh-encoded arguments.
Account metas are listed in the order the program declares them.
"""

import hashlib
from dataclasses import dataclass

from construct import Int64ul, Struct  # pyright: ignore[reportMissingTypeStubs]
from solders.instruction import AccountMeta, Instruction
from solders.pubkey import Pubkey

from swap_escrow.clients.solana.layouts import PUBKEY
from swap_escrow.clients.solana.token_program import (
    ASSOCIATED_TOKEN_PROGRAM_ID,
    SYSTEM_PROGRAM_ID,
    TOKEN_PROGRAM_ID,
)

CREATE_OFFER_ARGS = Struct(
    "send_amount" / Int64ul,
    "ask_amount" / Int64ul,
    "party_two" / PUBKEY,
)
CLOSE_OFFER_ARGS = Struct("party_two" / PUBKEY)


def method_discriminator(name: str) -> bytes:
    """Return the 8-byte Anchor discriminator for a program method."""
    return hashlib.sha256(f"global:{name}".encode()).digest()[:8]


CREATE_OFFER_DISCRIMINATOR = method_discriminator("create_offer")
ACCEPT_OFFER_DISCRIMINATOR = method_discriminator("accept_offer")
CLOSE_OFFER_DISCRIMINATOR = method_discriminator("close_offer")


@dataclass(frozen=True)
class CreateOfferAccounts:
    """Accounts for ``create_offer``."""

    party_one: Pubkey
    send_mint: Pubkey
    send_account: Pubkey
    temp_account: Pubkey
    authority: Pubkey
    receive_mint: Pubkey
    receive_account: Pubkey
    offer_details: Pubkey


@dataclass(frozen=True)
class AcceptOfferAccounts:
    """Accounts for ``accept_offer``."""

    party_one: Pubkey
    party_two: Pubkey
    offer_details: Pubkey
    authority: Pubkey
    party_one_mint: Pubkey
    party_two_mint: Pubkey
    temp_account: Pubkey
    party_one_receive: Pubkey
    party_two_send: Pubkey
    party_two_receive: Pubkey


@dataclass(frozen=True)
class CloseOfferAccounts:
    """Accounts for ``close_offer``."""

    party_one: Pubkey
    offer_details: Pubkey
    authority: Pubkey
    send_mint: Pubkey
    temp_account: Pubkey
    receive_account: Pubkey


def _meta(pubkey: Pubkey, *, signer: bool = False, writable: bool = False) -> AccountMeta:
    return AccountMeta(pubkey=pubkey, is_signer=signer, is_writable=writable)


def create_offer(
    program_id: Pubkey,
    accounts: CreateOfferAccounts,
    *,
    send_amount: int,
    ask_amount: int,
    party_two: Pubkey,
) -> Instruction:
    """Build ``create_offer(send_amount, ask_amount, party_two)``.

    Move ``send_amount`` from ``send_account`` into the vault and store the
    offer record.

    Args:
        program_id: Address of the escrow program.
        accounts: Accounts the method reads and writes.
        send_amount: Offered amount in base units.
        ask_amount: Wanted amount in base units.
        party_two: Wallet allowed to accept the offer.

    Returns:
        Instruction ready to be placed in a transaction.

    """
    args = {"send_amount": send_amount, "ask_amount": ask_amount, "party_two": party_two}
    data = CREATE_OFFER_DISCRIMINATOR + CREATE_OFFER_ARGS.build(args)
    metas = [
        _meta(accounts.party_one, signer=True, writable=True),
        _meta(accounts.send_mint),
        _meta(accounts.send_account, writable=True),
        _meta(accounts.temp_account, writable=True),
        _meta(accounts.authority),
        _meta(accounts.receive_mint),
        _meta(accounts.receive_account),
        _meta(accounts.offer_details, writable=True),
        _meta(TOKEN_PROGRAM_ID),
        _meta(ASSOCIATED_TOKEN_PROGRAM_ID),
        _meta(SYSTEM_PROGRAM_ID),
    ]
    return Instruction(program_id, data, metas)


def accept_offer(program_id: Pubkey, accounts: AcceptOfferAccounts) -> Instruction:
    """Build ``accept_offer()``.

    Pay party one the asked tokens, release the vault to party two, and
    close the offer record.
    """
    metas = [
        _meta(accounts.party_one, writable=True),
        _meta(accounts.party_two, signer=True),
        _meta(accounts.offer_details, writable=True),
        _meta(accounts.authority),
        _meta(accounts.party_one_mint),
        _meta(accounts.party_two_mint),
        _meta(accounts.temp_account, writable=True),
        _meta(accounts.party_one_receive, writable=True),
        _meta(accounts.party_two_send, writable=True),
        _meta(accounts.party_two_receive, writable=True),
        _meta(TOKEN_PROGRAM_ID),
    ]
    return Instruction(program_id, ACCEPT_OFFER_DISCRIMINATOR, metas)


def close_offer(
    program_id: Pubkey,
    accounts: CloseOfferAccounts,
    *,
    party_two: Pubkey,
) -> Instruction:
    """Build ``close_offer(party_two)``, refunding the vault to party one."""
    metas = [
        _meta(accounts.party_one, signer=True, writable=True),
        _meta(accounts.offer_details, writable=True),
        _meta(accounts.authority),
        _meta(accounts.send_mint),
        _meta(accounts.temp_account, writable=True),
        _meta(accounts.receive_account, writable=True),
        _meta(TOKEN_PROGRAM_ID),
    ]
    data = CLOSE_OFFER_DISCRIMINATOR + CLOSE_OFFER_ARGS.build({"party_two": party_two})
    return Instruction(program_id, data, metas)
