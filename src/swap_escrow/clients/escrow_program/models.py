"""Typed model of the escrow program's offer record."""

from dataclasses import dataclass

from solders.pubkey import Pubkey


@dataclass(frozen=True)
class Offer:
    """Open swap offer stored by the escrow program.

    Written once by ``create_offer`` and closed by either ``accept_offer``
    or ``close_offer``; the client only ever reads it.

    Args:
        party_one: Wallet that created the offer and deposited tokens.
        party_two: Wallet allowed to accept the offer.
        receive_account: Party one's token account for ``ask_token``.
        offer_token: Mint of the deposited tokens.
        offer_amount: Deposited amount in base units.
        ask_token: Mint of the tokens wanted in return.
        ask_amount: Wanted amount in base units.

    """

    party_one: Pubkey
    party_two: Pubkey
    receive_account: Pubkey
    offer_token: Pubkey
    offer_amount: int
    ask_token: Pubkey
    ask_amount: int
