"""Find open offers on the ledger for a party."""

import logging

from solders.pubkey import Pubkey

from swap_escrow.clients.escrow_program.exceptions import OfferDecodeError
from swap_escrow.clients.escrow_program.layout import OfferRole, decode_offer, offer_filters
from swap_escrow.clients.escrow_program.models import Offer
from swap_escrow.clients.solana.client import SolanaClient

logger = logging.getLogger(__name__)


class OfferDiscovery:
    """Scan the escrow program's accounts for offers involving a party.

    Args:
        rpc: Solana RPC client.
        program_id: Address of the escrow program.

    """

    def __init__(self, rpc: SolanaClient, program_id: Pubkey) -> None:
        """Initialize offer discovery.

        Args:
            rpc: Solana RPC client.
            program_id: Address of the escrow program.

        """
        self._rpc = rpc
        self.program_id = program_id

    async def find_offers_for(self, party: Pubkey, role: OfferRole) -> list[Offer]:
        """Return open offers where ``party`` is in the ``role`` field.

        ``PARTY_ONE`` finds offers the party created; ``PARTY_TWO`` finds
        offers made to the party.  Results keep the ledger's enumeration
        order.

        Args:
            party: Wallet to look for.
            role: Which party field must match.

        Returns:
            Decoded offers.

        Raises:
            OfferDecodeError: When a returned account does not decode as an
                offer, or its party field does not match the filter.

        """
        accounts = await self._rpc.get_program_accounts(self.program_id, offer_filters(party, role))
        logger.info("Found %d offer account(s) for %s as %s", len(accounts), party, role.name)

        offers: list[Offer] = []
        for account in accounts:
            try:
                offer = decode_offer(account.data)
            except OfferDecodeError as exc:
                msg = f"Account {account.address}: {exc}"
                raise OfferDecodeError(msg) from exc
            matched = offer.party_one if role is OfferRole.PARTY_ONE else offer.party_two
            if matched != party:
                msg = f"Account {account.address} does not belong to {party} as {role.name}"
                raise OfferDecodeError(msg)
            offers.append(offer)
        return offers
