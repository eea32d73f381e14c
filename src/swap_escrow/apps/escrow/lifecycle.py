"""Offer lifecycle: create, accept, and close escrow offers.

An offer moves ``NonExistent -> Open`` on create and ends in ``Settled``
(accept) or ``Cancelled`` (close).  Each transition is a single
transaction.  Everything the client can check locally is checked before
the transaction is built, so a rejected input never leaves partial state
on the ledger.  Failures during submission come from the ledger and
propagate as ``SolanaTransactionError``.
"""

import logging

from solders.keypair import Keypair
from solders.pubkey import Pubkey

from swap_escrow.apps.escrow.discovery import OfferDiscovery
from swap_escrow.apps.escrow.models import CreateOfferRequest, OfferView
from swap_escrow.apps.escrow.token_accounts import TokenAccountResolver, canonical_order
from swap_escrow.clients.escrow_program import instructions
from swap_escrow.clients.escrow_program.addresses import AddressDeriver
from swap_escrow.clients.escrow_program.layout import OfferRole
from swap_escrow.clients.escrow_program.models import Offer
from swap_escrow.clients.solana.client import SolanaClient
from swap_escrow.clients.solana.models import MintInfo, TokenAccountHandle
from swap_escrow.core.config import EscrowSettings
from swap_escrow.core.exceptions import InsufficientResourcesError, InvalidInputError
from swap_escrow.core.validation import parse_address

logger = logging.getLogger(__name__)


class OfferLifecycleController:
    """Drive the three offer transitions for one wallet.

    Args:
        settings: Shared connection and program settings.
        rpc: Solana RPC client used for queries and submission.
        wallet: Keypair that signs and pays for every transaction.
        deriver: Address deriver; built from ``settings`` when omitted.
        resolver: Token account resolver; built from ``rpc`` when omitted.
        discovery: Offer discovery; built from ``rpc`` when omitted.

    """

    def __init__(  # noqa: PLR0913
        self,
        settings: EscrowSettings,
        rpc: SolanaClient,
        wallet: Keypair,
        *,
        deriver: AddressDeriver | None = None,
        resolver: TokenAccountResolver | None = None,
        discovery: OfferDiscovery | None = None,
    ) -> None:
        """Initialize the controller.

        Args:
            settings: Shared connection and program settings.
            rpc: Solana RPC client used for queries and submission.
            wallet: Keypair that signs and pays for every transaction.
            deriver: Address deriver; built from ``settings`` when omitted.
            resolver: Token account resolver; built from ``rpc`` when omitted.
            discovery: Offer discovery; built from ``rpc`` when omitted.

        """
        self.settings = settings
        self._rpc = rpc
        self._wallet = wallet
        self.deriver = deriver or AddressDeriver(settings.program_id)
        self.resolver = resolver or TokenAccountResolver(rpc)
        self.discovery = discovery or OfferDiscovery(rpc, settings.program_id)

    @property
    def wallet_address(self) -> Pubkey:
        """Return the address of the signing wallet."""
        return self._wallet.pubkey()

    def explorer_link(self, signature: str) -> str:
        """Return the explorer URL for a transaction signature."""
        return self.settings.explorer_link(signature)

    # ------------------------------------------------------------------
    # Create
    # ------------------------------------------------------------------

    async def lookup_mint(self, raw_address: str) -> MintInfo:
        """Validate a mint address typed by the user and fetch the mint.

        Raises:
            InvalidInputError: When the address is malformed.
            ExternalLookupError: When the address is not a token mint.

        """
        return await self.resolver.get_mint(parse_address(raw_address))

    async def sending_accounts(self, mint: Pubkey) -> list[TokenAccountHandle]:
        """Return the wallet's token accounts for ``mint`` with a positive balance.

        Raises:
            InsufficientResourcesError: When the wallet has no account for
                the mint, or none of its accounts holds any tokens.

        """
        return await self.resolver.list_sendable(self.wallet_address, mint)

    def check_distinct_mints(self, send_mint: Pubkey, ask_mint: Pubkey) -> None:
        """Reject an offer that would swap a token for itself.

        Raises:
            InvalidInputError: When both mints are the same.

        """
        if send_mint == ask_mint:
            msg = "Offered token and token wanted in return must be different"
            raise InvalidInputError(msg)

    def check_counterparty(self, counterparty: Pubkey) -> None:
        """Reject an offer made to the creating wallet itself.

        Raises:
            InvalidInputError: When the counterparty is the wallet.

        """
        if counterparty == self.wallet_address:
            msg = "Both parties must be different"
            raise InvalidInputError(msg)

    async def create_offer(self, request: CreateOfferRequest) -> str:
        """Deposit tokens into the vault and open an offer.

        Args:
            request: Validated offer inputs.

        Returns:
            Signature of the create transaction.

        Raises:
            InvalidInputError: When the request breaks an offer invariant.
            InsufficientResourcesError: When the chosen account cannot cover
                the offered amount.
            AccountProvisioningError: When the receiving account for the
                asked token cannot be created.

        """
        self._validate_create(request)
        party_one = self.wallet_address

        receive_account = await self.resolver.resolve_or_create_receiver(
            party_one, request.ask_mint.address, self._wallet
        )
        authority = self.deriver.derive_authority()
        accounts = instructions.CreateOfferAccounts(
            party_one=party_one,
            send_mint=request.send_mint.address,
            send_account=request.send_account.address,
            temp_account=self.deriver.derive_vault(request.send_mint.address, authority),
            authority=authority,
            receive_mint=request.ask_mint.address,
            receive_account=receive_account,
            offer_details=self.deriver.derive_offer_record(party_one, request.counterparty),
        )
        instruction = instructions.create_offer(
            self.settings.program_id,
            accounts,
            send_amount=request.send_amount,
            ask_amount=request.ask_amount,
            party_two=request.counterparty,
        )
        logger.info(
            "Creating offer %s: %d of %s for %d of %s",
            accounts.offer_details,
            request.send_amount,
            request.send_mint.address,
            request.ask_amount,
            request.ask_mint.address,
        )
        return await self._rpc.submit([instruction], self._wallet)

    def _validate_create(self, request: CreateOfferRequest) -> None:
        """Check every create precondition that does not need the ledger."""
        self.check_counterparty(request.counterparty)
        self.check_distinct_mints(request.send_mint.address, request.ask_mint.address)
        if request.send_amount <= 0 or request.ask_amount <= 0:
            msg = "Amounts must be greater than zero"
            raise InvalidInputError(msg)
        account = request.send_account
        if account.owner != self.wallet_address or account.mint != request.send_mint.address:
            msg = f"Token account {account.address} does not hold the offered token for this wallet"
            raise InvalidInputError(msg)
        if account.amount < request.send_amount:
            msg = (
                f"Token account {account.address} holds {account.amount} base units, "
                f"but the offer needs {request.send_amount}"
            )
            raise InsufficientResourcesError(msg)

    # ------------------------------------------------------------------
    # Accept
    # ------------------------------------------------------------------

    async def offers_to_accept(self) -> list[OfferView]:
        """Return offers made to the wallet, with mint precision for display."""
        offers = await self.discovery.find_offers_for(self.wallet_address, OfferRole.PARTY_TWO)
        return await self._describe(offers)

    async def accept_offer(self, offer: Offer) -> str:
        """Pay the asked tokens and receive the vaulted tokens.

        Args:
            offer: Offer made to the wallet.

        Returns:
            Signature of the accept transaction.

        Raises:
            InvalidInputError: When the offer is not addressed to the wallet.
            InsufficientResourcesError: When no account holds the asked amount.
            AccountProvisioningError: When the receiving account for the
                offered token cannot be created.

        """
        party_two = self.wallet_address
        if offer.party_two != party_two:
            msg = "This offer was not made to your wallet"
            raise InvalidInputError(msg)

        sufficient = await self.resolver.list_sendable(
            party_two, offer.ask_token, minimum=offer.ask_amount
        )
        send_account = canonical_order(sufficient)[0]

        receive_account = await self.resolver.resolve_or_create_receiver(
            party_two, offer.offer_token, self._wallet
        )
        authority = self.deriver.derive_authority()
        accounts = instructions.AcceptOfferAccounts(
            party_one=offer.party_one,
            party_two=party_two,
            offer_details=self.deriver.derive_offer_record(offer.party_one, party_two),
            authority=authority,
            party_one_mint=offer.offer_token,
            party_two_mint=offer.ask_token,
            temp_account=self.deriver.derive_vault(offer.offer_token, authority),
            party_one_receive=offer.receive_account,
            party_two_send=send_account.address,
            party_two_receive=receive_account,
        )
        logger.info("Accepting offer %s from %s", accounts.offer_details, offer.party_one)
        instruction = instructions.accept_offer(self.settings.program_id, accounts)
        return await self._rpc.submit([instruction], self._wallet)

    # ------------------------------------------------------------------
    # Close
    # ------------------------------------------------------------------

    async def offers_to_close(self) -> list[OfferView]:
        """Return offers the wallet created, with mint precision for display."""
        offers = await self.discovery.find_offers_for(self.wallet_address, OfferRole.PARTY_ONE)
        return await self._describe(offers)

    async def close_offer(self, offer: Offer) -> str:
        """Cancel an offer and refund the vaulted tokens to the creator.

        Args:
            offer: Offer created by the wallet.

        Returns:
            Signature of the close transaction.

        Raises:
            InvalidInputError: When the wallet did not create the offer.
            AccountProvisioningError: When the refund account cannot be created.

        """
        party_one = self.wallet_address
        if offer.party_one != party_one:
            msg = "Only the creator of an offer can close it"
            raise InvalidInputError(msg)

        # The refund lands in an account for the offered mint, not offer.receive_account
        refund_account = await self.resolver.resolve_or_create_receiver(
            party_one, offer.offer_token, self._wallet
        )
        authority = self.deriver.derive_authority()
        accounts = instructions.CloseOfferAccounts(
            party_one=party_one,
            offer_details=self.deriver.derive_offer_record(party_one, offer.party_two),
            authority=authority,
            send_mint=offer.offer_token,
            temp_account=self.deriver.derive_vault(offer.offer_token, authority),
            receive_account=refund_account,
        )
        logger.info("Closing offer %s to %s", accounts.offer_details, offer.party_two)
        instruction = instructions.close_offer(
            self.settings.program_id, accounts, party_two=offer.party_two
        )
        return await self._rpc.submit([instruction], self._wallet)

    async def _describe(self, offers: list[Offer]) -> list[OfferView]:
        """Attach both mints' decimals to each offer, fetching each mint once."""
        decimals: dict[Pubkey, int] = {}
        views: list[OfferView] = []
        for offer in offers:
            for mint in (offer.offer_token, offer.ask_token):
                if mint not in decimals:
                    decimals[mint] = (await self.resolver.get_mint(mint)).decimals
            views.append(
                OfferView(
                    offer=offer,
                    offer_decimals=decimals[offer.offer_token],
                    ask_decimals=decimals[offer.ask_token],
                )
            )
        return views
