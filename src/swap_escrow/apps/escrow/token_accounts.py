"""Look up mints and token holdings, and provision receiving accounts.

Every call queries the ledger afresh; holdings are never cached across
operations.
"""

import logging

from solders.keypair import Keypair
from solders.pubkey import Pubkey

from swap_escrow.clients.solana.client import SolanaClient
from swap_escrow.clients.solana.exceptions import SolanaDecodeError, SolanaRPCError
from swap_escrow.clients.solana.models import MintInfo, TokenAccountHandle
from swap_escrow.clients.solana.token_program import (
    associated_token_address,
    create_associated_token_account_idempotent,
    decode_mint,
    decode_token_account,
)
from swap_escrow.core.exceptions import (
    AccountProvisioningError,
    ExternalLookupError,
    InsufficientResourcesError,
)

logger = logging.getLogger(__name__)

_FEE_HINT = "Check that the wallet has enough SOL to pay for the account rent and fees"


def canonical_order(holdings: list[TokenAccountHandle]) -> list[TokenAccountHandle]:
    """Sort holdings by balance, highest first, then by address.

    Gives a stable tie-break when the RPC enumeration order is not.
    """
    return sorted(holdings, key=lambda h: (-h.amount, str(h.address)))


class TokenAccountResolver:
    """Resolve mints and token accounts for a wallet.

    Args:
        rpc: Solana RPC client.

    """

    def __init__(self, rpc: SolanaClient) -> None:
        """Initialize the resolver.

        Args:
            rpc: Solana RPC client.

        """
        self._rpc = rpc

    async def get_mint(self, mint: Pubkey) -> MintInfo:
        """Fetch and decode a token mint.

        Args:
            mint: Address expected to be a mint.

        Returns:
            Mint info including its decimal precision.

        Raises:
            ExternalLookupError: When the address does not hold a token mint.

        """
        try:
            account = await self._rpc.get_account_info(mint)
        except SolanaRPCError as exc:
            msg = f"Error fetching mint account {mint}: {exc.msg}"
            raise ExternalLookupError(msg) from exc
        if account is None:
            msg = f"No account exists at {mint}, check that the address is a token mint"
            raise ExternalLookupError(msg)
        try:
            return decode_mint(account)
        except SolanaDecodeError as exc:
            msg = f"{exc}, check that the address is a token mint"
            raise ExternalLookupError(msg) from exc

    async def list_holdings(self, owner: Pubkey, mint: Pubkey) -> list[TokenAccountHandle]:
        """Return every token account ``owner`` holds for ``mint``.

        Zero balances are included, which is what receiving needs.

        Args:
            owner: Wallet address.
            mint: Token mint address.

        Returns:
            Token accounts in RPC enumeration order.

        Raises:
            ExternalLookupError: When the accounts cannot be fetched or one
                of them is not a token account.

        """
        try:
            accounts = await self._rpc.get_token_accounts_by_owner(owner, mint)
        except SolanaRPCError as exc:
            msg = f"Error fetching token accounts for mint {mint}: {exc.msg}"
            raise ExternalLookupError(msg) from exc
        try:
            return [decode_token_account(account) for account in accounts]
        except SolanaDecodeError as exc:
            msg = f"Error reading token accounts for mint {mint}: {exc}"
            raise ExternalLookupError(msg) from exc

    async def list_sendable(
        self,
        owner: Pubkey,
        mint: Pubkey,
        minimum: int = 1,
    ) -> list[TokenAccountHandle]:
        """Return ``owner``'s accounts for ``mint`` holding at least ``minimum``.

        Args:
            owner: Wallet address.
            mint: Token mint address.
            minimum: Smallest acceptable balance in base units.

        Returns:
            Qualifying token accounts in RPC enumeration order.

        Raises:
            InsufficientResourcesError: When ``owner`` has no account for
                ``mint``, or none of its accounts holds ``minimum``.

        """
        holdings = await self.list_holdings(owner, mint)
        if not holdings:
            msg = f"You do not have any token account for mint {mint}"
            raise InsufficientResourcesError(msg)
        sendable = [h for h in holdings if h.amount >= minimum]
        if not sendable:
            msg = f"You do not have enough tokens for mint {mint}"
            raise InsufficientResourcesError(msg)
        return sendable

    async def resolve_or_create_receiver(
        self,
        owner: Pubkey,
        mint: Pubkey,
        payer: Keypair,
    ) -> Pubkey:
        """Return an account where ``owner`` can receive ``mint`` tokens.

        Use an existing account when there is one, preferring the highest
        balance.  Otherwise create the associated token account with the
        idempotent instruction, so a concurrent creation by someone else
        does not fail.

        Args:
            owner: Wallet that will receive tokens.
            mint: Mint of the tokens to receive.
            payer: Keypair paying for account creation.

        Returns:
            Address of the receiving token account.

        Raises:
            AccountProvisioningError: When the account cannot be created.

        """
        holdings = await self.list_holdings(owner, mint)
        if holdings:
            return canonical_order(holdings)[0].address

        address = associated_token_address(owner, mint)
        logger.info("Creating associated token account %s for mint %s", address, mint)
        instruction = create_associated_token_account_idempotent(payer.pubkey(), owner, mint)
        try:
            await self._rpc.submit([instruction], payer)
        except SolanaRPCError as exc:
            msg = f"Error creating associated token account for mint {mint}: {exc.msg}"
            raise AccountProvisioningError(msg, hint=_FEE_HINT) from exc
        return address
