"""SPL token program ids, account decoding, and associated-account helpers.

The token account and mint layouts live in
:mod:`swap_escrow.clients.solana.layouts`; this module decodes only the
fields the client reads.
"""

from construct import ConstructError  # pyright: ignore[reportMissingTypeStubs]
from solders.instruction import AccountMeta, Instruction
from solders.pubkey import Pubkey

from swap_escrow.clients.solana.exceptions import SolanaDecodeError
from swap_escrow.clients.solana.layouts import MINT_LAYOUT, TOKEN_ACCOUNT_LAYOUT
from swap_escrow.clients.solana.models import AccountInfo, MintInfo, TokenAccountHandle

TOKEN_PROGRAM_ID = Pubkey.from_string("TokenkegQfeZyiNwAJbNbGKPFXCWuBvf9Ss623VQ5DA")
ASSOCIATED_TOKEN_PROGRAM_ID = Pubkey.from_string("ATokenGPvbdGVxr1b2hvZbsiqW5xWH25efTNsLJA8knL")
SYSTEM_PROGRAM_ID = Pubkey.from_string("11111111111111111111111111111111")

TOKEN_ACCOUNT_SIZE: int = TOKEN_ACCOUNT_LAYOUT.sizeof()
MINT_SIZE: int = MINT_LAYOUT.sizeof()

_CREATE_IDEMPOTENT = bytes([1])


def decode_token_account(account: AccountInfo) -> TokenAccountHandle:
    """Decode an SPL token account.

    Args:
        account: Raw account fetched from the RPC API.

    Returns:
        Token account handle with mint, owner, and balance.

    Raises:
        SolanaDecodeError: When the data is not a token account.

    """
    if len(account.data) < TOKEN_ACCOUNT_SIZE:
        msg = f"Account {account.address} is not a token account ({len(account.data)} bytes)"
        raise SolanaDecodeError(msg)
    try:
        parsed = TOKEN_ACCOUNT_LAYOUT.parse(account.data)
    except ConstructError as exc:
        msg = f"Account {account.address} is not a token account: {exc}"
        raise SolanaDecodeError(msg) from exc
    return TokenAccountHandle(
        address=account.address,
        mint=parsed.mint,
        owner=parsed.owner,
        amount=parsed.amount,
    )


def decode_mint(account: AccountInfo) -> MintInfo:
    """Decode an SPL token mint.

    Args:
        account: Raw account fetched from the RPC API.

    Returns:
        Mint info with decimals and supply.

    Raises:
        SolanaDecodeError: When the account is not an initialized mint.

    """
    if account.owner != TOKEN_PROGRAM_ID:
        msg = f"Account {account.address} is not owned by the token program"
        raise SolanaDecodeError(msg)
    if len(account.data) != MINT_SIZE:
        msg = f"Account {account.address} is not a mint ({len(account.data)} bytes)"
        raise SolanaDecodeError(msg)
    try:
        parsed = MINT_LAYOUT.parse(account.data)
    except ConstructError as exc:
        msg = f"Account {account.address} is not a mint: {exc}"
        raise SolanaDecodeError(msg) from exc
    if not parsed.is_initialized:
        msg = f"Mint {account.address} is not initialized"
        raise SolanaDecodeError(msg)
    return MintInfo(address=account.address, decimals=parsed.decimals, supply=parsed.supply)


def associated_token_address(owner: Pubkey, mint: Pubkey) -> Pubkey:
    """Derive the canonical associated token account for ``owner`` and ``mint``.

    Works for off-curve owners (program-derived addresses) as well.
    """
    return Pubkey.find_program_address(
        [bytes(owner), bytes(TOKEN_PROGRAM_ID), bytes(mint)],
        ASSOCIATED_TOKEN_PROGRAM_ID,
    )[0]


def create_associated_token_account_idempotent(
    payer: Pubkey,
    owner: Pubkey,
    mint: Pubkey,
) -> Instruction:
    """Build the associated-token-program ``CreateIdempotent`` instruction.

    The instruction succeeds without changes when the account already
    exists, so concurrent callers converge on the same account.

    Args:
        payer: Wallet paying rent for the new account.
        owner: Wallet that will own the account.
        mint: Mint of the tokens the account will hold.

    Returns:
        Instruction ready to be placed in a transaction.

    """
    address = associated_token_address(owner, mint)
    accounts = [
        AccountMeta(pubkey=payer, is_signer=True, is_writable=True),
        AccountMeta(pubkey=address, is_signer=False, is_writable=True),
        AccountMeta(pubkey=owner, is_signer=False, is_writable=False),
        AccountMeta(pubkey=mint, is_signer=False, is_writable=False),
        AccountMeta(pubkey=SYSTEM_PROGRAM_ID, is_signer=False, is_writable=False),
        AccountMeta(pubkey=TOKEN_PROGRAM_ID, is_signer=False, is_writable=False),
    ]
    return Instruction(ASSOCIATED_TOKEN_PROGRAM_ID, _CREATE_IDEMPOTENT, accounts)
