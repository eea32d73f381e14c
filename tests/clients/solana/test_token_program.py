"""Tests for SPL token layouts and associated-account helpers."""

import struct

import pytest
from solders.pubkey import Pubkey

from swap_escrow.clients.solana.exceptions import SolanaDecodeError
from swap_escrow.clients.solana.models import AccountInfo
from swap_escrow.clients.solana.token_program import (
    ASSOCIATED_TOKEN_PROGRAM_ID,
    MINT_SIZE,
    SYSTEM_PROGRAM_ID,
    TOKEN_ACCOUNT_SIZE,
    TOKEN_PROGRAM_ID,
    associated_token_address,
    create_associated_token_account_idempotent,
    decode_mint,
    decode_token_account,
)

_BALANCE = 1_500_000
_SUPPLY = 10**15
_DECIMALS = 6
_ATA_ACCOUNT_COUNT = 6


def _token_account_data(mint: Pubkey, owner: Pubkey, amount: int) -> bytes:
    """Build SPL token account bytes with the given mint, owner, and balance."""
    head = bytes(mint) + bytes(owner) + struct.pack("<Q", amount)
    return head.ljust(TOKEN_ACCOUNT_SIZE, b"\x00")


def _mint_data(decimals: int, supply: int, *, initialized: bool = True) -> bytes:
    """Build SPL mint bytes."""
    data = bytearray(MINT_SIZE)
    struct.pack_into("<Q", data, 36, supply)
    data[44] = decimals
    data[45] = int(initialized)
    return bytes(data)


class TestDecodeTokenAccount:
    """Test suite for decode_token_account."""

    def test_decodes_fields(self) -> None:
        """Read mint, owner, and balance from their offsets."""
        address, mint, owner = Pubkey.new_unique(), Pubkey.new_unique(), Pubkey.new_unique()
        account = AccountInfo(
            address=address,
            owner=TOKEN_PROGRAM_ID,
            lamports=0,
            data=_token_account_data(mint, owner, _BALANCE),
        )

        handle = decode_token_account(account)

        assert handle.address == address
        assert handle.mint == mint
        assert handle.owner == owner
        assert handle.amount == _BALANCE

    def test_rejects_short_data(self) -> None:
        """Raise SolanaDecodeError for data shorter than a token account."""
        account = AccountInfo(Pubkey.new_unique(), TOKEN_PROGRAM_ID, 0, b"\x00" * 72)

        with pytest.raises(SolanaDecodeError, match="not a token account"):
            decode_token_account(account)


class TestDecodeMint:
    """Test suite for decode_mint."""

    def test_decodes_fields(self) -> None:
        """Read decimals and supply from an initialized mint."""
        address = Pubkey.new_unique()
        account = AccountInfo(address, TOKEN_PROGRAM_ID, 0, _mint_data(_DECIMALS, _SUPPLY))

        mint = decode_mint(account)

        assert mint.address == address
        assert mint.decimals == _DECIMALS
        assert mint.supply == _SUPPLY

    def test_rejects_foreign_owner(self) -> None:
        """Raise SolanaDecodeError when the token program does not own the account."""
        account = AccountInfo(Pubkey.new_unique(), SYSTEM_PROGRAM_ID, 0, _mint_data(6, 1))

        with pytest.raises(SolanaDecodeError, match="not owned by the token program"):
            decode_mint(account)

    def test_rejects_token_account(self) -> None:
        """Raise SolanaDecodeError when the data is a token account, not a mint."""
        data = _token_account_data(Pubkey.new_unique(), Pubkey.new_unique(), 1)
        account = AccountInfo(Pubkey.new_unique(), TOKEN_PROGRAM_ID, 0, data)

        with pytest.raises(SolanaDecodeError, match="not a mint"):
            decode_mint(account)

    def test_rejects_uninitialized_mint(self) -> None:
        """Raise SolanaDecodeError for an uninitialized mint."""
        account = AccountInfo(
            Pubkey.new_unique(), TOKEN_PROGRAM_ID, 0, _mint_data(6, 0, initialized=False)
        )

        with pytest.raises(SolanaDecodeError, match="not initialized"):
            decode_mint(account)


class TestAssociatedTokenAddress:
    """Test suite for associated token account helpers."""

    def test_derivation_is_deterministic(self) -> None:
        """Return the same address for the same owner and mint."""
        owner, mint = Pubkey.new_unique(), Pubkey.new_unique()
        assert associated_token_address(owner, mint) == associated_token_address(owner, mint)

    def test_matches_find_program_address(self) -> None:
        """Derive under the associated token program with owner, token program, mint seeds."""
        owner, mint = Pubkey.new_unique(), Pubkey.new_unique()
        expected, _bump = Pubkey.find_program_address(
            [bytes(owner), bytes(TOKEN_PROGRAM_ID), bytes(mint)], ASSOCIATED_TOKEN_PROGRAM_ID
        )
        assert associated_token_address(owner, mint) == expected

    def test_differs_per_mint(self) -> None:
        """Give each mint its own account for the same owner."""
        owner = Pubkey.new_unique()
        assert associated_token_address(owner, Pubkey.new_unique()) != associated_token_address(
            owner, Pubkey.new_unique()
        )

    def test_create_idempotent_instruction(self) -> None:
        """Build a CreateIdempotent instruction paying from the payer."""
        payer, owner, mint = Pubkey.new_unique(), Pubkey.new_unique(), Pubkey.new_unique()

        instruction = create_associated_token_account_idempotent(payer, owner, mint)

        assert instruction.program_id == ASSOCIATED_TOKEN_PROGRAM_ID
        assert bytes(instruction.data) == b"\x01"
        assert len(instruction.accounts) == _ATA_ACCOUNT_COUNT
        assert instruction.accounts[0].pubkey == payer
        assert instruction.accounts[0].is_signer
        assert instruction.accounts[1].pubkey == associated_token_address(owner, mint)
        assert instruction.accounts[1].is_writable
        assert [meta.pubkey for meta in instruction.accounts[2:]] == [
            owner,
            mint,
            SYSTEM_PROGRAM_ID,
            TOKEN_PROGRAM_ID,
        ]
