"""Program-derived addresses used by the escrow program.

Every address here is recomputed from fixed seeds on each call; nothing is
cached.  Derivation is a short hash loop, so repeated calls stay cheap.
"""

from solders.pubkey import Pubkey

from swap_escrow.clients.solana.token_program import associated_token_address

AUTHORITY_SEED = b"authority"
OFFER_SEED = b"escrow"


class AddressDeriver:
    """Derive the authority, vault, and offer record addresses for a program.

    Args:
        program_id: Address of the escrow program.

    """

    def __init__(self, program_id: Pubkey) -> None:
        """Initialize the deriver.

        Args:
            program_id: Address of the escrow program.

        """
        self.program_id = program_id

    def derive_authority(self) -> Pubkey:
        """Return the PDA that signs vault transfers for every offer."""
        return Pubkey.find_program_address([AUTHORITY_SEED], self.program_id)[0]

    def derive_vault(self, mint: Pubkey, authority: Pubkey) -> Pubkey:
        """Return the authority's associated token account for ``mint``.

        Offered tokens sit here between creation and settlement.  This is
        an associated-account derivation, not a seed derivation under the
        escrow program.
        """
        return associated_token_address(authority, mint)

    def derive_offer_record(self, party_one: Pubkey, party_two: Pubkey) -> Pubkey:
        """Return the offer record address for an ordered pair of parties.

        The seeds carry no per-offer nonce, so a pair can have at most one
        open offer at a time, and swapping the parties gives a different
        address.
        """
        return Pubkey.find_program_address(
            [OFFER_SEED, bytes(party_one), bytes(party_two)],
            self.program_id,
        )[0]
