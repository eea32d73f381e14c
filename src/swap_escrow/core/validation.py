"""Validation and scaling of user-supplied addresses and amounts.

Every value typed at a prompt passes through here before it reaches a
transaction.  The ``is_valid_*`` predicates are pure syntax checks; the
``parse_*`` helpers build on them and raise ``InvalidInputError`` with a
message suitable for showing to the user.
"""

from decimal import Decimal

from solders.pubkey import Pubkey

from swap_escrow.core.exceptions import InvalidInputError

MIN_ADDRESS_LENGTH = 32
MAX_ADDRESS_LENGTH = 44
U64_MAX = 2**64 - 1
_U64_DIGITS = len(str(U64_MAX))

# Base58 drops 0, I, O and l because they are easily confused
BASE58_ALPHABET = frozenset("123456789ABCDEFGHJKLMNPQRSTUVWXYZabcdefghijkmnopqrstuvwxyz")
_DIGITS = frozenset("0123456789")


def is_valid_address(value: str) -> bool:
    """Return whether ``value`` looks like a base58 ledger address.

    Accept every length from 32 to 44 characters inclusive.  Only the
    syntax is checked; decoding happens in ``parse_address``.

    Args:
        value: Candidate address string.

    Returns:
        ``True`` if the length and alphabet are plausible.

    """
    if not MIN_ADDRESS_LENGTH <= len(value) <= MAX_ADDRESS_LENGTH:
        return False
    return all(char in BASE58_ALPHABET for char in value)


def is_valid_number(value: str) -> bool:
    """Return whether ``value`` is an unsigned decimal literal.

    Allow digits with at most one period.  Digits may be missing on either
    side of the period (``"5."`` and ``".5"`` pass) but a lone ``"."`` does
    not.

    Args:
        value: Candidate numeric string.

    Returns:
        ``True`` if the string is a well-formed unsigned decimal.

    """
    if not value or value == ".":
        return False
    if value.count(".") > 1:
        return False
    return all(char in _DIGITS or char == "." for char in value)


def parse_address(value: str) -> Pubkey:
    """Validate and decode a base58 address.

    Args:
        value: Address string typed by the user.

    Returns:
        The decoded public key.

    Raises:
        InvalidInputError: When the string is not a valid 32-byte address.

    """
    if not is_valid_address(value):
        msg = "Input does not correspond to a valid address"
        raise InvalidInputError(msg)
    try:
        return Pubkey.from_string(value)
    except ValueError as exc:
        msg = "Input does not correspond to a valid address"
        raise InvalidInputError(msg) from exc


def parse_amount(value: str, decimals: int) -> int:
    """Convert a human token amount into base units.

    Trailing zeros in the fractional part do not count against the
    precision limit (``"1.50"`` is fine for a 1-decimal mint).  Scaling is
    done with integer arithmetic so large amounts stay exact.

    Args:
        value: Amount string typed by the user, e.g. ``"2.5"``.
        decimals: Decimal precision declared by the token's mint.

    Returns:
        The amount in the token's smallest unit.

    Raises:
        InvalidInputError: When the string is not a number, has too many
            decimal places, is zero, or overflows a u64.

    """
    if not is_valid_number(value):
        msg = "The input does not correspond to a valid number"
        raise InvalidInputError(msg)

    whole, _, fraction = value.partition(".")
    whole = whole.lstrip("0")
    fraction = fraction.rstrip("0")
    if len(fraction) > decimals:
        msg = f"Maximum {decimals} decimal places allowed, but you specified more"
        raise InvalidInputError(msg)
    if len(whole) > _U64_DIGITS:
        msg = "Amount is too large"
        raise InvalidInputError(msg)

    amount = int(whole or "0") * 10**decimals + int(fraction.ljust(decimals, "0") or "0")
    if amount <= 0:
        msg = "Amount must be greater than zero"
        raise InvalidInputError(msg)
    if amount > U64_MAX:
        msg = "Amount is too large"
        raise InvalidInputError(msg)
    return amount


def parse_index(value: str, count: int) -> int:
    """Validate a 1-indexed choice from an enumerated list.

    Args:
        value: Index string typed by the user.
        count: Number of entries that were shown.

    Returns:
        The chosen index, between 1 and ``count`` inclusive.

    Raises:
        InvalidInputError: When the input is not a whole number in range.

    """
    if not is_valid_number(value) or "." in value:
        msg = "Provided input is invalid"
        raise InvalidInputError(msg)
    digits = value.lstrip("0")
    if len(digits) > len(str(count)):
        msg = f"Choice must be between 1 and {count}"
        raise InvalidInputError(msg)
    index = int(digits or "0")
    if not 1 <= index <= count:
        msg = f"Choice must be between 1 and {count}"
        raise InvalidInputError(msg)
    return index


def format_amount(amount: int, decimals: int) -> Decimal:
    """Convert base units back into a human-readable token quantity."""
    return Decimal(amount).scaleb(-decimals)
