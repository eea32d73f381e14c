"""Binary layouts for SPL token accounts and mints.

Layouts are declared with ``construct`` so field sizes and offsets come
from one schema object instead of hand-counted slices.  All integers are
little-endian, and optional keys use the ``COption`` encoding (a ``u32``
tag followed by the key).
"""

from typing import Any

from construct import (  # pyright: ignore[reportMissingTypeStubs]
    Adapter,
    Bytes,
    Construct,
    Flag,
    Int8ul,
    Int32ul,
    Int64ul,
    Struct,
)
from solders.pubkey import Pubkey


class _PubkeyAdapter(Adapter):  # pyright: ignore[reportUntypedBaseClass]
    """Map 32 raw bytes to a ``Pubkey`` and back."""

    def _decode(self, obj: bytes, context: Any, path: Any) -> Pubkey:  # noqa: ANN401, ARG002
        return Pubkey.from_bytes(obj)

    def _encode(self, obj: Pubkey, context: Any, path: Any) -> bytes:  # noqa: ANN401, ARG002
        return bytes(obj)


PUBKEY = _PubkeyAdapter(Bytes(32))

TOKEN_ACCOUNT_LAYOUT = Struct(
    "mint" / PUBKEY,
    "owner" / PUBKEY,
    "amount" / Int64ul,
    "delegate_option" / Int32ul,
    "delegate" / PUBKEY,
    "state" / Int8ul,
    "is_native_option" / Int32ul,
    "is_native" / Int64ul,
    "delegated_amount" / Int64ul,
    "close_authority_option" / Int32ul,
    "close_authority" / PUBKEY,
)

MINT_LAYOUT = Struct(
    "mint_authority_option" / Int32ul,
    "mint_authority" / PUBKEY,
    "supply" / Int64ul,
    "decimals" / Int8ul,
    "is_initialized" / Flag,
    "freeze_authority_option" / Int32ul,
    "freeze_authority" / PUBKEY,
)


def field_offset(layout: Construct, name: str) -> int:
    """Return the byte offset of the named field in a fixed-size struct.

    Args:
        layout: A ``Struct`` whose fields all have a static size.
        name: Name of the field to locate.

    Returns:
        Offset of the field from the start of the record.

    Raises:
        KeyError: When the struct has no field called ``name``.

    """
    subcons: list[Construct] = layout.subcons  # pyright: ignore[reportUnknownMemberType]
    offset = 0
    for subcon in subcons:
        if subcon.name == name:
            return offset
        offset += subcon.sizeof()
    raise KeyError(name)
