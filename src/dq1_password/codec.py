"""Conversion between password text and :class:`GameState`."""

from __future__ import annotations

from typing import List

from .bitstream import CHECKSUM_FIELD, chain, pack, payload_crc, read_fields, unchain, unpack
from .errors import ChecksumMismatchError
from .game_state import GameState, state_to_bitstream
from .normalize import normalize_password
from .symbols import symbol_to_value, value_to_symbol


def password_to_bitstream(password: str) -> bytes:
    """Map a normalised password onto its 15-byte bitstream."""

    values: List[int] = [symbol_to_value(symbol) for symbol in password]
    return pack(unchain(values))


def bitstream_to_password(bitstream: bytes) -> str:
    return "".join(value_to_symbol(value) for value in chain(unpack(bitstream)))


def verify_bitstream(bitstream: bytes) -> None:
    fields = read_fields(bitstream)
    actual = payload_crc(bitstream)
    expected = fields[CHECKSUM_FIELD]
    if expected != actual & 0xFF:
        raise ChecksumMismatchError(expected, actual)


def decode(password: str) -> GameState:
    """Decode a password into the game state it stores.

    Whitespace is ignored.  Raises :class:`InvalidLengthError` or
    :class:`UnknownSymbolError` for malformed text,
    :class:`ChecksumMismatchError` when the checksum does not match and
    :class:`FieldOutOfRangeError` when a checksum-valid password stores
    values the game does not recognise.  The checksum is verified first.
    """

    bitstream = password_to_bitstream(normalize_password(password))
    verify_bitstream(bitstream)
    fields = read_fields(bitstream)
    del fields[CHECKSUM_FIELD]
    return GameState.from_fields(fields)


def encode(state: GameState) -> str:
    """Encode ``state`` as a 20-symbol password."""

    return bitstream_to_password(state_to_bitstream(state))


__all__ = [
    "bitstream_to_password",
    "decode",
    "encode",
    "password_to_bitstream",
    "verify_bitstream",
]
