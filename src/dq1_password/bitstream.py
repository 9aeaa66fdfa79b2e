"""Bit-level layout of the 120-bit password payload.

A password is 20 symbols of 6 bits.  Symbols are chained: the value shown
at position ``i`` is the running sum of every stored group so far plus
``4`` per step, so a stored 6-bit group is recovered from two neighbouring
symbols.  Groups are packed little-endian, group ``i`` occupying bits
``6i .. 6i+5`` of a 15-byte bitstream (bit ``o`` is bit ``o % 8`` of byte
``o // 8``).  The bytes are then split into the fields of :data:`FIELDS`.
"""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

from .crc import crc16
from .errors import FieldOverflowError
from .symbols import SYMBOL_BITS, SYMBOL_MASK

PASSWORD_LENGTH = 20
BITSTREAM_BITS = PASSWORD_LENGTH * SYMBOL_BITS
BITSTREAM_BYTES = BITSTREAM_BITS // 8
CHAIN_STEP = 4
CHECKSUM_FIELD = "checksum"


@dataclass(frozen=True)
class Field:
    """A named region of the bitstream."""

    name: str
    offset: int
    width: int

    @property
    def mask(self) -> int:
        return (1 << self.width) - 1

    @property
    def end(self) -> int:
        return self.offset + self.width


FIELDS: Tuple[Field, ...] = (
    Field(CHECKSUM_FIELD, 0, 8),
    Field("xp_lo", 8, 8),
    Field("name_2", 16, 6),
    Field("flag_got_death_necklace", 22, 1),
    Field("salt_1", 23, 1),
    Field("inventory_2", 24, 4),
    Field("inventory_3", 28, 4),
    Field("purse_lo", 32, 8),
    Field("salt_0", 40, 1),
    Field("flag_beated_golem", 41, 1),
    Field("name_0", 42, 6),
    Field("inventory_6", 48, 4),
    Field("inventory_7", 52, 4),
    Field("name_3", 56, 6),
    Field("flag_beated_dragon", 62, 1),
    Field("salt_2", 63, 1),
    Field("hero_shield", 64, 2),
    Field("hero_armor", 66, 3),
    Field("hero_weapon", 69, 3),
    Field("purse_hi", 72, 8),
    Field("herb_count", 80, 4),
    Field("key_count", 84, 4),
    Field("inventory_4", 88, 4),
    Field("inventory_5", 92, 4),
    Field("xp_hi", 96, 8),
    Field("flag_equip_warrior_ring", 104, 1),
    Field("name_1", 105, 6),
    Field("flag_equip_dragon_scale", 111, 1),
    Field("inventory_0", 112, 4),
    Field("inventory_1", 116, 4),
)


def _index_fields(fields: Sequence[Field]) -> Mapping[str, Field]:
    position = 0
    for field in fields:
        if field.offset != position or field.width <= 0:
            raise RuntimeError(f"Field {field.name!r} breaks the contiguous layout at bit {position}")
        position = field.end
    if position != BITSTREAM_BITS:
        raise RuntimeError(f"Field layout covers {position} bits, expected {BITSTREAM_BITS}")
    by_name = {field.name: field for field in fields}
    if len(by_name) != len(fields):
        raise RuntimeError("Field names must be unique")
    return MappingProxyType(by_name)


FIELDS_BY_NAME = _index_fields(FIELDS)
EMPTY_BITSTREAM = bytes(BITSTREAM_BYTES)


def get_field(name: str) -> Field:
    try:
        return FIELDS_BY_NAME[name]
    except KeyError:
        raise KeyError(f"Unknown bitstream field {name!r}") from None


def chain(groups: Sequence[int]) -> List[int]:
    """Turn stored 6-bit groups into the running symbol values."""

    values: List[int] = []
    previous = 0
    for group in groups:
        previous = (previous + group + CHAIN_STEP) & SYMBOL_MASK
        values.append(previous)
    return values


def unchain(values: Sequence[int]) -> List[int]:
    """Inverse of :func:`chain`."""

    groups: List[int] = []
    previous = 0
    for value in values:
        groups.append((value - previous - CHAIN_STEP) & SYMBOL_MASK)
        previous = value
    return groups


def pack(groups: Sequence[int]) -> bytes:
    """Concatenate 20 six-bit groups into the 15-byte bitstream."""

    if len(groups) != PASSWORD_LENGTH:
        raise ValueError(f"Expected {PASSWORD_LENGTH} groups, got {len(groups)}")
    packed = 0
    for index, group in enumerate(groups):
        if not 0 <= group <= SYMBOL_MASK:
            raise ValueError(f"Group {index} does not fit in {SYMBOL_BITS} bits: {group}")
        packed |= group << (index * SYMBOL_BITS)
    return packed.to_bytes(BITSTREAM_BYTES, "little")


def unpack(bitstream: bytes) -> List[int]:
    packed = _as_int(bitstream)
    return [
        (packed >> (index * SYMBOL_BITS)) & SYMBOL_MASK for index in range(PASSWORD_LENGTH)
    ]


def _as_int(bitstream: bytes) -> int:
    if len(bitstream) != BITSTREAM_BYTES:
        raise ValueError(f"Expected a {BITSTREAM_BYTES}-byte bitstream, got {len(bitstream)} bytes")
    return int.from_bytes(bitstream, "little")


def field_read(bitstream: bytes, name: str) -> int:
    field = get_field(name)
    return (_as_int(bitstream) >> field.offset) & field.mask


def field_write(bitstream: bytes, name: str, value: int) -> bytes:
    """Return a copy of ``bitstream`` with ``name`` set to ``value``."""

    field = get_field(name)
    if not 0 <= value <= field.mask:
        raise FieldOverflowError(name, value, field.width)
    packed = _as_int(bitstream)
    packed &= ~(field.mask << field.offset)
    packed |= value << field.offset
    return packed.to_bytes(BITSTREAM_BYTES, "little")


def read_fields(bitstream: bytes) -> Dict[str, int]:
    packed = _as_int(bitstream)
    return {field.name: (packed >> field.offset) & field.mask for field in FIELDS}


def write_fields(fields: Mapping[str, int], base: Optional[bytes] = None) -> bytes:
    bitstream = EMPTY_BITSTREAM if base is None else base
    for name, value in fields.items():
        bitstream = field_write(bitstream, name, value)
    return bitstream


def payload_crc(bitstream: bytes) -> int:
    """CRC-16 over every byte after the checksum byte."""

    if len(bitstream) != BITSTREAM_BYTES:
        raise ValueError(f"Expected a {BITSTREAM_BYTES}-byte bitstream, got {len(bitstream)} bytes")
    return crc16(bitstream[1:])


def checksum_syndrome(bitstream: bytes) -> int:
    """Return ``stored checksum XOR recomputed checksum``; zero means valid.

    Both terms are linear in the bitstream bits, so the syndrome of a
    bitstream is the XOR of the syndromes of its groups taken one at a time.
    """

    return field_read(bitstream, CHECKSUM_FIELD) ^ (payload_crc(bitstream) & 0xFF)


__all__ = [
    "BITSTREAM_BITS",
    "BITSTREAM_BYTES",
    "CHAIN_STEP",
    "CHECKSUM_FIELD",
    "EMPTY_BITSTREAM",
    "FIELDS",
    "FIELDS_BY_NAME",
    "Field",
    "PASSWORD_LENGTH",
    "chain",
    "checksum_syndrome",
    "field_read",
    "field_write",
    "get_field",
    "pack",
    "payload_crc",
    "read_fields",
    "unchain",
    "unpack",
]
