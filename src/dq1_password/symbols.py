"""Read-only lookup tables for password symbols and hero name characters.

Both alphabets have exactly 64 entries so every 6-bit value has one
character and every character has one value.
"""

from __future__ import annotations

from types import MappingProxyType
from typing import Mapping, Optional, Tuple

from .errors import UnknownSymbolError

SYMBOL_BITS = 6
SYMBOL_MASK = (1 << SYMBOL_BITS) - 1
ALPHABET_SIZE = 1 << SYMBOL_BITS
WILDCARD = "?"

PASSWORD_ALPHABET: Tuple[str, ...] = tuple(
    "あいうえお"
    "かきくけこ"
    "さしすせそ"
    "たちつてと"
    "なにぬねの"
    "はひふへほ"
    "まみむめも"
    "やゆよ"
    "らりるれろ"
    "わ"
    "がぎぐげご"
    "ざじずぜぞ"
    "だぢづでど"
    "ばびぶべぼ"
)

NAME_ALPHABET: Tuple[str, ...] = tuple(
    "0123456789"
    "あいうえお"
    "かきくけこ"
    "さしすせそ"
    "たちつてと"
    "なにぬねの"
    "はひふへほ"
    "まみむめも"
    "やゆよ"
    "らりるれろ"
    "わをん"
    "っゃゅょ"
    "゛゜- "
)


def _index(alphabet: Tuple[str, ...]) -> Mapping[str, int]:
    table = {symbol: value for value, symbol in enumerate(alphabet)}
    if len(alphabet) != ALPHABET_SIZE or len(table) != ALPHABET_SIZE:
        raise RuntimeError("alphabets must be bijections onto 6-bit values")
    return MappingProxyType(table)


_PASSWORD_VALUES = _index(PASSWORD_ALPHABET)
_NAME_CODES = _index(NAME_ALPHABET)


def lookup_symbol(symbol: str) -> Optional[int]:
    return _PASSWORD_VALUES.get(symbol)


def symbol_to_value(symbol: str) -> int:
    """Return the 6-bit value of a password symbol."""

    value = _PASSWORD_VALUES.get(symbol)
    if value is None:
        raise UnknownSymbolError([symbol])
    return value


def value_to_symbol(value: int) -> str:
    return PASSWORD_ALPHABET[value & SYMBOL_MASK]


def lookup_name_char(char: str) -> Optional[int]:
    return _NAME_CODES.get(char)


def name_char_to_code(char: str) -> int:
    code = _NAME_CODES.get(char)
    if code is None:
        raise KeyError(char)
    return code


def code_to_name_char(code: int) -> str:
    return NAME_ALPHABET[code & SYMBOL_MASK]


__all__ = [
    "ALPHABET_SIZE",
    "NAME_ALPHABET",
    "PASSWORD_ALPHABET",
    "SYMBOL_BITS",
    "SYMBOL_MASK",
    "WILDCARD",
    "code_to_name_char",
    "lookup_name_char",
    "lookup_symbol",
    "name_char_to_code",
    "symbol_to_value",
    "value_to_symbol",
]
