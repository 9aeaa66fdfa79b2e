"""Normalisation of user supplied passwords, patterns and hero names."""

from __future__ import annotations

import unicodedata
from typing import Dict, List

from .bitstream import PASSWORD_LENGTH
from .errors import (
    InvalidGameStateError,
    InvalidLengthError,
    PatternLengthError,
    PatternSymbolError,
    UnknownSymbolError,
)
from .symbols import WILDCARD, lookup_name_char, lookup_symbol

HERO_NAME_LENGTH = 4

_NAME_CHAR_MAP: Dict[int, str] = {
    0x3099: "゛",  # combining voiced sound mark
    0x309A: "゜",  # combining semi-voiced sound mark
    0x2010: "-",
    0x2011: "-",
    0x2012: "-",
    0x2013: "-",
    0x2014: "-",
    0x2015: "-",
    0x2212: "-",
    0x30FC: "-",
    0xFF70: "-",
    0x3000: " ",
}
_NAME_CHAR_MAP.update({0xFF10 + digit: str(digit) for digit in range(10)})

_PATTERN_CHAR_MAP = {ord("？"): WILDCARD}


def normalize_hero_name(hero_name: str) -> str:
    """Return ``hero_name`` as exactly four name-alphabet characters.

    Voiced kana are split into base kana plus ``゛``/``゜`` (each mark takes a
    slot of its own), full-width digits, dashes and the ideographic space
    are folded, and short names are padded with ASCII spaces.
    """

    # NFD only splits canonical pairs; the standalone marks ゛/゜ survive it.
    chars = unicodedata.normalize("NFD", hero_name).translate(_NAME_CHAR_MAP)
    if len(chars) > HERO_NAME_LENGTH:
        raise InvalidGameStateError(
            f"hero name must be at most {HERO_NAME_LENGTH} characters "
            f"(voiced sound marks count as one): {hero_name!r}"
        )
    invalid = [char for char in chars if lookup_name_char(char) is None]
    if invalid:
        listed = ", ".join(f"{char!r}" for char in invalid)
        raise InvalidGameStateError(f"hero name contains invalid characters: {listed}")
    return chars.ljust(HERO_NAME_LENGTH, " ")


def _strip_whitespace(text: str) -> List[str]:
    return [char for char in text if not char.isspace()]


def normalize_password(password: str) -> str:
    """Drop whitespace and check that exactly 20 password symbols remain."""

    chars = _strip_whitespace(password)
    if len(chars) != PASSWORD_LENGTH:
        raise InvalidLengthError(
            f"password must be exactly {PASSWORD_LENGTH} characters "
            f"(whitespace is ignored), got {len(chars)}"
        )
    invalid = [char for char in chars if lookup_symbol(char) is None]
    if invalid:
        raise UnknownSymbolError(invalid)
    return "".join(chars)


def normalize_pattern(pattern: str) -> str:
    """Like :func:`normalize_password` but also accepts ``?`` and ``？`` wildcards."""

    chars = _strip_whitespace(pattern.translate(_PATTERN_CHAR_MAP))
    if len(chars) != PASSWORD_LENGTH:
        raise PatternLengthError(
            f"pattern must be exactly {PASSWORD_LENGTH} characters "
            f"(whitespace is ignored), got {len(chars)}"
        )
    invalid = [char for char in chars if char != WILDCARD and lookup_symbol(char) is None]
    if invalid:
        raise PatternSymbolError(invalid, context="pattern")
    return "".join(chars)


def validate_password(password: str) -> None:
    normalize_password(password)


def validate_pattern(pattern: str) -> None:
    normalize_pattern(pattern)


__all__ = [
    "HERO_NAME_LENGTH",
    "normalize_hero_name",
    "normalize_password",
    "normalize_pattern",
    "validate_password",
    "validate_pattern",
]
