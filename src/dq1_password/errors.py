"""Exception hierarchy shared by the password codec and generator."""

from __future__ import annotations

from typing import Iterable, Tuple


class PasswordError(ValueError):
    """Base class for every recoverable password error."""


class UnknownSymbolError(PasswordError):
    """Raised when text contains characters outside the password alphabet."""

    def __init__(self, symbols: Iterable[str], *, context: str = "password") -> None:
        self.symbols: Tuple[str, ...] = tuple(symbols)
        listed = ", ".join(f"{symbol!r}" for symbol in self.symbols)
        super().__init__(f"{context} contains invalid characters: {listed}")


class InvalidLengthError(PasswordError):
    """Raised when a password or pattern does not have exactly 20 symbols."""


class ChecksumMismatchError(PasswordError):
    """Raised when the stored checksum disagrees with the recomputed CRC."""

    def __init__(self, expected: int, actual: int) -> None:
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"CRC low byte mismatch: expected=0x??{expected:02X}, actual={actual:#06x}"
        )


class InvalidGameStateError(PasswordError):
    """Raised when a game state cannot be represented by a password."""


class FieldOutOfRangeError(InvalidGameStateError):
    """Raised when a field holds a value the game does not recognise."""

    def __init__(self, field: str, value: int, maximum: int) -> None:
        self.field = field
        self.value = value
        self.maximum = maximum
        super().__init__(f"{field} must be in 0..={maximum}: {value}")


class FieldOverflowError(PasswordError):
    """Raised when a value does not fit in its bitstream field."""

    def __init__(self, field: str, value: int, width: int) -> None:
        self.field = field
        self.value = value
        self.width = width
        super().__init__(f"{field} does not fit in {width} bit(s): {value}")


class InvalidPatternError(PasswordError):
    """Raised when a generator pattern or limit is malformed."""


class PatternLengthError(InvalidPatternError, InvalidLengthError):
    """Raised when a pattern does not have exactly 20 positions."""


class PatternSymbolError(InvalidPatternError, UnknownSymbolError):
    """Raised when a pattern contains characters that are neither symbols nor ``?``."""


class GeneratorInconsistencyError(RuntimeError):
    """Raised when the generator produced a password the codec rejects."""


__all__ = [
    "ChecksumMismatchError",
    "FieldOutOfRangeError",
    "FieldOverflowError",
    "GeneratorInconsistencyError",
    "InvalidGameStateError",
    "InvalidLengthError",
    "InvalidPatternError",
    "PasswordError",
    "PatternLengthError",
    "PatternSymbolError",
    "UnknownSymbolError",
]
