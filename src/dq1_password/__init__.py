"""Password ("復活の呪文") codec and generator for Dragon Quest on the Famicom."""

from .codec import decode, encode
from .errors import (
    ChecksumMismatchError,
    FieldOutOfRangeError,
    FieldOverflowError,
    GeneratorInconsistencyError,
    InvalidGameStateError,
    InvalidLengthError,
    InvalidPatternError,
    PasswordError,
    PatternLengthError,
    PatternSymbolError,
    UnknownSymbolError,
)
from .game_state import GameState, compute_checksum
from .generator import GeneratorConfig, count_completions, generate, iter_generate
from .normalize import (
    normalize_hero_name,
    normalize_password,
    normalize_pattern,
    validate_password,
    validate_pattern,
)

__all__ = [
    "ChecksumMismatchError",
    "FieldOutOfRangeError",
    "FieldOverflowError",
    "GameState",
    "GeneratorConfig",
    "GeneratorInconsistencyError",
    "InvalidGameStateError",
    "InvalidLengthError",
    "InvalidPatternError",
    "PasswordError",
    "PatternLengthError",
    "PatternSymbolError",
    "UnknownSymbolError",
    "compute_checksum",
    "count_completions",
    "decode",
    "encode",
    "generate",
    "iter_generate",
    "normalize_hero_name",
    "normalize_password",
    "normalize_pattern",
    "validate_password",
    "validate_pattern",
]
