"""Generation of checksum-valid passwords matching a wildcard pattern.

The checksum condition is linear: a bitstream is valid when the XOR of the
per-group syndromes (see :func:`~dq1_password.bitstream.checksum_syndrome`)
is zero.  :class:`CompletionTable` counts, from the last position backwards,
how many ways the remaining positions can be filled so that the syndrome
vanishes and every range-checked field stays in range.  Passwords are then
read off the table front to back, descending only into branches with a
non-zero count, so each emitted password costs at most
``20 * 64`` table probes no matter how many wildcards the pattern holds.

Positions are processed in pattern order.  Leading wildcards are the slow
case: the walk fans out before any literal narrows it, although the table
itself still keeps it polynomial.
"""

from __future__ import annotations

import dataclasses
import functools
import itertools
import logging
from dataclasses import dataclass
from typing import Iterator, List, Mapping, Optional, Tuple, Union

import numpy as np

from .bitstream import CHAIN_STEP, FIELDS, PASSWORD_LENGTH, checksum_syndrome, pack
from .codec import decode
from .errors import (
    GeneratorInconsistencyError,
    InvalidPatternError,
    PasswordError,
    PatternLengthError,
)
from .game_state import FIELD_LIMITS
from .normalize import normalize_pattern
from .symbols import (
    ALPHABET_SIZE,
    SYMBOL_BITS,
    SYMBOL_MASK,
    WILDCARD,
    lookup_symbol,
    symbol_to_value,
    value_to_symbol,
)

logger = logging.getLogger(__name__)

COUNT_CAP = 1 << 56
SYNDROME_STATES = 256
_ALL_VALUES: Tuple[int, ...] = tuple(range(ALPHABET_SIZE))


@dataclass(frozen=True)
class GeneratorConfig:
    """Runtime switches for :func:`generate` and :func:`iter_generate`.

    ``verify`` decodes every produced password before it is emitted.
    ``strict`` turns a failed verification into
    :class:`~dq1_password.errors.GeneratorInconsistencyError` instead of a
    logged and skipped candidate.
    """

    verify: bool = True
    strict: bool = False

    def __post_init__(self) -> None:
        if self.strict and not self.verify:
            raise ValueError("strict mode requires verify=True")


ConfigLike = Union[GeneratorConfig, Mapping[str, object], None]


def _coerce_config(value: ConfigLike) -> GeneratorConfig:
    if value is None:
        return GeneratorConfig()
    if isinstance(value, GeneratorConfig):
        return value
    if isinstance(value, Mapping):
        init_fields = {field.name for field in dataclasses.fields(GeneratorConfig) if field.init}
        overrides = {key: val for key, val in value.items() if key in init_fields}
        return dataclasses.replace(GeneratorConfig(), **overrides)
    raise TypeError(f"Expected GeneratorConfig or dict, got {type(value)!r}")


@dataclass(frozen=True)
class Pattern:
    """A password template; ``None`` marks a wildcard position."""

    values: Tuple[Optional[int], ...]

    def __post_init__(self) -> None:
        if len(self.values) != PASSWORD_LENGTH:
            raise PatternLengthError(
                f"pattern must have exactly {PASSWORD_LENGTH} positions, got {len(self.values)}"
            )

    @classmethod
    def parse(cls, pattern: str) -> "Pattern":
        text = normalize_pattern(pattern)
        return cls(tuple(None if char == WILDCARD else symbol_to_value(char) for char in text))

    @property
    def wildcards(self) -> Tuple[int, ...]:
        return tuple(index for index, value in enumerate(self.values) if value is None)

    def candidates(self, position: int) -> Tuple[int, ...]:
        value = self.values[position]
        return _ALL_VALUES if value is None else (value,)

    def matches(self, password: str) -> bool:
        if len(password) != PASSWORD_LENGTH:
            return False
        return all(
            value is None or lookup_symbol(char) == value
            for value, char in zip(self.values, password)
        )

    def __str__(self) -> str:
        return "".join(WILDCARD if value is None else value_to_symbol(value) for value in self.values)


@functools.lru_cache(maxsize=None)
def syndrome_table() -> np.ndarray:
    """Checksum syndrome contributed by each 6-bit group at each position."""

    table = np.zeros((PASSWORD_LENGTH, ALPHABET_SIZE), dtype=np.int64)
    for position in range(PASSWORD_LENGTH):
        groups = [0] * PASSWORD_LENGTH
        for group in range(ALPHABET_SIZE):
            groups[position] = group
            table[position, group] = checksum_syndrome(pack(groups))
    table.setflags(write=False)
    return table


@dataclass(frozen=True)
class RangeMasks:
    """Per-position filters for range-checked fields.

    ``allowed[p, c, g]`` tells whether group ``g`` may sit at position ``p``
    when the previous group carried ``c`` into a field straddling the
    boundary.  The carry of group ``g`` at position ``p`` is
    ``g >> carry_shift[p]``, which is zero where nothing straddles.
    """

    allowed: np.ndarray
    carry_shift: Tuple[int, ...]

    @property
    def carry_states(self) -> int:
        return int(self.allowed.shape[1])


@functools.lru_cache(maxsize=None)
def range_masks() -> RangeMasks:
    restricted = [
        (field, FIELD_LIMITS[field.name])
        for field in FIELDS
        if field.name in FIELD_LIMITS and FIELD_LIMITS[field.name] < field.mask
    ]

    carry_bits = [0] * PASSWORD_LENGTH
    spans = []
    for field, limit in restricted:
        first = field.offset // SYMBOL_BITS
        last = (field.end - 1) // SYMBOL_BITS
        if last - first > 1:
            raise RuntimeError(f"Field {field.name!r} spans more than two symbol groups")
        low_bits = (first + 1) * SYMBOL_BITS - field.offset if last != first else 0
        if low_bits:
            carry_bits[first] = low_bits
        spans.append((field, limit, first, last, low_bits))

    carry_states = 1 << max(carry_bits)
    allowed = np.ones((PASSWORD_LENGTH, carry_states, ALPHABET_SIZE), dtype=bool)
    for field, limit, first, last, low_bits in spans:
        for carry in range(carry_states):
            for group in range(ALPHABET_SIZE):
                if first == last:
                    value = (group >> (field.offset - first * SYMBOL_BITS)) & field.mask
                else:
                    high = group & ((1 << (field.width - low_bits)) - 1)
                    value = (carry & ((1 << low_bits) - 1)) | (high << low_bits)
                if value > limit:
                    allowed[last, carry, group] = False
    allowed.setflags(write=False)
    return RangeMasks(
        allowed=allowed,
        carry_shift=tuple(SYMBOL_BITS - bits for bits in carry_bits),
    )


class CompletionTable:
    """Counts of valid completions for every suffix of a pattern.

    ``counts[p][v, c, s]`` is the number of ways to fill positions
    ``p .. 19`` when position ``p - 1`` shows symbol value ``v`` (``0``
    before the first position), the carry into a straddling field is ``c``
    and the groups placed so far leave syndrome ``s``.  Counts saturate at
    :data:`COUNT_CAP`, so they are exact below it and only ever used as
    ``> 0`` tests above it.
    """

    def __init__(self, pattern: Pattern) -> None:
        self.pattern = pattern
        self._syndromes = syndrome_table()
        self._masks = range_masks()
        self.counts: List[np.ndarray] = self._build()

    @property
    def total(self) -> int:
        return int(self.counts[0][0, 0, 0])

    def _previous_values(self, position: int) -> Tuple[int, ...]:
        if position == 0:
            return (0,)
        return self.pattern.candidates(position - 1)

    def _build(self) -> List[np.ndarray]:
        masks = self._masks
        syndromes = self._syndromes
        shape = (ALPHABET_SIZE, masks.carry_states, SYNDROME_STATES)
        syndrome_index = np.arange(SYNDROME_STATES, dtype=np.int64)

        terminal = np.zeros(shape, dtype=np.int64)
        terminal[:, :, 0] = 1
        counts: List[np.ndarray] = [terminal]

        for position in reversed(range(PASSWORD_LENGTH)):
            following = counts[-1]
            previous = np.asarray(self._previous_values(position), dtype=np.int64)
            allowed = masks.allowed[position]
            shift = masks.carry_shift[position]
            acc = np.zeros((len(previous), masks.carry_states, SYNDROME_STATES), dtype=np.int64)
            for value in self.pattern.candidates(position):
                groups = (value - previous - CHAIN_STEP) & SYMBOL_MASK
                carry = groups >> shift
                shifted = syndrome_index[None, :] ^ syndromes[position, groups][:, None]
                reachable = following[value][carry[:, None], shifted]
                acc += allowed[:, groups].T[:, :, None] * reachable[:, None, :]
            table = np.zeros(shape, dtype=np.int64)
            table[previous] = np.minimum(acc, COUNT_CAP)
            counts.append(table)

        counts.reverse()
        return counts

    def walk(self) -> Iterator[Tuple[int, ...]]:
        """Yield symbol values of every valid completion in alphabet order."""

        if self.total == 0:
            return
        allowed = self._masks.allowed
        carry_shift = self._masks.carry_shift
        syndromes = self._syndromes
        counts = self.counts

        path: List[int] = []
        frames = [(iter(self.pattern.candidates(0)), 0, 0, 0)]
        while frames:
            choices, previous, carry, syndrome = frames[-1]
            position = len(frames) - 1
            for value in choices:
                group = (value - previous - CHAIN_STEP) & SYMBOL_MASK
                if not allowed[position, carry, group]:
                    continue
                next_carry = group >> carry_shift[position]
                next_syndrome = syndrome ^ int(syndromes[position, group])
                if counts[position + 1][value, next_carry, next_syndrome] == 0:
                    continue
                path.append(value)
                if position + 1 == PASSWORD_LENGTH:
                    yield tuple(path)
                    path.pop()
                    continue
                frames.append(
                    (iter(self.pattern.candidates(position + 1)), value, next_carry, next_syndrome)
                )
                break
            else:
                frames.pop()
                if path:
                    path.pop()


def _accept(pattern: Pattern, password: str, config: GeneratorConfig) -> bool:
    try:
        decode(password)
    except PasswordError as exc:
        reason = str(exc)
    else:
        if pattern.matches(password):
            return True
        reason = "literal positions differ from the pattern"
    logger.error("Generated password %s for pattern %s was rejected: %s", password, pattern, reason)
    if config.strict:
        raise GeneratorInconsistencyError(
            f"generated password {password} does not decode: {reason}"
        )
    return False


def _emit(table: CompletionTable, config: GeneratorConfig) -> Iterator[str]:
    for values in table.walk():
        password = "".join(value_to_symbol(value) for value in values)
        if config.verify and not _accept(table.pattern, password, config):
            continue
        yield password


def iter_generate(pattern: str, *, config: ConfigLike = None) -> Iterator[str]:
    """Lazily yield every password matching ``pattern`` that decodes cleanly.

    ``pattern`` is validated and the completion table built before this
    returns; the caller can stop consuming at any point.
    """

    settings = _coerce_config(config)
    parsed = Pattern.parse(pattern)
    table = CompletionTable(parsed)
    logger.debug(
        "Completion table for %s: %d wildcard(s), %d completion(s)%s",
        parsed,
        len(parsed.wildcards),
        table.total,
        " (saturated)" if table.total >= COUNT_CAP else "",
    )
    return _emit(table, settings)


def generate(pattern: str, limit: int, *, config: ConfigLike = None) -> List[str]:
    """Return up to ``limit`` distinct passwords matching ``pattern``.

    ``?`` (or ``？``) in ``pattern`` matches any symbol and whitespace is
    ignored.  Raises :class:`~dq1_password.errors.InvalidPatternError` for a
    malformed pattern or a non-positive ``limit``.
    """

    if isinstance(limit, bool) or not isinstance(limit, int) or limit <= 0:
        raise InvalidPatternError(f"limit must be a positive integer: {limit!r}")
    return list(itertools.islice(iter_generate(pattern, config=config), limit))


def count_completions(pattern: str) -> int:
    """Number of valid passwords matching ``pattern``, capped at :data:`COUNT_CAP`."""

    return CompletionTable(Pattern.parse(pattern)).total


__all__ = [
    "COUNT_CAP",
    "CompletionTable",
    "GeneratorConfig",
    "Pattern",
    "RangeMasks",
    "count_completions",
    "generate",
    "iter_generate",
    "range_masks",
    "syndrome_table",
]
