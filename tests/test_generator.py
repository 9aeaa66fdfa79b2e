from __future__ import annotations

import importlib
import itertools
import logging
import random
from typing import Sequence, Set

import pytest

from dq1_password import (
    GeneratorConfig,
    count_completions,
    decode,
    generate,
    iter_generate,
)
from dq1_password.bitstream import PASSWORD_LENGTH, pack
from dq1_password.errors import (
    ChecksumMismatchError,
    GeneratorInconsistencyError,
    InvalidLengthError,
    InvalidPatternError,
    PasswordError,
    PatternLengthError,
    PatternSymbolError,
)
from dq1_password.symbols import PASSWORD_ALPHABET

from tests.password_fixtures import PASSWORD_A, PASSWORD_A_BAD_CRC, PASSWORD_A_BAD_ITEM

generator = importlib.import_module("dq1_password.generator")


def _with_wildcards(password: str, positions: Sequence[int]) -> str:
    chars = list(password)
    for position in positions:
        chars[position] = "?"
    return "".join(chars)


def _brute_force(pattern: str) -> Set[str]:
    positions = [index for index, char in enumerate(pattern) if char == "?"]
    found: Set[str] = set()
    for symbols in itertools.product(PASSWORD_ALPHABET, repeat=len(positions)):
        chars = list(pattern)
        for position, symbol in zip(positions, symbols):
            chars[position] = symbol
        candidate = "".join(chars)
        try:
            decode(candidate)
        except PasswordError:
            continue
        found.add(candidate)
    return found


def test_syndromes_are_linear_over_groups() -> None:
    table = generator.syndrome_table()
    rng = random.Random(0)
    for _ in range(100):
        groups = [rng.randrange(64) for _ in range(PASSWORD_LENGTH)]
        expected = 0
        for position, group in enumerate(groups):
            expected ^= int(table[position, group])
        assert generator.checksum_syndrome(pack(groups)) == expected


def test_syndrome_table_is_read_only() -> None:
    table = generator.syndrome_table()

    with pytest.raises(ValueError):
        table[0, 0] = 1


def test_range_masks_track_straddling_fields() -> None:
    masks = generator.range_masks()

    # herb_count occupies the top four bits of group 13.
    assert masks.allowed[13, 0, 6 << 2]
    assert not masks.allowed[13, 0, 7 << 2]
    # key_count occupies the low four bits of group 14.
    assert not masks.allowed[14, 0, 7]
    # inventory_3 straddles groups 4 and 5.
    assert masks.carry_shift[4] == 4
    assert masks.carry_shift[0] == 6
    assert not masks.allowed[5, 3, 0b000011]
    assert masks.allowed[5, 2, 0b000011]
    assert masks.allowed[5, 3, 0b000010]


@pytest.mark.parametrize(
    "positions",
    [(0, 1), (4, 5), (13, 14), (18, 19), (9, 15)],
)
def test_generate_matches_brute_force(positions: Sequence[int]) -> None:
    pattern = _with_wildcards(PASSWORD_A, positions)
    expected = _brute_force(pattern)

    produced = generate(pattern, 64 * 64)

    assert len(produced) == len(set(produced))
    assert set(produced) == expected
    assert count_completions(pattern) == len(expected)
    assert PASSWORD_A in produced


def test_leading_wildcards_with_limit() -> None:
    pattern = "??" + PASSWORD_A[2:]

    produced = generate(pattern, 10)

    assert len(produced) == min(10, count_completions(pattern))
    assert len(set(produced)) == len(produced)
    for password in produced:
        assert password[2:] == PASSWORD_A[2:]
        decode(password)


def test_limit_caps_the_result_and_preserves_order() -> None:
    pattern = _with_wildcards(PASSWORD_A, (6, 7, 8))

    everything = generate(pattern, 64 ** 3)
    first = generate(pattern, 5)

    assert len(everything) == count_completions(pattern)
    assert first == everything[:5]


def test_zero_wildcards() -> None:
    assert generate(PASSWORD_A, 5) == [PASSWORD_A]
    assert generate(PASSWORD_A_BAD_CRC, 5) == []
    assert generate(PASSWORD_A_BAD_ITEM, 5) == []
    assert count_completions(PASSWORD_A) == 1
    assert count_completions(PASSWORD_A_BAD_ITEM) == 0


def test_all_wildcards() -> None:
    pattern = "?" * PASSWORD_LENGTH

    produced = generate(pattern, 3)

    assert len(set(produced)) == 3
    for password in produced:
        decode(password)
    assert count_completions(pattern) == generator.COUNT_CAP


def test_pattern_accepts_full_width_wildcards_and_whitespace() -> None:
    pattern = "？？ " + PASSWORD_A[2:10] + "　" + PASSWORD_A[10:]

    assert generate(pattern, 3) == generate("??" + PASSWORD_A[2:], 3)


@pytest.mark.parametrize("limit", [0, -1, True, 1.5])
def test_invalid_limits(limit: object) -> None:
    with pytest.raises(InvalidPatternError):
        generate(PASSWORD_A, limit)  # type: ignore[arg-type]


def test_invalid_patterns() -> None:
    with pytest.raises(PatternLengthError) as excinfo:
        generate("?" * (PASSWORD_LENGTH - 1), 1)
    assert isinstance(excinfo.value, InvalidLengthError)

    with pytest.raises(PatternSymbolError):
        generate("A" + "?" * (PASSWORD_LENGTH - 1), 1)

    with pytest.raises(InvalidPatternError):
        iter_generate("??")


def test_iter_generate_can_stop_early() -> None:
    passwords = iter_generate("??" + PASSWORD_A[2:])

    first = next(passwords)

    assert first[2:] == PASSWORD_A[2:]
    decode(first)


def test_pattern_helpers() -> None:
    pattern = generator.Pattern.parse("？？" + PASSWORD_A[2:])

    assert pattern.wildcards == (0, 1)
    assert str(pattern) == "??" + PASSWORD_A[2:]
    assert pattern.matches(PASSWORD_A)
    assert not pattern.matches(PASSWORD_A[:2] + PASSWORD_A_BAD_CRC[2:])
    assert not pattern.matches(PASSWORD_A[:-1])
    with pytest.raises(PatternLengthError):
        generator.Pattern((None,) * 3)


def test_rejected_candidates_are_logged_and_skipped(monkeypatch, caplog) -> None:
    def reject(password: str):
        raise ChecksumMismatchError(0x00, 0x0101)

    monkeypatch.setattr(generator, "decode", reject)

    with caplog.at_level(logging.ERROR, logger="dq1_password.generator"):
        assert generate(PASSWORD_A, 1) == []
    assert "rejected" in caplog.text

    with pytest.raises(GeneratorInconsistencyError):
        generate(PASSWORD_A, 1, config={"strict": True})

    assert generate(PASSWORD_A, 1, config=GeneratorConfig(verify=False)) == [PASSWORD_A]


def test_generator_config_validation() -> None:
    with pytest.raises(ValueError):
        GeneratorConfig(verify=False, strict=True)
    with pytest.raises(TypeError):
        generate(PASSWORD_A, 1, config=["strict"])  # type: ignore[arg-type]
    assert generate(PASSWORD_A, 1, config={"verify": True, "unused": 1}) == [PASSWORD_A]
