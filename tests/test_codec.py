from __future__ import annotations

import random

import pytest

from dq1_password import GameState, decode, encode
from dq1_password.errors import (
    ChecksumMismatchError,
    FieldOutOfRangeError,
    InvalidLengthError,
    UnknownSymbolError,
)
from dq1_password.symbols import PASSWORD_ALPHABET

from tests.password_fixtures import (
    DEFAULT_PASSWORD,
    PASSWORD_A,
    PASSWORD_A_BAD_CRC,
    PASSWORD_A_BAD_ITEM,
    STATE_A,
    random_state,
)


def test_default_state_reference_password() -> None:
    assert encode(GameState()) == DEFAULT_PASSWORD
    assert decode(DEFAULT_PASSWORD) == GameState()


def test_reference_password_a() -> None:
    state = decode(PASSWORD_A)

    assert state == STATE_A
    assert state.hero_name == "しと゛-"
    assert state.hero_xp == 1234
    assert state.purse == 5678
    assert state.inventory == (1, 2, 3, 4, 5, 6, 7, 8)
    assert encode(state) == PASSWORD_A


def test_encode_normalises_the_hero_name() -> None:
    assert encode(STATE_A.replace(hero_name="しどー")) == PASSWORD_A


def test_decode_ignores_whitespace() -> None:
    spaced = f"{PASSWORD_A[:5]} {PASSWORD_A[5:12]}　{PASSWORD_A[12:]}"

    assert decode(spaced) == STATE_A


def test_checksum_valid_password_with_unknown_item() -> None:
    with pytest.raises(FieldOutOfRangeError) as excinfo:
        decode(PASSWORD_A_BAD_ITEM)
    assert excinfo.value.field == "inventory_7"
    assert excinfo.value.value == 15


def test_checksum_mismatch() -> None:
    with pytest.raises(ChecksumMismatchError) as excinfo:
        decode(PASSWORD_A_BAD_CRC)
    assert excinfo.value.expected != excinfo.value.actual & 0xFF


@pytest.mark.parametrize("password", [PASSWORD_A[:-1], PASSWORD_A + "あ"])
def test_wrong_lengths_are_rejected(password: str) -> None:
    with pytest.raises(InvalidLengthError):
        decode(password)


def test_unknown_symbols_are_rejected() -> None:
    with pytest.raises(UnknownSymbolError):
        decode(PASSWORD_A[:-1] + "ん")


def test_round_trip_random_states() -> None:
    rng = random.Random(0)
    for _ in range(200):
        state = random_state(rng)
        password = encode(state)
        assert len(password) == 20
        assert decode(password) == state


def test_every_change_to_the_last_symbol_is_detected() -> None:
    # The last symbol feeds only the final group, whose six bits map to
    # linearly independent checksum contributions.
    for symbol in PASSWORD_ALPHABET:
        if symbol == PASSWORD_A[-1]:
            continue
        with pytest.raises(ChecksumMismatchError):
            decode(PASSWORD_A[:-1] + symbol)


def test_single_symbol_substitutions_are_mostly_detected() -> None:
    accepted = 0
    total = 0
    for position in range(len(PASSWORD_A) - 1):
        for symbol in PASSWORD_ALPHABET:
            if symbol == PASSWORD_A[position]:
                continue
            total += 1
            candidate = PASSWORD_A[:position] + symbol + PASSWORD_A[position + 1 :]
            try:
                state = decode(candidate)
            except (ChecksumMismatchError, FieldOutOfRangeError):
                continue
            assert state != STATE_A
            accepted += 1

    # An 8-bit check lets roughly 1 in 256 substitutions through.
    assert accepted < total // 10
