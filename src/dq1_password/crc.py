"""CRC-16 (polynomial 0x1021, MSB-first, zero initial value) used by the password checksum."""

from __future__ import annotations

from typing import Iterable, Tuple

CRC16_POLY = 0x1021
CRC16_INIT = 0x0000


def crc_update(crc: int, data: int, n_bits: int = 8) -> int:
    """Feed the low ``n_bits`` of ``data`` (``1 <= n_bits <= 8``) into ``crc``."""

    if not 1 <= n_bits <= 8:
        raise ValueError("n_bits must be in 1..=8")
    crc ^= (data & ((1 << n_bits) - 1)) << (16 - n_bits)
    for _ in range(n_bits):
        carry = crc & 0x8000
        crc = (crc << 1) & 0xFFFF
        if carry:
            crc ^= CRC16_POLY
    return crc


def _build_crc16_table() -> Tuple[int, ...]:
    return tuple(crc_update(0, byte, 8) for byte in range(256))


_CRC16_TABLE = _build_crc16_table()


def crc16_update(crc: int, data: Iterable[int]) -> int:
    for byte in data:
        crc = ((crc << 8) & 0xFFFF) ^ _CRC16_TABLE[((crc >> 8) ^ byte) & 0xFF]
    return crc


def crc16(data: Iterable[int]) -> int:
    """Return the CRC-16 of ``data`` starting from the zero register."""

    return crc16_update(CRC16_INIT, data)


__all__ = ["CRC16_INIT", "CRC16_POLY", "crc16", "crc16_update", "crc_update"]
