"""RPU conversion modes and the RPU CRC-32 checksum."""

from __future__ import annotations

from enum import Enum

NUM_COMPONENTS = 3
MMR_MAX_COEFFS = 7
NLQ_NUM_PIVOTS = 2

_CRC32_POLY = 0x04C11DB7


def _build_crc_table() -> tuple[int, ...]:
    table = []
    for byte in range(256):
        crc = byte << 24
        for _ in range(8):
            crc = ((crc << 1) ^ _CRC32_POLY) if crc & 0x80000000 else (crc << 1)
            crc &= 0xFFFFFFFF
        table.append(crc)
    return tuple(table)


_CRC_TABLE = _build_crc_table()


def compute_crc32(data) -> int:
    """CRC-32/MPEG-2 checksum of ``data``."""
    crc = 0xFFFFFFFF
    for byte in bytes(data):
        crc = ((crc << 8) & 0xFFFFFFFF) ^ _CRC_TABLE[((crc >> 24) ^ byte) & 0xFF]
    return crc


_MODE_LABELS = {
    "LOSSLESS": "Lossless",
    "TO_MEL": "To MEL",
    "TO_81": "To 8.1",
    "TO_84": "To 8.4",
    "TO_81_MAPPING_PRESERVED": "To 8.1, preserving the mapping metadata",
}


class ConversionMode(Enum):
    """How an RPU is converted when it is rewritten."""

    LOSSLESS = 0
    TO_MEL = 1
    TO_81 = 2
    TO_84 = 3
    TO_81_MAPPING_PRESERVED = 4

    @classmethod
    def from_value(cls, mode: int) -> "ConversionMode":
        """Mode selected by a numeric command-line value; unknown values are lossless."""
        return {
            0: cls.LOSSLESS,
            1: cls.TO_MEL,
            2: cls.TO_81,
            3: cls.TO_81,
            4: cls.TO_84,
        }.get(mode, cls.LOSSLESS)

    def __str__(self) -> str:
        return _MODE_LABELS[self.name]