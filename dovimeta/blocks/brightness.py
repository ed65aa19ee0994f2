"""Brightness related metadata blocks: levels 1, 3, 4 and 6."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from dovimeta.bitstream import BitReader, BitWriter, RpuError
from dovimeta.blocks.base import MAX_12_BIT_VALUE, ExtMetadataBlock

L1_MIN_PQ_MAX_VALUE = 12
L1_MAX_PQ_MIN_VALUE = 2081
L1_MAX_PQ_MAX_VALUE = 4095
L1_AVG_PQ_MIN_VALUE = 819
L1_AVG_PQ_MIN_VALUE_CMV40 = 1229

MAX_PQ_LUMINANCE = 10_000


class CmVersion(Enum):
    """Content mapping version."""

    V29 = "V29"
    V40 = "V40"


def _clamp(value: int, low: int, high: int) -> int:
    return max(low, min(value, high))


def _ensure_at_most(name: str, value: int, limit: int) -> None:
    if value > limit:
        raise RpuError(f"{name} must be at most {limit}, got {value}")


@dataclass
class ExtMetadataBlockLevel1(ExtMetadataBlock):
    """Statistical analysis of the frame: min, max and average brightness."""

    LEVEL = 1
    BYTES_SIZE = 5
    REQUIRED_BITS = 36

    min_pq: int = 0
    max_pq: int = 0
    avg_pq: int = 0

    @classmethod
    def parse(cls, reader: BitReader) -> "ExtMetadataBlockLevel1":
        return cls(reader.read_bits(12), reader.read_bits(12), reader.read_bits(12))

    def write(self, writer: BitWriter) -> None:
        self.validate()
        writer.write_bits(self.min_pq, 12)
        writer.write_bits(self.max_pq, 12)
        writer.write_bits(self.avg_pq, 12)

    def validate(self) -> None:
        _ensure_at_most("min_pq", self.min_pq, L1_MAX_PQ_MAX_VALUE)
        _ensure_at_most("max_pq", self.max_pq, L1_MAX_PQ_MAX_VALUE)
        _ensure_at_most("avg_pq", self.avg_pq, L1_MAX_PQ_MAX_VALUE)

    @classmethod
    def from_stats_cm_version(
        cls, min_pq: int, max_pq: int, avg_pq: int, cm_version: CmVersion
    ) -> "ExtMetadataBlockLevel1":
        """A block built from frame statistics, clamped to valid values."""
        block = cls(min_pq, max_pq, avg_pq)
        block.clamp_values_cm_version(cm_version)
        return block

    def clamp_values_cm_version(self, cm_version: CmVersion) -> None:
        """Clamp the values to the ranges allowed by ``cm_version``."""
        avg_min_value = (
            L1_AVG_PQ_MIN_VALUE if cm_version is CmVersion.V29 else L1_AVG_PQ_MIN_VALUE_CMV40
        )
        self.min_pq = _clamp(self.min_pq, 0, L1_MIN_PQ_MAX_VALUE)
        self.max_pq = _clamp(self.max_pq, L1_MAX_PQ_MIN_VALUE, L1_MAX_PQ_MAX_VALUE)
        self.avg_pq = _clamp(self.avg_pq, avg_min_value, self.max_pq - 1)


@dataclass
class ExtMetadataBlockLevel3(ExtMetadataBlock):
    """Offsets applied to the level 1 values."""

    LEVEL = 3
    BYTES_SIZE = 5
    REQUIRED_BITS = 36

    min_pq_offset: int = 2048
    max_pq_offset: int = 2048
    avg_pq_offset: int = 2048

    @classmethod
    def parse(cls, reader: BitReader) -> "ExtMetadataBlockLevel3":
        return cls(reader.read_bits(12), reader.read_bits(12), reader.read_bits(12))

    def write(self, writer: BitWriter) -> None:
        self.validate()
        writer.write_bits(self.min_pq_offset, 12)
        writer.write_bits(self.max_pq_offset, 12)
        writer.write_bits(self.avg_pq_offset, 12)

    def validate(self) -> None:
        _ensure_at_most("min_pq_offset", self.min_pq_offset, MAX_12_BIT_VALUE)
        _ensure_at_most("max_pq_offset", self.max_pq_offset, MAX_12_BIT_VALUE)
        _ensure_at_most("avg_pq_offset", self.avg_pq_offset, MAX_12_BIT_VALUE)


@dataclass
class ExtMetadataBlockLevel4(ExtMetadataBlock):
    """Temporal stability anchor."""

    LEVEL = 4
    BYTES_SIZE = 3
    REQUIRED_BITS = 24

    anchor_pq: int = 0
    anchor_power: int = 0

    @classmethod
    def parse(cls, reader: BitReader) -> "ExtMetadataBlockLevel4":
        return cls(reader.read_bits(12), reader.read_bits(12))

    def write(self, writer: BitWriter) -> None:
        self.validate()
        writer.write_bits(self.anchor_pq, 12)
        writer.write_bits(self.anchor_power, 12)

    def validate(self) -> None:
        _ensure_at_most("anchor_pq", self.anchor_pq, MAX_12_BIT_VALUE)
        _ensure_at_most("anchor_power", self.anchor_power, MAX_12_BIT_VALUE)


@dataclass
class ExtMetadataBlockLevel6(ExtMetadataBlock):
    """ST2086/HDR10 fallback metadata."""

    LEVEL = 6
    BYTES_SIZE = 8
    REQUIRED_BITS = 64

    max_display_mastering_luminance: int = 0
    min_display_mastering_luminance: int = 0
    max_content_light_level: int = 0
    max_frame_average_light_level: int = 0

    @classmethod
    def parse(cls, reader: BitReader) -> "ExtMetadataBlockLevel6":
        return cls(*(reader.read_bits(16) for _ in range(4)))

    def _fields(self) -> tuple[tuple[str, int], ...]:
        return (
            ("max_display_mastering_luminance", self.max_display_mastering_luminance),
            ("min_display_mastering_luminance", self.min_display_mastering_luminance),
            ("max_content_light_level", self.max_content_light_level),
            ("max_frame_average_light_level", self.max_frame_average_light_level),
        )

    def write(self, writer: BitWriter) -> None:
        self.validate()
        for _, value in self._fields():
            writer.write_bits(value, 16)

    def validate(self) -> None:
        for name, value in self._fields():
            _ensure_at_most(name, value, MAX_PQ_LUMINANCE)

    def source_meta_from_l6(self) -> tuple[int, int]:
        """Source min and max PQ codes derived from the mastering luminance."""
        mdl_min = self.min_display_mastering_luminance
        if mdl_min <= 10:
            source_min_pq = 7
        elif mdl_min == 50:
            source_min_pq = 62
        else:
            source_min_pq = 0

        source_max_pq = {1000: 3079, 2000: 3388, 4000: 3696, 10000: 4095}.get(
            self.max_display_mastering_luminance, 3079
        )
        return source_min_pq, source_max_pq