"""Trim pass metadata blocks: levels 2 and 8."""

from __future__ import annotations

from dataclasses import dataclass

from dovimeta.bitstream import BitReader, BitWriter, RpuError
from dovimeta.blocks.base import MAX_12_BIT_VALUE, ExtMetadataBlock

_MS_WEIGHT_BITS = 13
_MS_WEIGHT_WRAP = 1 << _MS_WEIGHT_BITS

_L8_REQUIRED_BITS = {25: 200, 19: 152, 13: 104, 12: 92, 10: 80}

_L8_TRIM_FIELDS = (
    "trim_slope",
    "trim_offset",
    "trim_power",
    "trim_chroma_weight",
    "trim_saturation_gain",
    "ms_weight",
)
_L8_SATURATION_FIELDS = tuple(f"saturation_vector_field{i}" for i in range(6))
_L8_HUE_FIELDS = tuple(f"hue_vector_field{i}" for i in range(6))


def _ensure_12_bit(name: str, value: int) -> None:
    if value > MAX_12_BIT_VALUE:
        raise RpuError(f"{name} must be at most {MAX_12_BIT_VALUE}, got {value}")


@dataclass
class ExtMetadataBlockLevel2(ExtMetadataBlock):
    """Creative intent trim pass for one target display peak brightness."""

    LEVEL = 2
    BYTES_SIZE = 11
    REQUIRED_BITS = 85

    target_max_pq: int = 2081
    trim_slope: int = 2048
    trim_offset: int = 2048
    trim_power: int = 2048
    trim_chroma_weight: int = 2048
    trim_saturation_gain: int = 2048
    ms_weight: int = 2048

    _UNSIGNED_FIELDS = (
        "target_max_pq",
        "trim_slope",
        "trim_offset",
        "trim_power",
        "trim_chroma_weight",
        "trim_saturation_gain",
    )

    @classmethod
    def parse(cls, reader: BitReader) -> "ExtMetadataBlockLevel2":
        values = {name: reader.read_bits(12) for name in cls._UNSIGNED_FIELDS}
        ms_weight = reader.read_bits(_MS_WEIGHT_BITS)
        if ms_weight > MAX_12_BIT_VALUE:
            ms_weight -= _MS_WEIGHT_WRAP
        return cls(ms_weight=ms_weight, **values)

    def write(self, writer: BitWriter) -> None:
        self.validate()
        for name in self._UNSIGNED_FIELDS:
            writer.write_bits(getattr(self, name), 12)
        writer.write_signed_bits(self.ms_weight, _MS_WEIGHT_BITS)

    def validate(self) -> None:
        for name in self._UNSIGNED_FIELDS:
            _ensure_12_bit(name, getattr(self, name))
        if not -1 <= self.ms_weight <= MAX_12_BIT_VALUE:
            raise RpuError(
                f"ms_weight must be between -1 and {MAX_12_BIT_VALUE}, got {self.ms_weight}"
            )

    def sort_key(self) -> tuple[int, int]:
        return (self.level(), self.target_max_pq)


@dataclass
class ExtMetadataBlockLevel8(ExtMetadataBlock):
    """CM v4.0 trim pass for one target display.

    The block length is 10, 12, 13, 19 or 25 bytes; fields beyond the length
    keep their default values and are not written.
    """

    LEVEL = 8

    length: int = 10
    target_display_index: int = 1

    trim_slope: int = 2048
    trim_offset: int = 2048
    trim_power: int = 2048
    trim_chroma_weight: int = 2048
    trim_saturation_gain: int = 2048
    ms_weight: int = 2048

    target_mid_contrast: int = 2048
    clip_trim: int = 2048

    saturation_vector_field0: int = 128
    saturation_vector_field1: int = 128
    saturation_vector_field2: int = 128
    saturation_vector_field3: int = 128
    saturation_vector_field4: int = 128
    saturation_vector_field5: int = 128

    hue_vector_field0: int = 128
    hue_vector_field1: int = 128
    hue_vector_field2: int = 128
    hue_vector_field3: int = 128
    hue_vector_field4: int = 128
    hue_vector_field5: int = 128

    @classmethod
    def parse(cls, reader: BitReader, length: int) -> "ExtMetadataBlockLevel8":
        block = cls(length=length, target_display_index=reader.read_bits(8))
        for name in _L8_TRIM_FIELDS:
            setattr(block, name, reader.read_bits(12))
        if length > 10:
            block.target_mid_contrast = reader.read_bits(12)
        if length > 12:
            block.clip_trim = reader.read_bits(12)
        if length > 13:
            for name in _L8_SATURATION_FIELDS:
                setattr(block, name, reader.read_bits(8))
        if length > 19:
            for name in _L8_HUE_FIELDS:
                setattr(block, name, reader.read_bits(8))
        return block

    def write(self, writer: BitWriter) -> None:
        self.validate()
        writer.write_bits(self.target_display_index, 8)
        for name in _L8_TRIM_FIELDS:
            writer.write_bits(getattr(self, name), 12)
        if self.length > 10:
            writer.write_bits(self.target_mid_contrast, 12)
        if self.length > 12:
            writer.write_bits(self.clip_trim, 12)
        if self.length > 13:
            for name in _L8_SATURATION_FIELDS:
                writer.write_bits(getattr(self, name), 8)
        if self.length > 19:
            for name in _L8_HUE_FIELDS:
                writer.write_bits(getattr(self, name), 8)

    def validate(self) -> None:
        for name in (*_L8_TRIM_FIELDS, "target_mid_contrast", "clip_trim"):
            _ensure_12_bit(name, getattr(self, name))

    def length_bytes(self) -> int:
        return self.length

    def required_bits(self) -> int:
        try:
            return _L8_REQUIRED_BITS[self.length]
        except KeyError:
            raise RpuError(f"Invalid level 8 block length: {self.length}") from None

    def sort_key(self) -> tuple[int, int]:
        return (self.level(), self.target_display_index)

    def to_dict(self) -> dict[str, int]:
        """The fields present for this block length, in bitstream order."""
        if self.length not in _L8_REQUIRED_BITS:
            raise RpuError(f"Invalid level 8 block length: {self.length}")
        names = ["length", "target_display_index", *_L8_TRIM_FIELDS]
        if self.length > 10:
            names.append("target_mid_contrast")
        if self.length > 12:
            names.append("clip_trim")
        if self.length > 13:
            names.extend(_L8_SATURATION_FIELDS)
        if self.length > 19:
            names.extend(_L8_HUE_FIELDS)
        return {name: getattr(self, name) for name in names}