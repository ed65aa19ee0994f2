"""Display related metadata blocks: levels 5, 9, 10 and 11."""

from __future__ import annotations

from dataclasses import dataclass

from dovimeta.bitstream import BitReader, BitWriter, RpuError
from dovimeta.blocks.base import ExtMetadataBlock
from dovimeta.blocks.brightness import MAX_PQ_LUMINANCE
from dovimeta.primaries import ColorPrimaries, MasteringDisplayPrimaries

MAX_RESOLUTION_13_BITS = 8191
MAX_WHITEPOINT_VALUE = 15
CUSTOM_PRIMARY_INDEX = 255

PRESET_TARGET_DISPLAYS: tuple[int, ...] = (1, 16, 18, 21, 27, 28, 37, 38, 42, 48, 49)

PREDEFINED_REALDEVICE_PRIMARIES: tuple[tuple[float, ...], ...] = (
    (0.693, 0.304, 0.208, 0.761, 0.1467, 0.0527, 0.3127, 0.329),
    (0.6867, 0.3085, 0.231, 0.69, 0.1489, 0.0638, 0.3127, 0.329),
    (0.6781, 0.3189, 0.2365, 0.7048, 0.141, 0.0489, 0.3127, 0.329),
    (0.68, 0.32, 0.265, 0.69, 0.15, 0.06, 0.3127, 0.329),
    (0.7042, 0.294, 0.2271, 0.725, 0.1416, 0.0516, 0.3127, 0.329),
    (0.6745, 0.310, 0.2212, 0.7109, 0.152, 0.0619, 0.3127, 0.329),
    (0.6805, 0.3191, 0.2522, 0.6702, 0.1397, 0.0554, 0.3127, 0.329),
    (0.6838, 0.3085, 0.2709, 0.6378, 0.1478, 0.0589, 0.3127, 0.329),
    (0.6753, 0.3193, 0.2636, 0.6835, 0.1521, 0.0627, 0.3127, 0.329),
    (0.6981, 0.2898, 0.1814, 0.7189, 0.1517, 0.0567, 0.3127, 0.329),
)

_PRIMARY_SUFFIXES = (
    "red_x",
    "red_y",
    "green_x",
    "green_y",
    "blue_x",
    "blue_y",
    "white_x",
    "white_y",
)
_L9_PRIMARY_FIELDS = tuple(f"source_primary_{s}" for s in _PRIMARY_SUFFIXES)
_L10_PRIMARY_FIELDS = tuple(f"target_primary_{s}" for s in _PRIMARY_SUFFIXES)

_L9_REQUIRED_BITS = {1: 8, 17: 136}
_L10_REQUIRED_BITS = {5: 40, 21: 168}


def _require(condition: bool, message: str) -> None:
    if not condition:
        raise RpuError(message)


@dataclass
class ExtMetadataBlockLevel5(ExtMetadataBlock):
    """Active area of the picture (letterbox offsets)."""

    LEVEL = 5
    BYTES_SIZE = 7
    REQUIRED_BITS = 52

    active_area_left_offset: int = 0
    active_area_right_offset: int = 0
    active_area_top_offset: int = 0
    active_area_bottom_offset: int = 0

    @classmethod
    def parse(cls, reader: BitReader) -> "ExtMetadataBlockLevel5":
        return cls(*(reader.read_bits(13) for _ in range(4)))

    def write(self, writer: BitWriter) -> None:
        self.validate()
        for value in self.offsets():
            writer.write_bits(value, 13)

    def validate(self) -> None:
        for name, value in zip(("left", "right", "top", "bottom"), self.offsets()):
            _require(
                value <= MAX_RESOLUTION_13_BITS,
                f"active area {name} offset must be at most "
                f"{MAX_RESOLUTION_13_BITS}, got {value}",
            )

    def offsets(self) -> tuple[int, int, int, int]:
        """The left, right, top and bottom offsets."""
        return (
            self.active_area_left_offset,
            self.active_area_right_offset,
            self.active_area_top_offset,
            self.active_area_bottom_offset,
        )

    def set_offsets(self, left: int, right: int, top: int, bottom: int) -> None:
        """Replace all four offsets."""
        self.active_area_left_offset = left
        self.active_area_right_offset = right
        self.active_area_top_offset = top
        self.active_area_bottom_offset = bottom

    def crop(self) -> None:
        """Reset all offsets to zero."""
        self.set_offsets(0, 0, 0, 0)

    @classmethod
    def from_offsets(
        cls, left: int, right: int, top: int, bottom: int
    ) -> "ExtMetadataBlockLevel5":
        return cls(left, right, top, bottom)


@dataclass
class ExtMetadataBlockLevel9(ExtMetadataBlock):
    """Source (mastering) display colour primaries.

    The block length is 1 (preset index only) or 17 (custom primaries).
    """

    LEVEL = 9

    length: int = 1
    source_primary_index: int = int(MasteringDisplayPrimaries.DCIP3D65)

    source_primary_red_x: int = 0
    source_primary_red_y: int = 0
    source_primary_green_x: int = 0
    source_primary_green_y: int = 0
    source_primary_blue_x: int = 0
    source_primary_blue_y: int = 0
    source_primary_white_x: int = 0
    source_primary_white_y: int = 0

    @classmethod
    def parse(cls, reader: BitReader, length: int) -> "ExtMetadataBlockLevel9":
        block = cls(length=length, source_primary_index=reader.read_bits(8))
        if length > 1:
            for name in _L9_PRIMARY_FIELDS:
                setattr(block, name, reader.read_bits(16))
        return block

    def write(self, writer: BitWriter) -> None:
        self.validate()
        writer.write_bits(self.source_primary_index, 8)
        if self.length > 1:
            for name in _L9_PRIMARY_FIELDS:
                writer.write_bits(getattr(self, name), 16)

    def validate(self) -> None:
        if self.length > 1:
            _require(
                self.source_primary_index == CUSTOM_PRIMARY_INDEX,
                "level 9: custom primaries require source_primary_index 255",
            )
            for name in _L9_PRIMARY_FIELDS:
                _require(getattr(self, name) > 0, f"level 9: {name} must be positive")
        else:
            _require(
                self.source_primary_index != CUSTOM_PRIMARY_INDEX,
                "level 9: source_primary_index 255 requires custom primaries",
            )

    def set_from_primaries(self, primaries: ColorPrimaries) -> None:
        """Copy custom primaries into the block."""
        for name, suffix in zip(_L9_PRIMARY_FIELDS, _PRIMARY_SUFFIXES):
            setattr(self, name, getattr(primaries, suffix))

    @classmethod
    def default_dci_p3(cls) -> "ExtMetadataBlockLevel9":
        """A preset block for DCI-P3 D65."""
        return cls(length=1, source_primary_index=int(MasteringDisplayPrimaries.DCIP3D65))

    def length_bytes(self) -> int:
        return self.length

    def required_bits(self) -> int:
        try:
            return _L9_REQUIRED_BITS[self.length]
        except KeyError:
            raise RpuError(f"Invalid level 9 block length: {self.length}") from None

    def sort_key(self) -> tuple[int, int]:
        return (self.level(), self.source_primary_index)

    def to_dict(self) -> dict[str, int]:
        """The fields present for this block length, in bitstream order."""
        if self.length not in _L9_REQUIRED_BITS:
            raise RpuError(f"Invalid level 9 block length: {self.length}")
        names = ["length", "source_primary_index"]
        if self.length > 1:
            names.extend(_L9_PRIMARY_FIELDS)
        return {name: getattr(self, name) for name in names}


@dataclass
class ExtMetadataBlockLevel10(ExtMetadataBlock):
    """Custom target display information.

    The block length is 5 (preset primaries index) or 21 (custom primaries).
    """

    LEVEL = 10

    length: int = 5
    target_display_index: int = 20
    target_max_pq: int = 2081
    target_min_pq: int = 0
    target_primary_index: int = 2

    target_primary_red_x: int = 0
    target_primary_red_y: int = 0
    target_primary_green_x: int = 0
    target_primary_green_y: int = 0
    target_primary_blue_x: int = 0
    target_primary_blue_y: int = 0
    target_primary_white_x: int = 0
    target_primary_white_y: int = 0

    @classmethod
    def parse(cls, reader: BitReader, length: int) -> "ExtMetadataBlockLevel10":
        block = cls(
            length=length,
            target_display_index=reader.read_bits(8),
            target_max_pq=reader.read_bits(12),
            target_min_pq=reader.read_bits(12),
            target_primary_index=reader.read_bits(8),
        )
        if length > 5:
            for name in _L10_PRIMARY_FIELDS:
                setattr(block, name, reader.read_bits(16))
        return block

    def write(self, writer: BitWriter) -> None:
        self.validate()
        writer.write_bits(self.target_display_index, 8)
        writer.write_bits(self.target_max_pq, 12)
        writer.write_bits(self.target_min_pq, 12)
        writer.write_bits(self.target_primary_index, 8)
        if self.length > 5:
            for name in _L10_PRIMARY_FIELDS:
                writer.write_bits(getattr(self, name), 16)

    def validate(self) -> None:
        _require(
            self.target_display_index not in PRESET_TARGET_DISPLAYS,
            f"level 10: target_display_index {self.target_display_index} is a preset display",
        )
        _require(
            self.target_max_pq <= MAX_PQ_LUMINANCE,
            f"level 10: target_max_pq must be at most {MAX_PQ_LUMINANCE}",
        )
        _require(
            self.target_min_pq <= MAX_PQ_LUMINANCE,
            f"level 10: target_min_pq must be at most {MAX_PQ_LUMINANCE}",
        )
        if self.length > 5:
            _require(
                self.target_primary_index == CUSTOM_PRIMARY_INDEX,
                "level 10: custom primaries require target_primary_index 255",
            )
            for name in _L10_PRIMARY_FIELDS:
                _require(getattr(self, name) > 0, f"level 10: {name} must be positive")
        else:
            _require(
                self.target_primary_index != CUSTOM_PRIMARY_INDEX,
                "level 10: target_primary_index 255 requires custom primaries",
            )

    def set_from_primaries(self, primaries: ColorPrimaries) -> None:
        """Copy custom primaries into the block."""
        for name, suffix in zip(_L10_PRIMARY_FIELDS, _PRIMARY_SUFFIXES):
            setattr(self, name, getattr(primaries, suffix))

    def length_bytes(self) -> int:
        return self.length

    def required_bits(self) -> int:
        try:
            return _L10_REQUIRED_BITS[self.length]
        except KeyError:
            raise RpuError(f"Invalid level 10 block length: {self.length}") from None

    def sort_key(self) -> tuple[int, int]:
        return (self.level(), self.target_display_index)

    def to_dict(self) -> dict[str, int]:
        """The fields present for this block length, in bitstream order."""
        if self.length not in _L10_REQUIRED_BITS:
            raise RpuError(f"Invalid level 10 block length: {self.length}")
        names = [
            "length",
            "target_display_index",
            "target_max_pq",
            "target_min_pq",
            "target_primary_index",
        ]
        if self.length > 5:
            names.extend(_L10_PRIMARY_FIELDS)
        return {name: getattr(self, name) for name in names}


@dataclass
class ExtMetadataBlockLevel11(ExtMetadataBlock):
    """Content type metadata."""

    LEVEL = 11
    BYTES_SIZE = 4
    REQUIRED_BITS = 32

    content_type: int = 0
    whitepoint: int = 0
    reference_mode_flag: bool = False
    reserved_byte2: int = 0
    reserved_byte3: int = 0

    @classmethod
    def parse(cls, reader: BitReader) -> "ExtMetadataBlockLevel11":
        block = cls(
            content_type=reader.read_bits(8),
            whitepoint=reader.read_bits(8),
            reserved_byte2=reader.read_bits(8),
            reserved_byte3=reader.read_bits(8),
        )
        if block.whitepoint > MAX_WHITEPOINT_VALUE:
            block.reference_mode_flag = True
            block.whitepoint -= MAX_WHITEPOINT_VALUE + 1
        return block

    def write(self, writer: BitWriter) -> None:
        self.validate()
        wp = self.whitepoint
        if self.reference_mode_flag:
            wp += MAX_WHITEPOINT_VALUE + 1
        writer.write_bits(self.content_type, 8)
        writer.write_bits(wp, 8)
        writer.write_bits(self.reserved_byte2, 8)
        writer.write_bits(self.reserved_byte3, 8)

    def validate(self) -> None:
        _require(self.content_type <= 15, f"level 11: content_type must be at most 15")
        _require(
            self.whitepoint <= MAX_WHITEPOINT_VALUE,
            f"level 11: whitepoint must be at most {MAX_WHITEPOINT_VALUE}",
        )
        _require(self.reserved_byte2 == 0, "level 11: reserved_byte2 must be 0")
        _require(self.reserved_byte3 == 0, "level 11: reserved_byte3 must be 0")

    @classmethod
    def default_reference_cinema(cls) -> "ExtMetadataBlockLevel11":
        """Cinema content, reference mode, D65 whitepoint."""
        return cls(content_type=1, whitepoint=0, reference_mode_flag=True)