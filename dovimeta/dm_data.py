"""Display management extension metadata for CM v2.9 and CM v4.0 RPUs."""

from __future__ import annotations

import copy
from abc import ABC, abstractmethod
from collections import Counter
from dataclasses import dataclass, field
from typing import Callable, ClassVar, Mapping

from dovimeta.bitstream import BitReader, BitWriter, RpuError
from dovimeta.blocks.base import ExtMetadataBlock
from dovimeta.blocks.brightness import (
    ExtMetadataBlockLevel1,
    ExtMetadataBlockLevel3,
    ExtMetadataBlockLevel4,
    ExtMetadataBlockLevel6,
)
from dovimeta.blocks.display import (
    ExtMetadataBlockLevel5,
    ExtMetadataBlockLevel9,
    ExtMetadataBlockLevel10,
    ExtMetadataBlockLevel11,
)
from dovimeta.blocks.dm_mode import ExtMetadataBlockLevel254, ExtMetadataBlockLevel255
from dovimeta.blocks.trims import ExtMetadataBlockLevel2, ExtMetadataBlockLevel8

_BlockParser = Callable[[BitReader, int], ExtMetadataBlock]

_CMV29_LEVELS = (1, 2, 4, 5, 6, 255)
_CMV40_LEVELS = (3, 8, 9, 10, 11, 254)


@dataclass
class DmData(ABC):
    """A list of extension metadata blocks for one content mapping version.

    Concrete versions are :class:`CmV29DmData` and :class:`CmV40DmData`.
    """

    VERSION: ClassVar[str] = ""
    ALLOWED_BLOCK_LEVELS: ClassVar[tuple[int, ...]] = ()
    _PARSERS: ClassVar[Mapping[int, _BlockParser]] = {}

    num_ext_blocks: int = 0
    ext_metadata_blocks: list[ExtMetadataBlock] = field(default_factory=list)

    @classmethod
    def parse(cls, reader: BitReader) -> "DmData":
        """Read the block count, the alignment bits and every block."""
        num_ext_blocks = reader.read_ue()
        meta = cls(num_ext_blocks=num_ext_blocks)

        while not reader.is_aligned():
            if reader.read_bit():
                raise RpuError(f"{cls.VERSION}: dm_alignment_zero_bit != 0")

        for _ in range(num_ext_blocks):
            meta.parse_block(reader)

        return meta

    def parse_block(self, reader: BitReader) -> None:
        """Read one block and append it to the list."""
        ext_block_length = reader.read_ue()
        ext_block_level = reader.read_bits(8)

        parser = self._PARSERS.get(ext_block_level)
        if parser is None:
            if ext_block_level in _CMV29_LEVELS or ext_block_level in _CMV40_LEVELS:
                raise RpuError(
                    f"Invalid block level {ext_block_level} for {self.VERSION} RPU"
                )
            raise RpuError(
                f"{self.VERSION} - Unknown metadata block found: Level {ext_block_level}, "
                f"length {ext_block_length}, please open an issue."
            )

        block = parser(reader, ext_block_length)
        block.validate_and_read_remaining(
            reader, ext_block_length, self.ALLOWED_BLOCK_LEVELS, self.VERSION
        )
        self.ext_metadata_blocks.append(block)

    def sort_blocks(self) -> None:
        """Order the blocks by their sort key."""
        self.ext_metadata_blocks.sort(key=lambda block: block.sort_key())

    def update_extension_block_info(self) -> None:
        """Refresh the block count and the block order."""
        self.num_ext_blocks = len(self.ext_metadata_blocks)
        self.sort_blocks()

    def add_block(self, block: ExtMetadataBlock) -> None:
        """Add a block whose level is allowed for this version."""
        level = block.level()
        if level not in self.ALLOWED_BLOCK_LEVELS:
            raise RpuError(f"Metadata block level {level} is invalid for {self.VERSION}")
        self.ext_metadata_blocks.append(block)
        self.update_extension_block_info()

    def remove_level(self, level: int) -> None:
        """Remove every block of the given level."""
        self.ext_metadata_blocks = [
            block for block in self.ext_metadata_blocks if block.level() != level
        ]
        self.update_extension_block_info()

    def write(self, writer: BitWriter) -> None:
        """Write the block count, the alignment bits and every block."""
        writer.write_ue(self.num_ext_blocks)
        writer.byte_align()

        for block in self.ext_metadata_blocks:
            remaining_bits = block.length_bits() - block.required_bits()
            writer.write_ue(block.length_bytes())
            writer.write_bits(block.level(), 8)
            block.write(writer)
            for _ in range(remaining_bits):
                writer.write_bit(False)

    def _replace_or_add(self, block: ExtMetadataBlock, same: Callable[[ExtMetadataBlock], bool]) -> None:
        new_block = copy.copy(block)
        blocks = self.ext_metadata_blocks
        index = next((i for i, b in enumerate(blocks) if same(b)), None)
        if index is None:
            blocks.append(new_block)
        else:
            blocks[index] = new_block
        self.update_extension_block_info()

    def _level_counts(self) -> Counter:
        return Counter(block.level() for block in self.ext_metadata_blocks)

    def _check_counts(self, counts: Counter, limits: Mapping[int, int]) -> None:
        for level, limit in limits.items():
            if counts[level] > limit:
                amount = "one" if limit == 1 else str(limit)
                plural = "block" if limit == 1 else "blocks"
                raise RpuError(
                    f"{self.VERSION}: There must be at most {amount} "
                    f"L{level} metadata {plural}"
                )

    @abstractmethod
    def validate(self) -> None:
        """Check the block counts against the specification."""


def _simple(parse: Callable[[BitReader], ExtMetadataBlock]) -> _BlockParser:
    return lambda reader, _length: parse(reader)


@dataclass
class CmV29DmData(DmData):
    """CM v2.9 metadata: levels 1, 2, 4, 5, 6 and 255."""

    VERSION: ClassVar[str] = "CM v2.9"
    ALLOWED_BLOCK_LEVELS: ClassVar[tuple[int, ...]] = _CMV29_LEVELS
    _PARSERS: ClassVar[Mapping[int, _BlockParser]] = {
        1: _simple(ExtMetadataBlockLevel1.parse),
        2: _simple(ExtMetadataBlockLevel2.parse),
        4: _simple(ExtMetadataBlockLevel4.parse),
        5: _simple(ExtMetadataBlockLevel5.parse),
        6: _simple(ExtMetadataBlockLevel6.parse),
        255: _simple(ExtMetadataBlockLevel255.parse),
    }

    def replace_level2_block(self, block: ExtMetadataBlockLevel2) -> None:
        """Replace the L2 block with the same target, or add it."""
        self._replace_or_add(
            block,
            lambda b: isinstance(b, ExtMetadataBlockLevel2)
            and b.target_max_pq == block.target_max_pq,
        )

    def validate(self) -> None:
        """Check allowed levels and block counts.

        The specification asks for one block each of L1, L4, L5, L6 and L255,
        but only upper bounds are enforced.
        """
        counts = self._level_counts()
        if any(level not in self.ALLOWED_BLOCK_LEVELS for level in counts):
            raise RpuError(
                f"{self.VERSION}: Only allowed blocks level 1, 2, 4, 5, 6, and 255"
            )
        self._check_counts(counts, {1: 1, 2: 8, 255: 1, 4: 1, 5: 1, 6: 1})


@dataclass
class CmV40DmData(DmData):
    """CM v4.0 metadata: levels 3, 8, 9, 10, 11 and 254."""

    VERSION: ClassVar[str] = "CM v4.0"
    ALLOWED_BLOCK_LEVELS: ClassVar[tuple[int, ...]] = _CMV40_LEVELS
    _PARSERS: ClassVar[Mapping[int, _BlockParser]] = {
        3: _simple(ExtMetadataBlockLevel3.parse),
        8: ExtMetadataBlockLevel8.parse,
        9: ExtMetadataBlockLevel9.parse,
        10: ExtMetadataBlockLevel10.parse,
        11: _simple(ExtMetadataBlockLevel11.parse),
        254: _simple(ExtMetadataBlockLevel254.parse),
    }

    def replace_level8_block(self, block: ExtMetadataBlockLevel8) -> None:
        """Replace the L8 block with the same target display, or add it."""
        self._replace_or_add(
            block,
            lambda b: isinstance(b, ExtMetadataBlockLevel8)
            and b.target_display_index == block.target_display_index,
        )

    def replace_level10_block(self, block: ExtMetadataBlockLevel10) -> None:
        """Replace the L10 block with the same target display, or add it."""
        self._replace_or_add(
            block,
            lambda b: isinstance(b, ExtMetadataBlockLevel10)
            and b.target_display_index == block.target_display_index,
        )

    def validate(self) -> None:
        """Check allowed levels and block counts; exactly one L254 is required."""
        counts = self._level_counts()
        if any(level not in self.ALLOWED_BLOCK_LEVELS for level in counts):
            raise RpuError(
                f"{self.VERSION}: Only allowed blocks level 3, 8, 9, 10, 11 and 254"
            )
        if counts[254] != 1:
            raise RpuError(f"{self.VERSION}: There must be one L254 metadata block")
        self._check_counts(counts, {3: 1, 8: 5, 9: 1, 10: 4, 11: 1})

    @classmethod
    def new_with_l254_402(cls) -> "CmV40DmData":
        """Metadata holding only the CM v4.0.2 L254 block."""
        return cls(
            num_ext_blocks=1,
            ext_metadata_blocks=[ExtMetadataBlockLevel254.cmv402_default()],
        )

    @classmethod
    def new_with_custom_l254(cls, level254: ExtMetadataBlockLevel254) -> "CmV40DmData":
        """Metadata holding only a copy of the given L254 block."""
        return cls(num_ext_blocks=1, ext_metadata_blocks=[copy.copy(level254)])