"""Extension metadata blocks of unknown level."""

from __future__ import annotations

from dataclasses import dataclass

from dovimeta.bitstream import BitReader, BitWriter, RpuError
from dovimeta.blocks.base import ExtMetadataBlock


@dataclass
class ReservedExtMetadataBlock(ExtMetadataBlock):
    """A block of an unknown level, kept as raw bits."""

    ext_block_length: int = 0
    ext_block_level: int = 0
    data: tuple[bool, ...] = ()

    @classmethod
    def parse(
        cls, reader: BitReader, ext_block_length: int, ext_block_level: int
    ) -> "ReservedExtMetadataBlock":
        """Read ``ext_block_length`` bytes of raw payload."""
        data = tuple(reader.read_bit() for _ in range(8 * ext_block_length))
        return cls(ext_block_length, ext_block_level, data)

    def level(self) -> int:
        return 0

    def length_bytes(self) -> int:
        return self.ext_block_length

    def required_bits(self) -> int:
        return len(self.data)

    def write(self, writer: BitWriter) -> None:
        raise RpuError("Cannot write reserved block")