"""Display management mode blocks: levels 254 and 255."""

from __future__ import annotations

from dataclasses import dataclass, fields

from dovimeta.bitstream import BitReader, BitWriter
from dovimeta.blocks.base import ExtMetadataBlock


@dataclass
class ExtMetadataBlockLevel254(ExtMetadataBlock):
    """DM mode and version, present in CM v4.0."""

    LEVEL = 254
    BYTES_SIZE = 2
    REQUIRED_BITS = 16

    dm_mode: int = 0
    dm_version_index: int = 0

    @classmethod
    def parse(cls, reader: BitReader) -> "ExtMetadataBlockLevel254":
        return cls(reader.read_bits(8), reader.read_bits(8))

    def write(self, writer: BitWriter) -> None:
        writer.write_bits(self.dm_mode, 8)
        writer.write_bits(self.dm_version_index, 8)

    @classmethod
    def cmv402_default(cls) -> "ExtMetadataBlockLevel254":
        """The block used for CM v4.0.2 metadata."""
        return cls(dm_mode=0, dm_version_index=2)


@dataclass
class ExtMetadataBlockLevel255(ExtMetadataBlock):
    """DM run mode and debugging values, optionally present in CM v2.9."""

    LEVEL = 255
    BYTES_SIZE = 6
    REQUIRED_BITS = 48

    dm_run_mode: int = 0
    dm_run_version: int = 0
    dm_debug0: int = 0
    dm_debug1: int = 0
    dm_debug2: int = 0
    dm_debug3: int = 0

    @classmethod
    def parse(cls, reader: BitReader) -> "ExtMetadataBlockLevel255":
        return cls(*(reader.read_bits(8) for _ in range(6)))

    def write(self, writer: BitWriter) -> None:
        for field in fields(self):
            writer.write_bits(getattr(self, field.name), 8)