"""Common behaviour of extension metadata blocks."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import ClassVar, Iterable

from dovimeta.bitstream import BitReader, BitWriter, RpuError

MAX_12_BIT_VALUE = 4095


class ExtMetadataBlock(ABC):
    """An extension metadata block of a given level.

    Subclasses set ``LEVEL``, ``BYTES_SIZE`` and ``REQUIRED_BITS`` or override
    the matching methods when their size depends on their content.
    """

    LEVEL: ClassVar[int] = 0
    BYTES_SIZE: ClassVar[int] = 0
    REQUIRED_BITS: ClassVar[int] = 0

    def level(self) -> int:
        """The metadata level of the block."""
        return self.LEVEL

    def length_bytes(self) -> int:
        """Size of the block payload in bytes."""
        return self.BYTES_SIZE

    def length_bits(self) -> int:
        """Size of the block payload in bits, padding included."""
        return self.length_bytes() * 8

    def required_bits(self) -> int:
        """Number of payload bits carrying actual fields."""
        return self.REQUIRED_BITS

    def sort_key(self) -> tuple[int, int]:
        """Key used to order blocks within a DM data section."""
        return (self.level(), 0)

    @abstractmethod
    def write(self, writer: BitWriter) -> None:
        """Write the block fields to the bitstream."""

    def validate_correct_dm_data(self, allowed_levels: Iterable[int], version: str) -> None:
        """Raise if the block level is not allowed in the given CM version."""
        level = self.level()
        if level not in tuple(allowed_levels):
            raise RpuError(f"Metadata block level {level} is invalid for {version}")

    def validate_and_read_remaining(
        self,
        reader: BitReader,
        block_length: int,
        allowed_levels: Iterable[int],
        version: str,
    ) -> None:
        """Check the declared length and level, then consume the zero padding bits."""
        level = self.level()
        if block_length != self.length_bytes():
            raise RpuError(
                f"{version}: Invalid metadata block. Block level {level} "
                f"should have length {self.length_bytes()}"
            )

        self.validate_correct_dm_data(allowed_levels, version)

        for _ in range(self.length_bits() - self.required_bits()):
            if reader.read_bit():
                raise RpuError(f"{version}: ext_dm_alignment_zero_bit != 0")