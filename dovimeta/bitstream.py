"""Bit-level reading and writing of RPU payloads."""

from __future__ import annotations

_MAX_UE_LEADING_ZEROS = 63


class RpuError(ValueError):
    """Raised when RPU data is malformed or a value is out of range."""


class BitReader:
    """Reads big-endian (MSB first) bit fields from a byte string."""

    def __init__(self, data) -> None:
        raw = bytes(data)
        self._total = len(raw) * 8
        self._value = int.from_bytes(raw, "big")
        self._pos = 0

    def _take(self, n: int) -> int:
        if n < 0:
            raise RpuError(f"Cannot read a negative number of bits: {n}")
        if self._pos + n > self._total:
            raise RpuError(
                f"Not enough data: requested {n} bits, {self.bits_remaining()} remaining"
            )
        shift = self._total - self._pos - n
        self._pos += n
        return (self._value >> shift) & ((1 << n) - 1)

    def read_bit(self) -> bool:
        """Read a single bit as a boolean."""
        return bool(self._take(1))

    def read_bits(self, n: int) -> int:
        """Read ``n`` bits as an unsigned integer."""
        return self._take(n)

    def read_ue(self) -> int:
        """Read an unsigned Exp-Golomb coded integer."""
        leading_zeros = 0
        while not self.read_bit():
            leading_zeros += 1
            if leading_zeros > _MAX_UE_LEADING_ZEROS:
                raise RpuError("Invalid Exp-Golomb code: too many leading zeros")
        return (1 << leading_zeros) - 1 + self._take(leading_zeros)

    def is_aligned(self) -> bool:
        """Whether the read position is on a byte boundary."""
        return self._pos % 8 == 0

    def bits_remaining(self) -> int:
        """Number of bits left to read."""
        return self._total - self._pos


class BitWriter:
    """Accumulates big-endian (MSB first) bit fields into bytes."""

    def __init__(self) -> None:
        self._value = 0
        self._length = 0

    def _push(self, value: int, n: int) -> None:
        self._value = (self._value << n) | value
        self._length += n

    def write_bit(self, bit) -> None:
        """Append a single bit."""
        self._push(1 if bit else 0, 1)

    def write_bits(self, value: int, n: int) -> None:
        """Append ``value`` as an unsigned ``n``-bit field."""
        value = int(value)
        if n < 0:
            raise RpuError(f"Cannot write a negative number of bits: {n}")
        if value < 0 or value >= (1 << n):
            raise RpuError(f"Value {value} does not fit in {n} unsigned bits")
        self._push(value, n)

    def write_signed_bits(self, value: int, n: int) -> None:
        """Append ``value`` as a two's complement ``n``-bit field."""
        value = int(value)
        if n <= 0:
            raise RpuError(f"Signed field needs at least one bit, got {n}")
        low, high = -(1 << (n - 1)), (1 << (n - 1)) - 1
        if not low <= value <= high:
            raise RpuError(f"Value {value} does not fit in {n} signed bits")
        self._push(value & ((1 << n) - 1), n)

    def write_ue(self, value: int) -> None:
        """Append ``value`` as an unsigned Exp-Golomb code."""
        value = int(value)
        if value < 0:
            raise RpuError(f"Exp-Golomb value must not be negative: {value}")
        code = value + 1
        width = code.bit_length()
        self._push(0, width - 1)
        self._push(code, width)

    def byte_align(self) -> None:
        """Pad with zero bits up to the next byte boundary."""
        self._push(0, -self._length % 8)

    def is_aligned(self) -> bool:
        """Whether the written length is a whole number of bytes."""
        return self._length % 8 == 0

    def __len__(self) -> int:
        return self._length

    def to_bytes(self) -> bytes:
        """The written bits, zero padded to a whole number of bytes."""
        pad = -self._length % 8
        total = self._length + pad
        return (self._value << pad).to_bytes(total // 8, "big")