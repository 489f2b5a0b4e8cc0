from __future__ import annotations

import struct

from .rational import DenominatorZeroError, Rational, RationalError

# u32 little-endian length of the numerator run
_HEADER = struct.Struct("<I")


class TruncatedError(RationalError):
    def __init__(self, message: str, *, size: int) -> None:
        self.size = size
        super().__init__(f"{message} ({size} bytes)")


def encode(value: Rational) -> bytes:
    """Serialize ``value`` as ``len(numerator) | numerator | denominator``.

    Both magnitudes are written little-endian with the minimal number of
    bytes; zero is written as a single zero byte.
    """
    numerator = _to_bytes_le(value.numerator)
    denominator = _to_bytes_le(value.denominator)
    return _HEADER.pack(len(numerator)) + numerator + denominator


def decode(data: bytes | bytearray | memoryview) -> Rational:
    """Parse the layout written by :func:`encode`.

    Trailing zero bytes in either run are accepted. They are the high-order
    end of a little-endian magnitude and do not change its value.
    """
    raw = bytes(data)
    if len(raw) < _HEADER.size:
        raise TruncatedError("missing length header", size=len(raw))

    (numerator_length,) = _HEADER.unpack_from(raw)
    numerator_end = _HEADER.size + numerator_length
    if len(raw) < numerator_end:
        raise TruncatedError(f"header announces {numerator_length} numerator bytes", size=len(raw))
    if len(raw) == numerator_end:
        raise TruncatedError("missing denominator bytes", size=len(raw))

    numerator = int.from_bytes(raw[_HEADER.size : numerator_end], "little")
    denominator = int.from_bytes(raw[numerator_end:], "little")
    if denominator == 0:
        raise DenominatorZeroError(numerator)

    return Rational(numerator, denominator)


def _to_bytes_le(value: int) -> bytes:
    return value.to_bytes(max(1, (value.bit_length() + 7) // 8), "little")


__all__ = ["TruncatedError", "decode", "encode"]
