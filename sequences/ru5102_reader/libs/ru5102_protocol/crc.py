"""
CRC-16 calculation.

Reflected CRC-16 (polynomial 0x1021 bit-reversed to 0x8408), preset 0xFFFF,
no final XOR. The checksum is transmitted LSB first, so running the
calculation over a complete intact frame leaves a residue of zero.
"""

from typing import Union

from .constants import CRC_PRESET, CRC_POLYNOMIAL


class CRC16:
    """CRC-16 used by RU5102 frames."""

    @staticmethod
    def calculate(data: Union[bytes, bytearray, memoryview]) -> int:
        """
        Calculate CRC over data.

        Args:
            data: Bytes to checksum

        Returns:
            16-bit CRC value
        """
        crc = CRC_PRESET
        for byte in data:
            crc ^= byte
            for _ in range(8):
                if crc & 0x0001:
                    crc = (crc >> 1) ^ CRC_POLYNOMIAL
                else:
                    crc >>= 1
        return crc

    @staticmethod
    def to_bytes(crc: int) -> bytes:
        """Wire representation of a CRC (LSB first)."""
        return crc.to_bytes(2, "little")

    @classmethod
    def verify(cls, frame: Union[bytes, bytearray]) -> bool:
        """Check a complete frame including its trailing CRC."""
        return cls.calculate(frame) == 0


def crc16(data: Union[bytes, bytearray, memoryview]) -> int:
    """Shorthand for :meth:`CRC16.calculate`."""
    return CRC16.calculate(data)
