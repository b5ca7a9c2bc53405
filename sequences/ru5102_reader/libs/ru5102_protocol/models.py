"""
Reader and tag data structures.

All multi-byte values use little-endian byte order.
"""

from dataclasses import dataclass, field
from typing import List, Tuple

from .constants import (
    BAND_BASE_MHZ, BAND_STEP_MHZ, FREQ_BAND_MASK, FREQ_INDEX_MASK,
    FINISHED_SUBTYPES, TAG_DATA_SUBTYPES, READER_INFO_SIZE,
    SCAN_TIME_UNIT_MS, TRANSCEIVER_ISO18000_6,
    InventorySubtype, ReadStatus,
)
from .exceptions import CapabilityError, EncodingError, FormatError


@dataclass(frozen=True)
class AddressSegment:
    """Memory window: offset and length, units depend on the command."""
    offset: int
    length: int

    def __post_init__(self):
        if self.offset < 0 or self.length < 0:
            raise EncodingError(
                f"Address segment must be non-negative, got ({self.offset}, {self.length})"
            )


def decode_band(max_index: int, min_index: int) -> int:
    """Band number carried in the top two bits of both frequency bytes."""
    return ((max_index & FREQ_BAND_MASK) >> 4) | (min_index >> 6)


def frequency_mhz(band: int, index: int) -> float:
    """
    Convert a frequency index byte to MHz.

    Args:
        band: Band number from decode_band()
        index: Raw index byte (band bits are masked off)

    Raises:
        FormatError: If band is not in the table
    """
    if not 0 <= band < len(BAND_BASE_MHZ):
        raise FormatError(f"Invalid band {band}")
    return BAND_BASE_MHZ[band] + BAND_STEP_MHZ[band] * (index & FREQ_INDEX_MASK)


@dataclass(frozen=True)
class DeviceInformation:
    """GetReaderInformation response."""
    firmware_version: Tuple[int, int]
    min_frequency_mhz: float
    max_frequency_mhz: float
    power_dbm: int
    inventory_scan_timeout: float     # seconds
    band: int = 0
    reader_type: int = 0              # meaning unknown, kept raw
    capabilities: int = 0

    @classmethod
    def from_bytes(cls, data: bytes) -> 'DeviceInformation':
        """
        Parse the 9-byte information payload.

        Layout: [reserved][fw major][fw minor][type][caps][max idx][min idx][power][scan time]

        Raises:
            FormatError: Reserved byte set or invalid band
            CapabilityError: Reader lacks ISO 18000-6B/6C support
        """
        if len(data) != READER_INFO_SIZE:
            raise FormatError(f"Reader information must be {READER_INFO_SIZE} bytes, got {len(data)}")

        reserved, major, minor, reader_type, caps, max_idx, min_idx, power, scan = data

        if reserved != 0:
            raise FormatError(f"Unexpected reserved value {reserved}")
        if not caps & TRANSCEIVER_ISO18000_6:
            raise CapabilityError(
                f"Reader does not support ISO 18000-6B or 6C (flags 0x{caps:02X})"
            )

        band = decode_band(max_idx, min_idx)
        return cls(
            firmware_version=(major, minor),
            min_frequency_mhz=frequency_mhz(band, min_idx),
            max_frequency_mhz=frequency_mhz(band, max_idx),
            power_dbm=power,
            inventory_scan_timeout=scan * SCAN_TIME_UNIT_MS / 1000,
            band=band,
            reader_type=reader_type,
            capabilities=caps,
        )

    @property
    def firmware(self) -> str:
        return f"{self.firmware_version[0]}.{self.firmware_version[1]}"

    def __repr__(self) -> str:
        return (f"DeviceInformation(fw={self.firmware}, "
                f"freq={self.min_frequency_mhz:.3f}-{self.max_frequency_mhz:.3f}MHz, "
                f"power={self.power_dbm}dBm, scan={self.inventory_scan_timeout}s)")


@dataclass(frozen=True)
class InventoryBatch:
    """One inventory response frame."""
    scan_finished: bool
    tags: Tuple[str, ...] = field(default_factory=tuple)

    @classmethod
    def from_bytes(cls, data: bytes) -> 'InventoryBatch':
        """
        Parse an inventory payload.

        Tag data subtypes: [subtype][count]{[len][id...]}*count
        End of scan: [0xFB]

        Raises:
            FormatError: Unknown subtype, truncated or trailing data
        """
        if not data:
            raise FormatError("Empty inventory response")

        subtype = data[0]
        if subtype == InventorySubtype.SCAN_END:
            if len(data) != 1:
                raise FormatError(
                    f"Unexpected data in subtype 0x{subtype:02X} ({data.hex(' ')})"
                )
            return cls(scan_finished=True)

        if subtype not in TAG_DATA_SUBTYPES:
            raise FormatError(f"Unexpected subtype 0x{subtype:02X}")
        if len(data) < 2:
            raise FormatError(f"Missing tag count in subtype 0x{subtype:02X}")

        count = data[1]
        tags: List[str] = []
        idx = 2
        for _ in range(count):
            if idx >= len(data):
                raise FormatError(f"Truncated tag list: {len(tags)} of {count} tags ({data.hex(' ')})")
            tag_len = data[idx]
            idx += 1
            if idx + tag_len > len(data):
                raise FormatError(f"Truncated tag ID: need {tag_len} bytes ({data.hex(' ')})")
            tags.append(data[idx:idx + tag_len].hex().upper())
            idx += tag_len

        if idx != len(data):
            raise FormatError(f"Unexpected data after tags ({data.hex(' ')})")

        return cls(scan_finished=subtype in FINISHED_SUBTYPES, tags=tuple(tags))


@dataclass(frozen=True)
class MemoryReadResult:
    """ReadMemory response."""
    status: int
    data: bytes = b""

    @classmethod
    def from_bytes(cls, data: bytes) -> 'MemoryReadResult':
        """Status byte followed by the words read."""
        if not data:
            raise FormatError("Empty read response")
        return cls(status=data[0], data=bytes(data[1:]))

    @property
    def success(self) -> bool:
        return self.status == ReadStatus.SUCCESS

    @property
    def status_name(self) -> str:
        return ReadStatus.name_of(self.status)

    def __repr__(self) -> str:
        return f"MemoryReadResult(status={self.status_name}, data={self.data.hex().upper()})"


@dataclass(frozen=True)
class ReadResult:
    """Outcome of a memory read as returned by the client."""
    success: bool
    data: bytes
