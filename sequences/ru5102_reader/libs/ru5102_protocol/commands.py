"""
Request definitions.

Each request knows its command code, how to serialize its payload, which
response sizes it accepts and how to parse the response payload.
"""

import struct
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import ClassVar, Generic, Optional, TypeVar

from .constants import READER_INFO_SIZE, Command, MemoryBank
from .exceptions import EncodingError, ResponseSizeError
from .models import AddressSegment, DeviceInformation, InventoryBatch, MemoryReadResult

TResponse = TypeVar("TResponse")


def _byte(value: int, name: str) -> int:
    """Check a value fits a single unsigned byte."""
    if not 0 <= value <= 0xFF:
        raise EncodingError(f"{name} does not fit in one byte: {value}")
    return value


class Request(ABC, Generic[TResponse]):
    """Base class for reader requests."""

    command: ClassVar[Command]

    def encode_payload(self) -> bytes:
        """Request payload (empty by default)."""
        return b""

    def validate_response_size(self, size: int) -> None:
        """Reject a response payload size before it is read (accepts all by default)."""
        return None

    @abstractmethod
    def parse_response(self, payload: bytes) -> TResponse:
        ...

    def is_final(self, response: TResponse) -> bool:
        """Whether the response completes the exchange."""
        return True


@dataclass(frozen=True)
class GetReaderInformation(Request[DeviceInformation]):
    """Query firmware version, frequency range, power and scan time."""

    command: ClassVar[Command] = Command.GET_READER_INFORMATION

    def validate_response_size(self, size: int) -> None:
        if size != READER_INFO_SIZE:
            raise ResponseSizeError(self.command, size, expected=READER_INFO_SIZE)

    def parse_response(self, payload: bytes) -> DeviceInformation:
        return DeviceInformation.from_bytes(payload)


@dataclass(frozen=True)
class Inventory(Request[InventoryBatch]):
    """
    Scan for tags in the field.

    The reader answers with one or more frames; subtypes 3 and 4 announce
    that more frames follow. When tid_address is given its offset and length
    are sent as raw bytes, otherwise the reader uses its default window.
    """

    command: ClassVar[Command] = Command.INVENTORY
    tid_address: Optional[AddressSegment] = None

    def encode_payload(self) -> bytes:
        if self.tid_address is None:
            return b""
        return bytes([
            _byte(self.tid_address.offset, "TID address offset"),
            _byte(self.tid_address.length, "TID address length"),
        ])

    def parse_response(self, payload: bytes) -> InventoryBatch:
        return InventoryBatch.from_bytes(payload)

    def is_final(self, response: InventoryBatch) -> bool:
        return response.scan_finished


@dataclass(frozen=True)
class ReadMemory(Request[MemoryReadResult]):
    """
    Read words from one memory bank of a singulated tag.

    Payload: [ENum][EPC...][Mem][WordPtr][Num][Pwd x4 LSB first]
    """

    command: ClassVar[Command] = Command.READ_MEMORY
    tag: str
    password: int
    bank: MemoryBank
    segment: AddressSegment

    def encode_payload(self) -> bytes:
        if not isinstance(self.tag, str) or any(c.isspace() for c in self.tag):
            raise EncodingError(f"Tag ID is not valid hex: {self.tag!r}")
        try:
            tag_data = bytes.fromhex(self.tag)
        except ValueError as e:
            raise EncodingError(f"Tag ID is not valid hex: {self.tag!r}") from e
        if len(tag_data) % 2 != 0:
            raise EncodingError(f"Tag ID must be a two-byte multiple, got {len(tag_data)} bytes")

        if self.segment.length % 4 != 0:
            raise EncodingError(
                f"Segment length must be a multiple of 4, got {self.segment.length}"
            )
        if not 0 <= self.password <= 0xFFFFFFFF:
            raise EncodingError(f"Password must be a 32-bit unsigned value, got {self.password}")
        try:
            bank = MemoryBank(self.bank)
        except ValueError as e:
            raise EncodingError(f"Unknown memory bank {self.bank}") from e

        return (
            bytes([_byte(len(tag_data) // 2, "Tag word count")])
            + tag_data
            + bytes([
                bank,
                _byte(self.segment.offset, "Segment offset"),
                _byte(self.segment.length // 4, "Segment word count"),
            ])
            + struct.pack('<I', self.password)
        )

    def validate_response_size(self, size: int) -> None:
        if size < 1:
            raise ResponseSizeError(self.command, size, minimum=1)

    def parse_response(self, payload: bytes) -> MemoryReadResult:
        return MemoryReadResult.from_bytes(payload)
