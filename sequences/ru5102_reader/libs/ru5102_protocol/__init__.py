"""
RU5102 Protocol - Python implementation of the RU5102 UHF RFID reader protocol.

This package provides:
- Protocol constants and command codes
- CRC-16 calculation
- Frame building and reading
- Request/response models
- Serial transport layer
- Request/response channel
- High-level protocol client
"""

from .constants import (
    DEFAULT_ADDRESS, DEFAULT_BAUDRATE, DEFAULT_TIMEOUT, MAX_PAYLOAD,
    Command, MemoryBank, ReadStatus, InventorySubtype
)
from .crc import CRC16, crc16
from .exceptions import (
    Ru5102ProtocolError, FrameError, ResponseSizeError, FormatError, CRCError,
    CapabilityError, EncodingError, TransportError, CancelledError,
    TimeoutError, NakError
)
from .cancellation import CancellationToken
from .frame import Frame, FrameBuilder, FrameReader
from .models import (
    AddressSegment, DeviceInformation, InventoryBatch,
    MemoryReadResult, ReadResult
)
from .commands import Request, GetReaderInformation, Inventory, ReadMemory
from .transport import BaseTransport, SerialTransport
from .channel import Channel
from .client import Ru5102Client

__version__ = "1.0.0"
__all__ = [
    # Constants
    "DEFAULT_ADDRESS", "DEFAULT_BAUDRATE", "DEFAULT_TIMEOUT", "MAX_PAYLOAD",
    "Command", "MemoryBank", "ReadStatus", "InventorySubtype",
    # CRC
    "CRC16", "crc16",
    # Exceptions
    "Ru5102ProtocolError", "FrameError", "ResponseSizeError", "FormatError",
    "CRCError", "CapabilityError", "EncodingError", "TransportError",
    "CancelledError", "TimeoutError", "NakError",
    # Cancellation
    "CancellationToken",
    # Frame
    "Frame", "FrameBuilder", "FrameReader",
    # Models
    "AddressSegment", "DeviceInformation", "InventoryBatch",
    "MemoryReadResult", "ReadResult",
    # Commands
    "Request", "GetReaderInformation", "Inventory", "ReadMemory",
    # Transport
    "BaseTransport", "SerialTransport",
    # Channel
    "Channel",
    # Client
    "Ru5102Client",
]
