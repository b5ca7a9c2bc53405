"""
Frame building and reading.

Frame Format: [LEN][ADR][CMD][PAYLOAD...][CRC-LSB][CRC-MSB]
- LEN: Number of bytes after LEN (ADR + CMD + PAYLOAD + CRC), i.e. payload + 4
- ADR: Reader address, fixed per connection
- CMD: Command code, echoed in the response
- PAYLOAD: Command-specific data (0-251 bytes)
- CRC: CRC-16 of LEN+ADR+CMD+PAYLOAD, LSB first

The same layout is used in both directions.
"""

import logging
from dataclasses import dataclass, field
from typing import Callable, Optional

from .cancellation import CancellationToken
from .constants import CRC_SIZE, FRAME_OVERHEAD, HEADER_SIZE, MAX_PAYLOAD, Command
from .crc import CRC16
from .exceptions import CRCError, EncodingError, FrameError
from .transport import BaseTransport

logger = logging.getLogger(__name__)

SizeValidator = Callable[[int], None]


@dataclass(frozen=True)
class Frame:
    """Protocol frame structure."""
    address: int
    command: int
    payload: bytes = field(default_factory=bytes)

    def __post_init__(self):
        if isinstance(self.payload, (list, tuple, bytearray)):
            object.__setattr__(self, "payload", bytes(self.payload))
        if len(self.payload) > MAX_PAYLOAD:
            raise EncodingError(
                f"Payload exceeds maximum size ({len(self.payload)} > {MAX_PAYLOAD})"
            )
        for name in ("address", "command"):
            value = getattr(self, name)
            if not 0 <= value <= 0xFF:
                raise EncodingError(f"Frame {name} out of range: {value}")

    @property
    def length(self) -> int:
        """Value of the LEN byte."""
        return len(self.payload) + FRAME_OVERHEAD

    def __repr__(self) -> str:
        return (
            f"Frame(address=0x{self.address:02X}, "
            f"command={Command.name_of(self.command)}, "
            f"payload={self.payload.hex(' ') if self.payload else '(empty)'})"
        )


class FrameBuilder:
    """Builds frames for transmission."""

    @staticmethod
    def build(frame: Frame) -> bytes:
        """
        Build complete frame with CRC.

        Args:
            frame: Frame object with address, command and payload

        Returns:
            Complete frame bytes ready for transmission
        """
        body = bytes([frame.length, frame.address, frame.command]) + frame.payload
        return body + CRC16.to_bytes(CRC16.calculate(body))

    @staticmethod
    def encode(address: int, command: int, payload: bytes = b"") -> bytes:
        """Build a frame from its parts."""
        return FrameBuilder.build(Frame(address, command, payload))


class FrameReader:
    """Reads and validates response frames from a transport."""

    def __init__(self, transport: BaseTransport, address: int):
        """
        Initialize frame reader.

        Args:
            transport: Open transport to read from
            address: Reader address every response must carry
        """
        self.transport = transport
        self.address = address

    def read(
        self,
        command: int,
        validate_size: Optional[SizeValidator] = None,
        token: Optional[CancellationToken] = None
    ) -> Frame:
        """
        Read one frame answering the given command.

        Args:
            command: Command of the outstanding request
            validate_size: Called with the payload size before the payload is read
            token: Cancellation token for blocking reads

        Returns:
            Validated Frame

        Raises:
            FrameError: Address/command mismatch or invalid length
            ResponseSizeError: Payload size rejected by validate_size
            CRCError: Frame checksum does not validate
            TransportError: Stream ended before the frame was complete
        """
        header = self.transport.read_exactly(HEADER_SIZE, token)
        length, address, received_cmd = header

        if address != self.address:
            raise FrameError(
                f"Unexpected address: expected 0x{self.address:02X}, "
                f"received 0x{address:02X}"
            )
        if received_cmd != command:
            raise FrameError(
                f"Unexpected command: expected {Command.name_of(command)}, "
                f"received {Command.name_of(received_cmd)} ({length} bytes)"
            )

        payload_size = length - FRAME_OVERHEAD
        if payload_size < 0:
            raise FrameError(f"Invalid frame length {length}")
        if validate_size is not None:
            validate_size(payload_size)

        # LEN counts ADR and CMD, which are already consumed
        rest = self.transport.read_exactly(length - (HEADER_SIZE - 1), token)
        raw = header + rest

        residue = CRC16.calculate(raw)
        if residue != 0:
            raise CRCError(residue, raw)

        frame = Frame(address, received_cmd, raw[HEADER_SIZE:len(raw) - CRC_SIZE])
        logger.debug(f"Received {frame!r}")
        return frame
