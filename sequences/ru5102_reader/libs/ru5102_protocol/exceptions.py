"""
Custom exceptions for RU5102 protocol.
"""

from typing import Optional

from .constants import Command, ReadStatus


class Ru5102ProtocolError(Exception):
    """Base exception for RU5102 protocol errors."""
    pass


class FrameError(Ru5102ProtocolError):
    """Frame header or length does not match the outstanding request."""
    pass


class ResponseSizeError(FrameError):
    """Response payload size rejected by the request."""

    def __init__(self, command: int, received: int, expected: Optional[int] = None,
                 minimum: Optional[int] = None):
        self.command = command
        self.received = received
        self.expected = expected
        self.minimum = minimum
        if expected is not None:
            detail = f"expected {expected} bytes"
        else:
            detail = f"expected at least {minimum} bytes"
        super().__init__(
            f"Unexpected payload size for {Command.name_of(command)}: "
            f"{detail}, received {received}"
        )


class FormatError(FrameError):
    """Response payload content is malformed."""
    pass


class CRCError(FrameError):
    """CRC verification failed."""

    def __init__(self, residue: int, frame: bytes):
        self.residue = residue
        self.frame = frame
        super().__init__(
            f"CRC mismatch: residue 0x{residue:04X} over frame {frame.hex(' ')}"
        )


class CapabilityError(Ru5102ProtocolError):
    """Reader does not support the required tag standards."""
    pass


class EncodingError(Ru5102ProtocolError, ValueError):
    """Request values cannot be represented on the wire."""
    pass


class TransportError(Ru5102ProtocolError):
    """Serial link failure, closed port or short read."""
    pass


class CancelledError(Ru5102ProtocolError):
    """Operation cancelled by the caller."""
    pass


class TimeoutError(CancelledError):
    """Operation deadline expired."""

    def __init__(self, timeout: float):
        self.timeout = timeout
        super().__init__(f"No response within {timeout}s")


class NakError(Ru5102ProtocolError):
    """Tag did not respond to a memory read."""

    def __init__(self, status: int):
        self.status = status
        self.status_name = ReadStatus.name_of(status)
        super().__init__(
            f"Tag did not respond: {self.status_name} (0x{status:02X})"
        )
