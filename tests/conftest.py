"""Shared fixtures: in-memory transports standing in for the serial port."""

import time
from typing import List, Optional

import pytest

from sequences.ru5102_reader.libs.ru5102_protocol.cancellation import CancellationToken
from sequences.ru5102_reader.libs.ru5102_protocol.exceptions import TransportError
from sequences.ru5102_reader.libs.ru5102_protocol.frame import FrameBuilder
from sequences.ru5102_reader.libs.ru5102_protocol.transport import BaseTransport

# Captured GetReaderInformation response: fw 1.23, band 0, 13 dBm, 3 s scan
READER_INFO_FRAME = bytes.fromhex("0d 00 21 00 01 17 08 03 3e 00 0d 1e b1 f1")
READER_INFO_PAYLOAD = READER_INFO_FRAME[3:-2]


class ScriptedTransport(BaseTransport):
    """Replays a fixed byte stream and records writes."""

    def __init__(self, stream: bytes = b""):
        self.stream = bytearray(stream)
        self.written: List[bytes] = []
        self.opened = False
        self.closed = False

    def open(self) -> None:
        self.opened = True

    def close(self) -> None:
        self.closed = True

    def write(self, data: bytes) -> None:
        if self.closed:
            raise TransportError("closed")
        self.written.append(bytes(data))

    def read_exactly(self, count: int, token: Optional[CancellationToken] = None) -> bytes:
        if token is not None:
            token.raise_if_cancelled()
        if len(self.stream) < count:
            raise TransportError(f"Stream closed after {len(self.stream)} of {count} bytes")
        data = bytes(self.stream[:count])
        del self.stream[:count]
        return data

    @property
    def is_open(self) -> bool:
        return self.opened and not self.closed


class SilentTransport(ScriptedTransport):
    """Never answers; reads block until the token fires."""

    def read_exactly(self, count: int, token: Optional[CancellationToken] = None) -> bytes:
        token = token or CancellationToken.none()
        while True:
            token.raise_if_cancelled()
            time.sleep(0.005)


def response_frame(command: int, payload: bytes = b"", address: int = 0x00) -> bytes:
    """Build a reader response frame."""
    return FrameBuilder.encode(address, command, payload)


@pytest.fixture
def scripted():
    """Factory for scripted transports."""
    def make(*frames: bytes) -> ScriptedTransport:
        return ScriptedTransport(b"".join(frames))
    return make
