"""Tests for frame building and reading."""

import pytest

from sequences.ru5102_reader.libs.ru5102_protocol.cancellation import CancellationToken
from sequences.ru5102_reader.libs.ru5102_protocol.constants import MAX_PAYLOAD, Command
from sequences.ru5102_reader.libs.ru5102_protocol.exceptions import (
    CancelledError,
    CRCError,
    EncodingError,
    FrameError,
    ResponseSizeError,
    TransportError,
)
from sequences.ru5102_reader.libs.ru5102_protocol.frame import Frame, FrameBuilder, FrameReader

from conftest import READER_INFO_FRAME, READER_INFO_PAYLOAD, ScriptedTransport, response_frame


def test_build_get_reader_information():
    """Empty-payload request: LEN=4, CRC LSB first."""
    assert FrameBuilder.encode(0x00, Command.GET_READER_INFORMATION) == bytes.fromhex("04 00 21 d9 6a")


def test_build_inventory():
    assert FrameBuilder.encode(0x00, Command.INVENTORY) == bytes.fromhex("04 00 01 db 4b")


def test_build_length_byte():
    """LEN counts address, command, payload and CRC."""
    frame = FrameBuilder.encode(0x05, 0x02, b"\x01\x02\x03")
    assert frame[0] == 7
    assert frame[1] == 0x05
    assert frame[2] == 0x02
    assert frame[3:6] == b"\x01\x02\x03"
    assert len(frame) == 1 + frame[0]


def test_build_max_payload():
    frame = FrameBuilder.encode(0x00, 0x01, bytes(MAX_PAYLOAD))
    assert frame[0] == 0xFF


def test_build_payload_too_large():
    with pytest.raises(EncodingError):
        Frame(0x00, 0x01, bytes(MAX_PAYLOAD + 1))


def test_build_address_out_of_range():
    with pytest.raises(EncodingError):
        Frame(0x100, 0x01)


def test_frame_repr():
    r = repr(Frame(0x00, Command.INVENTORY, b"\x02"))
    assert "INVENTORY" in r
    assert "02" in r


def test_read_captured_frame():
    reader = FrameReader(ScriptedTransport(READER_INFO_FRAME), 0x00)
    frame = reader.read(Command.GET_READER_INFORMATION)
    assert frame.address == 0x00
    assert frame.command == Command.GET_READER_INFORMATION
    assert frame.payload == READER_INFO_PAYLOAD


def test_read_empty_payload():
    reader = FrameReader(ScriptedTransport(response_frame(0x01)), 0x00)
    assert reader.read(0x01).payload == b""


def test_read_address_mismatch():
    """Wrong address fails after the header, before size validation or payload."""
    transport = ScriptedTransport(response_frame(0x21, READER_INFO_PAYLOAD, address=0x01))
    calls = []

    with pytest.raises(FrameError) as exc:
        FrameReader(transport, 0x00).read(0x21, calls.append)

    assert "0x00" in str(exc.value)
    assert "0x01" in str(exc.value)
    assert calls == []
    # Only the header was consumed
    assert len(transport.stream) == len(READER_INFO_PAYLOAD) + 2


def test_read_command_mismatch():
    transport = ScriptedTransport(response_frame(0x02, b"\x00"))
    with pytest.raises(FrameError) as exc:
        FrameReader(transport, 0x00).read(Command.INVENTORY)
    assert "INVENTORY" in str(exc.value)
    assert "READ_MEMORY" in str(exc.value)


def test_read_invalid_length():
    transport = ScriptedTransport(bytes([0x03, 0x00, 0x01, 0x00, 0x00]))
    with pytest.raises(FrameError, match="Invalid frame length"):
        FrameReader(transport, 0x00).read(0x01)


def test_read_size_validator_runs_before_payload():
    """Size validator rejects before the remaining bytes are read."""
    header_only = READER_INFO_FRAME[:3]

    def reject(size):
        assert size == 9
        raise ResponseSizeError(0x21, size, expected=8)

    with pytest.raises(ResponseSizeError):
        FrameReader(ScriptedTransport(header_only), 0x00).read(0x21, reject)


def test_read_crc_mismatch():
    corrupt = bytearray(READER_INFO_FRAME)
    corrupt[-1] ^= 0xFF
    with pytest.raises(CRCError) as exc:
        FrameReader(ScriptedTransport(bytes(corrupt)), 0x00).read(0x21)
    assert exc.value.frame == bytes(corrupt)
    assert exc.value.residue != 0


def test_read_short_frame():
    truncated = READER_INFO_FRAME[:-3]
    with pytest.raises(TransportError):
        FrameReader(ScriptedTransport(truncated), 0x00).read(0x21)


def test_read_cancelled():
    token = CancellationToken()
    token.cancel()
    with pytest.raises(CancelledError):
        FrameReader(ScriptedTransport(READER_INFO_FRAME), 0x00).read(0x21, token=token)


def test_read_consecutive_frames():
    transport = ScriptedTransport(response_frame(0x01, b"\x03\x00") + response_frame(0x01, b"\xfb"))
    reader = FrameReader(transport, 0x00)
    assert reader.read(0x01).payload == b"\x03\x00"
    assert reader.read(0x01).payload == b"\xfb"
    assert transport.stream == b""
