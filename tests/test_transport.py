"""Tests for the serial transport, with pyserial's Serial replaced by a fake port."""

import threading
import time

import pytest
import serial

from sequences.ru5102_reader.libs.ru5102_protocol import transport as transport_module
from sequences.ru5102_reader.libs.ru5102_protocol.cancellation import CancellationToken
from sequences.ru5102_reader.libs.ru5102_protocol.exceptions import (
    CancelledError,
    TimeoutError,
    TransportError,
)
from sequences.ru5102_reader.libs.ru5102_protocol.transport import SerialTransport


class FakeSerial:
    """Delivers queued chunks, then idles or fails."""

    def __init__(self, chunks=(), fail_when_empty=False, short_write=False, **kwargs):
        self.kwargs = kwargs
        self.chunks = list(chunks)
        self.fail_when_empty = fail_when_empty
        self.short_write = short_write
        self.written = bytearray()
        self.is_open = True
        self._lock = threading.Lock()

    def read(self, size):
        with self._lock:
            if self.chunks:
                return self.chunks.pop(0)
        if self.fail_when_empty:
            raise serial.SerialException("device disconnected")
        time.sleep(0.005)
        return b""

    def write(self, data):
        self.written.extend(data)
        return len(data) - 1 if self.short_write else len(data)

    def flush(self):
        pass

    def close(self):
        self.is_open = False


@pytest.fixture
def fake_port(monkeypatch):
    """Install a FakeSerial factory; returns a dict to configure it."""
    options = {}
    created = []

    def factory(**kwargs):
        port = FakeSerial(**options, **kwargs)
        created.append(port)
        return port

    monkeypatch.setattr(transport_module.serial, "Serial", factory)
    return options, created


def test_open_configures_port(fake_port):
    options, created = fake_port
    with SerialTransport("/dev/ttyUSB0", 57600) as transport:
        assert transport.is_open
        assert created[0].kwargs["port"] == "/dev/ttyUSB0"
        assert created[0].kwargs["baudrate"] == 57600
    assert not transport.is_open


def test_read_exactly_across_chunks(fake_port):
    options, _ = fake_port
    options["chunks"] = [b"\x0d\x00", b"\x21\x00\x01", b"\x17"]
    with SerialTransport("/dev/ttyUSB0") as transport:
        token = CancellationToken(2.0)
        assert transport.read_exactly(3, token) == b"\x0d\x00\x21"
        assert transport.read_exactly(3, token) == b"\x00\x01\x17"


def test_read_stream_closed(fake_port):
    options, _ = fake_port
    options["chunks"] = [b"\x01"]
    options["fail_when_empty"] = True
    with SerialTransport("/dev/ttyUSB0") as transport:
        with pytest.raises(TransportError, match="1 of 3"):
            transport.read_exactly(3, CancellationToken(2.0))


def test_read_timeout(fake_port):
    with SerialTransport("/dev/ttyUSB0") as transport:
        with pytest.raises(TimeoutError):
            transport.read_exactly(1, CancellationToken(0.05))


def test_read_cancelled_from_other_thread(fake_port):
    token = CancellationToken()
    with SerialTransport("/dev/ttyUSB0") as transport:
        threading.Timer(0.05, token.cancel).start()
        with pytest.raises(CancelledError):
            transport.read_exactly(1, token)


def test_read_after_close(fake_port):
    transport = SerialTransport("/dev/ttyUSB0")
    transport.open()
    transport.close()
    with pytest.raises(TransportError):
        transport.read_exactly(1, CancellationToken(1.0))


def test_write(fake_port):
    _, created = fake_port
    with SerialTransport("/dev/ttyUSB0") as transport:
        transport.write(b"\x04\x00\x21\xd9\x6a")
    assert bytes(created[0].written) == b"\x04\x00\x21\xd9\x6a"


def test_short_write(fake_port):
    options, _ = fake_port
    options["short_write"] = True
    with SerialTransport("/dev/ttyUSB0") as transport:
        with pytest.raises(TransportError, match="Short write"):
            transport.write(b"\x04\x00\x21\xd9\x6a")


def test_write_not_open():
    with pytest.raises(TransportError, match="not open"):
        SerialTransport("/dev/ttyUSB0").write(b"\x00")


def test_open_failure(monkeypatch):
    def fail(**kwargs):
        raise serial.SerialException("no such port")

    monkeypatch.setattr(transport_module.serial, "Serial", fail)
    with pytest.raises(TransportError, match="Failed to open"):
        SerialTransport("/dev/missing").open()
