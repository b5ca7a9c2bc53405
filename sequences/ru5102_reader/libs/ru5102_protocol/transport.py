"""
Serial transport layer.

Provides byte-stream access to the reader with a background receive thread.
Reads are exact-count and observe a cancellation token between polls.
"""

import serial
import threading
import logging
from abc import ABC, abstractmethod
from typing import Optional
from queue import Queue, Empty

from .cancellation import CancellationToken
from .constants import DEFAULT_BAUDRATE
from .exceptions import TransportError

logger = logging.getLogger(__name__)


class BaseTransport(ABC):
    """
    Byte-stream transport used by the channel.

    Implementations must deliver bytes in arrival order and raise
    TransportError on end of stream or I/O failure.
    """

    @abstractmethod
    def open(self) -> None:
        """Open the underlying stream."""
        ...

    @abstractmethod
    def close(self) -> None:
        """Close the underlying stream."""
        ...

    @abstractmethod
    def write(self, data: bytes) -> None:
        """Write all bytes in one call."""
        ...

    @abstractmethod
    def read_exactly(self, count: int, token: Optional[CancellationToken] = None) -> bytes:
        """Block until exactly count bytes are available."""
        ...

    @property
    @abstractmethod
    def is_open(self) -> bool:
        ...

    def __enter__(self) -> 'BaseTransport':
        self.open()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()


class SerialTransport(BaseTransport):
    """Serial communication transport layer."""

    def __init__(
        self,
        port: str,
        baudrate: int = DEFAULT_BAUDRATE,
        read_timeout: float = 0.05,
        poll_interval: float = 0.05
    ):
        """
        Initialize serial transport.

        Args:
            port: Serial port name (e.g., '/dev/ttyUSB0' or 'COM3')
            baudrate: Baud rate (default: 57600)
            read_timeout: Internal read timeout for background thread
            poll_interval: How often blocked reads check their cancellation token
        """
        self.port = port
        self.baudrate = baudrate
        self.read_timeout = read_timeout
        self.poll_interval = poll_interval
        self._serial: Optional[serial.Serial] = None
        self._rx_queue: Queue = Queue()
        self._rx_buffer = bytearray()
        self._rx_thread: Optional[threading.Thread] = None
        self._rx_error: Optional[Exception] = None
        self._running = False

    def open(self) -> None:
        """Open serial port and start receive thread."""
        try:
            self._serial = serial.Serial(
                port=self.port,
                baudrate=self.baudrate,
                bytesize=serial.EIGHTBITS,
                parity=serial.PARITY_NONE,
                stopbits=serial.STOPBITS_ONE,
                timeout=self.read_timeout
            )
            logger.info(f"Opened serial port {self.port} at {self.baudrate} bps")

            self._rx_error = None
            self._rx_buffer.clear()
            self._running = True
            self._rx_thread = threading.Thread(target=self._rx_loop, daemon=True)
            self._rx_thread.start()

        except serial.SerialException as e:
            raise TransportError(f"Failed to open {self.port}: {e}") from e

    def close(self) -> None:
        """Close serial port and stop receive thread."""
        self._running = False

        if self._rx_thread:
            self._rx_thread.join(timeout=1.0)
            self._rx_thread = None

        if self._serial:
            try:
                self._serial.close()
            except serial.SerialException as e:
                logger.debug(f"Error closing {self.port}: {e}")
            self._serial = None
            logger.info(f"Closed serial port {self.port}")

    def write(self, data: bytes) -> None:
        """
        Send data over serial port.

        Args:
            data: Complete frame bytes

        Raises:
            TransportError: If port is not open or the write is short
        """
        if not self._serial or not self._serial.is_open:
            raise TransportError("Serial port not open")

        try:
            count = self._serial.write(data)
            self._serial.flush()
        except serial.SerialException as e:
            raise TransportError(f"Send failed: {e}") from e

        if count != len(data):
            raise TransportError(f"Short write: {count} of {len(data)} bytes")
        logger.debug(f"TX ({count} bytes): {data.hex(' ')}")

    def read_exactly(self, count: int, token: Optional[CancellationToken] = None) -> bytes:
        """
        Receive exactly count bytes.

        Args:
            count: Number of bytes to return
            token: Cancellation token checked between polls

        Returns:
            The next count bytes of the stream

        Raises:
            TransportError: If the stream ends or the port fails
            CancelledError: If the token is cancelled
            TimeoutError: If the token deadline passes
        """
        token = token or CancellationToken.none()

        while len(self._rx_buffer) < count:
            token.raise_if_cancelled()
            try:
                self._rx_buffer.extend(self._rx_queue.get(timeout=self.poll_interval))
            except Empty:
                if not self._receiving:
                    self._drain_or_fail(count)

        data = bytes(self._rx_buffer[:count])
        del self._rx_buffer[:count]
        return data

    def _drain_or_fail(self, count: int) -> None:
        """Collect bytes queued by a stopped receive thread, or fail."""
        try:
            self._rx_buffer.extend(self._rx_queue.get_nowait())
        except Empty:
            reason = f": {self._rx_error}" if self._rx_error else ""
            raise TransportError(
                f"Stream closed after {len(self._rx_buffer)} of {count} bytes{reason}"
            ) from self._rx_error

    def _rx_loop(self) -> None:
        """Background receive thread."""
        while self._running and self._serial and self._serial.is_open:
            try:
                data = self._serial.read(256)
                if data:
                    logger.debug(f"RX ({len(data)} bytes): {data.hex(' ')}")
                    self._rx_queue.put(data)
            except serial.SerialException as e:
                logger.error(f"RX error on {self.port}: {e}")
                self._rx_error = e
                break

    @property
    def _receiving(self) -> bool:
        return self._rx_thread is not None and self._rx_thread.is_alive()

    @property
    def is_open(self) -> bool:
        """Check if port is open."""
        return self._serial is not None and self._serial.is_open

    def __repr__(self) -> str:
        status = "open" if self.is_open else "closed"
        return f"SerialTransport({self.port}, {self.baudrate}, {status})"
