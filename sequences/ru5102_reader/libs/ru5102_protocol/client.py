"""
High-level protocol client.

Provides a simple API for inventory and memory reads on an RU5102 reader.
"""

import logging
from typing import Callable, List, Optional

from .cancellation import CancellationToken
from .channel import Channel
from .commands import GetReaderInformation, Inventory, ReadMemory
from .constants import DEFAULT_ADDRESS, DEFAULT_BAUDRATE, DEFAULT_TIMEOUT, MemoryBank
from .exceptions import NakError
from .models import AddressSegment, DeviceInformation, InventoryBatch, MemoryReadResult, ReadResult
from .transport import BaseTransport, SerialTransport

logger = logging.getLogger(__name__)


class Ru5102Client:
    """High-level client for the RU5102 reader protocol."""

    def __init__(self, channel: Channel, info: DeviceInformation):
        """
        Initialize client over an already verified channel.

        Use Ru5102Client.connect() to open a port and verify the reader.

        Args:
            channel: Channel owning an open transport
            info: Reader information returned during connect
        """
        self.channel = channel
        self.info = info

    @classmethod
    def connect(
        cls,
        port: str,
        baudrate: int = DEFAULT_BAUDRATE,
        address: int = DEFAULT_ADDRESS,
        timeout: float = DEFAULT_TIMEOUT,
        transport: Optional[BaseTransport] = None
    ) -> 'Ru5102Client':
        """
        Open the port and query reader information.

        Args:
            port: Serial port name
            baudrate: Baud rate
            address: Reader address (0xFF is broadcast on most firmware)
            timeout: Deadline for the information exchange in seconds
            transport: Transport to use instead of a SerialTransport on port

        Returns:
            Connected client

        Raises:
            TimeoutError: If the reader does not answer within timeout
            CapabilityError: If the reader lacks ISO 18000-6 support
            Ru5102ProtocolError: On any other protocol or transport failure
        """
        transport = transport or SerialTransport(port, baudrate)
        transport.open()
        try:
            channel = Channel(transport, address)
            info = channel.send_receive(GetReaderInformation(), CancellationToken(timeout))
        except BaseException:
            transport.close()
            raise

        logger.info(f"Connected to reader 0x{address:02X} on {port}: {info!r}")
        return cls(channel, info)

    def close(self) -> None:
        """Close the underlying transport."""
        self.channel.transport.close()

    def get_reader_information(self, token: Optional[CancellationToken] = None) -> DeviceInformation:
        """
        Query reader information again.

        Returns:
            DeviceInformation (also stored on self.info)
        """
        self.info = self.channel.send_receive(GetReaderInformation(), token)
        return self.info

    def inventory(
        self,
        on_tag: Callable[[str], None],
        tid_address: Optional[AddressSegment] = None,
        token: Optional[CancellationToken] = None
    ) -> int:
        """
        Run one inventory round.

        Args:
            on_tag: Called with each tag ID (uppercase hex) in arrival order,
                duplicates included
            tid_address: TID window override (None uses the reader default)
            token: Cancellation token for blocking reads

        Returns:
            Number of tags reported
        """
        count = 0

        def handle(batch: InventoryBatch) -> bool:
            nonlocal count
            for tag in batch.tags:
                on_tag(tag)
            count += len(batch.tags)
            return not batch.scan_finished

        self.channel.send_receive_until(Inventory(tid_address), handle, token)
        logger.info(f"Inventory finished: {count} tags")
        return count

    def scan(
        self,
        tid_address: Optional[AddressSegment] = None,
        token: Optional[CancellationToken] = None
    ) -> List[str]:
        """
        Run one inventory round and collect tag IDs.

        Returns:
            Tag IDs in arrival order
        """
        tags: List[str] = []
        for batch in self.channel.iter_responses(Inventory(tid_address), token):
            tags.extend(batch.tags)
        logger.info(f"Found {len(tags)} tags: {tags}")
        return tags

    def try_read_memory(
        self,
        tag: str,
        password: int,
        bank: MemoryBank,
        segment: AddressSegment,
        token: Optional[CancellationToken] = None
    ) -> ReadResult:
        """
        Read from a tag memory bank.

        Args:
            tag: Tag ID as hex string (even number of bytes)
            password: 32-bit access password
            bank: Memory bank to read
            segment: Word offset and length (length must be a multiple of 4)
            token: Cancellation token for blocking reads

        Returns:
            ReadResult with success flag and data
        """
        result = self._read(tag, password, bank, segment, token)
        return ReadResult(result.success, result.data)

    def read_memory(
        self,
        tag: str,
        password: int,
        bank: MemoryBank,
        segment: AddressSegment,
        token: Optional[CancellationToken] = None
    ) -> bytes:
        """
        Read from a tag memory bank, raising if the tag does not respond.

        Returns:
            Data read

        Raises:
            NakError: If the reader reports a non-success status
        """
        result = self._read(tag, password, bank, segment, token)
        if not result.success:
            raise NakError(result.status)
        return result.data

    def _read(
        self,
        tag: str,
        password: int,
        bank: MemoryBank,
        segment: AddressSegment,
        token: Optional[CancellationToken]
    ) -> MemoryReadResult:
        request = ReadMemory(tag, password, bank, segment)
        result = self.channel.send_receive(request, token)
        bank_name = MemoryBank(bank).name
        if result.success:
            logger.debug(f"Read {bank_name} from {tag}: {result.data.hex().upper()}")
        else:
            logger.warning(f"Read {bank_name} from {tag} returned {result.status_name}")
        return result

    def __enter__(self) -> 'Ru5102Client':
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def __repr__(self) -> str:
        return f"Ru5102Client(address=0x{self.channel.address:02X}, {self.info!r})"
