"""
RU5102 Reader Driver Module

asyncio driver for the RU5102 UHF RFID reader.
Wraps the ru5102_protocol client for use from coroutines.
"""

import logging
from typing import Any, Dict, List, Optional

from .base import BaseDriver
from ..libs.ru5102_protocol import (
    DEFAULT_ADDRESS,
    DEFAULT_BAUDRATE,
    DEFAULT_TIMEOUT,
    AddressSegment,
    CancellationToken,
    DeviceInformation,
    MemoryBank,
    Ru5102Client,
)
from ..libs.ru5102_protocol.constants import DEFAULT_TID_LENGTH, DEFAULT_TID_OFFSET

logger = logging.getLogger(__name__)


class Ru5102Driver(BaseDriver):
    """
    RU5102 reader driver.

    Attributes:
        port: Serial port path
        baudrate: Communication speed
        address: Reader bus address
        timeout: Connect and exchange deadline in seconds
    """

    def __init__(
        self,
        name: str = "Ru5102Driver",
        config: Optional[Dict[str, Any]] = None
    ):
        """
        Initialize RU5102 driver.

        Args:
            name: Driver name
            config: Configuration with keys:
                - port: Serial port (default: "/dev/ttyUSB0")
                - baudrate: Baud rate (default: 57600)
                - address: Reader address (default: 0x00)
                - timeout: Exchange deadline (default: 5.0)
        """
        super().__init__(name=name, config=config)

        self.port: str = self.config.get("port", "/dev/ttyUSB0")
        self.baudrate: int = self.config.get("baudrate", DEFAULT_BAUDRATE)
        self.address: int = self.config.get("address", DEFAULT_ADDRESS)
        self.timeout: float = self.config.get("timeout", DEFAULT_TIMEOUT)

        self._client: Optional[Ru5102Client] = None

    async def connect(self) -> bool:
        """
        Open the port and query reader information.

        Returns:
            bool: True if connection successful
        """
        try:
            logger.info(f"Connecting to RU5102 on {self.port} at {self.baudrate} bps")
            self._client = await self._run_sync(
                Ru5102Client.connect,
                self.port,
                baudrate=self.baudrate,
                address=self.address,
                timeout=self.timeout
            )
            self._connected = True
            logger.info(f"Connected to RU5102, firmware v{self._client.info.firmware}")
            return True

        except Exception as e:
            logger.error(f"Failed to connect to RU5102: {e}")
            await self.disconnect()
            return False

    async def disconnect(self) -> None:
        """Disconnect from reader."""
        if self._client:
            self._client.close()
            self._client = None

        self._connected = False
        logger.info("Disconnected from RU5102")

    async def reset(self) -> None:
        """Re-query reader information."""
        client = self._require_client()
        await self._run_sync(client.get_reader_information, self._token())
        logger.info("RU5102 connection verified")

    async def identify(self) -> str:
        """
        Return reader identification string.

        Returns:
            str: e.g. "Chafon,RU5102,FW-1.23"
        """
        if self._client:
            return f"Chafon,RU5102,FW-{self._client.info.firmware}"
        return "Chafon,RU5102,Unknown"

    # === Reader Methods ===

    async def get_reader_information(self) -> Dict[str, Any]:
        """
        Query reader information.

        Returns:
            Dict with firmware, frequency range, power and scan time
        """
        client = self._require_client()
        info: DeviceInformation = await self._run_sync(
            client.get_reader_information, self._token()
        )
        return {
            "firmware": info.firmware,
            "band": info.band,
            "min_frequency_mhz": info.min_frequency_mhz,
            "max_frequency_mhz": info.max_frequency_mhz,
            "power_dbm": info.power_dbm,
            "inventory_scan_timeout": info.inventory_scan_timeout,
        }

    async def inventory(
        self,
        tid_offset: Optional[int] = None,
        tid_length: Optional[int] = None
    ) -> List[str]:
        """
        Run one inventory round.

        Args:
            tid_offset: TID window offset (None uses reader default)
            tid_length: TID window length (None uses reader default)

        Returns:
            Tag IDs in arrival order
        """
        client = self._require_client()

        tid_address = None
        if tid_offset is not None or tid_length is not None:
            tid_address = AddressSegment(
                tid_offset if tid_offset is not None else DEFAULT_TID_OFFSET,
                tid_length if tid_length is not None else DEFAULT_TID_LENGTH
            )

        # Reader may use its whole scan time before answering
        token = self._token(client.info.inventory_scan_timeout)
        return await self._run_sync(client.scan, tid_address, token)

    async def read_memory(
        self,
        tag: str,
        bank: MemoryBank,
        offset: int,
        length: int,
        password: int = 0
    ) -> Dict[str, Any]:
        """
        Read tag memory.

        Args:
            tag: Tag ID hex string
            bank: Memory bank
            offset: Word offset
            length: Length, multiple of 4
            password: Access password

        Returns:
            Dict with success flag and hex data
        """
        client = self._require_client()
        result = await self._run_sync(
            client.try_read_memory,
            tag, password, MemoryBank(bank), AddressSegment(offset, length),
            self._token()
        )
        return {
            "tag": tag,
            "bank": MemoryBank(bank).name,
            "success": result.success,
            "data": result.data.hex().upper(),
        }

    # === Helper Methods ===

    def _require_client(self) -> Ru5102Client:
        if not self._client:
            raise RuntimeError("Not connected to RU5102")
        return self._client

    def _token(self, extra: float = 0.0) -> CancellationToken:
        return CancellationToken(self.timeout + extra)
