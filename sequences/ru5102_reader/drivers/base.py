"""
Base Driver Module

Abstract base class for asyncio reader drivers wrapping blocking clients.
"""

import asyncio
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, Optional


class BaseDriver(ABC):
    """
    Abstract base driver class.

    Drivers own one blocking protocol client and expose it as coroutines.
    Calls are serialized with a lock since the client allows only one
    exchange in flight.

    Attributes:
        name: Driver identifier name
        config: Configuration dictionary
    """

    def __init__(
        self,
        name: str = "BaseDriver",
        config: Optional[Dict[str, Any]] = None
    ):
        """
        Initialize driver.

        Args:
            name: Driver identifier name
            config: Configuration dictionary (port, baudrate, address, timeout)
        """
        self.name = name
        self.config = config or {}
        self._connected = False
        self._lock = asyncio.Lock()

    @abstractmethod
    async def connect(self) -> bool:
        """
        Connect to the reader.

        Returns:
            bool: True if connection successful
        """
        ...

    @abstractmethod
    async def disconnect(self) -> None:
        """Close the connection and release the port."""
        ...

    @abstractmethod
    async def reset(self) -> None:
        """Re-verify the reader responds."""
        ...

    async def identify(self) -> str:
        """
        Return device identification string.

        Returns:
            str: Device ID string (e.g., "Manufacturer,Model,Firmware")
        """
        return "Unknown"

    async def is_connected(self) -> bool:
        return self._connected

    async def _run_sync(self, func: Callable[..., Any], *args, **kwargs) -> Any:
        """
        Run a blocking client call in the default executor.

        Only one call runs at a time.
        """
        async with self._lock:
            loop = asyncio.get_running_loop()
            return await loop.run_in_executor(None, lambda: func(*args, **kwargs))

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(name={self.name!r}, connected={self._connected})"
