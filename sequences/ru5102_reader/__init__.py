"""
RU5102 Reader Package

Provides the RU5102 UHF RFID reader protocol client and asyncio driver.
"""

from .drivers.ru5102 import Ru5102Driver
from .libs.ru5102_protocol import Ru5102Client

__all__ = ["Ru5102Driver", "Ru5102Client"]
