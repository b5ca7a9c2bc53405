"""
Protocol constants for the RU5102 reader.

Frame Format: [LEN][ADR][CMD][PAYLOAD...][CRC-LSB][CRC-MSB]
All multi-byte fields are least-significant byte first.
"""

from enum import IntEnum

# Frame layout
HEADER_SIZE = 3         # LEN + ADR + CMD
CRC_SIZE = 2
FRAME_OVERHEAD = 4      # ADR + CMD + CRC, counted by LEN
MAX_PAYLOAD = 0xFF - FRAME_OVERHEAD

# CRC-16 parameters (reflected 0x1021)
CRC_PRESET = 0xFFFF
CRC_POLYNOMIAL = 0x8408

# Connection defaults
DEFAULT_ADDRESS = 0x00
DEFAULT_BAUDRATE = 57600
DEFAULT_TIMEOUT = 5.0

# Inventory TID window used by the reader when none is sent
DEFAULT_TID_OFFSET = 2
DEFAULT_TID_LENGTH = 4

# GetReaderInformation
READER_INFO_SIZE = 9
TRANSCEIVER_ISO18000_6 = 0x02
SCAN_TIME_UNIT_MS = 100

# Frequency band table, indexed by the 4-bit band field
BAND_BASE_MHZ = (902.6, 920.125, 902.75, 917.1, 865.1)
BAND_STEP_MHZ = (0.4, 0.25, 0.5, 0.2, 0.2)
FREQ_INDEX_MASK = 0x3F
FREQ_BAND_MASK = 0xC0


class Command(IntEnum):
    """Command codes (shared by request and response frames)."""
    INVENTORY = 0x01
    READ_MEMORY = 0x02
    GET_READER_INFORMATION = 0x21

    @classmethod
    def name_of(cls, command: int) -> str:
        """Get command name from code."""
        try:
            return cls(command).name
        except ValueError:
            return f"Unknown(0x{command:02X})"


class MemoryBank(IntEnum):
    """Gen2 tag memory banks."""
    RESERVED = 0x00
    EPC = 0x01
    TID = 0x02
    USER = 0x03


class ReadStatus(IntEnum):
    """First byte of a ReadMemory response."""
    SUCCESS = 0x00
    NAK = 0xFC

    @classmethod
    def name_of(cls, status: int) -> str:
        """Get status name from code."""
        names = {
            cls.SUCCESS: "SUCCESS",
            cls.NAK: "NAK",
        }
        return names.get(status, f"Unknown(0x{status:02X})")


class InventorySubtype(IntEnum):
    """Inventory response subtypes."""
    FINISHED = 0x01
    FINISHED_ALT = 0x02
    MORE = 0x03
    MORE_ALT = 0x04
    SCAN_END = 0xFB


TAG_DATA_SUBTYPES = frozenset({
    InventorySubtype.FINISHED,
    InventorySubtype.FINISHED_ALT,
    InventorySubtype.MORE,
    InventorySubtype.MORE_ALT,
})

FINISHED_SUBTYPES = frozenset({
    InventorySubtype.FINISHED,
    InventorySubtype.FINISHED_ALT,
})
