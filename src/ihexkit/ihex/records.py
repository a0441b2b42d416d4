"""
Intel HEX Record Definitions
============================

This module defines the data structures produced by the parser: single
records, the complete record set of one input, and the enumerations used
to describe record types and the memory layout of materialized data.

Record Format
-------------
Every line of an Intel HEX input is one record:

    :LLAAAATT[DD...]CC

    LL    Length - number of data bytes (00-FF)
    AAAA  Address - 16-bit offset, big-endian
    TT    Type - one of the six record types below
    DD    Data - LL bytes
    CC    Checksum - two's complement of the low byte of the sum of
          all preceding bytes (length, both address bytes, type, data)

Record Types
------------
- 00: Data
- 01: End Of File (length 0, terminates the record set)
- 02: Extended Segment Address (2 bytes, base = value << 4)
- 03: Start Segment Address (4 bytes, CS:IP entry point)
- 04: Extended Linear Address (2 bytes, base = value << 16)
- 05: Start Linear Address (4 bytes, EIP entry point)

Reference
---------
- Intel Hexadecimal Object File Format Specification, Revision A
"""

from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import Iterator, Optional, Union, overload

from ihexkit.errors import NoEofError, NoInputError, UnknownRecordTypeError
from ihexkit.ihex.checksum import calculate_checksum, is_valid


# =============================================================================
# Enumeration Types
# =============================================================================

class RecordType(IntEnum):
    """
    Intel HEX record type codes.

    Unknown codes are rejected when a line is parsed, so every Record
    holds one of these six values.
    """
    DATA = 0x00
    END_OF_FILE = 0x01
    EXTENDED_SEGMENT_ADDRESS = 0x02
    START_SEGMENT_ADDRESS = 0x03
    EXTENDED_LINEAR_ADDRESS = 0x04
    START_LINEAR_ADDRESS = 0x05

    @classmethod
    def from_code(cls, code: int) -> "RecordType":
        """
        Convert a raw type byte to a RecordType.

        Raises:
            UnknownRecordTypeError: If the code is not 00-05
        """
        try:
            return cls(code)
        except ValueError:
            raise UnknownRecordTypeError(code) from None

    def expected_length(self) -> Optional[int]:
        """
        Return the payload length this type requires.

        Data records may carry any length (0-255) and return None.
        """
        return _EXPECTED_LENGTHS.get(self)

    def get_description(self) -> str:
        """Get human-readable description of record type."""
        return _DESCRIPTIONS[self]

    @property
    def is_address(self) -> bool:
        """True for the two record types that change the base address."""
        return self in (
            RecordType.EXTENDED_SEGMENT_ADDRESS,
            RecordType.EXTENDED_LINEAR_ADDRESS,
        )

    @property
    def is_start(self) -> bool:
        """True for the two entry point record types."""
        return self in (
            RecordType.START_SEGMENT_ADDRESS,
            RecordType.START_LINEAR_ADDRESS,
        )


_EXPECTED_LENGTHS = {
    RecordType.END_OF_FILE: 0,
    RecordType.EXTENDED_SEGMENT_ADDRESS: 2,
    RecordType.START_SEGMENT_ADDRESS: 4,
    RecordType.EXTENDED_LINEAR_ADDRESS: 2,
    RecordType.START_LINEAR_ADDRESS: 4,
}

_DESCRIPTIONS = {
    RecordType.DATA: "Data",
    RecordType.END_OF_FILE: "End Of File",
    RecordType.EXTENDED_SEGMENT_ADDRESS: "Extended Segment Address",
    RecordType.START_SEGMENT_ADDRESS: "Start Segment Address",
    RecordType.EXTENDED_LINEAR_ADDRESS: "Extended Linear Address",
    RecordType.START_LINEAR_ADDRESS: "Start Linear Address",
}


class WordWidth(IntEnum):
    """Width in bytes of the data words written during materialization."""
    BYTE = 1
    HALF = 2
    WORD = 4
    DOUBLE = 8

    @classmethod
    def from_value(cls, value: Union[int, str, "WordWidth"]) -> "WordWidth":
        """
        Accept 1, 2, 4, 8 as int or string.

        Raises:
            ValueError: For any other width
        """
        try:
            return cls(int(value))
        except (TypeError, ValueError):
            raise ValueError(
                f"invalid word width {value!r}; choose from 1, 2, 4, 8"
            ) from None


class ByteOrder(Enum):
    """
    Byte order applied to each data word.

    BIG writes the record stream as-is; LITTLE reverses the bytes of
    every complete word.
    """
    BIG = "big"
    LITTLE = "little"

    @classmethod
    def from_value(cls, value: Union[str, "ByteOrder"]) -> "ByteOrder":
        """
        Accept "big"/"little" in any case.

        Raises:
            ValueError: For any other value
        """
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError:
            raise ValueError(
                f"invalid byte order {value!r}; choose big or little"
            ) from None


# =============================================================================
# Record
# =============================================================================

@dataclass(frozen=True)
class Record:
    """
    A single Intel HEX record (one line of input).

    Records are immutable once parsed. The data buffer is a bytes object
    owned by the record; nothing else holds a mutable view of it.

    Attributes:
        length: Number of data bytes (0-255)
        record_type: The record type
        address: 16-bit load offset
        data: The payload, exactly `length` bytes
        checksum: The checksum byte as read from the input
    """
    length: int
    record_type: RecordType
    address: int
    data: bytes = field(repr=False)
    checksum: int

    def __post_init__(self) -> None:
        if not isinstance(self.record_type, RecordType):
            object.__setattr__(self, "record_type", RecordType.from_code(self.record_type))
        if not 0 <= self.length <= 0xFF:
            raise ValueError(f"record length {self.length} out of range 0-255")
        if not 0 <= self.address <= 0xFFFF:
            raise ValueError(f"record address 0x{self.address:X} out of range")
        if not 0 <= self.checksum <= 0xFF:
            raise ValueError(f"record checksum {self.checksum} out of range")
        if len(self.data) != self.length:
            raise ValueError(
                f"record length {self.length} does not match "
                f"{len(self.data)} data bytes"
            )
        if not isinstance(self.data, bytes):
            object.__setattr__(self, "data", bytes(self.data))

    @classmethod
    def create(
        cls,
        record_type: RecordType,
        address: int = 0,
        data: bytes = b"",
    ) -> "Record":
        """
        Build a record with a correct checksum.

        Example:
            >>> Record.create(RecordType.DATA, 0x0030, bytes([0x02, 0x33, 0x7A])).checksum
            30
        """
        data = bytes(data)
        checksum = calculate_checksum(len(data), address, record_type, data)
        return cls(len(data), RecordType(record_type), address, data, checksum)

    def is_valid(self) -> bool:
        """Return True if the checksum invariant holds."""
        return is_valid(self)

    def payload_u16(self) -> int:
        """Return the first two payload bytes as a big-endian word."""
        if self.length < 2:
            raise ValueError(f"{self.record_type.name} record has no 16-bit payload")
        return (self.data[0] << 8) | self.data[1]

    def payload_u32(self) -> int:
        """Return the first four payload bytes as a big-endian value."""
        if self.length < 4:
            raise ValueError(f"{self.record_type.name} record has no 32-bit payload")
        return int.from_bytes(self.data[:4], "big")

    @property
    def end_address(self) -> int:
        """One past the last 16-bit offset covered by this record."""
        return self.address + self.length

    def __str__(self) -> str:
        return (
            f"{self.record_type.get_description()} @ {self.address:04X} "
            f"[{self.length}] {self.data.hex().upper()}"
        )


@dataclass(frozen=True)
class StartAddress:
    """
    Program entry point from a Start Segment/Linear Address record.

    For Start Segment Address, value holds CS in the high word and IP in
    the low word. For Start Linear Address it is the 32-bit EIP.
    """
    record_type: RecordType
    value: int

    @property
    def segment(self) -> Optional[int]:
        """The CS value of a segment start address, else None."""
        if self.record_type == RecordType.START_SEGMENT_ADDRESS:
            return self.value >> 16
        return None

    @property
    def offset(self) -> int:
        """The IP value for segment start, the full EIP for linear start."""
        if self.record_type == RecordType.START_SEGMENT_ADDRESS:
            return self.value & 0xFFFF
        return self.value

    @property
    def linear(self) -> int:
        """The entry point as a flat address."""
        if self.record_type == RecordType.START_SEGMENT_ADDRESS:
            return (self.segment << 4) + self.offset
        return self.value


# =============================================================================
# Record Set
# =============================================================================

@dataclass(frozen=True)
class RecordSet:
    """
    The complete, ordered, validated records of one Intel HEX input.

    The record order is the input line order. The set is never empty and
    the End Of File record is always the last record and the only one.

    Attributes:
        records: The records as an immutable tuple
        source: Name of the input the records were parsed from

    Example:
        >>> rs = parse_string(":0300300002337A1E\\n:00000001FF\\n")
        >>> len(rs)
        2
        >>> rs.total_size()
        3
    """
    records: tuple[Record, ...]
    source: str = "<string>"

    def __post_init__(self) -> None:
        records = tuple(self.records)
        object.__setattr__(self, "records", records)

        if not records:
            raise NoInputError("record set is empty")
        for index, record in enumerate(records[:-1]):
            if record.record_type == RecordType.END_OF_FILE:
                raise NoEofError(
                    f"End Of File record at index {index} is not the last record"
                )
        last = records[-1]
        if last.record_type != RecordType.END_OF_FILE:
            raise NoEofError("record set does not end with an End Of File record")
        if last.length != 0:
            raise NoEofError("End Of File record must have length 0")

    def __len__(self) -> int:
        return len(self.records)

    def __iter__(self) -> Iterator[Record]:
        return iter(self.records)

    @overload
    def __getitem__(self, index: int) -> Record: ...

    @overload
    def __getitem__(self, index: slice) -> tuple[Record, ...]: ...

    def __getitem__(self, index):
        return self.records[index]

    def data_records(self) -> list[Record]:
        """Return only the Data records, in order."""
        return [r for r in self.records if r.record_type == RecordType.DATA]

    def count_by_type(self) -> dict[RecordType, int]:
        """Return the number of records of each type present."""
        counts: dict[RecordType, int] = {}
        for record in self.records:
            counts[record.record_type] = counts.get(record.record_type, 0) + 1
        return counts

    def total_size(self) -> int:
        """Sum of Data record lengths, ignoring gaps and overlaps."""
        from ihexkit.ihex.memory import total_size
        return total_size(self)

    @property
    def start_address(self) -> Optional[StartAddress]:
        """The last entry point record's value, or None if there is none."""
        start = None
        for record in self.records:
            if record.record_type.is_start:
                start = StartAddress(record.record_type, record.payload_u32())
        return start

    def address_range(self) -> Optional[tuple[int, int]]:
        """
        Return (lowest, one past highest) resolved data address.

        Returns None when the set holds no data bytes.
        """
        from ihexkit.ihex.memory import data_spans
        spans = [span for span in data_spans(self) if span[1] > span[0]]
        if not spans:
            return None
        return min(s[0] for s in spans), max(s[1] for s in spans)

    def materialize(self, destination, size: Optional[int] = None,
                    width: WordWidth = WordWidth.BYTE,
                    byte_order: ByteOrder = ByteOrder.BIG) -> Optional[StartAddress]:
        """Write the data records into `destination`. See ihex.memory.materialize."""
        from ihexkit.ihex.memory import materialize
        return materialize(self, destination, size, width, byte_order)

    def to_image(self, size: Optional[int] = None, fill: int = 0x00,
                 width: WordWidth = WordWidth.BYTE,
                 byte_order: ByteOrder = ByteOrder.BIG) -> bytearray:
        """Build a flat memory image. See ihex.memory.to_image."""
        from ihexkit.ihex.memory import to_image
        return to_image(self, size, fill, width, byte_order)
