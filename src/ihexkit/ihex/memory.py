"""
Intel HEX Memory Materialization
================================

This module writes the data records of a RecordSet into a flat memory
buffer, resolving extended addresses along the way.

Address Resolution
------------------
Data records carry only a 16-bit offset. Two record types shift the base
added to every following data record:

- Extended Segment Address (02): base = value << 4
- Extended Linear Address (04): base = value << 16

Whichever of the two was set most recently is the active base; before
either appears the base is 0. Start Segment/Linear Address records are
entry points and are never written to memory.

Word Width and Byte Order
-------------------------
Data may be written as groups of 1, 2, 4 or 8 bytes. With big-endian
order the record stream is copied as-is. With little-endian order the
bytes of each complete group are reversed; a trailing partial group is
copied unchanged.

Partial Writes
--------------
materialize() stops at the first data record that does not fit the
destination and raises AddressOutOfRangeError. Records written before
it stay in the buffer. Callers that need all-or-nothing behaviour should
materialize into a scratch buffer (see to_image()).

Usage
-----
    from ihexkit.ihex import parse_file, materialize, WordWidth, ByteOrder

    rs = parse_file("firmware.hex")
    flash = bytearray(0x20000)
    materialize(rs, flash, width=WordWidth.HALF, byte_order=ByteOrder.LITTLE)
"""

from dataclasses import dataclass
from typing import Iterator, Optional, Union
import logging

from ihexkit.errors import AddressOutOfRangeError, ErrorKind, IHexIOError
from ihexkit.ihex.records import (
    ByteOrder,
    Record,
    RecordSet,
    RecordType,
    StartAddress,
    WordWidth,
)

# Logger for this module
logger = logging.getLogger(__name__)

SEGMENT_SHIFT = 4
LINEAR_SHIFT = 16


# =============================================================================
# Address State
# =============================================================================

@dataclass
class AddressState:
    """
    Base address bookkeeping for one walk over a record set.

    Attributes:
        segment_base: Last Extended Segment Address value << 4
        linear_base: Last Extended Linear Address value << 16
        mode: Type of the address record set most recently (None before any)
        start: Entry point seen so far, if any
    """
    segment_base: int = 0
    linear_base: int = 0
    mode: Optional[RecordType] = None
    start: Optional[StartAddress] = None

    @property
    def base(self) -> int:
        """The base added to data record addresses."""
        if self.mode == RecordType.EXTENDED_SEGMENT_ADDRESS:
            return self.segment_base
        if self.mode == RecordType.EXTENDED_LINEAR_ADDRESS:
            return self.linear_base
        return 0

    def update(self, record: Record) -> None:
        """Apply an address or start record. Other types are ignored."""
        rtype = record.record_type
        if rtype.is_address:
            self.mode = rtype
            if rtype == RecordType.EXTENDED_SEGMENT_ADDRESS:
                self.segment_base = record.payload_u16() << SEGMENT_SHIFT
                logger.debug(f"Segment base set to 0x{self.segment_base:08X}")
            else:
                self.linear_base = record.payload_u16() << LINEAR_SHIFT
                logger.debug(f"Linear base set to 0x{self.linear_base:08X}")
        elif rtype.is_start:
            self.start = StartAddress(rtype, record.payload_u32())

    def offset_for(self, record: Record) -> int:
        """Absolute offset of a data record under the current base."""
        return self.base + record.address


def resolve(record_set: RecordSet, state: Optional[AddressState] = None) -> Iterator[tuple[int, Record]]:
    """
    Walk a record set and yield (absolute offset, record) for each data record.

    The walk ends at the End Of File record. Pass a state object to
    inspect the address state (e.g. the start address) afterwards.
    """
    if state is None:
        state = AddressState()
    for record in record_set:
        rtype = record.record_type
        if rtype == RecordType.END_OF_FILE:
            return
        if rtype == RecordType.DATA:
            yield state.offset_for(record), record
        else:
            state.update(record)


def data_spans(record_set: RecordSet) -> list[tuple[int, int]]:
    """Return the (start, end) absolute range of every data record."""
    return [(offset, offset + record.length) for offset, record in resolve(record_set)]


# =============================================================================
# Buffer Helpers
# =============================================================================

def _writable_view(destination, size: Optional[int]) -> tuple[memoryview, int]:
    """
    Return a flat byte view of `destination` and the usable size.

    Raises:
        TypeError: If destination is not a writable buffer
        ValueError: If size is negative or larger than the buffer
    """
    try:
        view = memoryview(destination)
    except TypeError:
        raise TypeError(
            f"destination must be a writable buffer, not {type(destination).__name__}"
        ) from None
    if view.readonly:
        raise TypeError("destination buffer is read-only")
    if view.format != "B" or view.ndim != 1:
        view = view.cast("B")

    if size is None:
        size = view.nbytes
    if size < 0:
        raise ValueError(f"destination size must not be negative, got {size}")
    if size > view.nbytes:
        raise ValueError(
            f"destination size {size} exceeds buffer length {view.nbytes}"
        )
    return view, size


def reorder_words(data: bytes, width: WordWidth, byte_order: ByteOrder) -> bytes:
    """
    Apply word width and byte order to a data stream.

    Example:
        >>> reorder_words(bytes([1, 2, 3, 4, 5]), WordWidth.HALF, ByteOrder.LITTLE)
        b'\\x02\\x01\\x04\\x03\\x05'
    """
    if width == WordWidth.BYTE or byte_order == ByteOrder.BIG:
        return data
    out = bytearray(data)
    full = len(data) - len(data) % width
    for i in range(0, full, width):
        out[i:i + width] = data[i:i + width][::-1]
    return bytes(out)


# =============================================================================
# Public Operations
# =============================================================================

def total_size(record_set: RecordSet) -> int:
    """
    Sum the lengths of all data records.

    Address gaps and overlapping records are not taken into account;
    address, start and End Of File records contribute nothing.
    """
    return sum(r.length for r in record_set.data_records())


def image_extent(record_set: RecordSet) -> int:
    """Return one past the highest absolute address written by the data records."""
    return max((end for _, end in data_spans(record_set)), default=0)


def mem_zero(destination, size: Optional[int] = None) -> None:
    """
    Fill the first `size` bytes of a buffer with zeros.

    Args:
        destination: Writable buffer (bytearray, memoryview, array, ...)
        size: Number of bytes to clear (default: whole buffer)

    Raises:
        TypeError: If destination is not a writable buffer
        ValueError: If size is negative or larger than the buffer
    """
    view, size = _writable_view(destination, size)
    view[:size] = bytes(size)


def materialize(
    record_set: RecordSet,
    destination,
    size: Optional[int] = None,
    width: Union[WordWidth, int] = WordWidth.BYTE,
    byte_order: Union[ByteOrder, str] = ByteOrder.BIG,
) -> Optional[StartAddress]:
    """
    Write every data record of a record set into a buffer.

    Args:
        record_set: The parsed records
        destination: Writable buffer receiving the data
        size: Usable size of the destination (default: whole buffer)
        width: Data word width in bytes (1, 2, 4 or 8)
        byte_order: Byte order within each word

    Returns:
        The start address found in the record set, or None

    Raises:
        AddressOutOfRangeError: If a data record ends beyond `size`.
            Data written before the failing record remains in the buffer.
        TypeError: If destination is not a writable buffer
        ValueError: On an invalid size, width or byte order

    Example:
        >>> rs = parse_string(":0300300002337A1E\\n:00000001FF\\n")
        >>> buf = bytearray(64)
        >>> materialize(rs, buf)
        >>> bytes(buf[0x30:0x33])
        b'\\x023z'
    """
    width = WordWidth.from_value(width)
    byte_order = ByteOrder.from_value(byte_order)
    view, size = _writable_view(destination, size)

    state = AddressState()
    written = 0
    for offset, record in resolve(record_set, state):
        end = offset + record.length
        if end > size:
            raise AddressOutOfRangeError(offset, record.length, size)
        view[offset:end] = reorder_words(record.data, width, byte_order)
        written += record.length

    logger.debug(
        f"Materialized {written} bytes from {record_set.source} "
        f"(width {int(width)}, {byte_order.value}-endian)"
    )
    return state.start


def to_image(
    record_set: RecordSet,
    size: Optional[int] = None,
    fill: int = 0x00,
    width: Union[WordWidth, int] = WordWidth.BYTE,
    byte_order: Union[ByteOrder, str] = ByteOrder.BIG,
) -> bytearray:
    """
    Build a new memory image from a record set.

    Args:
        record_set: The parsed records
        size: Image size in bytes (default: image_extent(record_set))
        fill: Byte value for addresses no record writes (0x00-0xFF)
        width: Data word width in bytes
        byte_order: Byte order within each word

    Returns:
        A bytearray of `size` bytes

    Raises:
        AddressOutOfRangeError: If a data record ends beyond `size`
        IHexIOError: If the image cannot be allocated (kind ALLOCATION_FAILURE)
        ValueError: If fill is not a byte value
    """
    if not 0 <= fill <= 0xFF:
        raise ValueError(f"fill value {fill} out of range 0-255")
    if size is None:
        size = image_extent(record_set)
    try:
        image = bytearray([fill]) * size
    except (MemoryError, OverflowError):
        raise IHexIOError(
            f"cannot allocate a {size}-byte image for {record_set.source}",
            kind=ErrorKind.ALLOCATION_FAILURE,
            hint="images start at address 0, so high-based data needs a large image",
        ) from None
    materialize(record_set, image, size, width, byte_order)
    return image
