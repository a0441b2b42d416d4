"""
Intel HEX Record Checksums
==========================

Every Intel HEX record ends with a one-byte checksum. It is the two's
complement of the low byte of the sum of all other record bytes:

    length + address_hi + address_lo + type + data[0] + ... + data[n-1]

so that adding the checksum to that sum gives zero modulo 256.

The parser verifies each line with is_valid(). The functions are also
exposed for callers that build or inspect records programmatically.

Example
-------
For the record :0300300002337A1E

    03 + 00 + 30 + 00 + 02 + 33 + 7A = 0xE2
    checksum = (0x100 - 0xE2) & 0xFF = 0x1E
"""

from typing import TYPE_CHECKING, Final, Iterable, Optional

from ihexkit.errors import IncorrectChecksumError, SourceLocation

if TYPE_CHECKING:
    from ihexkit.ihex.records import Record

BYTE_MASK: Final[int] = 0xFF


def _field_sum(length: int, address: int, record_type: int, data: Iterable[int]) -> int:
    return length + (address >> 8) + (address & 0xFF) + int(record_type) + sum(data)


def calculate_checksum(length: int, address: int, record_type: int, data: bytes) -> int:
    """
    Calculate the checksum byte for the given record fields.

    Args:
        length: The length field (normally len(data))
        address: 16-bit address field
        record_type: Record type code
        data: Record payload

    Returns:
        Checksum byte (0x00 - 0xFF)

    Example:
        >>> calculate_checksum(0, 0, 1, b"")
        255
    """
    return (-_field_sum(length, address, record_type, data)) & BYTE_MASK


def record_sum(record: "Record") -> int:
    """Return the low byte of the sum of all record bytes including the checksum."""
    total = _field_sum(record.length, record.address, record.record_type, record.data)
    return (total + record.checksum) & BYTE_MASK


def is_valid(record: "Record") -> bool:
    """
    Check whether a record satisfies the checksum invariant.

    Returns:
        True if all record bytes, checksum included, sum to 0 mod 256
    """
    return record_sum(record) == 0


def verify_record(record: "Record", location: Optional[SourceLocation] = None) -> None:
    """
    Raise if the record's checksum is wrong.

    Raises:
        IncorrectChecksumError: Carrying the expected and stored checksum
    """
    if not is_valid(record):
        expected = calculate_checksum(
            record.length, record.address, record.record_type, record.data
        )
        raise IncorrectChecksumError(expected, record.checksum, location=location)
