"""
ihexkit Error Hierarchy
=======================

This module defines the exception hierarchy for the whole toolkit.
All exceptions inherit from IHexError, allowing callers to catch every
decode or materialization failure with a single except clause.

Exception Hierarchy
-------------------
IHexError (base)
├── HexParseError - malformed hex digit or line grammar
├── IncorrectChecksumError - record checksum does not sum to zero
├── WrongRecordLengthError - line length disagrees with the length field
├── UnknownRecordTypeError - record type outside 00-05
├── NoInputError - input holds no non-blank line
├── NoEofError - input ended without an End Of File record
├── PrematureEofError - input ended in the middle of a record
├── AddressOutOfRangeError - data does not fit the destination buffer
└── IHexIOError - reading the input failed

Every exception carries an ErrorKind code and a human readable message.
There is no process-wide "last error" slot: the kind travels with the
exception, so concurrent parses never observe each other's failures.

Error messages follow this format:
    source:line:column: error: description
    hint: suggestion for fixing (when available)
"""

from dataclasses import dataclass
from enum import IntEnum
from typing import Optional


class ErrorKind(IntEnum):
    """
    Numeric error codes.

    The values are stable and may be used as process exit details or
    stored alongside a failed job.
    """
    INCORRECT_CHECKSUM = 0x01
    NO_EOF = 0x02
    PARSE_ERROR = 0x03
    WRONG_RECORD_LENGTH = 0x04
    NO_INPUT = 0x05
    UNKNOWN_RECORD_TYPE = 0x06
    PREMATURE_EOF = 0x07
    ADDRESS_OUT_OF_RANGE = 0x08
    IO_FAILURE = 0x09
    ALLOCATION_FAILURE = 0x0A

    def get_description(self) -> str:
        """Return a short human-readable label for this kind."""
        return self.name.replace("_", " ").lower()


# =============================================================================
# Source Location Tracking
# =============================================================================

@dataclass(frozen=True)
class SourceLocation:
    """
    A position in the Intel HEX input, used for error reporting.

    Attributes:
        source: Name of the input (file path or "<string>")
        line: Line number (1-indexed)
        column: Column number (1-indexed, 0 when unknown)
    """
    source: str
    line: int
    column: int = 0

    def __str__(self) -> str:
        if self.column > 0:
            return f"{self.source}:{self.line}:{self.column}"
        return f"{self.source}:{self.line}"


# =============================================================================
# Base Exception Class
# =============================================================================

class IHexError(Exception):
    """
    Base exception for all ihexkit errors.

        try:
            records = parse_file("firmware.hex")
        except IHexError as e:
            print(f"{e.kind.name}: {e.message}")

    Attributes:
        kind: The ErrorKind code of this failure
        message: The error description, without location prefix
        location: Where in the input the error occurred (optional)
        hint: A suggestion for fixing the error (optional)
    """

    kind: ErrorKind = ErrorKind.PARSE_ERROR

    def __init__(
        self,
        message: str,
        location: Optional[SourceLocation] = None,
        hint: Optional[str] = None,
    ):
        self.message = message
        self.location = location
        self.hint = hint
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """
        Format the error message with location and hint.

        Example output:
            firmware.hex:12:10: error: invalid hex digit 'G'
            hint: record data must only contain 0-9, A-F
        """
        if self.location:
            text = f"{self.location}: error: {self.message}"
        else:
            text = f"error: {self.message}"
        if self.hint:
            text += f"\nhint: {self.hint}"
        return text


# =============================================================================
# Decode Exceptions
# =============================================================================

class HexParseError(IHexError):
    """
    Malformed input text.

    Raised when:
    - A character that should be a hex digit is not one
    - A line does not start with ':'
    - The input is not ASCII
    """
    kind = ErrorKind.PARSE_ERROR


class IncorrectChecksumError(IHexError):
    """
    Record checksum mismatch.

    The sum of all record bytes including the checksum must be zero
    modulo 256. The expected checksum is the one that would make it so.
    """
    kind = ErrorKind.INCORRECT_CHECKSUM

    def __init__(
        self,
        expected: int,
        actual: int,
        location: Optional[SourceLocation] = None,
    ):
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"checksum mismatch: expected {expected:02X}, got {actual:02X}",
            location=location,
        )


class WrongRecordLengthError(IHexError):
    """
    Line length disagrees with the record's length field.

    Also raised when a non-data record carries a payload of the wrong
    size for its type, e.g. an Extended Linear Address record that is
    not exactly 2 bytes long.
    """
    kind = ErrorKind.WRONG_RECORD_LENGTH


class UnknownRecordTypeError(IHexError):
    """Record type code outside the six types defined by Intel HEX."""
    kind = ErrorKind.UNKNOWN_RECORD_TYPE

    def __init__(self, code: int, location: Optional[SourceLocation] = None):
        self.code = code
        super().__init__(
            f"unknown record type {code:02X}",
            location=location,
            hint="valid record types are 00 through 05",
        )


class NoInputError(IHexError):
    """The input contained no non-blank lines."""
    kind = ErrorKind.NO_INPUT


class NoEofError(IHexError):
    """Input exhausted without an End Of File record."""
    kind = ErrorKind.NO_EOF


class PrematureEofError(IHexError):
    """
    Input ended in the middle of a record.

    Only raised for a final, unterminated line that is shorter than its
    own length field requires. A complete input that simply lacks an
    End Of File record raises NoEofError instead.
    """
    kind = ErrorKind.PREMATURE_EOF


# =============================================================================
# Materialization Exceptions
# =============================================================================

class AddressOutOfRangeError(IHexError):
    """
    Data record does not fit into the destination buffer.

    Materialization stops at the first such record. Records written
    before it stay in the buffer; nothing is rolled back.
    """
    kind = ErrorKind.ADDRESS_OUT_OF_RANGE

    def __init__(self, offset: int, length: int, size: int):
        self.offset = offset
        self.length = length
        self.size = size
        super().__init__(
            f"record at 0x{offset:08X} ({length} bytes) exceeds "
            f"destination size 0x{size:X}",
            hint="use a larger destination buffer",
        )


# =============================================================================
# Input Exceptions
# =============================================================================

class IHexIOError(IHexError):
    """
    Reading the input or allocating an image failed.

    Wraps OSError (kind IO_FAILURE) raised while loading an input file,
    and MemoryError (kind ALLOCATION_FAILURE) raised while loading a file
    or allocating a memory image.
    """
    kind = ErrorKind.IO_FAILURE

    def __init__(self, message: str, kind: ErrorKind = ErrorKind.IO_FAILURE,
                 hint: Optional[str] = None):
        self.kind = kind
        super().__init__(message, hint=hint)
