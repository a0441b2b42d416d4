"""
ihexkit - Intel HEX Decoding Toolkit
====================================

This package decodes Intel HEX files, the line-oriented ASCII format used
to ship firmware and ROM images, validates every record, and writes the
decoded data into flat memory buffers or binary image files.

Main Components
---------------
- **ihex**: Intel HEX decoding
    Parses text into a RecordSet and materializes it into memory

- **config**: Materialization defaults
    Word width, byte order and fill value, with environment overrides

- **cli**: Command-line tool (ihextool)
    Lists, inspects, validates and converts Intel HEX files

Quick Start
-----------
Parse a file:
    >>> from ihexkit import parse_file
    >>> rs = parse_file("firmware.hex")
    >>> print(f"{len(rs)} records, {rs.total_size()} data bytes")

Build a binary image:
    >>> image = rs.to_image(fill=0xFF)

Or use the command-line tool:
    $ ihextool info firmware.hex
    $ ihextool bin firmware.hex -o firmware.bin --fill 0xFF

Version History
---------------
1.0.0 - Initial release with parser, materializer and ihextool
"""

__version__ = "1.0.0"

# =============================================================================
# Public API Exports
# =============================================================================

from ihexkit.errors import (
    ErrorKind,
    SourceLocation,
    IHexError,
    HexParseError,
    IncorrectChecksumError,
    WrongRecordLengthError,
    UnknownRecordTypeError,
    NoInputError,
    NoEofError,
    PrematureEofError,
    AddressOutOfRangeError,
    IHexIOError,
)

from ihexkit.ihex import (
    RecordType,
    WordWidth,
    ByteOrder,
    Record,
    RecordSet,
    StartAddress,
    decode_u8,
    decode_u16,
    is_valid,
    parse_record,
    parse_string,
    parse_bytes,
    parse_file,
    total_size,
    mem_zero,
    materialize,
    to_image,
)

from ihexkit.config import MaterializeConfig

__all__ = [
    # Version info
    "__version__",
    # Exception hierarchy
    "ErrorKind",
    "SourceLocation",
    "IHexError",
    "HexParseError",
    "IncorrectChecksumError",
    "WrongRecordLengthError",
    "UnknownRecordTypeError",
    "NoInputError",
    "NoEofError",
    "PrematureEofError",
    "AddressOutOfRangeError",
    "IHexIOError",
    # Records
    "RecordType",
    "WordWidth",
    "ByteOrder",
    "Record",
    "RecordSet",
    "StartAddress",
    # Decoding
    "decode_u8",
    "decode_u16",
    "is_valid",
    "parse_record",
    "parse_string",
    "parse_bytes",
    "parse_file",
    # Memory
    "total_size",
    "mem_zero",
    "materialize",
    "to_image",
    # Configuration
    "MaterializeConfig",
]
