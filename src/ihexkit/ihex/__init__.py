"""
Intel HEX Decoding and Materialization
======================================

This module provides the complete decode path for Intel HEX files:
text in, validated records out, records written into memory.

Overview
--------
- **codec**: Hex digit pairs and quads to integers
- **records**: Record, RecordSet and the RecordType/WordWidth/ByteOrder enums
- **checksum**: Record checksum calculation and validation
- **parser**: Line parser, record set assembler and the parse_* entry points
- **memory**: Address resolution, materialization and size/zero helpers

Quick Start
-----------
Parse a file and build a flat image:

    >>> from ihexkit.ihex import parse_file
    >>> rs = parse_file("firmware.hex")
    >>> image = rs.to_image(fill=0xFF)

Write into an existing buffer as 16-bit little-endian words:

    >>> from ihexkit.ihex import materialize, WordWidth, ByteOrder
    >>> flash = bytearray(0x10000)
    >>> materialize(rs, flash, width=WordWidth.HALF, byte_order=ByteOrder.LITTLE)

Reference
---------
- Intel Hexadecimal Object File Format Specification, Revision A
"""

# =============================================================================
# Public API Exports
# =============================================================================

from ihexkit.ihex.codec import (
    decode_u8,
    decode_u16,
    decode_bytes,
)

from ihexkit.ihex.records import (
    # Enums
    RecordType,
    WordWidth,
    ByteOrder,
    # Data structures
    Record,
    RecordSet,
    StartAddress,
)

from ihexkit.ihex.checksum import (
    calculate_checksum,
    record_sum,
    is_valid,
    verify_record,
)

from ihexkit.ihex.parser import (
    RecordSetAssembler,
    parse_record,
    parse_string,
    parse_bytes,
    parse_file,
)

from ihexkit.ihex.memory import (
    AddressState,
    resolve,
    data_spans,
    reorder_words,
    total_size,
    image_extent,
    mem_zero,
    materialize,
    to_image,
)

__all__ = [
    # Codec
    "decode_u8",
    "decode_u16",
    "decode_bytes",
    # Enums
    "RecordType",
    "WordWidth",
    "ByteOrder",
    # Data structures
    "Record",
    "RecordSet",
    "StartAddress",
    # Checksum
    "calculate_checksum",
    "record_sum",
    "is_valid",
    "verify_record",
    # Parser
    "RecordSetAssembler",
    "parse_record",
    "parse_string",
    "parse_bytes",
    "parse_file",
    # Memory
    "AddressState",
    "resolve",
    "data_spans",
    "reorder_words",
    "total_size",
    "image_extent",
    "mem_zero",
    "materialize",
    "to_image",
]
