"""
Intel HEX Parser
================

This module turns Intel HEX text into a validated RecordSet.

Line Parser
-----------
parse_record() decodes one line into a Record, checking the grammar,
the record type, the declared length and the checksum.

Record Set Assembler
--------------------
RecordSetAssembler drives parse_record() over every line of an input.
It skips blank lines, stops at the first End Of File record and ignores
whatever follows it. An input that runs out before an End Of File
record is rejected.

End-of-input Rules
------------------
- No non-blank line at all: NoInputError
- Final line unterminated and shorter than its length field requires
  (the input was cut off mid-record): PrematureEofError
- All lines complete but none is End Of File: NoEofError

Usage Examples
--------------
Parsing a string:
    >>> from ihexkit.ihex import parse_string
    >>> rs = parse_string(":0300300002337A1E\\n:00000001FF\\n")
    >>> rs[0].data.hex()
    '02337a'

Parsing a file:
    >>> rs = parse_file("firmware.hex")
    >>> print(f"{len(rs)} records, {rs.total_size()} data bytes")
"""

from pathlib import Path
from typing import Optional, Union
import logging
import re

from ihexkit.errors import (
    HexParseError,
    IHexIOError,
    ErrorKind,
    NoEofError,
    NoInputError,
    PrematureEofError,
    SourceLocation,
    UnknownRecordTypeError,
    WrongRecordLengthError,
)
from ihexkit.ihex.checksum import verify_record
from ihexkit.ihex.codec import decode_bytes, decode_u8, decode_u16
from ihexkit.ihex.records import Record, RecordSet, RecordType

# Logger for this module
logger = logging.getLogger(__name__)

START_CODE = ":"

# Hex digits in a record without data: length(2) + address(4) + type(2) + checksum(2)
MIN_RECORD_DIGITS = 10

# Field offsets within the record body (after the start code)
_LENGTH_AT = 0
_ADDRESS_AT = 2
_TYPE_AT = 6
_DATA_AT = 8

_LINE_BREAK = re.compile(r"\r\n|\r|\n")


# =============================================================================
# Line Parser
# =============================================================================

def _decode_field(decoder, body: str, start: int, width: int,
                  location: Optional[SourceLocation], column: int) -> int:
    """Decode one fixed-width field, attaching the column on failure."""
    try:
        return decoder(body[start:start + width])
    except HexParseError as e:
        raise HexParseError(e.message, location=_at(location, column + start)) from e


def _at(location: Optional[SourceLocation], column: int) -> Optional[SourceLocation]:
    if location is None:
        return None
    return SourceLocation(location.source, location.line, column)


def _describe_non_ascii(ch: str) -> str:
    # Bytes decoded with errors="surrogateescape" come back as U+DC80-U+DCFF
    code = ord(ch)
    if 0xDC80 <= code <= 0xDCFF:
        return f"non-ASCII byte 0x{code - 0xDC00:02X}"
    return f"non-ASCII character {ch!r}"


def parse_record(
    line: str,
    line_number: Optional[int] = None,
    source: str = "<string>",
    at_end: bool = False,
) -> Record:
    """
    Parse a single Intel HEX record line.

    Surrounding whitespace, including the CR/LF line terminator, is
    ignored. The line must start with ':'.

    Args:
        line: One line of input text
        line_number: 1-indexed line number for error locations
        source: Input name for error locations
        at_end: True if this is the last line of the input and it has no
            line terminator; a truncated record then raises
            PrematureEofError instead of WrongRecordLengthError

    Returns:
        The decoded, checksum-verified Record

    Raises:
        HexParseError: Non-ASCII byte, missing start code or invalid hex digit
        UnknownRecordTypeError: Type code outside 00-05
        WrongRecordLengthError: Line length disagrees with the length field,
            or the payload size is wrong for the record type
        PrematureEofError: Truncated final line (see at_end)
        IncorrectChecksumError: Checksum mismatch

    Example:
        >>> record = parse_record(":00000001FF")
        >>> record.record_type
        <RecordType.END_OF_FILE: 1>
    """
    location = SourceLocation(source, line_number) if line_number is not None else None

    stripped = line.rstrip()
    leading = len(stripped) - len(stripped.lstrip())
    stripped = stripped.lstrip()

    if not stripped.isascii():
        index = next(i for i, ch in enumerate(stripped) if not ch.isascii())
        raise HexParseError(
            f"{_describe_non_ascii(stripped[index])} in record",
            location=_at(location, leading + index + 1),
        )

    if not stripped.startswith(START_CODE):
        raise HexParseError(
            "record does not start with ':'",
            location=_at(location, leading + 1),
            hint="every Intel HEX record line must begin with a colon",
        )

    body = stripped[1:]
    # Column (1-indexed) of the first body character
    column = leading + 2

    if len(body) < MIN_RECORD_DIGITS:
        error_class = PrematureEofError if at_end else WrongRecordLengthError
        raise error_class(
            f"record has {len(body)} hex digits, at least {MIN_RECORD_DIGITS} required",
            location=location,
        )

    length = _decode_field(decode_u8, body, _LENGTH_AT, 2, location, column)
    address = _decode_field(decode_u16, body, _ADDRESS_AT, 4, location, column)
    type_code = _decode_field(decode_u8, body, _TYPE_AT, 2, location, column)

    try:
        record_type = RecordType.from_code(type_code)
    except UnknownRecordTypeError:
        raise UnknownRecordTypeError(type_code, location=_at(location, column + _TYPE_AT)) from None

    expected_digits = MIN_RECORD_DIGITS + 2 * length
    if len(body) != expected_digits:
        if len(body) < expected_digits and at_end:
            raise PrematureEofError(
                f"input ends inside a record: {len(body)} of {expected_digits} hex digits",
                location=location,
            )
        raise WrongRecordLengthError(
            f"length field {length:02X} requires {expected_digits} hex digits, "
            f"line has {len(body)}",
            location=location,
        )

    expected_length = record_type.expected_length()
    if expected_length is not None and length != expected_length:
        raise WrongRecordLengthError(
            f"{record_type.get_description()} record must have length "
            f"{expected_length:02X}, not {length:02X}",
            location=location,
        )

    data_end = _DATA_AT + 2 * length
    try:
        data = decode_bytes(body[_DATA_AT:data_end])
    except HexParseError as e:
        raise HexParseError(e.message, location=_at(location, column + _DATA_AT)) from e
    checksum = _decode_field(decode_u8, body, data_end, 2, location, column)

    record = Record(length, record_type, address, data, checksum)
    verify_record(record, location=_at(location, column + data_end))

    logger.debug(
        f"Parsed {record_type.get_description()} record at 0x{address:04X} "
        f"({length} bytes)"
    )
    return record


# =============================================================================
# Record Set Assembler
# =============================================================================

class RecordSetAssembler:
    """
    Accumulates parsed lines into a RecordSet.

    Feed lines in input order, then call finish(). Feeding stops being
    meaningful once the End Of File record has been seen; later lines
    are counted and ignored.

    Example:
        >>> assembler = RecordSetAssembler()
        >>> assembler.feed(":0300300002337A1E", 1)
        False
        >>> assembler.feed(":00000001FF", 2)
        True
        >>> rs = assembler.finish()
    """

    def __init__(self, source: str = "<string>"):
        self.source = source
        self.records: list[Record] = []
        self.complete = False
        self.non_blank_lines = 0
        self.ignored_lines = 0

    def feed(self, line: str, line_number: Optional[int] = None, at_end: bool = False) -> bool:
        """
        Parse one line and append its record.

        Returns:
            True once the End Of File record has been parsed
        """
        if not line.strip():
            return self.complete
        self.non_blank_lines += 1
        if self.complete:
            self.ignored_lines += 1
            return True

        record = parse_record(line, line_number, self.source, at_end=at_end)
        self.records.append(record)
        if record.record_type == RecordType.END_OF_FILE:
            self.complete = True
        return self.complete

    def finish(self) -> RecordSet:
        """
        Return the assembled RecordSet.

        Raises:
            NoInputError: If no non-blank line was fed
            NoEofError: If no End Of File record was parsed
        """
        if self.non_blank_lines == 0:
            raise NoInputError(f"no records in {self.source}")
        if not self.complete:
            raise NoEofError(
                f"no End Of File record in {self.source} "
                f"after {len(self.records)} records",
                hint="the last record should be :00000001FF",
            )
        if self.ignored_lines:
            logger.debug(f"Ignored {self.ignored_lines} lines after End Of File record")

        record_set = RecordSet(tuple(self.records), source=self.source)
        logger.debug(f"Assembled {len(record_set)} records from {self.source}")
        return record_set

    def assemble(self, text: str) -> RecordSet:
        """Feed every line of `text` and return the finished RecordSet."""
        lines = _LINE_BREAK.split(text)
        # An input ending in a line break leaves one empty trailing element;
        # otherwise the last line is unterminated.
        last_index = len(lines) - 1
        for index, line in enumerate(lines):
            at_end = index == last_index and line != ""
            if self.feed(line, index + 1, at_end=at_end):
                # Remaining lines are only counted, never parsed
                self.ignored_lines += sum(1 for rest in lines[index + 1:] if rest.strip())
                break
        return self.finish()


# =============================================================================
# Decode Entry Points
# =============================================================================

def parse_string(text: str, source: str = "<string>") -> RecordSet:
    """
    Parse Intel HEX text held in memory.

    Raises:
        IHexError: Any decode failure, see parse_record() and
            RecordSetAssembler.finish()
    """
    return RecordSetAssembler(source).assemble(text)


def parse_bytes(data: Union[bytes, bytearray, memoryview], source: str = "<bytes>") -> RecordSet:
    """
    Parse Intel HEX text given as raw bytes.

    Raises:
        HexParseError: If a parsed line contains non-ASCII bytes
    """
    # Non-ASCII bytes survive as surrogates and are only rejected on lines
    # that actually get parsed; anything after End Of File is ignored.
    text = bytes(data).decode("ascii", errors="surrogateescape")
    return parse_string(text, source=source)


def parse_file(filepath: Union[str, Path]) -> RecordSet:
    """
    Read and parse an Intel HEX file from disk.

    Args:
        filepath: Path to the .hex file

    Returns:
        The parsed RecordSet

    Raises:
        IHexIOError: If the file cannot be read
        IHexError: Any decode failure
    """
    filepath = Path(filepath)
    try:
        data = filepath.read_bytes()
    except MemoryError:
        raise IHexIOError(
            f"cannot allocate memory for '{filepath}'",
            kind=ErrorKind.ALLOCATION_FAILURE,
        ) from None
    except OSError as e:
        raise IHexIOError(f"cannot read '{filepath}': {e.strerror or e}") from e

    logger.debug(f"Read {len(data)} bytes from {filepath}")
    return parse_bytes(data, source=str(filepath))
