"""
Hex Digit Codec
===============

Converts ASCII hex digit pairs and quads into unsigned integers. This is
the leaf utility used by the line parser for every field of a record.

Technical Details
-----------------
- Accepted digits: 0-9, A-F, a-f
- Two digits form one byte: value = high * 16 + low
- Four digits form a 16-bit word, most significant byte first
- Input may be str, bytes or bytearray

Python's int(x, 16) is not used because it tolerates surrounding
whitespace, underscores and non-ASCII digits, none of which are legal
inside an Intel HEX record.

Usage
-----
    from ihexkit.ihex.codec import decode_u8, decode_u16

    decode_u8("FF")      # 255
    decode_u16("0030")   # 0x0030
    decode_u8("G0")      # raises HexParseError
"""

from typing import Final, Union

from ihexkit.errors import HexParseError

HexInput = Union[str, bytes, bytearray, memoryview]

# =============================================================================
# Nibble Lookup Table
# =============================================================================

# Maps a character code (0-255) to its nibble value, or -1 if not a hex digit
_NIBBLES: Final[tuple[int, ...]] = tuple(
    int(chr(code), 16) if chr(code) in "0123456789abcdefABCDEF" else -1
    for code in range(256)
)


def _codes(chars: HexInput) -> bytes:
    """Normalize the input to a sequence of character codes."""
    if isinstance(chars, str):
        try:
            return chars.encode("ascii")
        except UnicodeEncodeError:
            raise HexParseError(f"invalid hex digits {chars!r}") from None
    return bytes(chars)


def _nibble(code: int, chars: HexInput) -> int:
    value = _NIBBLES[code]
    if value < 0:
        raise HexParseError(f"invalid hex digit {chr(code)!r} in {chars!r}")
    return value


# =============================================================================
# Public Decoders
# =============================================================================

def decode_u8(chars: HexInput) -> int:
    """
    Decode two hex digits into an 8-bit value.

    Args:
        chars: Exactly two hex digit characters

    Returns:
        Integer in range 0-255

    Raises:
        HexParseError: If either character is not a hex digit, or the
            input is not exactly two characters long

    Example:
        >>> decode_u8("FF")
        255
        >>> decode_u8(b"7a")
        122
    """
    codes = _codes(chars)
    if len(codes) != 2:
        raise HexParseError(f"expected 2 hex digits, got {len(codes)}")
    return (_nibble(codes[0], chars) << 4) | _nibble(codes[1], chars)


def decode_u16(chars: HexInput) -> int:
    """
    Decode four hex digits into a 16-bit value (big-endian).

    Args:
        chars: Exactly four hex digit characters

    Returns:
        Integer in range 0-65535

    Raises:
        HexParseError: If any character is not a hex digit, or the input
            is not exactly four characters long

    Example:
        >>> decode_u16("1234")
        4660
    """
    codes = _codes(chars)
    if len(codes) != 4:
        raise HexParseError(f"expected 4 hex digits, got {len(codes)}")
    return (decode_u8(codes[0:2]) << 8) | decode_u8(codes[2:4])


def decode_bytes(chars: HexInput) -> bytes:
    """
    Decode an even-length run of hex digit pairs.

    Raises:
        HexParseError: On odd length or any invalid digit
    """
    codes = _codes(chars)
    if len(codes) % 2:
        raise HexParseError(f"odd number of hex digits ({len(codes)})")
    return bytes(decode_u8(codes[i:i + 2]) for i in range(0, len(codes), 2))
