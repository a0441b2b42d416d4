"""
ihextool - Intel HEX Command-Line Interface
===========================================

This module implements the command-line interface for inspecting Intel
HEX files and converting them into binary memory images.

Commands
--------
- **list**: List every record of a file
- **info**: Show a summary (record counts, data size, address range)
- **validate**: Check a file for errors
- **bin**: Materialize a file into a binary image

Usage Examples
--------------
List records:
    $ ihextool list firmware.hex

Show a summary:
    $ ihextool info firmware.hex

Validate (exit code 1 on error):
    $ ihextool validate firmware.hex

Build a 128KB flash image padded with 0xFF:
    $ ihextool bin firmware.hex -o firmware.bin --size 0x20000 --fill 0xFF

Write 16-bit little-endian words:
    $ ihextool bin firmware.hex -o firmware.bin -w 2 -e little

Defaults for --width, --endian, --fill and --size may be set with the
IHEX_WIDTH, IHEX_BYTE_ORDER, IHEX_FILL and IHEX_IMAGE_SIZE environment
variables.
"""

import logging
from pathlib import Path
from typing import Optional

import click

from ihexkit import __version__
from ihexkit.cli.errors import handle_cli_exception
from ihexkit.config import MaterializeConfig
from ihexkit.ihex import (
    ByteOrder,
    RecordType,
    WordWidth,
    parse_file,
    to_image,
)


# =============================================================================
# Parameter Types
# =============================================================================

class BasedInt(click.ParamType):
    """
    Click parameter type for integers in any base.

    Accepts decimal and 0x/0o/0b-prefixed values: 255, 0xFF, 0b11111111
    Values outside [min, max] are rejected.
    """
    name = "integer"

    def __init__(self, min: Optional[int] = None, max: Optional[int] = None):
        self.min = min
        self.max = max

    def convert(self, value, param: Optional[click.Parameter],
                ctx: Optional[click.Context]) -> int:
        if isinstance(value, int):
            number = value
        else:
            try:
                number = int(value, 0)
            except ValueError:
                self.fail(f"'{value}' is not a valid integer", param, ctx)

        if self.min is not None and number < self.min:
            self.fail(f"{value} is below the minimum of {self.min}", param, ctx)
        if self.max is not None and number > self.max:
            self.fail(f"{value} is above the maximum of 0x{self.max:X}", param, ctx)
        return number


class ByteOrderChoice(click.ParamType):
    """
    Click parameter type for byte order selection.

    Accepts: big, little (case-insensitive)
    """
    name = "byte_order"

    def convert(self, value, param: Optional[click.Parameter],
                ctx: Optional[click.Context]) -> ByteOrder:
        try:
            return ByteOrder.from_value(value)
        except ValueError as e:
            self.fail(str(e), param, ctx)


BYTE_VALUE = BasedInt(0, 0xFF)
BYTE_COUNT = BasedInt(0)
BYTE_ORDER = ByteOrderChoice()


# =============================================================================
# Shared Context
# =============================================================================

class Context:
    """
    Shared context for CLI commands.

    Holds the verbosity flag and the materialization defaults read from
    the environment.
    """

    def __init__(self) -> None:
        self.verbose: bool = False
        self.config: MaterializeConfig = MaterializeConfig()

    def setup_logging(self) -> None:
        """Configure logging based on verbosity."""
        level = logging.DEBUG if self.verbose else logging.WARNING
        logging.basicConfig(
            level=level,
            format="%(levelname)s: %(message)s",
        )


pass_context = click.make_pass_decorator(Context, ensure=True)


# =============================================================================
# Main CLI Group
# =============================================================================

@click.group()
@click.option(
    "-v", "--verbose",
    is_flag=True,
    help="Enable verbose output",
)
@click.version_option(__version__, "--version", "-V", prog_name="ihextool")
@pass_context
def main(ctx: Context, verbose: bool) -> None:
    """
    Intel HEX inspection and conversion tool.

    \b
    Commands:
      list      List records of an Intel HEX file
      info      Show a summary of an Intel HEX file
      validate  Check an Intel HEX file for errors
      bin       Convert an Intel HEX file to a binary image

    \b
    Examples:
      ihextool list firmware.hex
      ihextool info firmware.hex
      ihextool bin firmware.hex -o firmware.bin --fill 0xFF
    """
    ctx.verbose = verbose
    ctx.config = MaterializeConfig.from_env()
    ctx.setup_logging()


# =============================================================================
# List Command
# =============================================================================

@main.command("list")
@click.argument(
    "hex_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@pass_context
def cmd_list(ctx: Context, hex_file: Path) -> None:
    """
    List every record of an Intel HEX file.

    \b
    Example:
      ihextool list firmware.hex

    \b
    Output format:
      #     Type                        Addr  Len  Sum
      1     Data                        0030    3   1E
      2     End Of File                 0000    0   FF
    """
    try:
        record_set = parse_file(hex_file)

        click.echo(f"{'#':<5} {'Type':<27} {'Addr':>4} {'Len':>4} {'Sum':>4}")
        click.echo("-" * 48)
        for index, record in enumerate(record_set, start=1):
            click.echo(
                f"{index:<5} {record.record_type.get_description():<27} "
                f"{record.address:04X} {record.length:>4} {record.checksum:>4X}"
            )
            if ctx.verbose and record.length:
                click.echo(f"      {record.data.hex(' ').upper()}")

    except Exception as e:
        handle_cli_exception(e, ctx.verbose)


# =============================================================================
# Info Command
# =============================================================================

@main.command("info")
@click.argument(
    "hex_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@pass_context
def cmd_info(ctx: Context, hex_file: Path) -> None:
    """
    Show a summary of an Intel HEX file.

    \b
    Example:
      ihextool info firmware.hex

    \b
    Output includes:
      - Record counts by type
      - Total data bytes
      - Lowest and highest data address
      - Start address, if present
    """
    try:
        record_set = parse_file(hex_file)

        click.echo(f"Intel HEX Information: {hex_file}")
        click.echo("=" * 40)
        click.echo(f"Records:     {len(record_set)}")
        for record_type, count in sorted(record_set.count_by_type().items()):
            click.echo(f"  {record_type.get_description() + ':':<27} {count}")
        click.echo(f"Data bytes:  {record_set.total_size()}")

        address_range = record_set.address_range()
        if address_range:
            low, high = address_range
            click.echo(f"Address:     0x{low:08X} - 0x{high - 1:08X}")
        else:
            click.echo("Address:     (no data)")

        start = record_set.start_address
        if start is None:
            click.echo("Start:       (none)")
        elif start.record_type == RecordType.START_SEGMENT_ADDRESS:
            click.echo(f"Start:       {start.segment:04X}:{start.offset:04X}")
        else:
            click.echo(f"Start:       0x{start.value:08X}")

    except Exception as e:
        handle_cli_exception(e, ctx.verbose)


# =============================================================================
# Validate Command
# =============================================================================

@main.command("validate")
@click.argument(
    "hex_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@pass_context
def cmd_validate(ctx: Context, hex_file: Path) -> None:
    """
    Check an Intel HEX file for errors.

    Prints OK and exits with code 0 for a valid file. Otherwise prints
    the first error found and exits with code 1.

    \b
    Example:
      ihextool validate firmware.hex
    """
    try:
        record_set = parse_file(hex_file)
        if ctx.verbose:
            click.echo(f"{hex_file}: {len(record_set)} records, "
                       f"{record_set.total_size()} data bytes")
        click.echo("OK")

    except Exception as e:
        handle_cli_exception(e, ctx.verbose)


# =============================================================================
# Bin Command
# =============================================================================

@main.command("bin")
@click.argument(
    "hex_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@click.option(
    "-o", "--output",
    type=click.Path(dir_okay=False, path_type=Path),
    required=True,
    help="Output binary file path (required)",
)
@click.option(
    "-w", "--width",
    type=click.Choice(["1", "2", "4", "8"]),
    default=None,
    help="Data word width in bytes (default: 1)",
)
@click.option(
    "-e", "--endian",
    "byte_order",
    type=BYTE_ORDER,
    default=None,
    help="Byte order within a word: big, little (default: big)",
)
@click.option(
    "--fill",
    type=BYTE_VALUE,
    default=None,
    help="Value of bytes not covered by any record (default: 0x00)",
)
@click.option(
    "--size",
    type=BYTE_COUNT,
    default=None,
    help="Image size in bytes (default: up to the highest data address)",
)
@pass_context
def cmd_bin(
    ctx: Context,
    hex_file: Path,
    output: Path,
    width: Optional[str],
    byte_order: Optional[ByteOrder],
    fill: Optional[int],
    size: Optional[int],
) -> None:
    """
    Convert an Intel HEX file into a binary memory image.

    Extended segment and linear address records are applied, so the
    image starts at absolute address 0.
    A file based high in memory through an Extended Linear Address
    record therefore yields an image at least that large.

    \b
    Examples:
      ihextool bin firmware.hex -o firmware.bin
      ihextool bin firmware.hex -o flash.bin --size 0x20000 --fill 0xFF
      ihextool bin firmware.hex -o rom.bin -w 2 -e little
    """
    try:
        config = ctx.config
        word_width = WordWidth.from_value(width) if width else config.width
        order = byte_order or config.byte_order
        fill_value = config.fill if fill is None else fill
        image_size = config.image_size if size is None else size

        record_set = parse_file(hex_file)
        image = to_image(record_set, image_size, fill_value, word_width, order)
        output.write_bytes(image)

        click.echo(f"Created {output} ({len(image)} bytes, "
                   f"{record_set.total_size()} data bytes)")

    except Exception as e:
        handle_cli_exception(e, ctx.verbose)


if __name__ == "__main__":
    main()
