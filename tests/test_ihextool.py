"""
ihextool CLI Tests
==================

Tests for the ihextool command-line interface, run through Click's
CliRunner in an isolated filesystem.
"""

from pathlib import Path

import click
import pytest
from click.testing import CliRunner

from ihexkit import __version__
from ihexkit.cli.errors import ExitCode, handle_cli_exception
from ihexkit.cli.ihextool import main
from ihexkit.errors import NoEofError


SAMPLE_HEX = ":0300300002337A1E\n:00000001FF\n"
LINEAR_HEX = ":020000040001F9\n:01001000AA45\n:0400000508000000EF\n:00000001FF\n"
BAD_CHECKSUM_HEX = ":0100000000FE\n:00000001FF\n"


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


def write_hex(name: str, text: str) -> str:
    Path(name).write_text(text)
    return name


class TestMain:
    """Tests for the command group."""

    def test_version(self, runner):
        result = runner.invoke(main, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output

    def test_help_lists_commands(self, runner):
        result = runner.invoke(main, ["--help"])
        assert result.exit_code == 0
        for command in ("list", "info", "validate", "bin"):
            assert command in result.output


class TestValidate:
    """Tests for the validate command."""

    def test_valid_file(self, runner):
        with runner.isolated_filesystem():
            write_hex("ok.hex", SAMPLE_HEX)
            result = runner.invoke(main, ["validate", "ok.hex"])
            assert result.exit_code == 0, result.output
            assert "OK" in result.output

    def test_bad_checksum(self, runner):
        with runner.isolated_filesystem():
            write_hex("bad.hex", BAD_CHECKSUM_HEX)
            result = runner.invoke(main, ["validate", "bad.hex"])
            assert result.exit_code == ExitCode.DECODE_ERROR
            assert "checksum mismatch" in result.output

    def test_missing_eof(self, runner):
        with runner.isolated_filesystem():
            write_hex("noeof.hex", ":0300300002337A1E\n")
            result = runner.invoke(main, ["validate", "noeof.hex"])
            assert result.exit_code == ExitCode.DECODE_ERROR
            assert "End Of File" in result.output

    def test_missing_file(self, runner):
        with runner.isolated_filesystem():
            result = runner.invoke(main, ["validate", "nope.hex"])
            assert result.exit_code == 2


class TestList:
    """Tests for the list command."""

    def test_lists_records(self, runner):
        with runner.isolated_filesystem():
            write_hex("ok.hex", SAMPLE_HEX)
            result = runner.invoke(main, ["list", "ok.hex"])
            assert result.exit_code == 0, result.output
            assert "Data" in result.output
            assert "End Of File" in result.output
            assert "0030" in result.output

    def test_verbose_shows_data(self, runner):
        with runner.isolated_filesystem():
            write_hex("ok.hex", SAMPLE_HEX)
            result = runner.invoke(main, ["-v", "list", "ok.hex"])
            assert result.exit_code == 0, result.output
            assert "02 33 7A" in result.output


class TestInfo:
    """Tests for the info command."""

    def test_summary(self, runner):
        with runner.isolated_filesystem():
            write_hex("ok.hex", SAMPLE_HEX)
            result = runner.invoke(main, ["info", "ok.hex"])
            assert result.exit_code == 0, result.output
            assert "Data bytes:  3" in result.output
            assert "0x00000030 - 0x00000032" in result.output
            assert "Start:       (none)" in result.output

    def test_linear_start(self, runner):
        with runner.isolated_filesystem():
            write_hex("lin.hex", LINEAR_HEX)
            result = runner.invoke(main, ["info", "lin.hex"])
            assert result.exit_code == 0, result.output
            assert "0x00010010" in result.output
            assert "Start:       0x08000000" in result.output


class TestBin:
    """Tests for the bin command."""

    def test_default_image(self, runner):
        with runner.isolated_filesystem():
            write_hex("ok.hex", SAMPLE_HEX)
            result = runner.invoke(main, ["bin", "ok.hex", "-o", "ok.bin"])
            assert result.exit_code == 0, result.output
            data = Path("ok.bin").read_bytes()
            assert len(data) == 0x33
            assert data[0x30:] == bytes([0x02, 0x33, 0x7A])
            assert data[:0x30] == bytes(0x30)

    def test_fill_and_size(self, runner):
        with runner.isolated_filesystem():
            write_hex("ok.hex", SAMPLE_HEX)
            result = runner.invoke(
                main, ["bin", "ok.hex", "-o", "ok.bin", "--fill", "0xFF", "--size", "0x40"]
            )
            assert result.exit_code == 0, result.output
            data = Path("ok.bin").read_bytes()
            assert len(data) == 0x40
            assert data[0] == 0xFF
            assert data[0x33:] == b"\xff" * 0x0D

    def test_little_endian_words(self, runner):
        with runner.isolated_filesystem():
            write_hex("w.hex", ":0400000001020304F2\n:00000001FF\n")
            result = runner.invoke(main, ["bin", "w.hex", "-o", "w.bin", "-w", "2", "-e", "little"])
            assert result.exit_code == 0, result.output
            assert Path("w.bin").read_bytes() == bytes([2, 1, 4, 3])

    def test_env_defaults(self, runner):
        with runner.isolated_filesystem():
            write_hex("ok.hex", SAMPLE_HEX)
            result = runner.invoke(
                main, ["bin", "ok.hex", "-o", "ok.bin"], env={"IHEX_FILL": "0xEE"}
            )
            assert result.exit_code == 0, result.output
            assert Path("ok.bin").read_bytes()[0] == 0xEE

    def test_image_too_small(self, runner):
        with runner.isolated_filesystem():
            write_hex("ok.hex", SAMPLE_HEX)
            result = runner.invoke(main, ["bin", "ok.hex", "-o", "ok.bin", "--size", "16"])
            assert result.exit_code == ExitCode.DECODE_ERROR
            assert "exceeds destination size" in result.output

    def test_invalid_fill(self, runner):
        with runner.isolated_filesystem():
            write_hex("ok.hex", SAMPLE_HEX)
            result = runner.invoke(main, ["bin", "ok.hex", "-o", "ok.bin", "--fill", "300"])
            assert result.exit_code == ExitCode.INVALID_ARGS
            assert "maximum of 0xFF" in result.output
            assert not Path("ok.bin").exists()

    def test_negative_size(self, runner):
        with runner.isolated_filesystem():
            write_hex("ok.hex", SAMPLE_HEX)
            result = runner.invoke(main, ["bin", "ok.hex", "-o", "ok.bin", "--size=-1"])
            assert result.exit_code == ExitCode.INVALID_ARGS
            assert "minimum of 0" in result.output

    def test_invalid_endian(self, runner):
        with runner.isolated_filesystem():
            write_hex("ok.hex", SAMPLE_HEX)
            result = runner.invoke(main, ["bin", "ok.hex", "-o", "ok.bin", "-e", "middle"])
            assert result.exit_code == 2


class TestErrorHandling:
    """Tests for handle_cli_exception exit codes."""

    def test_decode_error(self):
        with pytest.raises(SystemExit) as exc_info:
            handle_cli_exception(NoEofError("no End Of File record"))
        assert exc_info.value.code == ExitCode.DECODE_ERROR

    def test_bad_parameter(self):
        with pytest.raises(SystemExit) as exc_info:
            handle_cli_exception(click.BadParameter("bad value"))
        assert exc_info.value.code == ExitCode.INVALID_ARGS

    def test_value_error_is_internal(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            handle_cli_exception(ValueError("width must be 1, 2, 4 or 8"))
        assert exc_info.value.code == ExitCode.INTERNAL_ERROR
        assert "Internal error" in capsys.readouterr().err
