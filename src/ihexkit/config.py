"""
ihexkit Configuration
=====================

Default materialization settings. Configuration can come from:
- Default values (defined here)
- Environment variables
- Command-line options (the CLI overrides whatever is set here)

Environment variables (all optional):
    IHEX_WIDTH: Word width in bytes (1, 2, 4 or 8)
    IHEX_BYTE_ORDER: "big" or "little"
    IHEX_FILL: Fill byte for unwritten image addresses (decimal or 0x-prefixed)
    IHEX_IMAGE_SIZE: Image size in bytes (decimal or 0x-prefixed)
"""

from dataclasses import dataclass
from typing import Mapping, Optional
import logging
import os

from ihexkit.ihex.records import ByteOrder, WordWidth

# Logger for this module
logger = logging.getLogger(__name__)


@dataclass
class MaterializeConfig:
    """
    Settings used when turning a record set into a memory image.

    Attributes:
        width: Data word width (default: 1 byte)
        byte_order: Byte order within a word (default: big-endian)
        fill: Value of image bytes no record writes (default: 0x00)
        image_size: Image size in bytes, None to size the image to the data
    """

    width: WordWidth = WordWidth.BYTE
    byte_order: ByteOrder = ByteOrder.BIG
    fill: int = 0x00
    image_size: Optional[int] = None

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "MaterializeConfig":
        """
        Create MaterializeConfig from environment variables.

        Invalid values are logged and ignored, leaving the default.

        Args:
            environ: Mapping to read instead of os.environ

        Returns:
            MaterializeConfig with values from the environment
        """
        if environ is None:
            environ = os.environ
        config = cls()

        if width := environ.get("IHEX_WIDTH"):
            try:
                config.width = WordWidth.from_value(width)
            except ValueError:
                logger.warning(f"Ignoring invalid IHEX_WIDTH={width!r}")

        if order := environ.get("IHEX_BYTE_ORDER"):
            try:
                config.byte_order = ByteOrder.from_value(order)
            except ValueError:
                logger.warning(f"Ignoring invalid IHEX_BYTE_ORDER={order!r}")

        if fill := environ.get("IHEX_FILL"):
            value = _parse_int(fill)
            if value is not None and 0 <= value <= 0xFF:
                config.fill = value
            else:
                logger.warning(f"Ignoring invalid IHEX_FILL={fill!r}")

        if image_size := environ.get("IHEX_IMAGE_SIZE"):
            value = _parse_int(image_size)
            if value is not None and value >= 0:
                config.image_size = value
            else:
                logger.warning(f"Ignoring invalid IHEX_IMAGE_SIZE={image_size!r}")

        return config


def _parse_int(text: str) -> Optional[int]:
    """Parse a decimal or 0x/0o/0b-prefixed integer, None if invalid."""
    try:
        return int(text, 0)
    except ValueError:
        return None
