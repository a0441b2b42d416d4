"""
Configuration Tests
===================

Tests for MaterializeConfig defaults and environment overrides.
"""

from ihexkit.config import MaterializeConfig
from ihexkit.ihex import ByteOrder, WordWidth


class TestMaterializeConfig:
    """Tests for MaterializeConfig."""

    def test_defaults(self):
        config = MaterializeConfig()
        assert config.width == WordWidth.BYTE
        assert config.byte_order == ByteOrder.BIG
        assert config.fill == 0x00
        assert config.image_size is None

    def test_from_env(self):
        config = MaterializeConfig.from_env({
            "IHEX_WIDTH": "2",
            "IHEX_BYTE_ORDER": "LITTLE",
            "IHEX_FILL": "0xFF",
            "IHEX_IMAGE_SIZE": "1024",
        })
        assert config.width == WordWidth.HALF
        assert config.byte_order == ByteOrder.LITTLE
        assert config.fill == 0xFF
        assert config.image_size == 1024

    def test_from_env_empty(self):
        assert MaterializeConfig.from_env({}) == MaterializeConfig()

    def test_invalid_values_ignored(self):
        config = MaterializeConfig.from_env({
            "IHEX_WIDTH": "3",
            "IHEX_BYTE_ORDER": "middle",
            "IHEX_FILL": "0x100",
            "IHEX_IMAGE_SIZE": "big",
        })
        assert config == MaterializeConfig()

    def test_reads_os_environ(self, monkeypatch):
        monkeypatch.setenv("IHEX_FILL", "170")
        monkeypatch.delenv("IHEX_WIDTH", raising=False)
        config = MaterializeConfig.from_env()
        assert config.fill == 170
