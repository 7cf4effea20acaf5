"""
Tests for utils/config.py: environment-driven exporter configuration.
"""
from pathlib import Path

import pytest

from utils.config import DEFAULT_ARCHIVE_GLOB, DEFAULT_DATA_DIR, Config, ExporterConfig

ENV_VARS = (
    "STICKER_DATA_DIR", "STICKER_HOME", "STICKER_ARCHIVE_GLOB", "STICKER_DECODER",
    "STICKER_MAX_ATTEMPTS", "STICKER_RETRY_DELAY", "STICKER_CONNECT_TIMEOUT",
    "STICKER_HEADER_TIMEOUT", "STICKER_TOTAL_TIMEOUT", "STICKER_LOG_LEVEL",
    "STICKER_LOG_FORMAT",
)


@pytest.fixture()
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    return monkeypatch


class TestExporterConfig:
    def test_defaults(self, clean_env):
        cfg = ExporterConfig.from_env()
        assert cfg.data_dir == DEFAULT_DATA_DIR == Path("data")
        assert cfg.home_dir == Path.home()
        assert cfg.archive_glob == DEFAULT_ARCHIVE_GLOB
        assert cfg.decoder == "auto"
        assert cfg.max_attempts == 3
        assert cfg.retry_delay == 3.0
        assert (cfg.connect_timeout, cfg.header_timeout, cfg.total_timeout) == (5, 5, 30)
        assert cfg.log_level == "INFO"
        assert cfg.log_format == "text"
        cfg.validate()

    def test_env_overrides(self, clean_env, tmp_path):
        clean_env.setenv("STICKER_DATA_DIR", str(tmp_path / "out"))
        clean_env.setenv("STICKER_HOME", str(tmp_path))
        clean_env.setenv("STICKER_DECODER", "PLISTLIB")
        clean_env.setenv("STICKER_MAX_ATTEMPTS", "5")
        clean_env.setenv("STICKER_RETRY_DELAY", "0.25")
        clean_env.setenv("STICKER_LOG_LEVEL", "debug")
        clean_env.setenv("STICKER_LOG_FORMAT", "JSON")
        cfg = ExporterConfig.from_env()
        assert cfg.data_dir == tmp_path / "out"
        assert cfg.home_dir == tmp_path
        assert cfg.decoder == "plistlib"
        assert cfg.max_attempts == 5
        assert cfg.retry_delay == 0.25
        assert cfg.log_level == "DEBUG"
        assert cfg.log_format == "json"

    def test_archive_glob_matches_wechat_layout(self):
        assert DEFAULT_ARCHIVE_GLOB.startswith("Library/Containers/com.tencent.xinWeChat/")
        assert DEFAULT_ARCHIVE_GLOB.endswith("/*/*/Stickers/fav.archive")

    @pytest.mark.parametrize("attr,value,message", [
        ("decoder", "bogus", "unknown decoder"),
        ("log_format", "xml", "unknown log format"),
        ("max_attempts", 0, "max_attempts"),
        ("retry_delay", -1, "retry_delay"),
        ("total_timeout", -5, "total_timeout"),
    ])
    def test_validate_rejects(self, clean_env, attr, value, message):
        cfg = ExporterConfig.from_env()
        setattr(cfg, attr, value)
        with pytest.raises(ValueError, match=message):
            cfg.validate()

    @pytest.mark.parametrize("name", ["STICKER_MAX_ATTEMPTS", "STICKER_TOTAL_TIMEOUT"])
    def test_unparseable_number_names_variable(self, clean_env, name):
        clean_env.setenv(name, "abc")
        with pytest.raises(ValueError, match=f"{name} must be a number, got 'abc'"):
            ExporterConfig.from_env()

    @pytest.mark.parametrize("pattern", ["/Users/*/fav.archive", ""])
    def test_validate_rejects_non_relative_glob(self, clean_env, pattern):
        cfg = ExporterConfig.from_env()
        cfg.archive_glob = pattern
        with pytest.raises(ValueError, match="archive_glob must be a pattern relative"):
            cfg.validate()

    def test_to_dict(self, clean_env):
        d = ExporterConfig.from_env().to_dict()
        assert d["max_attempts"] == 3
        assert "log_format" in d

    def test_from_dict_overrides_only_given_keys(self, clean_env):
        cfg = ExporterConfig.from_dict({"max_attempts": 7})
        assert cfg.max_attempts == 7
        assert cfg.retry_delay == 3.0


class TestConfigBase:
    def test_private_attrs_hidden(self):
        cfg = Config()
        cfg.visible = 1
        cfg._hidden = 2
        assert cfg.to_dict() == {"visible": 1}
