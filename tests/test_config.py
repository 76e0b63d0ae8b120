"""Tests for the configuration module."""

import json

import pytest

from logrotor.config import DEFAULT_MAX_SIZE_MB, MEGABYTE, RotationConfig, load_config
from logrotor.errors import ConfigError


class TestRotationConfig:
    def test_defaults(self):
        cfg = RotationConfig()
        assert cfg.log_dir == "./logs"
        assert cfg.max_size_mb == DEFAULT_MAX_SIZE_MB
        assert cfg.max_backups == 0
        assert cfg.max_age_days == 0
        assert cfg.compress is False
        assert cfg.timezone == ""

    def test_frozen(self):
        cfg = RotationConfig()
        with pytest.raises(AttributeError):
            cfg.log_dir = "/tmp"

    def test_max_size_bytes(self):
        assert RotationConfig(max_size_mb=3).max_size_bytes == 3 * MEGABYTE

    def test_zero_max_size_uses_default(self):
        assert RotationConfig(max_size_mb=0).max_size_bytes == DEFAULT_MAX_SIZE_MB * MEGABYTE


class TestFromDict:
    def test_all_keys(self):
        cfg = RotationConfig.from_dict({
            "logDir": "/var/log/app",
            "maxsize": 5,
            "maxbackups": 3,
            "maxage": 7,
            "compress": True,
            "timezone": "Europe/Berlin",
        })
        assert cfg == RotationConfig(
            log_dir="/var/log/app",
            max_size_mb=5,
            max_backups=3,
            max_age_days=7,
            compress=True,
            timezone="Europe/Berlin",
        )

    def test_missing_keys_use_defaults(self):
        cfg = RotationConfig.from_dict({"logDir": "logs"})
        assert cfg.max_size_mb == DEFAULT_MAX_SIZE_MB
        assert cfg.compress is False

    def test_unknown_keys_ignored(self):
        cfg = RotationConfig.from_dict({"logDir": "logs", "level": "debug"})
        assert cfg.log_dir == "logs"

    def test_to_dict_uses_file_keys(self):
        d = RotationConfig(log_dir="x", max_size_mb=2).to_dict()
        assert d["logDir"] == "x"
        assert d["maxsize"] == 2
        assert RotationConfig.from_dict(d) == RotationConfig(log_dir="x", max_size_mb=2)

    @pytest.mark.parametrize("data", [
        {"maxsize": -1},
        {"maxbackups": "3"},
        {"maxage": 1.5},
        {"maxsize": True},
        {"compress": "true"},
        {"timezone": 5},
        {"logDir": ""},
    ])
    def test_invalid_values(self, data):
        with pytest.raises(ConfigError):
            RotationConfig.from_dict(data)

    def test_not_an_object(self):
        with pytest.raises(ConfigError):
            RotationConfig.from_dict(["logDir"])


class TestLoadConfig:
    def test_load_json(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text(json.dumps({
            "logDir": str(tmp_path / "logs"),
            "maxsize": 1,
            "maxbackups": 2,
            "maxage": 0,
            "compress": False,
            "timezone": "",
        }))
        cfg = load_config(str(path))
        assert cfg.log_dir == str(tmp_path / "logs")
        assert cfg.max_size_mb == 1
        assert cfg.max_backups == 2

    def test_load_yaml(self, tmp_path):
        path = tmp_path / "config.yml"
        path.write_text("logDir: /srv/logs\nmaxsize: 4\ncompress: true\ntimezone: Asia/Tokyo\n")
        cfg = load_config(str(path))
        assert cfg.log_dir == "/srv/logs"
        assert cfg.max_size_mb == 4
        assert cfg.compress is True
        assert cfg.timezone == "Asia/Tokyo"

    def test_missing_file(self, tmp_path):
        with pytest.raises(ConfigError):
            load_config(str(tmp_path / "nope.json"))

    def test_malformed_json(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text("{not json")
        with pytest.raises(ConfigError) as exc_info:
            load_config(str(path))
        assert isinstance(exc_info.value.__cause__, json.JSONDecodeError)

    def test_malformed_yaml(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("logDir: [unclosed\n")
        with pytest.raises(ConfigError):
            load_config(str(path))

    def test_invalid_field(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"logDir": "logs", "maxsize": -5}))
        with pytest.raises(ConfigError):
            load_config(str(path))
