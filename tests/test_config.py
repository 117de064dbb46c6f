"""Tests for configuration loading."""

import os
from pathlib import Path

import pytest

from trackscan.config import ScanConfig, load_config
from trackscan.exceptions import ConfigurationError, InvalidConfigError, InvalidSignatureError


@pytest.fixture(autouse=True)
def isolated(tmp_path, monkeypatch):
    """Run in an empty directory with no TRACKSCAN_* variables."""
    monkeypatch.chdir(tmp_path)
    for key in list(os.environ):
        if key.startswith("TRACKSCAN_"):
            monkeypatch.delenv(key)
    return tmp_path


class TestScanConfig:
    def test_defaults(self):
        config = ScanConfig()
        assert config.ignore == []
        assert config.custom_functions == []
        assert config.workers is None
        assert config.format == "yaml"
        assert config.verbosity == "normal"
        assert config.max_file_size_bytes == 10 * 1024 * 1024
        assert config.output_path == Path("tracking-plan.yaml")

    def test_output_path_follows_format(self):
        assert ScanConfig(format="json").output_path == Path("tracking-plan.json")
        assert ScanConfig(output="out/plan.yml").output_path == Path("out/plan.yml")

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"workers": 0},
            {"max_file_size_mb": 0},
            {"format": "xml"},
            {"verbosity": "loud"},
            {"ignore": [1, 2]},
        ],
    )
    def test_invalid_values(self, kwargs):
        with pytest.raises(InvalidConfigError):
            ScanConfig(**kwargs)

    def test_invalid_signature_rejected_up_front(self):
        with pytest.raises(InvalidSignatureError):
            ScanConfig(custom_functions=["track(userId)"])

    def test_signatures_property(self):
        config = ScanConfig(custom_functions=["trackEvent", {"functionName": "a.b"}])
        assert [s.function_name for s in config.signatures] == ["trackEvent", "a.b"]


class TestLoadConfig:
    def test_defaults_without_sources(self):
        assert load_config() == ScanConfig()

    def test_project_file(self, isolated):
        (isolated / "trackscan.toml").write_text(
            'ignore = ["dist/**"]\n'
            "workers = 2\n"
            'custom_functions = ["CustomModule.track(userId, EVENT_NAME, PROPERTIES)"]\n'
        )
        config = load_config()
        assert config.ignore == ["dist/**"]
        assert config.workers == 2
        assert config.signatures[0].event_index == 1

    def test_structured_signatures_in_toml(self, isolated):
        path = isolated / "custom.toml"
        path.write_text(
            "[[custom_functions]]\n"
            'function_name = "track"\n'
            'parameters = [{ name = "event", is_event_name = true }]\n'
        )
        config = load_config(config_file=path)
        assert config.signatures[0].properties_index is None

    def test_explicit_file_beats_project_file(self, isolated):
        (isolated / "trackscan.toml").write_text("workers = 2\n")
        explicit = isolated / "other.toml"
        explicit.write_text("workers = 3\n")
        assert load_config(config_file=explicit).workers == 3

    def test_env_beats_files(self, isolated, monkeypatch):
        (isolated / "trackscan.toml").write_text('format = "yaml"\nworkers = 2\n')
        monkeypatch.setenv("TRACKSCAN_FORMAT", "json")
        monkeypatch.setenv("TRACKSCAN_WORKERS", "5")
        monkeypatch.setenv("TRACKSCAN_FOLLOW_SYMLINKS", "yes")
        config = load_config()
        assert config.format == "json"
        assert config.workers == 5
        assert config.follow_symlinks is True

    def test_overrides_beat_env(self, monkeypatch):
        monkeypatch.setenv("TRACKSCAN_WORKERS", "5")
        assert load_config(workers=7).workers == 7

    def test_none_overrides_are_ignored(self, monkeypatch):
        monkeypatch.setenv("TRACKSCAN_WORKERS", "5")
        assert load_config(workers=None).workers == 5

    def test_verbosity_flags(self):
        assert load_config(verbose=True).verbosity == "verbose"
        assert load_config(quiet=True).verbosity == "quiet"
        assert load_config(verbose=False, quiet=False).verbosity == "normal"

    def test_bad_env_value(self, monkeypatch):
        monkeypatch.setenv("TRACKSCAN_WORKERS", "many")
        with pytest.raises(InvalidConfigError):
            load_config()

    def test_missing_config_file(self, isolated):
        with pytest.raises(ConfigurationError):
            load_config(config_file=isolated / "missing.toml")

    def test_malformed_toml(self, isolated):
        path = isolated / "bad.toml"
        path.write_text("workers = = 2\n")
        with pytest.raises(ConfigurationError):
            load_config(config_file=path)

    def test_unknown_key(self, isolated):
        path = isolated / "unknown.toml"
        path.write_text("colour = 'blue'\n")
        with pytest.raises(ConfigurationError):
            load_config(config_file=path)

    def test_log_file_and_verbosity_from_env(self, monkeypatch):
        monkeypatch.setenv("TRACKSCAN_LOG_FILE", "scan.log")
        monkeypatch.setenv("TRACKSCAN_VERBOSITY", "verbose")
        config = load_config()
        assert config.log_file == "scan.log"
        assert config.verbosity == "verbose"
