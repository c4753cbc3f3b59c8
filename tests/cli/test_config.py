"""Tests for CLI config loading with precedence: flags > env > file > defaults."""

from __future__ import annotations

import pytest

from stakepost.cli.config import CLIConfig, get_cli_config, reset_cli_config, set_cli_config


@pytest.fixture(autouse=True)
def _reset_config(clean_env):
    """Reset config singleton between tests."""
    reset_cli_config()
    yield
    reset_cli_config()


class TestCLIConfigDefaults:
    def test_defaults(self):
        config = CLIConfig()
        assert config.state_path.endswith("ledger.json")
        assert config.registry_path is None
        assert config.output == "text"

    def test_defaults_follow_core_settings(self, monkeypatch, tmp_path):
        monkeypatch.setenv("STAKEPOST_STATE_PATH", str(tmp_path / "s.json"))
        monkeypatch.setenv("STAKEPOST_HUMAN_REGISTRY", str(tmp_path / "h.txt"))
        config = CLIConfig.load(config_path=tmp_path / "nonexistent.toml")
        assert config.state_path == str(tmp_path / "s.json")
        assert config.registry_path == str(tmp_path / "h.txt")


class TestCLIConfigFile:
    def test_load_from_toml(self, tmp_path):
        config_file = tmp_path / "cli.toml"
        config_file.write_text('state_path = "/data/ledger.json"\nregistry_path = "/data/humans.txt"\noutput = "json"\n')
        config = CLIConfig.load(config_path=config_file)
        assert config.state_path == "/data/ledger.json"
        assert config.registry_path == "/data/humans.txt"
        assert config.output == "json"

    def test_invalid_output_ignored(self, tmp_path):
        config_file = tmp_path / "cli.toml"
        config_file.write_text('output = "yaml"\n')
        assert CLIConfig.load(config_path=config_file).output == "text"

    def test_env_beats_file(self, tmp_path, monkeypatch):
        config_file = tmp_path / "cli.toml"
        config_file.write_text('state_path = "/from/file.json"\noutput = "text"\n')
        monkeypatch.setenv("STAKEPOST_STATE_PATH", "/from/env.json")
        monkeypatch.setenv("STAKEPOST_OUTPUT", "json")

        config = CLIConfig.load(config_path=config_file)

        assert config.state_path == "/from/env.json"
        assert config.output == "json"


class TestCLIConfigFlags:
    def test_flags_beat_everything(self, tmp_path, monkeypatch):
        config_file = tmp_path / "cli.toml"
        config_file.write_text('state_path = "/from/file.json"\noutput = "json"\n')
        monkeypatch.setenv("STAKEPOST_OUTPUT", "json")

        config = CLIConfig.load(
            config_path=config_file,
            state_path="/from/flag.json",
            registry_path="/flag/humans.txt",
            output="text",
        )

        assert config.state_path == "/from/flag.json"
        assert config.registry_path == "/flag/humans.txt"
        assert config.output == "text"


class TestSingleton:
    def test_set_and_get(self):
        config = CLIConfig(state_path="/x.json", output="json")
        set_cli_config(config)
        assert get_cli_config() is config

    def test_reset(self):
        set_cli_config(CLIConfig(state_path="/x.json"))
        reset_cli_config()
        assert get_cli_config().state_path != "/x.json"
