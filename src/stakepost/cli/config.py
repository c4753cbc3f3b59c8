# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Ourochronos Contributors

"""CLI configuration: snapshot path, human registry, output format.

Loads from ~/.stakepost/cli.toml with environment variable and flag overrides.
Precedence: CLI flags > env vars > config file > defaults.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

_DEFAULT_CONFIG_PATH = Path.home() / ".stakepost" / "cli.toml"
_DEFAULT_OUTPUT = "text"
_OUTPUT_FORMATS = ("json", "text")


def _default_state_path() -> str:
    from ..core.config import get_config

    return get_config().state_path


def _default_registry_path() -> str | None:
    from ..core.config import get_config

    return get_config().human_registry_path


@dataclass
class CLIConfig:
    """CLI configuration loaded from file, env, and flags."""

    state_path: str = field(default_factory=_default_state_path)
    registry_path: str | None = field(default_factory=_default_registry_path)
    output: str = _DEFAULT_OUTPUT

    @classmethod
    def load(
        cls,
        config_path: Path | None = None,
        state_path: str | None = None,
        registry_path: str | None = None,
        output: str | None = None,
    ) -> CLIConfig:
        """Load config with precedence: flags > env > file > defaults."""
        config = cls()

        # 1. Load from file
        path = config_path or _DEFAULT_CONFIG_PATH
        if path.exists():
            config._load_from_file(path)

        # 2. Override from env (state/registry paths already come from core settings)
        if out := os.environ.get("STAKEPOST_OUTPUT"):
            if out in _OUTPUT_FORMATS:
                config.output = out

        # 3. Override from flags (highest precedence)
        if state_path is not None:
            config.state_path = state_path
        if registry_path is not None:
            config.registry_path = registry_path
        if output is not None:
            config.output = output

        return config

    def _load_from_file(self, path: Path) -> None:
        """Parse TOML config file."""
        import tomllib

        with open(path, "rb") as f:
            data = tomllib.load(f)
        if "state_path" in data and "STAKEPOST_STATE_PATH" not in os.environ:
            self.state_path = str(data["state_path"])
        if "registry_path" in data and "STAKEPOST_HUMAN_REGISTRY" not in os.environ:
            self.registry_path = str(data["registry_path"])
        if "output" in data and data["output"] in _OUTPUT_FORMATS:
            self.output = str(data["output"])


_config: CLIConfig | None = None


def get_cli_config() -> CLIConfig:
    """Get the current CLI config singleton."""
    global _config
    if _config is None:
        _config = CLIConfig.load()
    return _config


def set_cli_config(config: CLIConfig) -> None:
    """Set the CLI config singleton (called from main after parsing args)."""
    global _config
    _config = config


def reset_cli_config() -> None:
    """Reset the config singleton (for testing)."""
    global _config
    _config = None
