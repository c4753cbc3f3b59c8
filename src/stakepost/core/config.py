# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Ourochronos Contributors

"""Core configuration - centralized config for the stakepost package.

All environment-based configuration should flow through this module.

Usage:
    from stakepost.core.config import get_config
    config = get_config()

    rules = config.rules
    log_level = config.log_level
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .exceptions import ConfigException

# 0.1 and 0.01 ether, in wei
DEFAULT_PRICE_UNVERIFIED = 100_000_000_000_000_000
DEFAULT_PRICE_VERIFIED = 10_000_000_000_000_000
DEFAULT_POST_COOLDOWN = 60
DEFAULT_VOTING_WINDOW = 60
DEFAULT_GRACE_WINDOW = 60


@dataclass(frozen=True)
class LedgerRules:
    """Economic and timing parameters of a ledger instance.

    Attributes:
        price_unverified: Deposit required from an unverified address.
        price_verified: Deposit required from a human-verified address.
        post_cooldown: Seconds between two posts by the same author, also
            the wait after the last post before deactivation.
        voting_window: Seconds after a report is filed during which votes count.
        grace_window: Seconds after voting closes during which the report
            may still be resolved.
        penalty_price_scaling: Multiply the tier price by ``penalty_count + 1``.
    """

    price_unverified: int = DEFAULT_PRICE_UNVERIFIED
    price_verified: int = DEFAULT_PRICE_VERIFIED
    post_cooldown: int = DEFAULT_POST_COOLDOWN
    voting_window: int = DEFAULT_VOTING_WINDOW
    grace_window: int = DEFAULT_GRACE_WINDOW
    penalty_price_scaling: bool = False

    def __post_init__(self) -> None:
        for name in ("price_unverified", "price_verified"):
            value = getattr(self, name)
            if not isinstance(value, int) or value <= 0:
                raise ConfigException(f"{name} must be a positive integer, got {value!r}")
        for name in ("post_cooldown", "voting_window", "grace_window"):
            value = getattr(self, name)
            if not isinstance(value, int) or value < 0:
                raise ConfigException(f"{name} must be a non-negative integer, got {value!r}")

    @property
    def resolution_deadline_offset(self) -> int:
        """Seconds from report creation until the report lapses."""
        return self.voting_window + self.grace_window

    def to_dict(self) -> dict:
        return {
            "price_unverified": self.price_unverified,
            "price_verified": self.price_verified,
            "post_cooldown": self.post_cooldown,
            "voting_window": self.voting_window,
            "grace_window": self.grace_window,
            "penalty_price_scaling": self.penalty_price_scaling,
        }


class CoreSettings(BaseSettings):
    """Core configuration settings for stakepost.

    Settings can be configured via environment variables using the
    STAKEPOST_ prefix, or a local ``.env`` file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ==========================================================================
    # LEDGER RULES
    # ==========================================================================

    price_unverified: int = Field(
        default=DEFAULT_PRICE_UNVERIFIED,
        description="Activation deposit for unverified addresses (smallest unit)",
        validation_alias="STAKEPOST_PRICE_UNVERIFIED",
    )
    price_verified: int = Field(
        default=DEFAULT_PRICE_VERIFIED,
        description="Activation deposit for human-verified addresses (smallest unit)",
        validation_alias="STAKEPOST_PRICE_VERIFIED",
    )
    post_cooldown_seconds: int = Field(
        default=DEFAULT_POST_COOLDOWN,
        description="Minimum seconds between posts, and before deactivation after a post",
        validation_alias="STAKEPOST_POST_COOLDOWN",
    )
    voting_window_seconds: int = Field(
        default=DEFAULT_VOTING_WINDOW,
        description="Seconds a report accepts votes",
        validation_alias="STAKEPOST_VOTING_WINDOW",
    )
    grace_window_seconds: int = Field(
        default=DEFAULT_GRACE_WINDOW,
        description="Seconds after voting closes during which a report can be resolved",
        validation_alias="STAKEPOST_GRACE_WINDOW",
    )
    penalty_price_scaling: bool = Field(
        default=False,
        description="Scale the activation price by (penalty_count + 1)",
        validation_alias="STAKEPOST_PENALTY_PRICE_SCALING",
    )

    # ==========================================================================
    # STORAGE SETTINGS
    # ==========================================================================

    state_path: str = Field(
        default=str(Path.home() / ".stakepost" / "ledger.json"),
        description="Path of the JSON ledger snapshot used by the CLI",
        validation_alias="STAKEPOST_STATE_PATH",
    )
    human_registry_path: str | None = Field(
        default=None,
        description="File listing human-verified addresses, one per line",
        validation_alias="STAKEPOST_HUMAN_REGISTRY",
    )

    # ==========================================================================
    # LOGGING SETTINGS
    # ==========================================================================

    log_level: str = Field(
        default="INFO",
        description="Log level (DEBUG, INFO, WARNING, ERROR)",
        validation_alias="STAKEPOST_LOG_LEVEL",
    )
    log_format: str = Field(
        default="",
        description="Log format: 'json', 'text', or '' (auto-detect)",
        validation_alias="STAKEPOST_LOG_FORMAT",
    )
    log_file: str | None = Field(
        default=None,
        description="Log file path (optional)",
        validation_alias="STAKEPOST_LOG_FILE",
    )

    # ==========================================================================
    # COMPUTED PROPERTIES
    # ==========================================================================

    @property
    def rules(self) -> LedgerRules:
        """Build the ledger rules from the configured values."""
        return LedgerRules(
            price_unverified=self.price_unverified,
            price_verified=self.price_verified,
            post_cooldown=self.post_cooldown_seconds,
            voting_window=self.voting_window_seconds,
            grace_window=self.grace_window_seconds,
            penalty_price_scaling=self.penalty_price_scaling,
        )


# ==========================================================================
# GLOBAL CONFIG INSTANCE (lazy loaded)
# ==========================================================================

_config: CoreSettings | None = None


def get_config() -> CoreSettings:
    """Get the global configuration instance.

    Returns:
        The singleton CoreSettings instance.
    """
    global _config
    if _config is None:
        _config = CoreSettings()
    return _config


def clear_config_cache() -> None:
    """Clear the config cache. Useful for testing."""
    global _config
    _config = None
