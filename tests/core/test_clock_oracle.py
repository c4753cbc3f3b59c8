"""Tests for stakepost.core.clock and stakepost.core.oracle."""

from __future__ import annotations

import pytest

from stakepost.core.clock import Clock, ManualClock, SystemClock
from stakepost.core.exceptions import ConfigException
from stakepost.core.oracle import RegistryOracle, VerificationOracle


class TestManualClock:
    def test_advance(self):
        clock = ManualClock(100)
        assert clock.now() == 100
        assert clock.advance(20) == 120
        assert clock.now() == 120

    def test_cannot_go_backwards(self):
        clock = ManualClock(100)
        with pytest.raises(ValueError):
            clock.advance(-1)
        with pytest.raises(ValueError):
            clock.set(99)
        clock.set(100)
        clock.set(150)
        assert clock.now() == 150

    def test_protocol(self):
        assert isinstance(ManualClock(), Clock)
        assert isinstance(SystemClock(), Clock)

    def test_system_clock_is_integer(self):
        assert isinstance(SystemClock().now(), int)


class TestRegistryOracle:
    def test_register_and_revoke(self):
        oracle = RegistryOracle()
        assert oracle.is_human_verified("alice") is False
        oracle.register("alice")
        assert oracle.is_human_verified("alice") is True
        assert len(oracle) == 1
        oracle.revoke("alice")
        oracle.revoke("alice")
        assert oracle.is_human_verified("alice") is False

    def test_protocol(self):
        assert isinstance(RegistryOracle(), VerificationOracle)

    def test_from_file(self, tmp_path):
        path = tmp_path / "humans.txt"
        path.write_text("# verified humans\nalice\n\n  bob  \n#carol\n", encoding="utf-8")

        oracle = RegistryOracle.from_file(path)

        assert len(oracle) == 2
        assert oracle.is_human_verified("bob") is True
        assert oracle.is_human_verified("carol") is False

    def test_from_missing_file(self, tmp_path):
        with pytest.raises(ConfigException) as exc_info:
            RegistryOracle.from_file(tmp_path / "nope.txt")
        assert "Cannot read human registry" in exc_info.value.message
