"""Human-verification oracle interface.

The ledger only ever asks one question: is this address a verified human?
How the answer is produced is outside the ledger.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from pathlib import Path
from typing import Protocol, runtime_checkable

from .exceptions import ConfigException

logger = logging.getLogger(__name__)


@runtime_checkable
class VerificationOracle(Protocol):
    """Answers whether an address belongs to a verified human."""

    def is_human_verified(self, address: str) -> bool: ...


class RegistryOracle:
    """Oracle backed by an explicit set of registered addresses."""

    def __init__(self, addresses: Iterable[str] = ()):
        self._registered: set[str] = set(addresses)

    def register(self, address: str) -> None:
        self._registered.add(address)

    def revoke(self, address: str) -> None:
        self._registered.discard(address)

    def is_human_verified(self, address: str) -> bool:
        return address in self._registered

    def __len__(self) -> int:
        return len(self._registered)

    @classmethod
    def from_file(cls, path: str | Path) -> RegistryOracle:
        """Load a registry file with one address per line.

        Blank lines and lines starting with ``#`` are ignored.

        Raises:
            ConfigException: If the file cannot be read.
        """
        path = Path(path)
        try:
            lines = path.read_text(encoding="utf-8").splitlines()
        except OSError as e:
            raise ConfigException(f"Cannot read human registry {path}: {e}") from e

        addresses = [line.strip() for line in lines]
        oracle = cls(a for a in addresses if a and not a.startswith("#"))
        logger.debug("Loaded %d registered addresses from %s", len(oracle), path)
        return oracle
