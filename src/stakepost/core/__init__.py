"""stakepost core - the ledger and its collaborators."""

from .clock import Clock, ManualClock, SystemClock
from .config import CoreSettings, LedgerRules, clear_config_cache, get_config
from .escrow import PayoutSink, RecordingSink, Transfer, TransferReason, ValueEscrow
from .events import EventKind, EventLog, LedgerEvent
from .exceptions import (
    ClockError,
    ConfigException,
    ErrorKind,
    EscrowError,
    LedgerError,
    ReentrancyError,
    StakepostException,
    StorageError,
    ValidationException,
)
from .ledger import Ledger
from .logging import (
    EventLogger,
    configure_logging,
    correlation_context,
    get_logger,
)
from .models import Account, LedgerState, Post, Report, ReportStatus
from .oracle import RegistryOracle, VerificationOracle
from .response import StakepostResponse, err, from_exception, ok

__all__ = [
    # Ledger
    "Ledger",
    "LedgerRules",
    "LedgerState",
    # Models
    "Account",
    "Post",
    "Report",
    "ReportStatus",
    # Collaborators
    "Clock",
    "ManualClock",
    "SystemClock",
    "VerificationOracle",
    "RegistryOracle",
    "PayoutSink",
    "RecordingSink",
    "Transfer",
    "TransferReason",
    "ValueEscrow",
    # Events
    "EventKind",
    "EventLog",
    "LedgerEvent",
    "EventLogger",
    # Exceptions
    "StakepostException",
    "ValidationException",
    "ConfigException",
    "ClockError",
    "ErrorKind",
    "LedgerError",
    "EscrowError",
    "ReentrancyError",
    "StorageError",
    # Config / logging / responses
    "CoreSettings",
    "get_config",
    "clear_config_cache",
    "configure_logging",
    "correlation_context",
    "get_logger",
    "StakepostResponse",
    "ok",
    "err",
    "from_exception",
]
