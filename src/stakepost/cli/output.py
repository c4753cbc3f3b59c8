# SPDX-License-Identifier: MIT
# Copyright (c) 2026 Ourochronos Contributors

"""Output formatting for CLI commands.

JSON mode prints the full response envelope. Text mode prints the payload as
aligned ``key: value`` lines, one block per item for lists.
"""

from __future__ import annotations

import json
import sys
from typing import Any

from ..core.response import StakepostResponse
from .config import get_cli_config


def _format_value(value: Any) -> str:
    if isinstance(value, bool):
        return "yes" if value else "no"
    if isinstance(value, list | dict):
        return json.dumps(value, default=str)
    if value is None:
        return "-"
    return str(value)


def _print_mapping(data: dict[str, Any]) -> None:
    width = max((len(k) for k in data), default=0)
    for key, value in data.items():
        print(f"  {key.ljust(width)}  {_format_value(value)}")


def output_result(response: StakepostResponse, output_format: str | None = None) -> None:
    """Print a command result in the configured output format."""
    fmt = output_format or get_cli_config().output

    if fmt == "json":
        stream = sys.stdout if response.success else sys.stderr
        print(json.dumps(response.to_dict(), indent=2, default=str), file=stream)
        return

    if not response.success:
        output_error(response.error or "unknown error", response.kind)
        return

    data = response.data
    if isinstance(data, dict):
        _print_mapping(data)
    elif isinstance(data, list):
        if not data:
            print("  (none)")
        for index, item in enumerate(data):
            if index:
                print()
            if isinstance(item, dict):
                _print_mapping(item)
            else:
                print(f"  {_format_value(item)}")
    elif data is not None:
        print(_format_value(data))


def output_error(message: str, kind: str | None = None) -> None:
    """Print error message to stderr."""
    prefix = f"Error [{kind}]" if kind else "Error"
    print(f"{prefix}: {message}", file=sys.stderr)
