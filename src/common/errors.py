"""Shared error codes and exceptions for the ranking engine and its host."""
from __future__ import annotations

from enum import Enum
from typing import Any, Dict, Optional


class ErrorCode(str, Enum):
    CONFIG_ERROR = "CONFIG_ERROR"
    INPUT_ERROR = "INPUT_ERROR"


class BackendError(RuntimeError):
    """Exception carrying a structured error code for the CLI and host."""

    def __init__(self, code: ErrorCode, message: str, *, context: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.code = code
        self.context = context or {}

    def __str__(self) -> str:
        base = super().__str__()
        return f"[{self.code.value}] {base}" if base else self.code.value
