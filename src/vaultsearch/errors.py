"""Structured errors for vaultsearch.

Every failure that aborts a call is a VaultSearchError carrying a stable
ErrorCode, so the CLI can render it either as a message or as JSON.
Per-document read failures never surface here; they are absorbed by the
loader.
"""

from __future__ import annotations

import json
from enum import Enum
from typing import Any


class ErrorCode(str, Enum):
    """Stable error codes for programmatic consumers."""

    VAULT_NOT_FOUND = "VAULT_NOT_FOUND"
    INVALID_QUERY = "INVALID_QUERY"
    DOCUMENT_NOT_FOUND = "DOCUMENT_NOT_FOUND"
    CONFIGURATION_ERROR = "CONFIGURATION_ERROR"
    INTERNAL_ERROR = "INTERNAL_ERROR"


def format_error_json(code: ErrorCode | str, message: str, details: dict[str, Any] | None = None) -> str:
    """Format an error as a JSON object string."""
    payload: dict[str, Any] = {
        "error": {
            "code": code.value if isinstance(code, ErrorCode) else code,
            "message": message,
        }
    }
    if details:
        payload["error"]["details"] = details
    return json.dumps(payload)


class VaultSearchError(Exception):
    """Base error for failures that abort a vaultsearch call."""

    code: ErrorCode = ErrorCode.INTERNAL_ERROR

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
        *,
        code: ErrorCode | None = None,
    ) -> None:
        if code is not None:
            self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_json(self) -> str:
        return format_error_json(self.code, self.message, self.details)


class VaultNotFoundError(VaultSearchError):
    """Raised when the vault root is missing or not a directory."""

    code = ErrorCode.VAULT_NOT_FOUND


class InvalidQueryError(VaultSearchError):
    """Raised for query parameters rejected before any corpus scan."""

    code = ErrorCode.INVALID_QUERY


class DocumentNotFoundError(VaultSearchError):
    """Raised when a named document does not resolve within the vault."""

    code = ErrorCode.DOCUMENT_NOT_FOUND


class ConfigurationError(VaultSearchError):
    """Raised when no vault can be configured or discovered."""

    code = ErrorCode.CONFIGURATION_ERROR
