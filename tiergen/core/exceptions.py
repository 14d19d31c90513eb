"""
Custom exceptions for TierGen.
All application-level errors are defined here for consistency.
"""
from __future__ import annotations

from typing import Any


# ── Custom exception classes ──────────────────────────────────────────────────

class TierGenException(Exception):
    """Base exception for all TierGen domain errors."""

    def __init__(self, detail: str, error_code: str | None = None) -> None:
        self.detail = detail
        self.error_code = error_code or "TIERGEN_ERROR"
        super().__init__(detail)


class FormatError(TierGenException):
    """Raised when user-entered text does not match the target semantic type."""

    def __init__(self, type_label: str, text: str, reason: str | None = None) -> None:
        self.type_label = type_label
        self.text = text
        detail = f"'{text}' is not a valid {type_label}"
        if reason:
            detail = f"{detail}: {reason}"
        super().__init__(detail=detail, error_code="INVALID_FORMAT")


class InvalidIdentifierError(TierGenException):
    def __init__(self, kind: str, name: Any) -> None:
        self.kind = kind
        self.name = name
        super().__init__(
            detail=f"{kind} name {name!r} cannot be used as a generated identifier",
            error_code="INVALID_IDENTIFIER",
        )


class IdentifierCollisionError(TierGenException):
    def __init__(self, identifier: str, tables: list[str]) -> None:
        self.identifier = identifier
        self.tables = tables
        super().__init__(
            detail=f"Identifier '{identifier}' is generated more than once by: {', '.join(tables)}",
            error_code="IDENTIFIER_COLLISION",
        )


class GenerationError(TierGenException):
    def __init__(self, detail: str) -> None:
        super().__init__(detail=detail, error_code="GENERATION_ERROR")


class SchemaReadError(TierGenException):
    def __init__(self, detail: str) -> None:
        super().__init__(detail=detail, error_code="SCHEMA_READ_ERROR")


class OutputWriteError(TierGenException):
    def __init__(self, detail: str) -> None:
        super().__init__(detail=detail, error_code="OUTPUT_WRITE_ERROR")


class ConfigurationError(TierGenException):
    def __init__(self, detail: str) -> None:
        super().__init__(detail=detail, error_code="CONFIGURATION_ERROR")
