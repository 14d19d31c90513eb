"""
Database schema Pydantic models.
The normalized in-memory view of tables, columns and keys that every generator consumes.
"""
from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field, model_validator


# ── Semantic types ────────────────────────────────────────────────────────────

class SemanticType(str, Enum):
    """Abstract value category of a column, independent of any target language."""

    INT8 = "int8"
    INT16 = "int16"
    INT32 = "int32"
    INT64 = "int64"
    BOOL = "bool"
    FLOAT32 = "float32"
    FLOAT64 = "float64"
    DECIMAL = "decimal"
    DATETIME = "datetime"
    DATETIMEOFFSET = "datetimeoffset"
    TIMESPAN = "timespan"
    GUID = "guid"
    BINARY = "binary"
    STRING = "string"

    @property
    def is_reference(self) -> bool:
        """String and binary values represent absence natively (no optional wrapper)."""
        return self in (SemanticType.STRING, SemanticType.BINARY)


# ── Column ────────────────────────────────────────────────────────────────────

class Column(BaseModel):
    name: str = Field(min_length=1)
    semantic_type: SemanticType = SemanticType.STRING
    nullable: bool = False
    declared_nullable: bool = False
    is_primary: bool = False
    is_foreign_key: bool = False
    referenced_table: str | None = None
    referenced_column: str | None = None
    max_length: int | None = None

    @model_validator(mode="before")
    @classmethod
    def normalize_reference_types(cls, data: Any) -> Any:
        """
        Nullable is meaningless for string/binary types; the catalog value is kept
        in declared_nullable for the console. Max length only applies to strings.
        """
        if not isinstance(data, dict):
            return data
        data = dict(data)
        data.setdefault("declared_nullable", bool(data.get("nullable", False)))
        semantic = SemanticType(data.get("semantic_type", SemanticType.STRING))
        if semantic.is_reference:
            data["nullable"] = False
        if semantic is not SemanticType.STRING:
            data["max_length"] = None
        return data

    @model_validator(mode="after")
    def validate_foreign_key(self) -> "Column":
        if self.is_foreign_key and not (self.referenced_table and self.referenced_column):
            raise ValueError(
                f"Foreign key column '{self.name}' must name its referenced table and column"
            )
        if not self.is_foreign_key and (self.referenced_table or self.referenced_column):
            raise ValueError(
                f"Column '{self.name}' names a referenced table but is not a foreign key"
            )
        return self

    @property
    def is_optional_value(self) -> bool:
        """True when the target type needs an explicit optional marker."""
        return self.nullable and not self.semantic_type.is_reference


# ── Table ─────────────────────────────────────────────────────────────────────

class Table(BaseModel):
    schema_name: str = "dbo"
    name: str = Field(min_length=1)
    columns: list[Column] = Field(default_factory=list)

    @model_validator(mode="after")
    def validate_unique_columns(self) -> "Table":
        seen: set[str] = set()
        for column in self.columns:
            if column.name in seen:
                raise ValueError(
                    f"Duplicate column '{column.name}' in table '{self.qualified_name}'"
                )
            seen.add(column.name)
        return self

    @property
    def qualified_name(self) -> str:
        return f"{self.schema_name}.{self.name}"

    @property
    def primary_key(self) -> Column | None:
        """
        The first column flagged primary, in declaration order.
        Composite keys collapse to this single column.
        """
        return next((c for c in self.columns if c.is_primary), None)

    @property
    def foreign_keys(self) -> list[Column]:
        return [c for c in self.columns if c.is_foreign_key]
