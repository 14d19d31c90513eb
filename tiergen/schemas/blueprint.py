"""
Table blueprint Pydantic schemas.
A blueprint is everything the templates need about one table, computed once,
so that every generated layer reads the same names, types and operation set.
"""
from __future__ import annotations

from enum import Enum

from pydantic import BaseModel

from tiergen.schemas.schema import SemanticType, Table
from tiergen.services.naming import TableNames


# ── Operations ────────────────────────────────────────────────────────────────

class OperationKind(str, Enum):
    GET_ALL = "get_all"
    GET_BY_ID = "get_by_id"
    ADD = "add"
    UPDATE = "update"
    DELETE = "delete"


class Operation(BaseModel):
    kind: OperationKind
    name: str
    return_type: str
    parameters: str
    arguments: str

    model_config = {"frozen": True}


# ── Columns ───────────────────────────────────────────────────────────────────

class ColumnBlueprint(BaseModel):
    name: str
    member: str
    semantic_type: SemanticType
    csharp_type: str
    base_csharp_type: str
    sql_name: str
    parameter: str
    read_expression: str
    is_primary: bool
    nullable: bool
    declared_nullable: bool
    is_server_generated: bool

    model_config = {"frozen": True}

    @property
    def type_label(self) -> str:
        return self.semantic_type.value


# ── Table ─────────────────────────────────────────────────────────────────────

class TableBlueprint(BaseModel):
    table: Table
    names: TableNames
    sql_table: str
    columns: list[ColumnBlueprint]
    primary_key: ColumnBlueprint | None
    insert_columns: list[ColumnBlueprint]
    update_columns: list[ColumnBlueprint]
    operations: list[Operation]

    @property
    def name(self) -> str:
        return self.table.name

    @property
    def has_primary_key(self) -> bool:
        return self.primary_key is not None

    @property
    def select_list(self) -> str:
        return ", ".join(c.sql_name for c in self.columns)

    @property
    def insert_list(self) -> str:
        return ", ".join(c.sql_name for c in self.insert_columns)

    @property
    def insert_parameters(self) -> str:
        return ", ".join(c.parameter for c in self.insert_columns)

    @property
    def update_assignments(self) -> str:
        return ", ".join(f"{c.sql_name} = {c.parameter}" for c in self.update_columns)

    def operation(self, kind: OperationKind) -> Operation | None:
        return next((op for op in self.operations if op.kind is kind), None)


# ── Console contract ──────────────────────────────────────────────────────────

class UiColumn(BaseModel):
    name: str
    type_label: str
    is_primary: bool
    is_nullable: bool
    is_server_generated: bool


class UiContract(BaseModel):
    """What the console front end needs to drive generic CRUD flows for a table."""

    table: str
    columns: list[UiColumn]
    operations: list[str]
