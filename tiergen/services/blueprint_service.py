"""
Table blueprint construction.
Applies the shared generation rules (primary key selection, operation suppression,
server-generated key heuristic, null guarding) once per table.
"""
from __future__ import annotations

import logging

from tiergen.schemas.blueprint import (
    ColumnBlueprint,
    Operation,
    OperationKind,
    TableBlueprint,
    UiColumn,
    UiContract,
)
from tiergen.schemas.schema import Column, SemanticType, Table
from tiergen.services import naming
from tiergen.services.type_mapper import csharp_type, reader_accessor

logger = logging.getLogger(__name__)

_SERVER_GENERATED_TYPES = (SemanticType.INT32, SemanticType.INT64)


def is_server_generated(column: Column) -> bool:
    """
    Heuristic identity detection: integer (32/64-bit) primary keys are assumed
    to be generated by the server. This is not read from catalog metadata.
    """
    return column.is_primary and column.semantic_type in _SERVER_GENERATED_TYPES


def read_expression(column: Column) -> str:
    """C# expression that reads this column from a SqlDataReader named 'reader'."""
    ordinal = f'reader.GetOrdinal("{column.name}")'
    accessor = reader_accessor(column.semantic_type)
    read = f"reader.{accessor.getter}({ordinal})"
    if accessor.reference_cast:
        return f"{read} as {accessor.reference_cast}"
    if column.is_optional_value:
        optional = csharp_type(column.semantic_type, optional=True)
        return f"reader.IsDBNull({ordinal}) ? ({optional})null : {read}"
    return read


def _column_blueprint(column: Column) -> ColumnBlueprint:
    naming.validate_identifier(column.name, "Column")
    return ColumnBlueprint(
        name=column.name,
        member=naming.member_name(column.name),
        semantic_type=column.semantic_type,
        csharp_type=csharp_type(column.semantic_type, optional=column.is_optional_value),
        base_csharp_type=csharp_type(column.semantic_type),
        sql_name=naming.quote_sql_identifier(column.name),
        parameter=f"@{column.name}",
        read_expression=read_expression(column),
        is_primary=column.is_primary,
        nullable=column.nullable,
        declared_nullable=column.declared_nullable,
        is_server_generated=is_server_generated(column),
    )


def build_operations(table: Table) -> list[Operation]:
    """
    The operation set shared by repository and service layers.
    Without a primary key only list-all and create are generated.
    """
    name = table.name
    dto = naming.dto_class_name(name)
    operations = [
        Operation(
            kind=OperationKind.GET_ALL,
            name=naming.get_all_method_name(name),
            return_type=f"Task<List<{dto}>>",
            parameters="",
            arguments="",
        )
    ]
    pk = table.primary_key
    if pk is not None:
        key_type = csharp_type(pk.semantic_type)
        operations.append(
            Operation(
                kind=OperationKind.GET_BY_ID,
                name=naming.get_by_id_method_name(name),
                return_type=f"Task<{dto}>",
                parameters=f"{key_type} id",
                arguments="id",
            )
        )
    operations.append(
        Operation(
            kind=OperationKind.ADD,
            name=naming.add_method_name(name),
            return_type="Task",
            parameters=f"{dto} item",
            arguments="item",
        )
    )
    if pk is not None:
        operations.append(
            Operation(
                kind=OperationKind.UPDATE,
                name=naming.update_method_name(name),
                return_type="Task",
                parameters=f"{dto} item",
                arguments="item",
            )
        )
        operations.append(
            Operation(
                kind=OperationKind.DELETE,
                name=naming.delete_method_name(name),
                return_type="Task",
                parameters=f"{csharp_type(pk.semantic_type)} id",
                arguments="id",
            )
        )
    return operations


def build_blueprint(table: Table) -> TableBlueprint:
    naming.validate_identifier(table.name, "Table")
    columns = [_column_blueprint(c) for c in table.columns]
    pk_index = next((i for i, c in enumerate(table.columns) if c.is_primary), None)
    primary_key = columns[pk_index] if pk_index is not None else None

    if primary_key is None:
        logger.info(
            "Table %s has no primary key: get-by-id, update and delete are not generated",
            table.qualified_name,
        )
    elif sum(1 for c in table.columns if c.is_primary) > 1:
        logger.warning(
            "Table %s has a composite primary key; only %s is used",
            table.qualified_name,
            primary_key.name,
        )

    return TableBlueprint(
        table=table,
        names=naming.table_names(table.name),
        sql_table=naming.qualified_table_sql(table.schema_name, table.name),
        columns=columns,
        primary_key=primary_key,
        insert_columns=[c for c in columns if not c.is_server_generated],
        update_columns=[c for c in columns if not c.is_primary],
        operations=build_operations(table),
    )


def ui_contract(blueprint: TableBlueprint) -> UiContract:
    return UiContract(
        table=blueprint.name,
        columns=[
            UiColumn(
                name=c.name,
                type_label=c.type_label,
                is_primary=c.is_primary,
                is_nullable=c.declared_nullable,
                is_server_generated=c.is_server_generated,
            )
            for c in blueprint.columns
        ],
        operations=[op.name for op in blueprint.operations],
    )
