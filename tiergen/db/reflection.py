"""
Catalog reflection.
Reads tables, columns and keys from a live database into the schema model.
"""
from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any

from sqlalchemy import inspect
from sqlalchemy.engine import Connection, Inspector
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine

from tiergen.core.config import settings
from tiergen.core.exceptions import SchemaReadError
from tiergen.schemas.schema import Column, SemanticType, Table
from tiergen.services.type_mapper import map_source_type

logger = logging.getLogger(__name__)

# Tooling tables such as __EFMigrationsHistory
_SKIPPED_TABLE_PREFIX = "__"


def _type_name(column_type: Any) -> str:
    return getattr(column_type, "__visit_name__", "") or ""


def _max_length(column_type: Any) -> int | None:
    length = getattr(column_type, "length", None)
    # nvarchar(max) reflects as None or -1
    return length if isinstance(length, int) and length > 0 else None


class SchemaReader:

    def __init__(self, excluded_schemas: Iterable[str] | None = None) -> None:
        self.excluded_schemas = {
            schema.casefold()
            for schema in (
                excluded_schemas if excluded_schemas is not None else settings.EXCLUDED_SCHEMAS
            )
        }

    async def read_tables(self, engine: AsyncEngine) -> list[Table]:
        """Reflect every user table outside the excluded schemas."""
        try:
            async with engine.connect() as conn:
                tables = await conn.run_sync(self._reflect)
        except SQLAlchemyError as exc:
            logger.error("Schema reflection failed: %s", exc)
            raise SchemaReadError(f"Could not read database schema: {exc}") from exc

        logger.info("Read %d tables from %s", len(tables), engine.url.render_as_string())
        return tables

    # ── Sync reflection (runs inside run_sync) ────────────────────────────────

    def _reflect(self, sync_conn: Connection) -> list[Table]:
        inspector = inspect(sync_conn)
        tables: list[Table] = []
        for schema in inspector.get_schema_names():
            if schema.casefold() in self.excluded_schemas:
                continue
            for name in inspector.get_table_names(schema=schema):
                if name.startswith(_SKIPPED_TABLE_PREFIX):
                    logger.debug("Skipping tooling table %s.%s", schema, name)
                    continue
                tables.append(self._reflect_table(inspector, schema, name))
        return tables

    def _reflect_table(self, inspector: Inspector, schema: str, name: str) -> Table:
        pk = inspector.get_pk_constraint(name, schema=schema) or {}
        primary = set(pk.get("constrained_columns") or [])

        references: dict[str, tuple[str, str]] = {}
        for fk in inspector.get_foreign_keys(name, schema=schema):
            for local, remote in zip(fk["constrained_columns"], fk["referred_columns"]):
                references.setdefault(local, (fk["referred_table"], remote))

        columns: list[Column] = []
        for info in inspector.get_columns(name, schema=schema):
            column_type = info["type"]
            semantic = map_source_type(_type_name(column_type))
            referenced_table, referenced_column = references.get(info["name"], (None, None))
            columns.append(
                Column(
                    name=info["name"],
                    semantic_type=semantic,
                    nullable=bool(info.get("nullable", True)) and info["name"] not in primary,
                    is_primary=info["name"] in primary,
                    is_foreign_key=info["name"] in references,
                    referenced_table=referenced_table,
                    referenced_column=referenced_column,
                    max_length=(
                        _max_length(column_type) if semantic is SemanticType.STRING else None
                    ),
                )
            )

        logger.debug("Reflected %s.%s with %d columns", schema, name, len(columns))
        return Table(schema_name=schema, name=name, columns=columns)
