"""
Test configuration and shared fixtures.
Schema fixtures are plain Table models; reflection tests use a file-backed SQLite database.
"""
from __future__ import annotations

import itertools
import uuid
from collections.abc import AsyncGenerator, Callable
from pathlib import Path

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine

from tiergen.schemas.schema import Column, SemanticType, Table

# ── Schema fixtures ───────────────────────────────────────────────────────────


@pytest.fixture
def customer_table() -> Table:
    return Table(
        schema_name="dbo",
        name="Customer",
        columns=[
            Column(name="Id", semantic_type=SemanticType.INT32, is_primary=True),
            Column(name="Name", semantic_type=SemanticType.STRING, max_length=100),
            Column(name="Email", semantic_type=SemanticType.STRING, nullable=True),
            Column(name="Age", semantic_type=SemanticType.INT32, nullable=True),
            Column(name="CreatedAt", semantic_type=SemanticType.DATETIME),
        ],
    )


@pytest.fixture
def audit_log_table() -> Table:
    """A table without a primary key."""
    return Table(
        schema_name="dbo",
        name="AuditLog",
        columns=[
            Column(name="Message", semantic_type=SemanticType.STRING),
            Column(name="LoggedAt", semantic_type=SemanticType.DATETIME),
        ],
    )


@pytest.fixture
def audit_event_table() -> Table:
    """AuditLog keyed by a caller-supplied GUID, with an optional binary payload."""
    return Table(
        schema_name="dbo",
        name="AuditLog",
        columns=[
            Column(name="EventId", semantic_type=SemanticType.GUID, is_primary=True),
            Column(name="Payload", semantic_type=SemanticType.BINARY, nullable=True),
        ],
    )


@pytest.fixture
def tag_table() -> Table:
    """Client-supplied GUID key plus a binary column."""
    return Table(
        schema_name="catalog",
        name="Tag",
        columns=[
            Column(name="Id", semantic_type=SemanticType.GUID, is_primary=True),
            Column(name="Label", semantic_type=SemanticType.STRING),
            Column(name="Icon", semantic_type=SemanticType.BINARY),
            Column(
                name="CustomerId",
                semantic_type=SemanticType.INT32,
                nullable=True,
                is_foreign_key=True,
                referenced_table="Customer",
                referenced_column="Id",
            ),
        ],
    )


@pytest.fixture
def counter_table() -> Table:
    """Every column belongs to the primary key."""
    return Table(
        name="Counter",
        columns=[Column(name="Id", semantic_type=SemanticType.INT64, is_primary=True)],
    )


@pytest.fixture
def guid_factory() -> Callable[[], uuid.UUID]:
    """Deterministic project GUIDs: 00000000-...-000000000001, ...-0002, ..."""
    counter = itertools.count(1)
    return lambda: uuid.UUID(int=next(counter))


# ── Database fixtures ─────────────────────────────────────────────────────────


@pytest.fixture
def database_path(tmp_path: Path) -> Path:
    return tmp_path / "shop.db"


@pytest_asyncio.fixture
async def engine(database_path: Path) -> AsyncGenerator[AsyncEngine, None]:
    test_engine = create_async_engine(f"sqlite+aiosqlite:///{database_path}", echo=False)
    yield test_engine
    await test_engine.dispose()
