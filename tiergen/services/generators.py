"""
Artifact generators.
One function per artifact kind; each renders a template from table blueprints
and records the project namespaces the generated code imports.
"""
from __future__ import annotations

from collections.abc import Callable, Sequence
from typing import NamedTuple

from tiergen.schemas.artifact import Artifact, ArtifactKind
from tiergen.schemas.blueprint import Operation, OperationKind, TableBlueprint, UiContract
from tiergen.services import naming
from tiergen.services.blueprint_service import ui_contract
from tiergen.services.project_composer import (
    BLL_PROJECT,
    CONSOLE_PROJECT,
    DAL_PROJECT,
    DTO_PROJECT,
    PROJECT_NAMES,
)
from tiergen.services.templating import render
from tiergen.services.type_mapper import BINARY_DISPLAY, NULL_DISPLAY

TableGenerator = Callable[[TableBlueprint, Sequence[TableBlueprint]], Artifact]

_ASYNC_USINGS = ("System", "System.Collections.Generic", "System.Threading.Tasks")


def _source_artifact(
    *,
    kind: ArtifactKind,
    project: str,
    identifier: str,
    template: str,
    usings: Sequence[str],
    **context: object,
) -> Artifact:
    content = render(template, usings=usings, namespace=project, **context)
    return Artifact(
        path=f"{project}/{naming.source_file_name(identifier)}",
        content=content,
        kind=kind,
        project=project,
        imports=tuple(ns for ns in usings if ns in PROJECT_NAMES),
    )


# ── DTO ───────────────────────────────────────────────────────────────────────

def generate_dto(bp: TableBlueprint, all_blueprints: Sequence[TableBlueprint] = ()) -> Artifact:
    return _source_artifact(
        kind=ArtifactKind.DTO,
        project=DTO_PROJECT,
        identifier=bp.names.dto,
        template="dto.cs.j2",
        usings=("System",),
        bp=bp,
    )


# ── Data access layer ─────────────────────────────────────────────────────────

def generate_repository_interface(
    bp: TableBlueprint, all_blueprints: Sequence[TableBlueprint] = ()
) -> Artifact:
    return _source_artifact(
        kind=ArtifactKind.REPOSITORY_INTERFACE,
        project=DAL_PROJECT,
        identifier=bp.names.repository_interface,
        template="interface.cs.j2",
        usings=(*_ASYNC_USINGS, DTO_PROJECT),
        bp=bp,
        interface_name=bp.names.repository_interface,
    )


def generate_repository(
    bp: TableBlueprint, all_blueprints: Sequence[TableBlueprint] = ()
) -> Artifact:
    return _source_artifact(
        kind=ArtifactKind.REPOSITORY,
        project=DAL_PROJECT,
        identifier=bp.names.repository,
        template="repository.cs.j2",
        usings=(
            "System",
            "System.Collections.Generic",
            "System.Data.SqlClient",
            "System.Threading.Tasks",
            DTO_PROJECT,
        ),
        bp=bp,
    )


# ── Business logic layer ──────────────────────────────────────────────────────

def generate_service_interface(
    bp: TableBlueprint, all_blueprints: Sequence[TableBlueprint] = ()
) -> Artifact:
    return _source_artifact(
        kind=ArtifactKind.SERVICE_INTERFACE,
        project=BLL_PROJECT,
        identifier=bp.names.service_interface,
        template="interface.cs.j2",
        usings=(*_ASYNC_USINGS, DTO_PROJECT),
        bp=bp,
        interface_name=bp.names.service_interface,
    )


def generate_service(bp: TableBlueprint, all_blueprints: Sequence[TableBlueprint] = ()) -> Artifact:
    return _source_artifact(
        kind=ArtifactKind.SERVICE,
        project=BLL_PROJECT,
        identifier=bp.names.service,
        template="service.cs.j2",
        usings=("System.Collections.Generic", "System.Threading.Tasks", DAL_PROJECT, DTO_PROJECT),
        bp=bp,
    )


# Per-table generators in the order their artifacts are emitted
TABLE_GENERATORS: tuple[TableGenerator, ...] = (
    generate_dto,
    generate_repository_interface,
    generate_repository,
    generate_service_interface,
    generate_service,
)


# ── Console front end ─────────────────────────────────────────────────────────

class OperationSet(NamedTuple):
    get_all: Operation | None
    get_by_id: Operation | None
    add: Operation | None
    update: Operation | None
    delete: Operation | None


class ConsoleTable(NamedTuple):
    blueprint: TableBlueprint
    contract: UiContract
    ops: OperationSet
    key_index: int | None


def _console_table(bp: TableBlueprint) -> ConsoleTable:
    ops = OperationSet(*(bp.operation(kind) for kind in OperationKind))
    key_index = None
    if bp.primary_key is not None:
        key_index = next(i for i, c in enumerate(bp.columns) if c.name == bp.primary_key.name)
    return ConsoleTable(blueprint=bp, contract=ui_contract(bp), ops=ops, key_index=key_index)


def generate_console_entry(blueprints: Sequence[TableBlueprint], *, database_name: str) -> Artifact:
    """The console program: one ITableOperations adapter per table plus generic CRUD menus."""
    return _source_artifact(
        kind=ArtifactKind.CONSOLE_ENTRY,
        project=CONSOLE_PROJECT,
        identifier="Program",
        template="program.cs.j2",
        usings=(
            "System",
            "System.Collections.Generic",
            "System.Configuration",
            "System.Globalization",
            "System.Linq",
            "System.Threading.Tasks",
            BLL_PROJECT,
            DTO_PROJECT,
        ),
        tables=[_console_table(bp) for bp in blueprints],
        database_name=database_name,
        null_display=NULL_DISPLAY,
        binary_display=BINARY_DISPLAY,
    )


def generate_app_config(connection_string: str) -> Artifact:
    return Artifact(
        path=f"{CONSOLE_PROJECT}/App.config",
        content=render("app.config.j2", connection_string=connection_string),
        kind=ArtifactKind.APP_CONFIG,
        project=CONSOLE_PROJECT,
    )
