"""
Generation run orchestration.
Turns a schema model into the complete artifact set: per-table passes for the
DTO, DAL and BLL layers, the console front end, project manifests and the solution.
"""
from __future__ import annotations

import logging
import uuid
from collections import defaultdict
from collections.abc import Callable, Iterable, Sequence

from tiergen.core.exceptions import IdentifierCollisionError, InvalidIdentifierError
from tiergen.schemas.artifact import Artifact, GenerationResult
from tiergen.schemas.blueprint import TableBlueprint
from tiergen.schemas.schema import Table
from tiergen.services import naming
from tiergen.services.blueprint_service import build_blueprint
from tiergen.services.generators import (
    TableGenerator,
    generate_app_config,
    generate_console_entry,
    generate_dto,
    generate_repository,
    generate_repository_interface,
    generate_service,
    generate_service_interface,
)
from tiergen.services.project_composer import CONSOLE_PROJECT, ProjectComposer
from tiergen.services.solution_composer import ProjectGuidCache, SolutionComposer

logger = logging.getLogger(__name__)

# One pass over all tables per layer
LAYER_PASSES: tuple[tuple[str, tuple[TableGenerator, ...]], ...] = (
    ("DTO", (generate_dto,)),
    ("DAL", (generate_repository_interface, generate_repository)),
    ("BLL", (generate_service_interface, generate_service)),
)


class GenerationService:

    def __init__(
        self,
        *,
        target_framework: str = "net48",
        lang_version: str = "8.0",
        guid_factory: Callable[[], uuid.UUID] = uuid.uuid4,
    ) -> None:
        self.project_composer = ProjectComposer(
            target_framework=target_framework, lang_version=lang_version
        )
        self.guid_factory = guid_factory

    def generate(
        self,
        tables: Iterable[Table],
        *,
        solution_name: str,
        connection_string: str,
    ) -> GenerationResult:
        """
        Run one complete generation.
        Tables whose names cannot become C# identifiers are skipped with a warning.
        Returns an empty result when no table is left; raises before producing
        anything on a bad solution name or an identifier collision.
        """
        tables = list(tables)
        if not tables:
            logger.info("No tables to generate")
            return GenerationResult()

        naming.solution_file_name(solution_name)
        blueprints, skipped = self._build_blueprints(tables)
        if not blueprints:
            logger.warning("None of the %d tables can be generated", len(tables))
            return GenerationResult(skipped=skipped)
        self._check_collisions(blueprints)
        tables = [bp.table for bp in blueprints]

        artifacts: list[Artifact] = []
        for layer, generators in LAYER_PASSES:
            for bp in blueprints:
                for generator in generators:
                    artifacts.append(generator(bp, blueprints))
            logger.debug("Generated %s layer for %d tables", layer, len(blueprints))

        artifacts.append(generate_console_entry(blueprints, database_name=solution_name))
        artifacts.append(generate_app_config(connection_string))

        projects = self.project_composer.compose(artifacts)
        solution = SolutionComposer(ProjectGuidCache(self.guid_factory)).compose(
            solution_name, projects
        )

        artifacts.extend(project.manifest for project in projects if project.manifest)
        artifacts.append(solution.artifact)

        logger.info(
            "Generated %d artifacts for %d tables in solution %s",
            len(artifacts),
            len(tables),
            solution_name,
        )
        return GenerationResult(
            tables=tables,
            artifacts=artifacts,
            projects=projects,
            solution=solution,
            skipped=skipped,
        )

    def _build_blueprints(self, tables: Sequence[Table]) -> tuple[list[TableBlueprint], list[str]]:
        blueprints: list[TableBlueprint] = []
        skipped: list[str] = []
        for table in tables:
            try:
                blueprints.append(build_blueprint(table))
            except InvalidIdentifierError as exc:
                logger.warning("Skipping table %s: %s", table.qualified_name, exc.detail)
                skipped.append(table.qualified_name)
        return blueprints, skipped

    def _check_collisions(self, blueprints: Sequence[TableBlueprint]) -> None:
        """
        Two tables may not share a generated identifier, nor take one of the
        console's own type names; case-only clashes are logged.
        """
        owners: dict[str, list[str]] = defaultdict(list)
        folded: dict[str, set[str]] = defaultdict(set)
        for identifier in naming.CONSOLE_TYPE_NAMES:
            owners[identifier].append(CONSOLE_PROJECT)
            folded[identifier.casefold()].add(identifier)
        for bp in blueprints:
            for identifier in bp.names:
                owners[identifier].append(bp.table.qualified_name)
                folded[identifier.casefold()].add(identifier)

        for identifier, tables in owners.items():
            if len(tables) > 1:
                raise IdentifierCollisionError(identifier, tables)

        for variants in folded.values():
            if len(variants) > 1:
                logger.warning(
                    "Identifiers differ only by case and may clash on case-insensitive "
                    "file systems: %s",
                    ", ".join(sorted(variants)),
                )
