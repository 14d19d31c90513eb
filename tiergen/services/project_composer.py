"""
Project composition.
Groups artifacts into the four generated projects and renders their manifests.
The dependency graph is fixed: ConsoleApp -> {BLL, DTO}, BLL -> {DAL, DTO}, DAL -> {DTO}.
"""
from __future__ import annotations

import logging
from collections.abc import Iterable

from tiergen.core.exceptions import GenerationError
from tiergen.schemas.artifact import Artifact, ArtifactKind, OutputType, ProjectUnit
from tiergen.services.templating import render

logger = logging.getLogger(__name__)

DTO_PROJECT = "DTO"
DAL_PROJECT = "DAL"
BLL_PROJECT = "BLL"
CONSOLE_PROJECT = "ConsoleApp"

# Build order; also the order projects appear in the solution
PROJECT_NAMES: tuple[str, ...] = (DTO_PROJECT, DAL_PROJECT, BLL_PROJECT, CONSOLE_PROJECT)

PROJECT_DEPENDENCIES: dict[str, tuple[str, ...]] = {
    DTO_PROJECT: (),
    DAL_PROJECT: (DTO_PROJECT,),
    BLL_PROJECT: (DAL_PROJECT, DTO_PROJECT),
    CONSOLE_PROJECT: (BLL_PROJECT, DTO_PROJECT),
}

PROJECT_OUTPUT_TYPES: dict[str, OutputType] = {
    DTO_PROJECT: OutputType.LIBRARY,
    DAL_PROJECT: OutputType.LIBRARY,
    BLL_PROJECT: OutputType.LIBRARY,
    CONSOLE_PROJECT: OutputType.EXE,
}

PROJECT_FRAMEWORK_REFERENCES: dict[str, tuple[str, ...]] = {
    CONSOLE_PROJECT: ("System.Configuration",),
}


class ProjectComposer:

    def __init__(self, *, target_framework: str = "net48", lang_version: str = "8.0") -> None:
        self.target_framework = target_framework
        self.lang_version = lang_version

    def compose(self, artifacts: Iterable[Artifact]) -> list[ProjectUnit]:
        """
        Build one ProjectUnit per project, in build order.
        Raises GenerationError when an artifact imports a project that is
        neither its own nor one of its declared dependencies.
        """
        grouped: dict[str, list[Artifact]] = {name: [] for name in PROJECT_NAMES}
        for artifact in artifacts:
            if artifact.project not in grouped:
                raise GenerationError(
                    f"Artifact {artifact.path} does not belong to a known project"
                )
            self._check_imports(artifact)
            grouped[artifact.project].append(artifact)

        projects = []
        for name in PROJECT_NAMES:
            project = ProjectUnit(
                name=name,
                output_type=PROJECT_OUTPUT_TYPES[name],
                references=list(PROJECT_DEPENDENCIES[name]),
                framework_references=list(PROJECT_FRAMEWORK_REFERENCES.get(name, ())),
                artifacts=grouped[name],
            )
            project.manifest = self._manifest(project)
            logger.debug(
                "Composed project %s: %d artifacts, references=%s",
                name,
                len(project.artifacts),
                project.references,
            )
            projects.append(project)
        return projects

    def _check_imports(self, artifact: Artifact) -> None:
        allowed = {artifact.project, *PROJECT_DEPENDENCIES[artifact.project]}
        for imported in artifact.imports:
            if imported in PROJECT_DEPENDENCIES and imported not in allowed:
                raise GenerationError(
                    f"{artifact.path} imports {imported}, which project "
                    f"{artifact.project} does not reference"
                )

    def _manifest(self, project: ProjectUnit) -> Artifact:
        content = render(
            "project.csproj.j2",
            project=project,
            target_framework=self.target_framework,
            lang_version=self.lang_version,
        )
        return Artifact(
            path=project.manifest_path,
            content=content,
            kind=ArtifactKind.PROJECT_MANIFEST,
            project=project.name,
        )
