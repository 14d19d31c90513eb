"""
Solution composition.
Assigns each project a GUID for the duration of one run and renders the .sln manifest.
"""
from __future__ import annotations

import uuid
from collections.abc import Callable, Sequence

from tiergen.schemas.artifact import (
    Artifact,
    ArtifactKind,
    ProjectUnit,
    SolutionEntry,
    SolutionManifest,
)
from tiergen.services import naming
from tiergen.services.templating import render

CSHARP_PROJECT_TYPE_GUID = "{FAE04EC0-301F-11D3-BF4B-00C04F79EFBC}"
SOLUTION_CONFIGURATIONS: tuple[str, ...] = ("Debug|Any CPU", "Release|Any CPU")


class ProjectGuidCache:
    """
    Project name -> GUID, created on first request and stable afterwards.
    One instance lives for exactly one generation run.
    """

    def __init__(self, factory: Callable[[], uuid.UUID] = uuid.uuid4) -> None:
        self._factory = factory
        self._guids: dict[str, uuid.UUID] = {}

    def get(self, project_name: str) -> uuid.UUID:
        guid = self._guids.get(project_name)
        if guid is None:
            guid = self._factory()
            self._guids[project_name] = guid
        return guid

    def __contains__(self, project_name: object) -> bool:
        return project_name in self._guids

    def __len__(self) -> int:
        return len(self._guids)


class SolutionComposer:

    def __init__(self, guid_cache: ProjectGuidCache | None = None) -> None:
        self.guid_cache = guid_cache if guid_cache is not None else ProjectGuidCache()

    def compose(self, solution_name: str, projects: Sequence[ProjectUnit]) -> SolutionManifest:
        entries = [
            SolutionEntry(
                name=project.name,
                guid=self.guid_cache.get(project.name),
                # Solution files use Windows path separators
                manifest_path=project.manifest_path.replace("/", "\\"),
            )
            for project in projects
        ]
        content = render(
            "solution.sln.j2",
            entries=entries,
            configurations=SOLUTION_CONFIGURATIONS,
            project_type_guid=CSHARP_PROJECT_TYPE_GUID,
        )
        artifact = Artifact(
            path=naming.solution_file_name(solution_name),
            content=content,
            kind=ArtifactKind.SOLUTION_MANIFEST,
        )
        return SolutionManifest(
            name=solution_name,
            entries=entries,
            configurations=list(SOLUTION_CONFIGURATIONS),
            artifact=artifact,
        )
