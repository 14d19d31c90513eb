"""
Generated artifact Pydantic schemas.
Artifacts, project units and the solution manifest handed to the file writer.
"""
from __future__ import annotations

import uuid
from enum import Enum

from pydantic import BaseModel, Field, computed_field

from tiergen.schemas.schema import Table
from tiergen.services.naming import project_file_name


class ArtifactKind(str, Enum):
    DTO = "dto"
    REPOSITORY_INTERFACE = "repository_interface"
    REPOSITORY = "repository"
    SERVICE_INTERFACE = "service_interface"
    SERVICE = "service"
    CONSOLE_ENTRY = "console_entry"
    APP_CONFIG = "app_config"
    PROJECT_MANIFEST = "project_manifest"
    SOLUTION_MANIFEST = "solution_manifest"


class OutputType(str, Enum):
    EXE = "Exe"
    LIBRARY = "Library"


# ── Artifact ──────────────────────────────────────────────────────────────────

class Artifact(BaseModel):
    """One generated text unit and its path relative to the solution root."""

    path: str
    content: str
    kind: ArtifactKind
    project: str | None = None
    imports: tuple[str, ...] = ()

    model_config = {"frozen": True}


# ── Projects ──────────────────────────────────────────────────────────────────

class ProjectUnit(BaseModel):
    name: str
    output_type: OutputType
    references: list[str] = Field(default_factory=list)
    framework_references: list[str] = Field(default_factory=list)
    artifacts: list[Artifact] = Field(default_factory=list)
    manifest: Artifact | None = None

    @computed_field  # type: ignore[misc]
    @property
    def manifest_path(self) -> str:
        return f"{self.name}/{project_file_name(self.name)}"


# ── Solution ──────────────────────────────────────────────────────────────────

class SolutionEntry(BaseModel):
    name: str
    guid: uuid.UUID
    manifest_path: str

    @property
    def braced_guid(self) -> str:
        return "{" + str(self.guid).upper() + "}"


class SolutionManifest(BaseModel):
    name: str
    entries: list[SolutionEntry]
    configurations: list[str]
    artifact: Artifact


# ── Run result ────────────────────────────────────────────────────────────────

class GenerationResult(BaseModel):
    tables: list[Table] = Field(default_factory=list)
    artifacts: list[Artifact] = Field(default_factory=list)
    projects: list[ProjectUnit] = Field(default_factory=list)
    solution: SolutionManifest | None = None
    # Qualified names of tables left out because their names are unusable
    skipped: list[str] = Field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.tables

    def artifact(self, path: str) -> Artifact | None:
        return next((a for a in self.artifacts if a.path == path), None)
