"""
Project and solution composer tests.
Covers: project grouping, reference graph, manifests, GUID cache, solution file.
"""
from __future__ import annotations

import uuid
from collections.abc import Callable

import pytest

from tiergen.core.exceptions import GenerationError
from tiergen.schemas.artifact import Artifact, ArtifactKind, OutputType
from tiergen.schemas.schema import Table
from tiergen.services.blueprint_service import build_blueprint
from tiergen.services.generators import TABLE_GENERATORS, generate_app_config, generate_console_entry
from tiergen.services.project_composer import PROJECT_NAMES, ProjectComposer
from tiergen.services.solution_composer import (
    CSHARP_PROJECT_TYPE_GUID,
    ProjectGuidCache,
    SolutionComposer,
)


def _artifacts(table: Table) -> list[Artifact]:
    bp = build_blueprint(table)
    artifacts = [generator(bp, [bp]) for generator in TABLE_GENERATORS]
    artifacts.append(generate_console_entry([bp], database_name="Shop"))
    artifacts.append(generate_app_config("Server=.;Database=Shop;Integrated Security=True;"))
    return artifacts


class TestProjectComposer:
    def test_groups_artifacts_by_project(self, customer_table: Table) -> None:
        projects = ProjectComposer().compose(_artifacts(customer_table))
        assert [p.name for p in projects] == list(PROJECT_NAMES)
        by_name = {p.name: p for p in projects}
        assert [a.path for a in by_name["DTO"].artifacts] == ["DTO/CustomerDTO.cs"]
        assert [a.path for a in by_name["DAL"].artifacts] == [
            "DAL/ICustomerRepository.cs",
            "DAL/CustomerRepository.cs",
        ]
        assert [a.path for a in by_name["ConsoleApp"].artifacts] == [
            "ConsoleApp/Program.cs",
            "ConsoleApp/App.config",
        ]

    def test_reference_graph(self, customer_table: Table) -> None:
        projects = {p.name: p for p in ProjectComposer().compose(_artifacts(customer_table))}
        assert projects["DTO"].references == []
        assert projects["DAL"].references == ["DTO"]
        assert projects["BLL"].references == ["DAL", "DTO"]
        assert projects["ConsoleApp"].references == ["BLL", "DTO"]
        assert projects["ConsoleApp"].output_type is OutputType.EXE
        assert projects["DAL"].output_type is OutputType.LIBRARY

    def test_manifests(self, customer_table: Table) -> None:
        projects = {
            p.name: p
            for p in ProjectComposer(target_framework="net472", lang_version="7.3").compose(
                _artifacts(customer_table)
            )
        }
        bll = projects["BLL"].manifest
        assert bll is not None
        assert bll.path == "BLL/BLL.csproj"
        assert bll.kind is ArtifactKind.PROJECT_MANIFEST
        assert '<Project Sdk="Microsoft.NET.Sdk">' in bll.content
        assert "<OutputType>Library</OutputType>" in bll.content
        assert "<TargetFramework>net472</TargetFramework>" in bll.content
        assert "<LangVersion>7.3</LangVersion>" in bll.content
        assert '<ProjectReference Include="..\\DAL\\DAL.csproj" />' in bll.content
        assert '<ProjectReference Include="..\\DTO\\DTO.csproj" />' in bll.content

        console = projects["ConsoleApp"].manifest.content
        assert "<OutputType>Exe</OutputType>" in console
        assert '<Reference Include="System.Configuration" />' in console
        assert "ProjectReference" not in projects["DTO"].manifest.content

    def test_rejects_import_outside_dependencies(self) -> None:
        artifact = Artifact(
            path="DTO/Leaky.cs",
            content="using BLL;",
            kind=ArtifactKind.DTO,
            project="DTO",
            imports=("BLL",),
        )
        with pytest.raises(GenerationError, match="does not reference"):
            ProjectComposer().compose([artifact])

    def test_rejects_unknown_project(self) -> None:
        artifact = Artifact(path="Web/Page.cs", content="", kind=ArtifactKind.DTO, project="Web")
        with pytest.raises(GenerationError, match="known project"):
            ProjectComposer().compose([artifact])


class TestProjectGuidCache:
    def test_guid_is_stable_per_name(self) -> None:
        cache = ProjectGuidCache()
        first = cache.get("DAL")
        assert cache.get("DAL") == first
        assert cache.get("BLL") != first
        assert "DAL" in cache
        assert len(cache) == 2

    def test_factory_is_called_once_per_name(
        self, guid_factory: Callable[[], uuid.UUID]
    ) -> None:
        cache = ProjectGuidCache(guid_factory)
        assert cache.get("DTO") == uuid.UUID(int=1)
        assert cache.get("DAL") == uuid.UUID(int=2)
        assert cache.get("DTO") == uuid.UUID(int=1)


class TestSolutionComposer:
    def test_solution_file(
        self, customer_table: Table, guid_factory: Callable[[], uuid.UUID]
    ) -> None:
        projects = ProjectComposer().compose(_artifacts(customer_table))
        solution = SolutionComposer(ProjectGuidCache(guid_factory)).compose("Shop", projects)

        assert solution.artifact.path == "Shop.sln"
        assert solution.artifact.kind is ArtifactKind.SOLUTION_MANIFEST
        assert [e.name for e in solution.entries] == ["DTO", "DAL", "BLL", "ConsoleApp"]
        assert solution.entries[3].manifest_path == "ConsoleApp\\ConsoleApp.csproj"

        content = solution.artifact.content
        dto_guid = "{00000000-0000-0000-0000-000000000001}"
        assert solution.entries[0].braced_guid == dto_guid
        assert "Microsoft Visual Studio Solution File, Format Version 12.00" in content
        assert (
            f'Project("{CSHARP_PROJECT_TYPE_GUID}") = "DTO", "DTO\\DTO.csproj", "{dto_guid}"'
        ) in content
        assert content.count("EndProject\n") == 4
        assert "\t\tDebug|Any CPU = Debug|Any CPU\n" in content
        assert f"\t\t{dto_guid}.Release|Any CPU.Build.0 = Release|Any CPU\n" in content
        assert content.count(".ActiveCfg = ") == 8

    def test_same_cache_gives_same_guids(self, customer_table: Table) -> None:
        projects = ProjectComposer().compose(_artifacts(customer_table))
        composer = SolutionComposer()
        first = composer.compose("Shop", projects)
        second = composer.compose("Shop", projects)
        assert first.artifact.content == second.artifact.content
