from __future__ import annotations

from typing import List

import pytest

from depbump.core.file_updater import FileUpdater, RequirementFileUpdater
from depbump.core.requirement_updater import update_dependency
from depbump.models import Dependency, DependencyFile, Requirement

CSPROJ = (
    '<Project Sdk="Microsoft.NET.Sdk">\r\n'
    "  <ItemGroup>\r\n"
    '    <PackageReference Include="Newtonsoft.Json" Version="12.0.1" />\r\n'
    '    <PackageReference Include="Newtonsoft.Json.Bson" Version="12.0.1" />\r\n'
    "  </ItemGroup>\r\n"
    "</Project>\r\n"
)


def _dependency(*requirements: Requirement, name: str = "Newtonsoft.Json") -> Dependency:
    return Dependency(
        name=name,
        package_manager="nuget",
        version="12.0.1",
        requirements=requirements,
    )


@pytest.mark.unit
class TestFileUpdater:
    """Tests for the FileUpdater base class."""

    def test_updated_dependency_files_is_abstract(self) -> None:
        """Test the base class requires an implementation."""
        updater = FileUpdater(dependencies=[], dependency_files=[])

        with pytest.raises(NotImplementedError):
            updater.updated_dependency_files()

    def test_get_original_file_skips_support_files(self) -> None:
        """Test support files are not returned as originals."""
        files = [
            DependencyFile(name="nuget.config", content="<x/>", support_file=True),
            DependencyFile(name="my.csproj", content=CSPROJ),
        ]
        updater = FileUpdater(dependencies=[], dependency_files=files)

        assert updater.get_original_file("my.csproj") is files[1]
        assert updater.get_original_file("nuget.config") is None

    def test_defaults(self) -> None:
        """Test optional arguments default to empty values."""
        updater = FileUpdater(dependencies=[], dependency_files=[])

        assert updater.credentials == []
        assert updater.options == {}
        assert updater.repo_contents_path is None


@pytest.mark.unit
class TestRequirementFileUpdater:
    """Tests for in-place requirement rewriting."""

    @pytest.fixture
    def files(self) -> List[DependencyFile]:
        return [
            DependencyFile(name="my.csproj", content=CSPROJ),
            DependencyFile(name="nuget.config", content="<config/>", support_file=True),
        ]

    def test_rewrites_only_named_dependency(self, files: List[DependencyFile]) -> None:
        """Test lines of similarly named packages are left alone."""
        dependency = update_dependency(
            _dependency(Requirement(file="my.csproj", requirement="12.0.1")), "13.0.3"
        )

        (updated,) = RequirementFileUpdater(
            dependencies=[dependency], dependency_files=files
        ).updated_dependency_files()

        assert '"Newtonsoft.Json" Version="13.0.3"' in updated.content
        assert '"Newtonsoft.Json.Bson" Version="12.0.1"' in updated.content

    def test_preserves_line_endings(self, files: List[DependencyFile]) -> None:
        """Test CRLF line endings survive the rewrite."""
        dependency = update_dependency(
            _dependency(Requirement(file="my.csproj", requirement="12.0.1")), "13.0.3"
        )

        (updated,) = RequirementFileUpdater(
            dependencies=[dependency], dependency_files=files
        ).updated_dependency_files()

        assert updated.content == CSPROJ.replace(
            'Json" Version="12.0.1"', 'Json" Version="13.0.3"'
        )
        assert updated.content.count("\r\n") == CSPROJ.count("\r\n")

    def test_unchanged_requirements_return_original_content(
        self, files: List[DependencyFile]
    ) -> None:
        """Test files are returned even when nothing changed."""
        dependency = update_dependency(
            _dependency(Requirement(file="my.csproj", requirement="[12.0, 14.0)")), "13.0.3"
        )

        (updated,) = RequirementFileUpdater(
            dependencies=[dependency], dependency_files=files
        ).updated_dependency_files()

        assert updated.content == CSPROJ

    def test_missing_file_is_skipped(self, files: List[DependencyFile]) -> None:
        """Test requirements for files not in the snapshot are ignored."""
        dependency = update_dependency(
            _dependency(Requirement(file="other.csproj", requirement="12.0.1")), "13.0.3"
        )

        (updated,) = RequirementFileUpdater(
            dependencies=[dependency], dependency_files=files
        ).updated_dependency_files()

        assert updated.content == CSPROJ

    def test_support_files_not_returned(self, files: List[DependencyFile]) -> None:
        """Test support files are never part of the result."""
        result = RequirementFileUpdater(
            dependencies=[], dependency_files=files
        ).updated_dependency_files()

        assert [f.name for f in result] == ["my.csproj"]


@pytest.mark.unit
class TestRequirementFileUpdaterMonorepo:
    """Tests for files sharing a name across directories."""

    @pytest.fixture
    def files(self) -> List[DependencyFile]:
        return [
            DependencyFile(name="package.json", content='{"a": "1.0.0"}\n'),
            DependencyFile(
                name="package.json",
                content='{"left-pad": "1.0.0"}\n',
                directory="packages/app",
            ),
        ]

    def _left_pad(self, file: str) -> Dependency:
        return update_dependency(
            Dependency(
                name="left-pad",
                package_manager="npm_and_yarn",
                version="1.0.0",
                requirements=(Requirement(file=file, requirement="1.0.0"),),
            ),
            "1.1.0",
        )

    @pytest.mark.parametrize("file", ["package.json", "packages/app/package.json"])
    def test_same_named_files_keep_their_own_content(
        self, files: List[DependencyFile], file: str
    ) -> None:
        """Test editing one package.json leaves the other untouched."""
        root, app = RequirementFileUpdater(
            dependencies=[self._left_pad(file)], dependency_files=files
        ).updated_dependency_files()

        assert root.path == "/package.json"
        assert root.content == '{"a": "1.0.0"}\n'
        assert app.path == "/packages/app/package.json"
        assert app.content == '{"left-pad": "1.1.0"}\n'

    def test_path_selects_only_that_directory(self) -> None:
        """Test a repository path does not touch same-named files elsewhere."""
        files = [
            DependencyFile(name="package.json", content='{"left-pad": "1.0.0"}\n'),
            DependencyFile(
                name="package.json",
                content='{"left-pad": "1.0.0"}\n',
                directory="packages/app",
            ),
        ]

        root, app = RequirementFileUpdater(
            dependencies=[self._left_pad("packages/app/package.json")],
            dependency_files=files,
        ).updated_dependency_files()

        assert root.content == '{"left-pad": "1.0.0"}\n'
        assert app.content == '{"left-pad": "1.1.0"}\n'
