from __future__ import annotations

import logging
from typing import List
from unittest.mock import MagicMock

import pytest

from depbump.core.change_builder import DependencyChangeBuilder, build_dependency_change
from depbump.core.file_updater import FileUpdater
from depbump.core.registry import EcosystemRegistry
from depbump.core.requirement_updater import update_dependency
from depbump.exceptions import NoChangesError, UnsupportedPackageManagerError
from depbump.models import (
    Dependency,
    DependencyFile,
    DependencyGroup,
    Job,
    Requirement,
)

PACKAGE_JSON = '{\n  "dependencies": {\n    "fetch-factory": "^0.0.1"\n  }\n}\n'
YARN_LOCK = 'fetch-factory@^0.0.1:\n  version "0.0.1"\n'


class RecordingUpdater(FileUpdater):
    """File updater returning canned files and recording its arguments."""

    calls: List["RecordingUpdater"] = []
    result: List[DependencyFile] = []

    def __init__(self, **kwargs) -> None:
        super().__init__(**kwargs)
        RecordingUpdater.calls.append(self)

    def updated_dependency_files(self) -> List[DependencyFile]:
        return list(RecordingUpdater.result)


class FailingUpdater(FileUpdater):
    def updated_dependency_files(self) -> List[DependencyFile]:
        raise RuntimeError("native helper crashed")


@pytest.fixture
def registry() -> EcosystemRegistry:
    RecordingUpdater.calls = []
    RecordingUpdater.result = []
    registry = EcosystemRegistry()
    registry.register("npm_and_yarn", file_updater=RecordingUpdater)
    registry.register("failing", file_updater=FailingUpdater)
    return registry


@pytest.fixture
def job() -> Job:
    return Job(
        package_manager="npm_and_yarn",
        credentials=({"type": "git_source", "host": "github.com"},),
        options={"lockfile_only": False},
        repo_contents_path="/tmp/repo",
    )


@pytest.fixture
def dependency_files() -> List[DependencyFile]:
    return [
        DependencyFile(name="package.json", content=PACKAGE_JSON),
        DependencyFile(name="yarn.lock", content=YARN_LOCK),
        DependencyFile(name=".yarnrc.yml", content="nodeLinker: pnp\n", support_file=True),
    ]


@pytest.fixture
def dependency() -> Dependency:
    return Dependency(
        name="fetch-factory",
        package_manager="npm_and_yarn",
        version="0.0.1",
        requirements=(Requirement(file="package.json", requirement="^0.0.1"),),
    )


@pytest.fixture
def updated_dependency(dependency: Dependency) -> Dependency:
    return update_dependency(dependency, "0.0.2")


@pytest.mark.unit
class TestDependencyChangeBuilder:
    """Tests for DependencyChangeBuilder."""

    def test_single_dependency_change(
        self,
        registry: EcosystemRegistry,
        job: Job,
        dependency_files: List[DependencyFile],
        dependency: Dependency,
        updated_dependency: Dependency,
    ) -> None:
        """Test a lead dependency update produces an ungrouped change."""
        package_json = dependency_files[0].with_content(
            PACKAGE_JSON.replace("^0.0.1", "^0.0.2")
        )
        yarn_lock = dependency_files[1].with_content(YARN_LOCK.replace("0.0.1", "0.0.2"))
        RecordingUpdater.result = [package_json, yarn_lock]

        change = DependencyChangeBuilder.create_from(
            job=job,
            dependency_files=dependency_files,
            updated_dependencies=[updated_dependency],
            change_source=dependency,
            registry=registry,
        )

        assert change.updated_dependencies == (updated_dependency,)
        assert change.updated_file_names == ("package.json", "yarn.lock")
        assert change.is_grouped_update is False
        assert '"fetch-factory": "^0.0.2"' in change.file("package.json").content

    def test_group_change_is_grouped(
        self,
        registry: EcosystemRegistry,
        job: Job,
        dependency_files: List[DependencyFile],
        updated_dependency: Dependency,
    ) -> None:
        """Test a dependency group source marks the change as grouped."""
        RecordingUpdater.result = [dependency_files[0].with_content("{}\n")]
        group = DependencyGroup(name="dummy-pkg-*", rules={"patterns": ["dummy-pkg-*"]})

        change = build_dependency_change(
            job, dependency_files, [updated_dependency], group, registry=registry
        )

        assert change.grouped is True
        assert change.is_grouped_update is True

    def test_unchanged_files_are_dropped(
        self,
        registry: EcosystemRegistry,
        job: Job,
        dependency_files: List[DependencyFile],
        dependency: Dependency,
        updated_dependency: Dependency,
    ) -> None:
        """Test candidates equal to their original are filtered out."""
        RecordingUpdater.result = [
            dependency_files[0],
            dependency_files[1].with_content(YARN_LOCK + "\n"),
        ]

        change = DependencyChangeBuilder(
            job=job,
            dependency_files=dependency_files,
            updated_dependencies=[updated_dependency],
            change_source=dependency,
            registry=registry,
        ).run()

        assert change.updated_file_names == ("yarn.lock",)

    def test_new_files_are_kept(
        self,
        registry: EcosystemRegistry,
        job: Job,
        dependency_files: List[DependencyFile],
        dependency: Dependency,
        updated_dependency: Dependency,
    ) -> None:
        """Test files with no original counterpart count as changed."""
        RecordingUpdater.result = [DependencyFile(name=".pnp.cjs", content="// generated\n")]

        change = DependencyChangeBuilder.create_from(
            job=job,
            dependency_files=dependency_files,
            updated_dependencies=[updated_dependency],
            change_source=dependency,
            registry=registry,
        )

        assert change.updated_file_names == (".pnp.cjs",)

    def test_files_in_other_directories_are_distinct(
        self,
        registry: EcosystemRegistry,
        job: Job,
        dependency_files: List[DependencyFile],
        dependency: Dependency,
        updated_dependency: Dependency,
    ) -> None:
        """Test identity includes the directory, not just the name."""
        RecordingUpdater.result = [
            DependencyFile(name="package.json", content=PACKAGE_JSON, directory="packages/app")
        ]

        change = DependencyChangeBuilder.create_from(
            job=job,
            dependency_files=dependency_files,
            updated_dependencies=[updated_dependency],
            change_source=dependency,
            registry=registry,
        )

        assert change.updated_dependency_files[0].path == "/packages/app/package.json"

    def test_no_changes_raises(
        self,
        registry: EcosystemRegistry,
        job: Job,
        dependency_files: List[DependencyFile],
        dependency: Dependency,
        updated_dependency: Dependency,
        caplog: pytest.LogCaptureFixture,
    ) -> None:
        """Test an attempt that changes nothing fails loudly."""
        caplog.set_level(logging.WARNING, logger="depbump")
        RecordingUpdater.result = list(dependency_files[:2])

        with pytest.raises(NoChangesError) as exc_info:
            DependencyChangeBuilder.create_from(
                job=job,
                dependency_files=dependency_files,
                updated_dependencies=[updated_dependency],
                change_source=dependency,
                registry=registry,
            )

        assert exc_info.value.dependency_names == ["fetch-factory"]
        assert exc_info.value.package_manager == "npm_and_yarn"
        assert "produced no file changes" in caplog.text

    def test_no_candidates_raises(
        self,
        registry: EcosystemRegistry,
        job: Job,
        dependency_files: List[DependencyFile],
        dependency: Dependency,
    ) -> None:
        """Test an updater returning nothing fails with NoChangesError."""
        with pytest.raises(NoChangesError):
            DependencyChangeBuilder.create_from(
                job=job,
                dependency_files=dependency_files,
                updated_dependencies=[dependency],
                change_source=dependency,
                registry=registry,
            )

    def test_updater_receives_job_context(
        self,
        registry: EcosystemRegistry,
        job: Job,
        dependency_files: List[DependencyFile],
        dependency: Dependency,
        updated_dependency: Dependency,
    ) -> None:
        """Test credentials, options and repo path reach the file updater."""
        RecordingUpdater.result = [dependency_files[0].with_content("{}\n")]

        DependencyChangeBuilder.create_from(
            job=job,
            dependency_files=dependency_files,
            updated_dependencies=[updated_dependency],
            change_source=dependency,
            registry=registry,
        )

        (updater,) = RecordingUpdater.calls
        assert updater.dependencies == [updated_dependency]
        assert updater.dependency_files == dependency_files
        assert updater.credentials == [{"type": "git_source", "host": "github.com"}]
        assert updater.options == {"lockfile_only": False}
        assert updater.repo_contents_path == "/tmp/repo"

    def test_updater_errors_propagate(
        self,
        registry: EcosystemRegistry,
        dependency_files: List[DependencyFile],
        dependency: Dependency,
    ) -> None:
        """Test file updater failures are not swallowed."""
        with pytest.raises(RuntimeError, match="native helper crashed"):
            DependencyChangeBuilder.create_from(
                job=Job(package_manager="failing"),
                dependency_files=dependency_files,
                updated_dependencies=[dependency],
                change_source=dependency,
                registry=registry,
            )

    def test_unknown_package_manager(
        self,
        registry: EcosystemRegistry,
        dependency_files: List[DependencyFile],
        dependency: Dependency,
    ) -> None:
        """Test an unregistered package manager raises."""
        with pytest.raises(UnsupportedPackageManagerError):
            DependencyChangeBuilder.create_from(
                job=Job(package_manager="cargo"),
                dependency_files=dependency_files,
                updated_dependencies=[dependency],
                change_source=dependency,
                registry=registry,
            )

    def test_uses_default_registry(
        self,
        dependency_files: List[DependencyFile],
        dependency: Dependency,
        updated_dependency: Dependency,
    ) -> None:
        """Test the built-in registry applies requirement changes in place."""
        change = DependencyChangeBuilder.create_from(
            job=Job(package_manager="npm_and_yarn"),
            dependency_files=dependency_files,
            updated_dependencies=[updated_dependency],
            change_source=dependency,
        )

        assert change.updated_file_names == ("package.json",)
        assert change.file("package.json").content == PACKAGE_JSON.replace(
            "^0.0.1", "^0.0.2"
        )

    def test_grouped_property(self, job: Job, dependency: Dependency) -> None:
        """Test grouped reflects the change source type."""
        lead = DependencyChangeBuilder(
            job=job,
            dependency_files=[],
            updated_dependencies=[],
            change_source=dependency,
            registry=MagicMock(),
        )
        group = DependencyChangeBuilder(
            job=job,
            dependency_files=[],
            updated_dependencies=[],
            change_source=DependencyGroup(name="all"),
            registry=MagicMock(),
        )

        assert lead.grouped is False
        assert group.grouped is True

    def test_same_named_files_in_other_directories_not_overwritten(self) -> None:
        """Test only the manifest that declares the dependency is shipped."""
        files = [
            DependencyFile(name="package.json", content='{"a": "1.0.0"}\n'),
            DependencyFile(
                name="package.json",
                content='{"left-pad": "1.0.0"}\n',
                directory="packages/app",
            ),
        ]
        left_pad = Dependency(
            name="left-pad",
            package_manager="npm_and_yarn",
            version="1.0.0",
            requirements=(Requirement(file="package.json", requirement="1.0.0"),),
        )

        change = build_dependency_change(
            Job(package_manager="npm_and_yarn"),
            files,
            [update_dependency(left_pad, "1.1.0")],
            left_pad,
        )

        assert [(f.path, f.content) for f in change] == [
            ("/packages/app/package.json", '{"left-pad": "1.1.0"}\n')
        ]
