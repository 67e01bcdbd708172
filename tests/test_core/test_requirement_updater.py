from __future__ import annotations

import logging
from typing import Optional

import pytest

from depbump.core.requirement_updater import (
    RequirementsUpdater,
    rewrite_requirements,
    update_dependency,
)
from depbump.models import Dependency, DependencyDetails, Requirement, RequirementSource


def _req(
    requirement: Optional[str],
    *,
    file: str = "my.csproj",
    is_transitive: bool = False,
    source: Optional[RequirementSource] = None,
) -> Requirement:
    return Requirement(
        file=file,
        requirement=requirement,
        groups=("dependencies",),
        is_transitive=is_transitive,
        source=source,
    )


def _rewrite(requirement: Optional[str], target: Optional[str], **kwargs) -> Optional[str]:
    return rewrite_requirements([_req(requirement)], target, **kwargs)[0].requirement


@pytest.mark.unit
class TestExactRequirements:
    """Tests for re-pinning exact and operator requirements."""

    @pytest.mark.parametrize(
        "previous, target, expected",
        [
            ("1.1.1", "2.0.1", "2.0.1"),
            ("[1.1.1]", "2.0.1", "[2.0.1]"),
            ("^1.2.3", "1.4.0", "^1.4.0"),
            ("~> 4.2", "5.0.1", "~> 5.0.1"),
            (">=1.0.0-beta.1", "1.0.0", ">=1.0.0"),
            ("1.0.0", "2.0.0-rc.1+build.5", "2.0.0-rc.1+build.5"),
            ("v1.2.3", "1.3.0", "v1.3.0"),
        ],
    )
    def test_first_version_is_replaced(self, previous: str, target: str, expected: str) -> None:
        """Test the first version-shaped substring becomes the target."""
        assert _rewrite(previous, target) == expected

    def test_target_with_v_prefix(self) -> None:
        """Test a leading v on the target version is dropped."""
        assert _rewrite("1.0.0", "v2.0.0") == "2.0.0"

    def test_previous_requirement_recorded(self) -> None:
        """Test a rewritten requirement remembers its previous string."""
        updated = rewrite_requirements([_req("1.1.1")], "2.0.1")[0]

        assert updated.previous_requirement == "1.1.1"
        assert updated.file == "my.csproj"
        assert updated.groups == ("dependencies",)


@pytest.mark.unit
class TestWildcardRequirements:
    """Tests for precision-preserving wildcard rewrites."""

    @pytest.mark.parametrize(
        "previous, target, expected",
        [
            ("1.*", "2.0.1", "2.*"),
            ("1.1.*", "2.0.1", "2.0.*"),
            ("1.*-*", "2.0.1", "2.*-*"),
            ("1.1.*-*", "2.3.4", "2.3.*-*"),
            ("1.2.3-*", "1.4.0", "1.4.0-*"),
            ("4.*", "4.17.21", "4.*"),
        ],
    )
    def test_precision_is_kept(self, previous: str, target: str, expected: str) -> None:
        """Test wildcards keep the number of fixed segments."""
        assert _rewrite(previous, target) == expected

    @pytest.mark.parametrize("previous", ["*", "*-*"])
    def test_match_all_unchanged(self, previous: str) -> None:
        """Test match-all wildcards are never rewritten."""
        assert _rewrite(previous, "3.0.0") == previous

    def test_zero_precision_unchanged(self) -> None:
        """Test wildcards with no fixed segments are returned as-is."""
        assert _rewrite("*.*", "3.0.0") == "*.*"

    def test_unchanged_wildcard_keeps_identity(self) -> None:
        """Test a wildcard that already covers the target is a no-op."""
        original = _req("4.*")

        updated = rewrite_requirements([original], "4.17.21")[0]

        assert updated is original
        assert updated.previous_requirement is None


@pytest.mark.unit
class TestUnchangedRequirements:
    """Tests for requirements left untouched."""

    def test_none_requirement(self) -> None:
        """Test requirements without a constraint pass through."""
        assert _rewrite(None, "2.0.0") is None

    @pytest.mark.parametrize("previous", ["[1.0, 2.0)", ">= 1.0, < 2.0"])
    def test_ranges_unchanged(self, previous: str) -> None:
        """Test multi-clause ranges are never rewritten."""
        assert _rewrite(previous, "3.0.0") == previous

    def test_invalid_target_leaves_everything(self) -> None:
        """Test a non-version target leaves every requirement unchanged."""
        requirements = [_req("1.0.0"), _req("1.*")]

        assert rewrite_requirements(requirements, "latest") == requirements

    def test_missing_target_leaves_everything(self) -> None:
        """Test no target and no details leaves requirements unchanged."""
        requirements = [_req("1.0.0")]

        assert rewrite_requirements(requirements, None) == requirements

    def test_no_version_in_requirement(self) -> None:
        """Test strings without a version are returned unchanged."""
        assert _rewrite("latest", "2.0.0") == "latest"


@pytest.mark.unit
class TestTransitiveRequirements:
    """Tests for transitive requirement handling."""

    def test_transitive_skipped_unless_vulnerable(self) -> None:
        """Test transitive requirements only move for vulnerability fixes."""
        requirements = [_req("1.0.0", is_transitive=True), _req("1.0.0", file="b.csproj")]

        plain = rewrite_requirements(requirements, "1.0.5")
        fix = rewrite_requirements(requirements, "1.0.5", vulnerable=True)

        assert [r.requirement for r in plain] == ["1.0.0", "1.0.5"]
        assert [r.requirement for r in fix] == ["1.0.5", "1.0.5"]

    def test_output_stays_aligned(self) -> None:
        """Test the output has one entry per input, in order."""
        requirements = [
            _req("1.0.0", file="a.csproj"),
            _req("1.0.0", file="b.csproj", is_transitive=True),
            _req(">= 1.0, < 2.0", file="c.csproj"),
            _req("1.*", file="d.csproj"),
        ]

        updated = rewrite_requirements(requirements, "2.0.0")

        assert [r.file for r in updated] == ["a.csproj", "b.csproj", "c.csproj", "d.csproj"]
        assert [r.requirement for r in updated] == ["2.0.0", "1.0.0", ">= 1.0, < 2.0", "2.*"]


@pytest.mark.unit
class TestSources:
    """Tests for source handling on rewritten requirements."""

    def test_existing_source_is_kept(self) -> None:
        """Test the old source survives when no origin is known."""
        source = RequirementSource(type="registry", url="https://old.example")

        updated = rewrite_requirements([_req("1.0.0", source=source)], "2.0.0")[0]

        assert updated.source == source

    def test_info_url_replaces_source(self) -> None:
        """Test an explicit release origin replaces the source."""
        details = DependencyDetails(version="2.0.0", info_url="https://nuget.example/v3")
        old = RequirementSource(type="registry", url="https://old.example")

        updated = rewrite_requirements(
            [_req("1.0.0", source=old)], None, dependency_details=details
        )[0]

        assert updated.requirement == "2.0.0"
        assert updated.source == RequirementSource(type="registry", url="https://nuget.example/v3")

    def test_unchanged_requirement_keeps_source(self) -> None:
        """Test sources are only replaced on rewritten requirements."""
        details = DependencyDetails(version="2.0.0", info_url="https://nuget.example/v3")
        original = _req(">= 1.0, < 3.0")

        updated = rewrite_requirements([original], "2.0.0", dependency_details=details)[0]

        assert updated is original


@pytest.mark.unit
class TestRequirementsUpdater:
    """Tests for the RequirementsUpdater class API."""

    def test_explicit_target_wins_over_details(self) -> None:
        """Test target_version takes precedence over the details version."""
        updater = RequirementsUpdater(
            [_req("1.0.0")], "3.0.0", dependency_details=DependencyDetails(version="2.0.0")
        )

        assert str(updater.target_version) == "3.0.0"

    def test_update_requirement_single(self) -> None:
        """Test update_requirement rewrites one requirement."""
        updater = RequirementsUpdater([], "2.0.0")

        assert updater.update_requirement(_req("1.0.0")).requirement == "2.0.0"

    def test_idempotent(self) -> None:
        """Test rewriting an already rewritten set changes nothing further."""
        once = rewrite_requirements([_req("1.0.0"), _req("1.*")], "2.3.4")
        twice = rewrite_requirements(once, "2.3.4")

        assert [r.requirement for r in twice] == [r.requirement for r in once]


@pytest.mark.unit
class TestUpdateDependency:
    """Tests for update_dependency helper."""

    def test_moves_dependency(self, caplog: pytest.LogCaptureFixture) -> None:
        """Test versions and requirements shift into previous_* fields."""
        caplog.set_level(logging.INFO, logger="depbump")
        dependency = Dependency(
            name="Newtonsoft.Json",
            package_manager="nuget",
            version="12.0.1",
            requirements=(_req("12.0.1"), _req("12.*", file="b.csproj")),
        )

        updated = update_dependency(dependency, "13.0.3")

        assert updated.version == "13.0.3"
        assert updated.previous_version == "12.0.1"
        assert [r.requirement for r in updated.requirements] == ["13.0.3", "13.*"]
        assert updated.previous_requirements == dependency.requirements
        assert "Updating Newtonsoft.Json from 12.0.1 to 13.0.3 (major)" in caplog.text

    def test_requirement_changes_pairs(self) -> None:
        """Test requirement_changes yields only differing pairs."""
        dependency = Dependency(
            name="lodash",
            package_manager="npm_and_yarn",
            version="4.17.20",
            requirements=(_req("^4.17.20", file="package.json"), _req(">= 4, < 5")),
        )

        updated = update_dependency(dependency, "4.17.21")
        changes = list(updated.requirement_changes())

        assert len(changes) == 1
        previous, new = changes[0]
        assert (previous.requirement, new.requirement) == ("^4.17.20", "^4.17.21")
