"""Rewrite command implementation for depbump.

Shows how requirement strings would be rewritten when their dependency
moves to a new version, without touching any file.

Typical usage::

    $ depbump rewrite "1.2.3" "~1.2.0" "1.*" 2.0.1
    $ depbump rewrite --transitive --vulnerable "1.0.0" 1.0.5
    $ depbump rewrite --format json "4.17.*" 4.18.2
"""

from __future__ import annotations

import re
import sys
import json
import click
from typing import Any, Dict, Optional, Sequence

from depbump.constants import VERSION_PATTERN
from depbump.context import pass_context, DepBumpContext
from depbump.core import RequirementsUpdater
from depbump.exceptions import DepBumpError, InputError
from depbump.models import DependencyDetails, Requirement
from depbump.utils import (
    EcosystemVersion,
    colorize_update_type,
    get_logger,
    get_update_type,
    print_error,
    print_table,
)

logger = get_logger("commands.rewrite")

_VERSION_RE = re.compile(VERSION_PATTERN)


@click.command()
@click.argument("requirements", nargs=-1, required=True)
@click.argument("version")
@click.option(
    "--file",
    "file_name",
    default="package.json",
    show_default=True,
    help="File name recorded on each requirement.",
)
@click.option(
    "--transitive",
    is_flag=True,
    help="Treat the requirements as transitive.",
)
@click.option(
    "--vulnerable",
    is_flag=True,
    help="The update fixes a vulnerability; transitive requirements are rewritten too.",
)
@click.option(
    "--info-url",
    default=None,
    help="Origin URL of the target release, recorded as the new source.",
)
@click.option(
    "--format",
    "-f",
    type=click.Choice(["table", "json"], case_sensitive=False),
    default="table",
    help="Output format.",
)
@pass_context
def rewrite(
    ctx: DepBumpContext,
    requirements: Sequence[str],
    version: str,
    file_name: str,
    transitive: bool,
    vulnerable: bool,
    info_url: Optional[str],
    format: str,
) -> None:
    """Rewrite REQUIREMENTS for a dependency moving to VERSION.

    Pins are re-pinned, wildcards keep their precision, and ranges with
    several clauses are left as they are.

    Args:
        ctx: Depbump context with configuration and verbosity settings.
        requirements: Requirement strings, in file order.
        version: Target version.
        file_name: File name stored on each requirement.
        transitive: Mark every requirement as transitive.
        vulnerable: Security-motivated update.
        info_url: Explicit origin of the target release.
        format: Output format (``table`` or ``json``).

    Exits:
        0 on success, 1 if VERSION is not a version.
    """
    try:
        if not EcosystemVersion.is_valid(version):
            raise InputError(f"Not a version: {version!r}", source="VERSION")

        originals = [
            Requirement(file=file_name, requirement=req, is_transitive=transitive)
            for req in requirements
        ]
        details = DependencyDetails(version=version, info_url=info_url) if info_url else None
        updated = RequirementsUpdater(
            originals,
            version,
            dependency_details=details,
            vulnerable=vulnerable,
        ).updated_requirements()

    except DepBumpError as e:
        print_error(f"{e}")
        sys.exit(1)

    rows = [_row(before, after, version) for before, after in zip(originals, updated)]
    logger.info(
        "%d of %d requirement(s) rewritten",
        sum(1 for row in rows if row["changed"]),
        len(rows),
    )

    if format == "json":
        click.echo(
            json.dumps(
                {
                    "version": version,
                    "requirements": [req.to_json() for req in updated],
                },
                indent=2,
            )
        )
        return

    print_table(
        [
            {
                "Requirement": row["before"],
                "Rewritten": row["after"] if row["changed"] else "(unchanged)",
                "Change": colorize_update_type(row["update_type"]) if row["changed"] else "",
            }
            for row in rows
        ],
        headers=["Requirement", "Rewritten", "Change"],
        title=f"Requirements for {version}",
        column_styles={
            "Rewritten": {"style": "highlight"},
            "Change": {"markup": True},
        },
    )


def _row(before: Requirement, after: Requirement, version: str) -> Dict[str, Any]:
    """Summarize one requirement for display."""
    previous = before.requirement or ""
    match = _VERSION_RE.search(previous)
    return {
        "before": previous,
        "after": after.requirement or "",
        "changed": before.requirement != after.requirement,
        "update_type": get_update_type(match.group(0) if match else None, version),
    }
