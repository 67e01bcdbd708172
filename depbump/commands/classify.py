"""Classify command implementation for depbump.

Feeds captured package-manager output through the error classifier of
one ecosystem and reports what kind of failure it was. Useful for
triaging CI logs and for checking new rules against real output.

Typical usage::

    # Classify a saved log
    $ depbump classify yarn-error.log

    # Pipe output straight in
    $ yarn up lodash 2>&1 | depbump classify -d lodash

    # Machine-readable JSON output
    $ depbump classify --format json yarn-error.log
"""

from __future__ import annotations

import sys
import json
import click
from typing import Optional, Sequence, TextIO

from depbump.models import Dependency, ErrorContext
from depbump.context import pass_context, DepBumpContext
from depbump.core import ErrorClassifier, PackageManager
from depbump.exceptions import DepBumpError, InputError
from depbump.models.error import ClassifiedError
from depbump.utils import (
    get_logger,
    print_error,
    print_fields,
    print_warning,
)
from depbump.utils.text import first_line

logger = get_logger("commands.classify")


@click.command()
@click.argument(
    "log",
    type=click.File("r", encoding="utf-8", errors="replace"),
    default="-",
)
@click.option(
    "--package-manager",
    "-p",
    default=PackageManager.NPM_AND_YARN.value,
    show_default=True,
    help="Package manager whose rules are applied.",
)
@click.option(
    "--dependency",
    "-d",
    "dependencies",
    multiple=True,
    help="Name of a dependency being updated (repeatable).",
)
@click.option(
    "--format",
    "-f",
    type=click.Choice(["table", "json"], case_sensitive=False),
    default="table",
    help="Output format.",
)
@pass_context
def classify(
    ctx: DepBumpContext,
    log: TextIO,
    package_manager: str,
    dependencies: Sequence[str],
    format: str,
) -> None:
    """Classify captured package-manager output.

    Reads LOG (or standard input when omitted or ``-``), runs it through
    the error rules of the selected package manager and prints the
    classified kind, message and extracted fields.

    Args:
        ctx: Depbump context with configuration and verbosity settings.
        log: Open file with the captured output.
        package_manager: Registry tag of the package manager.
        dependencies: Dependency names, used by messages that mention them.
        format: Output format (``table`` or ``json``).

    Exits:
        1 if the output was classified (it describes a failure) or an error
        occurred. 0 if no rule matched, unless the configuration sets
        ``unclassified_is_failure``.
    """
    config = ctx.effective_config
    try:
        raw = log.read()
        source = getattr(log, "name", "<stdin>")
        if not raw.strip():
            raise InputError("No package-manager output to classify", source=source)

        logger.info("Classifying %d characters from %s", len(raw), source)
        classifier = ErrorClassifier.for_package_manager(package_manager, config=config)
        error_context = ErrorContext(
            dependencies=tuple(
                Dependency(name=name, package_manager=package_manager)
                for name in dependencies
            )
        )
        result = classifier.classify(raw, error_context)

    except DepBumpError as e:
        print_error(f"{e}")
        sys.exit(1)

    if format == "json":
        click.echo(json.dumps(result.to_json() if result else None, indent=2))
    else:
        _display_result(result, raw)

    if result is not None:
        sys.exit(1)
    sys.exit(1 if config.unclassified_is_failure else 0)


def _display_result(result: Optional[ClassifiedError], raw: str) -> None:
    if result is None:
        print_warning(f"No rule matched: {first_line(raw)}")
        return

    print_error(result.kind.label, prefix=f"[{result.kind.value}]")
    summary = {"message": result.message}
    if result.code:
        summary["code"] = result.code
    summary["retryable"] = "yes" if result.retryable else "no"
    summary.update(result.fields)
    print_fields(summary, title="Classified error")
