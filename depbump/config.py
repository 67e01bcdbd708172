"""Configuration file loader for depbump.

Handles discovery, loading, parsing, and validation of configuration files.
Supports two formats:

- ``depbump.toml``: settings under ``[depbump]`` table
- ``pyproject.toml``: settings under ``[tool.depbump]`` table

Discovery order:

1. Explicit path from ``--config`` or ``DEPBUMP_CONFIG``
2. ``depbump.toml`` in current directory
3. ``pyproject.toml`` with ``[tool.depbump]`` section

Typical usage::

    config = load_config()  # Auto-discover
    config = load_config(Path("custom.toml"))  # Explicit path

Example (``depbump.toml``)::

    [depbump]
    unclassified_is_failure = true

    [depbump.classification_order]
    default = "codes-first"
    npm_and_yarn = "patterns-first"

``classification_order`` may also be a single string applied to every
package manager.
"""

from __future__ import annotations


import tomli as tomllib
from pathlib import Path
from typing import Any, Dict, Optional
from dataclasses import dataclass, field

from depbump.constants import CONFIG_FILE_NAME, DEFAULT_UNCLASSIFIED_IS_FAILURE
from depbump.exceptions import ConfigError
from depbump.models.error import ClassificationOrder
from depbump.utils.logger import get_logger

logger = get_logger("config")

#: Key of ``classification_order`` applying to unlisted package managers.
DEFAULT_ORDER_KEY = "default"


@dataclass
class DepBumpConfig:
    """Parsed and validated depbump configuration.

    All fields have defaults, so empty config files are valid.

    Attributes:
        classification_order: Pass order per package manager; the
            ``"default"`` key applies to the rest. Package managers not
            covered use their rule set's own default.
        unclassified_is_failure: Whether output no rule recognizes counts
            as a failure in the CLI.
        source_path: Path to loaded config file, or ``None`` if using defaults.
    """

    classification_order: Dict[str, ClassificationOrder] = field(default_factory=dict)
    unclassified_is_failure: bool = DEFAULT_UNCLASSIFIED_IS_FAILURE

    # Metadata (not a user-facing option)
    source_path: Optional[Path] = field(default=None, repr=False)

    def order_for(self, package_manager: str) -> Optional[ClassificationOrder]:
        """Return the configured pass order for ``package_manager``.

        ``None`` means "use the rule set's default".
        """
        return self.classification_order.get(
            package_manager, self.classification_order.get(DEFAULT_ORDER_KEY)
        )

    def to_log_dict(self) -> Dict[str, Any]:
        """Return configuration as dictionary for debug logging."""
        return {
            "classification_order": {
                key: order.value for key, order in self.classification_order.items()
            },
            "unclassified_is_failure": self.unclassified_is_failure,
        }


def discover_config_file(explicit_path: Optional[Path] = None) -> Optional[Path]:
    """Find the configuration file to load.

    Args:
        explicit_path: Explicit config path. If provided, must exist.

    Returns:
        Resolved path to config file, or ``None`` if not found.

    Raises:
        ConfigError: Explicit path provided but does not exist.
    """
    if explicit_path is not None:
        resolved = explicit_path.resolve()
        if not resolved.is_file():
            raise ConfigError(
                f"Configuration file not found: {explicit_path}",
                config_path=str(explicit_path),
            )
        logger.debug("Using explicit config: %s", resolved)
        return resolved

    cwd = Path.cwd()

    dedicated = cwd / CONFIG_FILE_NAME
    if dedicated.is_file():
        logger.debug("Found %s: %s", CONFIG_FILE_NAME, dedicated)
        return dedicated

    pyproject_toml = cwd / "pyproject.toml"
    if pyproject_toml.is_file() and _pyproject_has_depbump_section(pyproject_toml):
        logger.debug("Found [tool.depbump] in pyproject.toml: %s", pyproject_toml)
        return pyproject_toml

    logger.debug("No configuration file found")
    return None


def _pyproject_has_depbump_section(path: Path) -> bool:
    """Check if pyproject.toml contains a [tool.depbump] section.

    A pyproject.toml that fails to parse counts as having no section.
    """
    try:
        raw = _read_toml(path)
    except ConfigError:
        return False
    return "depbump" in raw.get("tool", {})


def load_config(config_path: Optional[Path] = None) -> DepBumpConfig:
    """Load and validate depbump configuration.

    Args:
        config_path: Explicit path to config file. If ``None``, uses
            auto-discovery (see :func:`discover_config_file`).

    Returns:
        Validated :class:`DepBumpConfig` with values from file or defaults.

    Raises:
        ConfigError: File cannot be parsed, has unknown keys, or invalid values.
    """
    resolved = discover_config_file(config_path)

    if resolved is None:
        logger.debug("No config file found, using defaults")
        return DepBumpConfig()

    logger.info("Loading configuration from %s", resolved)
    raw = _read_toml(resolved)

    if resolved.name == "pyproject.toml":
        section = raw.get("tool", {}).get("depbump", {})
    else:
        section = raw.get("depbump", {})

    if not section:
        logger.debug("Config file found but no depbump section, using defaults")
        return DepBumpConfig(source_path=resolved)

    config = _parse_section(section, config_path=str(resolved))
    config.source_path = resolved

    logger.debug("Loaded configuration: %s", config.to_log_dict())
    return config


def _read_toml(path: Path) -> Dict[str, Any]:
    """Read and parse a TOML file.

    Raises:
        ConfigError: File cannot be read or is not valid TOML.
    """
    try:
        with open(path, "rb") as fh:
            return tomllib.load(fh)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(
            f"Invalid TOML in {path.name}: {exc}",
            config_path=str(path),
        ) from exc
    except OSError as exc:
        raise ConfigError(
            f"Cannot read configuration file {path}: {exc}",
            config_path=str(path),
        ) from exc


def _parse_section(
    section: Dict[str, Any],
    *,
    config_path: str,
) -> DepBumpConfig:
    """Parse and validate the ``[depbump]`` / ``[tool.depbump]`` table.

    Raises:
        ConfigError: Unknown keys or incorrect types.
    """
    config = DepBumpConfig()

    known_top = {
        "classification_order",
        "unclassified_is_failure",
    }

    unknown_top = set(section.keys()) - known_top
    if unknown_top:
        raise ConfigError(
            f"Unknown configuration keys: {', '.join(sorted(unknown_top))}",
            config_path=config_path,
        )

    if "classification_order" in section:
        config.classification_order = _parse_classification_order(
            section["classification_order"], config_path=config_path
        )

    if "unclassified_is_failure" in section:
        val = section["unclassified_is_failure"]
        if not isinstance(val, bool):
            raise ConfigError(
                f"unclassified_is_failure must be a boolean, got {type(val).__name__}",
                config_path=config_path,
                option="unclassified_is_failure",
            )
        config.unclassified_is_failure = val

    return config


def _parse_classification_order(
    value: Any,
    *,
    config_path: str,
) -> Dict[str, ClassificationOrder]:
    if isinstance(value, str):
        value = {DEFAULT_ORDER_KEY: value}

    if not isinstance(value, dict):
        raise ConfigError(
            "classification_order must be a string or a table, "
            f"got {type(value).__name__}",
            config_path=config_path,
            option="classification_order",
        )

    orders: Dict[str, ClassificationOrder] = {}
    for package_manager, raw_order in value.items():
        option = f"classification_order.{package_manager}"
        if not isinstance(raw_order, str):
            raise ConfigError(
                f"{option} must be a string, got {type(raw_order).__name__}",
                config_path=config_path,
                option=option,
            )
        try:
            orders[package_manager.strip().lower()] = ClassificationOrder.parse(raw_order)
        except ValueError as exc:
            raise ConfigError(str(exc), config_path=config_path, option=option) from exc
    return orders
