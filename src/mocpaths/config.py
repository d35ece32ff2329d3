"""Configuration management for mocpaths.

Settings mirror the keys the host application persists for the plugin
(``propertyUp``, ``maxDepth``, ...). Values are validated one at a time at
this boundary so that a bad value never reaches traversal.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Mapping

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic.alias_generators import to_camel

log = logging.getLogger(__name__)

CONFIG_FILENAME = ".mocpaths.yaml"

# Maximum number of notes in a single path (chain length, not edge count).
DEFAULT_MAX_DEPTH = 15

# Maximum directory traversal depth when searching for a config file.
MAX_CONFIG_SEARCH_DEPTH = 10


class ConfigurationError(Exception):
    """Raised when required configuration is missing or unreadable."""

    pass


def split_list(value: str, *, lower: bool = False) -> list[str]:
    """Split a comma-separated setting into trimmed, non-empty items."""
    items = [item.strip() for item in value.split(",")]
    if lower:
        items = [item.lower() for item in items]
    return [item for item in items if item]


class PathSettings(BaseModel):
    """Rules used to derive parents and bound the path search."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
        frozen=True,
    )

    property_up: str = "up"
    property_down: str = "down"
    moc_tags: str = "MOC"
    header_name: str = "Subprojects"
    enable_property_up: bool = True
    enable_property_down: bool = True
    enable_moc_tags: bool = True
    enable_header_name: bool = True
    excluded_folders: str = ""
    excluded_tags: str = ""
    enable_caching: bool = True
    max_depth: int = Field(default=DEFAULT_MAX_DEPTH, gt=0)

    @property
    def up_properties(self) -> list[str]:
        return split_list(self.property_up)

    @property
    def down_properties(self) -> list[str]:
        return split_list(self.property_down)

    @property
    def moc_tag_set(self) -> set[str]:
        return set(split_list(self.moc_tags, lower=True))

    @property
    def header_names(self) -> list[str]:
        return split_list(self.header_name)

    @property
    def excluded_folder_list(self) -> list[str]:
        return split_list(self.excluded_folders)

    @property
    def excluded_tag_set(self) -> set[str]:
        return set(split_list(self.excluded_tags, lower=True))

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any] | None) -> PathSettings:
        """Build settings from host key-value data.

        Unknown keys are ignored; invalid values fall back to the defaults.
        """
        return apply_settings_update(cls(), data or {})

    def to_mapping(self) -> dict[str, Any]:
        """Serialize using the host's camelCase keys."""
        return self.model_dump(by_alias=True)


def _field_name(key: str) -> str | None:
    fields = PathSettings.model_fields
    if key in fields:
        return key
    for name, info in fields.items():
        if info.alias == key:
            return name
    return None


def apply_settings_update(current: PathSettings, changes: Mapping[str, Any]) -> PathSettings:
    """Return new settings with ``changes`` applied.

    Each change is validated on its own. A rejected value is logged and the
    previous value is kept, so one malformed key never discards the others.

    Args:
        current: Settings in effect.
        changes: Updates keyed by field name or host (camelCase) key.

    Returns:
        The updated settings (``current`` itself when nothing changed).
    """
    data = current.model_dump()
    for key, value in changes.items():
        field = _field_name(key)
        if field is None:
            log.debug("Ignoring unknown setting %r", key)
            continue
        try:
            validated = PathSettings.model_validate({**data, field: value})
        except ValidationError as e:
            reason = e.errors()[0]["msg"] if e.errors() else str(e)
            log.warning("Rejected value %r for setting %s: %s", value, key, reason)
            continue
        data[field] = getattr(validated, field)

    if data == current.model_dump():
        return current
    return PathSettings.model_validate(data)


def discover_config_file(start_dir: Path | None = None, max_depth: int = MAX_CONFIG_SEARCH_DEPTH) -> Path | None:
    """Walk up from start_dir looking for a .mocpaths.yaml file.

    Args:
        start_dir: Directory to start from (defaults to cwd).
        max_depth: Maximum directories to traverse up.

    Returns:
        Path to the config file if found, None otherwise.
    """
    explicit = os.environ.get("MOCPATHS_CONFIG")
    if explicit:
        return Path(explicit)

    current = Path(start_dir or os.getcwd()).resolve()
    for _ in range(max_depth):
        candidate = current / CONFIG_FILENAME
        if candidate.is_file():
            return candidate
        parent = current.parent
        if parent == current:  # Reached filesystem root
            break
        current = parent
    return None


def load_config_file(path: Path) -> tuple[Path | None, PathSettings]:
    """Load a configuration file.

    The file holds an optional ``vault_path`` (relative to the file's
    directory) plus any settings keys.

    Returns:
        Tuple of (vault_path or None, settings).

    Raises:
        ConfigurationError: If the file cannot be read or is not a mapping.
    """
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except (OSError, yaml.YAMLError) as e:
        raise ConfigurationError(f"Cannot read config file {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigurationError(f"Config file {path} must contain a mapping")

    vault_path = None
    raw_vault = data.pop("vault_path", None)
    if raw_vault:
        vault_path = (path.parent / str(raw_vault)).resolve()

    return vault_path, PathSettings.from_mapping(data)


def get_vault_root(explicit: Path | None = None, configured: Path | None = None) -> Path:
    """Get the vault root directory.

    Discovery order:
    1. Explicit path (e.g. the --vault option)
    2. MOCPATHS_VAULT_ROOT environment variable
    3. vault_path from the config file

    Raises:
        ConfigurationError: If no vault can be found.
    """
    root = explicit
    if root is None and os.environ.get("MOCPATHS_VAULT_ROOT"):
        root = Path(os.environ["MOCPATHS_VAULT_ROOT"])
    if root is None:
        root = configured

    if root is None:
        raise ConfigurationError(
            "No vault configured. Options:\n"
            "  1. Pass --vault PATH\n"
            "  2. Set MOCPATHS_VAULT_ROOT to the vault directory\n"
            f"  3. Add vault_path to a {CONFIG_FILENAME} file"
        )
    if not root.is_dir():
        raise ConfigurationError(f"Vault directory does not exist: {root}")
    return root
