"""Reading and writing declarative toolbox configuration files."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from toolbox_deployer.types import PathPlacement, ToolboxRecord

logger = logging.getLogger(__name__)

YAML_SUFFIXES = {".yaml", ".yml"}


class ConfigError(Exception):
    """Config file could not be parsed or failed validation."""

    pass


class ToolboxConfigEntry(BaseModel):
    """One toolbox entry as written in a config file."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    name: str = Field(min_length=1)
    type: str = ""
    url: str = ""
    ref: str = ""
    flavor: str = ""
    subfolder: str = ""
    update: str = ""
    toolbox_root: str = Field(default="", alias="toolboxRoot")
    path_placement: PathPlacement = Field(default=PathPlacement.APPEND, alias="pathPlacement")
    local_hook_template: str = Field(default="", alias="localHookTemplate")
    hook: str | None = None

    def to_record(self) -> ToolboxRecord:
        """Convert to a fresh, pending deployment record."""
        return ToolboxRecord(
            name=self.name,
            type=self.type,
            url=self.url,
            ref=self.ref,
            flavor=self.flavor,
            subfolder=self.subfolder,
            update=self.update,
            toolbox_root=self.toolbox_root,
            path_placement=self.path_placement,
            local_hook_template=self.local_hook_template,
            hook=self.hook or None,
        )

    @classmethod
    def from_record(cls, record: ToolboxRecord) -> ToolboxConfigEntry:
        return cls(
            name=record.name,
            type=record.type,
            url=record.url,
            ref=record.ref,
            flavor=record.flavor,
            subfolder=record.subfolder,
            update=record.update,
            toolbox_root=record.toolbox_root,
            path_placement=record.path_placement,
            local_hook_template=record.local_hook_template,
            hook=record.hook,
        )


def _entries(data: Any) -> list[Any]:
    """Normalize the accepted top-level shapes to a list of entries."""
    if data is None:
        return []
    if isinstance(data, dict) and "toolboxes" in data:
        data = data["toolboxes"]
    if isinstance(data, dict):
        return [data]
    if isinstance(data, list):
        return data
    raise ConfigError(f"Unsupported config layout: {type(data).__name__}")


class ConfigReader:
    """Reads toolbox records from JSON or YAML config files.

    Satisfies the ConfigSource protocol structurally.
    """

    def load_config(self, path: Path) -> list[ToolboxRecord]:
        """Read toolbox records from a config file.

        Args:
            path: Config file, ``.json``, ``.yaml`` or ``.yml``.

        Returns:
            Records in file order. Empty if the file does not exist.

        Raises:
            ConfigError: If the file is malformed or an entry is invalid.
        """
        path = path.expanduser()
        if not path.exists():
            logger.debug("Config file not found: %s", path)
            return []

        text = path.read_text()
        try:
            if path.suffix.lower() in YAML_SUFFIXES:
                data = yaml.safe_load(text)
            else:
                data = json.loads(text) if text.strip() else None
        except (json.JSONDecodeError, yaml.YAMLError) as e:
            raise ConfigError(f"Could not parse {path}: {e}") from e

        try:
            return [ToolboxConfigEntry.model_validate(e).to_record() for e in _entries(data)]
        except ValidationError as e:
            raise ConfigError(f"Invalid toolbox entry in {path}: {e}") from e

    def build_record(self, name: str) -> ToolboxRecord:
        """Build a bare record that points at a registered toolbox."""
        return ToolboxRecord(name=name)


def write_config(path: Path, records: list[ToolboxRecord]) -> None:
    """Write records to a JSON config file.

    Args:
        path: Destination file.
        records: Records to write. Deployment outcome fields are not saved.
    """
    data = [
        ToolboxConfigEntry.from_record(r).model_dump(by_alias=True, exclude_defaults=True, mode="json")
        for r in records
    ]
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, indent=2))
