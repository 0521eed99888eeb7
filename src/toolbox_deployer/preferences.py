"""Persisted user preferences for the deployer."""

from __future__ import annotations

import json
import logging
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

from toolbox_deployer.hooks import PortableHookPolicy

logger = logging.getLogger(__name__)

# Default preferences location
PREFERENCES_DIR = Path.home() / ".toolbox-deployer"

DEFAULT_REGISTRY_URL = "https://github.com/ToolboxHub/ToolboxRegistry.git"


class RegistrySpec(BaseModel):
    """Where and how to access the shared registry of toolbox configurations."""

    model_config = ConfigDict(populate_by_name=True)

    name: str = "ToolboxRegistry"
    type: str = "git"
    url: str = DEFAULT_REGISTRY_URL
    ref: str = ""
    subfolder: str = "configurations"


class Preferences(BaseModel):
    """User preferences with deployment defaults."""

    model_config = ConfigDict(populate_by_name=True)

    config_path: str = Field(default="~/toolbox_config.json", alias="configPath")
    toolbox_root: str = Field(default="~/toolboxes", alias="toolboxRoot")
    toolbox_common_root: str = Field(default="/srv/toolboxes", alias="toolboxCommonRoot")
    local_hook_folder: str = Field(default="~/localToolboxHooks", alias="localHookFolder")
    registry: RegistrySpec = Field(default_factory=RegistrySpec)
    registry_root: str = Field(default="~/.toolbox-deployer/registry", alias="registryRoot")
    portable_hook_policy: PortableHookPolicy = Field(
        default=PortableHookPolicy.SKIP_LOADED, alias="portableHookPolicy"
    )


# Keys accepted by `config set`, by their on-disk alias
SETTABLE_KEYS = {
    field.alias or name: name
    for name, field in Preferences.model_fields.items()
    if name != "registry"
}


class PreferencesManager:
    """Loads and saves preferences."""

    def __init__(self, preferences_dir: Path | None = None) -> None:
        """Initialize the preferences manager.

        Args:
            preferences_dir: Directory for the preferences file.
                Defaults to ~/.toolbox-deployer.

        Note:
            Prefer using factory methods `create()` or `create_default()` for construction.
        """
        self.preferences_dir = preferences_dir or PREFERENCES_DIR
        self.preferences_file = self.preferences_dir / "preferences.json"

    @classmethod
    def create(cls, preferences_dir: Path) -> PreferencesManager:
        """Create a preferences manager with a custom directory."""
        return cls(preferences_dir=preferences_dir)

    @classmethod
    def create_default(cls) -> PreferencesManager:
        """Create a preferences manager with the default directory.

        Uses ~/.toolbox-deployer as the preferences location.
        """
        return cls()

    def ensure_preferences_dir(self) -> None:
        """Create preferences directory if it doesn't exist."""
        self.preferences_dir.mkdir(parents=True, exist_ok=True)

    def load(self) -> Preferences:
        """Load preferences from disk.

        Returns:
            Preferences, with defaults for anything not saved.
        """
        if not self.preferences_file.exists():
            return Preferences()

        data = json.loads(self.preferences_file.read_text())
        return Preferences.model_validate(data)

    def save(self, preferences: Preferences) -> None:
        """Save preferences to disk."""
        self.ensure_preferences_dir()
        data = preferences.model_dump(by_alias=True, mode="json")
        self.preferences_file.write_text(json.dumps(data, indent=2))

    def set_value(self, key: str, value: str) -> Preferences:
        """Set a single preference by its alias and save.

        Args:
            key: Preference alias, e.g. ``toolboxRoot``.
            value: New value.

        Returns:
            The saved preferences.

        Raises:
            KeyError: If the key is unknown.
            pydantic.ValidationError: If the value is invalid for the key.
        """
        if key not in SETTABLE_KEYS:
            raise KeyError(key)
        data = self.load().model_dump(by_alias=True, mode="json")
        data[key] = value
        preferences = Preferences.model_validate(data)
        self.save(preferences)
        logger.debug("Set preference %s=%s", key, value)
        return preferences
