"""Wiring of the services CLI commands use.

Commands receive an AppContext instead of building their own services, so
tests can hand them a context full of doubles.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from toolbox_deployer.config import ConfigReader
from toolbox_deployer.deploy import Deployer
from toolbox_deployer.preferences import PreferencesManager
from toolbox_deployer.protocols import ConfigSource


@dataclass
class AppContext:
    """Container for application dependencies.

    Holds the preferences, the deployer and the config reader a command needs.
    """

    preferences: PreferencesManager
    deployer: Deployer
    config_source: ConfigSource


def create_context(preferences_dir: Path | None = None) -> AppContext:
    """Factory for application dependencies.

    Loads saved preferences and builds a deployer that honours them.
    Tests build AppContext directly instead.

    Args:
        preferences_dir: Override preferences directory (for testing).

    Returns:
        Configured AppContext with all dependencies.
    """
    preferences = (
        PreferencesManager.create(preferences_dir)
        if preferences_dir
        else PreferencesManager.create_default()
    )
    saved = preferences.load()
    deployer = Deployer.create(
        registry_root=Path(saved.registry_root).expanduser(),
        policy=saved.portable_hook_policy,
    )

    return AppContext(
        preferences=preferences,
        deployer=deployer,
        config_source=ConfigReader(),
    )
