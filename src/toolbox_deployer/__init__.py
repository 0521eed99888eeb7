"""Deploy versioned toolboxes onto the Python module search path."""

__version__ = "0.1.0"

# Export protocol interfaces for type hints and dependency injection
from toolbox_deployer.protocols import (
    ConfigSource,
    FileSystem,
    RegistryService,
    SearchPath,
    ToolboxFetcher,
)

__all__ = [
    "__version__",
    "ConfigSource",
    "FileSystem",
    "RegistryService",
    "SearchPath",
    "ToolboxFetcher",
]
