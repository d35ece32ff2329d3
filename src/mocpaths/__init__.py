"""mocpaths: ancestry paths from notes to their Maps of Content."""

from .cache import KeyedCache, NullCache, PathCaches
from .config import PathSettings, apply_settings_update
from .core import MocPaths
from .vault import VaultCorpus

__version__ = "0.3.0"

__all__ = [
    "KeyedCache",
    "MocPaths",
    "NullCache",
    "PathCaches",
    "PathSettings",
    "VaultCorpus",
    "apply_settings_update",
    "__version__",
]
