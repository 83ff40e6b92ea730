"""
Exceptions raised by world generation.

Allocation shortfalls are not errors and never surface here; they are
logged by the sub-biome allocator.
"""


class WorldGenerationError(Exception):
    """Base class for world generation failures."""


class ConfigurationError(WorldGenerationError, ValueError):
    """Invalid world configuration, rejected before generation starts."""


class MissingResourceError(WorldGenerationError):
    """A required collaborator (e.g. a renderer paint layer) is absent."""


class WorldDataError(WorldGenerationError, ValueError):
    """A world snapshot is incomplete, inconsistent or unreadable."""
