"""
World snapshot persistence.
"""

from .snapshot import (
    WorldSnapshot,
    load_snapshot,
    save_snapshot,
    snapshot_from_world,
    world_from_snapshot,
)

__all__ = ['WorldSnapshot', 'load_snapshot', 'save_snapshot',
           'snapshot_from_world', 'world_from_snapshot']
