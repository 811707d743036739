"""
Interfaces module - collaborators for the annotation core.

Provides in-memory implementations of the highlighter, selection handler
and relations layer the controller talks to.
"""

from .memory import (
    ContentRoot,
    KeyboardSource,
    MemoryHighlighter,
    MemoryRelationsLayer,
    MemorySelectionHandler,
    build_memory_controller,
)

__all__ = [
    'ContentRoot',
    'KeyboardSource',
    'MemoryHighlighter',
    'MemoryRelationsLayer',
    'MemorySelectionHandler',
    'build_memory_controller',
]
