"""
Type aliases for docmerge.

- Path: Tuple of field names and sequence indices locating a value inside
  a record graph, e.g. ("orders", 2, "total").
"""

from __future__ import annotations

import typing as _typing

# Path alias for nested field paths
# Example: ("meta", "tags", 0) represents meta.tags[0]
Path: _typing.TypeAlias = tuple[str | int, ...]


def format_path(path: Path) -> str:
    """Render a path as dotted text with [index] for sequence positions."""
    if not path:
        return "<root>"
    parts: list[str] = []
    for component in path:
        if isinstance(component, int):
            parts.append(f"[{component}]")
        elif parts:
            parts.append(f".{component}")
        else:
            parts.append(component)
    return "".join(parts)
