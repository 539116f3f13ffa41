"""Runtime tools and their storable descriptors.

A :class:`Tool` is what the UI hands to a node: it may carry an ``icon``
handle (a component object) that cannot be persisted. A
:class:`ToolDescriptor` is the reduced projection that is stored instead,
with the icon replaced by its display name. The UI maps ``icon_name``
back to a component at render time.

Tools arrive either as objects (attribute access) or as mappings decoded
from UI payloads, which may use camelCase keys. :func:`project_tool`
accepts both.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from pydantic import BaseModel

DEFAULT_ICON_NAME = "Activity"

# Stored field -> accepted spellings, in lookup order.
_FIELD_ALIASES: dict[str, tuple[str, ...]] = {
    "id": ("id",),
    "name": ("name",),
    "description": ("description",),
    "color": ("color",),
    "bg_color": ("bg_color", "bgColor"),
    "light_color": ("light_color", "lightColor"),
    "dark_color": ("dark_color", "darkColor"),
    "category": ("category",),
    "inputs": ("inputs",),
    "outputs": ("outputs",),
}


@dataclass
class Tool:
    """A tool as the UI layer holds it, icon handle included."""

    id: str
    name: str
    description: str | None = None
    color: str | None = None
    bg_color: str | None = None
    light_color: str | None = None
    dark_color: str | None = None
    category: str | None = None
    inputs: list[Any] = field(default_factory=list)
    outputs: list[Any] = field(default_factory=list)
    icon: Any = None


class ToolDescriptor(BaseModel):
    """Storable projection of a :class:`Tool`."""

    model_config = {"frozen": True}

    id: Any = None
    name: Any = None
    description: Any = None
    color: Any = None
    bg_color: Any = None
    light_color: Any = None
    dark_color: Any = None
    category: Any = None
    inputs: Any = None
    outputs: Any = None
    icon_name: str = DEFAULT_ICON_NAME

    def to_snapshot(self) -> dict[str, Any]:
        """Dump the fields that are set, as stored inside ``node.data.tool``."""
        return self.model_dump(exclude_none=True)


def lookup_field(source: Any, names: tuple[str, ...]) -> Any:
    """Return the first of *names* found on *source*, by key or attribute."""
    for name in names:
        if isinstance(source, Mapping):
            if name in source:
                return source[name]
        elif hasattr(source, name):
            return getattr(source, name)
    return None


def icon_display_name(icon: Any) -> str | None:
    """Return the declared display name of an icon handle, if any."""
    if icon is None:
        return None
    name = lookup_field(icon, ("display_name", "displayName"))
    return name if isinstance(name, str) and name else None


def project_tool(tool: Any, *, fallback_icon: str = DEFAULT_ICON_NAME) -> ToolDescriptor:
    """Project a runtime tool (object or mapping) into a descriptor.

    The icon name is taken from the icon handle's display name. A tool
    that is already a stored snapshot has no handle but keeps its
    ``icon_name``, so projecting a descriptor again is a no-op. Anything
    else gets *fallback_icon*.
    """
    values = {key: lookup_field(tool, names) for key, names in _FIELD_ALIASES.items()}
    icon_name = icon_display_name(lookup_field(tool, ("icon",)))
    if icon_name is None:
        existing = lookup_field(tool, ("icon_name", "iconName"))
        icon_name = existing if isinstance(existing, str) and existing else fallback_icon
    return ToolDescriptor(**values, icon_name=icon_name)
