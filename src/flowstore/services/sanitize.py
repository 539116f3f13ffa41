"""Node sanitization — turn in-memory graph nodes into storable plain data.

Two paths per node:

- **Full fidelity**: copy the node, project ``data.tool`` into a
  :class:`~flowstore.domain.tools.ToolDescriptor`, clone ``data.config``,
  then clone the whole node so nothing non-plain survives.
- **Minimal fidelity**: if anything on the full path raises, keep only
  ``id``, ``type``, ``position`` and ``data.label``/``data.config``.

INVARIANT: sanitization never raises for a node that has an id, a type
and a position, whether it is a mapping or an object, and a node is never
dropped. Losing the tool snapshot of a malformed node is accepted.

INVARIANT: sanitization is idempotent. Both paths emit plain data and
an already-projected tool keeps its ``icon_name``.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any

import structlog

from flowstore.domain.clone import CloneError, clone_structure
from flowstore.domain.tools import DEFAULT_ICON_NAME, lookup_field, project_tool
from flowstore.services.result import SANITIZE_DEGRADED, ServiceResult

log = structlog.get_logger(__name__)


@dataclass(frozen=True)
class SanitizedNode:
    """Outcome of sanitizing one node.

    ``degraded`` is True when the minimal-fidelity shape was produced;
    ``reason`` then names the failure that forced it.
    """

    node: dict[str, Any]
    degraded: bool = False
    reason: str | None = None


def _full_fidelity(node: Mapping[str, Any], fallback_icon: str) -> dict[str, Any]:
    copied = dict(node)
    data = dict(node["data"])

    tool = data.get("tool")
    if tool is not None:
        data["tool"] = project_tool(tool, fallback_icon=fallback_icon).to_snapshot()
    else:
        data.pop("tool", None)

    config = data.get("config")
    data["config"] = clone_structure(config) if config is not None else {}

    copied["data"] = data
    return clone_structure(copied)


def _clone_or_none(value: Any) -> Any:
    try:
        return clone_structure(value)
    except CloneError:
        return None


def _minimal_fidelity(node: Any) -> dict[str, Any]:
    data = lookup_field(node, ("data",))
    if not isinstance(data, Mapping):
        data = {}

    config = data.get("config")
    try:
        config = clone_structure(config) if config is not None else {}
    except CloneError:
        config = {}
    if not isinstance(config, dict):
        config = {}

    reduced_data: dict[str, Any] = {"config": config}
    label = _clone_or_none(data.get("label"))
    if label is not None:
        reduced_data["label"] = label

    reduced: dict[str, Any] = {
        "id": _clone_or_none(lookup_field(node, ("id",))),
        "type": _clone_or_none(lookup_field(node, ("type",))),
        "position": _clone_or_none(lookup_field(node, ("position",))),
        "data": reduced_data,
    }
    return clone_structure(reduced)


def sanitize_node(
    node: Mapping[str, Any],
    *,
    fallback_icon: str = DEFAULT_ICON_NAME,
) -> SanitizedNode:
    """Sanitize a single node, reporting whether it had to be degraded.

    *node* is normally a mapping. An object exposing ``id``, ``type`` and
    ``position`` as attributes is not copyable at full fidelity but still
    yields the minimal shape.
    """
    try:
        return SanitizedNode(node=_full_fidelity(node, fallback_icon))
    except Exception as exc:
        reason = f"{type(exc).__name__}: {exc}"
        node_id = lookup_field(node, ("id",))
        log.warning("sanitize.degraded", node_id=node_id, reason=reason)
        return SanitizedNode(node=_minimal_fidelity(node), degraded=True, reason=reason)


def sanitize_nodes(
    nodes: Iterable[Mapping[str, Any]],
    *,
    fallback_icon: str = DEFAULT_ICON_NAME,
) -> list[dict[str, Any]]:
    """Sanitize every node, preserving order and count."""
    return [sanitize_node(node, fallback_icon=fallback_icon).node for node in nodes]


def sanitize_report(
    nodes: Iterable[Mapping[str, Any]],
    *,
    fallback_icon: str = DEFAULT_ICON_NAME,
) -> ServiceResult:
    """Sanitize *nodes* and describe any degradation.

    ``data["nodes"]`` always holds the full sanitized list. ``ok`` is False
    when at least one node fell back to the minimal shape; each such node
    contributes a warning and its id to ``error.detail["degraded"]``.
    """
    outcomes = [sanitize_node(node, fallback_icon=fallback_icon) for node in nodes]
    degraded = [o for o in outcomes if o.degraded]
    warnings = [f"Node {o.node.get('id')!r} degraded ({o.reason})" for o in degraded]

    data = {"nodes": [o.node for o in outcomes]}
    meta = {"count": len(outcomes), "degraded": len(degraded)}
    if not degraded:
        return ServiceResult.success("sanitize", data, meta=meta)
    return ServiceResult.degraded(
        "sanitize",
        SANITIZE_DEGRADED,
        f"{len(degraded)} of {len(outcomes)} nodes stored at minimal fidelity",
        detail={"degraded": [o.node.get("id") for o in degraded]},
        data=data,
        warnings=warnings,
        meta=meta,
    )


def copy_edges(edges: Iterable[Mapping[str, Any]]) -> list[dict[str, Any]]:
    """Shallow-copy each edge; edges are assumed to be plain data already."""
    return [dict(edge) for edge in edges]
