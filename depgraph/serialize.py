"""JSON document form of a graph: ``{"graph": [{"group": ..., "data": {...}}]}``."""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

from .store import GraphStore
from .timing import timed
from .types import EDGES, NODES, Edge, GraphItem, Node, data_of

log = logging.getLogger(__name__)

_NODE_KEYS = ("id", "label", "type", "description", "component", "status",
              "start_date", "finish_date", "parent", "version", "degree")
_EDGE_KEYS = ("id", "source", "target", "type", "description", "label")


def ordered(store: GraphStore) -> list[GraphItem]:
    # Edges first; sorted() is stable so insertion order holds within a group.
    return sorted(store, key=lambda it: 0 if it.group == EDGES else 1)


def serialize(store: GraphStore) -> dict[str, Any]:
    return {"graph": [{"group": it.group, "data": data_of(it)} for it in ordered(store)]}


def dumps(store: GraphStore, indent: int | None = None) -> str:
    return json.dumps(serialize(store), indent=indent, ensure_ascii=False)


def save(store: GraphStore, path: str | Path) -> Path:
    path = Path(path)
    with timed(f"Save Output as {path}"):
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(dumps(store), encoding="utf-8")
    log.info("Wrote %s containing %d nodes and edges", path, len(store))
    return path


def _item(entry: dict[str, Any]) -> GraphItem:
    data = entry.get("data") or {}
    if not data.get("id"):
        raise ValueError(f"graph item without id: {entry!r}")
    if entry.get("group") == NODES:
        return Node(**{k: data[k] for k in _NODE_KEYS if k in data})
    return Edge(**{k: data[k] for k in _EDGE_KEYS if k in data})


def deserialize(doc: dict[str, Any]) -> GraphStore:
    store = GraphStore()
    for entry in doc.get("graph") or []:
        if entry.get("group") not in (NODES, EDGES):
            raise ValueError(f"unknown group {entry.get('group')!r}")
        store.add(_item(entry))
    return store


def load(path: str | Path) -> GraphStore:
    return deserialize(json.loads(Path(path).read_text(encoding="utf-8")))
