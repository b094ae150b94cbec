from __future__ import annotations

from dataclasses import dataclass, field
from typing import Union

CAPABILITY = "capability"
FEATURE = "feature"
REQUIREMENT = "requirement"
THREAD = "thread"
COMPONENT = "component"
SPRINT = "sprint"
PROCESS = "process"

TRACKED_CATEGORIES = frozenset({CAPABILITY, FEATURE, REQUIREMENT, THREAD})

NODES = "nodes"
EDGES = "edges"

# Keys of the persisted ``data`` object, in output order.
DATA_FIELDS = (
    "id",
    "label",
    "parent",
    "source",
    "target",
    "from",
    "to",
    "type",
    "degree",
    "version",
    "component",
    "status",
    "start_date",
    "finish_date",
    "description",
)


@dataclass
class Node:
    id: str
    label: str = ""
    type: str = ""          # a category, or the raw tracker type name
    description: str = ""
    component: str = ""
    status: str = ""
    start_date: str = ""
    finish_date: str = ""
    parent: str = ""
    version: str = ""
    degree: int = 0

    group = NODES


@dataclass
class Edge:
    id: str
    source: str = ""
    target: str = ""
    type: str = ""          # canonical link label
    description: str = ""
    label: str = ""
    # Expected endpoint categories; only used for integrity diagnostics, never persisted.
    source_type: str = field(default="", compare=False)
    target_type: str = field(default="", compare=False)

    group = EDGES


GraphItem = Union[Node, Edge]


def data_of(item: GraphItem) -> dict:
    """Persisted ``data`` mapping: only non-empty, non-zero schema fields."""
    out: dict = {}
    for key in DATA_FIELDS:
        value = getattr(item, key, None)
        if value:
            out[key] = value
    return out
