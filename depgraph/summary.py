from __future__ import annotations

import logging
from collections import Counter

from .store import GraphStore
from .types import EDGES

log = logging.getLogger(__name__)


def histogram(store: GraphStore) -> tuple[Counter, Counter]:
    """Node and edge counts keyed by type, in a single pass."""
    nodes: Counter = Counter()
    edges: Counter = Counter()
    for item in store:
        (edges if item.group == EDGES else nodes)[item.type] += 1
    return nodes, edges


def summary_lines(store: GraphStore) -> list[str]:
    nodes, edges = histogram(store)
    lines = ["GRAPH SUMMARY", "-" * 41, f"{'Nodes':<33}:{sum(nodes.values()):6d}"]
    lines += [f"   {k or '(none)':<30}:{v:6d}" for k, v in sorted(nodes.items())]
    lines.append(f"{'Edges':<33}:{sum(edges.values()):6d}")
    lines += [f"   {k or '(none)':<30}:{v:6d}" for k, v in sorted(edges.items())]
    lines.append("-" * 41)
    return lines


def log_summary(store: GraphStore) -> None:
    for line in summary_lines(store):
        log.info(line)
