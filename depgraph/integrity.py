from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum

from .store import GraphStore
from .types import Edge, Node

log = logging.getLogger(__name__)


class Policy(str, Enum):
    REPORT = "report"
    REPAIR = "repair"
    TRIM = "trim"


@dataclass
class Problem:
    edge_id: str
    reason: str             # "empty source", "missing target", ...
    endpoint: str = ""
    expected_type: str = ""


@dataclass
class IntegrityReport:
    policy: Policy
    good: int = 0
    problems: list[Problem] = field(default_factory=list)
    added_nodes: list[str] = field(default_factory=list)
    removed_edges: list[str] = field(default_factory=list)

    @property
    def bad(self) -> int:
        return len({p.edge_id for p in self.problems})


def edge_problems(store: GraphStore, edge: Edge) -> list[Problem]:
    """Why ``edge`` is unsound; empty when both endpoints resolve."""
    if not edge.source:
        return [Problem(edge.id, "empty source")]
    if not edge.target:
        return [Problem(edge.id, "empty target")]
    out = []
    if not store.exists(edge.source):
        out.append(Problem(edge.id, "missing source", edge.source, edge.source_type))
    if not store.exists(edge.target):
        out.append(Problem(edge.id, "missing target", edge.target, edge.target_type))
    return out


def is_sound(store: GraphStore, edge: Edge) -> bool:
    return bool(edge.source and edge.target and store.exists(edge.source) and store.exists(edge.target))


@dataclass
class IntegrityChecker:
    store: GraphStore

    def scan(self, policy: Policy) -> IntegrityReport:
        report = IntegrityReport(policy=policy)
        for edge in list(self.store.edges()):
            problems = edge_problems(self.store, edge)
            if problems:
                report.problems.extend(problems)
            else:
                report.good += 1
        return report

    def report(self) -> IntegrityReport:
        """Log every unsound edge; the graph is left as it is."""
        rep = self.scan(Policy.REPORT)
        log.info("Checking Node Structure")
        for p in rep.problems:
            if p.endpoint:
                log.warning("Missing %s node: %s (%s) on edge %s",
                            p.reason.split()[-1], p.endpoint, p.expected_type or "?", p.edge_id)
            else:
                log.warning("Edge %s has %s", p.edge_id, p.reason)
        log.info("Good: %d, Bad: %d", rep.good, rep.bad)
        return rep

    def repair(self) -> IntegrityReport:
        """Create a stand-in node for every missing endpoint.

        Edges with an empty endpoint have nothing to stand in for and are dropped.
        """
        rep = self.scan(Policy.REPAIR)
        for p in rep.problems:
            if not p.endpoint:
                continue
            if self.store.exists(p.endpoint):
                continue
            log.info("Adding placeholder node %s (%s)", p.endpoint, p.expected_type or "?")
            node = Node(id=p.endpoint, label=p.endpoint, type=p.expected_type)
            self.store.add(node)
            rep.added_nodes.append(node.id)
        dropped = self.store.remove_edges(lambda e: not e.source or not e.target)
        rep.removed_edges.extend(e.id for e in dropped)
        return rep

    def trim(self) -> IntegrityReport:
        """Remove every unsound edge."""
        rep = self.scan(Policy.TRIM)
        dropped = self.store.remove_edges(lambda e: not is_sound(self.store, e))
        rep.removed_edges.extend(e.id for e in dropped)
        for e in dropped:
            log.info("Removed edge %s (%s -> %s)", e.id, e.source, e.target)
        return rep

    def run(self, policy: Policy | str) -> IntegrityReport:
        policy = Policy(policy)
        if policy is Policy.REPAIR:
            return self.repair()
        if policy is Policy.TRIM:
            return self.trim()
        return self.report()
