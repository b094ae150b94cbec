"""Turns decoded tracker records into graph nodes and edges."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable

from . import records
from .normalize import composite_id, valid_id
from .records import Record
from .store import GraphStore
from .taxonomy import TypeTaxonomy
from .types import COMPONENT, PROCESS, SPRINT, THREAD, Edge, GraphItem, Node

log = logging.getLogger(__name__)


@dataclass
class Diagnostics:
    """Data-quality events seen while building; none of them stop a run."""

    duplicates: list[str] = field(default_factory=list)
    unrecognized_types: dict[str, int] = field(default_factory=dict)
    untracked_links: dict[str, int] = field(default_factory=dict)
    unsound_edges: int = 0

    def count_type(self, name: str) -> bool:
        """Count an unrecognized issue type; True the first time it is seen."""
        self.unrecognized_types[name] = self.unrecognized_types.get(name, 0) + 1
        return self.unrecognized_types[name] == 1

    def count_link(self, name: str) -> bool:
        self.untracked_links[name] = self.untracked_links.get(name, 0) + 1
        return self.untracked_links[name] == 1


@dataclass
class GraphBuilder:
    store: GraphStore
    taxonomy: TypeTaxonomy
    thread_finish_field: str = "customfield_13008"
    debug: bool = False
    diagnostics: Diagnostics = field(default_factory=Diagnostics)

    def _add(self, item: GraphItem) -> bool:
        if self.store.add(item):
            return True
        log.warning("Duplicate %s with key %s", item.group, item.id)
        self.diagnostics.duplicates.append(item.id)
        return False

    def _classify(self, type_name: str) -> str:
        category = self.taxonomy.classify_issue_type(type_name)
        if not self.taxonomy.is_tracked_category(category):
            if self.diagnostics.count_type(type_name):
                log.info("Unrecognized issue type %r kept as-is", type_name)
        return category

    # ---- components ----

    def component_node(self, name: str, description: str = "") -> Node:
        key = valid_id(name)
        existing = self.store.get(key)
        if existing is None:
            node = Node(id=key, label=name, description=description, type=COMPONENT)
            self._add(node)
            return node
        return existing

    def ingest_components(self, components: Iterable[Record]) -> int:
        before = len(self.store)
        for component in components:
            name = component.get("name")
            if name:
                self.component_node(name, records.text(component.get("description")))
        added = len(self.store) - before
        log.info("Added %d component nodes", added)
        return added

    # ---- static issues ----

    def issue_node(self, issue: Record) -> Node:
        f = records.fields(issue)
        components = records.component_names(issue)
        node = Node(
            id=valid_id(records.issue_key(issue)),
            label=records.text(f.get("summary")),
            description=records.text(f.get("description")),
            component=components[0] if components else "",
            status=records.issue_status(issue),
            type=self._classify(records.issue_type_name(issue)),
        )
        if node.type == THREAD and f.get(self.thread_finish_field):
            node.finish_date = records.text(f[self.thread_finish_field])
        return node

    def ingest_static_issues(self, issues: Iterable[Record]) -> tuple[int, int]:
        """Add a node per issue plus its component and tracked link edges."""
        nodes = edges = 0
        for issue in issues:
            node = self.issue_node(issue)
            if self._add(node):
                nodes += 1
            else:
                node = self.store.get(node.id)

            for name in records.component_names(issue):
                if self._component_edge(node, name):
                    edges += 1

            for link in records.issue_links(issue):
                if self._link_edge(node, link):
                    edges += 1

        log.info("Added static: %d Nodes and %d Edges", nodes, edges)
        return nodes, edges

    def _component_edge(self, node: GraphItem, component: str) -> bool:
        target = self.component_node(component)
        edge = Edge(
            id=composite_id(node.id, "COMPONENT", target.id),
            source=node.id,
            target=target.id,
            type=self.taxonomy.default_dependency,
            source_type=node.type,
            target_type=COMPONENT,
        )
        return self._add(edge)

    def _link_edge(self, node: GraphItem, link: Record) -> bool:
        other = records.linked(link)
        if other is None:
            return False
        if not self.taxonomy.is_tracked_link(other.link_label):
            if self.diagnostics.count_link(other.link_label):
                log.info("Ignoring untracked link type %r", other.link_label)
            return False
        if not self.taxonomy.is_tracked_issue_type(other.type_name):
            return False

        edge_id = valid_id(link.get("id"))
        if not edge_id or self.store.exists(edge_id):
            # Each link shows up once from either end.
            return False

        edge = Edge(id=edge_id, type=other.link_label, description=records.link_comment(link))
        outward = link.get("outwardIssue")
        if outward:
            edge.source = records.issue_key(outward)
            edge.source_type = self.taxonomy.classify_issue_type(records.issue_type_name(outward))
        else:
            edge.source, edge.source_type = node.id, node.type
        inward = link.get("inwardIssue")
        if inward:
            edge.target = records.issue_key(inward)
            edge.target_type = self.taxonomy.classify_issue_type(records.issue_type_name(inward))
        else:
            edge.target, edge.target_type = node.id, node.type
        return self._add(edge)

    # ---- sprints ----

    def ingest_sprint(self, sprint: Record) -> Node:
        node = Node(
            id=valid_id(sprint.get("id")),
            label=records.text(sprint.get("name")),
            start_date=records.text(sprint.get("startDate")),
            finish_date=records.text(sprint.get("endDate")),
            status=records.text(sprint.get("state")),
            type=SPRINT,
        )
        if not self._add(node):
            return self.store.get(node.id)
        return node

    def _sprint_edge(self, edge_id: str, target: str, target_type: str,
                     edge_type: str, note: str, sprint_id: str) -> None:
        existing = self.store.get(edge_id)
        if existing is not None:
            existing.description += "\n" + note
            return
        self._add(Edge(
            id=edge_id,
            source=sprint_id,
            target=target,
            type=edge_type,
            description=note,
            source_type=SPRINT,
            target_type=target_type,
        ))

    def ingest_sprint_issue(self, sprint: Record, issue: Record) -> None:
        """Tie an issue (and what it links to) back to the sprint it ran in.

        Repeat hits on the same sprint edge append to its description.
        """
        sprint_id = valid_id(sprint.get("id"))
        key = records.issue_key(issue)
        category = self._classify(records.issue_type_name(issue))

        if self.taxonomy.is_tracked_category(category):
            self._sprint_edge(
                composite_id(key, "SPRINT", sprint_id),
                key,
                category,
                self.taxonomy.dependency_type_for(category),
                f"Issue {key}",
                sprint_id,
            )

        for link in records.issue_links(issue):
            other = records.linked(link)
            if other is None or not self.taxonomy.is_tracked_link(other.link_label):
                continue
            linked_category = self.taxonomy.classify_issue_type(other.type_name)
            if not self.taxonomy.is_tracked_category(linked_category):
                if self.debug:
                    log.debug(
                        "Unsure how to capture link between %s (%s) and %s (%s) of type %s",
                        key, records.issue_type_name(issue), other.key, other.type_name, other.link_label,
                    )
                continue
            self._sprint_edge(
                composite_id(other.ident, "SPRINT", sprint_id),
                other.key,
                linked_category,
                other.link_label,
                f"Issue {key} link {other.key}",
                sprint_id,
            )

        for label in records.labels(issue):
            matched, process = self.taxonomy.is_process_label(label)
            if not matched:
                continue
            self._sprint_edge(
                composite_id(process, "SPRINT", sprint_id),
                process,
                PROCESS,
                self.taxonomy.default_dependency,
                f"Issue {key} process label {label}",
                sprint_id,
            )
