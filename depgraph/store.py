from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Iterator

from .normalize import valid_id
from .types import EDGES, Edge, GraphItem, Node


@dataclass
class GraphStore:
    """Append-ordered graph items with an id index.

    Ids are unique: adding an item whose id is already present leaves the
    stored item untouched and returns False.
    """

    items: list[GraphItem] = field(default_factory=list)
    index: dict[str, GraphItem] = field(default_factory=dict)

    def add(self, item: GraphItem) -> bool:
        item.id = valid_id(item.id)
        if isinstance(item, Edge):
            item.source = valid_id(item.source)
            item.target = valid_id(item.target)
        if item.id in self.index:
            return False
        self.index[item.id] = item
        self.items.append(item)
        return True

    def exists(self, item_id: str) -> bool:
        return item_id in self.index

    def get(self, item_id: str) -> GraphItem | None:
        return self.index.get(item_id)

    def items_by_group(self, group: str) -> Iterator[GraphItem]:
        return (it for it in self.items if it.group == group)

    def nodes(self) -> Iterator[Node]:
        return (it for it in self.items if isinstance(it, Node))

    def edges(self) -> Iterator[Edge]:
        return (it for it in self.items if isinstance(it, Edge))

    def remove_edges(self, predicate: Callable[[Edge], bool]) -> list[Edge]:
        """Drop every edge matching ``predicate``; returns what was removed."""
        removed = [it for it in self.items if it.group == EDGES and predicate(it)]
        if removed:
            gone = {id(it) for it in removed}
            self.items = [it for it in self.items if id(it) not in gone]
            for it in removed:
                self.index.pop(it.id, None)
        return removed

    def __len__(self) -> int:
        return len(self.items)

    def __iter__(self) -> Iterator[GraphItem]:
        return iter(self.items)
