"""In-memory adjacency view over a set of parent-child and marriage edges.

Built from whatever edges were fetched for the query at hand and thrown
away afterwards. Duplicate edges (same parent, same child) collapse to the
first one seen; neighbour lists keep insertion order.
"""
from __future__ import annotations

from collections.abc import Iterable

from family_engine.models import MarriageEdge, ParentChildEdge


class GraphIndex:
    """Parent -> children and child -> parents lookups, plus marriages by member."""

    def __init__(self) -> None:
        self._parents: dict[str, list[str]] = {}
        self._children: dict[str, list[str]] = {}
        self._edges: dict[tuple[str, str], ParentChildEdge] = {}
        self._marriages: list[MarriageEdge] = []

    @classmethod
    def from_edges(
        cls,
        edges: Iterable[ParentChildEdge],
        marriages: Iterable[MarriageEdge] = (),
    ) -> GraphIndex:
        index = cls()
        for edge in edges:
            index.add_edge(edge)
        for marriage in marriages:
            index.add_marriage(marriage)
        return index

    def add_edge(self, edge: ParentChildEdge) -> bool:
        key = (edge.parent_id, edge.child_id)
        if key in self._edges:
            return False
        self._edges[key] = edge
        self._parents.setdefault(edge.child_id, []).append(edge.parent_id)
        self._children.setdefault(edge.parent_id, []).append(edge.child_id)
        return True

    def add_marriage(self, marriage: MarriageEdge) -> None:
        self._marriages.append(marriage)

    def parents_of(self, member_id: str) -> list[str]:
        return list(self._parents.get(member_id, ()))

    def children_of(self, member_id: str) -> list[str]:
        return list(self._children.get(member_id, ()))

    def parent_edges_of(self, member_id: str) -> list[ParentChildEdge]:
        return [self._edges[(p, member_id)] for p in self._parents.get(member_id, ())]

    def child_edges_of(self, member_id: str) -> list[ParentChildEdge]:
        return [self._edges[(member_id, c)] for c in self._children.get(member_id, ())]

    def marriages_involving(self, member_id: str) -> list[MarriageEdge]:
        return [m for m in self._marriages if m.involves(member_id)]
