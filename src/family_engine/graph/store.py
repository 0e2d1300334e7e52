"""Member/edge store interface consumed by the engine.

The engine is written against ``MemberStore`` rather than a database client.
Implementations supply batched edge lookups so a traversal costs one round
trip per BFS level rather than one per member.

``InMemoryMemberStore`` backs tests, the CLI and local development.
"""
from __future__ import annotations

import json
from abc import ABC, abstractmethod
from collections import Counter
from collections.abc import Iterable, Sequence
from pathlib import Path
from typing import Any

from family_engine.graph.index import GraphIndex
from family_engine.models import MarriageEdge, Member, ParentChildEdge


class MemberStore(ABC):
    """Abstract read interface over a tree's members and edges."""

    @abstractmethod
    async def fetch_parent_edges(self, member_ids: Sequence[str]) -> list[ParentChildEdge]:
        """Edges whose child is any of ``member_ids`` (one batched call)."""
        ...

    @abstractmethod
    async def fetch_child_edges(self, member_ids: Sequence[str]) -> list[ParentChildEdge]:
        """Edges whose parent is any of ``member_ids`` (one batched call)."""
        ...

    @abstractmethod
    async def fetch_members_by_ids(self, member_ids: Sequence[str]) -> dict[str, Member]:
        """Members keyed by id; unknown ids are simply absent."""
        ...

    @abstractmethod
    async def fetch_members_in_tree(self, tree_id: str) -> list[Member]:
        ...

    @abstractmethod
    async def fetch_marriages_involving(self, member_id: str) -> list[MarriageEdge]:
        ...

    async def fetch_parents_of(self, member_id: str) -> list[ParentChildEdge]:
        return await self.fetch_parent_edges([member_id])

    async def fetch_children_of(self, member_id: str) -> list[ParentChildEdge]:
        return await self.fetch_child_edges([member_id])

    async def fetch_member_by_id(self, member_id: str) -> Member | None:
        members = await self.fetch_members_by_ids([member_id])
        return members.get(member_id)


class InMemoryMemberStore(MemberStore):
    """Dictionary-backed store.

    Tolerates whatever edges it is given, including cycles, so tests can
    model bad data entry. ``call_counts`` records how many times each fetch
    method was invoked.
    """

    def __init__(
        self,
        members: Iterable[Member] = (),
        edges: Iterable[ParentChildEdge] = (),
        marriages: Iterable[MarriageEdge] = (),
    ) -> None:
        self._members: dict[str, Member] = {}
        self._index = GraphIndex()
        self.call_counts: Counter[str] = Counter()
        for member in members:
            self.add_member(member)
        for edge in edges:
            self.add_edge(edge)
        for marriage in marriages:
            self.add_marriage(marriage)

    # ------------------------------------------------------------------
    # Mutation (fixture building only)
    # ------------------------------------------------------------------

    def add_member(self, member: Member) -> Member:
        self._members[member.id] = member
        return member

    def add_edge(self, edge: ParentChildEdge) -> ParentChildEdge:
        self._index.add_edge(edge)
        return edge

    def add_marriage(self, marriage: MarriageEdge) -> MarriageEdge:
        self._index.add_marriage(marriage)
        return marriage

    @property
    def members(self) -> list[Member]:
        return list(self._members.values())

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> InMemoryMemberStore:
        """Build a store from ``{"members": [...], "parent_child": [...], "marriages": [...]}``."""
        return cls(
            members=[Member.model_validate(m) for m in data.get("members", [])],
            edges=[ParentChildEdge.model_validate(e) for e in data.get("parent_child", [])],
            marriages=[MarriageEdge.model_validate(m) for m in data.get("marriages", [])],
        )

    @classmethod
    def from_json_file(cls, path: Path) -> InMemoryMemberStore:
        return cls.from_dict(json.loads(Path(path).read_text(encoding="utf-8")))

    # ------------------------------------------------------------------
    # MemberStore
    # ------------------------------------------------------------------

    async def fetch_parent_edges(self, member_ids: Sequence[str]) -> list[ParentChildEdge]:
        self.call_counts["fetch_parent_edges"] += 1
        edges: list[ParentChildEdge] = []
        for member_id in dict.fromkeys(member_ids):
            edges.extend(self._index.parent_edges_of(member_id))
        return edges

    async def fetch_child_edges(self, member_ids: Sequence[str]) -> list[ParentChildEdge]:
        self.call_counts["fetch_child_edges"] += 1
        edges: list[ParentChildEdge] = []
        for member_id in dict.fromkeys(member_ids):
            edges.extend(self._index.child_edges_of(member_id))
        return edges

    async def fetch_members_by_ids(self, member_ids: Sequence[str]) -> dict[str, Member]:
        self.call_counts["fetch_members_by_ids"] += 1
        return {mid: self._members[mid] for mid in member_ids if mid in self._members}

    async def fetch_members_in_tree(self, tree_id: str) -> list[Member]:
        self.call_counts["fetch_members_in_tree"] += 1
        return [m for m in self._members.values() if m.tree_id == tree_id]

    async def fetch_marriages_involving(self, member_id: str) -> list[MarriageEdge]:
        self.call_counts["fetch_marriages_involving"] += 1
        return self._index.marriages_involving(member_id)
