"""Lineage traversal over the parent-child graph.

Provides level-order walks in both directions:
- Ancestors (parents, grandparents, ...)
- Descendants (children, grandchildren, ...)

Works with any MemberStore. Each BFS level costs one batched edge fetch for
the whole frontier.
"""
from __future__ import annotations

from family_engine.config import CONFIG
from family_engine.exceptions import MemberNotFoundError
from family_engine.graph.index import GraphIndex
from family_engine.graph.models import LineageEntry, LineageMap, TraversalDirection
from family_engine.graph.store import MemberStore
from family_engine.logging import get_logger

logger = get_logger(__name__)


class LineageWalker:
    """Generation-tracked BFS over a member's ancestors or descendants.

    Each member appears at most once in a result, at the generation where it
    was first discovered, so cycles introduced by bad data terminate.

    Example:
        >>> walker = LineageWalker(store)
        >>> ancestors = await walker.ancestors("m-1", max_generations=4)
        >>> for entry in ancestors.values():
        ...     print(entry.generation, entry.relationship_label, entry.path)
    """

    def __init__(self, store: MemberStore) -> None:
        self.store = store

    async def walk(
        self,
        root_id: str,
        direction: TraversalDirection | str = TraversalDirection.UP,
        max_generations: int | None = None,
    ) -> LineageMap:
        """Walk parent (up) or child (down) edges from ``root_id``.

        Args:
            root_id: Member to start from (never included in the result)
            direction: ``up`` for ancestors, ``down`` for descendants
            max_generations: Depth limit (1 = parents/children only)

        Returns:
            LineageMap keyed by member id

        Raises:
            MemberNotFoundError: if ``root_id`` does not resolve
            ValueError: if ``max_generations`` is negative
        """
        direction = TraversalDirection(direction)
        if max_generations is None:
            max_generations = CONFIG.max_generations
        if max_generations < 0:
            raise ValueError(f"max_generations must be >= 0, got {max_generations}")

        if await self.store.fetch_member_by_id(root_id) is None:
            raise MemberNotFoundError([root_id])

        result = LineageMap(root_id, direction, max_generations)
        visited: set[str] = {root_id}
        frontier: list[tuple[str, tuple[str, ...]]] = [(root_id, (root_id,))]
        generation = 0

        while frontier and generation < max_generations:
            frontier_ids = [member_id for member_id, _ in frontier]
            if direction == TraversalDirection.UP:
                index = GraphIndex.from_edges(await self.store.fetch_parent_edges(frontier_ids))
            else:
                index = GraphIndex.from_edges(await self.store.fetch_child_edges(frontier_ids))

            generation += 1
            next_frontier: list[tuple[str, tuple[str, ...]]] = []
            for member_id, path in frontier:
                if direction == TraversalDirection.UP:
                    neighbours = index.parents_of(member_id)
                else:
                    neighbours = index.children_of(member_id)
                for neighbour_id in neighbours:
                    if neighbour_id in visited:
                        continue
                    visited.add(neighbour_id)
                    entry = LineageEntry(
                        member_id=neighbour_id,
                        generation=generation,
                        path=path + (neighbour_id,),
                        direction=direction,
                    )
                    result.add(entry)
                    next_frontier.append((neighbour_id, entry.path))

            logger.debug(
                "walk.level",
                root_id=root_id,
                direction=direction.value,
                generation=generation,
                frontier=len(frontier),
                discovered=len(next_frontier),
            )
            frontier = next_frontier

        return result

    async def ancestors(self, member_id: str, max_generations: int | None = None) -> LineageMap:
        return await self.walk(member_id, TraversalDirection.UP, max_generations)

    async def descendants(self, member_id: str, max_generations: int | None = None) -> LineageMap:
        return await self.walk(member_id, TraversalDirection.DOWN, max_generations)
