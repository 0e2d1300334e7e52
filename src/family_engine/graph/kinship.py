"""Relationship classification between two members.

Answers "how are these two people related?" from the ancestor walks of
both members:
- Direct lineage (one is an ancestor of the other)
- Collateral kinship via the closest shared ancestor (siblings, aunts and
  uncles, nephews and nieces, cousins with degree and removal)
- In-law relationships composed through a marriage
- Sibling kind (full / half / step) from directly shared parents
"""
from __future__ import annotations

import asyncio
from collections.abc import Sequence

from family_engine.config import CONFIG
from family_engine.exceptions import MemberNotFoundError
from family_engine.graph.index import GraphIndex
from family_engine.graph.models import (
    CommonAncestor,
    KinshipCategory,
    KinshipLabel,
    RelationshipResult,
    SiblingInfo,
    SiblingKind,
    SiblingRelation,
    ancestor_label,
    descendant_label,
    ordinal,
    times_removed,
)
from family_engine.graph.store import MemberStore
from family_engine.graph.traversal import LineageWalker
from family_engine.logging import get_logger
from family_engine.models import ParentChildEdge, ParentChildType

logger = get_logger(__name__)

SIBLING_LABELS = {
    SiblingKind.FULL: "sibling",
    SiblingKind.HALF: "half-sibling",
    SiblingKind.STEP: "step-sibling",
}


def collateral_label(generations_first: int, generations_second: int) -> str:
    """Label what the second member is to the first from shared-ancestor distances.

    ``generations_first`` and ``generations_second`` are the edge counts from
    each member up to their closest common ancestor.
    """
    if generations_first == 1 and generations_second == 1:
        return "sibling"
    if generations_second == 1:
        # Second is a sibling of one of first's ancestors
        return f"{'great-' * (generations_first - 2)}aunt/uncle"
    if generations_first == 1:
        # Second descends from one of first's siblings
        return f"{'great-' * (generations_second - 2)}nephew/niece"
    degree = min(generations_first, generations_second) - 1
    removal = abs(generations_first - generations_second)
    label = f"{ordinal(degree)} cousin"
    if removal:
        label = f"{label} {times_removed(removal)}"
    return label


def sibling_kind(
    first_edges: Sequence[ParentChildEdge],
    second_edges: Sequence[ParentChildEdge],
    shared_parent_ids: Sequence[str],
) -> SiblingKind:
    """Sibling kind from two members' parent edges and the parents they share.

    Step when either member's links to the shared parents are all step
    links; otherwise full with two or more shared parents, else half.
    """
    shared = set(shared_parent_ids)

    def all_step(edges: Sequence[ParentChildEdge]) -> bool:
        links = [e for e in edges if e.parent_id in shared]
        return all(e.relationship_type == ParentChildType.STEP for e in links)

    if all_step(first_edges) or all_step(second_edges):
        return SiblingKind.STEP
    if len(shared) >= 2:
        return SiblingKind.FULL
    return SiblingKind.HALF


class RelationshipClassifier:
    """Classifies the relationship between two members of a tree.

    Example:
        >>> classifier = RelationshipClassifier(store)
        >>> result = await classifier.classify("m-1", "m-2")
        >>> classifier.label(result).relationship
        'first cousin once removed'
    """

    def __init__(self, store: MemberStore, walker: LineageWalker | None = None) -> None:
        self.store = store
        self.walker = walker or LineageWalker(store)

    async def _require_members(self, member_ids: Sequence[str]) -> None:
        found = await self.store.fetch_members_by_ids(list(dict.fromkeys(member_ids)))
        missing = [mid for mid in dict.fromkeys(member_ids) if mid not in found]
        if missing:
            raise MemberNotFoundError(missing)

    async def classify(
        self,
        first_id: str,
        second_id: str,
        max_generations: int | None = None,
    ) -> RelationshipResult:
        """Compare two members by their ancestor sets.

        Args:
            first_id: Member the relationship is described from
            second_id: Member being described
            max_generations: Depth of each ancestor walk

        Returns:
            RelationshipResult; ``are_related`` is False when no shared
            ancestor lies within ``max_generations``

        Raises:
            MemberNotFoundError: naming every id that does not resolve
        """
        await self._require_members([first_id, second_id])

        if first_id == second_id:
            return RelationshipResult(first_id, second_id, are_related=True, generations=0)

        if max_generations is None:
            max_generations = CONFIG.max_generations

        first_ancestors, second_ancestors = await asyncio.gather(
            self.walker.ancestors(first_id, max_generations),
            self.walker.ancestors(second_id, max_generations),
        )

        if second_id in first_ancestors:
            result = RelationshipResult(
                first_id,
                second_id,
                are_related=True,
                is_ancestor_descendant=True,
                generations=first_ancestors[second_id].generation,
                ancestor_id=second_id,
            )
        elif first_id in second_ancestors:
            result = RelationshipResult(
                first_id,
                second_id,
                are_related=True,
                is_ancestor_descendant=True,
                generations=second_ancestors[first_id].generation,
                ancestor_id=first_id,
            )
        else:
            common = [
                CommonAncestor(
                    ancestor_id=ancestor_id,
                    generation_from_first=entry.generation,
                    generation_from_second=second_ancestors[ancestor_id].generation,
                    path_from_first=entry.path,
                    path_from_second=second_ancestors[ancestor_id].path,
                )
                for ancestor_id, entry in first_ancestors.items()
                if ancestor_id in second_ancestors
            ]
            common.sort(key=lambda c: c.sort_key)
            result = RelationshipResult(
                first_id,
                second_id,
                are_related=bool(common),
                common_ancestors=tuple(common),
            )

        logger.debug(
            "classify.done",
            first_id=first_id,
            second_id=second_id,
            are_related=result.are_related,
            is_ancestor_descendant=result.is_ancestor_descendant,
            common_ancestors=len(result.common_ancestors),
        )
        return result

    def label(self, result: RelationshipResult, sibling: SiblingInfo | None = None) -> KinshipLabel | None:
        """Describe what ``result.second_id`` is to ``result.first_id``.

        Returns None when the two members are not blood relatives. When
        ``sibling`` is given, siblings are labelled by kind; step siblings
        are not blood relatives.
        """
        if result.is_self:
            return KinshipLabel(relationship="self", category=KinshipCategory.SELF)
        if not result.are_related:
            return None

        if result.is_ancestor_descendant:
            generations = result.generations or 0
            if result.ancestor_id == result.second_id:
                return KinshipLabel(
                    relationship=ancestor_label(generations),
                    generational_distance=generations,
                    degree_of_separation=generations,
                    category=KinshipCategory.ANCESTOR,
                )
            return KinshipLabel(
                relationship=descendant_label(generations),
                generational_distance=-generations,
                degree_of_separation=generations,
                category=KinshipCategory.DESCENDANT,
            )

        closest = result.closest_common_ancestor
        if closest is None:
            return None
        g1, g2 = closest.generation_from_first, closest.generation_from_second
        if (g1, g2) == (1, 1):
            kind = sibling.kind if sibling is not None and sibling.are_siblings else SiblingKind.FULL
            return KinshipLabel(
                relationship=SIBLING_LABELS[kind],
                is_blood_relative=kind != SiblingKind.STEP,
                degree_of_separation=2,
                category=KinshipCategory.SIBLING,
            )
        return KinshipLabel(
            relationship=collateral_label(g1, g2),
            generational_distance=g1 - g2,
            degree_of_separation=g1 + g2,
            category=KinshipCategory.COLLATERAL,
        )

    async def shared_parents(self, first_id: str, second_id: str) -> list[str]:
        """Parents both members have directly, in the first member's parent order."""
        await self._require_members([first_id, second_id])
        first_edges, second_edges = await asyncio.gather(
            self.store.fetch_parents_of(first_id),
            self.store.fetch_parents_of(second_id),
        )
        second_parents = {e.parent_id for e in second_edges}
        return list(dict.fromkeys(e.parent_id for e in first_edges if e.parent_id in second_parents))

    async def sibling_info(self, first_id: str, second_id: str) -> SiblingInfo:
        """Classify two members as full, half or step siblings (or neither).

        Full when they share two or more parents; step when either member's
        links to the shared parents are all step links; otherwise half.
        """
        await self._require_members([first_id, second_id])
        if first_id == second_id:
            return SiblingInfo(are_siblings=False)

        first_edges, second_edges = await asyncio.gather(
            self.store.fetch_parents_of(first_id),
            self.store.fetch_parents_of(second_id),
        )
        second_parents = {e.parent_id for e in second_edges}
        shared = tuple(dict.fromkeys(e.parent_id for e in first_edges if e.parent_id in second_parents))
        if not shared:
            return SiblingInfo(are_siblings=False)
        return SiblingInfo(
            are_siblings=True,
            kind=sibling_kind(first_edges, second_edges, shared),
            shared_parent_ids=shared,
        )

    async def siblings_of(self, member_id: str) -> list[SiblingRelation]:
        """Every member sharing at least one parent with ``member_id``.

        Costs two store round trips: the member's parent edges, then the
        child edges of all those parents in one batch. Siblings are listed
        in the order their edges come back.
        """
        await self._require_members([member_id])
        own_edges = await self.store.fetch_parents_of(member_id)
        if not own_edges:
            return []

        parent_ids = list(dict.fromkeys(e.parent_id for e in own_edges))
        index = GraphIndex.from_edges(await self.store.fetch_child_edges(parent_ids))

        sibling_edges: dict[str, list[ParentChildEdge]] = {}
        for parent_id in parent_ids:
            for edge in index.child_edges_of(parent_id):
                if edge.child_id != member_id:
                    sibling_edges.setdefault(edge.child_id, []).append(edge)

        siblings = []
        for sibling_id, edges in sibling_edges.items():
            their_parents = {e.parent_id for e in edges}
            shared = tuple(p for p in parent_ids if p in their_parents)
            siblings.append(
                SiblingRelation(
                    member_id=member_id,
                    sibling_id=sibling_id,
                    kind=sibling_kind(own_edges, edges, shared),
                    shared_parent_ids=shared,
                )
            )
        return siblings

    async def infer_relationship(
        self,
        first_id: str,
        second_id: str,
        max_generations: int | None = None,
    ) -> KinshipLabel | None:
        """Describe the second member relative to the first, including in-laws.

        Checks a direct marriage first, then blood kinship (siblings split
        into full, half and step), then kinship through the spouses of
        either member. The in-law candidate with the lowest degree of
        separation wins.
        """
        await self._require_members([first_id, second_id])
        first_marriages = await self.store.fetch_marriages_involving(first_id)
        if first_id != second_id and any(m.involves(second_id) for m in first_marriages):
            return KinshipLabel(
                relationship="spouse",
                is_blood_relative=False,
                degree_of_separation=1,
                category=KinshipCategory.SPOUSE,
            )

        result = await self.classify(first_id, second_id, max_generations)
        blood = self.label(result)
        if blood is not None and blood.category == KinshipCategory.SIBLING:
            blood = self.label(result, await self.sibling_info(first_id, second_id))
        if blood is not None:
            return blood

        second_marriages = await self.store.fetch_marriages_involving(second_id)
        candidates: list[KinshipLabel] = []

        # Second is a blood relative of first's spouse (parent-in-law, sibling-in-law, ...)
        for spouse_id in dict.fromkeys(m.other_spouse(first_id) for m in first_marriages):
            if spouse_id == second_id:
                continue
            via = self.label(await self.classify(spouse_id, second_id, max_generations))
            if via is not None and via.relationship != "self":
                candidates.append(via.in_law(via_member_id=spouse_id))

        # Second is the spouse of a blood relative of first (child-in-law, ...)
        for spouse_id in dict.fromkeys(m.other_spouse(second_id) for m in second_marriages):
            if spouse_id == first_id:
                continue
            via = self.label(await self.classify(first_id, spouse_id, max_generations))
            if via is not None and via.relationship != "self":
                candidates.append(via.in_law(via_member_id=spouse_id))

        if not candidates:
            return None
        return min(candidates, key=lambda c: c.degree_of_separation)

    async def would_create_cycle(
        self,
        parent_id: str,
        child_id: str,
        max_generations: int | None = None,
    ) -> bool:
        """True if adding ``parent_id -> child_id`` would close a loop.

        That is the case when the proposed child is already an ancestor of
        the proposed parent (within ``max_generations``).
        """
        if parent_id == child_id:
            return True
        result = await self.classify(parent_id, child_id, max_generations)
        return result.is_ancestor_descendant and result.ancestor_id == child_id
