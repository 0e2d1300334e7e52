"""Facade over the traversal, classification, validation and duplicate components.

``FamilyGraphEngine`` is what request handlers call. It owns no state beyond
its store and policies; every call reads the graph afresh.

The ``check_*`` operations return a ValidationResult; the matching
``guard_*`` operations raise RelationshipRejectedError instead, for callers
that must not commit on a blocking verdict.
"""
from __future__ import annotations

import asyncio
from collections import Counter
from collections.abc import Iterable
from datetime import date

from family_engine.config import CONFIG, EngineConfig
from family_engine.dedupe import CandidateAttributes, DuplicateCandidateScorer, DuplicateDetectionResult
from family_engine.exceptions import (
    DuplicateCheckUnavailableError,
    MemberNotFoundError,
    RelationshipRejectedError,
)
from family_engine.graph import (
    KinshipLabel,
    LineageMap,
    LineageWalker,
    MemberRelationships,
    MemberStore,
    RelatedMember,
    RelationshipClassifier,
    RelationshipResult,
    SiblingInfo,
    SiblingRelation,
    TreeRelationshipSummary,
)
from family_engine.logging import get_logger
from family_engine.models import Member
from family_engine.validation import (
    BirthdatePlausibilityValidator,
    ErrorCode,
    MarriageValidator,
    ValidationResult,
)

logger = get_logger(__name__)


class FamilyGraphEngine:
    """Relationship and consistency engine for one member store.

    Example:
        >>> engine = FamilyGraphEngine(store)
        >>> await engine.guard_parent_child_edge("m-parent", "m-child")
        >>> label = await engine.describe_relationship("m-1", "m-2")
    """

    def __init__(self, store: MemberStore, config: EngineConfig | None = None) -> None:
        self.store = store
        self.config = config or CONFIG
        self.walker = LineageWalker(store)
        self.classifier = RelationshipClassifier(store, self.walker)
        self.birthdates = BirthdatePlausibilityValidator(self.config.plausibility)
        self.marriages = MarriageValidator(self.config.marriage)
        self.scorer = DuplicateCandidateScorer(self.config.duplicates)

    def _generations(self, max_generations: int | None) -> int:
        return self.config.max_generations if max_generations is None else max_generations

    async def _members(self, *member_ids: str) -> list[Member]:
        found = await self.store.fetch_members_by_ids(list(dict.fromkeys(member_ids)))
        missing = [mid for mid in dict.fromkeys(member_ids) if mid not in found]
        if missing:
            raise MemberNotFoundError(missing)
        return [found[mid] for mid in member_ids]

    def _reject(self, result: ValidationResult, **context) -> None:
        if result.is_valid:
            return
        code = result.errors[0].code.value
        logger.warning("edge.rejected", code=code, errors=[c.value for c in result.error_codes], **context)
        raise RelationshipRejectedError(reason=result.format_errors(), code=code, validation_result=result)

    # ------------------------------------------------------------------
    # Traversal and classification
    # ------------------------------------------------------------------

    async def compute_ancestors(self, member_id: str, max_generations: int | None = None) -> LineageMap:
        return await self.walker.ancestors(member_id, self._generations(max_generations))

    async def compute_descendants(self, member_id: str, max_generations: int | None = None) -> LineageMap:
        return await self.walker.descendants(member_id, self._generations(max_generations))

    async def classify_relationship(
        self,
        first_id: str,
        second_id: str,
        max_generations: int | None = None,
    ) -> RelationshipResult:
        return await self.classifier.classify(first_id, second_id, self._generations(max_generations))

    async def shared_parents(self, first_id: str, second_id: str) -> list[str]:
        return await self.classifier.shared_parents(first_id, second_id)

    async def sibling_info(self, first_id: str, second_id: str) -> SiblingInfo:
        return await self.classifier.sibling_info(first_id, second_id)

    async def describe_relationship(
        self,
        first_id: str,
        second_id: str,
        max_generations: int | None = None,
    ) -> KinshipLabel | None:
        """What ``second_id`` is to ``first_id``, in-laws included; None if unrelated."""
        return await self.classifier.infer_relationship(
            first_id, second_id, self._generations(max_generations)
        )

    async def find_siblings(self, member_id: str) -> list[SiblingRelation]:
        """Full, half and step siblings of ``member_id``."""
        return await self.classifier.siblings_of(member_id)

    async def infer_all_relationships(
        self,
        member_id: str,
        tree_id: str,
        max_generations: int | None = None,
    ) -> MemberRelationships:
        """Label every member of ``tree_id`` relative to ``member_id``.

        Unrelated members are left out. Results are ordered by degree of
        separation, then label, then member id; ``by_category()`` groups them.
        """
        await self._members(member_id)
        generations = self._generations(max_generations)
        related = []
        for other in await self.store.fetch_members_in_tree(tree_id):
            if other.id == member_id:
                continue
            label = await self.classifier.infer_relationship(member_id, other.id, generations)
            if label is not None:
                related.append(RelatedMember(member_id=other.id, label=label))
        related.sort(key=lambda r: (r.label.degree_of_separation, r.label.relationship, r.member_id))
        return MemberRelationships(member_id=member_id, tree_id=tree_id, related=tuple(related))

    async def relationship_summary(
        self,
        tree_id: str,
        max_generations: int | None = None,
    ) -> TreeRelationshipSummary:
        """Classify every unordered pair of members in ``tree_id``.

        Each pair is described from the member with the smaller id. The cost
        is quadratic in the tree size; intended for reports, not requests.
        """
        generations = self._generations(max_generations)
        members = sorted(await self.store.fetch_members_in_tree(tree_id), key=lambda m: m.id)
        counts: Counter[str] = Counter()
        pairs = []
        blood_relatives = in_laws = 0
        for i, first in enumerate(members):
            for second in members[i + 1 :]:
                label = await self.classifier.infer_relationship(first.id, second.id, generations)
                if label is None:
                    continue
                pairs.append((first.id, second.id, label))
                counts[label.relationship] += 1
                blood_relatives += int(label.is_blood_relative)
                in_laws += int(label.is_in_law)

        logger.info("summary.done", tree_id=tree_id, members=len(members), related_pairs=len(pairs))
        return TreeRelationshipSummary(
            tree_id=tree_id,
            total_members=len(members),
            relationship_counts=dict(counts),
            blood_relatives=blood_relatives,
            in_laws=in_laws,
            pairs=tuple(pairs),
        )

    # ------------------------------------------------------------------
    # Pure validation
    # ------------------------------------------------------------------

    def validate_new_edge(self, parent: Member, child: Member) -> ValidationResult:
        return self.birthdates.validate_pair(parent, child)

    def validate_member_birthdate_change(
        self,
        member: Member,
        new_birth_date: date | str | None,
        parents: Iterable[Member],
        children: Iterable[Member],
    ) -> ValidationResult:
        return self.birthdates.validate_member_change(member, new_birth_date, parents, children)

    def detect_duplicates(
        self,
        candidate: CandidateAttributes | Member,
        existing_members: Iterable[Member],
        *,
        exclude_member_ids: Iterable[str] = (),
        max_candidates: int | None = None,
    ) -> DuplicateDetectionResult:
        return self.scorer.detect_duplicates(
            candidate,
            existing_members,
            exclude_member_ids=exclude_member_ids,
            max_candidates=max_candidates,
        )

    # ------------------------------------------------------------------
    # Store-backed checks and guards
    # ------------------------------------------------------------------

    async def check_parent_child_edge(
        self,
        parent_id: str,
        child_id: str,
        max_generations: int | None = None,
    ) -> ValidationResult:
        """Validate a proposed ``parent_id -> child_id`` edge.

        Checks, in order: self edge, birthdate plausibility, and whether the
        child is already an ancestor of the parent.
        """
        result = ValidationResult()
        if parent_id == child_id:
            result.add_error(
                ErrorCode.SELF_RELATIONSHIP,
                "A member cannot be their own parent.",
                member_id=parent_id,
            )
            return result

        parent, child = await self._members(parent_id, child_id)
        result.merge(self.birthdates.validate_pair(parent, child))
        if not result.is_valid:
            return result

        if await self.classifier.would_create_cycle(parent_id, child_id, self._generations(max_generations)):
            result.add_error(
                ErrorCode.CIRCULAR_RELATIONSHIP,
                f"{child.display_name} is already an ancestor of {parent.display_name}; "
                "this relationship would create a cycle.",
                parent_id=parent_id,
                child_id=child_id,
            )
        return result

    async def guard_parent_child_edge(
        self,
        parent_id: str,
        child_id: str,
        max_generations: int | None = None,
    ) -> ValidationResult:
        """Like ``check_parent_child_edge`` but raises on a blocking verdict.

        Raises:
            RelationshipRejectedError: if the edge must not be committed
        """
        result = await self.check_parent_child_edge(parent_id, child_id, max_generations)
        self._reject(result, parent_id=parent_id, child_id=child_id)
        return result

    async def check_birthdate_change(
        self,
        member_id: str,
        new_birth_date: date | str | None,
    ) -> ValidationResult:
        """Re-validate a member's parent and child edges against a new birthdate."""
        (member,) = await self._members(member_id)
        parent_edges, child_edges = await asyncio.gather(
            self.store.fetch_parents_of(member_id),
            self.store.fetch_children_of(member_id),
        )
        neighbour_ids = [e.parent_id for e in parent_edges] + [e.child_id for e in child_edges]
        neighbours = await self.store.fetch_members_by_ids(neighbour_ids) if neighbour_ids else {}
        parents = [neighbours[e.parent_id] for e in parent_edges if e.parent_id in neighbours]
        children = [neighbours[e.child_id] for e in child_edges if e.child_id in neighbours]
        return self.birthdates.validate_member_change(member, new_birth_date, parents, children)

    async def guard_birthdate_change(
        self,
        member_id: str,
        new_birth_date: date | str | None,
    ) -> ValidationResult:
        result = await self.check_birthdate_change(member_id, new_birth_date)
        self._reject(result, member_id=member_id)
        return result

    async def check_marriage(
        self,
        first_id: str,
        second_id: str,
        max_generations: int | None = None,
    ) -> ValidationResult:
        """Check a proposed marriage against blood kinship and sibling links."""
        first, second = await self._members(first_id, second_id)
        if first_id == second_id:
            return self.marriages.validate_marriage(first, second)
        relationship, sibling = await asyncio.gather(
            self.classifier.classify(first_id, second_id, self._generations(max_generations)),
            self.classifier.sibling_info(first_id, second_id),
        )
        return self.marriages.validate_marriage(first, second, relationship, sibling)

    async def guard_marriage(
        self,
        first_id: str,
        second_id: str,
        max_generations: int | None = None,
    ) -> ValidationResult:
        result = await self.check_marriage(first_id, second_id, max_generations)
        self._reject(result, first_id=first_id, second_id=second_id)
        return result

    # ------------------------------------------------------------------
    # Duplicate screening
    # ------------------------------------------------------------------

    async def detect_duplicates_in_tree(
        self,
        tree_id: str,
        candidate: CandidateAttributes | Member,
        *,
        exclude_member_ids: Iterable[str] = (),
    ) -> DuplicateDetectionResult:
        """Score ``candidate`` against every member currently in ``tree_id``.

        Raises:
            DuplicateCheckUnavailableError: if the store cannot list the tree
        """
        try:
            existing = await self.store.fetch_members_in_tree(tree_id)
        except Exception as exc:
            raise DuplicateCheckUnavailableError(tree_id, exc) from exc
        return self.detect_duplicates(candidate, existing, exclude_member_ids=exclude_member_ids)

    async def screen_new_member(
        self,
        tree_id: str,
        candidate: CandidateAttributes | Member,
        *,
        exclude_member_ids: Iterable[str] = (),
    ) -> DuplicateDetectionResult | None:
        """Duplicate check that never blocks creation.

        Returns None (and logs a warning) when the check could not run.
        """
        try:
            return await self.detect_duplicates_in_tree(
                tree_id, candidate, exclude_member_ids=exclude_member_ids
            )
        except DuplicateCheckUnavailableError as exc:
            logger.warning("duplicates.unavailable", tree_id=tree_id, error=str(exc.cause))
            return None
