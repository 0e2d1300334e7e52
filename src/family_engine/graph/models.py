"""Per-query traversal and kinship result models.

None of these are persisted; they live for the duration of one engine call:
- Lineage entries/maps for ancestor and descendant walks
- Common ancestor records and raw relationship results
- Derived kinship labels and sibling classification
"""
from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any


class TraversalDirection(str, Enum):
    """Direction for lineage traversal."""
    UP = "up"  # parents, grandparents, ...
    DOWN = "down"  # children, grandchildren, ...


class SiblingKind(str, Enum):
    FULL = "full"
    HALF = "half"
    STEP = "step"


class KinshipCategory(str, Enum):
    """Coarse grouping of kinship labels."""
    SELF = "self"
    SPOUSE = "spouse"
    ANCESTOR = "ancestor"
    DESCENDANT = "descendant"
    SIBLING = "sibling"
    COLLATERAL = "collateral"  # aunts/uncles, nephews/nieces, cousins
    IN_LAW = "in_law"


def ordinal(n: int) -> str:
    """Spelled ordinal for cousin degrees ("first", "second", "4th")."""
    words = {1: "first", 2: "second", 3: "third"}
    if n in words:
        return words[n]
    if 10 <= n % 100 <= 20:
        suffix = "th"
    else:
        suffix = {1: "st", 2: "nd", 3: "rd"}.get(n % 10, "th")
    return f"{n}{suffix}"


def times_removed(removal: int) -> str:
    if removal == 1:
        return "once removed"
    if removal == 2:
        return "twice removed"
    return f"{removal} times removed"


def ancestor_label(generations: int) -> str:
    """Label for a direct ancestor ``generations`` edges up."""
    if generations == 1:
        return "parent"
    if generations == 2:
        return "grandparent"
    return f"{'great-' * (generations - 2)}grandparent"


def descendant_label(generations: int) -> str:
    """Label for a direct descendant ``generations`` edges down."""
    if generations == 1:
        return "child"
    if generations == 2:
        return "grandchild"
    return f"{'great-' * (generations - 2)}grandchild"


@dataclass(frozen=True)
class LineageEntry:
    """A member reached by a walk (AncestorInfo / DescendantInfo)."""
    member_id: str
    generation: int  # edge distance from the root
    path: tuple[str, ...]  # root ... member_id, inclusive
    direction: TraversalDirection = TraversalDirection.UP

    @property
    def relationship_label(self) -> str:
        if self.direction == TraversalDirection.UP:
            return ancestor_label(self.generation)
        return descendant_label(self.generation)

    def to_dict(self) -> dict[str, Any]:
        return {
            "member_id": self.member_id,
            "generation": self.generation,
            "path": list(self.path),
            "relationship_label": self.relationship_label,
        }


class LineageMap(Mapping[str, LineageEntry]):
    """Read-only mapping of member id -> LineageEntry for one walk.

    Holds exactly one entry per member id. The first entry added for an id
    wins; later additions for the same id are ignored.
    """

    def __init__(
        self,
        root_id: str,
        direction: TraversalDirection,
        max_generations: int,
    ) -> None:
        self.root_id = root_id
        self.direction = direction
        self.max_generations = max_generations
        self._entries: dict[str, LineageEntry] = {}

    def add(self, entry: LineageEntry) -> bool:
        """Record ``entry`` unless its member is already present.

        Returns:
            True if the entry was stored, False if an earlier one was kept
        """
        if entry.member_id in self._entries or entry.member_id == self.root_id:
            return False
        self._entries[entry.member_id] = entry
        return True

    def __getitem__(self, member_id: str) -> LineageEntry:
        return self._entries[member_id]

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return (
            f"LineageMap(root_id={self.root_id!r}, direction={self.direction.value!r}, "
            f"entries={len(self._entries)})"
        )

    @property
    def generations_found(self) -> int:
        return max((e.generation for e in self._entries.values()), default=0)

    def at_generation(self, generation: int) -> list[LineageEntry]:
        """Entries discovered at exactly ``generation``, in discovery order."""
        return [e for e in self._entries.values() if e.generation == generation]

    def to_dict(self) -> dict[str, Any]:
        return {
            "root_id": self.root_id,
            "direction": self.direction.value,
            "max_generations": self.max_generations,
            "entries": [e.to_dict() for e in self._entries.values()],
        }


@dataclass(frozen=True)
class CommonAncestor:
    """A member present in both ancestor sets."""
    ancestor_id: str
    generation_from_first: int
    generation_from_second: int
    path_from_first: tuple[str, ...] = ()
    path_from_second: tuple[str, ...] = ()

    @property
    def sort_key(self) -> tuple[int, int, str]:
        # Closest shared ancestor first: smallest max generation, then total
        return (
            max(self.generation_from_first, self.generation_from_second),
            self.generation_from_first + self.generation_from_second,
            self.ancestor_id,
        )

    def swapped(self) -> CommonAncestor:
        return CommonAncestor(
            ancestor_id=self.ancestor_id,
            generation_from_first=self.generation_from_second,
            generation_from_second=self.generation_from_first,
            path_from_first=self.path_from_second,
            path_from_second=self.path_from_first,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "ancestor_id": self.ancestor_id,
            "generation_from_first": self.generation_from_first,
            "generation_from_second": self.generation_from_second,
            "path_from_first": list(self.path_from_first),
            "path_from_second": list(self.path_from_second),
        }


@dataclass(frozen=True)
class RelationshipResult:
    """Raw blood-relationship comparison between two members."""
    first_id: str
    second_id: str
    are_related: bool
    is_ancestor_descendant: bool = False
    generations: int | None = None  # set for self / ancestor-descendant
    ancestor_id: str | None = None  # which of the two is the ancestor
    common_ancestors: tuple[CommonAncestor, ...] = ()

    @property
    def is_self(self) -> bool:
        return self.first_id == self.second_id

    @property
    def closest_common_ancestor(self) -> CommonAncestor | None:
        if not self.common_ancestors:
            return None
        return min(self.common_ancestors, key=lambda c: c.sort_key)

    @property
    def cousin_degree(self) -> int | None:
        closest = self.closest_common_ancestor
        if closest is None:
            return None
        return min(closest.generation_from_first, closest.generation_from_second) - 1

    @property
    def removal(self) -> int | None:
        closest = self.closest_common_ancestor
        if closest is None:
            return None
        return abs(closest.generation_from_first - closest.generation_from_second)

    def swapped(self) -> RelationshipResult:
        """The same comparison seen from the second member."""
        return RelationshipResult(
            first_id=self.second_id,
            second_id=self.first_id,
            are_related=self.are_related,
            is_ancestor_descendant=self.is_ancestor_descendant,
            generations=self.generations,
            ancestor_id=self.ancestor_id,
            common_ancestors=tuple(c.swapped() for c in self.common_ancestors),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "first_id": self.first_id,
            "second_id": self.second_id,
            "are_related": self.are_related,
            "is_ancestor_descendant": self.is_ancestor_descendant,
            "generations": self.generations,
            "ancestor_id": self.ancestor_id,
            "common_ancestors": [c.to_dict() for c in self.common_ancestors],
        }


@dataclass(frozen=True)
class KinshipLabel:
    """What the second member of a query is to the first."""
    relationship: str  # e.g. "grandparent", "first cousin once removed", "sibling-in-law"
    is_blood_relative: bool = True
    is_in_law: bool = False
    generational_distance: int = 0  # positive = older generation, negative = younger
    degree_of_separation: int = 0
    via_member_id: str | None = None  # spouse the in-law link goes through
    category: KinshipCategory | None = None

    def in_law(self, via_member_id: str, extra_degree: int = 1) -> KinshipLabel:
        return KinshipLabel(
            relationship=f"{self.relationship}-in-law",
            is_blood_relative=False,
            is_in_law=True,
            generational_distance=self.generational_distance,
            degree_of_separation=self.degree_of_separation + extra_degree,
            via_member_id=via_member_id,
            category=KinshipCategory.IN_LAW,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "relationship": self.relationship,
            "is_blood_relative": self.is_blood_relative,
            "is_in_law": self.is_in_law,
            "generational_distance": self.generational_distance,
            "degree_of_separation": self.degree_of_separation,
            "via_member_id": self.via_member_id,
            "category": self.category.value if self.category else None,
        }


@dataclass(frozen=True)
class SiblingInfo:
    are_siblings: bool
    kind: SiblingKind | None = None
    shared_parent_ids: tuple[str, ...] = ()


@dataclass(frozen=True)
class SiblingRelation:
    """One sibling of a member, as found from the member's parents."""
    member_id: str
    sibling_id: str
    kind: SiblingKind
    shared_parent_ids: tuple[str, ...]

    def to_dict(self) -> dict[str, Any]:
        return {
            "member_id": self.member_id,
            "sibling_id": self.sibling_id,
            "kind": self.kind.value,
            "shared_parent_ids": list(self.shared_parent_ids),
        }


@dataclass(frozen=True)
class RelatedMember:
    """A member of the tree and what they are to the member being described."""
    member_id: str
    label: KinshipLabel


@dataclass(frozen=True)
class MemberRelationships:
    """Every relative of one member within a tree, closest first."""
    member_id: str
    tree_id: str
    related: tuple[RelatedMember, ...] = ()

    def __len__(self) -> int:
        return len(self.related)

    def in_category(self, category: KinshipCategory | str) -> list[RelatedMember]:
        category = KinshipCategory(category)
        return [r for r in self.related if r.label.category == category]

    def by_category(self) -> dict[KinshipCategory, list[RelatedMember]]:
        grouped: dict[KinshipCategory, list[RelatedMember]] = {}
        for related in self.related:
            if related.label.category is not None:
                grouped.setdefault(related.label.category, []).append(related)
        return grouped

    def to_dict(self) -> dict[str, Any]:
        return {
            "member_id": self.member_id,
            "tree_id": self.tree_id,
            "by_category": {
                category.value: [{"member_id": r.member_id, **r.label.to_dict()} for r in members]
                for category, members in self.by_category().items()
            },
        }


@dataclass(frozen=True)
class TreeRelationshipSummary:
    """Pairwise relationship counts across a whole tree."""
    tree_id: str
    total_members: int
    relationship_counts: dict[str, int]
    blood_relatives: int
    in_laws: int
    pairs: tuple[tuple[str, str, KinshipLabel], ...] = ()

    def pairs_in_category(self, category: KinshipCategory | str) -> list[tuple[str, str, KinshipLabel]]:
        """Pairs whose label falls in ``category`` (e.g. every cousin pair)."""
        category = KinshipCategory(category)
        return [p for p in self.pairs if p[2].category == category]

    def to_dict(self) -> dict[str, Any]:
        return {
            "tree_id": self.tree_id,
            "total_members": self.total_members,
            "relationship_counts": dict(self.relationship_counts),
            "blood_relatives": self.blood_relatives,
            "in_laws": self.in_laws,
        }
