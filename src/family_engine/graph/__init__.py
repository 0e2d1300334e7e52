"""Family graph traversal and kinship.

Provides:
- A narrow async store interface with batched edge lookups
- Level-order ancestor/descendant walks (cycle-safe)
- Relationship classification, including in-laws and sibling kind
"""
from .index import GraphIndex
from .kinship import RelationshipClassifier, collateral_label, sibling_kind
from .models import (
    CommonAncestor,
    KinshipCategory,
    KinshipLabel,
    LineageEntry,
    LineageMap,
    MemberRelationships,
    RelatedMember,
    RelationshipResult,
    SiblingInfo,
    SiblingKind,
    SiblingRelation,
    TraversalDirection,
    TreeRelationshipSummary,
)
from .store import InMemoryMemberStore, MemberStore
from .traversal import LineageWalker

__all__ = [
    # Store
    "MemberStore",
    "InMemoryMemberStore",
    "GraphIndex",
    # Result models
    "LineageEntry",
    "LineageMap",
    "TraversalDirection",
    "CommonAncestor",
    "RelationshipResult",
    "KinshipLabel",
    "KinshipCategory",
    "SiblingInfo",
    "SiblingKind",
    "SiblingRelation",
    "RelatedMember",
    "MemberRelationships",
    "TreeRelationshipSummary",
    # Traversal and classification
    "LineageWalker",
    "RelationshipClassifier",
    "collateral_label",
    "sibling_kind",
]
