"""Family graph relationship and consistency engine.

Traverses ancestor/descendant graphs, classifies kinship between members,
validates proposed edges for chronological plausibility and flags probable
duplicate members.
"""

__version__ = "0.1.0"

from family_engine.config import CONFIG, EngineConfig
from family_engine.engine import FamilyGraphEngine
from family_engine.exceptions import (
    DuplicateCheckUnavailableError,
    FamilyEngineError,
    MemberNotFoundError,
    RelationshipRejectedError,
)
from family_engine.models import MarriageEdge, Member, ParentChildEdge

__all__ = [
    "CONFIG",
    "EngineConfig",
    "FamilyGraphEngine",
    "FamilyEngineError",
    "MemberNotFoundError",
    "RelationshipRejectedError",
    "DuplicateCheckUnavailableError",
    "Member",
    "ParentChildEdge",
    "MarriageEdge",
]
