"""Duplicate detection schemas.

Pydantic models for:
- The attributes of a member about to be created
- Scored duplicate candidates with per-field similarity details
- The aggregated detection result
"""
from __future__ import annotations

from datetime import date
from enum import Enum
from typing import Annotated, Any

from pydantic import BaseModel, Field, computed_field, field_validator

from family_engine.models import parse_iso_date


# =============================================================================
# Enums
# =============================================================================


class DuplicateSeverity(str, Enum):
    """Confidence bucket for a duplicate candidate."""

    LOW = "low"  # >= low threshold
    MEDIUM = "medium"  # >= medium threshold
    HIGH = "high"  # >= high threshold

    @property
    def rank(self) -> int:
        return {"low": 0, "medium": 1, "high": 2}[self.value]


class MatchField(str, Enum):
    """Which attribute of a candidate matched an existing member."""

    FIRST_NAME = "first_name"
    LAST_NAME = "last_name"
    FULL_NAME = "full_name"
    BIRTH_DATE = "birth_date"


# =============================================================================
# Input
# =============================================================================


class CandidateAttributes(BaseModel):
    """Attributes of a member that has not been created yet."""

    first_name: str
    last_name: str = ""
    middle_name: str | None = None
    birth_date: date | None = None

    @field_validator("birth_date", mode="before")
    @classmethod
    def _lenient_date(cls, value: Any) -> date | None:
        return parse_iso_date(value)


# =============================================================================
# Output
# =============================================================================


class SimilarityDetails(BaseModel):
    name_similarity: Annotated[float, Field(ge=0.0, le=1.0)]
    first_name_similarity: Annotated[float, Field(ge=0.0, le=1.0)]
    last_name_similarity: Annotated[float, Field(ge=0.0, le=1.0)]
    date_proximity_days: int | None = None
    date_proximity_score: Annotated[float, Field(ge=0.0, le=1.0)] | None = None


class DuplicateCandidate(BaseModel):
    """An existing member that may be the same person as the candidate."""

    member_id: str
    first_name: str
    last_name: str
    full_name: str
    birth_date: date | None = None
    score: Annotated[float, Field(ge=0.0, le=1.0)] = Field(description="Combined similarity (0-1)")
    severity: DuplicateSeverity
    matched_on: list[MatchField] = Field(default_factory=list)
    details: SimilarityDetails


class DuplicateDetectionResult(BaseModel):
    """Candidates sorted by score (highest first), capped to top-N."""

    candidates: list[DuplicateCandidate] = Field(default_factory=list)

    @computed_field
    @property
    def has_potential_duplicates(self) -> bool:
        return bool(self.candidates)

    @computed_field
    @property
    def highest_severity(self) -> DuplicateSeverity | None:
        if not self.candidates:
            return None
        return max((c.severity for c in self.candidates), key=lambda s: s.rank)
