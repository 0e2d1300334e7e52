"""Duplicate member detection."""
from .models import (
    CandidateAttributes,
    DuplicateCandidate,
    DuplicateDetectionResult,
    DuplicateSeverity,
    MatchField,
    SimilarityDetails,
)
from .scorer import DuplicateCandidateScorer, confidence_description, format_duplicate_warning

__all__ = [
    "CandidateAttributes",
    "DuplicateCandidate",
    "DuplicateDetectionResult",
    "DuplicateSeverity",
    "MatchField",
    "SimilarityDetails",
    "DuplicateCandidateScorer",
    "format_duplicate_warning",
    "confidence_description",
]
