"""Duplicate candidate scoring.

Compares a proposed member against the existing members of a tree and
ranks probable duplicates. Advisory only: the caller decides whether to
proceed or review.
"""
from __future__ import annotations

from collections.abc import Iterable

from family_engine.config import CONFIG, DuplicatePolicy
from family_engine.dedupe.models import (
    CandidateAttributes,
    DuplicateCandidate,
    DuplicateDetectionResult,
    DuplicateSeverity,
    MatchField,
    SimilarityDetails,
)
from family_engine.dedupe.similarity import date_proximity, name_similarity
from family_engine.models import Member


class DuplicateCandidateScorer:
    """Scores name and birthdate similarity against existing members.

    The combined score is the name similarity alone when either birthdate
    is unknown, otherwise ``name_weight * name + date_weight * date``. A
    member is surfaced only when its name or its birthdate matched and the
    combined score reaches the low threshold.

    Example:
        >>> scorer = DuplicateCandidateScorer()
        >>> result = scorer.detect_duplicates(candidate, tree_members)
        >>> result.highest_severity
        <DuplicateSeverity.HIGH: 'high'>
    """

    def __init__(self, policy: DuplicatePolicy | None = None) -> None:
        self.policy = policy or CONFIG.duplicates

    def severity_for(self, score: float) -> DuplicateSeverity:
        if score >= self.policy.high_threshold:
            return DuplicateSeverity.HIGH
        if score >= self.policy.medium_threshold:
            return DuplicateSeverity.MEDIUM
        return DuplicateSeverity.LOW

    def score_member(
        self,
        candidate: CandidateAttributes | Member,
        existing: Member,
    ) -> DuplicateCandidate | None:
        """Score one existing member; None if it should not be surfaced."""
        policy = self.policy
        name, first, last = name_similarity(
            candidate.first_name,
            candidate.last_name,
            existing.first_name,
            existing.last_name,
            middle_a=candidate.middle_name,
            middle_b=existing.middle_name,
        )
        days, date_score = date_proximity(
            candidate.birth_date, existing.birth_date, policy.date_window_days
        )

        if date_score is None:
            score = name
        else:
            score = policy.name_weight * name + policy.date_weight * date_score
        score = min(1.0, max(0.0, round(score, 4)))

        matched_on: list[MatchField] = []
        if first >= policy.name_match_threshold:
            matched_on.append(MatchField.FIRST_NAME)
        if last >= policy.name_match_threshold:
            matched_on.append(MatchField.LAST_NAME)
        name_matched = name >= policy.name_match_threshold
        if name_matched:
            matched_on.append(MatchField.FULL_NAME)
        date_matched = date_score is not None and date_score >= policy.date_match_threshold
        if date_matched:
            matched_on.append(MatchField.BIRTH_DATE)

        if not (name_matched or date_matched) or score < policy.low_threshold:
            return None

        return DuplicateCandidate(
            member_id=existing.id,
            first_name=existing.first_name,
            last_name=existing.last_name,
            full_name=existing.full_name,
            birth_date=existing.birth_date,
            score=score,
            severity=self.severity_for(score),
            matched_on=matched_on,
            details=SimilarityDetails(
                name_similarity=round(name, 4),
                first_name_similarity=round(first, 4),
                last_name_similarity=round(last, 4),
                date_proximity_days=days,
                date_proximity_score=None if date_score is None else round(date_score, 4),
            ),
        )

    def detect_duplicates(
        self,
        candidate: CandidateAttributes | Member,
        existing_members: Iterable[Member],
        *,
        exclude_member_ids: Iterable[str] = (),
        max_candidates: int | None = None,
    ) -> DuplicateDetectionResult:
        """Rank existing members that may duplicate ``candidate``.

        Args:
            candidate: CandidateAttributes (or a Member) for the new person
            existing_members: Members already in the tree
            exclude_member_ids: Ids never reported (e.g. the member being edited)
            max_candidates: Cap on returned candidates (policy default if None)
        """
        excluded = set(exclude_member_ids)
        limit = self.policy.max_candidates if max_candidates is None else max_candidates

        candidates = []
        for existing in existing_members:
            if existing.id in excluded:
                continue
            scored = self.score_member(candidate, existing)
            if scored is not None:
                candidates.append(scored)

        candidates.sort(key=lambda c: (-c.score, c.member_id))
        return DuplicateDetectionResult(candidates=candidates[: max(limit, 0)])


def format_duplicate_warning(candidate: DuplicateCandidate) -> str:
    """One-line description of a candidate for user display.

    "John Smith (similar name, birth date within 3 days)"
    """
    parts: list[str] = []
    matched = set(candidate.matched_on)
    if MatchField.FULL_NAME in matched or {MatchField.FIRST_NAME, MatchField.LAST_NAME} <= matched:
        parts.append("similar name")
    elif MatchField.FIRST_NAME in matched:
        parts.append("similar first name")
    elif MatchField.LAST_NAME in matched:
        parts.append("similar last name")

    days = candidate.details.date_proximity_days
    if MatchField.BIRTH_DATE in matched and days is not None:
        parts.append("same birth date" if days == 0 else f"birth date within {days} days")

    if not parts:
        return candidate.full_name
    return f"{candidate.full_name} ({', '.join(parts)})"


def confidence_description(severity: DuplicateSeverity | str | None) -> str:
    descriptions = {
        DuplicateSeverity.HIGH: "Very likely the same person",
        DuplicateSeverity.MEDIUM: "Possibly the same person",
        DuplicateSeverity.LOW: "Might be related",
    }
    if severity is None:
        return "Potential match"
    try:
        return descriptions[DuplicateSeverity(severity)]
    except ValueError:
        return "Potential match"
