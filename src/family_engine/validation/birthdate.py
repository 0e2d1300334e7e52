"""Chronological plausibility of parent-child edges.

Pure functions over member records: no store access. A missing birthdate on
either side means "cannot tell", which is always valid.
"""
from __future__ import annotations

from collections.abc import Iterable
from datetime import date

from family_engine.config import CONFIG, PlausibilityPolicy
from family_engine.models import Member, parse_iso_date
from family_engine.validation.models import ErrorCode, ValidationResult, WarningCode


def age_gap(parent_birth: date, child_birth: date) -> int:
    """Whole calendar years from ``parent_birth`` to ``child_birth`` (floor)."""
    years = child_birth.year - parent_birth.year
    if (child_birth.month, child_birth.day) < (parent_birth.month, parent_birth.day):
        years -= 1
    return years


class BirthdatePlausibilityValidator:
    """Checks that a parent is a believable number of years older than a child.

    Rules, in order, stopping at the first error:
    - parent born after the child
    - parent born the same year-span or later (gap <= 0)
    - gap below ``min_parent_age``
    - gap above ``max_parent_age``

    A valid pair may still carry warnings for unusually young or old parents.
    """

    def __init__(self, policy: PlausibilityPolicy | None = None) -> None:
        self.policy = policy or CONFIG.plausibility

    def validate_pair(self, parent: Member, child: Member) -> ValidationResult:
        result = ValidationResult()
        parent_birth = parent.birth_date
        child_birth = child.birth_date
        if parent_birth is None or child_birth is None:
            return result

        parent_name = parent.display_name
        child_name = child.display_name
        dates = {
            "parent_name": parent_name,
            "child_name": child_name,
            "parent_birth_date": parent_birth.isoformat(),
            "child_birth_date": child_birth.isoformat(),
        }

        if parent_birth > child_birth:
            result.add_error(
                ErrorCode.PARENT_BORN_AFTER_CHILD,
                f"{parent_name} cannot be a parent of {child_name} "
                "because they were born after the child.",
                **dates,
            )
            return result

        gap = age_gap(parent_birth, child_birth)
        policy = self.policy

        if gap <= 0:
            result.add_error(
                ErrorCode.PARENT_BORN_SAME_TIME,
                f"{parent_name} cannot be a parent of {child_name} "
                "because they were born at the same time or are younger.",
                age_gap=gap,
                **dates,
            )
            return result

        if gap < policy.min_parent_age:
            result.add_error(
                ErrorCode.PARENT_TOO_YOUNG,
                f"{parent_name} would have been only {gap} years old when {child_name} was born. "
                f"Parents must be at least {policy.min_parent_age} years older than their children.",
                age_gap=gap,
                **dates,
            )
            return result

        if gap > policy.max_parent_age:
            result.add_error(
                ErrorCode.PARENT_TOO_OLD,
                f"{parent_name} would have been {gap} years old when {child_name} was born. "
                f"This exceeds the maximum reasonable age gap of {policy.max_parent_age} years.",
                age_gap=gap,
                **dates,
            )
            return result

        if gap < policy.young_parent_warning_below:
            result.add_warning(
                WarningCode.UNUSUALLY_YOUNG_PARENT,
                f"{parent_name} was {gap} years old when {child_name} was born, "
                "which is unusually young.",
                parent_name=parent_name,
                child_name=child_name,
                age_gap=gap,
            )
        if gap > policy.old_parent_warning_above:
            result.add_warning(
                WarningCode.UNUSUALLY_OLD_PARENT,
                f"{parent_name} was {gap} years old when {child_name} was born, "
                "which is unusually old.",
                parent_name=parent_name,
                child_name=child_name,
                age_gap=gap,
            )
        return result

    def validate_member_change(
        self,
        member: Member,
        new_birth_date: date | str | None,
        parents: Iterable[Member],
        children: Iterable[Member],
    ) -> ValidationResult:
        """Re-validate every existing parent and child edge of ``member``.

        ``new_birth_date`` replaces the member's stored birthdate for the
        check; all findings across the neighbourhood are aggregated. An
        unknown or unparsable new birthdate returns a valid result without
        visiting the neighbours, since every pair with an unknown date is
        valid.
        """
        candidate = member.with_birth_date(parse_iso_date(new_birth_date))
        result = ValidationResult()
        if candidate.birth_date is None:
            return result
        for parent in parents:
            result.merge(self.validate_pair(parent, candidate))
        for child in children:
            result.merge(self.validate_pair(candidate, child))
        return result
