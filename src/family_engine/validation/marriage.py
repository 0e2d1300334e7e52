"""Marriage checks against blood kinship.

Takes a ``RelationshipResult`` (and optionally ``SiblingInfo``) computed by
the classifier and decides whether a proposed marriage is blocked, allowed
with a warning, or allowed outright.
"""
from __future__ import annotations

from family_engine.config import CONFIG, MarriagePolicy
from family_engine.graph.kinship import collateral_label
from family_engine.graph.models import RelationshipResult, SiblingInfo, SiblingKind
from family_engine.models import Member
from family_engine.validation.models import ErrorCode, ValidationResult, WarningCode


class MarriageValidator:
    """Blocks marriages between close blood relatives.

    Full siblings, direct lines and aunt/uncle-niece/nephew pairs are always
    blocked. Half siblings and first cousins are blocked by default, step
    siblings only warn by default; see ``MarriagePolicy``.
    """

    def __init__(self, policy: MarriagePolicy | None = None) -> None:
        self.policy = policy or CONFIG.marriage

    def validate_marriage(
        self,
        first: Member,
        second: Member,
        relationship: RelationshipResult | None = None,
        sibling: SiblingInfo | None = None,
    ) -> ValidationResult:
        result = ValidationResult()
        a, b = first.display_name, second.display_name
        names = {"first_name": a, "second_name": b}

        if first.id == second.id:
            result.add_error(ErrorCode.SELF_RELATIONSHIP, "A person cannot marry themselves", **names)
            return result

        if sibling is not None and sibling.are_siblings:
            if sibling.kind == SiblingKind.FULL:
                result.add_error(
                    ErrorCode.SIBLING_MARRIAGE,
                    f"{a} and {b} cannot marry because they are full siblings.",
                    relationship_type="full siblings",
                    **names,
                )
                return result
            if sibling.kind == SiblingKind.HALF and self.policy.block_half_sibling:
                result.add_error(
                    ErrorCode.HALF_SIBLING_MARRIAGE,
                    f"{a} and {b} cannot marry because they are half-siblings.",
                    relationship_type="half siblings",
                    **names,
                )
                return result
            if sibling.kind == SiblingKind.STEP:
                if self.policy.block_step_sibling:
                    result.add_error(
                        ErrorCode.SIBLING_MARRIAGE,
                        f"{a} and {b} cannot marry because they are step-siblings.",
                        relationship_type="step siblings",
                        **names,
                    )
                else:
                    result.add_warning(
                        WarningCode.STEP_SIBLING_MARRIAGE,
                        f"{a} and {b} are step-siblings. This marriage is allowed but may be unusual.",
                        relationship_type="step siblings",
                        **names,
                    )
                return result

        if relationship is None or not relationship.are_related:
            return result

        if relationship.is_ancestor_descendant:
            generations = relationship.generations or 0
            if generations == 1:
                result.add_error(
                    ErrorCode.PARENT_CHILD_MARRIAGE,
                    f"{a} and {b} cannot marry because one is the parent of the other.",
                    relationship_type="parent-child",
                    **names,
                )
            elif generations == 2:
                result.add_error(
                    ErrorCode.GRANDPARENT_GRANDCHILD_MARRIAGE,
                    f"{a} and {b} cannot marry because one is the grandparent of the other.",
                    relationship_type="grandparent-grandchild",
                    **names,
                )
            else:
                result.add_error(
                    ErrorCode.ANCESTOR_DESCENDANT_MARRIAGE,
                    f"{a} and {b} cannot marry because one is a direct ancestor of the other "
                    f"({generations} generations apart).",
                    relationship_type=f"ancestor-descendant ({generations} generations)",
                    **names,
                )
            return result

        closest = relationship.closest_common_ancestor
        if closest is None:
            return result
        g1, g2 = closest.generation_from_first, closest.generation_from_second

        if g1 == 1 and g2 == 1:
            # Shared parent without sibling details: treat as siblings
            result.add_error(
                ErrorCode.SIBLING_MARRIAGE,
                f"{a} and {b} cannot marry because they are siblings.",
                relationship_type="siblings",
                common_ancestor_id=closest.ancestor_id,
                **names,
            )
        elif min(g1, g2) == 1:
            result.add_error(
                ErrorCode.AUNT_UNCLE_NIECE_NEPHEW_MARRIAGE,
                f"{a} and {b} cannot marry because one is the aunt/uncle of the other.",
                relationship_type="aunt/uncle and niece/nephew",
                common_ancestor_id=closest.ancestor_id,
                **names,
            )
        elif g1 == 2 and g2 == 2:
            if self.policy.block_first_cousin:
                result.add_error(
                    ErrorCode.FIRST_COUSIN_MARRIAGE,
                    f"{a} and {b} cannot marry because they are first cousins.",
                    relationship_type="first cousins",
                    common_ancestor_id=closest.ancestor_id,
                    **names,
                )
            else:
                result.add_warning(
                    WarningCode.DISTANT_RELATIVE_MARRIAGE,
                    f"{a} and {b} are first cousins. "
                    "This marriage may be restricted in some jurisdictions.",
                    relationship_type="first cousins",
                    **names,
                )
        else:
            label = collateral_label(g1, g2)
            code = (
                WarningCode.SECOND_COUSIN_MARRIAGE
                if min(g1, g2) >= 3
                else WarningCode.DISTANT_RELATIVE_MARRIAGE
            )
            result.add_warning(
                code,
                f"{a} and {b} are related ({label}). This marriage is typically allowed.",
                relationship_type=label,
                **names,
            )
        return result
