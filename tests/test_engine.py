"""Tests for the FamilyGraphEngine facade."""
from __future__ import annotations

import pytest
from conftest import build_family_store, make_member

from family_engine import FamilyGraphEngine
from family_engine.dedupe import CandidateAttributes, DuplicateSeverity
from family_engine.exceptions import (
    DuplicateCheckUnavailableError,
    MemberNotFoundError,
    RelationshipRejectedError,
)
from family_engine.graph import InMemoryMemberStore, KinshipCategory, SiblingKind
from family_engine.validation import ErrorCode


class UnreachableStore(InMemoryMemberStore):
    """Store whose tree listing always fails."""

    async def fetch_members_in_tree(self, tree_id):
        raise ConnectionError("database unavailable")


@pytest.fixture
def engine(family_store):
    return FamilyGraphEngine(family_store)


class TestParentChildEdge:
    """Tests for proposed parent -> child edges."""

    @pytest.mark.asyncio
    async def test_plausible_edge(self, engine):
        result = await engine.check_parent_child_edge("mark", "ivan")
        assert result.is_valid

    @pytest.mark.asyncio
    async def test_guard_returns_result_when_valid(self, engine):
        result = await engine.guard_parent_child_edge("mark", "ivan")
        assert result.errors == []

    @pytest.mark.asyncio
    async def test_parent_born_after_child_rejected(self, engine):
        with pytest.raises(RelationshipRejectedError) as exc_info:
            await engine.guard_parent_child_edge("mark", "walter")

        error = exc_info.value
        assert error.code == "PARENT_BORN_AFTER_CHILD"
        assert "born after the child" in error.reason
        assert error.validation_result.error_codes == [ErrorCode.PARENT_BORN_AFTER_CHILD]

    @pytest.mark.asyncio
    async def test_cycle_rejected(self, engine):
        """Test an undated edge that would make a member their own ancestor."""
        result = await engine.check_parent_child_edge("x3", "x1")
        assert result.error_codes == [ErrorCode.CIRCULAR_RELATIONSHIP]

        with pytest.raises(RelationshipRejectedError) as exc_info:
            await engine.guard_parent_child_edge("x3", "x1")
        assert exc_info.value.code == "CIRCULAR_RELATIONSHIP"

    @pytest.mark.asyncio
    async def test_self_edge(self, engine):
        result = await engine.check_parent_child_edge("mark", "mark")
        assert result.error_codes == [ErrorCode.SELF_RELATIONSHIP]

    @pytest.mark.asyncio
    async def test_unknown_member(self, engine):
        with pytest.raises(MemberNotFoundError) as exc_info:
            await engine.check_parent_child_edge("mark", "ghost")
        assert exc_info.value.member_ids == ["ghost"]


class TestBirthdateChange:
    """Tests for re-validating an edited birthdate against the stored graph."""

    @pytest.mark.asyncio
    async def test_plausible_change(self, engine):
        result = await engine.check_birthdate_change("george", "1914-01-01")
        assert result.is_valid

    @pytest.mark.asyncio
    async def test_every_child_is_checked(self, engine):
        result = await engine.check_birthdate_change("george", "1935-01-01")

        assert result.error_codes == [ErrorCode.PARENT_TOO_YOUNG] * 3
        assert {e.details["child_name"] for e in result.errors} == {"John Reed", "Anne Reed", "Ellen Reed"}

    @pytest.mark.asyncio
    async def test_guard_raises(self, engine):
        with pytest.raises(RelationshipRejectedError) as exc_info:
            await engine.guard_birthdate_change("george", "1935-01-01")
        assert exc_info.value.code == "PARENT_TOO_YOUNG"

    @pytest.mark.asyncio
    async def test_cleared_birthdate(self, engine):
        assert (await engine.check_birthdate_change("george", None)).is_valid


class TestMarriage:
    """Tests for marriage checks through the engine."""

    @pytest.mark.asyncio
    async def test_siblings_blocked(self, engine):
        with pytest.raises(RelationshipRejectedError) as exc_info:
            await engine.guard_marriage("john", "anne")
        assert exc_info.value.code == "SIBLING_MARRIAGE"

    @pytest.mark.asyncio
    async def test_unrelated_allowed(self, engine):
        result = await engine.guard_marriage("john", "robert")
        assert result.is_valid

    @pytest.mark.asyncio
    async def test_self_marriage(self, engine):
        result = await engine.check_marriage("john", "john")
        assert result.error_codes == [ErrorCode.SELF_RELATIONSHIP]


class TestRelationships:
    """Tests for traversal and classification pass-throughs."""

    @pytest.mark.asyncio
    async def test_ancestors_use_configured_depth(self, engine):
        lineage = await engine.compute_ancestors("mark")
        assert lineage.max_generations == engine.config.max_generations
        assert "walter" in lineage

    @pytest.mark.asyncio
    async def test_descendants(self, engine):
        lineage = await engine.compute_descendants("george", 1)
        assert set(lineage) == {"john", "anne", "ellen"}

    @pytest.mark.asyncio
    async def test_describe_relationship(self, engine):
        label = await engine.describe_relationship("john", "robert")
        assert label.relationship == "parent-in-law"

    @pytest.mark.asyncio
    async def test_classify_and_siblings(self, engine):
        result = await engine.classify_relationship("john", "paul")
        assert result.cousin_degree == 1
        assert await engine.shared_parents("john", "anne") == ["george", "mary"]
        assert (await engine.sibling_info("john", "ellen")).are_siblings

    @pytest.mark.asyncio
    async def test_describe_sibling_kinds(self, engine):
        assert (await engine.describe_relationship("john", "ellen")).relationship == "half-sibling"
        step = await engine.describe_relationship("john", "sam")
        assert step.relationship == "step-sibling"
        assert step.is_blood_relative is False

    @pytest.mark.asyncio
    async def test_find_siblings(self, engine):
        siblings = await engine.find_siblings("john")
        assert {s.sibling_id: s.kind for s in siblings} == {
            "anne": SiblingKind.FULL,
            "ellen": SiblingKind.HALF,
            "sam": SiblingKind.STEP,
        }


class TestInferAllRelationships:
    """Tests for labelling a whole tree relative to one member."""

    @pytest.mark.asyncio
    async def test_closest_first(self, engine):
        relationships = await engine.infer_all_relationships("john", "t1")
        first = [(r.member_id, r.label.relationship) for r in relationships.related[:4]]
        assert first == [("mark", "child"), ("george", "parent"), ("mary", "parent"), ("susan", "spouse")]

    @pytest.mark.asyncio
    async def test_grouped_by_category(self, engine):
        grouped = (await engine.infer_all_relationships("john", "t1")).by_category()
        ids = {category: {r.member_id for r in members} for category, members in grouped.items()}

        assert ids[KinshipCategory.SPOUSE] == {"susan"}
        assert ids[KinshipCategory.SIBLING] == {"anne", "ellen", "sam"}
        assert ids[KinshipCategory.ANCESTOR] == {"george", "mary", "walter", "edith"}
        assert ids[KinshipCategory.DESCENDANT] == {"mark"}
        assert ids[KinshipCategory.COLLATERAL] == {"helen", "paul", "lisa"}
        assert {"robert", "frank", "carol"} <= ids[KinshipCategory.IN_LAW]

    @pytest.mark.asyncio
    async def test_in_law_labels(self, engine):
        relationships = await engine.infer_all_relationships("john", "t1")
        labels = {r.member_id: r.label.relationship for r in relationships.in_category("in_law")}
        assert labels["robert"] == "parent-in-law"
        assert labels["frank"] == "aunt/uncle-in-law"
        assert labels["carol"] == "first cousin-in-law"

    @pytest.mark.asyncio
    async def test_unrelated_members_left_out(self, engine):
        relationships = await engine.infer_all_relationships("john", "t1")
        ids = {r.member_id for r in relationships.related}
        assert ids.isdisjoint({"john", "ivan", "x1", "x2", "x3"})
        assert len(relationships) == len(ids)

    @pytest.mark.asyncio
    async def test_to_dict(self, engine):
        payload = (await engine.infer_all_relationships("john", "t1")).to_dict()
        assert payload["member_id"] == "john"
        assert payload["by_category"]["spouse"][0]["member_id"] == "susan"

    @pytest.mark.asyncio
    async def test_unknown_member(self, engine):
        with pytest.raises(MemberNotFoundError):
            await engine.infer_all_relationships("ghost", "t1")


class TestRelationshipSummary:
    """Tests for pairwise relationship counts across a tree."""

    @pytest.mark.asyncio
    async def test_counts(self, engine):
        summary = await engine.relationship_summary("t1")

        assert summary.total_members == 20
        assert summary.relationship_counts["spouse"] == 5
        assert summary.in_laws > 0
        assert summary.blood_relatives > 0

    @pytest.mark.asyncio
    async def test_pairs_in_category(self, engine):
        summary = await engine.relationship_summary("t1")
        siblings = {(a, b): label.relationship for a, b, label in summary.pairs_in_category("sibling")}

        assert siblings[("anne", "john")] == "sibling"
        assert siblings[("ellen", "john")] == "half-sibling"
        assert siblings[("john", "sam")] == "step-sibling"
        assert ("ellen", "sam") not in siblings

    @pytest.mark.asyncio
    async def test_empty_tree(self, engine):
        summary = await engine.relationship_summary("other")
        assert summary.total_members == 0
        assert summary.relationship_counts == {}


class TestDuplicates:
    """Tests for tree-wide duplicate screening."""

    @pytest.mark.asyncio
    async def test_detect_in_tree(self, engine):
        candidate = CandidateAttributes(first_name="John", last_name="Reed", birth_date="1940-05-05")
        result = await engine.detect_duplicates_in_tree("t1", candidate)

        assert result.candidates[0].member_id == "john"
        assert result.highest_severity == DuplicateSeverity.HIGH

    @pytest.mark.asyncio
    async def test_excluding_the_edited_member(self, engine):
        candidate = CandidateAttributes(first_name="John", last_name="Reed", birth_date="1940-05-05")
        result = await engine.detect_duplicates_in_tree("t1", candidate, exclude_member_ids=["john"])
        assert "john" not in [c.member_id for c in result.candidates]

    @pytest.mark.asyncio
    async def test_other_tree_is_empty(self, engine):
        candidate = CandidateAttributes(first_name="John", last_name="Reed")
        result = await engine.detect_duplicates_in_tree("t2", candidate)
        assert not result.has_potential_duplicates

    @pytest.mark.asyncio
    async def test_store_failure_surfaces_as_unavailable(self):
        engine = FamilyGraphEngine(UnreachableStore(members=build_family_store().members))
        candidate = CandidateAttributes(first_name="John", last_name="Reed")

        with pytest.raises(DuplicateCheckUnavailableError) as exc_info:
            await engine.detect_duplicates_in_tree("t1", candidate)
        assert exc_info.value.tree_id == "t1"
        assert isinstance(exc_info.value.cause, ConnectionError)

    @pytest.mark.asyncio
    async def test_screening_never_blocks(self):
        engine = FamilyGraphEngine(UnreachableStore())
        candidate = CandidateAttributes(first_name="John", last_name="Reed")
        assert await engine.screen_new_member("t1", candidate) is None


class TestPureValidation:
    """Tests for the store-free entry points."""

    def test_validate_new_edge(self, engine):
        parent = make_member("p", "Ann", "Lee", "1990-01-01")
        child = make_member("c", "Ben", "Lee", "1980-01-01")
        assert engine.validate_new_edge(parent, child).error_codes == [ErrorCode.PARENT_BORN_AFTER_CHILD]

    def test_validate_member_birthdate_change(self, engine):
        member = make_member("m", "Carl", "Ray", "1950-01-01")
        child = make_member("k", "Fay", "Ray", "1975-01-01")
        result = engine.validate_member_birthdate_change(member, "1970-01-01", [], [child])
        assert result.error_codes == [ErrorCode.PARENT_TOO_YOUNG]

    def test_detect_duplicates(self, engine):
        existing = [make_member("m1", "John", "Smith", "1950-01-01")]
        result = engine.detect_duplicates(CandidateAttributes(first_name="John", last_name="Smith"), existing)
        assert result.candidates[0].member_id == "m1"
