"""Tests for LineageWalker ancestor/descendant traversal."""
from __future__ import annotations

import pytest

from family_engine.exceptions import MemberNotFoundError
from family_engine.graph import LineageWalker, TraversalDirection


class TestAncestors:
    """Tests for upward walks."""

    @pytest.mark.asyncio
    async def test_ancestors_by_generation(self, family_store):
        """Test parents, grandparents and great-grandparents of mark."""
        lineage = await LineageWalker(family_store).ancestors("mark", 4)

        assert {mid: e.generation for mid, e in lineage.items()} == {
            "john": 1,
            "susan": 1,
            "george": 2,
            "mary": 2,
            "robert": 2,
            "walter": 3,
            "edith": 3,
        }
        assert lineage["walter"].relationship_label == "great-grandparent"

    @pytest.mark.asyncio
    async def test_paths_run_from_root_to_member(self, family_store):
        lineage = await LineageWalker(family_store).ancestors("mark", 4)

        assert lineage["walter"].path == ("mark", "john", "george", "walter")
        for entry in lineage.values():
            assert entry.path[0] == "mark"
            assert entry.path[-1] == entry.member_id
            assert entry.generation == len(entry.path) - 1

    @pytest.mark.asyncio
    async def test_generation_limit(self, family_store):
        lineage = await LineageWalker(family_store).ancestors("mark", 2)

        assert "walter" not in lineage
        assert all(e.generation <= 2 for e in lineage.values())
        assert lineage.max_generations == 2

    @pytest.mark.asyncio
    async def test_zero_generations_is_empty(self, family_store):
        lineage = await LineageWalker(family_store).ancestors("mark", 0)

        assert len(lineage) == 0
        assert family_store.call_counts["fetch_parent_edges"] == 0

    @pytest.mark.asyncio
    async def test_negative_generations_rejected(self, family_store):
        with pytest.raises(ValueError):
            await LineageWalker(family_store).ancestors("mark", -1)

    @pytest.mark.asyncio
    async def test_isolated_member_has_no_ancestors(self, family_store):
        lineage = await LineageWalker(family_store).ancestors("ivan")
        assert len(lineage) == 0

    @pytest.mark.asyncio
    async def test_unknown_member_raises(self, family_store):
        with pytest.raises(MemberNotFoundError) as exc_info:
            await LineageWalker(family_store).ancestors("nobody")
        assert exc_info.value.member_ids == ["nobody"]

    @pytest.mark.asyncio
    async def test_one_batched_fetch_per_level(self, family_store):
        """Test edges are fetched once per BFS level, not once per member."""
        await LineageWalker(family_store).ancestors("mark", 2)
        assert family_store.call_counts["fetch_parent_edges"] == 2


class TestDescendants:
    """Tests for downward walks."""

    @pytest.mark.asyncio
    async def test_descendants(self, family_store):
        lineage = await LineageWalker(family_store).descendants("walter", 4)

        assert lineage.direction == TraversalDirection.DOWN
        assert lineage["george"].generation == 1
        assert lineage["john"].generation == 2
        assert lineage["mark"].generation == 3
        assert lineage["lisa"].relationship_label == "great-grandchild"
        assert "mary" not in lineage

    @pytest.mark.asyncio
    async def test_fan_in_member_listed_once(self, diamond_store):
        """Test a member reachable through two parents appears once, via the first found."""
        lineage = await LineageWalker(diamond_store).descendants("d1")

        assert list(lineage) == ["d2", "d3", "d4"]
        assert lineage["d4"].generation == 2
        assert lineage["d4"].path == ("d1", "d2", "d4")


class TestCycles:
    """Tests for termination on cyclic data."""

    @pytest.mark.asyncio
    async def test_ancestor_cycle_terminates(self, cycle_store):
        lineage = await LineageWalker(cycle_store).ancestors("a", 10)

        assert {mid: e.generation for mid, e in lineage.items()} == {"c": 1, "b": 2}
        assert "a" not in lineage

    @pytest.mark.asyncio
    async def test_descendant_cycle_terminates(self, cycle_store):
        lineage = await LineageWalker(cycle_store).walk("a", "down", 10)

        assert {mid: e.generation for mid, e in lineage.items()} == {"b": 1, "c": 2}
