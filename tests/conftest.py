"""Shared fixture trees for engine tests.

The ``family`` tree (tree id ``t1``)::

    walter (1890) == edith (1892)
        |
        +-- george (1915) == mary (1917)        helen (1918) == frank (1916)
        |       |                                       |
        |       +-- john (1940) == susan (1942)         +-- paul (1945) == carol (1946)
        |       |       |                                       |
        |       |       +-- mark (1968)                         +-- lisa (1970)
        |       +-- anne (1943)
        |       +-- ellen (1946)   (george only: half sibling of john)
        |       +-- sam (1941)     (step child of mary)

    robert (1915) -> susan
    ivan: no edges
    x1 -> x2 -> x3: no birthdates
"""
from __future__ import annotations

import pytest

from family_engine.graph import InMemoryMemberStore
from family_engine.models import MarriageEdge, Member, ParentChildEdge, ParentChildType


def make_member(member_id: str, first: str, last: str, birth: str | None = None, **kwargs) -> Member:
    return Member(
        id=member_id,
        tree_id=kwargs.pop("tree_id", "t1"),
        first_name=first,
        last_name=last,
        birth_date=birth,
        **kwargs,
    )


FAMILY_MEMBERS = [
    ("walter", "Walter", "Reed", "1890-03-01"),
    ("edith", "Edith", "Reed", "1892-07-15"),
    ("george", "George", "Reed", "1915-06-10"),
    ("mary", "Mary", "Carter", "1917-09-20"),
    ("helen", "Helen", "Reed", "1918-02-02"),
    ("frank", "Frank", "Lowe", "1916-11-11"),
    ("john", "John", "Reed", "1940-05-05"),
    ("anne", "Anne", "Reed", "1943-08-08"),
    ("ellen", "Ellen", "Reed", "1946-01-20"),
    ("sam", "Sam", "Price", "1941-04-04"),
    ("susan", "Susan", "Hill", "1942-12-12"),
    ("robert", "Robert", "Hill", "1915-03-03"),
    ("paul", "Paul", "Lowe", "1945-10-10"),
    ("carol", "Carol", "Lowe", "1946-06-06"),
    ("mark", "Mark", "Reed", "1968-07-07"),
    ("lisa", "Lisa", "Lowe", "1970-02-14"),
    ("ivan", "Ivan", "Solo", None),
    ("x1", "Xena", "Alpha", None),
    ("x2", "Xavier", "Beta", None),
    ("x3", "Xander", "Gamma", None),
]

FAMILY_EDGES = [
    ("walter", "george"),
    ("edith", "george"),
    ("walter", "helen"),
    ("edith", "helen"),
    ("george", "john"),
    ("mary", "john"),
    ("george", "anne"),
    ("mary", "anne"),
    ("george", "ellen"),
    ("helen", "paul"),
    ("frank", "paul"),
    ("john", "mark"),
    ("susan", "mark"),
    ("robert", "susan"),
    ("paul", "lisa"),
    ("carol", "lisa"),
    ("x1", "x2"),
    ("x2", "x3"),
]

FAMILY_MARRIAGES = [
    ("walter", "edith"),
    ("george", "mary"),
    ("helen", "frank"),
    ("john", "susan"),
    ("paul", "carol"),
]


def build_family_store() -> InMemoryMemberStore:
    store = InMemoryMemberStore()
    for member_id, first, last, birth in FAMILY_MEMBERS:
        store.add_member(make_member(member_id, first, last, birth))
    for parent_id, child_id in FAMILY_EDGES:
        store.add_edge(ParentChildEdge(parent_id=parent_id, child_id=child_id, tree_id="t1"))
    store.add_edge(
        ParentChildEdge(
            parent_id="mary",
            child_id="sam",
            relationship_type=ParentChildType.STEP,
            tree_id="t1",
        )
    )
    for a, b in FAMILY_MARRIAGES:
        store.add_marriage(MarriageEdge(spouse1_id=a, spouse2_id=b, tree_id="t1"))
    return store


@pytest.fixture
def family_store() -> InMemoryMemberStore:
    return build_family_store()


@pytest.fixture
def cycle_store() -> InMemoryMemberStore:
    """a -> b -> c -> a (bad data entry)."""
    store = InMemoryMemberStore(
        members=[make_member(i, i.upper(), "Loop") for i in ("a", "b", "c")],
        edges=[
            ParentChildEdge(parent_id="a", child_id="b"),
            ParentChildEdge(parent_id="b", child_id="c"),
            ParentChildEdge(parent_id="c", child_id="a"),
        ],
    )
    return store


@pytest.fixture
def diamond_store() -> InMemoryMemberStore:
    """d1 is parent of d2 and d3, who are both parents of d4."""
    return InMemoryMemberStore(
        members=[make_member(i, i.upper(), "Diamond") for i in ("d1", "d2", "d3", "d4")],
        edges=[
            ParentChildEdge(parent_id="d1", child_id="d2"),
            ParentChildEdge(parent_id="d1", child_id="d3"),
            ParentChildEdge(parent_id="d2", child_id="d4"),
            ParentChildEdge(parent_id="d3", child_id="d4"),
        ],
    )
