"""Member and edge records supplied to the engine by the tree store.

The engine references members by id only; these models carry just the
fields the relationship, plausibility and duplicate logic read, plus the
free-text fields the surrounding application stores alongside them.
"""
from __future__ import annotations

from datetime import date
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class Gender(str, Enum):
    MALE = "male"
    FEMALE = "female"
    OTHER = "other"


class ParentChildType(str, Enum):
    """Kind of parent-child link."""
    BIOLOGICAL = "biological"
    ADOPTED = "adopted"
    STEP = "step"
    FOSTER = "foster"


class MarriageStatus(str, Enum):
    MARRIED = "married"
    DIVORCED = "divorced"
    WIDOWED = "widowed"
    SEPARATED = "separated"
    ANNULLED = "annulled"


def parse_iso_date(value: Any) -> date | None:
    """Parse an ISO calendar date, returning None for missing or bad input.

    Accepts ``date`` objects, ``YYYY-MM-DD`` strings and full ISO datetime
    strings (the time part is dropped).
    """
    if value is None:
        return None
    if isinstance(value, date):
        return value if type(value) is date else date(value.year, value.month, value.day)
    if not isinstance(value, str):
        return None
    text = value.strip()
    if not text:
        return None
    try:
        return date.fromisoformat(text[:10])
    except ValueError:
        return None


class Member(BaseModel):
    """A person in a family tree."""

    model_config = ConfigDict(frozen=True)

    id: str
    tree_id: str | None = None
    first_name: str
    middle_name: str | None = None
    last_name: str = ""
    gender: Gender | None = None
    birth_date: date | None = None
    death_date: date | None = None

    # Free text, never read by the engine
    nickname: str | None = None
    birth_place: str | None = None
    death_place: str | None = None
    bio: str | None = None

    @field_validator("birth_date", "death_date", mode="before")
    @classmethod
    def _lenient_date(cls, value: Any) -> date | None:
        # Unknown and unparsable dates are both treated as "not known"
        return parse_iso_date(value)

    @field_validator("gender", mode="before")
    @classmethod
    def _lenient_gender(cls, value: Any) -> Any:
        if isinstance(value, str):
            value = value.strip().lower() or None
        return value

    @property
    def full_name(self) -> str:
        parts = [self.first_name, self.middle_name, self.last_name]
        return " ".join(p.strip() for p in parts if p and p.strip())

    @property
    def display_name(self) -> str:
        """First and last name, as used in validation messages."""
        return f"{self.first_name} {self.last_name}".strip()

    def with_birth_date(self, birth_date: date | str | None) -> Member:
        """Copy of this member carrying a different birthdate."""
        return self.model_copy(update={"birth_date": parse_iso_date(birth_date)})


class ParentChildEdge(BaseModel):
    """Directed parent -> child link."""

    model_config = ConfigDict(frozen=True)

    parent_id: str
    child_id: str
    relationship_type: ParentChildType = ParentChildType.BIOLOGICAL
    tree_id: str | None = None

    @model_validator(mode="after")
    def _not_self(self) -> ParentChildEdge:
        if self.parent_id == self.child_id:
            raise ValueError("A member cannot be their own parent")
        return self


class MarriageEdge(BaseModel):
    """Undirected marriage link between two members."""

    model_config = ConfigDict(frozen=True)

    spouse1_id: str
    spouse2_id: str
    status: MarriageStatus = MarriageStatus.MARRIED
    marriage_date: date | None = None
    divorce_date: date | None = None
    marriage_place: str | None = Field(default=None)
    tree_id: str | None = None

    @field_validator("marriage_date", "divorce_date", mode="before")
    @classmethod
    def _lenient_date(cls, value: Any) -> date | None:
        return parse_iso_date(value)

    @model_validator(mode="after")
    def _not_self(self) -> MarriageEdge:
        if self.spouse1_id == self.spouse2_id:
            raise ValueError("A member cannot marry themselves")
        return self

    def involves(self, member_id: str) -> bool:
        return member_id in (self.spouse1_id, self.spouse2_id)

    def other_spouse(self, member_id: str) -> str:
        """Return the spouse on the other side of this marriage."""
        if member_id == self.spouse1_id:
            return self.spouse2_id
        if member_id == self.spouse2_id:
            return self.spouse1_id
        raise ValueError(f"Member {member_id} is not part of this marriage")
