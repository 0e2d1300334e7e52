from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from family_engine.validation.models import ValidationResult


class FamilyEngineError(Exception):
    """Base class for errors raised by the engine."""


class MemberNotFoundError(FamilyEngineError, LookupError):
    """Raised when a traversal or classification references unknown members."""

    def __init__(self, member_ids: Iterable[str]) -> None:
        self.member_ids = list(member_ids)
        joined = ", ".join(self.member_ids)
        super().__init__(f"Family member not found: {joined}")


@dataclass(eq=False)
class RelationshipRejectedError(FamilyEngineError):
    """Raised when a proposed edge or edit fails a blocking validation.

    The caller must not commit the mutation that triggered it.
    """

    reason: str
    code: str = "VALIDATION_FAILED"
    validation_result: ValidationResult | None = None

    def __str__(self) -> str:  # pragma: no cover - human readable
        return f"{self.code}: {self.reason}"


class DuplicateCheckUnavailableError(FamilyEngineError):
    """Raised when existing members cannot be loaded for duplicate scoring."""

    def __init__(self, tree_id: str, cause: BaseException) -> None:
        self.tree_id = tree_id
        self.cause = cause
        super().__init__(f"Duplicate check unavailable for tree {tree_id}: {cause}")
