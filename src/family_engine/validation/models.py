"""Validation verdicts shared by the birthdate and marriage validators."""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ErrorCode(str, Enum):
    """Blocking findings: the mutation must not be committed."""
    # Birthdate plausibility
    PARENT_BORN_AFTER_CHILD = "PARENT_BORN_AFTER_CHILD"
    PARENT_BORN_SAME_TIME = "PARENT_BORN_SAME_TIME"
    PARENT_TOO_YOUNG = "PARENT_TOO_YOUNG"
    PARENT_TOO_OLD = "PARENT_TOO_OLD"

    # Graph shape
    SELF_RELATIONSHIP = "SELF_RELATIONSHIP"
    CIRCULAR_RELATIONSHIP = "CIRCULAR_RELATIONSHIP"

    # Marriage between blood relatives
    SIBLING_MARRIAGE = "SIBLING_MARRIAGE"
    HALF_SIBLING_MARRIAGE = "HALF_SIBLING_MARRIAGE"
    PARENT_CHILD_MARRIAGE = "PARENT_CHILD_MARRIAGE"
    GRANDPARENT_GRANDCHILD_MARRIAGE = "GRANDPARENT_GRANDCHILD_MARRIAGE"
    ANCESTOR_DESCENDANT_MARRIAGE = "ANCESTOR_DESCENDANT_MARRIAGE"
    AUNT_UNCLE_NIECE_NEPHEW_MARRIAGE = "AUNT_UNCLE_NIECE_NEPHEW_MARRIAGE"
    FIRST_COUSIN_MARRIAGE = "FIRST_COUSIN_MARRIAGE"


class WarningCode(str, Enum):
    """Non-blocking findings surfaced to the user."""
    UNUSUALLY_YOUNG_PARENT = "UNUSUALLY_YOUNG_PARENT"
    UNUSUALLY_OLD_PARENT = "UNUSUALLY_OLD_PARENT"
    STEP_SIBLING_MARRIAGE = "STEP_SIBLING_MARRIAGE"
    SECOND_COUSIN_MARRIAGE = "SECOND_COUSIN_MARRIAGE"
    DISTANT_RELATIVE_MARRIAGE = "DISTANT_RELATIVE_MARRIAGE"


@dataclass(frozen=True)
class ValidationIssue:
    code: ErrorCode | WarningCode
    message: str
    details: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {"code": self.code.value, "message": self.message, "details": dict(self.details)}


@dataclass
class ValidationResult:
    """Outcome of a validation: valid iff there are no errors."""

    errors: list[ValidationIssue] = field(default_factory=list)
    warnings: list[ValidationIssue] = field(default_factory=list)

    @classmethod
    def valid(cls) -> ValidationResult:
        return cls()

    @property
    def is_valid(self) -> bool:
        return not self.errors

    @property
    def error_codes(self) -> list[ErrorCode | WarningCode]:
        return [e.code for e in self.errors]

    @property
    def warning_codes(self) -> list[ErrorCode | WarningCode]:
        return [w.code for w in self.warnings]

    def add_error(self, code: ErrorCode, message: str, **details: Any) -> None:
        self.errors.append(ValidationIssue(code, message, details))

    def add_warning(self, code: WarningCode, message: str, **details: Any) -> None:
        self.warnings.append(ValidationIssue(code, message, details))

    def merge(self, other: ValidationResult) -> ValidationResult:
        """Append ``other``'s findings to this result and return it."""
        self.errors.extend(other.errors)
        self.warnings.extend(other.warnings)
        return self

    def format_errors(self) -> str:
        """Error messages as a single user-facing string."""
        return " ".join(e.message for e in self.errors)

    def to_dict(self) -> dict[str, Any]:
        return {
            "is_valid": self.is_valid,
            "errors": [e.to_dict() for e in self.errors],
            "warnings": [w.to_dict() for w in self.warnings],
        }
