"""Consistency checks run before a relationship or birthdate is committed."""
from .birthdate import BirthdatePlausibilityValidator, age_gap
from .marriage import MarriageValidator
from .models import ErrorCode, ValidationIssue, ValidationResult, WarningCode

__all__ = [
    "BirthdatePlausibilityValidator",
    "MarriageValidator",
    "ValidationIssue",
    "ValidationResult",
    "ErrorCode",
    "WarningCode",
    "age_gap",
]
