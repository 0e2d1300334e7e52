"""Tunable policy objects for the engine.

Defaults can be overridden through ``FAMILY_ENGINE_*`` environment variables;
every component also accepts an explicit policy instance.
"""
from __future__ import annotations

import os
from dataclasses import dataclass, field


def _f(name: str, default: float) -> float:
    try:
        return float(os.getenv(name, default))
    except (TypeError, ValueError):
        return default


def _i(name: str, default: int) -> int:
    try:
        return int(os.getenv(name, default))
    except (TypeError, ValueError):
        return default


def _b(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class PlausibilityPolicy:
    """Age limits for a parent at the birth of a child, in whole years."""

    min_parent_age: int = field(default_factory=lambda: _i("FAMILY_ENGINE_MIN_PARENT_AGE", 12))
    max_parent_age: int = field(default_factory=lambda: _i("FAMILY_ENGINE_MAX_PARENT_AGE", 80))
    # Soft band: below / above these ages a warning is attached
    young_parent_warning_below: int = field(
        default_factory=lambda: _i("FAMILY_ENGINE_YOUNG_PARENT_WARNING", 18)
    )
    old_parent_warning_above: int = field(
        default_factory=lambda: _i("FAMILY_ENGINE_OLD_PARENT_WARNING", 60)
    )


@dataclass(frozen=True)
class MarriagePolicy:
    block_half_sibling: bool = field(
        default_factory=lambda: _b("FAMILY_ENGINE_BLOCK_HALF_SIBLING_MARRIAGE", True)
    )
    block_step_sibling: bool = field(
        default_factory=lambda: _b("FAMILY_ENGINE_BLOCK_STEP_SIBLING_MARRIAGE", False)
    )
    block_first_cousin: bool = field(
        default_factory=lambda: _b("FAMILY_ENGINE_BLOCK_FIRST_COUSIN_MARRIAGE", True)
    )


@dataclass(frozen=True)
class DuplicatePolicy:
    """Thresholds and weights for duplicate scoring.

    ``name_weight`` and ``date_weight`` should sum to 1.0 so that an
    identical name and birthdate score exactly 1.0.
    """

    name_match_threshold: float = field(
        default_factory=lambda: _f("FAMILY_ENGINE_NAME_MATCH_THRESHOLD", 0.75)
    )
    date_match_threshold: float = field(
        default_factory=lambda: _f("FAMILY_ENGINE_DATE_MATCH_THRESHOLD", 0.5)
    )
    date_window_days: int = field(default_factory=lambda: _i("FAMILY_ENGINE_DATE_WINDOW_DAYS", 365))
    name_weight: float = field(default_factory=lambda: _f("FAMILY_ENGINE_NAME_WEIGHT", 0.7))
    date_weight: float = field(default_factory=lambda: _f("FAMILY_ENGINE_DATE_WEIGHT", 0.3))
    low_threshold: float = field(default_factory=lambda: _f("FAMILY_ENGINE_DUPLICATE_LOW", 0.6))
    medium_threshold: float = field(default_factory=lambda: _f("FAMILY_ENGINE_DUPLICATE_MEDIUM", 0.75))
    high_threshold: float = field(default_factory=lambda: _f("FAMILY_ENGINE_DUPLICATE_HIGH", 0.85))
    max_candidates: int = field(default_factory=lambda: _i("FAMILY_ENGINE_MAX_DUPLICATES", 5))


@dataclass(frozen=True)
class EngineConfig:
    max_generations: int = field(default_factory=lambda: _i("FAMILY_ENGINE_MAX_GENERATIONS", 4))
    plausibility: PlausibilityPolicy = field(default_factory=PlausibilityPolicy)
    marriage: MarriagePolicy = field(default_factory=MarriagePolicy)
    duplicates: DuplicatePolicy = field(default_factory=DuplicatePolicy)


CONFIG = EngineConfig()
