"""Name and date similarity primitives for duplicate scoring.

String similarity comes from rapidfuzz (Jaro-Winkler and normalised
Levenshtein); phonetic agreement on surnames from jellyfish (Soundex and
Metaphone). All functions are case- and accent-insensitive.
"""
from __future__ import annotations

import re
import unicodedata
from datetime import date

import jellyfish
from rapidfuzz import fuzz
from rapidfuzz.distance import JaroWinkler, Levenshtein

# Floor applied to a name part that is a prefix/substring or phonetic match
PARTIAL_MATCH_FLOOR = 0.85
# Name score tiers for token-level matches
TRANSPOSED_TOKENS_SCORE = 0.95
SUBSET_TOKENS_SCORE = 0.9
# Part-by-part comparisons never reach the token-level tiers
PART_SCORE_CAP = 0.9

_PUNCT = re.compile(r"[^\w\s-]")
_SPACE = re.compile(r"[\s-]+")


def normalize_name(name: str | None) -> str:
    """Lowercase, strip accents and punctuation, collapse whitespace.

    "José  O'Neil-Smith" -> "jose oneil smith"
    """
    if not name:
        return ""
    decomposed = unicodedata.normalize("NFKD", name)
    stripped = "".join(c for c in decomposed if not unicodedata.combining(c))
    stripped = _PUNCT.sub("", stripped.lower())
    return _SPACE.sub(" ", stripped).strip()


def name_tokens(*parts: str | None) -> list[str]:
    tokens: list[str] = []
    for part in parts:
        tokens.extend(normalize_name(part).split())
    return tokens


def string_similarity(a: str, b: str) -> float:
    """Best of Jaro-Winkler and normalised Levenshtein similarity (0-1)."""
    a, b = normalize_name(a), normalize_name(b)
    if a == b:
        return 1.0
    if not a or not b:
        return 0.0
    return max(JaroWinkler.normalized_similarity(a, b), Levenshtein.normalized_similarity(a, b))


def is_partial_match(a: str, b: str) -> bool:
    """One name is a prefix or substring of the other ("Kate" / "Katherine")."""
    a, b = normalize_name(a), normalize_name(b)
    shorter, longer = sorted((a, b), key=len)
    return len(shorter) >= 3 and shorter in longer


def is_phonetic_match(a: str, b: str) -> bool:
    """Soundex or Metaphone codes agree ("Smith" / "Smyth")."""
    a, b = normalize_name(a), normalize_name(b)
    if not a or not b:
        return False
    return jellyfish.soundex(a) == jellyfish.soundex(b) or jellyfish.metaphone(a) == jellyfish.metaphone(b)


def part_similarity(a: str, b: str, phonetic: bool = False) -> float:
    """Similarity of one name part (first or last name).

    Exact matches score 1.0. Anything else is capped at ``PART_SCORE_CAP``;
    a prefix/substring match (or, with ``phonetic``, a sound-alike) is
    raised to ``PARTIAL_MATCH_FLOOR``.
    """
    score = string_similarity(a, b)
    if score >= 1.0:
        return 1.0
    if is_partial_match(a, b) or (phonetic and is_phonetic_match(a, b)):
        score = max(score, PARTIAL_MATCH_FLOOR)
    return min(score, PART_SCORE_CAP)


def name_similarity(
    first_a: str,
    last_a: str,
    first_b: str,
    last_b: str,
    middle_a: str | None = None,
    middle_b: str | None = None,
) -> tuple[float, float, float]:
    """Score two names.

    Returns:
        (name score, first-name similarity, last-name similarity)
    """
    first_score = part_similarity(first_a, first_b)
    last_score = part_similarity(last_a, last_b, phonetic=True)

    tokens_a = name_tokens(first_a, middle_a, last_a)
    tokens_b = name_tokens(first_b, middle_b, last_b)
    if not tokens_a or not tokens_b:
        return 0.0, first_score, last_score

    if tokens_a == tokens_b:
        return 1.0, first_score, last_score
    if fuzz.token_sort_ratio(" ".join(tokens_a), " ".join(tokens_b)) == 100:
        return TRANSPOSED_TOKENS_SCORE, first_score, last_score
    set_a, set_b = set(tokens_a), set(tokens_b)
    if set_a <= set_b or set_b <= set_a:
        return SUBSET_TOKENS_SCORE, first_score, last_score

    return min(first_score * last_score, PART_SCORE_CAP), first_score, last_score


def date_proximity(a: date | None, b: date | None, window_days: int) -> tuple[int | None, float | None]:
    """Days apart and a linear 1 -> 0 proximity score over ``window_days``.

    Returns ``(None, None)`` when either date is unknown.
    """
    if a is None or b is None:
        return None, None
    days = abs((a - b).days)
    if window_days <= 0:
        return days, 1.0 if days == 0 else 0.0
    if days >= window_days:
        return days, 0.0
    return days, 1.0 - days / window_days
