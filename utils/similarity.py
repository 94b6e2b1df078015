"""
Similarity scoring between spec labels.

Scores run 0-100, built from cheapest to most expensive check:
exact, abbreviation-expanded, containment, token overlap, and finally edit
distance on short strings only.
"""

from rapidfuzz.distance import Levenshtein

from config.smart_paste import (
    STOP_WORDS,
    SCORE_EXACT,
    SCORE_ALIAS_EXPANSION,
    SCORE_CONTAINMENT_HIGH,
    SCORE_CONTAINMENT_LOW,
    SCORE_SINGLE_LONG_WORD,
    SCORE_SINGLE_MEDIUM_WORD,
)
from utils.text_utils import normalize, expand_abbreviations, round_half_up

# Edit distance is only attempted on strings this short
SHORT_STRING_MAX = 20


def levenshtein(a: str, b: str) -> int:
    """Unit-cost edit distance (insert, delete, substitute)."""
    return Levenshtein.distance(a, b)


def _significant_tokens(text: str) -> list[str]:
    return [w for w in text.split(" ") if len(w) > 2 and w not in STOP_WORDS]


def _containment_score(a: str, b: str) -> float | None:
    """Score when one string fully contains the other (left unrounded)."""
    if len(b) >= 4 and b in a and len(b) / len(a) > 0.4:
        return SCORE_CONTAINMENT_HIGH + min(10, len(b) / len(a) * 10)
    if len(a) >= 4 and a in b and len(a) / len(b) > 0.4:
        return SCORE_CONTAINMENT_LOW + min(10, len(a) / len(b) * 10)
    return None


def _token_overlap_score(a: str, b: str) -> int | None:
    """
    Score by shared significant tokens.

    Exact shared tokens count 1, near matches (distance 1, both tokens 5+
    chars) count 0.8. Each token on the right side is used at most once.
    """
    words_a = _significant_tokens(a)
    words_b = _significant_tokens(b)
    if not words_a or not words_b:
        return None

    exact_shared = 0
    fuzzy_shared = 0
    used_b: set[int] = set()

    for wa in words_a:
        exact_idx = next(
            (i for i, wb in enumerate(words_b) if i not in used_b and wb == wa),
            None
        )
        if exact_idx is not None:
            exact_shared += 1
            used_b.add(exact_idx)
            continue

        if len(wa) >= 5:
            fuzzy_idx = next(
                (
                    i for i, wb in enumerate(words_b)
                    if i not in used_b and len(wb) >= 5 and levenshtein(wa, wb) <= 1
                ),
                None
            )
            if fuzzy_idx is not None:
                fuzzy_shared += 1
                used_b.add(fuzzy_idx)

    total_shared = exact_shared + fuzzy_shared * 0.8
    overlap_ratio = total_shared / max(len(words_a), len(words_b))

    if overlap_ratio >= 0.5:
        bonus = 5 if exact_shared > fuzzy_shared else 0
        return round_half_up(50 + overlap_ratio * 35 + bonus)

    if exact_shared == 1:
        shared = [w for w in words_a if w in words_b]
        if any(len(w) >= 7 for w in shared):
            return SCORE_SINGLE_LONG_WORD
        if any(len(w) >= 5 for w in shared):
            return SCORE_SINGLE_MEDIUM_WORD

    return None


def similarity_score(source: str, target: str) -> float:
    """
    Calculate similarity between two labels (0-100).

    Tiers:
        100     identical after normalize()
        97      identical after abbreviation expansion
        80-95   one contains the other (length ratio > 0.4)
        50-90   significant token overlap (ratio >= 0.5)
        55/50   a single shared long/medium token
        40-60   short strings within edit-distance ratio 0.7
        0       otherwise

    Args:
        source: Raw or normalized label
        target: Raw or normalized label

    Returns:
        Score in [0, 100]. Containment scores stay fractional so the
        caller rounds once, after any boost.
    """
    a = normalize(source)
    b = normalize(target)
    if not a or not b:
        return 0
    if a == b:
        return SCORE_EXACT

    a_exp = expand_abbreviations(a)
    b_exp = expand_abbreviations(b)
    if a_exp == b_exp:
        return SCORE_ALIAS_EXPANSION

    score = _containment_score(a_exp, b_exp)
    if score is not None:
        return score

    score = _token_overlap_score(a_exp, b_exp)
    if score is not None:
        return score

    if len(a_exp) <= SHORT_STRING_MAX and len(b_exp) <= SHORT_STRING_MAX:
        ratio = 1 - levenshtein(a_exp, b_exp) / max(len(a_exp), len(b_exp))
        if ratio >= 0.7:
            return round_half_up(40 + ratio * 20)

    return 0
