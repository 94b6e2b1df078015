"""
Field resolver service.

Maps raw pairs onto spec fields and picks one value per field.

Pass 1 (direct): exact lookup of the normalized (or abbreviation-expanded)
key in the alias index. Confidence is the alias priority.

Pass 2 (fuzzy): pairs left over are scored against every spec name and
every alias. Scores below threshold are dropped; a category penalty
applies when the spec belongs to a different category than the one
detected for the product. The best score per spec field is kept.

Pass 3 (resolve): per field, sort by confidence, dedupe values, merge
comparable direct matches, flag conflicts and check value ranges.
"""

from typing import Optional

import structlog

from config.smart_paste import (
    SHARED_FIELDS,
    FUZZY_MINIMUM,
    FUZZY_ALIAS_MINIMUM,
    FUZZY_CAP,
    CATEGORY_PENALTY,
    DIRECT_MATCH,
    MERGE_RANGE,
    CONFLICT_DIFF_THRESHOLD,
    VALUE_RANGES,
)
from models.smart_paste import Candidate, RawPair, ResolvedField
from services.alias_index_service import AliasIndex
from utils.similarity import similarity_score
from utils.text_utils import normalize, expand_abbreviations, parse_number, round_half_up

logger = structlog.get_logger(__name__)

CandidateMap = dict[str, list[Candidate]]


def _apply_category_penalty(
    score: float,
    spec_name: str,
    index: AliasIndex,
    detected_category: str,
) -> float:
    spec_category = index.spec_categories.get(spec_name)
    if (
        detected_category
        and spec_category
        and spec_category != detected_category
        and spec_name not in SHARED_FIELDS
    ):
        return max(0, score - CATEGORY_PENALTY)
    return score


def _fuzzy_scores(
    key: str,
    index: AliasIndex,
    detected_category: str,
) -> dict[str, float]:
    """Best adjusted fuzzy score per spec name for one pair key."""
    key_norm = normalize(key)
    key_exp = expand_abbreviations(key_norm)
    best: dict[str, float] = {}

    def keep(spec_name: str, score: float) -> None:
        if score >= FUZZY_MINIMUM and score > best.get(spec_name, -1):
            best[spec_name] = score

    for spec_name in index.spec_names:
        spec_norm = normalize(spec_name)
        spec_exp = expand_abbreviations(spec_norm)
        score = max(similarity_score(key_norm, spec_norm), similarity_score(key_exp, spec_exp))
        if score >= FUZZY_MINIMUM:
            keep(spec_name, _apply_category_penalty(score, spec_name, index, detected_category))

    for alias, entry in index.aliases.items():
        alias_exp = expand_abbreviations(alias)
        score = max(similarity_score(key_norm, alias), similarity_score(key_exp, alias_exp))
        if score >= FUZZY_ALIAS_MINIMUM:
            boosted = min(FUZZY_CAP, score + (entry.priority - 50) * 0.15)
            keep(entry.spec_name, _apply_category_penalty(boosted, entry.spec_name, index, detected_category))

    return best


def match_fields(
    pairs: list[RawPair],
    index: AliasIndex,
    detected_category: str = "",
) -> tuple[CandidateMap, set[int]]:
    """
    Collect candidates per spec field (direct pass, then fuzzy pass).

    Args:
        pairs: Raw pairs in extraction order
        index: Alias index for the schema
        detected_category: Category detected for the product ("" if none)

    Returns:
        Tuple of (spec name -> candidates, indices of pairs that matched)
    """
    candidates: CandidateMap = {name: [] for name in index.spec_names}
    matched: set[int] = set()

    # Pass 1: direct alias lookups
    for idx, pair in enumerate(pairs):
        key_norm = normalize(pair.key)
        entry = index.lookup(key_norm) or index.lookup(expand_abbreviations(key_norm))
        if entry is None:
            continue
        candidates.setdefault(entry.spec_name, []).append(Candidate(
            value=pair.value,
            confidence=entry.priority,
            source_key=pair.key,
            line_index=pair.line_index,
        ))
        matched.add(idx)

    direct_count = len(matched)

    # Pass 2: fuzzy matching for what is left
    for idx, pair in enumerate(pairs):
        if idx in matched:
            continue
        scores = _fuzzy_scores(pair.key, index, detected_category)
        if not scores:
            continue
        for spec_name, score in scores.items():
            candidates.setdefault(spec_name, []).append(Candidate(
                value=pair.value,
                confidence=round_half_up(score),
                source_key=pair.key,
                line_index=pair.line_index,
            ))
        matched.add(idx)

    logger.debug(
        "fields_matched",
        pairs=len(pairs),
        direct=direct_count,
        fuzzy=len(matched) - direct_count,
        unmatched=len(pairs) - len(matched),
    )
    return candidates, matched


def validate_field_value(spec_name: str, value: str) -> Optional[str]:
    """
    Soft sanity check of a numeric field value.

    Returns:
        Warning text when the number falls outside the expected range, else None.
        Values without a parseable number never warn.
    """
    rule = VALUE_RANGES.get(spec_name)
    if not rule or not value:
        return None

    match = rule["pattern"].search(value)
    if not match:
        return None

    if "integer_max" in rule:
        digits = match.group(0).replace(",", "")
        if not digits:
            return None
        number = int(digits)
        return None if 0 < number <= rule["integer_max"] else rule["warn"]

    number = parse_number(match.group(rule.get("group", 0)))
    if number is None:
        return None
    if "min" in rule and number < rule["min"]:
        return rule["warn"]
    if "max" in rule and number > rule["max"]:
        return rule["warn"]
    return None


def _dedupe(candidates: list[Candidate]) -> list[Candidate]:
    """Drop repeated values (case/whitespace-insensitive), keeping the first."""
    seen: set[str] = set()
    deduped = []
    for candidate in candidates:
        key = candidate.value.lower().strip()
        if key in seen:
            continue
        seen.add(key)
        deduped.append(candidate)
    return deduped


def _merge_direct(deduped: list[Candidate]) -> Optional[dict]:
    direct = [c for c in deduped if c.confidence >= DIRECT_MATCH]
    if len(direct) < 2:
        return None
    confidences = [c.confidence for c in direct]
    if max(confidences) - min(confidences) > MERGE_RANGE:
        return None
    return {
        "value": ", ".join(c.value for c in direct),
        "confidence": round_half_up(sum(confidences) / len(direct)),
        "source_key": " + ".join(c.source_key for c in direct),
        "line_index": direct[0].line_index,
        "merged_count": len(direct),
    }


def _has_conflict(deduped: list[Candidate]) -> bool:
    if len(deduped) < 2:
        return False
    first, second = deduped[0], deduped[1]
    return (
        abs(first.confidence - second.confidence) <= CONFLICT_DIFF_THRESHOLD
        and first.confidence >= FUZZY_MINIMUM
        and second.confidence >= FUZZY_MINIMUM
    )


def resolve_fields(candidate_map: CandidateMap) -> dict[str, ResolvedField]:
    """
    Pick the value for each spec field.

    Preference: merged direct matches, then the first direct-grade (>=85)
    candidate, then the highest-confidence candidate.

    Args:
        candidate_map: spec name -> candidates (any order)

    Returns:
        spec name -> ResolvedField, only for fields with a non-empty candidate
    """
    fields: dict[str, ResolvedField] = {}

    for spec_name, candidates in candidate_map.items():
        usable = [c for c in candidates if c.value and c.value.strip()]
        if not usable:
            continue

        # sorted() is stable, so equal confidences keep extraction order
        ranked = sorted(usable, key=lambda c: -c.confidence)
        deduped = _dedupe(ranked)

        merged = _merge_direct(deduped)
        has_conflict = merged is None and _has_conflict(deduped)

        if merged:
            best = merged
        else:
            chosen = next((c for c in deduped if c.confidence >= DIRECT_MATCH), deduped[0])
            best = chosen.model_dump()

        fields[spec_name] = ResolvedField(
            value=best["value"],
            confidence=best["confidence"],
            source_key=best["source_key"],
            line_index=best["line_index"],
            alternatives=deduped if len(deduped) > 1 else [],
            merged_count=best.get("merged_count"),
            has_conflict=has_conflict,
            validation_warning=validate_field_value(spec_name, best["value"]),
        )

    return fields
