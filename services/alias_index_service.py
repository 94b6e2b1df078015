"""
Alias index service.

Builds the priority-ranked lookup from normalized alias strings to spec
fields. Sources, highest priority first:
    100  normalized spec name
     98  abbreviation-expanded spec name
     80  curated alias (verbatim)
     78  curated alias (expanded)
  55-75  community-learned alias (scaled by usage)
     40  distinctive word of a multi-word spec name

A key is (re)claimed only when it is absent or held at a strictly lower
priority, so on equal priority the first registration (schema order) wins.
"""

import json
import math
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Iterator, Mapping, Optional, Union

import structlog

from config.settings import settings
from config.smart_paste import (
    COMMON_ALIASES,
    GENERIC_WORDS,
    PRIORITY_EXACT,
    PRIORITY_EXPANDED,
    PRIORITY_CURATED,
    PRIORITY_CURATED_EXPANDED,
    PRIORITY_NAME_WORD,
    COMMUNITY_BASE,
    COMMUNITY_MAX,
    COMMUNITY_MIN_USAGE,
)
from models.smart_paste import AliasEntry, CommunityAlias, SpecDefinition
from utils.text_utils import normalize, expand_abbreviations

logger = structlog.get_logger(__name__)

MIN_NAME_WORD_LENGTH = 5


@dataclass
class AliasIndex:
    """Alias lookup plus the ordered spec names and their categories."""
    aliases: dict[str, AliasEntry] = field(default_factory=dict)
    spec_names: list[str] = field(default_factory=list)
    spec_categories: dict[str, str] = field(default_factory=dict)

    def claim(self, key: str, spec_name: str, priority: int, category: Optional[str]) -> bool:
        """Register key unless it is already held at equal or higher priority."""
        if not key:
            return False
        existing = self.aliases.get(key)
        if existing is not None and existing.priority >= priority:
            return False
        self.aliases[key] = AliasEntry(spec_name=spec_name, priority=priority, category=category)
        return True

    def lookup(self, key: str) -> Optional[AliasEntry]:
        return self.aliases.get(key)

    def copy(self) -> "AliasIndex":
        return AliasIndex(
            aliases=dict(self.aliases),
            spec_names=list(self.spec_names),
            spec_categories=dict(self.spec_categories),
        )


def iter_spec_definitions(schema: Optional[Mapping]) -> Iterator[tuple[str, SpecDefinition]]:
    """
    Yield (category, SpecDefinition) for every well-formed schema entry.

    Entries may be SpecDefinition instances or dicts with a non-empty
    "name"; anything else (and non-list categories) is skipped.
    """
    if not schema:
        return
    for category, spec_list in schema.items():
        if not isinstance(spec_list, list):
            continue
        for entry in spec_list:
            if isinstance(entry, SpecDefinition):
                yield category, entry
            elif isinstance(entry, dict):
                name = entry.get("name")
                if isinstance(name, str) and name:
                    yield category, SpecDefinition(name=name, required=bool(entry.get("required", False)))


def _register_spec_name(index: AliasIndex, name: str, category: str) -> None:
    norm = normalize(name)
    index.claim(norm, name, PRIORITY_EXACT, category)

    expanded = expand_abbreviations(norm)
    if expanded != norm:
        index.claim(expanded, name, PRIORITY_EXPANDED, category)

    words = norm.split(" ")
    if len(words) > 1:
        for word in words:
            if len(word) >= MIN_NAME_WORD_LENGTH and word not in GENERIC_WORDS:
                index.claim(word, name, PRIORITY_NAME_WORD, category)


def _register_curated_aliases(index: AliasIndex) -> None:
    for canonical, aliases in COMMON_ALIASES.items():
        target = index.lookup(normalize(canonical))
        if target is None:
            continue
        for alias in aliases:
            alias_norm = normalize(alias)
            index.claim(alias_norm, target.spec_name, PRIORITY_CURATED, target.category)
            alias_expanded = expand_abbreviations(alias_norm)
            if alias_expanded != alias_norm:
                index.claim(alias_expanded, target.spec_name, PRIORITY_CURATED_EXPANDED, target.category)


def community_priority(usage_count: int) -> int:
    """55 at the minimum usage, +1.5 per extra use, capped at 75."""
    return min(COMMUNITY_MAX, COMMUNITY_BASE + math.floor((usage_count - COMMUNITY_MIN_USAGE) * 1.5))


def inject_community_aliases(
    index: AliasIndex,
    community_aliases: Optional[Mapping[str, Union[CommunityAlias, dict]]],
) -> AliasIndex:
    """
    Return a copy of the index with community aliases layered on (the
    index itself when there are none).

    Community aliases carry no category, so the category penalty never
    applies to them.
    """
    if not community_aliases:
        return index

    layered = index.copy()
    added = 0
    for source_key, alias in community_aliases.items():
        if isinstance(alias, dict):
            alias = CommunityAlias.model_validate(alias)
        if layered.claim(normalize(source_key), alias.spec_name, community_priority(alias.usage_count), None):
            added += 1

    logger.debug("community_aliases_injected", offered=len(community_aliases), added=added)
    return layered


def build_alias_index(
    schema: Optional[Mapping],
    community_aliases: Optional[Mapping[str, Union[CommunityAlias, dict]]] = None,
) -> AliasIndex:
    """
    Build the alias index for a category schema.

    Args:
        schema: category -> list of spec definitions
        community_aliases: Optional source_key -> CommunityAlias mapping

    Returns:
        AliasIndex (a new object on every call)
    """
    index = AliasIndex()

    for category, spec in iter_spec_definitions(schema):
        name = spec.name
        if name not in index.spec_categories:
            index.spec_names.append(name)
            index.spec_categories[name] = category
        _register_spec_name(index, name, category)

    _register_curated_aliases(index)

    return inject_community_aliases(index, community_aliases)


def schema_fingerprint(schema: Optional[Mapping]) -> str:
    """
    Canonical string for a schema, usable as a memo key.

    Only what affects the index is kept: category order and spec names in
    order. Two schemas with the same fingerprint build identical indexes.
    """
    canonical: list[list] = []
    for category, spec in iter_spec_definitions(schema):
        if canonical and canonical[-1][0] == category:
            canonical[-1][1].append(spec.name)
        else:
            canonical.append([category, [spec.name]])
    return json.dumps(canonical, ensure_ascii=False, separators=(",", ":"))


@lru_cache(maxsize=settings.alias_index_cache_size)
def _build_from_fingerprint(fingerprint: str) -> AliasIndex:
    schema: dict[str, list[SpecDefinition]] = {}
    for category, names in json.loads(fingerprint):
        schema.setdefault(category, []).extend(SpecDefinition(name=name) for name in names)
    index = build_alias_index(schema)
    logger.debug("alias_index_built", spec_names=len(index.spec_names), aliases=len(index.aliases))
    return index


def get_alias_index(
    schema: Optional[Mapping],
    community_aliases: Optional[Mapping[str, Union[CommunityAlias, dict]]] = None,
) -> AliasIndex:
    """
    Memoized build_alias_index.

    The schema part is cached by fingerprint. Callers always get their own
    copy, so claims made on the result never reach the cache.
    """
    base = _build_from_fingerprint(schema_fingerprint(schema))
    if not community_aliases:
        return base.copy()
    return inject_community_aliases(base, community_aliases)


def clear_alias_index_cache() -> None:
    """Drop every memoized index."""
    _build_from_fingerprint.cache_clear()
