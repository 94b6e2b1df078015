"""
Spec diff for re-imports.

Compares an item's stored specs with freshly parsed fields so the reviewer
sees what a new paste would change.
"""

from typing import Any, Mapping, Optional

import structlog

from models.smart_paste import DiffEntry, ResolvedField

logger = structlog.get_logger(__name__)

STATUS_ORDER = {"changed": 0, "added": 1, "unchanged": 2, "removed": 3}


def _field_value_and_confidence(field: Any) -> tuple[str, int]:
    if field is None:
        return "", 0
    if isinstance(field, ResolvedField):
        return field.value or "", field.confidence or 0
    if isinstance(field, Mapping):
        return field.get("value") or "", field.get("confidence") or 0
    return "", 0


def diff_specs(
    existing_specs: Optional[Mapping[str, str]],
    new_fields: Optional[Mapping[str, Any]],
) -> list[DiffEntry]:
    """
    Classify every spec field as changed, added, unchanged or removed.

    Values compare case- and whitespace-insensitively. Keys with neither an
    old nor a new value produce no entry.

    Args:
        existing_specs: spec name -> stored value
        new_fields: spec name -> ResolvedField (or dict with value/confidence)

    Returns:
        Entries ordered changed, added, unchanged, removed; key order is kept
        within each group (existing keys first)
    """
    existing_specs = existing_specs or {}
    new_fields = new_fields or {}

    entries: list[DiffEntry] = []
    for spec_name in dict.fromkeys([*existing_specs.keys(), *new_fields.keys()]):
        old_value = existing_specs.get(spec_name) or ""
        new_value, confidence = _field_value_and_confidence(new_fields.get(spec_name))

        if not old_value and not new_value:
            continue
        if not old_value:
            status = "added"
        elif not new_value:
            status = "removed"
        elif old_value.lower().strip() != new_value.lower().strip():
            status = "changed"
        else:
            status = "unchanged"

        entries.append(DiffEntry(
            spec_name=spec_name,
            status=status,
            old_value=old_value,
            new_value=new_value,
            confidence=confidence,
        ))

    entries.sort(key=lambda e: STATUS_ORDER[e.status])

    logger.debug("specs_diffed", total=len(entries), changed=sum(1 for e in entries if e.status == "changed"))
    return entries
