"""
Smart paste service.

Entry point for turning pasted product text into spec field values:

    text → clean → lines → raw pairs → price/brand/category/serial/model
         → alias index (+ community aliases) → direct + fuzzy matching
         → per-field resolution → ParseResult

Also builds the apply payload (with unit normalization and coercion),
splits batch pastes and diffs re-imports. Parsing is pure computation:
empty or unreadable input yields an all-default ParseResult, never an error.
"""

from typing import Any, Mapping, Optional, Union

import structlog

from models.smart_paste import (
    ApplyPayload,
    BatchItem,
    CommunityAlias,
    DiffEntry,
    ParseResult,
    Segment,
    UnmatchedPair,
)
from parsers.text_cleaner import clean_input_text, split_lines
from parsers.pair_extractor import (
    extract_raw_pairs,
    extract_price,
    detect_brand,
    detect_category,
    extract_serial_model,
)
from parsers.batch_parser import detect_product_boundaries
from services.alias_index_service import get_alias_index
from services.diff_service import diff_specs as _diff_specs
from services.field_resolver_service import match_fields, resolve_fields
from services.unit_normalizer_service import normalize_units, coerce_field_value

logger = structlog.get_logger(__name__)

# Reviewer-mapped unmatched pairs travel inside selected_values under this key
MANUAL_MAPPINGS_KEY = "_manualMappings"

SINGLE_PRODUCT_NAME = "Single Product"

CommunityAliases = Optional[Mapping[str, Union[CommunityAlias, dict]]]


class SmartPasteService:
    """
    Smart paste orchestration.

    Stateless apart from the shared alias-index memo, so one instance can
    serve concurrent requests.
    """

    # ===================
    # PARSING
    # ===================

    def parse(
        self,
        text: Any,
        schema: Optional[Mapping],
        community_aliases: CommunityAliases = None,
    ) -> ParseResult:
        """
        Parse product text into structured data.

        Args:
            text: Pasted text or HTML
            schema: category -> list of spec definitions
            community_aliases: Optional source_key -> CommunityAlias mapping

        Returns:
            ParseResult (all defaults when text is empty or not a string)
        """
        if not text or not isinstance(text, str):
            return ParseResult()

        cleaned = clean_input_text(text)
        lines = split_lines(cleaned)

        pairs, detected_name = extract_raw_pairs(lines)

        # Price fallback scans the raw text so currency symbols in markup survive
        purchase_price, price_note = extract_price(pairs, text)

        text_lower = cleaned.lower()
        brand = detect_brand(detected_name, text_lower)
        category = detect_category(text_lower)
        serial_number, model_number = extract_serial_model(pairs)

        index = get_alias_index(schema, community_aliases)
        candidates, matched = match_fields(pairs, index, category)
        fields = resolve_fields(candidates)

        unmatched = [
            UnmatchedPair(key=pair.key, value=pair.value, line_index=pair.line_index)
            for idx, pair in enumerate(pairs)
            if idx not in matched
        ]

        result = ParseResult(
            name=detected_name,
            brand=brand,
            category=category,
            purchase_price=purchase_price,
            price_note=price_note,
            serial_number=serial_number,
            model_number=model_number,
            fields=fields,
            unmatched_pairs=unmatched,
            raw_extracted=pairs,
            source_lines=lines,
        )

        logger.info(
            "smart_paste_parsed",
            lines=len(lines),
            pairs=len(pairs),
            fields=len(fields),
            unmatched=len(unmatched),
            category=category or None,
            conflicts=sum(1 for f in fields.values() if f.has_conflict),
        )
        return result

    def detect_product_boundaries(self, text: Any) -> list[Segment]:
        """Split a multi-product paste; [] when it looks like one product."""
        if not text or not isinstance(text, str):
            return []
        return detect_product_boundaries(text)

    def parse_batch_products(
        self,
        text: Any,
        schema: Optional[Mapping],
        community_aliases: CommunityAliases = None,
    ) -> list[BatchItem]:
        """
        Parse every product in a batch paste.

        Returns:
            One BatchItem per segment, or a single "Single Product" item
            covering the whole text when no split was found
        """
        segments = self.detect_product_boundaries(text)

        if not segments:
            whole_text = text if isinstance(text, str) else ""
            return [BatchItem(
                segment=Segment(name=SINGLE_PRODUCT_NAME, text=whole_text),
                result=self.parse(text, schema, community_aliases),
            )]

        items = [
            BatchItem(segment=segment, result=self.parse(segment.text, schema, community_aliases))
            for segment in segments
        ]
        logger.info("smart_paste_batch_parsed", products=len(items))
        return items

    # ===================
    # APPLY / DIFF
    # ===================

    @staticmethod
    def _prepare_value(spec_name: str, value: str, normalize_metric: bool) -> str:
        if normalize_metric:
            conversion = normalize_units(value, True)
            if conversion:
                value = conversion.normalized
        coercion = coerce_field_value(spec_name, value)
        if coercion:
            value = coercion.coerced
        return value

    def build_apply_payload(
        self,
        parse_result: Union[ParseResult, Mapping],
        selected_values: Optional[Mapping[str, Any]] = None,
        normalize_metric: bool = False,
    ) -> ApplyPayload:
        """
        Build the item form payload from a reviewed parse result.

        Args:
            parse_result: Result of parse()
            selected_values: spec name -> reviewer override; may also carry
                "_manualMappings" (spec name -> value for unmatched pairs)
            normalize_metric: Convert imperial values to metric

        Returns:
            ApplyPayload with blank values dropped
        """
        if not isinstance(parse_result, ParseResult):
            parse_result = ParseResult.model_validate(parse_result or {})
        selected_values = selected_values or {}

        specs: dict[str, str] = {}
        for spec_name, field in parse_result.fields.items():
            value = selected_values[spec_name] if spec_name in selected_values else field.value
            if not isinstance(value, str) or not value.strip():
                continue
            specs[spec_name] = self._prepare_value(spec_name, value, normalize_metric)

        manual_mappings = selected_values.get(MANUAL_MAPPINGS_KEY) or {}
        if isinstance(manual_mappings, Mapping):
            for spec_name, value in manual_mappings.items():
                if not isinstance(value, str) or not value.strip() or specs.get(spec_name):
                    continue
                specs[spec_name] = self._prepare_value(spec_name, value, normalize_metric)

        return ApplyPayload(
            name=parse_result.name or "",
            brand=parse_result.brand or "",
            category=parse_result.category or "",
            purchase_price=parse_result.purchase_price or "",
            price_note=parse_result.price_note or "",
            serial_number=parse_result.serial_number or "",
            model_number=parse_result.model_number or "",
            specs=specs,
        )

    def diff_specs(
        self,
        existing_specs: Optional[Mapping[str, str]],
        new_fields: Optional[Mapping[str, Any]],
    ) -> list[DiffEntry]:
        """See services.diff_service.diff_specs."""
        return _diff_specs(existing_specs, new_fields)


# Singleton instance
_smart_paste_service: Optional[SmartPasteService] = None


def get_smart_paste_service() -> SmartPasteService:
    """Get or create SmartPasteService instance."""
    global _smart_paste_service
    if _smart_paste_service is None:
        _smart_paste_service = SmartPasteService()
    return _smart_paste_service


# ===================
# MODULE-LEVEL API
# ===================

def parse(text: Any, schema: Optional[Mapping], community_aliases: CommunityAliases = None) -> ParseResult:
    return get_smart_paste_service().parse(text, schema, community_aliases)


def parse_batch_products(
    text: Any,
    schema: Optional[Mapping],
    community_aliases: CommunityAliases = None,
) -> list[BatchItem]:
    return get_smart_paste_service().parse_batch_products(text, schema, community_aliases)


def build_apply_payload(
    parse_result: Union[ParseResult, Mapping],
    selected_values: Optional[Mapping[str, Any]] = None,
    normalize_metric: bool = False,
) -> ApplyPayload:
    return get_smart_paste_service().build_apply_payload(parse_result, selected_values, normalize_metric)


def diff_specs(existing_specs: Optional[Mapping[str, str]], new_fields: Optional[Mapping[str, Any]]) -> list[DiffEntry]:
    return get_smart_paste_service().diff_specs(existing_specs, new_fields)
