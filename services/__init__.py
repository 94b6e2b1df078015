"""
Business logic services.

The parsing pipeline (alias index, field resolver, unit normalizer, diff)
plus the two collaborators around it: text acquisition and the community
alias store.
"""

from services.smart_paste_service import (
    SmartPasteService,
    get_smart_paste_service,
    parse,
    parse_batch_products,
    build_apply_payload,
    diff_specs,
)
from services.alias_index_service import (
    AliasIndex,
    build_alias_index,
    get_alias_index,
    schema_fingerprint,
)
from services.field_resolver_service import match_fields, resolve_fields, validate_field_value
from services.unit_normalizer_service import normalize_units, coerce_field_value
from services.community_alias_service import CommunityAliasService, get_community_alias_service
from services.text_acquisition_service import (
    TextAcquisitionService,
    OcrSession,
    get_text_acquisition_service,
)
from parsers.batch_parser import detect_product_boundaries

__all__ = [
    "SmartPasteService",
    "get_smart_paste_service",
    "parse",
    "parse_batch_products",
    "build_apply_payload",
    "diff_specs",
    "detect_product_boundaries",
    "AliasIndex",
    "build_alias_index",
    "get_alias_index",
    "schema_fingerprint",
    "match_fields",
    "resolve_fields",
    "validate_field_value",
    "normalize_units",
    "coerce_field_value",
    "CommunityAliasService",
    "get_community_alias_service",
    "TextAcquisitionService",
    "OcrSession",
    "get_text_acquisition_service",
]
