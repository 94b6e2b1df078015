"""
Smart paste schemas.

Records passed between the text parsers, the alias index, the field
resolver and the API layer. Confidence values are 0-100 integers.
"""

from typing import Literal, Optional, Union
from pydantic import Field

from models.base import BaseSchema, FrozenSchema


# ===================
# SCHEMA INPUT
# ===================

class SpecDefinition(FrozenSchema):
    """One named target field in a category schema."""
    name: str = Field(..., min_length=1, description="Spec field name, e.g. 'Maximum Aperture'")
    required: bool = False


# category -> spec definitions (dicts are accepted and validated lazily)
SpecSchema = dict[str, list[Union[SpecDefinition, dict]]]


# ===================
# EXTRACTION
# ===================

class RawPair(BaseSchema):
    """Key/value candidate pulled out of a single line (or a label/value line pair)."""
    key: str
    value: str
    source_line: str
    line_index: int = Field(ge=0)


class UnmatchedPair(BaseSchema):
    """Raw pair that did not resolve onto any spec field."""
    key: str
    value: str
    line_index: int = Field(ge=0)


class AliasEntry(FrozenSchema):
    """Alias index entry. Keyed by normalized alias string."""
    spec_name: str
    priority: int = Field(ge=0, le=100)
    category: Optional[str] = None


class CommunityAlias(BaseSchema):
    """Community-learned mapping, as returned by the alias store."""
    spec_name: str
    usage_count: int = Field(ge=0)


# ===================
# RESOLUTION
# ===================

class Candidate(FrozenSchema):
    """One possible value for a spec field."""
    value: str
    confidence: int = Field(ge=0, le=100)
    source_key: str
    line_index: int = Field(ge=0)


class ResolvedField(FrozenSchema):
    """Chosen value for one spec field, with review metadata."""
    value: str
    confidence: int = Field(ge=0, le=100)
    source_key: str
    line_index: int = Field(ge=0)
    alternatives: list[Candidate] = Field(default_factory=list)
    merged_count: Optional[int] = Field(None, ge=2)
    has_conflict: bool = False
    validation_warning: Optional[str] = None


class ParseResult(BaseSchema):
    """
    Everything extracted from one product's text.

    All scalar fields default to empty strings so an empty or unreadable
    input still yields a usable result.
    """
    name: str = ""
    brand: str = ""
    category: str = ""
    purchase_price: str = ""
    price_note: str = ""
    serial_number: str = ""
    model_number: str = ""
    fields: dict[str, ResolvedField] = Field(default_factory=dict)
    unmatched_pairs: list[UnmatchedPair] = Field(default_factory=list)
    raw_extracted: list[RawPair] = Field(default_factory=list)
    source_lines: list[str] = Field(default_factory=list)


# ===================
# BATCH / DIFF / APPLY
# ===================

class Segment(BaseSchema):
    """Span of a batch paste believed to describe one product."""
    start_line: int = Field(0, ge=0)
    end_line: int = Field(0, ge=0)
    name: str
    text: str


class BatchItem(BaseSchema):
    """Parse result for one segment of a batch paste."""
    segment: Segment
    result: ParseResult


DiffStatus = Literal["changed", "added", "unchanged", "removed"]


class DiffEntry(BaseSchema):
    """Change classification for one spec field on re-import."""
    spec_name: str
    status: DiffStatus
    old_value: str = ""
    new_value: str = ""
    confidence: int = Field(0, ge=0, le=100)


class UnitConversion(BaseSchema):
    """Result of a unit normalization."""
    original: str
    normalized: str
    unit: str


class CoercionResult(BaseSchema):
    """Result of a field-type coercion."""
    original: str
    coerced: str


class ApplyPayload(BaseSchema):
    """Form payload built from a parse result plus reviewer choices."""
    name: str = ""
    brand: str = ""
    category: str = ""
    purchase_price: str = ""
    price_note: str = ""
    serial_number: str = ""
    model_number: str = ""
    specs: dict[str, str] = Field(default_factory=dict)


# ===================
# ACQUISITION
# ===================

class FetchedPage(BaseSchema):
    """Product page content fetched through the proxy."""
    text: str = ""
    html: str = ""
    source_url: str = ""


class OcrText(BaseSchema):
    """Text recognized from an image."""
    text: str = ""
    confidence: float = Field(0.0, ge=0, le=100, description="Engine mean word confidence")


# ===================
# API REQUESTS
# ===================

class ParseRequest(BaseSchema):
    """Request to parse pasted text."""
    text: str = ""
    schema_: SpecSchema = Field(default_factory=dict, alias="schema")
    use_community_aliases: bool = False


class BoundariesRequest(BaseSchema):
    """Request to split a batch paste into segments."""
    text: str = ""


class ApplyRequest(BaseSchema):
    """Request to build the form payload from a reviewed parse result."""
    parse_result: ParseResult
    selected_values: Optional[dict] = None
    normalize_metric: bool = False


class DiffRequest(BaseSchema):
    """Request to diff stored specs against freshly parsed fields."""
    existing_specs: dict[str, str] = Field(default_factory=dict)
    new_fields: dict[str, Union[ResolvedField, dict]] = Field(default_factory=dict)


class NormalizeUnitsRequest(BaseSchema):
    """Request to normalize the units of one value."""
    value: str
    prefer_metric: bool = True


class CoerceRequest(BaseSchema):
    """Request to coerce one field value."""
    spec_name: str
    value: str


class RecordAliasRequest(BaseSchema):
    """Reviewer mapped an unmatched key onto a spec field."""
    source_key: str = Field(..., min_length=1)
    spec_name: str = Field(..., min_length=1)
    category: Optional[str] = None


class FetchPageRequest(BaseSchema):
    """Request to import a product page through the fetch proxy."""
    url: str = Field(..., min_length=1, pattern=r"^https?://")


class ExtractedTextResponse(BaseSchema):
    """Plain text produced by the acquisition service."""
    text: str
    source: Literal["text", "pdf", "image", "url"]
    confidence: Optional[float] = None
