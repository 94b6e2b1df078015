"""
Pydantic models for validation and serialization.
"""

from models.base import BaseSchema, FrozenSchema
from models.smart_paste import (
    SpecDefinition,
    SpecSchema,
    RawPair,
    UnmatchedPair,
    AliasEntry,
    CommunityAlias,
    Candidate,
    ResolvedField,
    ParseResult,
    Segment,
    BatchItem,
    DiffStatus,
    DiffEntry,
    UnitConversion,
    CoercionResult,
    ApplyPayload,
    FetchedPage,
    OcrText,
    ParseRequest,
    BoundariesRequest,
    ApplyRequest,
    DiffRequest,
    NormalizeUnitsRequest,
    CoerceRequest,
    RecordAliasRequest,
    FetchPageRequest,
    ExtractedTextResponse,
)

__all__ = [
    "BaseSchema",
    "FrozenSchema",
    "SpecDefinition",
    "SpecSchema",
    "RawPair",
    "UnmatchedPair",
    "AliasEntry",
    "CommunityAlias",
    "Candidate",
    "ResolvedField",
    "ParseResult",
    "Segment",
    "BatchItem",
    "DiffStatus",
    "DiffEntry",
    "UnitConversion",
    "CoercionResult",
    "ApplyPayload",
    "FetchedPage",
    "OcrText",
    "ParseRequest",
    "BoundariesRequest",
    "ApplyRequest",
    "DiffRequest",
    "NormalizeUnitsRequest",
    "CoerceRequest",
    "RecordAliasRequest",
    "FetchPageRequest",
    "ExtractedTextResponse",
]
