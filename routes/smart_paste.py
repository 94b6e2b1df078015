"""
Smart paste API routes.

Parse pasted product text against a spec schema, review, then build the
payload for the item form. Also exposes text extraction from uploads and
product pages, and the community alias store.
"""

from typing import Optional

from fastapi import APIRouter, File, Query, UploadFile
from fastapi.responses import JSONResponse, Response
import structlog

from models.smart_paste import (
    ApplyPayload,
    ApplyRequest,
    BatchItem,
    BoundariesRequest,
    CoercionResult,
    CoerceRequest,
    CommunityAlias,
    DiffEntry,
    DiffRequest,
    ExtractedTextResponse,
    FetchedPage,
    FetchPageRequest,
    NormalizeUnitsRequest,
    ParseRequest,
    ParseResult,
    RecordAliasRequest,
    Segment,
    UnitConversion,
)
from services.community_alias_service import get_community_alias_service
from services.smart_paste_service import get_smart_paste_service
from services.text_acquisition_service import get_text_acquisition_service
from services.unit_normalizer_service import normalize_units, coerce_field_value
from exceptions import AppError

logger = structlog.get_logger(__name__)

router = APIRouter()


# ===================
# EXCEPTION HANDLER
# ===================

def handle_error(e: Exception) -> JSONResponse:
    """Convert exception to JSON response."""
    if isinstance(e, AppError):
        return JSONResponse(
            status_code=e.status_code,
            content=e.to_dict()
        )
    logger.error("unexpected_error", error=str(e), type=type(e).__name__)
    return JSONResponse(
        status_code=500,
        content={
            "error": {
                "code": "INTERNAL_ERROR",
                "message": "An unexpected error occurred"
            }
        }
    )


def _community_aliases(enabled: bool) -> Optional[dict[str, CommunityAlias]]:
    if not enabled:
        return None
    return get_community_alias_service().fetch()


# ===================
# PARSING
# ===================

@router.post("/parse", response_model=ParseResult)
async def parse_text(data: ParseRequest):
    """
    Parse pasted product text.

    Returns detected name/brand/category/price, resolved spec fields with
    confidence and alternatives, and the pairs that matched nothing.
    """
    try:
        service = get_smart_paste_service()
        return service.parse(data.text, data.schema_, _community_aliases(data.use_community_aliases))

    except Exception as e:
        return handle_error(e)


@router.post("/parse/batch", response_model=list[BatchItem])
async def parse_batch(data: ParseRequest):
    """
    Parse a paste holding several products.

    Returns one item per detected product, or a single "Single Product"
    item when no boundaries were found.
    """
    try:
        service = get_smart_paste_service()
        return service.parse_batch_products(
            data.text,
            data.schema_,
            _community_aliases(data.use_community_aliases),
        )

    except Exception as e:
        return handle_error(e)


@router.post("/boundaries", response_model=list[Segment])
async def detect_boundaries(data: BoundariesRequest):
    """Split a batch paste into segments ([] for a single product)."""
    try:
        return get_smart_paste_service().detect_product_boundaries(data.text)

    except Exception as e:
        return handle_error(e)


# ===================
# REVIEW
# ===================

@router.post("/apply", response_model=ApplyPayload)
async def apply_result(data: ApplyRequest):
    """
    Build the item form payload.

    Reviewer overrides in selectedValues win over resolved values;
    selectedValues._manualMappings adds hand-mapped unmatched pairs.
    """
    try:
        service = get_smart_paste_service()
        return service.build_apply_payload(
            data.parse_result,
            data.selected_values,
            normalize_metric=data.normalize_metric,
        )

    except Exception as e:
        return handle_error(e)


@router.post("/diff", response_model=list[DiffEntry])
async def diff_result(data: DiffRequest):
    """Compare stored specs with freshly parsed fields."""
    try:
        return get_smart_paste_service().diff_specs(data.existing_specs, data.new_fields)

    except Exception as e:
        return handle_error(e)


@router.post("/normalize-units", response_model=Optional[UnitConversion])
async def normalize_value_units(data: NormalizeUnitsRequest):
    """Convert a value between imperial and metric; null when nothing applies."""
    try:
        return normalize_units(data.value, data.prefer_metric)

    except Exception as e:
        return handle_error(e)


@router.post("/coerce", response_model=Optional[CoercionResult])
async def coerce_value(data: CoerceRequest):
    """Coerce a value to its field's format; null when nothing applies."""
    try:
        return coerce_field_value(data.spec_name, data.value)

    except Exception as e:
        return handle_error(e)


# ===================
# TEXT ACQUISITION
# ===================

@router.post("/extract", response_model=ExtractedTextResponse)
async def extract_text(file: UploadFile = File(..., description="Text, PDF or image file")):
    """
    Extract plain text from an upload.

    Unreadable files yield empty text; unsupported types return 422.
    """
    try:
        content = await file.read()
        service = get_text_acquisition_service()
        result = service.extract(file.filename or "", content, file.content_type)

        logger.info(
            "upload_text_extracted",
            filename=file.filename,
            source=result.source,
            text_length=len(result.text)
        )
        return result

    except Exception as e:
        return handle_error(e)


@router.post("/fetch-page", response_model=FetchedPage)
async def fetch_page(data: FetchPageRequest):
    """Fetch a product page through the configured proxy."""
    try:
        return get_text_acquisition_service().fetch_product_page(data.url)

    except Exception as e:
        return handle_error(e)


# ===================
# COMMUNITY ALIASES
# ===================

@router.get("/aliases", response_model=dict[str, CommunityAlias])
async def list_aliases(
    min_usage: Optional[int] = Query(None, ge=1, alias="minUsage", description="Minimum usage count")
):
    """List community-learned aliases, most used first."""
    try:
        return get_community_alias_service().fetch(min_usage)

    except Exception as e:
        return handle_error(e)


@router.post("/aliases", status_code=204, response_class=Response)
async def record_alias(data: RecordAliasRequest):
    """Record a reviewer's manual mapping. Always acknowledged."""
    try:
        get_community_alias_service().record(data.source_key, data.spec_name, data.category)

    except Exception as e:
        return handle_error(e)
