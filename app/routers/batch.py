import logging

from fastapi import APIRouter, HTTPException, Request
from slowapi import Limiter
from slowapi.util import get_remote_address

from app.config import get_settings
from app.exceptions import URLValidationError
from app.models.request import BatchRequest
from app.models.response import MetadataBatchResponse, ProxyAccessResponse, SchemaBatchResponse
from app.services.fetcher import TransportConfig
from app.services.pipeline import Variant, run_batch

logger = logging.getLogger(__name__)

limiter = Limiter(key_func=get_remote_address)
router = APIRouter()

_RATE_LIMIT = get_settings().batch_rate_limit


@router.post(
    "/batch",
    response_model=MetadataBatchResponse,
    summary="Extract page type, geo tags and speakable passages",
    description=(
        "Fetches every URL in `urls` (one per line) and returns, per page, the "
        "DOM-based page type, the `geo.placename` / `geo.region` meta tags and "
        "the text selected by each `speakable.xpath` declared in JSON-LD.\n\n"
        "If any line is not a valid URL the whole batch is rejected with 400 "
        "and nothing is fetched.  Otherwise per-URL failures are reported in "
        "`errors` without affecting the other URLs."
    ),
)
@limiter.limit(_RATE_LIMIT)
async def metadata_batch(request: Request, body: BatchRequest) -> MetadataBatchResponse:
    result = await _run(body, "metadata")
    return MetadataBatchResponse(
        records=result.records,
        errors=result.errors,
        rows=[record.to_row() for record in result.records],
    )


@router.post(
    "/nutrition",
    response_model=SchemaBatchResponse,
    summary="Inspect JSON-LD Article schemas",
    description=(
        "Fetches every URL in `urls` and reports the content type detected "
        "from the DOM, whether an `Article` JSON-LD schema is present, and the "
        "normalised Article fields (author, publisher, dates, image…)."
    ),
)
@limiter.limit(_RATE_LIMIT)
async def schema_batch(request: Request, body: BatchRequest) -> SchemaBatchResponse:
    result = await _run(body, "schema")
    return SchemaBatchResponse(records=result.records, errors=result.errors)


@router.get(
    "/proxy-access",
    response_model=ProxyAccessResponse,
    summary="Where to request temporary access to the fetch proxy",
)
async def proxy_access() -> ProxyAccessResponse:
    return ProxyAccessResponse(url=get_settings().proxy_access_url)


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

async def _run(body: BatchRequest, variant: Variant):
    """Run the batch and turn a pre-flight validation failure into a 400."""
    transport = TransportConfig.from_settings(body.transport)
    logger.info(
        "Batch request received",
        extra={"variant": variant, "transport": transport.mode},
    )
    try:
        return await run_batch(body.urls, transport, variant)
    except URLValidationError as exc:
        logger.warning("Rejected batch with invalid URLs: %s", exc.invalid_urls)
        raise HTTPException(
            status_code=400,
            detail={"message": str(exc), "invalid_urls": exc.invalid_urls},
        )
