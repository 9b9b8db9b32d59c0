"""Batch orchestration: validate, normalise, then fetch and extract every URL concurrently."""

import asyncio
import logging
from contextlib import nullcontext
from typing import Awaitable, Callable, List, Literal, Optional, Sequence, Union

import httpx

from app.config import get_settings
from app.exceptions import URLValidationError
from app.models.page import NOT_AVAILABLE, PageError, PageRecord
from app.models.response import BatchResult
from app.models.schema import SchemaRecord
from app.services.classifier import classify_content, classify_page
from app.services.document import parse_document
from app.services.fetcher import TransportConfig, fetch_html
from app.services.normalizer import find_invalid_urls, normalize_url, split_input
from app.services.speakable import extract_speakable
from app.services.structured_data import (
    collect_schemas,
    extract_schema_fields,
    get_schema_status,
)

logger = logging.getLogger(__name__)

Variant = Literal["metadata", "schema"]

ERROR_PREFIX = "Error processing this URL: "


# ---------------------------------------------------------------------------
# Per-document extraction (synchronous, after the fetch has resolved)
# ---------------------------------------------------------------------------

def extract_page_metadata(html: str, url: str) -> PageRecord:
    """Page type, geo tags and speakable passages for the metadata batch."""
    document = parse_document(html)
    schemas = collect_schemas(document)

    return PageRecord(
        url=url,
        page_type=classify_page(document),
        geo_place_name=document.meta_content("geo.placename") or NOT_AVAILABLE,
        geo_region=document.meta_content("geo.region") or NOT_AVAILABLE,
        speakable=extract_speakable(document, schemas),
    )


def extract_schema_data(html: str, url: str) -> SchemaRecord:
    """Content type, schema status and normalised Article fields for the structured-data batch."""
    document = parse_document(html)
    content_type = classify_content(document)
    status = get_schema_status(collect_schemas(document))

    return SchemaRecord(
        url=url,
        type=content_type.page_type,
        element=content_type.element,
        status=status,
        fields=extract_schema_fields(status.selected_schema),
    )


_EXTRACTORS: dict = {
    "metadata": extract_page_metadata,
    "schema": extract_schema_data,
}


# ---------------------------------------------------------------------------
# Batch
# ---------------------------------------------------------------------------

def prepare_urls(input_text: str, www_domains: Optional[Sequence[str]] = None) -> List[str]:
    """Split, validate and normalise the raw input.

    Raises:
        URLValidationError: any line is not a plausible URL.  Nothing is fetched.
    """
    candidates = split_input(input_text)
    invalid = find_invalid_urls(candidates)
    if invalid:
        raise URLValidationError(invalid)

    if www_domains is None:
        www_domains = get_settings().www_domains
    return [normalize_url(url, www_domains) for url in candidates]


async def _process_url(
    url: str,
    extractor: Callable[[str, str], Union[PageRecord, SchemaRecord]],
    transport: TransportConfig,
    client: httpx.AsyncClient,
    semaphore: Optional[asyncio.Semaphore],
) -> Union[PageRecord, SchemaRecord, PageError]:
    """Run the pipeline for one URL.  Never raises: failures become a :class:`PageError`."""
    try:
        async with semaphore if semaphore is not None else nullcontext():
            html = await fetch_html(url, transport, client=client)
        return extractor(html, url)
    except Exception as exc:
        logger.warning("Failed to process %s: %s", url, exc)
        return PageError(url=url, error=f"{ERROR_PREFIX}{exc}")


async def run_batch(
    input_text: str,
    transport: Optional[TransportConfig] = None,
    variant: Variant = "metadata",
    *,
    client: Optional[httpx.AsyncClient] = None,
    max_concurrency: Optional[int] = None,
) -> BatchResult:
    """Process every URL in *input_text* and collect records and errors.

    Validation is a pre-flight gate: one invalid line aborts the batch with
    :class:`URLValidationError` before any request is made.  After that every
    URL is processed concurrently and yields exactly one record or one error;
    both lists keep input order.
    """
    settings = get_settings()
    transport = transport or TransportConfig.from_settings(settings=settings)
    extractor = _EXTRACTORS[variant]
    urls = prepare_urls(input_text, settings.www_domains)

    if max_concurrency is None:
        max_concurrency = settings.max_concurrency
    semaphore = asyncio.Semaphore(max_concurrency) if max_concurrency else None

    logger.info(
        "Batch started",
        extra={"urls": len(urls), "variant": variant, "transport": transport.mode},
    )

    async def _run(active_client: httpx.AsyncClient) -> list:
        tasks: List[Awaitable] = [
            _process_url(url, extractor, transport, active_client, semaphore) for url in urls
        ]
        return await asyncio.gather(*tasks)

    if client is not None:
        outcomes = await _run(client)
    else:
        async with httpx.AsyncClient(follow_redirects=False, timeout=transport.timeout) as own_client:
            outcomes = await _run(own_client)

    records = [o for o in outcomes if not isinstance(o, PageError)]
    errors = [o for o in outcomes if isinstance(o, PageError)]

    logger.info("Batch finished: %d records, %d errors", len(records), len(errors))
    return BatchResult(records=records, errors=errors)
