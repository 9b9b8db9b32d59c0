"""JSON-LD discovery, ``Article`` selection and field normalisation.

JSON-LD in the wild is loosely shaped: a block may hold a single entity, an
``@graph`` of entities or a bare array; ``author`` may be a string, an object
or a list of either; ``image`` may be a URL or an ``ImageObject``.  Every
reader here resolves one of those shapes or falls back to ``"N/A"``; nothing
in this module raises on malformed input.
"""

import json
import logging
from typing import Any, Dict, List, Optional

from app.exceptions import SchemaParseError
from app.models.page import NOT_AVAILABLE
from app.models.schema import ArticleFields, AuthorInfo, PublisherInfo, SchemaStatus
from app.services.document import ParsedDocument

logger = logging.getLogger(__name__)

ARTICLE_TYPE = "Article"

JsonLdEntity = Dict[str, Any]


# ---------------------------------------------------------------------------
# Discovery
# ---------------------------------------------------------------------------

def parse_json_ld(raw: str) -> Any:
    """Decode one ld+json block.

    Raises:
        SchemaParseError: the block is not valid JSON.
    """
    try:
        return json.loads(raw)
    except ValueError as exc:
        raise SchemaParseError(str(exc)) from exc


def _candidates(data: Any) -> List[Any]:
    if isinstance(data, list):
        return data
    if isinstance(data, dict) and isinstance(data.get("@graph"), list):
        return data["@graph"]
    return [data]


def collect_schemas(document: ParsedDocument) -> List[JsonLdEntity]:
    """Return every JSON-LD entity with an ``@type``, in document order.

    Invalid blocks are logged and skipped so one broken script tag does not
    hide the others.
    """
    schemas: List[JsonLdEntity] = []
    for index, raw in enumerate(document.json_ld_blocks()):
        try:
            data = parse_json_ld(raw)
        except SchemaParseError as exc:
            logger.warning("Skipping invalid JSON-LD block #%d: %s", index, exc)
            continue

        for item in _candidates(data):
            if isinstance(item, dict) and item.get("@type"):
                schemas.append(item)
    return schemas


# ---------------------------------------------------------------------------
# Selection
# ---------------------------------------------------------------------------

def _type_label(schema: JsonLdEntity) -> str:
    value = schema.get("@type")
    if isinstance(value, list):
        return ", ".join(str(v) for v in value)
    return str(value)


def _is_article(schema: JsonLdEntity) -> bool:
    value = schema.get("@type")
    if isinstance(value, list):
        return ARTICLE_TYPE in value
    return value == ARTICLE_TYPE


def get_schema_status(schemas: List[JsonLdEntity]) -> SchemaStatus:
    """Classify the JSON-LD evidence and pick the entity to display."""
    if not schemas:
        return SchemaStatus(status="none", severity="error", message="No schema found.")

    # dict.fromkeys keeps first-seen order
    schema_types = list(dict.fromkeys(_type_label(s) for s in schemas))
    article = next((s for s in schemas if _is_article(s)), None)

    if article is None:
        return SchemaStatus(
            status="other_types",
            severity="warning",
            message="No Article schema found.\nOther schemas found: " + ", ".join(schema_types),
            schema_types=schema_types,
            selected_schema=schemas[0],
        )

    return SchemaStatus(
        status="article",
        severity="ok",
        schema_types=schema_types,
        selected_schema=article,
    )


# ---------------------------------------------------------------------------
# Field normalisation
# ---------------------------------------------------------------------------

def _text(value: Any) -> str:
    """Resolve a scalar-ish JSON-LD value to display text, or ``"N/A"``."""
    if isinstance(value, bool) or value is None:
        return NOT_AVAILABLE
    if isinstance(value, str):
        return value or NOT_AVAILABLE
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, dict):
        # Node references such as mainEntityOfPage: {"@type": "WebPage", "@id": "..."}
        return _text(value.get("@id") or value.get("url"))
    if isinstance(value, list) and value:
        return _text(value[0])
    return NOT_AVAILABLE


def _url(value: Any) -> str:
    """A URL given either directly or as an object's ``url``."""
    if isinstance(value, list) and value:
        return _url(value[0])
    if isinstance(value, dict):
        return _text(value.get("url"))
    if isinstance(value, str):
        return value or NOT_AVAILABLE
    return NOT_AVAILABLE


def _first_entity(value: Any) -> Any:
    if isinstance(value, list):
        return value[0] if value else None
    return value


def get_author_info(author: Any) -> AuthorInfo:
    author = _first_entity(author)
    if isinstance(author, str) and author:
        return AuthorInfo(type="String", name=author)
    if isinstance(author, dict):
        return AuthorInfo(
            type=_text(author.get("@type")),
            name=_text(author.get("name")),
            url=_text(author.get("url")),
        )
    return AuthorInfo()


def get_publisher_info(publisher: Any) -> PublisherInfo:
    publisher = _first_entity(publisher)
    if isinstance(publisher, str) and publisher:
        return PublisherInfo(type="String", name=publisher)
    if isinstance(publisher, dict):
        return PublisherInfo(
            type=_text(publisher.get("@type")),
            name=_text(publisher.get("name")),
            logo=_url(publisher.get("logo")),
        )
    return PublisherInfo()


def extract_schema_fields(schema: Optional[JsonLdEntity]) -> Optional[ArticleFields]:
    """Flatten *schema* into :class:`ArticleFields`; ``None`` when there is no schema."""
    if not schema:
        return None

    return ArticleFields(
        schema_type=_type_label(schema) if schema.get("@type") else NOT_AVAILABLE,
        headline=_text(schema.get("headline")),
        name=_text(schema.get("name")),
        description=_text(schema.get("description") or schema.get("about")),
        date_published=_text(schema.get("datePublished")),
        date_modified=_text(schema.get("dateModified")),
        main_entity_of_page=_text(schema.get("mainEntityOfPage")),
        image_url=_url(schema.get("image")),
        author=get_author_info(schema.get("author")),
        publisher=get_publisher_info(schema.get("publisher")),
    )
