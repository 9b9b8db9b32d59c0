"""Speakable passages: XPath expressions declared in JSON-LD, evaluated on the page."""

import logging
from typing import Any, Iterator, List, Sequence

from app.exceptions import ParseError, XPathError
from app.models.page import SpeakableItem
from app.services.document import ParsedDocument
from app.services.structured_data import JsonLdEntity

logger = logging.getLogger(__name__)

UNKNOWN_TYPE = "Unknown Type"


def _speakable_specs(schema: JsonLdEntity) -> Iterator[dict]:
    speakable = schema.get("speakable")
    if isinstance(speakable, dict):
        yield speakable
    elif isinstance(speakable, list):
        for spec in speakable:
            if isinstance(spec, dict):
                yield spec


def _xpaths(spec: dict) -> List[str]:
    xpath = spec.get("xpath")
    if isinstance(xpath, str):
        return [xpath]
    if isinstance(xpath, list):
        return [x for x in xpath if isinstance(x, str)]
    return []


def evaluate_xpath(document: ParsedDocument, expression: str) -> str:
    """Return the text of every node matched by *expression*, joined with ``", "``."""
    return ", ".join(document.xpath_texts(expression))


def extract_speakable(document: ParsedDocument, schemas: Sequence[JsonLdEntity]) -> List[SpeakableItem]:
    """Evaluate every ``speakable.xpath`` found in *schemas*, in encounter order.

    An expression that fails to evaluate yields an item with an empty value.
    """
    items: List[SpeakableItem] = []
    for schema in schemas:
        for spec in _speakable_specs(schema):
            speakable_type = _type_name(spec.get("@type"))
            for expression in _xpaths(spec):
                try:
                    value = evaluate_xpath(document, expression)
                except (XPathError, ParseError) as exc:
                    logger.warning("Speakable XPath failed: %s", exc)
                    value = ""
                items.append(SpeakableItem(type=speakable_type, xpath=expression, value=value))
    return items


def _type_name(value: Any) -> str:
    if isinstance(value, list) and value:
        return ", ".join(str(v) for v in value)
    if isinstance(value, str) and value:
        return value
    return UNKNOWN_TYPE
