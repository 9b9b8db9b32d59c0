"""Page-type classification from DOM structure.

A page is matched against an ordered list of CSS-selector rules and gets the
tag of the first rule with at least one matching element.  Order matters: a
product page usually also contains a generic ``<article>``, so the more
specific rules come first.

Two rule sets exist, one per batch variant, each with its own vocabulary:

Metadata batch (:data:`PAGE_RULES`)
    ``"PRO"``  product listing (``section.internal-products``)
    ``"ART"``  internal article container (``div.container.article-internal``)
    ``"COP"``  any other page with an ``<article>``
    ``"N/A"``  nothing matched

Structured-data batch (:data:`CONTENT_RULES`)
    ``"ART"``  standard editorial article
    ``"REC"``  recipe (article with empty content-format/source modifiers)
    ``"LAN"``  landing page (article opening with an image-less hero)
    ``"UNK"``  nothing matched
"""

import logging
from typing import NamedTuple, Optional, Sequence

from app.services.document import ParsedDocument

logger = logging.getLogger(__name__)


class ClassifierRule(NamedTuple):
    page_type: str
    selector: str
    # Short marker reported alongside the type; None means "report nothing"
    element: Optional[str] = None


class Classification(NamedTuple):
    page_type: str
    element: Optional[str] = None


PAGE_RULES: Sequence[ClassifierRule] = (
    ClassifierRule("PRO", "section.internal-products"),
    ClassifierRule("ART", "div.container.article-internal"),
    ClassifierRule("COP", "article"),
)
PAGE_DEFAULT = "N/A"

CONTENT_RULES: Sequence[ClassifierRule] = (
    ClassifierRule(
        "ART",
        "article.content-format--article.content_expertize--standard.content-source--standard",
        "article.content-format--article",
    ),
    ClassifierRule(
        "REC",
        "article.content-format--.content-source--",
        "article.content-format--",
    ),
    ClassifierRule(
        "LAN",
        "article div.paragraph.full-width.paragraph-hero.hero-without-image",
        "article > div.paragraph-hero",
    ),
)
CONTENT_DEFAULT = "UNK"


def classify(
    document: ParsedDocument,
    rules: Sequence[ClassifierRule] = PAGE_RULES,
    default: str = PAGE_DEFAULT,
) -> Classification:
    """Return the classification of the first rule in *rules* that matches *document*."""
    for rule in rules:
        if document.select_one(rule.selector) is not None:
            logger.debug("Classified as %s via %r", rule.page_type, rule.selector)
            return Classification(rule.page_type, rule.element)
    return Classification(default, None)


def classify_page(document: ParsedDocument) -> str:
    """Page type for the metadata batch."""
    return classify(document, PAGE_RULES, PAGE_DEFAULT).page_type


def classify_content(document: ParsedDocument) -> Classification:
    """Content type and marker element for the structured-data batch."""
    return classify(document, CONTENT_RULES, CONTENT_DEFAULT)
