"""Parsed HTML documents with CSS-selector and XPath query support.

A :class:`ParsedDocument` is owned by a single pipeline invocation: it is
built from one URL's HTML, queried by the classifier and extractors, and then
dropped.  CSS queries go through BeautifulSoup (``lxml`` parser); XPath
expressions are evaluated against an ``lxml.html`` tree built lazily the
first time one is needed.
"""

from typing import List, Optional

from bs4 import BeautifulSoup, Tag
from lxml import etree, html as lxml_html

from app.exceptions import ParseError, XPathError

_HTML_PARSER = lxml_html.HTMLParser(encoding="utf-8")


class ParsedDocument:
    """The query surface shared by the classifier and the extractors."""

    def __init__(self, html: str) -> None:
        self._html = html
        self.soup = BeautifulSoup(html, "lxml")
        self._tree: Optional[etree._Element] = None

    def select_one(self, selector: str) -> Optional[Tag]:
        return self.soup.select_one(selector)

    def select(self, selector: str) -> List[Tag]:
        return self.soup.select(selector)

    def meta_content(self, name: str) -> Optional[str]:
        """Return the ``content`` of the first ``<meta name=...>`` tag, if any."""
        meta = self.soup.find("meta", attrs={"name": name})
        if meta and meta.get("content"):
            return str(meta["content"])
        return None

    def json_ld_blocks(self) -> List[str]:
        """Return the raw text of every ``application/ld+json`` script, in document order."""
        return [
            script.string or ""
            for script in self.soup.find_all("script", type="application/ld+json")
        ]

    @property
    def tree(self) -> etree._Element:
        if self._tree is None:
            try:
                # Bytes + explicit encoding: lxml rejects str input that carries an XML declaration
                self._tree = lxml_html.document_fromstring(
                    self._html.encode("utf-8"), parser=_HTML_PARSER
                )
            except (etree.ParserError, ValueError) as exc:
                raise ParseError(f"Could not build an XPath tree: {exc}") from exc
        return self._tree

    def xpath_texts(self, expression: str) -> List[str]:
        """Evaluate *expression* and return the text content of every match, in order.

        Element matches contribute their full descendant text; ``text()`` and
        attribute matches contribute their string value.

        Raises:
            XPathError: the expression is malformed, fails to evaluate, or
                does not produce a node-set.
        """
        try:
            result = self.tree.xpath(expression)
        except etree.XPathError as exc:
            raise XPathError(expression, str(exc)) from exc

        if not isinstance(result, list):
            raise XPathError(expression, "expression does not select nodes")

        return [_text_content(node) for node in result]


def _text_content(node) -> str:
    if isinstance(node, str):
        # lxml "smart strings" for text() and @attr results
        return str(node)
    if isinstance(node, lxml_html.HtmlElement):
        return node.text_content()
    if isinstance(node, etree._Element):
        return "".join(node.itertext()) if isinstance(node.tag, str) else (node.text or "")
    return str(node)


def parse_document(html: Optional[str]) -> ParsedDocument:
    """Parse *html* into a :class:`ParsedDocument`.

    Raises:
        ParseError: the body is empty or cannot be interpreted as HTML.
    """
    if html is None or not html.strip():
        raise ParseError("Response body is empty.")
    try:
        return ParsedDocument(html)
    except (etree.ParserError, ValueError) as exc:
        raise ParseError(f"Response body is not valid HTML: {exc}") from exc
