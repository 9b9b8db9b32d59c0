"""Tests for app.services.speakable."""

from app.models.page import SpeakableItem, format_speakable
from app.services.document import parse_document
from app.services.speakable import extract_speakable

_HTML = """
<html>
<body>
  <h1>A</h1>
  <h1>B</h1>
  <div class="summary"><p>First</p><p>Second</p></div>
</body>
</html>
"""


def _speakable(xpaths, speakable_type="SpeakableSpecification") -> dict:
    spec = {"xpath": xpaths}
    if speakable_type is not None:
        spec["@type"] = speakable_type
    return {"@type": "WebPage", "speakable": spec}


class TestExtractSpeakable:
    def test_multiple_matches_are_comma_joined(self):
        items = extract_speakable(parse_document(_HTML), [_speakable(["//h1"])])
        assert items == [SpeakableItem(type="SpeakableSpecification", xpath="//h1", value="A, B")]

    def test_no_match_gives_empty_value(self):
        items = extract_speakable(parse_document(_HTML), [_speakable(["//h3"])])
        assert items[0].value == ""

    def test_one_item_per_xpath_in_order(self):
        schemas = [
            _speakable(["//h1", "//div[@class='summary']/p"]),
            {"@type": "Article"},
            _speakable(["//h1[2]"], speakable_type="Other"),
        ]
        items = extract_speakable(parse_document(_HTML), schemas)
        assert [(i.type, i.xpath, i.value) for i in items] == [
            ("SpeakableSpecification", "//h1", "A, B"),
            ("SpeakableSpecification", "//div[@class='summary']/p", "First, Second"),
            ("Other", "//h1[2]", "B"),
        ]

    def test_missing_type_defaults(self):
        items = extract_speakable(parse_document(_HTML), [_speakable(["//h1"], speakable_type=None)])
        assert items[0].type == "Unknown Type"

    def test_malformed_xpath_only_fails_its_item(self):
        items = extract_speakable(parse_document(_HTML), [_speakable(["//h1[", "//h1"])])
        assert [(i.xpath, i.value) for i in items] == [("//h1[", ""), ("//h1", "A, B")]

    def test_non_node_set_expression_yields_empty_value(self):
        items = extract_speakable(parse_document(_HTML), [_speakable(["count(//h1)"])])
        assert items[0].value == ""

    def test_single_string_xpath(self):
        items = extract_speakable(parse_document(_HTML), [_speakable("//h1[1]")])
        assert [(i.xpath, i.value) for i in items] == [("//h1[1]", "A")]

    def test_speakable_without_xpath_is_ignored(self):
        schema = {"@type": "WebPage", "speakable": {"@type": "SpeakableSpecification", "cssSelector": ["h1"]}}
        assert extract_speakable(parse_document(_HTML), [schema]) == []

    def test_list_of_speakable_specs(self):
        schema = {"@type": "WebPage", "speakable": [{"xpath": ["//h1[1]"]}, {"xpath": ["//h1[2]"]}]}
        items = extract_speakable(parse_document(_HTML), [schema])
        assert [i.value for i in items] == ["A", "B"]


class TestFormatSpeakable:
    def test_empty_list(self):
        assert format_speakable([]) == "No Speakable Data"

    def test_entries_joined_with_pipe(self):
        items = [
            SpeakableItem(type="T", xpath="//h1", value="A, B"),
            SpeakableItem(type="U", xpath="//p", value=""),
        ]
        assert format_speakable(items) == "Type: T, XPath: //h1, Value: A, B | Type: U, XPath: //p, Value: "
