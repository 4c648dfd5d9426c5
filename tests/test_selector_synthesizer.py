"""
Tests for selector synthesis: rule priority, utility-class filtering and the
locate(synthesize(n)) round trip on an unmodified document.
"""

import pytest

from product_crawler.extraction.locator import locate
from product_crawler.extraction.selector_synthesizer import (
    css_escape,
    css_string,
    is_utility_class,
    meaningful_classes,
    positional_path,
    synthesize_selector,
    utility_rule_for,
)


class TestUtilityClassRules:
    """Each deny-list rule can be targeted on its own."""

    @pytest.mark.parametrize("token, rule", [
        ("js-toggle", "framework-prefix"),
        ("react-modal", "framework-prefix"),
        ("md:flex", "state-variant"),
        ("hover:bg-blue-500", "state-variant"),
        ("px-4", "spacing"),
        ("-mt-2", "spacing"),
        ("flex", "layout"),
        ("items-center", "layout"),
        ("w-full", "sizing"),
        ("text-xl", "typography"),
        ("font-bold", "typography"),
        ("bg-blue-500", "colour"),
        ("rounded-lg", "colour"),
        ("gray-200", "palette"),
        ("shadow-md", "effects"),
        ("css-1q2w3e", "css-in-js"),
        ("t3V0AOwowrTfUzPn", "hashed"),
    ])
    def test_rule_matches(self, token, rule):
        assert utility_rule_for(token) == rule

    @pytest.mark.parametrize("token", [
        "price", "product-title", "current-price", "hero", "gallery", "spec-row", "sku-number",
    ])
    def test_semantic_tokens_survive(self, token):
        assert not is_utility_class(token)

    def test_meaningful_classes_keeps_dom_order(self, build_document):
        doc = build_document('<div class="px-4 product-card flex featured">x</div>')
        node = doc.query("div")
        assert meaningful_classes(node) == ["product-card", "featured"]


class TestEscaping:

    def test_plain_identifier_unchanged(self):
        assert css_escape("main-price") == "main-price"

    def test_leading_digit_is_hex_escaped(self):
        assert css_escape("1abc") == "\\31 abc"

    def test_special_characters_are_escaped(self):
        assert css_escape("w-1/2") == "w-1\\/2"

    def test_lone_hyphen(self):
        assert css_escape("-") == "\\-"

    def test_string_quotes_escaped(self):
        assert css_string('say "hi"') == '"say \\"hi\\""'


class TestSynthesizeSelector:

    def test_id_wins(self, build_document):
        doc = build_document('<span id="main-price" class="price">$5</span>')
        node = doc.query("span")
        assert synthesize_selector(doc, node) == "#main-price"

    def test_id_round_trip(self, build_document):
        doc = build_document('<div><span id="main-price">$5</span><span>$6</span></div>')
        node = doc.query("#main-price")
        selector = synthesize_selector(doc, node)
        assert locate(doc, selector, "productName") is node

    def test_first_semantic_class_skips_utilities(self, product_document):
        node = product_document.query("h1")
        assert synthesize_selector(product_document, node) == "h1.product-title"

    def test_data_attribute_when_class_is_shared(self, build_document):
        doc = build_document(
            '<span class="badge" data-kind="sale">A</span>'
            '<span class="badge" data-kind="new">B</span>'
        )
        node = doc.query_all("span")[1]
        assert synthesize_selector(doc, node) == 'span[data-kind="new"]'

    def test_marker_attributes_are_ignored(self, build_document):
        doc = build_document(
            '<span class="badge" data-crawler-selected="price">A</span>'
            '<span class="badge">B</span>'
        )
        node = doc.query_all("span")[0]
        assert "data-crawler" not in synthesize_selector(doc, node)

    def test_class_combination(self, build_document):
        doc = build_document(
            '<p class="note small">A</p><p class="note">B</p><p class="small">C</p>'
        )
        node = doc.query_all("p")[0]
        assert synthesize_selector(doc, node) == "p.note.small"

    def test_role(self, build_document):
        doc = build_document('<div role="dialog">A</div><div role="button">B</div>')
        node = doc.query_all("div")[0]
        assert synthesize_selector(doc, node) == 'div[role="dialog"]'

    def test_positional_fallback(self, build_document):
        doc = build_document("<ul><li>a</li><li>b</li></ul>")
        node = doc.query_all("li")[1]
        selector = synthesize_selector(doc, node)
        assert selector == "body:nth-of-type(1) ul:nth-of-type(1) li:nth-of-type(2)"
        assert locate(doc, selector, "productName") is node

    def test_positional_fallback_keeps_semantic_classes(self, product_document):
        node = product_document.query_all("#key-specs div.spec-row")[1]
        selector = synthesize_selector(product_document, node)
        assert selector == "div.page:nth-of-type(1) div.specs:nth-of-type(4) div.spec-row:nth-of-type(2)"
        assert locate(product_document, selector, "attributeSection1") is node

    def test_backslash_in_data_value_does_not_break_synthesis(self, build_document):
        doc = build_document(
            r'<p class="a" data-path="C:\data\1">x</p><p class="a">y</p>'
        )
        node = doc.query_all("p")[0]
        selector = synthesize_selector(doc, node)
        assert "data-path" not in selector
        assert locate(doc, selector, "productName") is node

    def test_positional_path_depth(self, build_document):
        doc = build_document("<div><section><p><b>x</b></p></section></div>")
        assert positional_path(doc.query("b")) == "section:nth-of-type(1) p:nth-of-type(1) b:nth-of-type(1)"

    def test_non_element_returns_empty(self, build_document):
        doc = build_document("<div><!-- note --></div>")
        comment = doc.query("div")[0]
        assert synthesize_selector(doc, comment) == ""

    @pytest.mark.parametrize("selector", [
        "h1", "span.current-price", "img.hero", "img.thumb", "span.model-number", "#key-specs", "div.more-specs",
    ])
    def test_round_trip_on_unmodified_document(self, product_document, selector):
        node = product_document.query(selector)
        synthesized = synthesize_selector(product_document, node)
        assert locate(product_document, synthesized, "productName") is node
