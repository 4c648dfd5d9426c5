"""Tests for field extraction and SKU auto-detection."""

import pytest

from product_crawler.extraction.document import PageDocument
from product_crawler.extraction.field_extractor import (
    SKU_PATTERNS,
    auto_detect_sku,
    extract,
    match_sku_patterns,
    resolve_sku,
    sku_from_url,
)


class TestImageExtraction:

    def test_lazy_data_src_is_made_absolute(self, build_document):
        doc = build_document('<img data-src="/img/a.png">', url="https://shop.example/p/1")
        assert extract(doc, doc.query("img"), "image") == "https://shop.example/img/a.png"

    def test_src_property_resolves_relative_urls(self, build_document):
        doc = build_document('<img src="a.png">', url="https://shop.example/p/1")
        assert extract(doc, doc.query("img"), "image") == "https://shop.example/p/a.png"

    def test_src_wins_over_lazy_attributes(self, build_document):
        doc = build_document('<img src="https://cdn.example/big.jpg" data-src="/small.jpg">')
        assert extract(doc, doc.query("img"), "image") == "https://cdn.example/big.jpg"

    def test_protocol_relative_url_takes_page_scheme(self, build_document):
        doc = build_document('<div data-original="//cdn.example/x.jpg"></div>')
        assert extract(doc, doc.query("div"), "image") == "https://cdn.example/x.jpg"

    def test_link_href(self, build_document):
        doc = build_document('<a class="zoom" href="/zoom/1.jpg">zoom</a>')
        assert extract(doc, doc.query("a"), "image") == "https://shop.example/zoom/1.jpg"

    def test_descendant_img_is_probed(self, build_document):
        doc = build_document('<div class="frame"><span><img data-lazy-src="/x.jpg"></span></div>')
        assert extract(doc, doc.query("div.frame"), "image") == "https://shop.example/x.jpg"

    def test_no_source_anywhere_is_none(self, build_document):
        doc = build_document('<div class="frame"><img alt="nothing"></div>')
        assert extract(doc, doc.query("div.frame"), "image") is None

    def test_absolute_value_without_origin_is_left_alone(self):
        doc = PageDocument.from_html('<html><body><div data-image="/a.png"></div></body></html>')
        assert extract(doc, doc.query("div"), "image") == "/a.png"


class TestTextExtraction:

    def test_text_is_trimmed(self, product_document):
        assert extract(product_document, product_document.query("span.current-price"), "price") == "$499.99"

    def test_selected_label_is_stripped_case_insensitively(self, build_document):
        doc = build_document("<span>$10 selected: PRICE</span>")
        assert extract(doc, doc.query("span"), "price") == "$10"

    def test_script_text_is_not_rendered(self, build_document):
        doc = build_document("<div>Hello<script>var x = 1;</script><style>p{}</style> world</div>")
        assert extract(doc, doc.query("div"), "productName") == "Hello world"

    def test_blocks_are_separated(self, build_document):
        doc = build_document("<div><p>Acme</p><p>TV</p></div>")
        assert extract(doc, doc.query("div"), "productName") == "Acme\nTV"

    def test_raw_text_fallback(self, build_document):
        doc = build_document("<div><script>only script</script></div>")
        assert extract(doc, doc.query("div"), "productName") == "only script"

    def test_empty_element_gives_empty_string(self, build_document):
        doc = build_document("<span></span>")
        assert extract(doc, doc.query("span"), "productName") == ""

    def test_non_element_gives_none(self, build_document):
        doc = build_document("<div><!-- x --></div>")
        assert extract(doc, doc.query("div")[0], "price") is None

    def test_never_raises_on_missing_node(self, product_document):
        assert extract(product_document, None, "image") is None


class TestSkuDetection:

    def test_pattern_table_is_named_and_ordered(self):
        names = [name for name, _ in SKU_PATTERNS]
        assert names[:3] == ["url-sku-id", "url-product-id", "url-item-id"]
        assert len(names) == len(set(names))

    @pytest.mark.parametrize("text, sku", [
        ("https://shop.example/p?sku_id=ABC123", "ABC123"),
        ("https://shop.example/p?skuId=6501234&x=1", "6501234"),
        ("https://shop.example/p?product-id=P_77", "P_77"),
        ("https://shop.example/p?itemid=9", "9"),
        ('{"sku": "M-42"}', "M-42"),
        ('{"productId": "PX1"}', "PX1"),
        ('data-item-id="I-5"', "I-5"),
        ("https://shop.example/p/widget", None),
    ])
    def test_match_sku_patterns(self, text, sku):
        assert match_sku_patterns(text) == sku

    def test_url_source_first(self, build_document):
        doc = build_document('<div data-sku="FROM-DATA"></div>', url="https://shop.example/p?sku_id=ABC123")
        assert auto_detect_sku(doc) == "ABC123"

    def test_meta_source(self):
        doc = PageDocument.from_html(
            """<html><head><meta name="product" content='{"sku": "M-42"}'></head>
            <body><div data-sku="FROM-DATA"></div></body></html>""",
            url="https://shop.example/p/widget",
        )
        assert auto_detect_sku(doc) == "M-42"

    def test_data_attribute_source(self, build_document):
        doc = build_document('<div data-product-id="P-9"></div>')
        assert auto_detect_sku(doc) == "P-9"

    def test_nothing_found(self, build_document):
        assert auto_detect_sku(build_document("<p>hello</p>")) is None


class TestResolveSku:

    def test_url_overrides_selector_value(self, build_document):
        doc = build_document("<p>x</p>", url="https://shop.example/p?sku_id=ABC123")
        assert resolve_sku(doc, "OLD999") == "ABC123"

    def test_selector_value_kept_without_url_sku(self, build_document):
        doc = build_document('<div data-sku="FROM-DATA"></div>')
        assert resolve_sku(doc, "KEEP1") == "KEEP1"

    def test_empty_selector_value_falls_back_to_detection(self, build_document):
        doc = build_document('<div data-sku="FROM-DATA"></div>')
        assert resolve_sku(doc, "") == "FROM-DATA"
        assert resolve_sku(doc, None) == "FROM-DATA"

    def test_sku_from_url_ignores_plain_paths(self):
        assert sku_from_url("https://shop.example/site/acme-55-tv/6501234.p") is None
