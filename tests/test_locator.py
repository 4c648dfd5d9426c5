"""Tests for the resilient locator: exact selector first, then per-field fallbacks."""

from product_crawler.extraction.locator import FALLBACK_SELECTORS, locate


class TestFallbackTables:

    def test_only_price_image_and_sku_have_fallbacks(self):
        assert set(FALLBACK_SELECTORS) == {"price", "image", "sku"}

    def test_tables_are_ordered_and_non_empty(self):
        for field, selectors in FALLBACK_SELECTORS.items():
            assert isinstance(selectors, tuple), field
            assert selectors, field

    def test_image_table_ends_with_any_img(self):
        assert FALLBACK_SELECTORS["image"][-1] == "img"


class TestLocate:

    def test_exact_selector_returns_first_match(self, product_document):
        node = locate(product_document, "div.spec-row", "attributeSection1")
        assert node is product_document.query_all("div.spec-row")[0]

    def test_price_fallback_when_selector_is_stale(self, product_document):
        node = locate(product_document, "#old-price-id", "price")
        assert node is product_document.query("span.current-price")

    def test_price_fallback_on_cost_class(self, build_document):
        doc = build_document('<div class="unit-cost">$3</div>')
        assert locate(doc, ".gone", "price") is doc.query("div.unit-cost")

    def test_image_fallback_prefers_product_like_src(self, build_document):
        doc = build_document(
            '<img src="/logo.svg"><img src="/media/product/42.jpg">'
        )
        assert locate(doc, ".gone", "image") is doc.query_all("img")[1]

    def test_image_fallback_takes_any_img_last(self, build_document):
        doc = build_document('<img src="/logo.svg">')
        assert locate(doc, ".gone", "image") is doc.query("img")

    def test_sku_fallback_on_data_attribute(self, product_document):
        node = locate(product_document, "#old-sku", "sku")
        assert node is product_document.query("span.model-number")

    def test_product_name_fails_closed(self, product_document):
        assert locate(product_document, "h2.gone", "productName") is None

    def test_attribute_sections_fail_closed(self, product_document):
        assert locate(product_document, "#gone", "attributeSection1") is None
        assert locate(product_document, "#gone", "attributeSection2") is None

    def test_invalid_selector_falls_through_to_fallbacks(self, product_document):
        node = locate(product_document, "div[", "price")
        assert node is product_document.query("span.current-price")

    def test_invalid_selector_without_fallback_is_none(self, product_document):
        assert locate(product_document, "div[", "productName") is None

    def test_empty_selector_uses_fallbacks(self, product_document):
        assert locate(product_document, "", "sku") is product_document.query("span.model-number")

    def test_selector_without_xpath_form_falls_through_to_fallbacks(self, product_document):
        # A hex escape that decodes to a control character cannot become an XPath literal.
        node = locate(product_document, 'span[title="\\1"]', "price")
        assert node is product_document.query("span.current-price")
