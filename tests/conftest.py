import pytest

from product_crawler.extraction import PageDocument

PRODUCT_URL = "https://shop.example/site/acme-55-tv/6501234.p"

PRODUCT_HTML = """
<html>
<head>
  <title>Acme 55" Class 4K UHD Smart TV</title>
  <meta charset="utf-8">
  <meta name="description" content="A television">
</head>
<body>
  <div class="page flex px-4">
    <h1 class="text-xl product-title">Acme 55" Class 4K UHD Smart TV</h1>
    <div class="pricing">
      <span class="current-price font-bold">$499.99</span>
      <span class="was-price">$599.99</span>
    </div>
    <div class="gallery">
      <img class="hero" data-src="/img/a.png" alt="Front view">
      <img class="thumb" src="/img/thumb-1.png" alt="Side view">
    </div>
    <div class="model-line">Model: <span class="model-number" data-sku="6501234">6501234</span></div>
    <div id="key-specs" class="specs">
      <h3>Key Specs</h3>
      <div class="spec-row"><span>Display Type</span><span>LED</span></div>
      <div class="spec-row"><span>Resolution</span><span>4K UHD (2160p)</span></div>
      <div class="spec-row"><span>Smart Platform</span><span>Roku</span></div>
    </div>
    <div class="more-specs">
      <div class="spec-row"><span>Refresh Rate</span><span>60Hz</span></div>
      <div class="spec-row"><span>Voice Assistant</span><span>Built-inAmazon Alexa</span></div>
    </div>
  </div>
</body>
</html>
"""

# Same product, but with no markup a price fallback selector could latch on to.
PLAIN_HTML = """
<html>
<head><title>Plain product</title></head>
<body>
  <h1 id="name">Plain Widget</h1>
  <p class="amount">$10.00</p>
  <img id="photo" src="/media/widget.jpg" alt="Widget">
  <span id="code">W-100</span>
  <section id="attrs">Key SpecsDisplay Type LED Resolution 4K UHD Smart Platform Roku</section>
</body>
</html>
"""


@pytest.fixture
def product_document():
    return PageDocument.from_html(PRODUCT_HTML, url=PRODUCT_URL)


@pytest.fixture
def plain_document():
    return PageDocument.from_html(PLAIN_HTML, url="https://shop.example/p/widget")


def make_document(body: str, url: str = "https://shop.example/p/1") -> PageDocument:
    return PageDocument.from_html(f"<html><head><title>Test</title></head><body>{body}</body></html>", url=url)


@pytest.fixture
def build_document():
    return make_document
