# product_crawler/models/record_models.py

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Dict, List, Optional


class FieldName(str, Enum):
    """The semantic slots of product data an operator can capture."""
    SKU = "sku"
    PRICE = "price"
    IMAGE = "image"
    PRODUCT_NAME = "productName"
    ATTRIBUTE_SECTION_1 = "attributeSection1"
    ATTRIBUTE_SECTION_2 = "attributeSection2"


# Attribute-section fields and the record slot their parsed specs go into.
ATTRIBUTE_SECTIONS = {
    FieldName.ATTRIBUTE_SECTION_1.value: "tech_specs",
    FieldName.ATTRIBUTE_SECTION_2.value: "tech_specs_2",
}


def utc_timestamp() -> str:
    """ISO-8601 UTC instant with millisecond precision, e.g. 2024-05-01T12:00:00.000Z"""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


@dataclass
class ExtractionRecord:
    """
    This class is the blueprint for our final output. It represents all the
    structured data extracted from a single product page.
    """
    source_url: str
    page_title: str
    timestamp: str = field(default_factory=utc_timestamp)
    fields: Dict[str, Optional[str]] = field(default_factory=dict)
    tech_specs: Dict[str, str] = field(default_factory=dict)
    tech_specs_2: Dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> Dict:
        """The exported JSON shape of the record."""
        return {
            "sourceUrl": self.source_url,
            "timestamp": self.timestamp,
            "pageTitle": self.page_title,
            "fields": dict(self.fields),
            "techSpecs": dict(self.tech_specs),
            "techSpecs2": dict(self.tech_specs_2),
        }


@dataclass
class CrawlerConfig:
    """The config export document: pages to crawl plus the captured selector map."""
    urls: List[str] = field(default_factory=list)
    selectors: Dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> Dict:
        return {
            "urls": [url for url in self.urls if url.strip()],
            "selectors": dict(self.selectors),
        }


@dataclass
class PageSnapshot:
    """One loaded page saved to disk by step 1 and read back by step 2."""
    url: str
    final_url: str
    title: str
    html_path: str
