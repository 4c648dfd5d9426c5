# product_crawler/models/__init__.py

# This file makes the model classes directly available from the 'models' package.
# Instead of: from product_crawler.models.record_models import ExtractionRecord
# We can now use: from product_crawler.models import ExtractionRecord

from .record_models import (
    ATTRIBUTE_SECTIONS,
    CrawlerConfig,
    ExtractionRecord,
    FieldName,
    PageSnapshot,
    utc_timestamp,
)
