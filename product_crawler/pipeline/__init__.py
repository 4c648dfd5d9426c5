# product_crawler/pipeline/__init__.py

# This file makes the step functions directly available from the 'pipeline' package.
from .steps import step_capture_selector, step_1_capture_snapshot, step_2_crawl_snapshot
