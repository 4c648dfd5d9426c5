# product_crawler/extraction/spec_parser.py
"""
Turns the text of a "Key Specs" block into a label -> value mapping.

The block renders labels and values back to back with no delimiters, so the
text is segmented on a fixed catalogue of known labels: a value runs from the
end of its label to the nearest following catalogue label. Labels missing
from the catalogue are not recovered, and a value that itself contains a
catalogue label is cut short at that label.
"""
import logging
import re
from dataclasses import dataclass
from typing import Dict, Tuple

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SpecCatalogueEntry:
    label: str
    match_token: str


@dataclass(frozen=True)
class SpecCleanupRule:
    """Fixes a known concatenation artifact in the value of one label."""
    name: str
    label: str
    needle: str
    replacement: str
    # Replace the whole value instead of just the needle.
    whole_value: bool = False

    def apply(self, label: str, value: str) -> str:
        if label != self.label or self.needle not in value:
            return value
        if self.whole_value:
            return self.replacement
        return value.replace(self.needle, self.replacement)


SPEC_CATALOGUE: Tuple[SpecCatalogueEntry, ...] = tuple(
    SpecCatalogueEntry(label, label) for label in (
        "Display Type",
        "Resolution",
        "Screen Size Class",
        "High Dynamic Range (HDR)",
        "Panel Type",
        "Backlight Type",
        "Refresh Rate",
        "Smart Platform",
        "Featured Streaming Services",
        "Number of HDMI Inputs (Total)",
        "TV Tuner Type",
        "Works With",
        "Voice Assistant",
    )
)

BOILERPLATE_HEADINGS = ("Key Specs",)

SPEC_CLEANUP_RULES = (
    # "No" glued to the next row's "LED" when the HDR row is followed by the display type.
    SpecCleanupRule("hdr-glued-display-type", "High Dynamic Range (HDR)", "NoLED", "No", whole_value=True),
    SpecCleanupRule("voice-assistant-built-in", "Voice Assistant", "Built-inAmazon", "Built-in Amazon"),
)


def normalize_spec_text(raw_text: str) -> str:
    text = re.sub(r"\s+", " ", raw_text or "").strip()
    for heading in BOILERPLATE_HEADINGS:
        text = text.replace(heading, "", 1)
    return text.strip()


def _value_end(text: str, entry: SpecCatalogueEntry, start: int, catalogue) -> int:
    end = len(text)
    for other in catalogue:
        if other.match_token == entry.match_token:
            continue
        position = text.find(other.match_token, start)
        if position != -1 and position < end:
            end = position
    return end


def _strip_trailing_token(value: str, entry: SpecCatalogueEntry, catalogue) -> str:
    for other in catalogue:
        if other.match_token != entry.match_token and value.endswith(other.match_token):
            value = value[: -len(other.match_token)].strip()
    return value


def parse_spec_block(raw_text: str, catalogue=SPEC_CATALOGUE) -> Dict[str, str]:
    """Parses an undelimited specification blob. Labels not found are absent from the result."""
    text = normalize_spec_text(raw_text)
    if not text:
        return {}
    logger.debug("Normalized spec text: %s", text)

    specs: Dict[str, str] = {}
    for entry in catalogue:
        index = text.find(entry.match_token)
        if index == -1:
            continue
        start = index + len(entry.match_token)
        value = text[start:_value_end(text, entry, start, catalogue)].strip()
        for rule in SPEC_CLEANUP_RULES:
            value = rule.apply(entry.label, value)
        value = _strip_trailing_token(value, entry, catalogue)
        if value:
            specs[entry.label] = value
            logger.debug("Extracted %s: %s", entry.label, value)

    logger.debug("Parsed %d specification rows.", len(specs))
    return specs
