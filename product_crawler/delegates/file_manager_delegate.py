# product_crawler/delegates/file_manager_delegate.py
import json
import json5
import re
import logging
from dataclasses import asdict
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional
from ..models import CrawlerConfig, ExtractionRecord, PageSnapshot

logger = logging.getLogger(__name__)

SELECTOR_KEY_PREFIX = "selector_"
SNAPSHOT_MANIFEST_NAME = "snapshots.json"

class FileManagerDelegate:
    """Handles all file system interactions: stored selectors, snapshots and exports."""
    def __init__(self, base_path: Path, selector_store_name: str = "selectors.json", config_export_name: str = "crawler-config.json"):
        self.base_path = base_path
        self.selectors_path = base_path / "0_selectors"
        self.snapshots_path = base_path / "1_snapshots"
        self.records_path = base_path / "2_records"
        self.exports_path = base_path / "exports"
        self.selector_store_path = self.selectors_path / selector_store_name
        self.config_export_path = self.exports_path / config_export_name

        for p in [self.selectors_path, self.snapshots_path, self.records_path, self.exports_path]:
            p.mkdir(parents=True, exist_ok=True)
        logger.info("File manager initialized. Data will be stored in subdirectories of: %s", base_path)

    def _write_json(self, file_path: Path, data) -> Path:
        try:
            with file_path.open("w", encoding="utf-8") as f:
                json.dump(data, f, indent=2, ensure_ascii=False)
            return file_path
        except TypeError as te:
            logger.error("TypeError during JSON dump to %s (unserializable object?): %s", file_path, te)
            raise
        except Exception as e:
            logger.error("Failed to write %s: %s", file_path, e, exc_info=True)
            raise

    def _read_json(self, file_path: Path):
        """Reads JSON leniently (comments, trailing commas). Returns None if missing or invalid."""
        if not file_path.exists():
            logger.debug("JSON file not found at: %s", file_path)
            return None
        try:
            with file_path.open("r", encoding="utf-8") as f:
                return json5.load(f)
        except ValueError as e:
            logger.error("Error decoding JSON file %s: %s", file_path, e)
            return None

    # --- Selector storage: one 'selector_<field>' key per captured field ---

    def load_selectors(self) -> Dict[str, str]:
        stored = self._read_json(self.selector_store_path) or {}
        selectors = {
            key[len(SELECTOR_KEY_PREFIX):]: value
            for key, value in stored.items()
            if key.startswith(SELECTOR_KEY_PREFIX) and isinstance(value, str)
        }
        logger.debug("Loaded %d stored selectors.", len(selectors))
        return selectors

    def save_selectors(self, selectors: Dict[str, str]) -> Path:
        data = {f"{SELECTOR_KEY_PREFIX}{field}": selector for field, selector in selectors.items() if selector}
        path = self._write_json(self.selector_store_path, data)
        logger.info("Saved %d selectors to: %s", len(data), path.name)
        return path

    def store_selector(self, field: str, selector: str) -> Path:
        """Stores one captured selector, keeping the others."""
        selectors = self.load_selectors()
        selectors[field] = selector
        logger.info("Stored selector for %s: %s", field, selector)
        return self.save_selectors(selectors)

    def clear_selectors(self):
        if self.selector_store_path.exists():
            self.selector_store_path.unlink()
        logger.info("Cleared stored selectors.")

    # --- Config export: { urls, selectors } ---

    def export_config(self, config: CrawlerConfig) -> Path:
        path = self._write_json(self.config_export_path, config.to_dict())
        logger.info("Exported crawler config to: %s", path)
        return path

    def load_config(self, path: Optional[Path] = None) -> Optional[CrawlerConfig]:
        data = self._read_json(path or self.config_export_path)
        if not isinstance(data, dict):
            return None
        urls = [url for url in data.get("urls", []) if isinstance(url, str) and url.strip()]
        selectors = {k: v for k, v in (data.get("selectors") or {}).items() if isinstance(v, str)}
        logger.info("Loaded crawler config with %d urls and %d selectors.", len(urls), len(selectors))
        return CrawlerConfig(urls=urls, selectors=selectors)

    # --- Page snapshots ---

    def _manifest_path(self) -> Path:
        return self.snapshots_path / SNAPSHOT_MANIFEST_NAME

    def list_snapshots(self) -> List[PageSnapshot]:
        entries = self._read_json(self._manifest_path()) or []
        snapshots = []
        for entry in entries:
            try:
                snapshots.append(PageSnapshot(**entry))
            except TypeError:
                logger.warning("Skipping malformed snapshot manifest entry: %s", entry)
        return snapshots

    def save_snapshot(self, html: str, url: str, final_url: str, title: str) -> PageSnapshot:
        """Saves the HTML of a loaded page and records it in the snapshot manifest."""
        safe_name = re.sub(r'[^a-zA-Z0-9_-]', '_', url.split("://", 1)[-1])[:80]
        stamp = datetime.now().strftime("%Y%m%d-%H%M%S-%f")
        file_path = self.snapshots_path / f"{safe_name}_{stamp}.html"
        try:
            file_path.write_text(html, encoding="utf-8")
        except Exception as e:
            logger.error("Failed to save snapshot for %s to %s: %s", url, file_path, e, exc_info=True)
            raise

        snapshot = PageSnapshot(url=url, final_url=final_url, title=title or "", html_path=str(file_path))
        snapshots = self.list_snapshots()
        snapshots.append(snapshot)
        self._write_json(self._manifest_path(), [asdict(s) for s in snapshots])
        logger.info("Saved snapshot of %s to %s", url, file_path.name)
        return snapshot

    def latest_snapshot(self, url: Optional[str] = None) -> Optional[PageSnapshot]:
        for snapshot in reversed(self.list_snapshots()):
            if url is None or url in (snapshot.url, snapshot.final_url):
                return snapshot
        return None

    def load_snapshot_html(self, snapshot: PageSnapshot) -> Optional[str]:
        path = Path(snapshot.html_path)
        if not path.exists():
            logger.error("Snapshot HTML missing at: %s", path)
            return None
        return path.read_text(encoding="utf-8")

    # --- Crawl export ---

    def save_record(self, record: ExtractionRecord) -> Path:
        """Saves one extraction record as crawled-data-<timestamp>.json."""
        stamp = re.sub(r'[:.]', '-', record.timestamp)
        path = self._write_json(self.records_path / f"crawled-data-{stamp}.json", record.to_dict())
        logger.info("Saved crawled data for %s to %s", record.source_url, path.name)
        return path
