# run_crawler.py
import asyncio
import argparse
import logging
import sys
from pathlib import Path

# Import RichHandler here for centralized logging
from rich.logging import RichHandler

from product_crawler import config
from product_crawler.delegates import FileManagerDelegate
from product_crawler.main import main as run_pipeline, capture as run_capture
from product_crawler.models import CrawlerConfig

if __name__ == "__main__":
    # --- Centralized Logging Configuration ---
    root_logger = logging.getLogger()
    root_logger.setLevel(logging.INFO) # Default level

    formatter = logging.Formatter(
        fmt="%(asctime)s - %(levelname)-8s - %(name)-25s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S"
    )

    log_file_path = Path("crawler.log")
    file_handler = logging.FileHandler(log_file_path)
    file_handler.setLevel(logging.DEBUG) # Log all debug messages to file
    file_handler.setFormatter(formatter)
    root_logger.addHandler(file_handler)

    rich_handler = RichHandler(
        level=logging.DEBUG,
        show_time=True,
        show_level=True,
        show_path=False,
    )
    root_logger.addHandler(rich_handler)

    # --- Argument Parsing ---
    parser = argparse.ArgumentParser(
        description="Capture selectors on a product page and crawl product data with them.",
        formatter_class=argparse.RawTextHelpFormatter
    )
    parser.add_argument(
        '--steps',
        nargs='+',
        type=int,
        choices=[1, 2],
        default=[1, 2],
        help="""Specify which pipeline steps to run.
    1: Load the page and save an HTML snapshot
    2: Crawl the snapshot with the stored selectors
Example: python run_crawler.py --steps 2
"""
    )
    parser.add_argument('--url', type=str, help="Product page URL. Defaults to the first URL of --config.")
    parser.add_argument('--config', type=str, help="Crawler config export ({urls, selectors}) to read.")
    parser.add_argument('--static', action='store_true', help="Fetch the page with a plain HTTP GET instead of a browser.")
    parser.add_argument(
        '--capture',
        type=str,
        metavar='FIELD',
        help=f"Open a browser on --url and capture the selector for FIELD (one of: {', '.join(config.FIELD_NAMES)})."
    )
    parser.add_argument('--export-config', action='store_true', help="Write the stored selectors and --url to the config export.")
    parser.add_argument('--clear-selectors', action='store_true', help="Forget all stored selectors.")
    parser.add_argument('--debug', action='store_true', help="Show debug messages on the console.")

    args = parser.parse_args()
    if args.debug:
        root_logger.setLevel(logging.DEBUG)

    file_manager = FileManagerDelegate(
        base_path=config.DATA_PATH,
        selector_store_name=config.SELECTOR_STORE_NAME,
        config_export_name=config.CONFIG_EXPORT_NAME,
    )

    selectors = file_manager.load_selectors()
    urls = []
    if args.config:
        crawler_config = file_manager.load_config(Path(args.config))
        if crawler_config is None:
            logging.critical("Could not read crawler config from %s", args.config)
            sys.exit(1)
        urls = crawler_config.urls
        selectors.update({field: sel for field, sel in crawler_config.selectors.items() if sel})
    url = args.url or (urls[0] if urls else None)

    if args.clear_selectors:
        file_manager.clear_selectors()
        sys.exit(0)

    if args.export_config:
        file_manager.export_config(CrawlerConfig(urls=[url] if url else urls, selectors=selectors))
        sys.exit(0)

    if args.capture:
        if args.capture not in config.FIELD_NAMES:
            logging.warning("'%s' is not a known field; it will be extracted as plain text.", args.capture)
        if not url:
            logging.critical("--capture needs a page URL (--url or --config).")
            sys.exit(1)
        try:
            selector = asyncio.run(run_capture(args.capture, url, file_manager))
        except KeyboardInterrupt:
            logging.warning("Capture interrupted by user.")
            sys.exit(1)
        sys.exit(0 if selector else 1)

    # --- Normal Pipeline Execution ---
    logging.info("=" * 60)
    logging.info("Product Crawler Pipeline Starting...")
    logging.info("Running steps: %s", args.steps)
    logging.info("=" * 60)

    try:
        asyncio.run(run_pipeline(steps_to_run=args.steps, url=url, selectors=selectors, static=args.static, file_manager=file_manager))
    except KeyboardInterrupt:
        logging.warning("Pipeline interrupted by user.")
    except Exception as e:
        logging.critical("An unexpected error occurred: %s", e, exc_info=True)
    finally:
        logging.info("=" * 60)
        logging.info("Pipeline execution finished.")
