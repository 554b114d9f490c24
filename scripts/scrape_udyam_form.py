#!/usr/bin/env python3
"""
Scrape Udyam Form.

Fetches the Udyam registration portal and writes the form schema JSON
the API compiles its validators from.

Usage:
    python scripts/scrape_udyam_form.py
    python scripts/scrape_udyam_form.py --output config/forms/udyam_form_schema.json
    python scripts/scrape_udyam_form.py --from-file saved_page.html
"""

import argparse
import asyncio
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

import httpx

from modules.scraper import UdyamFormScraper
from shared.utils.config import settings
from shared.utils.logger import setup_logger, log_error

logger = setup_logger(__name__)


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Scrape the Udyam registration form schema")
    parser.add_argument(
        "--url",
        default=settings.UDYAM_PORTAL_URL,
        help="Portal page URL",
    )
    parser.add_argument(
        "--output",
        default=str(settings.form_schema_path),
        help="Where to write the schema JSON",
    )
    parser.add_argument(
        "--from-file",
        dest="from_file",
        help="Parse a saved HTML page instead of fetching",
    )
    return parser.parse_args(argv)


async def run(args: argparse.Namespace) -> bool:
    scraper = UdyamFormScraper(url=args.url)

    logger.info("=" * 80)
    logger.info("UDYAM FORM SCRAPER")
    logger.info("=" * 80)

    if args.from_file:
        html = Path(args.from_file).read_text(encoding="utf-8")
        schema = scraper.build_schema(scraper.parse_controls(html))
    else:
        try:
            schema = await scraper.scrape()
        except httpx.HTTPError as e:
            log_error(logger, e, f"✗ Failed to fetch {args.url}")
            return False

    path = scraper.save(schema, args.output)

    logger.info(f"✓ Steps: {len(schema.steps)}")
    logger.info(f"✓ Fields: {schema.metadata['totalFields']}")
    logger.info(f"✓ Scraped: {', '.join(schema.metadata['scrapedFields']) or 'none'}")
    logger.info(f"✓ Written: {path}")
    return True


def main() -> int:
    args = parse_args()
    success = asyncio.run(run(args))
    return 0 if success else 1


if __name__ == "__main__":
    sys.exit(main())
