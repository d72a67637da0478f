import argparse
import asyncio
import logging
import sys

from jobsweep.config.settings import settings
from jobsweep.core.canonical import Canonicalizer
from jobsweep.core.errors import ExhaustedRetries
from jobsweep.core.pipeline import ScrapeConfig
from jobsweep.core.report import report_file
from jobsweep.core.runner import PROFILES, get_profile, run_scrape

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    handlers=[logging.StreamHandler(sys.stdout)],
)

logger = logging.getLogger(__name__)


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Scrape job listings from one site.")
    parser.add_argument("site", choices=sorted(PROFILES.keys()))
    parser.add_argument("query", nargs="?", default="python developer")
    parser.add_argument("location", nargs="?", default="Toronto, ON")
    parser.add_argument("--url", help="Start from this results url instead of a search")
    parser.add_argument("--attempts", type=int, default=settings.MAX_ATTEMPTS)
    parser.add_argument("--pages", type=int, default=settings.MAX_PAGES)
    parser.add_argument("--seed", type=int)
    parser.add_argument("--output", help="Output JSON path (default: OUTPUT_DIR/<site>.json)")
    return parser.parse_args(argv)


def parse_report_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="main.py report", description="Count duplicate listings in a saved results file."
    )
    parser.add_argument("path", help="JSON file written by a scrape")
    parser.add_argument(
        "--site", choices=sorted(PROFILES.keys()), help="Canonicalize urls with this site's rules"
    )
    return parser.parse_args(argv)


def report(argv=None) -> int:
    args = parse_report_args(argv)
    rules = get_profile(args.site).canonical_rules if args.site else None
    report_file(args.path, Canonicalizer(rules))
    return 0


async def main(argv=None) -> int:
    """
    Main entry point.
    """
    if argv is None:
        argv = sys.argv[1:]
    if argv[:1] == ["report"]:
        return report(argv[1:])

    args = parse_args(argv)
    config = ScrapeConfig(
        start_url=args.url,
        query=args.query,
        location=args.location,
        max_attempts=args.attempts,
        max_pages=args.pages,
        seed=args.seed,
        output_path=args.output or settings.OUTPUT_DIR / f"{args.site}.json",
    )

    try:
        await run_scrape(args.site, config)
    except ExhaustedRetries as e:
        logger.error(f"Scrape failed: {e}")
        return 1
    return 0


if __name__ == "__main__":
    try:
        sys.exit(asyncio.run(main()))
    except KeyboardInterrupt:
        pass
