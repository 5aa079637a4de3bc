"""
Main entry point for the documentation scraper.

Provides the `list`, `scrape`, `quick` and `convert` commands. Fatal
errors (unknown preset, missing URL, browser launch failure, unsupported
conversion format) are reported and end the process with status 1.
"""

import os
import sys
import argparse
import logging

from doc_scraper import __version__
from doc_scraper.config import load_presets, resolve_config, DEFAULT_OUTPUT_DIR, OUTPUT_FORMATS
from doc_scraper.converter import convert_archive, CONVERT_FORMATS
from doc_scraper.crawler import run_crawl
from doc_scraper.errors import DocScraperError, PresetNotFoundError
from doc_scraper.logger import setup_logging, log_crawl_summary

logger = logging.getLogger(__name__)


def build_parser():
    parser = argparse.ArgumentParser(
        prog="doc-scraper",
        description="Crawl a documentation site into Markdown, CSV, Anki and JSON study material",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("list", help="List the available presets")

    scrape = subparsers.add_parser("scrape", help="Crawl a site using a preset")
    scrape.add_argument("preset", help="Preset name (see 'list')")
    scrape.add_argument("-u", "--url", help="Override the preset site URL")
    add_crawl_options(scrape)

    quick = subparsers.add_parser("quick", help="Crawl a URL with the generic 'custom' preset")
    quick.add_argument("url", help="Site URL")
    add_crawl_options(quick)

    convert = subparsers.add_parser("convert", help="Convert a combined Markdown digest to CSV or Anki")
    convert.add_argument("input", help="Path to the Markdown digest")
    convert.add_argument("-f", "--format", required=True, help=f"Target format ({', '.join(CONVERT_FORMATS)})")
    convert.add_argument("-o", "--output", help="Output file (defaults to a name next to the input)")
    return parser


def add_crawl_options(parser):
    parser.add_argument("-o", "--output", default=DEFAULT_OUTPUT_DIR, help="Output directory")
    parser.add_argument("-c", "--combined", help="Combined Markdown file name")
    parser.add_argument("--content-selector", help="Override the content selector")
    parser.add_argument("--link-selector", help="Override the link selector")
    parser.add_argument("--wait", type=float, help="Settle delay after each navigation, in seconds")
    parser.add_argument("--timeout", type=float, help="Navigation timeout, in seconds")
    parser.add_argument("--max-pages", type=int, help="Maximum number of pages to crawl")
    parser.add_argument("-f", "--format", default="md", choices=OUTPUT_FORMATS, help="Output format")
    parser.add_argument("--qa", action=argparse.BooleanOptionalAction, default=False,
                        help="Generate question/answer pairs")
    parser.add_argument("--summary", action=argparse.BooleanOptionalAction, default=False,
                        help="Extract key points")
    parser.add_argument("--markdown", action="store_true", help="Keep page structure as Markdown")
    parser.add_argument("--headless", action=argparse.BooleanOptionalAction, default=None,
                        help="Run the browser without a window")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")


def list_presets():
    presets = load_presets()
    print("\n📚 Available presets:\n")
    for key, preset in presets.items():
        print(f"  {key:<20} {preset.get('name', '')}")
        if preset.get("url"):
            print(f"  {'':<20} {preset['url']}")
    print("\nUsage: doc-scraper scrape <preset> [options]\n")


def scrape(preset_name, args):
    config = resolve_config(
        preset_name,
        url=args.url,
        output_dir=os.path.abspath(args.output),
        combined_file=args.combined,
        content_selector=args.content_selector,
        link_selector=args.link_selector,
        wait_time=args.wait,
        timeout=args.timeout,
        max_pages=args.max_pages,
        output_format=args.format,
        generate_qa=args.qa,
        generate_summary=args.summary,
        as_markdown=args.markdown,
        headless=args.headless,
    )
    setup_logging(config.output_dir, args.verbose)
    logger.info(f"🚀 Doc Scraper v{__version__}")
    logger.info(f"  Preset: {config.name}")
    logger.info(f"  Site: {config.url}")
    logger.info(f"  Output: {config.output_dir}")
    logger.info(f"  Wait: {config.wait_time}s")

    result = run_crawl(config)
    log_crawl_summary(result, config)
    return result


def main(argv=None):
    """
    Parse arguments and dispatch to the selected command.

    Returns:
        int: Process exit status.
    """
    args = build_parser().parse_args(argv)

    if args.command == "list":
        list_presets()
        return 0

    setup_logging(verbose=getattr(args, "verbose", False))
    try:
        if args.command == "convert":
            convert_archive(args.input, args.format, args.output)
        elif args.command == "quick":
            scrape("custom", args)
        else:
            scrape(args.preset, args)
    except PresetNotFoundError as e:
        logger.error(f"❌ {e}")
        logger.error("Run 'doc-scraper list' to see the available presets")
        return 1
    except (DocScraperError, OSError) as e:
        logger.error(f"❌ {e}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
