"""Command-line interface for the catalog harvester."""

import argparse
import asyncio
import sys
from dataclasses import replace
from typing import List, Optional

from harvester.config import BROWSER_TYPES, CrawlConfig
from harvester.exceptions import HarvesterError
from harvester.logging_config import get_logger, setup_logging
from harvester.models import CrawlOutcome, CrawlSummary
from harvester.runner import run_crawl
from harvester.site_profile import get_profile

logger = get_logger(__name__)

BROWSER_CHOICES = list(BROWSER_TYPES)


def build_parser(defaults: CrawlConfig) -> argparse.ArgumentParser:
    """Argument parser whose defaults come from the environment."""
    parser = argparse.ArgumentParser(
        description="Harvest item records from an infinitely-scrolling catalog listing"
    )
    parser.add_argument('--url', default=defaults.url,
                        help='Listing URL to start from')
    parser.add_argument('--target', type=int, default=defaults.target,
                        help=f'Number of unique records to collect (default: {defaults.target})')
    parser.add_argument('--delay', type=int, default=defaults.delay_ms,
                        help=f'Base delay between item fetches in ms (default: {defaults.delay_ms})')
    parser.add_argument('--jitter', type=int, default=defaults.jitter_ms,
                        help=f'Maximum random jitter added to the delay in ms (default: {defaults.jitter_ms})')
    parser.add_argument('--max-no-new', '--maxNoNew', dest='max_no_new', type=int,
                        default=defaults.max_no_new,
                        help=f'Stop after this many rounds without new records (default: {defaults.max_no_new})')
    parser.add_argument('--tries', type=int, default=defaults.tries,
                        help=f'Attempts per item page (default: {defaults.tries})')
    parser.add_argument('--out', default=defaults.output_path,
                        help=f'Output JSONL journal (default: {defaults.output_path})')
    parser.add_argument('--fail-out', '--failOut', dest='fail_out',
                        default=defaults.failure_output_path,
                        help='Failure JSONL journal (default: <out>.failures.jsonl)')
    parser.add_argument('--profile', default=defaults.profile,
                        help=f'Site profile (default: {defaults.profile})')
    parser.add_argument('--diag-dir', default=defaults.diagnostics_dir,
                        help='Directory for listing screenshots/HTML dumps')

    # Browser options
    parser.add_argument('--browser', choices=BROWSER_CHOICES, default=defaults.browser_type,
                        help=f'Browser engine (default: {defaults.browser_type})')
    parser.add_argument('--headful', action='store_true', default=not defaults.headless,
                        help='Show the browser window')
    parser.add_argument('--slow-mo', '--slowMo', dest='slow_mo', type=int, default=defaults.slow_mo,
                        help='Slow down browser operations by N ms (default: 0, or 120 with --headful)')
    parser.add_argument('--no-block-images', dest='block_images', action='store_false',
                        default=defaults.block_images,
                        help='Load images, fonts and media instead of blocking them')

    # Logging options
    parser.add_argument('--log-level', default=defaults.log_level,
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'],
                        help=f'Log level (default: {defaults.log_level})')
    parser.add_argument('--log-file', default=defaults.log_file,
                        help='Also write logs to this file')
    return parser


def config_from_args(args: argparse.Namespace, defaults: CrawlConfig) -> CrawlConfig:
    """Overlay parsed command-line options on the environment defaults."""
    return replace(
        defaults,
        url=args.url,
        target=args.target,
        delay_ms=args.delay,
        jitter_ms=args.jitter,
        max_no_new=args.max_no_new,
        tries=args.tries,
        output_path=args.out,
        failure_output_path=args.fail_out,
        profile=args.profile,
        diagnostics_dir=args.diag_dir,
        browser_type=args.browser,
        headless=not args.headful,
        slow_mo=args.slow_mo,
        block_images=args.block_images,
        log_level=args.log_level,
        log_file=args.log_file,
    )


def print_summary(summary: CrawlSummary) -> None:
    """Print the final crawl summary."""
    print(f"\n{'=' * 60}")
    print(f"DONE. Total saved: {summary.total}/{summary.target}")
    print(f"  Saved this run : {summary.saved_this_run}")
    print(f"  Failed this run: {summary.failed_this_run}")
    print(f"  Rounds         : {summary.rounds}")
    print(f"File    : {summary.output_path}")
    print(f"Failures: {summary.failure_path}")

    if summary.outcome is CrawlOutcome.STAGNANT:
        print("Stopped: the listing stopped yielding new items (stagnant).")
    elif summary.outcome is CrawlOutcome.LISTING_FATAL_ERROR:
        print("Stopped: the listing could not be opened.")
    print(f"{'=' * 60}\n")


def exit_code_for(summary: CrawlSummary) -> int:
    if summary.outcome is CrawlOutcome.LISTING_FATAL_ERROR:
        return 1
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Entry point for the ``harvest`` command."""
    try:
        defaults = CrawlConfig.from_env()
    except ValueError as e:
        print(f"Error: invalid HARVEST_* environment setting: {e}", file=sys.stderr)
        return 2

    parser = build_parser(defaults)
    args = parser.parse_args(argv)

    try:
        config = config_from_args(args, defaults)
        profile = get_profile(config.profile)
        setup_logging(config.log_level, config.log_file)
    except ValueError as e:
        parser.error(str(e))
    except KeyError as e:
        parser.error(e.args[0])

    try:
        summary = asyncio.run(run_crawl(config, profile=profile))
    except HarvesterError as e:
        logger.error(f"FATAL: {e}")
        return 1
    except KeyboardInterrupt:
        print(f"\nInterrupted. Saved records are in {config.output_path}; rerun to resume.")
        return 130

    print_summary(summary)
    return exit_code_for(summary)


if __name__ == "__main__":
    sys.exit(main())
