"""
Security Scanner CLI

Command-line interface for running scans without the HTTP API.
"""

import asyncio
import argparse
import json
import sys
from typing import List, Optional
import logging

from pydantic import ValidationError

from app.core.config import Settings, get_settings

from .aggregator import ScanAggregator, score_label, SCORE_WEIGHTS
from .schemas import ScanResult, ScanTarget

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def parse_args(argv: Optional[List[str]] = None):
    """Parse command line arguments"""
    parser = argparse.ArgumentParser(
        description='Website security scanner - TLS, headers, tech stack and reputation',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Scan one site
  python -m app.scanner.cli scan https://example.com

  # Scan several sites
  python -m app.scanner.cli scan https://site1.com https://site2.com

  # Scan targets from file
  python -m app.scanner.cli scan -f targets.txt

  # Read the real certificate instead of the synthetic source
  python -m app.scanner.cli scan https://example.com --tls-source live

  # Save output to JSON
  python -m app.scanner.cli scan https://example.com -o results.json
        """
    )

    parser.add_argument(
        'command',
        choices=['scan'],
        help='Command to execute'
    )

    parser.add_argument(
        'targets',
        nargs='*',
        help='Target URLs to scan (http:// or https://)'
    )

    parser.add_argument(
        '-f', '--file',
        help='File containing target URLs (one per line)'
    )

    parser.add_argument(
        '--timeout',
        type=float,
        default=None,
        help='Request timeout in seconds (default: from settings)'
    )

    parser.add_argument(
        '--tls-source',
        choices=['synthetic', 'live'],
        default=None,
        help='Certificate data source (default: from settings)'
    )

    parser.add_argument(
        '-o', '--output',
        help='Output file (JSON format)'
    )

    parser.add_argument(
        '-v', '--verbose',
        action='store_true',
        help='Verbose output'
    )

    return parser.parse_args(argv)


def load_targets(args) -> List[ScanTarget]:
    """Load and validate targets from command line or file"""
    raw: List[str] = []

    if args.targets:
        raw.extend(args.targets)

    if args.file:
        try:
            with open(args.file, 'r') as f:
                raw.extend(line.strip() for line in f if line.strip())
        except OSError as e:
            logger.error(f"Failed to read targets from file: {e}")
            sys.exit(1)

    targets = []
    for url in raw:
        try:
            targets.append(ScanTarget(url=url))
        except ValidationError:
            logger.error(f"Skipping {url!r}: must start with http:// or https://")

    if not targets:
        logger.error("No valid targets specified. Use targets as arguments or -f file")
        sys.exit(1)

    return targets


def build_settings(args, base: Optional[Settings] = None) -> Settings:
    """Apply command line overrides on top of the configured settings"""
    base = base or get_settings()
    overrides = {}
    if args.timeout is not None:
        overrides['REQUEST_TIMEOUT'] = args.timeout
    if args.tls_source is not None:
        overrides['TLS_SOURCE'] = args.tls_source
    return base.model_copy(update=overrides)


async def scan_command(args) -> List[ScanResult]:
    """Execute scan command"""
    targets = load_targets(args)
    aggregator = ScanAggregator.from_settings(build_settings(args))

    logger.info(f"Starting security scan for {len(targets)} target(s)")

    results = await asyncio.gather(*(aggregator.scan(t) for t in targets))

    for result in results:
        display_result(result, args.verbose)

    if args.output:
        save_results(results, args.output)

    return list(results)


def display_result(result: ScanResult, verbose=False):
    """Display one scan result to console"""
    print("\n" + "="*80)
    print(f"SECURITY SCAN: {result.url}")
    print("="*80)

    print(f"\n  Overall Score:  {result.overall_score}/100  [{score_label(result.overall_score)}]")
    print(f"  Scanned At:     {result.scan_date}")

    ssl_result = result.ssl
    print(f"\n  SSL/TLS ({ssl_result.score}/100, weight {SCORE_WEIGHTS['ssl']}%)")
    print(f"      Valid: {ssl_result.valid}")
    print(f"      Issuer: {ssl_result.issuer}")
    print(f"      Protocol: {ssl_result.protocol}")
    print(f"      Expires: {ssl_result.expiry_date} ({ssl_result.days_until_expiry} days)")

    headers = result.headers
    print(f"\n  Security Headers ({headers.score}/100, weight {SCORE_WEIGHTS['headers']}%)")
    for label, present in [
        ("Strict-Transport-Security", headers.hsts),
        ("Content-Security-Policy", headers.csp),
        ("X-Frame-Options", headers.x_frame_options),
        ("Permissions-Policy", headers.permissions_policy),
        ("X-Content-Type-Options", headers.x_content_type_options),
        ("Referrer-Policy", headers.referrer_policy),
    ]:
        if present or verbose:
            print(f"      {'[+]' if present else '[-]'} {label}")

    tech = result.tech_stack
    print(f"\n  Technology Stack ({tech.score}/100, weight {SCORE_WEIGHTS['tech_stack']}%)")
    print(f"      Server: {tech.server}")
    if tech.framework:
        print(f"      Frameworks: {', '.join(tech.framework)}")
    if tech.cms:
        print(f"      CMS: {tech.cms}")

    reputation = result.reputation
    print(f"\n  Reputation ({reputation.score}/100, weight {SCORE_WEIGHTS['reputation']}%)")
    print(f"      Status: {'Clean' if reputation.safe else 'FLAGGED'}")
    for threat in reputation.threats:
        print(f"      WARNING: {threat}")

    print("\n" + "="*80 + "\n")


def save_results(results: List[ScanResult], output_file):
    """Save results to JSON file"""
    try:
        with open(output_file, 'w') as f:
            json.dump([r.model_dump(by_alias=True, mode='json') for r in results], f, indent=2)
        logger.info(f"Results saved to {output_file}")
    except OSError as e:
        logger.error(f"Failed to save results: {e}")


async def main(argv: Optional[List[str]] = None):
    """Main entry point"""
    args = parse_args(argv)

    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    if args.command == 'scan':
        await scan_command(args)


def run():
    """Console script entry point"""
    asyncio.run(main())


if __name__ == '__main__':
    run()
