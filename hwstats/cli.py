#!/usr/bin/env python3
"""
hwstats command line entry point.
Collects the hardware inventory of this host and prints it.
"""

import argparse
import json
import sys

from .collectors import ALL_SOURCES, InventoryCollector, field_ids
from .config import initialize_config
from .exceptions import ConfigurationError
from .utils.logging_config import setup_logging, get_logger


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description='Hardware inventory for the local host')
    parser.add_argument('--config', metavar='FILE',
                        help='Path to a YAML configuration file')
    parser.add_argument('--debug', action='store_true',
                        help='Enable debug logging')
    parser.add_argument('--field', action='append', dest='fields', metavar='FIELD',
                        choices=field_ids(),
                        help='Only report this field (repeatable)')
    parser.add_argument('--sections', action='store_true',
                        help='Group fields under section headers')
    parser.add_argument('--json', action='store_true',
                        help='Print the report as JSON')
    parser.add_argument('--list-sources', action='store_true',
                        help='Show which sources are available and exit')
    return parser


def show_sources(capabilities):
    """Print every known source with its availability"""
    for name in ALL_SOURCES:
        status = 'available' if capabilities.has(name) else 'absent'
        print(f"{name}: {status}")


def main(argv=None) -> int:
    """Main function with command line arguments"""
    args = build_parser().parse_args(argv)

    try:
        config = initialize_config(args.config)
    except ConfigurationError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 1

    setup_logging(
        log_level=config.logging.level,
        enable_debug=args.debug,
        log_to_file=config.logging.log_to_file,
        log_dir=config.logging.log_dir
    )
    logger = get_logger('hwstats')

    if not config.validate_configuration(field_ids(), ALL_SOURCES):
        print("Configuration error: report.fields names unknown fields", file=sys.stderr)
        return 1

    collector = InventoryCollector(sources_config=config.sources)

    if args.list_sources:
        show_sources(collector.detect_capabilities())
        return 0

    report = collector.collect(args.fields or config.report.fields)
    logger.debug(f"Report collected at {report.timestamp}")

    if args.json:
        print(json.dumps(report.to_dict(), indent=2, default=str))
    else:
        for line in report.render_lines(sections=args.sections or config.report.sections):
            print(line)
    return 0


if __name__ == "__main__":
    sys.exit(main())
