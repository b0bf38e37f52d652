#!/usr/bin/env python3
"""
WordPress to MDX Migration Tool - Main CLI Entry Point

This script provides the command-line interface for migrating a WordPress
XML export into MDX documents with locally cached media, and for exporting a
migrated document back to plain Markdown.
"""

import argparse
import logging
import sys
from pathlib import Path

import yaml

# Add project root to Python path for relative imports
current_dir = Path(__file__).parent
sys.path.insert(0, str(current_dir))

# Project imports
from config_loader import ConfigLoader, get_nested
from errors import MigrationError
from exporters import PlainMarkdownExporter
from logger import setup_logging, log_section, log_config
from orchestrator import MigrationOrchestrator, MigrationReport

# Version
__version__ = "1.0.0"


def create_argument_parser() -> argparse.ArgumentParser:
    """Create and configure the argument parser for CLI."""
    parser = argparse.ArgumentParser(
        description="Migrate a WordPress XML export to MDX documents with local media",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Migrate using config.yaml (or the built-in defaults)
  python migrate.py

  # Explicit export file and project root
  python migrate.py --project-root ../site --export-file wordpress-export.xml

  # Dry-run mode (preview)
  python migrate.py --dry-run -v

  # Convert documents without downloading media
  python migrate.py --no-download

  # Export one migrated post as plain Markdown
  python migrate.py --export-slug hello-world > hello-world.md

  # Verbose logging
  python migrate.py -vv
        """
    )

    parser.add_argument(
        '--version',
        action='version',
        version=f'%(prog)s {__version__}'
    )

    parser.add_argument(
        '--config',
        type=str,
        default='config.yaml',
        help='Path to configuration YAML file (default: config.yaml, optional)'
    )

    parser.add_argument(
        '--project-root',
        type=str,
        help='Directory that export, content and media paths are relative to'
    )

    parser.add_argument(
        '--export-file',
        type=str,
        help='WordPress export file, relative to the project root'
    )

    parser.add_argument(
        '--dry-run',
        action=argparse.BooleanOptionalAction,
        default=None,
        help='Preview migration without writing documents or downloading media'
    )

    parser.add_argument(
        '--no-download',
        action='store_true',
        help='Write documents but skip media downloads'
    )

    parser.add_argument(
        '--max-workers',
        type=int,
        help='Concurrent media downloads per post'
    )

    parser.add_argument(
        '--log-file',
        type=str,
        help='Also write logs to this file'
    )

    parser.add_argument(
        '--report',
        type=str,
        help='Write the JSON migration report to this path'
    )

    parser.add_argument(
        '--export-slug',
        type=str,
        metavar='SLUG',
        help='Print the plain Markdown export of one migrated post and exit'
    )

    parser.add_argument(
        '-v', '--verbose',
        action='count',
        default=0,
        help='Increase verbosity (-v for INFO, -vv for DEBUG)'
    )

    return parser


def run_export(config: dict, slug: str, logger: logging.Logger) -> int:
    """Print the plain Markdown export of one document."""
    project_root = Path(get_nested(config, 'paths.project_root', '.'))
    exporter = PlainMarkdownExporter(config, project_root, logger=logger)

    markdown = exporter.export(slug)
    if markdown is None:
        logger.error(f"No document found for slug '{slug}'")
        return 1

    sys.stdout.write(markdown)
    return 0


def run_migration(config: dict, logger: logging.Logger) -> int:
    """Execute the complete migration pipeline."""
    logger.info("Starting migration pipeline")

    dry_run = get_nested(config, 'migration.dry_run', False)
    logger.info(
        f"Dry-run: {dry_run}, Media download: {get_nested(config, 'fetch.enabled', True)}"
    )

    orchestrator = MigrationOrchestrator(config, logger=logger.getChild('orchestrator'))
    report = orchestrator.run()

    report_generator = MigrationReport(logger)
    print("\n" + report_generator.format_console_report(report))

    report_path = get_nested(config, 'migration.report_path')
    if report_path:
        report_generator.export_json_report(report, report_path)

    summary = report.get('summary', {})
    if summary.get('items_failed', 0) or report.get('failed_assets'):
        logger.warning(
            f"Migration completed with {summary.get('items_failed', 0)} failed posts "
            f"and {len(report.get('failed_assets', []))} failed assets"
        )
    else:
        logger.info("Migration completed successfully")
    return 0


def main() -> int:
    """Main entry point for the CLI."""
    parser = create_argument_parser()
    args = parser.parse_args()

    try:
        # Setup minimal logging for config loading
        logger = setup_logging(verbosity=args.verbose)

        # Load configuration
        config = ConfigLoader.load(args.config)

        # Merge with CLI arguments (CLI takes precedence)
        config = ConfigLoader.merge_with_args(config, args)
        if args.report:
            config['migration']['report_path'] = args.report

        ConfigLoader.validate(config)

        # Reconfigure logging with config file settings
        logger = setup_logging(
            verbosity=args.verbose,
            log_file=get_nested(config, 'logging.file'),
            level=get_nested(config, 'logging.level'),
        )
    except FileNotFoundError as e:
        print(f"ERROR: File not found: {e}", file=sys.stderr)
        return 2
    except (ValueError, yaml.YAMLError) as e:
        print(f"ERROR: Configuration error: {e}", file=sys.stderr)
        return 2

    try:
        if args.export_slug:
            return run_export(config, args.export_slug, logger)

        log_section("WordPress to MDX Migration Tool")
        logger.info(f"Version: {__version__}")
        log_config(config)

        return run_migration(config, logger)

    except MigrationError as e:
        logger.error(f"Migration failed: {e}")
        return 1
    except KeyboardInterrupt:
        print("\nMigration interrupted by user", file=sys.stderr)
        return 130
    except Exception as e:
        logger.error(f"Unexpected error: {e}", exc_info=True)
        return 1


if __name__ == "__main__":
    sys.exit(main())
