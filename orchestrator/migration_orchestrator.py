"""
Migration orchestrator coordinating the stages of one migration run.

Stages run in order: read export, extract items, index attachments, then for
each published post convert, fetch media and write the document.
"""

import logging
import time
from pathlib import Path
from typing import Any, Dict, List, Optional, Set

import requests

from converters import DocumentConverter
from exporters import DocumentWriter, MediaFetcher, plan_assets
from extractors import ExportReader, ItemExtractor, build_attachment_index, select_publishable
from logger import ProgressTracker, log_section
from models import AttachmentIndex, ExportItem, ItemResult
from .migration_report import MigrationReport


class MigrationOrchestrator:
    """Runs the WordPress to MDX migration as a single offline batch."""

    def __init__(
        self,
        config: Dict[str, Any],
        project_root: Optional[Path] = None,
        session: Optional[requests.Session] = None,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize the migration orchestrator.

        Args:
            config: Configuration dictionary
            project_root: Root for relative paths (defaults to paths.project_root)
            session: Optional requests session handed to the media fetcher
            logger: Optional logger instance
        """
        self.config = config
        self.logger = logger or logging.getLogger('wordpress_mdx_migrator.orchestrator')
        self.project_root = Path(project_root or config.get('paths', {}).get('project_root', '.'))

        migration_config = config.get('migration', {})
        self.dry_run = migration_config.get('dry_run', False)
        self.fetch_enabled = config.get('fetch', {}).get('enabled', True)

        self.reader = ExportReader(self.project_root, logger=self.logger.getChild('reader'))
        self.extractor = ItemExtractor(logger=self.logger.getChild('extractor'))
        self.converter = DocumentConverter(config, logger=self.logger.getChild('converter'))
        self.fetcher = MediaFetcher(config, self.project_root, session=session, logger=self.logger.getChild('fetcher'))
        self.writer = DocumentWriter(config, self.project_root, logger=self.logger.getChild('writer'))
        self.report_builder = MigrationReport(logger=self.logger.getChild('report'))

    def run(self) -> Dict[str, Any]:
        """
        Execute the migration.

        Returns:
            Migration report dictionary

        Raises:
            ExportReadError: If the export cannot be read at all
        """
        start_time = time.time()
        export_file = self.config.get('paths', {}).get('export_file', 'wordpress-export.xml')

        log_section("Reading Export")
        text = self.reader.read(export_file)
        items = self.extractor.extract(text)

        index = build_attachment_index(items)
        posts = select_publishable(items)
        self.logger.info(f"Found {len(posts)} published posts")

        log_section("Converting Posts")
        results = self.migrate_items(posts, index)

        stats = {
            'items_total': len(items),
            'posts_published': len(posts),
            'attachments_indexed': len(index),
            'fetch': self.fetcher.get_stats(),
        }
        report = self.report_builder.generate_report(
            results, stats, time.time() - start_time, dry_run=self.dry_run
        )

        created = report['summary']['documents_created']
        if self.dry_run:
            self.logger.info(f"Dry run complete: {created} documents would be created")
        else:
            self.logger.info(f"Created {created} documents")
        return report

    def migrate_items(self, posts: List[ExportItem], index: AttachmentIndex) -> List[ItemResult]:
        """Migrate each post in turn; one failing post never stops the run."""
        results: List[ItemResult] = []
        seen_slugs: Set[str] = set()

        if not posts:
            self.logger.warning("No published posts to migrate")
            return results

        with ProgressTracker(total_items=len(posts), item_type='posts') as tracker:
            for item in posts:
                slug = self.writer.slug_for(item)
                if slug in seen_slugs:
                    self.logger.warning(f"Duplicate slug '{slug}': '{item.title}' overwrites an earlier post")
                seen_slugs.add(slug)

                try:
                    result = self.migrate_item(item, slug, index)
                except Exception as e:
                    self.logger.error(f"Failed to migrate '{item.title}' ({slug}): {e}", exc_info=True)
                    result = ItemResult(slug=slug, title=item.title, status='failed', error_message=str(e))

                results.append(result)
                tracker.increment(success=result.status != 'failed')

        return results

    def migrate_item(self, item: ExportItem, slug: str, index: AttachmentIndex) -> ItemResult:
        """Convert one post, fetch its media, then write its document."""
        self.logger.info(f"Processing: {item.title} ({slug})")

        converted = self.converter.convert_item(item, slug)
        featured_url = index.resolve(item.featured_asset_id)
        urls = plan_assets(converted, featured_url)

        outcomes = []
        if self.dry_run:
            for url in urls:
                self.logger.info(f"[dry-run] Would fetch {url} -> {self.fetcher.destination_for(slug, url)}")
        elif self.fetch_enabled:
            outcomes = self.fetcher.fetch_all(slug, urls)
        elif urls:
            self.logger.debug(f"Media download disabled, skipping {len(urls)} assets for '{slug}'")

        document = self.writer.build_document(item, slug, converted, featured_url)
        path = self.writer.write(document, dry_run=self.dry_run)

        return ItemResult(
            slug=slug,
            title=item.title,
            status='dry_run' if self.dry_run else 'written',
            output_path=str(path),
            fetch_outcomes=list(outcomes),
        )


__all__ = ['MigrationOrchestrator']
