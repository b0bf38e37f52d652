"""Document writer: front matter plus converted body, one file per post."""

import logging
import re
from datetime import date
from pathlib import Path
from typing import Any, Dict, Optional

from dateutil import parser as date_parser

from converters.media_rules import media_reference_path
from models import ConvertedDocument, ExportItem, OutputDocument
from .media_fetcher import write_atomic

ZERO_DATE_PATTERN = re.compile(r'^0000-00-00')
SLUG_SEPARATOR_PATTERN = re.compile(r'[^a-z0-9]+')


def generate_slug(title: str) -> str:
    """
    Normalize a title into a slug.

    Lowercase, every run of non-alphanumeric characters collapsed to a
    single hyphen, leading and trailing hyphens trimmed.
    """
    slug = SLUG_SEPARATOR_PATTERN.sub('-', (title or '').lower()).strip('-')
    return slug or 'untitled'


def flatten(text: str) -> str:
    """Collapse internal line breaks to single spaces."""
    return ' '.join(line.strip() for line in (text or '').splitlines() if line.strip())


class DocumentWriter:
    """
    Builds output documents and writes them under the content directory.

    The written bytes depend only on the item, its converted body and the
    featured image URL, so re-running over the same export rewrites every
    file identically (apart from the date fallback for undated items).
    """

    def __init__(self, config: Dict[str, Any], project_root: Path, logger: Optional[logging.Logger] = None):
        """
        Initialize the document writer.

        Args:
            config: Configuration dictionary
            project_root: Root that relative configured paths resolve against
            logger: Logger instance
        """
        self.config = config
        self.logger = logger or logging.getLogger('wordpress_mdx_migrator.exporters.document_writer')

        paths = config.get('paths', {})
        conversion = config.get('conversion', {})
        content_directory = Path(paths.get('content_directory', 'src/content/posts'))
        self.content_root = (
            content_directory if content_directory.is_absolute() else Path(project_root) / content_directory
        )
        self.media_url_prefix = paths.get('media_url_prefix', '/images/posts')
        self.extension = conversion.get('document_extension', 'mdx').lstrip('.')
        self.default_category = conversion.get('default_category', 'WordPress')

    def slug_for(self, item: ExportItem) -> str:
        """Item slug, or the normalized title when the item has none."""
        slug = (item.slug or '').strip()
        return slug or generate_slug(item.title)

    def format_date(self, item: ExportItem, today: Optional[date] = None) -> str:
        """
        ``YYYY-MM-DD`` publication date.

        Tries the post date, then the feed pubDate, then falls back to today.
        """
        for candidate in (item.publish_date, item.pub_date):
            parsed = self._parse_date(candidate)
            if parsed:
                return parsed.strftime('%Y-%m-%d')

        fallback = today or date.today()
        self.logger.debug(f"No usable date for '{item.title}', using {fallback.isoformat()}")
        return fallback.isoformat()

    def _parse_date(self, value: str):
        value = (value or '').strip()
        if not value or ZERO_DATE_PATTERN.match(value):
            return None
        try:
            return date_parser.parse(value)
        except (ValueError, OverflowError) as e:
            self.logger.warning(f"Failed to parse date string '{value}': {e}")
            return None

    def featured_image_path(self, slug: str, featured_url: Optional[str]) -> Optional[str]:
        """Locally-rooted reference for the featured image, or None."""
        if not featured_url:
            return None
        return media_reference_path(self.media_url_prefix, slug, featured_url)

    def build_document(
        self,
        item: ExportItem,
        slug: str,
        converted: ConvertedDocument,
        featured_url: Optional[str] = None,
        today: Optional[date] = None
    ) -> OutputDocument:
        """Assemble the output document for one item."""
        front_matter: Dict[str, Any] = {
            'title': flatten(item.title),
            'date': self.format_date(item, today),
            'excerpt': flatten(item.excerpt),
            'categories': list(item.categories) or [self.default_category],
        }
        featured_image = self.featured_image_path(slug, featured_url)
        if featured_image:
            front_matter['featuredImage'] = featured_image

        return OutputDocument(slug=slug, front_matter=front_matter, body=converted.body)

    def output_path(self, slug: str) -> Path:
        return self.content_root / f"{slug}.{self.extension}"

    def write(self, document: OutputDocument, dry_run: bool = False) -> Path:
        """
        Write a document to ``<content_root>/<slug>.<extension>``.

        Args:
            document: Document to write
            dry_run: Log the target path without writing

        Returns:
            Path of the (would-be) output file
        """
        path = self.output_path(document.slug)
        if dry_run:
            self.logger.info(f"[dry-run] Would write {path}")
            return path

        write_atomic(path, document.render().encode('utf-8'))
        self.logger.debug(f"Wrote {path}")
        return path


__all__ = ['DocumentWriter', 'generate_slug', 'flatten']
