"""Item extractor: splits a WordPress export into ExportItem records."""

import logging
import re
from typing import Dict, Iterable, List, Optional, Tuple

from bs4 import BeautifulSoup, Tag

from models import AttachmentIndex, ExportItem

logger = logging.getLogger('wordpress_mdx_migrator.extractors.item_extractor')

EXCLUDED_CATEGORY = 'Uncategorized'
FEATURED_IMAGE_META_KEY = '_thumbnail_id'

ATTACHMENT_IMAGE_PATTERN = re.compile(
    r'https?://[^\s"<>]+\.(?:jpg|jpeg|png|gif|webp)',
    re.IGNORECASE
)


def _qualified_name(tag: Tag) -> str:
    """Return ``prefix:name`` for namespaced tags, the plain name otherwise."""
    if tag.prefix and ':' not in tag.name:
        return f"{tag.prefix}:{tag.name}"
    return tag.name


class ItemExtractor:
    """
    Extracts items from a WordPress export (WXR).

    The export is parsed with the lxml XML parser in recover mode, so
    missing or malformed fields degrade to empty strings instead of raising.
    """

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger('wordpress_mdx_migrator.extractors.item_extractor')

    def extract(self, export_text: str) -> List[ExportItem]:
        """
        Parse the export and return its items in document order.

        Args:
            export_text: Raw export document

        Returns:
            List of ExportItem, one per ``<item>`` record
        """
        soup = BeautifulSoup(export_text, 'xml')
        items = [self._parse_item(element) for element in soup.find_all('item')]
        self.logger.info(f"Found {len(items)} total items in export")
        return items

    def _parse_item(self, element: Tag) -> ExportItem:
        fields = self._child_index(element)

        return ExportItem(
            title=self._text(fields, 'title'),
            raw_body=self._text(fields, 'content:encoded'),
            excerpt=self._text(fields, 'excerpt:encoded'),
            publish_date=self._text(fields, 'wp:post_date'),
            slug=self._text(fields, 'wp:post_name'),
            status=self._text(fields, 'wp:status'),
            kind=self._text(fields, 'wp:post_type'),
            external_id=self._text(fields, 'wp:post_id'),
            categories=self._categories(element),
            featured_asset_id=self._featured_asset_id(element),
            guid=self._text(fields, 'guid'),
            attachment_url=self._text(fields, 'wp:attachment_url'),
            pub_date=self._text(fields, 'pubDate'),
            link=self._text(fields, 'link'),
        )

    @staticmethod
    def _child_index(element: Tag) -> Dict[str, Tag]:
        """Map qualified child tag names to the first child with that name."""
        index: Dict[str, Tag] = {}
        for child in element.find_all(recursive=False):
            index.setdefault(_qualified_name(child), child)
        return index

    @staticmethod
    def _text(fields: Dict[str, Tag], name: str) -> str:
        tag = fields.get(name)
        if tag is None:
            return ''
        return tag.get_text().strip()

    def _categories(self, element: Tag) -> Tuple[str, ...]:
        """Category labels in order of first appearance, 'Uncategorized' excluded."""
        categories: List[str] = []
        for child in element.find_all(recursive=False):
            if _qualified_name(child) != 'category' or child.get('domain') != 'category':
                continue
            label = child.get_text().strip()
            if label and label != EXCLUDED_CATEGORY and label not in categories:
                categories.append(label)
        return tuple(categories)

    def _featured_asset_id(self, element: Tag) -> Optional[str]:
        """Attachment id from the ``_thumbnail_id`` post meta pair, if any."""
        for meta in element.find_all(recursive=False):
            if _qualified_name(meta) != 'wp:postmeta':
                continue
            pair = self._child_index(meta)
            if self._text(pair, 'wp:meta_key') == FEATURED_IMAGE_META_KEY:
                value = self._text(pair, 'wp:meta_value')
                return value or None
        return None


def select_publishable(items: Iterable[ExportItem]) -> List[ExportItem]:
    """Published posts only; everything else is excluded from output."""
    return [item for item in items if item.is_published and item.is_post]


def attachment_source_url(item: ExportItem) -> Optional[str]:
    """First image URL found in the body, the attachment URL, then the guid."""
    for candidate in (item.raw_body, item.attachment_url, item.guid):
        match = ATTACHMENT_IMAGE_PATTERN.search(candidate or '')
        if match:
            return match.group(0)
    return None


def build_attachment_index(items: Iterable[ExportItem]) -> AttachmentIndex:
    """
    Build the attachment id -> source URL index from attachment items.

    Attachments without a recognizable image URL are left out of the index.
    """
    pairs = []
    for item in items:
        if not item.is_attachment:
            continue
        url = attachment_source_url(item)
        if url is None:
            logger.debug(f"Attachment {item.external_id} has no image URL, skipping")
            continue
        pairs.append((item.external_id, url))

    index = AttachmentIndex.from_pairs(pairs)
    logger.info(f"Indexed {len(index)} attachments")
    return index


__all__ = [
    'ItemExtractor',
    'select_publishable',
    'attachment_source_url',
    'build_attachment_index',
    'EXCLUDED_CATEGORY',
]
