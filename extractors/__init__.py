"""Extractors package: reads the WordPress export and splits it into items."""

from .export_reader import ExportReader
from .item_extractor import (
    ItemExtractor,
    attachment_source_url,
    build_attachment_index,
    select_publishable,
)

__all__ = [
    'ExportReader',
    'ItemExtractor',
    'attachment_source_url',
    'build_attachment_index',
    'select_publishable',
]
