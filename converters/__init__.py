"""Converters package for WordPress block markup to MDX conversion."""

import logging

from .document_converter import DocumentConverter
from .html_cleaner import HtmlCleaner
from .media_rules import asset_filename, discover_asset_urls, media_reference_path
from .rules import RewriteRule, apply_rules

logger = logging.getLogger('wordpress_mdx_migrator.converters')


def convert_body(body, slug, config=None, logger=None):
    """
    Convenience function to convert one raw body to MDX.

    Args:
        body: Raw WordPress markup
        slug: Document slug used for image paths
        config: Optional configuration dictionary for converter behavior
        logger: Optional logger instance

    Returns:
        ConvertedDocument

    Example:
        >>> from converters import convert_body
        >>> convert_body('<p>Hello <strong>world</strong></p>', 'hello').body
        'Hello **world**'
    """
    return DocumentConverter(config=config, logger=logger).convert(body, slug)


__all__ = [
    'convert_body',
    'DocumentConverter',
    'HtmlCleaner',
    'RewriteRule',
    'apply_rules',
    'asset_filename',
    'discover_asset_urls',
    'media_reference_path',
]
