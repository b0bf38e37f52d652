"""Document converter: WordPress block markup to MDX via ordered rewrite rules."""

import logging
from typing import Any, Dict, List, Optional

from models import ConvertedDocument, ExportItem
from .code_blocks import (
    DEFAULT_LANGUAGE,
    DEFAULT_LANGUAGE_ALIASES,
    SYNTAXHIGHLIGHTER_DEFAULT_LANGUAGE,
    CodeBlockConverter,
)
from .embed_handler import EmbedConverter
from .html_cleaner import HtmlCleaner, normalize_whitespace, strip_block_comments
from .media_rules import ImageConverter, discover_asset_urls
from .rules import PlaceholderStash, RewriteRule, apply_rules
from .text_blocks import convert_headings, convert_text_blocks

DEFAULT_MEDIA_URL_PREFIX = '/images/posts'


class DocumentConverter:
    """
    Converts one item's raw body into the canonical document format.

    The conversion is an ordered list of pure rules. Later rules assume
    earlier ones already consumed their targets:

    1. embed blocks (stashed until the end)
    2. code blocks (stashed until the end)
    3. residual block comments
    4. images (stashed until the end)
    5. bare video links (stashed until the end)
    6. headings
    7. paragraphs, lists, blockquotes (with inline conversion)
    8. structural cleanup and entity decoding
    9. whitespace normalization
    """

    def __init__(self, config: Optional[Dict[str, Any]] = None, logger: Optional[logging.Logger] = None):
        """Initialize converter with logger and configuration."""
        self.config = config or {}
        self.logger = logger or logging.getLogger('wordpress_mdx_migrator.converters.document_converter')

        conversion = self.config.get('conversion', {})
        self.default_language = conversion.get('default_code_language', DEFAULT_LANGUAGE)
        self.syntaxhighlighter_default_language = conversion.get(
            'syntaxhighlighter_default_language', SYNTAXHIGHLIGHTER_DEFAULT_LANGUAGE
        )
        self.language_aliases = conversion.get('language_aliases', DEFAULT_LANGUAGE_ALIASES)
        self.media_url_prefix = self.config.get('paths', {}).get('media_url_prefix', DEFAULT_MEDIA_URL_PREFIX)

        self.html_cleaner = HtmlCleaner(self.logger)

    def build_rules(self, slug: str, stash: PlaceholderStash) -> List[RewriteRule]:
        """Ordered rule list for one document."""
        code_blocks = CodeBlockConverter(
            stash,
            default_language=self.default_language,
            syntaxhighlighter_default_language=self.syntaxhighlighter_default_language,
            language_aliases=self.language_aliases,
        )
        images = ImageConverter(slug, self.media_url_prefix, stash)
        embeds = EmbedConverter(stash)

        return [
            RewriteRule('embed_blocks', embeds.convert_blocks),
            RewriteRule('code_blocks', code_blocks.convert),
            RewriteRule('block_comments', strip_block_comments),
            RewriteRule('images', images.convert),
            RewriteRule('video_links', embeds.convert_links),
            RewriteRule('headings', convert_headings),
            RewriteRule('text_blocks', convert_text_blocks),
            RewriteRule('cleanup', self.html_cleaner.clean),
            RewriteRule('whitespace', normalize_whitespace),
        ]

    def convert(self, body: str, slug: str) -> ConvertedDocument:
        """
        Convert a raw body for the document identified by ``slug``.

        Args:
            body: Raw markup body from the export
            slug: Document slug, used to root image paths

        Returns:
            ConvertedDocument with the body and the discovered asset URLs
        """
        if not body or not body.strip():
            return ConvertedDocument(body='', discovered_asset_urls=())

        stash = PlaceholderStash()
        converted = apply_rules(body, self.build_rules(slug, stash))
        converted = stash.restore(converted)

        asset_urls = tuple(discover_asset_urls(body))
        self.logger.debug(
            f"Converted '{slug}': {len(body)} -> {len(converted)} chars, "
            f"{len(stash)} protected fragments, {len(asset_urls)} assets"
        )
        return ConvertedDocument(body=converted, discovered_asset_urls=asset_urls)

    def convert_item(self, item: ExportItem, slug: str) -> ConvertedDocument:
        """Convert the body of an export item."""
        return self.convert(item.raw_body, slug)


__all__ = ['DocumentConverter', 'DEFAULT_MEDIA_URL_PREFIX']
