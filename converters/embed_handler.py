"""Video embed rewriting: WordPress embed blocks and bare video links."""

import logging
import re
from typing import Optional

from .rules import PlaceholderStash

logger = logging.getLogger('wordpress_mdx_migrator.converters.embed_handler')

VIDEO_URL_PATTERN = re.compile(
    r'https?://(?:www\.|m\.)?'
    r'(?:youtube\.com/(?:watch\?(?:[^\s"<>()]*?&(?:amp;)?)?v=|embed/|shorts/)|youtu\.be/)'
    r'([A-Za-z0-9_-]+)[^\s"<>()]*',
    re.IGNORECASE
)

# Generic embed wrapper naming the provider in its block metadata
GENERIC_EMBED_PATTERN = re.compile(
    r'<!--\s*wp:embed\s*(\{.*?\})?\s*-->(.*?)<!--\s*/wp:embed\s*-->',
    re.IGNORECASE | re.DOTALL
)
YOUTUBE_PROVIDER_PATTERN = re.compile(r'"providerNameSlug"\s*:\s*"youtube"', re.IGNORECASE)

# Provider-specific wrapper used by older editor versions
PROVIDER_EMBED_PATTERN = re.compile(
    r'<!--\s*wp:core-embed/youtube\b.*?-->(.*?)<!--\s*/wp:core-embed/youtube\s*-->',
    re.IGNORECASE | re.DOTALL
)

VIDEO_ANCHOR_PATTERN = re.compile(
    r'<a\b[^>]*?href\s*=\s*["\'](' + VIDEO_URL_PATTERN.pattern + r')["\'][^>]*>.*?</a>',
    re.IGNORECASE | re.DOTALL
)
VIDEO_MARKDOWN_LINK_PATTERN = re.compile(
    r'\[[^\]]*\]\((' + VIDEO_URL_PATTERN.pattern + r')\)',
    re.IGNORECASE
)
VIDEO_PARAGRAPH_PATTERN = re.compile(
    r'<p(?:\s[^>]*)?>\s*(' + VIDEO_URL_PATTERN.pattern + r')\s*</p>',
    re.IGNORECASE
)
VIDEO_LINE_PATTERN = re.compile(
    r'^[ \t]*(' + VIDEO_URL_PATTERN.pattern + r')[ \t]*$',
    re.IGNORECASE | re.MULTILINE
)


def extract_video_id(text: str) -> Optional[str]:
    """Return the id of the first recognized video URL in ``text``."""
    match = VIDEO_URL_PATTERN.search(text or '')
    return match.group(1) if match else None


def embed_reference(video_id: str) -> str:
    """Embed element for a video id."""
    return f'<YouTube id="{video_id}" />'


class EmbedConverter:
    """
    Rewrites video embeds into ``<YouTube />`` references.

    With a stash, each element is stashed so tag stripping in quotes and
    the cleanup pass cannot remove it.
    """

    def __init__(self, stash: PlaceholderStash = None):
        self.stash = stash

    def reference(self, video_id: str) -> str:
        element = embed_reference(video_id)
        if self.stash is not None:
            element = self.stash.stash(element)
        return f'\n{element}\n'

    def convert_blocks(self, text: str) -> str:
        """
        Replace YouTube embed blocks with an embed reference.

        Blocks from another provider, or without a recognizable video URL, are
        left for the generic block-comment stripping.
        """
        def replace_generic(match):
            metadata = match.group(1) or ''
            if not YOUTUBE_PROVIDER_PATTERN.search(metadata):
                return match.group(0)
            video_id = extract_video_id(match.group(2)) or extract_video_id(metadata)
            if not video_id:
                logger.debug("YouTube embed block without a video URL left unchanged")
                return match.group(0)
            return self.reference(video_id)

        def replace_provider(match):
            video_id = extract_video_id(match.group(1))
            if not video_id:
                return match.group(0)
            return self.reference(video_id)

        text = GENERIC_EMBED_PATTERN.sub(replace_generic, text)
        return PROVIDER_EMBED_PATTERN.sub(replace_provider, text)

    def convert_links(self, text: str) -> str:
        """Turn links and lone URLs pointing at a video host into embed references."""
        def replace(match):
            return self.reference(extract_video_id(match.group(1)))

        text = VIDEO_ANCHOR_PATTERN.sub(replace, text)
        text = VIDEO_MARKDOWN_LINK_PATTERN.sub(replace, text)
        text = VIDEO_PARAGRAPH_PATTERN.sub(replace, text)
        return VIDEO_LINE_PATTERN.sub(replace, text)


__all__ = [
    'VIDEO_URL_PATTERN',
    'extract_video_id',
    'embed_reference',
    'EmbedConverter',
]
