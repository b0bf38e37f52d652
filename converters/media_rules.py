"""Image rewriting and asset discovery.

The converter and the media fetcher share :func:`asset_filename`, so the
path written into a document always matches the file actually fetched.
"""

import logging
import posixpath
import re
from typing import List
from urllib.parse import urlsplit

from .inline_converter import convert_inline
from .rules import PlaceholderStash, decode_entities

logger = logging.getLogger('wordpress_mdx_migrator.converters.media_rules')

ASSET_EXTENSIONS = ('jpg', 'jpeg', 'png', 'gif', 'webp', 'svg')

_ASSET_URL = r'https?://{chars}+\.(?:' + '|'.join(ASSET_EXTENSIONS) + r'){chars}*'

# Same attribute grammar as tag_attribute: either quote style
ASSET_SRC_PATTERN = re.compile(
    r'src\s*=\s*(?:"(' + _ASSET_URL.format(chars='[^"]') + r')"'
    r'|\'(' + _ASSET_URL.format(chars="[^']") + r')\')',
    re.IGNORECASE
)

IMG_TAG_PATTERN = re.compile(r'<img\b[^>]*>', re.IGNORECASE)
LINKED_IMAGE_PATTERN = re.compile(r'<a\b[^>]*>\s*(<img\b[^>]*>)\s*</a>', re.IGNORECASE)
IMAGE_FIGURE_PATTERN = re.compile(
    r'<figure\b[^>]*class="[^"]*\bwp-block-image\b[^"]*"[^>]*>(.*?)</figure>',
    re.IGNORECASE | re.DOTALL
)
FIGCAPTION_PATTERN = re.compile(r'<figcaption\b[^>]*>(.*?)</figcaption>', re.IGNORECASE | re.DOTALL)
CAPTION_SHORTCODE_PATTERN = re.compile(r'\[caption\b[^\]]*\](.*?)\[/caption\]', re.IGNORECASE | re.DOTALL)


def strip_query(url: str) -> str:
    """Drop query string and fragment from a URL."""
    return url.split('#', 1)[0].split('?', 1)[0]


def asset_filename(url: str) -> str:
    """Basename of the URL path, without query string or fragment."""
    path = urlsplit(url).path if '://' in url else strip_query(url)
    return posixpath.basename(path.rstrip('/')) or 'asset'


def media_reference_path(url_prefix: str, slug: str, url: str) -> str:
    """Locally-rooted path a document uses to reference an asset."""
    return f"{url_prefix.rstrip('/')}/{slug}/{asset_filename(url)}"


def discover_asset_urls(body: str) -> List[str]:
    """
    Externally hosted asset URLs in an unconverted body.

    Returns query-stripped URLs in order of first appearance, without
    duplicates.
    """
    urls: List[str] = []
    for match in ASSET_SRC_PATTERN.finditer(body or ''):
        url = strip_query(match.group(1) or match.group(2))
        if url not in urls:
            urls.append(url)
    return urls


def tag_attribute(tag: str, name: str):
    """Value of an attribute in a single tag string, or None if absent."""
    match = re.search(
        r'\s' + re.escape(name) + r'\s*=\s*(?:"([^"]*)"|\'([^\']*)\')',
        tag,
        re.IGNORECASE
    )
    if not match:
        return None
    return match.group(1) if match.group(1) is not None else match.group(2)


class ImageConverter:
    """
    Rewrites image markup into ``<Image />`` references for one document.

    With a stash, each rendered element is stashed so the paragraph and
    cleanup rules cannot touch its escaped attributes.
    """

    def __init__(self, slug: str, url_prefix: str, stash: PlaceholderStash = None):
        self.slug = slug
        self.url_prefix = url_prefix
        self.stash = stash

    def convert(self, text: str) -> str:
        text = LINKED_IMAGE_PATTERN.sub(r'\1', text)
        text = IMAGE_FIGURE_PATTERN.sub(self._replace_figure, text)
        text = CAPTION_SHORTCODE_PATTERN.sub(self._replace_caption_shortcode, text)
        return IMG_TAG_PATTERN.sub(lambda m: self.image_reference(m.group(0)), text)

    def image_reference(self, img_tag: str, caption: str = '') -> str:
        """Build the ``<Image />`` element for an ``<img>`` tag."""
        src = tag_attribute(img_tag, 'src')
        if not src:
            logger.debug(f"Dropping image without src: {img_tag[:80]}")
            return ''

        alt = (tag_attribute(img_tag, 'alt') or '').replace('"', '&quot;')
        element = f'<Image src="{media_reference_path(self.url_prefix, self.slug, src)}" alt="{alt}"'
        caption = decode_entities(convert_inline(caption.strip())) if caption else ''
        if caption:
            element += f' caption={{<>{caption}</>}}'
        element += ' />'
        if self.stash is not None:
            element = self.stash.stash(element)
        return f'\n{element}\n'

    def _replace_figure(self, match) -> str:
        inner = match.group(1)
        img = IMG_TAG_PATTERN.search(inner)
        if not img:
            return match.group(0)
        caption = FIGCAPTION_PATTERN.search(inner)
        return self.image_reference(img.group(0), caption.group(1) if caption else '')

    def _replace_caption_shortcode(self, match) -> str:
        inner = match.group(1)
        img = IMG_TAG_PATTERN.search(inner)
        if not img:
            return inner
        return self.image_reference(img.group(0), inner[img.end():])


__all__ = [
    'ASSET_EXTENSIONS',
    'strip_query',
    'asset_filename',
    'media_reference_path',
    'discover_asset_urls',
    'tag_attribute',
    'ImageConverter',
]
