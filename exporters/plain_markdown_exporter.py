"""Export converter: canonical MDX document back to plain Markdown.

Read-only counterpart of the migration. Every custom embed element becomes
its plain-link form and the front matter is rewritten in a quoted dialect
for external publishing platforms.
"""

import logging
import re
from datetime import date, datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple
from urllib.parse import quote

import yaml

from converters.media_rules import tag_attribute
from converters.rules import PlaceholderStash, RewriteRule, apply_rules, decode_entities

FRONT_MATTER_PATTERN = re.compile(r'^---\s*\n(.*?)\n---\s*\n?(.*)$', re.DOTALL)
CODE_FENCE_PATTERN = re.compile(r'^```([^\n]*)\n(.*?)^```[ \t]*$', re.MULTILINE | re.DOTALL)
FENCE_META_SPLIT = re.compile(r'[\s{:]')

# Attribute values may be quoted strings or brace expressions; a JSX
# fragment caption ``{<>...</>}`` may itself contain ``/>``
_ATTRIBUTES = r'((?:"[^"]*"|\'[^\']*\'|\{<>.*?</>\}|\{[^}]*\}|[^"\'{/>]|/(?!>))*)'


def _component_pattern(name: str) -> re.Pattern:
    return re.compile(r'<' + name + r'\b' + _ATTRIBUTES + r'/>', re.DOTALL)


YOUTUBE_PATTERN = _component_pattern('YouTube')
VIDEO_PATTERN = _component_pattern('Video')
TWEET_PATTERN = _component_pattern('Tweet')
GITHUB_STATS_PATTERN = _component_pattern('GitHubStats')
IMAGE_PATTERN = _component_pattern('Image')
CAPTION_PATTERN = re.compile(r'caption=\{<>(.*?)</>\}', re.DOTALL)
NOTICE_PATTERN = re.compile(r'<Notice\b[^>]*>(.*?)</Notice>', re.DOTALL)
MARKDOWN_IMAGE_PATTERN = re.compile(r'!\[([^\]]*)\]\(([^)\s]+)((?:\s+"[^"]*")?)\)')
ABSOLUTE_URL_PATTERN = re.compile(r'^(?:[a-z][a-z0-9+.-]*:|//)', re.IGNORECASE)
BLANK_RUN_PATTERN = re.compile(r'\n{3,}')

DOCUMENT_EXTENSIONS = ('mdx', 'md')


class QuotedStr(str):
    """String value emitted double-quoted; keys stay plain."""


class QuotedDumper(yaml.SafeDumper):
    pass


def _represent_quoted_str(dumper: yaml.SafeDumper, value: QuotedStr):
    return dumper.represent_scalar('tag:yaml.org,2002:str', str(value), style='"')


QuotedDumper.add_representer(QuotedStr, _represent_quoted_str)


def _quote_values(value: Any) -> Any:
    if isinstance(value, dict):
        return {key: _quote_values(item) for key, item in value.items()}
    if isinstance(value, list):
        return [_quote_values(item) for item in value]
    if isinstance(value, str):
        return QuotedStr(value)
    return value


def dump_front_matter(data: Dict[str, Any]) -> str:
    """Render a front matter mapping in the quoted dialect, keys kept in order."""
    return yaml.dump(
        _quote_values(data),
        Dumper=QuotedDumper,
        sort_keys=False,
        allow_unicode=True,
        default_flow_style=False,
        width=10000,
    )


def split_front_matter(content: str) -> Tuple[Dict[str, Any], str]:
    """
    Split a document into its YAML front matter and body.

    Returns an empty mapping and the whole text when no valid front matter
    is present.
    """
    match = FRONT_MATTER_PATTERN.match(content)
    if not match:
        return {}, content

    try:
        front_matter = yaml.safe_load(match.group(1))
    except yaml.YAMLError as e:
        logging.getLogger('wordpress_mdx_migrator.exporters.plain_markdown_exporter').warning(
            f"Failed to parse YAML front matter: {e}"
        )
        return {}, content

    if not isinstance(front_matter, dict):
        return {}, content
    return front_matter, match.group(2)


def _as_text(value: Any) -> str:
    if isinstance(value, (date, datetime)):
        return value.strftime('%Y-%m-%d')
    return '' if value is None else str(value)


class PlainMarkdownExporter:
    """Renders a canonical document as plain Markdown for external platforms."""

    def __init__(self, config: Dict[str, Any], project_root: Path, logger: Optional[logging.Logger] = None):
        """
        Initialize the exporter.

        Args:
            config: Configuration dictionary
            project_root: Root that relative configured paths resolve against
            logger: Logger instance
        """
        self.config = config
        self.logger = logger or logging.getLogger('wordpress_mdx_migrator.exporters.plain_markdown_exporter')

        content_directory = Path(config.get('paths', {}).get('content_directory', 'src/content/posts'))
        self.content_root = (
            content_directory if content_directory.is_absolute() else Path(project_root) / content_directory
        )

        export_config = config.get('export', {})
        self.site_url = export_config.get('site_url', 'https://example.com').rstrip('/')
        self.author = export_config.get('author', '')
        self.asset_endpoint = export_config.get('asset_endpoint', '/api/assets')

    def find_document(self, slug: str) -> Optional[Path]:
        """Path of the document for ``slug``, or None if there is none."""
        if not slug or '/' in slug or '\\' in slug or slug.startswith('.'):
            return None
        for extension in DOCUMENT_EXTENSIONS:
            candidate = self.content_root / f"{slug}.{extension}"
            if candidate.is_file():
                return candidate
        return None

    def export(self, slug: str) -> Optional[str]:
        """
        Export one document as plain Markdown.

        Args:
            slug: Document slug

        Returns:
            Markdown text, or None when no document exists for the slug
        """
        path = self.find_document(slug)
        if path is None:
            self.logger.debug(f"No document found for slug '{slug}'")
            return None

        return self.convert(path.read_text(encoding='utf-8'), slug)

    def convert(self, content: str, slug: str) -> str:
        """Convert the text of a canonical document."""
        source, body = split_front_matter(content)
        front_matter = self.build_front_matter(source, slug)
        return f"---\n{dump_front_matter(front_matter)}---\n\n{self.convert_body(body)}\n"

    def build_front_matter(self, source: Dict[str, Any], slug: str) -> Dict[str, Any]:
        """Map canonical front matter keys onto the export dialect."""
        front_matter: Dict[str, Any] = {
            'title': _as_text(source.get('title')),
            'date': _as_text(source.get('date')),
        }
        description = _as_text(source.get('excerpt')).strip()
        if description:
            front_matter['description'] = description
        front_matter['author'] = self.author
        front_matter['tags'] = [_as_text(tag) for tag in source.get('categories') or []]
        front_matter['url'] = f"{self.site_url}/{slug}"
        image = _as_text(source.get('featuredImage')).strip()
        if image:
            front_matter['image'] = self.resolve_asset_url(image)
        return front_matter

    def resolve_asset_url(self, url: str) -> str:
        """Absolute URLs pass through; relative ones go through the asset endpoint."""
        if ABSOLUTE_URL_PATTERN.match(url):
            return url
        return f"{self.asset_endpoint}?path={quote(url, safe='/')}"

    def build_rules(self, stash: PlaceholderStash) -> List[RewriteRule]:
        return [
            RewriteRule('code_fences', lambda text: self._stash_code_fences(text, stash)),
            RewriteRule('markdown_images', self._resolve_markdown_images),
            RewriteRule('youtube', self._rewrite_youtube),
            RewriteRule('video', self._rewrite_video),
            RewriteRule('tweet', self._rewrite_tweet),
            RewriteRule('github_stats', self._rewrite_github_stats),
            RewriteRule('images', self._rewrite_images),
            RewriteRule('notices', self._rewrite_notices),
            RewriteRule('whitespace', lambda text: BLANK_RUN_PATTERN.sub('\n\n', text).strip()),
        ]

    def convert_body(self, body: str) -> str:
        """Rewrite every embed element in ``body`` to plain Markdown."""
        stash = PlaceholderStash()
        return stash.restore(apply_rules(body, self.build_rules(stash)))

    def _stash_code_fences(self, text: str, stash: PlaceholderStash) -> str:
        def replace(match):
            meta = match.group(1).strip()
            language = FENCE_META_SPLIT.split(meta, 1)[0] if meta else ''
            return stash.stash(f"```{language}\n{match.group(2)}```")

        return CODE_FENCE_PATTERN.sub(replace, text)

    def _rewrite_youtube(self, text: str) -> str:
        def replace(match):
            video_id = tag_attribute(match.group(1), 'id')
            if not video_id:
                return ''
            return f"[Watch on YouTube](https://www.youtube.com/watch?v={video_id})"

        return YOUTUBE_PATTERN.sub(replace, text)

    def _rewrite_video(self, text: str) -> str:
        def replace(match):
            video_id = tag_attribute(match.group(1), 'id')
            if not video_id:
                return ''
            return f"[Watch the video](https://iframe.videodelivery.net/{video_id})"

        return VIDEO_PATTERN.sub(replace, text)

    def _rewrite_tweet(self, text: str) -> str:
        def replace(match):
            tweet_id = tag_attribute(match.group(1), 'id')
            if not tweet_id:
                return ''
            return f"[View on X](https://x.com/i/status/{tweet_id})"

        return TWEET_PATTERN.sub(replace, text)

    def _rewrite_github_stats(self, text: str) -> str:
        def replace(match):
            repo = tag_attribute(match.group(1), 'repo')
            if not repo:
                return ''
            return f"[{repo}](https://github.com/{repo})"

        return GITHUB_STATS_PATTERN.sub(replace, text)

    def _rewrite_images(self, text: str) -> str:
        def replace(match):
            attributes = match.group(1)
            src = tag_attribute(attributes, 'src')
            if not src:
                return ''
            alt = decode_entities(tag_attribute(attributes, 'alt') or '')
            result = f"![{alt}]({self.resolve_asset_url(src)})"
            caption = CAPTION_PATTERN.search(attributes)
            if caption and caption.group(1).strip():
                result += f"\n*{caption.group(1).strip()}*"
            return result

        return IMAGE_PATTERN.sub(replace, text)

    def _rewrite_notices(self, text: str) -> str:
        def replace(match):
            lines = match.group(1).strip().split('\n')
            return '\n'.join(f"> {line.strip()}" if line.strip() else '>' for line in lines)

        return NOTICE_PATTERN.sub(replace, text)

    def _resolve_markdown_images(self, text: str) -> str:
        def replace(match):
            return f"![{match.group(1)}]({self.resolve_asset_url(match.group(2))}{match.group(3)})"

        return MARKDOWN_IMAGE_PATTERN.sub(replace, text)


__all__ = ['PlainMarkdownExporter', 'split_front_matter', 'dump_front_matter']
