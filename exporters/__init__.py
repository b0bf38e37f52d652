"""Export package for the WordPress to MDX migration pipeline.

Package Structure:
- media_fetcher: Downloads remote assets under the media directory, per slug
- document_writer: Builds front matter and writes one document per post
- plain_markdown_exporter: Renders a written document back to plain Markdown

Configuration Referenced:
- paths.content_directory / paths.media_directory: Output locations
- paths.media_url_prefix: Root of asset references inside documents
- fetch.*: Worker count, redirect limit, timeout, user agent, progress bars
- export.*: Site URL, author and asset endpoint of the plain Markdown dialect
"""

from .document_writer import DocumentWriter, generate_slug
from .media_fetcher import MediaFetcher, plan_assets, write_atomic
from .plain_markdown_exporter import PlainMarkdownExporter

__all__ = [
    'DocumentWriter',
    'MediaFetcher',
    'PlainMarkdownExporter',
    'generate_slug',
    'plan_assets',
    'write_atomic',
]
