"""Data models for the WordPress to MDX migration pipeline."""

import logging
import re
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, Iterable, Iterator, List, Mapping, Optional, Tuple

logger = logging.getLogger('wordpress_mdx_migrator')

PUBLISHED_STATUS = 'publish'
POST_KIND = 'post'
ATTACHMENT_KIND = 'attachment'


@dataclass(frozen=True)
class ExportItem:
    """One record parsed from the export (post, page, attachment, ...)."""

    title: str
    raw_body: str
    excerpt: str = ''
    publish_date: str = ''
    slug: str = ''
    status: str = ''
    kind: str = ''
    external_id: str = ''
    categories: Tuple[str, ...] = ()
    featured_asset_id: Optional[str] = None
    guid: str = ''
    attachment_url: str = ''
    pub_date: str = ''
    link: str = ''

    @property
    def is_published(self) -> bool:
        return self.status == PUBLISHED_STATUS

    @property
    def is_post(self) -> bool:
        return self.kind == POST_KIND

    @property
    def is_attachment(self) -> bool:
        return self.kind == ATTACHMENT_KIND

    def to_dict(self) -> Dict[str, Any]:
        """Serialize item to dictionary."""
        return {
            'title': self.title,
            'excerpt': self.excerpt,
            'publish_date': self.publish_date,
            'slug': self.slug,
            'status': self.status,
            'kind': self.kind,
            'external_id': self.external_id,
            'categories': list(self.categories),
            'featured_asset_id': self.featured_asset_id,
            'body_length': len(self.raw_body),
        }


class AttachmentIndex(Mapping):
    """
    Read-only mapping from attachment external id to its source URL.

    Built once per run from the attachment items of the export and passed
    explicitly to the stages resolving featured images.
    """

    def __init__(self, entries: Optional[Mapping[str, str]] = None):
        self._entries = MappingProxyType(dict(entries or {}))

    @classmethod
    def from_pairs(cls, pairs: Iterable[Tuple[str, str]]) -> 'AttachmentIndex':
        """Build an index from (id, url) pairs; the first URL for an id wins."""
        entries: Dict[str, str] = {}
        for attachment_id, url in pairs:
            entries.setdefault(attachment_id, url)
        return cls(entries)

    def resolve(self, attachment_id: Optional[str]) -> Optional[str]:
        """Return the source URL for an attachment id, or None if unknown."""
        if not attachment_id:
            return None
        return self._entries.get(attachment_id)

    def __getitem__(self, key: str) -> str:
        return self._entries[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"AttachmentIndex({len(self._entries)} entries)"


@dataclass(frozen=True)
class ConvertedDocument:
    """Output of the document converter for one item."""

    body: str
    discovered_asset_urls: Tuple[str, ...] = ()


class FetchStatus(Enum):
    """Per-asset fetch result."""
    FETCHED = "fetched"
    ALREADY_PRESENT = "already_present"
    FAILED = "failed"


@dataclass(frozen=True)
class FetchOutcome:
    """Result of materializing one remote asset on disk."""

    source_url: str
    local_path: str
    status: FetchStatus
    error: Optional[str] = None
    redirects: int = 0

    def __post_init__(self) -> None:
        if (self.status is FetchStatus.FAILED) != (self.error is not None):
            raise ValueError("error must be set if and only if the fetch failed")

    @property
    def succeeded(self) -> bool:
        return self.status is not FetchStatus.FAILED

    def to_dict(self) -> Dict[str, Any]:
        """Serialize outcome to dictionary."""
        return {
            'source_url': self.source_url,
            'local_path': self.local_path,
            'status': self.status.value,
            'error': self.error,
            'redirects': self.redirects,
        }


FRONT_MATTER_KEYS = ('title', 'date', 'excerpt', 'categories', 'featuredImage')
QUOTED_KEYS = ('title', 'excerpt')

_YAML_INDICATORS = '-?:,[]{}#&*!|>\'"%@`'
_YAML_RESERVED = re.compile(r'^(?:true|false|yes|no|on|off|null|~)$', re.IGNORECASE)
_YAML_NUMBER = re.compile(r'^[-+]?(?:\d[\d_]*\.?\d*|\.\d+)(?:[eE][-+]?\d+)?$')


def quote_scalar(value: str) -> str:
    """Double-quoted YAML scalar with backslashes and quotes escaped."""
    escaped = str(value).replace('\\', '\\\\').replace('"', '\\"')
    return f'"{escaped}"'


def needs_quoting(value: str) -> bool:
    """True when a plain YAML scalar would be misread or invalid."""
    if not value or value != value.strip():
        return True
    if value[0] in _YAML_INDICATORS:
        return True
    if ': ' in value or ' #' in value or value.endswith(':'):
        return True
    if '\n' in value or '\\' in value:
        return True
    return bool(_YAML_RESERVED.match(value) or _YAML_NUMBER.match(value))


def plain_or_quoted(value: str) -> str:
    return quote_scalar(value) if needs_quoting(value) else value


@dataclass
class OutputDocument:
    """Final artifact for one published post: front matter plus body."""

    slug: str
    front_matter: Dict[str, Any]
    body: str

    def __post_init__(self) -> None:
        unknown = [key for key in self.front_matter if key not in FRONT_MATTER_KEYS]
        if unknown:
            raise ValueError(f"Unsupported front matter keys: {unknown}")

    def ordered_front_matter(self) -> List[Tuple[str, Any]]:
        """Front matter pairs in the fixed key order, skipping absent keys."""
        return [
            (key, self.front_matter[key])
            for key in FRONT_MATTER_KEYS
            if self.front_matter.get(key) not in (None, '', [], ())
        ]

    def render(self) -> str:
        """Final file text: ``---`` delimited front matter, blank line, body."""
        lines = ['---']
        for key, value in self.ordered_front_matter():
            if key == 'categories':
                lines.append(f"{key}:")
                lines.extend(f"  - {plain_or_quoted(str(category))}" for category in value)
            elif key in QUOTED_KEYS:
                lines.append(f"{key}: {quote_scalar(value)}")
            else:
                lines.append(f"{key}: {plain_or_quoted(str(value))}")
        lines.append('---')

        body = self.body.strip()
        return '\n'.join(lines) + '\n\n' + (f"{body}\n" if body else '')


@dataclass
class ItemResult:
    """Tracks what happened to one item during a run, for reporting."""

    slug: str
    title: str
    status: str  # "written", "dry_run", "failed"
    output_path: Optional[str] = None
    fetch_outcomes: List[FetchOutcome] = field(default_factory=list)
    error_message: Optional[str] = None

    @property
    def failed_assets(self) -> List[FetchOutcome]:
        return [o for o in self.fetch_outcomes if o.status is FetchStatus.FAILED]


__all__ = [
    'ExportItem',
    'AttachmentIndex',
    'ConvertedDocument',
    'FetchStatus',
    'FetchOutcome',
    'OutputDocument',
    'ItemResult',
    'FRONT_MATTER_KEYS',
    'quote_scalar',
    'needs_quoting',
    'plain_or_quoted',
    'PUBLISHED_STATUS',
    'POST_KIND',
    'ATTACHMENT_KIND',
]
