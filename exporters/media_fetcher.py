"""Media fetcher: downloads remote assets next to the converted documents."""

import logging
import os
import sys
import tempfile
from concurrent.futures import ThreadPoolExecutor, as_completed
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional
from urllib.parse import urljoin

import requests
from tqdm import tqdm

from converters.media_rules import asset_filename, strip_query
from errors import AssetFetchError, TooManyRedirectsError
from models import ConvertedDocument, FetchOutcome, FetchStatus

REDIRECT_STATUS_CODES = (301, 302, 303, 307, 308)
DEFAULT_MAX_REDIRECTS = 5
DEFAULT_TIMEOUT = 30
DEFAULT_USER_AGENT = 'wordpress-mdx-migrator/1.0'


def plan_assets(converted: ConvertedDocument, featured_url: Optional[str] = None) -> List[str]:
    """
    Fetch set for one item: discovered asset URLs plus the featured image.

    URLs are query-stripped and unique, in order of first appearance; the
    featured image comes last.
    """
    urls = list(converted.discovered_asset_urls)
    if featured_url:
        featured = strip_query(featured_url)
        if featured not in urls:
            urls.append(featured)
    return urls


def write_atomic(path: Path, data: bytes) -> None:
    """Write ``data`` to ``path`` through a temporary file in the same directory."""
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, temp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix='.part')
    try:
        with os.fdopen(fd, 'wb') as handle:
            handle.write(data)
        os.replace(temp_name, path)
    except BaseException:
        if os.path.exists(temp_name):
            os.unlink(temp_name)
        raise


class MediaFetcher:
    """
    Materializes the remote assets of one item under the media directory.

    Each asset lands at ``<media_directory>/<slug>/<filename>``. Existing
    files are never fetched again. Redirects are followed manually so the
    chain length stays bounded; one asset failing never affects another.
    """

    def __init__(
        self,
        config: Dict[str, Any],
        project_root: Path,
        session: Optional[requests.Session] = None,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize the media fetcher.

        Args:
            config: Configuration dictionary
            project_root: Root that relative configured paths resolve against
            session: Optional requests session (injected by tests)
            logger: Logger instance
        """
        self.config = config
        self.logger = logger or logging.getLogger('wordpress_mdx_migrator.exporters.media_fetcher')

        fetch_config = config.get('fetch', {})
        self.max_workers = max(1, int(fetch_config.get('max_workers', 4)))
        self.max_redirects = int(fetch_config.get('max_redirects', DEFAULT_MAX_REDIRECTS))
        self.timeout = fetch_config.get('timeout', DEFAULT_TIMEOUT)
        self.show_progress = fetch_config.get('progress_bars', True)

        media_directory = Path(config.get('paths', {}).get('media_directory', 'public/images/posts'))
        self.media_root = media_directory if media_directory.is_absolute() else Path(project_root) / media_directory

        self.session = session or requests.Session()
        self.session.headers.update({'User-Agent': fetch_config.get('user_agent', DEFAULT_USER_AGENT)})

        self.stats = {
            'fetched': 0,
            'already_present': 0,
            'failed': 0,
        }

    def destination_for(self, slug: str, url: str) -> Path:
        """Local path an asset URL is stored at for a given slug."""
        return self.media_root / slug / asset_filename(url)

    def fetch_all(self, slug: str, urls: Iterable[str]) -> List[FetchOutcome]:
        """
        Fetch every URL for one item using a bounded worker pool.

        Args:
            slug: Document slug the assets belong to
            urls: Asset URLs, already deduplicated

        Returns:
            One FetchOutcome per URL, in input order
        """
        urls = list(urls)
        if not urls:
            return []

        outcomes: List[Optional[FetchOutcome]] = [None] * len(urls)
        with ThreadPoolExecutor(max_workers=min(self.max_workers, len(urls))) as executor:
            future_to_index = {
                executor.submit(self.fetch_one, url, self.destination_for(slug, url)): index
                for index, url in enumerate(urls)
            }

            futures = as_completed(future_to_index)
            if self._should_show_progress():
                futures = tqdm(futures, desc=f"Assets: {slug[:30]}", total=len(urls), leave=False)

            for future in futures:
                index = future_to_index[future]
                try:
                    outcomes[index] = future.result()
                except Exception as e:
                    url = urls[index]
                    self.logger.error(f"Unexpected error fetching '{url}': {e}", exc_info=True)
                    outcomes[index] = FetchOutcome(
                        source_url=url,
                        local_path=str(self.destination_for(slug, url)),
                        status=FetchStatus.FAILED,
                        error=str(e) or e.__class__.__name__,
                    )

        for outcome in outcomes:
            self.stats[outcome.status.value] += 1
        return outcomes

    def fetch_one(self, url: str, destination: Path) -> FetchOutcome:
        """
        Fetch a single asset to ``destination``.

        Returns an ``already_present`` outcome without any network access when
        the destination exists. Failures are returned, not raised.
        """
        if destination.exists():
            self.logger.debug(f"Skipping (exists): {destination}")
            return FetchOutcome(url, str(destination), FetchStatus.ALREADY_PRESENT)

        redirects = 0
        try:
            content, redirects = self._download(url)
            write_atomic(destination, content)
        except AssetFetchError as e:
            self.logger.warning(f"Failed to fetch {url}: {e.message}")
            return FetchOutcome(url, str(destination), FetchStatus.FAILED, error=e.message)
        except (requests.RequestException, OSError) as e:
            self.logger.warning(f"Failed to fetch {url}: {e}")
            return FetchOutcome(url, str(destination), FetchStatus.FAILED, error=str(e) or e.__class__.__name__)

        self.logger.debug(f"Downloaded {url} -> {destination} ({len(content)} bytes, {redirects} redirects)")
        return FetchOutcome(url, str(destination), FetchStatus.FETCHED, redirects=redirects)

    def _download(self, url: str):
        """
        GET ``url``, following at most ``max_redirects`` redirects.

        Returns:
            Tuple of (body bytes, redirects followed)
        """
        current = url
        redirects = 0
        while True:
            response = self.session.get(current, timeout=self.timeout, allow_redirects=False)
            location = response.headers.get('Location')

            if response.status_code in REDIRECT_STATUS_CODES and location:
                response.close()
                if redirects >= self.max_redirects:
                    raise TooManyRedirectsError(url, self.max_redirects)
                redirects += 1
                current = urljoin(current, location)
                continue

            if not 200 <= response.status_code < 300:
                response.close()
                raise AssetFetchError(url, f"HTTP {response.status_code}")

            return response.content, redirects

    def _should_show_progress(self) -> bool:
        """Check if progress bars should be displayed."""
        if not self.show_progress:
            return False
        return sys.stdout.isatty()

    def get_stats(self) -> Dict[str, int]:
        """Get fetch statistics."""
        return self.stats.copy()


__all__ = ['MediaFetcher', 'plan_assets', 'write_atomic']
