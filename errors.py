"""Exception types shared across the migration pipeline."""


class MigrationError(Exception):
    """Base exception for migration errors."""
    pass


class ExportReadError(MigrationError):
    """The export document could not be read at all. Fatal for the run."""

    def __init__(self, path: str, reason: str):
        """
        Initialize export read error.

        Args:
            path: Path of the export document
            reason: Human-readable cause
        """
        self.path = path
        self.reason = reason
        super().__init__(f"Cannot read export '{path}': {reason}")


class AssetFetchError(MigrationError):
    """A single asset could not be fetched. Never fatal for the run."""

    def __init__(self, url: str, message: str):
        self.url = url
        self.message = message
        super().__init__(f"{url}: {message}")


class TooManyRedirectsError(AssetFetchError):
    """Redirect chain exceeded the configured maximum."""

    def __init__(self, url: str, max_redirects: int):
        self.max_redirects = max_redirects
        super().__init__(url, f"Too many redirects (limit {max_redirects})")


__all__ = [
    'MigrationError',
    'ExportReadError',
    'AssetFetchError',
    'TooManyRedirectsError',
]
