"""Export reader: loads the raw WordPress export document into memory."""

import logging
from pathlib import Path
from typing import Optional, Union

from errors import ExportReadError

logger = logging.getLogger('wordpress_mdx_migrator.extractors.export_reader')


class ExportReader:
    """Reads the export file resolved against a project root."""

    def __init__(self, project_root: Union[str, Path] = '.', logger: Optional[logging.Logger] = None):
        self.project_root = Path(project_root)
        self.logger = logger or logging.getLogger('wordpress_mdx_migrator.extractors.export_reader')

    def resolve(self, export_file: Union[str, Path]) -> Path:
        """Resolve the export path; absolute paths are used unchanged."""
        path = Path(export_file)
        if not path.is_absolute():
            path = self.project_root / path
        return path

    def read(self, export_file: Union[str, Path]) -> str:
        """
        Load the whole export document as text.

        Args:
            export_file: Path to the export, relative to the project root

        Returns:
            The export text

        Raises:
            ExportReadError: If the file is missing, unreadable or empty
        """
        path = self.resolve(export_file)

        if not path.is_file():
            raise ExportReadError(str(path), "file does not exist")

        try:
            # Undecodable bytes are replaced rather than aborting the run
            text = path.read_text(encoding='utf-8', errors='replace')
        except OSError as e:
            raise ExportReadError(str(path), str(e)) from e

        if not text.strip():
            raise ExportReadError(str(path), "file is empty")

        self.logger.info(f"Loaded export {path} ({len(text)} characters)")
        return text
