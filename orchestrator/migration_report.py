"""
Migration report generator.

Aggregates per-item results into a summary, formats it for the console and
optionally exports it as JSON.
"""

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from models import FetchStatus, ItemResult

logger = logging.getLogger(__name__)


class MigrationReport:
    """Builds and formats the report of one migration run."""

    def __init__(self, logger: Optional[logging.Logger] = None):
        """
        Initialize migration report generator.

        Args:
            logger: Optional logger instance
        """
        self.logger = logger or logging.getLogger(__name__)

    def generate_report(
        self,
        results: List[ItemResult],
        stats: Dict[str, Any],
        duration: float,
        dry_run: bool = False
    ) -> Dict[str, Any]:
        """
        Generate the migration report.

        Args:
            results: One ItemResult per processed post
            stats: Run-level counters (items, posts, attachments indexed)
            duration: Run duration in seconds
            dry_run: Whether the run wrote anything

        Returns:
            Migration report dictionary
        """
        report = {
            'summary': self._build_summary(results, stats, duration, dry_run),
            'assets': self._build_asset_summary(results),
            'failed_items': [
                {'slug': r.slug, 'title': r.title, 'error': r.error_message}
                for r in results if r.status == 'failed'
            ],
            'failed_assets': [
                dict(outcome.to_dict(), slug=r.slug)
                for r in results for outcome in r.failed_assets
            ],
            'items': [
                {
                    'slug': r.slug,
                    'title': r.title,
                    'status': r.status,
                    'output_path': r.output_path,
                    'assets': len(r.fetch_outcomes),
                    'failed_assets': len(r.failed_assets),
                }
                for r in results
            ],
            'timestamp': datetime.now().isoformat(),
        }

        self.logger.debug(
            f"Report generated: {report['summary']['documents_created']} documents, "
            f"{len(report['failed_items'])} failed items"
        )
        return report

    def _build_summary(
        self,
        results: List[ItemResult],
        stats: Dict[str, Any],
        duration: float,
        dry_run: bool
    ) -> Dict[str, Any]:
        created = sum(1 for r in results if r.status in ('written', 'dry_run'))
        failed = sum(1 for r in results if r.status == 'failed')
        return {
            'items_total': stats.get('items_total', 0),
            'posts_published': stats.get('posts_published', len(results)),
            'attachments_indexed': stats.get('attachments_indexed', 0),
            'documents_created': created,
            'items_failed': failed,
            'dry_run': dry_run,
            'duration_seconds': round(duration, 2),
            'duration_formatted': self._format_duration(duration),
            'success_rate': (created / len(results)) if results else 1.0,
        }

    def _build_asset_summary(self, results: List[ItemResult]) -> Dict[str, int]:
        summary = {status.value: 0 for status in FetchStatus}
        for result in results:
            for outcome in result.fetch_outcomes:
                summary[outcome.status.value] += 1
        summary['total'] = sum(summary.values())
        return summary

    def _format_duration(self, seconds: float) -> str:
        """Format a duration as ``1h 2m 3s``, ``2m 3s`` or ``3.4s``."""
        if seconds < 60:
            return f"{seconds:.1f}s"
        minutes, secs = divmod(int(seconds), 60)
        if minutes < 60:
            return f"{minutes}m {secs}s"
        hours, minutes = divmod(minutes, 60)
        return f"{hours}h {minutes}m {secs}s"

    def format_console_report(self, report: Dict[str, Any]) -> str:
        """
        Format report for console display.

        Args:
            report: Migration report dictionary

        Returns:
            Formatted console string
        """
        summary = report.get('summary', {})
        assets = report.get('assets', {})
        sections = [
            "=" * 60,
            "MIGRATION REPORT" + (" (DRY RUN)" if summary.get('dry_run') else ""),
            "=" * 60,
            "",
            "Summary:",
            f"  Export items:   {summary.get('items_total', 0)}",
            f"  Published:      {summary.get('posts_published', 0)}",
            f"  Attachments:    {summary.get('attachments_indexed', 0)} indexed",
            f"  Documents:      {summary.get('documents_created', 0)} created",
            f"  Failed posts:   {summary.get('items_failed', 0)}",
            f"  Duration:       {summary.get('duration_formatted', '0s')}",
            f"  Success:        {summary.get('success_rate', 0) * 100:.1f}%",
            "",
            "Media:",
            f"  Fetched:        {assets.get('fetched', 0)}",
            f"  Already there:  {assets.get('already_present', 0)}",
            f"  Failed:         {assets.get('failed', 0)}",
        ]

        failed_items = report.get('failed_items', [])
        if failed_items:
            sections.append("")
            sections.append(f"Failed Posts ({len(failed_items)}):")
            sections.append("-" * 60)
            for item in failed_items:
                sections.append(f"  {item['slug']}: {item['error']}")

        failed_assets = report.get('failed_assets', [])
        if failed_assets:
            sections.append("")
            sections.append(f"Failed Assets ({len(failed_assets)}):")
            sections.append("-" * 60)
            for asset in failed_assets[:20]:
                sections.append(f"  [{asset['slug']}] {asset['source_url']}: {asset['error']}")
            if len(failed_assets) > 20:
                sections.append(f"  ... and {len(failed_assets) - 20} more")

        sections.append("=" * 60)
        return "\n".join(sections)

    def export_json_report(self, report: Dict[str, Any], filepath: Union[str, Path]) -> None:
        """
        Export report to JSON file.

        Args:
            report: Migration report dictionary
            filepath: Output file path
        """
        try:
            Path(filepath).parent.mkdir(parents=True, exist_ok=True)
            with open(filepath, 'w', encoding='utf-8') as f:
                json.dump(report, f, indent=2, ensure_ascii=False, default=str)

            self.logger.info(f"JSON report exported to {filepath}")

        except OSError as e:
            self.logger.error(f"Failed to export JSON report: {str(e)}")


__all__ = ['MigrationReport']
