"""Tests for the command-line entry point and logging setup."""

import copy
import json
import logging
import sys

import pytest

import migrate
from config_loader import DEFAULT_CONFIG
from logger import LOGGER_NAME, ProgressTracker, log_config, setup_logging


def reset_logging():
    logger = logging.getLogger(LOGGER_NAME)
    for handler in list(logger.handlers):
        handler.close()
        logger.removeHandler(handler)
    logger.propagate = True


@pytest.fixture
def run_cli(monkeypatch, tmp_path):
    """Run ``migrate.main`` inside ``tmp_path`` with the given arguments."""
    monkeypatch.chdir(tmp_path)

    def run(*args):
        monkeypatch.setattr(sys, 'argv', ['migrate.py', *args])
        return migrate.main()

    yield run
    reset_logging()


@pytest.fixture
def export_file(tmp_path, sample_export):
    (tmp_path / 'wordpress-export.xml').write_text(sample_export, encoding='utf-8')


class TestMain:
    """Exit codes and end-to-end CLI runs."""

    def test_migration_without_downloads(self, run_cli, export_file, tmp_path, capsys):
        report = tmp_path / 'out' / 'report.json'

        code = run_cli('--no-download', '--report', str(report))

        assert code == 0
        assert (tmp_path / 'src' / 'content' / 'posts' / 'hello-world.mdx').exists()
        assert 'MIGRATION REPORT' in capsys.readouterr().out
        assert json.loads(report.read_text(encoding='utf-8'))['summary']['documents_created'] == 2

    def test_dry_run(self, run_cli, export_file, tmp_path, capsys):
        assert run_cli('--dry-run') == 0

        assert not (tmp_path / 'src').exists()
        assert 'MIGRATION REPORT (DRY RUN)' in capsys.readouterr().out

    def test_missing_export_exits_1(self, run_cli):
        assert run_cli('--export-file', 'missing.xml') == 1

    def test_missing_config_exits_2(self, run_cli, capsys):
        assert run_cli('--config', 'absent.yaml') == 2
        assert 'File not found' in capsys.readouterr().err

    def test_invalid_config_exits_2(self, run_cli, tmp_path, capsys):
        (tmp_path / 'bad.yaml').write_text('fetch:\n  max_workers: 0\n', encoding='utf-8')

        assert run_cli('--config', 'bad.yaml') == 2
        assert 'Configuration error' in capsys.readouterr().err

    def test_export_slug(self, run_cli, export_file, capsys):
        run_cli('--no-download')
        capsys.readouterr()

        assert run_cli('--export-slug', 'hello-world') == 0

        out = capsys.readouterr().out
        assert out.startswith('---\ntitle: "Hello World"\n')
        assert 'url: "https://example.com/hello-world"' in out
        assert '![Photo](/api/assets?path=/images/posts/hello-world/photo.jpg)' in out

    def test_export_unknown_slug(self, run_cli, capsys):
        assert run_cli('--export-slug', 'nothing-here') == 1
        assert capsys.readouterr().out == ''


class TestLogging:
    """Logger configuration and progress tracking."""

    def teardown_method(self):
        reset_logging()

    @pytest.mark.parametrize('verbosity,expected', [
        (0, logging.WARNING),
        (1, logging.INFO),
        (2, logging.DEBUG),
    ])
    def test_verbosity_levels(self, verbosity, expected):
        assert setup_logging(verbosity=verbosity).level == expected

    def test_explicit_level_wins(self):
        assert setup_logging(verbosity=2, level='error').level == logging.ERROR

    def test_invalid_level(self):
        with pytest.raises(ValueError):
            setup_logging(level='LOUD')

    def test_repeated_setup_does_not_duplicate_handlers(self, tmp_path):
        setup_logging(log_file=str(tmp_path / 'run.log'))
        logger = setup_logging(log_file=str(tmp_path / 'run.log'))

        assert len(logger.handlers) == 2

    def test_progress_tracker_counts(self):
        with ProgressTracker(3, 'posts') as tracker:
            tracker.increment()
            tracker.increment(success=False)
            tracker.increment()

        stats = tracker.get_stats()
        assert stats['processed'] == 3
        assert stats['failed'] == 1
        assert round(stats['success_rate'], 1) == 66.7

    def test_log_config_shows_effective_values(self, caplog):
        config = copy.deepcopy(DEFAULT_CONFIG)
        config['paths']['export_file'] = 'token-site-export.xml'
        config['fetch']['max_workers'] = 7
        caplog.set_level(logging.INFO, logger=LOGGER_NAME)

        log_config(config)

        assert 'CONFIGURATION' in caplog.text
        assert 'Export File: token-site-export.xml' in caplog.text
        assert 'Max Workers: 7' in caplog.text
        assert 'REDACTED' not in caplog.text
