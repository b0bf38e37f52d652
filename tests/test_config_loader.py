"""Tests for configuration loading, validation and CLI overrides."""

import argparse
import copy

import pytest
import yaml

from config_loader import DEFAULT_CONFIG, ConfigLoader, get_nested


def write_config(tmp_path, text):
    path = tmp_path / 'config.yaml'
    path.write_text(text, encoding='utf-8')
    return str(path)


def make_args(**overrides):
    fields = {
        'project_root': None,
        'export_file': None,
        'dry_run': None,
        'no_download': False,
        'max_workers': None,
        'log_file': None,
    }
    fields.update(overrides)
    return argparse.Namespace(**fields)


class TestLoad:
    """Loading YAML over the defaults."""

    def test_missing_explicit_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            ConfigLoader.load(str(tmp_path / 'nope.yaml'))

    def test_partial_file_merges_over_defaults(self, tmp_path):
        path = write_config(tmp_path, 'fetch:\n  max_workers: 8\npaths:\n  export_file: site.xml\n')

        config = ConfigLoader.load(path)

        assert config['fetch']['max_workers'] == 8
        assert config['fetch']['max_redirects'] == 5
        assert config['paths']['export_file'] == 'site.xml'
        assert config['paths']['content_directory'] == 'src/content/posts'

    def test_defaults_not_mutated(self, tmp_path):
        before = copy.deepcopy(DEFAULT_CONFIG)

        ConfigLoader.load(write_config(tmp_path, 'conversion:\n  language_aliases:\n    py: python\n'))

        assert DEFAULT_CONFIG == before

    def test_empty_file_gives_defaults(self, tmp_path):
        assert ConfigLoader.load(write_config(tmp_path, '')) == DEFAULT_CONFIG

    def test_non_mapping_rejected(self, tmp_path):
        with pytest.raises(ValueError):
            ConfigLoader.load(write_config(tmp_path, '- a\n- b\n'))

    def test_invalid_yaml(self, tmp_path):
        with pytest.raises(yaml.YAMLError):
            ConfigLoader.load(write_config(tmp_path, 'paths: [unclosed\n'))

    def test_env_substitution(self, tmp_path, monkeypatch):
        monkeypatch.setenv('SITE_AUTHOR', 'Jo Writer')
        monkeypatch.delenv('UNSET_VARIABLE_FOR_TEST', raising=False)
        path = write_config(
            tmp_path,
            'export:\n  author: ${SITE_AUTHOR}\n  site_url: ${UNSET_VARIABLE_FOR_TEST}\n'
        )

        config = ConfigLoader.load(path)

        assert config['export']['author'] == 'Jo Writer'
        assert config['export']['site_url'] == '${UNSET_VARIABLE_FOR_TEST}'


class TestValidate:
    """Configuration validation."""

    def test_defaults_are_valid(self):
        ConfigLoader.validate(copy.deepcopy(DEFAULT_CONFIG))

    @pytest.mark.parametrize('path,value', [
        ('paths.export_file', ''),
        ('paths.media_url_prefix', 'images/posts'),
        ('conversion.document_extension', '.mdx'),
        ('conversion.default_category', '  '),
        ('conversion.language_aliases', {'py': 3}),
        ('fetch.enabled', 'yes'),
        ('fetch.max_workers', 0),
        ('fetch.max_workers', True),
        ('fetch.max_redirects', -1),
        ('fetch.timeout', 0),
        ('export.site_url', 'ftp://example.com'),
        ('export.site_url', 'https://'),
    ])
    def test_rejects_bad_values(self, path, value):
        config = copy.deepcopy(DEFAULT_CONFIG)
        section, key = path.split('.')
        config[section][key] = value

        with pytest.raises(ValueError):
            ConfigLoader.validate(config)

    def test_unsubstituted_variable_named(self):
        config = copy.deepcopy(DEFAULT_CONFIG)
        config['paths']['export_file'] = '${EXPORT_PATH}'

        with pytest.raises(ValueError, match='EXPORT_PATH'):
            ConfigLoader.validate(config)


class TestMergeWithArgs:
    """CLI arguments override configuration values."""

    def test_no_arguments_changes_nothing(self):
        assert ConfigLoader.merge_with_args(DEFAULT_CONFIG, make_args()) == DEFAULT_CONFIG

    def test_overrides(self):
        args = make_args(
            project_root='/site', export_file='dump.xml', dry_run=True,
            no_download=True, max_workers=2, log_file='run.log',
        )

        merged = ConfigLoader.merge_with_args(DEFAULT_CONFIG, args)

        assert merged['paths']['project_root'] == '/site'
        assert merged['paths']['export_file'] == 'dump.xml'
        assert merged['migration']['dry_run'] is True
        assert merged['fetch']['enabled'] is False
        assert merged['fetch']['max_workers'] == 2
        assert merged['logging']['file'] == 'run.log'
        assert DEFAULT_CONFIG['migration']['dry_run'] is False

    def test_explicit_no_dry_run(self):
        config = copy.deepcopy(DEFAULT_CONFIG)
        config['migration']['dry_run'] = True

        merged = ConfigLoader.merge_with_args(config, make_args(dry_run=False))

        assert merged['migration']['dry_run'] is False


def test_get_nested():
    config = {'a': {'b': {'c': 1}}}

    assert get_nested(config, 'a.b.c') == 1
    assert get_nested(config, 'a.x', 'fallback') == 'fallback'
    assert get_nested(config, 'a.b.c.d') is None
