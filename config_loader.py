"""Configuration loader with YAML support and environment variable substitution."""

import copy
import os
import re
from typing import Any, Dict, Optional
from urllib.parse import urlparse

import yaml

DEFAULT_CONFIG_PATH = 'config.yaml'

DEFAULT_CONFIG: Dict[str, Any] = {
    'paths': {
        'project_root': '.',
        'export_file': 'wordpress-export.xml',
        'content_directory': 'src/content/posts',
        'media_directory': 'public/images/posts',
        'media_url_prefix': '/images/posts',
    },
    'conversion': {
        'document_extension': 'mdx',
        'default_category': 'WordPress',
        'default_code_language': 'javascript',
        'syntaxhighlighter_default_language': 'bash',
        'language_aliases': {
            'js': 'javascript',
            'jscript': 'javascript',
            'markup': 'html',
        },
    },
    'fetch': {
        'enabled': True,
        'max_workers': 4,
        'max_redirects': 5,
        'timeout': 30,
        'user_agent': 'wordpress-mdx-migrator/1.0',
        'progress_bars': True,
    },
    'migration': {
        'dry_run': False,
        'report_path': None,
    },
    'export': {
        'site_url': 'https://example.com',
        'author': '',
        'asset_endpoint': '/api/assets',
    },
    'logging': {
        'level': None,
        'file': None,
    },
}


class ConfigLoader:
    """Handles loading and validation of configuration files."""

    ENV_VAR_PATTERN = re.compile(r'\$\{([A-Za-z_][A-Za-z0-9_]*)\}')

    @classmethod
    def load(cls, config_path: Optional[str] = None) -> Dict[str, Any]:
        """
        Load configuration from YAML file merged over the built-in defaults.

        The default path is optional: if ``config.yaml`` does not exist the
        defaults are used as-is. An explicitly named file must exist.

        Args:
            config_path: Path to YAML configuration file

        Returns:
            Parsed configuration dictionary

        Raises:
            FileNotFoundError: If an explicitly named config file doesn't exist
            yaml.YAMLError: If YAML parsing fails
        """
        config = copy.deepcopy(DEFAULT_CONFIG)
        path = config_path or DEFAULT_CONFIG_PATH

        if not os.path.exists(path):
            if config_path and config_path != DEFAULT_CONFIG_PATH:
                raise FileNotFoundError(f"Configuration file not found: {config_path}")
            return config

        with open(path, 'r', encoding='utf-8') as f:
            config_data = yaml.safe_load(f)

        if config_data is None:
            return config

        if not isinstance(config_data, dict):
            raise ValueError("Configuration file must contain a dictionary")

        config_data = cls._substitute_env_vars_recursive(config_data)
        return _deep_merge(config, config_data)

    @classmethod
    def validate(cls, config: Dict[str, Any]) -> None:
        """
        Validate configuration for required fields and correct values.

        Args:
            config: Configuration dictionary to validate

        Raises:
            ValueError: If validation fails
        """
        for field in ('paths.export_file', 'paths.content_directory',
                      'paths.media_directory', 'paths.media_url_prefix'):
            cls._validate_required_field(config, field)

        prefix = get_nested(config, 'paths.media_url_prefix')
        if not prefix.startswith('/'):
            raise ValueError("paths.media_url_prefix must start with /")

        extension = get_nested(config, 'conversion.document_extension', 'mdx')
        if not isinstance(extension, str) or not extension or extension.startswith('.'):
            raise ValueError("conversion.document_extension must be a non-empty extension without a leading dot")

        default_category = get_nested(config, 'conversion.default_category', 'WordPress')
        if not isinstance(default_category, str) or not default_category.strip():
            raise ValueError("conversion.default_category must be a non-empty string")

        aliases = get_nested(config, 'conversion.language_aliases', {})
        if not isinstance(aliases, dict) or not all(
            isinstance(k, str) and isinstance(v, str) for k, v in aliases.items()
        ):
            raise ValueError("conversion.language_aliases must map strings to strings")

        enabled = get_nested(config, 'fetch.enabled', True)
        if not isinstance(enabled, bool):
            raise ValueError("fetch.enabled must be a boolean")

        max_workers = get_nested(config, 'fetch.max_workers', 4)
        if not isinstance(max_workers, int) or isinstance(max_workers, bool) or max_workers < 1:
            raise ValueError("fetch.max_workers must be a positive integer")

        max_redirects = get_nested(config, 'fetch.max_redirects', 5)
        if not isinstance(max_redirects, int) or isinstance(max_redirects, bool) or max_redirects < 0:
            raise ValueError("fetch.max_redirects must be a non-negative integer")

        timeout = get_nested(config, 'fetch.timeout', 30)
        if not isinstance(timeout, (int, float)) or isinstance(timeout, bool) or timeout <= 0:
            raise ValueError("fetch.timeout must be a positive number")

        site_url = get_nested(config, 'export.site_url')
        if site_url:
            cls._validate_url(site_url, 'export.site_url')

    @classmethod
    def merge_with_args(cls, config: Dict[str, Any], args) -> Dict[str, Any]:
        """
        Merge configuration file with CLI arguments.
        CLI arguments take precedence over config file values.

        Args:
            config: Base configuration dictionary
            args: CLI arguments with attributes matching config keys

        Returns:
            Merged configuration dictionary
        """
        merged = copy.deepcopy(config)
        for section in ('paths', 'fetch', 'migration', 'logging'):
            merged.setdefault(section, {})

        if getattr(args, 'project_root', None):
            merged['paths']['project_root'] = args.project_root

        if getattr(args, 'export_file', None):
            merged['paths']['export_file'] = args.export_file

        if getattr(args, 'dry_run', None) is not None:
            merged['migration']['dry_run'] = args.dry_run

        if getattr(args, 'no_download', False):
            merged['fetch']['enabled'] = False

        if getattr(args, 'max_workers', None):
            merged['fetch']['max_workers'] = args.max_workers

        if getattr(args, 'log_file', None):
            merged['logging']['file'] = args.log_file

        return merged

    @classmethod
    def _substitute_env_vars_recursive(cls, data: Any) -> Any:
        """Recursively substitute environment variables in data structure."""
        if isinstance(data, dict):
            return {key: cls._substitute_env_vars_recursive(value) for key, value in data.items()}
        elif isinstance(data, list):
            return [cls._substitute_env_vars_recursive(item) for item in data]
        elif isinstance(data, str):
            return cls._substitute_env_vars(data)
        return data

    @classmethod
    def _substitute_env_vars(cls, value: str) -> str:
        """Substitute environment variables in a string value."""
        def replace_match(match):
            env_value = os.getenv(match.group(1))
            return env_value if env_value is not None else match.group(0)

        return cls.ENV_VAR_PATTERN.sub(replace_match, value)

    @staticmethod
    def _validate_required_field(config: dict, field: str) -> None:
        """Validate that a required field exists and has a value."""
        value = get_nested(config, field)
        if value is None or value == '':
            raise ValueError(f"Missing required configuration: {field}")

        if isinstance(value, str) and '${' in value:
            match = ConfigLoader.ENV_VAR_PATTERN.search(value)
            var_name = match.group(1) if match else value
            raise ValueError(
                f"Configuration field '{field}' contains unsubstituted environment variable: {value}. "
                f"Please set the {var_name} environment variable or provide a value in config file."
            )

    @staticmethod
    def _validate_url(url: str, field_name: str) -> None:
        """Validate URL format."""
        parsed = urlparse(url)
        if parsed.scheme not in ('http', 'https'):
            raise ValueError(f"{field_name} must use http or https scheme: {url}")
        if not parsed.netloc:
            raise ValueError(f"{field_name} missing hostname: {url}")


def get_nested(config: dict, path: str, default: Any = None) -> Any:
    """Safely retrieve nested configuration values using dot notation.

    Args:
        config: Configuration dictionary
        path: Dot-separated path (e.g., "paths.export_file")
        default: Default value if path doesn't exist

    Returns:
        Value at the nested path or default
    """
    value = config

    for key in path.split('.'):
        if isinstance(value, dict) and key in value:
            value = value[key]
        else:
            return default

    return value


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Merge ``override`` into ``base`` recursively; override wins on conflicts."""
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(base.get(key), dict):
            base[key] = _deep_merge(base[key], value)
        else:
            base[key] = value
    return base


__all__ = ['ConfigLoader', 'DEFAULT_CONFIG', 'get_nested']
