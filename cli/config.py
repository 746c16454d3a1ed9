#!/usr/bin/env python3
"""
Configuration Management Module for txgate CLI

Handles hierarchical configuration loading, environment variable mapping,
and validation of validator and CLI settings.
"""

import copy
import json
import logging
import os
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml

from validator.error_reporting import ReportFormat
from validator.signing import CANONICALIZERS


# Configuration file locations in order of precedence (highest to lowest)
CONFIG_SEARCH_PATHS = [
    Path.cwd() / '.txgate.yml',
    Path.cwd() / '.txgate.json',
    Path.home() / '.txgate' / 'config.yml',
    Path.home() / '.txgate' / 'config.json',
    Path('/etc/txgate/config.yml'),
]

# Environment variable prefix; nesting uses a double underscore
# e.g. TXGATE_VALIDATOR__SIGNING_VERSION -> validator.signing_version
ENV_PREFIX = 'TXGATE_'
ENV_NESTING = '__'

OUTPUT_FORMATS = ['table', 'json', 'yaml']

DEFAULT_CONFIG = {
    'validator': {
        'validator_id': 'txgate_validator',
        'signing_version': 1,
        'enforce_owner_match': False,
        'audit_enabled': False,
        'audit_log_file': None,
    },
    'cli': {
        'output_format': 'table',
        'report_format': 'text',
        'include_suggestions': False,
    },
}

PROFILES = {
    'strict': {
        'validator': {'enforce_owner_match': True, 'audit_enabled': True,
                      'audit_log_file': '~/.txgate/audit.jsonl'},
    },
    'development': {
        'cli': {'include_suggestions': True},
    },
}


class ConfigurationManager:
    """Manages hierarchical configuration with environment variable support."""

    def __init__(self, config_file: Optional[str] = None, profile: Optional[str] = None):
        """
        Initialize configuration manager.

        Args:
            config_file: Explicit configuration file path
            profile: Configuration profile to apply (strict, development)
        """
        self.logger = logging.getLogger('txgate-cli.config')
        self.config_file = config_file
        self.profile = profile
        self._config_cache: Optional[Dict[str, Any]] = None
        self._config_sources: List[str] = []

    def load(self) -> Dict[str, Any]:
        """
        Load configuration from all sources in hierarchical order.

        Returns:
            Merged configuration dictionary
        """
        if self._config_cache is not None:
            return self._config_cache

        configs = [copy.deepcopy(DEFAULT_CONFIG)]
        self._config_sources = ["defaults"]

        if self.profile:
            if self.profile not in PROFILES:
                raise ValueError(f"Unknown configuration profile: {self.profile}")
            configs.append(PROFILES[self.profile])
            self._config_sources.append(f"profile:{self.profile}")
            self.logger.debug(f"Applied profile: {self.profile}")

        if self.config_file:
            path = Path(self.config_file)
            if not path.exists():
                raise FileNotFoundError(f"Config file not found: {path}")
            configs.append(self._load_config_file(path))
            self._config_sources.append(f"file:{path}")
        else:
            for config_path in CONFIG_SEARCH_PATHS:
                if config_path.exists():
                    configs.append(self._load_config_file(config_path))
                    self._config_sources.append(f"file:{config_path}")
                    self.logger.debug(f"Loaded config from {config_path}")
                    break

        env_config = self._load_environment_variables()
        if env_config:
            configs.append(env_config)
            self._config_sources.append("environment")

        self._config_cache = self._deep_merge(*configs)
        self._expand_paths(self._config_cache)

        return self._config_cache

    def _load_config_file(self, path: Path) -> Dict[str, Any]:
        """Load configuration from a YAML or JSON file."""
        with open(path, 'r') as f:
            if path.suffix in ['.yml', '.yaml']:
                data = yaml.safe_load(f)
            elif path.suffix == '.json':
                data = json.load(f)
            else:
                raise ValueError(f"Unknown config file format: {path}")

        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ValueError(f"Config file must contain a mapping: {path}")
        return data

    def _load_environment_variables(self) -> Dict[str, Any]:
        """Load configuration from environment variables."""
        env_config: Dict[str, Any] = {}

        for key, value in sorted(os.environ.items()):
            if not key.startswith(ENV_PREFIX):
                continue

            parts = key[len(ENV_PREFIX):].lower().split(ENV_NESTING)
            current = env_config
            for part in parts[:-1]:
                current = current.setdefault(part, {})
                if not isinstance(current, dict):
                    break
            else:
                is_section = len(parts) == 1 and parts[0] in DEFAULT_CONFIG
                if is_section or isinstance(current.get(parts[-1]), dict):
                    current = None

            if not isinstance(current, dict):
                self.logger.warning(f"Ignoring {key}: it conflicts with a configuration section")
                continue

            current[parts[-1]] = self._parse_env_value(value)

        return env_config

    def _parse_env_value(self, value: str) -> Union[str, int, float, bool, None]:
        """Parse environment variable value to appropriate type."""
        if value.lower() in ['true', 'yes']:
            return True
        if value.lower() in ['false', 'no']:
            return False

        try:
            return json.loads(value)
        except json.JSONDecodeError:
            return value

    def _deep_merge(self, *dicts: Dict[str, Any]) -> Dict[str, Any]:
        """Deep merge multiple dictionaries."""
        result: Dict[str, Any] = {}

        for dictionary in dicts:
            for key, value in dictionary.items():
                if key in result and isinstance(result[key], dict):
                    if not isinstance(value, dict):
                        self.logger.warning(f"Ignoring non-mapping value for section '{key}'")
                        continue
                    result[key] = self._deep_merge(result[key], value)
                else:
                    result[key] = copy.deepcopy(value)

        return result

    def _expand_paths(self, config: Dict[str, Any]):
        """Expand ~ and environment variables in path values."""
        for key, value in config.items():
            if isinstance(value, dict):
                self._expand_paths(value)
            elif isinstance(value, str) and ('~' in value or '$' in value):
                config[key] = os.path.expanduser(os.path.expandvars(value))

    def get(self, key_path: str, default: Any = None) -> Any:
        """
        Get configuration value by dot-notation path.

        Args:
            key_path: Dot-separated path (e.g., 'validator.signing_version')
            default: Default value if key not found

        Returns:
            Configuration value or default
        """
        current: Any = self.load()

        for key in key_path.split('.'):
            if isinstance(current, dict) and key in current:
                current = current[key]
            else:
                return default

        return current

    def set(self, key_path: str, value: Any):
        """
        Set configuration value by dot-notation path.

        Args:
            key_path: Dot-separated path (e.g., 'cli.report_format')
            value: Value to set
        """
        config = self.load()

        keys = key_path.split('.')
        current = config
        for key in keys[:-1]:
            current = current.setdefault(key, {})

        current[keys[-1]] = value

    def validate(self) -> List[str]:
        """
        Validate current configuration.

        Returns:
            List of validation errors (empty if valid)
        """
        config = self.load()
        errors = []

        validator_config = config.get('validator', {})
        signing_version = validator_config.get('signing_version')
        if signing_version not in CANONICALIZERS:
            errors.append(f"Unsupported signing version: {signing_version}")

        for flag in ['enforce_owner_match', 'audit_enabled']:
            if not isinstance(validator_config.get(flag), bool):
                errors.append(f"validator.{flag} must be true or false")

        if validator_config.get('audit_enabled') and not validator_config.get('audit_log_file'):
            self.logger.debug("Audit enabled without a log file; events stay in memory")

        cli_config = config.get('cli', {})
        output_format = cli_config.get('output_format')
        if output_format not in OUTPUT_FORMATS:
            errors.append(f"Invalid output format: {output_format}")

        report_format = cli_config.get('report_format')
        if report_format not in [fmt.value for fmt in ReportFormat]:
            errors.append(f"Invalid report format: {report_format}")

        return errors

    def get_sources(self) -> List[str]:
        """Get list of configuration sources that were loaded."""
        self.load()
        return list(self._config_sources)


def get_config_manager(config_file: Optional[str] = None,
                       profile: Optional[str] = None) -> ConfigurationManager:
    """Create a configuration manager instance."""
    return ConfigurationManager(config_file, profile)
