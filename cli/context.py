"""
Shared CLI context for txgate commands.

Command modules import the context and error wrapper from here rather than
from ``cli.main`` so that ``cli.main`` can register them without cycles.
"""

import functools
import json
import logging
import sys
import traceback
from typing import Any, Dict, Optional

import click
import yaml

from validator.exceptions import CollaboratorError

from .config import ConfigurationManager, get_config_manager


LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

# Loggers that receive the CLI handler
LOGGER_NAMES = ['txgate-cli', 'validator', 'ledger']

EXIT_INVALID = 1
EXIT_FAULT = 2


class CLIContext:
    """Global CLI context for sharing state across commands."""

    def __init__(self):
        self.config_file: Optional[str] = None
        self.profile: Optional[str] = None
        self.output_format: Optional[str] = None
        self.verbose: int = 0
        self.config: Dict[str, Any] = {}
        self.config_manager: Optional[ConfigurationManager] = None
        self.logger: logging.Logger = logging.getLogger('txgate-cli')

    def setup_logging(self):
        """Configure logging based on verbosity level."""
        log_levels = {
            0: logging.WARNING,
            1: logging.INFO,
            2: logging.DEBUG
        }
        level = log_levels.get(min(self.verbose, 2), logging.DEBUG)

        formatter = logging.Formatter(LOG_FORMAT)
        for name in LOGGER_NAMES:
            logger = logging.getLogger(name)
            logger.setLevel(level)
            for existing in [h for h in logger.handlers if getattr(h, '_txgate_cli', False)]:
                logger.removeHandler(existing)

            handler = logging.StreamHandler(sys.stderr)
            handler.setFormatter(formatter)
            handler._txgate_cli = True
            logger.addHandler(handler)

    def load_config(self):
        """Load configuration from defaults, profile, files and environment."""
        self.config_manager = get_config_manager(self.config_file, self.profile)
        if self.output_format:
            self.config_manager.set('cli.output_format', self.output_format)
        self.config = self.config_manager.load()
        self.logger.info(f"Configuration sources: {', '.join(self.config_manager.get_sources())}")

    def get_config(self, key_path: str, default: Any = None) -> Any:
        """Get configuration value with fallback to default."""
        if self.config_manager is None:
            return default
        return self.config_manager.get(key_path, default)

    def output(self, data: Any, format_override: Optional[str] = None):
        """Output data in specified format."""
        format_type = format_override or self.get_config('cli.output_format', 'table')

        if format_type == "json":
            click.echo(json.dumps(data, indent=2, default=str))
        elif format_type == "yaml":
            click.echo(yaml.safe_dump(data, default_flow_style=False, sort_keys=False).rstrip())
        else:
            self._output_table(data)

    def _output_table(self, data: Any):
        """Output data in table format."""
        if isinstance(data, dict):
            for key, value in data.items():
                click.echo(f"{key:20} {value}")
        elif isinstance(data, list) and data and isinstance(data[0], dict):
            headers = list(data[0].keys())
            click.echo(" | ".join(f"{h:15}" for h in headers))
            click.echo("-" * (len(headers) * 17))
            for item in data:
                values = [str(item.get(h, ""))[:15] for h in headers]
                click.echo(" | ".join(f"{v:15}" for v in values))
        elif isinstance(data, list):
            for item in data:
                click.echo(item)
        else:
            click.echo(str(data))


pass_context = click.make_pass_decorator(CLIContext, ensure=True)


def handle_cli_error(func):
    """Decorator to handle CLI errors gracefully."""
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except click.ClickException:
            raise
        except KeyboardInterrupt:
            click.echo("\nOperation cancelled by user.", err=True)
            sys.exit(130)
        except Exception as e:
            ctx = click.get_current_context(silent=True)
            cli_ctx = ctx.find_object(CLIContext) if ctx else None

            click.echo(f"Error: {e}", err=True)
            if cli_ctx and cli_ctx.verbose >= 2:
                click.echo(traceback.format_exc(), err=True)
            else:
                click.echo("Use -vv for detailed error information.", err=True)

            sys.exit(EXIT_FAULT if isinstance(e, CollaboratorError) else EXIT_INVALID)

    return wrapper
