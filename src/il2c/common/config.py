'''Global configuration system supporting JSON5 files and command-line overrides'''

import json5
import argparse
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

__all__ = [
    'DecompilerSettings',
    'Config',
    'get_config',
    'default_indent',
    'init_config',
]

logger = logging.getLogger(__name__)


@dataclass(frozen = True)
class DecompilerSettings:
    '''Immutable snapshot of the settings the IL provider consumes

    Attributes:
        method_filter: Only functions whose name contains this substring are selected ('' selects all)
        remove_dead_code: Drop nop instructions from blocks while loading
    '''
    method_filter: str = 'Main'
    remove_dead_code: bool = True


class Config:
    '''Global configuration singleton'''

    _instance = None
    _initialized = False

    # Default configuration values
    _defaults = {
        'method_filter': 'Main',
        'remove_dead_code': True,
        'strict': False,
        'log_level': 'WARNING',
        'indent': '    ',
    }

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self):
        if not self._initialized:
            self._config = self._defaults.copy()
            self._cli_overrides = {}
            self._initialized = True

    def reset(self):
        '''Drop loaded files and overrides, back to built-in defaults'''
        self._config = self._defaults.copy()
        self._cli_overrides = {}

    def load_file(self, filepath: str | Path) -> bool:
        '''Load configuration from JSON5 file'''
        filepath = Path(filepath)
        if not filepath.exists():
            return False

        try:
            with open(filepath, 'r', encoding = 'utf-8') as f:
                data = json5.loads(f.read())

        except (OSError, ValueError) as e:
            logger.warning(f'Failed to load config from {filepath}: {e}')
            return False

        if not isinstance(data, dict):
            logger.warning(f'Ignoring config {filepath}: top level is not an object')
            return False

        self._config.update(data)
        return True

    def load_defaults(self):
        '''Load default configuration files'''
        # Project config shipped next to the package
        project_config = Path(__file__).parent.parent / 'config.json5'
        self.load_file(project_config)

    @classmethod
    def build_parser(cls) -> argparse.ArgumentParser:
        '''Parser for the options that override configuration values'''
        parser = argparse.ArgumentParser(
            description = 'il2c configuration',
            add_help = False
        )

        parser.add_argument(
            '--config',
            type = str,
            help = 'Path to config file'
        )

        parser.add_argument(
            '--method',
            type = str,
            dest = 'method_filter',
            help = "Only emit functions whose name contains this substring ('' for all)"
        )

        parser.add_argument(
            '--strict',
            action = 'store_true',
            default = None,
            help = 'Fail on the first unsupported construct instead of emitting a diagnostic'
        )

        parser.add_argument(
            '--keep-nops',
            action = 'store_false',
            dest = 'remove_dead_code',
            default = None,
            help = 'Keep nop instructions from the input'
        )

        parser.add_argument(
            '--log-level',
            type = str,
            choices = ['DEBUG', 'INFO', 'WARNING', 'ERROR'],
            help = 'Logging level'
        )

        return parser

    def parse_args(self, args: list[str] = None):
        '''Parse command-line arguments and override config'''
        # Parse known args, ignore unknown
        parsed, _ = self.build_parser().parse_known_args(args)

        # Load config file if specified
        if parsed.config:
            self.load_file(parsed.config)

        # Apply command-line overrides
        for key in ('method_filter', 'strict', 'remove_dead_code', 'log_level'):
            value = getattr(parsed, key)
            if value is not None:
                self._cli_overrides[key] = value

    def get(self, key: str, default: Any = None) -> Any:
        '''Get configuration value'''
        # CLI overrides have highest priority
        if key in self._cli_overrides:
            return self._cli_overrides[key]

        # Then config file values
        if key in self._config:
            return self._config[key]

        # Finally default value
        return default

    def set(self, key: str, value: Any):
        '''Set configuration value at runtime'''
        self._config[key] = value

    def _get_bool(self, key: str) -> bool:
        '''Boolean value of key; anything that is not a bool falls back to the default'''
        value = self.get(key)
        if not isinstance(value, bool):
            logger.warning(f'Ignoring non-boolean {key}: {value!r}, using {self._defaults[key]}')
            return self._defaults[key]

        return value

    @property
    def method_filter(self) -> str:
        return str(self.get('method_filter'))

    @property
    def remove_dead_code(self) -> bool:
        return self._get_bool('remove_dead_code')

    @property
    def strict(self) -> bool:
        '''Fail fast on unsupported constructs'''
        return self._get_bool('strict')

    @property
    def log_level(self) -> str:
        return str(self.get('log_level')).upper()

    @property
    def indent(self) -> str:
        return self.get('indent')

    def decompiler_settings(self) -> DecompilerSettings:
        '''Snapshot the provider-facing keys'''
        return DecompilerSettings(
            method_filter = self.method_filter,
            remove_dead_code = self.remove_dead_code,
        )


# Global config instance
_config = Config()


def get_config() -> Config:
    '''Get global config instance'''
    return _config


def default_indent() -> str:
    '''Get default indent'''
    return _config.indent


def init_config(args: list[str] = None):
    '''Initialize configuration system'''
    _config.load_defaults()
    if args is not None:
        _config.parse_args(args)


# Auto-load defaults on import
_config.load_defaults()
