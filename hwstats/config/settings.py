# hwstats/config/settings.py
"""
Configuration management for hardware inventory runs.
"""

import os
import yaml
from pathlib import Path
from typing import Dict, List, Any, Optional
from dataclasses import dataclass, field
import logging

from ..exceptions import ConfigurationError

CONFIG_ENV_VAR = 'HWSTATS_CONFIG'


@dataclass
class SourcesConfig:
    """Which sources may be used and how the report tool is invoked"""
    disabled: List[str] = field(default_factory=list)
    report_command: List[str] = field(default_factory=lambda: ['fastfetch'])
    command_timeout: Optional[float] = None

    def __post_init__(self):
        if isinstance(self.report_command, str):
            self.report_command = self.report_command.split()
        if not self.report_command:
            raise ConfigurationError("sources.report_command must not be empty")
        if self.command_timeout is not None:
            try:
                self.command_timeout = float(self.command_timeout)
            except (TypeError, ValueError):
                raise ConfigurationError(f"sources.command_timeout must be a number, got {self.command_timeout!r}")
            if self.command_timeout <= 0:
                raise ConfigurationError("sources.command_timeout must be positive")


@dataclass
class ReportConfig:
    """What to report and how to lay it out"""
    fields: List[str] = field(default_factory=list)
    sections: bool = False

    def __post_init__(self):
        if self.fields is None:
            self.fields = []
        if not isinstance(self.fields, list):
            raise ConfigurationError("report.fields must be a list of field ids")


@dataclass
class LogConfig:
    """Logging behaviour"""
    level: str = 'WARNING'
    log_to_file: bool = False
    log_dir: str = 'logs'

    def __post_init__(self):
        if not isinstance(logging.getLevelName(str(self.level).upper()), int):
            raise ConfigurationError(f"Unknown log level: {self.level!r}")


class ConfigManager:
    """Loads hwstats configuration from YAML, falling back to defaults"""

    def __init__(self, config_file: str = None):
        self.logger = logging.getLogger('config_manager')

        if config_file:
            self.config_file = Path(config_file)
            if not self.config_file.exists():
                raise ConfigurationError(f"Config file not found: {self.config_file}")
        else:
            self.config_file = self._find_config_file()

        self.sources = SourcesConfig()
        self.report = ReportConfig()
        self.logging = LogConfig()

        self._load_config()

    def _find_config_file(self) -> Optional[Path]:
        """Find configuration file in standard locations"""
        possible_locations = []
        if os.environ.get(CONFIG_ENV_VAR):
            possible_locations.append(Path(os.environ[CONFIG_ENV_VAR]))
        possible_locations.extend([
            Path('hwstats.yml'),
            Path.home() / '.config' / 'hwstats' / 'config.yml'
        ])

        for location in possible_locations:
            if location.exists():
                self.logger.info(f"Found config file at {location}")
                return location

        self.logger.debug("No config file found, using defaults")
        return None

    def _load_config(self):
        """Load configuration from file"""
        if self.config_file is None:
            return

        try:
            with open(self.config_file, 'r') as f:
                config_data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            raise ConfigurationError(f"Cannot load config file {self.config_file}: {e}")

        if not isinstance(config_data, dict):
            raise ConfigurationError(f"Config file {self.config_file} must hold a mapping")

        self.sources = self._build(SourcesConfig, config_data.get('sources'), 'sources')
        self.report = self._build(ReportConfig, config_data.get('report'), 'report')
        self.logging = self._build(LogConfig, config_data.get('logging'), 'logging')

        self.logger.info(f"Loaded configuration from {self.config_file}")

    @staticmethod
    def _build(config_class, data: Optional[Dict[str, Any]], section: str):
        if data is None:
            return config_class()
        if not isinstance(data, dict):
            raise ConfigurationError(f"'{section}' section must be a mapping")
        try:
            return config_class(**data)
        except TypeError as e:
            raise ConfigurationError(f"Invalid '{section}' section: {e}")

    def is_source_enabled(self, name: str) -> bool:
        return name not in self.sources.disabled

    def validate_configuration(self, known_fields: List[str] = None,
                               known_sources: List[str] = None) -> bool:
        """Check field and source names against the ones hwstats knows"""
        valid = True
        if known_fields is not None:
            for field_id in self.report.fields:
                if field_id not in known_fields:
                    self.logger.error(f"Unknown field in report.fields: {field_id}")
                    valid = False
        if known_sources is not None:
            for name in self.sources.disabled:
                if name not in known_sources:
                    self.logger.warning(f"Unknown source in sources.disabled: {name}")
        return valid


# Global configuration instance
config_manager = None


def get_config() -> ConfigManager:
    """Get global configuration manager instance"""
    global config_manager
    if config_manager is None:
        config_manager = ConfigManager()
    return config_manager


def initialize_config(config_file: str = None) -> ConfigManager:
    """Initialize configuration manager with specific config file"""
    global config_manager
    config_manager = ConfigManager(config_file)
    return config_manager
