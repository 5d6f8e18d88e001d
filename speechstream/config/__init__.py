"""Simple YAML configuration loader for SpeechStream."""

import os
import tempfile
import yaml
from pathlib import Path
from typing import Dict, Any, List, Optional
import logging

from ..models.streaming import StreamingConfig

logger = logging.getLogger(__name__)


class SpeechStreamConfig:
    """SpeechStream configuration loader."""

    def __init__(self, config_path: Optional[str] = None):
        """Initialize configuration loader.

        Args:
            config_path: Path to YAML config file. If None, an empty
                        configuration is used and every option takes its default.
        """
        if config_path is None:
            self.config_file = None
            self.config: Dict[str, Any] = {}
            logger.info("No configuration file given, using defaults")
            return

        self.config_file = Path(config_path)

        if not self.config_file.exists():
            raise FileNotFoundError(f"Configuration file not found: {self.config_file}")

        logger.info(f"Loading configuration from: {self.config_file}")
        self.config = self._load_config()

    def _load_config(self) -> Dict[str, Any]:
        """Load and parse YAML configuration file."""
        try:
            with open(self.config_file, 'r', encoding='utf-8') as f:
                config = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML in configuration file: {e}")

        if not config:
            raise ValueError("Configuration file is empty")
        if not isinstance(config, dict):
            raise ValueError("Configuration file must contain a mapping at the top level")

        self._resolve_paths(config)

        logger.info("Configuration loaded successfully")
        return config

    def _resolve_paths(self, config: Dict[str, Any]) -> None:
        """Resolve relative paths in configuration relative to config file location."""
        config_dir = self.config_file.parent

        if 'streaming' in config and config['streaming'].get('working_directory'):
            work_dir = config['streaming']['working_directory']
            if not os.path.isabs(work_dir):
                config['streaming']['working_directory'] = str(config_dir / work_dir)

        if 'logging' in config and config['logging'].get('file_path'):
            log_path = config['logging']['file_path']
            if not os.path.isabs(log_path):
                config['logging']['file_path'] = str(config_dir / log_path)

    def get(self, key_path: str, default: Any = None) -> Any:
        """Get configuration value using dot notation (e.g., 'streaming.language').

        Args:
            key_path: Dot-separated key path (e.g., 'capture.ffmpeg_path')
            default: Default value if key not found

        Returns:
            Configuration value or default
        """
        keys = key_path.split('.')
        value = self.config

        for key in keys:
            if isinstance(value, dict) and key in value:
                value = value[key]
            else:
                return default

        return value

    def set(self, key_path: str, value: Any) -> None:
        """Set configuration value using dot notation.

        Args:
            key_path: Dot-separated path to config value (e.g., 'streaming.max_chunks')
            value: Value to set
        """
        keys = key_path.split('.')
        config_dict = self.config

        # Navigate to the parent dictionary
        for key in keys[:-1]:
            if key not in config_dict:
                config_dict[key] = {}
            config_dict = config_dict[key]

        config_dict[keys[-1]] = value
        logger.debug(f"Configuration key '{key_path}' set to: {value}")

    def get_streaming_config(self, overrides: Optional[Dict[str, Any]] = None) -> StreamingConfig:
        """Build the streaming options from the 'streaming' section.

        Args:
            overrides: Values taking precedence over the file (e.g. CLI flags)

        Returns:
            StreamingConfig (not yet validated)
        """
        values = dict(self.get('streaming', {}) or {})
        values.update(overrides or {})
        return StreamingConfig.from_dict(values)

    def get_provider_profiles(self) -> List[Dict[str, Any]]:
        """Get the stored API provider profiles."""
        profiles = self.get('providers', []) or []
        if not isinstance(profiles, list):
            raise ValueError("'providers' must be a list of provider profiles")
        return profiles

    def get_working_directory(self) -> str:
        """Get the parent directory for per-session chunk folders."""
        work_dir = self.get('streaming.working_directory') or tempfile.gettempdir()
        return str(Path(work_dir).absolute())

    def get_capture_overrides(self) -> Dict[str, str]:
        """Get user overrides for the ffmpeg input format/device."""
        overrides = {}
        for key in ('input_format', 'input_device'):
            value = self.get(f'capture.{key}')
            if value:
                overrides[key] = str(value)
        return overrides
