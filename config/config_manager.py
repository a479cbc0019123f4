"""
Configuration manager for the GeoGebra natural-language drawing service.

Handles loading, validation, and management of system configuration.
"""

import os
import json
import logging
from typing import Dict, Any, Optional
from pathlib import Path

import yaml
from dotenv import load_dotenv

from .settings import SystemSettings, API_KEY_PLACEHOLDER


logger = logging.getLogger(__name__)


class ConfigManager:
    """Manages system configuration from a config file and the environment."""

    def __init__(self, config_dir: str = "config", load_env_file: bool = True):
        """Initialize configuration manager.

        Args:
            config_dir: Directory containing configuration files
            load_env_file: Whether to read a ``.env`` file before applying
                environment overrides
        """
        self.config_dir = Path(config_dir)
        self.load_env_file = load_env_file
        self.config_data: Dict[str, Any] = {}
        self.system_settings: Optional[SystemSettings] = None

    def load_config(self, config_file: str = "system_config.yaml") -> bool:
        """Load configuration from file and environment.

        A missing file is not an error; defaults and environment overrides
        are used instead.

        Args:
            config_file: Configuration file name

        Returns:
            True if configuration loaded successfully
        """
        config_path = self.config_dir / config_file

        try:
            self.config_data = self._read_file(config_path)
        except FileNotFoundError:
            logger.info(f"Config file not found: {config_path}, using defaults")
            self.config_data = {}
        except (yaml.YAMLError, json.JSONDecodeError, ValueError) as e:
            logger.error(f"Error loading configuration: {e}")
            return False

        if self.load_env_file:
            load_dotenv()
        try:
            self._load_env_overrides()
        except ValueError as e:
            logger.error(f"Invalid environment override: {e}")
            return False

        try:
            self.system_settings = SystemSettings.from_dict(self.config_data)
        except TypeError as e:
            logger.error(f"Invalid configuration structure: {e}")
            return False

        return True

    def _read_file(self, config_path: Path) -> Dict[str, Any]:
        suffix = config_path.suffix.lower()
        if suffix in ('.yaml', '.yml'):
            with open(config_path, 'r', encoding='utf-8') as f:
                data = yaml.safe_load(f)
        elif suffix == '.json':
            with open(config_path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        else:
            raise ValueError(f"Unsupported config file format: {config_path.suffix}")
        return data or {}

    def _load_env_overrides(self):
        """Load configuration overrides from environment variables."""
        # LLM overrides
        if os.getenv('DEEPSEEK_API_KEY'):
            self.config_data.setdefault('llm', {})['api_key'] = os.getenv('DEEPSEEK_API_KEY')
        if os.getenv('DEEPSEEK_BASE_URL'):
            self.config_data.setdefault('llm', {})['base_url'] = os.getenv('DEEPSEEK_BASE_URL')
        if os.getenv('DEEPSEEK_MODEL'):
            self.config_data.setdefault('llm', {})['model'] = os.getenv('DEEPSEEK_MODEL')

        # Web interface overrides
        if os.getenv('PORT'):
            self.config_data.setdefault('web_interface', {})['port'] = int(os.getenv('PORT'))
        if os.getenv('RETURN_RAW') is not None:
            self.config_data.setdefault('web_interface', {})['return_raw'] = os.getenv('RETURN_RAW') == 'true'

        # Logging overrides
        if os.getenv('LOG_LEVEL'):
            self.config_data.setdefault('logging', {})['level'] = os.getenv('LOG_LEVEL').upper()

    def get_setting(self, key: str, default: Any = None) -> Any:
        """Get a configuration setting by key.

        Args:
            key: Configuration key (supports dot notation, e.g., 'llm.model')
            default: Default value if key not found

        Returns:
            Configuration value or default
        """
        keys = key.split('.')
        value = self.config_data

        try:
            for k in keys:
                value = value[k]
            return value
        except (KeyError, TypeError):
            return default

    def set_setting(self, key: str, value: Any):
        """Set a configuration setting.

        Args:
            key: Configuration key (supports dot notation)
            value: Value to set
        """
        keys = key.split('.')
        config = self.config_data

        for k in keys[:-1]:
            if k not in config:
                config[k] = {}
            config = config[k]

        config[keys[-1]] = value
        self.system_settings = SystemSettings.from_dict(self.config_data)

    def save_config(self, config_file: str = "system_config.yaml") -> bool:
        """Save current configuration to file.

        Args:
            config_file: Configuration file name
        """
        config_path = self.config_dir / config_file

        try:
            config_path.parent.mkdir(parents=True, exist_ok=True)
            if config_path.suffix.lower() in ['.yaml', '.yml']:
                with open(config_path, 'w', encoding='utf-8') as f:
                    yaml.dump(self.config_data, f, default_flow_style=False, indent=2, allow_unicode=True)
            else:
                with open(config_path, 'w', encoding='utf-8') as f:
                    json.dump(self.config_data, f, indent=2, ensure_ascii=False)
            return True
        except OSError as e:
            logger.error(f"Error saving configuration: {e}")
            return False

    def get_settings(self) -> SystemSettings:
        """Get the typed settings, loading configuration on first use."""
        if self.system_settings is None:
            self.load_config()
        if self.system_settings is None:
            self.system_settings = SystemSettings()
        return self.system_settings

    def validate_config(self) -> bool:
        """Validate the current configuration.

        A missing API key is reported but is not invalid: the service then
        runs in fallback mode.

        Returns:
            True if configuration is valid
        """
        if self.system_settings is None:
            return False

        settings = self.system_settings

        if not settings.llm.is_configured:
            if settings.llm.api_key == API_KEY_PLACEHOLDER:
                logger.warning("DeepSeek API key is still the placeholder value")
            logger.warning("Model API key not configured, fallback mode will be used")

        if not (1 <= settings.web_interface.port <= 65535):
            logger.error(f"Invalid web interface port: {settings.web_interface.port}")
            return False

        if settings.llm.timeout <= 0:
            logger.error(f"Invalid model timeout: {settings.llm.timeout}")
            return False

        if not (0.0 <= settings.llm.temperature <= 2.0):
            logger.error(f"Invalid model temperature: {settings.llm.temperature}")
            return False

        if settings.history.max_messages < 0 or settings.history.max_message_chars <= 0:
            logger.error("History limits must be positive")
            return False

        return True
