"""
Settings classes for the GeoGebra natural-language drawing service.

Defines typed configuration classes for all system components.
"""

from dataclasses import dataclass, field
from typing import Dict, Any, Optional


API_KEY_PLACEHOLDER = "your_deepseek_api_key_here"


@dataclass
class LLMSettings:
    """Settings for the chat-completions model backend."""
    api_key: Optional[str] = None
    base_url: str = "https://api.deepseek.com"
    model: str = "deepseek-chat"
    timeout: float = 60.0
    temperature: float = 0.2

    @property
    def is_configured(self) -> bool:
        """True when a usable API key is present."""
        return bool(self.api_key and self.api_key.strip()) and self.api_key != API_KEY_PLACEHOLDER


@dataclass
class HistorySettings:
    """Limits applied to conversation history sent to the model."""
    max_messages: int = 8
    max_message_chars: int = 4000
    keep_messages: int = 12


@dataclass
class WebInterfaceSettings:
    """Settings for the HTTP interface."""
    host: str = "127.0.0.1"
    port: int = 3001
    debug: bool = False
    cors_enabled: bool = True
    return_raw: bool = False
    max_content_length: int = 1024 * 1024


@dataclass
class LoggingSettings:
    """Settings for logging configuration."""
    level: str = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    file: Optional[str] = None
    max_bytes: int = 10 * 1024 * 1024
    backup_count: int = 5
    console_output: bool = True


@dataclass
class SystemSettings:
    """Complete system settings container."""
    llm: LLMSettings = field(default_factory=LLMSettings)
    history: HistorySettings = field(default_factory=HistorySettings)
    web_interface: WebInterfaceSettings = field(default_factory=WebInterfaceSettings)
    logging: LoggingSettings = field(default_factory=LoggingSettings)

    @classmethod
    def from_dict(cls, config_dict: Optional[Dict[str, Any]]) -> 'SystemSettings':
        """Create SystemSettings from configuration dictionary.

        Args:
            config_dict: Configuration dictionary

        Returns:
            SystemSettings instance
        """
        config_dict = config_dict or {}
        return cls(
            llm=LLMSettings(**(config_dict.get('llm') or {})),
            history=HistorySettings(**(config_dict.get('history') or {})),
            web_interface=WebInterfaceSettings(**(config_dict.get('web_interface') or {})),
            logging=LoggingSettings(**(config_dict.get('logging') or {}))
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert SystemSettings to dictionary.

        Returns:
            Configuration dictionary
        """
        from dataclasses import asdict
        return asdict(self)
