"""Prakriti Mitra configuration management.

Handles persistent settings stored in ~/.prakriti/config.json
"""

import json
import os
from dataclasses import dataclass, asdict
from pathlib import Path
from typing import Optional


# Default configuration values
DEFAULT_CHAT_MODEL = "gemini-2.5-flash"
DEFAULT_CHAT_TEMPERATURE = 0.7
DEFAULT_CHAT_TIMEOUT = 60.0  # seconds; a timeout surfaces as the apology reply
DEFAULT_THEME = "textual-dark"
DEFAULT_DATABASE_URL = "sqlite:///prakriti.db"

API_KEY_ENV = "GEMINI_API_KEY"

# Available options for settings
AVAILABLE_THEMES = [
    ("textual-dark", "Textual Dark"),
    ("textual-light", "Textual Light"),
    ("nord", "Nord"),
    ("gruvbox", "Gruvbox"),
    ("dracula", "Dracula"),
]


@dataclass
class PrakritiConfig:
    """Prakriti Mitra application configuration."""

    # Chat
    chat_model: str = DEFAULT_CHAT_MODEL
    chat_temperature: float = DEFAULT_CHAT_TEMPERATURE
    chat_timeout: float = DEFAULT_CHAT_TIMEOUT

    # Appearance
    theme: str = DEFAULT_THEME

    # Storage
    database_url: str = DEFAULT_DATABASE_URL

    @classmethod
    def get_config_path(cls) -> Path:
        """Get the path to the config file."""
        return Path.home() / ".prakriti" / "config.json"

    @classmethod
    def load(cls) -> "PrakritiConfig":
        """Load configuration from file, or return defaults if not found."""
        config_path = cls.get_config_path()

        if config_path.exists():
            try:
                with open(config_path, "r", encoding="utf-8") as f:
                    data = json.load(f)
                # Only use known fields to avoid issues with old config versions
                known_fields = {f.name for f in cls.__dataclass_fields__.values()}
                filtered_data = {k: v for k, v in data.items() if k in known_fields}
                return cls(**filtered_data)
            except (json.JSONDecodeError, TypeError, ValueError, AttributeError):
                # Invalid config, return defaults
                pass

        return cls()

    def save(self) -> None:
        """Save configuration to file."""
        config_path = self.get_config_path()

        # Ensure directory exists
        config_path.parent.mkdir(parents=True, exist_ok=True)

        with open(config_path, "w", encoding="utf-8") as f:
            json.dump(asdict(self), f, indent=2)

    def reset(self) -> None:
        """Reset configuration to defaults."""
        self.chat_model = DEFAULT_CHAT_MODEL
        self.chat_temperature = DEFAULT_CHAT_TEMPERATURE
        self.chat_timeout = DEFAULT_CHAT_TIMEOUT
        self.theme = DEFAULT_THEME
        self.database_url = DEFAULT_DATABASE_URL

    def set_value(self, key: str, value: str) -> None:
        """Set a field from its string form, converting to the field's type."""
        if key not in self.__dataclass_fields__:
            raise KeyError(key)
        if key == "theme" and value not in {theme_id for theme_id, _ in AVAILABLE_THEMES}:
            raise ValueError(f"Unknown theme: {value}")
        current = getattr(self, key)
        if isinstance(current, float):
            setattr(self, key, float(value))
        else:
            setattr(self, key, value)


def get_api_key() -> Optional[str]:
    """Get the Gemini API key from environment."""
    return os.environ.get(API_KEY_ENV)
