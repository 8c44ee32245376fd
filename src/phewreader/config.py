"""Configuration management via .env file."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv


def _xdg_data_home() -> Path:
    return Path(os.environ.get("XDG_DATA_HOME", Path.home() / ".local" / "share"))


def _xdg_config_home() -> Path:
    return Path(os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config"))


@dataclass
class AIProviderConfig:
    name: str
    api_key: str = ""
    base_url: str = ""
    model: str = ""


@dataclass
class AppConfig:
    # Paths
    data_dir: Path = field(default_factory=lambda: _xdg_data_home() / "phewreader")
    config_dir: Path = field(default_factory=lambda: _xdg_config_home() / "phewreader")
    db_path: Path = field(init=False)
    books_dir: Path = field(init=False)
    log_path: Path = field(init=False)

    # AI
    ai_provider: str = "openrouter"
    providers: dict[str, AIProviderConfig] = field(default_factory=dict)
    ai_context_chars: int = 2000
    ai_max_tokens: int = 500
    ai_temperature: float = 0.7

    def __post_init__(self) -> None:
        self.db_path = self.data_dir / "phew_readers.db"
        self.books_dir = self.data_dir / "books"
        self.log_path = self.data_dir / "phewreader.log"
        self.data_dir.mkdir(parents=True, exist_ok=True)
        self.config_dir.mkdir(parents=True, exist_ok=True)

    def get_active_provider(self) -> Optional[AIProviderConfig]:
        return self.providers.get(self.ai_provider)


def load_config(env_path: Optional[Path] = None) -> AppConfig:
    """Load config from .env file. Searches CWD then config dir."""
    search_paths = [
        env_path,
        Path.cwd() / ".env",
        _xdg_config_home() / "phewreader" / ".env",
        Path.home() / ".env",
    ]
    for p in search_paths:
        if p and p.exists():
            load_dotenv(p)
            break

    data_dir = os.getenv("PHEWREADER_DATA_DIR")
    config = AppConfig(
        **({"data_dir": Path(data_dir)} if data_dir else {}),
        ai_provider=os.getenv("PHEWREADER_AI_PROVIDER", "openrouter"),
        ai_context_chars=int(os.getenv("PHEWREADER_AI_CONTEXT_CHARS", "2000")),
        ai_max_tokens=int(os.getenv("PHEWREADER_AI_MAX_TOKENS", "500")),
        ai_temperature=float(os.getenv("PHEWREADER_AI_TEMPERATURE", "0.7")),
    )

    provider_defs = {
        "openrouter": (
            "OPENROUTER_API_KEY",
            "OPENROUTER_BASE_URL",
            "OPENROUTER_MODEL",
            "https://openrouter.ai/api/v1",
            "openai/gpt-3.5-turbo",
        ),
        "openai": (
            "OPENAI_API_KEY",
            "OPENAI_BASE_URL",
            "OPENAI_MODEL",
            "https://api.openai.com/v1",
            "gpt-4o-mini",
        ),
        "ollama": (
            "",
            "OLLAMA_BASE_URL",
            "OLLAMA_MODEL",
            "http://localhost:11434/v1",
            "qwen2.5:7b",
        ),
    }

    for name, (
        key_env,
        url_env,
        model_env,
        default_url,
        default_model,
    ) in provider_defs.items():
        api_key = os.getenv(key_env, "") if key_env else ""
        base_url = os.getenv(url_env, default_url)
        model = os.getenv(model_env, default_model)
        config.providers[name] = AIProviderConfig(
            name=name,
            api_key=api_key,
            base_url=base_url,
            model=model,
        )

    return config
