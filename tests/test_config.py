"""Tests for configuration."""

from __future__ import annotations

from pathlib import Path

from phewreader.config import AIProviderConfig, AppConfig, load_config


class TestAppConfig:
    def test_defaults(self, tmp_path: Path):
        config = AppConfig(data_dir=tmp_path / "data", config_dir=tmp_path / "config")
        assert config.ai_provider == "openrouter"
        assert config.ai_context_chars == 2000
        assert config.ai_max_tokens == 500
        assert config.db_path == tmp_path / "data" / "phew_readers.db"
        assert config.books_dir == tmp_path / "data" / "books"

    def test_dirs_created(self, tmp_path: Path):
        data = tmp_path / "data"
        conf = tmp_path / "config"
        AppConfig(data_dir=data, config_dir=conf)
        assert data.exists()
        assert conf.exists()

    def test_get_active_provider(self, tmp_path: Path):
        config = AppConfig(data_dir=tmp_path / "d", config_dir=tmp_path / "c")
        config.providers = {"openai": AIProviderConfig(name="openai")}
        config.ai_provider = "openai"
        assert config.get_active_provider() is not None

    def test_get_active_provider_missing(self, tmp_path: Path):
        config = AppConfig(data_dir=tmp_path / "d", config_dir=tmp_path / "c")
        config.ai_provider = "nonexistent"
        assert config.get_active_provider() is None


class TestLoadConfig:
    def test_load_from_env_file(self, tmp_path: Path, monkeypatch):
        monkeypatch.delenv("OPENROUTER_API_KEY", raising=False)
        monkeypatch.delenv("PHEWREADER_AI_PROVIDER", raising=False)
        monkeypatch.delenv("PHEWREADER_AI_CONTEXT_CHARS", raising=False)
        monkeypatch.setenv("PHEWREADER_DATA_DIR", str(tmp_path / "data"))
        env_file = tmp_path / ".env"
        env_file.write_text(
            "PHEWREADER_AI_PROVIDER=openrouter\n"
            "PHEWREADER_AI_CONTEXT_CHARS=1500\n"
            "OPENROUTER_API_KEY=test-key-123\n"
        )
        config = load_config(env_path=env_file)
        assert config.data_dir == tmp_path / "data"
        assert config.ai_context_chars == 1500
        assert config.providers["openrouter"].api_key == "test-key-123"
        assert config.get_active_provider().name == "openrouter"

    def test_all_providers_loaded(self, tmp_path: Path, monkeypatch):
        monkeypatch.setenv("PHEWREADER_DATA_DIR", str(tmp_path / "data"))
        env_file = tmp_path / ".env"
        env_file.write_text("")
        config = load_config(env_path=env_file)
        assert set(config.providers.keys()) == {"openrouter", "openai", "ollama"}

    def test_ollama_no_api_key(self, tmp_path: Path, monkeypatch):
        monkeypatch.setenv("PHEWREADER_DATA_DIR", str(tmp_path / "data"))
        env_file = tmp_path / ".env"
        env_file.write_text("")
        config = load_config(env_path=env_file)
        assert config.providers["ollama"].api_key == ""
        assert "localhost" in config.providers["ollama"].base_url
