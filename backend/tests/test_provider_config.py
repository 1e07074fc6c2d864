"""
Provider configuration unit tests
"""
import pytest

from config.settings import Settings
from core.errors import ServerMisconfigured
from core.provider_config import ProviderConfig, build_provider_config


def make_settings(**overrides) -> Settings:
    values = {
        "PROVIDER": "openrouter",
        "OPENROUTER_API_KEY": None,
        "OPENROUTER_REFERER": None,
        "OPENROUTER_TITLE": None,
        "GEMINI_API_KEY": None,
        "GOOGLE_API_KEY": None,
        "DEFAULT_IMAGE_URL": None,
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


@pytest.mark.unit
class TestBuildProviderConfig:
    """Tests for startup profile resolution"""

    def test_openrouter_missing_key(self):
        config = build_provider_config(make_settings())

        assert isinstance(config, ServerMisconfigured)
        assert "OPENROUTER_API_KEY" in config.message
        assert config.status_code == 500

    def test_gemini_missing_key(self):
        config = build_provider_config(make_settings(PROVIDER="gemini", OPENROUTER_API_KEY="unused"))

        assert isinstance(config, ServerMisconfigured)
        assert "GEMINI_API_KEY" in config.message

    def test_openrouter_headers_only_when_set(self):
        bare = build_provider_config(make_settings(OPENROUTER_API_KEY="sk-or"))
        branded = build_provider_config(make_settings(
            OPENROUTER_API_KEY="sk-or",
            OPENROUTER_REFERER="https://memelab.test",
            OPENROUTER_TITLE="Meme Lab",
        ))

        assert isinstance(bare, ProviderConfig)
        assert bare.extra_headers == {}
        assert branded.extra_headers == {"HTTP-Referer": "https://memelab.test", "X-Title": "Meme Lab"}
        assert branded.model == "google/gemini-2.5-flash-image"
        assert branded.label == "OpenRouter"

    @pytest.mark.parametrize("keys", [
        {"GEMINI_API_KEY": "gem-key"},
        {"GOOGLE_API_KEY": "gem-key"},
        {"GEMINI_API_KEY": "gem-key", "GOOGLE_API_KEY": "other"},
    ])
    def test_gemini_key_sources(self, keys):
        config = build_provider_config(make_settings(PROVIDER="gemini", **keys))

        assert isinstance(config, ProviderConfig)
        assert config.api_key == "gem-key"
        assert config.model == "gemini-2.5-flash-image"
        assert config.extra_headers == {}

    def test_default_image_url_passthrough(self):
        config = build_provider_config(make_settings(
            OPENROUTER_API_KEY="sk-or",
            DEFAULT_IMAGE_URL="https://assets.test/kameraboy.png",
        ))

        assert config.default_image_url == "https://assets.test/kameraboy.png"
