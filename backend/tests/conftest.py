"""
Shared pytest fixtures and configuration for all tests
"""
import base64
import pytest
import sys
from pathlib import Path

# Add backend to Python path for imports
backend_dir = Path(__file__).parent.parent
sys.path.insert(0, str(backend_dir))

# 1x1 transparent PNG
PNG_BYTES = base64.b64decode(
    "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAYAAAAfFcSJAAAADUlEQVR42mNk+M9QDwADhgGAWjR9awAAAABJRU5ErkJggg=="
)

@pytest.fixture
def png_bytes():
    return PNG_BYTES

@pytest.fixture
def default_image_file(tmp_path):
    """Provide a default image on disk"""
    path = tmp_path / "default.png"
    path.write_bytes(PNG_BYTES)
    return path

@pytest.fixture
def openrouter_config(default_image_file):
    """Provide an OpenRouter ProviderConfig reading the default image from disk"""
    from core.provider_config import ProviderConfig
    return ProviderConfig(
        provider="openrouter",
        api_key="test-openrouter-key",
        model="google/gemini-2.5-flash-image",
        base_url="https://openrouter.test/api/v1",
        extra_headers={"HTTP-Referer": "https://memelab.test", "X-Title": "Meme Lab"},
        default_image_path=str(default_image_file),
        default_prompt="Create a bold, playful variation of this photo.",
    )

@pytest.fixture
def gemini_config(default_image_file):
    """Provide a Gemini ProviderConfig fetching the default image from a URL"""
    from core.provider_config import ProviderConfig
    return ProviderConfig(
        provider="gemini",
        api_key="test-gemini-key",
        model="gemini-2.5-flash-image",
        base_url="https://gemini.test/v1beta",
        default_image_path=str(default_image_file),
        default_image_url="https://assets.test/kameraboy.png",
        accept_client_image=False,
        default_prompt="Mach ein lustiges Meme aus diesem Foto.",
        append_safety_to_default=False,
    )

@pytest.fixture
def sample_data_uri():
    return "data:image/png;base64,AAAA"

@pytest.fixture
def openrouter_response():
    """Provide a minimal OpenRouter completion carrying an image in the images list"""
    return {
        "id": "gen-123",
        "choices": [
            {
                "index": 0,
                "message": {
                    "role": "assistant",
                    "content": "Here is your remix!",
                    "images": [
                        {"type": "image_url", "image_url": {"url": "data:image/png;base64,AAAA"}}
                    ]
                }
            }
        ]
    }
