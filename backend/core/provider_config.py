"""
Provider configuration resolved once at startup.

The active profile either yields a ProviderConfig or a ServerMisconfigured
marker; routes receive it through the get_provider_config dependency.
"""

from functools import lru_cache
from typing import Dict, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from config.settings import Settings, settings
from core.errors import ServerMisconfigured

ProviderName = Literal["openrouter", "gemini"]

PROVIDER_LABELS: Dict[str, str] = {
    "openrouter": "OpenRouter",
    "gemini": "Gemini",
}

MISSING_KEY_MESSAGES: Dict[str, str] = {
    "openrouter": "Missing OPENROUTER_API_KEY. Add your OpenRouter key to the environment.",
    "gemini": "Missing GEMINI_API_KEY or GOOGLE_API_KEY. Add your Google AI key to the environment.",
}


class ProviderConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    provider: ProviderName
    api_key: str
    model: str
    base_url: str
    extra_headers: Dict[str, str] = Field(default_factory=dict)
    default_image_path: str
    default_image_url: Optional[str] = None
    accept_client_image: bool = True
    default_prompt: str
    append_safety_to_default: bool = True
    timeout_seconds: float = 120.0
    max_concurrent_calls: int = 5

    @property
    def label(self) -> str:
        return PROVIDER_LABELS[self.provider]


def build_provider_config(source: Settings) -> Union[ProviderConfig, ServerMisconfigured]:
    """Resolve the active profile from settings.

    Returns a ServerMisconfigured instance instead of raising so the decision
    is made once and every request can report it before doing any work.
    """
    if source.PROVIDER == "gemini":
        api_key = source.GEMINI_API_KEY or source.GOOGLE_API_KEY
        model = source.GEMINI_MODEL
        base_url = source.GEMINI_BASE_URL
        extra_headers: Dict[str, str] = {}
    else:
        api_key = source.OPENROUTER_API_KEY
        model = source.OPENROUTER_MODEL
        base_url = source.OPENROUTER_BASE_URL
        extra_headers = {}
        if source.OPENROUTER_REFERER:
            extra_headers["HTTP-Referer"] = source.OPENROUTER_REFERER
        if source.OPENROUTER_TITLE:
            extra_headers["X-Title"] = source.OPENROUTER_TITLE

    if not api_key:
        return ServerMisconfigured(MISSING_KEY_MESSAGES[source.PROVIDER])

    return ProviderConfig(
        provider=source.PROVIDER,
        api_key=api_key,
        model=model,
        base_url=base_url.rstrip("/"),
        extra_headers=extra_headers,
        default_image_path=source.DEFAULT_IMAGE_PATH,
        default_image_url=source.DEFAULT_IMAGE_URL or None,
        accept_client_image=source.ACCEPT_CLIENT_IMAGE,
        default_prompt=source.DEFAULT_PROMPT,
        append_safety_to_default=source.APPEND_SAFETY_TO_DEFAULT,
        timeout_seconds=source.PROVIDER_TIMEOUT_SECONDS,
        max_concurrent_calls=source.MAX_CONCURRENT_PROVIDER_CALLS,
    )


@lru_cache()
def get_provider_config() -> Union[ProviderConfig, ServerMisconfigured]:
    return build_provider_config(settings)
