import asyncio
import weakref
from typing import Any, Dict, Optional

import httpx

from core.errors import UpstreamError
from core.provider_config import ProviderConfig
from models.generation import GenerationRequest, GenerationResult


# asyncio.Semaphore binds to the loop it first waits on, so keep one per loop and limit
_provider_slots: "weakref.WeakKeyDictionary[asyncio.AbstractEventLoop, Dict[int, asyncio.Semaphore]]" = (
    weakref.WeakKeyDictionary()
)


def provider_slots(limit: int) -> asyncio.Semaphore:
    """Bound on concurrent outbound provider calls for the running event loop"""
    loop = asyncio.get_running_loop()
    loop_slots = _provider_slots.setdefault(loop, {})
    if limit not in loop_slots:
        loop_slots[limit] = asyncio.Semaphore(max(limit, 1))
    return loop_slots[limit]


def provider_error_message(response: httpx.Response) -> str:
    """Prefer the provider's own error message over the bare status code"""
    try:
        error_data = response.json() if response.content else {}
    except ValueError:
        error_data = {}

    error = error_data.get("error") if isinstance(error_data, dict) else None
    if isinstance(error, dict) and error.get("message"):
        return str(error["message"])
    if isinstance(error, str) and error:
        return error
    return f"API request failed: {response.status_code}"


class ImageProviderService:
    """One single-turn image generation call against a configured provider.

    Subclasses build the provider payload and extract the image from the
    response; the transport, error mapping and concurrency bound live here.
    """

    def __init__(self, config: ProviderConfig, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.config = config
        self.transport = transport

    @property
    def label(self) -> str:
        return self.config.label

    def endpoint(self) -> str:
        raise NotImplementedError

    def build_payload(self, request: GenerationRequest) -> Dict[str, Any]:
        raise NotImplementedError

    def build_headers(self) -> Dict[str, str]:
        return {"Content-Type": "application/json"}

    def build_params(self) -> Dict[str, str]:
        return {}

    def extract(self, response_data: Any) -> GenerationResult:
        raise NotImplementedError

    async def send(self, request: GenerationRequest) -> Any:
        """POST the payload once and return the decoded JSON response"""
        payload = self.build_payload(request)
        print(f"🔍 Calling {self.label} model {self.config.model}")

        try:
            async with provider_slots(self.config.max_concurrent_calls):
                async with httpx.AsyncClient(timeout=self.config.timeout_seconds, transport=self.transport) as client:
                    response = await client.post(
                        self.endpoint(),
                        json=payload,
                        headers=self.build_headers(),
                        params=self.build_params(),
                    )
        except httpx.TimeoutException:
            raise UpstreamError(
                f"Failed to process image with {self.label}: Request timeout - {self.label} API may be slow"
            )
        except httpx.HTTPError as error:
            raise UpstreamError(f"Failed to process image with {self.label}: {error}")

        if not response.is_success:
            message = provider_error_message(response)
            print(f"❌ {self.label} request failed: {response.status_code} - {message}")
            raise UpstreamError(f"Failed to process image with {self.label}: {message}")

        try:
            return response.json()
        except ValueError:
            raise UpstreamError(f"Failed to process image with {self.label}: response was not valid JSON")

    async def generate_image(self, request: GenerationRequest) -> GenerationResult:
        response_data = await self.send(request)
        return self.extract(response_data)


def get_image_provider(config: ProviderConfig, transport: Optional[httpx.AsyncBaseTransport] = None) -> ImageProviderService:
    from services.gemini_service import GeminiService
    from services.openrouter_service import OpenRouterService

    if config.provider == "gemini":
        return GeminiService(config, transport)
    return OpenRouterService(config, transport)
