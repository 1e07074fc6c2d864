import asyncio
import base64
import json
from pathlib import Path
from typing import Optional

import httpx

from core.errors import InvalidRequest, UpstreamUnavailable
from core.provider_config import ProviderConfig
from models.generation import GenerationRequest, ImagePayload

SAFETY_INSTRUCTION = (
    "Preserve the subject's facial identity and proportions; "
    "do not alter face shape, skin tone, or key features."
)
FALLBACK_MIME_TYPE = "image/png"


def parse_body(raw_body: bytes) -> dict:
    """Decode the JSON body and check that it carries a string prompt"""
    try:
        body = json.loads(raw_body)
    except (ValueError, RecursionError):
        raise InvalidRequest("Request body must be JSON.")

    if not isinstance(body, dict) or not isinstance(body.get("prompt"), str):
        raise InvalidRequest("Field 'prompt' is required.")

    return body


def build_final_prompt(prompt: str, default_prompt: str, append_safety_to_default: bool = True) -> str:
    user_prompt = prompt.strip()
    if user_prompt:
        return f"{user_prompt}\n\n{SAFETY_INSTRUCTION}"
    if append_safety_to_default:
        return f"{default_prompt} {SAFETY_INSTRUCTION}"
    return default_prompt


def client_image(body: dict) -> Optional[ImagePayload]:
    """Caller-supplied image, only when both payload and MIME type are present"""
    data = body.get("imageBase64")
    mime_type = body.get("mimeType")
    if isinstance(data, str) and data and isinstance(mime_type, str) and mime_type:
        return ImagePayload(data=data, mime_type=mime_type)
    return None


def _mime_from_content_type(content_type: Optional[str]) -> str:
    if not content_type:
        return FALLBACK_MIME_TYPE
    return content_type.split(";")[0].strip() or FALLBACK_MIME_TYPE


async def read_default_image(path: str) -> ImagePayload:
    try:
        content = await asyncio.to_thread(Path(path).read_bytes)
    except OSError as error:
        print(f"❌ Could not read default image {path}: {error}")
        raise UpstreamUnavailable("Failed to read default image on server.")

    if not content:
        raise UpstreamUnavailable("Default image was not available on the server.")

    return ImagePayload(data=base64.b64encode(content).decode("ascii"), mime_type=FALLBACK_MIME_TYPE)


async def fetch_default_image(
    url: str,
    timeout: float = 60.0,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> ImagePayload:
    print(f"🔍 Fetching default image: {url}")
    try:
        async with httpx.AsyncClient(timeout=timeout, transport=transport, follow_redirects=True) as client:
            response = await client.get(url)
    except httpx.HTTPError as error:
        print(f"❌ Default image download failed: {error}")
        raise UpstreamUnavailable(f"Failed to fetch default image: {error}")

    if not response.is_success:
        print(f"❌ Default image download failed: {response.status_code}")
        raise UpstreamUnavailable(f"Failed to fetch default image: {response.status_code}")

    if not response.content:
        raise UpstreamUnavailable("Default image was not available on the server.")

    return ImagePayload(
        data=base64.b64encode(response.content).decode("ascii"),
        mime_type=_mime_from_content_type(response.headers.get("content-type")),
    )


async def resolve_source_image(
    body: dict,
    config: ProviderConfig,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> ImagePayload:
    if config.accept_client_image:
        uploaded = client_image(body)
        if uploaded:
            return uploaded

    if config.default_image_url:
        return await fetch_default_image(config.default_image_url, config.timeout_seconds, transport)
    return await read_default_image(config.default_image_path)


async def normalize_request(
    raw_body: bytes,
    config: ProviderConfig,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> GenerationRequest:
    """Turn a raw request body into the prompt and image sent to the provider.

    Raises InvalidRequest for bad bodies and UpstreamUnavailable when no
    default image can be obtained.
    """
    body = parse_body(raw_body)
    final_prompt = build_final_prompt(
        body["prompt"],
        config.default_prompt,
        config.append_safety_to_default,
    )
    image = await resolve_source_image(body, config, transport)
    return GenerationRequest(prompt=final_prompt, image=image)
