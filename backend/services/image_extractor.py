"""
Locate the generated image inside a provider response.

Provider responses have no guaranteed schema. Raw fragments are first
classified into a small set of part types (image URL, text, inline data) and
extraction is an ordered match over those parts:

OpenRouter profile
    1. choices[0].message.images entries of type "image_url"
    2. choices[0].message.content, either a string or a list of parts

Gemini profile
    candidates[0].content.parts entries carrying inline data

Data URIs found by either OpenRouter step are split into (payload, MIME type)
without re-encoding.
"""

from typing import Any, Iterator, Optional, Union

from pydantic import BaseModel, ConfigDict

from core.errors import MalformedDataUri, NoImageFound
from models.generation import GenerationResult

DEFAULT_MIME_TYPE = "image/png"

DATA_URI_PREFIX = "data:image/"
BASE64_MARKER = "base64,"
BASE64_ALPHABET = frozenset(
    "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789+/="
)


class ImageUrlPart(BaseModel):
    model_config = ConfigDict(frozen=True)

    url: str


class TextPart(BaseModel):
    model_config = ConfigDict(frozen=True)

    text: str


class InlineDataPart(BaseModel):
    model_config = ConfigDict(frozen=True)

    data: str
    mime_type: str


ResponsePart = Union[ImageUrlPart, TextPart, InlineDataPart]


def _match_data_uri_at(text: str, start: int) -> Optional[str]:
    """Return the data URI beginning at `start`, or None if it is incomplete."""
    cursor = start + len(DATA_URI_PREFIX)

    semicolon = text.find(";", cursor)
    if semicolon == -1 or semicolon == cursor:
        return None

    cursor = semicolon + 1
    if not text.startswith(BASE64_MARKER, cursor):
        return None

    payload_start = cursor + len(BASE64_MARKER)
    payload_end = payload_start
    while payload_end < len(text) and text[payload_end] in BASE64_ALPHABET:
        payload_end += 1

    if payload_end == payload_start:
        return None

    return text[start:payload_end]


def find_data_uri(text: str) -> Optional[str]:
    """Return the leftmost `data:image/<subtype>;base64,<payload>` in text.

    The subtype runs up to the first ';' after the prefix and must be
    non-empty; the payload is the maximal run of base64 alphabet characters
    and must also be non-empty. An incomplete candidate does not end the
    search.
    """
    start = text.find(DATA_URI_PREFIX)
    while start != -1:
        match = _match_data_uri_at(text, start)
        if match:
            return match
        start = text.find(DATA_URI_PREFIX, start + 1)
    return None


def split_data_uri(data_uri: str, provider_label: str = "OpenRouter") -> GenerationResult:
    """Split `data:<meta>,<payload>` at the first comma."""
    comma_index = data_uri.find(",")
    if comma_index == -1:
        raise MalformedDataUri(f"Invalid data URL returned by {provider_label}.")

    meta = data_uri[len("data:"):comma_index]
    mime_type = meta.split(";")[0] or DEFAULT_MIME_TYPE
    return GenerationResult(imageBase64=data_uri[comma_index + 1:], mimeType=mime_type)


def _first(value: Any) -> Any:
    if isinstance(value, list) and value:
        return value[0]
    return None


def _field(value: Any, key: str) -> Any:
    if isinstance(value, dict):
        return value.get(key)
    return None


def classify_part(part: Any) -> Optional[ResponsePart]:
    """Map one raw response fragment to a known part type, if it is one."""
    if isinstance(part, str):
        return TextPart(text=part)

    if not isinstance(part, dict):
        return None

    part_type = part.get("type")
    if part_type == "image_url":
        url = _field(part.get("image_url"), "url")
        if isinstance(url, str) and url:
            return ImageUrlPart(url=url)
        return None

    inline_data = part.get("inlineData") or part.get("inline_data")
    data = _field(inline_data, "data")
    if isinstance(data, str) and data:
        mime_type = inline_data.get("mimeType") or inline_data.get("mime_type") or DEFAULT_MIME_TYPE
        return InlineDataPart(data=data, mime_type=mime_type)

    return None


def _message(response: Any) -> Any:
    return _field(_first(_field(response, "choices")), "message")


def openrouter_image_entries(response: Any) -> Iterator[ImageUrlPart]:
    """Image URL entries from the message's `images` list."""
    images = _field(_message(response), "images")
    if not isinstance(images, list):
        return
    for entry in images:
        part = classify_part(entry)
        if isinstance(part, ImageUrlPart):
            yield part


def openrouter_content_parts(response: Any) -> Iterator[ResponsePart]:
    """Candidate parts from the message's `content` field, in order."""
    content = _field(_message(response), "content")
    if isinstance(content, str):
        yield TextPart(text=content)
    elif isinstance(content, list):
        for raw_part in content:
            part = classify_part(raw_part)
            if isinstance(part, (ImageUrlPart, TextPart)):
                yield part


def gemini_inline_parts(response: Any) -> Iterator[InlineDataPart]:
    """Inline-data parts of the first candidate."""
    parts = _field(_field(_first(_field(response, "candidates")), "content"), "parts")
    if not isinstance(parts, list):
        return
    for raw_part in parts:
        part = classify_part(raw_part)
        if isinstance(part, InlineDataPart):
            yield part


def locate_image_url(response: Any) -> Optional[str]:
    """Return the first image URL in OpenRouter priority order."""
    for entry in openrouter_image_entries(response):
        return entry.url

    for part in openrouter_content_parts(response):
        if isinstance(part, ImageUrlPart):
            return part.url
        match = find_data_uri(part.text)
        if match:
            return match

    return None


def extract_openrouter_image(response: Any) -> GenerationResult:
    image_url = locate_image_url(response)
    if not image_url or not image_url.startswith("data:"):
        raise NoImageFound("OpenRouter did not return an inline image URL.")
    return split_data_uri(image_url, "OpenRouter")


def extract_gemini_image(response: Any) -> GenerationResult:
    for part in gemini_inline_parts(response):
        return GenerationResult(imageBase64=part.data, mimeType=part.mime_type)
    raise NoImageFound("Gemini did not return an inline image.")
