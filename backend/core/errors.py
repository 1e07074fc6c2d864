"""
Error taxonomy for the image generation pipeline.

Every failure raised while handling a generation request derives from
GenerationError and carries the HTTP status the endpoint responds with.
"""


class GenerationError(Exception):
    status_code: int = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidRequest(GenerationError):
    """Malformed body or missing fields (caller's fault)."""
    status_code = 400


class ServerMisconfigured(GenerationError):
    """No provider API key configured for the active profile."""


class UpstreamUnavailable(GenerationError):
    """The default source image could not be read or fetched."""


class UpstreamError(GenerationError):
    """The provider call failed at transport or API level."""


class NoImageFound(GenerationError):
    """The provider answered but no image could be located in the response."""


class MalformedDataUri(GenerationError):
    """A located data URI has no comma separating metadata from payload."""
