from pydantic import BaseModel, Field

class ImagePayload(BaseModel):
    data: str = Field(..., description="Base64 encoded image bytes")
    mime_type: str = Field("image/png", description="Image MIME type, e.g. image/png")

    def to_data_url(self) -> str:
        return f"data:{self.mime_type};base64,{self.data}"

class GenerationRequest(BaseModel):
    prompt: str = Field(..., description="Final prompt sent to the provider")
    image: ImagePayload

class GenerationResult(BaseModel):
    imageBase64: str
    mimeType: str

class ErrorResponse(BaseModel):
    error: str

class ProviderHealthResponse(BaseModel):
    configured: bool
    provider: str
    message: str
