from typing import Any, Dict

from models.generation import GenerationRequest, GenerationResult
from services.image_extractor import extract_gemini_image
from services.provider_service import ImageProviderService

class GeminiService(ImageProviderService):
    """Image generation through Google's Generative Language API"""

    def endpoint(self) -> str:
        return f"{self.config.base_url}/models/{self.config.model}:generateContent"

    def build_payload(self, request: GenerationRequest) -> Dict[str, Any]:
        return {
            "contents": [{
                "parts": [
                    {"text": request.prompt},
                    {
                        "inlineData": {
                            "mimeType": request.image.mime_type,
                            "data": request.image.data
                        }
                    }
                ]
            }],
            "generationConfig": {
                "responseModalities": ["IMAGE", "TEXT"]
            }
        }

    def build_params(self) -> Dict[str, str]:
        return {"key": self.config.api_key}

    def extract(self, response_data: Any) -> GenerationResult:
        return extract_gemini_image(response_data)
