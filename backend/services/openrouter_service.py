from typing import Any, Dict

from models.generation import GenerationRequest, GenerationResult
from services.image_extractor import extract_openrouter_image
from services.provider_service import ImageProviderService

class OpenRouterService(ImageProviderService):
    """Image generation through OpenRouter's chat completions API"""

    def endpoint(self) -> str:
        return f"{self.config.base_url}/chat/completions"

    def build_payload(self, request: GenerationRequest) -> Dict[str, Any]:
        return {
            "model": self.config.model,
            "modalities": ["image", "text"],
            "messages": [{
                "role": "user",
                "content": [
                    {
                        "type": "text",
                        "text": request.prompt
                    },
                    {
                        "type": "image_url",
                        "image_url": {
                            "url": request.image.to_data_url()
                        }
                    }
                ]
            }]
        }

    def build_headers(self) -> Dict[str, str]:
        headers = {
            "Authorization": f"Bearer {self.config.api_key}",
            "Content-Type": "application/json"
        }
        # HTTP-Referer / X-Title only when configured
        headers.update(self.config.extra_headers)
        return headers

    def extract(self, response_data: Any) -> GenerationResult:
        return extract_openrouter_image(response_data)
