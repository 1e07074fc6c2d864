from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from typing import Union

from core.errors import GenerationError, ServerMisconfigured
from core.provider_config import PROVIDER_LABELS, ProviderConfig, get_provider_config
from config.settings import settings
from models.generation import ErrorResponse, GenerationResult, ProviderHealthResponse
from services.provider_service import get_image_provider
from services.request_normalizer import normalize_request

router = APIRouter(prefix="/generate-image", tags=["generate-image"])

@router.post(
    "",
    response_model=GenerationResult,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
)
async def generate_image(
    request: Request,
    config: Union[ProviderConfig, ServerMisconfigured] = Depends(get_provider_config),
):
    """Remix the source photo with the prompt and return the generated image inline"""
    try:
        # Checked before the body is read or any image is loaded
        if isinstance(config, ServerMisconfigured):
            raise ServerMisconfigured(config.message)

        raw_body = await request.body()
        generation_request = await normalize_request(raw_body, config)
        provider = get_image_provider(config)
        result = await provider.generate_image(generation_request)

        print(f"🔍 {config.label} returned {result.mimeType} image ({len(result.imageBase64)} base64 chars)")
        return result

    except GenerationError as error:
        print(f"❌ Image generation failed [{type(error).__name__}]: {error.message}")
        return JSONResponse(status_code=error.status_code, content={"error": error.message})
    except Exception as e:
        print(f"❌ Unexpected server error: {e}")
        return JSONResponse(status_code=500, content={"error": f"Unexpected server error: {str(e)}"})

@router.get("/health", response_model=ProviderHealthResponse)
async def check_provider_config(
    config: Union[ProviderConfig, ServerMisconfigured] = Depends(get_provider_config),
):
    """Check if the active provider profile has an API key"""
    if isinstance(config, ServerMisconfigured):
        return ProviderHealthResponse(
            configured=False,
            provider=PROVIDER_LABELS[settings.PROVIDER],
            message=config.message,
        )

    return ProviderHealthResponse(
        configured=True,
        provider=config.label,
        message=f"{config.label} API key configured",
    )
