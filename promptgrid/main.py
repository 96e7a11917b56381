"""FastAPI entry point exposing the Prompt Grid proxy API."""

from __future__ import annotations

import logging

from fastapi import Depends, FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .config import Settings, get_settings
from .errors import PromptGridError
from .presets import list_presets
from .profiles.profile import GenerationRequest, ProviderProfile
from .schemas import (
    ErrorResponse,
    GridRequest,
    GridResponse,
    PresetListResponse,
    ProxyRequest,
    ProxyResponse,
)
from .service import PromptGridService, get_promptgrid_service

logger = logging.getLogger(__name__)

_ERROR_RESPONSES = {
    400: {"model": ErrorResponse},
    500: {"model": ErrorResponse},
}


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


def _error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


settings = get_settings()
configure_logging(settings)

app = FastAPI(title=settings.app_name, version="1.0.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(PromptGridError)
async def handle_promptgrid_error(request: Request, exc: PromptGridError) -> JSONResponse:
    return _error_response(exc.status_code, exc.message)


@app.exception_handler(RequestValidationError)
async def handle_request_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    # Only locations and messages are reported; inputs may contain the API key.
    problems = "; ".join(
        f"{'.'.join(str(part) for part in err.get('loc', ()) if part != 'body') or 'body'}: {err.get('msg')}"
        for err in exc.errors()
    )
    return _error_response(status.HTTP_400_BAD_REQUEST, f"Invalid request body: {problems}")


@app.get("/health", summary="Health Check Endpoint")
async def healthcheck():
    return {
        "status": "ok",
        "profiles": [profile.value for profile in ProviderProfile],
    }


@app.get(
    "/api/presets",
    response_model=PresetListResponse,
    summary="List the built-in model presets",
)
async def presets():
    return PresetListResponse(presets=list_presets())


@app.post(
    "/api/proxy",
    response_model=ProxyResponse,
    responses=_ERROR_RESPONSES,
    summary="Generate one image through the provider behind apiEndpoint",
)
async def proxy(
    payload: ProxyRequest,
    service: PromptGridService = Depends(get_promptgrid_service),
):
    request = GenerationRequest(
        endpoint_url=payload.apiEndpoint or "",
        credential=payload.apiKey.get_secret_value() if payload.apiKey else "",
        prompt_text=payload.prompt or "",
        parameters=dict(payload.parameters),
        model_label=payload.modelName or "",
    )

    try:
        result = await service.generate(request)
    except PromptGridError:
        raise
    except Exception:
        logger.exception("Proxy request failed for model %s", payload.modelName or "<unnamed>")
        return _error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "Failed to process request")

    if not result.success:
        return _error_response(result.http_status, result.error_message or "Failed to generate image")

    return ProxyResponse(success=True, status=result.http_status, imageUrl=result.image_ref)


@app.post(
    "/api/grid",
    response_model=GridResponse,
    responses=_ERROR_RESPONSES,
    summary="Generate every prompt with every model",
)
async def grid(
    payload: GridRequest,
    service: PromptGridService = Depends(get_promptgrid_service),
):
    results = await service.run_grid(payload.prompts, payload.models)
    return GridResponse(results=results)


__all__ = ["app"]


if __name__ == "__main__":  # pragma: no cover - convenience entry point
    import uvicorn

    uvicorn.run("promptgrid.main:app", host="0.0.0.0", port=8000, reload=True)
