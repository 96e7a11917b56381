"""Runs translate → provider call → normalize cycles for the HTTP routes."""

from __future__ import annotations

import asyncio
import logging
from typing import AsyncIterator, List, Sequence

import httpx
from fastapi import Depends

from .config import Settings, get_settings
from .errors import PromptGridError, UnexpectedError
from .normalizer import normalize
from .profiles.profile import GenerationRequest, NormalizedResult
from .schemas import GridCell, GridModel
from .translator import translate
from .utils import redact

logger = logging.getLogger(__name__)


class PromptGridService:
    """Stateless orchestrator around the translator and the normalizer.

    Each call to :meth:`generate` is an independent unit of work. The only
    collaborator is the HTTP client used for the single outbound POST.
    """

    def __init__(self, http_client: httpx.AsyncClient, settings: Settings | None = None) -> None:
        self.settings = settings or get_settings()
        self._http_client = http_client

    # ------------------------------------------------------------------
    # Single generation
    # ------------------------------------------------------------------
    async def generate(self, request: GenerationRequest) -> NormalizedResult:
        """Generate one image.

        Raises:
            ValidationError: before any network activity when the request is
                incomplete or its parameters are malformed.
            UnexpectedError: when the provider could not be reached.
        """
        translated = translate(request, self.settings)

        logger.info("Sending request to: %s", redact(request.endpoint_url, request.credential))
        try:
            response = await self._http_client.post(
                request.endpoint_url,
                json=translated.body,
                headers=translated.headers,
            )
        except httpx.HTTPError as exc:
            logger.error(
                "Provider call failed for model %s: %s",
                request.model_label or "<unnamed>",
                type(exc).__name__,
            )
            raise UnexpectedError(f"Failed to reach provider: {type(exc).__name__}") from exc

        result = normalize(
            translated.profile, response, request.parameters, self.settings, credential=request.credential
        )
        if not result.success:
            logger.warning(
                "Generation failed for model %s with status %s",
                request.model_label or "<unnamed>",
                result.http_status,
            )
        return result

    # ------------------------------------------------------------------
    # Prompt x model grid
    # ------------------------------------------------------------------
    async def run_grid(self, prompts: Sequence[str], models: Sequence[GridModel]) -> List[GridCell]:
        """Generate every prompt with every model concurrently.

        Cells are returned model by model, then prompt by prompt. A failing
        cell never affects its neighbours.
        """
        cells = [(model, prompt) for model in models for prompt in prompts]
        return list(await asyncio.gather(*(self._run_cell(model, prompt) for model, prompt in cells)))

    async def _run_cell(self, model: GridModel, prompt: str) -> GridCell:
        request = GenerationRequest(
            endpoint_url=model.apiEndpoint or "",
            credential=model.apiKey.get_secret_value() if model.apiKey else "",
            prompt_text=prompt,
            parameters=dict(model.parameters),
            model_label=model.name,
        )
        try:
            result = await self.generate(request)
        except PromptGridError as exc:
            return GridCell(
                modelName=model.name,
                prompt=prompt,
                status="error",
                error=redact(exc.message, request.credential),
            )
        except Exception:
            logger.exception("Grid cell failed for model %s", model.name or "<unnamed>")
            return GridCell(modelName=model.name, prompt=prompt, status="error", error="Failed to process request")

        if result.success:
            return GridCell(modelName=model.name, prompt=prompt, status="success", imageUrl=result.image_ref)
        return GridCell(modelName=model.name, prompt=prompt, status="error", error=result.error_message)


async def get_http_client(settings: Settings = Depends(get_settings)) -> AsyncIterator[httpx.AsyncClient]:
    async with httpx.AsyncClient(timeout=settings.request_timeout_seconds, follow_redirects=True) as client:
        yield client


def get_promptgrid_service(
    http_client: httpx.AsyncClient = Depends(get_http_client),
    settings: Settings = Depends(get_settings),
) -> PromptGridService:
    return PromptGridService(http_client, settings)
