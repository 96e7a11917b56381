from __future__ import annotations

import logging
from typing import Any, Dict, Mapping, Optional

from ..schemas import OpenAIImageParameters
from ..utils import data_uri, first_item
from .profile import ProfileHandler, ProviderProfile

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "dall-e-2"
DEFAULT_SIZE = "1024x1024"
DEFAULT_RESPONSE_FORMAT = "url"

GPT_IMAGE_MODEL = "gpt-image-1"
DALL_E_3_MODEL = "dall-e-3"

# Formats for which gpt-image-1 honours output_compression.
COMPRESSIBLE_FORMATS = ("webp", "jpeg")


class OpenAIImagesProfile(ProfileHandler):
    """
    OpenAI ``/v1/images/generations`` for DALL-E 2, DALL-E 3 and gpt-image-1.

    DALL-E models answer with a hosted URL unless ``response_format`` asks
    for ``b64_json``. gpt-image-1 always answers with base64 data.
    """

    profile = ProviderProfile.OPENAI_IMAGES
    display_name = "OpenAI"
    parameters_model = OpenAIImageParameters

    @staticmethod
    def effective_model(typed: OpenAIImageParameters) -> str:
        return typed.model or DEFAULT_MODEL

    def build_body(
        self,
        prompt_text: str,
        parameters: Mapping[str, Any],
        typed: OpenAIImageParameters,
    ) -> Dict[str, Any]:
        model = self.effective_model(typed)
        body: Dict[str, Any] = {
            "prompt": prompt_text,
            "model": model,
            "n": typed.n or 1,
            "size": typed.size or DEFAULT_SIZE,
        }

        if model == GPT_IMAGE_MODEL:
            for key in ("background", "moderation", "output_format", "quality"):
                value = getattr(typed, key)
                if value:
                    body[key] = value
            if typed.output_format in COMPRESSIBLE_FORMATS and typed.output_compression is not None:
                body["output_compression"] = typed.output_compression
        else:
            body["response_format"] = typed.response_format or DEFAULT_RESPONSE_FORMAT
            if model == DALL_E_3_MODEL:
                # DALL-E 3 only generates a single image per request.
                if body["n"] != 1:
                    logger.info("Forcing n=1 for %s (requested n=%s)", model, body["n"])
                body["n"] = 1
                if typed.quality:
                    body["quality"] = typed.quality
                if typed.style:
                    body["style"] = typed.style

        return body

    def extract_error(self, data: Any, settings) -> str:
        error = data.get("error") if isinstance(data, dict) else None
        if isinstance(error, dict):
            message = error.get("message") or error.get("code")
            if message:
                return str(message)
        return "OpenAI API error: Failed to generate image"

    def extract_image(self, data: Any, typed: OpenAIImageParameters) -> Optional[str]:
        first = first_item(data.get("data")) if isinstance(data, dict) else None
        if not isinstance(first, dict):
            return None

        if self.effective_model(typed) == GPT_IMAGE_MODEL:
            payload = first.get("b64_json")
            if not payload:
                return None
            return data_uri(payload, f"image/{typed.output_format or 'png'}")

        image_ref = first.get("url") or None
        if typed.response_format == "b64_json" and first.get("b64_json"):
            image_ref = data_uri(first["b64_json"])
        return image_ref
