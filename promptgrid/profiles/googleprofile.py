from __future__ import annotations

import json
import logging
from typing import Any, Dict, Mapping, Optional

from ..config import Settings
from ..errors import ExtractionError
from ..schemas import GeminiParameters, ImagenParameters
from ..utils import data_uri, describe_keys, first_item, first_present
from .profile import ProfileHandler, ProviderProfile, stringify

logger = logging.getLogger(__name__)

DEFAULT_GEMINI_MODEL = "gemini-2.0-flash-exp-image-generation"
GEMINI_RESPONSE_MODALITIES = ["TEXT", "IMAGE"]

DEFAULT_SAMPLE_COUNT = 1
DEFAULT_ASPECT_RATIO = "1:1"
DEFAULT_PERSON_GENERATION = "ALLOW_ADULT"

BILLING_REQUIRED_MARKER = "Imagen API is only accessible to billed users"

# The Imagen response schema differs between API versions. Keep these
# candidate keys in sync with the provider changelog; the first non-empty wins.
PREDICTION_IMAGE_KEYS = ("bytesBase64", "bytesBase64Encoded", "imageBytes")
IMAGES_FALLBACK_KEYS = ("bytesBase64", "bytesBase64Encoded", "data")


class GoogleProfile(ProfileHandler):
    """Shared header and error handling for the Generative Language API."""

    display_name = "Google"

    def build_headers(self, credential: str) -> Dict[str, str]:
        return {
            "Content-Type": "application/json",
            "x-goog-api-key": credential,
        }

    def extract_error(self, data: Any, settings: Settings) -> str:
        error = data.get("error") if isinstance(data, dict) else None
        message: Optional[str] = None
        if isinstance(error, dict):
            for key in ("message", "details", "status"):
                if error.get(key):
                    message = stringify(error[key])
                    break
        elif isinstance(error, str) and error:
            message = error
        message = message or "Google API error"

        logger.error("Google API error structure: %s", json.dumps(error if error is not None else data))

        if BILLING_REQUIRED_MARKER in message:
            return (
                f'{message} <a href="{settings.google_billing_url}" target="_blank">'
                "Setup Gemini billing</a>"
            )
        return message


class GeminiContentProfile(GoogleProfile):
    """Gemini ``generateContent`` with image output enabled."""

    profile = ProviderProfile.GOOGLE_GEMINI_CONTENT
    display_name = "Gemini"
    parameters_model = GeminiParameters

    def build_body(
        self,
        prompt_text: str,
        parameters: Mapping[str, Any],
        typed: GeminiParameters,
    ) -> Dict[str, Any]:
        return {
            "contents": [{"parts": [{"text": prompt_text}]}],
            "config": {"responseModalities": list(GEMINI_RESPONSE_MODALITIES), **typed.config},
            "model": typed.model or DEFAULT_GEMINI_MODEL,
        }

    def extract_image(self, data: Any, typed: GeminiParameters) -> Optional[str]:
        candidate = first_item(data.get("candidates")) if isinstance(data, dict) else None
        content = candidate.get("content") if isinstance(candidate, dict) else None
        parts = content.get("parts") if isinstance(content, dict) else None

        for part in parts or []:
            if not isinstance(part, dict):
                continue
            inline = part.get("inlineData") or part.get("inline_data")
            if isinstance(inline, dict) and inline.get("data"):
                mime_type = inline.get("mimeType") or inline.get("mime_type") or "image/png"
                return data_uri(inline["data"], mime_type)

        logger.error("No image found in Gemini response: %s", json.dumps(data)[:200])
        raise ExtractionError("No image was generated by Gemini")


class ImagenPredictProfile(GoogleProfile):
    """Imagen through the ``:predict`` endpoint (``instances`` / ``predictions``)."""

    profile = ProviderProfile.GOOGLE_IMAGEN_PREDICT
    display_name = "Imagen"
    parameters_model = ImagenParameters

    @staticmethod
    def generation_settings(typed: ImagenParameters) -> Dict[str, Any]:
        return {
            "sampleCount": typed.numberOfImages or DEFAULT_SAMPLE_COUNT,
            "aspectRatio": typed.aspectRatio or DEFAULT_ASPECT_RATIO,
            "personGeneration": typed.personGeneration or DEFAULT_PERSON_GENERATION,
        }

    def build_body(
        self,
        prompt_text: str,
        parameters: Mapping[str, Any],
        typed: ImagenParameters,
    ) -> Dict[str, Any]:
        return {
            "instances": [{"prompt": prompt_text}],
            "parameters": self.generation_settings(typed),
        }

    def extract_image(self, data: Any, typed: ImagenParameters) -> Optional[str]:
        if not isinstance(data, dict):
            raise ExtractionError("No valid image was generated by Imagen. API response format unexpected.")

        prediction = first_item(data.get("predictions"))
        payload = first_present(prediction, PREDICTION_IMAGE_KEYS)
        if payload:
            return data_uri(payload)

        image = first_item(data.get("images"))
        payload = first_present(image, IMAGES_FALLBACK_KEYS)
        if payload:
            logger.info("Extracted Imagen image from the images[] response format")
            return data_uri(payload)
        if prediction is None and image is not None:
            # An images[] entry without a known key still counts as a reply.
            return None

        if prediction is not None:
            message = (
                "Imagen response has predictions but no image data was found. "
                f"Available keys: {describe_keys(prediction)}"
            )
        else:
            message = (
                "No valid image was generated by Imagen. API response format unexpected. "
                f"Response keys: {describe_keys(data)}"
            )
        logger.error(message)
        raise ExtractionError(message)


class ImagenGenerateImagesProfile(ImagenPredictProfile):
    """Imagen through the ``:generateImages`` endpoint (``generatedImages``)."""

    profile = ProviderProfile.GOOGLE_IMAGEN_GENERATE_IMAGES

    def build_body(
        self,
        prompt_text: str,
        parameters: Mapping[str, Any],
        typed: ImagenParameters,
    ) -> Dict[str, Any]:
        settings = self.generation_settings(typed)
        return {
            "prompt": prompt_text,
            "config": {
                "numberOfImages": settings["sampleCount"],
                "aspectRatio": settings["aspectRatio"],
                "personGeneration": settings["personGeneration"],
            },
        }

    def extract_image(self, data: Any, typed: ImagenParameters) -> Optional[str]:
        generated = first_item(data.get("generatedImages")) if isinstance(data, dict) else None
        image = generated.get("image") if isinstance(generated, dict) else None
        if isinstance(image, dict) and image.get("imageBytes"):
            return data_uri(image["imageBytes"], image.get("mimeType") or "image/png")
        return super().extract_image(data, typed)
