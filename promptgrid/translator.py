"""Turn a provider-agnostic generation request into a provider HTTP request."""

from __future__ import annotations

import json
import logging
from typing import Dict

from .config import Settings, get_settings
from .errors import ValidationError
from .profiles.genericprofile import GenericProfile
from .profiles.googleprofile import GeminiContentProfile, ImagenGenerateImagesProfile, ImagenPredictProfile
from .profiles.openaiprofile import OpenAIImagesProfile
from .profiles.profile import (
    GenerationRequest,
    ProfileHandler,
    ProviderProfile,
    TranslatedRequest,
    classify_profile,
)
from .profiles.stabilityprofile import StabilityAIProfile
from .utils import redact, truncate_for_log

logger = logging.getLogger(__name__)

PROFILE_HANDLERS: Dict[ProviderProfile, ProfileHandler] = {
    ProviderProfile.OPENAI_IMAGES: OpenAIImagesProfile(),
    ProviderProfile.STABILITY_AI: StabilityAIProfile(),
    ProviderProfile.GOOGLE_GEMINI_CONTENT: GeminiContentProfile(),
    ProviderProfile.GOOGLE_IMAGEN_PREDICT: ImagenPredictProfile(),
    ProviderProfile.GOOGLE_IMAGEN_GENERATE_IMAGES: ImagenGenerateImagesProfile(),
    ProviderProfile.GENERIC: GenericProfile(),
}


def get_handler(profile: ProviderProfile) -> ProfileHandler:
    return PROFILE_HANDLERS[profile]


def validate_request(req: GenerationRequest) -> None:
    if not req.endpoint_url:
        raise ValidationError("API endpoint is required")
    if not req.credential:
        raise ValidationError("API key is required")
    if not req.prompt_text:
        raise ValidationError("Prompt is required")


def translate(req: GenerationRequest, settings: Settings | None = None) -> TranslatedRequest:
    """Build the body and headers for the provider behind ``req.endpoint_url``.

    Raises:
        ValidationError: a required field is empty or the parameters do not
            fit the selected profile. Nothing has been sent at that point.
    """
    settings = settings or get_settings()
    validate_request(req)

    profile = classify_profile(req.endpoint_url, req.parameters)
    handler = get_handler(profile)
    typed = handler.parse_parameters(req.parameters)

    body = handler.build_body(req.prompt_text, dict(req.parameters), typed)
    headers = handler.build_headers(req.credential)

    logger.info(
        "Processing request for model: %s, endpoint: %s (profile=%s)",
        req.model_label or "<unnamed>",
        redact(req.endpoint_url, req.credential),
        profile.value,
    )
    if logger.isEnabledFor(logging.DEBUG):
        logger.debug(
            "%s request body: %s",
            handler.display_name,
            _loggable_body(body, req.prompt_text, req.credential, settings.prompt_log_chars),
        )

    return TranslatedRequest(profile=profile, body=body, headers=headers)


def _loggable_body(body: dict, prompt_text: str, credential: str, limit: int) -> str:
    rendered = json.dumps(body)
    escaped_prompt = json.dumps(prompt_text)[1:-1]
    if escaped_prompt:
        rendered = rendered.replace(escaped_prompt, truncate_for_log(escaped_prompt, limit))
    return redact(rendered, credential)
