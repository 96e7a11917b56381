from __future__ import annotations

import json
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Type

from pydantic import ValidationError as PydanticValidationError

from ..config import Settings
from ..errors import ValidationError
from ..schemas import ProviderParameters

OPENAI_HOST = "openai.com"
STABILITY_HOST = "stability.ai"
GOOGLE_HOST = "generativelanguage.googleapis.com"


class ProviderProfile(str, Enum):
    """Provider rule sets, chosen once per request by :func:`classify_profile`."""

    OPENAI_IMAGES = "openai_images"
    STABILITY_AI = "stability_ai"
    GOOGLE_GEMINI_CONTENT = "google_gemini_content"
    GOOGLE_IMAGEN_PREDICT = "google_imagen_predict"
    GOOGLE_IMAGEN_GENERATE_IMAGES = "google_imagen_generate_images"
    GENERIC = "generic"

    @property
    def is_google(self) -> bool:
        return self in (
            ProviderProfile.GOOGLE_GEMINI_CONTENT,
            ProviderProfile.GOOGLE_IMAGEN_PREDICT,
            ProviderProfile.GOOGLE_IMAGEN_GENERATE_IMAGES,
        )


def classify_profile(endpoint_url: str, parameters: Optional[Mapping[str, Any]] = None) -> ProviderProfile:
    """Pick the provider profile for an endpoint.

    Only the endpoint URL and, for Imagen ``predict`` endpoints, the ``model``
    parameter are inspected. The first matching rule wins.
    """
    endpoint_url = endpoint_url or ""
    parameters = parameters or {}

    if OPENAI_HOST in endpoint_url:
        return ProviderProfile.OPENAI_IMAGES
    if STABILITY_HOST in endpoint_url:
        return ProviderProfile.STABILITY_AI
    if GOOGLE_HOST in endpoint_url:
        if "generateContent" in endpoint_url:
            return ProviderProfile.GOOGLE_GEMINI_CONTENT
        model = parameters.get("model")
        if "predict" in endpoint_url and isinstance(model, str) and "imagen" in model:
            return ProviderProfile.GOOGLE_IMAGEN_PREDICT
        if "generateImages" in endpoint_url:
            return ProviderProfile.GOOGLE_IMAGEN_GENERATE_IMAGES
    return ProviderProfile.GENERIC


@dataclass(frozen=True)
class GenerationRequest:
    """Provider-agnostic description of one image generation attempt."""

    endpoint_url: str
    credential: str = field(repr=False)
    prompt_text: str
    parameters: Dict[str, Any] = field(default_factory=dict)
    model_label: str = ""


@dataclass(frozen=True)
class TranslatedRequest:
    profile: ProviderProfile
    body: Dict[str, Any]
    headers: Dict[str, str] = field(repr=False)


@dataclass(frozen=True)
class NormalizedResult:
    success: bool
    http_status: int
    image_ref: Optional[str] = None
    error_message: Optional[str] = None


class ProfileHandler(ABC):
    """Build-request / parse-response pair for one provider profile.

    Subclasses describe how a prompt and parameter bag become a provider
    request body, and how the provider's JSON becomes an image reference.
    """

    profile: ProviderProfile
    display_name: str = "Provider"
    parameters_model: Type[ProviderParameters] = ProviderParameters
    default_error = "Failed to generate image"

    def parse_parameters(self, parameters: Optional[Mapping[str, Any]]) -> ProviderParameters:
        """Validate the free-form bag into the typed parameters of this profile."""
        try:
            return self.parameters_model.model_validate(dict(parameters or {}))
        except PydanticValidationError as exc:
            problems = "; ".join(
                f"{'.'.join(str(part) for part in err['loc']) or 'parameters'}: {err['msg']}"
                for err in exc.errors()
            )
            raise ValidationError(f"Invalid {self.display_name} parameters: {problems}") from exc

    def build_headers(self, credential: str) -> Dict[str, str]:
        return {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {credential}",
        }

    @abstractmethod
    def build_body(
        self,
        prompt_text: str,
        parameters: Mapping[str, Any],
        typed: ProviderParameters,
    ) -> Dict[str, Any]:
        """Return the JSON body expected by the provider."""

    def extract_error(self, data: Any, settings: Settings) -> str:
        """Return a human readable message for a non-2xx provider response."""
        return self.default_error

    @abstractmethod
    def extract_image(self, data: Any, typed: ProviderParameters) -> Optional[str]:
        """Return the image reference of a 2xx provider response.

        Returns ``None`` when no known field is present. Raises
        :class:`~promptgrid.errors.ExtractionError` when the profile treats a
        missing image as a failure.
        """


def stringify(value: Any) -> str:
    if isinstance(value, str):
        return value
    return json.dumps(value)
