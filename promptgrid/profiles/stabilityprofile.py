from __future__ import annotations

from typing import Any, Dict, Mapping, Optional

from ..schemas import StabilityParameters
from ..utils import data_uri, first_item
from .profile import ProfileHandler, ProviderProfile

DEFAULT_CFG_SCALE = 7
DEFAULT_DIMENSION = 1024


class StabilityAIProfile(ProfileHandler):
    """Stability AI text-to-image generation (``text_prompts`` / ``artifacts``)."""

    profile = ProviderProfile.STABILITY_AI
    display_name = "Stability AI"
    parameters_model = StabilityParameters

    def build_body(
        self,
        prompt_text: str,
        parameters: Mapping[str, Any],
        typed: StabilityParameters,
    ) -> Dict[str, Any]:
        body: Dict[str, Any] = {
            "text_prompts": [{"text": prompt_text}],
            "cfg_scale": typed.temperature * 10 if typed.temperature else DEFAULT_CFG_SCALE,
            "width": DEFAULT_DIMENSION,
            "height": DEFAULT_DIMENSION,
            "samples": 1,
        }
        # Caller parameters win over the defaults above.
        body.update(parameters)
        return body

    def extract_error(self, data: Any, settings) -> str:
        if isinstance(data, dict) and data.get("message"):
            return str(data["message"])
        return "Stability AI error"

    def extract_image(self, data: Any, typed: StabilityParameters) -> Optional[str]:
        artifact = first_item(data.get("artifacts")) if isinstance(data, dict) else None
        if isinstance(artifact, dict) and artifact.get("base64"):
            return data_uri(artifact["base64"])
        return None
