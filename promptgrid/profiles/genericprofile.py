from __future__ import annotations

from typing import Any, Dict, Mapping, Optional

from ..schemas import ProviderParameters
from ..utils import first_present
from .profile import ProfileHandler, ProviderProfile

IMAGE_URL_KEYS = ("imageUrl", "image", "url")


class GenericProfile(ProfileHandler):
    """Fallback for endpoints that match no known provider.

    The prompt is sent next to the caller's parameters, and the image is read
    from the first of ``imageUrl``, ``image`` or ``url``.
    """

    profile = ProviderProfile.GENERIC

    def build_body(
        self,
        prompt_text: str,
        parameters: Mapping[str, Any],
        typed: ProviderParameters,
    ) -> Dict[str, Any]:
        return {"prompt": prompt_text, **parameters}

    def extract_error(self, data: Any, settings) -> str:
        if isinstance(data, dict):
            error = data.get("error")
            if isinstance(error, dict) and error.get("message"):
                return str(error["message"])
            if isinstance(error, str) and error:
                return error
            if isinstance(data.get("message"), str) and data["message"]:
                return data["message"]
        return self.default_error

    def extract_image(self, data: Any, typed: ProviderParameters) -> Optional[str]:
        return first_present(data, IMAGE_URL_KEYS)
