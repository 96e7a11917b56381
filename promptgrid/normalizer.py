"""Reduce a raw provider response to a :class:`NormalizedResult`."""

from __future__ import annotations

import json
import logging
from typing import Any, Mapping, Optional

import httpx

from .config import Settings, get_settings
from .errors import MalformedResponseError, PromptGridError, UpstreamError
from .profiles.profile import NormalizedResult, ProviderProfile
from .translator import get_handler
from .utils import redact

logger = logging.getLogger(__name__)


def normalize(
    profile: ProviderProfile,
    response: httpx.Response,
    parameters: Optional[Mapping[str, Any]] = None,
    settings: Settings | None = None,
    credential: Optional[str] = None,
) -> NormalizedResult:
    """Parse ``response`` with the rules of ``profile``.

    Provider failures never raise: invalid JSON, non-2xx statuses and missing
    image data all come back as ``success=False`` results.

    When ``credential`` is given it is masked in the response body before the
    body is parsed, so provider echoes of the key never reach logs or messages.
    """
    settings = settings or get_settings()
    try:
        return _normalize(profile, response, parameters or {}, settings, credential)
    except PromptGridError as exc:
        return NormalizedResult(success=False, http_status=exc.status_code, error_message=exc.message)


def _normalize(
    profile: ProviderProfile,
    response: httpx.Response,
    parameters: Mapping[str, Any],
    settings: Settings,
    credential: Optional[str],
) -> NormalizedResult:
    handler = get_handler(profile)
    raw_text = redact(response.text, credential)
    logger.debug(
        "Raw API response (first %s chars): %s",
        settings.raw_body_log_chars,
        raw_text[: settings.raw_body_log_chars],
    )

    data = _parse_json(raw_text, response.status_code, settings)

    if not response.is_success:
        logger.error("API error - Status: %s, Response: %s", response.status_code, json.dumps(data)[: settings.raw_body_log_chars])
        raise UpstreamError(handler.extract_error(data, settings), status_code=response.status_code)

    typed = handler.parse_parameters(parameters)
    image_ref = handler.extract_image(data, typed)
    if image_ref is None:
        logger.warning("%s response carried no recognised image field", handler.display_name)

    return NormalizedResult(success=True, http_status=response.status_code, image_ref=image_ref)


def _parse_json(raw_text: str, status_code: int, settings: Settings) -> Any:
    try:
        return json.loads(raw_text)
    except ValueError as exc:
        logger.error("Failed to parse JSON response (status %s): %s", status_code, exc)
        prefix = raw_text[: settings.error_body_prefix_chars]
        raise MalformedResponseError(f"API returned invalid JSON: {exc}. Raw response: {prefix}...") from exc
