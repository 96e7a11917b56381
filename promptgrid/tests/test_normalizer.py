"""Tests for provider response handling in :mod:`promptgrid.normalizer`."""

from __future__ import annotations

import logging
import sys
from pathlib import Path

import httpx
import pytest

sys.path.insert(0, str(Path(__file__).resolve().parents[2]))
from promptgrid.normalizer import normalize
from promptgrid.profiles.profile import NormalizedResult, ProviderProfile

API_KEY = "sk-live-SECRETSECRET-9999"


def _json_response(payload, status_code: int = 200) -> httpx.Response:
    return httpx.Response(status_code, json=payload)


# ----------------------------------------------------------------------
# OpenAI
# ----------------------------------------------------------------------
def test_openai_b64_json_response_becomes_png_data_uri() -> None:
    result = normalize(
        ProviderProfile.OPENAI_IMAGES,
        _json_response({"data": [{"b64_json": "AAA="}]}),
        {"response_format": "b64_json"},
    )

    assert result == NormalizedResult(success=True, http_status=200, image_ref="data:image/png;base64,AAA=")


def test_openai_url_response_is_passed_through() -> None:
    result = normalize(
        ProviderProfile.OPENAI_IMAGES,
        _json_response({"data": [{"url": "https://images.example.com/cat.png"}]}),
        {"model": "dall-e-3"},
    )

    assert result.success is True
    assert result.image_ref == "https://images.example.com/cat.png"
    assert result.error_message is None


def test_gpt_image_1_uses_requested_output_format() -> None:
    result = normalize(
        ProviderProfile.OPENAI_IMAGES,
        _json_response({"data": [{"b64_json": "QUJD"}]}),
        {"model": "gpt-image-1", "output_format": "webp"},
    )

    assert result.image_ref == "data:image/webp;base64,QUJD"


def test_gpt_image_1_defaults_to_png() -> None:
    result = normalize(
        ProviderProfile.OPENAI_IMAGES,
        _json_response({"data": [{"b64_json": "QUJD"}]}),
        {"model": "gpt-image-1"},
    )

    assert result.image_ref == "data:image/png;base64,QUJD"


def test_openai_success_without_image_is_a_soft_failure() -> None:
    result = normalize(ProviderProfile.OPENAI_IMAGES, _json_response({"data": []}), {})

    assert result.success is True
    assert result.image_ref is None


@pytest.mark.parametrize(
    ("payload", "message"),
    [
        ({"error": {"message": "Your request was rejected", "code": "content_policy_violation"}}, "Your request was rejected"),
        ({"error": {"code": "rate_limit_exceeded"}}, "rate_limit_exceeded"),
        ({}, "OpenAI API error: Failed to generate image"),
    ],
)
def test_openai_error_messages(payload: dict, message: str) -> None:
    result = normalize(ProviderProfile.OPENAI_IMAGES, _json_response(payload, 429), {})

    assert result == NormalizedResult(success=False, http_status=429, error_message=message)


# ----------------------------------------------------------------------
# Stability AI
# ----------------------------------------------------------------------
def test_stability_artifact_becomes_png_data_uri() -> None:
    result = normalize(
        ProviderProfile.STABILITY_AI,
        _json_response({"artifacts": [{"base64": "U1RBQg==", "finishReason": "SUCCESS"}]}),
        {},
    )

    assert result.image_ref == "data:image/png;base64,U1RBQg=="


def test_stability_without_artifacts_returns_no_image() -> None:
    result = normalize(ProviderProfile.STABILITY_AI, _json_response({"artifacts": []}), {})

    assert result.success is True
    assert result.image_ref is None


def test_stability_error_message() -> None:
    result = normalize(
        ProviderProfile.STABILITY_AI,
        _json_response({"id": "abc", "name": "bad_request", "message": "height must be a multiple of 64"}, 400),
        {},
    )

    assert result.success is False
    assert result.http_status == 400
    assert result.error_message == "height must be a multiple of 64"

    fallback = normalize(ProviderProfile.STABILITY_AI, _json_response({}, 500), {})
    assert fallback.error_message == "Stability AI error"


# ----------------------------------------------------------------------
# Google
# ----------------------------------------------------------------------
def test_gemini_returns_first_inline_image_part() -> None:
    payload = {
        "candidates": [
            {
                "content": {
                    "parts": [
                        {"text": "Here is your lighthouse."},
                        {"inlineData": {"mimeType": "image/jpeg", "data": "R0VN"}},
                        {"inlineData": {"mimeType": "image/png", "data": "U0VDT05E"}},
                    ]
                }
            }
        ]
    }

    result = normalize(ProviderProfile.GOOGLE_GEMINI_CONTENT, _json_response(payload), {})

    assert result.image_ref == "data:image/jpeg;base64,R0VN"


def test_gemini_without_inline_data_is_an_extraction_error() -> None:
    payload = {"candidates": [{"content": {"parts": [{"text": "I cannot draw that."}]}}]}

    result = normalize(ProviderProfile.GOOGLE_GEMINI_CONTENT, _json_response(payload), {})

    assert result.success is False
    assert result.http_status == 400
    assert "No image was generated" in result.error_message


def test_imagen_predictions_bytes_base64_encoded() -> None:
    result = normalize(
        ProviderProfile.GOOGLE_IMAGEN_PREDICT,
        _json_response({"predictions": [{"bytesBase64Encoded": "ZZZ="}]}),
        {"model": "imagen-3.0-generate-002"},
    )

    assert result.image_ref == "data:image/png;base64,ZZZ="


def test_imagen_candidate_keys_are_tried_in_order() -> None:
    result = normalize(
        ProviderProfile.GOOGLE_IMAGEN_PREDICT,
        _json_response({"predictions": [{"bytesBase64": "", "imageBytes": "SU1H"}]}),
        {},
    )

    assert result.image_ref == "data:image/png;base64,SU1H"


def test_imagen_images_array_fallback() -> None:
    result = normalize(
        ProviderProfile.GOOGLE_IMAGEN_PREDICT,
        _json_response({"images": [{"data": "RkFMTA=="}]}),
        {},
    )

    assert result.success is True
    assert result.image_ref == "data:image/png;base64,RkFMTA=="


def test_imagen_prediction_without_image_lists_available_keys() -> None:
    result = normalize(
        ProviderProfile.GOOGLE_IMAGEN_PREDICT,
        _json_response({"predictions": [{"mimeType": "image/png", "raiFilteredReason": "blocked"}]}),
        {},
    )

    assert result.success is False
    assert result.http_status == 400
    assert "Available keys: mimeType, raiFilteredReason" in result.error_message


def test_imagen_images_array_without_known_key_returns_no_image() -> None:
    result = normalize(ProviderProfile.GOOGLE_IMAGEN_PREDICT, _json_response({"images": [{"foo": "bar"}]}), {})

    assert result == NormalizedResult(success=True, http_status=200, image_ref=None)


def test_imagen_unexpected_format_lists_response_keys() -> None:
    result = normalize(ProviderProfile.GOOGLE_IMAGEN_PREDICT, _json_response({"metadata": {}}), {})

    assert result.success is False
    assert result.http_status == 400
    assert "Response keys: metadata" in result.error_message


def test_imagen_generate_images_response() -> None:
    payload = {"generatedImages": [{"image": {"imageBytes": "R0VO", "mimeType": "image/jpeg"}}]}

    result = normalize(ProviderProfile.GOOGLE_IMAGEN_GENERATE_IMAGES, _json_response(payload), {})

    assert result.image_ref == "data:image/jpeg;base64,R0VO"


def test_imagen_generate_images_falls_back_to_predictions() -> None:
    result = normalize(
        ProviderProfile.GOOGLE_IMAGEN_GENERATE_IMAGES,
        _json_response({"predictions": [{"bytesBase64Encoded": "ZZZ="}]}),
        {},
    )

    assert result.image_ref == "data:image/png;base64,ZZZ="


@pytest.mark.parametrize(
    ("error", "message"),
    [
        ({"code": 400, "message": "Invalid prompt", "status": "INVALID_ARGUMENT"}, "Invalid prompt"),
        ({"code": 403, "status": "PERMISSION_DENIED"}, "PERMISSION_DENIED"),
        ("quota exhausted", "quota exhausted"),
        (None, "Google API error"),
    ],
)
def test_google_error_messages(error, message: str) -> None:
    payload = {} if error is None else {"error": error}

    result = normalize(ProviderProfile.GOOGLE_GEMINI_CONTENT, _json_response(payload, 403), {})

    assert result == NormalizedResult(success=False, http_status=403, error_message=message)


def test_google_billing_error_links_to_billing_console() -> None:
    payload = {
        "error": {
            "code": 400,
            "message": "Imagen API is only accessible to billed users at this time.",
            "status": "INVALID_ARGUMENT",
        }
    }

    result = normalize(ProviderProfile.GOOGLE_IMAGEN_PREDICT, _json_response(payload, 400), {})

    assert result.http_status == 400
    assert result.error_message.startswith("Imagen API is only accessible to billed users at this time.")
    assert "https://console.cloud.google.com/billing/linkedaccount" in result.error_message


# ----------------------------------------------------------------------
# Generic
# ----------------------------------------------------------------------
@pytest.mark.parametrize(
    ("payload", "image_ref"),
    [
        ({"imageUrl": "https://a.example/1.png", "url": "https://a.example/2.png"}, "https://a.example/1.png"),
        ({"image": "data:image/png;base64,AAA="}, "data:image/png;base64,AAA="),
        ({"url": "https://a.example/3.png"}, "https://a.example/3.png"),
        ({"imageUrl": {"nested": 1}, "url": "https://a.example/4.png"}, "https://a.example/4.png"),
        ({"result": "done"}, None),
    ],
)
def test_generic_image_fields(payload: dict, image_ref) -> None:
    result = normalize(ProviderProfile.GENERIC, _json_response(payload), {})

    assert result.success is True
    assert result.image_ref == image_ref


def test_generic_error_prefers_provider_message() -> None:
    shaped = normalize(ProviderProfile.GENERIC, _json_response({"error": {"message": "model overloaded"}}, 503), {})
    plain = normalize(ProviderProfile.GENERIC, _json_response({"detail": "nope"}, 502), {})

    assert shaped.error_message == "model overloaded"
    assert shaped.http_status == 503
    assert plain.error_message == "Failed to generate image"
    assert plain.http_status == 502


# ----------------------------------------------------------------------
# Invalid JSON
# ----------------------------------------------------------------------
@pytest.mark.parametrize("profile", list(ProviderProfile))
def test_invalid_json_is_reported_with_raw_prefix(profile: ProviderProfile) -> None:
    raw = "<html><body>502 Bad Gateway</body></html>"

    result = normalize(profile, httpx.Response(200, text=raw), {})

    assert result.success is False
    assert result.http_status == 500
    assert result.error_message.startswith("API returned invalid JSON:")
    assert raw in result.error_message


def test_invalid_json_prefix_is_truncated() -> None:
    raw = "x" * 300

    result = normalize(ProviderProfile.GENERIC, httpx.Response(502, text=raw), {})

    assert result.http_status == 500
    assert ("x" * 100 + "...") in result.error_message
    assert "x" * 101 not in result.error_message


# ----------------------------------------------------------------------
# Credential hygiene
# ----------------------------------------------------------------------
@pytest.mark.parametrize(
    ("profile", "status_code", "payload"),
    [
        (ProviderProfile.GOOGLE_GEMINI_CONTENT, 401, {"error": {"message": f"Invalid API key: {API_KEY}"}}),
        (ProviderProfile.GOOGLE_GEMINI_CONTENT, 200, {"candidates": [], "echo": API_KEY}),
        (ProviderProfile.OPENAI_IMAGES, 401, {"error": {"message": f"Incorrect API key provided: {API_KEY}"}}),
    ],
)
def test_provider_echo_of_the_key_is_masked_in_logs_and_messages(caplog, profile, status_code, payload) -> None:
    caplog.set_level(logging.DEBUG)

    result = normalize(profile, _json_response(payload, status_code), {}, credential=API_KEY)

    assert result.success is False
    assert API_KEY not in caplog.text
    assert API_KEY not in result.error_message
    assert "****9999" in caplog.text


def test_provider_echo_of_the_key_is_masked_in_invalid_json_errors(caplog) -> None:
    caplog.set_level(logging.DEBUG)

    result = normalize(
        ProviderProfile.GENERIC, httpx.Response(502, text=f"bad gateway for key {API_KEY}"), {}, credential=API_KEY
    )

    assert result.http_status == 500
    assert API_KEY not in caplog.text
    assert API_KEY not in result.error_message
    assert "key ****9999" in result.error_message
