"""Built-in model columns offered to the grid UI."""

from __future__ import annotations

from typing import List

from .schemas import PresetModel

OPENAI_IMAGES_URL = "https://api.openai.com/v1/images/generations"
STABILITY_URL = "https://api.stability.ai/v1/generation"
GEMINI_URL = (
    "https://generativelanguage.googleapis.com/v1/models/"
    "gemini-2.0-flash-exp-image-generation:generateContent"
)
IMAGEN_URL = (
    "https://generativelanguage.googleapis.com/v1/models/"
    "imagen-3.0-generate-002:generateImages"
)

MODEL_PRESETS: List[PresetModel] = [
    PresetModel(
        id="dalleTwo",
        name="DALL-E 2",
        apiEndpoint=OPENAI_IMAGES_URL,
        parameters={
            "model": "dall-e-2",
            "size": "1024x1024",
            "quality": "standard",
            "n": 1,
            "response_format": "url",
        },
        lockedParams=["model", "response_format", "n", "quality"],
    ),
    PresetModel(
        id="dalleThree",
        name="DALL-E 3",
        apiEndpoint=OPENAI_IMAGES_URL,
        parameters={
            "model": "dall-e-3",
            "size": "1024x1024",
            "quality": "standard",
            "style": "vivid",
            "n": 1,
            "response_format": "url",
        },
        lockedParams=["model", "response_format", "n"],
    ),
    PresetModel(
        id="gptImageOne",
        name="GPT-image-1",
        apiEndpoint=OPENAI_IMAGES_URL,
        parameters={
            "model": "gpt-image-1",
            "size": "1024x1024",
            "quality": "auto",
            "background": "auto",
            "moderation": "auto",
            "output_format": "png",
            "output_compression": 100,
            "n": 1,
        },
        lockedParams=["model", "n"],
    ),
    PresetModel(
        id="stabilityAi",
        name="Stability AI",
        apiEndpoint=STABILITY_URL,
        parameters={"temperature": 0.5, "maxTokens": 1024},
    ),
    PresetModel(
        id="gemini",
        name="Google Gemini",
        apiEndpoint=GEMINI_URL,
        parameters={"config": {"responseModalities": ["TEXT", "IMAGE"]}},
    ),
    PresetModel(
        id="imagenThree",
        name="Google Imagen 3",
        apiEndpoint=IMAGEN_URL,
        parameters={
            "numberOfImages": 1,
            "aspectRatio": "1:1",
            "personGeneration": "ALLOW_ADULT",
        },
    ),
]


def list_presets() -> List[PresetModel]:
    return [preset.model_copy(deep=True) for preset in MODEL_PRESETS]
