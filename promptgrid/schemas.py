"""Pydantic models shared by the FastAPI endpoints and the provider profiles."""

from __future__ import annotations

from typing import Annotated, Any, Dict, List, Literal, Optional

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, SecretStr, field_validator

# Parameter keys that only describe UI state and never reach a provider.
UI_ONLY_PARAMETERS = ("lockedParams",)


def _blank_to_none(value: Any) -> Any:
    if isinstance(value, str) and not value.strip():
        return None
    return value


OptionalText = Annotated[Optional[str], BeforeValidator(_blank_to_none)]


def _clean_parameters(value: Any) -> Any:
    if value is None:
        return {}
    if isinstance(value, dict):
        return {key: item for key, item in value.items() if key not in UI_ONLY_PARAMETERS}
    return value


# ---- Provider parameter models ----
class ProviderParameters(BaseModel):
    """Open parameter bag; subclasses add the typed fields a profile reads."""

    model_config = ConfigDict(extra="allow")


class OpenAIImageParameters(ProviderParameters):
    model_config = ConfigDict(extra="ignore")

    model: OptionalText = Field(default=None, description="dall-e-2, dall-e-3 or gpt-image-1")
    n: Optional[int] = Field(default=None, ge=1, description="Number of images to generate")
    size: OptionalText = None
    quality: OptionalText = None
    style: OptionalText = None
    response_format: OptionalText = None
    # gpt-image-1 only
    background: OptionalText = None
    moderation: OptionalText = None
    output_format: OptionalText = None
    output_compression: Optional[int] = Field(default=None, ge=0, le=100)


class StabilityParameters(ProviderParameters):
    temperature: Optional[float] = Field(default=None, description="Mapped onto cfg_scale (x10)")


class GeminiParameters(ProviderParameters):
    model: OptionalText = None
    config: Dict[str, Any] = Field(default_factory=dict)

    @field_validator("config", mode="before")
    @classmethod
    def _none_config(cls, value: Any) -> Any:
        return {} if value is None else value


class ImagenParameters(ProviderParameters):
    model_config = ConfigDict(extra="ignore")

    model: OptionalText = None
    numberOfImages: Optional[int] = Field(default=None, ge=1)
    aspectRatio: OptionalText = None
    personGeneration: OptionalText = None
# ------------------------------------------------------


class ProxyRequest(BaseModel):
    apiEndpoint: Optional[str] = Field(default=None, description="Provider image-generation URL")
    apiKey: Optional[SecretStr] = Field(default=None, description="Provider credential, used for this request only")
    prompt: Optional[str] = Field(default=None, description="Text prompt for image generation")
    parameters: Dict[str, Any] = Field(default_factory=dict, description="Provider specific parameters")
    modelName: Optional[str] = Field(default=None, description="Display name used in diagnostics")

    @field_validator("parameters", mode="before")
    @classmethod
    def _drop_ui_parameters(cls, value: Any) -> Any:
        return _clean_parameters(value)


class ProxyResponse(BaseModel):
    success: bool
    status: int
    imageUrl: Optional[str] = None


class ErrorResponse(BaseModel):
    error: str


class GridModel(BaseModel):
    name: str = Field(default="", description="Display name of the model column")
    apiEndpoint: Optional[str] = None
    apiKey: Optional[SecretStr] = None
    parameters: Dict[str, Any] = Field(default_factory=dict)

    @field_validator("parameters", mode="before")
    @classmethod
    def _drop_ui_parameters(cls, value: Any) -> Any:
        return _clean_parameters(value)


class GridRequest(BaseModel):
    prompts: List[str] = Field(..., description="Prompt rows of the grid")
    models: List[GridModel] = Field(..., description="Model columns of the grid")


class GridCell(BaseModel):
    modelName: str
    prompt: str
    status: Literal["success", "error"]
    imageUrl: Optional[str] = None
    error: Optional[str] = None


class GridResponse(BaseModel):
    results: List[GridCell]


class PresetModel(BaseModel):
    id: str
    name: str
    apiEndpoint: str
    parameters: Dict[str, Any]
    lockedParams: List[str] = Field(default_factory=list)


class PresetListResponse(BaseModel):
    presets: List[PresetModel]
