"""
Runtime settings.

Values come from model defaults, overridden by LATENT_EXPLORER_*
environment variables (e.g. LATENT_EXPLORER_METRIC=euclidean).
"""

from functools import lru_cache
from typing import Literal

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .errors import ConfigurationError
from .metrics import available_metrics
from .representation import Representation

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
LogFormat = Literal["console", "json"]


class ExplorerSettings(BaseSettings):
    """Settings for the application service and the command line."""

    model_config = SettingsConfigDict(
        env_prefix="LATENT_EXPLORER_",
        case_sensitive=False,
        extra="ignore",
    )

    search_representation: str = Field(
        default="full", description="Representation used for neighbors, projection and arithmetic"
    )
    display_representation: str = Field(
        default="pca", description="Representation used for rendering paths"
    )
    metric: str = Field(default="cosine", description="Default distance metric id")
    default_k: int = Field(default=10, ge=1, description="Default neighbor count")
    id_field: str = Field(default="word", min_length=1)
    vector_field: str = Field(default="vector", min_length=1)
    pca_components: int = Field(default=3, ge=1, description="Components when deriving a PCA representation")
    log_level: LogLevel = "INFO"
    log_format: LogFormat = "console"

    @field_validator("metric")
    @classmethod
    def _known_metric(cls, value: str) -> str:
        name = value.strip().lower()
        if name not in available_metrics():
            raise ValueError(f"unknown metric {value!r}; expected one of {list(available_metrics())}")
        return name

    @field_validator("log_level", mode="before")
    @classmethod
    def _upper_level(cls, value: object) -> object:
        return value.upper() if isinstance(value, str) else value

    @field_validator("search_representation", "display_representation")
    @classmethod
    def _canonical_representation(cls, value: str) -> str:
        return Representation.of(value).name


@lru_cache(maxsize=1)
def get_settings() -> ExplorerSettings:
    """
    Return the process-wide settings, read once.

    Raises:
        ConfigurationError: If an environment variable holds an invalid value
    """
    try:
        return ExplorerSettings()
    except ValidationError as e:
        raise ConfigurationError(f"Invalid settings: {e}") from e
