"""Runtime settings for the world viewer rendering core."""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Settings pulled from ``WORLDVIEW_*`` environment variables or ``.env``."""

    model_config = SettingsConfigDict(
        env_prefix="WORLDVIEW_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Logging
    log_level: str = Field(default="INFO", description="Logging level")
    log_format: str = Field(default="console", description="Logging format (console or json)")

    # Graph layer
    triangle_color_seed: int = Field(default=12332434, description="Seed for triangle fill colors")
    lookup_marker_radius: int = Field(default=5, description="Radius of point-location miss markers")
    lookup_marker_width: int = Field(default=3, description="Stroke width of miss markers")


settings = Settings()
