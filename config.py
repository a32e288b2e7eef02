"""
config.py - application configuration from environment variables.
All variables use the NOVEL_CODEX_ prefix.
"""
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

from contracts import EntityType


class Settings(BaseSettings):
    # Entity store (data/<kind>/*.json); only characters are populated for now
    data_dir: Path = Path("data")
    entity_dirs: dict[str, EntityType] = {"characters": EntityType.CHARACTER}

    # Logging
    log_level: str = "INFO"

    # RTF export
    rtf_font_name: str = "Times New Roman"
    rtf_font_size: int = 24          # half-points
    rtf_title_font_size: int = 32
    rtf_link_color: tuple[int, int, int] = (0, 0, 255)

    # App
    app_title: str = "NovelCodex"
    app_version: str = "0.1.0"

    model_config = SettingsConfigDict(env_prefix="NOVEL_CODEX_", env_file=".env", extra="ignore")
