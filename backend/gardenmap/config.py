"""
Garden Map Backend — Application Configuration
================================================

What:  Centralized configuration management using Pydantic Settings.
How:   Pydantic Settings reads from environment variables (or .env file),
       validates types/ranges, and provides a singleton `settings` object.
Who:   Imported by the app factory, the marker service, and the map client.
When:  Loaded once at module import time.

Every value has a development default, so a fresh checkout runs with
`python -m gardenmap` and writes `./markers.json` next to the CWD.
"""

from pydantic_settings import BaseSettings
from pydantic import Field, field_validator
from typing import List


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Attributes are grouped by concern for readability.
    """

    # ── Marker Storage ────────────────────────────────────────────────────
    # What: Path of the JSON file holding every marker record
    # Format: {"<id>": {"latlng": {...}, "data": {...}}, ...}
    # A missing file is treated as an empty garden, not an error.
    markers_file: str = Field(
        default="./markers.json",
        description="JSON file backing the marker store",
    )

    # What: Run create/update/delete one at a time inside this process
    # Off: every request does an unguarded load → mutate → save, and two
    # overlapping mutations can lose one of the updates.
    serialize_writes: bool = Field(default=True)

    # ── CORS ──────────────────────────────────────────────────────────────
    # What: Allowed origins for cross-origin requests
    # Default "*": the map page may be opened from any host or from file://
    # Format: Comma-separated URLs (parsed by the property below)
    cors_origins: str = Field(default="*")

    @property
    def cors_origins_list(self) -> List[str]:
        """Splits comma-separated CORS origins into a list."""
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    # ── Server ────────────────────────────────────────────────────────────
    backend_host: str = Field(default="0.0.0.0")
    backend_port: int = Field(default=3000, ge=1024, le=65535)

    # What: Controls verbosity of application logging
    # Valid: DEBUG, INFO, WARNING, ERROR, CRITICAL
    log_level: str = Field(default="INFO")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensures log level is a valid Python logging level name."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper = v.upper()
        if upper not in valid_levels:
            raise ValueError(f"Invalid log_level '{v}'. Must be one of: {valid_levels}")
        return upper

    # ── Map Client ────────────────────────────────────────────────────────
    # What: Base URL the map client prefixes to every API path
    api_base_url: str = Field(default="http://localhost:3000/api")

    # ── Pydantic Settings Config ──────────────────────────────────────────
    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,  # MARKERS_FILE and markers_file both work
    }


# Shared settings object used by the app factory, CLI and map client
settings = Settings()
