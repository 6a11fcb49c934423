# src/config/settings.py — v2
"""Typed configuration loaded from .env via pydantic-settings.

Single source of truth for deployment-specific settings: storage areas,
retention policy, quantizer location, pipeline concurrency, client cache
and logging. Per-request compression parameters live in
``imgpress.core.models.CompressionOptions`` instead.
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class ConfigurationError(Exception):
    """Raised when configuration is internally inconsistent."""


class Settings(BaseSettings):
    """Application settings loaded from .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # === Upload limits (advertised; enforced by the upload collaborator) ===
    max_file_size_mb: int = 100
    max_files: int = 100
    supported_formats: str = "jpeg,jpg,png,bmp,webp"

    # === Storage areas ===
    uploads_dir: Path = Path("data/uploads")
    compressed_dir: Path = Path("data/compressed")
    resized_dir: Path = Path("data/resized")
    sweep_exempt_names: str = ".gitkeep"

    # === Retention ===
    file_retention_seconds: int = 30 * 60
    cleanup_interval_seconds: int = 5 * 60

    # === Quantizer ===
    pngquant_path: str = ""
    pngquant_timeout_seconds: float = 120.0

    # === Pipeline ===
    batch_max_concurrency: int = 1

    # === Client cache ===
    cache_backend: Literal["memory", "json"] = "memory"
    cache_root: Path = Path("~/.imgpress/cache")

    # === Logging ===
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_format: Literal["json", "text"] = "json"
    log_file: Path | None = None
    log_rotation: str = "10MB"
    log_retention: int = 30

    # --- Validators ---

    @field_validator(
        "file_retention_seconds",
        "cleanup_interval_seconds",
        "batch_max_concurrency",
        "max_files",
        "max_file_size_mb",
    )
    @classmethod
    def validate_positive(cls, v: int, info) -> int:  # noqa: N805
        if v <= 0:
            raise ValueError(f"{info.field_name} must be > 0")
        return v

    @field_validator("pngquant_timeout_seconds")
    @classmethod
    def validate_timeout(cls, v: float) -> float:  # noqa: N805
        if v < 0:
            raise ValueError("pngquant_timeout_seconds must be >= 0")
        return v

    @model_validator(mode="after")
    def validate_config_consistency(self) -> Settings:
        """Storage areas must be disjoint so each can be swept independently."""
        areas = {
            "UPLOADS_DIR": self.uploads_dir,
            "COMPRESSED_DIR": self.compressed_dir,
            "RESIZED_DIR": self.resized_dir,
        }
        seen: dict[Path, str] = {}
        errors: list[str] = []
        for name, path in areas.items():
            resolved = Path(path).expanduser().resolve()
            if resolved in seen:
                errors.append(f"{name} must differ from {seen[resolved]}")
            else:
                seen[resolved] = name

        if errors:
            raise ConfigurationError("; ".join(errors))

        return self

    # --- Helpers ---

    @property
    def supported_formats_list(self) -> list[str]:
        """Parse comma-separated supported formats."""
        return [f.strip() for f in self.supported_formats.split(",") if f.strip()]

    @property
    def sweep_exempt_names_list(self) -> list[str]:
        """Parse comma-separated sweep-exempt marker names."""
        return [n.strip() for n in self.sweep_exempt_names.split(",") if n.strip()]

    @property
    def pngquant_timeout(self) -> float | None:
        """Quantizer timeout in seconds, or None to wait indefinitely."""
        return self.pngquant_timeout_seconds or None


def load_settings(**overrides: object) -> Settings:
    """Load settings from .env with optional overrides.

    Args:
        **overrides: Field-level overrides (for testing or embedding).

    Returns:
        Validated Settings instance.

    Raises:
        ConfigurationError: If configuration is internally inconsistent.
    """
    return Settings(**overrides)  # type: ignore[arg-type]
