# src/storage/layout.py — v2
"""Storage area structure and artifact naming conventions.

Three flat directories, each swept independently:

  uploads/     {uuid}-{epoch_ms}{ext}        staged originals
  resized/     resized-{stored_name}         intermediate resize output
  compressed/  compressed-{stored_stem}{ext} final artifacts

Artifacts are addressed by relative URLs of the form ``./<area>/<name>``.
"""

from __future__ import annotations

import shutil
import time
import uuid
from dataclasses import dataclass
from pathlib import Path

from imgpress.config.settings import Settings
from imgpress.storage.models import StorageArea

UPLOAD_URL_PREFIX = "./uploads"
COMPRESSED_URL_PREFIX = "./compressed"
RESIZED_URL_PREFIX = "./resized"

RESIZED_PREFIX = "resized-"
COMPRESSED_PREFIX = "compressed-"


def unique_upload_name(original_name: str) -> str:
    """Collision-free stored name that keeps the original extension."""
    ext = Path(original_name).suffix
    return f"{uuid.uuid4()}-{int(time.time() * 1000)}{ext}"


def resized_name(stored_name: str) -> str:
    return f"{RESIZED_PREFIX}{stored_name}"


def compressed_name(stored_name: str, extension: str | None = None) -> str:
    """Compressed artifact name; extension replaces the stored suffix if given."""
    if extension is None:
        return f"{COMPRESSED_PREFIX}{stored_name}"
    return f"{COMPRESSED_PREFIX}{Path(stored_name).stem}{extension}"


@dataclass(frozen=True)
class StorageLayout:
    """Resolved directories of the three storage areas."""

    uploads_dir: Path
    compressed_dir: Path
    resized_dir: Path

    @classmethod
    def from_settings(cls, settings: Settings) -> StorageLayout:
        return cls(
            uploads_dir=Path(settings.uploads_dir).expanduser(),
            compressed_dir=Path(settings.compressed_dir).expanduser(),
            resized_dir=Path(settings.resized_dir).expanduser(),
        )

    def ensure_directories(self) -> None:
        for directory in (self.uploads_dir, self.compressed_dir, self.resized_dir):
            directory.mkdir(parents=True, exist_ok=True)

    def area_dir(self, area: StorageArea) -> Path:
        if area == "upload":
            return self.uploads_dir
        if area == "compressed":
            return self.compressed_dir
        if area == "resized":
            return self.resized_dir
        raise ValueError(f"Unknown storage area: {area}")

    def areas(self) -> list[tuple[StorageArea, Path]]:
        return [
            ("upload", self.uploads_dir),
            ("compressed", self.compressed_dir),
            ("resized", self.resized_dir),
        ]

    # --- Paths ---

    def upload_path(self, stored_name: str) -> Path:
        return self.uploads_dir / stored_name

    def resized_path(self, stored_name: str) -> Path:
        return self.resized_dir / resized_name(stored_name)

    def compressed_path(self, stored_name: str, extension: str | None = None) -> Path:
        return self.compressed_dir / compressed_name(stored_name, extension)

    # --- URLs ---

    @staticmethod
    def upload_url(filename: str) -> str:
        return f"{UPLOAD_URL_PREFIX}/{filename}"

    @staticmethod
    def compressed_url(filename: str) -> str:
        return f"{COMPRESSED_URL_PREFIX}/{filename}"

    @staticmethod
    def resized_url(filename: str) -> str:
        return f"{RESIZED_URL_PREFIX}/{filename}"

    # --- Upload staging ---

    def stage_upload(self, source: Path, original_name: str | None = None) -> Path:
        """Copy a local file into the uploads area under a unique name.

        Returns:
            Path of the staged copy.
        """
        source = Path(source)
        self.uploads_dir.mkdir(parents=True, exist_ok=True)
        target = self.upload_path(unique_upload_name(original_name or source.name))
        shutil.copyfile(source, target)
        return target
