# src/pipeline/models.py — v1
"""Batch request/response models consumed and produced by BatchPipeline."""

from __future__ import annotations

import uuid
from pathlib import Path

from pydantic import BaseModel, Field

from imgpress.core.models import CompressionOptions
from imgpress.core.results import CompressionResult


class UploadedImage(BaseModel):
    """One image already staged in the uploads area by the transport layer."""

    original_name: str
    stored_path: Path

    @property
    def stored_name(self) -> str:
        return self.stored_path.name


class BatchRequest(BaseModel):
    """Files plus the flat parameter set shared by the whole batch."""

    files: list[UploadedImage]
    options: CompressionOptions = Field(default_factory=CompressionOptions)
    convert_to_jpeg: list[str] = Field(default_factory=list)
    request_id: str = Field(default_factory=lambda: uuid.uuid4().hex[:12])

    def should_convert(self, original_name: str) -> bool:
        return original_name in self.convert_to_jpeg


class BatchResponse(BaseModel):
    """Exactly one result per submitted file, in submission order."""

    request_id: str
    results: list[CompressionResult] = Field(default_factory=list)

    @property
    def succeeded(self) -> int:
        return sum(1 for r in self.results if r.success)

    @property
    def failed(self) -> int:
        return len(self.results) - self.succeeded
