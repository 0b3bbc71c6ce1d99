from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from ..catalog.models import NoteType


class EmbeddingPoint(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    x: float
    y: float
    category: str
    intensity: str
    description: str = ""
    notes: list[str] = Field(default_factory=list)
    note_type: NoteType | None = Field(default=None, alias="noteType")


class EmbeddingMetadata(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    total_items: int = Field(..., ge=0, alias="totalItems")
    total_comparisons: int = Field(default=0, ge=0, alias="totalComparisons")
    generated_at: datetime = Field(..., alias="generatedAt")
    method: str
    categories: list[str] = Field(default_factory=list)


class EmbeddingResult(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    embeddings: dict[str, EmbeddingPoint]
    metadata: EmbeddingMetadata
    similarity_matrix: dict[str, dict[str, float]] | None = Field(
        default=None, alias="similarityMatrix",
    )
