"""
Embedding output.

Responsibilities:
- Join 2D coordinates with denormalized catalog metadata.
- Attach the similarity matrix (with self-similarity entries) when one
  produced the layout.
- Serialize the record set consumed by the rendering layer.
"""
from .assembler import assemble_embedding, load_embedding, save_embedding
from .models import EmbeddingMetadata, EmbeddingPoint, EmbeddingResult

__all__ = [
    "EmbeddingMetadata",
    "EmbeddingPoint",
    "EmbeddingResult",
    "assemble_embedding",
    "load_embedding",
    "save_embedding",
]
