from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path
from typing import Sequence

import numpy as np

from ..catalog.models import Catalog
from ..similarity.matrix import SimilarityMatrix
from .models import EmbeddingMetadata, EmbeddingPoint, EmbeddingResult


def assemble_embedding(
    ids: Sequence[str],
    coordinates: np.ndarray,
    catalog: Catalog,
    similarity: SimilarityMatrix | None = None,
    method: str = "mds",
    generated_at: datetime | None = None,
    include_note_types: bool = False,
) -> EmbeddingResult:
    """
    Build the per-item record set for rendering.

    ``ids`` and ``coordinates`` are zipped in order. The timestamp is taken
    from ``generated_at`` or the similarity matrix, so the same inputs always
    give the same output; the clock is only read when neither is given.
    With ``include_note_types`` every record also carries its perfumery
    note type.
    """
    coords = np.asarray(coordinates, dtype=float)
    if coords.ndim != 2 or coords.shape[1] < 2:
        raise ValueError(f"Coordinates must have shape (n, 2), got {coords.shape}")
    if len(ids) != coords.shape[0]:
        raise ValueError(f"Got {len(ids)} ids for {coords.shape[0]} coordinates")

    embeddings: dict[str, EmbeddingPoint] = {}
    for item_id, (x, y) in zip(ids, coords[:, :2]):
        item = catalog[item_id]
        embeddings[item_id] = EmbeddingPoint(
            x=float(x),
            y=float(y),
            category=item.category,
            intensity=item.intensity.value,
            description=item.description,
            notes=list(item.notes),
            note_type=item.note_type if include_note_types else None,
        )

    if generated_at is None:
        generated_at = similarity.generated_at if similarity is not None else datetime.now(timezone.utc)

    similarity_out = None
    if similarity is not None:
        similarity_out = similarity.to_dict()
        for item_id in ids:
            similarity_out.setdefault(item_id, {})[item_id] = 1.0

    categories = list(dict.fromkeys(catalog[i].category for i in ids))
    metadata = EmbeddingMetadata(
        total_items=len(ids),
        total_comparisons=similarity.comparisons if similarity is not None else 0,
        generated_at=generated_at,
        method=method,
        categories=categories,
    )
    return EmbeddingResult(
        embeddings=embeddings, metadata=metadata, similarity_matrix=similarity_out,
    )


def save_embedding(result: EmbeddingResult, path: Path) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(
        result.model_dump_json(by_alias=True, exclude_none=True, indent=2), encoding="utf-8",
    )
    return path


def load_embedding(path: Path) -> EmbeddingResult:
    return EmbeddingResult.model_validate_json(Path(path).read_text(encoding="utf-8"))
