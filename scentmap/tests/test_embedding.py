import json
from datetime import datetime, timezone
from pathlib import Path

import numpy as np
import pytest

from scentmap.catalog.models import Catalog
from scentmap.embedding.assembler import assemble_embedding, load_embedding, save_embedding
from scentmap.similarity.matrix import SimilarityMatrix
from scentmap.similarity.scores import SimilarityScore

CATALOG = Catalog.from_records({
    "lemon": {"notes": ["citrus", "bright"], "category": "citrus", "intensity": "light",
              "description": "Classic bright citrus"},
    "vetiver": {"notes": ["earthy", "smoky"], "category": "earthy", "intensity": "heavy",
                "description": "Smoky grass"},
})
COORDS = np.array([[0.25, -0.5], [-0.25, 0.5]])
GENERATED_AT = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)


def _similarity() -> SimilarityMatrix:
    matrix = SimilarityMatrix(ids=CATALOG.ids, generated_at=GENERATED_AT)
    matrix.set("lemon", "vetiver", SimilarityScore(0.2, "little in common"))
    return matrix


def test_assembled_records_carry_catalog_metadata():
    result = assemble_embedding(CATALOG.ids, COORDS, CATALOG, similarity=_similarity())
    lemon = result.embeddings["lemon"]
    assert (lemon.x, lemon.y) == (0.25, -0.5)
    assert lemon.category == "citrus"
    assert lemon.intensity == "light"
    assert lemon.notes == ["citrus", "bright"]
    assert result.metadata.total_items == 2
    assert result.metadata.total_comparisons == 1
    assert result.metadata.generated_at == GENERATED_AT
    assert result.metadata.categories == ["citrus", "earthy"]


def test_similarity_output_has_self_entries():
    result = assemble_embedding(CATALOG.ids, COORDS, CATALOG, similarity=_similarity())
    assert result.similarity_matrix["lemon"]["lemon"] == 1.0
    assert result.similarity_matrix["vetiver"]["vetiver"] == 1.0
    assert result.similarity_matrix["vetiver"]["lemon"] == 0.2


def test_assembly_is_idempotent():
    first = assemble_embedding(CATALOG.ids, COORDS, CATALOG, similarity=_similarity())
    second = assemble_embedding(CATALOG.ids, COORDS, CATALOG, similarity=_similarity())
    assert first.model_dump() == second.model_dump()

    plain = assemble_embedding(CATALOG.ids, COORDS, CATALOG, generated_at=GENERATED_AT)
    again = assemble_embedding(CATALOG.ids, COORDS, CATALOG, generated_at=GENERATED_AT)
    assert plain.model_dump() == again.model_dump()


def test_assembly_rejects_mismatched_inputs():
    with pytest.raises(ValueError):
        assemble_embedding(["lemon"], COORDS, CATALOG)
    with pytest.raises(ValueError):
        assemble_embedding(CATALOG.ids, np.zeros((2, 1)), CATALOG)


def test_saved_output_uses_camel_case_format(tmp_path: Path):
    result = assemble_embedding(CATALOG.ids, COORDS, CATALOG, similarity=_similarity(), method="heuristic + mds")
    path = save_embedding(result, tmp_path / "out" / "embeddings.json")

    payload = json.loads(path.read_text())
    assert set(payload) == {"embeddings", "metadata", "similarityMatrix"}
    assert set(payload["embeddings"]["lemon"]) == {"x", "y", "category", "intensity", "description", "notes"}
    assert payload["metadata"]["totalItems"] == 2
    assert payload["metadata"]["totalComparisons"] == 1
    assert payload["metadata"]["generatedAt"].startswith("2024-05-01T12:00:00")
    assert payload["metadata"]["method"] == "heuristic + mds"

    assert load_embedding(path).model_dump() == result.model_dump()


def test_feature_output_omits_similarity_matrix(tmp_path: Path):
    result = assemble_embedding(CATALOG.ids, COORDS, CATALOG, generated_at=GENERATED_AT, method="tf-idf + pca")
    payload = json.loads(save_embedding(result, tmp_path / "e.json").read_text())
    assert "similarityMatrix" not in payload
    assert payload["metadata"]["totalComparisons"] == 0


def test_note_types_are_saved_as_camel_case_field(tmp_path: Path):
    result = assemble_embedding(
        CATALOG.ids, COORDS, CATALOG, generated_at=GENERATED_AT,
        method="perfumery notes", include_note_types=True,
    )
    path = save_embedding(result, tmp_path / "notes.json")
    payload = json.loads(path.read_text())

    assert payload["embeddings"]["lemon"]["noteType"] == "TOP"
    assert payload["embeddings"]["vetiver"]["noteType"] == "BASE"
    assert load_embedding(path).model_dump() == result.model_dump()
