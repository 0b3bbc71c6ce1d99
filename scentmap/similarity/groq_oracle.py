from __future__ import annotations

import json
import logging
import math
from typing import Any

from groq import Groq

from ..catalog.models import Item
from ..errors import OracleUnavailable
from .config import DEFAULT_ORACLE_CONFIG, OracleConfig
from .oracle import SimilarityOracle
from .scores import SimilarityScore, normalize_score

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You are an expert perfumer comparing essential oils. "
    "Rate the scent similarity between two oils on a scale of 0-100, where "
    "0 = completely different scent profiles, 50 = moderately similar "
    "(some shared characteristics) and 100 = nearly identical scent profiles. "
    "Consider scent notes, intensity, category, and overall aromatic character.\n\n"
    "Return ONLY valid JSON in this exact format:\n"
    '{"similarity": <integer 0-100>, "reasoning": "<one short sentence>"}'
)


def _describe(item: Item) -> list[str]:
    return [
        f"## {item.id}",
        f"- Category: {item.category}",
        f"- Intensity: {item.intensity.value}",
        f"- Notes: {', '.join(item.notes)}",
        f"- Description: {item.description}",
    ]


def _build_user_message(item_a: Item, item_b: Item) -> str:
    return "\n".join(_describe(item_a) + [""] + _describe(item_b))


def _parse_response(content: str) -> tuple[float, str | None]:
    parsed: Any = json.loads(content)
    if not isinstance(parsed, dict) or "similarity" not in parsed:
        raise ValueError(f"Response has no similarity field: {content[:200]!r}")
    score = float(parsed["similarity"])
    if not math.isfinite(score):
        raise ValueError(f"Similarity is not a finite number: {parsed['similarity']!r}")
    reason = parsed.get("reasoning") or None
    return score, reason


class GroqOracle(SimilarityOracle):
    """
    Similarity judged by a Groq-hosted chat model.

    The model answers on 0-100; scores are normalized to [0, 1] here so the
    rest of the engine never sees the model's scale.
    """

    def __init__(self, config: OracleConfig = DEFAULT_ORACLE_CONFIG, client: Groq | None = None):
        self.config = config
        self._client = client

    @property
    def name(self) -> str:
        return f"groq_{self.config.model}"

    @property
    def available(self) -> bool:
        return self.config.enabled and bool(self.config.api_key)

    def _get_client(self) -> Groq:
        if self._client is None:
            self._client = Groq(api_key=self.config.api_key, timeout=self.config.timeout)
        return self._client

    def get_similarity(self, item_a: Item, item_b: Item) -> SimilarityScore:
        if not self.available:
            raise OracleUnavailable("Groq oracle is disabled or has no API key")

        try:
            response = self._get_client().chat.completions.create(
                model=self.config.model,
                messages=[
                    {"role": "system", "content": SYSTEM_PROMPT},
                    {"role": "user", "content": _build_user_message(item_a, item_b)},
                ],
                max_tokens=self.config.max_tokens,
                temperature=self.config.temperature,
                response_format={"type": "json_object"},
            )
            content = response.choices[0].message.content or ""
            score, reason = _parse_response(content)
        except Exception as exc:
            raise OracleUnavailable(
                f"Groq similarity for {item_a.id}/{item_b.id} failed: {exc}"
            ) from exc

        logger.debug("Groq similarity %s-%s: %s", item_a.id, item_b.id, score)
        return SimilarityScore(
            value=normalize_score(score, scale_max=100.0),
            explanation=reason,
            source=self.name,
        )
