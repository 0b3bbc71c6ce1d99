from __future__ import annotations

import json
import logging
import math
import subprocess
from collections.abc import Sequence

from ..catalog.models import Item
from ..errors import OracleUnavailable
from .oracle import SimilarityOracle
from .scores import SimilarityScore, clamp_similarity

logger = logging.getLogger(__name__)

RESULT_PREFIX = "SIMILARITY_RESULT:"


def parse_result_line(output: str) -> float | None:
    """Find the first ``SIMILARITY_RESULT:<score>`` line in command output."""
    for line in output.splitlines():
        line = line.strip()
        if line.startswith(RESULT_PREFIX):
            try:
                score = float(line[len(RESULT_PREFIX):].strip())
            except ValueError:
                return None
            return score if math.isfinite(score) else None
    return None


class CommandOracle(SimilarityOracle):
    """
    Similarity from a local command, one process per pair.

    The command is invoked as ``<command...> id_a id_b json_a json_b`` and
    must print a ``SIMILARITY_RESULT:<0..1>`` line and exit 0.
    """

    def __init__(self, command: Sequence[str], timeout: float = 180.0, cwd: str | None = None):
        if not command:
            raise ValueError("command must not be empty")
        self.command = list(command)
        self.timeout = timeout
        self.cwd = cwd

    @property
    def name(self) -> str:
        return f"command_{self.command[-1]}"

    def get_similarity(self, item_a: Item, item_b: Item) -> SimilarityScore:
        args = [
            *self.command,
            item_a.id,
            item_b.id,
            json.dumps(item_a.attributes()),
            json.dumps(item_b.attributes()),
        ]
        try:
            proc = subprocess.run(
                args,
                capture_output=True,
                text=True,
                timeout=self.timeout,
                cwd=self.cwd,
                check=False,
            )
        except subprocess.TimeoutExpired as exc:
            raise OracleUnavailable(
                f"Command timed out after {self.timeout}s for {item_a.id}/{item_b.id}"
            ) from exc
        except OSError as exc:
            raise OracleUnavailable(f"Failed to start similarity command: {exc}") from exc

        if proc.returncode != 0:
            raise OracleUnavailable(
                f"Similarity command exited with {proc.returncode}: {proc.stderr.strip()[:200]}"
            )

        score = parse_result_line(proc.stdout)
        if score is None:
            raise OracleUnavailable("No SIMILARITY_RESULT line in command output")

        return SimilarityScore(value=clamp_similarity(score), source=self.name)
