from __future__ import annotations

from typing import Sequence

import numpy as np

from ..core.constants import DEFAULT_FACE_MATCH_THRESHOLD


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """Cosine similarity in [-1, 1]; 0 for vectors that cannot be compared."""
    va = np.asarray(a, dtype=float)
    vb = np.asarray(b, dtype=float)
    if va.ndim != 1 or va.shape != vb.shape or va.size == 0:
        return 0.0

    norm = float(np.linalg.norm(va) * np.linalg.norm(vb))
    if norm == 0.0:
        return 0.0
    return float(np.dot(va, vb) / norm)


class FaceMatcher:
    """Compares a live face embedding with the enrolled reference.

    Embedding extraction happens on the capture device; only the vectors
    arrive here.
    """

    def __init__(self, threshold: float = DEFAULT_FACE_MATCH_THRESHOLD):
        self._threshold = float(threshold)

    @property
    def threshold(self) -> float:
        return self._threshold

    def matches(self, live: Sequence[float], stored: Sequence[float]) -> bool:
        return cosine_similarity(live, stored) >= self._threshold
