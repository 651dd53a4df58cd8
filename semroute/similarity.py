"""
Similarity Function Library

Pure scoring functions over two equal-length, non-empty vectors. Each takes
(query, candidate) and returns a float. Inputs may be any float sequence or
numpy array.

Polarity:
    - dot_product_similarity, jaccard_similarity, pearson_correlation:
      larger means more similar
    - euclidean_distance, manhattan_distance: these are distances, smaller
      means more similar. They are returned raw; pair them with a negative
      coefficient when combining into a "higher score wins" total.
"""

from typing import Callable, Sequence

import numpy as np

Vector = Sequence[float] | np.ndarray
SimilarityFunction = Callable[[Vector, Vector], float]


def _as_vectors(query: Vector, candidate: Vector) -> tuple[np.ndarray, np.ndarray]:
    """
    Convert inputs to float64 arrays and check the shared preconditions.

    Raises:
        ValueError: If either vector is empty or their lengths differ
    """
    q = np.asarray(query, dtype=np.float64).ravel()
    c = np.asarray(candidate, dtype=np.float64).ravel()
    if q.size == 0 or c.size == 0:
        raise ValueError("similarity functions require non-empty vectors")
    if q.size != c.size:
        raise ValueError(
            f"vector length mismatch: query has {q.size}, candidate has {c.size}"
        )
    return q, c


def dot_product_similarity(query: Vector, candidate: Vector) -> float:
    """Sum of element-wise products. Unnormalized, so magnitude-sensitive."""
    q, c = _as_vectors(query, candidate)
    return float(np.dot(q, c))


def euclidean_distance(query: Vector, candidate: Vector) -> float:
    """Straight-line (L2) distance between the vectors."""
    q, c = _as_vectors(query, candidate)
    return float(np.linalg.norm(q - c))


def manhattan_distance(query: Vector, candidate: Vector) -> float:
    """L1 distance: sum of absolute component differences."""
    q, c = _as_vectors(query, candidate)
    return float(np.sum(np.abs(q - c)))


def jaccard_similarity(query: Vector, candidate: Vector) -> float:
    """
    Generalized (weighted) Jaccard similarity over real-valued vectors.

    Each dimension contributes min(|q|, |c|) to the intersection when both
    components share a sign, and max(|q|, |c|) to the union. For
    non-negative vectors this is sum(min(q, c)) / sum(max(q, c)).

    Returns:
        Value in [0, 1]; 0.0 when both vectors are all zeros
    """
    q, c = _as_vectors(query, candidate)
    abs_q = np.abs(q)
    abs_c = np.abs(c)
    same_sign = np.sign(q) == np.sign(c)
    intersection = float(np.sum(np.where(same_sign, np.minimum(abs_q, abs_c), 0.0)))
    union = float(np.sum(np.maximum(abs_q, abs_c)))
    if union == 0.0:
        return 0.0
    return intersection / union


def pearson_correlation(query: Vector, candidate: Vector) -> float:
    """
    Pearson correlation coefficient, in [-1, 1].

    Returns 0.0 when either vector has zero variance (which includes every
    single-element vector) instead of propagating NaN.
    """
    q, c = _as_vectors(query, candidate)
    # Constant vectors can leave float residue after mean subtraction
    if np.ptp(q) == 0.0 or np.ptp(c) == 0.0:
        return 0.0
    q_dev = q - q.mean()
    c_dev = c - c.mean()
    denominator = float(np.sqrt(np.sum(q_dev**2) * np.sum(c_dev**2)))
    if denominator == 0.0:
        return 0.0
    r = float(np.sum(q_dev * c_dev)) / denominator
    # Rounding can push |r| a hair past 1
    return max(-1.0, min(1.0, r))


SIMILARITY_FUNCTIONS: dict[str, SimilarityFunction] = {
    "dot_product": dot_product_similarity,
    "euclidean": euclidean_distance,
    "manhattan": manhattan_distance,
    "jaccard": jaccard_similarity,
    "pearson": pearson_correlation,
}
