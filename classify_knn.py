"""
Brute-force k-NN classification of query points.

Every query is compared with the whole training pool, the k closest labels
vote and the winner is appended to the pool, so a classified query takes part
in the vote of the queries after it.
"""
import logging
from typing import List, MutableSequence, Sequence

import numpy as np

from generate_data_knn import Point

logger = logging.getLogger("knn.classify")


class ConfigurationError(ValueError):
    """Invalid run parameters, raised before any work is done."""


def distances(pool: Sequence[Point], query: Point) -> np.ndarray:
    """Euclidean distance from ``query`` to every pool point, in pool order."""
    xs = np.fromiter((p.x for p in pool), dtype=float, count=len(pool))
    ys = np.fromiter((p.y for p in pool), dtype=float, count=len(pool))
    return np.sqrt((xs - query.x) ** 2 + (ys - query.y) ** 2)


def euclidean_distance(a: Point, b: Point) -> float:
    return float(distances([b], a)[0])


def check_neighbor_count(pool_size: int, k: int) -> None:
    if pool_size == 0:
        raise ConfigurationError("the training set is empty")
    if k < 1:
        raise ConfigurationError(f"k must be at least 1, got {k}")
    if k > pool_size:
        raise ConfigurationError(
            f"k={k} neighbors requested but only {pool_size} training points are available"
        )


def nearest_labels(pool: Sequence[Point], query: Point, k: int) -> List[int]:
    """Labels of the k closest pool points, closest first.

    Equal distances keep pool order (stable sort).
    """
    order = np.argsort(distances(pool, query), kind="stable")[:k]
    return [pool[i].label for i in order]


def majority_label(labels: Sequence[int]) -> int:
    """Most frequent label; on a tie the smallest label wins."""
    counts = np.bincount(np.asarray(labels, dtype=np.int64))
    # argmax returns the first maximum, scanning ids upwards
    return int(np.argmax(counts))


def classify_into(pool: MutableSequence[Point], queries: Sequence[Point], k: int) -> MutableSequence[Point]:
    """
    Classify ``queries`` in order, appending each labeled point to ``pool``.

    Args:
        pool: Training points, extended in place.
        queries: Points to label; their own label is ignored.
        k: Number of neighbors taking part in the vote.

    Returns:
        ``pool``, whose last ``len(queries)`` entries are the new points.

    Raises:
        ConfigurationError: If the pool is empty or k is out of range.
    """
    # the pool only grows, checking its starting size covers every query
    check_neighbor_count(len(pool), k)

    for query in queries:
        labels = nearest_labels(pool, query, k)
        winner = majority_label(labels)
        logger.debug("Query (%g, %g): neighbors %s", query.x, query.y, labels)
        logger.info("Query (%g, %g) -> label %d", query.x, query.y, winner)
        pool.append(Point(query.x, query.y, winner))
    return pool


def classify(training: Sequence[Point], queries: Sequence[Point], k: int) -> List[Point]:
    """Same as :func:`classify_into` on a copy of ``training``."""
    return list(classify_into(list(training), queries, k))
