#!/usr/bin/env python3
"""
Generator of labeled point clusters for the k-NN demo

* Cluster centers are drawn uniformly in the square [0, MAX_COORD) and are
  labeled with their generation index.
* Every center is expanded into a cluster of MIN_CLUSTER_SIZE to
  MAX_CLUSTER_SIZE - 1 points scattered around it with a normal law.
* Query points are drawn like centers; their label is only a sequence id.
"""
import math
import logging
import argparse
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

import numpy as np
import pandas as pd

logger = logging.getLogger("knn.generate")

MAX_COORD = 100
MIN_CLUSTER_SIZE = 10
MAX_CLUSTER_SIZE = 20
SPREAD = 1.0
MAX_LABEL = 255


@dataclass(frozen=True)
class Point:
    x: float
    y: float
    label: Optional[int] = None


Cluster = Tuple[Point, ...]


class RandomSource:
    """Seedable random numbers; seed=None takes entropy from the OS."""

    def __init__(self, seed: Optional[int] = None):
        self.seed = seed
        self._gen = np.random.default_rng(seed)

    def uniform_int(self, maximum: int) -> int:
        return int(self._gen.integers(0, maximum))

    def normal(self, mean: float, stddev: float) -> float:
        if stddev <= 0:
            return float(mean)
        return float(self._gen.normal(mean, stddev))


def generate_points(count: int, rng: RandomSource) -> List[Point]:
    points = []
    for i in range(count):
        x = rng.uniform_int(MAX_COORD)
        y = rng.uniform_int(MAX_COORD)
        points.append(Point(float(x), float(y), i))
    return points


def generate_centers(count: int, rng: RandomSource) -> List[Point]:
    return generate_points(count, rng)


def generate_queries(count: int, rng: RandomSource) -> List[Point]:
    # label is a running id here, classification replaces it
    return generate_points(count, rng)


def generate_cluster(center: Point, rng: RandomSource, spread: float = SPREAD) -> Cluster:
    size = MIN_CLUSTER_SIZE + rng.uniform_int(MAX_CLUSTER_SIZE - MIN_CLUSTER_SIZE)
    cluster = [center]
    for _ in range(size - 1):
        dx = rng.normal(0.0, spread)
        dy = rng.normal(0.0, spread)
        cluster.append(Point(center.x + dx, center.y + dy, center.label))
    return tuple(cluster)


class ClusterSet:
    """
    All labeled points: the generated clusters, kept for display, and the
    flat training pool that classification appends to.
    """

    def __init__(self, clusters: Sequence[Cluster]):
        self.clusters: Tuple[Cluster, ...] = tuple(tuple(c) for c in clusters)
        self.points: List[Point] = [p for cluster in self.clusters for p in cluster]
        self.training_size = len(self.points)

    @classmethod
    def from_clusters(cls, clusters: Sequence[Cluster]) -> "ClusterSet":
        return cls(clusters)

    @classmethod
    def generate(cls, cluster_count: int, rng: RandomSource, spread: float = SPREAD) -> "ClusterSet":
        centers = generate_centers(cluster_count, rng)
        clusters = []
        for center in centers:
            cluster = generate_cluster(center, rng, spread)
            logger.info(
                "Cluster %d: center (%g, %g), %d points",
                center.label, center.x, center.y, len(cluster),
            )
            for p in cluster:
                logger.debug("Point : (%g, %g) - Label : %d", p.x, p.y, p.label)
            clusters.append(cluster)
        return cls(clusters)

    @property
    def centers(self) -> List[Point]:
        return [cluster[0] for cluster in self.clusters]

    @property
    def new_points(self) -> List[Point]:
        return self.points[self.training_size:]

    def __len__(self) -> int:
        return len(self.points)


def points_to_frame(points: Sequence[Point], new_count: int = 0) -> pd.DataFrame:
    first_new = len(points) - new_count
    return pd.DataFrame(
        {
            "x": [p.x for p in points],
            "y": [p.y for p in points],
            "label": [p.label for p in points],
            "classified": [i >= first_new for i in range(len(points))],
        }
    )


def save_points(points: Sequence[Point], out_path: str, new_count: int = 0) -> None:
    points_to_frame(points, new_count).to_csv(out_path, index=False)
    logger.info("Points saved to: %s", out_path)


def main(argv: Optional[List[str]] = None) -> None:
    ap = argparse.ArgumentParser("generate_data_knn")
    ap.add_argument("-c", "--num_clusters", type=int, default=4)
    ap.add_argument("-s", "--seed", type=int, default=None)
    ap.add_argument("--spread", type=float, default=SPREAD)
    ap.add_argument("-o", "--output", default="clusters.csv")
    args = ap.parse_args(argv)

    if not 0 < args.num_clusters <= MAX_LABEL:
        ap.error(f"number of clusters must be between 1 and {MAX_LABEL}")
    if args.seed is not None and args.seed < 0:
        ap.error("seed must not be negative")
    if not math.isfinite(args.spread) or args.spread < 0:
        ap.error("spread must be a finite, non-negative number")

    logging.basicConfig(level=logging.INFO)
    clusters = ClusterSet.generate(args.num_clusters, RandomSource(args.seed), args.spread)
    save_points(clusters.points, args.output)


if __name__ == "__main__":
    main()
