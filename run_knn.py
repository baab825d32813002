#!/usr/bin/env python3
"""
Generate clusters, classify random points with k-NN and draw the result.

Example:
$ python run_knn.py 4 20 5 -d -p knn_points.png
"""
import sys
import math
import logging
import argparse
from dataclasses import dataclass
from typing import List, Optional, Sequence

import matplotlib
import matplotlib.pyplot as plt

from generate_data_knn import (
    MAX_LABEL,
    MIN_CLUSTER_SIZE,
    SPREAD,
    ClusterSet,
    Point,
    RandomSource,
    generate_queries,
    points_to_frame,
    save_points,
)
from classify_knn import ConfigurationError, classify_into

logger = logging.getLogger("knn")

DETERMINISTIC_SEED = 0
PALETTE_SIZE = 10


def setup_logging(verbose: bool = False, log_file: Optional[str] = None) -> None:
    """Console gets INFO, or DEBUG with -v; the log file always gets DEBUG."""
    logger.setLevel(logging.DEBUG)
    for handler in list(logger.handlers):
        handler.close()
        logger.removeHandler(handler)

    formatter = logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s', datefmt='%H:%M:%S')
    handlers = [(logging.StreamHandler(sys.stdout), logging.DEBUG if verbose else logging.INFO)]
    if log_file:
        handlers.append((logging.FileHandler(log_file, mode='w', encoding='utf-8'), logging.DEBUG))
    for handler, level in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)
        logger.addHandler(handler)


@dataclass
class KnnConfig:
    cluster_count: int
    point_count: int
    k: int
    seed: Optional[int] = None
    spread: float = SPREAD
    output: Optional[str] = None
    plot: Optional[str] = None
    show: bool = False

    @classmethod
    def from_args(cls, args: argparse.Namespace) -> "KnnConfig":
        seed = DETERMINISTIC_SEED if args.deterministic else args.seed
        return cls(
            cluster_count=args.clusters,
            point_count=args.points,
            k=args.k,
            seed=seed,
            spread=args.spread,
            output=args.output,
            plot=args.plot,
            show=args.show,
        )

    def validate(self) -> None:
        for name, value in (
            ("number of clusters", self.cluster_count),
            ("number of points to classify", self.point_count),
            ("k", self.k),
        ):
            if not 1 <= value <= MAX_LABEL:
                raise ConfigurationError(f"{name} must be between 1 and {MAX_LABEL}, got {value}")
        if self.k > MIN_CLUSTER_SIZE:
            raise ConfigurationError(
                f"k must not exceed the smallest cluster size ({MIN_CLUSTER_SIZE}), got {self.k}"
            )
        if not math.isfinite(self.spread) or self.spread < 0:
            raise ConfigurationError(f"spread must be a finite, non-negative number, got {self.spread}")
        if self.seed is not None and self.seed < 0:
            raise ConfigurationError(f"seed must not be negative, got {self.seed}")


def whole_number(text: str) -> int:
    try:
        return int(text)
    except ValueError:
        raise argparse.ArgumentTypeError(f"arguments must be whole numbers, got {text!r}")


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser("run_knn", description="k-nearest-neighbors on random clusters")
    ap.add_argument("clusters", type=whole_number, help="number of clusters")
    ap.add_argument("points", type=whole_number, help="number of points to classify")
    ap.add_argument("k", type=whole_number, help="number of neighbors taking part in the vote")
    seed = ap.add_mutually_exclusive_group()
    seed.add_argument("-s", "--seed", type=int, default=None)
    seed.add_argument("-d", "--deterministic", action="store_true",
                      help=f"use the fixed seed {DETERMINISTIC_SEED}")
    ap.add_argument("--spread", type=float, default=SPREAD, help="std-dev of the clusters")
    ap.add_argument("-o", "--output", default=None, help="CSV file for the labeled points")
    ap.add_argument("-p", "--plot", default=None, help="image file for the plot")
    ap.add_argument("--show", action="store_true", help="open a plot window")
    ap.add_argument("-v", "--verbose", action="store_true")
    ap.add_argument("--log-file", default=None)
    return ap


def run(config: KnnConfig, rng: Optional[RandomSource] = None) -> ClusterSet:
    config.validate()
    if rng is None:
        rng = RandomSource(config.seed)

    clusters = ClusterSet.generate(config.cluster_count, rng, config.spread)
    queries = generate_queries(config.point_count, rng)
    classify_into(clusters.points, queries, config.k)
    return clusters


def plot_points(points: Sequence[Point], new_count: int,
                out_path: Optional[str] = None, show: bool = False) -> None:
    df = points_to_frame(points, new_count)
    colors = matplotlib.colormaps["tab10"].colors
    df["color"] = [colors[label % PALETTE_SIZE] for label in df["label"]]
    train = df[~df["classified"]]
    new = df[df["classified"]]

    plt.figure(figsize=(8, 6))
    plt.scatter(train["x"], train["y"], c=list(train["color"]), s=12, alpha=0.6, label="training points")
    if len(new):
        plt.scatter(
            new["x"],
            new["y"],
            c=list(new["color"]),
            marker="X",
            s=120,
            edgecolors="black",
            label="classified points",
        )
    plt.legend()
    plt.grid(True)
    plt.title(f"k-NN: {len(train)} training points, {len(new)} classified")
    if out_path:
        plt.savefig(out_path)
        logger.info("Plot saved to: %s", out_path)
    if show:
        plt.show()
    plt.close()


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    setup_logging(args.verbose, args.log_file)
    config = KnnConfig.from_args(args)

    try:
        clusters = run(config)
    except ConfigurationError as e:
        logger.error("%s", e)
        return 1

    new_count = len(clusters.new_points)
    if config.output:
        save_points(clusters.points, config.output, new_count)
    if config.plot or config.show:
        plot_points(clusters.points, new_count, config.plot, config.show)
    return 0


if __name__ == "__main__":
    sys.exit(main())
