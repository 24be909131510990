from __future__ import annotations

import argparse
import logging
import time
from dataclasses import dataclass
from typing import List, Tuple

import numpy as np

from detect_kit import DecodeConfig, RawTensor, decode


@dataclass(frozen=True)
class DecodeTiming:
    n: int
    mean_ms: float
    p50_ms: float
    p90_ms: float
    p95_ms: float
    max_ms: float

    def within(self, budget_ms: float) -> bool:
        return self.p95_ms <= budget_ms


def _summarize_ms(values_s: List[float]) -> DecodeTiming:
    if not values_s:
        raise ValueError("No timings recorded.")
    ms = np.asarray(values_s, dtype=np.float64) * 1000.0
    p50, p90, p95 = np.percentile(ms, [50.0, 90.0, 95.0])
    return DecodeTiming(
        n=int(ms.size),
        mean_ms=float(ms.mean()),
        p50_ms=float(p50),
        p90_ms=float(p90),
        p95_ms=float(p95),
        max_ms=float(ms.max()),
    )


def _format_summary(label: str, s: DecodeTiming) -> str:
    return (
        f"{label}: n={s.n} mean={s.mean_ms:.3f}ms p50={s.p50_ms:.3f}ms "
        f"p90={s.p90_ms:.3f}ms p95={s.p95_ms:.3f}ms max={s.max_ms:.3f}ms"
    )


def make_synthetic_tensors(n_boxes: int, n_classes: int, seed: int = 0) -> Tuple[RawTensor, RawTensor]:
    """
    Random (confidence, coordinates) pair shaped like a detector's raw output.

    Scores are skewed low so only a small share of boxes survive the
    confidence filter, which is what real frames look like.
    """
    rng = np.random.default_rng(seed)
    confidence = rng.uniform(0.0, 1.0, size=(n_boxes, n_classes)) ** 4
    centers = rng.uniform(0.0, 1.0, size=(n_boxes, 2))
    sizes = rng.uniform(0.02, 0.3, size=(n_boxes, 2))
    coordinates = np.concatenate([centers, sizes], axis=1)
    return RawTensor.from_array(confidence), RawTensor.from_array(coordinates)


def main() -> int:
    parser = argparse.ArgumentParser(description="Benchmark decode latency (filter + NMS) on synthetic tensors.")
    parser.add_argument("--boxes", type=int, default=1917, help="Number of candidate boxes per frame.")
    parser.add_argument("--classes", type=int, default=1, help="Number of classes.")
    parser.add_argument("--conf", type=float, default=0.25, help="Confidence threshold.")
    parser.add_argument("--iou", type=float, default=0.5, help="IoU threshold for NMS.")
    parser.add_argument("--warmup", type=int, default=10, help="Warmup runs to execute but not record.")
    parser.add_argument("--repeats", type=int, default=200, help="Recorded runs.")
    parser.add_argument("--budget-ms", type=float, default=33.0, help="Per-frame budget to compare p95 against.")
    parser.add_argument("--seed", type=int, default=0, help="RNG seed for the synthetic tensors.")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging.")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="[%(levelname)s] %(name)s: %(message)s",
    )

    if args.boxes < 1:
        raise ValueError("--boxes must be >= 1")
    if args.classes < 1:
        raise ValueError("--classes must be >= 1")
    if args.warmup < 0:
        raise ValueError("--warmup must be >= 0")
    if args.repeats < 1:
        raise ValueError("--repeats must be >= 1")

    cfg = DecodeConfig(confidence_threshold=float(args.conf), nms_threshold=float(args.iou))
    confidence, coordinates = make_synthetic_tensors(int(args.boxes), int(args.classes), seed=int(args.seed))

    for _ in range(int(args.warmup)):
        decode(confidence, coordinates, cfg)

    timings: List[float] = []
    kept = 0
    for _ in range(int(args.repeats)):
        t0 = time.perf_counter()
        predictions = decode(confidence, coordinates, cfg)
        timings.append(time.perf_counter() - t0)
        kept = len(predictions)

    summary = _summarize_ms(timings)
    print(_format_summary("decode", summary))
    print(f"boxes={args.boxes} classes={args.classes} kept={kept}")
    within = summary.within(float(args.budget_ms))
    print(f"p95 {'within' if within else 'OVER'} budget of {args.budget_ms:.1f}ms")

    return 0 if within else 1


if __name__ == "__main__":
    raise SystemExit(main())
