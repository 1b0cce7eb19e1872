from __future__ import annotations

import argparse
import statistics
import time
from dataclasses import dataclass
from typing import List

import numpy as np

from yolo_counter import decode, suppress, to_image_space


@dataclass(frozen=True)
class TimingSummary:
    n: int
    mean_ms: float
    p50_ms: float
    p90_ms: float
    p95_ms: float


def _percentile(sorted_values: List[float], q: float) -> float:
    if not sorted_values:
        raise ValueError("No values provided.")
    if q < 0.0 or q > 100.0:
        raise ValueError("q must be in [0, 100].")
    if len(sorted_values) == 1:
        return float(sorted_values[0])
    # Linear interpolation between closest ranks.
    pos = (q / 100.0) * (len(sorted_values) - 1)
    lo = int(np.floor(pos))
    hi = int(np.ceil(pos))
    if lo == hi:
        return float(sorted_values[lo])
    t = pos - lo
    return float(sorted_values[lo] * (1.0 - t) + sorted_values[hi] * t)


def _summarize_ms(values_s: List[float]) -> TimingSummary:
    ms_sorted = sorted(v * 1000.0 for v in values_s)
    return TimingSummary(
        n=len(ms_sorted),
        mean_ms=float(statistics.fmean(ms_sorted)) if ms_sorted else 0.0,
        p50_ms=_percentile(ms_sorted, 50.0) if ms_sorted else 0.0,
        p90_ms=_percentile(ms_sorted, 90.0) if ms_sorted else 0.0,
        p95_ms=_percentile(ms_sorted, 95.0) if ms_sorted else 0.0,
    )


def _format_summary(label: str, s: TimingSummary) -> str:
    return (
        f"{label}: n={s.n} mean={s.mean_ms:.3f}ms p50={s.p50_ms:.3f}ms "
        f"p90={s.p90_ms:.3f}ms p95={s.p95_ms:.3f}ms"
    )


def _synthetic_tensor(anchors: int, imgsz: int, pass_ratio: float, channel_major: bool, seed: int) -> np.ndarray:
    rng = np.random.default_rng(seed)
    cxcy = rng.uniform(0, imgsz, size=(anchors, 2))
    wh = rng.uniform(5, 80, size=(anchors, 2))
    conf = rng.uniform(0.0, 0.5, size=(anchors, 1))
    # A fraction of anchors get confidences that pass a 0.9 threshold.
    hot = rng.random(anchors) < pass_ratio
    conf[hot, 0] = rng.uniform(0.9, 1.0, size=int(hot.sum()))
    rows = np.concatenate([cxcy, wh, conf], axis=1).astype(np.float32)  # (N, 5)
    if channel_major:
        return rows.T[None, ...].copy()
    return rows[None, ...]


def main() -> int:
    parser = argparse.ArgumentParser(description="Benchmark decode + coordinate mapping + NMS on synthetic tensors.")
    parser.add_argument("--anchors", type=int, default=8400, help="Number of anchors N in the synthetic tensor.")
    parser.add_argument("--imgsz", type=int, default=640, help="Model input size.")
    parser.add_argument("--width", type=int, default=1280, help="Original image width.")
    parser.add_argument("--height", type=int, default=960, help="Original image height.")
    parser.add_argument("--conf", type=float, default=0.90, help="Confidence threshold.")
    parser.add_argument("--iou", type=float, default=0.40, help="IoU threshold for NMS.")
    parser.add_argument("--pass-ratio", type=float, default=0.02, help="Fraction of anchors above 0.9 confidence.")
    parser.add_argument("--anchor-major", action="store_true", help="Use [1,N,5] instead of [1,5,N].")
    parser.add_argument("--warmup", type=int, default=10, help="Warmup iterations to run but not record.")
    parser.add_argument("--iters", type=int, default=200, help="Recorded iterations.")
    parser.add_argument("--seed", type=int, default=0, help="RNG seed.")
    args = parser.parse_args()

    if args.anchors < 1:
        raise ValueError("--anchors must be >= 1")
    if args.imgsz < 32:
        raise ValueError("--imgsz must be >= 32")
    if args.warmup < 0:
        raise ValueError("--warmup must be >= 0")
    if args.iters < 1:
        raise ValueError("--iters must be >= 1")
    if not 0.0 <= args.pass_ratio <= 1.0:
        raise ValueError("--pass-ratio must be in [0, 1]")

    tensor = _synthetic_tensor(args.anchors, args.imgsz, args.pass_ratio, not args.anchor_major, args.seed)

    t_decode: List[float] = []
    t_map: List[float] = []
    t_nms: List[float] = []
    kept = 0
    candidates = 0

    for it in range(int(args.warmup) + int(args.iters)):
        t0 = time.perf_counter()
        dets = decode(tensor, args.conf)
        t1 = time.perf_counter()
        boxes = [to_image_space(d, args.imgsz, args.width, args.height) for d in dets]
        t2 = time.perf_counter()
        final = suppress(boxes, args.iou)
        t3 = time.perf_counter()

        if it < int(args.warmup):
            continue
        t_decode.append(t1 - t0)
        t_map.append(t2 - t1)
        t_nms.append(t3 - t2)
        candidates = len(dets)
        kept = len(final)

    print(_format_summary("decode", _summarize_ms(t_decode)))
    print(_format_summary("map", _summarize_ms(t_map)))
    print(_format_summary("nms", _summarize_ms(t_nms)))
    print(f"anchors={args.anchors} candidates={candidates} kept={kept} layout={'anchor' if args.anchor_major else 'channel'}_major")

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
