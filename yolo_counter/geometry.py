from __future__ import annotations

import math
from typing import Tuple

from .types import BoundingBox, RawDetection

IOU_EPS = 1e-6


def _ratios(model_input_size: int, image_width: float, image_height: float) -> Tuple[float, float]:
    if model_input_size <= 0:
        raise ValueError(f"model_input_size must be > 0, got {model_input_size}")
    # Independent ratios: mirrors the stretch resize done before inference.
    return image_width / model_input_size, image_height / model_input_size


def to_image_space(
    detection: RawDetection,
    model_input_size: int,
    image_width: float,
    image_height: float,
) -> BoundingBox:
    """
    Map a model-space (cx, cy, w, h) candidate to image-space corners.

    Boxes are not clamped to the image; use `clip_box` for display if needed.
    Non-finite inputs propagate into the box unchanged.
    """

    w_ratio, h_ratio = _ratios(model_input_size, image_width, image_height)
    half_w = detection.w / 2
    half_h = detection.h / 2
    return BoundingBox(
        left=(detection.cx - half_w) * w_ratio,
        top=(detection.cy - half_h) * h_ratio,
        right=(detection.cx + half_w) * w_ratio,
        bottom=(detection.cy + half_h) * h_ratio,
        confidence=detection.confidence,
    )


def clip_box(box: BoundingBox, image_width: float, image_height: float) -> BoundingBox:
    """Clamp a box to [0, W] x [0, H]. Never applied implicitly."""

    return BoundingBox(
        left=min(max(box.left, 0.0), image_width),
        top=min(max(box.top, 0.0), image_height),
        right=min(max(box.right, 0.0), image_width),
        bottom=min(max(box.bottom, 0.0), image_height),
        confidence=box.confidence,
    )


def iou(a: BoundingBox, b: BoundingBox) -> float:
    """
    Intersection over union with a 1e-6 epsilon in the denominator.

    Degenerate boxes (zero, negative or non-finite extent) have zero area, so
    two of them score 0 instead of dividing by zero.
    """

    if a.is_degenerate or b.is_degenerate:
        return 0.0
    inter_w = min(a.right, b.right) - max(a.left, b.left)
    inter_h = min(a.bottom, b.bottom) - max(a.top, b.top)
    inter = inter_w * inter_h if (inter_w > 0.0 and inter_h > 0.0) else 0.0
    if not math.isfinite(inter):
        inter = 0.0
    union = a.area + b.area - inter
    return inter / (union + IOU_EPS)
