from __future__ import annotations

import math
from typing import Iterable, List, Sequence, Tuple

import numpy as np

from .log import get_logger
from .types import BoundingBox, DetectionResult

logger = get_logger(__name__)

# OpenCV stores coordinates as C ints; keep far-off boxes representable.
_DRAW_LIMIT = 1 << 15


def _to_px(v: float) -> int:
    return int(np.clip(round(v), -_DRAW_LIMIT, _DRAW_LIMIT))


def format_confidence(confidence: float) -> str:
    return f"{confidence * 100:.1f}%"


def _check_image(image: np.ndarray) -> None:
    if image is None or not hasattr(image, "shape"):
        raise TypeError("image must be a NumPy array (H, W, 3).")
    if image.ndim != 3 or image.shape[2] != 3:
        raise ValueError(f"Expected image shape (H, W, 3), got {getattr(image, 'shape', None)}")


def draw_detections(
    image: np.ndarray,
    boxes: Iterable[BoundingBox],
    *,
    color: Tuple[int, int, int] = (0, 255, 0),
    text_color: Tuple[int, int, int] = (255, 255, 255),
    box_thickness: int = 3,
    font_scale: float = 0.8,
    font_thickness: int = 2,
    label_offset: int = 6,
) -> np.ndarray:
    """
    Draw box outlines + confidence labels and return a copy of `image`.

    Labels read as e.g. "97.3%" and sit just above the box's top-left
    corner. Neither boxes nor labels are clamped to the image; OpenCV clips
    whatever falls outside. Boxes with non-finite corners are skipped.

    Args:
        image: (H, W, 3) image; RGB or BGR, colors are applied as given.
        boxes: boxes in image pixel coordinates.
    """

    try:
        import cv2  # type: ignore
    except Exception as e:  # pragma: no cover
        raise ImportError("OpenCV is required for draw_detections(). Install with `pip install opencv-python`.") from e

    _check_image(image)
    out = image.copy()

    skipped = 0
    for box in boxes:
        if not all(math.isfinite(v) for v in box.as_xyxy()):
            skipped += 1
            continue

        x1, y1, x2, y2 = (_to_px(v) for v in box.as_xyxy())
        cv2.rectangle(out, (x1, y1), (x2, y2), color, thickness=box_thickness)
        cv2.putText(
            out,
            format_confidence(box.confidence),
            (x1, y1 - label_offset),
            cv2.FONT_HERSHEY_SIMPLEX,
            font_scale,
            text_color,
            thickness=font_thickness,
            lineType=cv2.LINE_AA,
        )

    if skipped:
        logger.debug("Skipped drawing %d box(es) with non-finite coordinates", skipped)
    return out


def annotate(image: np.ndarray, boxes: Sequence[BoundingBox]) -> Tuple[np.ndarray, int, float]:
    """
    Returns (annotated copy, count, average confidence in percent).

    The average is 0.0 when there are no boxes.
    """

    kept: List[BoundingBox] = list(boxes)
    result = DetectionResult.from_boxes(kept)
    return draw_detections(image, kept), result.count, result.average_confidence_percent
