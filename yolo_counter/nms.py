from dataclasses import dataclass
from typing import List, Optional, Sequence

import numpy as np

from .geometry import IOU_EPS
from .log import get_logger
from .types import BoundingBox

logger = get_logger(__name__)


@dataclass(frozen=True)
class NMSConfig:
    iou_threshold: float = 0.40
    # None keeps every box that survives suppression.
    max_detections: Optional[int] = None


def _areas(x1: np.ndarray, y1: np.ndarray, x2: np.ndarray, y2: np.ndarray) -> np.ndarray:
    # fmax drops NaN extents to 0; inf * 0 and inf areas are zeroed afterwards.
    with np.errstate(invalid="ignore", over="ignore"):
        areas = np.fmax(0.0, x2 - x1) * np.fmax(0.0, y2 - y1)
    return np.where(np.isfinite(areas), areas, 0.0)


def nms(boxes: np.ndarray, scores: np.ndarray, cfg: NMSConfig = NMSConfig()) -> np.ndarray:
    """
    Greedy NumPy NMS. Expects boxes shape (N,4) in xyxy and scores shape (N,).
    Returns indices of boxes to keep, highest score first.

    Ties on score keep input order (stable sort). A box is dropped when its
    IoU with an already kept box is strictly greater than `cfg.iou_threshold`.
    """

    boxes = np.asarray(boxes, dtype=np.float64).reshape(-1, 4)
    scores = np.asarray(scores, dtype=np.float64).reshape(-1)
    if boxes.shape[0] != scores.shape[0]:
        raise ValueError(f"boxes and scores disagree on length: {boxes.shape[0]} vs {scores.shape[0]}")
    if boxes.shape[0] == 0:
        return np.empty((0,), dtype=np.int64)

    x1 = boxes[:, 0]
    y1 = boxes[:, 1]
    x2 = boxes[:, 2]
    y2 = boxes[:, 3]
    areas = _areas(x1, y1, x2, y2)

    order = np.argsort(-scores, kind="stable")
    suppressed = np.zeros(boxes.shape[0], dtype=bool)
    keep: List[int] = []

    for pos, i in enumerate(order):
        if suppressed[i]:
            continue
        keep.append(int(i))
        if cfg.max_detections is not None and len(keep) >= cfg.max_detections:
            break

        rest = order[pos + 1 :]
        rest = rest[~suppressed[rest]]
        if rest.size == 0:
            break

        xx1 = np.maximum(x1[i], x1[rest])
        yy1 = np.maximum(y1[i], y1[rest])
        xx2 = np.minimum(x2[i], x2[rest])
        yy2 = np.minimum(y2[i], y2[rest])

        inter = _areas(xx1, yy1, xx2, yy2)
        # Degenerate boxes overlap nothing.
        if areas[i] <= 0.0:
            inter = np.zeros_like(inter)
        else:
            inter = np.where(areas[rest] > 0.0, inter, 0.0)
        union = areas[i] + areas[rest] - inter
        iou = inter / (union + IOU_EPS)

        suppressed[rest[iou > cfg.iou_threshold]] = True

    return np.array(keep, dtype=np.int64)


def suppress(
    boxes: Sequence[BoundingBox],
    iou_threshold: float,
    max_detections: Optional[int] = None,
) -> List[BoundingBox]:
    """
    Non-maximum suppression over `BoundingBox` values.

    Returns a new list, confidence-descending; the input is left untouched.
    """

    items = list(boxes)
    if not items:
        return []

    xyxy = np.array([b.as_xyxy() for b in items], dtype=np.float64)
    scores = np.array([b.confidence for b in items], dtype=np.float64)
    keep = nms(xyxy, scores, NMSConfig(iou_threshold=iou_threshold, max_detections=max_detections))
    degenerate = int(np.count_nonzero(_areas(xyxy[:, 0], xyxy[:, 1], xyxy[:, 2], xyxy[:, 3]) <= 0.0))
    if degenerate:
        logger.debug("%d degenerate box(es) treated as zero-area during suppression", degenerate)
    logger.debug("NMS kept %d/%d boxes at IoU threshold %.3f", keep.size, len(items), iou_threshold)
    return [items[i] for i in keep]
