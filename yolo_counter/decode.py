from __future__ import annotations

from enum import Enum
from typing import List, Sequence, Tuple

import numpy as np

from .errors import ShapeError
from .log import get_logger
from .types import RawDetection

logger = get_logger(__name__)

# cx, cy, w, h, conf
NUM_CHANNELS = 5


class Layout(Enum):
    """
    Physical axis order of a single-class YOLO output head.

    - CHANNEL_MAJOR: [1, 5, N], anchor i lives in column i
    - ANCHOR_MAJOR:  [1, N, 5], anchor i lives in row i
    """

    CHANNEL_MAJOR = "channel_major"
    ANCHOR_MAJOR = "anchor_major"

    def anchor_rows(self, tensor: np.ndarray) -> np.ndarray:
        """
        Uniform (N, 5) view over the tensor regardless of layout. No data is copied.
        """

        plane = tensor[0]
        if self is Layout.CHANNEL_MAJOR:
            return plane.T
        return plane


def resolve_layout(shape: Sequence[int]) -> Layout:
    """
    Infer the layout from the tensor shape.

    The axis of length 5 carries the channels. When both trailing axes are 5
    the tensor is read anchor-major.
    """

    shape = tuple(int(s) for s in shape)
    if len(shape) != 3:
        raise ShapeError(f"Expected a rank-3 output tensor [1, A, B], got shape {shape}")
    batch, a, b = shape
    if batch != 1:
        raise ShapeError(f"Batch > 1 is not supported (got shape {shape}). Pass one image at a time.")
    if a != NUM_CHANNELS and b != NUM_CHANNELS:
        raise ShapeError(f"Neither axis of shape {shape} has {NUM_CHANNELS} channels (cx, cy, w, h, conf)")

    if a == NUM_CHANNELS and b != NUM_CHANNELS:
        return Layout.CHANNEL_MAJOR
    return Layout.ANCHOR_MAJOR


def _threshold_like(conf: np.ndarray, threshold: float):
    # Compare in the tensor's own precision: float32(0.9) must pass a 0.9 threshold.
    if np.issubdtype(conf.dtype, np.floating):
        return conf.dtype.type(threshold)
    return float(threshold)


def decode_arrays(tensor: np.ndarray, confidence_threshold: float) -> Tuple[np.ndarray, np.ndarray]:
    """
    Vectorised decode.

    Returns:
        cxcywh: (k, 4) float64 geometry of the surviving anchors, model input space
        conf: (k,) float64 confidences, ascending anchor order
    """

    arr = np.asarray(tensor)
    layout = resolve_layout(arr.shape)
    rows = layout.anchor_rows(arr)
    logger.debug("Output tensor shape %s resolved as %s (%d anchors)", arr.shape, layout.value, rows.shape[0])

    conf = rows[:, 4]
    # NaN compares False and is dropped with the low-confidence anchors.
    keep = np.flatnonzero(conf >= _threshold_like(conf, confidence_threshold))

    cxcywh = rows[keep, :4].astype(np.float64)
    scores = conf[keep].astype(np.float64)
    logger.debug("%d/%d anchors passed confidence threshold %.3f", keep.size, rows.shape[0], confidence_threshold)
    return cxcywh, scores


def decode(tensor: np.ndarray, confidence_threshold: float) -> List[RawDetection]:
    """
    Decode a raw [1, 5, N] or [1, N, 5] tensor into candidates with
    confidence >= `confidence_threshold`, in ascending anchor order.

    Raises:
        ShapeError: rank != 3, batch != 1, or no axis of length 5.
    """

    cxcywh, scores = decode_arrays(tensor, confidence_threshold)
    return [
        RawDetection(cx=float(cx), cy=float(cy), w=float(w), h=float(h), confidence=float(s))
        for (cx, cy, w, h), s in zip(cxcywh, scores)
    ]
