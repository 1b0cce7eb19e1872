from __future__ import annotations

from typing import Callable, List, Tuple

import numpy as np

from .config import DetectorConfig
from .decode import decode
from .geometry import to_image_space
from .log import get_logger
from .nms import suppress
from .preprocess import to_input_blob
from .types import BoundingBox, DetectionResult
from .visualize import annotate

logger = get_logger(__name__)


def detect_boxes(
    tensor: np.ndarray,
    image_width: float,
    image_height: float,
    cfg: DetectorConfig = DetectorConfig(),
) -> List[BoundingBox]:
    """
    Raw output tensor -> suppressed boxes in image pixel coordinates.

    Raises:
        ShapeError: if the tensor is not [1, 5, N] / [1, N, 5].
    """

    candidates = decode(tensor, cfg.confidence_threshold)
    boxes = [to_image_space(d, cfg.model_input_size, image_width, image_height) for d in candidates]
    return suppress(boxes, cfg.iou_threshold, max_detections=cfg.max_detections)


def count_objects(
    tensor: np.ndarray,
    image: np.ndarray,
    cfg: DetectorConfig = DetectorConfig(),
) -> Tuple[DetectionResult, np.ndarray]:
    """
    Full post-inference pipeline for one (tensor, image) pair.

    Returns the detection summary and an annotated copy of `image`; the
    caller's image is not modified.
    """

    if image is None or not hasattr(image, "shape") or image.ndim != 3:
        raise ValueError(f"Expected image shape (H, W, 3), got {getattr(image, 'shape', None)}")
    img_h, img_w = image.shape[:2]

    boxes = detect_boxes(tensor, img_w, img_h, cfg)
    annotated, count, avg_conf = annotate(image, boxes)
    result = DetectionResult(boxes=boxes, count=count, average_confidence_percent=avg_conf)
    logger.debug(
        "Detected %d object(s), average confidence %.1f%%", result.count, result.average_confidence_percent
    )
    return result, annotated


class YoloCounter:
    """
    preprocess (square stretch) -> inference -> decode/NMS -> annotate.

    `infer_fn` is supplied by the caller (TFLite, ONNX Runtime, ...) and maps
    an input blob to the raw [1, 5, N] / [1, N, 5] output tensor. Images are
    RGB `np.ndarray` of shape (H, W, 3).
    """

    def __init__(
        self,
        infer_fn: Callable[[np.ndarray], np.ndarray],
        cfg: DetectorConfig = DetectorConfig(),
    ):
        self._infer_fn = infer_fn
        self.cfg = cfg

    def preprocess(self, image_rgb: np.ndarray) -> np.ndarray:
        return to_input_blob(image_rgb, self.cfg.model_input_size, channels_first=self.cfg.channels_first)

    def postprocess(self, tensor: np.ndarray, image_rgb: np.ndarray) -> Tuple[DetectionResult, np.ndarray]:
        return count_objects(tensor, image_rgb, self.cfg)

    def __call__(self, image_rgb: np.ndarray) -> Tuple[DetectionResult, np.ndarray]:
        blob = self.preprocess(image_rgb)
        tensor = self._infer_fn(blob)
        return self.postprocess(tensor, image_rgb)
