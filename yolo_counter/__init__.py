"""
Post-processing for single-class YOLO detectors.

Turns a raw [1, 5, N] or [1, N, 5] output tensor into de-duplicated boxes in
image coordinates and draws them. Works on NumPy arrays from any inference
runtime; OpenCV is only needed for resizing and drawing.
"""

from .config import DetectorConfig, load_detector_config
from .decode import Layout, decode, resolve_layout
from .errors import ConfigError, ShapeError
from .geometry import clip_box, iou, to_image_space
from .nms import NMSConfig, nms, suppress
from .preprocess import resize_square, to_input_blob
from .runtime import YoloCounter, count_objects, detect_boxes
from .types import BoundingBox, DetectionResult, RawDetection
from .visualize import annotate, draw_detections

__all__ = [
    "DetectorConfig",
    "load_detector_config",
    "Layout",
    "decode",
    "resolve_layout",
    "ConfigError",
    "ShapeError",
    "clip_box",
    "iou",
    "to_image_space",
    "NMSConfig",
    "nms",
    "suppress",
    "resize_square",
    "to_input_blob",
    "YoloCounter",
    "count_objects",
    "detect_boxes",
    "BoundingBox",
    "DetectionResult",
    "RawDetection",
    "annotate",
    "draw_detections",
]
