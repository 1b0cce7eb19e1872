from __future__ import annotations

import dataclasses
import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional, Union

from .errors import ConfigError

PathLike = Union[str, Path]


@dataclass(frozen=True)
class DetectorConfig:
    """
    Detection thresholds and model geometry.

    model_input_size: side of the square image the model was run on
    confidence_threshold: raw candidates below this are dropped before NMS
    iou_threshold: overlap above which the lower-confidence box is suppressed
    max_detections: optional cap on boxes kept after NMS (None = no cap)
    channels_first: build NCHW input blobs instead of NHWC
    """

    model_input_size: int = 640
    confidence_threshold: float = 0.90
    iou_threshold: float = 0.40
    max_detections: Optional[int] = None
    channels_first: bool = False

    def __post_init__(self) -> None:
        if self.model_input_size <= 0:
            raise ConfigError("model_input_size must be > 0")
        if not 0.0 <= self.confidence_threshold <= 1.0:
            raise ConfigError("confidence_threshold must be in [0, 1]")
        if not 0.0 <= self.iou_threshold <= 1.0:
            raise ConfigError("iou_threshold must be in [0, 1]")
        if self.max_detections is not None and self.max_detections < 1:
            raise ConfigError("max_detections must be >= 1")

    def replace(self, **overrides: Any) -> "DetectorConfig":
        changes = {k: v for k, v in overrides.items() if v is not None}
        return dataclasses.replace(self, **changes)


def _require_number(payload: Dict[str, Any], key: str) -> float:
    value = payload[key]
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ConfigError(f"{key} must be a number")
    return float(value)


def _require_int(payload: Dict[str, Any], key: str) -> int:
    value = payload[key]
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigError(f"{key} must be an integer")
    return int(value)


def load_detector_config(path: PathLike) -> DetectorConfig:
    """
    Load a `DetectorConfig` from a JSON object. Keys that are absent keep
    their defaults; unknown keys are rejected.
    """

    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Detector config not found: {path}")
    raw = path.read_text(encoding="utf-8")
    try:
        payload = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise ConfigError(f"Invalid detector config JSON: {path}") from exc
    if not isinstance(payload, dict):
        raise ConfigError("Detector config must be a JSON object")

    allowed = {f.name for f in dataclasses.fields(DetectorConfig)}
    unknown = sorted(set(payload.keys()) - allowed)
    if unknown:
        raise ConfigError(f"Unknown detector config keys: {unknown}")

    kwargs: Dict[str, Any] = {}
    if "model_input_size" in payload:
        kwargs["model_input_size"] = _require_int(payload, "model_input_size")
    if "confidence_threshold" in payload:
        kwargs["confidence_threshold"] = _require_number(payload, "confidence_threshold")
    if "iou_threshold" in payload:
        kwargs["iou_threshold"] = _require_number(payload, "iou_threshold")
    if payload.get("max_detections") is not None:
        kwargs["max_detections"] = _require_int(payload, "max_detections")
    if "channels_first" in payload:
        value = payload["channels_first"]
        if not isinstance(value, bool):
            raise ConfigError("channels_first must be a boolean")
        kwargs["channels_first"] = value

    return DetectorConfig(**kwargs)
