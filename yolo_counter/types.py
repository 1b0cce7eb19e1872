from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Dict, List, Sequence, Tuple


@dataclass(frozen=True)
class RawDetection:
    """
    Candidate box straight out of the model head, in model input space.
    """

    cx: float
    cy: float
    w: float
    h: float
    confidence: float

    def as_cxcywh(self) -> Tuple[float, float, float, float]:
        return self.cx, self.cy, self.w, self.h


@dataclass(frozen=True)
class BoundingBox:
    """
    Final detection in original image pixel coordinates.
    """

    left: float
    top: float
    right: float
    bottom: float
    confidence: float

    @property
    def width(self) -> float:
        return self.right - self.left

    @property
    def height(self) -> float:
        return self.bottom - self.top

    @property
    def area(self) -> float:
        # Negative, zero or non-finite extents all count as an empty box.
        w = self.width
        h = self.height
        if not (w > 0.0 and h > 0.0):
            return 0.0
        a = w * h
        return a if math.isfinite(a) else 0.0

    @property
    def is_degenerate(self) -> bool:
        return self.area <= 0.0

    def as_xyxy(self) -> Tuple[float, float, float, float]:
        return self.left, self.top, self.right, self.bottom


@dataclass(frozen=True)
class DetectionResult:
    boxes: List[BoundingBox] = field(default_factory=list)
    count: int = 0
    average_confidence_percent: float = 0.0

    @classmethod
    def from_boxes(cls, boxes: Sequence[BoundingBox]) -> "DetectionResult":
        kept = list(boxes)
        if not kept:
            return cls()
        avg = sum(b.confidence for b in kept) / len(kept) * 100.0
        return cls(boxes=kept, count=len(kept), average_confidence_percent=float(avg))

    def summary(self) -> str:
        return f"Count: {self.count}\nAverage confidence: {self.average_confidence_percent:.1f}%"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "count": self.count,
            "average_confidence_percent": self.average_confidence_percent,
            "boxes": [
                {
                    "left": b.left,
                    "top": b.top,
                    "right": b.right,
                    "bottom": b.bottom,
                    "confidence": b.confidence,
                }
                for b in self.boxes
            ],
        }
