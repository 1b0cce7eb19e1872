from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import List, Optional

import cv2
import numpy as np

from yolo_counter import DetectorConfig, ShapeError, clip_box, count_objects, load_detector_config
from yolo_counter.log import get_logger, setup_logging

logger = get_logger("count_image")


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        description="Count objects in an image from a saved raw YOLO output tensor and draw the boxes."
    )
    parser.add_argument("--image", required=True, help="Path to the input image.")
    parser.add_argument("--preds", required=True, help="Raw output tensor saved with numpy.save ([1,5,N] or [1,N,5]).")
    parser.add_argument("--config", default=None, help="Optional detector config JSON.")
    parser.add_argument("--imgsz", type=int, default=None, help="Model input size (overrides config).")
    parser.add_argument("--conf", type=float, default=None, help="Confidence threshold (overrides config).")
    parser.add_argument("--iou", type=float, default=None, help="IoU threshold for NMS (overrides config).")
    parser.add_argument("--max-det", type=int, default=None, help="Max detections to keep after NMS.")
    parser.add_argument("--out", default=None, help="Optional output path for the annotated image.")
    parser.add_argument("--json", dest="json_out", default=None, help="Optional output path for the result as JSON.")
    parser.add_argument("--clip", action="store_true", help="Clamp boxes to the image in the JSON output.")
    parser.add_argument("--log-level", default="INFO", help="Logging level (DEBUG, INFO, ...).")
    parser.add_argument("--log-json", action="store_true", help="Emit logs as JSON lines.")
    args = parser.parse_args(argv)

    setup_logging(args.log_level, json_format=bool(args.log_json))

    cfg = load_detector_config(args.config) if args.config else DetectorConfig()
    cfg = cfg.replace(
        model_input_size=args.imgsz,
        confidence_threshold=args.conf,
        iou_threshold=args.iou,
        max_detections=args.max_det,
    )

    img_bgr = cv2.imread(args.image)
    if img_bgr is None:
        raise FileNotFoundError(f"Could not read image at path: {args.image}")
    img_rgb = cv2.cvtColor(img_bgr, cv2.COLOR_BGR2RGB)
    preds = np.load(args.preds)

    try:
        result, annotated = count_objects(preds, img_rgb, cfg)
    except ShapeError as exc:
        logger.error("Detection failed: %s", exc)
        print(f"error: {exc}", file=sys.stderr)
        return 2

    print(result.summary())

    if args.out:
        ok = cv2.imwrite(args.out, cv2.cvtColor(annotated, cv2.COLOR_RGB2BGR))
        if not ok:
            raise RuntimeError(f"Failed to write output image: {args.out}")
        logger.info("Annotated image written to %s", args.out)

    if args.json_out:
        payload = result.to_dict()
        if args.clip:
            h, w = img_rgb.shape[:2]
            payload["boxes"] = [
                {"left": c.left, "top": c.top, "right": c.right, "bottom": c.bottom, "confidence": c.confidence}
                for c in (clip_box(b, w, h) for b in result.boxes)
            ]
        Path(args.json_out).write_text(json.dumps(payload, indent=2), encoding="utf-8")
        logger.info("Result written to %s", args.json_out)

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
