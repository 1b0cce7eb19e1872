from __future__ import annotations

import numpy as np


def resize_square(image: np.ndarray, size: int) -> np.ndarray:
    """
    Stretch `image` to (size, size) without letterboxing.

    Aspect ratio is not preserved; boxes are mapped back with independent
    width/height ratios (see `geometry.to_image_space`).
    """

    try:
        import cv2  # type: ignore
    except Exception as e:  # pragma: no cover
        raise ImportError("OpenCV is required for resize_square(). Install with `pip install opencv-python`.") from e

    if size <= 0:
        raise ValueError(f"size must be > 0, got {size}")
    h, w = image.shape[:2]
    if (w, h) == (size, size):
        return image
    return cv2.resize(image, (size, size), interpolation=cv2.INTER_LINEAR)


def to_input_blob(image_rgb: np.ndarray, size: int, channels_first: bool = False) -> np.ndarray:
    """
    RGB uint8 (H, W, 3) -> float32 blob in [0, 1] with a batch axis.

    NHWC (1, size, size, 3) by default, NCHW (1, 3, size, size) when
    `channels_first` is set.
    """

    if image_rgb is None or not hasattr(image_rgb, "shape"):
        raise TypeError("image_rgb must be a NumPy array (RGB).")
    if image_rgb.ndim != 3 or image_rgb.shape[2] != 3:
        raise ValueError(f"Expected image shape (H, W, 3), got {getattr(image_rgb, 'shape', None)}")

    img = resize_square(image_rgb, size)
    blob = img.astype(np.float32) / 255.0
    if channels_first:
        blob = np.transpose(blob, (2, 0, 1))
    return np.ascontiguousarray(blob[None, ...])
