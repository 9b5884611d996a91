from __future__ import annotations

from pathlib import Path

import numpy as np
from PIL import Image

from rosopenpose.core.geometry import depth_to_meters


def load_depth_raw(path: str | Path) -> np.ndarray:
    """
    Load a single-channel depth image without changing its bit depth.

    `.npy` files are read with numpy. Images go through OpenCV (if installed)
    with IMREAD_UNCHANGED so 16-bit PNGs keep their millimetre values; Pillow
    is used as a fallback for builds lacking a codec.
    """
    p = Path(path)
    if p.suffix.lower() == ".npy":
        return np.load(p)

    try:
        import cv2  # type: ignore

        img = cv2.imread(str(p), cv2.IMREAD_UNCHANGED)
        if img is not None:
            if img.ndim == 3:
                img = img[..., 0]
            return img
    except ImportError:
        # Fall back to Pillow below.
        pass

    with Image.open(p) as im:
        arr = np.asarray(im)
    if arr.ndim == 3:
        arr = arr[..., 0]
    return arr


def guess_depth_encoding(depth: np.ndarray) -> str:
    if np.issubdtype(depth.dtype, np.floating):
        return "32FC1"
    return "16UC1"


def load_depth_m(path: str | Path, encoding: str | None = None) -> np.ndarray:
    """Load a depth image as float32 metres; encoding is guessed from dtype if omitted."""
    raw = load_depth_raw(path)
    if encoding is None:
        encoding = guess_depth_encoding(raw)
    return depth_to_meters(raw, encoding)
