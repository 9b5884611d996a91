from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Sequence

import numpy as np


MILLIMETER_ENCODINGS = ("16UC1", "mono16")
METER_ENCODINGS = ("32FC1",)


@dataclass(frozen=True)
class PinholeIntrinsics:
    """
    Pinhole intrinsics of the color (and registered depth) image.

    Convention follows ROS optical frames: x right, y down, z forward.
    """

    fx: float
    fy: float
    cx: float
    cy: float
    width: int = 0
    height: int = 0

    @classmethod
    def from_matrix(cls, K: Sequence[float], width: int = 0, height: int = 0) -> "PinholeIntrinsics":
        """
        Build from a row-major 3x3 camera matrix (e.g. `sensor_msgs/CameraInfo.K`).
        """
        k = np.asarray(K, dtype=np.float64).reshape(-1)
        if k.size != 9:
            raise ValueError(f"camera matrix must have 9 elements, got {k.size}")
        intr = cls(fx=float(k[0]), fy=float(k[4]), cx=float(k[2]), cy=float(k[5]), width=int(width), height=int(height))
        intr.validate()
        return intr

    def validate(self) -> None:
        if not (np.isfinite(self.fx) and np.isfinite(self.fy) and self.fx > 0.0 and self.fy > 0.0):
            raise ValueError("focal lengths fx, fy must be finite and > 0")
        if not (np.isfinite(self.cx) and np.isfinite(self.cy)):
            raise ValueError("principal point cx, cy must be finite")

    def as_matrix(self) -> np.ndarray:
        return np.array(
            [[self.fx, 0.0, self.cx], [0.0, self.fy, self.cy], [0.0, 0.0, 1.0]],
            dtype=np.float64,
        )


def intrinsics_from_dict(d: dict[str, Any]) -> PinholeIntrinsics:
    width = int(d.get("width", 0))
    height = int(d.get("height", 0))
    K = d.get("K", d.get("k"))
    if K is not None:
        return PinholeIntrinsics.from_matrix(K, width=width, height=height)

    try:
        intr = PinholeIntrinsics(
            fx=float(d["fx"]),
            fy=float(d["fy"]),
            cx=float(d["cx"]),
            cy=float(d["cy"]),
            width=width,
            height=height,
        )
    except KeyError as e:
        raise ValueError(f"camera intrinsics missing key: {e}") from e
    intr.validate()
    return intr


def intrinsics_to_dict(intr: PinholeIntrinsics) -> dict[str, Any]:
    return {
        "width": int(intr.width),
        "height": int(intr.height),
        "K": intr.as_matrix().reshape(-1).tolist(),
    }


def back_project(intr: PinholeIntrinsics, u: np.ndarray, v: np.ndarray, depth_m: np.ndarray) -> np.ndarray:
    """
    Inverse pinhole projection of pixels (u,v) with metric depth.

    Returns points shaped (..., 3) in the optical frame, in metres.
    NaN depth propagates to all three components.
    """
    u = np.asarray(u, dtype=np.float64)
    v = np.asarray(v, dtype=np.float64)
    z = np.asarray(depth_m, dtype=np.float64)

    x = (u - intr.cx) / intr.fx * z
    y = (v - intr.cy) / intr.fy * z
    return np.stack(np.broadcast_arrays(x, y, z), axis=-1)


def depth_to_meters(image: np.ndarray, encoding: str) -> np.ndarray:
    """
    Convert a raw depth image into float32 metres.

    16-bit encodings carry millimetres (RealSense, Kinect drivers); 32FC1 is
    already in metres.
    """
    image = np.asarray(image)
    if encoding in MILLIMETER_ENCODINGS:
        return image.astype(np.float32) * np.float32(0.001)
    if encoding in METER_ENCODINGS:
        return image.astype(np.float32, copy=True)
    raise ValueError(f"unsupported depth encoding: {encoding!r}")


def lookup_depth(depth_m: np.ndarray, u: np.ndarray, v: np.ndarray) -> np.ndarray:
    """
    Sample the depth image at pixel locations.

    Coordinates are truncated towards zero before the bounds check, so
    (-0.5, 0) samples pixel (0, 0). Indices outside the image and missing
    depth (0, negative or non-finite) yield NaN.
    """
    depth_m = np.asarray(depth_m)
    if depth_m.ndim == 3:
        depth_m = depth_m[..., 0]
    u = np.asarray(u, dtype=np.float64)
    v = np.asarray(v, dtype=np.float64)
    u, v = np.broadcast_arrays(u, v)
    h, w = depth_m.shape[:2]

    finite = np.isfinite(u) & np.isfinite(v)
    col = np.trunc(np.where(finite, u, -1.0)).astype(np.int64)
    row = np.trunc(np.where(finite, v, -1.0)).astype(np.int64)
    inside = finite & (col >= 0) & (row >= 0) & (col < w) & (row < h)

    out = np.full(u.shape, np.nan, dtype=np.float64)
    if np.any(inside):
        z = depth_m[row[inside], col[inside]].astype(np.float64)
        z[~np.isfinite(z) | (z <= 0.0)] = np.nan
        out[inside] = z
    return out
