from __future__ import annotations

import threading
from dataclasses import dataclass

import numpy as np

from rosopenpose.core.geometry import PinholeIntrinsics, back_project, lookup_depth


@dataclass(frozen=True)
class DepthView:
    """Depth image (metres) and intrinsics captured together for one frame."""

    depth_m: np.ndarray
    intrinsics: PinholeIntrinsics

    def project(self, u: float, v: float) -> tuple[float, float, float]:
        xyz = self.project_many(np.asarray([[u, v]], dtype=np.float64))[0]
        return float(xyz[0]), float(xyz[1]), float(xyz[2])

    def project_many(self, uv: np.ndarray) -> np.ndarray:
        """
        Back-project pixels shaped (..., 2) into optical-frame points (..., 3).
        """
        uv = np.asarray(uv, dtype=np.float64)
        z = lookup_depth(self.depth_m, uv[..., 0], uv[..., 1])
        return back_project(self.intrinsics, uv[..., 0], uv[..., 1], z)


class CameraReader:
    """
    Latest color image, depth image and intrinsics, shared between the
    subscriber callbacks and the pose workers.
    """

    def __init__(self) -> None:
        self._cond = threading.Condition()
        self._color: np.ndarray | None = None
        self._color_seq = 0
        self._depth_m: np.ndarray | None = None
        self._intrinsics: PinholeIntrinsics | None = None

    def update_color(self, image: np.ndarray) -> int:
        with self._cond:
            self._color = image
            self._color_seq += 1
            self._cond.notify_all()
            return self._color_seq

    def update_depth(self, depth_m: np.ndarray) -> None:
        with self._cond:
            self._depth_m = depth_m

    def update_intrinsics(self, intrinsics: PinholeIntrinsics) -> None:
        with self._cond:
            self._intrinsics = intrinsics

    @property
    def intrinsics(self) -> PinholeIntrinsics | None:
        with self._cond:
            return self._intrinsics

    @property
    def color_seq(self) -> int:
        with self._cond:
            return self._color_seq

    def color_frame(self) -> np.ndarray | None:
        with self._cond:
            return self._color

    def wait_for_color(self, after_seq: int, timeout: float | None = None) -> tuple[int, np.ndarray] | None:
        """
        Block until a color image newer than `after_seq` is available.

        Returns (seq, image), or None on timeout.
        """
        with self._cond:
            ready = self._cond.wait_for(lambda: self._color_seq > after_seq and self._color is not None, timeout=timeout)
            if not ready:
                return None
            return self._color_seq, self._color

    def snapshot(self) -> DepthView | None:
        # The copy keeps a frame's points consistent while new depth arrives.
        with self._cond:
            if self._depth_m is None or self._intrinsics is None:
                return None
            return DepthView(depth_m=self._depth_m.copy(), intrinsics=self._intrinsics)
