from __future__ import annotations

import threading

import numpy as np

from rosopenpose.core.camera_reader import CameraReader, DepthView
from rosopenpose.core.geometry import PinholeIntrinsics


INTR = PinholeIntrinsics(fx=100.0, fy=100.0, cx=2.0, cy=1.0, width=4, height=3)


def test_color_frame_and_sequence() -> None:
    reader = CameraReader()
    assert reader.color_frame() is None
    assert reader.wait_for_color(0, timeout=0.01) is None

    img = np.zeros((3, 4, 3), dtype=np.uint8)
    assert reader.update_color(img) == 1
    seq, got = reader.wait_for_color(0, timeout=0.01)
    assert seq == 1 and got is img
    # Same frame is not handed out twice.
    assert reader.wait_for_color(seq, timeout=0.01) is None


def test_wait_for_color_wakes_on_update() -> None:
    reader = CameraReader()
    img = np.ones((2, 2, 3), dtype=np.uint8)
    timer = threading.Timer(0.05, reader.update_color, args=(img,))
    timer.start()
    try:
        latest = reader.wait_for_color(0, timeout=5.0)
    finally:
        timer.join()
    assert latest is not None
    assert latest[0] == 1


def test_snapshot_requires_depth_and_intrinsics() -> None:
    reader = CameraReader()
    reader.update_depth(np.ones((3, 4), dtype=np.float32))
    assert reader.snapshot() is None
    reader.update_intrinsics(INTR)
    assert isinstance(reader.snapshot(), DepthView)


def test_snapshot_is_isolated_from_later_depth() -> None:
    reader = CameraReader()
    depth = np.full((3, 4), 2.0, dtype=np.float32)
    reader.update_depth(depth)
    reader.update_intrinsics(INTR)
    view = reader.snapshot()
    depth[:] = 5.0
    reader.update_depth(np.full((3, 4), 7.0, dtype=np.float32))
    assert view.project(2.0, 1.0) == (0.0, 0.0, 2.0)


def test_depth_view_project_many_shapes() -> None:
    view = DepthView(depth_m=np.full((3, 4), 1.0, dtype=np.float32), intrinsics=INTR)
    uv = np.array([[[2.0, 1.0], [3.0, 2.0]], [[10.0, 10.0], [0.0, 0.0]]])
    xyz = view.project_many(uv)
    assert xyz.shape == (2, 2, 3)
    assert np.allclose(xyz[0, 1], [0.01, 0.01, 1.0])
    assert np.all(np.isnan(xyz[1, 0]))
