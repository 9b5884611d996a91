from __future__ import annotations

import numpy as np
import pytest


K = [500.0, 0.0, 4.0, 0.0, 400.0, 3.0, 0.0, 0.0, 1.0]


def _reader(fake_ros):
    from rosopenpose.ros.camera import RosCameraReader

    return RosCameraReader("/color", "/depth", "/info", queue_size=2)


def test_subscribes_to_the_three_camera_topics(fake_ros):
    _reader(fake_ros)

    assert [s.topic for s in fake_ros.subscribers] == ["/color", "/depth", "/info"]
    assert fake_ros.subscriber("/color").data_class is fake_ros.Image
    assert fake_ros.subscriber("/color").queue_size == 2
    assert fake_ros.subscriber("/info").data_class is fake_ros.CameraInfo
    assert fake_ros.subscriber("/info").queue_size == 1


def test_camera_info_unregisters_its_subscriber_once(fake_ros):
    reader = _reader(fake_ros)
    info_sub = fake_ros.subscriber("/info")

    msg = fake_ros.CameraInfo(K=K, width=8, height=6)
    info_sub.callback(msg)
    info_sub.callback(msg)
    reader.close()

    assert info_sub.unregister_calls == 1
    intr = reader.intrinsics
    assert (intr.fx, intr.fy, intr.cx, intr.cy) == (500.0, 400.0, 4.0, 3.0)
    assert (intr.width, intr.height) == (8, 6)


def test_16uc1_depth_is_stored_in_meters(fake_ros):
    reader = _reader(fake_ros)
    fake_ros.subscriber("/info").callback(fake_ros.CameraInfo(K=K, width=8, height=6))

    raw = np.full((6, 8), 1500, dtype=np.uint16)
    raw[0, 0] = 0
    fake_ros.subscriber("/depth").callback(fake_ros.Image(data=raw, encoding="16UC1"))

    view = reader.snapshot()
    assert view is not None
    assert reader.bridge.requested == ["passthrough"]
    assert view.depth_m.dtype == np.float32
    assert view.depth_m[3, 4] == pytest.approx(1.5)
    assert view.depth_m[0, 0] == 0.0
    assert view.project(4.0, 3.0) == pytest.approx((0.0, 0.0, 1.5))


def test_unsupported_depth_encoding_raises(fake_ros):
    _reader(fake_ros)
    with pytest.raises(ValueError):
        fake_ros.subscriber("/depth").callback(fake_ros.Image(data=np.zeros((2, 2), np.uint8), encoding="rgb8"))


def test_color_is_requested_as_bgr8(fake_ros):
    reader = _reader(fake_ros)
    image = np.zeros((6, 8, 3), dtype=np.uint8)

    fake_ros.subscriber("/color").callback(fake_ros.Image(data=image, encoding="rgb8"))

    assert reader.bridge.requested == ["bgr8"]
    assert reader.color_seq == 1
    assert reader.color_frame().shape == (6, 8, 3)


def test_close_unregisters_every_live_subscriber(fake_ros):
    reader = _reader(fake_ros)
    reader.close()

    assert [s.unregister_calls for s in fake_ros.subscribers] == [1, 1, 1]
