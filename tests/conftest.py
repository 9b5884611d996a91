from __future__ import annotations

import logging
import sys
import types
from types import SimpleNamespace

import numpy as np
import pytest


class FakeSubscriber:
    def __init__(self, topic, data_class, callback, queue_size=None):
        self.topic = topic
        self.data_class = data_class
        self.callback = callback
        self.queue_size = queue_size
        self.unregister_calls = 0

    def unregister(self) -> None:
        self.unregister_calls += 1


class FakePublisher:
    def __init__(self, topic, data_class, queue_size=None):
        self.topic = topic
        self.data_class = data_class
        self.queue_size = queue_size
        self.published: list = []

    def publish(self, msg) -> None:
        self.published.append(msg)


class FakeImage:
    def __init__(self, data=None, encoding: str = "") -> None:
        self.data = data
        self.encoding = encoding


class FakeCameraInfo:
    def __init__(self, K=(), width: int = 0, height: int = 0) -> None:
        self.K = list(K)
        self.width = width
        self.height = height


class FakeCvBridge:
    def __init__(self) -> None:
        self.requested: list[str] = []

    def imgmsg_to_cv2(self, msg, desired_encoding: str = "passthrough"):
        self.requested.append(desired_encoding)
        return np.asarray(msg.data)

    def cv2_to_imgmsg(self, image, encoding: str = "passthrough"):
        return FakeImage(data=image, encoding=encoding)


class FakeFrameMsg:
    def __init__(self) -> None:
        self.header = SimpleNamespace(frame_id="", stamp=None)
        self.persons: list = []


class FakePersonMsg:
    def __init__(self) -> None:
        self.bodyParts: list = []


class FakeBodyPartMsg:
    def __init__(self) -> None:
        self.score = 0.0
        self.pixel = SimpleNamespace(x=0.0, y=0.0)
        self.point = SimpleNamespace(x=0.0, y=0.0, z=0.0)


class FakeRos:
    """State behind the fake `rospy` module: params, topics, log calls."""

    def __init__(self) -> None:
        self.params: dict = {}
        self.node_name: str | None = None
        self.subscribers: list[FakeSubscriber] = []
        self.publishers: list[FakePublisher] = []
        self.fatal: list[str] = []
        self.info: list[str] = []
        self.spins = 0
        self.on_spin = lambda: None
        self.rosout_records: list[logging.LogRecord] = []

    def subscriber(self, topic: str) -> FakeSubscriber:
        return next(s for s in self.subscribers if s.topic == topic)

    def publisher(self, topic: str) -> FakePublisher:
        return next(p for p in self.publishers if p.topic == topic)


def _module(name: str, **attrs) -> types.ModuleType:
    mod = types.ModuleType(name)
    for key, value in attrs.items():
        setattr(mod, key, value)
    return mod


@pytest.fixture
def fake_ros(monkeypatch):
    """
    Install stand-ins for rospy, cv_bridge, sensor_msgs and ros_openpose.msg.

    The `rosopenpose` logger handlers and level are restored afterwards.
    """
    ros = FakeRos()

    class RosOutHandler(logging.Handler):
        def emit(self, record: logging.LogRecord) -> None:
            ros.rosout_records.append(record)

    def init_node(name, **kwargs):
        ros.node_name = name

    def get_param(name, default=None):
        return ros.params.get(name, default)

    def myargv(argv=None):
        # rospy drops name remappings (`a:=b`) from the command line.
        return [a for a in (argv if argv is not None else sys.argv) if ":=" not in a]

    def subscriber(topic, data_class, callback, queue_size=None):
        sub = FakeSubscriber(topic, data_class, callback, queue_size=queue_size)
        ros.subscribers.append(sub)
        return sub

    def publisher(topic, data_class, queue_size=None):
        pub = FakePublisher(topic, data_class, queue_size=queue_size)
        ros.publishers.append(pub)
        return pub

    def spin():
        ros.spins += 1
        ros.on_spin()

    rosout = _module("rospy.impl.rosout", RosOutHandler=RosOutHandler)
    impl = _module("rospy.impl", rosout=rosout)
    rospy = _module(
        "rospy",
        impl=impl,
        init_node=init_node,
        get_param=get_param,
        myargv=myargv,
        Subscriber=subscriber,
        Publisher=publisher,
        spin=spin,
        logfatal=lambda msg, *args: ros.fatal.append(msg % args),
        loginfo=lambda msg, *args: ros.info.append(msg % args),
        Time=SimpleNamespace(from_sec=lambda s: s),
    )
    sensor_msg = _module("sensor_msgs.msg", Image=FakeImage, CameraInfo=FakeCameraInfo)
    frame_msg = _module("ros_openpose.msg", Frame=FakeFrameMsg, Person=FakePersonMsg, BodyPart=FakeBodyPartMsg)

    for mod in (
        rospy,
        impl,
        rosout,
        _module("cv_bridge", CvBridge=FakeCvBridge),
        _module("sensor_msgs", msg=sensor_msg),
        sensor_msg,
        _module("ros_openpose", msg=frame_msg),
        frame_msg,
    ):
        monkeypatch.setitem(sys.modules, mod.__name__, mod)

    ros.RosOutHandler = RosOutHandler
    ros.FrameMsg = FakeFrameMsg
    ros.Image = FakeImage
    ros.CameraInfo = FakeCameraInfo

    pkg_logger = logging.getLogger("rosopenpose")
    saved_handlers = list(pkg_logger.handlers)
    saved_level = pkg_logger.level
    yield ros
    pkg_logger.handlers = saved_handlers
    pkg_logger.setLevel(saved_level)
