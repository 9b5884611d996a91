from __future__ import annotations

import logging
from typing import Any

from rosopenpose.core.camera_reader import CameraReader
from rosopenpose.core.geometry import PinholeIntrinsics, depth_to_meters

logger = logging.getLogger(__name__)


class RosCameraReader(CameraReader):
    """
    CameraReader fed by ROS topics.

    Color is converted to bgr8 for OpenPose; depth is converted to metres from
    its native encoding. Camera info is read once, then the subscriber is
    dropped since the intrinsics do not change.
    """

    def __init__(self, color_topic: str, depth_topic: str, cam_info_topic: str, queue_size: int = 1) -> None:
        super().__init__()
        import rospy  # type: ignore
        from cv_bridge import CvBridge  # type: ignore
        from sensor_msgs.msg import CameraInfo, Image  # type: ignore

        self.bridge = CvBridge()
        self._color_sub = rospy.Subscriber(color_topic, Image, self.on_color, queue_size=queue_size)
        self._depth_sub = rospy.Subscriber(depth_topic, Image, self.on_depth, queue_size=queue_size)
        self._info_sub: Any = rospy.Subscriber(cam_info_topic, CameraInfo, self.on_camera_info, queue_size=1)

    def on_color(self, msg: Any) -> None:
        self.update_color(self.bridge.imgmsg_to_cv2(msg, "bgr8"))

    def on_depth(self, msg: Any) -> None:
        raw = self.bridge.imgmsg_to_cv2(msg, desired_encoding="passthrough")
        self.update_depth(depth_to_meters(raw, msg.encoding))

    def on_camera_info(self, msg: Any) -> None:
        intr = PinholeIntrinsics.from_matrix(msg.K, width=msg.width, height=msg.height)
        self.update_intrinsics(intr)
        logger.info("Camera intrinsics received: fx=%.2f fy=%.2f cx=%.2f cy=%.2f", intr.fx, intr.fy, intr.cx, intr.cy)
        sub, self._info_sub = self._info_sub, None
        if sub is not None:
            sub.unregister()

    def close(self) -> None:
        for sub in (self._color_sub, self._depth_sub, self._info_sub):
            if sub is not None:
                sub.unregister()
        self._info_sub = None
