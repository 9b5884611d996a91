"""
ROS node: camera topics in, `ros_openpose/Frame` out.

Node parameters (private namespace): openpose_model_dir, color_topic,
depth_topic, cam_info_topic, frame_id, pub_topic, pub_image_topic,
queue_size. Any other `--flag value` on the command line goes to OpenPose.
"""

from __future__ import annotations

import logging
import sys
from typing import Sequence

from rosopenpose.api.pipeline import PosePipeline
from rosopenpose.config import ConfigValidationError, read_ros_params
from rosopenpose.pose.estimator import OpenPoseEstimator
from rosopenpose.pose.flags import build_openpose_params, parse_openpose_flags
from rosopenpose.ros.messages import frame_to_msg, import_frame_msgs

NODE_NAME = "ros_openpose_node"
LOG_FORMAT = "[%(levelname)s] [%(filename)s:%(lineno)d %(funcName)s] %(message)s"

logger = logging.getLogger(__name__)


def configure_logging(level: int = logging.INFO) -> None:
    """
    Send the package loggers to the console and to /rosout.

    rospy only bridges its own `rosout` logger; records from
    `rosopenpose.*` would otherwise never reach rqt_console or rosbag.
    """
    from rospy.impl.rosout import RosOutHandler  # type: ignore

    pkg_logger = logging.getLogger("rosopenpose")
    formatter = logging.Formatter(LOG_FORMAT)
    if not any(type(h) is logging.StreamHandler for h in pkg_logger.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(formatter)
        pkg_logger.addHandler(handler)
    if not any(isinstance(h, RosOutHandler) for h in pkg_logger.handlers):
        rosout = RosOutHandler()
        rosout.setFormatter(formatter)
        pkg_logger.addHandler(rosout)
    pkg_logger.setLevel(level)


def run_node(argv: Sequence[str] | None = None) -> int:
    import rospy  # type: ignore
    from sensor_msgs.msg import Image  # type: ignore

    if argv is None:
        argv = sys.argv
    rospy.init_node(NODE_NAME)
    configure_logging()

    try:
        params = read_ros_params(rospy.get_param)
    except ConfigValidationError as e:
        rospy.logfatal("%s in launch file", e)
        return -1

    reader = None
    try:
        # rospy.myargv drops remappings such as __name:= or topic:=/other.
        flags = parse_openpose_flags(rospy.myargv(argv=list(argv))[1:])
        op_params = build_openpose_params(flags, params.openpose_model_dir)

        from rosopenpose.ros.camera import RosCameraReader

        reader = RosCameraReader(params.color_topic, params.depth_topic, params.cam_info_topic, queue_size=params.queue_size)

        msgs = import_frame_msgs()
        frame_pub = rospy.Publisher(params.pub_topic, msgs.Frame, queue_size=params.queue_size)

        def publish(frame) -> None:
            frame_pub.publish(frame_to_msg(frame, msgs=msgs))

        publish_image = None
        if params.publish_images:
            image_pub = rospy.Publisher(params.pub_image_topic, Image, queue_size=params.queue_size)

            def publish_image(image) -> None:
                image_pub.publish(reader.bridge.cv2_to_imgmsg(image, "bgr8"))

        pipeline = PosePipeline(
            OpenPoseEstimator(op_params),
            reader,
            frame_id=params.frame_id,
            publish=publish,
            publish_image=publish_image,
        )

        rospy.loginfo("Starting ros_openpose...")
        with pipeline:
            # Ctrl-C or a master shutdown ends the spin.
            rospy.spin()
            rospy.loginfo("Exiting ros_openpose...")
        return 0
    except Exception:
        logger.exception("ros_openpose failed")
        return -1
    finally:
        if reader is not None:
            reader.close()


def main() -> None:
    sys.exit(run_node())


if __name__ == "__main__":
    main()
