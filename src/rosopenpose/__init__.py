from rosopenpose import config
from rosopenpose.api import PosePipeline, load_camera_info, load_frame_json, load_openpose_keypoints, save_frame_json
from rosopenpose.core.camera_reader import CameraReader, DepthView
from rosopenpose.core.frame import BodyPart, Frame, Person, build_frame
from rosopenpose.core.geometry import PinholeIntrinsics, back_project

__all__ = [
    "config",
    "PosePipeline",
    "CameraReader",
    "DepthView",
    "PinholeIntrinsics",
    "back_project",
    "BodyPart",
    "Person",
    "Frame",
    "build_frame",
    "load_camera_info",
    "load_frame_json",
    "load_openpose_keypoints",
    "save_frame_json",
]
