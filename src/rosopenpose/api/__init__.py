from rosopenpose.api.keypoints_io import load_camera_info, load_frame_json, load_openpose_keypoints, save_frame_json
from rosopenpose.api.pipeline import PosePipeline

__all__ = [
    "PosePipeline",
    "load_camera_info",
    "load_frame_json",
    "load_openpose_keypoints",
    "save_frame_json",
]
