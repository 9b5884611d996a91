from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable


class ConfigValidationError(ValueError):
    pass


DEFAULT_COLOR_TOPIC = "/camera/color/image_raw"
DEFAULT_DEPTH_TOPIC = "/camera/aligned_depth_to_color/image_raw"
DEFAULT_CAM_INFO_TOPIC = "/camera/color/camera_info"
DEFAULT_FRAME_ID = "camera_color_optical_frame"
DEFAULT_PUB_TOPIC = "/frame"


@dataclass(frozen=True)
class NodeParams:
    openpose_model_dir: str
    color_topic: str = DEFAULT_COLOR_TOPIC
    depth_topic: str = DEFAULT_DEPTH_TOPIC
    cam_info_topic: str = DEFAULT_CAM_INFO_TOPIC
    frame_id: str = DEFAULT_FRAME_ID
    pub_topic: str = DEFAULT_PUB_TOPIC
    pub_image_topic: str = ""
    queue_size: int = 1

    @property
    def publish_images(self) -> bool:
        return bool(self.pub_image_topic)


PARAM_NAMES = (
    "openpose_model_dir",
    "color_topic",
    "depth_topic",
    "cam_info_topic",
    "frame_id",
    "pub_topic",
    "pub_image_topic",
    "queue_size",
)


def _require(cond: bool, msg: str) -> None:
    if not cond:
        raise ConfigValidationError(msg)


def load_node_params(path: Path) -> NodeParams:
    data = json.loads(Path(path).read_text(encoding="utf-8"))
    _require(isinstance(data, dict), f"{path} must contain a JSON object")
    return parse_node_params(data)


def read_ros_params(get_param: Callable[..., Any]) -> NodeParams:
    """
    Read node parameters from the private namespace.

    `get_param` follows `rospy.get_param(name, default)`; absent parameters are
    left out so `parse_node_params` applies its own defaults.
    """
    missing = object()
    data: dict[str, Any] = {}
    for name in PARAM_NAMES:
        value = get_param(f"~{name}", missing)
        if value is not missing:
            data[name] = value
    return parse_node_params(data)


def parse_node_params(data: dict[str, Any]) -> NodeParams:
    model_dir = data.get("openpose_model_dir")
    _require(model_dir is not None and str(model_dir).strip() != "", "Missing 'openpose_model_dir' parameter")

    topics: dict[str, str] = {}
    for name, default in (
        ("color_topic", DEFAULT_COLOR_TOPIC),
        ("depth_topic", DEFAULT_DEPTH_TOPIC),
        ("cam_info_topic", DEFAULT_CAM_INFO_TOPIC),
        ("pub_topic", DEFAULT_PUB_TOPIC),
    ):
        value = str(data.get(name, default)).strip()
        _require(value != "", f"{name} must not be empty")
        topics[name] = value

    frame_id = str(data.get("frame_id", DEFAULT_FRAME_ID)).strip()
    _require(frame_id != "", "frame_id must not be empty")

    # Empty disables the rendered image stream.
    pub_image_topic = str(data.get("pub_image_topic", "") or "").strip()

    queue_raw = data.get("queue_size", 1)
    try:
        queue_size = int(queue_raw)
    except (TypeError, ValueError) as e:
        raise ConfigValidationError(f"queue_size must be an integer, got {queue_raw!r}") from e
    _require(queue_size >= 1, "queue_size must be >= 1")

    return NodeParams(
        openpose_model_dir=str(model_dir).strip(),
        color_topic=topics["color_topic"],
        depth_topic=topics["depth_topic"],
        cam_info_topic=topics["cam_info_topic"],
        frame_id=frame_id,
        pub_topic=topics["pub_topic"],
        pub_image_topic=pub_image_topic,
        queue_size=queue_size,
    )
