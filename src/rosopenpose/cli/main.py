from __future__ import annotations

import argparse
from pathlib import Path

from rosopenpose.api.keypoints_io import load_camera_info, load_openpose_keypoints, save_frame_json
from rosopenpose.core.camera_reader import DepthView
from rosopenpose.core.frame import Frame, build_frame
from rosopenpose.core.geometry import MILLIMETER_ENCODINGS, METER_ENCODINGS
from rosopenpose.core.image_io import load_depth_m


def project_keypoints_file(
    *,
    keypoints_path: Path,
    depth_path: Path,
    camera_info_path: Path,
    depth_encoding: str | None,
    frame_id: str,
    stamp: float = 0.0,
) -> Frame:
    keypoints = load_openpose_keypoints(keypoints_path)
    intrinsics = load_camera_info(camera_info_path)
    depth_m = load_depth_m(depth_path, depth_encoding)
    if intrinsics.width and intrinsics.height and depth_m.shape[:2] != (intrinsics.height, intrinsics.width):
        raise ValueError(
            f"depth image is {depth_m.shape[1]}x{depth_m.shape[0]} but camera info is {intrinsics.width}x{intrinsics.height}"
        )
    return build_frame(keypoints, DepthView(depth_m=depth_m, intrinsics=intrinsics), frame_id=frame_id, stamp=stamp)


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(prog="rosopenpose")
    sub = parser.add_subparsers(dest="cmd", required=True)

    sub.add_parser(
        "node",
        help="Run the ROS node. Remaining arguments are ROS remappings and OpenPose flags.",
        add_help=False,
    )

    proj = sub.add_parser(
        "project",
        help="Attach 3D points to OpenPose JSON keypoints using a recorded depth image.",
    )
    proj.add_argument("--keypoints", type=Path, required=True, help="OpenPose --write_json output file.")
    proj.add_argument("--depth", type=Path, required=True, help="Depth image aligned to color (png/tiff/npy).")
    proj.add_argument("--camera-info", type=Path, required=True, help="JSON with K (row-major 3x3) or fx/fy/cx/cy.")
    proj.add_argument(
        "--depth-encoding",
        type=str,
        default=None,
        choices=list(MILLIMETER_ENCODINGS + METER_ENCODINGS),
        help="Depth encoding (default: 16UC1 for integer images, 32FC1 for float).",
    )
    proj.add_argument("--frame-id", type=str, default="camera_color_optical_frame")
    proj.add_argument("--out", type=Path, required=True)

    args, rest = parser.parse_known_args(argv)

    if args.cmd == "node":
        from rosopenpose.ros.node import run_node

        return run_node(["rosopenpose"] + rest)

    if rest:
        parser.error(f"unrecognized arguments: {' '.join(rest)}")

    if args.cmd == "project":
        frame = project_keypoints_file(
            keypoints_path=args.keypoints,
            depth_path=args.depth,
            camera_info_path=args.camera_info,
            depth_encoding=args.depth_encoding,
            frame_id=args.frame_id,
        )
        save_frame_json(args.out, frame)
        print(f"Wrote {args.out} ({len(frame.persons)} persons)")
        return 0

    raise AssertionError(f"Unhandled cmd: {args.cmd}")
