from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import numpy as np

from rosopenpose.core.frame import Frame, frame_from_dict, frame_to_dict
from rosopenpose.core.geometry import PinholeIntrinsics, intrinsics_from_dict


def load_openpose_keypoints(path: Path, key: str = "pose_keypoints_2d") -> np.ndarray:
    """
    Read OpenPose `--write_json` output into an array shaped (persons, parts, 3).

    Each person carries a flat list of (x, y, confidence) triplets under `key`.
    """
    data = json.loads(Path(path).read_text(encoding="utf-8"))
    people = data.get("people", [])

    rows: list[np.ndarray] = []
    for i, person in enumerate(people):
        flat = np.asarray(person.get(key, []), dtype=np.float32).reshape(-1)
        if flat.size % 3 != 0:
            raise ValueError(f"{path}: people[{i}].{key} length {flat.size} is not a multiple of 3")
        rows.append(flat.reshape(-1, 3))

    if not rows:
        return np.zeros((0, 0, 3), dtype=np.float32)
    parts = {r.shape[0] for r in rows}
    if len(parts) != 1:
        raise ValueError(f"{path}: people have different body part counts {sorted(parts)}")
    return np.stack(rows, axis=0)


def load_camera_info(path: Path) -> PinholeIntrinsics:
    data: dict[str, Any] = json.loads(Path(path).read_text(encoding="utf-8"))
    return intrinsics_from_dict(data)


def save_frame_json(path: Path, frame: Frame) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(frame_to_dict(frame), indent=2, sort_keys=True), encoding="utf-8")
    return path


def load_frame_json(path: Path) -> Frame:
    return frame_from_dict(json.loads(Path(path).read_text(encoding="utf-8")))
