from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any

import numpy as np

from rosopenpose.core.camera_reader import DepthView


FRAME_SCHEMA_VERSION = "rosopenpose.frame.v0"


@dataclass(frozen=True)
class BodyPart:
    pixel_x: float
    pixel_y: float
    score: float
    point: tuple[float, float, float]

    @property
    def has_point(self) -> bool:
        return all(math.isfinite(c) for c in self.point)


@dataclass(frozen=True)
class Person:
    body_parts: tuple[BodyPart, ...]


@dataclass(frozen=True)
class Frame:
    frame_id: str
    stamp: float
    persons: tuple[Person, ...] = ()


def as_keypoint_array(keypoints: np.ndarray | None) -> np.ndarray:
    """
    Normalize estimator output to shape (persons, parts, 3).

    OpenPose hands back None, a zero-size array or a 0-d scalar when nobody
    is detected.
    """
    if keypoints is None:
        return np.zeros((0, 0, 3), dtype=np.float32)
    arr = np.asarray(keypoints, dtype=np.float32)
    if arr.size == 0 or arr.ndim == 0:
        return np.zeros((0, 0, 3), dtype=np.float32)
    if arr.ndim != 3 or arr.shape[2] < 3:
        raise ValueError(f"keypoints must be shaped (persons, parts, 3), got {arr.shape}")
    return arr


def build_frame(keypoints: np.ndarray | None, depth_view: DepthView, frame_id: str, stamp: float) -> Frame:
    kp = as_keypoint_array(keypoints)
    if kp.shape[0] == 0:
        return Frame(frame_id=frame_id, stamp=float(stamp), persons=())

    # One depth lookup for every (person, part) at once.
    points = depth_view.project_many(kp[..., :2])

    persons = []
    for person_idx in range(kp.shape[0]):
        parts = []
        for part_idx in range(kp.shape[1]):
            x, y, score = kp[person_idx, part_idx, :3]
            px, py, pz = points[person_idx, part_idx]
            parts.append(
                BodyPart(
                    pixel_x=float(x),
                    pixel_y=float(y),
                    score=float(score),
                    point=(float(px), float(py), float(pz)),
                )
            )
        persons.append(Person(body_parts=tuple(parts)))
    return Frame(frame_id=frame_id, stamp=float(stamp), persons=tuple(persons))


def _float_or_none(v: float) -> float | None:
    return v if math.isfinite(v) else None


def frame_to_dict(frame: Frame) -> dict[str, Any]:
    """JSON-friendly form; missing 3D points are written as null."""
    return {
        "schema_version": FRAME_SCHEMA_VERSION,
        "frame_id": frame.frame_id,
        "stamp": float(frame.stamp),
        "persons": [
            {
                "body_parts": [
                    {
                        "pixel": [bp.pixel_x, bp.pixel_y],
                        "score": bp.score,
                        "point": [_float_or_none(c) for c in bp.point],
                    }
                    for bp in person.body_parts
                ]
            }
            for person in frame.persons
        ],
    }


def frame_from_dict(d: dict[str, Any]) -> Frame:
    if str(d.get("schema_version")) != FRAME_SCHEMA_VERSION:
        raise ValueError(f"unsupported frame schema: {d.get('schema_version')!r}")

    persons = []
    for person in d.get("persons", []):
        parts = []
        for bp in person.get("body_parts", []):
            px, py = bp["pixel"]
            point = tuple(float("nan") if c is None else float(c) for c in bp["point"])
            if len(point) != 3:
                raise ValueError("body part point must have 3 components")
            parts.append(BodyPart(pixel_x=float(px), pixel_y=float(py), score=float(bp["score"]), point=point))
        persons.append(Person(body_parts=tuple(parts)))
    return Frame(frame_id=str(d.get("frame_id", "")), stamp=float(d.get("stamp", 0.0)), persons=tuple(persons))
