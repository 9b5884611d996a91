from __future__ import annotations

from typing import Any, Callable

from rosopenpose.core.frame import Frame


def import_frame_msgs():
    """Generated message classes of the `ros_openpose` package (see msg/)."""
    from ros_openpose import msg  # type: ignore

    return msg


def _ros_time(stamp: float) -> Any:
    import rospy  # type: ignore

    return rospy.Time.from_sec(stamp)


def frame_to_msg(frame: Frame, msgs: Any = None, to_time: Callable[[float], Any] | None = None) -> Any:
    """
    Convert a core `Frame` into a `ros_openpose/Frame` message.

    Missing 3D points stay NaN in the float32 fields.
    """
    if msgs is None:
        msgs = import_frame_msgs()
    if to_time is None:
        to_time = _ros_time

    out = msgs.Frame()
    out.header.frame_id = frame.frame_id
    out.header.stamp = to_time(frame.stamp)

    persons = []
    for person in frame.persons:
        person_msg = msgs.Person()
        parts = []
        for bp in person.body_parts:
            part_msg = msgs.BodyPart()
            part_msg.score = bp.score
            part_msg.pixel.x = bp.pixel_x
            part_msg.pixel.y = bp.pixel_y
            part_msg.point.x, part_msg.point.y, part_msg.point.z = bp.point
            parts.append(part_msg)
        person_msg.bodyParts = parts
        persons.append(person_msg)
    out.persons = persons
    return out
