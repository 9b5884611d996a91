from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

import numpy as np

from rosopenpose.core.frame import as_keypoint_array

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PoseResult:
    keypoints: np.ndarray  # (persons, parts, 3) as (x_px, y_px, score)
    rendered: np.ndarray | None = None


def import_pyopenpose():
    """Import the OpenPose Python bindings (built with BUILD_PYTHON=ON)."""
    try:
        from openpose import pyopenpose as op  # type: ignore
    except ImportError:
        import pyopenpose as op  # type: ignore
    return op


class OpenPoseEstimator:
    """
    Asynchronous OpenPose wrapper.

    Frames go in through `submit` and results come out through `receive`,
    each from its own thread; the library runs its pipeline in between.
    Before `start` and after `stop`, `submit` returns False and `receive`
    returns None.
    """

    def __init__(self, params: dict[str, Any], op: Any = None) -> None:
        self.params = dict(params)
        self._op = op
        self._wrapper: Any = None

    @property
    def started(self) -> bool:
        return self._wrapper is not None

    def start(self) -> None:
        if self._wrapper is not None:
            return
        if self._op is None:
            self._op = import_pyopenpose()
        op = self._op
        wrapper = op.WrapperPython(op.ThreadManagerMode.Asynchronous)
        wrapper.configure(self.params)
        wrapper.start()
        self._wrapper = wrapper
        logger.info("OpenPose started with model folder %s", self.params.get("model_folder"))

    def stop(self) -> None:
        wrapper, self._wrapper = self._wrapper, None
        if wrapper is not None:
            wrapper.stop()

    def submit(self, image: np.ndarray) -> bool:
        wrapper = self._wrapper
        if wrapper is None:
            return False
        datum = self._op.Datum()
        datum.cvInputData = image
        return bool(wrapper.waitAndEmplace(self._op.VectorDatum([datum])))

    def receive(self) -> PoseResult | None:
        wrapper = self._wrapper
        if wrapper is None:
            return None
        datums = self._op.VectorDatum()
        if not wrapper.waitAndPop(datums) or len(datums) == 0:
            return None

        datum = datums[0]
        rendered = getattr(datum, "cvOutputData", None)
        if rendered is not None and np.asarray(rendered).size == 0:
            rendered = None
        return PoseResult(keypoints=as_keypoint_array(datum.poseKeypoints), rendered=rendered)
