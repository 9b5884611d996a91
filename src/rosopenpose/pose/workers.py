"""
Producer/consumer threads around the asynchronous pose estimator.

The producer feeds the newest color image into the estimator; the consumer
pops results, attaches 3D points from the latest depth image and publishes
one frame per result.
"""

from __future__ import annotations

import logging
import threading
import time
from typing import Any, Callable

import numpy as np

from rosopenpose.core.camera_reader import CameraReader
from rosopenpose.core.frame import Frame, build_frame

logger = logging.getLogger(__name__)

WARN_PERIOD_S = 10.0


class ThrottledWarning:
    """Log a warning at most once per `period` seconds."""

    def __init__(self, log: logging.Logger, period: float = WARN_PERIOD_S, clock: Callable[[], float] = time.monotonic):
        self._log = log
        self._period = float(period)
        self._clock = clock
        self._last: float | None = None

    def __call__(self, msg: str, *args: Any) -> bool:
        now = self._clock()
        if self._last is not None and now - self._last < self._period:
            return False
        self._last = now
        self._log.warning(msg, *args)
        return True


class Worker(threading.Thread):
    """
    Calls `work()` in a loop until stopped.

    An exception escaping `work()` is logged and stops the worker; there is
    no retry.
    """

    def __init__(self, name: str) -> None:
        super().__init__(name=name, daemon=True)
        self._stop_event = threading.Event()
        self.error: BaseException | None = None

    @property
    def stopped(self) -> bool:
        return self._stop_event.is_set()

    def stop(self) -> None:
        self._stop_event.set()

    def work(self) -> None:
        raise NotImplementedError

    def run(self) -> None:
        while not self._stop_event.is_set():
            try:
                self.work()
            except Exception as e:
                self.error = e
                logger.exception("Error %s in worker %s, stopping", e, self.name)
                self.stop()


class FrameProducer(Worker):
    def __init__(self, reader: CameraReader, estimator: Any, poll_timeout: float = 0.1) -> None:
        super().__init__(name="rosopenpose-producer")
        self.reader = reader
        self.estimator = estimator
        self.poll_timeout = float(poll_timeout)
        self.last_seq = 0
        self.submitted = 0
        self._warn_empty = ThrottledWarning(logger)

    def work(self) -> None:
        latest = self.reader.wait_for_color(self.last_seq, timeout=self.poll_timeout)
        if latest is None:
            return
        self.last_seq, image = latest

        if image is None or np.asarray(image).size == 0:
            self._warn_empty("Empty color image frame detected. Ignoring...")
            return

        if self.estimator.submit(image):
            self.submitted += 1


class FrameConsumer(Worker):
    def __init__(
        self,
        estimator: Any,
        reader: CameraReader,
        frame_id: str,
        publish: Callable[[Frame], None],
        publish_image: Callable[[np.ndarray], None] | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        super().__init__(name="rosopenpose-consumer")
        self.estimator = estimator
        self.reader = reader
        self.frame_id = frame_id
        self.publish = publish
        self.publish_image = publish_image
        self.clock = clock
        self.published = 0
        self._warn_no_depth = ThrottledWarning(logger)

    def work(self) -> None:
        result = self.estimator.receive()
        if result is None:
            return

        # Latest depth is used for every body part of this frame.
        depth_view = self.reader.snapshot()
        if depth_view is None:
            self._warn_no_depth("No depth image or camera info received yet. Skipping frame...")
            return

        frame = build_frame(result.keypoints, depth_view, frame_id=self.frame_id, stamp=self.clock())
        self.publish(frame)
        self.published += 1

        if self.publish_image is not None and result.rendered is not None:
            self.publish_image(result.rendered)
