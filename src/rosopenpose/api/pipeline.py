from __future__ import annotations

import logging
from typing import Any, Callable

import numpy as np

from rosopenpose.core.camera_reader import CameraReader
from rosopenpose.core.frame import Frame
from rosopenpose.pose.workers import FrameConsumer, FrameProducer

logger = logging.getLogger(__name__)


class PosePipeline:
    """
    Estimator plus the producer/consumer pair feeding and draining it.

    Usage:

        with PosePipeline(estimator, reader, "camera_color_optical_frame", publish):
            rospy.spin()
    """

    def __init__(
        self,
        estimator: Any,
        reader: CameraReader,
        frame_id: str,
        publish: Callable[[Frame], None],
        publish_image: Callable[[np.ndarray], None] | None = None,
        join_timeout: float = 5.0,
    ) -> None:
        self.estimator = estimator
        self.reader = reader
        self.frame_id = frame_id
        self.publish = publish
        self.publish_image = publish_image
        self.join_timeout = float(join_timeout)
        self.producer: FrameProducer | None = None
        self.consumer: FrameConsumer | None = None

    @property
    def running(self) -> bool:
        return (
            self.producer is not None
            and self.consumer is not None
            and self.producer.is_alive()
            and self.consumer.is_alive()
            and not self.producer.stopped
            and not self.consumer.stopped
        )

    def start(self) -> None:
        if self.producer is not None:
            raise RuntimeError("PosePipeline already started")
        self.estimator.start()
        self.producer = FrameProducer(self.reader, self.estimator)
        self.consumer = FrameConsumer(
            self.estimator,
            self.reader,
            frame_id=self.frame_id,
            publish=self.publish,
            publish_image=self.publish_image,
        )
        self.producer.start()
        self.consumer.start()

    def stop(self) -> None:
        workers = [w for w in (self.producer, self.consumer) if w is not None]
        for w in workers:
            w.stop()
        # Unblocks a consumer waiting inside the estimator.
        self.estimator.stop()
        for w in workers:
            w.join(timeout=self.join_timeout)
            if w.is_alive():
                logger.warning("Worker %s did not exit within %.1fs", w.name, self.join_timeout)

    def __enter__(self) -> "PosePipeline":
        self.start()
        return self

    def __exit__(self, *exc: object) -> None:
        self.stop()
