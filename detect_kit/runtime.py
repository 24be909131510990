from __future__ import annotations

import itertools
import logging
import threading
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple

from .config import DecodeConfig
from .labels import summarize
from .metadata import parse_class_names
from .postprocess import Decoder
from .tensor import TensorLike
from .types import Prediction

_log = logging.getLogger(__name__)

# frame -> (coordinates, confidence)
InferFn = Callable[[Any], Tuple[TensorLike, TensorLike]]


@dataclass(frozen=True)
class FrameResult:
    frame_id: int
    predictions: List[Prediction]
    decode_ms: float


class DetectionPipeline:
    """
    Per-frame glue: external inference -> decode.

    `infer_fn` is whatever runs the model and returns the
    (coordinates, confidence) pair for one frame. The pipeline does not
    order or drop results; callers that decode frames on worker threads can
    use `LatestResult` to discard stale ones.
    """

    def __init__(
        self,
        infer_fn: InferFn,
        *,
        config: Optional[DecodeConfig] = None,
        metadata: Optional[Mapping[str, str]] = None,
    ):
        self._infer_fn = infer_fn
        if config is None:
            config = DecodeConfig.from_metadata(metadata)
        self.config = config
        self.decoder = Decoder(config)
        self.class_names: Dict[int, str] = parse_class_names(metadata)
        self._frame_ids = itertools.count()
        self._id_lock = threading.Lock()

    def _next_frame_id(self) -> int:
        with self._id_lock:
            return next(self._frame_ids)

    def __call__(self, frame: Any) -> FrameResult:
        frame_id = self._next_frame_id()
        coordinates, confidence = self._infer_fn(frame)

        start = time.perf_counter()
        predictions = self.decoder.process(confidence, coordinates)
        decode_ms = (time.perf_counter() - start) * 1000.0

        _log.debug("frame %d: %d predictions in %.2f ms", frame_id, len(predictions), decode_ms)
        return FrameResult(frame_id=frame_id, predictions=predictions, decode_ms=decode_ms)

    def summarize(self, result: FrameResult) -> str:
        """
        Display text for a frame, labelled with the model's class names when known.
        """
        return summarize(result.predictions, self.class_names)


class LatestResult:
    """
    Thread-safe holder that keeps only the newest frame's result.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._result: Optional[FrameResult] = None

    def offer(self, result: FrameResult) -> bool:
        with self._lock:
            if self._result is not None and result.frame_id <= self._result.frame_id:
                return False
            self._result = result
            return True

    def get(self) -> Optional[FrameResult]:
        with self._lock:
            return self._result
