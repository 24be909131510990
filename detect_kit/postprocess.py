from __future__ import annotations

import logging
from typing import List, Mapping, Optional, Sequence, Tuple

import numpy as np

from .config import DEFAULT_CONFIDENCE_THRESHOLD, DecodeConfig
from .errors import ShapeMismatch
from .nms import nms
from .tensor import TensorLike, TensorReader, as_raw_tensor
from .types import BoundingBox, Prediction

_log = logging.getLogger(__name__)


def decode_boxes(reader: TensorReader) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    """
    Best class per box and center/size -> corner/size conversion.

    Returns (boxes_xywh (N, 4), scores (N,), class_ids (N,)) in box order.
    On equal scores the lowest class index wins.
    """
    conf = reader.confidence_matrix()
    coords = reader.coordinate_matrix()
    if reader.num_boxes == 0:
        return np.empty((0, 4), dtype=np.float64), np.empty((0,), dtype=np.float64), np.empty((0,), dtype=np.int64)

    # argmax returns the first maximal index.
    class_ids = np.argmax(conf, axis=1).astype(np.int64)
    scores = conf[np.arange(reader.num_boxes), class_ids]

    cx, cy, w, h = coords.T
    boxes = np.stack([cx - w / 2, cy - h / 2, w, h], axis=1)
    return boxes, scores, class_ids


def filter_by_confidence(
    boxes: np.ndarray,
    scores: np.ndarray,
    class_ids: np.ndarray,
    threshold: float,
) -> Tuple[np.ndarray, np.ndarray, np.ndarray]:
    keep = scores > threshold
    return boxes[keep], scores[keep], class_ids[keep]


class Decoder:
    """
    Turns a raw (confidence, coordinates) tensor pair into ordered predictions.

    Pipeline per call:
    - validate shapes
    - pick best class per box, convert (cx, cy, w, h) to (x, y, w, h)
    - drop boxes with score <= confidence_threshold
    - greedy NMS with nms_threshold

    Boxes are not clamped to [0, 1]; use `BoundingBox.clipped()` if needed.
    Instances hold only their config and can be shared between threads.
    """

    def __init__(self, cfg: Optional[DecodeConfig] = None):
        self.cfg = cfg if cfg is not None else DecodeConfig()

    def process(self, confidence: TensorLike, coordinates: TensorLike) -> List[Prediction]:
        reader = TensorReader(as_raw_tensor(confidence), as_raw_tensor(coordinates))

        boxes, scores, class_ids = decode_boxes(reader)
        boxes, scores, class_ids = filter_by_confidence(boxes, scores, class_ids, self.cfg.confidence_threshold)
        if scores.size == 0:
            _log.debug("decode: 0 of %d boxes above %.3f", reader.num_boxes, self.cfg.confidence_threshold)
            return []

        keep_idx = nms(boxes, scores, self.cfg.nms_threshold)
        _log.debug(
            "decode: %d boxes, %d above threshold, %d after nms",
            reader.num_boxes,
            scores.size,
            keep_idx.size,
        )

        return [
            Prediction(
                class_index=int(class_ids[i]),
                confidence=float(scores[i]),
                box=BoundingBox(
                    x=float(boxes[i, 0]),
                    y=float(boxes[i, 1]),
                    width=float(boxes[i, 2]),
                    height=float(boxes[i, 3]),
                ),
            )
            for i in keep_idx
        ]


def decode(
    confidence: TensorLike,
    coordinates: TensorLike,
    config: Optional[DecodeConfig] = None,
) -> List[Prediction]:
    return Decoder(config).process(confidence, coordinates)


def decode_observations(
    outputs: Sequence[TensorLike],
    metadata: Optional[Mapping[str, str]] = None,
    confidence_threshold: float = DEFAULT_CONFIDENCE_THRESHOLD,
) -> List[Prediction]:
    """
    Decode engine outputs given as `[coordinates, confidence]`.

    The NMS threshold comes from the model's string metadata when present.
    """
    if len(outputs) != 2:
        raise ShapeMismatch(f"Expected 2 outputs [coordinates, confidence], got {len(outputs)}")
    coordinates, confidence = outputs
    cfg = DecodeConfig.from_metadata(metadata, confidence_threshold=confidence_threshold)
    return decode(confidence, coordinates, cfg)
