import logging

import numpy as np

from .types import BoundingBox

_log = logging.getLogger(__name__)


def iou(a: BoundingBox, b: BoundingBox) -> float:
    """
    Intersection over union of two xywh boxes. Returns 0.0 when the union is empty.
    """
    inter_w = max(0.0, min(a.x2, b.x2) - max(a.x, b.x))
    inter_h = max(0.0, min(a.y2, b.y2) - max(a.y, b.y))
    inter = inter_w * inter_h
    union = a.area + b.area - inter
    if union <= 0.0:
        return 0.0
    return inter / union


def iou_one_to_many(box: np.ndarray, others: np.ndarray) -> np.ndarray:
    """
    IoU between one xywh box (4,) and each row of `others` (M, 4).
    """
    x1, y1, w, h = box
    ox1 = others[:, 0]
    oy1 = others[:, 1]
    ox2 = ox1 + others[:, 2]
    oy2 = oy1 + others[:, 3]

    inter_w = np.maximum(0.0, np.minimum(x1 + w, ox2) - np.maximum(x1, ox1))
    inter_h = np.maximum(0.0, np.minimum(y1 + h, oy2) - np.maximum(y1, oy1))
    inter = inter_w * inter_h

    area = max(0.0, w) * max(0.0, h)
    other_areas = np.maximum(0.0, others[:, 2]) * np.maximum(0.0, others[:, 3])
    union = area + other_areas - inter

    out = np.zeros(others.shape[0], dtype=np.float64)
    np.divide(inter, union, out=out, where=union > 0.0)
    return out


def nms(boxes: np.ndarray, scores: np.ndarray, iou_threshold: float) -> np.ndarray:
    """
    Greedy NMS. Expects boxes shape (N,4) in xywh and scores shape (N,).
    Returns indices of kept boxes, highest score first.

    Ties in score keep their input order. A box is suppressed only when its
    IoU with an already kept box is strictly greater than `iou_threshold`.
    """

    if scores.size == 0:
        return np.empty((0,), dtype=np.int64)

    order = np.argsort(-scores, kind="stable")
    sorted_boxes = boxes[order]
    keep_flags = np.ones(order.size, dtype=bool)
    keep = []

    for i in range(order.size):
        if not keep_flags[i]:
            continue
        keep.append(order[i])
        if i + 1 == order.size:
            break
        overlaps = iou_one_to_many(sorted_boxes[i], sorted_boxes[i + 1 :])
        keep_flags[i + 1 :] &= ~(overlaps > iou_threshold)

    _log.debug("nms kept %d of %d boxes (iou_threshold=%.3f)", len(keep), order.size, iou_threshold)
    return np.array(keep, dtype=np.int64)
