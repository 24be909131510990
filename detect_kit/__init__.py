"""
Object-detection output decoding.

Takes the raw confidence ([num_boxes, num_classes]) and coordinate
([num_boxes, 4], center/size) tensors emitted by an inference engine and
returns non-overlapping predictions ordered by confidence. Only NumPy is
required; running the model itself is left to the caller.
"""

from .config import DecodeConfig, load_decode_config, parse_nms_threshold
from .errors import DecodeError, IndexOutOfBounds, InvalidConfig, ShapeMismatch
from .labels import describe, format_confidence, summarize
from .metadata import load_model_metadata, parse_class_names
from .nms import iou, nms
from .postprocess import Decoder, decode, decode_observations
from .runtime import DetectionPipeline, FrameResult, LatestResult
from .tensor import RawTensor, TensorReader
from .types import BoundingBox, Prediction

__all__ = [
    "BoundingBox",
    "Prediction",
    "RawTensor",
    "TensorReader",
    "DecodeConfig",
    "load_decode_config",
    "parse_nms_threshold",
    "DecodeError",
    "ShapeMismatch",
    "InvalidConfig",
    "IndexOutOfBounds",
    "iou",
    "nms",
    "Decoder",
    "decode",
    "decode_observations",
    "DetectionPipeline",
    "FrameResult",
    "LatestResult",
    "parse_class_names",
    "load_model_metadata",
    "describe",
    "format_confidence",
    "summarize",
]
