from __future__ import annotations

import json
import logging
import math
import numbers
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from .errors import InvalidConfig

_log = logging.getLogger(__name__)

NMS_THRESHOLD_KEY = "non_maximum_suppression_threshold"
DEFAULT_CONFIDENCE_THRESHOLD = 0.25
DEFAULT_NMS_THRESHOLD = 0.5


@dataclass(frozen=True)
class DecodeConfig:
    """
    Per-call decoding thresholds.

    - confidence_threshold: keep boxes whose best class score is strictly greater, in [0, 1)
    - nms_threshold: suppress boxes whose IoU with a kept box is strictly greater, in [0, 1]
    """

    confidence_threshold: float = DEFAULT_CONFIDENCE_THRESHOLD
    nms_threshold: float = DEFAULT_NMS_THRESHOLD

    def __post_init__(self) -> None:
        conf = _as_float(self.confidence_threshold, "confidence_threshold")
        iou = _as_float(self.nms_threshold, "nms_threshold")
        if not 0.0 <= conf < 1.0:
            raise InvalidConfig(f"confidence_threshold must be in [0, 1), got {conf}")
        if not 0.0 <= iou <= 1.0:
            raise InvalidConfig(f"nms_threshold must be in [0, 1], got {iou}")

    @classmethod
    def from_metadata(
        cls,
        metadata: Optional[Mapping[str, str]],
        confidence_threshold: float = DEFAULT_CONFIDENCE_THRESHOLD,
    ) -> "DecodeConfig":
        """
        Build a config from the model's creator-defined string metadata.
        """
        return cls(
            confidence_threshold=confidence_threshold,
            nms_threshold=parse_nms_threshold(metadata),
        )


def _as_float(value: Any, name: str) -> float:
    # numbers.Real also covers NumPy scalars such as np.float32.
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        raise InvalidConfig(f"{name} must be a number, got {value!r}")
    value = float(value)
    if math.isnan(value):
        raise InvalidConfig(f"{name} must not be NaN")
    return value


def parse_nms_threshold(
    metadata: Optional[Mapping[str, str]],
    default: float = DEFAULT_NMS_THRESHOLD,
) -> float:
    """
    Read the NMS threshold from string metadata, falling back to `default`.

    Missing keys, non-numeric strings, NaN and values outside [0, 1] all fall
    back; a bad value never fails the decode.
    """
    if not metadata or NMS_THRESHOLD_KEY not in metadata:
        _log.debug("%s not in model metadata, using %.3f", NMS_THRESHOLD_KEY, default)
        return default

    raw = metadata[NMS_THRESHOLD_KEY]
    if not isinstance(raw, str):
        _log.warning("%s must be a string, got %r; using %.3f", NMS_THRESHOLD_KEY, raw, default)
        return default
    try:
        value = float(raw.strip())
    except ValueError:
        _log.warning("Could not parse %s=%r; using %.3f", NMS_THRESHOLD_KEY, raw, default)
        return default
    if math.isnan(value) or not 0.0 <= value <= 1.0:
        _log.warning("%s=%r outside [0, 1]; using %.3f", NMS_THRESHOLD_KEY, raw, default)
        return default
    return value


def _require_number(payload: Dict[str, Any], key: str, default: float) -> float:
    if key not in payload:
        return default
    value = payload[key]
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise InvalidConfig(f"{key} must be a number")
    return float(value)


def load_decode_config(path: Path) -> DecodeConfig:
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Decode config not found: {path}")
    raw = path.read_text(encoding="utf-8")
    try:
        payload = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise InvalidConfig(f"Invalid decode config JSON: {path}") from exc
    if not isinstance(payload, dict):
        raise InvalidConfig("Decode config must be a JSON object")

    allowed = {"confidence_threshold", "nms_threshold"}
    unknown = sorted(set(payload.keys()) - allowed)
    if unknown:
        raise InvalidConfig(f"Unknown decode config keys: {unknown}")

    return DecodeConfig(
        confidence_threshold=_require_number(payload, "confidence_threshold", DEFAULT_CONFIDENCE_THRESHOLD),
        nms_threshold=_require_number(payload, "nms_threshold", DEFAULT_NMS_THRESHOLD),
    )
