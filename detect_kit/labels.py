from __future__ import annotations

from typing import Dict, Iterable, Optional

from .types import Prediction


def format_confidence(confidence: float) -> str:
    # Truncated, not rounded: 0.98769 -> "98.76%".
    pct = int(confidence * 10000) / 100
    return f"{pct}%"


def describe(prediction: Prediction, class_names: Optional[Dict[int, str]] = None) -> str:
    pct = format_confidence(prediction.confidence)
    if class_names and prediction.class_index in class_names:
        return f"{class_names[prediction.class_index]} {pct}"
    return pct


def summarize(predictions: Iterable[Prediction], class_names: Optional[Dict[int, str]] = None) -> str:
    return ", ".join(describe(p, class_names) for p in predictions)
