from __future__ import annotations

import json
from pathlib import Path
from typing import Dict, Mapping, Optional, Union

CLASSES_KEY = "classes"


def parse_class_names(metadata: Optional[Mapping[str, str]]) -> Dict[int, str]:
    """
    Class labels from creator-defined model metadata.

    Detector exports store them as one comma-separated string in class-index
    order, e.g. {"classes": "logo,person"} -> {0: "logo", 1: "person"}.
    Missing or non-string entries give an empty mapping; blank labels are skipped
    but keep their index.
    """
    if not metadata:
        return {}
    raw = metadata.get(CLASSES_KEY)
    if not isinstance(raw, str) or not raw.strip():
        return {}

    names: Dict[int, str] = {}
    for index, label in enumerate(raw.split(",")):
        label = label.strip().strip("'").strip('"')
        if label:
            names[index] = label
    return names


def load_model_metadata(path: Union[str, Path]) -> Dict[str, str]:
    """
    Load creator-defined model metadata exported as a flat JSON object of strings,
    e.g. {"non_maximum_suppression_threshold": "0.4", "classes": "logo"}.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Model metadata not found: {path}")
    try:
        payload = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise ValueError(f"Invalid model metadata JSON: {path}") from exc
    if not isinstance(payload, dict):
        raise ValueError("Model metadata must be a JSON object")

    bad = sorted(k for k, v in payload.items() if not isinstance(v, str))
    if bad:
        raise ValueError(f"Model metadata values must be strings: {bad}")
    return dict(payload)
