from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Sequence, Tuple, Union

import numpy as np

from .errors import IndexOutOfBounds, ShapeMismatch

BOX_COMPONENTS = 4


@dataclass(frozen=True, eq=False)
class RawTensor:
    """
    Read-only flat float64 buffer plus the shape used to interpret it.

    Layout is row-major: element (i, j) of a 2-D tensor lives at
    `i * shape[1] + j`.
    """

    data: np.ndarray
    shape: Tuple[int, ...]

    def __post_init__(self) -> None:
        # Always hold a private read-only float64 copy, however the tensor was built.
        try:
            data = np.array(self.data, dtype=np.float64)
        except (TypeError, ValueError) as exc:
            raise ShapeMismatch("RawTensor data must be numeric") from exc
        data.setflags(write=False)
        object.__setattr__(self, "data", data)
        object.__setattr__(self, "shape", tuple(self.shape))

        if data.ndim != 1:
            raise ShapeMismatch(f"RawTensor data must be 1-D, got ndim={data.ndim}")
        if not self.shape:
            raise ShapeMismatch("RawTensor shape must have at least one dimension")
        for axis, dim in enumerate(self.shape):
            if isinstance(dim, bool) or not isinstance(dim, (int, np.integer)):
                raise ShapeMismatch(f"Shape entries must be integers, got {self.shape!r}")
            # Axis 0 is the box axis; an empty frame is allowed.
            if dim < 0 or (dim == 0 and axis > 0):
                raise ShapeMismatch(f"Invalid dimension {dim} at axis {axis} in shape {self.shape!r}")
        expected = int(np.prod(self.shape, dtype=np.int64))
        if expected != data.size:
            raise ShapeMismatch(
                f"Shape {self.shape!r} needs {expected} values, buffer holds {data.size}"
            )

    @property
    def ndim(self) -> int:
        return len(self.shape)

    @classmethod
    def from_buffer(cls, buffer: Any, shape: Sequence[int]) -> "RawTensor":
        """
        Copy a flat buffer into a frozen tensor.

        bytes/bytearray and untyped ('B') memoryviews are read as raw native
        float64. A memoryview with any other item format (e.g. float32 'f')
        is converted value by value.
        """
        if isinstance(buffer, memoryview) and buffer.format not in ("d", "B"):
            flat = np.asarray(buffer, dtype=np.float64).reshape(-1)
        elif isinstance(buffer, (bytes, bytearray, memoryview)):
            try:
                flat = np.frombuffer(buffer, dtype=np.float64)
            except ValueError as exc:
                raise ShapeMismatch("Byte buffer length is not a multiple of 8 (float64)") from exc
        else:
            flat = np.asarray(buffer, dtype=np.float64).reshape(-1)
        return cls(data=flat, shape=tuple(shape))

    @classmethod
    def from_array(cls, array: Any) -> "RawTensor":
        arr = np.asarray(array, dtype=np.float64)
        return cls.from_buffer(np.ascontiguousarray(arr).reshape(-1), arr.shape)


TensorLike = Union[RawTensor, np.ndarray, Sequence[Any]]


def as_raw_tensor(value: TensorLike) -> RawTensor:
    if isinstance(value, RawTensor):
        return value
    return RawTensor.from_array(value)


class TensorReader:
    """
    Validated, bounds-checked access to the confidence/coordinate pair.

    confidence:  [num_boxes, num_classes]
    coordinates: [num_boxes, 4] as (center_x, center_y, width, height)
    """

    def __init__(self, confidence: RawTensor, coordinates: RawTensor):
        if confidence.ndim != 2:
            raise ShapeMismatch(f"confidence must be 2-D [num_boxes, num_classes], got {confidence.shape!r}")
        if coordinates.ndim != 2:
            raise ShapeMismatch(f"coordinates must be 2-D [num_boxes, 4], got {coordinates.shape!r}")
        if coordinates.shape[1] != BOX_COMPONENTS:
            raise ShapeMismatch(f"coordinates must have 4 components per box, got {coordinates.shape!r}")
        if confidence.shape[0] != coordinates.shape[0]:
            raise ShapeMismatch(
                f"num_boxes differs: confidence {confidence.shape[0]} vs coordinates {coordinates.shape[0]}"
            )

        self._confidence = confidence
        self._coordinates = coordinates
        self.num_boxes = int(confidence.shape[0])
        self.num_classes = int(confidence.shape[1])

    def confidence(self, box: int, cls: int) -> float:
        self._check_index(box, self.num_boxes, "box")
        self._check_index(cls, self.num_classes, "class")
        return float(self._confidence.data[box * self.num_classes + cls])

    def coordinate(self, box: int, component: int) -> float:
        self._check_index(box, self.num_boxes, "box")
        self._check_index(component, BOX_COMPONENTS, "component")
        return float(self._coordinates.data[box * BOX_COMPONENTS + component])

    def confidence_row(self, box: int) -> np.ndarray:
        self._check_index(box, self.num_boxes, "box")
        start = box * self.num_classes
        return self._confidence.data[start : start + self.num_classes]

    def coordinate_row(self, box: int) -> np.ndarray:
        self._check_index(box, self.num_boxes, "box")
        start = box * BOX_COMPONENTS
        return self._coordinates.data[start : start + BOX_COMPONENTS]

    def confidence_matrix(self) -> np.ndarray:
        return self._confidence.data.reshape(self.num_boxes, self.num_classes)

    def coordinate_matrix(self) -> np.ndarray:
        return self._coordinates.data.reshape(self.num_boxes, BOX_COMPONENTS)

    @staticmethod
    def _check_index(index: int, size: int, name: str) -> None:
        if isinstance(index, bool) or not isinstance(index, (int, np.integer)):
            raise IndexOutOfBounds(f"{name} index must be an integer, got {index!r}")
        if index < 0 or index >= size:
            raise IndexOutOfBounds(f"{name} index {index} out of range [0, {size})")
