from dataclasses import dataclass
from typing import Tuple


@dataclass(frozen=True)
class BoundingBox:
    """
    Axis-aligned rectangle in normalized [0, 1] image space.

    (x, y) is the top-left corner. Width/height may be zero or negative;
    such boxes are kept as-is and simply have zero area.
    """

    x: float
    y: float
    width: float
    height: float

    @property
    def x2(self) -> float:
        return self.x + self.width

    @property
    def y2(self) -> float:
        return self.y + self.height

    @property
    def area(self) -> float:
        return max(0.0, self.width) * max(0.0, self.height)

    def as_xywh(self) -> Tuple[float, float, float, float]:
        return self.x, self.y, self.width, self.height

    def as_xyxy(self) -> Tuple[float, float, float, float]:
        return self.x, self.y, self.x2, self.y2

    def scaled(self, width: float, height: float) -> "BoundingBox":
        """
        Map the normalized box onto an image of `width` x `height` pixels.
        """
        return BoundingBox(
            x=self.x * width,
            y=self.y * height,
            width=self.width * width,
            height=self.height * height,
        )

    def clipped(self) -> "BoundingBox":
        """
        Clamp to the visible [0, 1] frame. The decoder never does this itself.
        """
        x1 = min(max(self.x, 0.0), 1.0)
        y1 = min(max(self.y, 0.0), 1.0)
        x2 = min(max(self.x2, 0.0), 1.0)
        y2 = min(max(self.y2, 0.0), 1.0)
        return BoundingBox(x=x1, y=y1, width=max(0.0, x2 - x1), height=max(0.0, y2 - y1))


@dataclass(frozen=True)
class Prediction:
    """
    One decoded detection: best class, its confidence and the box.

    Confidence must be > 0. There is no upper bound of 1 because the
    engine's raw scores are passed through unchanged, and some exports
    emit unnormalized values.
    """

    class_index: int
    confidence: float
    box: BoundingBox

    def __post_init__(self) -> None:
        if self.class_index < 0:
            raise ValueError("class_index must be >= 0")
        # Written as `not >` so NaN is rejected as well.
        if not self.confidence > 0.0:
            raise ValueError(f"confidence must be > 0, got {self.confidence}")
