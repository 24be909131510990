from __future__ import annotations


class DecodeError(Exception):
    """
    Base class for every failure raised while decoding a frame.
    """


class ShapeMismatch(DecodeError, ValueError):
    """
    Tensor shapes do not follow the [num_boxes, num_classes] / [num_boxes, 4] contract.
    """


class InvalidConfig(DecodeError, ValueError):
    """
    A threshold is outside its documented range.
    """


class IndexOutOfBounds(DecodeError, IndexError):
    """
    Scalar tensor access outside the validated shape. Indicates a bug in the caller.
    """
