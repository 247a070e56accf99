"""Exceptions raised by neuralnetlib."""

from __future__ import annotations


class ShapeMismatch(ValueError):
    """A value vector does not match the size of the layer it targets."""

    def __init__(self, what: str, expected: int, actual: int) -> None:
        super().__init__(f"Expected {expected} {what} values but got {actual}")
        self.what = what
        self.expected = expected
        self.actual = actual


class InvalidDataError(ValueError):
    """A serialized network or training example could not be decoded."""


__all__ = ["ShapeMismatch", "InvalidDataError"]
