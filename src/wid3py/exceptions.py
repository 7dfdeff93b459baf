"""Errors raised by :mod:`wid3py`.

All of them derive from :class:`ValueError`, so code written against the
scikit-learn convention of catching ``ValueError`` keeps working.
"""
from __future__ import annotations


class WeightedID3Error(ValueError):
    """Base class for every error raised by the package."""


class CapabilityError(WeightedID3Error):
    """The training data cannot be handled (non-nominal data, missing values)."""


class WeightContractError(WeightedID3Error):
    """An attribute weight map omits an attribute or holds a non-positive weight."""


class MissingValueError(WeightedID3Error):
    """An instance to classify carries a missing attribute value."""


class UnseenCategoryError(WeightedID3Error):
    """An attribute value lies outside the domain recorded at training time."""

    def __init__(self, attribute: str, value):
        self.attribute = attribute
        self.value = value
        super().__init__(
            f"Value {value!r} of attribute '{attribute}' was not seen during training"
        )
