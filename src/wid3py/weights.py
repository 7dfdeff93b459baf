# -*- coding: utf-8 -*-
"""
wid3py.weights
==============

Attribute weight maps and the estimators that produce them.

A weight map assigns every non-class attribute a strictly positive real
number.  The tree builder multiplies each attribute's information gain by its
weight, damping attributes that are poor predictors on their own.  Any object
with an ``estimate(dataset) -> mapping`` method (or a plain callable with the
same signature) can serve as an estimator.
"""
from __future__ import annotations

import logging
import math
from collections.abc import Mapping
from types import MappingProxyType

from .exceptions import WeightContractError

logger = logging.getLogger(__name__)


def weight_for(weights: Mapping, attribute) -> float:
    """Weight of ``attribute`` in ``weights``, enforcing the weight contract."""
    try:
        w = weights[attribute.name]
    except KeyError:
        raise WeightContractError(f"no weight for attribute '{attribute.name}'") from None
    try:
        w = float(w)
    except (TypeError, ValueError):
        raise WeightContractError(
            f"weight of attribute '{attribute.name}' is not a number: {w!r}") from None
    if not (math.isfinite(w) and w > 0):
        raise WeightContractError(
            f"weight of attribute '{attribute.name}' must be strictly positive, got {w}")
    return w


def validate_weights(weights, attributes) -> MappingProxyType:
    """Check ``weights`` against ``attributes`` and freeze it.

    Returns a read-only mapping holding exactly one float per attribute.
    """
    if not isinstance(weights, Mapping):
        raise WeightContractError(
            f"attribute weights must be a mapping, got {type(weights).__name__}")
    return MappingProxyType({att.name: weight_for(weights, att) for att in attributes})


# -----------------------------------------------------------------------------
# Estimators
# -----------------------------------------------------------------------------
class UniformWeightEstimator:
    """Give every attribute the same weight (plain ID3 gains)."""

    def __init__(self, weight: float = 1.0):
        self.weight = weight

    def estimate(self, dataset) -> dict:
        return {att.name: self.weight for att in dataset.attributes}

    def __repr__(self) -> str:
        return f"UniformWeightEstimator(weight={self.weight})"


class OneRWeightEstimator:
    """
    Weight each attribute by the training accuracy of its one-attribute rule.

    For a nominal attribute the OneR rule maps every value to the majority
    class among the instances carrying it; its accuracy is the fraction of
    instances that rule classifies correctly.  Accuracies are floored at
    ``min_weight`` so that the weight contract holds on empty datasets.

    Parameters
    ----------
    min_weight : float, default=1e-3
        Lower bound for every weight.  Must be strictly positive.
    """

    def __init__(self, min_weight: float = 1e-3):
        if not min_weight > 0:
            raise ValueError("min_weight must be strictly positive")
        self.min_weight = min_weight

    def estimate(self, dataset) -> dict:
        n = dataset.num_instances
        weights = {}
        for att in dataset.attributes:
            if n == 0:
                acc = 1.0
            else:
                table = dataset.value_class_counts(att)
                acc = float(table.max(axis=1).sum()) / n
            weights[att.name] = max(acc, float(self.min_weight))
        return weights

    def __repr__(self) -> str:
        return f"OneRWeightEstimator(min_weight={self.min_weight})"


class FixedWeightEstimator:
    """Return a fixed, user supplied weight map."""

    def __init__(self, weights: Mapping):
        self.weights = weights

    def estimate(self, dataset) -> Mapping:
        return self.weights


class FunctionWeightEstimator:
    """Adapt a ``dataset -> mapping`` callable to the estimator interface."""

    def __init__(self, func):
        self.func = func

    def estimate(self, dataset) -> Mapping:
        return self.func(dataset)


_NAMED_ESTIMATORS = {
    "oner": OneRWeightEstimator,
    "uniform": UniformWeightEstimator,
}


def resolve_weight_estimator(weight_estimator):
    """Turn the ``weight_estimator`` parameter of the classifier into an estimator."""
    if isinstance(weight_estimator, str):
        try:
            return _NAMED_ESTIMATORS[weight_estimator.lower()]()
        except KeyError:
            raise ValueError(
                f"unknown weight_estimator {weight_estimator!r}; expected one of "
                f"{sorted(_NAMED_ESTIMATORS)}, a mapping or an estimator") from None
    if isinstance(weight_estimator, Mapping):
        return FixedWeightEstimator(weight_estimator)
    if hasattr(weight_estimator, "estimate"):
        return weight_estimator
    if callable(weight_estimator):
        return FunctionWeightEstimator(weight_estimator)
    raise ValueError(f"unsupported weight_estimator {weight_estimator!r}")


def estimate_weights(weight_estimator, dataset) -> MappingProxyType:
    """Estimate and validate the attribute weight map for ``dataset``."""
    estimator = resolve_weight_estimator(weight_estimator)
    weights = validate_weights(estimator.estimate(dataset), dataset.attributes)
    logger.debug("attribute weights from %r: %s", estimator, dict(weights))
    return weights
