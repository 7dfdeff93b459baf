# -*- coding: utf-8 -*-
"""
wid3py.criteria
===============

Entropy, split information and weighted information gain over a
:class:`~wid3py.dataset.Dataset`.

All quantities are in bits.  The information gain of an attribute is scaled by
its entry in the attribute weight map, so a weight of 1 for every attribute
gives back the textbook ID3 gain.
"""
from __future__ import annotations

import numpy as np

from .dataset import Attribute, Dataset
from .weights import weight_for


def entropy_from_counts(counts) -> float:
    """Shannon entropy of a vector of counts, ``0 * log2(0) == 0``.

    Computed as ``log2(N) - sum(c * log2(c)) / N`` which is exact for integer
    counts; an empty vector (``N == 0``) has entropy 0.
    """
    counts = np.asarray(counts, dtype=float)
    tot = counts.sum()
    if tot <= 0:
        return 0.0
    nz = counts[counts > 0]
    if nz.size <= 1:
        return 0.0
    return float(max(np.log2(tot) - np.sum(nz * np.log2(nz)) / tot, 0.0))


def _gain_from_table(table: np.ndarray) -> float:
    # table: rows are attribute values, columns are classes
    tot = table.sum()
    if tot <= 0:
        return 0.0
    g = entropy_from_counts(table.sum(axis=0))
    for row in table:
        n = row.sum()
        if n > 0:
            g -= (n / tot) * entropy_from_counts(row)
    return float(g)


def entropy(dataset: Dataset) -> float:
    """Entropy of the class distribution of ``dataset``."""
    return entropy_from_counts(dataset.class_counts())


def split_info(dataset: Dataset, attribute: Attribute) -> float:
    """Entropy of the partition sizes induced by ``attribute`` (intrinsic value)."""
    sizes = np.bincount(dataset.X[:, attribute.index], minlength=attribute.num_values)
    return entropy_from_counts(sizes)


def info_gain(dataset: Dataset, attribute: Attribute, weights=None) -> float:
    """
    Weighted information gain of splitting ``dataset`` on ``attribute``.

    Parameters
    ----------
    dataset : Dataset
        Instances reaching the node.
    attribute : Attribute
        Candidate splitting attribute.
    weights : mapping, optional
        Attribute weight map.  ``None`` means a weight of 1 for every
        attribute.

    Returns
    -------
    float
        ``weight(attribute) * (entropy(D) - sum_v |D_v|/|D| * entropy(D_v))``.

    Raises
    ------
    WeightContractError
        If ``weights`` lacks a strictly positive weight for ``attribute``.
    """
    w = 1.0 if weights is None else weight_for(weights, attribute)
    return _gain_from_table(dataset.value_class_counts(attribute)) * w


def gain_ratio(dataset: Dataset, attribute: Attribute, weights=None) -> float:
    """Weighted information gain divided by split information (0 if the latter is 0)."""
    s = split_info(dataset, attribute)
    if s <= 0:
        return 0.0
    return info_gain(dataset, attribute, weights) / s


def attribute_scores(dataset: Dataset, attribute: Attribute, weights=None) -> tuple[float, float]:
    """``(weighted info gain, split info)`` from a single contingency table."""
    w = 1.0 if weights is None else weight_for(weights, attribute)
    table = dataset.value_class_counts(attribute)
    return _gain_from_table(table) * w, entropy_from_counts(table.sum(axis=1))
