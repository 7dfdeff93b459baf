# -*- coding: utf-8 -*-
"""
wid3py.selection
================

Choice of the splitting attribute at a tree node.

The policy blends ID3 and C4.5: weighted information gain is computed for
every attribute, and among the attributes whose gain is strictly above the
mean the one with the highest gain ratio wins.  When no attribute is above
the mean the highest weighted gain wins instead.  Gain ratio is thus only
consulted where the gain is large enough for the ratio to be stable.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass

import numpy as np
from joblib import Parallel, delayed

from .criteria import attribute_scores
from .dataset import Attribute, Dataset

logger = logging.getLogger(__name__)

# gains at or below this are treated as zero
ZERO_GAIN_TOLERANCE = 1e-6


@dataclass(frozen=True)
class SplitDecision:
    """Outcome of :func:`select_split_attribute`.

    Attributes
    ----------
    attribute : Attribute or None
        Attribute to split on; ``None`` signals that the node is a leaf.
    info_gains : ndarray
        Weighted information gain of each considered attribute.
    split_infos : ndarray
        Split information of each considered attribute.
    used_gain_ratio : bool
        True if the winner was chosen by gain ratio among above-average
        attributes, False if by raw weighted gain.
    """

    attribute: Attribute | None
    info_gains: np.ndarray
    split_infos: np.ndarray
    used_gain_ratio: bool = False

    @property
    def is_leaf(self) -> bool:
        return self.attribute is None


def select_split_attribute(dataset: Dataset, attributes, weights, n_jobs=None,
                           exclude=(), verbose: int = 0) -> SplitDecision:
    """
    Select the attribute to split ``dataset`` on.

    Parameters
    ----------
    dataset : Dataset
        Non-empty set of instances reaching the node.
    attributes : iterable of Attribute
        Attributes scored at this node; all of them enter the mean gain.
        Ties are broken in favour of the lowest attribute index.
    weights : mapping
        Attribute weight map (attribute name -> strictly positive weight).
    n_jobs : int or None, default=None
        Number of threads used to score attributes.  ``None`` or 1 scores
        them sequentially.
    exclude : collection of int, default=()
        Indices of attributes that count towards the mean gain but may not
        win, such as attributes already tested on the path to the node.
    verbose : int, default=0
        Above 1 the chosen split is logged at DEBUG level.

    Returns
    -------
    SplitDecision

    Raises
    ------
    WeightContractError
        If an attribute has no valid weight.
    """
    attributes = sorted(attributes, key=lambda a: a.index)
    if not attributes:
        return SplitDecision(None, np.empty(0), np.empty(0))

    if n_jobs is not None and n_jobs != 1 and len(attributes) > 1:
        scores = Parallel(n_jobs=n_jobs, prefer="threads")(
            delayed(attribute_scores)(dataset, att, weights) for att in attributes)
    else:
        scores = [attribute_scores(dataset, att, weights) for att in attributes]
    gains = np.array([s[0] for s in scores], dtype=float)
    split_infos = np.array([s[1] for s in scores], dtype=float)
    allowed = np.array([att.index not in exclude for att in attributes], dtype=bool)
    if not allowed.any():
        return SplitDecision(None, gains, split_infos)

    avg_gain = gains.mean()
    candidates = (gains > avg_gain) & allowed
    if candidates.any():
        ratios = np.full(len(attributes), -np.inf)
        usable = candidates & (split_infos > 0)
        ratios[candidates] = 0.0
        ratios[usable] = gains[usable] / split_infos[usable]
        best = int(np.argmax(ratios))
        used_gain_ratio = True
    else:
        best = int(np.argmax(np.where(allowed, gains, -np.inf)))
        used_gain_ratio = False

    if abs(gains[best]) <= ZERO_GAIN_TOLERANCE:
        return SplitDecision(None, gains, split_infos, used_gain_ratio)
    if verbose > 1:
        logger.debug("split on '%s' (gain=%.6f, split_info=%.6f, by %s) among %d instances",
                     attributes[best].name, gains[best], split_infos[best],
                     "gain ratio" if used_gain_ratio else "gain", dataset.num_instances)
    return SplitDecision(attributes[best], gains, split_infos, used_gain_ratio)
