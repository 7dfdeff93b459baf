# -*- coding: utf-8 -*-
"""
wid3py.tree
===========

This module implements an ID3 decision tree classifier for nominal data in
which every attribute's information gain is scaled by a learned weight, and
in which gain ratio decides between attributes whose weighted gain is above
average.  The weights come from an auxiliary single-attribute learner (OneR
by default) and damp ID3's preference for attributes with many values.

Besides training and prediction, the classifier renders the fitted tree as
indented text, as a Graphviz graph, as Python source and as a list of rules.

The module also contains the two node types of the tree, :class:`Leaf` and
:class:`Internal`, and :func:`build_tree`, the recursive construction
routine.
"""

# -----------------------------------------------------------------------------

from __future__ import annotations

import itertools
import logging
from dataclasses import dataclass
from typing import ClassVar, Iterator

import numpy as np
from sklearn.base import BaseEstimator, ClassifierMixin
from sklearn.utils.validation import check_is_fitted

from . import export
from .dataset import Attribute, Dataset, check_instance
from .exceptions import UnseenCategoryError
from .selection import select_split_attribute
from .weights import estimate_weights, validate_weights

logger = logging.getLogger(__name__)


# -----------------------------------------------------------------------------
# Helpers
# -----------------------------------------------------------------------------
def _frozen(a: np.ndarray) -> np.ndarray:
    a = np.array(a, dtype=float)
    a.setflags(write=False)
    return a


def _normalize(counts: np.ndarray) -> np.ndarray:
    tot = counts.sum()
    if tot <= 0:
        return np.zeros_like(counts, dtype=float)
    return counts / tot


# -----------------------------------------------------------------------------
# Nodes
# -----------------------------------------------------------------------------
@dataclass(frozen=True, eq=False)
class Leaf:
    """Terminal node.

    Attributes
    ----------
    node_id : int
        Identifier assigned at construction, used only for rendering.
    distribution : ndarray of shape (n_classes,)
        Class probabilities of the training instances reaching the leaf; all
        zeros when none did.
    class_index : int or None
        Majority class index, ``None`` for a leaf built from no instances.
    """

    node_id: int
    distribution: np.ndarray
    class_index: int | None
    is_leaf: ClassVar[bool] = True


@dataclass(frozen=True, eq=False)
class Internal:
    """Node testing one attribute, with one child per domain value."""

    node_id: int
    attribute: Attribute
    children: tuple
    # class distribution of the instances reaching the node
    distribution: np.ndarray
    class_index: int | None
    is_leaf: ClassVar[bool] = False

    def __post_init__(self):
        if len(self.children) != self.attribute.num_values:
            raise ValueError(
                f"node on '{self.attribute.name}' needs {self.attribute.num_values} "
                f"children, got {len(self.children)}")


def iter_nodes(node) -> Iterator:
    """Pre-order iteration over a (sub)tree."""
    yield node
    if not node.is_leaf:
        for child in node.children:
            yield from iter_nodes(child)


def count_nodes(node) -> int:
    return sum(1 for _ in iter_nodes(node))


def count_leaves(node) -> int:
    return sum(1 for n in iter_nodes(node) if n.is_leaf)


def tree_depth(node) -> int:
    if node.is_leaf:
        return 0
    return 1 + max(tree_depth(c) for c in node.children)


# -----------------------------------------------------------------------------
# Tree construction
# -----------------------------------------------------------------------------
def build_tree(dataset: Dataset, weights, *, exclude_used_attributes: bool = True,
               n_jobs=None, verbose: int = 0):
    """
    Recursively build a weighted ID3 tree for ``dataset``.

    Parameters
    ----------
    dataset : Dataset
        Training instances (class never missing).
    weights : mapping
        Attribute weight map covering every attribute of ``dataset``.
    exclude_used_attributes : bool, default=True
        Whether an attribute already tested on the path from the root is
        barred from winning the split at the nodes below it.  It still takes
        part in the mean gain, so both settings grow the same tree.
    n_jobs : int or None, default=None
        Threads used to score attributes at each node.
    verbose : int, default=0
        Above 1 each split decision is logged at DEBUG level.

    Returns
    -------
    Leaf or Internal
        Root of the tree.  Node identifiers are numbered from 0 in pre-order.

    Raises
    ------
    WeightContractError
        If ``weights`` omits an attribute or holds a non-positive weight.
    """
    weights = validate_weights(weights, dataset.attributes)
    ids = itertools.count()
    return _build_node(dataset, frozenset(), weights, ids,
                       exclude_used_attributes, n_jobs, verbose)


def _build_node(data: Dataset, used, weights, ids, exclude_used: bool, n_jobs, verbose):
    node_id = next(ids)
    # no instances reached this node
    if data.num_instances == 0:
        return Leaf(node_id, _frozen(np.zeros(data.num_classes)), None)

    dist = _normalize(data.class_counts())
    decision = select_split_attribute(data, data.attributes, weights, n_jobs=n_jobs,
                                      exclude=used, verbose=verbose)
    if decision.is_leaf:
        return Leaf(node_id, _frozen(dist), int(np.argmax(dist)))

    att = decision.attribute
    if exclude_used:
        used = used | {att.index}
    children = tuple(_build_node(part, used, weights, ids, exclude_used, n_jobs, verbose)
                     for part in data.split(att))
    return Internal(node_id, att, children, _frozen(dist), int(np.argmax(dist)))


# -----------------------------------------------------------------------------
# Classifier
# -----------------------------------------------------------------------------
class WeightedID3Classifier(ClassifierMixin, BaseEstimator):
    """
    ID3 decision tree with attribute-weighted information gain.

    At each node the weighted information gain ``weight(A) * gain(A)`` is
    computed for every available attribute.  Among the attributes whose
    weighted gain exceeds the mean, the one with the largest gain ratio is
    chosen; if none exceeds the mean the largest weighted gain wins.  A node
    whose best weighted gain is zero becomes a leaf.  Only nominal attributes
    without missing values are supported; instances with a missing class are
    dropped before training.  There is no pruning.

    Parameters
    ----------
    weight_estimator : str, mapping, estimator or callable, default="oner"
        Source of the attribute weights.  ``"oner"`` weights each attribute
        by the training accuracy of its one-attribute rule, ``"uniform"``
        gives every attribute weight 1 (plain ID3 gains).  A mapping is used
        as the weight map directly; an object with ``estimate(dataset)`` or a
        callable ``dataset -> mapping`` is called on the training data.
    feature_names : list[str] or None, default=None
        Attribute names.  Defaults to the columns of a DataFrame passed to
        ``fit`` or to ``f0 .. f{m-1}``.  Weight maps are keyed by these names.
    categories : "auto" or list of lists, default="auto"
        Attribute domains.  With ``"auto"`` each domain is the sorted set of
        training values.  Declared domains may include values never seen in
        training; their branches end in leaves that predict ``None``.
    classes : list or None, default=None
        Declared class domain; defaults to the sorted training labels.
    class_name : str, default="class"
        Name of the class attribute, used by the renderers.
    exclude_used_attributes : bool, default=True
        Withhold an attribute from the subtree below a node testing it.
    handle_unknown : {"error", "parent"}, default="error"
        What to do when a value met during prediction is outside the domain
        recorded at training time.  ``"error"`` raises
        :class:`~wid3py.exceptions.UnseenCategoryError`; ``"parent"`` stops
        at the node testing that attribute and predicts from the class
        distribution of the training instances that reached it.
    n_jobs : int or None, default=None
        Number of threads used to score attributes at each node.
    verbose : int, default=0
        Verbosity level.  Above 0 the build summary is logged at INFO level,
        above 1 every split decision is also logged at DEBUG level.

    Attributes
    ----------
    tree_ : Leaf or Internal
        Root of the fitted tree.
    classes_ : ndarray
        Class labels, in the order used by ``predict_proba``.
    feature_names_ : list[str]
        Attribute names used during training.
    n_features_in_ : int
        Number of attributes seen during ``fit``.
    dataset_attributes_ : tuple of Attribute
        Attributes with the domains recorded at training time.
    class_attribute_ : Attribute
        The class attribute.
    attribute_weights_ : dict
        The validated attribute weight map used to build the tree.

    Notes
    -----
    The API follows the scikit-learn estimator conventions for ``fit``,
    ``predict``, ``predict_proba`` and ``score``.
    """

    def __init__(
        self,
        *,
        weight_estimator="oner",
        feature_names: list[str] | None = None,
        categories="auto",
        classes=None,
        class_name: str = "class",
        exclude_used_attributes: bool = True,
        handle_unknown: str = "error",
        n_jobs: int | None = None,
        verbose: int = 0,
    ):
        self.weight_estimator = weight_estimator
        self.feature_names = feature_names
        self.categories = categories
        self.classes = classes
        self.class_name = class_name
        self.exclude_used_attributes = exclude_used_attributes
        self.handle_unknown = handle_unknown
        self.n_jobs = n_jobs
        self.verbose = verbose

    _fitted_attributes = ("tree_", "classes_", "feature_names_", "n_features_in_",
                          "dataset_attributes_", "class_attribute_", "attribute_weights_")

    def fit(self, X, y):
        """
        Build the tree from the training set ``(X, y)``.

        Parameters
        ----------
        X : array-like of shape (n_samples, n_features)
            Nominal attribute values (strings, integers or booleans).  No
            value may be missing.
        y : array-like of shape (n_samples,)
            Class labels.  Samples whose label is ``None`` or NaN are ignored.

        Returns
        -------
        self

        Raises
        ------
        CapabilityError
            If the data holds non-nominal or missing attribute values.
        WeightContractError
            If the weight map omits an attribute or has a non-positive weight.
        """
        if self.handle_unknown not in ("error", "parent"):
            raise ValueError("handle_unknown must be 'error' or 'parent'")
        # a failed fit must not leave an older tree behind
        for name in self._fitted_attributes:
            self.__dict__.pop(name, None)

        n_raw = len(y)
        dataset = Dataset.from_arrays(X, y, feature_names=self.feature_names,
                                      categories=self.categories, classes=self.classes,
                                      class_name=self.class_name)
        if dataset.num_instances < n_raw:
            logger.info("dropped %d instances with a missing class",
                        n_raw - dataset.num_instances)

        weights = estimate_weights(self.weight_estimator, dataset)
        tree = build_tree(dataset, weights,
                          exclude_used_attributes=self.exclude_used_attributes,
                          n_jobs=self.n_jobs,
                          verbose=self.verbose)

        log = logger.info if self.verbose > 0 else logger.debug
        log("built tree on %d instances: %d nodes, %d leaves, depth %d",
            dataset.num_instances, count_nodes(tree), count_leaves(tree), tree_depth(tree))

        self.dataset_attributes_ = dataset.attributes
        self.class_attribute_ = dataset.class_attribute
        self.feature_names_ = [a.name for a in dataset.attributes]
        self.n_features_in_ = dataset.num_attributes
        self.classes_ = np.array(dataset.class_attribute.values)
        self.attribute_weights_ = dict(weights)
        self.tree_ = tree
        return self

    # ------------------------------------------------------------------
    # Prediction
    # ------------------------------------------------------------------
    def classify_instance(self, x):
        """
        Class label predicted for a single instance.

        Returns ``None`` when the instance reaches a leaf that no training
        instance reached.

        Raises
        ------
        MissingValueError
            If the instance has a missing value.
        UnseenCategoryError
            If a tested value is outside the training domain and
            ``handle_unknown="error"``.
        """
        check_is_fitted(self, "tree_")
        node = self._find_node(check_instance(x, self.dataset_attributes_))
        if node.class_index is None:
            return None
        return self.class_attribute_.value(node.class_index)

    def distribution_for_instance(self, x) -> np.ndarray:
        """Class probability vector for a single instance (all zeros at an empty leaf)."""
        check_is_fitted(self, "tree_")
        node = self._find_node(check_instance(x, self.dataset_attributes_))
        return np.array(node.distribution)

    def predict(self, X):
        """
        Predict class labels for the provided samples.

        Parameters
        ----------
        X : array-like of shape (n_samples, n_features)
            Input samples.

        Returns
        -------
        ndarray of shape (n_samples,)
            Predicted class labels.  The array has object dtype when some
            sample reaches a leaf without training data (predicted ``None``).
        """
        check_is_fitted(self, "tree_")
        preds = [self.classify_instance(x) for x in self._rows(X)]
        if any(p is None for p in preds):
            out = np.empty(len(preds), dtype=object)
            out[:] = preds
            return out
        return np.array(preds)

    def predict_proba(self, X):
        """
        Predict class probabilities for the provided samples.

        Returns
        -------
        ndarray of shape (n_samples, n_classes)
            Leaf class distributions, columns ordered like ``classes_``.
        """
        check_is_fitted(self, "tree_")
        rows = [self.distribution_for_instance(x) for x in self._rows(X)]
        if not rows:
            return np.zeros((0, len(self.classes_)))
        return np.vstack(rows)

    def predict_rule(self, X) -> list[str]:
        """Return the conjunction of tests followed by each input instance."""
        check_is_fitted(self, "tree_")
        rules = []
        for x in self._rows(X):
            parts: list[str] = []
            self._find_node(check_instance(x, self.dataset_attributes_), parts)
            rules.append(" AND ".join(parts) if parts else "<root>")
        return rules

    def _rows(self, X) -> np.ndarray:
        X = np.asarray(X, dtype=object)
        if X.ndim != 2:
            raise ValueError("Expected a 2-D array of instances")
        return X

    def _find_node(self, row: tuple, parts: list | None = None):
        node = self.tree_
        while not node.is_leaf:
            att = node.attribute
            try:
                j = att.index_of(row[att.index])
            except UnseenCategoryError:
                if self.handle_unknown == "parent":
                    logger.debug("unseen value %r of '%s'; predicting from node N%d",
                                 row[att.index], att.name, node.node_id)
                    return node
                raise
            if parts is not None:
                parts.append(f"{att.name} = {att.value(j)}")
            node = node.children[j]
        return node

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------
    def __str__(self) -> str:
        if getattr(self, "tree_", None) is None:
            return "Weighted ID3: No model built yet."
        return "Weighted ID3\n\n" + self.export_text()

    def export_text(self) -> str:
        """Indented ``attribute = value`` rendering of the tree."""
        check_is_fitted(self, "tree_")
        return export.export_text(self.tree_, self.class_attribute_)

    def print_tree(self) -> None:
        """Pretty-print the decision tree to ``stdout``."""
        print(str(self))

    def export_rules(self) -> list[str]:
        """Export one ``<antecedent> => <class>`` rule per leaf."""
        check_is_fitted(self, "tree_")
        return export.export_rules(self.tree_, self.class_attribute_)

    def export_source(self, function_name: str = "classify") -> str:
        """Python source code of the tree as a decision procedure."""
        check_is_fitted(self, "tree_")
        return export.export_source(self.tree_, self.class_attribute_, function_name)

    def graph(self) -> str:
        """DOT description of the tree."""
        check_is_fitted(self, "tree_")
        return export.export_graphviz(self.tree_, self.class_attribute_)

    def export_graphviz(self, filename: str | None = None, *, format: str = "png") -> str:
        """
        Export the tree structure in Graphviz format.

        Parameters
        ----------
        filename : str or None, default=None
            Basename of the output file (the extension is determined by
            ``format``).  If None, the DOT source is returned and no file is
            written.
        format : str, default="png"
            Output format.  ``'dot'`` writes the DOT source directly and does
            not need the external ``dot`` command; for other formats the
            command is invoked and, when it is unavailable, a ``.dot`` file is
            written instead.

        Returns
        -------
        str
            Path to the written file, or the DOT source if ``filename`` is None.
        """
        check_is_fitted(self, "tree_")
        dot = export.to_graphviz(self.tree_, self.class_attribute_)
        if filename is None:
            return dot.source
        if format.lower() == "dot":
            path = f"{filename}.dot"
            dot.save(path)
            return path
        dot.format = format
        try:
            return dot.render(filename, cleanup=True)
        except Exception as e:
            logger.warning("Graphviz rendering failed (%s); writing DOT source instead", e)
            fallback_path = f"{filename}.dot"
            dot.save(fallback_path)
            return fallback_path
